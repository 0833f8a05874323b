"""
Local subprocess-based interpreter implementation.

This is the default backend. Every call runs a fresh Python process with
asyncio.subprocess, working directory set to a private temporary workspace,
and streams its output line by line to the registered callbacks.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import sys
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from labrunner.errors import DependencyError, ExecutionError, InstallError
from labrunner.interpreter._base import Interpreter

logger = logging.getLogger(__name__)

_IMPORT_BY_NAME = "import importlib, sys; importlib.import_module(sys.argv[1])"


class LocalInterpreter(Interpreter):
    """
    Subprocess-backed interpreter for local use.

    Isolation features:
    - Private temporary workspace (or a caller-supplied directory)
    - Packages installed into a private target directory, never site-wide
    - Optional timeout enforcement

    Example:
        >>> interpreter = await load_interpreter()
        >>> await interpreter.write_file("main.py", "print('hi')")
        >>> await interpreter.run_python(await interpreter.read_file("main.py"))
    """

    def __init__(
        self,
        *,
        python: str | None = None,
        workdir: Path | str | None = None,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
        max_line_bytes: int = 1_048_576,
    ) -> None:
        """
        Initialize a local interpreter.

        Args:
            python: Python executable. Defaults to the running interpreter.
            workdir: Workspace directory. Defaults to a new temporary directory.
            env: Extra environment variables for subprocesses.
            timeout: Seconds before a call is killed. None waits forever.
            max_line_bytes: Longest single output line accepted from a subprocess.
        """
        super().__init__()
        self._python = python or sys.executable
        self._env = env or {}
        self._timeout = timeout
        self._max_line_bytes = max_line_bytes
        self._closed = False

        self._root = Path(tempfile.mkdtemp(prefix="labrunner_"))
        self._site_dir = self._root / "site-packages"
        self._site_dir.mkdir()

        if workdir is not None:
            self._workspace = Path(workdir).resolve()
            self._workspace.mkdir(parents=True, exist_ok=True)
        else:
            self._workspace = self._root / "workspace"
            self._workspace.mkdir()

    @property
    def workspace(self) -> Path:
        return self._workspace

    @property
    def site_dir(self) -> Path:
        """Directory packages are installed into."""
        return self._site_dir

    async def start(self) -> None:
        """
        Verify the Python executable is usable.

        Raises:
            DependencyError: If the executable cannot be found.
        """
        if not (shutil.which(self._python) or Path(self._python).is_file()):
            raise DependencyError(f"Python executable not found: {self._python}")

    async def write_file(self, name: str | Path, content: str | bytes) -> None:
        self._check_open()
        path = self.resolve(name)
        path.parent.mkdir(parents=True, exist_ok=True)

        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_bytes(content)

    async def read_file(self, name: str | Path) -> str:
        self._check_open()
        path = self.resolve(name)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {name}")
        return path.read_text(encoding="utf-8")

    async def run_python(self, source: str) -> None:
        exit_code, last_error = await self._spawn("-", stdin=source.encode("utf-8"))
        if exit_code != 0:
            raise ExecutionError(last_error or f"Process exited with code {exit_code}")

    async def unload_modules(self, names: Iterable[str]) -> None:
        """Delete cached bytecode so the next import re-reads the source."""
        self._check_open()
        for name in names:
            module = Path(name)
            cache_dir = self.resolve(module.parent / "__pycache__")
            if not cache_dir.is_dir():
                continue
            for cached in cache_dir.glob(f"{module.name}.*.pyc"):
                cached.unlink(missing_ok=True)
                logger.debug(f"Discarded cached module {cached.name}")

    async def load_package(self, name: str) -> None:
        exit_code, last_error = await self._spawn("-c", _IMPORT_BY_NAME, name)
        if exit_code != 0:
            raise DependencyError(f"Prerequisite package {name!r} could not be loaded: {last_error}")

    async def install(self, packages: Sequence[str]) -> None:
        args = [
            "-m", "pip", "install",
            "--target", str(self._site_dir),
            "--disable-pip-version-check",
            "--no-input",
            "--quiet",
            *packages,
        ]
        exit_code, last_error = await self._spawn(*args)
        if exit_code != 0:
            raise InstallError(last_error or f"pip exited with code {exit_code}", list(packages))

    async def run_tests(self, args: Sequence[str]) -> int:
        exit_code, _ = await self._spawn("-m", "pytest", "-p", "no:cacheprovider", *args)
        return exit_code

    async def close(self) -> None:
        """
        Remove the temporary directory.

        A caller-supplied workdir is left in place. Safe to call multiple times.
        """
        if self._closed:
            return

        self._closed = True
        shutil.rmtree(self._root, ignore_errors=True)

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Interpreter has been closed")

    def _build_env(self) -> dict[str, str]:
        env = os.environ.copy()
        env.update(self._env)
        python_path = [str(self._site_dir)]
        if env.get("PYTHONPATH"):
            python_path.append(env["PYTHONPATH"])
        env["PYTHONPATH"] = os.pathsep.join(python_path)
        env["PYTHONUNBUFFERED"] = "1"
        env["PYTHONIOENCODING"] = "utf-8"
        return env

    async def _spawn(self, *args: str, stdin: bytes | None = None) -> tuple[int, str]:
        """
        Run the Python executable with ``args`` in the workspace.

        Returns:
            The exit code and the last non-blank stderr line.

        Raises:
            ExecutionError: If the timeout expires or an output line is
                longer than ``max_line_bytes``.
        """
        self._check_open()

        proc = await asyncio.create_subprocess_exec(
            self._python,
            *args,
            cwd=self._workspace,
            env=self._build_env(),
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=self._max_line_bytes,
        )
        last_error: list[str] = []

        async def feed() -> None:
            if stdin is None or proc.stdin is None:
                return
            try:
                proc.stdin.write(stdin)
                await proc.stdin.drain()
            except (BrokenPipeError, ConnectionResetError):
                logger.debug("Process exited before reading all of its input")
            finally:
                proc.stdin.close()

        async def pump(stream: asyncio.StreamReader | None, is_stderr: bool) -> None:
            if stream is None:
                return
            while line := await stream.readline():
                text = line.decode("utf-8", errors="replace").rstrip("\r\n")
                if is_stderr:
                    self._stderr(text)
                    if text.strip():
                        last_error[:] = [text.strip()]
                else:
                    self._stdout(text)

        try:
            await asyncio.wait_for(
                asyncio.gather(feed(), pump(proc.stdout, False), pump(proc.stderr, True), proc.wait()),
                timeout=self._timeout,
            )
        except BaseException as e:
            if proc.returncode is None:
                proc.kill()
            await proc.wait()  # Ensure process is reaped
            if isinstance(e, TimeoutError):
                raise ExecutionError(f"Timed out after {self._timeout}s") from None
            if isinstance(e, ValueError):
                raise ExecutionError(f"Output line longer than {self._max_line_bytes} bytes") from e
            raise

        return proc.returncode or 0, last_error[0] if last_error else ""


async def load_interpreter(**options: object) -> LocalInterpreter:
    """
    Create and start a LocalInterpreter.

    This is the default bootstrap factory used by sessions. Keyword arguments
    are passed to LocalInterpreter.

    Raises:
        DependencyError: If the Python executable is unavailable.
    """
    interpreter = LocalInterpreter(**options)  # type: ignore[arg-type]
    try:
        await interpreter.start()
    except BaseException:
        await interpreter.close()
        raise
    logger.info(f"Local interpreter ready in {interpreter.workspace}")
    return interpreter
