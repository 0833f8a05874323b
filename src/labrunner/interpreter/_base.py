"""
Abstract base class for all interpreter backends.

An interpreter owns a private workspace directory and runs source text,
tests and package installs against it. Everything it prints is delivered to
the registered stream callbacks in batches.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from labrunner._types import StreamCallback


def _discard(batch: str) -> None:
    pass


class Interpreter(ABC):
    """
    Abstract base for all interpreter implementations.

    Provides a consistent interface for staging files, executing code and
    provisioning packages in an isolated environment.
    """

    def __init__(self) -> None:
        self._stdout: StreamCallback = _discard
        self._stderr: StreamCallback = _discard

    def set_stdout(self, callback: StreamCallback) -> None:
        """Register the callback receiving stdout batches."""
        self._stdout = callback

    def set_stderr(self, callback: StreamCallback) -> None:
        """Register the callback receiving stderr batches."""
        self._stderr = callback

    @property
    @abstractmethod
    def workspace(self) -> Path:
        """Root of the private filesystem."""
        ...

    def resolve(self, name: str | Path) -> Path:
        """
        Map a workspace-relative name to an absolute path.

        Raises:
            ValueError: If the name escapes the workspace.
        """
        root = self.workspace.resolve()
        path = (root / name).resolve()
        if path != root and root not in path.parents:
            raise ValueError(f"Path escapes the workspace: {name}")
        return path

    @abstractmethod
    async def write_file(self, name: str | Path, content: str | bytes) -> None:
        """
        Write a file into the workspace, replacing any previous content.

        Creates parent directories if needed.
        """
        ...

    @abstractmethod
    async def read_file(self, name: str | Path) -> str:
        """
        Read a file from the workspace.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        ...

    @abstractmethod
    async def run_python(self, source: str) -> None:
        """
        Execute source text in the interpreter.

        Raises:
            ExecutionError: If the code raises or the interpreter fails.
        """
        ...

    @abstractmethod
    async def unload_modules(self, names: Iterable[str]) -> None:
        """Discard any cached copy of the named modules."""
        ...

    @abstractmethod
    async def load_package(self, name: str) -> None:
        """
        Make a runtime-level prerequisite package available.

        Raises:
            DependencyError: If the package cannot be loaded.
        """
        ...

    @abstractmethod
    async def install(self, packages: Sequence[str]) -> None:
        """
        Install packages into the interpreter.

        Raises:
            InstallError: If the install facility rejects the request.
        """
        ...

    @abstractmethod
    async def run_tests(self, args: Sequence[str]) -> int:
        """Run the test runner with ``args`` and return its exit code."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Clean up interpreter resources.

        Idempotent - safe to call multiple times.
        """
        ...

    async def __aenter__(self) -> Interpreter:
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Exit async context manager, cleaning up resources."""
        await self.close()
