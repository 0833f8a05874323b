"""Pytest configuration and fixtures for labrunner tests."""

from __future__ import annotations

import asyncio
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import AsyncGenerator, Callable, Generator

import pytest
import pytest_asyncio

from labrunner import Console, GraphStore, LabSession, LocalInterpreter
from labrunner.errors import ExecutionError, InstallError
from labrunner.interpreter import Interpreter


class FakeInterpreter(Interpreter):
    """
    Scripted interpreter that records every call.

    ``stdout_on_run`` batches are emitted when run_python or run_tests is
    called; ``fail_with`` makes run_python raise.
    """

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, object]] = []
        self.files: dict[str, str] = {}
        self.stdout_on_run: list[str] = []
        self.test_exit_code = 0
        self.fail_with: str | None = None
        self.install_error: str | None = None
        self.closed = False

    @property
    def workspace(self) -> Path:
        return Path("/fake")

    def emit_stdout(self, batch: str) -> None:
        self._stdout(batch)

    def emit_stderr(self, batch: str) -> None:
        self._stderr(batch)

    async def write_file(self, name: str | Path, content: str | bytes) -> None:
        self.calls.append(("write_file", str(name)))
        self.files[str(name)] = content if isinstance(content, str) else content.decode()

    async def read_file(self, name: str | Path) -> str:
        self.calls.append(("read_file", str(name)))
        if str(name) not in self.files:
            raise FileNotFoundError(f"File not found: {name}")
        return self.files[str(name)]

    async def run_python(self, source: str) -> None:
        self.calls.append(("run_python", source))
        for batch in self.stdout_on_run:
            self.emit_stdout(batch)
        if self.fail_with:
            raise ExecutionError(self.fail_with)

    async def unload_modules(self, names: Iterable[str]) -> None:
        self.calls.append(("unload_modules", list(names)))

    async def load_package(self, name: str) -> None:
        self.calls.append(("load_package", name))

    async def install(self, packages: Sequence[str]) -> None:
        self.calls.append(("install", list(packages)))
        await asyncio.sleep(0)
        if self.install_error:
            raise InstallError(self.install_error, list(packages))

    async def run_tests(self, args: Sequence[str]) -> int:
        self.calls.append(("run_tests", list(args)))
        for batch in self.stdout_on_run:
            self.emit_stdout(batch)
        return self.test_exit_code

    async def close(self) -> None:
        self.closed = True

    def called(self, method: str) -> list[object]:
        return [arg for name, arg in self.calls if name == method]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(prefix="labrunner_test_") as tmp:
        yield Path(tmp)


@pytest.fixture
def fake() -> FakeInterpreter:
    return FakeInterpreter()


@pytest.fixture
def fake_factory(fake: FakeInterpreter) -> Callable:
    """Bootstrap factory returning the shared fake and counting calls."""

    async def factory() -> FakeInterpreter:
        factory.calls += 1  # type: ignore[attr-defined]
        await asyncio.sleep(0)
        return fake

    factory.calls = 0  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def console() -> Console:
    return Console()


@pytest.fixture
def graph_store() -> GraphStore:
    return GraphStore()


@pytest_asyncio.fixture
async def fake_session(fake_factory: Callable) -> AsyncGenerator[LabSession, None]:
    """An initialized session on the fake interpreter."""
    session = LabSession(fake_factory)
    await session.initialize()
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def interpreter() -> AsyncGenerator[LocalInterpreter, None]:
    """Create a LocalInterpreter for testing."""
    interpreter = LocalInterpreter(timeout=60.0)
    try:
        yield interpreter
    finally:
        await interpreter.close()
