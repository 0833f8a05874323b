"""
Main entry point: the LabSession facade and create_session factory.

A session wires one interpreter to a console and a graph store and exposes
the run / install operations a front end needs.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from labrunner._types import LifecycleState, RunnerConfig, as_source_files
from labrunner.console import Console, GraphStore
from labrunner.demux import OutputDemultiplexer
from labrunner.engine import ExecutionEngine
from labrunner.graph.layout import layout_graph
from labrunner.interpreter.local import load_interpreter
from labrunner.lifecycle import InterpreterLifecycle
from labrunner.packages import PackageInstaller

if TYPE_CHECKING:
    from labrunner._types import FileInput
    from labrunner.graph.layout import GraphLayout
    from labrunner.lifecycle import InterpreterFactory

logger = logging.getLogger(__name__)


class LabSession:
    """
    One learner session: interpreter, console output and emitted graph.

    Attributes:
        console: Console text of the latest run.
        graph: The most recent graph emitted by a run.
        config: Entrypoint and side-channel naming policy.

    Example:
        >>> async with LabSession() as session:
        ...     await session.initialize()
        ...     ok = await session.run({"main.py": "print('hi')"})
        ...     print(session.console.text)
    """

    def __init__(
        self,
        factory: InterpreterFactory | None = None,
        *,
        config: RunnerConfig | None = None,
        console: Console | None = None,
        graph: GraphStore | None = None,
    ) -> None:
        """
        Args:
            factory: Async interpreter bootstrap. Defaults to a LocalInterpreter.
            config: Naming policy. Defaults to RunnerConfig.default().
            console: Console sink to append to.
            graph: Graph store to replace.
        """
        self.config = config or RunnerConfig.default()
        self.console = console if console is not None else Console()
        self.graph = graph if graph is not None else GraphStore()

        self._demux = OutputDemultiplexer(self.console, self.graph, sentinel=self.config.graph_sentinel)
        self._lifecycle = InterpreterLifecycle(
            factory or load_interpreter,
            self.console,
            on_stdout=self._demux.on_stdout,
            on_stderr=self._demux.on_stderr,
            prerequisite=self.config.prerequisite,
        )
        self._installer = PackageInstaller(self._lifecycle, self.console)
        self._engine = ExecutionEngine(self._lifecycle, self.console, self.graph, self.config)

    @property
    def state(self) -> LifecycleState:
        return self._lifecycle.state

    @property
    def is_ready(self) -> bool:
        return self._lifecycle.is_ready()

    @property
    def is_loading(self) -> bool:
        return self._lifecycle.state is LifecycleState.INITIALIZING

    @property
    def is_installing(self) -> bool:
        return self._installer.is_installing

    @property
    def is_executing(self) -> bool:
        return self._engine.is_executing

    @property
    def is_busy(self) -> bool:
        """True while initializing, installing or executing."""
        return self.is_loading or self.is_installing or self.is_executing

    @property
    def installed_packages(self) -> frozenset[str]:
        return self._installer.installed

    async def initialize(self) -> None:
        """Start the interpreter if needed. Failures are reported on the console."""
        await self._lifecycle.initialize()

    async def install_packages(self, packages: Iterable[str]) -> None:
        """Install the packages this session has not installed yet."""
        await self._installer.install(packages)

    async def prepare(self, packages: Iterable[str]) -> None:
        """Reset the output and provision packages for a new exercise."""
        if self.is_ready:
            self.clear_output()
            await self.install_packages(packages)

    async def run(self, files: FileInput) -> bool:
        """
        Run a project.

        An accepted run on a ready session starts from a cleared console and
        graph, so the output afterwards belongs to this run only.

        Args:
            files: SourceFiles, or a mapping of file name to content.

        Returns:
            True on success. A request made while the session is busy is
            ignored and returns False.
        """
        if self.is_busy:
            logger.warning("Run requested while the session is busy; ignoring")
            return False
        if self.is_ready:
            self.clear_output()
        return await self._engine.run(as_source_files(files))

    def clear_output(self) -> None:
        """Clear the console and the current graph."""
        self.console.clear()
        self.graph.clear()

    def layout(self) -> GraphLayout | None:
        """Layout of the current graph, or None if no graph was emitted."""
        if self.graph.current is None:
            return None
        return layout_graph(self.graph.current)

    async def close(self) -> None:
        """End the session and release the interpreter."""
        await self._lifecycle.shutdown()

    async def __aenter__(self) -> LabSession:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


async def create_session(
    *,
    packages: Iterable[str] | None = None,
    config: RunnerConfig | None = None,
    **interpreter_options: object,
) -> LabSession:
    """
    Create and initialize a session backed by a LocalInterpreter.

    Args:
        packages: Packages to install once the interpreter is ready.
        config: Naming policy for the session.
        **interpreter_options: Passed to LocalInterpreter (python, workdir,
            env, timeout).

    Returns:
        The session. Check ``is_ready``: bootstrap failures do not raise.

    Example:
        >>> session = await create_session(packages=["attrs"], timeout=30.0)
        >>> await session.run({"main.py": "import attrs; print(attrs.__version__)"})
    """
    factory = functools.partial(load_interpreter, **interpreter_options)
    session = LabSession(factory, config=config)
    await session.initialize()
    if packages:
        await session.install_packages(packages)
    return session
