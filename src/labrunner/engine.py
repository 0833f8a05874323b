"""
Code execution engine.

Stages a project's files into the interpreter workspace, picks the entrypoint
and reduces the outcome of running it to a boolean.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from labrunner._types import RunnerConfig, SourceFile

if TYPE_CHECKING:
    from labrunner._types import ConsoleSink, GraphSink
    from labrunner.lifecycle import InterpreterLifecycle

logger = logging.getLogger(__name__)

NO_ENTRYPOINT_MESSAGE = "No entrypoint found (e.g., main.py or test_*.py)\n"


@dataclass(frozen=True, slots=True)
class Entrypoint:
    """The file chosen to execute and how to run it."""

    file: SourceFile
    is_test: bool


def select_entrypoint(files: Sequence[SourceFile], config: RunnerConfig) -> Entrypoint | None:
    """
    Pick the file to execute.

    The first test-prefixed file wins over the main entry file. Returns None
    when neither is present.
    """
    for f in files:
        if f.name.startswith(config.test_prefix):
            return Entrypoint(f, is_test=True)
    for f in files:
        if f.name == config.main_entry:
            return Entrypoint(f, is_test=False)
    return None


def module_names(files: Sequence[SourceFile], suffix: str) -> list[str]:
    """Module identifiers for the script files among ``files``."""
    return [f.name[: -len(suffix)] for f in files if f.name.endswith(suffix)]


class ExecutionEngine:
    """
    Runs a project against the interpreter.

    Not reentrant: callers must not start a run while ``is_executing``.
    """

    def __init__(
        self,
        lifecycle: InterpreterLifecycle,
        console: ConsoleSink,
        graph: GraphSink,
        config: RunnerConfig | None = None,
    ) -> None:
        self._lifecycle = lifecycle
        self._console = console
        self._graph = graph
        self._config = config or RunnerConfig.default()
        self._executing = False

    @property
    def is_executing(self) -> bool:
        return self._executing

    async def run(self, files: Sequence[SourceFile]) -> bool:
        """
        Stage ``files`` and run the selected entrypoint.

        Returns:
            True if the main file ran without raising, or the tests exited with
            status 0. False otherwise, including when not ready.
        """
        if not self._lifecycle.is_ready():
            return False

        interpreter = self._lifecycle.interpreter
        self._executing = True
        self._graph.clear()
        self._console.append("> Executing code...\n")

        try:
            await interpreter.unload_modules(module_names(files, self._config.script_suffix))

            for f in files:
                await interpreter.write_file(f.name, f.content)

            entry = select_entrypoint(files, self._config)
            if entry is None:
                self._console.append(NO_ENTRYPOINT_MESSAGE)
                return False

            name = entry.file.name
            if entry.is_test:
                self._console.append(f"\n> Running tests in {name}...\n")
                exit_code = await interpreter.run_tests(["-v", name])
                return exit_code == 0

            self._console.append(f"\n> Running {name}...\n\n")
            source = await interpreter.read_file(name)
            await interpreter.run_python(source)
            return True

        except Exception as e:
            logger.error(f"Error running code: {e}", exc_info=True)
            self._console.append(f"\n\n--- PYTHON ERROR ---\n{e}\n")
            return False
        finally:
            self._executing = False
