"""
Core type definitions for labrunner.

Uses dataclasses and Protocols for lightweight, typed abstractions.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Protocol, Union

from labrunner.errors import ConfigurationError

if TYPE_CHECKING:
    from labrunner.graph.model import GraphData


GRAPH_SENTINEL = "__GRAPH_DATA__:"

StreamCallback = Callable[[str], None]
"""Receives one batch of text emitted on an interpreter stream."""


class LifecycleState(Enum):
    """State of the interpreter handle for a session."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"  # A later initialize() may retry


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A named unit of source text staged into the interpreter workspace."""

    name: str
    content: str


FileInput = Union[Sequence[SourceFile], Mapping[str, str]]


def as_source_files(files: FileInput) -> list[SourceFile]:
    """Normalize a name -> content mapping (or a SourceFile sequence) to a list."""
    if isinstance(files, Mapping):
        return [SourceFile(name, content) for name, content in files.items()]
    return list(files)


@dataclass(frozen=True)
class RunnerConfig:
    """
    Naming policy for a session.

    Attributes:
        main_entry: Exact file name executed directly when no test file exists.
        test_prefix: Files starting with this prefix are run with the test runner.
        script_suffix: Suffix stripped from file names to derive module names.
        graph_sentinel: Stdout line prefix carrying a graph payload.
        prerequisite: Runtime package loaded during bootstrap to install others.
    """

    main_entry: str = "main.py"
    test_prefix: str = "test_"
    script_suffix: str = ".py"
    graph_sentinel: str = GRAPH_SENTINEL
    prerequisite: str = "pip"

    def __post_init__(self) -> None:
        for name in ("main_entry", "test_prefix", "script_suffix", "graph_sentinel", "prerequisite"):
            if not getattr(self, name):
                raise ConfigurationError(f"RunnerConfig.{name} must not be empty")

    @classmethod
    def default(cls) -> RunnerConfig:
        """Create the standard config (main.py / test_*.py / __GRAPH_DATA__:)."""
        return cls()


class ConsoleSink(Protocol):
    """Append-only text surface."""

    def append(self, text: str) -> None: ...


class GraphSink(Protocol):
    """Replace-only holder of the most recent graph description."""

    def replace(self, graph: GraphData) -> None: ...

    def clear(self) -> None: ...
