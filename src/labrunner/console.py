"""
Default console and graph-state sinks.

The orchestrator only appends to the console and only replaces or clears the
graph; readers (a UI, an agent tool) use the query side.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from labrunner.graph.model import GraphData


class Console:
    """In-memory append-only console buffer."""

    def __init__(self) -> None:
        self._chunks: list[str] = []

    def append(self, text: str) -> None:
        if text:
            self._chunks.append(text)

    @property
    def text(self) -> str:
        """Everything appended since the last clear."""
        return "".join(self._chunks)

    def clear(self) -> None:
        self._chunks.clear()

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)


class GraphStore:
    """Holds the most recently decoded graph, or None."""

    def __init__(self) -> None:
        self._current: GraphData | None = None

    @property
    def current(self) -> GraphData | None:
        return self._current

    def replace(self, graph: GraphData) -> None:
        self._current = graph

    def clear(self) -> None:
        self._current = None
