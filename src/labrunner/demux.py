"""
Output stream demultiplexing.

Interpreter stdout carries two things at once: console text for the learner
and, on lines starting with a reserved sentinel, a serialized dependency
graph. This module separates the two.

Line grammar for a stdout batch:

    batch        := line ("\\n" line)*
    payload-line := SENTINEL json-object
    console-line := any other line that is not blank

Within one batch only the last payload line counts; earlier ones are dropped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from labrunner._types import GRAPH_SENTINEL
from labrunner.errors import GraphDecodeError
from labrunner.graph.model import GraphData

if TYPE_CHECKING:
    from labrunner._types import ConsoleSink, GraphSink

logger = logging.getLogger(__name__)

PARSE_FAILURE_MESSAGE = "\n[ERROR] Failed to parse graph data.\n"


def split_batch(batch: str, sentinel: str = GRAPH_SENTINEL) -> tuple[str, str | None]:
    """
    Separate console text from the graph payload in one stdout batch.

    Returns:
        The console text (each kept line followed by a newline) and the
        remainder of the last payload line, or None if there was none.
    """
    console: list[str] = []
    payload: str | None = None

    for line in batch.split("\n"):
        line = line.removesuffix("\r")
        if line.startswith(sentinel):
            payload = line[len(sentinel):]
        elif line.strip():
            console.append(line + "\n")

    return "".join(console), payload


class OutputDemultiplexer:
    """
    Routes interpreter output to the console and graph sinks.

    Registered once as the interpreter's stdout/stderr callbacks; it has no
    lifecycle of its own.
    """

    def __init__(
        self,
        console: ConsoleSink,
        graph: GraphSink,
        *,
        sentinel: str = GRAPH_SENTINEL,
    ) -> None:
        self._console = console
        self._graph = graph
        self._sentinel = sentinel

    def on_stdout(self, batch: str) -> None:
        text, payload = split_batch(batch, self._sentinel)
        if text:
            self._console.append(text)
        if payload is None:
            return

        try:
            graph = GraphData.from_json(payload)
        except GraphDecodeError as e:
            logger.warning(f"Failed to parse graph data: {e}")
            self._console.append(PARSE_FAILURE_MESSAGE)
            return
        self._graph.replace(graph)

    def on_stderr(self, batch: str) -> None:
        self._console.append(batch + "\n")
