"""
Dependency graph data emitted by a running program.

Wire format (one JSON object after the sentinel on a stdout line):

    {"nodes": [{"id": "Db", "scope": "singleton", "is_protocol": false}],
     "edges": [{"from": "Service", "to": "Db"}]}

An edge means "from depends on to". Edges may reference ids that are not in
the node list; they are kept and ignored by layout.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from labrunner.errors import GraphDecodeError


@dataclass(frozen=True, slots=True)
class GraphNode:
    """A component or protocol in the dependency graph."""

    id: str
    scope: str = ""
    is_protocol: bool = False


@dataclass(frozen=True, slots=True)
class GraphEdge:
    """Directed edge: ``source`` depends on ``target``."""

    source: str
    target: str


@dataclass(frozen=True)
class GraphData:
    """A decoded graph payload."""

    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()

    @classmethod
    def from_json(cls, text: str) -> GraphData:
        """
        Decode a serialized payload.

        Raises:
            GraphDecodeError: If the text is not valid JSON or has the wrong shape.
        """
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            raise GraphDecodeError(f"Invalid graph JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> GraphData:
        """Build a GraphData from an already-parsed payload object."""
        if not isinstance(data, dict):
            raise GraphDecodeError("Graph payload must be an object")

        raw_nodes = data.get("nodes")
        raw_edges = data.get("edges")
        if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
            raise GraphDecodeError("Graph payload needs 'nodes' and 'edges' lists")

        nodes = []
        for raw in raw_nodes:
            if not isinstance(raw, dict) or not isinstance(raw.get("id"), str):
                raise GraphDecodeError(f"Invalid graph node: {raw!r}")
            nodes.append(
                GraphNode(
                    id=raw["id"],
                    scope=str(raw.get("scope") or ""),
                    is_protocol=bool(raw.get("is_protocol", False)),
                )
            )

        edges = []
        for raw in raw_edges:
            if (
                not isinstance(raw, dict)
                or not isinstance(raw.get("from"), str)
                or not isinstance(raw.get("to"), str)
            ):
                raise GraphDecodeError(f"Invalid graph edge: {raw!r}")
            edges.append(GraphEdge(source=raw["from"], target=raw["to"]))

        return cls(nodes=tuple(nodes), edges=tuple(edges))

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the wire shape."""
        return {
            "nodes": [
                {"id": n.id, "scope": n.scope, "is_protocol": n.is_protocol} for n in self.nodes
            ],
            "edges": [{"from": e.source, "to": e.target} for e in self.edges],
        }
