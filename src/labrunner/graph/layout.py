"""
Layered layout for dependency graphs.

Kahn's algorithm on the reversed dependency relation: a node becomes placeable
once everything it depends on has been placed, so dependencies end up in
columns to the left of their dependents. Nodes on or behind a cycle never
reach indegree zero and are stacked in one extra column at the end.

Every function here is pure; nothing is cached between calls.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from labrunner.graph.model import GraphData, GraphEdge, GraphNode

X_SPACING = 350
Y_SPACING = 150


@dataclass(frozen=True, slots=True)
class Position:
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class LayoutNode:
    """A graph node placed in a layer."""

    id: str
    scope: str
    is_protocol: bool
    layer: int
    position: Position

    @property
    def kind(self) -> str:
        """Renderer node type."""
        return "protocol" if self.is_protocol else "component"


@dataclass(frozen=True, slots=True)
class RenderEdge:
    """An edge ready for a rendering surface (dangling endpoints included)."""

    id: str
    source: str
    target: str


@dataclass(frozen=True)
class GraphLayout:
    nodes: tuple[LayoutNode, ...]
    edges: tuple[RenderEdge, ...]


def layout(
    nodes: Sequence[GraphNode],
    edges: Iterable[GraphEdge],
    *,
    x_spacing: float = X_SPACING,
    y_spacing: float = Y_SPACING,
) -> list[LayoutNode]:
    """
    Compute layer and position for every node.

    Args:
        nodes: Graph nodes in listing order. A repeated id keeps its first entry.
        edges: Dependency edges. Edges touching unknown ids are ignored.
        x_spacing: Horizontal distance between layers.
        y_spacing: Vertical distance between nodes of a layer.

    Returns:
        One LayoutNode per distinct node id, in placement order.
    """
    by_id: dict[str, GraphNode] = {}
    for node in nodes:
        by_id.setdefault(node.id, node)
    order = {node_id: i for i, node_id in enumerate(by_id)}

    indegree = dict.fromkeys(by_id, 0)
    adjacency: dict[str, list[str]] = {node_id: [] for node_id in by_id}
    for edge in edges:
        if edge.source not in by_id or edge.target not in by_id:
            continue
        adjacency[edge.target].append(edge.source)
        indegree[edge.source] += 1

    placed: dict[str, LayoutNode] = {}
    current = [node_id for node_id in by_id if indegree[node_id] == 0]
    layer_index = 0

    while current:
        size = len(current)
        upcoming: list[str] = []
        for i, node_id in enumerate(current):
            y = i * y_spacing - (size * y_spacing) / 2 + y_spacing / 2
            placed[node_id] = _place(by_id[node_id], layer_index, layer_index * x_spacing, y)

            for neighbor in adjacency[node_id]:
                indegree[neighbor] -= 1
                if indegree[neighbor] == 0:
                    upcoming.append(neighbor)

        current = sorted(upcoming, key=order.__getitem__)
        layer_index += 1

    # Cycle fallback: one more column, stacked top to bottom
    for node_id, node in by_id.items():
        if node_id not in placed:
            y = len(placed) * y_spacing
            placed[node_id] = _place(node, layer_index, layer_index * x_spacing, y)

    return list(placed.values())


def _place(node: GraphNode, layer: int, x: float, y: float) -> LayoutNode:
    return LayoutNode(
        id=node.id,
        scope=node.scope,
        is_protocol=node.is_protocol,
        layer=layer,
        position=Position(x, y),
    )


def render_edges(edges: Iterable[GraphEdge]) -> list[RenderEdge]:
    """Pass edges through for rendering with stable, unique ids."""
    return [
        RenderEdge(id=f"e-{edge.source}-{edge.target}-{index}", source=edge.source, target=edge.target)
        for index, edge in enumerate(edges)
    ]


def layout_graph(
    graph: GraphData,
    *,
    x_spacing: float = X_SPACING,
    y_spacing: float = Y_SPACING,
) -> GraphLayout:
    """Lay out a decoded payload: positioned nodes plus render edges."""
    return GraphLayout(
        nodes=tuple(layout(graph.nodes, graph.edges, x_spacing=x_spacing, y_spacing=y_spacing)),
        edges=tuple(render_edges(graph.edges)),
    )
