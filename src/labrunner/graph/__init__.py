"""Dependency graph model and layered layout."""

from labrunner.graph.layout import (
    X_SPACING,
    Y_SPACING,
    GraphLayout,
    LayoutNode,
    Position,
    RenderEdge,
    layout,
    layout_graph,
    render_edges,
)
from labrunner.graph.model import GraphData, GraphEdge, GraphNode

__all__ = [
    "GraphData",
    "GraphEdge",
    "GraphNode",
    "GraphLayout",
    "LayoutNode",
    "Position",
    "RenderEdge",
    "X_SPACING",
    "Y_SPACING",
    "layout",
    "layout_graph",
    "render_edges",
]
