"""Mindgraph data models."""

from mindgraph.models.layout import (
    DEFAULT_LAYOUT_CONFIG,
    Layout,
    LayoutBounds,
    LayoutConfig,
    LayoutDirection,
    LayoutValidation,
    NodeLayout,
)
from mindgraph.models.node import GraphEdge, GraphNode, edge_id, parse_datetime, utc_now_iso
from mindgraph.models.viewport import (
    DEFAULT_VIEWPORT_CONFIG,
    Viewport,
    ViewportBounds,
    ViewportConfig,
)

__all__ = [
    "GraphNode",
    "GraphEdge",
    "edge_id",
    "parse_datetime",
    "utc_now_iso",
    "NodeLayout",
    "Layout",
    "LayoutBounds",
    "LayoutConfig",
    "LayoutDirection",
    "LayoutValidation",
    "DEFAULT_LAYOUT_CONFIG",
    "Viewport",
    "ViewportBounds",
    "ViewportConfig",
    "DEFAULT_VIEWPORT_CONFIG",
]
