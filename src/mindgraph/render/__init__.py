"""Renderer-agnostic element conversion."""

from mindgraph.render.elements import (
    RenderEdge,
    RenderElements,
    RenderNode,
    create_render_edge,
    create_render_node,
    graph_to_render_elements,
)
from mindgraph.render.text import format_time_label, truncate_words

__all__ = [
    "RenderNode",
    "RenderEdge",
    "RenderElements",
    "create_render_node",
    "create_render_edge",
    "graph_to_render_elements",
    "truncate_words",
    "format_time_label",
]
