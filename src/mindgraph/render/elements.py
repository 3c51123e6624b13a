"""Conversion of graph + layout into renderer-agnostic elements.

This is the hand-off point to the external rendering layer. Positions are
already top-left, so renderers never deal with center coordinates.
"""

from dataclasses import dataclass, field

from mindgraph.graph.model import Graph
from mindgraph.models.layout import Layout, NodeLayout
from mindgraph.models.node import GraphEdge, GraphNode
from mindgraph.render.text import format_time_label, truncate_words

NODE_TYPE = "mindmap"
EDGE_CURVE = "bezier"


@dataclass(frozen=True)
class RenderNode:
    """A positioned node card."""

    id: str
    x: float
    y: float
    width: float
    height: float
    question: str  # Truncated query
    response: str  # Truncated response
    full_question: str
    full_response: str
    created_at: str
    timestamp: str  # Human-readable time, e.g. "02:34 PM"
    type: str = NODE_TYPE
    draggable: bool = False  # The layout engine owns positioning
    selectable: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "position": {"x": self.x, "y": self.y},
            "width": self.width,
            "height": self.height,
            "draggable": self.draggable,
            "selectable": self.selectable,
            "data": {
                "question": self.question,
                "response": self.response,
                "fullQuestion": self.full_question,
                "fullResponse": self.full_response,
                "createdAt": self.created_at,
                "timestamp": self.timestamp,
            },
        }


@dataclass(frozen=True)
class RenderEdge:
    """A parent -> child connector."""

    id: str
    source: str
    target: str
    curve: str = EDGE_CURVE
    animated: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.curve,
            "animated": self.animated,
        }


@dataclass
class RenderElements:
    nodes: list[RenderNode] = field(default_factory=list)
    edges: list[RenderEdge] = field(default_factory=list)


def create_render_node(node: GraphNode, node_layout: NodeLayout, max_words: int = 20) -> RenderNode:
    return RenderNode(
        id=node.id,
        x=node_layout.x,
        y=node_layout.y,
        width=node_layout.width,
        height=node_layout.height,
        question=truncate_words(node.content, max_words),
        response=truncate_words(node.response, max_words),
        full_question=node.content,
        full_response=node.response,
        created_at=node.created_at,
        timestamp=format_time_label(node.created_at),
    )


def create_render_edge(edge: GraphEdge) -> RenderEdge:
    return RenderEdge(id=edge.id, source=edge.source, target=edge.target)


def graph_to_render_elements(graph: Graph, layout: Layout, max_words: int = 20) -> RenderElements:
    """
    Convert the whole graph into render elements (not viewport-filtered).

    Nodes without a layout entry are skipped. Pass the result through
    ``filter_to_viewport`` before handing it to a renderer.
    """
    elements = RenderElements()
    for node_id, node in graph.nodes.items():
        node_layout = layout.nodes.get(node_id)
        if node_layout is None:
            continue
        elements.nodes.append(create_render_node(node, node_layout, max_words))

    elements.edges = [create_render_edge(e) for e in graph.edges.values()]
    return elements
