"""Unit tests for render element conversion."""

from conftest import build_graph, make_node
from mindgraph.layout import compute_layout
from mindgraph.render import (
    create_render_edge,
    format_time_label,
    graph_to_render_elements,
    truncate_words,
)
from mindgraph.models import GraphEdge, Layout


class TestText:
    """Tests for text helpers."""

    def test_short_text_unchanged(self) -> None:
        assert truncate_words("What is a monad?", 20) == "What is a monad?"

    def test_long_text_truncated(self) -> None:
        text = " ".join(f"w{i}" for i in range(30))
        assert truncate_words(text, 3) == "w0 w1 w2..."

    def test_empty(self) -> None:
        assert truncate_words("") == ""
        assert truncate_words(None) == ""

    def test_time_label(self) -> None:
        assert format_time_label("2024-01-15T14:34:00Z") == "02:34 PM"
        assert format_time_label("2024-01-15T09:05:00+00:00") == "09:05 AM"

    def test_bad_timestamp(self) -> None:
        assert format_time_label("not a date") == ""
        assert format_time_label(None) == ""


class TestElements:
    """Tests for graph_to_render_elements."""

    def test_positions_from_layout(self, sample_graph) -> None:
        layout = compute_layout(sample_graph)
        elements = graph_to_render_elements(sample_graph, layout)

        assert {n.id for n in elements.nodes} == set(sample_graph.nodes)
        for node in elements.nodes:
            rect = layout.nodes[node.id]
            assert (node.x, node.y, node.width, node.height) == (rect.x, rect.y, rect.width, rect.height)
        assert {e.id for e in elements.edges} == set(sample_graph.edges)

    def test_nodes_without_layout_skipped(self, sample_graph) -> None:
        elements = graph_to_render_elements(sample_graph, Layout())
        assert elements.nodes == []

    def test_truncation_and_full_text(self) -> None:
        long_answer = " ".join(["word"] * 50)
        graph = build_graph(make_node("a", response=long_answer))
        elements = graph_to_render_elements(graph, compute_layout(graph), max_words=5)

        node = elements.nodes[0]
        assert node.response == "word word word word word..."
        assert node.full_response == long_answer
        assert node.timestamp == "10:00 AM"

    def test_node_to_dict(self, sample_graph) -> None:
        elements = graph_to_render_elements(sample_graph, compute_layout(sample_graph))
        data = elements.nodes[0].to_dict()
        assert data["type"] == "mindmap"
        assert data["draggable"] is False
        assert set(data["position"]) == {"x", "y"}
        assert data["data"]["fullQuestion"] == "Question r"

    def test_edge_style(self) -> None:
        edge = create_render_edge(GraphEdge.between("a", "b"))
        assert edge.to_dict() == {
            "id": "a->b",
            "source": "a",
            "target": "b",
            "type": "bezier",
            "animated": True,
        }
