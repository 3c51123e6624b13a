"""Unit tests for data models."""

from datetime import datetime, timezone

import pytest

from mindgraph.models import (
    GraphEdge,
    GraphNode,
    Layout,
    LayoutConfig,
    LayoutDirection,
    NodeLayout,
    Viewport,
    ViewportConfig,
    edge_id,
    parse_datetime,
)


class TestGraphNode:
    """Tests for GraphNode model."""

    def test_create_root(self) -> None:
        node = GraphNode(id="a", content="Why is the sky blue?")
        assert node.is_root
        assert node.response == ""
        assert node.metadata is None
        # Default timestamp is parseable ISO 8601
        assert parse_datetime(node.created_at) is not None

    def test_with_updates_keeps_id(self) -> None:
        node = GraphNode(id="a", content="old")
        updated = node.with_updates(id="b", content="new")
        assert updated.id == "a"
        assert updated.content == "new"
        assert node.content == "old"

    def test_to_dict_uses_wire_keys(self) -> None:
        node = GraphNode(id="c", parent_id="p", content="q", response="r", created_at="2024-01-01T00:00:00Z")
        data = node.to_dict()
        assert data == {
            "id": "c",
            "parentId": "p",
            "content": "q",
            "response": "r",
            "createdAt": "2024-01-01T00:00:00Z",
        }

    def test_from_dict_accepts_legacy_query(self) -> None:
        node = GraphNode.from_dict({"id": "x", "query": "legacy text", "parentId": ""})
        assert node.content == "legacy text"
        assert node.parent_id is None

    def test_from_dict_snake_case(self) -> None:
        node = GraphNode.from_dict(
            {"id": "x", "parent_id": "p", "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc)}
        )
        assert node.parent_id == "p"
        assert node.created_at.startswith("2024-01-01T00:00:00")


class TestGraphEdge:
    """Tests for GraphEdge model."""

    def test_deterministic_id(self) -> None:
        assert edge_id("a", "b") == "a->b"
        assert GraphEdge.between("a", "b") == GraphEdge(id="a->b", source="a", target="b")

    def test_from_dict_derives_missing_id(self) -> None:
        edge = GraphEdge.from_dict({"source": "p", "target": "c"})
        assert edge.id == "p->c"


class TestParseDatetime:
    """Tests for timestamp parsing."""

    def test_trailing_z(self) -> None:
        parsed = parse_datetime("2024-01-15T10:30:00Z")
        assert parsed == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_epoch_seconds(self) -> None:
        assert parse_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_empty(self) -> None:
        assert parse_datetime(None) is None
        assert parse_datetime("") is None

    def test_garbage_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_datetime("yesterday")


class TestLayoutConfig:
    """Tests for layout tunables."""

    def test_defaults(self) -> None:
        config = LayoutConfig()
        assert config.node_width == 380
        assert config.node_height == 220
        assert config.direction is LayoutDirection.LR
        assert config.margin == 40

    def test_direction_from_string(self) -> None:
        config = LayoutConfig(direction="TB")
        assert config.direction is LayoutDirection.TB
        assert config.rank_extent == config.node_height
        assert config.cross_extent == config.node_width

    def test_horizontal_extents(self) -> None:
        config = LayoutConfig(direction="RL")
        assert config.direction.is_horizontal
        assert config.direction.is_reversed
        assert config.rank_extent == config.node_width

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"node_width": 0},
            {"node_height": -1},
            {"rank_separation": -5},
            {"node_separation": -1},
            {"direction": "diagonal"},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            LayoutConfig(**kwargs)


class TestNodeLayout:
    """Tests for node rectangles."""

    def test_edges_and_center(self) -> None:
        rect = NodeLayout(x=10, y=20, width=100, height=50)
        assert rect.right == 110
        assert rect.bottom == 70
        assert rect.center == (60, 45)

    def test_layout_is_read_only(self) -> None:
        layout = Layout(nodes={"a": NodeLayout(0, 0, 1, 1)})
        with pytest.raises(TypeError):
            layout.nodes["b"] = NodeLayout(0, 0, 1, 1)  # type: ignore[index]

    def test_empty_layout_is_stale(self) -> None:
        layout = Layout.empty()
        assert layout.is_stale
        assert len(layout) == 0

    def test_mark_stale_copies(self) -> None:
        layout = Layout(nodes={"a": NodeLayout(0, 0, 1, 1)})
        stale = layout.mark_stale()
        assert stale.is_stale
        assert not layout.is_stale
        assert "a" in stale

    def test_positions(self) -> None:
        layout = Layout(nodes={"a": NodeLayout(5, 6, 1, 1)})
        assert layout.positions() == {"a": {"x": 5, "y": 6}}


class TestViewportModels:
    """Tests for camera models."""

    def test_zoom_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            Viewport(zoom=0)

    def test_default_padding(self) -> None:
        config = ViewportConfig()
        assert config.padding_x == 500
        assert config.padding_y == 500

    def test_negative_padding_rejected(self) -> None:
        with pytest.raises(ValueError):
            ViewportConfig(padding_x=-1)
