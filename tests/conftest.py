"""Pytest configuration and fixtures."""

import pytest

from mindgraph.config import Settings, get_test_settings
from mindgraph.graph.model import Graph, add_node, create_graph
from mindgraph.models import GraphNode, LayoutConfig
from mindgraph.session.orchestrator import MindmapSession


def make_node(node_id: str, parent_id: str | None = None, minute: int = 0, **kwargs) -> GraphNode:
    """Node with a deterministic timestamp; ``minute`` controls sibling order."""
    return GraphNode(
        id=node_id,
        parent_id=parent_id,
        content=kwargs.pop("content", f"Question {node_id}"),
        response=kwargs.pop("response", f"Answer {node_id}"),
        created_at=f"2024-01-15T10:{minute:02d}:00+00:00",
        **kwargs,
    )


def build_graph(*nodes: GraphNode) -> Graph:
    graph = create_graph()
    for node in nodes:
        graph = add_node(graph, node)
    return graph


@pytest.fixture
def test_settings() -> Settings:
    """Test settings: short debounce, invariants checked after every mutation."""
    return get_test_settings()


@pytest.fixture
def small_layout_config() -> LayoutConfig:
    """Integer-sized layout so coordinates are exact."""
    return LayoutConfig(
        node_width=100,
        node_height=50,
        rank_separation=20,
        node_separation=10,
        direction="LR",
        margin=0,
    )


@pytest.fixture
def sample_nodes() -> list[GraphNode]:
    """r -> (c1, c2), c1 -> g1."""
    return [
        make_node("r", minute=0),
        make_node("c1", "r", minute=1),
        make_node("c2", "r", minute=2),
        make_node("g1", "c1", minute=3),
    ]


@pytest.fixture
def sample_graph(sample_nodes: list[GraphNode]) -> Graph:
    return build_graph(*sample_nodes)


@pytest.fixture
def chain_graph() -> Graph:
    """A single 50-node chain: n0 -> n1 -> ... -> n49."""
    nodes = [make_node("n0")]
    nodes += [make_node(f"n{i}", f"n{i - 1}", minute=i % 60) for i in range(1, 50)]
    return build_graph(*nodes)


@pytest.fixture
def session(test_settings: Settings) -> MindmapSession:
    """A READY session with an empty graph."""
    s = MindmapSession(app_settings=test_settings)
    s.start()
    return s


@pytest.fixture
def load_response() -> dict:
    """Backend load response in wire format, edges included."""
    return {
        "id": "mm-1",
        "name": "Research notes",
        "graphData": {
            "nodes": [
                {
                    "id": "r",
                    "parentId": None,
                    "content": "What is a B-tree?",
                    "response": "A balanced search tree.",
                    "createdAt": "2024-01-15T10:00:00Z",
                },
                {
                    "id": "c1",
                    "parentId": "r",
                    "content": "How are nodes split?",
                    "response": "At the median key.",
                    "createdAt": "2024-01-15T10:01:00Z",
                },
            ],
            "edges": [{"id": "r->c1", "source": "r", "target": "c1"}],
        },
        "createdAt": "2024-01-15T10:00:00Z",
        "updatedAt": "2024-01-15T10:05:00Z",
    }
