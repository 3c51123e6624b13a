"""Unit tests for the logical graph model."""

import pytest
from hypothesis import given, settings as hyp_settings, strategies as st

from conftest import build_graph, make_node
from mindgraph.graph import (
    DuplicateNodeError,
    NodeReferenceError,
)
from mindgraph.graph.model import (
    Graph,
    SerializedGraph,
    add_node,
    collect_subtree,
    create_graph,
    deserialize_graph,
    find_tree_violations,
    get_ancestors,
    get_children,
    get_descendants,
    get_node_depth,
    get_parent,
    get_root_nodes,
    get_subtree_size,
    is_valid_tree,
    remove_node,
    serialize_graph,
    update_node,
)
from mindgraph.models import GraphEdge, GraphNode


@st.composite
def forests(draw, max_nodes: int = 30) -> list[GraphNode]:
    """Random forests; each node's parent (if any) comes earlier in the list."""
    size = draw(st.integers(min_value=0, max_value=max_nodes))
    nodes = []
    for i in range(size):
        parent = draw(st.integers(min_value=-1, max_value=i - 1)) if i else -1
        nodes.append(make_node(f"n{i}", f"n{parent}" if parent >= 0 else None, minute=i % 60))
    return nodes


class TestChainScenario:
    """Root, child, grandchild; then remove the middle node."""

    def test_build_and_cascade(self) -> None:
        graph = create_graph()
        graph = add_node(graph, GraphNode(id="r"))
        graph = add_node(graph, GraphNode(id="c1", parent_id="r"))
        graph = add_node(graph, GraphNode(id="c2", parent_id="c1"))

        assert graph.node_count == 3
        assert set(graph.edges) == {"r->c1", "c1->c2"}
        assert get_node_depth(graph, "c2") == 2
        assert is_valid_tree(graph)

        graph = remove_node(graph, "c1")
        assert set(graph.nodes) == {"r"}
        assert graph.edge_count == 0


class TestAddNode:
    """Tests for add_node."""

    def test_root_and_children(self) -> None:
        graph = create_graph()
        graph = add_node(graph, make_node("r"))
        graph = add_node(graph, make_node("c1", "r"))
        graph = add_node(graph, make_node("c2", "r"))

        assert graph.node_count == 3
        assert set(graph.edges) == {"r->c1", "r->c2"}
        assert graph.edges["r->c1"] == GraphEdge(id="r->c1", source="r", target="c1")

    def test_input_graph_unchanged(self) -> None:
        empty = create_graph()
        added = add_node(empty, make_node("r"))
        assert empty.node_count == 0
        assert added.node_count == 1

    def test_missing_parent(self) -> None:
        with pytest.raises(NodeReferenceError) as exc_info:
            add_node(create_graph(), make_node("c", "ghost"))
        assert exc_info.value.node_id == "ghost"
        assert exc_info.value.operation == "add_node"

    def test_duplicate_id(self, sample_graph: Graph) -> None:
        with pytest.raises(DuplicateNodeError):
            add_node(sample_graph, make_node("c1", "r"))

    def test_graph_is_read_only(self, sample_graph: Graph) -> None:
        with pytest.raises(TypeError):
            sample_graph.nodes["x"] = make_node("x")  # type: ignore[index]


class TestRemoveNode:
    """Tests for cascade delete."""

    def test_cascade(self, sample_graph: Graph) -> None:
        graph = remove_node(sample_graph, "c1")
        assert set(graph.nodes) == {"r", "c2"}
        assert set(graph.edges) == {"r->c2"}
        assert is_valid_tree(graph)

    def test_remove_root_empties_tree(self, sample_graph: Graph) -> None:
        graph = remove_node(sample_graph, "r")
        assert graph.node_count == 0
        assert graph.edge_count == 0

    def test_unknown_id_is_noop(self, sample_graph: Graph) -> None:
        assert remove_node(sample_graph, "nope") == sample_graph

    def test_deep_chain(self, chain_graph: Graph) -> None:
        graph = remove_node(chain_graph, "n10")
        assert graph.node_count == 10
        assert is_valid_tree(graph)

    @given(forests(), st.data())
    @hyp_settings(max_examples=50)
    def test_subtree_removed_exactly(self, nodes: list[GraphNode], data: st.DataObject) -> None:
        graph = build_graph(*nodes)
        if not nodes:
            return
        target = data.draw(st.sampled_from(sorted(graph.nodes)))
        subtree = collect_subtree(graph, target)

        result = remove_node(graph, target)
        assert set(result.nodes) == set(graph.nodes) - subtree
        for edge in result.edges.values():
            assert edge.source in result.nodes and edge.target in result.nodes
        assert is_valid_tree(result)


class TestUpdateNode:
    """Tests for update_node and re-parenting."""

    def test_content_update(self, sample_graph: Graph) -> None:
        graph = update_node(sample_graph, "c1", {"content": "rephrased", "response": "new answer"})
        assert graph.nodes["c1"].content == "rephrased"
        assert graph.nodes["c1"].response == "new answer"
        assert graph.edges == sample_graph.edges

    def test_reparent_rewires_edge(self, sample_graph: Graph) -> None:
        graph = update_node(sample_graph, "g1", {"parent_id": "c2"})
        assert set(graph.edges) == (set(sample_graph.edges) - {"c1->g1"}) | {"c2->g1"}
        assert graph.edges["c2->g1"] == GraphEdge(id="c2->g1", source="c2", target="g1")
        assert graph.nodes["g1"].parent_id == "c2"
        assert is_valid_tree(graph)

    def test_reparent_to_same_parent(self, sample_graph: Graph) -> None:
        graph = update_node(sample_graph, "g1", {"parent_id": "c1"})
        assert set(graph.edges) == set(sample_graph.edges)

    def test_promote_to_root(self, sample_graph: Graph) -> None:
        graph = update_node(sample_graph, "c1", {"parent_id": None})
        assert graph.nodes["c1"].is_root
        assert "r->c1" not in graph.edges
        assert "c1->g1" in graph.edges
        assert is_valid_tree(graph)

    def test_missing_node(self, sample_graph: Graph) -> None:
        with pytest.raises(NodeReferenceError):
            update_node(sample_graph, "ghost", {"content": "x"})

    def test_missing_new_parent(self, sample_graph: Graph) -> None:
        with pytest.raises(NodeReferenceError):
            update_node(sample_graph, "c1", {"parent_id": "ghost"})

    def test_reparent_into_own_subtree(self, sample_graph: Graph) -> None:
        with pytest.raises(NodeReferenceError):
            update_node(sample_graph, "c1", {"parent_id": "g1"})
        with pytest.raises(NodeReferenceError):
            update_node(sample_graph, "c1", {"parent_id": "c1"})

    def test_unknown_field(self, sample_graph: Graph) -> None:
        with pytest.raises(TypeError):
            update_node(sample_graph, "c1", {"colour": "red"})

    def test_id_is_immutable(self, sample_graph: Graph) -> None:
        graph = update_node(sample_graph, "c1", {"id": "zzz", "content": "x"})
        assert "c1" in graph
        assert "zzz" not in graph


class TestQueries:
    """Tests for read-only queries."""

    def test_children_and_parent(self, sample_graph: Graph) -> None:
        assert {n.id for n in get_children(sample_graph, "r")} == {"c1", "c2"}
        assert get_parent(sample_graph, "g1").id == "c1"
        assert get_parent(sample_graph, "r") is None

    def test_roots(self, sample_graph: Graph) -> None:
        assert [n.id for n in get_root_nodes(sample_graph)] == ["r"]

    def test_depth_and_ancestors(self, sample_graph: Graph) -> None:
        assert get_node_depth(sample_graph, "r") == 0
        assert get_node_depth(sample_graph, "g1") == 2
        assert [n.id for n in get_ancestors(sample_graph, "g1")] == ["c1", "r"]

    def test_descendants(self, sample_graph: Graph) -> None:
        assert get_descendants(sample_graph, "r") == {"c1", "c2", "g1"}
        assert get_subtree_size(sample_graph, "c1") == 2
        assert get_subtree_size(sample_graph, "ghost") == 0

    def test_chain_depth(self, chain_graph: Graph) -> None:
        assert get_node_depth(chain_graph, "n49") == 49


class TestTreeValidation:
    """Tests for is_valid_tree / find_tree_violations."""

    def test_valid(self, sample_graph: Graph) -> None:
        assert is_valid_tree(sample_graph)
        assert find_tree_violations(sample_graph) == []

    def test_empty_is_valid(self) -> None:
        assert is_valid_tree(create_graph())

    def test_dangling_edge(self) -> None:
        graph = Graph(
            nodes={"a": make_node("a")},
            edges={"a->b": GraphEdge.between("a", "b")},
        )
        assert not is_valid_tree(graph)

    def test_mismatched_edge_id(self) -> None:
        graph = Graph(
            nodes={"a": make_node("a"), "b": make_node("b", "a")},
            edges={"x": GraphEdge(id="x", source="a", target="b")},
        )
        problems = find_tree_violations(graph)
        assert any("id does not match" in p for p in problems)

    def test_two_incoming_edges(self) -> None:
        graph = Graph(
            nodes={"a": make_node("a"), "b": make_node("b"), "c": make_node("c", "a")},
            edges={
                "a->c": GraphEdge.between("a", "c"),
                "b->c": GraphEdge.between("b", "c"),
            },
        )
        assert not is_valid_tree(graph)

    def test_root_with_incoming_edge(self) -> None:
        graph = Graph(
            nodes={"a": make_node("a"), "b": make_node("b")},
            edges={"a->b": GraphEdge.between("a", "b")},
        )
        assert not is_valid_tree(graph)

    def test_cycle(self) -> None:
        graph = Graph(
            nodes={"a": make_node("a", "b"), "b": make_node("b", "a")},
            edges={
                "a->b": GraphEdge.between("a", "b"),
                "b->a": GraphEdge.between("b", "a"),
            },
        )
        problems = find_tree_violations(graph)
        assert any("cycle" in p for p in problems)

    @given(forests())
    @hyp_settings(max_examples=50)
    def test_built_forests_are_valid(self, nodes: list[GraphNode]) -> None:
        graph = build_graph(*nodes)
        assert is_valid_tree(graph)
        assert graph.edge_count == sum(1 for n in nodes if n.parent_id is not None)


class TestSerialization:
    """Tests for serialize/deserialize."""

    def test_round_trip(self, sample_graph: Graph) -> None:
        restored = deserialize_graph(serialize_graph(sample_graph))
        assert dict(restored.nodes) == dict(sample_graph.nodes)
        assert dict(restored.edges) == dict(sample_graph.edges)

    def test_rebuilds_edges_when_absent(self, sample_graph: Graph) -> None:
        serialized = serialize_graph(sample_graph)
        restored = deserialize_graph(SerializedGraph(nodes=serialized.nodes, edges=[]))
        assert dict(restored.edges) == dict(sample_graph.edges)
        assert is_valid_tree(restored)

    def test_from_mapping(self) -> None:
        restored = deserialize_graph(
            {
                "nodes": [
                    {"id": "r", "parentId": None, "content": "q"},
                    {"id": "c", "parentId": "r", "content": "q2"},
                ],
            }
        )
        assert set(restored.edges) == {"r->c"}

    def test_drops_edges_to_missing_nodes(self) -> None:
        restored = deserialize_graph(
            SerializedGraph(
                nodes=[make_node("r"), make_node("c", "r")],
                edges=[GraphEdge.between("r", "c"), GraphEdge.between("r", "gone")],
            )
        )
        assert set(restored.edges) == {"r->c"}

    @given(forests())
    @hyp_settings(max_examples=30)
    def test_round_trip_without_edges_matches(self, nodes: list[GraphNode]) -> None:
        graph = build_graph(*nodes)
        with_edges = deserialize_graph(serialize_graph(graph))
        without_edges = deserialize_graph(SerializedGraph(nodes=list(graph.nodes.values())))
        assert dict(with_edges.edges) == dict(without_edges.edges) == dict(graph.edges)
