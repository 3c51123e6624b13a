"""Logical conversation graph - the source of truth.

Holds nodes and the parent -> child edges derived from them, plus every
mutation and query over that structure. Nothing here knows about
geometry, rendering or storage formats.

Invariants:
- Every edge's source and target exist in ``nodes``
- Edge ids are deterministic: ``"{source}->{target}"``
- The edge set is exactly the set implied by the nodes' ``parent_id``
- Removing a node removes its entire subtree

Every mutation returns a NEW ``Graph``; the input is never modified.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from mindgraph.graph.errors import DuplicateNodeError, NodeReferenceError
from mindgraph.models.node import GraphEdge, GraphNode, edge_id

logger = logging.getLogger(__name__)

# Fields update_node() may change; "id" is immutable
UPDATABLE_FIELDS = frozenset({"parent_id", "content", "response", "created_at", "metadata"})


@dataclass(frozen=True)
class Graph:
    """Immutable graph value: node id -> node, edge id -> edge."""

    nodes: Mapping[str, GraphNode] = field(default_factory=lambda: MappingProxyType({}))
    edges: Mapping[str, GraphEdge] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.nodes, MappingProxyType):
            object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))
        if not isinstance(self.edges, MappingProxyType):
            object.__setattr__(self, "edges", MappingProxyType(dict(self.edges)))

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes


def _freeze(nodes: dict[str, GraphNode], edges: dict[str, GraphEdge]) -> Graph:
    return Graph(nodes=MappingProxyType(nodes), edges=MappingProxyType(edges))


def _children_index(graph: Graph) -> dict[str, list[str]]:
    """Parent id -> child ids, built from the edge map."""
    index: dict[str, list[str]] = defaultdict(list)
    for edge in graph.edges.values():
        index[edge.source].append(edge.target)
    return index


# =============================================================================
# Construction
# =============================================================================


def create_graph() -> Graph:
    """Create an empty graph."""
    return Graph()


# =============================================================================
# Mutations (all return a new Graph)
# =============================================================================


def add_node(graph: Graph, node: GraphNode) -> Graph:
    """
    Add a node to the graph, creating its incoming edge if it has a parent.

    Args:
        graph: Graph to add to (not modified)
        node: Node to insert

    Returns:
        New graph containing the node

    Raises:
        NodeReferenceError: If ``node.parent_id`` is not in the graph
        DuplicateNodeError: If a node with the same id already exists
    """
    if node.id in graph.nodes:
        raise DuplicateNodeError(node.id)
    if node.parent_id is not None and node.parent_id not in graph.nodes:
        raise NodeReferenceError(
            node.parent_id,
            "add_node",
            f'parent_id "{node.parent_id}" does not exist in graph',
        )

    nodes = dict(graph.nodes)
    edges = dict(graph.edges)
    nodes[node.id] = node

    if node.parent_id is not None:
        edge = GraphEdge.between(node.parent_id, node.id)
        edges[edge.id] = edge

    return _freeze(nodes, edges)


def remove_node(graph: Graph, node_id: str) -> Graph:
    """
    Remove a node AND its entire subtree (cascade delete).

    Every edge touching a removed node is removed as well. Removing an id
    that is not in the graph returns an equal graph.
    """
    if node_id not in graph.nodes:
        return graph

    to_delete = collect_subtree(graph, node_id)

    nodes = {nid: n for nid, n in graph.nodes.items() if nid not in to_delete}
    edges = {
        eid: e
        for eid, e in graph.edges.items()
        if e.source not in to_delete and e.target not in to_delete
    }

    logger.debug(f"Removed subtree of {node_id}: {len(to_delete)} nodes")
    return _freeze(nodes, edges)


def update_node(graph: Graph, node_id: str, updates: Mapping[str, Any]) -> Graph:
    """
    Merge ``updates`` onto an existing node.

    If ``parent_id`` changes, the single incoming edge is rewired: the old
    edge is removed and the new one added. Setting the same parent again
    leaves the edges untouched.

    Raises:
        NodeReferenceError: If the node or the new parent does not exist, or
            the new parent lies inside the node's own subtree
        TypeError: If ``updates`` names a field that cannot be changed
    """
    existing = graph.nodes.get(node_id)
    if existing is None:
        raise NodeReferenceError(node_id, "update_node")

    unknown = set(updates) - UPDATABLE_FIELDS - {"id"}
    if unknown:
        raise TypeError(f"update_node: unknown fields {sorted(unknown)}")

    updated = existing.with_updates(**dict(updates))
    nodes = dict(graph.nodes)
    nodes[node_id] = updated

    edges: dict[str, GraphEdge] | Mapping[str, GraphEdge] = graph.edges
    new_parent = updated.parent_id

    if "parent_id" in updates and new_parent != existing.parent_id:
        if new_parent is not None:
            if new_parent not in graph.nodes:
                raise NodeReferenceError(
                    new_parent,
                    "update_node",
                    f'new parent_id "{new_parent}" does not exist',
                )
            if new_parent in collect_subtree(graph, node_id):
                raise NodeReferenceError(
                    new_parent,
                    "update_node",
                    f'new parent_id "{new_parent}" is inside the subtree of "{node_id}"',
                )

        edges = dict(graph.edges)
        if existing.parent_id is not None:
            edges.pop(edge_id(existing.parent_id, node_id), None)
        if new_parent is not None:
            edge = GraphEdge.between(new_parent, node_id)
            edges[edge.id] = edge

    return _freeze(nodes, dict(edges))


# =============================================================================
# Queries (read-only)
# =============================================================================


def collect_subtree(graph: Graph, node_id: str) -> set[str]:
    """Ids of ``node_id`` and all of its descendants.

    Uses a visited-set guarded worklist so a node reachable along several
    paths is visited once, and deep trees do not hit the recursion limit.
    """
    if node_id not in graph.nodes:
        return set()

    children = _children_index(graph)
    visited: set[str] = set()
    stack = [node_id]

    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        stack.extend(c for c in children.get(current, ()) if c not in visited)

    return visited


def get_node(graph: Graph, node_id: str) -> GraphNode | None:
    return graph.nodes.get(node_id)


def get_parent(graph: Graph, node_id: str) -> GraphNode | None:
    node = graph.nodes.get(node_id)
    if node is None or node.parent_id is None:
        return None
    return graph.nodes.get(node.parent_id)


def get_children(graph: Graph, node_id: str) -> list[GraphNode]:
    """Direct children of a node."""
    children = []
    for edge in graph.edges.values():
        if edge.source == node_id:
            child = graph.nodes.get(edge.target)
            if child is not None:
                children.append(child)
    return children


def get_root_nodes(graph: Graph) -> list[GraphNode]:
    """All nodes without a parent."""
    return [n for n in graph.nodes.values() if n.parent_id is None]


def get_node_depth(graph: Graph, node_id: str) -> int:
    """Depth of a node, found by walking up the ``parent_id`` chain.

    Roots have depth 0. A chain that loops back on itself stops at the
    first repeated node.
    """
    depth = 0
    seen = {node_id}
    current = graph.nodes.get(node_id)
    while current is not None and current.parent_id is not None:
        if current.parent_id in seen:
            break
        seen.add(current.parent_id)
        depth += 1
        current = graph.nodes.get(current.parent_id)
    return depth


def get_ancestors(graph: Graph, node_id: str) -> list[GraphNode]:
    """Ancestors from the direct parent up to the root."""
    ancestors: list[GraphNode] = []
    seen = {node_id}
    current = get_parent(graph, node_id)
    while current is not None and current.id not in seen:
        ancestors.append(current)
        seen.add(current.id)
        current = get_parent(graph, current.id)
    return ancestors


def get_descendants(graph: Graph, node_id: str) -> set[str]:
    """Ids of all transitive descendants, excluding the node itself."""
    subtree = collect_subtree(graph, node_id)
    subtree.discard(node_id)
    return subtree


def get_subtree_size(graph: Graph, node_id: str) -> int:
    """Number of nodes in the subtree rooted at ``node_id`` (itself included)."""
    return len(collect_subtree(graph, node_id))


# =============================================================================
# Validation
# =============================================================================


def find_tree_violations(graph: Graph) -> list[str]:
    """Describe every structural problem in the graph.

    Checks:
    - every edge's endpoints exist and its id matches its endpoints
    - every non-root node has exactly one incoming edge, from its parent
    - roots have no incoming edge
    - no cycles (iterative DFS with an on-stack set)
    """
    problems: list[str] = []

    incoming: dict[str, list[GraphEdge]] = defaultdict(list)
    for eid, edge in graph.edges.items():
        if edge.source not in graph.nodes or edge.target not in graph.nodes:
            problems.append(f"edge {eid} references a missing node")
        if eid != edge_id(edge.source, edge.target):
            problems.append(f"edge {eid} id does not match its endpoints")
        incoming[edge.target].append(edge)

    for node in graph.nodes.values():
        edges_in = incoming.get(node.id, [])
        if node.parent_id is None:
            if edges_in:
                problems.append(f"root {node.id} has {len(edges_in)} incoming edges")
            continue
        if len(edges_in) != 1:
            problems.append(f"node {node.id} has {len(edges_in)} incoming edges, expected 1")
        elif edges_in[0].source != node.parent_id:
            problems.append(
                f"node {node.id} incoming edge comes from {edges_in[0].source}, "
                f"parent_id is {node.parent_id}"
            )

    cycle_at = _find_cycle(graph)
    if cycle_at is not None:
        problems.append(f"cycle detected through node {cycle_at}")

    return problems


def _find_cycle(graph: Graph) -> str | None:
    children = _children_index(graph)
    visited: set[str] = set()
    on_stack: set[str] = set()

    for start in graph.nodes:
        if start in visited:
            continue
        visited.add(start)
        on_stack.add(start)
        stack = [(start, iter(children.get(start, ())))]

        while stack:
            current, successors = stack[-1]
            advanced = False
            for nxt in successors:
                if nxt in on_stack:
                    return nxt
                if nxt not in visited:
                    visited.add(nxt)
                    on_stack.add(nxt)
                    stack.append((nxt, iter(children.get(nxt, ()))))
                    advanced = True
                    break
            if not advanced:
                on_stack.discard(current)
                stack.pop()

    return None


def is_valid_tree(graph: Graph) -> bool:
    """True if the graph satisfies every structural invariant. Never raises."""
    return not find_tree_violations(graph)


# =============================================================================
# Serialization
# =============================================================================


@dataclass(frozen=True)
class SerializedGraph:
    """Flat, order-independent form of a graph."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SerializedGraph":
        return cls(
            nodes=[GraphNode.from_dict(n) for n in data.get("nodes") or []],
            edges=[GraphEdge.from_dict(e) for e in data.get("edges") or []],
        )


def serialize_graph(graph: Graph) -> SerializedGraph:
    """Flatten both maps into lists."""
    return SerializedGraph(nodes=list(graph.nodes.values()), edges=list(graph.edges.values()))


def edges_from_parents(nodes: Iterable[GraphNode]) -> dict[str, GraphEdge]:
    """Reconstruct the edge map purely from each node's ``parent_id``."""
    edges: dict[str, GraphEdge] = {}
    for node in nodes:
        if node.parent_id is not None:
            edge = GraphEdge.between(node.parent_id, node.id)
            edges[edge.id] = edge
    return edges


def deserialize_graph(data: SerializedGraph | Mapping[str, Any]) -> Graph:
    """
    Rebuild a graph from its flat form.

    If edges were persisted they are used directly (fast path). If the edge
    list is absent or empty, edges are reconstructed from ``parent_id``
    (backward-compatible with payloads that omit edges). Persisted edges
    whose endpoints are not among the nodes are dropped.
    """
    if not isinstance(data, SerializedGraph):
        data = SerializedGraph.from_dict(data)

    nodes = {n.id: n for n in data.nodes}

    if data.edges:
        edges: dict[str, GraphEdge] = {}
        for edge in data.edges:
            if edge.source not in nodes or edge.target not in nodes:
                logger.warning(f"Dropping edge {edge.id}: endpoint not in payload")
                continue
            edges[edge.id] = edge
    else:
        edges = edges_from_parents(nodes.values())

    return _freeze(nodes, edges)
