"""Logical graph model.

Provides:
- Immutable Graph value and its mutations (add/remove/update)
- Read-only queries (children, roots, depth, subtree size)
- Structural validation
- Flat serialization with parent_id edge reconstruction
"""

from mindgraph.graph.errors import (
    DuplicateNodeError,
    GraphError,
    InvalidSessionStateError,
    NodeReferenceError,
    PayloadValidationError,
)
from mindgraph.graph.model import (
    Graph,
    SerializedGraph,
    add_node,
    collect_subtree,
    create_graph,
    deserialize_graph,
    edges_from_parents,
    find_tree_violations,
    get_ancestors,
    get_children,
    get_descendants,
    get_node,
    get_node_depth,
    get_parent,
    get_root_nodes,
    get_subtree_size,
    is_valid_tree,
    remove_node,
    serialize_graph,
    update_node,
)

__all__ = [
    # Errors
    "GraphError",
    "NodeReferenceError",
    "DuplicateNodeError",
    "InvalidSessionStateError",
    "PayloadValidationError",
    # Graph
    "Graph",
    "SerializedGraph",
    "create_graph",
    "add_node",
    "remove_node",
    "update_node",
    "collect_subtree",
    "get_node",
    "get_parent",
    "get_children",
    "get_root_nodes",
    "get_node_depth",
    "get_ancestors",
    "get_descendants",
    "get_subtree_size",
    "find_tree_violations",
    "is_valid_tree",
    "serialize_graph",
    "deserialize_graph",
    "edges_from_parents",
]
