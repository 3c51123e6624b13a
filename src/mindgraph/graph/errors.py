"""Exceptions raised by the graph engine."""


class GraphError(Exception):
    """Base class for mindgraph errors."""


class NodeReferenceError(GraphError, ValueError):
    """An operation named a node id that does not exist in the graph."""

    def __init__(self, node_id: str, operation: str, detail: str | None = None) -> None:
        self.node_id = node_id
        self.operation = operation
        message = detail or f'node "{node_id}" does not exist in graph'
        super().__init__(f"{operation}: {message}")


class DuplicateNodeError(GraphError, ValueError):
    """A node with the same id is already present."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f'add_node: node "{node_id}" already exists in graph')


class InvalidSessionStateError(GraphError, RuntimeError):
    """A session operation was invoked in a state that does not allow it."""


class PayloadValidationError(GraphError, ValueError):
    """A persistence payload failed validation at the boundary."""
