"""Persistence adapter - Graph <-> backend payloads.

Layout is NOT persisted as source of truth. It is recomputed from the graph
after every load, so schema or node-count changes can never leave stale
coordinates behind.

Edges ARE persisted explicitly, which makes loading O(n). Payloads without
edges fall back to reconstructing them from ``parent_id``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from mindgraph.graph.errors import PayloadValidationError
from mindgraph.graph.model import Graph, SerializedGraph, deserialize_graph, serialize_graph
from mindgraph.models.node import GraphNode, utc_now_iso
from mindgraph.persistence.schema import (
    EdgeRecord,
    GraphData,
    LoadMindmapResponse,
    NodeRecord,
    SaveMetadata,
    SaveMindmapRequest,
)

logger = logging.getLogger(__name__)


@dataclass
class MindmapPersistence:
    """Full persistence model: the graph plus denormalized counts."""

    id: str
    name: str
    graph: SerializedGraph
    node_count: int = 0
    root_node_count: int = 0
    max_depth: int = 0
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)


def compute_max_depth(nodes: Iterable[GraphNode]) -> int:
    """Deepest node's depth (roots are 0).

    Iterative with a per-id memo, so deep chains cannot overflow the stack
    and each node is resolved once. A parent that is missing from the list
    ends the chain; a chain that loops stops at the repeated node.
    """
    by_id = {n.id: n for n in nodes}
    depth: dict[str, int] = {}

    for start in by_id:
        if start in depth:
            continue

        # Walk up until a memoized node, a root, a missing parent or a loop
        path: list[str] = []
        on_path: set[str] = set()
        current: str | None = start
        base = -1
        while current is not None and current in by_id:
            if current in depth:
                base = depth[current]
                break
            if current in on_path:
                break
            path.append(current)
            on_path.add(current)
            current = by_id[current].parent_id

        for node_id in reversed(path):
            base += 1
            depth[node_id] = base

    return max(depth.values(), default=0)


def serialize_mindmap(mindmap_id: str, name: str, graph: Graph) -> MindmapPersistence:
    """Convert a live graph into the persistence model."""
    serialized = serialize_graph(graph)
    return MindmapPersistence(
        id=mindmap_id,
        name=name,
        graph=serialized,
        node_count=len(serialized.nodes),
        root_node_count=sum(1 for n in serialized.nodes if n.parent_id is None),
        max_depth=compute_max_depth(serialized.nodes),
    )


def deserialize_mindmap(persistence: MindmapPersistence) -> Graph:
    """Convert the persistence model back into a graph. Layout is not restored."""
    return deserialize_graph(persistence.graph)


def prepare_save_request(persistence: MindmapPersistence) -> SaveMindmapRequest:
    """Build the save payload from the persistence model."""
    return SaveMindmapRequest(
        id=persistence.id,
        name=persistence.name,
        graph_data=GraphData(
            nodes=[NodeRecord.from_node(n) for n in persistence.graph.nodes],
            edges=[EdgeRecord.from_edge(e) for e in persistence.graph.edges],
        ),
        metadata=SaveMetadata(
            node_count=persistence.node_count,
            root_node_count=persistence.root_node_count,
            max_depth=persistence.max_depth,
        ),
    )


def parse_load_response(data: Mapping[str, Any] | LoadMindmapResponse) -> LoadMindmapResponse:
    """Validate a raw load payload.

    Raises:
        PayloadValidationError: If the payload does not match the contract
    """
    if isinstance(data, LoadMindmapResponse):
        return data
    try:
        return LoadMindmapResponse.model_validate(data)
    except ValidationError as e:
        raise PayloadValidationError(f"Invalid load response: {e}") from e


def graph_data_to_serialized(graph_data: GraphData) -> SerializedGraph:
    return SerializedGraph(
        nodes=[r.to_node() for r in graph_data.nodes],
        edges=[r.to_edge() for r in graph_data.edges],
    )


def process_load_response(data: Mapping[str, Any] | LoadMindmapResponse) -> Graph:
    """
    Convert a backend load response into a live graph.

    A missing or empty ``edges`` list is valid: edges are rebuilt from
    ``parent_id``. The caller recomputes the layout.
    """
    response = parse_load_response(data)
    serialized = graph_data_to_serialized(response.graph_data)
    if not serialized.edges and serialized.nodes:
        logger.debug(f"Load response for {response.id or '<unnamed>'} has no edges, rebuilding from parentId")
    return deserialize_graph(serialized)


def load_mindmap_json(text: str | bytes) -> LoadMindmapResponse:
    """Parse and validate a load response from JSON text."""
    try:
        return LoadMindmapResponse.model_validate_json(text)
    except ValidationError as e:
        raise PayloadValidationError(f"Invalid load response: {e}") from e


def dump_save_request_json(request: SaveMindmapRequest, indent: int | None = None) -> str:
    """Serialize a save request to JSON with wire keys."""
    return request.model_dump_json(by_alias=True, exclude_none=True, indent=indent)
