"""Persistence adapter and wire schemas."""

from mindgraph.persistence.adapter import (
    MindmapPersistence,
    compute_max_depth,
    deserialize_mindmap,
    dump_save_request_json,
    graph_data_to_serialized,
    load_mindmap_json,
    parse_load_response,
    prepare_save_request,
    process_load_response,
    serialize_mindmap,
)
from mindgraph.persistence.schema import (
    EdgeRecord,
    GraphData,
    LoadMindmapResponse,
    NodeRecord,
    SaveMetadata,
    SaveMindmapRequest,
)

__all__ = [
    # Adapter
    "MindmapPersistence",
    "compute_max_depth",
    "serialize_mindmap",
    "deserialize_mindmap",
    "prepare_save_request",
    "parse_load_response",
    "process_load_response",
    "graph_data_to_serialized",
    "load_mindmap_json",
    "dump_save_request_json",
    # Schema
    "NodeRecord",
    "EdgeRecord",
    "GraphData",
    "SaveMetadata",
    "SaveMindmapRequest",
    "LoadMindmapResponse",
]
