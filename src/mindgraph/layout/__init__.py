"""Layout engine - deterministic, overlap-free placement of graph nodes."""

from mindgraph.layout.engine import (
    ALGORITHM_NAME,
    LayerSlot,
    assign_layers,
    build_layered_graph,
    calculate_layout_bounds,
    check_overlaps,
    compute_layout,
    get_node_center,
    incremental_layout_update,
    mark_layout_stale,
    rectangles_overlap,
    validate_layout,
)

__all__ = [
    "ALGORITHM_NAME",
    "LayerSlot",
    "assign_layers",
    "build_layered_graph",
    "compute_layout",
    "incremental_layout_update",
    "mark_layout_stale",
    "validate_layout",
    "rectangles_overlap",
    "check_overlaps",
    "calculate_layout_bounds",
    "get_node_center",
]
