"""Viewport culling and camera-event coalescing."""

from mindgraph.viewport.culler import (
    CullResult,
    compute_viewport_bounds,
    filter_to_viewport,
    get_distance_from_viewport_center,
    get_nodes_with_distance,
    get_visible_node_ids,
    is_node_in_viewport,
    is_node_visible,
    should_render_detail,
)
from mindgraph.viewport.debounce import DEFAULT_DEBOUNCE_SECONDS, ViewportDebouncer
from mindgraph.viewport.stats import (
    ViewportStatistics,
    calculate_visibility_ratio,
    get_viewport_statistics,
)

__all__ = [
    "CullResult",
    "compute_viewport_bounds",
    "is_node_visible",
    "is_node_in_viewport",
    "get_visible_node_ids",
    "filter_to_viewport",
    "get_distance_from_viewport_center",
    "get_nodes_with_distance",
    "should_render_detail",
    "ViewportDebouncer",
    "DEFAULT_DEBOUNCE_SECONDS",
    "ViewportStatistics",
    "calculate_visibility_ratio",
    "get_viewport_statistics",
]
