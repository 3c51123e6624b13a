"""Viewport culling - which nodes and edges are near the camera.

A padded world-space rectangle is computed from the camera transform and
the container size. Only nodes whose rectangle intersects it are kept, and
only edges whose BOTH endpoints are kept. An edge with one culled endpoint
is dropped entirely; this is accepted as a minor visual simplification.

Culling never changes the graph or the layout, and always runs over the
full node/edge set.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Generic, Iterable, Protocol, TypeVar

from mindgraph.models.layout import Layout, NodeLayout
from mindgraph.models.viewport import (
    DEFAULT_VIEWPORT_CONFIG,
    Viewport,
    ViewportBounds,
    ViewportConfig,
)

logger = logging.getLogger(__name__)


class HasId(Protocol):
    id: str


class HasEndpoints(Protocol):
    source: str
    target: str


N = TypeVar("N", bound=HasId)
E = TypeVar("E", bound=HasEndpoints)


@dataclass
class CullResult(Generic[N, E]):
    """Nodes and edges that survived culling, in input order."""

    visible_nodes: list[N] = field(default_factory=list)
    visible_edges: list[E] = field(default_factory=list)

    @property
    def visible_node_ids(self) -> set[str]:
        return {n.id for n in self.visible_nodes}


def compute_viewport_bounds(
    container_width: float,
    container_height: float,
    viewport: Viewport,
    config: ViewportConfig = DEFAULT_VIEWPORT_CONFIG,
) -> ViewportBounds:
    """
    World-space rectangle visible in the container, plus padding.

    The camera maps a world point P to screen point ``P * zoom + (x, y)``,
    so the inverse is ``(screen - (x, y)) / zoom``. Padding is in world units
    and added on every side.
    """
    zoom = viewport.zoom
    return ViewportBounds(
        min_x=(0 - viewport.x) / zoom - config.padding_x,
        max_x=(container_width - viewport.x) / zoom + config.padding_x,
        min_y=(0 - viewport.y) / zoom - config.padding_y,
        max_y=(container_height - viewport.y) / zoom + config.padding_y,
    )


def is_node_visible(node_layout: NodeLayout, bounds: ViewportBounds) -> bool:
    """AABB intersection of a node rectangle with the bounds. O(1).

    Rectangles that touch on an edge count as intersecting.
    """
    return (
        node_layout.right >= bounds.min_x
        and node_layout.x <= bounds.max_x
        and node_layout.bottom >= bounds.min_y
        and node_layout.y <= bounds.max_y
    )


# Same test, under the name used by distance/priority helpers
is_node_in_viewport = is_node_visible


def get_visible_node_ids(layout: Layout, bounds: ViewportBounds) -> list[str]:
    """Ids of all laid-out nodes intersecting the bounds, in layout order."""
    return [nid for nid, nl in layout.nodes.items() if is_node_visible(nl, bounds)]


def filter_to_viewport(
    nodes: Iterable[N],
    edges: Iterable[E],
    layout: Layout,
    bounds: ViewportBounds,
) -> CullResult[N, E]:
    """
    Keep the nodes intersecting ``bounds`` and the edges between kept nodes.

    Nodes without a layout entry are never visible.

    Args:
        nodes: Anything with an ``id`` (graph nodes or render nodes)
        edges: Anything with ``source`` and ``target``
        layout: Node rectangles
        bounds: Padded world-space viewport

    Returns:
        CullResult with the visible subsets
    """
    all_nodes = list(nodes)
    visible_ids: set[str] = set()
    for node in all_nodes:
        node_layout = layout.nodes.get(node.id)
        if node_layout is not None and is_node_visible(node_layout, bounds):
            visible_ids.add(node.id)

    visible_nodes = [n for n in all_nodes if n.id in visible_ids]
    visible_edges = [e for e in edges if e.source in visible_ids and e.target in visible_ids]

    logger.debug(f"Culled to {len(visible_nodes)}/{len(all_nodes)} nodes")
    return CullResult(visible_nodes=visible_nodes, visible_edges=visible_edges)


def get_distance_from_viewport_center(node_layout: NodeLayout, bounds: ViewportBounds) -> float:
    """Euclidean distance from the node's center to the viewport's center."""
    view_x, view_y = bounds.center
    node_x, node_y = node_layout.center
    return math.hypot(node_x - view_x, node_y - view_y)


def get_nodes_with_distance(layout: Layout, bounds: ViewportBounds) -> list[tuple[str, float]]:
    """Visible nodes with their distance to the center, closest first.

    Ties are broken by node id so the ranking is stable.
    """
    ranked = [
        (nid, get_distance_from_viewport_center(nl, bounds))
        for nid, nl in layout.nodes.items()
        if is_node_visible(nl, bounds)
    ]
    ranked.sort(key=lambda item: (item[1], item[0]))
    return ranked


def should_render_detail(
    viewport: Viewport, config: ViewportConfig = DEFAULT_VIEWPORT_CONFIG
) -> bool:
    """Level-of-detail hint: False when zoomed out below the threshold."""
    return viewport.zoom >= config.min_zoom_threshold
