"""Layered, collision-free node placement.

The engine works in three phases over a ``networkx.DiGraph`` built from the
logical graph:

1. Ranking: each node gets a rank equal to its depth in the depth-first
   spanning forest (tree depth for a forest of trees).
2. Ordering: leaves take consecutive slots across the rank axis in
   depth-first order; an interior node sits midway between its first and
   last child. Nodes in one rank therefore keep their subtrees' left-to-right
   order.
3. Positioning: ranks and slots become TOP-LEFT corners directly. Each rank
   starts at the previous rank's far edge plus ``rank_separation``; within a
   rank a node starts at ``slot * (node extent + node_separation)``, pushed
   forward if needed so it never starts before its neighbour's far edge plus
   ``node_separation``.

Two nodes in one rank are at least one slot apart and ranks never share
space, so no two rectangles can overlap, zero separations included. Since
edges are accumulated in the same order ``NodeLayout`` computes ``right``
and ``bottom``, touching rectangles share the exact same float coordinate.
Every consumer downstream uses top-left; ``get_node_center`` derives the
center when needed.

Given the same Graph and LayoutConfig the output coordinates are always
identical: node and child order come from ``(created_at, id)``, never from
dict insertion order, and nothing is random.
"""

import logging
import time
from dataclasses import dataclass
from itertools import combinations

import networkx as nx

from mindgraph.graph.model import Graph
from mindgraph.models.layout import (
    DEFAULT_LAYOUT_CONFIG,
    Layout,
    LayoutBounds,
    LayoutConfig,
    LayoutValidation,
    NodeLayout,
)
from mindgraph.models.node import GraphNode

logger = logging.getLogger(__name__)

ALGORITHM_NAME = "layered"


@dataclass(frozen=True)
class LayerSlot:
    """Rank/order assignment for one node."""

    rank: int  # Layer index, 0 = roots
    order: int  # Position within the rank, 0 = first
    slot: float  # Cross-axis position in slot units (midpoints may be fractional)


def _ordering_key(node: GraphNode) -> tuple[str, str]:
    return (node.created_at, node.id)


def build_layered_graph(graph: Graph) -> nx.DiGraph:
    """Directed graph with nodes and successors in canonical order.

    Sources (nodes without an incoming edge) come first so that each tree
    of the forest is entered at its root.
    """
    ordered = sorted(graph.nodes.values(), key=_ordering_key)
    position = {n.id: i for i, n in enumerate(ordered)}

    edge_pairs = [
        (e.source, e.target)
        for e in graph.edges.values()
        if e.source in position and e.target in position and e.source != e.target
    ]
    has_incoming = {target for _, target in edge_pairs}

    dag = nx.DiGraph()
    dag.add_nodes_from(n.id for n in ordered if n.id not in has_incoming)
    dag.add_nodes_from(n.id for n in ordered if n.id in has_incoming)
    dag.add_edges_from(sorted(edge_pairs, key=lambda st: (position[st[0]], position[st[1]])))
    return dag


def assign_layers(graph: Graph) -> dict[str, LayerSlot]:
    """Rank and order every node of the graph.

    Every node appears exactly once, including nodes on a cycle, which
    are entered at their earliest member in canonical order.
    """
    dag = build_layered_graph(graph)
    forest = nx.dfs_tree(dag)
    roots = [n for n in forest if forest.in_degree(n) == 0]

    ranks: dict[str, int] = {}
    slots: dict[str, float] = {}
    next_leaf = 0

    for root in roots:
        ranks[root] = 0
        for parent, child in nx.dfs_edges(forest, root):
            ranks[child] = ranks[parent] + 1

        for node_id in nx.dfs_postorder_nodes(forest, root):
            children = list(forest.successors(node_id))
            if children:
                slots[node_id] = (slots[children[0]] + slots[children[-1]]) / 2
            else:
                slots[node_id] = float(next_leaf)
                next_leaf += 1

    by_rank: dict[int, list[str]] = {}
    for node_id, rank in ranks.items():
        by_rank.setdefault(rank, []).append(node_id)

    layers: dict[str, LayerSlot] = {}
    for rank, members in by_rank.items():
        members.sort(key=lambda nid: slots[nid])
        for order, node_id in enumerate(members):
            layers[node_id] = LayerSlot(rank=rank, order=order, slot=slots[node_id])

    return layers


def compute_layout(graph: Graph, config: LayoutConfig = DEFAULT_LAYOUT_CONFIG) -> Layout:
    """
    Place every node of the graph without overlap.

    Pure: no side effects, no randomness, no dependency on earlier layouts.

    Args:
        graph: Logical graph
        config: Node size, separations and direction

    Returns:
        Layout in top-left coordinates
    """
    started = time.perf_counter()
    layers = assign_layers(graph)

    cross_pitch = config.cross_extent + config.node_separation
    max_rank = max((s.rank for s in layers.values()), default=0)

    # Each rank starts where the previous one ends plus the separation,
    # summed in the same order NodeLayout uses for its far edge.
    rank_starts = [config.margin]
    for _ in range(max_rank):
        rank_starts.append(rank_starts[-1] + config.rank_extent + config.rank_separation)

    by_rank: dict[int, list[tuple[str, LayerSlot]]] = {}
    for node_id, layer in layers.items():
        by_rank.setdefault(layer.rank, []).append((node_id, layer))

    nodes: dict[str, NodeLayout] = {}
    for rank, members in by_rank.items():
        display_rank = max_rank - rank if config.direction.is_reversed else rank
        rank_start = rank_starts[display_rank]
        next_free = None
        for node_id, layer in sorted(members, key=lambda m: m[1].order):
            cross_start = config.margin + layer.slot * cross_pitch
            if next_free is not None and cross_start < next_free:
                cross_start = next_free
            next_free = cross_start + config.cross_extent + config.node_separation

            if config.direction.is_horizontal:
                x, y = rank_start, cross_start
            else:
                x, y = cross_start, rank_start
            nodes[node_id] = NodeLayout(x=x, y=y, width=config.node_width, height=config.node_height)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.debug(
        f"Computed {ALGORITHM_NAME} layout for {len(nodes)} nodes, "
        f"{len(graph.edges)} edges, {max_rank + 1 if nodes else 0} ranks in {elapsed_ms:.1f}ms"
    )

    return Layout(nodes=nodes, algorithm=ALGORITHM_NAME)


def incremental_layout_update(
    graph: Graph, config: LayoutConfig = DEFAULT_LAYOUT_CONFIG
) -> Layout:
    """Layout after a single-node change.

    Always a full recompute: ranking needs global context to stay correct,
    and a recompute is O(V + E).
    """
    return compute_layout(graph, config)


def mark_layout_stale(layout: Layout) -> Layout:
    """Copy of the layout flagged as out of date with its graph."""
    return layout.mark_stale()


def validate_layout(graph: Graph, layout: Layout) -> LayoutValidation:
    """Check the layout covers exactly the nodes in the graph."""
    missing = tuple(nid for nid in graph.nodes if nid not in layout.nodes)
    orphaned = tuple(nid for nid in layout.nodes if nid not in graph.nodes)

    for nid in missing:
        logger.warning(f"Missing layout entry for node: {nid}")
    for nid in orphaned:
        logger.warning(f"Layout entry for non-existent node: {nid}")

    return LayoutValidation(missing=missing, orphaned=orphaned)


def rectangles_overlap(a: NodeLayout, b: NodeLayout) -> bool:
    """Strict AABB intersection; rectangles that only touch do not overlap."""
    return a.x < b.right and a.right > b.x and a.y < b.bottom and a.bottom > b.y


def check_overlaps(layout: Layout) -> list[tuple[str, str]]:
    """Every pair of overlapping node rectangles (exhaustive, O(n^2))."""
    return [
        (id_a, id_b)
        for (id_a, a), (id_b, b) in combinations(layout.nodes.items(), 2)
        if rectangles_overlap(a, b)
    ]


def calculate_layout_bounds(layout: Layout) -> LayoutBounds:
    """Minimal rectangle covering all node rectangles; zero for an empty layout."""
    if not layout.nodes:
        return LayoutBounds()

    rects = layout.nodes.values()
    return LayoutBounds(
        min_x=min(r.x for r in rects),
        min_y=min(r.y for r in rects),
        max_x=max(r.right for r in rects),
        max_y=max(r.bottom for r in rects),
    )


def get_node_center(node_layout: NodeLayout) -> tuple[float, float]:
    return node_layout.center
