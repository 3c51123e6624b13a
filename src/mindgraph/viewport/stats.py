"""Culling statistics for diagnostics."""

from dataclasses import dataclass


def calculate_visibility_ratio(total_nodes: int, visible_nodes: int) -> float:
    """Fraction of the graph currently visible; 0.0 for an empty graph."""
    if total_nodes == 0:
        return 0.0
    return visible_nodes / total_nodes


def _percent(part: int, whole: int) -> str:
    return f"{calculate_visibility_ratio(whole, part) * 100:.1f}%"


@dataclass(frozen=True)
class ViewportStatistics:
    """How effectively culling is working."""

    total_nodes: int
    visible_nodes: int
    total_edges: int
    visible_edges: int

    @property
    def rendered_ratio(self) -> str:
        return _percent(self.visible_nodes, self.total_nodes)

    @property
    def edge_ratio(self) -> str:
        return _percent(self.visible_edges, self.total_edges)

    def to_dict(self) -> dict:
        return {
            "totalNodes": self.total_nodes,
            "visibleNodes": self.visible_nodes,
            "renderedRatio": self.rendered_ratio,
            "totalEdges": self.total_edges,
            "visibleEdges": self.visible_edges,
            "edgeRatio": self.edge_ratio,
        }


def get_viewport_statistics(
    total_nodes: int,
    visible_nodes: int,
    total_edges: int,
    visible_edges: int,
) -> ViewportStatistics:
    return ViewportStatistics(
        total_nodes=total_nodes,
        visible_nodes=visible_nodes,
        total_edges=total_edges,
        visible_edges=visible_edges,
    )
