"""Layout models - computed node rectangles and the tunables that produce them."""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from mindgraph.models.node import utc_now_iso


class LayoutDirection(str, Enum):
    """Direction in which ranks grow."""

    TB = "TB"  # Top to bottom
    BT = "BT"  # Bottom to top
    LR = "LR"  # Left to right (mindmap convention)
    RL = "RL"  # Right to left

    @property
    def is_horizontal(self) -> bool:
        return self in (LayoutDirection.LR, LayoutDirection.RL)

    @property
    def is_reversed(self) -> bool:
        return self in (LayoutDirection.BT, LayoutDirection.RL)


@dataclass(frozen=True)
class LayoutConfig:
    """Numeric tunables for the layered layout."""

    node_width: float = 380.0
    node_height: float = 220.0
    rank_separation: float = 480.0  # Gap between consecutive ranks
    node_separation: float = 60.0  # Gap between siblings in the same rank
    direction: LayoutDirection = LayoutDirection.LR
    margin: float = 40.0  # Offset of the whole layout from the origin

    def __post_init__(self) -> None:
        if self.node_width <= 0 or self.node_height <= 0:
            raise ValueError(
                f"Node dimensions must be positive, got {self.node_width}x{self.node_height}"
            )
        if self.rank_separation < 0 or self.node_separation < 0:
            raise ValueError("Separations must be non-negative")
        if not isinstance(self.direction, LayoutDirection):
            # Accepts "LR" etc.; raises ValueError for anything else
            object.__setattr__(self, "direction", LayoutDirection(self.direction))

    @property
    def rank_extent(self) -> float:
        """Size of a node along the rank axis."""
        return self.node_width if self.direction.is_horizontal else self.node_height

    @property
    def cross_extent(self) -> float:
        """Size of a node across the rank axis (within a rank)."""
        return self.node_height if self.direction.is_horizontal else self.node_width


DEFAULT_LAYOUT_CONFIG = LayoutConfig()


@dataclass(frozen=True)
class NodeLayout:
    """A node's rectangle. (x, y) is the TOP-LEFT corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class LayoutBounds:
    """Minimal rectangle enclosing every node rectangle of a layout."""

    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def to_dict(self) -> dict:
        return {
            "minX": self.min_x,
            "minY": self.min_y,
            "maxX": self.max_x,
            "maxY": self.max_y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class LayoutValidation:
    """Result of comparing a layout's entries against a graph's nodes."""

    missing: tuple[str, ...] = ()  # Graph nodes without a layout entry
    orphaned: tuple[str, ...] = ()  # Layout entries without a graph node

    @property
    def is_valid(self) -> bool:
        return not self.missing and not self.orphaned

    def __bool__(self) -> bool:
        return self.is_valid


@dataclass(frozen=True)
class Layout:
    """
    Placement of every node in a graph.

    ``algorithm`` and ``computed_at`` exist for debugging and cache
    invalidation only; they never affect correctness.
    """

    nodes: Mapping[str, NodeLayout] = field(default_factory=lambda: MappingProxyType({}))
    algorithm: str = "layered"
    computed_at: str = field(default_factory=utc_now_iso)
    is_stale: bool = False  # True if the graph changed since the last compute

    def __post_init__(self) -> None:
        if not isinstance(self.nodes, MappingProxyType):
            object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))

    @classmethod
    def empty(cls) -> "Layout":
        """Layout of a session that has not computed anything yet."""
        return cls(is_stale=True)

    def get(self, node_id: str) -> NodeLayout | None:
        return self.nodes.get(node_id)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def positions(self) -> dict[str, dict]:
        """Node id -> top-left position, for the rendering layer."""
        return {nid: {"x": nl.x, "y": nl.y} for nid, nl in self.nodes.items()}

    def mark_stale(self) -> "Layout":
        return replace(self, is_stale=True)
