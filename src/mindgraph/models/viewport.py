"""Camera and culling models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Viewport:
    """
    Camera transform: a world point P maps to screen point P * zoom + (x, y).

    x, y = pan offset in screen pixels. zoom = scale factor.
    """

    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    def __post_init__(self) -> None:
        if self.zoom <= 0:
            raise ValueError(f"Viewport zoom must be positive, got {self.zoom}")

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "zoom": self.zoom}


@dataclass(frozen=True)
class ViewportBounds:
    """World-space rectangle used for culling."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def center(self) -> tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class ViewportConfig:
    """Thresholds for viewport-based rendering decisions."""

    # World-space margin added beyond the visible screen edges.
    # Tuned for ~380px-wide nodes: at least one node of buffer.
    padding_x: float = 500.0
    padding_y: float = 500.0

    # Below this zoom, renderers may draw simplified placeholders
    min_zoom_threshold: float = 0.1

    def __post_init__(self) -> None:
        if self.padding_x < 0 or self.padding_y < 0:
            raise ValueError("Viewport padding must be non-negative")


DEFAULT_VIEWPORT_CONFIG = ViewportConfig()
