"""Configuration management using Pydantic Settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mindgraph.models.layout import LayoutConfig, LayoutDirection
from mindgraph.models.viewport import ViewportConfig


class Environment(str, Enum):
    """Deployment environment presets."""

    DEV = "dev"
    PROD = "prod"
    TEST = "test"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MINDGRAPH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Environment.DEV

    # Layout Parameters (node size is shared by all nodes)
    layout_node_width: float = Field(default=380.0, gt=0)
    layout_node_height: float = Field(default=220.0, gt=0)
    layout_rank_separation: float = Field(
        default=480.0,
        ge=0,
        description="Gap between consecutive ranks (horizontal in LR layouts)"
    )
    layout_node_separation: float = Field(
        default=60.0,
        ge=0,
        description="Gap between siblings in the same rank"
    )
    layout_direction: LayoutDirection = Field(
        default=LayoutDirection.LR,
        description="Left-to-right is the mindmap convention"
    )
    layout_margin: float = Field(default=40.0, ge=0)

    # Viewport Culling Parameters
    viewport_padding: float = Field(
        default=500.0,
        ge=0,
        description="World-space margin around the visible area; at least one node wide"
    )
    viewport_min_zoom_threshold: float = Field(
        default=0.1,
        gt=0,
        description="Below this zoom, render simplified placeholders"
    )
    viewport_debounce_seconds: float = Field(
        default=0.1,
        ge=0,
        description="Camera-move events are coalesced over this interval"
    )

    # Render Parameters
    render_max_words: int = Field(
        default=20,
        ge=1,
        description="Node cards show at most this many words of the query/response"
    )

    # Diagnostics
    log_level: str = "INFO"
    strict_validation: bool = Field(
        default=False,
        description="Check tree and layout invariants after every session mutation"
    )

    def layout_config(self) -> LayoutConfig:
        """Layout tunables from settings."""
        return LayoutConfig(
            node_width=self.layout_node_width,
            node_height=self.layout_node_height,
            rank_separation=self.layout_rank_separation,
            node_separation=self.layout_node_separation,
            direction=self.layout_direction,
            margin=self.layout_margin,
        )

    def viewport_config(self) -> ViewportConfig:
        """Culling thresholds from settings."""
        return ViewportConfig(
            padding_x=self.viewport_padding,
            padding_y=self.viewport_padding,
            min_zoom_threshold=self.viewport_min_zoom_threshold,
        )


def get_dev_settings() -> Settings:
    """Get development environment settings."""
    return Settings(
        environment=Environment.DEV,
        log_level="DEBUG",
        strict_validation=True,
    )


def get_prod_settings() -> Settings:
    """Get production environment settings."""
    return Settings(
        environment=Environment.PROD,
        log_level="WARNING",
        strict_validation=False,
    )


def get_test_settings() -> Settings:
    """Get test environment settings."""
    return Settings(
        environment=Environment.TEST,
        viewport_debounce_seconds=0.01,
        strict_validation=True,
    )


# Global settings instance
settings = Settings()
