"""Session orchestration: the live graph, its layout and UI selection."""

from mindgraph.session.hydration import HydrationPlan, topological_sort
from mindgraph.session.orchestrator import (
    LAYOUT_FIELDS,
    MindmapSession,
    SessionState,
    UIState,
)

__all__ = [
    "MindmapSession",
    "SessionState",
    "UIState",
    "LAYOUT_FIELDS",
    "HydrationPlan",
    "topological_sort",
]
