"""Mindmap session - owns the live graph and its layout.

Data flow:
1. A caller mutates the session (add/remove/update node, hydrate)
2. The graph is replaced by the new value returned by the graph model
3. The layout is recomputed before the call returns
4. The viewport culler reads the latest graph/layout snapshot
5. Listeners (the external renderer) are notified

There is never a moment where a reader sees a graph paired with a stale
layout. A failed mutation leaves both untouched.

Sessions are explicit objects owned by the caller; any number may coexist.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from mindgraph.config import Settings, settings as default_settings
from mindgraph.graph.errors import InvalidSessionStateError
from mindgraph.graph.model import (
    Graph,
    add_node as graph_add_node,
    collect_subtree,
    create_graph,
    find_tree_violations,
    get_children,
    get_root_nodes,
    is_valid_tree,
    remove_node as graph_remove_node,
    update_node as graph_update_node,
)
from mindgraph.layout.engine import check_overlaps, compute_layout, validate_layout
from mindgraph.models.layout import Layout, LayoutConfig, NodeLayout
from mindgraph.models.node import GraphEdge, GraphNode
from mindgraph.models.viewport import Viewport, ViewportConfig
from mindgraph.persistence.adapter import (
    graph_data_to_serialized,
    parse_load_response,
    prepare_save_request,
    serialize_mindmap,
)
from mindgraph.persistence.schema import LoadMindmapResponse, SaveMindmapRequest
from mindgraph.render.elements import RenderElements, graph_to_render_elements
from mindgraph.session.hydration import HydrationPlan, topological_sort
from mindgraph.viewport.culler import CullResult, compute_viewport_bounds, filter_to_viewport
from mindgraph.viewport.debounce import ViewportDebouncer

logger = logging.getLogger(__name__)

# Fields whose change can move nodes: structure and sibling order
LAYOUT_FIELDS = frozenset({"parent_id", "created_at"})


class SessionState(str, Enum):
    """Lifecycle of a session."""

    UNINITIALIZED = "uninitialized"
    HYDRATING = "hydrating"
    READY = "ready"
    MUTATING = "mutating"  # Transient, re-enters READY


@dataclass(frozen=True)
class UIState:
    """Selection and modal state exposed to the rendering layer."""

    selected_node_id: str | None = None
    expanded_node_id: str | None = None
    is_loading: bool = False
    error: str | None = None


SessionListener = Callable[["MindmapSession"], None]


class MindmapSession:
    """Live graph + layout + UI selection for one mindmap."""

    def __init__(
        self,
        graph: Graph | None = None,
        layout_config: LayoutConfig | None = None,
        viewport_config: ViewportConfig | None = None,
        app_settings: Settings | None = None,
    ) -> None:
        self.settings = app_settings or default_settings
        self._layout_config = layout_config or self.settings.layout_config()
        self.viewport_config = viewport_config or self.settings.viewport_config()
        self.viewport = Viewport()
        self.ui = UIState()
        self._listeners: list[SessionListener] = []

        self._graph = create_graph()
        self._layout = Layout.empty()
        self._state = SessionState.UNINITIALIZED

        if graph is not None:
            self._graph = graph
            self._layout = compute_layout(graph, self._layout_config)
            self._state = SessionState.READY

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def layout(self) -> Layout:
        return self._layout

    @property
    def layout_config(self) -> LayoutConfig:
        return self._layout_config

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` after every completed change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _require(self, *allowed: SessionState) -> None:
        if self._state not in allowed:
            raise InvalidSessionStateError(
                f"Operation not allowed in state {self._state.value}; "
                f"expected one of {[s.value for s in allowed]}"
            )

    def _check_invariants(self) -> None:
        if not self.settings.strict_validation:
            return
        problems = find_tree_violations(self._graph)
        if problems:
            logger.warning(f"Graph invariants violated: {problems}")
        if not validate_layout(self._graph, self._layout):
            logger.warning("Layout does not cover the graph")
        overlaps = check_overlaps(self._layout)
        if overlaps:
            logger.warning(f"Layout has {len(overlaps)} overlapping node pairs")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Enter READY with an empty graph."""
        self._require(SessionState.UNINITIALIZED)
        self._graph = create_graph()
        self._layout = compute_layout(self._graph, self._layout_config)
        self._state = SessionState.READY
        self._notify()

    def hydrate(self, nodes: Iterable[GraphNode]) -> HydrationPlan:
        """
        Replace the graph with ``nodes`` loaded in bulk.

        Nodes are topologically sorted and added one at a time. Dangling
        parent references are demoted to roots instead of failing the load.

        Returns:
            The HydrationPlan, listing any repaired records
        """
        self._require(SessionState.UNINITIALIZED, SessionState.READY)
        previous = self._state
        self._state = SessionState.HYDRATING
        try:
            plan = topological_sort(nodes)
            graph = create_graph()
            for node in plan.ordered:
                graph = graph_add_node(graph, node)
            layout = compute_layout(graph, self._layout_config)
        except Exception:
            self._state = previous
            raise

        self._graph = graph
        self._layout = layout
        self.ui = replace(self.ui, selected_node_id=None, expanded_node_id=None, is_loading=False, error=None)
        self._state = SessionState.READY
        logger.info(
            f"Hydrated session with {graph.node_count} nodes, {graph.edge_count} edges "
            f"({len(plan.demoted)} demoted)"
        )
        self._check_invariants()
        self._notify()
        return plan

    def load(self, response: Mapping[str, Any] | LoadMindmapResponse) -> HydrationPlan:
        """Hydrate from a backend load response. Layout is always recomputed."""
        parsed = parse_load_response(response)
        serialized = graph_data_to_serialized(parsed.graph_data)
        return self.hydrate(serialized.nodes)

    def reset(self) -> None:
        """Drop everything and return to UNINITIALIZED."""
        self._graph = create_graph()
        self._layout = Layout.empty()
        self.ui = UIState()
        self.viewport = Viewport()
        self._state = SessionState.UNINITIALIZED
        logger.info("Session reset")
        self._notify()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _apply(self, operation: Callable[[Graph], Graph], recompute: bool = True) -> None:
        """Run a graph operation and swap in the result with its layout."""
        self._require(SessionState.READY)
        self._state = SessionState.MUTATING
        try:
            graph = operation(self._graph)
            layout = compute_layout(graph, self._layout_config) if recompute else self._layout
        finally:
            self._state = SessionState.READY
        self._graph = graph
        self._layout = layout
        self._check_invariants()
        self._notify()

    def add_node(self, node: GraphNode) -> None:
        """Add a root or child node. Raises NodeReferenceError for an unknown parent."""
        self._apply(lambda g: graph_add_node(g, node))

    def remove_node(self, node_id: str) -> None:
        """Remove a node and its subtree, clearing selection inside it."""
        self._require(SessionState.READY)
        removed = collect_subtree(self._graph, node_id)
        self._apply(lambda g: graph_remove_node(g, node_id))

        ui = self.ui
        if ui.selected_node_id in removed:
            ui = replace(ui, selected_node_id=None)
        if ui.expanded_node_id in removed:
            ui = replace(ui, expanded_node_id=None)
        self.ui = ui

    def update_node(self, node_id: str, updates: Mapping[str, Any] | None = None, **fields: Any) -> None:
        """Merge fields onto a node.

        Content-only updates keep the current layout; changes to the parent or
        to the ordering timestamp recompute it.
        """
        changes = {**(updates or {}), **fields}
        existing = self._graph.nodes.get(node_id)
        moves_nodes = existing is not None and any(
            key in LAYOUT_FIELDS and getattr(existing, key) != value for key, value in changes.items()
        )
        self._apply(lambda g: graph_update_node(g, node_id, changes), recompute=moves_nodes)

    # ------------------------------------------------------------------
    # Layout control
    # ------------------------------------------------------------------

    def recompute_layout(self) -> None:
        self._require(SessionState.READY)
        self._apply(lambda g: g)

    def set_layout_config(self, config: LayoutConfig) -> None:
        """Switch tunables and recompute. Persisted data is unaffected."""
        self._layout_config = config
        if self._state is SessionState.READY:
            self._apply(lambda g: g)

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def set_viewport(self, viewport: Viewport) -> None:
        self.viewport = viewport

    def visible_elements(
        self, container_width: float, container_height: float
    ) -> CullResult[GraphNode, GraphEdge]:
        """Nodes and edges near the current camera, from the latest snapshot."""
        bounds = compute_viewport_bounds(
            container_width, container_height, self.viewport, self.viewport_config
        )
        return filter_to_viewport(
            self._graph.nodes.values(), self._graph.edges.values(), self._layout, bounds
        )

    def render_elements(self, container_width: float, container_height: float) -> RenderElements:
        """Positioned render elements for the nodes and edges near the camera."""
        elements = graph_to_render_elements(self._graph, self._layout, self.settings.render_max_words)
        bounds = compute_viewport_bounds(
            container_width, container_height, self.viewport, self.viewport_config
        )
        visible = filter_to_viewport(elements.nodes, elements.edges, self._layout, bounds)
        return RenderElements(nodes=visible.visible_nodes, edges=visible.visible_edges)

    def create_culling_debouncer(
        self,
        container_width: float,
        container_height: float,
        on_result: Callable[[CullResult[GraphNode, GraphEdge]], None],
        delay: float | None = None,
    ) -> ViewportDebouncer:
        """Debouncer that culls once per burst of camera moves.

        Feed it camera changes with ``notify(viewport)``; when the camera
        settles the session viewport is updated and ``on_result`` receives
        the culled elements.
        """

        def cull(viewport: Viewport) -> None:
            self.set_viewport(viewport)
            on_result(self.visible_elements(container_width, container_height))

        return ViewportDebouncer(
            cull, delay=self.settings.viewport_debounce_seconds if delay is None else delay
        )

    # ------------------------------------------------------------------
    # UI state
    # ------------------------------------------------------------------

    def select_node(self, node_id: str | None) -> None:
        self.ui = replace(self.ui, selected_node_id=node_id)

    def deselect_all(self) -> None:
        self.ui = replace(self.ui, selected_node_id=None)

    def expand_node(self, node_id: str | None) -> None:
        self.ui = replace(self.ui, expanded_node_id=node_id)

    def set_loading(self, is_loading: bool) -> None:
        self.ui = replace(self.ui, is_loading=is_loading)

    def set_error(self, error: str | None) -> None:
        self.ui = replace(self.ui, error=error)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_node_layout(self, node_id: str) -> NodeLayout | None:
        return self._layout.nodes.get(node_id)

    def get_node_children(self, node_id: str) -> list[GraphNode]:
        return get_children(self._graph, node_id)

    def get_root_nodes(self) -> list[GraphNode]:
        return get_root_nodes(self._graph)

    def is_graph_valid(self) -> bool:
        return is_valid_tree(self._graph)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_save_request(self, mindmap_id: str, name: str) -> SaveMindmapRequest:
        """Save payload for the current graph. The layout is never included."""
        return prepare_save_request(serialize_mindmap(mindmap_id, name, self._graph))
