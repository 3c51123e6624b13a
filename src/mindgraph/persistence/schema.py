"""Wire schemas for saving and loading mindmaps.

Records are validated and normalized here, at the boundary, so the rest of
the engine can trust node shapes. Keys on the wire are camelCase.
"""

from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    model_serializer,
    model_validator,
)

from mindgraph.models.node import GraphEdge, GraphNode, edge_id, utc_now_iso


class WireModel(BaseModel):
    """Base for wire records: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# Graph records
# ============================================================================


class NodeRecord(WireModel):
    """Persisted node: {id, parentId|null, content, response, createdAt, metadata?}."""

    id: str = Field(min_length=1)
    parent_id: str | None = Field(default=None, alias="parentId")
    content: str = ""
    response: str = ""
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")
    metadata: dict[str, Any] | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Older backend records store the query text under "query"
        if data.get("content") is None and "query" in data:
            data["content"] = data.pop("query")
        if data.get("content") is None:
            data.pop("content", None)
        for key in ("createdAt", "created_at"):
            if isinstance(data.get(key), datetime):
                data[key] = data[key].isoformat()
        if data.get("parentId") == "":
            data["parentId"] = None
        if data.get("response") is None:
            data.pop("response", None)
        return data

    def to_node(self) -> GraphNode:
        return GraphNode(
            id=self.id,
            parent_id=self.parent_id,
            content=self.content,
            response=self.response,
            created_at=self.created_at,
            metadata=dict(self.metadata) if self.metadata else None,
        )

    @classmethod
    def from_node(cls, node: GraphNode) -> "NodeRecord":
        return cls(
            id=node.id,
            parent_id=node.parent_id,
            content=node.content,
            response=node.response,
            created_at=node.created_at,
            metadata=dict(node.metadata) if node.metadata else None,
        )

    @model_serializer(mode="wrap")
    def _keep_parent_id(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> dict[str, Any]:
        # parentId is always present, null for roots, even under exclude_none
        data = handler(self)
        data["parentId" if info.by_alias else "parent_id"] = self.parent_id
        return data


class EdgeRecord(WireModel):
    """Persisted edge: {id, source, target} with id = "{source}->{target}"."""

    id: str = ""
    source: str = Field(min_length=1)
    target: str = Field(min_length=1)

    @model_validator(mode="after")
    def _derive_id(self) -> "EdgeRecord":
        if not self.id:
            self.id = edge_id(self.source, self.target)
        return self

    def to_edge(self) -> GraphEdge:
        return GraphEdge(id=self.id, source=self.source, target=self.target)

    @classmethod
    def from_edge(cls, edge: GraphEdge) -> "EdgeRecord":
        return cls(id=edge.id, source=edge.source, target=edge.target)


class GraphData(WireModel):
    """Flat node and edge lists. ``edges`` may be absent on load."""

    nodes: list[NodeRecord] = Field(default_factory=list)
    edges: list[EdgeRecord] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _null_lists(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {k: (v if v is not None else []) for k, v in data.items()}
        return data


# ============================================================================
# Save / load contracts
# ============================================================================


class SaveMetadata(WireModel):
    """Denormalized counts for fast queries on the backend."""

    node_count: int = Field(default=0, ge=0, alias="nodeCount")
    root_node_count: int = Field(default=0, ge=0, alias="rootNodeCount")
    max_depth: int = Field(default=0, ge=0, alias="maxDepth")


class SaveMindmapRequest(WireModel):
    """What is sent to the backend on save."""

    id: str
    name: str
    graph_data: GraphData = Field(default_factory=GraphData, alias="graphData")
    metadata: SaveMetadata = Field(default_factory=SaveMetadata)


class LoadMindmapResponse(WireModel):
    """What the backend returns on load."""

    id: str = ""
    name: str = ""
    graph_data: GraphData = Field(default_factory=GraphData, alias="graphData")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @model_validator(mode="before")
    @classmethod
    def _legacy_layout(cls, data: Any) -> Any:
        # The legacy load endpoint returns bare {nodes, edges}
        if isinstance(data, dict) and "graphData" not in data and "graph_data" not in data:
            if "nodes" in data or "edges" in data:
                data = dict(data)
                data["graphData"] = {
                    "nodes": data.pop("nodes", None),
                    "edges": data.pop("edges", None),
                }
        return data
