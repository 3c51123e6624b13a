"""Conversation node and edge models - the logical units of the graph."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

EDGE_ID_SEPARATOR = "->"


def edge_id(source: str, target: str) -> str:
    """Build the deterministic edge id for an ordered (source, target) pair."""
    return f"{source}{EDGE_ID_SEPARATOR}{target}"


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def parse_datetime(value: Any) -> datetime | None:
    """Parse datetime from various formats (ISO string, epoch seconds, or native datetime)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    text = str(value)
    # fromisoformat() only learned the trailing "Z" in 3.11
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class GraphNode:
    """
    A single conversation turn: the user's query and the generated response.

    A node has zero or one parent. ``parent_id=None`` marks a root.
    """

    id: str
    parent_id: str | None = None  # None = root node
    content: str = ""  # The user's original query
    response: str = ""  # The generated response
    created_at: str = field(default_factory=utc_now_iso)  # ISO 8601

    # Optional extension bag, validated at the persistence boundary
    metadata: dict[str, Any] | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def with_updates(self, **updates: Any) -> "GraphNode":
        """Return a copy with fields merged in. The id never changes."""
        updates.pop("id", None)
        return replace(self, **updates)

    def to_dict(self) -> dict:
        """Convert to the persisted node record."""
        data = {
            "id": self.id,
            "parentId": self.parent_id,
            "content": self.content,
            "response": self.response,
            "createdAt": self.created_at,
        }
        if self.metadata is not None:
            data["metadata"] = dict(self.metadata)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "GraphNode":
        """Create from a persisted node record.

        Older backend records store the query under ``query`` instead of
        ``content``; both are accepted.
        """
        content = data.get("content")
        if content is None:
            content = data.get("query", "")
        created_at = data.get("createdAt", data.get("created_at"))
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()
        metadata = data.get("metadata")
        return cls(
            id=str(data["id"]),
            parent_id=data.get("parentId", data.get("parent_id")) or None,
            content=content or "",
            response=data.get("response") or "",
            created_at=created_at or utc_now_iso(),
            metadata=dict(metadata) if metadata else None,
        )


@dataclass(frozen=True)
class GraphEdge:
    """
    A derived parent -> child edge.

    Edges are never authored directly; they always follow from a node's
    ``parent_id``.
    """

    id: str  # Deterministic: "{source}->{target}"
    source: str
    target: str

    @classmethod
    def between(cls, source: str, target: str) -> "GraphEdge":
        """Create the edge for an ordered (source, target) pair."""
        return cls(id=edge_id(source, target), source=source, target=target)

    def to_dict(self) -> dict:
        """Convert to the persisted edge record."""
        return {"id": self.id, "source": self.source, "target": self.target}

    @classmethod
    def from_dict(cls, data: dict) -> "GraphEdge":
        """Create from a persisted edge record, deriving the id if absent."""
        source = str(data["source"])
        target = str(data["target"])
        return cls(id=data.get("id") or edge_id(source, target), source=source, target=target)
