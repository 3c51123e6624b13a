"""Ordering of bulk-loaded nodes so that parents precede children.

``add_node`` requires a node's parent to be present already, so nodes
coming from storage are sorted first (Kahn's algorithm, breadth-first from
the roots). Malformed input is repaired instead of rejected: a node whose
parent never appears is demoted to a root, so one bad record cannot fail a
whole load.
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Iterable

from mindgraph.models.node import GraphNode

logger = logging.getLogger(__name__)


@dataclass
class HydrationPlan:
    """Nodes in insertion order plus a record of what had to be repaired."""

    ordered: list[GraphNode] = field(default_factory=list)
    demoted: list[str] = field(default_factory=list)  # parent_id nulled
    duplicates: list[str] = field(default_factory=list)  # later copies skipped


def topological_sort(nodes: Iterable[GraphNode]) -> HydrationPlan:
    """
    Sort nodes so every parent appears before its children.

    Nodes are taken breadth-first from the roots; siblings keep their input
    order. A node whose parent is absent from the input, or that is only
    reachable through a cycle, is demoted to a root; its own children keep
    their parent.

    Args:
        nodes: Nodes in any order, possibly with dangling parent references

    Returns:
        HydrationPlan whose ``ordered`` list can be fed to add_node one by one
    """
    plan = HydrationPlan()

    unique: list[GraphNode] = []
    seen: set[str] = set()
    for node in nodes:
        if node.id in seen:
            plan.duplicates.append(node.id)
            continue
        seen.add(node.id)
        unique.append(node)

    children_of: dict[str, list[GraphNode]] = defaultdict(list)
    for node in unique:
        if node.parent_id is not None:
            children_of[node.parent_id].append(node)

    reached: set[str] = set()
    queue: deque[GraphNode] = deque()

    def demote(node: GraphNode) -> GraphNode:
        plan.demoted.append(node.id)
        return node.with_updates(parent_id=None)

    def drain() -> None:
        while queue:
            current = queue.popleft()
            plan.ordered.append(current)
            for child in children_of.get(current.id, ()):
                if child.id not in reached:
                    reached.add(child.id)
                    queue.append(child)

    for node in unique:
        if node.parent_id is None:
            reached.add(node.id)
            queue.append(node)
        elif node.parent_id not in seen:
            reached.add(node.id)
            queue.append(demote(node))
    drain()

    # Whatever is left hangs off a cycle; enter each cycle at its first node
    for node in unique:
        if node.id not in reached:
            reached.add(node.id)
            queue.append(demote(node))
            drain()

    if plan.demoted:
        logger.warning(f"Demoted {len(plan.demoted)} nodes with unresolved parents to roots: {plan.demoted}")
    if plan.duplicates:
        logger.warning(f"Skipped {len(plan.duplicates)} duplicate node ids: {plan.duplicates}")

    return plan
