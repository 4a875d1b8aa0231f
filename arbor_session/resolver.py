"""Root-to-node path resolution over a session's node table."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Set

from arbor_ai.types import Turn

from .errors import InvariantViolation, MessageNotFound
from .types import MessageNode


def resolve_path(nodes: Mapping[str, MessageNode], from_node_id: str) -> List[str]:
    """Return node ids from the root down to ``from_node_id``."""
    if from_node_id not in nodes:
        raise MessageNotFound(from_node_id)

    path: List[str] = []
    seen: Set[str] = set()
    current = from_node_id
    while current is not None:
        if current in seen:
            raise InvariantViolation(f"Cycle detected at node: {current}")
        node = nodes.get(current)
        if node is None:
            raise InvariantViolation(f"Dangling parent reference: {current}")
        seen.add(current)
        path.append(current)
        current = node.parent_id
    path.reverse()
    return path


def resolve_turns(nodes: Mapping[str, MessageNode], path: Iterable[str]) -> List[Turn]:
    turns: List[Turn] = []
    for node_id in path:
        node = nodes.get(node_id)
        if node is None:
            raise MessageNotFound(node_id)
        turns.append(Turn(role=node.role, content=node.content))
    return turns
