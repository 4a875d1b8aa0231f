"""Structural checks for a session's tree."""

from __future__ import annotations

from .errors import InvariantViolation
from .types import Session


def check_invariants(session: Session) -> None:
    nodes = session.nodes
    if not nodes:
        if session.root_id is not None:
            raise InvariantViolation("root_id set on an empty session")
        if session.active_branch:
            raise InvariantViolation("active branch set on an empty session")
        return

    if session.root_id is None or session.root_id not in nodes:
        raise InvariantViolation("non-empty session has no root")
    if nodes[session.root_id].parent_id is not None:
        raise InvariantViolation("root node has a parent")

    for node_id, node in nodes.items():
        if node.id != node_id:
            raise InvariantViolation(f"node stored under wrong key: {node_id}")
        if node.parent_id is None:
            if node_id != session.root_id:
                raise InvariantViolation(f"second root: {node_id}")
            continue
        parent = nodes.get(node.parent_id)
        if parent is None:
            raise InvariantViolation(f"dangling parent for {node_id}: {node.parent_id}")
        if parent.child_ids.count(node_id) != 1:
            raise InvariantViolation(f"{node_id} not linked exactly once under {node.parent_id}")

    for node_id, node in nodes.items():
        for child_id in node.child_ids:
            child = nodes.get(child_id)
            if child is None or child.parent_id != node_id:
                raise InvariantViolation(f"child link {node_id} -> {child_id} is inconsistent")

    # Every node must reach the root without revisiting anything.
    reachable = set()
    stack = [session.root_id]
    while stack:
        current = stack.pop()
        if current in reachable:
            raise InvariantViolation(f"cycle through {current}")
        reachable.add(current)
        stack.extend(nodes[current].child_ids)
    if len(reachable) != len(nodes):
        raise InvariantViolation("nodes unreachable from the root")

    branch = session.active_branch
    if branch:
        if branch[0] != session.root_id:
            raise InvariantViolation("active branch does not start at the root")
        for parent_id, child_id in zip(branch, branch[1:]):
            child = nodes.get(child_id)
            if child is None or child.parent_id != parent_id:
                raise InvariantViolation(f"active branch breaks between {parent_id} and {child_id}")
