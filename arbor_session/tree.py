"""Tree projections of a session's node table."""

from __future__ import annotations

from typing import Iterator, List, Mapping, Optional, Tuple

from .types import MessageNode, TreeNode

# All traversals below walk an explicit stack, so chain depth is bounded by
# memory rather than by the interpreter's recursion limit.


def iter_preorder(nodes: Mapping[str, MessageNode], from_node_id: Optional[str]) -> Iterator[Tuple[str, int]]:
    """Yield ``(node_id, depth)`` in pre-order, children in creation order."""
    if from_node_id is None or from_node_id not in nodes:
        return
    stack: List[Tuple[str, int]] = [(from_node_id, 0)]
    while stack:
        node_id, depth = stack.pop()
        yield node_id, depth
        children = [child for child in nodes[node_id].child_ids if child in nodes]
        for child_id in reversed(children):
            stack.append((child_id, depth + 1))


def build_tree(nodes: Mapping[str, MessageNode], from_node_id: Optional[str]) -> Optional[TreeNode]:
    if from_node_id is None or from_node_id not in nodes:
        return None

    root: Optional[TreeNode] = None
    stack: List[Tuple[str, Optional[TreeNode]]] = [(from_node_id, None)]
    while stack:
        node_id, parent = stack.pop()
        node = nodes[node_id]
        tree_node = TreeNode(
            id=node.id,
            role=node.role,
            content=node.content,
            label=node.label,
            display_name=node.display_name,
            timestamp=node.created_at,
            children=[],
        )
        if parent is None:
            root = tree_node
        else:
            parent.children.append(tree_node)
        children = [child for child in node.child_ids if child in nodes]
        for child_id in reversed(children):
            stack.append((child_id, tree_node))
    return root


def leaf_ids(nodes: Mapping[str, MessageNode], root_id: Optional[str]) -> List[str]:
    return [node_id for node_id, _ in iter_preorder(nodes, root_id) if not nodes[node_id].child_ids]


def deepest_leaf(nodes: Mapping[str, MessageNode], root_id: Optional[str]) -> Optional[str]:
    """Leaf with the longest root path; the earliest in pre-order wins ties."""
    best: Optional[str] = None
    best_depth = -1
    for node_id, depth in iter_preorder(nodes, root_id):
        if nodes[node_id].child_ids:
            continue
        if depth > best_depth:
            best, best_depth = node_id, depth
    return best


def search(nodes: Mapping[str, MessageNode], root_id: Optional[str], term: str) -> List[str]:
    """Assistant nodes whose display name contains ``term``, ignoring case."""
    needle = term.lower()
    matches: List[str] = []
    for node_id, _ in iter_preorder(nodes, root_id):
        node = nodes[node_id]
        if node.role != "user" and needle in node.display_name.lower():
            matches.append(node_id)
    return matches
