"""Branching conversation store for arbor-chat."""

from .chat import ChatReply, ChatService
from .errors import (
    CollaboratorError,
    InvariantViolation,
    LabelingFailure,
    MessageNotFound,
    SessionNotFound,
    StoreError,
    ValidationError,
)
from .invariants import check_invariants
from .labels import fallback_label, label_node
from .resolver import resolve_path, resolve_turns
from .store import SessionStore
from .tree import build_tree, deepest_leaf, iter_preorder, leaf_ids
from .types import (
    BranchStats,
    MessageNode,
    MessageView,
    Session,
    SessionTreeView,
    SessionView,
    TreeNode,
)

__all__ = [
    "BranchStats",
    "ChatReply",
    "ChatService",
    "CollaboratorError",
    "InvariantViolation",
    "LabelingFailure",
    "MessageNode",
    "MessageNotFound",
    "MessageView",
    "Session",
    "SessionNotFound",
    "SessionStore",
    "SessionTreeView",
    "SessionView",
    "StoreError",
    "TreeNode",
    "ValidationError",
    "build_tree",
    "check_invariants",
    "deepest_leaf",
    "fallback_label",
    "iter_preorder",
    "label_node",
    "leaf_ids",
    "resolve_path",
    "resolve_turns",
]
