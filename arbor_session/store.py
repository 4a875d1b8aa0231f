"""In-memory store of branching conversation sessions."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from arbor_ai.types import Turn

from .errors import MessageNotFound, SessionNotFound, ValidationError
from .invariants import check_invariants
from .resolver import resolve_path, resolve_turns
from .tree import build_tree, deepest_leaf, leaf_ids, search
from .types import (
    BranchStats,
    MessageNode,
    MessageView,
    Role,
    Session,
    SessionTreeView,
    SessionView,
    generate_id,
)

logger = logging.getLogger(__name__)


@dataclass
class _Slot:
    session: Session
    lock: threading.RLock = field(default_factory=threading.RLock)


def _require_text(value: Optional[str], name: str) -> str:
    """Reject missing, empty and whitespace-only text; other text is stored unchanged."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    return value


class SessionStore:
    """Owns every session and is the only writer of their trees.

    Each session is guarded by its own lock. A mutation (node creation, parent
    link and active branch update) happens under a single acquisition, and
    readers take the same lock, so nobody observes a half-applied append.
    """

    def __init__(self) -> None:
        self._slots: Dict[str, _Slot] = {}
        self._registry_lock = threading.Lock()

    def create_session(self) -> str:
        session = Session(id=generate_id())
        with self._registry_lock:
            self._slots[session.id] = _Slot(session=session)
        logger.debug("Created session %s", session.id)
        return session.id

    def list_sessions(self) -> List[str]:
        with self._registry_lock:
            return list(self._slots)

    def has_session(self, session_id: str) -> bool:
        with self._registry_lock:
            return session_id in self._slots

    @contextmanager
    def _locked(self, session_id: str) -> Iterator[Session]:
        with self._registry_lock:
            slot = self._slots.get(session_id)
        if slot is None:
            raise SessionNotFound(session_id)
        with slot.lock:
            yield slot.session

    def _add_node(self, session: Session, role: Role, content: str, parent_id: Optional[str]) -> MessageNode:
        node = MessageNode(id=generate_id(), role=role, content=content, parent_id=parent_id)
        session.nodes[node.id] = node
        if parent_id is None:
            session.root_id = node.id
        else:
            session.nodes[parent_id].child_ids.append(node.id)
        return node

    def append_user_turn(self, session_id: str, text: Optional[str]) -> str:
        content = _require_text(text, "Message")
        with self._locked(session_id) as session:
            parent_id = session.active_branch[-1] if session.active_branch else None
            node = self._add_node(session, "user", content, parent_id)
            session.active_branch.append(node.id)
        logger.debug("Session %s: user node %s under %s", session_id, node.id, parent_id)
        return node.id

    def append_assistant_turn(self, session_id: str, parent_id: Optional[str], text: Optional[str]) -> str:
        content = _require_text(text, "Assistant text")
        parent_id = _require_text(parent_id, "parent_id")
        with self._locked(session_id) as session:
            if parent_id not in session.nodes:
                raise MessageNotFound(parent_id)
            if session.active_branch and session.active_branch[-1] == parent_id:
                branch = list(session.active_branch)
            else:
                branch = resolve_path(session.nodes, parent_id)
            node = self._add_node(session, "assistant", content, parent_id)
            branch.append(node.id)
            session.active_branch = branch
        logger.debug("Session %s: assistant node %s under %s", session_id, node.id, parent_id)
        return node.id

    def attach_label(self, session_id: str, node_id: str, label: Optional[str]) -> bool:
        """Set a node's label. Returns False instead of raising when it is gone."""
        try:
            with self._locked(session_id) as session:
                node = session.nodes.get(node_id)
                if node is None:
                    logger.debug("Session %s: label target %s missing", session_id, node_id)
                    return False
                node.label = label
        except SessionNotFound:
            logger.debug("Label for %s dropped: session %s missing", node_id, session_id)
            return False
        return True

    def switch_branch(self, session_id: str, target_node_id: Optional[str]) -> List[str]:
        target = _require_text(target_node_id, "fromMessageId")
        with self._locked(session_id) as session:
            branch = resolve_path(session.nodes, target)
            session.active_branch = branch
            result = list(branch)
        logger.debug("Session %s: switched to %s (depth %d)", session_id, target, len(result))
        return result

    def switch_to_main_branch(self, session_id: str) -> List[str]:
        with self._locked(session_id) as session:
            leaf = deepest_leaf(session.nodes, session.root_id)
            if leaf is None:
                return []
            session.active_branch = resolve_path(session.nodes, leaf)
            return list(session.active_branch)

    def get_active_branch(self, session_id: str) -> List[str]:
        with self._locked(session_id) as session:
            return list(session.active_branch)

    def get_node(self, session_id: str, node_id: str) -> MessageView:
        with self._locked(session_id) as session:
            node = session.nodes.get(node_id)
            if node is None:
                raise MessageNotFound(node_id)
            return MessageView.from_node(node)

    def get_session_view(self, session_id: str) -> SessionView:
        with self._locked(session_id) as session:
            return SessionView(
                session_id=session.id,
                messages=[MessageView.from_node(session.nodes[node_id]) for node_id in session.active_branch],
                active_branch=list(session.active_branch),
                created_at=session.created_at,
            )

    def get_tree(self, session_id: str, from_node_id: Optional[str] = None) -> SessionTreeView:
        with self._locked(session_id) as session:
            start = from_node_id if from_node_id is not None else session.root_id
            return SessionTreeView(
                session_id=session.id,
                tree=build_tree(session.nodes, start),
                active_branch=list(session.active_branch),
                created_at=session.created_at,
            )

    def get_context_turns(self, session_id: str, node_id: Optional[str] = None) -> List[Turn]:
        """Role/content turns along the active branch, or along the path to ``node_id``."""
        with self._locked(session_id) as session:
            path = session.active_branch if node_id is None else resolve_path(session.nodes, node_id)
            return resolve_turns(session.nodes, path)

    def get_branch_stats(self, session_id: str) -> BranchStats:
        with self._locked(session_id) as session:
            return BranchStats(
                path_length=len(session.active_branch),
                total_branches=len(leaf_ids(session.nodes, session.root_id)),
                node_count=len(session.nodes),
                main_leaf_id=deepest_leaf(session.nodes, session.root_id),
            )

    def verify(self, session_id: str) -> None:
        """Raise InvariantViolation if the session's tree is malformed."""
        with self._locked(session_id) as session:
            check_invariants(session)

    def search(self, session_id: str, term: Optional[str]) -> List[str]:
        needle = _require_text(term, "Search term").strip()
        with self._locked(session_id) as session:
            return search(session.nodes, session.root_id, needle)
