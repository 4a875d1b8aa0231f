"""Chat turns on top of the session store."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, Optional, Set

from pydantic import BaseModel, ConfigDict

from arbor_ai.errors import CollaboratorError
from arbor_ai.types import CompleteFunction

from .errors import SessionNotFound, ValidationError
from .labels import label_node
from .store import SessionStore

logger = logging.getLogger(__name__)


class ChatReply(BaseModel):
    model_config = ConfigDict(extra="forbid")

    response: str
    message_id: str
    user_message_id: str


class ChatService:
    """Runs a user turn through the completion collaborator.

    Chat calls on one session are serialized by a per-session asyncio lock.
    The store itself is never locked while the collaborator is awaited, so
    other sessions, branch switches and reads proceed meanwhile.
    """

    def __init__(
        self,
        store: SessionStore,
        complete_fn: CompleteFunction,
        *,
        label_fn: Optional[CompleteFunction] = None,
        labels_enabled: bool = True,
        label_timeout: Optional[float] = 15.0,
        timeout: Optional[float] = None,
    ) -> None:
        self._store = store
        self._complete_fn = complete_fn
        self._label_fn = label_fn
        self._labels_enabled = labels_enabled
        self._label_timeout = label_timeout
        self._timeout = timeout
        self._session_locks: Dict[str, asyncio.Lock] = {}
        self._label_tasks: Set[asyncio.Task] = set()

    @property
    def store(self) -> SessionStore:
        return self._store

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        if not self._store.has_session(session_id):
            raise SessionNotFound(session_id)
        lock = self._session_locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._session_locks[session_id] = lock
        return lock

    async def chat(self, session_id: str, text: Optional[str]) -> ChatReply:
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Message is required")
        async with self._lock_for(session_id):
            user_id = self._store.append_user_turn(session_id, text)
            return await self._reply(session_id, user_id, label_user=True)

    async def regenerate(self, session_id: str, parent_id: Optional[str] = None) -> ChatReply:
        """Add another assistant reply under a user node without resubmitting its text."""
        async with self._lock_for(session_id):
            if parent_id is None:
                branch = self._store.get_active_branch(session_id)
                if not branch:
                    raise ValidationError("Session has no messages to reply to")
                parent_id = branch[-1]
            parent = self._store.get_node(session_id, parent_id)
            if parent.role != "user":
                raise ValidationError("Replies can only be generated for user messages")
            return await self._reply(session_id, parent_id, label_user=False)

    async def _reply(self, session_id: str, user_id: str, *, label_user: bool) -> ChatReply:
        turns = self._store.get_context_turns(session_id, user_id)
        try:
            text = await asyncio.wait_for(self._complete_fn(turns), self._timeout)
        except asyncio.TimeoutError as exc:
            raise self._failed(session_id, user_id, label_user, CollaboratorError("Completion timed out")) from exc
        except CollaboratorError as exc:
            raise self._failed(session_id, user_id, label_user, exc)
        except Exception as exc:
            logger.exception("Session %s: completion raised unexpectedly", session_id)
            error = CollaboratorError(f"Completion failed: {exc}", kind="upstream")
            raise self._failed(session_id, user_id, label_user, error) from exc

        if not isinstance(text, str) or not text.strip():
            error = CollaboratorError("Completion returned no text", kind="empty")
            raise self._failed(session_id, user_id, label_user, error)

        assistant_id = self._store.append_assistant_turn(session_id, user_id, text)
        self._schedule_labels(session_id, [user_id, assistant_id] if label_user else [assistant_id])
        return ChatReply(response=text, message_id=assistant_id, user_message_id=user_id)

    def _failed(
        self, session_id: str, user_id: str, label_user: bool, error: CollaboratorError
    ) -> CollaboratorError:
        error.user_message_id = user_id
        logger.warning("Session %s: no reply for %s; user turn kept for retry", session_id, user_id)
        if label_user:
            self._schedule_labels(session_id, [user_id])
        return error

    def _schedule_labels(self, session_id: str, node_ids: Iterable[str]) -> None:
        if not self._labels_enabled:
            return
        for node_id in node_ids:
            task = asyncio.create_task(
                label_node(
                    self._store,
                    session_id,
                    node_id,
                    self._label_fn,
                    timeout=self._label_timeout,
                )
            )
            self._label_tasks.add(task)
            task.add_done_callback(self._label_tasks.discard)

    async def drain_labels(self) -> None:
        """Wait for outstanding label tasks."""
        while self._label_tasks:
            await asyncio.gather(*list(self._label_tasks))
