"""Test helpers for arbor-chat."""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

from arbor_ai.errors import CollaboratorError
from arbor_ai.types import Turn
from arbor_session.store import SessionStore


class ScriptedCompletion:
    """Completion function that replays canned replies and records its inputs."""

    def __init__(self, replies: Optional[Sequence[str]] = None, *, default: str = "ok") -> None:
        self.replies: List[str] = list(replies or [])
        self.default = default
        self.calls: List[List[Turn]] = []
        self.errors: List[Exception] = []

    def fail_next(self, error: Exception) -> None:
        self.errors.append(error)

    async def __call__(self, turns: Sequence[Turn]) -> str:
        self.calls.append(list(turns))
        await asyncio.sleep(0)
        if self.errors:
            raise self.errors.pop(0)
        if self.replies:
            return self.replies.pop(0)
        return self.default


async def failing_completion(_turns: Sequence[Turn]) -> str:
    raise CollaboratorError("Rate limit exceeded. Please try again later.", kind="rate_limit", status_code=429)


def build_chain(store: SessionStore, session_id: str, pairs: int) -> List[str]:
    """Append ``pairs`` user/assistant turns and return the node ids in order."""
    ids: List[str] = []
    for index in range(pairs):
        user_id = store.append_user_turn(session_id, f"question {index}")
        assistant_id = store.append_assistant_turn(session_id, user_id, f"answer {index}")
        ids.extend([user_id, assistant_id])
    return ids


def walk_to_root(store: SessionStore, session_id: str, node_id: str) -> List[str]:
    path: List[str] = []
    current: Optional[str] = node_id
    while current is not None:
        path.append(current)
        current = store.get_node(session_id, current).parent_id
    return list(reversed(path))
