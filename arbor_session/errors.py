"""Errors raised by the session store."""

from __future__ import annotations

from arbor_ai.errors import CollaboratorError

__all__ = [
    "CollaboratorError",
    "InvariantViolation",
    "LabelingFailure",
    "MessageNotFound",
    "SessionNotFound",
    "StoreError",
    "ValidationError",
]


class StoreError(Exception):
    """Base class for request-scoped store failures."""


class ValidationError(StoreError, ValueError):
    pass


class SessionNotFound(StoreError, KeyError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id

    def __str__(self) -> str:
        return self.args[0]


class MessageNotFound(StoreError, KeyError):
    def __init__(self, message_id: str) -> None:
        super().__init__(f"Message not found: {message_id}")
        self.message_id = message_id

    def __str__(self) -> str:
        return self.args[0]


class InvariantViolation(StoreError, RuntimeError):
    """The node table no longer forms a valid tree."""


class LabelingFailure(StoreError):
    """Label generation failed; callers fall back to a local label."""
