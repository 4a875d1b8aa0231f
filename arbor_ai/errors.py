"""Errors raised by the completion layer."""

from __future__ import annotations

from typing import Literal, Optional

ErrorKind = Literal["auth", "rate_limit", "upstream", "empty"]


class CollaboratorError(RuntimeError):
    """The completion service failed; the request may be retried."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = "upstream",
        status_code: Optional[int] = None,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.details = details
        self.user_message_id: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return self.kind in {"rate_limit", "upstream", "empty"}


def error_from_status(status_code: int, body: str = "") -> CollaboratorError:
    if status_code == 401:
        return CollaboratorError(
            "Invalid API key. Check the provider API key in your environment or .env file.",
            kind="auth",
            status_code=status_code,
            details=body or None,
        )
    if status_code == 429:
        return CollaboratorError(
            "Rate limit exceeded. Please try again later.",
            kind="rate_limit",
            status_code=status_code,
            details=body or None,
        )
    return CollaboratorError(
        f"Completion request failed with status {status_code}",
        kind="upstream",
        status_code=status_code,
        details=body or None,
    )
