"""Provider implementations."""

from __future__ import annotations

from .anthropic import complete_anthropic
from .openai import complete_openai_completions

__all__ = [
    "anthropic",
    "openai",
    "complete_anthropic",
    "complete_openai_completions",
]
