"""Core types for completion requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

Api = Literal["openai-completions", "anthropic-messages"]
Role = Literal["user", "assistant"]


class Turn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: Role
    content: str


class Model(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    api: Api
    provider: str
    name: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    context_window: Optional[int] = None
    max_tokens: Optional[int] = None
    headers: Dict[str, str] = Field(default_factory=dict)


@dataclass
class CompletionOptions:
    api_key: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    system_prompt: Optional[str] = None
    timeout: Optional[float] = None


CompleteFunction = Callable[[Sequence[Turn]], Awaitable[str]]
