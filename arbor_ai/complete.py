"""Unified completion entry point."""

from __future__ import annotations

from typing import Optional, Sequence

import httpx

from .providers import anthropic as anthropic_provider
from .providers import openai as openai_provider
from .types import CompleteFunction, CompletionOptions, Model, Turn


async def complete(
    model: Model,
    turns: Sequence[Turn],
    options: Optional[CompletionOptions] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    if model.api == "openai-completions":
        return await openai_provider.complete_openai_completions(model, turns, options, client=client)
    if model.api == "anthropic-messages":
        return await anthropic_provider.complete_anthropic(model, turns, options, client=client)
    raise NotImplementedError(f"Completion not implemented for API: {model.api}")


def bind_complete(
    model: Model,
    options: Optional[CompletionOptions] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> CompleteFunction:
    """Close over a model and options, leaving only the turns to supply."""

    async def run(turns: Sequence[Turn]) -> str:
        return await complete(model, turns, options, client=client)

    return run
