"""Factory helpers for embedding arbor-chat."""

from __future__ import annotations

from typing import Optional

from arbor_ai.complete import bind_complete
from arbor_ai.models import get_model
from arbor_ai.types import CompleteFunction, CompletionOptions
from arbor_session.chat import ChatService
from arbor_session.store import SessionStore

from .config import Settings, load_settings

LABEL_MAX_TOKENS = 32


def create_complete_fn(settings: Settings, *, api_key: Optional[str] = None) -> CompleteFunction:
    model = get_model(settings.provider, settings.model_id)
    options = CompletionOptions(
        api_key=api_key,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        system_prompt=settings.system_prompt,
        timeout=settings.timeout,
    )
    return bind_complete(model, options)


def create_label_fn(settings: Settings, *, api_key: Optional[str] = None) -> CompleteFunction:
    provider = settings.label_provider or settings.provider
    model = get_model(provider, settings.label_model_id or settings.model_id)
    options = CompletionOptions(
        api_key=api_key if provider == settings.provider else None,
        max_tokens=LABEL_MAX_TOKENS,
        temperature=0.0,
        timeout=settings.label_timeout,
    )
    return bind_complete(model, options)


def create_chat_service(
    settings: Optional[Settings] = None,
    *,
    store: Optional[SessionStore] = None,
    complete_fn: Optional[CompleteFunction] = None,
    label_fn: Optional[CompleteFunction] = None,
    api_key: Optional[str] = None,
) -> ChatService:
    resolved = settings or load_settings()
    resolved_complete = complete_fn or create_complete_fn(resolved, api_key=api_key)
    if label_fn is None and resolved.labels and complete_fn is None:
        label_fn = create_label_fn(resolved, api_key=api_key)
    return ChatService(
        store or SessionStore(),
        resolved_complete,
        label_fn=label_fn,
        labels_enabled=resolved.labels,
        label_timeout=resolved.label_timeout,
    )
