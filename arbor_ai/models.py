"""Model registry."""

from __future__ import annotations

from typing import Dict, List, Tuple

from .types import Model

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_ANTHROPIC_BASE_URL = "https://api.anthropic.com/v1"
DEFAULT_MAX_TOKENS = 5000

_OPENAI_COMPATIBLE_BASE_URLS: Dict[str, str] = {
    "openai": DEFAULT_OPENAI_BASE_URL,
    "openrouter": "https://openrouter.ai/api/v1",
    "groq": "https://api.groq.com/openai/v1",
    "xai": "https://api.x.ai/v1",
    "mistral": "https://api.mistral.ai/v1",
}

_MODEL_REGISTRY: Dict[Tuple[str, str], Model] = {}


def register_model(model: Model) -> None:
    _MODEL_REGISTRY[(model.provider, model.id)] = model


def create_openai_model(
    model_id: str,
    *,
    provider: str = "openai",
    base_url: str | None = None,
    context_window: int | None = None,
    max_tokens: int | None = None,
    headers: Dict[str, str] | None = None,
) -> Model:
    return Model(
        id=model_id,
        api="openai-completions",
        provider=provider,
        base_url=base_url or _OPENAI_COMPATIBLE_BASE_URLS.get(provider, DEFAULT_OPENAI_BASE_URL),
        context_window=context_window,
        max_tokens=max_tokens,
        headers=headers or {},
    )


def create_anthropic_model(
    model_id: str,
    *,
    provider: str = "anthropic",
    base_url: str | None = None,
    context_window: int | None = None,
    max_tokens: int | None = DEFAULT_MAX_TOKENS,
    headers: Dict[str, str] | None = None,
) -> Model:
    return Model(
        id=model_id,
        api="anthropic-messages",
        provider=provider,
        base_url=base_url or DEFAULT_ANTHROPIC_BASE_URL,
        context_window=context_window,
        max_tokens=max_tokens,
        headers=headers or {},
    )


def get_model(provider: str, model_id: str) -> Model:
    key = (provider, model_id)
    if key in _MODEL_REGISTRY:
        return _MODEL_REGISTRY[key]
    if provider == "anthropic":
        model = create_anthropic_model(model_id)
    elif provider in _OPENAI_COMPATIBLE_BASE_URLS:
        model = create_openai_model(model_id, provider=provider)
    else:
        raise KeyError(f"Model not found: {provider}/{model_id}. Register it first.")
    register_model(model)
    return model


def list_models(provider: str | None = None) -> List[Model]:
    if provider is None:
        return list(_MODEL_REGISTRY.values())
    return [model for (prov, _), model in _MODEL_REGISTRY.items() if prov == provider]


def _register_if_missing(model: Model) -> None:
    key = (model.provider, model.id)
    if key not in _MODEL_REGISTRY:
        _MODEL_REGISTRY[key] = model


def _register_builtin_models() -> None:
    _register_if_missing(
        create_anthropic_model(
            "claude-sonnet-4-20250514",
            context_window=200000,
        )
    )
    # Small and cheap; used for node labels.
    _register_if_missing(
        create_anthropic_model(
            "claude-3-5-haiku-20241022",
            context_window=200000,
            max_tokens=1024,
        )
    )
    _register_if_missing(
        create_openai_model(
            "gpt-4o-mini",
            context_window=128000,
            max_tokens=16384,
        )
    )


_register_builtin_models()
