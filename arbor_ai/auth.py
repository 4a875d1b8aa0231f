"""API key resolution for completion providers."""

from __future__ import annotations

import os
from typing import Dict, Optional

from .errors import CollaboratorError
from .types import CompletionOptions

# One variable per provider that models.get_model can build.
_ENV_KEY_BY_PROVIDER: Dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "groq": "GROQ_API_KEY",
    "xai": "XAI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
}


def get_env_api_key(provider: str) -> Optional[str]:
    env_key = _ENV_KEY_BY_PROVIDER.get(provider)
    return (os.getenv(env_key) or None) if env_key else None


def resolve_api_key(provider: str, options: Optional[CompletionOptions] = None) -> str:
    """Return the explicit key from ``options``, else the provider's env var.

    Raises an ``auth`` CollaboratorError when neither is set.
    """
    api_key = (options.api_key if options else None) or get_env_api_key(provider)
    if api_key:
        return api_key
    env_key = _ENV_KEY_BY_PROVIDER.get(provider)
    hint = f"Set {env_key} or pass api_key." if env_key else "Pass api_key."
    raise CollaboratorError(f"No API key for provider: {provider}. {hint}", kind="auth")
