"""Runtime settings read from the environment.

A ``.env`` file is loaded first without overriding variables that are already
set, then every setting falls back to its default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_PROVIDER = "anthropic"
DEFAULT_MODEL = "claude-sonnet-4-20250514"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Settings:
    provider: str = DEFAULT_PROVIDER
    model_id: str = DEFAULT_MODEL
    max_tokens: int = 5000
    temperature: float = 1.0
    timeout: float = 120.0
    system_prompt: Optional[str] = None
    labels: bool = True
    label_provider: Optional[str] = None
    label_model_id: Optional[str] = None
    label_timeout: float = 15.0
    log_level: str = "WARNING"


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    *,
    dotenv_path: Optional[str | Path] = None,
) -> Settings:
    if env is None:
        load_dotenv(dotenv_path=dotenv_path, override=False)
        env = os.environ

    return Settings(
        provider=env.get("ARBOR_PROVIDER") or DEFAULT_PROVIDER,
        model_id=env.get("ARBOR_MODEL") or DEFAULT_MODEL,
        max_tokens=_get_int(env, "ARBOR_MAX_TOKENS", 5000),
        temperature=_get_float(env, "ARBOR_TEMPERATURE", 1.0),
        timeout=_get_float(env, "ARBOR_TIMEOUT", 120.0),
        system_prompt=env.get("ARBOR_SYSTEM_PROMPT") or None,
        labels=_get_bool(env, "ARBOR_LABELS", True),
        label_provider=env.get("ARBOR_LABEL_PROVIDER") or None,
        label_model_id=env.get("ARBOR_LABEL_MODEL") or None,
        label_timeout=_get_float(env, "ARBOR_LABEL_TIMEOUT", 15.0),
        log_level=(env.get("ARBOR_LOG_LEVEL") or "WARNING").upper(),
    )
