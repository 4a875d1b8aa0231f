"""Anthropic Messages API provider."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..auth import resolve_api_key
from ..errors import CollaboratorError, error_from_status
from ..text import sanitize_surrogates
from ..types import CompletionOptions, Model, Turn

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 5000
DEFAULT_TEMPERATURE = 1.0
DEFAULT_TIMEOUT = 120.0


def _merge_headers(*sources: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged: Dict[str, str] = {}
    for source in sources:
        if source:
            merged.update(source)
    return merged


def _build_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    if base.endswith("/messages"):
        return base
    if base.endswith("/v1"):
        return f"{base}/messages"
    return f"{base}/v1/messages"


def _build_headers(
    api_key: str,
    model_headers: Optional[Dict[str, str]],
    extra: Optional[Dict[str, str]],
) -> Dict[str, str]:
    base_headers = {
        "accept": "application/json",
        "anthropic-version": ANTHROPIC_VERSION,
        "content-type": "application/json",
        "x-api-key": api_key,
    }
    return _merge_headers(base_headers, model_headers, extra)


def _convert_turns(turns: Sequence[Turn]) -> List[Dict[str, Any]]:
    return [
        {
            "role": turn.role,
            "content": [{"type": "text", "text": sanitize_surrogates(turn.content)}],
        }
        for turn in turns
    ]


def _build_params(
    model: Model,
    turns: Sequence[Turn],
    options: Optional[CompletionOptions],
) -> Dict[str, Any]:
    max_tokens = (options.max_tokens if options else None) or model.max_tokens or DEFAULT_MAX_TOKENS
    temperature = options.temperature if options and options.temperature is not None else DEFAULT_TEMPERATURE
    params: Dict[str, Any] = {
        "model": model.id,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "messages": _convert_turns(turns),
    }
    if options and options.system_prompt:
        params["system"] = sanitize_surrogates(options.system_prompt)
    return params


def _extract_text(payload: Dict[str, Any]) -> str:
    blocks = payload.get("content") or []
    return "".join(block.get("text", "") for block in blocks if block.get("type") == "text")


async def complete_anthropic(
    model: Model,
    turns: Sequence[Turn],
    options: Optional[CompletionOptions] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    api_key = resolve_api_key(model.provider, options)

    params = _build_params(model, turns, options)
    headers = _build_headers(api_key, model.headers, options.headers if options else None)
    url = _build_url(model.base_url)
    timeout = (options.timeout if options else None) or DEFAULT_TIMEOUT

    logger.debug("POST %s model=%s turns=%d", url, model.id, len(turns))
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.post(url, json=params, headers=headers)
        else:
            response = await client.post(url, json=params, headers=headers, timeout=timeout)
    except httpx.HTTPError as exc:
        raise CollaboratorError(f"Completion request failed: {exc}", kind="upstream") from exc

    if response.is_error:
        raise error_from_status(response.status_code, response.text)

    try:
        text = _extract_text(response.json())
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise CollaboratorError(
            "Completion response could not be parsed",
            kind="upstream",
            status_code=response.status_code,
            details=response.text[:500] or None,
        ) from exc
    if not text:
        raise CollaboratorError("Completion returned no text", kind="empty")
    return text
