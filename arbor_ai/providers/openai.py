"""OpenAI-compatible chat completions provider."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..auth import resolve_api_key
from ..errors import CollaboratorError, error_from_status
from ..text import sanitize_surrogates
from ..types import CompletionOptions, Model, Turn

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0


def _build_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    if base.endswith("/chat/completions"):
        return base
    if base.endswith("/v1"):
        return f"{base}/chat/completions"
    return f"{base}/v1/chat/completions"


def _build_headers(
    model: Model,
    api_key: str,
    options_headers: Optional[Dict[str, str]],
) -> Dict[str, str]:
    headers: Dict[str, str] = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    headers.update(model.headers)
    if options_headers:
        headers.update(options_headers)
    return headers


def _convert_turns(turns: Sequence[Turn], system_prompt: Optional[str]) -> List[Dict[str, str]]:
    messages: List[Dict[str, str]] = []
    if system_prompt:
        messages.append({"role": "system", "content": sanitize_surrogates(system_prompt)})
    for turn in turns:
        messages.append({"role": turn.role, "content": sanitize_surrogates(turn.content)})
    return messages


def _build_params(
    model: Model,
    turns: Sequence[Turn],
    options: Optional[CompletionOptions],
) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "model": model.id,
        "messages": _convert_turns(turns, options.system_prompt if options else None),
    }
    max_tokens = (options.max_tokens if options else None) or model.max_tokens
    if max_tokens:
        params["max_tokens"] = max_tokens
    if options and options.temperature is not None:
        params["temperature"] = options.temperature
    return params


def _extract_text(payload: Dict[str, Any]) -> str:
    choices = payload.get("choices") or []
    if not choices:
        return ""
    content = (choices[0].get("message") or {}).get("content")
    if content is not None and not isinstance(content, str):
        raise TypeError(f"Unexpected message content: {type(content).__name__}")
    return content or ""


async def complete_openai_completions(
    model: Model,
    turns: Sequence[Turn],
    options: Optional[CompletionOptions] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    api_key = resolve_api_key(model.provider, options)

    params = _build_params(model, turns, options)
    headers = _build_headers(model, api_key, options.headers if options else None)
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
