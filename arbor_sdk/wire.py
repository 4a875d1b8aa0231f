"""camelCase JSON payloads for the RPC bridge."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel


def to_camel_key(key: str) -> str:
    if "_" not in key:
        return key
    parts = [part for part in key.split("_") if part]
    if not parts:
        return key
    return parts[0] + "".join(part[:1].upper() + part[1:] for part in parts[1:])


def convert_keys(value: Any) -> Any:
    if isinstance(value, dict):
        converted: Dict[Any, Any] = {}
        for key, val in value.items():
            new_key = to_camel_key(key) if isinstance(key, str) else key
            converted[new_key] = convert_keys(val)
        return converted
    if isinstance(value, list):
        return [convert_keys(item) for item in value]
    return value


def to_wire(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return convert_keys(value.model_dump(mode="json"))
    if isinstance(value, dict):
        return {key: to_wire(val) for key, val in value.items()}
    if isinstance(value, list):
        return [to_wire(item) for item in value]
    return value
