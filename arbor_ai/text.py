"""Text helpers shared by the providers."""

from __future__ import annotations

import re

_LONE_SURROGATE = re.compile(
    "[\ud800-\udbff](?![\udc00-\udfff])|(?<![\ud800-\udbff])[\udc00-\udfff]"
)


def sanitize_surrogates(text: str) -> str:
    """Remove unpaired UTF-16 surrogate code points."""
    return _LONE_SURROGATE.sub("", text)
