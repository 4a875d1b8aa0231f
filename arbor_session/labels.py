"""Short captions for tree nodes.

Labels are advisory. A label collaborator proposes a caption; when it fails,
times out or returns nothing usable, the node gets a deterministic caption made
from its first few words instead.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from arbor_ai.types import CompleteFunction, Turn

from .errors import LabelingFailure, StoreError
from .store import SessionStore
from .types import DISPLAY_NAME_LIMIT, truncate_content

logger = logging.getLogger(__name__)

CONTEXT_TURNS = 3
LABEL_WORD_LIMIT = 6
EMPTY_LABEL = "(empty)"

LABEL_INSTRUCTIONS = (
    "Write a caption of at most {words} words for the final message below, "
    "suitable for a node in a conversation tree. "
    "Reply with the caption only, no quotes or punctuation at the end."
)


def fallback_label(content: str, max_words: int = 5) -> str:
    words = content.split()
    if not words:
        return EMPTY_LABEL
    return truncate_content(" ".join(words[:max_words]), DISPLAY_NAME_LIMIT)


def build_label_prompt(role: str, content: str, context: Sequence[Turn] = ()) -> str:
    lines = [LABEL_INSTRUCTIONS.format(words=LABEL_WORD_LIMIT), ""]
    for turn in list(context)[-CONTEXT_TURNS:]:
        lines.append(f"{turn.role}: {turn.content}")
    lines.append(f"{role} (label this): {content}")
    return "\n".join(lines)


def _clean_label(raw: str) -> str:
    lines = raw.strip().splitlines()
    label = lines[0] if lines else ""
    label = label.strip().strip("\"'`").strip()
    label = label.rstrip(".")
    return truncate_content(label, DISPLAY_NAME_LIMIT)


async def generate_label(
    complete_fn: CompleteFunction,
    role: str,
    content: str,
    context: Sequence[Turn] = (),
    *,
    timeout: Optional[float] = None,
) -> str:
    prompt = build_label_prompt(role, content, context)
    try:
        raw = await asyncio.wait_for(complete_fn([Turn(role="user", content=prompt)]), timeout)
    except Exception as exc:
        raise LabelingFailure(f"Label request failed: {exc}") from exc
    label = _clean_label(raw or "")
    if not label:
        raise LabelingFailure("Label collaborator returned an empty caption")
    return label


async def label_node(
    store: SessionStore,
    session_id: str,
    node_id: str,
    complete_fn: Optional[CompleteFunction] = None,
    *,
    timeout: Optional[float] = None,
) -> Optional[str]:
    """Label one node. Never raises; returns the label applied, if any."""
    try:
        node = store.get_node(session_id, node_id)
        path = store.get_context_turns(session_id, node_id)
    except StoreError as exc:
        logger.debug("Skipping label for %s: %s", node_id, exc)
        return None

    if complete_fn is None:
        label = fallback_label(node.content)
    else:
        try:
            label = await generate_label(complete_fn, node.role, node.content, path[:-1], timeout=timeout)
        except LabelingFailure as exc:
            logger.warning("Falling back to local label for %s: %s", node_id, exc)
            label = fallback_label(node.content)

    if not store.attach_label(session_id, node_id, label):
        return None
    return label
