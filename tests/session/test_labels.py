import asyncio

import pytest

from arbor_ai.types import Turn
from arbor_session import LabelingFailure
from arbor_session.labels import build_label_prompt, fallback_label, generate_label, label_node
from arbor_session.store import SessionStore
from tests.helpers import ScriptedCompletion


def test_fallback_label_uses_first_words():
    assert fallback_label("Explain   quantum\ncomputing to a five year old") == "Explain quantum computing to a"
    assert fallback_label("hi") == "hi"
    assert fallback_label("   ") == "(empty)"
    assert fallback_label("word " * 3, max_words=2) == "word word"
    long_word = "x" * 60
    assert fallback_label(long_word) == "x" * 37 + "..."


def test_label_prompt_includes_recent_context_only():
    context = [Turn(role="user", content=f"turn {i}") for i in range(5)]
    prompt = build_label_prompt("assistant", "final answer", context)
    assert "turn 0" not in prompt
    assert "turn 1" not in prompt
    assert "turn 2" in prompt and "turn 4" in prompt
    assert prompt.endswith("assistant (label this): final answer")


@pytest.mark.asyncio
async def test_generate_label_cleans_output():
    complete = ScriptedCompletion(['  "Quantum basics."  \nextra line'])
    label = await generate_label(complete, "user", "Explain quantum computing")
    assert label == "Quantum basics"
    assert complete.calls[0][0].role == "user"


@pytest.mark.asyncio
async def test_generate_label_failures():
    complete = ScriptedCompletion()
    complete.fail_next(RuntimeError("boom"))
    with pytest.raises(LabelingFailure):
        await generate_label(complete, "user", "hello")

    with pytest.raises(LabelingFailure):
        await generate_label(ScriptedCompletion(["   "]), "user", "hello")

    async def slow(_turns):
        await asyncio.sleep(1)
        return "late"

    with pytest.raises(LabelingFailure):
        await generate_label(slow, "user", "hello", timeout=0.01)


@pytest.mark.asyncio
async def test_label_node_applies_generated_label(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello")
    a1 = store.append_assistant_turn(session_id, u1, "Hi there, how can I help?")

    complete = ScriptedCompletion(["Friendly greeting"])
    assert await label_node(store, session_id, a1, complete) == "Friendly greeting"
    assert store.get_node(session_id, a1).label == "Friendly greeting"
    prompt = complete.calls[0][0].content
    assert "user: Hello" in prompt


@pytest.mark.asyncio
async def test_label_node_falls_back_on_failure(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Plan a trip to Lisbon in May please")

    complete = ScriptedCompletion()
    complete.fail_next(RuntimeError("rate limited"))
    assert await label_node(store, session_id, u1, complete) == "Plan a trip to Lisbon"
    assert store.get_node(session_id, u1).label == "Plan a trip to Lisbon"


@pytest.mark.asyncio
async def test_label_node_without_collaborator_uses_fallback(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello world")
    assert await label_node(store, session_id, u1) == "Hello world"


@pytest.mark.asyncio
async def test_label_node_missing_targets_are_ignored(store: SessionStore):
    session_id = store.create_session()
    assert await label_node(store, session_id, "missing", ScriptedCompletion()) is None
    assert await label_node(store, "no-session", "missing") is None
