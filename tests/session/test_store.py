import pytest

from arbor_session import MessageNotFound, SessionNotFound, ValidationError
from arbor_session.store import SessionStore


def test_create_session_is_empty(store: SessionStore):
    session_id = store.create_session()
    view = store.get_session_view(session_id)
    assert view.session_id == session_id
    assert view.messages == []
    assert view.active_branch == []
    assert store.get_tree(session_id).tree is None
    store.verify(session_id)


def test_sessions_are_independent(store: SessionStore):
    first = store.create_session()
    second = store.create_session()
    assert first != second
    store.append_user_turn(first, "hello")
    assert store.get_session_view(second).messages == []
    assert store.list_sessions() == [first, second]


def test_first_user_turn_becomes_root(store: SessionStore):
    session_id = store.create_session()
    user_id = store.append_user_turn(session_id, "Hello")

    node = store.get_node(session_id, user_id)
    assert node.role == "user"
    assert node.content == "Hello"
    assert node.parent_id is None
    assert store.get_tree(session_id).tree.id == user_id
    assert store.get_active_branch(session_id) == [user_id]
    store.verify(session_id)


def test_user_turn_appends_after_active_leaf(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello")
    a1 = store.append_assistant_turn(session_id, u1, "Hi there")
    u2 = store.append_user_turn(session_id, "How are you?")

    assert store.get_node(session_id, u2).parent_id == a1
    assert store.get_node(session_id, a1).children == [u2]
    assert store.get_active_branch(session_id) == [u1, a1, u2]
    store.verify(session_id)


def test_active_branch_may_end_on_user_turn(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello")
    a1 = store.append_assistant_turn(session_id, u1, "Hi")
    u2 = store.append_user_turn(session_id, "Still there?")
    view = store.get_session_view(session_id)
    assert [m.id for m in view.messages] == [u1, a1, u2]
    assert view.messages[-1].role == "user"


@pytest.mark.parametrize("text", ["", "   ", None])
def test_empty_user_text_creates_no_node(store: SessionStore, text):
    session_id = store.create_session()
    with pytest.raises(ValidationError):
        store.append_user_turn(session_id, text)
    assert store.get_branch_stats(session_id).node_count == 0
    assert store.get_active_branch(session_id) == []


def test_padded_text_is_stored_verbatim(store: SessionStore):
    session_id = store.create_session()
    user_id = store.append_user_turn(session_id, "  indented\n")
    assert store.get_node(session_id, user_id).content == "  indented\n"
    store.verify(session_id)


def test_empty_assistant_text_rejected(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello")
    with pytest.raises(ValidationError):
        store.append_assistant_turn(session_id, u1, "")
    assert store.get_node(session_id, u1).children == []


def test_unknown_session_raises(store: SessionStore):
    with pytest.raises(SessionNotFound):
        store.append_user_turn("missing", "hello")
    with pytest.raises(SessionNotFound):
        store.append_assistant_turn("missing", "x", "hello")
    with pytest.raises(SessionNotFound):
        store.switch_branch("missing", "x")
    with pytest.raises(SessionNotFound):
        store.get_session_view("missing")
    with pytest.raises(SessionNotFound):
        store.get_tree("missing")


def test_session_not_found_is_a_key_error(store: SessionStore):
    with pytest.raises(KeyError) as excinfo:
        store.get_session_view("nope")
    assert str(excinfo.value) == "Session not found: nope"


def test_assistant_turn_requires_existing_parent(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello")
    with pytest.raises(MessageNotFound):
        store.append_assistant_turn(session_id, "missing", "Hi")
    assert store.get_active_branch(session_id) == [u1]
    assert store.get_branch_stats(session_id).node_count == 1


def test_attach_label_is_best_effort(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello")

    assert store.attach_label(session_id, u1, "Greeting") is True
    assert store.get_node(session_id, u1).label == "Greeting"
    assert store.attach_label(session_id, "missing", "x") is False
    assert store.attach_label("missing", u1, "x") is False


def test_label_does_not_change_content_or_links(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello")
    a1 = store.append_assistant_turn(session_id, u1, "Hi")
    store.attach_label(session_id, u1, "Greeting")

    node = store.get_node(session_id, u1)
    assert node.content == "Hello"
    assert node.children == [a1]
    assert store.get_active_branch(session_id) == [u1, a1]


def test_session_view_is_a_snapshot(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello")
    view = store.get_session_view(session_id)

    view.active_branch.append("bogus")
    view.messages[0].children.append("bogus")

    assert store.get_active_branch(session_id) == [u1]
    assert store.get_node(session_id, u1).children == []


def test_context_turns_follow_active_branch(store: SessionStore):
    session_id = store.create_session()
    u1 = store.append_user_turn(session_id, "Hello")
    store.append_assistant_turn(session_id, u1, "Hi there")
    store.append_user_turn(session_id, "Tell me a joke")

    turns = store.get_context_turns(session_id)
    assert [(t.role, t.content) for t in turns] == [
        ("user", "Hello"),
        ("assistant", "Hi there"),
        ("user", "Tell me a joke"),
    ]
    assert [t.content for t in store.get_context_turns(session_id, u1)] == ["Hello"]


def test_search_requires_term(store: SessionStore):
    session_id = store.create_session()
    with pytest.raises(ValidationError):
        store.search(session_id, "  ")
