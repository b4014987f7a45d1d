import pytest

from chat_core.domain.conversation import ConversationStore, deserialize_history, serialize_history
from chat_core.domain.exceptions import PersistenceReadError, PersistenceWriteError
from chat_core.domain.models import Message
from chat_core.domain.persistence import HISTORY_KEY, PersistenceAdapter


def test_load_after_restart_returns_appended_messages(kv, persistence):
    store = ConversationStore(persistence)
    store.append("user", "こんにちは")
    store.append("ai", "こんにちは！")
    store.append("user", "second")

    restarted = ConversationStore(PersistenceAdapter(kv))
    loaded = restarted.load()
    assert loaded == [
        Message("user", "こんにちは"),
        Message("ai", "こんにちは！"),
        Message("user", "second"),
    ]
    assert restarted.messages == loaded


def test_clear_removes_persisted_key(kv, store):
    store.append("user", "hi")
    assert kv.get(HISTORY_KEY) is not None
    store.clear()
    assert kv.get(HISTORY_KEY) is None
    assert store.load() == []
    assert len(store) == 0


def test_load_without_history_is_empty(store):
    assert store.load() == []


@pytest.mark.parametrize("payload", ["{not json", '{"role": "user"}', '[{"role": "robot", "content": "x"}]', '[1, 2]'])
def test_corrupt_history_loads_empty(kv, store, payload):
    kv.set(HISTORY_KEY, payload)
    assert store.load() == []


def test_write_failure_keeps_message_in_memory(store, monkeypatch):
    def boom(payload):
        raise PersistenceWriteError(code="STORE_WRITE_ERROR", message="disk full")

    monkeypatch.setattr(store._persistence, "write_history", boom)
    msg = store.append("user", "still here")
    assert store.messages == [msg]


def test_messages_returns_copy(store):
    store.append("user", "a")
    snapshot = store.messages
    snapshot.append(Message("ai", "b"))
    assert len(store) == 1


@pytest.mark.parametrize("n", [0, 1, 7])
def test_serialize_roundtrip(n):
    msgs = [Message("user" if i % 2 == 0 else "ai", f"message {i}\nline") for i in range(n)]
    assert deserialize_history(serialize_history(msgs)) == msgs


def test_deserialize_rejects_non_list():
    with pytest.raises(PersistenceReadError):
        deserialize_history('{"role": "user", "content": "x"}')


def test_message_is_immutable():
    msg = Message("user", "x")
    with pytest.raises(AttributeError):
        msg.content = "y"
