import pytest

from chat_core.agents.orchestrator import SessionContext
from chat_core.domain.conversation import ConversationStore
from chat_core.domain.models import SessionConfig
from chat_core.domain.persistence import PersistenceAdapter
from chat_core.infrastructure.storage.json_store import MemoryKeyValueStore
from chat_core.prompts import get_labels


class RecordingRenderer:
    """记录所有界面调用，便于断言顺序。"""

    def __init__(self):
        self.events = []

    def __getattr__(self, name):
        def record(*args):
            self.events.append((name, *args))
        return record

    def names(self):
        return [e[0] for e in self.events]

    def statuses(self):
        return [e[1] for e in self.events if e[0] == "set_status"]


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def persistence(kv):
    return PersistenceAdapter(kv)


@pytest.fixture
def store(persistence):
    return ConversationStore(persistence)


@pytest.fixture
def labels():
    return get_labels("ja")


@pytest.fixture
def session():
    return SessionContext(config=SessionConfig(api_key="test-key"))
