import tempfile
from pathlib import Path

from chat_core.domain.models import Theme
from chat_core.domain.persistence import PersistenceAdapter
from chat_core.infrastructure.storage.json_store import JsonFileKeyValueStore


def test_json_store_set_get_remove():
    with tempfile.TemporaryDirectory() as d:
        store = JsonFileKeyValueStore(root=Path(d) / ".storage")
        assert store.get("theme") is None
        store.set("theme", "light")
        assert store.get("theme") == "light"
        store.remove("theme")
        assert store.get("theme") is None
        store.remove("missing")


def test_json_store_survives_new_instance():
    with tempfile.TemporaryDirectory() as d:
        root = Path(d) / ".storage"
        JsonFileKeyValueStore(root=root).set("gemini_api_key", "abc")
        assert JsonFileKeyValueStore(root=root).get("gemini_api_key") == "abc"
        assert not list(root.glob("*.tmp"))


def test_json_store_corrupt_file_reads_empty():
    with tempfile.TemporaryDirectory() as d:
        store = JsonFileKeyValueStore(root=d)
        store.path.write_text("{broken", encoding="utf-8")
        assert store.get("theme") is None
        store.set("theme", "dark")
        assert store.get("theme") == "dark"


def test_persistence_adapter_session_defaults():
    with tempfile.TemporaryDirectory() as d:
        adapter = PersistenceAdapter(JsonFileKeyValueStore(root=d))
        cfg = adapter.load_session()
        assert cfg.api_key == ""
        assert cfg.theme is Theme.DARK

        adapter.save_api_key("key-123")
        adapter.save_theme(Theme.LIGHT)
        cfg = adapter.load_session()
        assert cfg.api_key == "key-123"
        assert cfg.theme is Theme.LIGHT
