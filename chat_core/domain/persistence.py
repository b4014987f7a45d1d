"""本地持久化适配层。

KeyValueStore 是对本地键值存储的最小抽象（字符串键 → 字符串值），
具体实现见 infrastructure/storage/json_store.py。

PersistenceAdapter 在其上固定三个键：API Key、主题、序列化后的会话历史。
它只保存快照字符串，从不持有 ConversationStore 的活动引用。
"""

from typing import Optional, Protocol

from chat_core.domain.models import SessionConfig, Theme


API_KEY_KEY = "gemini_api_key"
THEME_KEY = "theme"
HISTORY_KEY = "conversation_history"


class KeyValueStore(Protocol):
    """本地键值存储协议。

    set/remove 失败时抛出 PersistenceWriteError；
    get 在键不存在时返回 None。
    """

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class PersistenceAdapter:
    """API Key / 主题 / 会话历史三个键的读写封装。"""

    def __init__(self, store: KeyValueStore):
        self._store = store

    # ---- 会话配置 ----

    def load_session(self) -> SessionConfig:
        return SessionConfig(
            api_key=self._store.get(API_KEY_KEY) or "",
            theme=Theme.parse(self._store.get(THEME_KEY)),
        )

    def save_api_key(self, api_key: str) -> None:
        self._store.set(API_KEY_KEY, api_key)

    def save_theme(self, theme: Theme) -> None:
        self._store.set(THEME_KEY, theme.value)

    # ---- 会话历史 ----

    def read_history(self) -> Optional[str]:
        return self._store.get(HISTORY_KEY)

    def write_history(self, payload: str) -> None:
        self._store.set(HISTORY_KEY, payload)

    def remove_history(self) -> None:
        self._store.remove(HISTORY_KEY)
