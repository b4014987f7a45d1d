import json
from typing import List, Sequence

from chat_core.domain.exceptions import PersistenceReadError, PersistenceWriteError
from chat_core.domain.models import Message, Role
from chat_core.domain.persistence import PersistenceAdapter
from chat_core.infrastructure.logging.logger import logger


def serialize_history(messages: Sequence[Message]) -> str:
    return json.dumps([m.to_dict() for m in messages], ensure_ascii=False)


def deserialize_history(payload: str) -> List[Message]:
    """把 JSON 数组还原为消息列表，格式不对时抛出 PersistenceReadError。"""
    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise PersistenceReadError(code="STORE_READ_ERROR", message=str(e))
    if not isinstance(data, list):
        raise PersistenceReadError(code="STORE_READ_ERROR", message="history is not a list")
    try:
        return [Message.from_dict(item) for item in data]
    except (TypeError, KeyError, ValueError) as e:
        raise PersistenceReadError(code="STORE_READ_ERROR", message=f"bad message entry: {e}")


class ConversationStore:
    """内存中的有序消息列表，每次变更后整体写回持久化层。

    列表只会追加，唯一的例外是 clear() 一次性清空。
    """

    def __init__(self, persistence: PersistenceAdapter):
        self._persistence = persistence
        self._messages: List[Message] = []

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def append(self, role: Role, content: str) -> Message:
        message = Message(role=role, content=content)
        self._messages.append(message)
        try:
            self._persistence.write_history(serialize_history(self._messages))
        except PersistenceWriteError as e:
            logger.warning(
                f"History write failed: {e.message}",
                extra={"extra": {"code": e.code, "size": len(self._messages)}},
            )
        return message

    def clear(self) -> None:
        self._messages = []
        try:
            self._persistence.remove_history()
        except PersistenceWriteError as e:
            logger.warning(f"History remove failed: {e.message}", extra={"extra": {"code": e.code}})

    def load(self) -> List[Message]:
        """读取持久化的历史并替换内存列表；不存在或损坏时返回空列表。"""
        payload = self._persistence.read_history()
        if payload is None:
            self._messages = []
            return []
        try:
            self._messages = deserialize_history(payload)
        except PersistenceReadError as e:
            logger.warning(
                f"History unreadable, starting empty: {e.message}",
                extra={"extra": {"code": e.code}},
            )
            self._messages = []
        return list(self._messages)
