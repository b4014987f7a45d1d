"""设置、主题、清空与导出等界面操作。

每个方法对应界面上的一个按钮，直接触发一次存储或会话配置的修改，
修改后立即写回本地存储。
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from chat_core.agents.orchestrator import SessionContext
from chat_core.domain.conversation import ConversationStore
from chat_core.domain.exceptions import PersistenceWriteError, ValidationError
from chat_core.domain.models import Theme
from chat_core.domain.persistence import PersistenceAdapter
from chat_core.export.markdown import export_conversation, save_artifact
from chat_core.gui.base import Renderer
from chat_core.infrastructure.logging.logger import logger
from chat_core.prompts import Labels


class SessionController:
    def __init__(
        self,
        persistence: PersistenceAdapter,
        store: ConversationStore,
        session: SessionContext,
        renderer: Renderer,
        labels: Labels,
        export_dir: str | Path = "exports",
    ):
        self._persistence = persistence
        self._store = store
        self._session = session
        self._renderer = renderer
        self._labels = labels
        self._export_dir = Path(export_dir)

    def startup(self) -> None:
        """应用主题；没有 API Key 时打开设置，否则显示历史记录。"""

        self._renderer.apply_theme(self._session.config.theme)
        messages = self._store.load()
        if not self._session.config.has_api_key:
            self._renderer.prompt_for_api_key()
        elif messages:
            for msg in messages:
                self._renderer.render_message(msg)
        self._renderer.set_status(self._labels.ready)

    def save_api_key(self, raw: str) -> str:
        """保存去除首尾空白后的 API Key，空值抛出 ValidationError 且不写入。"""

        api_key = (raw or "").strip()
        if not api_key:
            raise ValidationError(code="MISSING_API_KEY", message=self._labels.enter_api_key)
        self._session.config.api_key = api_key
        try:
            self._persistence.save_api_key(api_key)
        except PersistenceWriteError as e:
            logger.warning(f"API key write failed: {e.message}", extra={"extra": {"code": e.code}})
        self._renderer.set_status(self._labels.api_key_saved)
        logger.info("API key saved")
        return api_key

    def toggle_theme(self) -> Theme:
        theme = self._session.config.theme.toggled()
        self._session.config.theme = theme
        self._renderer.apply_theme(theme)
        try:
            self._persistence.save_theme(theme)
        except PersistenceWriteError as e:
            logger.warning(f"Theme write failed: {e.message}", extra={"extra": {"code": e.code}})
        return theme

    def clear_conversation(self) -> None:
        """清空会话（调用方负责事先确认）。"""

        self._store.clear()
        self._renderer.clear_messages()
        self._renderer.set_status(self._labels.cleared)

    def export_conversation(self, now: Optional[datetime] = None) -> Path:
        """导出为 Markdown 文件，会话为空时抛出 NothingToExportError。"""

        artifact = export_conversation(self._store.messages, self._labels, now=now)
        path = save_artifact(artifact, self._export_dir)
        self._renderer.set_status(self._labels.exported)
        logger.info("Conversation exported", extra={"extra": {"path": str(path), "messages": len(self._store)}})
        return path
