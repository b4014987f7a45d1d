"""对话编排核心模块。

ChatOrchestrator 是一个只有两个状态的状态机：

    Idle --submit(text)--> Sending --success/failure--> Idle

同一时刻最多只有一次远端调用在途；Sending 期间再次 submit 会被直接丢弃
（不排队），并返回 SubmitOutcome.BUSY 供调用方决定是否提示。
"""

from dataclasses import dataclass, field
from enum import Enum

from chat_core.domain.conversation import ConversationStore
from chat_core.domain.exceptions import ApiError
from chat_core.domain.models import SessionConfig
from chat_core.gui.base import Renderer
from chat_core.infrastructure.logging.logger import logger
from chat_core.prompts import Labels
from chat_core.providers.base import ProviderClient


class OrchestratorState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"


class SubmitOutcome(str, Enum):
    SENT = "sent"
    FAILED = "failed"  # 远端失败，错误提示已作为 ai 消息保存
    EMPTY = "empty"
    BUSY = "busy"
    NEEDS_API_KEY = "needs_api_key"


@dataclass
class SessionContext:
    """进程内的会话状态，启动时构造一次并传给各个控制器。

    processing 仅在一次远端调用在途期间为 True。
    """

    config: SessionConfig = field(default_factory=SessionConfig)
    processing: bool = False


class ChatOrchestrator:
    def __init__(
        self,
        store: ConversationStore,
        provider_client: ProviderClient,
        session: SessionContext,
        renderer: Renderer,
        labels: Labels,
    ):
        self._store = store
        self._provider_client = provider_client
        self._session = session
        self._renderer = renderer
        self._labels = labels

    @property
    def state(self) -> OrchestratorState:
        return OrchestratorState.SENDING if self._session.processing else OrchestratorState.IDLE

    async def submit(self, text: str) -> SubmitOutcome:
        """提交一条用户消息并等待 AI 回复写入会话。

        ApiError 在这里被捕获：错误提示作为 ai 消息永久保存，状态栏显示错误。
        """

        text = (text or "").strip()
        if not text:
            return SubmitOutcome.EMPTY
        if self._session.processing:
            logger.info("Submit dropped while a request is in flight")
            return SubmitOutcome.BUSY
        if not self._session.config.has_api_key:
            self._renderer.prompt_for_api_key()
            return SubmitOutcome.NEEDS_API_KEY

        self._session.processing = True
        self._renderer.set_busy(True)
        typing = False
        try:
            user_msg = self._store.append("user", text)
            # 上下文窗口包含刚追加的这条用户消息
            history = self._store.messages
            self._renderer.render_message(user_msg)
            self._renderer.set_status(self._labels.thinking)
            self._renderer.show_typing()
            typing = True
            try:
                answer = await self._provider_client.send(
                    text, history, api_key=self._session.config.api_key
                )
            except ApiError as e:
                self._renderer.hide_typing()
                typing = False
                logger.error(
                    f"AI response failed: {e.message}",
                    extra={"extra": {"code": e.code, "status": e.http_status}},
                )
                ai_msg = self._store.append("ai", self._labels.error_prefix + e.message)
                self._renderer.render_message(ai_msg)
                self._renderer.set_status(self._labels.error_status)
                return SubmitOutcome.FAILED
            self._renderer.hide_typing()
            typing = False
            ai_msg = self._store.append("ai", answer)
            self._renderer.render_message(ai_msg)
            self._renderer.set_status(self._labels.ready)
            return SubmitOutcome.SENT
        finally:
            if typing:
                self._renderer.hide_typing()
            self._session.processing = False
            self._renderer.set_busy(False)
