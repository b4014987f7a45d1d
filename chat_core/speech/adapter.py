from contextlib import asynccontextmanager
from typing import Callable, Optional

from chat_core.agents.orchestrator import SessionContext
from chat_core.domain.exceptions import SpeechError, UnsupportedError
from chat_core.gui.base import Renderer
from chat_core.infrastructure.logging.logger import logger
from chat_core.prompts import Labels
from chat_core.speech.base import RecognitionConfig, SpeechRecognizer


class SpeechInputAdapter:
    """把一次语音识别包装成单个异步操作。

    界面上的“录音中”指示一旦显示，无论成功、失败还是取消都会被清除。
    """

    def __init__(
        self,
        recognizer: Optional[SpeechRecognizer],
        renderer: Renderer,
        config: Optional[RecognitionConfig] = None,
    ):
        self._recognizer = recognizer
        self._renderer = renderer
        self._config = config or RecognitionConfig()
        self._listening = False

    @property
    def listening(self) -> bool:
        return self._listening

    @property
    def config(self) -> RecognitionConfig:
        return self._config

    @asynccontextmanager
    async def _listening_indicator(self):
        self._listening = True
        self._renderer.set_listening(True)
        try:
            yield
        finally:
            self._listening = False
            self._renderer.set_listening(False)

    async def start_listening(self, on_start: Optional[Callable[[], None]] = None) -> str:
        if self._recognizer is None or not self._recognizer.is_available():
            raise UnsupportedError(code="SPEECH_UNSUPPORTED", message="speech recognition unavailable")
        async with self._listening_indicator():
            if on_start is not None:
                on_start()
            transcript = await self._recognizer.recognize(self._config)
        if not transcript:
            raise SpeechError(code="no-speech", message="empty transcript")
        return transcript


class VoiceInputHandler:
    """语音按钮的处理边界：识别结果填入输入框，错误只显示在状态栏。"""

    def __init__(self, adapter: SpeechInputAdapter, session: SessionContext, renderer: Renderer, labels: Labels):
        self._adapter = adapter
        self._session = session
        self._renderer = renderer
        self._labels = labels

    async def handle(self) -> Optional[str]:
        if self._adapter.listening:
            return None
        try:
            transcript = await self._adapter.start_listening(
                on_start=lambda: self._renderer.set_status(self._labels.listening)
            )
        except UnsupportedError:
            self._renderer.set_status(self._labels.speech_unsupported)
            return None
        except SpeechError as e:
            logger.warning(f"Speech recognition error: {e.code}", extra={"extra": {"code": e.code}})
            self._restore_status(f"{self._labels.speech_error} ({e.code})")
            return None
        self._renderer.set_input_text(transcript)
        self._restore_status(self._labels.speech_recognized)
        return transcript

    def _restore_status(self, text: str) -> None:
        # 发送仍在进行时保持“考え中”
        if self._session.processing:
            self._renderer.set_status(self._labels.thinking)
        else:
            self._renderer.set_status(text)
