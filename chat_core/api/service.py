"""对外 API 服务模块。

build_app 负责在启动时把各组件组装起来（会话状态只构造一次，
再显式传给编排器和控制器）；run_chat 等函数提供无界面的简化调用。
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from chat_core.agents.orchestrator import ChatOrchestrator, SessionContext, SubmitOutcome
from chat_core.agents.session import SessionController
from chat_core.config.settings import settings
from chat_core.domain.conversation import ConversationStore
from chat_core.domain.exceptions import PersistenceWriteError
from chat_core.domain.persistence import KeyValueStore, PersistenceAdapter
from chat_core.gui.base import NullRenderer, Renderer
from chat_core.infrastructure.logging.logger import logger
from chat_core.infrastructure.storage.json_store import JsonFileKeyValueStore
from chat_core.prompts import Labels, get_labels
from chat_core.providers import create_provider
from chat_core.providers.base import ProviderClient
from chat_core.speech.adapter import SpeechInputAdapter, VoiceInputHandler
from chat_core.speech.base import RecognitionConfig, SpeechRecognizer
from chat_core.speech.vosk_recognizer import VoskRecognizer


@dataclass
class ChatApp:
    labels: Labels
    session: SessionContext
    persistence: PersistenceAdapter
    store: ConversationStore
    orchestrator: ChatOrchestrator
    controller: SessionController
    voice: VoiceInputHandler


def build_app(
    renderer: Optional[Renderer] = None,
    kv_store: Optional[KeyValueStore] = None,
    provider_client: Optional[ProviderClient] = None,
    recognizer: Optional[SpeechRecognizer] = None,
    cfg=settings,
) -> ChatApp:
    renderer = renderer or NullRenderer()
    labels = get_labels(cfg.locale)
    persistence = PersistenceAdapter(kv_store or JsonFileKeyValueStore(root=cfg.storage_root))

    config = persistence.load_session()
    if not config.api_key and cfg.gemini_api_key:
        config.api_key = cfg.gemini_api_key
        try:
            persistence.save_api_key(config.api_key)
        except PersistenceWriteError as e:
            logger.warning(f"API key seed write failed: {e.message}", extra={"extra": {"code": e.code}})
    session = SessionContext(config=config)

    store = ConversationStore(persistence)
    provider_client = provider_client or create_provider("gemini", labels=labels, cfg=cfg)
    orchestrator = ChatOrchestrator(store, provider_client, session, renderer, labels)
    controller = SessionController(persistence, store, session, renderer, labels, export_dir=cfg.export_dir)
    adapter = SpeechInputAdapter(
        recognizer or VoskRecognizer(cfg.vosk_model_path, source=cfg.speech_source),
        renderer,
        RecognitionConfig(locale=cfg.speech_locale, timeout=cfg.speech_timeout),
    )
    voice = VoiceInputHandler(adapter, session, renderer, labels)
    return ChatApp(
        labels=labels,
        session=session,
        persistence=persistence,
        store=store,
        orchestrator=orchestrator,
        controller=controller,
        voice=voice,
    )


_app: Optional[ChatApp] = None


def get_default_app() -> ChatApp:
    """获取默认的无界面 ChatApp 实例（单例），历史从本地存储加载。"""
    global _app
    if _app is None:
        _app = build_app()
        _app.store.load()
    return _app


def run_chat(user_input: str, app: Optional[ChatApp] = None) -> Dict[str, Any]:
    """发送一条消息并返回结果。

    Returns:
        包含 outcome 与最新一条 ai 消息（若有）的字典
    """
    app = app or get_default_app()
    outcome = asyncio.run(app.orchestrator.submit(user_input))
    reply = None
    if outcome in (SubmitOutcome.SENT, SubmitOutcome.FAILED):
        reply = app.store.messages[-1].content
    return {"outcome": outcome.value, "reply": reply}


def get_conversation_messages(app: Optional[ChatApp] = None) -> List[Dict[str, Any]]:
    app = app or get_default_app()
    return [m.to_dict() for m in app.store.messages]
