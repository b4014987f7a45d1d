"""测试 ChatOrchestrator 的状态机。"""

import asyncio

import pytest

from chat_core.agents.orchestrator import ChatOrchestrator, OrchestratorState, SessionContext, SubmitOutcome
from chat_core.domain.exceptions import ApiError
from chat_core.domain.models import Message, SessionConfig
from chat_core.providers.gemini_client import build_prompt


class FakeProvider:
    name = "fake"

    def __init__(self, answer="这是测试回复", error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    async def send(self, user_text, recent_history, *, api_key):
        self.calls.append((user_text, list(recent_history), api_key))
        if self.error:
            raise self.error
        return self.answer


class BlockingProvider:
    name = "blocking"

    def __init__(self):
        self.calls = 0
        self.release = None

    async def send(self, user_text, recent_history, *, api_key):
        self.calls += 1
        self.release = asyncio.Event()
        await self.release.wait()
        return "done"


def test_submit_appends_user_then_ai(store, session, renderer, labels):
    provider = FakeProvider()
    orch = ChatOrchestrator(store, provider, session, renderer, labels)
    outcome = asyncio.run(orch.submit("  帮我分析这段代码  "))

    assert outcome is SubmitOutcome.SENT
    assert store.messages == [Message("user", "帮我分析这段代码"), Message("ai", "这是测试回复")]
    assert provider.calls == [("帮我分析这段代码", [Message("user", "帮我分析这段代码")], "test-key")]
    names = renderer.names()
    assert names.index("show_typing") < names.index("hide_typing")
    assert renderer.statuses() == [labels.thinking, labels.ready]
    assert renderer.events[-1] == ("set_busy", False)
    assert orch.state is OrchestratorState.IDLE


def test_history_passed_includes_new_message(store, session, renderer, labels):
    store.append("user", "old")
    store.append("ai", "older answer")
    provider = FakeProvider()
    asyncio.run(ChatOrchestrator(store, provider, session, renderer, labels).submit("new"))
    assert provider.calls[0][1] == [Message("user", "old"), Message("ai", "older answer"), Message("user", "new")]


def test_context_window_counts_new_turn(store, session, renderer, labels):
    for i in range(15):
        store.append("user" if i % 2 == 0 else "ai", f"m{i}")
    provider = FakeProvider()
    asyncio.run(ChatOrchestrator(store, provider, session, renderer, labels).submit("new"))

    prompt = build_prompt("new", provider.calls[0][1], labels, window=10)
    blocks = prompt.split("\n\n")
    assert blocks[0] == "ユーザー: m6"
    assert blocks[8] == "ユーザー: m14"
    assert blocks[9:] == ["ユーザー: new", "ユーザー: new"]
    assert "m5" not in prompt


def test_unexpected_error_still_hides_typing(store, session, renderer, labels):
    provider = FakeProvider(error=RuntimeError("invalid url"))
    orch = ChatOrchestrator(store, provider, session, renderer, labels)
    with pytest.raises(RuntimeError):
        asyncio.run(orch.submit("hi"))
    assert renderer.names().count("hide_typing") == 1
    assert renderer.events[-1] == ("set_busy", False)
    assert orch.state is OrchestratorState.IDLE


def test_remote_failure_is_stored_as_ai_message(store, session, renderer, labels):
    provider = FakeProvider(error=ApiError(code="API_ERROR", message="quota exceeded", http_status=429))
    orch = ChatOrchestrator(store, provider, session, renderer, labels)
    outcome = asyncio.run(orch.submit("hi"))

    assert outcome is SubmitOutcome.FAILED
    last = store.messages[-1]
    assert last.role == "ai"
    assert "quota exceeded" in last.content
    assert last.content.startswith(labels.error_prefix)
    assert renderer.statuses()[-1] == labels.error_status
    assert session.processing is False


def test_empty_submit_is_ignored(store, session, renderer, labels):
    provider = FakeProvider()
    orch = ChatOrchestrator(store, provider, session, renderer, labels)
    assert asyncio.run(orch.submit("")) is SubmitOutcome.EMPTY
    assert asyncio.run(orch.submit(" \n\t ")) is SubmitOutcome.EMPTY
    assert store.messages == []
    assert provider.calls == []


def test_missing_api_key_prompts_settings(store, renderer, labels):
    provider = FakeProvider()
    session = SessionContext(config=SessionConfig(api_key=""))
    orch = ChatOrchestrator(store, provider, session, renderer, labels)
    assert asyncio.run(orch.submit("hi")) is SubmitOutcome.NEEDS_API_KEY
    assert renderer.names() == ["prompt_for_api_key"]
    assert store.messages == []
    assert provider.calls == []


def test_second_submit_while_sending_is_dropped(store, session, renderer, labels):
    provider = BlockingProvider()
    orch = ChatOrchestrator(store, provider, session, renderer, labels)

    async def scenario():
        first = asyncio.create_task(orch.submit("one"))
        await asyncio.sleep(0)
        assert orch.state is OrchestratorState.SENDING
        assert store.messages == [Message("user", "one")]
        second = await orch.submit("two")
        provider.release.set()
        return await first, second

    first, second = asyncio.run(scenario())
    assert second is SubmitOutcome.BUSY
    assert first is SubmitOutcome.SENT
    assert provider.calls == 1
    assert store.messages == [Message("user", "one"), Message("ai", "done")]
    assert orch.state is OrchestratorState.IDLE
