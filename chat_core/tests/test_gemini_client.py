import asyncio

import httpx
import pytest

from chat_core.domain.exceptions import ApiError, MalformedResponseError, NetworkError
from chat_core.domain.models import Message
from chat_core.prompts import get_labels
from chat_core.providers.gemini_client import GeminiClient, build_prompt


class SettingsStub:
    http_timeout = 1.0
    max_context_messages = 10


class Resp:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


def install_client(monkeypatch, response=None, error=None):
    calls = []

    class Client:
        def __init__(self, *a, **kw):
            calls.append({"init": kw})

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, **kw):
            calls.append({"url": url, **kw})
            if error is not None:
                raise error
            return response

    monkeypatch.setattr("httpx.AsyncClient", Client)
    return calls


def ok(text):
    return Resp(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def history(n):
    return [Message("user" if i % 2 == 0 else "ai", f"m{i}") for i in range(n)]


def test_prompt_keeps_last_ten_messages_oldest_first():
    labels = get_labels("ja")
    prompt = build_prompt("next", history(15), labels, window=10)
    blocks = prompt.split("\n\n")
    assert len(blocks) == 11
    assert blocks[0] == "AI: m5"
    assert blocks[9] == "ユーザー: m14"
    assert blocks[10] == "ユーザー: next"
    assert "m4" not in prompt


def test_prompt_without_history_is_user_text():
    assert build_prompt("hello", [], get_labels("ja")) == "hello"


def test_send_builds_request(monkeypatch):
    calls = install_client(monkeypatch, response=ok("answer"))
    client = GeminiClient(SettingsStub(), labels=get_labels("en"))
    text = asyncio.run(client.send("hi", [Message("user", "a"), Message("ai", "b")], api_key="secret"))

    assert text == "answer"
    assert calls[0]["init"]["timeout"] == 1.0
    post = calls[1]
    assert post["url"] == "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"
    assert post["params"] == {"key": "secret"}
    assert post["json"] == {
        "contents": [{"parts": [{"text": "User: a\n\nAI: b\n\nUser: hi"}]}],
        "generationConfig": {"temperature": 0.7, "maxOutputTokens": 2048},
    }


def test_send_surfaces_remote_error_message(monkeypatch):
    install_client(monkeypatch, response=Resp(429, {"error": {"message": "quota exceeded"}}))
    client = GeminiClient(SettingsStub(), labels=get_labels("ja"))
    with pytest.raises(ApiError) as exc:
        asyncio.run(client.send("hi", [], api_key="k"))
    assert exc.value.message == "quota exceeded"
    assert exc.value.http_status == 429


def test_send_uses_generic_message_when_error_body_unreadable(monkeypatch):
    install_client(monkeypatch, response=Resp(500, ValueError("not json")))
    labels = get_labels("ja")
    with pytest.raises(ApiError) as exc:
        asyncio.run(GeminiClient(SettingsStub(), labels=labels).send("hi", [], api_key="k"))
    assert exc.value.message == labels.api_failed


@pytest.mark.parametrize(
    "body",
    [{}, {"candidates": []}, {"candidates": [{}]}, {"candidates": [{"content": {"parts": []}}]}, ["x"]],
)
def test_send_rejects_malformed_success(monkeypatch, body):
    install_client(monkeypatch, response=Resp(200, body))
    with pytest.raises(MalformedResponseError):
        asyncio.run(GeminiClient(SettingsStub(), labels=get_labels("ja")).send("hi", [], api_key="k"))


def test_send_maps_transport_error(monkeypatch):
    install_client(monkeypatch, error=httpx.ConnectTimeout("timed out"))
    with pytest.raises(NetworkError) as exc:
        asyncio.run(GeminiClient(SettingsStub(), labels=get_labels("ja")).send("hi", [], api_key="k"))
    assert isinstance(exc.value, ApiError)
    assert "timed out" in exc.value.message
