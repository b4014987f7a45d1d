"""Gemini Provider 适配器。

本模块负责：

1. 取最近 N 条消息拼成上下文，加上本次用户输入组成单轮 prompt。
2. 转换为 generateContent 的 JSON 请求体并发送（API Key 作为 URL 查询参数）。
3. 处理网络错误与远端错误（从 {"error": {"message": ...}} 中取出提示）。
4. 从 candidates[0].content.parts[0].text 取出回答文本。
"""

from typing import Any, Dict, List, Optional, Sequence

import httpx

from chat_core.config.settings import settings
from chat_core.domain.exceptions import ApiError, MalformedResponseError, NetworkError
from chat_core.domain.models import Message
from chat_core.infrastructure.logging.logger import logger
from chat_core.prompts import Labels, get_labels
from chat_core.providers.registry import GEMINI_CONFIG, ModelConfig


def build_context(history: Sequence[Message], labels: Labels, window: int = 10) -> str:
    """取最后 window 条消息（旧的在前），渲染为 "<角色>: <内容>"，以空行分隔。"""

    if window <= 0:
        return ""
    recent = list(history)[-window:]
    return "\n\n".join(f"{labels.role_label(m.role)}: {m.content}" for m in recent)


def build_prompt(user_text: str, history: Sequence[Message], labels: Labels, window: int = 10) -> str:
    context = build_context(history, labels, window)
    if not context:
        return user_text
    return f"{context}\n\n{labels.user}: {user_text}"


class GeminiClient:
    """Gemini 提供方客户端实现。"""

    name = "gemini"

    def __init__(self, cfg=settings, labels: Optional[Labels] = None, model: str = "chat"):
        self._settings = cfg
        self._labels = labels or get_labels(getattr(cfg, "locale", "ja"))
        self._model_cfg: ModelConfig = GEMINI_CONFIG.models[model]

    @property
    def window(self) -> int:
        return getattr(self._settings, "max_context_messages", 10)

    async def send(self, user_text: str, recent_history: Sequence[Message], *, api_key: str) -> str:
        prompt = build_prompt(user_text, recent_history, self._labels, self.window)
        payload = self._build_payload(prompt)
        model = getattr(self._settings, "gemini_model", None) or self._model_cfg.provider_model
        base = getattr(self._settings, "gemini_base_url", None) or GEMINI_CONFIG.base_url
        logger.info(
            "Gemini request",
            extra={"extra": {
                "model": model,
                "prompt_chars": len(prompt),
                "context_messages": min(len(recent_history), max(self.window, 0)),
            }},
        )
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.post(
                    f"{base}/models/{model}:generateContent",
                    params={"key": api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or e.__class__.__name__)
        if resp.status_code >= 400:
            message = self._error_message(resp) or self._labels.api_failed
            logger.error(
                f"Gemini error: {message}",
                extra={"extra": {"status": resp.status_code}},
            )
            raise ApiError(code="API_ERROR", message=message, http_status=resp.status_code)
        try:
            data = resp.json()
        except ValueError:
            raise MalformedResponseError(code="MALFORMED_RESPONSE", message=self._labels.malformed_response)
        text = self._parse_response(data)
        logger.info("Gemini response", extra={"extra": {"model": model, "answer_chars": len(text)}})
        return text

    # ---- 辅助方法 ----

    def _build_payload(self, prompt: str) -> Dict[str, Any]:
        temperature = getattr(self._settings, "temperature", None)
        max_tokens = getattr(self._settings, "max_output_tokens", None)
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._model_cfg.default_temperature if temperature is None else temperature,
                "maxOutputTokens": max_tokens or self._model_cfg.max_tokens,
            },
        }

    def _parse_response(self, data: Any) -> str:
        """取 candidates[0].content.parts[0].text，路径缺失时抛出 MalformedResponseError。"""

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
            content = candidates[0].get("content")
            parts: List[Any] = content.get("parts") or [] if isinstance(content, dict) else []
            if isinstance(parts, list) and parts and isinstance(parts[0], dict) and isinstance(parts[0].get("text"), str):
                return parts[0]["text"]
        raise MalformedResponseError(code="MALFORMED_RESPONSE", message=self._labels.malformed_response)

    @staticmethod
    def _error_message(resp: httpx.Response) -> Optional[str]:
        try:
            body = resp.json()
        except ValueError:
            return None
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
            return error["message"]
        return None
