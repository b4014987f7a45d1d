"""Provider 抽象接口。

ChatOrchestrator 不直接依赖具体厂商的 HTTP 调用，而是依赖此协议：

- 每个厂商实现一个 ProviderClient（如 GeminiClient）。
- 负责：根据最近的会话历史构造请求、调用远端并解析出回答文本。
- 所有失败统一以 ApiError（或其子类）抛出。

客户端本身无状态：不重试、不缓存、不合并请求。
"""

from typing import Protocol, Sequence

from chat_core.domain.models import Message


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。"""

    name: str

    async def send(self, user_text: str, recent_history: Sequence[Message], *, api_key: str) -> str:
        ...
