"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供具体实现 (gemini_client) 以及上下文拼接 (build_prompt)。
"""

from chat_core.config.settings import settings
from chat_core.domain.exceptions import ValidationError
from chat_core.prompts import Labels
from chat_core.providers.base import ProviderClient
from chat_core.providers.gemini_client import GeminiClient, build_prompt
from chat_core.providers.registry import get_provider_config


def create_provider(name: str = "gemini", labels: Labels | None = None, cfg=settings) -> ProviderClient:
    """根据名称创建 Provider 实例；cfg 为传给客户端的配置对象。"""

    try:
        provider_cfg = get_provider_config(name)
    except KeyError as e:
        raise ValidationError(code="UNKNOWN_PROVIDER", message=str(e))
    if provider_cfg.name == "gemini":
        return GeminiClient(cfg, labels=labels)
    raise ValidationError(code="UNKNOWN_PROVIDER", message=f"No client for provider {name!r}")


__all__ = ["ProviderClient", "GeminiClient", "build_prompt", "create_provider"]
