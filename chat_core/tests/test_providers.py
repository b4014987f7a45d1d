import pytest

from chat_core.domain.exceptions import ValidationError
from chat_core.providers import create_provider
from chat_core.providers.gemini_client import GeminiClient
from chat_core.providers.registry import get_provider_config


def test_create_provider_default():
    provider = create_provider()
    assert isinstance(provider, GeminiClient)
    assert provider.name == "gemini"


def test_create_provider_unknown():
    with pytest.raises(ValidationError):
        create_provider("kimi")


def test_provider_config_case_insensitive():
    cfg = get_provider_config("Gemini")
    assert cfg.models["chat"].max_tokens == 2048
    assert cfg.models["chat"].default_temperature == 0.7


def test_create_provider_uses_given_config():
    class Cfg:
        locale = "en"
        max_context_messages = 4
        http_timeout = 5

    cfg = Cfg()
    provider = create_provider("gemini", cfg=cfg)
    assert provider._settings is cfg
    assert provider.window == 4
    assert provider._labels.user == "User"
