"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置。

注意：API Key 与主题属于会话状态，保存在本地键值存储中；
这里的 gemini_api_key 仅在存储中没有密钥时作为初始值。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("CHAT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- Gemini 相关配置 ----
    # 以下四项为 None 时使用 providers/registry.py 中的默认值
    gemini_base_url: Optional[str] = Field(default=None, description="Gemini API 基础URL")
    gemini_model: Optional[str] = Field(default=None, description="Gemini 模型名")
    gemini_api_key: Optional[str] = Field(
        default=None,
        description="初始 API 密钥，仅在本地存储中没有密钥时使用",
    )
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0, description="生成温度")
    max_output_tokens: Optional[int] = Field(default=None, ge=1, description="最大输出 token 数")
    max_context_messages: int = Field(default=10, ge=0, le=100, description="最大上下文消息数")
    http_timeout: float = Field(default=60.0, ge=1.0, le=600.0, description="HTTP 超时时间（秒）")

    # ---- 存储与日志 ----
    storage_root: str = Field(default=".storage", description="存储根目录")
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")
    export_dir: str = Field(default="exports", description="Markdown 导出目录")

    # ---- 界面与语音 ----
    locale: Literal["ja", "en"] = Field(default="ja", description="界面语言")
    speech_locale: str = Field(default="ja-JP", description="语音识别语言")
    vosk_model_path: Optional[str] = Field(default=None, description="Vosk 模型目录")
    speech_source: str = Field(default="default", description="ffmpeg 录音使用的 PulseAudio 源")
    speech_timeout: float = Field(default=10.0, ge=1.0, description="单次语音识别最长等待（秒）")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("gemini_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v.strip() or None
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
