"""统一的对话数据模型。

- Message: 一条对话消息（user / ai），创建后不可变。
- Theme: 界面主题（dark / light）。
- SessionConfig: 会话级配置（API Key + 主题），由用户显式操作修改。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Literal


# 对话角色，只有用户与 AI 两种
Role = Literal["user", "ai"]

ROLES = ("user", "ai")


@dataclass(frozen=True)
class Message:
    """一条对话消息。

    - role: "user" 或 "ai"。
    - content: 纯文本内容（AI 侧的错误提示也以普通消息保存）。
    """

    role: Role
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown role: {self.role!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(role=data["role"], content=str(data["content"]))


class Theme(str, Enum):
    DARK = "dark"
    LIGHT = "light"

    @classmethod
    def parse(cls, value: str | None) -> "Theme":
        """未设置或无法识别的值一律视为 dark。"""
        if value == cls.LIGHT.value:
            return cls.LIGHT
        return cls.DARK

    def toggled(self) -> "Theme":
        return Theme.LIGHT if self is Theme.DARK else Theme.DARK


@dataclass
class SessionConfig:
    """会话配置。启动时从本地存储加载，每次修改立即写回。"""

    api_key: str = ""
    theme: Theme = field(default=Theme.DARK)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)
