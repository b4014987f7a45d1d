"""界面渲染协议。

编排层只通过 Renderer 与界面交互，具体实现见 gui/app.py 的 TkRenderer。
所有方法都在唯一的控制线程上调用。
"""

from typing import Protocol

from chat_core.domain.models import Message, Theme


class Renderer(Protocol):
    def render_message(self, message: Message) -> None:
        ...

    def clear_messages(self) -> None:
        """清空消息区并显示欢迎面板。"""
        ...

    def show_typing(self) -> None:
        ...

    def hide_typing(self) -> None:
        ...

    def set_status(self, text: str) -> None:
        ...

    def set_busy(self, busy: bool) -> None:
        """发送中禁用发送按钮。"""
        ...

    def set_listening(self, active: bool) -> None:
        ...

    def set_input_text(self, text: str) -> None:
        ...

    def apply_theme(self, theme: Theme) -> None:
        ...

    def prompt_for_api_key(self) -> None:
        ...

    def alert(self, text: str) -> None:
        ...


class NullRenderer:
    """无界面时使用的空实现（例如 api.service 的命令行调用）。"""

    def render_message(self, message: Message) -> None:
        pass

    def clear_messages(self) -> None:
        pass

    def show_typing(self) -> None:
        pass

    def hide_typing(self) -> None:
        pass

    def set_status(self, text: str) -> None:
        pass

    def set_busy(self, busy: bool) -> None:
        pass

    def set_listening(self, active: bool) -> None:
        pass

    def set_input_text(self, text: str) -> None:
        pass

    def apply_theme(self, theme: Theme) -> None:
        pass

    def prompt_for_api_key(self) -> None:
        pass

    def alert(self, text: str) -> None:
        pass
