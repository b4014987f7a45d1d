"""Chat Core 顶层包。

该包提供单页聊天客户端的核心实现：把用户输入（或语音识别文本）
连同最近的会话上下文发送到 Gemini，渲染对话并保存在本地，
以及把会话导出为 Markdown。
"""

from chat_core.api.service import build_app, run_chat

__all__ = ["build_app", "run_chat"]
