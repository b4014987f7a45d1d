"""界面与提示词中使用的本地化文案。

角色标签（"ユーザー" / "AI"）只用于展示和拼接上下文，
不会影响 Message.role 的取值。
"""

from dataclasses import dataclass
from typing import Dict

from chat_core.domain.models import Role


@dataclass(frozen=True)
class Labels:
    user: str
    ai: str
    # 状态栏
    ready: str
    thinking: str
    error_status: str
    listening: str
    speech_recognized: str
    speech_error: str
    cleared: str
    api_key_saved: str
    exported: str
    # 对话框与消息
    error_prefix: str
    api_failed: str
    malformed_response: str
    enter_api_key: str
    confirm_clear: str
    nothing_to_export: str
    speech_unsupported: str
    welcome_title: str
    welcome_body: str
    # 导出
    export_title: str
    export_filename: str
    export_created: str
    # 按钮与设置
    send: str
    voice: str
    clear: str
    export: str
    theme: str
    settings: str
    api_key_prompt: str

    def role_label(self, role: Role) -> str:
        return self.user if role == "user" else self.ai


JA = Labels(
    user="ユーザー",
    ai="AI",
    ready="準備完了",
    thinking="考え中...",
    error_status="エラー発生",
    listening="お話しください...",
    speech_recognized="音声を認識しました",
    speech_error="音声認識エラー",
    cleared="会話をクリアしました",
    api_key_saved="APIキーを保存しました",
    exported="Obsidianに保存しました",
    error_prefix="エラーが発生しました: ",
    api_failed="API呼び出しに失敗しました",
    malformed_response="APIの応答を解析できませんでした",
    enter_api_key="APIキーを入力してください",
    confirm_clear="会話履歴を全て削除しますか?",
    nothing_to_export="保存する会話がありません",
    speech_unsupported="お使いの環境は音声入力に対応していません。",
    welcome_title="AIアシスタント",
    welcome_body="何でも聞いてください。",
    export_title="AI会話",
    export_filename="AI会話",
    export_created="作成日時",
    send="送信",
    voice="🎤",
    clear="クリア",
    export="Obsidianに保存",
    theme="テーマ切替",
    settings="設定",
    api_key_prompt="Gemini APIキー:",
)

EN = Labels(
    user="User",
    ai="AI",
    ready="Ready",
    thinking="Thinking...",
    error_status="Error",
    listening="Listening...",
    speech_recognized="Speech recognized",
    speech_error="Speech recognition error",
    cleared="Conversation cleared",
    api_key_saved="API key saved",
    exported="Conversation exported",
    error_prefix="An error occurred: ",
    api_failed="API call failed",
    malformed_response="Could not parse the API response",
    enter_api_key="Please enter an API key",
    confirm_clear="Delete the entire conversation history?",
    nothing_to_export="There is no conversation to save",
    speech_unsupported="Voice input is not supported in this environment.",
    welcome_title="AI Assistant",
    welcome_body="Ask me anything.",
    export_title="AI Conversation",
    export_filename="AI_Conversation",
    export_created="Created",
    send="Send",
    voice="🎤",
    clear="Clear",
    export="Save to Obsidian",
    theme="Toggle theme",
    settings="Settings",
    api_key_prompt="Gemini API key:",
)

LABELS: Dict[str, Labels] = {"ja": JA, "en": EN}


def get_labels(locale: str = "ja") -> Labels:
    """按语言返回文案，未知语言回落到日语。"""

    return LABELS.get(locale.lower().split("-")[0], JA)
