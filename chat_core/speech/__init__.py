"""语音输入。

- base: SpeechRecognizer 协议与识别参数。
- adapter: SpeechInputAdapter（单次识别 + 指示灯清理）与 VoiceInputHandler。
- vosk_recognizer: 基于 Vosk + ffmpeg 的平台实现。
"""

from chat_core.speech.adapter import SpeechInputAdapter, VoiceInputHandler
from chat_core.speech.base import RecognitionConfig, SpeechRecognizer
from chat_core.speech.vosk_recognizer import VoskRecognizer

__all__ = [
    "RecognitionConfig",
    "SpeechInputAdapter",
    "SpeechRecognizer",
    "VoiceInputHandler",
    "VoskRecognizer",
]
