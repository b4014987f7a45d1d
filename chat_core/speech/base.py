"""语音识别能力协议。

识别器一次调用只产出一条最终文本（非连续模式、不返回中间结果），
失败时抛出 SpeechError，code 为引擎诊断码：

- "no-speech": 超时或音频结束仍未识别到内容。
- "audio-capture": 无法打开录音设备。
- "engine": 识别引擎初始化或解码失败。
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class RecognitionConfig:
    locale: str = "ja-JP"
    continuous: bool = False
    interim_results: bool = False
    timeout: float = 10.0


class SpeechRecognizer(Protocol):
    def is_available(self) -> bool:
        ...

    async def recognize(self, config: RecognitionConfig) -> str:
        ...
