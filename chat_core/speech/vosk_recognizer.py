"""基于 Vosk 的本地语音识别。

录音通过 ffmpeg 从 PulseAudio 源读取 16kHz 单声道 PCM，逐块送入
KaldiRecognizer；拿到第一条非空的最终结果即停止（非连续模式）。

需要：安装 vosk（pip install chat-core[voice]）、下载模型目录、系统中有 ffmpeg。
任一条件不满足时 is_available() 返回 False。

识别语言由模型决定：RecognitionConfig.locale 只用于核对模型目录名，
不匹配时抛出 SpeechError("language-not-supported")。
"""

import asyncio
import json
import os
import shutil
import subprocess
import time
from typing import Optional

from chat_core.domain.exceptions import SpeechError
from chat_core.infrastructure.logging.logger import logger
from chat_core.speech.base import RecognitionConfig

try:
    import vosk  # type: ignore
except ImportError:
    vosk = None

SAMPLE_RATE = 16000
CHUNK_BYTES = 4000


class VoskRecognizer:
    def __init__(self, model_path: Optional[str], source: str = "default"):
        self._model_path = model_path
        self._source = source
        self._model = None

    def is_available(self) -> bool:
        return (
            vosk is not None
            and bool(self._model_path)
            and os.path.isdir(self._model_path)
            and shutil.which("ffmpeg") is not None
        )

    async def recognize(self, config: RecognitionConfig) -> str:
        return await asyncio.to_thread(self._recognize_blocking, config)

    def _load_model(self):
        if self._model is None:
            try:
                self._model = vosk.Model(self._model_path)
            except Exception as e:  # vosk 只抛出通用 Exception
                raise SpeechError(code="engine", message=f"failed to load model: {e}")
        return self._model

    def _check_locale(self, locale: str) -> None:
        """按模型目录名（vosk-model[-small]-<lang>[-<region>]-<version>）核对语言。

        目录名不符合该命名时无法判断，交由模型本身决定识别语言。
        """
        name = os.path.basename(os.path.normpath(self._model_path or "")).lower()
        if not name.startswith("vosk-model"):
            return
        lang = locale.lower().replace("_", "-").split("-")[0]
        if lang and lang not in name.split("-"):
            raise SpeechError(
                code="language-not-supported",
                message=f"model {name} does not match locale {locale}",
            )

    def _spawn_ffmpeg(self) -> subprocess.Popen:
        cmd = [
            "ffmpeg", "-hide_banner", "-loglevel", "error",
            "-f", "pulse", "-i", self._source,
            "-ac", "1", "-ar", str(SAMPLE_RATE),
            "-f", "s16le", "-",
        ]
        try:
            return subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.DEVNULL)
        except OSError as e:
            raise SpeechError(code="audio-capture", message=str(e))

    def _recognize_blocking(self, config: RecognitionConfig) -> str:
        self._check_locale(config.locale)
        model = self._load_model()
        try:
            recognizer = vosk.KaldiRecognizer(model, SAMPLE_RATE)
        except Exception as e:
            raise SpeechError(code="engine", message=f"failed to create recognizer: {e}")
        logger.info("Speech capture started", extra={"extra": {"locale": config.locale, "source": self._source}})
        proc = self._spawn_ffmpeg()
        try:
            return self._decode(proc, recognizer, time.monotonic() + config.timeout)
        finally:
            proc.kill()
            proc.wait()

    @staticmethod
    def _decode(proc: subprocess.Popen, recognizer, deadline: float) -> str:
        received = 0
        try:
            while time.monotonic() < deadline:
                chunk = proc.stdout.read(CHUNK_BYTES)
                if not chunk:
                    break
                received += len(chunk)
                if recognizer.AcceptWaveform(chunk):
                    text = json.loads(recognizer.Result()).get("text", "").strip()
                    if text:
                        return text
            final = "" if received == 0 else json.loads(recognizer.FinalResult()).get("text", "").strip()
        except OSError as e:
            raise SpeechError(code="audio-capture", message=str(e))
        except Exception as e:
            raise SpeechError(code="engine", message=f"decoding failed: {e}")
        if received == 0:
            raise SpeechError(code="audio-capture", message="no audio received from capture device")
        if not final:
            raise SpeechError(code="no-speech", message="no speech detected")
        return final
