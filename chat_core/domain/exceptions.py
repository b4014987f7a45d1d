"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在编排层或 UI 层做统一捕获与用户提示。

各类错误的处理边界：
- ApiError 及其子类：在 ChatOrchestrator 中捕获，转为一条持久化的 ai 消息。
- SpeechError / UnsupportedError：在语音输入处理器中捕获，只更新状态栏。
- PersistenceReadError：在 ConversationStore.load 中吸收，历史视为空。
- NothingToExportError / ValidationError：在 UI 层以提示框展示。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "STORE_READ_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、status 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ApiError(BusinessError):
    """生成 API 调用失败：远端返回错误或响应格式不符合预期。"""


class NetworkError(ApiError):
    """网络层错误，例如连接失败、超时等。"""


class MalformedResponseError(ApiError):
    """成功响应中缺少 candidates[0].content.parts[0].text。"""


class SpeechError(BusinessError):
    """语音识别引擎报告的错误，code 为引擎的诊断码（如 "no-speech"）。"""


class UnsupportedError(BusinessError):
    """当前平台不具备所需能力（例如没有语音识别引擎）。"""


class NothingToExportError(BusinessError):
    """会话为空时尝试导出。"""


class PersistenceReadError(BusinessError):
    """本地保存的历史损坏或无法解析。"""


class PersistenceWriteError(BusinessError):
    """写入本地键值存储失败。"""


class ValidationError(BusinessError):
    """参数或配置校验失败。"""
