"""图像压缩异常处理模块。

定义统一的异常类和错误处理机制，包含编码器异常转换装饰器。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.compression_result import BatchFileResult
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")

HEIC_DECODE_MESSAGE = "不支持的 HEIC 格式或文件已损坏 (unsupported or corrupted HEIC)"


# 统一的异常类型
class CompressionError(Exception):
    """压缩相关错误基类"""

    def __init__(self, message: str, input_path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.input_path = input_path


class DecodeError(CompressionError):
    """输入字节为空、损坏或格式无法识别"""

    pass


class HeicDecodeError(DecodeError):
    """HEIC/HEIF 输入无法解码"""

    def __init__(self, input_path: Path | None = None):
        super().__init__(HEIC_DECODE_MESSAGE, input_path)


class CodecError(CompressionError):
    """编码器拒绝参数或没有产出数据"""

    pass


class FileOperationError(CompressionError):
    """文件读写、重命名失败"""

    pass


class ConfigError(CompressionError):
    """配置错误（宽松解析下不会触发，保留类型）"""

    pass


def handle_codec_errors(operation_name: str = "图像编码"):
    """编码器异常处理装饰器

    将 Pillow 抛出的底层异常统一转换为 CodecError，
    已经是 CompressionError 的异常原样抛出。

    Args:
        operation_name: 操作名称，用于日志记录
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except CompressionError:
                raise
            except (UnidentifiedImageError, DecompressionBombError) as e:
                logger.debug(f"{operation_name} - 解码失败: {e}")
                raise DecodeError(f"无法解码图像: {e}") from e
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.debug(f"{operation_name} - 编码器拒绝: {e}")
                raise CodecError(f"{operation_name}失败: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    把单个文件的异常转换为失败的 BatchFileResult，保证批量处理继续进行。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录"""
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def create_failure(
        path: Path, message: str, size_before: int = 0
    ) -> BatchFileResult:
        """创建失败结果，消息不会为空"""
        return BatchFileResult(
            path=path,
            output_path=None,
            size_before=size_before,
            size_after=0,
            success=False,
            message=message or "未知错误",
        )

    @staticmethod
    def handle_file_error(
        error: Exception, path: Path, step: str, size_before: int = 0
    ) -> BatchFileResult:
        """按异常类型选择日志级别并生成失败结果"""
        match error:
            case DecodeError():
                level = "warning"
            case CodecError():
                level = "warning"
            case FileNotFoundError() | PermissionError():
                level = "warning"
            case _:
                level = "error"

        ErrorHandler._log_error(step, path, error, level)
        return ErrorHandler.create_failure(
            path, MessageFormatter.step_failed(step, error), size_before
        )
