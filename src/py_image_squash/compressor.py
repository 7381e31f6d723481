"""图像压缩器接口。

面向库调用者的简洁入口，封装调度引擎和批量处理器。
"""

from pathlib import Path
from typing import Any

from .config import get_config
from .core.compression_engine import compress_bytes, process_file
from .core.formats import FormatProcessor
from .engine.batch import BatchProcessor
from .engine.concurrent_executor import ConcurrentExecutor
from .engine.config import OptionsResolver
from .exceptions import ConfigError
from .models import BatchFileResult, BatchReport, CompressionOptions, CompressionResult, FileTask
from .utils.logging_helpers import get_logger


logger = get_logger()


class ImageCompressor:
    """图像压缩器。

    提供内存压缩、单文件压缩和目录批量压缩三种调用方式。
    """

    def __init__(
        self,
        max_workers: int | None = None,
        executor_type: str | None = None,
        processor: FormatProcessor | None = None,
    ):
        """初始化压缩器。

        Args:
            max_workers: 批量处理时的最大并发数，None 使用配置默认值
            executor_type: 执行器类型 ('thread'/'process')，None 使用配置默认值
            processor: 自定义格式处理器，仅对内存压缩生效
        """
        settings = get_config().processing
        max_workers = settings.MAX_WORKERS if max_workers is None else max_workers
        executor_type = executor_type or settings.EXECUTOR_TYPE

        if max_workers <= 0:
            raise ConfigError("max_workers 必须大于 0")
        if executor_type not in ("thread", "process"):
            raise ConfigError("executor_type 必须是 'thread' 或 'process'")

        self.executor = ConcurrentExecutor(max_workers, executor_type)
        self.processor = processor

        logger.debug("初始化图像压缩器")

    @staticmethod
    def _options(options: CompressionOptions | None, fields: dict[str, Any]) -> CompressionOptions:
        if options is not None:
            return options
        return OptionsResolver.build(**fields)

    def compress_bytes(
        self,
        data: bytes,
        extension: str,
        options: CompressionOptions | None = None,
        **fields: Any,
    ) -> CompressionResult:
        """压缩内存中的图像数据。

        Args:
            data: 原始图像字节
            extension: 源扩展名（决定默认编码路径）
            options: 压缩选项；为 None 时由 fields 构建
            **fields: CompressionOptions 字段，如 to_webp=True

        Returns:
            CompressionResult: 压缩结果

        Raises:
            CompressionError: 解码或编码失败
        """
        return compress_bytes(data, extension, self._options(options, fields), self.processor)

    def compress_file(
        self,
        input_path: str | Path,
        output_dir: str | Path | None = None,
        overwrite: bool = False,
        options: CompressionOptions | None = None,
        **fields: Any,
    ) -> BatchFileResult:
        """压缩单个文件，失败时返回失败结果而不是抛出异常"""
        task = FileTask(
            path=Path(input_path),
            options=self._options(options, fields),
            output_dir=Path(output_dir) if output_dir else None,
            overwrite=overwrite,
        )
        return process_file(task)

    def compress_path(
        self,
        input_path: str | Path,
        output_dir: str | Path | None = None,
        overwrite: bool = False,
        options: CompressionOptions | None = None,
        **fields: Any,
    ) -> BatchReport:
        """压缩文件或目录下的所有支持的图像"""
        processor = BatchProcessor(self.executor, output_dir=output_dir, overwrite=overwrite)
        return processor.process_path(input_path, self._options(options, fields))
