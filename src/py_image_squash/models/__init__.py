"""数据模型包。

定义压缩选项、结果以及格式常量。
"""

from .compression_options import (
    DEFAULT_PNG_QUALITY,
    TARGET_PRIORITY,
    CompressionOptions,
    FileTask,
    QualityRange,
    TargetFormat,
)
from .compression_result import (
    BatchFileResult,
    BatchReport,
    CompressionResult,
    format_size,
)
from .constants import (
    ImageFormats,
    get_extension,
    get_format_family,
    get_mime_type,
    is_heif_extension,
    is_supported_input,
    normalize_extension,
)


__all__ = [
    "DEFAULT_PNG_QUALITY",
    "TARGET_PRIORITY",
    "BatchFileResult",
    "BatchReport",
    "CompressionOptions",
    "CompressionResult",
    "FileTask",
    "ImageFormats",
    "QualityRange",
    "TargetFormat",
    "format_size",
    "get_extension",
    "get_format_family",
    "get_mime_type",
    "is_heif_extension",
    "is_supported_input",
    "normalize_extension",
]
