"""批量图像压缩与格式转换工具。

基于 Pillow 的 PNG 量化、JPEG/WebP/AVIF 编码以及 HEIC 转换，提供命令行和 Web 两种入口。
"""

__version__ = "0.1.0"
__description__ = "批量图像压缩与格式转换，基于 Pillow"

# 核心功能导出
from .compressor import ImageCompressor
from .models import (
    BatchFileResult,
    BatchReport,
    CompressionOptions,
    CompressionResult,
    QualityRange,
    TargetFormat,
)


__all__ = [
    "BatchFileResult",
    "BatchReport",
    "CompressionOptions",
    "CompressionResult",
    "ImageCompressor",
    "QualityRange",
    "TargetFormat",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
