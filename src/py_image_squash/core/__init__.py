"""核心模块包。

编解码适配器、调色板量化优化器以及压缩调度引擎。
"""

from .compression_engine import compress_bytes, get_format_processor, process_file
from .formats import CodecAdapter, FormatProcessor
from .optimizer import CompressionOptimizer


__all__ = [
    "CodecAdapter",
    "CompressionOptimizer",
    "FormatProcessor",
    "compress_bytes",
    "get_format_processor",
    "process_file",
]
