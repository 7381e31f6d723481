"""图像压缩处理引擎模块。

包含选项解析、并发执行和批量处理。
"""

from .batch import BatchProcessor
from .concurrent_executor import ConcurrentExecutor
from .config import OptionsResolver


__all__ = [
    "BatchProcessor",
    "ConcurrentExecutor",
    "OptionsResolver",
]
