"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

# 文件工具依赖 exceptions，需直接从 utils.file_helpers 导入
from .logging_helpers import get_logger, setup_logging
from .message_formatter import MessageFormatter
from .naming_helpers import FileNamingStrategy, PathResolver, is_format_conversion


__all__ = [
    "FileNamingStrategy",
    "MessageFormatter",
    "PathResolver",
    "get_logger",
    "is_format_conversion",
    "setup_logging",
]
