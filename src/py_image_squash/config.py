"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass, field


def _cpu_count() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class CompressionDefaults:
    """压缩相关的默认配置"""

    # 质量设置
    PNG_QUALITY: str = "50-80"
    DEFAULT_JPEG_QUALITY: int = 75  # 未请求转换时 JPEG 的固定质量
    HEIC_JPEG_QUALITY: int = 85  # HEIC 转 JPEG 使用较高质量

    # 调色板量化预设
    AGGRESSIVE_MAX_QUALITY: int = 60  # max <= 60 视为最大压缩
    AGGRESSIVE_COLORS: int = 128
    DEFAULT_COLORS: int = 256
    AGGRESSIVE_KMEANS: int = 3

    # JPEG 在此质量及以下启用额外的编码优化
    JPEG_OPTIMIZE_THRESHOLD: int = 60

    # 编码器设置
    AVIF_SPEED: int = 6  # 0 最慢/最好，10 最快
    PNG_OPTIMIZE_LEVEL: int = 9
    ICO_MAX_SIZE: int = 256


@dataclass(frozen=True)
class ProcessingDefaults:
    """处理相关的默认配置"""

    # 并发设置
    MAX_WORKERS: int = field(default_factory=_cpu_count)
    EXECUTOR_TYPE: str = "thread"

    # 批量处理输出
    OUTPUT_PREFIX: str = "c_"
    BACKUP_SUFFIX: str = ".bak"


@dataclass(frozen=True)
class ServerDefaults:
    """Web 服务相关的默认配置"""

    HOST: str = "127.0.0.1"
    PORT: int = 3030
    MAX_UPLOAD_MB: float = 50.0
    OPEN_BROWSER: bool = True

    @property
    def max_upload_bytes(self) -> int:
        return int(self.MAX_UPLOAD_MB * 1024 * 1024)


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    # 日志级别
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_image_squash.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.compression = CompressionDefaults()
        self.processing = ProcessingDefaults()
        self.server = ServerDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 压缩配置
        if png_quality := os.getenv("SQUASH_PNG_QUALITY"):
            object.__setattr__(self.compression, "PNG_QUALITY", png_quality)

        # 并发配置
        if max_workers := os.getenv("SQUASH_MAX_WORKERS"):
            object.__setattr__(self.processing, "MAX_WORKERS", int(max_workers))

        if executor_type := os.getenv("SQUASH_EXECUTOR_TYPE"):
            object.__setattr__(self.processing, "EXECUTOR_TYPE", executor_type.lower())

        # 服务配置
        if port := os.getenv("SQUASH_PORT"):
            object.__setattr__(self.server, "PORT", int(port))

        if max_upload := os.getenv("SQUASH_MAX_UPLOAD_MB"):
            object.__setattr__(self.server, "MAX_UPLOAD_MB", float(max_upload))

        if open_browser := os.getenv("SQUASH_OPEN_BROWSER"):
            object.__setattr__(self.server, "OPEN_BROWSER", _env_flag(open_browser))

        # 日志配置
        if log_level := os.getenv("SQUASH_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("SQUASH_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging, "ENABLE_FILE_LOGGING", _env_flag(enable_file_log)
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
