"""压缩选项模型。

定义质量范围、目标格式以及单次压缩调用使用的选项记录。
"""

import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_PNG_QUALITY = "50-80"
DEFAULT_MIN_QUALITY = 50
DEFAULT_MAX_QUALITY = 80

# 与无符号 8 位整数解析保持一致：可选的 "+"，只允许数字
_U8_PATTERN = re.compile(r"\+?[0-9]+")


def _parse_u8(token: str | None) -> int | None:
    """解析无符号 8 位整数，失败返回 None"""
    if token is None or not _U8_PATTERN.fullmatch(token):
        return None
    value = int(token)
    return value if value <= 255 else None


class TargetFormat(str, Enum):
    """目标格式枚举，值即为表单中的 output_format"""

    WEBP = "webp"
    AVIF = "avif"
    JPEG = "jpeg"
    PNG = "png"
    TIFF = "tiff"
    BMP = "bmp"
    ICO = "ico"

    @classmethod
    def from_value(cls, value: str | None) -> "TargetFormat | None":
        """宽松解析，未知值返回 None"""
        if not value:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class QualityRange(BaseModel):
    """质量范围 (min, max)，不保证 min <= max"""

    model_config = ConfigDict(frozen=True)

    min: int = Field(DEFAULT_MIN_QUALITY, ge=0, le=255, description="最低质量")
    max: int = Field(DEFAULT_MAX_QUALITY, ge=0, le=255, description="最高质量")

    @classmethod
    def parse(cls, text: str | None) -> "QualityRange":
        """解析 "min-max" 格式的质量字符串。

        每个字段独立回退到默认值，任何输入都不会抛出异常：
        "60" -> (60, 80)，"abc" -> (50, 80)，"-5" -> (50, 5)。

        Args:
            text: 质量字符串

        Returns:
            QualityRange: 解析结果
        """
        parts = (text or "").split("-")
        min_q = _parse_u8(parts[0] if len(parts) > 0 else None)
        max_q = _parse_u8(parts[1] if len(parts) > 1 else None)
        return cls(
            min=DEFAULT_MIN_QUALITY if min_q is None else min_q,
            max=DEFAULT_MAX_QUALITY if max_q is None else max_q,
        )

    @property
    def midpoint(self) -> int:
        """有损编码器共用的质量值"""
        return (self.min + self.max) // 2

    def as_tuple(self) -> tuple[int, int]:
        return (self.min, self.max)


# 转换标志的固定优先级，排在前面的胜出
TARGET_PRIORITY: tuple[tuple[str, TargetFormat], ...] = (
    ("to_webp", TargetFormat.WEBP),
    ("to_avif", TargetFormat.AVIF),
    ("to_jpeg", TargetFormat.JPEG),
    ("to_png", TargetFormat.PNG),
    ("to_tiff", TargetFormat.TIFF),
    ("to_bmp", TargetFormat.BMP),
    ("to_ico", TargetFormat.ICO),
)


class CompressionOptions(BaseModel):
    """单次压缩使用的选项，创建后不可修改"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    # 格式转换
    to_webp: bool = Field(False, description="转换为 WebP")
    to_avif: bool = Field(False, description="转换为 AVIF")
    to_jpeg: bool = Field(False, description="转换为 JPEG")
    to_png: bool = Field(False, description="转换为 PNG")
    to_tiff: bool = Field(False, description="转换为 TIFF")
    to_bmp: bool = Field(False, description="转换为 BMP")
    to_ico: bool = Field(False, description="转换为 ICO")

    # PNG 设置
    png_lossy: bool = Field(True, description="启用 PNG 调色板量化")
    png_quality: str = Field(DEFAULT_PNG_QUALITY, description="质量范围字符串")
    oxipng: bool = Field(True, description="启用 PNG 结构优化")

    @classmethod
    def from_target(
        cls, target: TargetFormat | str | None, **kwargs: Any
    ) -> "CompressionOptions":
        """根据单一目标格式构建选项"""
        fmt = target if isinstance(target, TargetFormat) else TargetFormat.from_value(target)
        if fmt is not None:
            kwargs[f"to_{fmt.value}"] = True
        return cls(**kwargs)

    @property
    def quality_range(self) -> QualityRange:
        return QualityRange.parse(self.png_quality)

    @property
    def lossy_quality(self) -> int:
        """WebP/JPEG/AVIF 共用的质量值，取质量范围的中点"""
        return self.quality_range.midpoint

    @property
    def target_format(self) -> TargetFormat | None:
        """按固定优先级选出的唯一目标格式"""
        for field_name, fmt in TARGET_PRIORITY:
            if getattr(self, field_name):
                return fmt
        return None

    @property
    def requested_targets(self) -> list[TargetFormat]:
        """所有被请求的目标格式（仅用于诊断日志）"""
        return [fmt for field_name, fmt in TARGET_PRIORITY if getattr(self, field_name)]


class FileTask(BaseModel):
    """批量处理中单个文件的任务描述，可跨进程传递"""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(description="输入文件路径")
    options: CompressionOptions = Field(description="压缩选项")
    output_dir: Path | None = Field(None, description="输出目录，None 为源文件目录")
    overwrite: bool = Field(False, description="是否覆盖原文件")
