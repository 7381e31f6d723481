"""压缩选项解析模块。

把 Web 表单、命令行参数以及库调用参数统一解析为 CompressionOptions。
"""

from argparse import Namespace
from collections.abc import Mapping
from typing import Any

from ..config import get_config
from ..models.compression_options import TARGET_PRIORITY, CompressionOptions, TargetFormat
from ..utils.logging_helpers import get_logger


logger = get_logger()

_OPTION_FIELDS = frozenset(CompressionOptions.model_fields)


def _form_flag(value: str | None) -> bool:
    """表单布尔值：缺省为 True，只有字面量 "true" 为真"""
    if value is None:
        return True
    return value == "true"


class OptionsResolver:
    """压缩选项解析器

    解析过程是宽松的：未知字段被忽略，非法值回退到默认值，不会抛出异常。
    """

    @staticmethod
    def from_form(fields: Mapping[str, str]) -> CompressionOptions:
        """从 multipart 表单字段构建选项

        Args:
            fields: 表单字段（png_quality, output_format, oxipng, png_lossy）

        Returns:
            CompressionOptions: 解析后的选项
        """
        png_quality = fields.get("png_quality") or get_config().compression.PNG_QUALITY
        output_format = fields.get("output_format")
        target = TargetFormat.from_value(output_format)
        if output_format and target is None:
            logger.debug(f"忽略未知的输出格式: {output_format}")

        return CompressionOptions.from_target(
            target,
            png_quality=png_quality,
            oxipng=_form_flag(fields.get("oxipng")),
            png_lossy=_form_flag(fields.get("png_lossy")),
        )

    @staticmethod
    def from_cli(args: Namespace) -> CompressionOptions:
        """从 argparse 命名空间构建选项"""
        values: dict[str, Any] = {
            "png_lossy": args.png_lossy,
            "png_quality": args.png_quality,
            "oxipng": args.oxipng,
        }
        for field_name, _fmt in TARGET_PRIORITY:
            values[field_name] = bool(getattr(args, field_name, False))
        return CompressionOptions(**values)

    @staticmethod
    def build(**fields: Any) -> CompressionOptions:
        """供库调用者使用的构建方法，未知参数被丢弃"""
        unknown = set(fields) - _OPTION_FIELDS
        if unknown:
            logger.debug(f"忽略未知的压缩选项: {sorted(unknown)}")
        return CompressionOptions(
            **{key: value for key, value in fields.items() if key in _OPTION_FIELDS}
        )
