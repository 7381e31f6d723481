"""图像格式相关常量定义。

目标格式的 MIME 类型、扩展名，以及批量处理支持的输入扩展名。
"""

from typing import Final

from .compression_options import TargetFormat


class ImageFormats:
    """格式元数据"""

    MIME_TYPES: Final[dict[TargetFormat, str]] = {
        TargetFormat.WEBP: "image/webp",
        TargetFormat.AVIF: "image/avif",
        TargetFormat.JPEG: "image/jpeg",
        TargetFormat.PNG: "image/png",
        TargetFormat.TIFF: "image/tiff",
        TargetFormat.BMP: "image/bmp",
        TargetFormat.ICO: "image/x-icon",
    }

    # 首选扩展名
    EXTENSIONS: Final[dict[TargetFormat, str]] = {
        TargetFormat.WEBP: ".webp",
        TargetFormat.AVIF: ".avif",
        TargetFormat.JPEG: ".jpg",
        TargetFormat.PNG: ".png",
        TargetFormat.TIFF: ".tiff",
        TargetFormat.BMP: ".bmp",
        TargetFormat.ICO: ".ico",
    }

    # 扩展名到格式族的映射（用于判断是否发生了格式转换）
    EXTENSION_FAMILIES: Final[dict[str, TargetFormat]] = {
        "webp": TargetFormat.WEBP,
        "avif": TargetFormat.AVIF,
        "jpg": TargetFormat.JPEG,
        "jpeg": TargetFormat.JPEG,
        "png": TargetFormat.PNG,
        "tif": TargetFormat.TIFF,
        "tiff": TargetFormat.TIFF,
        "bmp": TargetFormat.BMP,
        "ico": TargetFormat.ICO,
    }

    # 批量模式扫描的输入扩展名
    SUPPORTED_INPUT_EXTENSIONS: Final[frozenset[str]] = frozenset(
        {"png", "jpg", "jpeg", "bmp", "tiff", "tif", "webp", "heic", "heif"}
    )

    HEIF_EXTENSIONS: Final[frozenset[str]] = frozenset({"heic", "heif"})
    JPEG_EXTENSIONS: Final[frozenset[str]] = frozenset({"jpg", "jpeg"})


def normalize_extension(extension: str | None) -> str:
    """统一扩展名：小写，去掉前导点"""
    return (extension or "").strip().lower().lstrip(".")


def get_mime_type(fmt: TargetFormat) -> str:
    return ImageFormats.MIME_TYPES[fmt]


def get_extension(fmt: TargetFormat) -> str:
    return ImageFormats.EXTENSIONS[fmt]


def get_format_family(extension: str | None) -> TargetFormat | None:
    """扩展名所属的格式族，未知扩展名返回 None"""
    return ImageFormats.EXTENSION_FAMILIES.get(normalize_extension(extension))


def is_supported_input(extension: str | None) -> bool:
    return normalize_extension(extension) in ImageFormats.SUPPORTED_INPUT_EXTENSIONS


def is_heif_extension(extension: str | None) -> bool:
    return normalize_extension(extension) in ImageFormats.HEIF_EXTENSIONS
