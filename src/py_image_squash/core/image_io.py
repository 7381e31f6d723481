"""图像解码与编码辅助模块。

所有编解码器适配器都通过这里与 Pillow 交互，统一异常类型。
"""

from io import BytesIO
from typing import Any

from PIL import Image, ImageOps
from pillow_heif import register_heif_opener

from ..exceptions import CodecError, DecodeError
from ..utils.logging_helpers import get_logger


logger = get_logger()

# 注册 HEIF/HEIC 解码器
register_heif_opener()


def decode_image(data: bytes, mode: str | None = None) -> Image.Image:
    """把原始字节解码为完全加载的 Pillow 图像。

    Args:
        data: 原始图像字节
        mode: 目标色彩模式（如 "RGB"、"RGBA"），None 保持原模式

    Returns:
        Image.Image: 已加载到内存的图像

    Raises:
        DecodeError: 输入为空、损坏或无法识别
    """
    if not data:
        raise DecodeError("输入数据为空")

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            # 按 EXIF 方向信息摆正
            img = ImageOps.exif_transpose(img)
            if mode is not None and img.mode != mode:
                img = img.convert(mode)
            else:
                img = img.copy()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeError(f"无法解码图像: {e}") from e

    if img.width == 0 or img.height == 0:
        raise DecodeError(f"图像尺寸无效: {img.size}")

    return img


def encode_image(img: Image.Image, format_name: str, **params: Any) -> bytes:
    """把图像编码为指定格式的字节。

    Raises:
        CodecError: 编码器拒绝或没有产出数据
    """
    buffer = BytesIO()
    try:
        img.save(buffer, format=format_name, **params)
    except (OSError, ValueError, KeyError) as e:
        raise CodecError(f"{format_name} 编码失败: {e}") from e

    data = buffer.getvalue()
    if not data:
        raise CodecError(f"{format_name} 编码器没有产出数据")

    logger.debug(f"{format_name} 编码完成: {img.size} -> {len(data)} 字节")
    return data


def has_transparency(img: Image.Image) -> bool:
    """RGBA 图像是否存在非完全不透明的像素"""
    if img.mode != "RGBA":
        return False
    low, _ = img.getchannel("A").getextrema()
    return low < 255
