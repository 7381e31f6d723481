"""压缩参数优化器。

提供调色板量化预设、JPEG 编码参数以及 PNG 无损结构优化。
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from PIL import Image, features

from ..config import get_config
from ..models.compression_options import QualityRange
from ..utils.logging_helpers import get_logger
from .image_io import decode_image, encode_image, has_transparency


logger = get_logger()


@dataclass(frozen=True)
class QuantizePreset:
    """调色板量化预设"""

    colors: int
    kmeans: int
    high_fidelity: bool


class CompressionOptimizer:
    """压缩参数优化器，根据质量设置选择编码参数"""

    def __init__(self) -> None:
        """初始化优化器"""
        self.settings = get_config().compression
        self.libimagequant_available = bool(features.check_feature("libimagequant"))
        if self.libimagequant_available:
            logger.debug("✅ libimagequant 量化已启用")

    def quantize_preset(self, quality: QualityRange) -> QuantizePreset:
        """根据质量上限选择量化预设

        max <= 60 时使用慢速高保真量化并缩减调色板，否则使用平衡预设。
        """
        if quality.max <= self.settings.AGGRESSIVE_MAX_QUALITY:
            return QuantizePreset(
                colors=self.settings.AGGRESSIVE_COLORS,
                kmeans=self.settings.AGGRESSIVE_KMEANS,
                high_fidelity=True,
            )
        return QuantizePreset(
            colors=self.settings.DEFAULT_COLORS, kmeans=0, high_fidelity=False
        )

    def quantize(self, img: Image.Image, quality: QualityRange) -> Image.Image:
        """调色板量化并重新展开为 RGBA

        不透明图像在 RGB 下量化，再以固定的 Floyd-Steinberg 抖动映射到调色板；
        含透明度的图像使用支持 alpha 的量化器。
        """
        preset = self.quantize_preset(quality)
        rgba = img.convert("RGBA")

        if has_transparency(rgba):
            method = self._alpha_method(preset)
            quantized = rgba.quantize(
                colors=preset.colors, method=method, kmeans=preset.kmeans
            )
        else:
            rgb = rgba.convert("RGB")
            palette = rgb.quantize(
                colors=preset.colors,
                method=self._opaque_method(preset),
                kmeans=preset.kmeans,
            )
            quantized = rgb.quantize(palette=palette, dither=Image.Dither.FLOYDSTEINBERG)

        logger.debug(
            f"量化完成: 质量 {quality.as_tuple()}，调色板 {preset.colors} 色，"
            f"k-means {preset.kmeans} 次"
        )
        return quantized.convert("RGBA")

    def _alpha_method(self, preset: QuantizePreset) -> Image.Quantize:
        # 只有 FASTOCTREE 和 LIBIMAGEQUANT 支持 RGBA
        if preset.high_fidelity and self.libimagequant_available:
            return Image.Quantize.LIBIMAGEQUANT
        return Image.Quantize.FASTOCTREE

    def _opaque_method(self, preset: QuantizePreset) -> Image.Quantize:
        if preset.high_fidelity and self.libimagequant_available:
            return Image.Quantize.LIBIMAGEQUANT
        return Image.Quantize.MEDIANCUT

    def jpeg_params(self, quality: int) -> dict[str, Any]:
        """JPEG 编码参数：渐进式，低质量时启用哈夫曼优化"""
        quality = max(0, min(100, quality))
        params: dict[str, Any] = {"quality": quality, "progressive": True}
        if quality <= self.settings.JPEG_OPTIMIZE_THRESHOLD:
            params["optimize"] = True
        return params

    def optimize_png(self, data: bytes) -> bytes:
        """PNG 无损结构优化

        不改变解码后的像素：完全不透明的 RGBA 降为 RGB，
        不超过 256 色时精确转为调色板，使用最高压缩级别并丢弃元数据块。
        返回所有候选中最小的一个。
        """
        img = decode_image(data)
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA")
        if img.mode == "RGBA" and not has_transparency(img):
            img = img.convert("RGB")

        level = self.settings.PNG_OPTIMIZE_LEVEL
        candidates = [
            data,
            encode_image(img, "PNG", optimize=True, compress_level=level),
        ]

        indexed = self.reduce_to_palette(img)
        if indexed is not None:
            candidates.append(
                encode_image(indexed, "PNG", optimize=True, compress_level=level)
            )

        best = min(candidates, key=len)
        logger.debug(f"PNG 结构优化: {len(data)} -> {len(best)} 字节")
        return best

    @staticmethod
    def reduce_to_palette(img: Image.Image) -> Image.Image | None:
        """颜色数不超过 256 时构建精确的调色板图像，否则返回 None"""
        arr = np.asarray(img)
        channels = arr.shape[2]
        flat = arr.reshape(-1, channels)
        colors, inverse = np.unique(flat, axis=0, return_inverse=True)
        if len(colors) > 256:
            return None

        indices = inverse.reshape(img.height, img.width).astype(np.uint8)
        indexed = Image.frombytes("P", img.size, indices.tobytes())
        indexed.putpalette(
            colors.astype(np.uint8).tobytes(), rawmode="RGBA" if channels == 4 else "RGB"
        )
        return indexed
