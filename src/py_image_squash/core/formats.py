"""格式处理器模块。

每种目标编码对应一个适配器：输入原始字节和压缩选项，输出 CompressionResult。
适配器要么返回完整的非空字节，要么抛出 DecodeError / CodecError。
"""

from collections.abc import Callable
from io import BytesIO

from PIL import Image

from ..config import get_config
from ..exceptions import CodecError, DecodeError, HeicDecodeError, handle_codec_errors
from ..models.compression_options import CompressionOptions, TargetFormat
from ..models.compression_result import CompressionResult
from ..utils.logging_helpers import get_logger
from .image_io import decode_image, encode_image
from .optimizer import CompressionOptimizer


logger = get_logger()

CodecAdapter = Callable[[bytes, CompressionOptions], CompressionResult]

_optimizer: CompressionOptimizer | None = None


def _get_optimizer() -> CompressionOptimizer:
    global _optimizer
    if _optimizer is None:
        _optimizer = CompressionOptimizer()
    return _optimizer


@handle_codec_errors("PNG 量化压缩")
def compress_png_quantized(data: bytes, options: CompressionOptions) -> CompressionResult:
    """PNG 有损压缩：调色板量化 + 可选的结构优化"""
    optimizer = _get_optimizer()
    img = decode_image(data, "RGBA")
    quantized = optimizer.quantize(img, options.quality_range)
    png_bytes = encode_image(quantized, "PNG")

    if options.oxipng:
        png_bytes = optimizer.optimize_png(png_bytes)

    return CompressionResult.of(png_bytes, TargetFormat.PNG)


@handle_codec_errors("PNG 无损编码")
def compress_png_lossless(data: bytes, options: CompressionOptions) -> CompressionResult:  # noqa: ARG001
    """PNG 无损重新编码，像素数据保持不变"""
    img = decode_image(data)
    return CompressionResult.of(encode_image(img, "PNG"), TargetFormat.PNG)


def compress_jpeg(data: bytes, quality: int) -> CompressionResult:
    """按指定质量重新编码 JPEG"""
    return _encode_jpeg(decode_image(data, "RGB"), quality)


@handle_codec_errors("JPEG 编码")
def _encode_jpeg(img: Image.Image, quality: int) -> CompressionResult:
    params = _get_optimizer().jpeg_params(quality)
    return CompressionResult.of(encode_image(img, "JPEG", **params), TargetFormat.JPEG)


def to_jpeg(data: bytes, options: CompressionOptions) -> CompressionResult:
    return compress_jpeg(data, options.lossy_quality)


@handle_codec_errors("WebP 编码")
def to_webp(data: bytes, options: CompressionOptions) -> CompressionResult:
    img = decode_image(data, "RGBA")
    quality = max(0, min(100, options.lossy_quality))
    return CompressionResult.of(
        encode_image(img, "WEBP", quality=quality, lossless=False), TargetFormat.WEBP
    )


@handle_codec_errors("AVIF 编码")
def to_avif(data: bytes, options: CompressionOptions) -> CompressionResult:
    img = decode_image(data, "RGBA")
    quality = max(0, min(100, options.lossy_quality))
    speed = get_config().compression.AVIF_SPEED
    return CompressionResult.of(
        encode_image(img, "AVIF", quality=quality, speed=speed), TargetFormat.AVIF
    )


def to_png(data: bytes, options: CompressionOptions) -> CompressionResult:
    """转换为 PNG，始终量化，不受 png_lossy 影响"""
    return compress_png_quantized(data, options)


@handle_codec_errors("TIFF 编码")
def to_tiff(data: bytes, options: CompressionOptions) -> CompressionResult:  # noqa: ARG001
    img = decode_image(data)
    return CompressionResult.of(encode_image(img, "TIFF"), TargetFormat.TIFF)


@handle_codec_errors("BMP 编码")
def to_bmp(data: bytes, options: CompressionOptions) -> CompressionResult:  # noqa: ARG001
    img = decode_image(data)
    if img.mode not in ("1", "L", "P", "RGB", "RGBA"):
        img = img.convert("RGBA")
    return CompressionResult.of(encode_image(img, "BMP"), TargetFormat.BMP)


@handle_codec_errors("ICO 编码")
def to_ico(data: bytes, options: CompressionOptions) -> CompressionResult:  # noqa: ARG001
    """转换为 ICO，超过 256 像素时等比缩小；ICO 编码失败时回退为 PNG

    回退时结果的格式和 content_type 都如实反映为 PNG。
    """
    max_size = get_config().compression.ICO_MAX_SIZE
    img = decode_image(data)
    if img.mode not in ("1", "L", "LA", "P", "RGB", "RGBA"):
        img = img.convert("RGBA")
    if img.width > max_size or img.height > max_size:
        img.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

    try:
        ico_bytes = encode_image(img, "ICO", sizes=[img.size])
        return CompressionResult.of(ico_bytes, TargetFormat.ICO)
    except CodecError as e:
        logger.warning(f"ICO 编码失败，回退为 PNG: {e}")
        return CompressionResult.of(encode_image(img, "PNG"), TargetFormat.PNG)


@handle_codec_errors("HEIC 转换")
def heic_to_jpeg(data: bytes, options: CompressionOptions) -> CompressionResult:  # noqa: ARG001
    """HEIC/HEIF 解码后固定以高质量转为 JPEG"""
    try:
        img = decode_image(data, "RGB")
    except DecodeError as e:
        raise HeicDecodeError() from e
    return _encode_jpeg(img, get_config().compression.HEIC_JPEG_QUALITY)


class FormatProcessor:
    """格式处理器：目标格式到编解码适配器的注册表

    调度引擎只通过这里取得适配器，测试可以替换任意一项。
    """

    def __init__(self, adapters: dict[TargetFormat, CodecAdapter] | None = None) -> None:
        """初始化格式处理器

        Args:
            adapters: 覆盖默认适配器的映射
        """
        self.adapters: dict[TargetFormat, CodecAdapter] = {
            TargetFormat.WEBP: to_webp,
            TargetFormat.AVIF: to_avif,
            TargetFormat.JPEG: to_jpeg,
            TargetFormat.PNG: to_png,
            TargetFormat.TIFF: to_tiff,
            TargetFormat.BMP: to_bmp,
            TargetFormat.ICO: to_ico,
        }
        if adapters:
            self.adapters.update(adapters)

        self.png_quantized: CodecAdapter = compress_png_quantized
        self.png_lossless: CodecAdapter = compress_png_lossless
        self.heic: CodecAdapter = heic_to_jpeg
        self.jpeg_at: Callable[[bytes, int], CompressionResult] = compress_jpeg

        self.supported_formats = {
            fmt.upper() for fmt in Image.registered_extensions().values() if fmt
        }
        self.avif_supported = self._check_format_support("AVIF")
        self.heif_supported = "HEIF" in self.supported_formats

    def _check_format_support(self, format_name: str) -> bool:
        """检查特定格式是否能完成编码和解码"""
        if format_name.upper() not in self.supported_formats:
            return False
        try:
            buffer = BytesIO()
            Image.new("RGB", (1, 1), color="red").save(buffer, format=format_name)
            buffer.seek(0)
            with Image.open(buffer) as decoded:
                decoded.load()
            return True
        except Exception as e:
            logger.debug(f"格式 {format_name} 不支持: {e}")
            return False

    def get_adapter(self, fmt: TargetFormat) -> CodecAdapter:
        return self.adapters[fmt]
