"""压缩调度引擎模块。

根据扩展名和压缩选项选择唯一的编解码路径，并提供批量模式的单文件处理函数。
"""

from ..config import get_config
from ..exceptions import ErrorHandler, FileOperationError
from ..models.compression_options import CompressionOptions, FileTask, TargetFormat
from ..models.compression_result import BatchFileResult, CompressionResult
from ..models.constants import ImageFormats, is_heif_extension, normalize_extension
from ..utils.file_helpers import read_bytes, swap_into_place, write_bytes
from ..utils.logging_helpers import get_logger
from ..utils.naming_helpers import PathResolver
from .formats import FormatProcessor


logger = get_logger()

_default_processor: FormatProcessor | None = None


def get_format_processor() -> FormatProcessor:
    """获取默认的格式处理器（进程内复用）"""
    global _default_processor
    if _default_processor is None:
        _default_processor = FormatProcessor()
    return _default_processor


def compress_bytes(
    data: bytes,
    extension: str,
    options: CompressionOptions,
    processor: FormatProcessor | None = None,
) -> CompressionResult:
    """压缩单个图像的字节数据。

    决策顺序（先匹配者胜出）：
    1. heic/heif 扩展名：转换为 JPEG，忽略其它所有选项
    2. 请求了目标格式：按 webp > avif > jpeg > png > tiff > bmp > ico 取第一个
    3. 未请求转换：png 按 png_lossy 量化或无损，jpg/jpeg 固定质量 75，
       其它扩展名一律量化为 PNG

    Args:
        data: 原始图像字节
        extension: 源文件扩展名（大小写、前导点均可）
        options: 压缩选项
        processor: 格式处理器，None 使用默认实例

    Returns:
        CompressionResult: 压缩后的字节与内容类型

    Raises:
        DecodeError: 输入无法解码
        CodecError: 编码失败
    """
    processor = processor or get_format_processor()
    ext = normalize_extension(extension)

    if is_heif_extension(ext):
        return processor.heic(data, options)

    target = options.target_format
    if target is not None:
        if len(options.requested_targets) > 1:
            logger.debug(
                f"请求了多个目标格式 {[t.value for t in options.requested_targets]}，"
                f"按优先级使用 {target.value}"
            )
        return processor.get_adapter(target)(data, options)

    match ext:
        case "png":
            if options.png_lossy:
                return processor.png_quantized(data, options)
            return processor.png_lossless(data, options)
        case _ if ext in ImageFormats.JPEG_EXTENSIONS:
            return processor.jpeg_at(data, get_config().compression.DEFAULT_JPEG_QUALITY)
        case _:
            return processor.png_quantized(data, options)


def expected_format(extension: str, options: CompressionOptions) -> TargetFormat:
    """不解码图像，按与 compress_bytes 相同的顺序预测产出格式

    ICO 编码失败回退为 PNG 的情况无法预先知道，此时仍返回 ICO。
    """
    ext = normalize_extension(extension)
    if is_heif_extension(ext):
        return TargetFormat.JPEG
    if options.target_format is not None:
        return options.target_format
    if ext in ImageFormats.JPEG_EXTENSIONS:
        return TargetFormat.JPEG
    return TargetFormat.PNG


def process_file(task: FileTask) -> BatchFileResult:
    """批量模式下处理单个文件。

    读取、压缩、写出、可选的覆盖交换；任何一步失败都转换为失败结果，
    不会向外抛出，保证其它文件继续处理。

    Args:
        task: 文件任务

    Returns:
        BatchFileResult: 处理结果
    """
    path = task.path
    size_before = 0
    step = "读取"

    try:
        data = read_bytes(path)
        size_before = len(data)

        step = "压缩"
        result = compress_bytes(data, path.suffix, task.options)

        output_path = PathResolver.resolve_output_path(
            path, result.format, task.output_dir, task.overwrite
        )
        if task.overwrite:
            step = "覆盖"
            target = PathResolver.resolve_overwrite_target(path, result.format)
            if target != path and target.exists():
                raise FileOperationError(f"目标文件已存在: {target}", path)

        step = "写入"
        write_bytes(output_path, result.data)

        final_path = output_path
        if task.overwrite:
            step = "覆盖"
            final_path = swap_into_place(path, output_path, target)

        size_after = final_path.stat().st_size
        logger.debug(f"处理成功: {path} -> {final_path}")
        return BatchFileResult(
            path=path,
            output_path=final_path,
            size_before=size_before,
            size_after=size_after,
            success=True,
        )

    except Exception as e:
        # 任何错误都只影响当前文件
        return ErrorHandler.handle_file_error(e, path, step, size_before)
