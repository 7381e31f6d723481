"""文件命名工具模块。

提供批量输出、覆盖备份以及下载文件名的统一命名策略。
"""

from pathlib import Path

from ..config import get_config
from ..models.compression_options import TargetFormat
from ..models.constants import get_extension, get_format_family, normalize_extension


def is_format_conversion(source_extension: str, produced: TargetFormat) -> bool:
    """产出格式与源文件格式族不同即视为发生了格式转换"""
    return get_format_family(source_extension) != produced


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def output_name(source: Path, produced: TargetFormat | None = None) -> str:
        """批量输出文件名：c_ 前缀，格式转换时改写扩展名

        Args:
            source: 源文件路径
            produced: 实际产出的格式

        Returns:
            str: 生成的文件名（不含路径）
        """
        prefix = get_config().processing.OUTPUT_PREFIX
        name = f"{prefix}{source.name}"
        if produced is not None and is_format_conversion(source.suffix, produced):
            return str(Path(name).with_suffix(get_extension(produced)))
        return name

    @staticmethod
    def backup_name(source: Path) -> str:
        """覆盖模式的备份文件名：<name>.<ext>.bak"""
        return f"{source.name}{get_config().processing.BACKUP_SUFFIX}"

    @staticmethod
    def download_name(filename: str, produced: TargetFormat) -> str:
        """Web 下载文件名：格式转换时替换扩展名，否则加 c_ 前缀"""
        filename = Path(filename or "image").name
        source = Path(filename)
        if is_format_conversion(source.suffix, produced):
            stem = source.stem if source.suffix else filename
            return f"{stem}{get_extension(produced)}"
        return f"{get_config().processing.OUTPUT_PREFIX}{filename}"


class PathResolver:
    """路径解析器"""

    @staticmethod
    def resolve_output_path(
        source: Path,
        produced: TargetFormat | None = None,
        output_dir: Path | None = None,
        overwrite: bool = False,
    ) -> Path:
        """解析批量输出的临时/最终路径

        覆盖模式总是写到源文件所在目录，忽略 output_dir。
        """
        target_dir = source.parent if overwrite or output_dir is None else output_dir
        return target_dir / FileNamingStrategy.output_name(source, produced)

    @staticmethod
    def resolve_overwrite_target(source: Path, produced: TargetFormat) -> Path:
        """覆盖模式的最终路径：原路径，格式转换时改写扩展名"""
        if is_format_conversion(source.suffix, produced):
            return source.with_suffix(get_extension(produced))
        return source

    @staticmethod
    def extension_of(path: str | Path) -> str:
        return normalize_extension(Path(path).suffix)
