"""文件工具模块。

提供图像文件发现、原子写出和覆盖原文件的交换操作。
"""

import os
from pathlib import Path

from ..exceptions import FileOperationError
from ..models.constants import is_supported_input
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter
from .naming_helpers import FileNamingStrategy


logger = get_logger()


def find_image_files(path: str | Path) -> list[Path]:
    """查找待压缩的图像文件。

    文件直接按扩展名判断；目录递归遍历。结果排序去重。

    Args:
        path: 文件或目录

    Returns:
        list[Path]: 图像文件路径
    """
    path = Path(path)

    if path.is_file():
        return [path] if is_supported_input(path.suffix) else []

    if not path.is_dir():
        logger.warning(MessageFormatter.file_not_found(path))
        return []

    files: set[Path] = set()
    for root, _dirs, names in os.walk(path, onerror=_log_walk_error):
        for name in names:
            file_path = Path(root) / name
            if is_supported_input(file_path.suffix) and file_path.is_file():
                files.add(file_path)

    return sorted(files)


def _log_walk_error(error: OSError) -> None:
    logger.error(MessageFormatter.operation_failed("遍历目录", error.filename or "", error))


def read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise FileOperationError(str(e), path) from e


def write_bytes(path: Path, data: bytes) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise FileOperationError(str(e), path) from e


def swap_into_place(original: Path, output: Path, target: Path) -> Path:
    """用压缩结果替换原文件。

    先把原文件重命名为 <name>.<ext>.bak，再把输出重命名到目标位置，
    成功后删除备份；任何一步失败都恢复原文件并删除已写出的输出。

    Args:
        original: 原文件
        output: 已写出的压缩结果（c_ 文件）
        target: 最终位置（通常与 original 相同）

    Returns:
        Path: 最终文件路径

    Raises:
        FileOperationError: 备份或替换失败
    """
    backup = original.with_name(FileNamingStrategy.backup_name(original))

    try:
        original.rename(backup)
    except OSError as e:
        _discard(output)
        raise FileOperationError(MessageFormatter.step_failed("备份", e), original) from e

    try:
        output.replace(target)
    except OSError as e:
        try:
            backup.rename(original)
        except OSError as restore_error:
            logger.error(MessageFormatter.operation_failed("恢复备份", backup, restore_error))
        _discard(output)
        raise FileOperationError(str(e), original) from e

    try:
        backup.unlink()
    except OSError as e:
        logger.warning(MessageFormatter.operation_failed("删除备份", backup, e))

    return target


def _discard(output: Path) -> None:
    try:
        output.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(MessageFormatter.operation_failed("删除输出", output, e))
