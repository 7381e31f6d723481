"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def no_images_found(path: str | Path) -> str:
        return f"未找到支持的图像文件: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{path}]: {error}"

    @staticmethod
    def step_failed(step: str, error: Exception | str) -> str:
        """批量单文件步骤失败消息，如 "读取失败: ..." """
        detail = str(error) or type(error).__name__
        return f"{step}失败: {detail}"

    @staticmethod
    def compression_stats(
        name: str, size_before: int, size_after: int, elapsed: float
    ) -> str:
        """压缩统计日志"""
        ratio = (1 - size_after / size_before) * 100 if size_before else 0.0
        return (
            f"已压缩 {name}，耗时 {elapsed:.3f}s - "
            f"{size_before} -> {size_after} 字节 ({ratio:.1f}% 缩减)"
        )
