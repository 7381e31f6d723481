"""批量处理器模块。

发现输入路径下的图像文件，通过并发执行器逐个压缩并汇总结果。
"""

from pathlib import Path

from ..core.compression_engine import expected_format, process_file
from ..exceptions import ErrorHandler
from ..models.compression_options import CompressionOptions, FileTask
from ..models.compression_result import BatchReport
from ..utils.file_helpers import find_image_files
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import PathResolver, is_format_conversion
from .concurrent_executor import ConcurrentExecutor


logger = get_logger()


class BatchProcessor:
    """批量图像处理器

    单个文件失败不会中断整个批次，结果顺序与文件发现顺序一致。
    """

    def __init__(
        self,
        executor: ConcurrentExecutor | None = None,
        output_dir: str | Path | None = None,
        overwrite: bool = False,
    ):
        """初始化批量处理器

        Args:
            executor: 并发执行器，None 时使用单线程执行器
            output_dir: 输出目录，None 为源文件所在目录
            overwrite: 是否用压缩结果替换原文件
        """
        self.executor = executor or ConcurrentExecutor(max_workers=1)
        self.output_dir = Path(output_dir) if output_dir else None
        self.overwrite = overwrite

    def _destination(self, path: Path, options: CompressionOptions) -> Path:
        """文件最终会写到的位置（覆盖模式为目标路径，否则为 c_ 输出路径）"""
        produced = expected_format(path.suffix, options)
        if self.overwrite:
            return PathResolver.resolve_overwrite_target(path, produced)
        return PathResolver.resolve_output_path(path, produced, self.output_dir)

    def plan_destinations(
        self, files: list[Path], options: CompressionOptions
    ) -> dict[Path, str]:
        """找出输出位置冲突的文件

        两个文件映射到同一输出、或输出会落在另一个输入文件上时，
        不发生格式转换的文件优先保留，其余文件判为失败。

        Returns:
            dict[Path, str]: 冲突文件到失败原因的映射
        """
        sources = set(files)
        destinations = {path: self._destination(path, options) for path in files}
        # 不转换格式的文件优先占用输出位置
        ordered = sorted(
            files,
            key=lambda p: is_format_conversion(p.suffix, expected_format(p.suffix, options)),
        )

        claimed: dict[Path, Path] = {}
        conflicts: dict[Path, str] = {}
        for path in ordered:
            destination = destinations[path]
            if destination != path and destination in sources:
                conflicts[path] = f"输出会覆盖另一个输入文件: {destination}"
            elif destination in claimed:
                conflicts[path] = f"与 {claimed[destination]} 的输出路径冲突: {destination}"
            else:
                claimed[destination] = path

        for path, reason in conflicts.items():
            logger.warning(f"跳过 {path}: {reason}")
        return conflicts

    def build_tasks(self, files: list[Path], options: CompressionOptions) -> list[FileTask]:
        return [
            FileTask(
                path=path,
                options=options,
                output_dir=self.output_dir,
                overwrite=self.overwrite,
            )
            for path in files
        ]

    def process_path(self, input_path: str | Path, options: CompressionOptions) -> BatchReport:
        """处理单个文件或整个目录

        Args:
            input_path: 输入文件或目录
            options: 所有文件共用的压缩选项

        Returns:
            BatchReport: 批量处理报告
        """
        input_path = Path(input_path)
        files = find_image_files(input_path)

        if not files:
            logger.info(MessageFormatter.no_images_found(input_path))
            return BatchReport(input_path=input_path, results=[])

        logger.info(f"找到 {len(files)} 个图像文件: {input_path}")
        if self.output_dir is not None and not self.overwrite:
            self.output_dir.mkdir(parents=True, exist_ok=True)

        conflicts = self.plan_destinations(files, options)
        runnable = [path for path in files if path not in conflicts]
        executed = iter(self.executor.execute(self.build_tasks(runnable, options), process_file))
        results = [
            ErrorHandler.create_failure(path, conflicts[path]) if path in conflicts else next(executed)
            for path in files
        ]
        report = BatchReport(input_path=input_path, results=results)
        logger.info(report.summary_line())
        return report
