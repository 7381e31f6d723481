"""并发执行器模块。

提供有界的工作池，按提交顺序收集每个任务的结果。
"""

from collections.abc import Callable, Sequence
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor

from ..exceptions import ErrorHandler
from ..models.compression_options import FileTask
from ..models.compression_result import BatchFileResult
from ..utils.logging_helpers import get_logger


logger = get_logger()

EXECUTOR_TYPES: dict[str, type[Executor]] = {
    "thread": ThreadPoolExecutor,
    "process": ProcessPoolExecutor,
}


class ConcurrentExecutor:
    """有界并发执行器

    同时运行的任务数不超过 max_workers；单个任务的异常只影响它自己的结果。
    """

    def __init__(self, max_workers: int | None = None, executor_type: str = "thread"):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数，None 或非正数时使用 1
            executor_type: 执行器类型 ('thread' / 'process')
        """
        self.max_workers = max(1, max_workers or 1)
        if executor_type not in EXECUTOR_TYPES:
            logger.warning(f"未知的执行器类型 {executor_type}，使用 thread")
            executor_type = "thread"
        self.executor_type = executor_type

    def execute(
        self,
        tasks: Sequence[FileTask],
        task_function: Callable[[FileTask], BatchFileResult],
    ) -> list[BatchFileResult]:
        """执行任务并按输入顺序返回结果

        Args:
            tasks: 文件任务列表
            task_function: 任务函数（process 模式下必须可 pickle）

        Returns:
            list[BatchFileResult]: 与 tasks 一一对应的结果
        """
        if not tasks:
            return []

        executor_class = EXECUTOR_TYPES[self.executor_type]
        workers = min(self.max_workers, len(tasks))
        logger.debug(f"使用 {executor_class.__name__}: 任务数={len(tasks)}, 并发数={workers}")

        with executor_class(max_workers=workers) as executor:
            futures = [executor.submit(task_function, task) for task in tasks]
            return [
                self._collect(future, task) for future, task in zip(futures, tasks)
            ]

    @staticmethod
    def _collect(future, task: FileTask) -> BatchFileResult:
        try:
            result = future.result()
        except Exception as e:
            return ErrorHandler.handle_file_error(e, task.path, "并发任务处理")

        if not result.success:
            logger.warning(f"处理失败: {task.path} - {result.message}")
        return result
