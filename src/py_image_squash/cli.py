"""命令行入口。

给定输入路径时批量压缩；没有输入或指定 --web 时启动 Web 服务。
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from . import __version__
from .config import get_config
from .engine.batch import BatchProcessor
from .engine.concurrent_executor import ConcurrentExecutor
from .engine.config import OptionsResolver
from .models.compression_options import TARGET_PRIORITY
from .models.compression_result import BatchReport
from .utils.logging_helpers import get_logger, setup_logging
from .utils.message_formatter import MessageFormatter


logger = get_logger()


def _port(value: str) -> int:
    """端口参数：0-65535 的整数"""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"无效的端口: {value}") from None
    if not 0 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"端口必须在 0-65535 之间: {value}")
    return port


def build_parser() -> argparse.ArgumentParser:
    config = get_config()
    parser = argparse.ArgumentParser(
        prog="py-image-squash",
        description="批量压缩图像并可选地转换格式",
    )
    parser.add_argument("input", nargs="?", type=Path, help="输入文件或目录")
    parser.add_argument("-o", "--output", type=Path, help="输出目录（默认与源文件同目录）")
    parser.add_argument("--overwrite", action="store_true", help="用压缩结果替换原文件")
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=config.processing.MAX_WORKERS,
        help="并发数（默认 CPU 核数）",
    )

    png = parser.add_argument_group("PNG 选项")
    png.add_argument(
        "--png-lossy",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="PNG 调色板量化（默认开启）",
    )
    png.add_argument(
        "--png-quality",
        default=config.compression.PNG_QUALITY,
        help="质量范围 min-max（默认 %(default)s）",
    )
    png.add_argument(
        "--oxipng",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="PNG 结构优化（默认开启）",
    )

    convert = parser.add_argument_group("格式转换（同时指定多个时按 webp > avif > jpeg > png > tiff > bmp > ico 取第一个）")
    for field_name, fmt in TARGET_PRIORITY:
        convert.add_argument(
            f"--to-{fmt.value}",
            dest=field_name,
            action="store_true",
            help=f"转换为 {fmt.value.upper()}",
        )

    web = parser.add_argument_group("Web 服务")
    web.add_argument("--web", action="store_true", help="启动 Web 服务")
    web.add_argument("--port", type=_port, default=config.server.PORT, help="端口（默认 %(default)s）")
    web.add_argument("--no-browser", action="store_true", help="启动时不打开浏览器")

    parser.add_argument("--log-level", default=None, help="日志级别（默认 WARNING）")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def print_report(report: BatchReport) -> None:
    """逐文件输出结果，失败写到 stderr"""
    for result in report.results:
        line = BatchReport.format_line(result)
        if result.success:
            print(line)
        else:
            print(line, file=sys.stderr)
    print(report.summary_line(), file=sys.stdout if report.processed else sys.stderr)


def _serve(args: argparse.Namespace) -> int:
    from .web_server import run_server

    try:
        run_server(port=args.port, open_browser=False if args.no_browser else None)
    except OSError as e:
        print(MessageFormatter.operation_failed("启动 Web 服务", f"端口 {args.port}", e), file=sys.stderr)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """命令行主函数

    Returns:
        int: 退出码；单个文件失败不影响退出码
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level or "WARNING")

    if args.web or args.input is None:
        return _serve(args)

    if not args.input.exists():
        print(MessageFormatter.file_not_found(args.input), file=sys.stderr)
        return 1

    executor = ConcurrentExecutor(args.jobs, get_config().processing.EXECUTOR_TYPE)
    processor = BatchProcessor(executor, output_dir=args.output, overwrite=args.overwrite)
    report = processor.process_path(args.input, OptionsResolver.from_cli(args))

    if not report.results:
        print(MessageFormatter.no_images_found(args.input), file=sys.stderr)
        return 0

    print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
