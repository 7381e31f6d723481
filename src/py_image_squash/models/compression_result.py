"""压缩结果模型。

定义单次压缩、批量单文件以及批量汇总的结果数据结构。
"""

from pathlib import Path

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .compression_options import TargetFormat
from .constants import get_mime_type


class CompressionResult(BaseModel):
    """调度引擎的返回值：压缩后的字节与内容类型"""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(description="压缩后的字节")
    content_type: str = Field(description="MIME 类型")
    format: TargetFormat = Field(description="实际输出的格式")

    @field_validator("data")
    @classmethod
    def validate_not_empty(cls, v: bytes) -> bytes:
        if not v:
            raise ValueError("编码结果为空")
        return v

    @classmethod
    def of(cls, data: bytes, fmt: TargetFormat) -> "CompressionResult":
        """按实际格式构建结果，content_type 与字节保持一致"""
        return cls(data=data, content_type=get_mime_type(fmt), format=fmt)

    @property
    def size(self) -> int:
        return len(self.data)


def format_size(size_bytes: int) -> str:
    """格式化文件大小为人类可读格式"""
    return naturalsize(size_bytes)


class BatchFileResult(BaseModel):
    """批量处理中单个文件的结果"""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(description="输入文件路径")
    output_path: Path | None = Field(None, description="最终输出路径")
    size_before: int = Field(0, ge=0, description="原始大小（字节）")
    size_after: int = Field(0, ge=0, description="压缩后大小（字节）")
    success: bool = Field(description="是否成功")
    message: str = Field("", description="失败原因")

    def get_size_saved(self) -> int:
        """节省的字节数"""
        return max(0, self.size_before - self.size_after)

    def get_saved_percentage(self) -> float:
        """节省比例（百分比）"""
        if self.size_before == 0:
            return 0.0
        return self.get_size_saved() / self.size_before * 100


class BatchReport(BaseModel):
    """批量处理汇总，results 保持发现顺序"""

    input_path: Path = Field(description="输入路径")
    results: list[BatchFileResult] = Field(default_factory=list, description="各文件结果")

    def get_successful_items(self) -> list[BatchFileResult]:
        return [r for r in self.results if r.success]

    def get_failed_items(self) -> list[BatchFileResult]:
        return [r for r in self.results if not r.success]

    @property
    def total_count(self) -> int:
        return len(self.results)

    @property
    def processed(self) -> int:
        """成功处理的文件数"""
        return len(self.get_successful_items())

    @property
    def failure_count(self) -> int:
        return len(self.get_failed_items())

    @property
    def total_before(self) -> int:
        """成功文件的原始总大小"""
        return sum(r.size_before for r in self.get_successful_items())

    @property
    def total_after(self) -> int:
        """成功文件的压缩后总大小"""
        return sum(r.size_after for r in self.get_successful_items())

    @property
    def total_saved(self) -> int:
        return max(0, self.total_before - self.total_after)

    @property
    def saved_percentage(self) -> float:
        if self.total_before == 0:
            return 0.0
        return self.total_saved / self.total_before * 100

    @staticmethod
    def format_line(result: BatchFileResult) -> str:
        """单个文件的报告行"""
        if not result.success:
            return f"{result.path}: 失败 ({result.message})"
        return (
            f"{result.path.name}: {format_size(result.size_before)} → "
            f"{format_size(result.size_after)} "
            f"(节省 {format_size(result.get_size_saved())} / "
            f"{result.get_saved_percentage():.2f}%)"
        )

    def summary_line(self) -> str:
        """汇总报告行"""
        if self.processed == 0:
            return "没有文件被压缩。"
        return (
            f"共处理 {self.processed} 个文件，失败 {self.failure_count} 个。"
            f"总节省: {format_size(self.total_saved)} ({self.saved_percentage:.2f}%)"
        )
