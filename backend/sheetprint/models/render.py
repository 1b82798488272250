"""
打印与合并模型 - 单张打印任务状态机/合并请求与结果

状态机：pending -> submitted -> {completed, timed_out, failed}
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class RenderStatus(str, Enum):
    """单张打印状态"""
    PENDING = "pending"
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RenderStatus.COMPLETED, RenderStatus.TIMED_OUT, RenderStatus.FAILED)


class RenderResult(BaseModel):
    """单张打印结果"""
    status: RenderStatus
    output_path: Path | None = None
    reason: str = ""

    @classmethod
    def completed(cls, output_path: Path) -> RenderResult:
        return cls(status=RenderStatus.COMPLETED, output_path=output_path)

    @classmethod
    def timed_out(cls, reason: str = "") -> RenderResult:
        return cls(status=RenderStatus.TIMED_OUT, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> RenderResult:
        return cls(status=RenderStatus.FAILED, reason=reason)


class RenderJob(BaseModel):
    """单张打印任务：一张图纸 -> 一个PDF"""
    sheet_id: str
    sheet_name: str
    output_path: Path
    status: RenderStatus = RenderStatus.PENDING
    attempts: int = 0
    error: str | None = None

    def _transition(self, allowed_from: tuple[RenderStatus, ...], to: RenderStatus) -> None:
        if self.status not in allowed_from:
            raise ValueError(f"非法状态迁移: {self.status.value} -> {to.value}")
        self.status = to

    def mark_submitted(self) -> None:
        self._transition((RenderStatus.PENDING,), RenderStatus.SUBMITTED)

    def mark_completed(self) -> None:
        self._transition((RenderStatus.SUBMITTED,), RenderStatus.COMPLETED)

    def mark_timed_out(self) -> None:
        self._transition((RenderStatus.SUBMITTED,), RenderStatus.TIMED_OUT)

    def mark_failed(self, error: str) -> None:
        # 提交本身抛异常时尚未进入submitted
        self._transition((RenderStatus.PENDING, RenderStatus.SUBMITTED), RenderStatus.FAILED)
        self.error = error

    def apply(self, result: RenderResult) -> None:
        """按打印结果推进状态"""
        if result.status == RenderStatus.COMPLETED:
            self.mark_completed()
        elif result.status == RenderStatus.TIMED_OUT:
            self.mark_timed_out()
        elif result.status == RenderStatus.FAILED:
            self.mark_failed(result.reason)


class MergeRequest(BaseModel):
    """合并请求：有序输入 -> 单一输出"""
    input_paths: list[Path] = Field(default_factory=list)
    output_path: Path


class MergeResult(BaseModel):
    """合并结果"""
    output_path: Path
    page_count: int = 0
    merged_inputs: list[Path] = Field(default_factory=list)
    skipped_inputs: list[Path] = Field(default_factory=list)
