"""
批量打印任务模型 - 定义任务状态与生命周期

一个 PrintJob 对应一次"建过滤器 -> 逐张打印 -> 合并 -> 清理"批次。
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .render import RenderJob
from .rules import CleanupReport


class JobStatus(str, Enum):
    """任务状态枚举"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobArtifacts(BaseModel):
    """任务产物路径"""
    sheet_pdfs: list[Path] = Field(default_factory=list)
    combined_pdf: Path | None = None
    combined_page_count: int = 0


class JobProgress(BaseModel):
    """任务进度"""
    stage: str = "INIT"
    percent: int = 0
    current_sheet: str | None = None
    message: str = ""


class PrintJob(BaseModel):
    """批量打印任务实体"""
    job_id: str = Field(..., description="UUID")

    # 输入（sheet_ids 为空表示全部非占位图纸）
    sheet_ids: list[str] = Field(default_factory=list)
    output_dir: Path | None = None
    must_include: list[str] | None = Field(None, description="强制覆盖的内置类别，None取配置")

    # 状态
    status: JobStatus = JobStatus.QUEUED
    progress: JobProgress = Field(default_factory=JobProgress)

    # 产物
    artifacts: JobArtifacts = Field(default_factory=JobArtifacts)
    render_jobs: list[RenderJob] = Field(default_factory=list)
    cleanup: CleanupReport | None = None

    # 结果
    flags: list[str] = Field(default_factory=list, description="告警标记")
    errors: list[str] = Field(default_factory=list, description="错误信息")
    error_kind: str | None = None
    failed_sheet: str | None = None

    # 时间戳
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def is_finished(self) -> bool:
        return self.status in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELLED)

    def mark_running(self, stage: str = "COLLECT_SHEETS") -> None:
        """标记为运行中"""
        self.status = JobStatus.RUNNING
        self.started_at = datetime.now()
        self.progress.stage = stage

    def mark_succeeded(self) -> None:
        """标记为成功"""
        self.status = JobStatus.SUCCEEDED
        self.finished_at = datetime.now()
        self.progress.percent = 100

    def mark_failed(self, error: str, kind: str = "error", sheet_name: str | None = None) -> None:
        """标记为失败（记录错误类型与出错图纸）"""
        self.status = JobStatus.CANCELLED if kind == "cancelled" else JobStatus.FAILED
        self.finished_at = datetime.now()
        self.errors.append(error)
        self.error_kind = kind
        self.failed_sheet = sheet_name

    def add_flag(self, flag: str) -> None:
        """添加告警标记（不中断）"""
        if flag not in self.flags:
            self.flags.append(flag)
