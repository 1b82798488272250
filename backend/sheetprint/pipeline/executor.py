"""
流水线执行器 - 编排各阶段执行

职责：
1. 按顺序执行各阶段：收集图纸 -> 建过滤器 -> 设置打印 -> 逐张打印 -> 合并
2. 更新任务进度
3. 失败时记录错误类型与出错图纸
4. 无论成功失败，清理临时过滤器（每批次恰好一次）

测试要点：
- test_execute_full_pipeline: 完整流水线执行
- test_submission_failure_still_cleans_up: 提交失败仍清理
- test_timeout_skipped_from_merge: 超时图纸不合并
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..config import RuntimeConfig, get_config
from ..interfaces import (
    IHostDocument,
    IPdfMerger,
    IRenderer,
    NoSheetsError,
    SheetPrintError,
)
from ..models import MergeRequest, PrintJob, Sheet
from ..overrides import OverrideRuleBuilder, RuleLifecycleManager
from ..render import BatchRenderOrchestrator, PdfMerger
from .stages import CLEANUP_STAGE, PRINT_STAGES, PipelineStage, StageEnum

logger = logging.getLogger(__name__)

_RENDER_STAGE = next(s for s in PRINT_STAGES if s.name == StageEnum.RENDER_SHEETS.value)


class PipelineExecutor:
    """流水线执行器"""

    def __init__(
        self,
        host: IHostDocument,
        renderer: IRenderer,
        config: RuntimeConfig | None = None,
        merger: IPdfMerger | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        file_exists: Callable[[Path], bool] | None = None,
        cancel_check: Callable[[], bool] | None = None,
        on_progress: Callable[[PrintJob], None] | None = None,
    ):
        self.host = host
        self.renderer = renderer
        self.config = config or get_config()
        self.merger = merger or PdfMerger()
        self.sleep = sleep
        self.file_exists = file_exists
        self.cancel_check = cancel_check
        self.on_progress = on_progress

    def execute(self, job: PrintJob, raise_on_error: bool = False) -> PrintJob:
        """
        执行流水线

        Args:
            job: 批量打印任务
            raise_on_error: 失败时在清理完成后继续抛出异常

        Returns:
            终态任务（成功时带合并PDF路径，失败时带错误类型与出错图纸）

        Raises:
            ValueError: 任务已结束（每个任务只执行一次）
        """
        if job.is_finished:
            raise ValueError(f"任务已结束，不能重复执行: {job.job_id}")

        job.mark_running()
        self._update_progress(job, message="任务开始")

        lifecycle = RuleLifecycleManager(self.host, self.config.overrides)
        context: dict[str, Any] = {
            "sheets": [],
            "sheet_pdfs": [],
            "output_dir": Path(job.output_dir or self.config.output.output_dir),
            "lifecycle": lifecycle,
            "orchestrator": self._build_orchestrator(job),
        }

        error: Exception | None = None
        try:
            for stage in PRINT_STAGES:
                self._execute_stage(job, stage, context)
        except SheetPrintError as e:
            error = e
            logger.error(f"[{job.job_id}] 流水线执行失败: {e}")
            job.mark_failed(str(e), kind=e.kind, sheet_name=e.sheet_name)
        except Exception as e:
            error = e
            logger.exception(f"[{job.job_id}] 流水线执行异常")
            job.mark_failed(str(e))
        finally:
            self._stage_cleanup(job, lifecycle)

        if error is None:
            job.mark_succeeded()
            self._update_progress(job, message="任务完成")
        else:
            self._update_progress(job, message=f"任务失败: {error}")
            if raise_on_error:
                raise error

        return job

    def _build_orchestrator(self, job: PrintJob) -> BatchRenderOrchestrator:
        def _progress_cb(index: int, total: int, sheet: Sheet) -> None:
            span = _RENDER_STAGE.progress_end - _RENDER_STAGE.progress_start
            job.progress.percent = _RENDER_STAGE.progress_start + span * (index - 1) // max(total, 1)
            self._update_progress(
                job,
                message=f"打印中 ({index}/{total})",
                current_sheet=sheet.label,
            )

        kwargs: dict[str, Any] = {}
        if self.file_exists is not None:
            kwargs["file_exists"] = self.file_exists

        return BatchRenderOrchestrator(
            self.renderer,
            self.config.polling,
            self.config.policy,
            sleep=self.sleep,
            cancel_check=self.cancel_check,
            progress_cb=_progress_cb,
            **kwargs,
        )

    def _execute_stage(self, job: PrintJob, stage: PipelineStage, context: dict) -> None:
        """执行单个阶段"""
        job.progress.stage = stage.name
        job.progress.percent = stage.progress_start
        logger.info(f"[{job.job_id}] 开始阶段: {stage.name}")
        self._update_progress(job, message=f"开始阶段: {stage.name}")

        try:
            if stage.name == StageEnum.COLLECT_SHEETS.value:
                self._stage_collect_sheets(job, context)

            elif stage.name == StageEnum.CREATE_OVERRIDES.value:
                self._stage_create_overrides(job, context)

            elif stage.name == StageEnum.CONFIGURE_PRINTER.value:
                self._stage_configure_printer(job, context)

            elif stage.name == StageEnum.RENDER_SHEETS.value:
                self._stage_render(job, context)

            elif stage.name == StageEnum.MERGE_PDF.value:
                self._stage_merge(job, context)

        except Exception:
            job.add_flag(f"阶段失败:{stage.name}")
            raise

        job.progress.percent = stage.progress_end
        self._update_progress(job, message=f"完成阶段: {stage.name}")

    def _stage_collect_sheets(self, job: PrintJob, context: dict) -> None:
        """收集目标图纸（未指定时取全部非占位图纸）"""
        sheets: list[Sheet] = []

        if job.sheet_ids:
            for sheet_id in job.sheet_ids:
                sheet = self.host.get_sheet(sheet_id)
                if sheet is None:
                    logger.warning(f"[{job.job_id}] 图纸不存在: {sheet_id}")
                    job.add_flag(f"图纸不存在:{sheet_id}")
                    continue
                if sheet.is_placeholder:
                    job.add_flag(f"占位图纸跳过:{sheet.label}")
                    continue
                sheets.append(sheet)
        else:
            sheets = [s for s in self.host.list_sheets() if not s.is_placeholder]

        if not sheets:
            raise NoSheetsError("没有可打印的图纸")

        context["sheets"] = sheets
        logger.info(f"[{job.job_id}] 待打印图纸 {len(sheets)} 张")

    def _stage_create_overrides(self, job: PrintJob, context: dict) -> None:
        """创建并挂载临时黑色覆盖过滤器"""
        builder = OverrideRuleBuilder(self.host, self.config.overrides, job.must_include)
        lifecycle: RuleLifecycleManager = context["lifecycle"]
        lifecycle.apply_to_sheets(context["sheets"], builder.build_for_sheet)

    def _stage_configure_printer(self, job: PrintJob, context: dict) -> None:
        """设置打印参数"""
        orchestrator: BatchRenderOrchestrator = context["orchestrator"]
        orchestrator.configure(self.config.print_settings)

    def _stage_render(self, job: PrintJob, context: dict) -> None:
        """逐张打印"""
        orchestrator: BatchRenderOrchestrator = context["orchestrator"]
        try:
            context["sheet_pdfs"] = orchestrator.run_batch(context["sheets"], context["output_dir"])
        finally:
            job.render_jobs = orchestrator.jobs
            for sheet_label in orchestrator.timed_out_sheets:
                job.add_flag(f"打印超时:{sheet_label}")

        job.artifacts.sheet_pdfs = list(context["sheet_pdfs"])

    def _stage_merge(self, job: PrintJob, context: dict) -> None:
        """合并PDF"""
        self._update_progress(job, message="合并PDF中")
        combined_path = self.config.get_combined_path(context["output_dir"])
        request = MergeRequest(input_paths=list(context["sheet_pdfs"]), output_path=combined_path)
        result = self.merger.merge_request(request)

        job.artifacts.combined_pdf = result.output_path
        job.artifacts.combined_page_count = result.page_count
        for skipped in result.skipped_inputs:
            job.add_flag(f"合并跳过:{skipped.name}")

    def _stage_cleanup(self, job: PrintJob, lifecycle: RuleLifecycleManager) -> None:
        """清理临时过滤器（不抛异常）"""
        job.progress.stage = CLEANUP_STAGE.name
        job.progress.percent = CLEANUP_STAGE.progress_start
        self._update_progress(job, message="清理临时过滤器")

        report = lifecycle.cleanup()
        job.cleanup = report
        if report.failed:
            job.add_flag(f"过滤器清理失败:{len(report.failed)}")

        job.progress.percent = CLEANUP_STAGE.progress_end

    def _update_progress(
        self,
        job: PrintJob,
        *,
        message: str | None = None,
        current_sheet: str | None = None,
    ) -> None:
        if message is not None:
            job.progress.message = message
        if current_sheet is not None:
            job.progress.current_sheet = current_sheet
        if self.on_progress:
            try:
                self.on_progress(job)
            except Exception as e:
                logger.warning(f"[{job.job_id}] 进度回调失败: {e}")
