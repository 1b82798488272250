"""
逐张打印编排 - 单张提交 + 轮询等待PDF生成

职责：
1. 每张图纸单独设定打印范围（驱动是全局有状态的，必须逐张）
2. 提交打印并轮询输出文件是否出现（无完成回调）
3. 提交失败立即中止整个批次；超时按策略跳过或中止
4. 按提交顺序返回已生成的PDF路径

依赖：
- IRenderer: 外部打印驱动
- 运行期配置: polling / policy

测试要点：
- test_render_page_completed: 文件在轮询期内出现
- test_render_page_timed_out: 轮询耗尽
- test_render_page_submit_failed: 提交异常不重试
- test_run_batch_fail_fast: 提交失败中止剩余图纸
- test_run_batch_skips_timeout: 超时图纸不进入合并序列
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from ..config import PolicyConfig, PollingConfig, PrintSettingsConfig
from ..interfaces import (
    BatchCancelledError,
    IRenderer,
    RenderSubmissionError,
    RenderTimeoutError,
)
from ..models import RenderJob, RenderResult, RenderStatus, Sheet
from ..overrides.naming import resolve_output_file_name, unique_output_path

logger = logging.getLogger(__name__)


def _path_exists(path: Path) -> bool:
    return os.path.exists(path)


class BatchRenderOrchestrator:
    """逐张打印编排器"""

    def __init__(
        self,
        renderer: IRenderer,
        polling: PollingConfig | None = None,
        policy: PolicyConfig | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
        file_exists: Callable[[Path], bool] = _path_exists,
        cancel_check: Callable[[], bool] | None = None,
        progress_cb: Callable[[int, int, Sheet], None] | None = None,
        forbidden_chars: Iterable[str] | None = None,
    ):
        self.renderer = renderer
        self.polling = polling or PollingConfig()
        self.policy = policy or PolicyConfig()
        self.sleep = sleep
        self.file_exists = file_exists
        self.cancel_check = cancel_check
        self.progress_cb = progress_cb
        self.forbidden_chars = forbidden_chars
        self._jobs: list[RenderJob] = []
        self._timed_out: list[str] = []

    @property
    def jobs(self) -> list[RenderJob]:
        """本批次的单张打印记录"""
        return list(self._jobs)

    @property
    def timed_out_sheets(self) -> list[str]:
        return list(self._timed_out)

    def configure(self, settings: PrintSettingsConfig) -> None:
        """批次开始前设置一次打印参数"""
        self.renderer.configure(settings)

    def render_page(
        self,
        sheet: Sheet,
        output_path: Path,
        max_poll_attempts: int | None = None,
        poll_interval: float | None = None,
    ) -> RenderResult:
        """
        打印单张图纸

        Args:
            sheet: 图纸
            output_path: 目标PDF路径
            max_poll_attempts: 最大轮询次数（默认取配置）
            poll_interval: 轮询间隔秒数（默认取配置）

        Returns:
            completed / timed_out / failed

        Raises:
            BatchCancelledError: 轮询期间被取消
        """
        attempts = self.polling.max_attempts if max_poll_attempts is None else max_poll_attempts
        interval = self.polling.interval_sec if poll_interval is None else poll_interval

        job = RenderJob(sheet_id=sheet.sheet_id, sheet_name=sheet.label, output_path=output_path)
        self._jobs.append(job)

        try:
            self.renderer.select_output_target(sheet)
            self._remove_stale(output_path)
            self.renderer.submit(output_path)
        except Exception as e:
            logger.error(f"打印提交失败 {sheet.label}: {e}")
            result = RenderResult.failed(str(e))
            job.apply(result)
            return result

        job.mark_submitted()
        result = self._wait_for_file(job, attempts, interval)
        job.apply(result)
        return result

    def _remove_stale(self, output_path: Path) -> None:
        """删除上次遗留的同名PDF，避免轮询误判"""
        if self.file_exists(output_path):
            logger.info(f"删除遗留文件: {output_path}")
            output_path.unlink(missing_ok=True)

    def _wait_for_file(self, job: RenderJob, attempts: int, interval: float) -> RenderResult:
        while not self.file_exists(job.output_path) and job.attempts < attempts:
            if self.cancel_check and self.cancel_check():
                job.mark_failed("cancelled")
                raise BatchCancelledError(f"批次已取消: {job.sheet_name}", sheet_name=job.sheet_name)
            self.sleep(interval)
            job.attempts += 1

        if self.file_exists(job.output_path):
            return RenderResult.completed(job.output_path)

        return RenderResult.timed_out(f"{attempts}次轮询后仍未生成: {job.output_path.name}")

    def run_batch(self, sheets: list[Sheet], output_dir: Path) -> list[Path]:
        """
        逐张打印全部图纸

        Returns:
            已生成PDF路径（按提交顺序）

        Raises:
            RenderSubmissionError: 任一图纸提交失败（不再打印剩余图纸）
            RenderTimeoutError: 严格策略下任一图纸超时
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        self._jobs = []
        self._timed_out = []

        taken: set[str] = set()
        completed: list[Path] = []
        total = len(sheets)

        for index, sheet in enumerate(sheets, start=1):
            if self.progress_cb:
                self.progress_cb(index, total, sheet)

            file_name = resolve_output_file_name(sheet.number, sheet.name, self.forbidden_chars)
            output_path = unique_output_path(output_dir, file_name, taken)

            logger.info(f"打印 ({index}/{total}): {sheet.label} -> {output_path.name}")
            result = self.render_page(sheet, output_path)

            if result.status == RenderStatus.COMPLETED:
                completed.append(output_path)
            elif result.status == RenderStatus.TIMED_OUT:
                if self.policy.on_timeout == "fail":
                    raise RenderTimeoutError(f"打印超时: {sheet.label}", sheet_name=sheet.label)
                logger.warning(f"打印超时，跳过: {sheet.label} ({result.reason})")
                self._timed_out.append(sheet.label)
            else:
                raise RenderSubmissionError(
                    f"打印提交失败 {sheet.label}: {result.reason}", sheet_name=sheet.label
                )

        return completed
