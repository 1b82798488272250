"""
PDF合并引擎 - 按打印顺序拼接单张PDF

职责：
1. 按给定顺序打开每个存在的PDF，逐页追加
2. 缺失的输入跳过（不报错），记录在结果中
3. 输出无法写入、输入损坏或没有任何可合并输入时抛出 MergeError

依赖：
- PyPDF2: PdfReader / PdfWriter

测试要点：
- test_merge_preserves_order: 合并顺序与输入一致
- test_merge_skips_missing: 缺失输入跳过
- test_merge_page_count: 输出页数 = 输入页数之和
- test_merge_unwritable_output: 输出不可写
- test_merge_nothing_raises: 没有任何可合并输入（全部超时）同样抛出 MergeError
"""

from __future__ import annotations

import logging
from pathlib import Path

from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PdfReadError

from ..interfaces import IPdfMerger, MergeError
from ..models import MergeResult

logger = logging.getLogger(__name__)


class PdfMerger(IPdfMerger):
    """PDF合并器实现"""

    def merge(self, input_paths: list[Path], output_path: Path) -> MergeResult:
        """按顺序合并PDF"""
        result = MergeResult(output_path=output_path)
        writer = PdfWriter()

        for input_path in map(Path, input_paths):
            if not input_path.exists():
                logger.warning(f"待合并PDF不存在，跳过: {input_path}")
                result.skipped_inputs.append(input_path)
                continue

            try:
                reader = PdfReader(str(input_path))
                for page in reader.pages:
                    writer.add_page(page)
                page_count = len(reader.pages)
            except (PdfReadError, OSError, ValueError) as e:
                raise MergeError(f"PDF读取失败: {input_path}: {e}") from e

            result.merged_inputs.append(input_path)
            result.page_count += page_count

        if not result.merged_inputs:
            raise MergeError("没有可合并的PDF")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "wb") as f:
                writer.write(f)
        except OSError as e:
            raise MergeError(f"合并PDF写入失败: {output_path}: {e}") from e

        logger.info(
            f"合并完成: {len(result.merged_inputs)} 个文件，{result.page_count} 页 -> {output_path}"
        )
        return result

    def count_pages(self, pdf_path: Path) -> int:
        """计算PDF页数"""
        if not pdf_path.exists():
            raise MergeError(f"PDF文件不存在: {pdf_path}")
        try:
            return len(PdfReader(str(pdf_path)).pages)
        except (PdfReadError, OSError) as e:
            raise MergeError(f"PDF读取失败: {pdf_path}: {e}") from e
