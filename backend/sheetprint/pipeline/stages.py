"""
流水线阶段定义

职责：
1. 定义各阶段的名称和进度区间
2. 清理阶段不在顺序列表中，由执行器在 finally 中保证执行

测试要点：
- test_stage_progress_monotonic: 进度区间递增
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StageEnum(str, Enum):
    """流水线阶段枚举"""
    COLLECT_SHEETS = "COLLECT_SHEETS"
    CREATE_OVERRIDES = "CREATE_OVERRIDES"
    CONFIGURE_PRINTER = "CONFIGURE_PRINTER"
    RENDER_SHEETS = "RENDER_SHEETS"
    MERGE_PDF = "MERGE_PDF"
    CLEANUP_OVERRIDES = "CLEANUP_OVERRIDES"


@dataclass
class PipelineStage:
    """流水线阶段"""
    name: str
    progress_start: int  # 进度起点（0-100）
    progress_end: int    # 进度终点


# 批量打印流水线各阶段配置
PRINT_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.COLLECT_SHEETS.value, 0, 5),
    PipelineStage(StageEnum.CREATE_OVERRIDES.value, 5, 15),
    PipelineStage(StageEnum.CONFIGURE_PRINTER.value, 15, 20),
    PipelineStage(StageEnum.RENDER_SHEETS.value, 20, 85),
    PipelineStage(StageEnum.MERGE_PDF.value, 85, 95),
]

CLEANUP_STAGE = PipelineStage(StageEnum.CLEANUP_OVERRIDES.value, 95, 100)
