"""
流水线模块 - 任务编排与执行

子模块：
- stages: 流水线各阶段定义
- executor: 流水线执行器
"""

from .executor import PipelineExecutor
from .stages import CLEANUP_STAGE, PRINT_STAGES, PipelineStage, StageEnum

__all__ = [
    "PipelineStage",
    "StageEnum",
    "PRINT_STAGES",
    "CLEANUP_STAGE",
    "PipelineExecutor",
]
