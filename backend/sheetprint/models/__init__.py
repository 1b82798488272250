"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- Sheet/SubView/Category: 宿主文档快照
- OverridePayload/EphemeralRule/CleanupReport: 临时覆盖过滤器
- RenderJob/RenderResult/MergeResult: 逐张打印与合并
- PrintJob: 批次状态与生命周期
"""

from .job import JobArtifacts, JobProgress, JobStatus, PrintJob
from .render import MergeRequest, MergeResult, RenderJob, RenderResult, RenderStatus
from .rules import (
    CleanupReport,
    Color,
    EphemeralRule,
    OverridePayload,
    OverrideRuleSpec,
    RuleScope,
)
from .sheet import Category, CategoryType, Sheet, SubView

__all__ = [
    "PrintJob",
    "JobStatus",
    "JobArtifacts",
    "JobProgress",
    "RenderJob",
    "RenderResult",
    "RenderStatus",
    "MergeRequest",
    "MergeResult",
    "Color",
    "OverridePayload",
    "OverrideRuleSpec",
    "RuleScope",
    "EphemeralRule",
    "CleanupReport",
    "Category",
    "CategoryType",
    "Sheet",
    "SubView",
]
