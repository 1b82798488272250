"""
覆盖规则模型 - 覆盖样式/过滤器规格/临时过滤器/清理报告
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Color(BaseModel):
    """RGB颜色"""
    r: int = Field(0, ge=0, le=255)
    g: int = Field(0, ge=0, le=255)
    b: int = Field(0, ge=0, le=255)

    model_config = {"frozen": True}

    @classmethod
    def black(cls) -> Color:
        return cls(r=0, g=0, b=0)


class OverridePayload(BaseModel):
    """覆盖样式（线/填充图案前景/背景统一着色）"""
    projection_line_color: Color
    cut_line_color: Color
    surface_foreground_color: Color
    surface_background_color: Color
    cut_foreground_color: Color
    cut_background_color: Color

    model_config = {"frozen": True}

    @classmethod
    def uniform(cls, color: Color) -> OverridePayload:
        """所有项使用同一颜色"""
        return cls(
            projection_line_color=color,
            cut_line_color=color,
            surface_foreground_color=color,
            surface_background_color=color,
            cut_foreground_color=color,
            cut_background_color=color,
        )


class OverrideRuleSpec(BaseModel):
    """过滤器规格：类别集合 + 覆盖样式"""
    category_ids: frozenset[str]
    payload: OverridePayload


class RuleScope(str, Enum):
    """过滤器作用范围"""
    SHEET = "sheet"
    VIEW = "view"


class EphemeralRule(BaseModel):
    """临时过滤器（批次结束后必须删除）"""
    rule_id: str
    name: str
    scope: RuleScope
    scope_id: str
    category_ids: frozenset[str] = Field(default_factory=frozenset)


class CleanupReport(BaseModel):
    """过滤器清理结果（逐个记录，不抛异常）"""
    deleted: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict, description="rule_id -> 失败原因")

    @property
    def attempted(self) -> int:
        return len(self.deleted) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed
