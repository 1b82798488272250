"""
图纸/视图/类别模型 - 宿主文档数据的只读快照

宿主对象本身不进入核心逻辑，适配层负责转换为这些模型。
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class CategoryType(str, Enum):
    """类别分类"""
    MODEL = "model"
    ANNOTATION = "annotation"
    ANALYTICAL = "analytical"
    INTERNAL = "internal"


class Category(BaseModel):
    """内容类别（只作为不透明键使用）"""
    category_id: str
    name: str = ""
    category_type: CategoryType = CategoryType.MODEL
    builtin: str | None = Field(None, description="内置类别名(OST_xxx)")

    @property
    def is_overridable(self) -> bool:
        """注释类或模型类"""
        return self.category_type in (CategoryType.ANNOTATION, CategoryType.MODEL)


class SubView(BaseModel):
    """图纸上放置的视图"""
    view_id: str
    name: str = ""
    is_template: bool = False


class Sheet(BaseModel):
    """图纸（可打印单元）"""
    sheet_id: str
    number: str
    name: str
    is_placeholder: bool = False
    views: list[SubView] = Field(default_factory=list)

    @property
    def label(self) -> str:
        """显示名：图号 - 图名"""
        return f"{self.number} - {self.name}"

    def printable_views(self) -> list[SubView]:
        """可挂过滤器的视图（排除样板视图）"""
        return [v for v in self.views if not v.is_template]
