"""
宿主适配模块 - 将外部宿主实现为核心接口

子模块：
- revit: Revit 文档与 PrintManager 适配
"""

from .revit import RevitHostDocument, RevitPrintRenderer

__all__ = [
    "RevitHostDocument",
    "RevitPrintRenderer",
]
