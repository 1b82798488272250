"""
打印与合并模块

子模块：
- orchestrator: 逐张提交打印并轮询输出
- merger: PDF按序合并
"""

from .merger import PdfMerger
from .orchestrator import BatchRenderOrchestrator

__all__ = [
    "BatchRenderOrchestrator",
    "PdfMerger",
]
