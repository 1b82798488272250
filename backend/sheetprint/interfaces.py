"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 宿主文档、打印驱动、PDF库均视为外部协作者，通过接口隔离
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换

使用方式：
    from sheetprint.interfaces import IRenderer

    class MyRenderer(IRenderer):
        def submit(self, output_path: Path) -> None:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import PrintSettingsConfig
    from .models import Category, MergeRequest, MergeResult, OverridePayload, Sheet


# ============================================================================
# 宿主文档接口
# ============================================================================

class IHostDocument(ABC):
    """宿主文档接口 - 图纸/视图/类别/过滤器"""

    @abstractmethod
    def list_sheets(self) -> list[Sheet]:
        """列出文档中的全部图纸（含占位图纸）"""
        ...

    @abstractmethod
    def get_sheet(self, sheet_id: str) -> Sheet | None:
        """按ID获取图纸，不存在返回None"""
        ...

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """列出文档中的全部类别"""
        ...

    @abstractmethod
    def find_category(self, builtin: str) -> Category | None:
        """
        按内置类别名查找类别

        Args:
            builtin: 内置类别名（如 OST_Walls）

        Returns:
            类别；文档中不存在时返回None
        """
        ...

    @abstractmethod
    def list_rule_names(self) -> set[str]:
        """当前文档中全部过滤器名称（快照）"""
        ...

    @abstractmethod
    def create_rule(self, name: str, category_ids: frozenset[str]) -> str:
        """
        创建绑定类别集合的过滤器

        Args:
            name: 过滤器名称（调用方保证唯一）
            category_ids: 类别ID集合

        Returns:
            宿主分配的过滤器ID

        Raises:
            Exception: 宿主拒绝（名称冲突/类别集合非法）
        """
        ...

    @abstractmethod
    def attach_rule(self, scope_id: str, rule_id: str, payload: OverridePayload) -> None:
        """将过滤器挂到图纸/视图上并应用覆盖样式"""
        ...

    @abstractmethod
    def delete_rule(self, rule_id: str) -> None:
        """删除过滤器（已删除/被占用时抛出异常）"""
        ...

    @abstractmethod
    def transaction(self, name: str) -> AbstractContextManager[None]:
        """
        事务边界

        正常退出时提交，异常退出时回滚并继续抛出。
        """
        ...


# ============================================================================
# 打印驱动接口
# ============================================================================

class IRenderer(ABC):
    """外部打印驱动接口 - 全局有状态，只能逐张提交"""

    @abstractmethod
    def configure(self, settings: PrintSettingsConfig) -> None:
        """设置驱动/颜色/纸张位置/缩放/裁剪边界"""
        ...

    @abstractmethod
    def select_output_target(self, sheet: Sheet) -> None:
        """将打印范围限定为这一张图纸"""
        ...

    @abstractmethod
    def submit(self, output_path: Path) -> None:
        """
        提交打印任务（异步，无完成回调）

        完成与否只能通过 output_path 文件是否出现来判断。
        """
        ...


# ============================================================================
# PDF合并接口
# ============================================================================

class IPdfMerger(ABC):
    """PDF合并器接口"""

    @abstractmethod
    def merge(self, input_paths: list[Path], output_path: Path) -> MergeResult:
        """按顺序合并PDF，缺失的输入跳过"""
        ...

    @abstractmethod
    def count_pages(self, pdf_path: Path) -> int:
        """计算PDF页数"""
        ...

    def merge_request(self, request: MergeRequest) -> MergeResult:
        """按合并请求执行（输入顺序即打印顺序）"""
        return self.merge(request.input_paths, request.output_path)


# ============================================================================
# 异常定义
# ============================================================================

class SheetPrintError(Exception):
    """基础异常"""

    kind = "error"

    def __init__(self, message: str, sheet_name: str | None = None):
        super().__init__(message)
        self.sheet_name = sheet_name


class RuleCreationError(SheetPrintError):
    """过滤器创建失败（渲染前，致命）"""
    kind = "rule_creation_failed"


class RenderSubmissionError(SheetPrintError):
    """打印提交失败（中止剩余图纸）"""
    kind = "render_submission_failed"


class RenderTimeoutError(SheetPrintError):
    """打印超时（仅严格策略下抛出）"""
    kind = "render_timed_out"


class MergeError(SheetPrintError):
    """PDF合并失败"""
    kind = "merge_failed"


class BatchCancelledError(SheetPrintError):
    """批次被取消"""
    kind = "cancelled"


class NoSheetsError(SheetPrintError):
    """没有可打印的图纸"""
    kind = "no_sheets"


class HostUnavailableError(SheetPrintError):
    """宿主环境不可用（不在Revit内运行）"""
    kind = "host_unavailable"
