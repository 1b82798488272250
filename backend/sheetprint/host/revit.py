"""
Revit 适配层 - 宿主文档与打印管理器

职责：
1. 将 ViewSheet / View / Category 转换为核心模型
2. 过滤器（ParameterFilterElement）创建/挂载/删除
3. PrintManager 逐张打印到文件
4. Revit Transaction 封装为上下文管理器

依赖：
- Revit API（pyRevit / RevitPythonShell 等宿主内运行，惰性导入）

不在Revit内运行时，任何宿主操作都会抛出 HostUnavailableError。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..interfaces import HostUnavailableError, IHostDocument, IRenderer
from ..models import Category, CategoryType, Sheet, SubView

if TYPE_CHECKING:
    from ..config import PrintSettingsConfig
    from ..models import Color, OverridePayload

logger = logging.getLogger(__name__)

_CATEGORY_TYPES = {
    "Model": CategoryType.MODEL,
    "Annotation": CategoryType.ANNOTATION,
    "AnalyticalModel": CategoryType.ANALYTICAL,
    "Internal": CategoryType.INTERNAL,
}


def _revit_db() -> Any:
    """惰性导入 Autodesk.Revit.DB"""
    try:
        from Autodesk.Revit import DB  # type: ignore[import-not-found]
    except ImportError as e:
        raise HostUnavailableError("Revit API 不可用，请在Revit内运行") from e
    return DB


def _id_value(element_id: Any) -> int:
    """ElementId 数值（2024+ 为 Value，旧版为 IntegerValue）"""
    value = getattr(element_id, "Value", None)
    if value is None:
        value = element_id.IntegerValue
    return int(value)


def _to_element_id(DB: Any, value: str) -> Any:
    return DB.ElementId(int(value))


class RevitHostDocument(IHostDocument):
    """Revit 文档适配"""

    def __init__(self, doc: Any):
        self.doc = doc

    def _sheet_from(self, DB: Any, vs: Any) -> Sheet:
        views: list[SubView] = []
        for view_id in vs.GetAllPlacedViews():
            view = self.doc.GetElement(view_id)
            if view is None:
                continue
            views.append(
                SubView(
                    view_id=str(_id_value(view.Id)),
                    name=view.Name,
                    is_template=bool(view.IsTemplate),
                )
            )
        return Sheet(
            sheet_id=str(_id_value(vs.Id)),
            number=vs.SheetNumber,
            name=vs.Name,
            is_placeholder=bool(vs.IsPlaceholder),
            views=views,
        )

    def list_sheets(self) -> list[Sheet]:
        DB = _revit_db()
        collector = DB.FilteredElementCollector(self.doc).OfClass(DB.ViewSheet)
        return [self._sheet_from(DB, vs) for vs in collector]

    def get_sheet(self, sheet_id: str) -> Sheet | None:
        DB = _revit_db()
        element = self.doc.GetElement(_to_element_id(DB, sheet_id))
        if element is None or not isinstance(element, DB.ViewSheet):
            return None
        return self._sheet_from(DB, element)

    def _category_from(self, cat: Any, builtin: str | None = None) -> Category:
        return Category(
            category_id=str(_id_value(cat.Id)),
            name=cat.Name,
            category_type=_CATEGORY_TYPES.get(str(cat.CategoryType), CategoryType.INTERNAL),
            builtin=builtin,
        )

    def list_categories(self) -> list[Category]:
        _revit_db()
        return [self._category_from(cat) for cat in self.doc.Settings.Categories]

    def find_category(self, builtin: str) -> Category | None:
        DB = _revit_db()
        bic = getattr(DB.BuiltInCategory, builtin, None)
        if bic is None:
            return None
        cat = DB.Category.GetCategory(self.doc, bic)
        if cat is None:
            return None
        return self._category_from(cat, builtin=builtin)

    def list_rule_names(self) -> set[str]:
        DB = _revit_db()
        collector = DB.FilteredElementCollector(self.doc).OfClass(DB.ParameterFilterElement)
        return {f.Name for f in collector}

    def create_rule(self, name: str, category_ids: frozenset[str]) -> str:
        DB = _revit_db()
        from System.Collections.Generic import List  # type: ignore[import-not-found]

        ids = List[DB.ElementId]()
        for cat_id in sorted(category_ids, key=int):
            ids.Add(_to_element_id(DB, cat_id))
        rule = DB.ParameterFilterElement.Create(self.doc, name, ids)
        return str(_id_value(rule.Id))

    def attach_rule(self, scope_id: str, rule_id: str, payload: OverridePayload) -> None:
        DB = _revit_db()
        view = self.doc.GetElement(_to_element_id(DB, scope_id))
        if view is None:
            raise ValueError(f"视图不存在: {scope_id}")
        filter_id = _to_element_id(DB, rule_id)
        view.AddFilter(filter_id)
        view.SetFilterOverrides(filter_id, self._override_settings(DB, payload))

    @staticmethod
    def _override_settings(DB: Any, payload: OverridePayload) -> Any:
        def rgb(color: Color) -> Any:
            return DB.Color(color.r, color.g, color.b)

        ogs = DB.OverrideGraphicSettings()
        ogs.SetProjectionLineColor(rgb(payload.projection_line_color))
        ogs.SetCutLineColor(rgb(payload.cut_line_color))
        ogs.SetSurfaceForegroundPatternColor(rgb(payload.surface_foreground_color))
        ogs.SetSurfaceBackgroundPatternColor(rgb(payload.surface_background_color))
        ogs.SetCutForegroundPatternColor(rgb(payload.cut_foreground_color))
        ogs.SetCutBackgroundPatternColor(rgb(payload.cut_background_color))
        return ogs

    def delete_rule(self, rule_id: str) -> None:
        DB = _revit_db()
        self.doc.Delete(_to_element_id(DB, rule_id))

    @contextmanager
    def transaction(self, name: str) -> Iterator[None]:
        DB = _revit_db()
        tx = DB.Transaction(self.doc, name)
        tx.Start()
        try:
            yield
        except BaseException:
            if tx.HasStarted() and not tx.HasEnded():
                tx.RollBack()
            raise
        tx.Commit()


class RevitPrintRenderer(IRenderer):
    """Revit PrintManager 适配（打印到文件）"""

    def __init__(self, doc: Any):
        self.doc = doc

    @property
    def print_manager(self) -> Any:
        return self.doc.PrintManager

    def configure(self, settings: PrintSettingsConfig) -> None:
        DB = _revit_db()
        pm = self.print_manager
        pm.SelectNewPrintDriver(settings.driver_name)
        pm.PrintRange = DB.PrintRange.Select
        pm.PrintToFile = True

        color_depth = {
            "color": DB.ColorDepthType.Color,
            "grayscale": DB.ColorDepthType.GrayScale,
            "black_line": DB.ColorDepthType.BlackLine,
        }[settings.color_mode]
        placement = {
            "center": DB.PaperPlacementType.Center,
            "offset_from_corner": DB.PaperPlacementType.Margins,
        }[settings.paper_placement]

        tx = DB.Transaction(self.doc, "Configure Print Settings")
        tx.Start()
        try:
            params = pm.PrintSetup.CurrentPrintSetting.PrintParameters
            params.ColorDepth = color_depth
            params.PaperPlacement = placement
            if settings.zoom_type == "fit_to_page":
                params.ZoomType = DB.ZoomType.FitToPage
            else:
                params.ZoomType = DB.ZoomType.Zoom
                params.Zoom = settings.zoom_percent
            params.HideCropBoundaries = settings.hide_crop_boundaries
        except BaseException:
            tx.RollBack()
            raise
        tx.Commit()
        logger.info(f"打印机已设置: {settings.driver_name}")

    def select_output_target(self, sheet: Sheet) -> None:
        DB = _revit_db()
        vs = DB.ViewSet()
        vs.Insert(self.doc.GetElement(_to_element_id(DB, sheet.sheet_id)))
        pm = self.print_manager
        pm.ViewSheetSetting.CurrentViewSheetSet.Views = vs
        pm.Apply()

    def submit(self, output_path: Path) -> None:
        _revit_db()
        pm = self.print_manager
        pm.PrintToFileName = str(output_path)
        pm.SubmitPrint()
