"""
Revit 适配层单元测试（不依赖Revit，用假 DB 模块）

每个模块完成后必须运行：pytest tests/unit/test_revit_adapter.py -v
"""

import sys
import types
from types import SimpleNamespace

import pytest

from sheetprint.host import RevitHostDocument, RevitPrintRenderer
from sheetprint.host.revit import _id_value
from sheetprint.interfaces import HostUnavailableError
from sheetprint.models import CategoryType, Color, OverridePayload


class _FakeElementId:
    def __init__(self, value):
        self.IntegerValue = value


class _FakeOverrides:
    def __init__(self):
        self.calls = {}

    def __getattr__(self, name):
        if not name.startswith("Set"):
            raise AttributeError(name)
        return lambda color: self.calls.__setitem__(name, color)


@pytest.fixture
def fake_db(monkeypatch):
    """注入假的 Autodesk.Revit.DB"""
    db = SimpleNamespace(
        ElementId=_FakeElementId,
        Color=lambda r, g, b: (r, g, b),
        OverrideGraphicSettings=_FakeOverrides,
        BuiltInCategory=SimpleNamespace(OST_Walls="walls"),
        Category=SimpleNamespace(
            GetCategory=lambda doc, bic: SimpleNamespace(
                Id=SimpleNamespace(Value=42), Name="Walls", CategoryType="Model"
            )
        ),
    )
    autodesk = types.ModuleType("Autodesk")
    revit = types.ModuleType("Autodesk.Revit")
    revit.DB = db
    autodesk.Revit = revit
    monkeypatch.setitem(sys.modules, "Autodesk", autodesk)
    monkeypatch.setitem(sys.modules, "Autodesk.Revit", revit)
    return db


class TestHostUnavailable:
    """不在Revit内运行"""

    def test_host_document(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "Autodesk", None)
        with pytest.raises(HostUnavailableError):
            RevitHostDocument(doc=object()).list_sheets()

    def test_renderer(self, monkeypatch, temp_dir):
        monkeypatch.setitem(sys.modules, "Autodesk", None)
        with pytest.raises(HostUnavailableError):
            RevitPrintRenderer(doc=object()).submit(temp_dir / "a.pdf")


class TestIdValue:
    """ElementId 数值兼容"""

    def test_new_api(self):
        assert _id_value(SimpleNamespace(Value=7)) == 7

    def test_legacy_api(self):
        assert _id_value(_FakeElementId(9)) == 9


class TestRevitHostDocument:
    """假 DB 下的适配行为"""

    def test_find_category(self, fake_db):
        """内置类别转换为核心模型"""
        cat = RevitHostDocument(doc=object()).find_category("OST_Walls")
        assert cat.category_id == "42"
        assert cat.category_type == CategoryType.MODEL
        assert cat.builtin == "OST_Walls"

    def test_find_unknown_builtin(self, fake_db):
        """当前版本不存在的内置类别"""
        assert RevitHostDocument(doc=object()).find_category("OST_Nope") is None

    def test_override_settings_all_black(self, fake_db):
        """六项颜色全部设置"""
        ogs = RevitHostDocument._override_settings(fake_db, OverridePayload.uniform(Color.black()))
        assert len(ogs.calls) == 6
        assert set(ogs.calls.values()) == {(0, 0, 0)}

    def test_delete_rule(self, fake_db):
        """删除按ElementId调用文档"""
        deleted = []
        doc = SimpleNamespace(Delete=lambda eid: deleted.append(eid.IntegerValue))
        RevitHostDocument(doc=doc).delete_rule("1001")
        assert deleted == [1001]

    def test_submit_sets_file_name(self, fake_db, temp_dir):
        """提交前设置输出文件名"""
        submitted = []
        pm = SimpleNamespace(PrintToFileName=None, SubmitPrint=lambda: submitted.append(pm.PrintToFileName))
        RevitPrintRenderer(doc=SimpleNamespace(PrintManager=pm)).submit(temp_dir / "a.pdf")
        assert submitted == [str(temp_dir / "a.pdf")]
