"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(fake_host, fake_renderer, sample_sheets):
        assert len(fake_host.list_sheets()) == 4
"""

from __future__ import annotations

import copy
import tempfile
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import pytest
from PyPDF2 import PdfWriter

from sheetprint.config import PollingConfig, RuntimeConfig
from sheetprint.interfaces import IHostDocument, IRenderer
from sheetprint.models import (
    Category,
    CategoryType,
    OverridePayload,
    PrintJob,
    Sheet,
    SubView,
)


# ============================================================================
# PDF 工具
# ============================================================================

def write_pdf(path: Path, pages: int = 1, width: float = 200) -> Path:
    """写一个空白PDF（用页宽区分来源）"""
    writer = PdfWriter()
    for i in range(pages):
        writer.add_blank_page(width=width + i, height=300)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        writer.write(f)
    return path


# ============================================================================
# 宿主文档 Fake
# ============================================================================

class FakeHost(IHostDocument):
    """内存宿主文档：支持事务回滚与失败注入"""

    def __init__(self, sheets: list[Sheet], categories: list[Category]):
        self.sheets = sheets
        self.categories = categories
        self.rules: dict[str, str] = {}                  # rule_id -> name
        self.rule_categories: dict[str, frozenset[str]] = {}
        self.attachments: dict[str, list[tuple[str, OverridePayload]]] = {}
        self.transactions: list[tuple[str, str]] = []    # (name, commit|rollback)
        self.fail_attach_scope: str | None = None
        self.fail_delete: set[str] = set()
        self.fail_list_names_on: int | None = None     # 第N次查询名称时抛异常
        self._list_names_calls = 0
        self._next_id = 1000

    def list_sheets(self) -> list[Sheet]:
        return list(self.sheets)

    def get_sheet(self, sheet_id: str) -> Sheet | None:
        return next((s for s in self.sheets if s.sheet_id == sheet_id), None)

    def list_categories(self) -> list[Category]:
        return list(self.categories)

    def find_category(self, builtin: str) -> Category | None:
        return next((c for c in self.categories if c.builtin == builtin), None)

    def list_rule_names(self) -> set[str]:
        self._list_names_calls += 1
        if self._list_names_calls == self.fail_list_names_on:
            raise RuntimeError("document is busy")
        return set(self.rules.values())

    def create_rule(self, name: str, category_ids: frozenset[str]) -> str:
        if not category_ids:
            raise ValueError("empty category set")
        if name.casefold() in {n.casefold() for n in self.rules.values()}:
            raise ValueError(f"duplicate name {name}")
        self._next_id += 1
        rule_id = str(self._next_id)
        self.rules[rule_id] = name
        self.rule_categories[rule_id] = category_ids
        return rule_id

    def attach_rule(self, scope_id: str, rule_id: str, payload: OverridePayload) -> None:
        if scope_id == self.fail_attach_scope:
            raise RuntimeError(f"cannot attach to {scope_id}")
        self.attachments.setdefault(scope_id, []).append((rule_id, payload))

    def delete_rule(self, rule_id: str) -> None:
        if rule_id in self.fail_delete:
            raise RuntimeError("rule in use")
        if rule_id not in self.rules:
            raise KeyError(f"rule {rule_id} does not exist")
        del self.rules[rule_id]
        self.rule_categories.pop(rule_id, None)
        for attached in self.attachments.values():
            attached[:] = [a for a in attached if a[0] != rule_id]

    @contextmanager
    def transaction(self, name: str) -> Iterator[None]:
        snapshot = (
            dict(self.rules),
            dict(self.rule_categories),
            copy.deepcopy(self.attachments),
        )
        try:
            yield
        except BaseException:
            self.rules, self.rule_categories, self.attachments = snapshot
            self.transactions.append((name, "rollback"))
            raise
        self.transactions.append((name, "commit"))


# ============================================================================
# 打印驱动 Fake
# ============================================================================

class FakeRenderer(IRenderer):
    """
    内存打印驱动

    - fail_on: 提交时抛异常的图纸ID
    - never_write: 提交成功但永不生成文件的图纸ID
    - delays: 图纸ID -> 生成文件前需要的 tick 次数
    """

    def __init__(self):
        self.settings = None
        self.selected: Sheet | None = None
        self.submitted: list[tuple[str, Path]] = []
        self.fail_on: set[str] = set()
        self.never_write: set[str] = set()
        self.delays: dict[str, int] = {}
        self._pending: list[list] = []

    def configure(self, settings) -> None:
        self.settings = settings

    def select_output_target(self, sheet: Sheet) -> None:
        self.selected = sheet

    def submit(self, output_path: Path) -> None:
        sheet = self.selected
        assert sheet is not None, "select_output_target must be called first"
        if sheet.sheet_id in self.fail_on:
            raise RuntimeError(f"printer error on {sheet.number}")
        self.submitted.append((sheet.sheet_id, output_path))
        if sheet.sheet_id in self.never_write:
            return
        delay = self.delays.get(sheet.sheet_id, 0)
        if delay <= 0:
            write_pdf(output_path, width=200 + int(sheet.sheet_id))
        else:
            self._pending.append([delay, output_path, sheet])

    def tick(self) -> None:
        """模拟时间流逝（每次sleep调用一次）"""
        for item in list(self._pending):
            item[0] -= 1
            if item[0] <= 0:
                write_pdf(item[1], width=200 + int(item[2].sheet_id))
                self._pending.remove(item)


# ============================================================================
# 数据 Fixtures
# ============================================================================

@pytest.fixture
def sample_categories() -> list[Category]:
    """示例类别（含修订云线/强制类别/非覆盖类）"""
    return [
        Category(category_id="1", name="Walls", category_type=CategoryType.MODEL, builtin="OST_Walls"),
        Category(category_id="2", name="Doors", category_type=CategoryType.MODEL, builtin="OST_Doors"),
        Category(category_id="3", name="Text Notes", category_type=CategoryType.ANNOTATION, builtin="OST_TextNotes"),
        Category(category_id="4", name="Revision Clouds", category_type=CategoryType.ANNOTATION, builtin="OST_RevisionClouds"),
        Category(category_id="5", name="Fill Patterns", category_type=CategoryType.INTERNAL, builtin="OST_FillPatterns"),
        Category(category_id="6", name="Analytical Nodes", category_type=CategoryType.ANALYTICAL, builtin="OST_AnalyticalNodes"),
        Category(category_id="7", name="Materials", category_type=CategoryType.INTERNAL, builtin="OST_Materials"),
    ]


@pytest.fixture
def sample_sheets() -> list[Sheet]:
    """示例图纸：3张可打印（共2个非样板视图）+ 1张占位"""
    return [
        Sheet(
            sheet_id="1",
            number="A101",
            name="Plan: Level/1",
            views=[
                SubView(view_id="11", name="Level 1"),
                SubView(view_id="12", name="Template", is_template=True),
            ],
        ),
        Sheet(sheet_id="2", number="A102", name="Sections", views=[SubView(view_id="21")]),
        Sheet(sheet_id="3", number="A103", name="Details"),
        Sheet(sheet_id="4", number="A999", name="Placeholder", is_placeholder=True),
    ]


@pytest.fixture
def fake_host(sample_sheets: list[Sheet], sample_categories: list[Category]) -> FakeHost:
    return FakeHost(sample_sheets, sample_categories)


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def fake_sleep(fake_renderer: FakeRenderer):
    """不真正等待，只推进 fake 打印驱动"""
    calls: list[float] = []

    def _sleep(seconds: float) -> None:
        calls.append(seconds)
        fake_renderer.tick()

    _sleep.calls = calls  # type: ignore[attr-defined]
    return _sleep


# ============================================================================
# 配置与任务 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config(temp_dir: Path) -> RuntimeConfig:
    """运行期配置（输出到临时目录，轮询3次）"""
    config = RuntimeConfig()
    config.polling = PollingConfig(max_attempts=3, interval_ms=10)
    config.output.output_dir = temp_dir / "out"
    config.overrides.must_include = ["OST_Walls", "OST_FillPatterns", "OST_Materials", "OST_Missing"]
    return config


@pytest.fixture
def print_job(temp_dir: Path) -> PrintJob:
    return PrintJob(job_id=str(uuid.uuid4()), output_dir=temp_dir / "out")


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def pdf_factory():
    """写空白PDF：pdf_factory(path, pages=1, width=200)"""
    return write_pdf
