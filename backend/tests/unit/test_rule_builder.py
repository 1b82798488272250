"""
覆盖规则构建单元测试

每个模块完成后必须运行：pytest tests/unit/test_rule_builder.py -v
"""

from sheetprint.config import OverrideConfig
from sheetprint.models import Category, CategoryType, Color
from sheetprint.overrides.rule_builder import (
    OverrideRuleBuilder,
    build_category_set,
    build_override_payload,
    resolve_must_include,
)


class TestBuildCategorySet:
    """类别集合测试"""

    def test_model_and_annotation_included(self, sample_categories):
        """模型类/注释类纳入，其余不纳入"""
        result = build_category_set(sample_categories, "4", [])
        assert result == frozenset({"1", "2", "3"})

    def test_excluded_never_present(self, sample_categories):
        """排除类别即使被强制纳入也不出现"""
        result = build_category_set(sample_categories, "4", ["4", "5"])
        assert "4" not in result
        assert "5" in result

    def test_must_include_forced(self, sample_categories):
        """强制类别不论分类都纳入"""
        result = build_category_set(sample_categories, "4", ["5", "7", "99"])
        assert {"5", "7", "99"} <= result

    def test_no_duplicates(self, sample_categories):
        """重复的强制类别只出现一次"""
        result = build_category_set(sample_categories + sample_categories, "4", ["1", "1", "5", "5"])
        assert sorted(result) == sorted(set(result))
        assert len(result) == 4

    def test_no_excluded_category(self, sample_categories):
        """没有排除类别时全部注释/模型类纳入"""
        result = build_category_set(sample_categories, None, [])
        assert result == frozenset({"1", "2", "3", "4"})

    def test_same_input_same_output(self, sample_categories):
        """相同输入结果一致（与顺序无关）"""
        a = build_category_set(sample_categories, "4", ["5", "7"])
        b = build_category_set(list(reversed(sample_categories)), "4", ["7", "5"])
        assert a == b


class TestOverridePayload:
    """覆盖样式测试"""

    def test_uniform_black(self):
        """所有项均为黑色"""
        payload = build_override_payload()
        black = Color.black()
        assert payload.projection_line_color == black
        assert payload.cut_line_color == black
        assert payload.surface_foreground_color == black
        assert payload.surface_background_color == black
        assert payload.cut_foreground_color == black
        assert payload.cut_background_color == black

    def test_always_identical(self):
        """每次调用结果相同"""
        assert build_override_payload() == build_override_payload()


class TestOverrideRuleBuilder:
    """按图纸生成规格测试"""

    def test_resolve_must_include_skips_missing(self, fake_host):
        """文档中不存在的内置类别跳过"""
        ids = resolve_must_include(fake_host, ["OST_Walls", "OST_Missing", "OST_Materials", "OST_Walls"])
        assert ids == ["1", "7"]

    def test_build_for_sheet(self, fake_host, sample_sheets):
        """规格包含强制类别，不含修订云线"""
        config = OverrideConfig(must_include=["OST_FillPatterns", "OST_RevisionClouds"])
        builder = OverrideRuleBuilder(fake_host, config)
        spec = builder.build_for_sheet(sample_sheets[0])
        assert spec.category_ids == frozenset({"1", "2", "3", "5"})
        assert spec.payload == build_override_payload()

    def test_missing_excluded_category(self, fake_host, sample_sheets):
        """文档无修订云线类别时不排除任何类别"""
        fake_host.categories = [Category(category_id="1", category_type=CategoryType.MODEL)]
        builder = OverrideRuleBuilder(fake_host, OverrideConfig(must_include=[]))
        spec = builder.build_for_sheet(sample_sheets[0])
        assert spec.category_ids == frozenset({"1"})
