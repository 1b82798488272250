"""
覆盖规则构建 - 计算每张图纸需要统一涂黑的类别集合

职责：
1. 注释类/模型类类别全部纳入，排除被高亮的类别（修订云线）
2. 强制纳入配置中的内置类别（不论分类）
3. 生成固定的"统一黑色"覆盖样式

测试要点：
- test_category_set_no_duplicates: 无重复
- test_category_set_excludes_highlight: 不含排除类别
- test_must_include_forced: 强制类别必定存在
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..config import OverrideConfig
from ..models import Category, Color, OverridePayload, OverrideRuleSpec

if TYPE_CHECKING:
    from ..interfaces import IHostDocument
    from ..models import Sheet

logger = logging.getLogger(__name__)


def build_category_set(
    all_categories: Iterable[Category],
    excluded_category_id: str | None,
    must_include_ids: Iterable[str],
) -> frozenset[str]:
    """计算覆盖类别集合（结果不含 excluded_category_id）"""
    ids: set[str] = set()
    for cat in all_categories:
        if cat.is_overridable and cat.category_id != excluded_category_id:
            ids.add(cat.category_id)

    for cat_id in must_include_ids:
        if cat_id != excluded_category_id:
            ids.add(cat_id)

    return frozenset(ids)


def build_override_payload() -> OverridePayload:
    """固定的统一黑色覆盖样式"""
    return OverridePayload.uniform(Color.black())


def resolve_must_include(host: IHostDocument, builtin_names: Iterable[str]) -> list[str]:
    """内置类别名 -> 类别ID；文档中不存在的跳过"""
    ids: list[str] = []
    for builtin in builtin_names:
        cat = host.find_category(builtin)
        if cat is None:
            logger.debug(f"文档中不存在类别，跳过: {builtin}")
            continue
        if cat.category_id not in ids:
            ids.append(cat.category_id)
    return ids


class OverrideRuleBuilder:
    """按图纸生成过滤器规格"""

    def __init__(
        self,
        host: IHostDocument,
        config: OverrideConfig | None = None,
        must_include: list[str] | None = None,
    ):
        self.host = host
        self.config = config or OverrideConfig()
        self.must_include = self.config.must_include if must_include is None else must_include
        self.payload = build_override_payload()
        self._categories: list[Category] | None = None
        self._excluded_id: str | None = None
        self._must_include_ids: list[str] = []

    def _load(self) -> None:
        """读取一次文档类别（批次内不变）"""
        self._categories = self.host.list_categories()

        excluded = self.host.find_category(self.config.excluded_category)
        if excluded is None:
            logger.warning(f"未找到排除类别 {self.config.excluded_category}，全部类别参与覆盖")
        self._excluded_id = excluded.category_id if excluded else None

        self._must_include_ids = resolve_must_include(self.host, self.must_include)

    def build_for_sheet(self, sheet: Sheet) -> OverrideRuleSpec:
        """计算单张图纸的过滤器规格"""
        if self._categories is None:
            self._load()
        category_ids = build_category_set(
            self._categories or [],
            self._excluded_id,
            self._must_include_ids,
        )
        logger.debug(f"图纸 {sheet.label} 覆盖类别数: {len(category_ids)}")
        return OverrideRuleSpec(category_ids=category_ids, payload=self.payload)
