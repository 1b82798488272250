"""
临时过滤器生命周期 - 创建/挂载/清理

职责：
1. 为每张图纸及其放置的视图创建并挂载黑色覆盖过滤器（同一事务）
2. 记录全部已创建的过滤器ID
3. 批次结束后逐个删除（同一事务，失败只记录不抛出）

依赖：
- IHostDocument: 宿主文档（事务/过滤器操作）
- naming.resolve_rule_name: 唯一命名

测试要点：
- test_create_and_attach: 创建并挂载
- test_empty_category_set_rejected: 空类别集合报错
- test_cleanup_idempotent: 重复清理不报错
- test_rollback_on_failure: 创建失败时事务回滚
- test_host_error_wrapped: 宿主其他异常同样按创建失败处理并回滚
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..config import OverrideConfig
from ..interfaces import IHostDocument, RuleCreationError
from ..models import (
    CleanupReport,
    EphemeralRule,
    OverridePayload,
    OverrideRuleSpec,
    RuleScope,
    Sheet,
    SubView,
)
from .naming import resolve_rule_name

logger = logging.getLogger(__name__)

CREATE_TX_NAME = "Create Black Override Filters"
CLEANUP_TX_NAME = "Clean Up Temporary Filters"


class RuleLifecycleManager:
    """临时过滤器生命周期管理"""

    def __init__(self, host: IHostDocument, config: OverrideConfig | None = None):
        self.host = host
        self.config = config or OverrideConfig()
        self._rule_ids: list[str] = []

    @property
    def created_rule_ids(self) -> list[str]:
        """待清理的过滤器ID（快照）"""
        return list(self._rule_ids)

    def _base_name(self, scope: Sheet | SubView) -> tuple[RuleScope, str, str]:
        prefix = self.config.rule_name_prefix
        if isinstance(scope, Sheet):
            return RuleScope.SHEET, scope.sheet_id, f"{prefix}_Sheet_{scope.sheet_id}"
        return RuleScope.VIEW, scope.view_id, f"{prefix}_View_{scope.view_id}"

    def create_and_attach(
        self,
        scope: Sheet | SubView,
        category_ids: frozenset[str],
        payload: OverridePayload,
        existing_names: Iterable[str],
    ) -> EphemeralRule:
        """
        创建过滤器并挂到图纸/视图上

        Args:
            scope: 图纸或视图
            category_ids: 覆盖类别集合
            payload: 覆盖样式
            existing_names: 现有过滤器名称快照

        Returns:
            已创建的过滤器

        Raises:
            RuleCreationError: 类别集合为空/宿主拒绝/命名耗尽
        """
        scope_kind, scope_id, base_name = self._base_name(scope)

        if not category_ids:
            raise RuleCreationError(f"类别集合为空，无法创建过滤器: {base_name}")

        name = resolve_rule_name(base_name, existing_names, self.config.max_name_suffix)

        try:
            rule_id = self.host.create_rule(name, frozenset(category_ids))
        except Exception as e:
            raise RuleCreationError(f"宿主拒绝创建过滤器 {name}: {e}") from e

        # 先登记再挂载，挂载失败也能被清理
        self._rule_ids.append(rule_id)

        try:
            self.host.attach_rule(scope_id, rule_id, payload)
        except Exception as e:
            raise RuleCreationError(f"过滤器挂载失败 {name}: {e}") from e

        logger.debug(f"已创建过滤器 {name} ({rule_id}) -> {scope_kind.value}:{scope_id}")
        return EphemeralRule(
            rule_id=rule_id,
            name=name,
            scope=scope_kind,
            scope_id=scope_id,
            category_ids=frozenset(category_ids),
        )

    def apply_to_sheets(
        self,
        sheets: list[Sheet],
        spec_for: Callable[[Sheet], OverrideRuleSpec],
    ) -> list[EphemeralRule]:
        """为全部图纸及其视图创建过滤器（单一事务，失败整体回滚）"""
        rules: list[EphemeralRule] = []
        tracked_before = len(self._rule_ids)

        try:
            with self.host.transaction(CREATE_TX_NAME):
                for sheet in sheets:
                    try:
                        spec = spec_for(sheet)
                        rules.append(
                            self.create_and_attach(
                                sheet, spec.category_ids, spec.payload, self.host.list_rule_names()
                            )
                        )
                        for view in sheet.printable_views():
                            rules.append(
                                self.create_and_attach(
                                    view, spec.category_ids, spec.payload, self.host.list_rule_names()
                                )
                            )
                    except RuleCreationError as e:
                        if e.sheet_name is None:
                            e.sheet_name = sheet.label
                        raise
                    except Exception as e:
                        raise RuleCreationError(
                            f"过滤器创建失败 {sheet.label}: {e}", sheet_name=sheet.label
                        ) from e
        except Exception:
            # 事务已回滚，本事务内创建的过滤器不复存在
            del self._rule_ids[tracked_before:]
            raise

        logger.info(f"已创建临时过滤器 {len(rules)} 个（图纸 {len(sheets)} 张）")
        return rules

    def cleanup(self, rule_ids: Iterable[str] | None = None) -> CleanupReport:
        """
        删除过滤器（逐个尝试，失败只记录）

        不传 rule_ids 时清理本管理器创建的全部过滤器。
        """
        ids = self.created_rule_ids if rule_ids is None else list(rule_ids)
        report = CleanupReport()
        if not ids:
            return report

        try:
            with self.host.transaction(CLEANUP_TX_NAME):
                for rule_id in ids:
                    try:
                        self.host.delete_rule(rule_id)
                        report.deleted.append(rule_id)
                    except Exception as e:
                        report.failed[rule_id] = str(e)
                        logger.debug(f"过滤器删除失败（忽略）: {rule_id}: {e}")
        except Exception as e:
            # 事务提交失败，本次删除全部作废
            logger.error(f"清理事务提交失败: {e}")
            for rule_id in report.deleted:
                report.failed[rule_id] = f"事务提交失败: {e}"
            report.deleted.clear()

        deleted = set(report.deleted)
        self._rule_ids = [rid for rid in self._rule_ids if rid not in deleted]

        if report.failed:
            logger.warning(f"过滤器清理: 成功 {len(report.deleted)}，失败 {len(report.failed)}")
        else:
            logger.info(f"过滤器清理完成: {len(report.deleted)} 个")
        return report
