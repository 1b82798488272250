"""
临时覆盖过滤器模块

子模块：
- naming: 过滤器唯一命名/输出文件名清洗
- rule_builder: 覆盖类别集合与覆盖样式
- lifecycle: 过滤器创建/挂载/清理
"""

from .lifecycle import RuleLifecycleManager
from .naming import (
    default_forbidden_chars,
    resolve_output_file_name,
    resolve_rule_name,
    unique_output_path,
)
from .rule_builder import (
    OverrideRuleBuilder,
    build_category_set,
    build_override_payload,
    resolve_must_include,
)

__all__ = [
    "RuleLifecycleManager",
    "OverrideRuleBuilder",
    "build_category_set",
    "build_override_payload",
    "resolve_must_include",
    "resolve_rule_name",
    "resolve_output_file_name",
    "unique_output_path",
    "default_forbidden_chars",
]
