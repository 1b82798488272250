"""
命名解析 - 过滤器唯一命名与输出文件名清洗

职责：
1. 过滤器名与现有名称冲突时追加 _1、_2 …（不区分大小写）
2. "图号_图名.pdf" 并替换非法文件名字符
3. 同一批次内输出文件去重

均为纯函数；现有名称快照由调用方提供，每建一个过滤器需重新取快照。

测试要点：
- test_resolve_rule_name_suffix: 冲突追加序号
- test_resolve_rule_name_case_insensitive: 大小写不敏感
- test_resolve_output_file_name: 非法字符逐个替换
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from ..interfaces import RuleCreationError

WINDOWS_FORBIDDEN_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(i) for i in range(32))
POSIX_FORBIDDEN_CHARS = frozenset({"/", "\0"})


def default_forbidden_chars() -> frozenset[str]:
    """当前系统的非法文件名字符"""
    return WINDOWS_FORBIDDEN_CHARS if os.name == "nt" else POSIX_FORBIDDEN_CHARS


def _next_free(base: str, taken: set[str], max_suffix: int) -> str | None:
    """base 或 base_N；taken 为小写集合，序号耗尽返回None"""
    if base.casefold() not in taken:
        return base
    for n in range(1, max_suffix + 1):
        candidate = f"{base}_{n}"
        if candidate.casefold() not in taken:
            return candidate
    return None


def resolve_rule_name(base: str, existing_names: Iterable[str], max_suffix: int = 1000) -> str:
    """
    解析唯一过滤器名

    Args:
        base: 基础名
        existing_names: 现有同类名称快照
        max_suffix: 序号上限，超过视为致命错误

    Returns:
        base 或 base_N

    Raises:
        RuleCreationError: 序号耗尽
    """
    name = _next_free(base, {n.casefold() for n in existing_names}, max_suffix)
    if name is None:
        raise RuleCreationError(f"过滤器名序号超过上限({max_suffix}): {base}")
    return name


def resolve_output_file_name(
    page_number: str,
    page_name: str,
    forbidden_chars: Iterable[str] | None = None,
) -> str:
    """图号_图名.pdf，非法字符逐个替换为下划线"""
    forbidden = set(default_forbidden_chars() if forbidden_chars is None else forbidden_chars)
    file_name = f"{page_number}_{page_name}.pdf"
    return "".join("_" if c in forbidden else c for c in file_name)


def unique_output_path(
    directory: Path,
    file_name: str,
    taken: set[str],
    max_suffix: int = 1000,
) -> Path:
    """
    批次内去重的输出路径

    taken 为本批次已占用的文件主名（小写），本函数会登记新名称。
    """
    stem, suffix = os.path.splitext(file_name)
    resolved = _next_free(stem, taken, max_suffix)
    if resolved is None:
        raise ValueError(f"输出文件名序号超过上限({max_suffix}): {file_name}")
    taken.add(resolved.casefold())
    return directory / f"{resolved}{suffix}"
