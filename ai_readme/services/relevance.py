"""
相关性匹配：根据变更路径挑选管辖它们的 AI_README scope。

scope 与变更路径相关，当且仅当 scope 目录（以 "/" 结尾）是变更路径的前缀。
同一路径可被多个祖先 scope 同时命中，全部返回。
"""
import logging
import os
from typing import List, Optional

from ai_readme.schemas.readme_scope import ReadmeScope
from ai_readme.utils.paths import is_under, resolve_changed_path, to_posix

logger = logging.getLogger(__name__)


def scope_absolute_dir(scope: ReadmeScope) -> str:
    """scope 管辖目录的绝对路径（正斜杠）"""
    return to_posix(os.path.dirname(scope.absolute_path))


def extract_relevant_scopes(
    scopes: List[ReadmeScope],
    changed_paths: List[str],
    root: str,
    fallback_to_root: bool = True,
    log: Optional[logging.Logger] = None,
) -> List[ReadmeScope]:
    """
    计算与变更路径相关的 scope 子集，按 (depth, directory) 升序。

    - changed_paths 为空：返回全部 scope（全局指引）
    - 无任何命中：记录警告，回退到优先级最高的 scope（列表首个）；
      fallback_to_root=False 时返回空列表
    """
    log = log or logger

    if not changed_paths:
        return list(scopes)

    normalized_changes = [resolve_changed_path(root, p) for p in changed_paths]

    # 以 absolute_path 去重，而非对象身份
    relevant: dict[str, ReadmeScope] = {}
    for change in normalized_changes:
        for scope in scopes:
            if scope.absolute_path in relevant:
                continue
            if is_under(scope_absolute_dir(scope), change):
                relevant[scope.absolute_path] = scope

    if not relevant:
        if fallback_to_root and scopes:
            log.warning("[Relevance] 变更路径未命中任何 AI_README，回退到仓库级指引")
            return [scopes[0]]
        log.warning("[Relevance] 变更路径未命中任何 AI_README")
        return []

    return sorted(relevant.values(), key=lambda s: s.sort_key)


def find_missing_paths(
    scopes: List[ReadmeScope],
    changed_paths: List[str],
    root: str,
) -> List[str]:
    """返回没有任何 scope 覆盖的变更路径（基于完整 scope 列表，与回退策略无关），保持输入顺序"""
    scope_dirs = [scope_absolute_dir(scope) for scope in scopes]
    missing = []
    for changed in changed_paths:
        absolute = resolve_changed_path(root, changed)
        if not any(is_under(d, absolute) for d in scope_dirs):
            missing.append(changed)
    return missing
