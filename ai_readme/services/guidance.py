"""
指引聚合与 AI_README 更新的编排层。

handle_guidance: 发现 scope -> 相关性匹配 -> 生成摘要与聚合文本
handle_update:   读取 -> section upsert -> 一级标题保证 -> Changelog -> 写回
"""
import logging
import os
from typing import List, Optional

from ai_readme.config import settings
from ai_readme.core.errors import ReadmeNotFoundError
from ai_readme.schemas.guidance import (
    GuidanceRequest,
    GuidanceResponse,
    GuidanceScopeSummary,
    UpdateRequest,
    UpdateResponse,
)
from ai_readme.schemas.readme_scope import ReadmeScope
from ai_readme.services.markdown_editor import (
    append_changelog,
    create_content_preview,
    ensure_headline,
    upsert_section,
)
from ai_readme.services.relevance import extract_relevant_scopes, find_missing_paths
from ai_readme.services.scope_discovery import (
    discover_readme_scopes,
    ensure_directory,
    read_file_if_exists,
    resolve_repository_root,
    write_text_file,
)

logger = logging.getLogger(__name__)

RAW_SEPARATOR = "\n\n---\n\n"

GUIDANCE_INTRO = "\n".join([
    "## AI README Guidance",
    "",
    "The following guidance was automatically collected from AI_README.md files relevant to the requested paths.",
    "Use this information to understand project conventions before applying changes.",
])


def build_raw_guidance(scopes: List[ReadmeScope]) -> str:
    """原始拼接：每个 scope 一个 "# Scope:" 块，以水平线分隔"""
    return RAW_SEPARATOR.join(
        f"# Scope: {scope.directory}\n\n{scope.content.strip()}" for scope in scopes
    )


def wrap_aggregated_guidance(scopes: List[ReadmeScope]) -> str:
    """带说明前言与每个 scope 三级标题的格式化文本"""
    bodies = [
        "\n".join([f"### Scope: `{scope.directory}`", "", scope.content.strip()])
        for scope in scopes
    ]
    return "\n".join([GUIDANCE_INTRO, "", *bodies])


async def handle_guidance(
    request: GuidanceRequest, log: Optional[logging.Logger] = None
) -> GuidanceResponse:
    log = log or logger

    root = resolve_repository_root(request.repository_root)
    log.debug(f"[Guidance] 仓库根目录: {root}")

    scopes = await discover_readme_scopes(root, log=log)
    log.debug(f"[Guidance] 发现 {len(scopes)} 个 AI_README scope")

    if not scopes:
        return GuidanceResponse(
            scopes=[],
            aggregated_guidance="",
            missing_paths=list(request.changed_paths),
        )

    relevant = extract_relevant_scopes(
        scopes,
        request.changed_paths,
        root,
        fallback_to_root=settings.FALLBACK_TO_ROOT_SCOPE,
        log=log,
    )

    summaries = [
        GuidanceScopeSummary(
            directory=scope.directory,
            absolute_path=scope.absolute_path,
            content_preview=create_content_preview(scope.content, settings.PREVIEW_MAX_CHARS),
        )
        for scope in relevant
    ]

    aggregated = build_raw_guidance(relevant) if request.raw else wrap_aggregated_guidance(relevant)

    return GuidanceResponse(
        scopes=summaries,
        aggregated_guidance=aggregated,
        missing_paths=find_missing_paths(scopes, request.changed_paths, root),
    )


async def handle_update(
    request: UpdateRequest, log: Optional[logging.Logger] = None
) -> UpdateResponse:
    log = log or logger

    target_dir = os.path.abspath(request.target_dir)
    file_path = os.path.join(target_dir, settings.README_FILENAME)
    headline = request.headline or settings.DEFAULT_HEADLINE

    # 空文件与不存在同等对待
    existing = await read_file_if_exists(file_path)
    if not existing and request.require_existing:
        raise ReadmeNotFoundError(target_dir, settings.README_FILENAME)

    source = existing if existing else f"# {headline}\n\n"
    next_content, updated = upsert_section(source, request.section, request.body)
    next_content = ensure_headline(next_content, headline)

    changelog_appended = False
    if request.change_summary:
        next_content, changelog_appended = append_changelog(
            next_content, request.change_summary, settings.CHANGELOG_TITLE
        )

    if not updated and not changelog_appended:
        return UpdateResponse(
            created=False,
            updated_sections=[],
            changelog_appended=False,
            file_path=file_path,
        )

    await ensure_directory(target_dir)
    await write_text_file(file_path, next_content)
    log.info(f"[Update] 已写入 AI_README: {file_path}")

    return UpdateResponse(
        created=not existing,
        updated_sections=[request.section] if updated else [],
        changelog_appended=changelog_appended,
        file_path=file_path,
    )
