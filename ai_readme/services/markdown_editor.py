"""
AI_README Markdown 编辑：按二级标题插入或替换 section，追加 Changelog，保证一级标题。

文档模型：可选的一级标题行（"# "），随后是若干二级 section（"## "），
每个 section 的正文延伸到下一个二级标题或文档末尾。更深层级的标题不建模。
目标 section 之外的内容逐字节保留。
"""
import re
from typing import List, NamedTuple, Optional, Tuple

SECTION_HEADING_RE = re.compile(r"^##\s+(.*)$", re.MULTILINE)

DEFAULT_CHANGELOG_TITLE = "Changelog"


class SectionHeading(NamedTuple):
    title: str
    start: int


def _normalize_body(body: str) -> str:
    """去掉尾部空白后补两个换行，保证与后续内容之间恰好一个空行"""
    return body.rstrip() + "\n\n"


def find_section_headings(content: str) -> List[SectionHeading]:
    """按出现顺序返回所有二级标题及其字符偏移"""
    return [
        SectionHeading(title=m.group(1).strip(), start=m.start())
        for m in SECTION_HEADING_RE.finditer(content)
    ]


def _find_section_span(content: str, section: str) -> Optional[Tuple[int, int]]:
    """目标 section 的 [start, end) 区间；标题比较大小写不敏感"""
    headings = find_section_headings(content)
    wanted = section.strip().lower()
    for i, heading in enumerate(headings):
        if heading.title.lower() == wanted:
            end = headings[i + 1].start if i + 1 < len(headings) else len(content)
            return heading.start, end
    return None


def upsert_section(content: str, section: str, body: str) -> Tuple[str, bool]:
    """
    插入或替换名为 section 的二级 section。

    - 空文档：生成以 section 为一级标题的新文档
    - 存在同名（大小写不敏感）section：原位替换，前后内容保持不变
    - 否则：追加到文档末尾，与已有内容之间空一行

    返回: (新文档, 是否更新)；只要被调用就一定更新
    """
    normalized_body = _normalize_body(body)

    if not content.strip():
        return f"# {section}\n\n{normalized_body}", True

    section_heading = f"## {section}\n\n"
    span = _find_section_span(content, section)

    if span is None:
        return content.rstrip() + "\n\n" + section_heading + normalized_body, True

    start, end = span
    before = content[:start]
    after = content[end:]
    return f"{before}{section_heading}{normalized_body}{after.lstrip()}", True


def extract_section(content: str, section: str) -> Optional[str]:
    """返回二级 section 的正文（不含标题行及紧随的一个空行），不存在时返回 None"""
    span = _find_section_span(content, section)
    if span is None:
        return None
    start, end = span
    block = content[start:end]
    newline = block.find("\n")
    if newline < 0:
        return ""
    rest = block[newline + 1:]
    # 标题行后的一个空行属于标题
    return rest[1:] if rest.startswith("\n") else rest


def append_changelog(
    content: str, change_summary: str, title: str = DEFAULT_CHANGELOG_TITLE
) -> Tuple[str, bool]:
    """
    以单条列表项 "- {summary}" 写入 Changelog section。

    摘要为空或只有空白时不做任何修改，返回 (原文档, False)。
    """
    trimmed = change_summary.strip()
    if not trimmed:
        return content, False

    next_content, _ = upsert_section(content, title, f"- {trimmed}")
    return next_content, True


def ensure_headline(content: str, headline: str) -> str:
    """文档不以一级标题开头时，补上 "# {headline}"，原内容下移"""
    trimmed = content.strip()
    if trimmed.startswith("# "):
        return content
    rest = f"{trimmed}\n" if trimmed else ""
    return f"# {headline}\n\n{rest}"


def create_content_preview(content: str, max_length: int = 240) -> str:
    """压缩空白为单个空格，超过 max_length 时截断并以省略号结尾"""
    if max_length < 1:
        raise ValueError(f"max_length must be positive, got {max_length}")
    compact = re.sub(r"\s+", " ", content).strip()
    if len(compact) <= max_length:
        return compact
    return f"{compact[:max_length - 1]}…"
