"""
AI_README scope 发现：遍历仓库，读取所有 AI_README.md，生成按优先级排序的 ReadmeScope 列表。
"""
import asyncio
import logging
import os
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional

from ai_readme.config import settings
from ai_readme.core.errors import RepositoryRootError
from ai_readme.schemas.readme_scope import ReadmeScope
from ai_readme.utils.paths import dir_depth, normalize_dir

logger = logging.getLogger(__name__)

# 需要跳过的目录：版本控制、依赖、构建产物
SKIP_DIRS = frozenset({
    ".git", ".hg", ".svn",
    "node_modules", ".venv", "venv", "__pycache__",
    "dist", "build", ".next", ".turbo",
})


def resolve_repository_root(requested_root: Optional[str] = None) -> str:
    """
    解析仓库根目录。

    显式指定时必须是已存在的目录，否则抛出 RepositoryRootError；
    未指定时依次使用 settings.REPOSITORY_ROOT、进程工作目录。
    """
    if requested_root:
        absolute = os.path.abspath(requested_root)
        if not os.path.exists(absolute):
            raise RepositoryRootError(absolute, "does not exist")
        if not os.path.isdir(absolute):
            raise RepositoryRootError(absolute, "is not a directory")
        return absolute

    if settings.REPOSITORY_ROOT:
        return resolve_repository_root(settings.REPOSITORY_ROOT)

    return os.getcwd()


def list_readme_files(
    root: str,
    filename: Optional[str] = None,
    ignore_dirs: Optional[Iterable[str]] = None,
    follow_symlinks: Optional[bool] = None,
    respect_gitignore: Optional[bool] = None,
) -> List[str]:
    """
    列出 root 下所有名为 filename 的文件绝对路径（未排序）。

    跳过 SKIP_DIRS 与 settings.EXTRA_IGNORE_DIRS 中的目录；
    跟随符号链接时按真实路径去重，避免目录环导致无限遍历；
    respect_gitignore 为真时再剔除被仓库 .gitignore 忽略的文件。
    """
    filename = filename or settings.README_FILENAME
    skip = set(SKIP_DIRS) | set(settings.EXTRA_IGNORE_DIRS)
    if ignore_dirs is not None:
        skip |= set(ignore_dirs)
    if follow_symlinks is None:
        follow_symlinks = settings.FOLLOW_SYMLINKS
    if respect_gitignore is None:
        respect_gitignore = settings.RESPECT_GITIGNORE

    found: List[str] = []
    visited: set[str] = set()

    for dirpath, dirnames, filenames in os.walk(root, followlinks=follow_symlinks):
        real = os.path.realpath(dirpath)
        if real in visited:
            dirnames[:] = []
            continue
        visited.add(real)

        dirnames[:] = [d for d in dirnames if d not in skip]

        if filename in filenames:
            found.append(os.path.join(dirpath, filename))

    if respect_gitignore:
        found = filter_git_ignored(root, found)
    return found


def filter_git_ignored(root: str, paths: List[str]) -> List[str]:
    """
    剔除被 git 忽略的路径。

    通过一次 `git check-ignore --stdin -z` 批量判断，遵循仓库内所有层级的 .gitignore、
    .git/info/exclude 与全局 excludesFile。root 不在 git 仓库中或未安装 git 时原样返回。
    经符号链接指向仓库外的路径不参与判断，直接保留。
    """
    if not paths:
        return paths

    real_root = os.path.realpath(root)
    relative: dict[str, str] = {}
    for path in paths:
        rel = os.path.relpath(os.path.realpath(path), real_root)
        if rel != os.pardir and not rel.startswith(os.pardir + os.sep):
            relative[path] = Path(rel).as_posix()
    if not relative:
        return paths

    try:
        result = subprocess.run(
            ["git", "check-ignore", "--stdin", "-z"],
            cwd=real_root,
            input="\0".join(relative.values()) + "\0",
            capture_output=True,
            text=True,
            timeout=60,
        )
    except FileNotFoundError:
        logger.debug("[Discovery] 未找到 git 可执行文件，跳过 .gitignore 过滤")
        return paths

    # 0: 至少一个路径被忽略；1: 均未被忽略；128: 非 git 仓库等错误
    if result.returncode == 1:
        return paths
    if result.returncode != 0:
        logger.debug(f"[Discovery] git check-ignore 不可用，跳过 .gitignore 过滤: {result.stderr.strip()}")
        return paths

    ignored = set(filter(None, result.stdout.split("\0")))
    return [p for p in paths if relative.get(p) not in ignored]


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


async def _read_scope(
    root: str, absolute_path: str, log: logging.Logger
) -> Optional[ReadmeScope]:
    """读取单个 AI_README；I/O 或解码失败时记录警告并返回 None"""
    try:
        content = await asyncio.to_thread(_read_text, absolute_path)
    except (OSError, UnicodeDecodeError) as e:
        log.warning(f"[Discovery] 读取 AI_README 失败，已跳过: {absolute_path}: {e}")
        return None

    directory = os.path.dirname(absolute_path)
    return ReadmeScope(
        absolute_path=absolute_path,
        directory=normalize_dir(root, directory),
        content=content,
        depth=dir_depth(directory),
    )


async def discover_readme_scopes(
    root: str, log: Optional[logging.Logger] = None
) -> List[ReadmeScope]:
    """
    发现 root 下所有 AI_README scope。

    算法步骤：
    1. 遍历目录树收集候选文件（跳过忽略目录）
    2. 候选路径按字典序排序，保证读取顺序确定
    3. 并发读取内容，单个文件失败只记录警告
    4. 按 (depth 升序, directory 字典序) 排序后返回

    仅当 root 本身不存在或不是目录时抛出 RepositoryRootError。
    """
    log = log or logger

    root = os.path.abspath(root)
    if not os.path.isdir(root):
        raise RepositoryRootError(root, "is not a directory" if os.path.exists(root) else "does not exist")

    candidates = sorted(await asyncio.to_thread(list_readme_files, root))
    log.debug(f"[Discovery] 在 {root} 下找到 {len(candidates)} 个候选文件")

    results = await asyncio.gather(*(_read_scope(root, path, log) for path in candidates))

    # absolute_path 唯一
    unique: dict[str, ReadmeScope] = {}
    for scope in results:
        if scope is not None and scope.absolute_path not in unique:
            unique[scope.absolute_path] = scope

    return sorted(unique.values(), key=lambda s: s.sort_key)


async def read_file_if_exists(file_path: str) -> Optional[str]:
    """读取文件内容；文件不存在返回 None，其他错误照常抛出"""
    try:
        return await asyncio.to_thread(_read_text, file_path)
    except FileNotFoundError:
        return None


async def ensure_directory(directory: str) -> None:
    await asyncio.to_thread(Path(directory).mkdir, parents=True, exist_ok=True)


def _write_text(file_path: str, content: str) -> None:
    with open(file_path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


async def write_text_file(file_path: str, content: str) -> None:
    """整文件写入（UTF-8），不做临时文件重命名"""
    await asyncio.to_thread(_write_text, file_path, content)
