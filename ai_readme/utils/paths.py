import os
from pathlib import Path


def to_posix(path: str) -> str:
    """统一使用正斜杠作为分隔符"""
    return path.replace("\\", "/")


def normalize_dir(root: str, absolute_dir: str) -> str:
    """
    将绝对目录转换为相对仓库根目录的标识符。

    - 与根目录相同时返回 "."
    - 反斜杠统一替换为正斜杠，保证跨平台一致

    例如 ("/repo", "/repo/apps/web") -> "apps/web"
    """
    relative = os.path.relpath(absolute_dir, root)
    if relative in ("", "."):
        return "."
    return to_posix(relative)


def dir_depth(absolute_dir: str) -> int:
    """从文件系统根到该目录的路径段数，越小越靠近仓库根"""
    return len(Path(absolute_dir).parts)


def resolve_changed_path(root: str, changed_path: str) -> str:
    """将变更路径（绝对或相对 root）解析为规范化的绝对路径（正斜杠）"""
    absolute = os.path.normpath(os.path.join(root, changed_path))
    return to_posix(absolute)


def as_dir_prefix(directory: str) -> str:
    """目录前缀匹配键：保证以单个 "/" 结尾，避免 apps/web 误匹配 apps/website"""
    return to_posix(directory).rstrip("/") + "/"


def is_under(directory: str, path: str) -> bool:
    """path 是否位于 directory 之下（或就是 directory 本身）"""
    return as_dir_prefix(path).startswith(as_dir_prefix(directory))
