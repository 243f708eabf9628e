from dataclasses import dataclass


@dataclass(frozen=True)
class ReadmeScope:
    """
    一个 AI_README.md 及其所管辖的目录。

    absolute_path 是唯一标识；content 是发现时读取的快照；
    depth 越小越靠近仓库根目录，优先级越高。
    """
    absolute_path: str
    directory: str
    content: str
    depth: int

    @property
    def sort_key(self) -> tuple:
        """确定性排序键：(depth 升序, directory 字典序)"""
        return (self.depth, self.directory)
