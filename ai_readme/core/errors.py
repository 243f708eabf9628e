class AiReadmeError(Exception):
    """AI_README 服务的基础异常"""


class RepositoryRootError(AiReadmeError):
    """仓库根目录无法解析（不存在或不是目录）"""

    def __init__(self, path: str, reason: str = "does not exist"):
        self.path = path
        super().__init__(f"Provided repository root {reason}: {path}")


class ReadmeNotFoundError(AiReadmeError):
    """要求已存在的 AI_README.md 缺失"""

    def __init__(self, target_dir: str, filename: str = "AI_README.md"):
        self.target_dir = target_dir
        super().__init__(f"{filename} does not exist at {target_dir}")
