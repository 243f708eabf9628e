from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # AI_README 文件约定
    README_FILENAME: str = "AI_README.md"
    DEFAULT_HEADLINE: str = "AI README: Project Index & Conventions"
    CHANGELOG_TITLE: str = "Changelog"

    # 预览摘要最大长度（字符数）
    PREVIEW_MAX_CHARS: int = Field(240, ge=1)

    # 变更路径未命中任何 scope 时，是否回退到最高优先级（最浅）的 scope
    FALLBACK_TO_ROOT_SCOPE: bool = True

    # 扫描
    EXTRA_IGNORE_DIRS: List[str] = []
    FOLLOW_SYMLINKS: bool = True
    # 剔除被仓库 .gitignore 忽略的 AI_README（需要 git 可执行文件）
    RESPECT_GITIGNORE: bool = True

    # 请求未指定 repository_root 时使用的默认根目录（为空则使用进程工作目录）
    REPOSITORY_ROOT: Optional[str] = None

    # MCP
    MCP_AUTH_TOKEN: Optional[str] = None

    # 应用
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_prefix": "AI_README_MCP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
