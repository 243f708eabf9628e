import pytest

from ai_readme.config import settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """每个测试使用默认配置，避免宿主环境变量影响结果"""
    monkeypatch.setattr(settings, "README_FILENAME", "AI_README.md")
    monkeypatch.setattr(settings, "DEFAULT_HEADLINE", "AI README: Project Index & Conventions")
    monkeypatch.setattr(settings, "CHANGELOG_TITLE", "Changelog")
    monkeypatch.setattr(settings, "PREVIEW_MAX_CHARS", 240)
    monkeypatch.setattr(settings, "FALLBACK_TO_ROOT_SCOPE", True)
    monkeypatch.setattr(settings, "EXTRA_IGNORE_DIRS", [])
    monkeypatch.setattr(settings, "FOLLOW_SYMLINKS", True)
    monkeypatch.setattr(settings, "RESPECT_GITIGNORE", True)
    monkeypatch.setattr(settings, "REPOSITORY_ROOT", None)
    monkeypatch.setattr(settings, "MCP_AUTH_TOKEN", None)
    yield


@pytest.fixture
def make_repo(tmp_path):
    """
    创建临时仓库。

    用法: root = make_repo({".": "# Root", "apps/web": "# Web"})
    键为相对目录，值为该目录下 AI_README.md 的内容。
    """
    def _make(readmes: dict) -> str:
        for directory, content in readmes.items():
            target = tmp_path / directory
            target.mkdir(parents=True, exist_ok=True)
            (target / "AI_README.md").write_text(content, encoding="utf-8")
        return str(tmp_path)

    return _make
