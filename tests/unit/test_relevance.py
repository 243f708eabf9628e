from unittest.mock import MagicMock

from ai_readme.schemas.readme_scope import ReadmeScope
from ai_readme.services.relevance import extract_relevant_scopes, find_missing_paths

ROOT = "/repo"


def _scope(directory: str, content: str = "") -> ReadmeScope:
    absolute_dir = ROOT if directory == "." else f"{ROOT}/{directory}"
    return ReadmeScope(
        absolute_path=f"{absolute_dir}/AI_README.md",
        directory=directory,
        content=content or f"# {directory}",
        depth=len(absolute_dir.split("/")),
    )


def _scopes(*directories: str) -> list[ReadmeScope]:
    return sorted((_scope(d) for d in directories), key=lambda s: s.sort_key)


class TestExtractRelevantScopes:
    """测试变更路径到 scope 的相关性匹配"""

    def test_empty_changed_paths_returns_all(self):
        scopes = _scopes(".", "apps/web")
        assert extract_relevant_scopes(scopes, [], ROOT) == scopes

    def test_nested_file_matches_scope(self):
        scopes = _scopes("apps/web")
        result = extract_relevant_scopes(scopes, ["apps/web/src/index.ts"], ROOT)
        assert [s.directory for s in result] == ["apps/web"]

    def test_all_ancestor_scopes_returned_root_first(self):
        scopes = _scopes(".", "apps", "apps/web", "apps/api")
        result = extract_relevant_scopes(scopes, ["apps/web/src/deep/file.ts"], ROOT)
        assert [s.directory for s in result] == [".", "apps", "apps/web"]

    def test_scope_matching_several_paths_counted_once(self):
        scopes = _scopes("apps/web")
        result = extract_relevant_scopes(
            scopes, ["apps/web/a.ts", "apps/web/b.ts", "/repo/apps/web/c.ts"], ROOT
        )
        assert len(result) == 1

    def test_dedup_uses_absolute_path_not_identity(self):
        original = _scope("apps/web")
        copy = ReadmeScope(**{**original.__dict__})
        result = extract_relevant_scopes([original, copy], ["apps/web/x.ts"], ROOT)
        assert len(result) == 1

    def test_sibling_with_common_prefix_not_matched(self):
        scopes = _scopes(".", "apps/web")
        result = extract_relevant_scopes(scopes, ["apps/website/index.ts"], ROOT)
        assert [s.directory for s in result] == ["."]

    def test_absolute_changed_path(self):
        scopes = _scopes("lib")
        result = extract_relevant_scopes(scopes, ["/repo/lib/util.py"], ROOT)
        assert [s.directory for s in result] == ["lib"]

    def test_no_match_falls_back_to_highest_priority_scope(self):
        scopes = _scopes("apps/web", "packages/ui/core")
        log = MagicMock()
        result = extract_relevant_scopes(scopes, ["apps/api/server.ts"], ROOT, log=log)
        assert result == [scopes[0]]
        assert result[0].directory == "apps/web"
        log.warning.assert_called_once()

    def test_fallback_can_be_disabled(self):
        scopes = _scopes("apps/web")
        result = extract_relevant_scopes(
            scopes, ["apps/api/server.ts"], ROOT, fallback_to_root=False, log=MagicMock()
        )
        assert result == []

    def test_no_scopes_no_match(self):
        assert extract_relevant_scopes([], ["x.ts"], ROOT, log=MagicMock()) == []


class TestFindMissingPaths:

    def test_uncovered_path_reported(self):
        scopes = _scopes("apps/web")
        missing = find_missing_paths(scopes, ["apps/web/src/index.ts", "apps/api/server.ts"], ROOT)
        assert missing == ["apps/api/server.ts"]

    def test_root_scope_covers_everything(self):
        scopes = _scopes(".")
        assert find_missing_paths(scopes, ["a.ts", "deep/b/c.ts"], ROOT) == []

    def test_computed_against_full_list_independent_of_fallback(self):
        scopes = _scopes("apps/web", "lib")
        changed = ["tools/x.py", "lib/y.py"]
        relevant = extract_relevant_scopes(scopes, ["tools/x.py"], ROOT, log=MagicMock())
        assert [s.directory for s in relevant] == ["lib"]
        assert find_missing_paths(scopes, changed, ROOT) == ["tools/x.py"]

    def test_original_spelling_kept(self):
        scopes = _scopes("apps/web")
        assert find_missing_paths(scopes, ["./other/../x.ts"], ROOT) == ["./other/../x.ts"]
