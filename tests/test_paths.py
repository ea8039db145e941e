"""路径辅助函数测试 — paths.py."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

from diary.paths import (
    bucket_stamp,
    config_candidates,
    diary_dir,
    document_filename,
    find_project_root,
    recovery_dir,
    resolve_project_dir,
)


class TestResolveProjectDir:
    def test_none_returns_cwd(self):
        assert resolve_project_dir(None) == Path.cwd()

    def test_path_passthrough(self, tmp_path):
        assert resolve_project_dir(tmp_path) == tmp_path

    def test_string_converted_to_path(self):
        result = resolve_project_dir("/tmp/test")
        assert isinstance(result, Path)
        assert str(result) == "/tmp/test"


class TestFindProjectRoot:
    def test_finds_ancestor_with_state_dir(self, tmp_path):
        (tmp_path / ".claude").mkdir()
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == tmp_path

    def test_falls_back_to_start(self, tmp_path):
        nested = tmp_path / "no-state"
        nested.mkdir()
        # tmp_path 的祖先里也可能有 .claude；只断言返回值是 nested 或其祖先
        root = find_project_root(nested)
        assert nested == root or root in nested.parents

    def test_start_itself_counts(self, tmp_path):
        (tmp_path / ".claude").mkdir()
        assert find_project_root(tmp_path) == tmp_path


class TestOutputLocations:
    def test_dirs(self, tmp_path):
        assert diary_dir(tmp_path) == tmp_path / ".claude" / "diary"
        assert recovery_dir(tmp_path) == tmp_path / ".claude" / "diary" / "recovery"

    def test_config_candidates_order(self, tmp_path):
        assert [p.name for p in config_candidates(tmp_path)] == [".config.yaml", ".config.json"]


class TestFilenames:
    def test_bucket_stamp_minute_granularity(self):
        now = datetime(2026, 10, 16, 9, 5, 59, tzinfo=timezone.utc)
        assert bucket_stamp(now) == "2026-10-16-09-05"

    def test_bucket_stamp_converts_to_utc(self):
        now = datetime(2026, 10, 16, 17, 5, tzinfo=timezone(timedelta(hours=8)))
        assert bucket_stamp(now) == "2026-10-16-09-05"

    def test_same_minute_same_file(self):
        a = datetime(2026, 10, 16, 9, 5, 1, tzinfo=timezone.utc)
        b = datetime(2026, 10, 16, 9, 5, 58, tzinfo=timezone.utc)
        assert document_filename(a, "s1") == document_filename(b, "s1") == "2026-10-16-09-05-s1.md"
        assert document_filename(a, "s1") != document_filename(a, "s2")

    def test_session_id_separators_replaced(self):
        now = datetime(2026, 10, 16, 9, 5, tzinfo=timezone.utc)
        assert document_filename(now, "../evil") == "2026-10-16-09-05-..-evil.md"
