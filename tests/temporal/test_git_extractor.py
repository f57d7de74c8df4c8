"""Tests for git log extraction."""

import subprocess
import time

import pytest

from repo_historian.config import HistorianConfig
from repo_historian.exceptions import ErrorCode, TemporalError
from repo_historian.numeric import MS_PER_DAY
from repo_historian.temporal.git_extractor import (
    GitExtractor,
    build_commit_record,
    parse_shortstat,
)


class TestParseShortstat:
    """Test parse_shortstat."""

    def test_both_counts(self):
        out = " 3 files changed, 12 insertions(+), 4 deletions(-)\n"
        assert parse_shortstat(out) == (12, 4)

    def test_singular_forms(self):
        assert parse_shortstat(" 1 file changed, 1 insertion(+), 1 deletion(-)") == (1, 1)

    def test_insertions_only(self):
        assert parse_shortstat(" 1 file changed, 7 insertions(+)") == (7, 0)

    def test_deletions_only(self):
        assert parse_shortstat(" 2 files changed, 9 deletions(-)") == (0, 9)

    def test_empty(self):
        assert parse_shortstat("") == (0, 0)


class TestBuildCommitRecord:
    """Test build_commit_record."""

    def test_fields(self, now_ms):
        record = build_commit_record(
            "0123456789abcdef",
            "Alice",
            "alice@example.com",
            "2026-03-01T12:00:00+00:00",
            "  Fix login\n\nDetails here\n",
            files_changed=["a.py"],
            insertions=3,
            deletions=1,
        )

        assert record.short_hash == "0123456"
        assert record.message == "Fix login\n\nDetails here"
        assert record.message_first_line == "Fix login"
        assert record.timestamp == now_ms
        assert record.files_changed == ("a.py",)
        assert record.is_fix is True
        assert record.is_merge is False

    def test_unparseable_date_gives_zero_timestamp(self):
        record = build_commit_record("abc", "A", "a@x", "not a date", "msg")
        assert record.timestamp == 0


class TestGitExtractor:
    """Test GitExtractor against real repositories."""

    def test_is_available(self, git_repo, tmp_path):
        assert GitExtractor(git_repo.root).is_available()
        plain = tmp_path / "plain"
        plain.mkdir()
        assert not GitExtractor(plain).is_available()

    def test_extracts_commits_newest_first(self, git_repo, now_ms):
        git_repo.commit({"README.md": "init\n"}, message="init", days_ago=10)
        git_repo.commit({"src/a.py": "a\nb\n"}, message="Add a", author="Bob", days_ago=5)
        head = git_repo.commit({"src/a.py": "a\n"}, message="fix bug in a\n\nbody text", days_ago=1)

        commits = GitExtractor(git_repo.root).extract()

        assert [c.message_first_line for c in commits] == ["fix bug in a", "Add a", "init"]
        newest = commits[0]
        assert newest.hash == head
        assert newest.message == "fix bug in a\n\nbody text"
        assert newest.is_fix
        assert newest.files_changed == ("src/a.py",)
        assert (newest.insertions, newest.deletions) == (0, 1)
        assert newest.timestamp == now_ms - MS_PER_DAY

        bob = commits[1]
        assert bob.author == "Bob"
        assert bob.email == "bob@example.com"
        assert (bob.insertions, bob.deletions) == (2, 0)

    def test_root_commit_has_no_files(self, git_repo):
        git_repo.commit({"README.md": "init\n"}, message="init")
        (root,) = GitExtractor(git_repo.root).extract()

        assert root.files_changed == ()
        assert (root.insertions, root.deletions) == (0, 0)

    def test_excluded_dirs_are_dropped(self, git_repo):
        git_repo.commit({"README.md": "init\n"}, days_ago=2)
        git_repo.commit(
            {"src/app.js": "x\n", "node_modules/lib/index.js": "y\n", "vendor/v.go": "z\n"},
            days_ago=1,
        )
        commits = GitExtractor(git_repo.root).extract()
        assert commits[0].files_changed == ("src/app.js",)

    def test_max_commits(self, git_repo):
        for i in range(4):
            git_repo.commit({"f.txt": f"{i}\n"}, message=f"c{i}", days_ago=4 - i)
        commits = GitExtractor(git_repo.root, HistorianConfig(max_commits=2)).extract()

        assert [c.message for c in commits] == ["c3", "c2"]

    def test_log_failure_raises(self, git_repo):
        # A fresh repository has no HEAD to log
        with pytest.raises(TemporalError) as exc_info:
            GitExtractor(git_repo.root).extract()
        assert exc_info.value.code == ErrorCode.HS401


class TestGitExtractorFailures:
    """Test error mapping without touching git."""

    def test_git_missing(self, monkeypatch, tmp_path):
        def fake_run(*args, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(TemporalError) as exc_info:
            GitExtractor(tmp_path).extract()

        assert exc_info.value.code == ErrorCode.HS400
        assert exc_info.value.recoverable is False

    def test_timeout(self, monkeypatch, tmp_path):
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs.get("timeout"))

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(TemporalError) as exc_info:
            GitExtractor(tmp_path, HistorianConfig(timeout_seconds=1)).extract()

        assert exc_info.value.code == ErrorCode.HS402

    def test_failed_diff_is_skipped(self, monkeypatch, tmp_path):
        log = "\x1e" + "\x1f".join(["a" * 40, "Ann", "ann@x", "2026-03-01T12:00:00+00:00", "msg\n"])

        def fake_run(cmd, **kwargs):
            if "log" in cmd:
                return subprocess.CompletedProcess(cmd, 0, stdout=log, stderr="")
            return subprocess.CompletedProcess(cmd, 128, stdout="", stderr="bad revision")

        monkeypatch.setattr(subprocess, "run", fake_run)
        (commit,) = GitExtractor(tmp_path).extract()

        assert commit.author == "Ann"
        assert commit.files_changed == ()

    def test_unrunnable_git(self, monkeypatch, tmp_path):
        def fake_run(*args, **kwargs):
            raise PermissionError("git: permission denied")

        monkeypatch.setattr(subprocess, "run", fake_run)
        with pytest.raises(TemporalError) as exc_info:
            GitExtractor(tmp_path).extract()

        assert exc_info.value.code == ErrorCode.HS400
        assert exc_info.value.recoverable is False
        assert "permission denied" in exc_info.value.message

    def test_slow_diffs_stay_within_timeout(self, monkeypatch, tmp_path):
        """Diff lookups share the extraction deadline instead of each getting the full timeout."""
        log = "".join(
            "\x1e" + "\x1f".join([f"{i:040x}", "Ann", "ann@x", "2026-03-01T12:00:00+00:00", "msg\n"])
            for i in range(16)
        )

        def fake_run(cmd, **kwargs):
            if "log" in cmd:
                return subprocess.CompletedProcess(cmd, 0, stdout=log, stderr="")
            time.sleep(kwargs["timeout"] * 0.9)
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        extractor = GitExtractor(tmp_path, HistorianConfig(timeout_seconds=1, git_workers=8))

        start = time.monotonic()
        try:
            extractor.extract()
        except TemporalError as e:
            assert e.code == ErrorCode.HS402
        elapsed = time.monotonic() - start

        assert elapsed < 1.5

    def test_no_lookups_after_deadline(self, monkeypatch, tmp_path):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        extractor = GitExtractor(tmp_path)
        files, insertions, deletions = extractor._diff_stats("a" * 40, time.monotonic() - 1)

        assert (files, insertions, deletions) == ([], 0, 0)
        assert calls == []
