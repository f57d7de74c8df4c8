"""End-to-end tests for history analysis."""

import json
import subprocess

from repo_historian.config import HistorianConfig
from repo_historian.exceptions import ErrorCode, TemporalError
from repo_historian.temporal import analyzer
from repo_historian.temporal.analyzer import analyze_history, build_history, format_timestamp
from repo_historian.temporal.git_extractor import GitExtractor
from repo_historian.temporal.models import OwnershipClarity, PatternType


class TestFormatTimestamp:
    """Test format_timestamp."""

    def test_millisecond_z_format(self, now):
        assert format_timestamp(now) == "2026-03-01T12:00:00.000Z"

    def test_naive_is_utc(self, now):
        assert format_timestamp(now.replace(tzinfo=None)) == "2026-03-01T12:00:00.000Z"


class TestBuildHistory:
    """Scenarios over in-memory commits."""

    def test_three_way_file_is_disputed_but_not_fragile(self, make_commit, now):
        path = "src/shared.py"
        commits = [
            make_commit(days_ago=40, author="X", files=(path,), message="fix parser"),
            make_commit(days_ago=50, author="Y", files=(path,), message="tidy"),
            make_commit(days_ago=60, author="X", files=(path,), message="fix typo"),
            make_commit(days_ago=70, author="Y", files=(path,), message="tidy"),
            make_commit(days_ago=80, author="Z", files=(path,), message="tidy"),
        ]
        history = build_history(commits, "/repo", now)

        assert history.file_churn[path].author_count == 3
        ownership = history.file_ownership[path]
        assert ownership.ownership_clarity == OwnershipClarity.DISPUTED
        assert ownership.primary_author_percent == 40
        assert history.fragile_for(path) is None

    def test_long_untouched_file_is_stable_core(self, make_commit, now):
        commits = [
            make_commit(days_ago=1, files=("src/app.py",)),
            make_commit(days_ago=200, author="bob", files=("lib/core.py",)),
            make_commit(days_ago=210, author="bob", files=("lib/core.py",)),
        ]
        history = build_history(commits, "/repo", now)

        assert history.file_churn["lib/core.py"].churn_score <= 15
        assert "lib/core.py" in history.stable_core

    def test_two_weeks_of_steady_commits_is_active(self, make_commit, now):
        commits = [make_commit(days_ago=i * 14 / 19) for i in range(20)]
        history = build_history(commits, "/repo", now)
        assert history.commit_pattern.type == PatternType.ACTIVE

    def test_summary_fields(self, make_commit, now):
        commits = [
            make_commit(days_ago=1, author="alice"),
            make_commit(days_ago=2, author="bob"),
            make_commit(days_ago=3, author="carol", files=("src/app.py", "b.py")),
        ]
        history = build_history(commits, "/repo", now)

        assert history.analyzed_at == "2026-03-01T12:00:00.000Z"
        assert history.history_version == "1.0"
        assert history.total_commits == 3
        assert history.total_authors == 3
        assert history.first_commit is commits[-1]
        assert history.last_commit is commits[0]
        assert history.date_range.start == commits[-1].date
        assert history.date_range.end == commits[0].date
        assert history.multi_author_files == ["src/app.py"]
        assert history.high_churn_files[0] == "src/app.py"
        assert history.author_stats["carol"].files_owned == ["b.py"]

    def test_recent_commits_are_limited(self, make_commit, now):
        commits = [make_commit(days_ago=i) for i in range(8)]
        history = build_history(commits, "/repo", now, recent_commits_limit=3)
        assert history.recent_commits == commits[:3]

    def test_recently_fragile(self, make_commit, now):
        commits = [
            make_commit(days_ago=i, author=f"dev{i}", files=("hot.py",), message="fix")
            for i in range(6)
        ]
        history = build_history(commits, "/repo", now)

        fragile = history.fragile_for("hot.py")
        assert fragile is not None
        assert fragile.fragile_score > 5
        assert history.recently_fragile == ["hot.py"]

    def test_stable_core_and_fragile_are_disjoint(self, make_commit, now):
        commits = []
        for i in range(60):
            files = (f"m{i % 7}.py", f"m{(i * 3) % 11}.py")
            commits.append(
                make_commit(
                    days_ago=i * 4.5,
                    author=f"dev{i % 5}",
                    files=files,
                    message="fix" if i % 4 == 0 else "work",
                    insertions=(i * 37) % 400,
                )
            )
        history = build_history(commits, "/repo", now)

        fragile = {f.path for f in history.fragile_files}
        assert not fragile & set(history.stable_core)

    def test_to_dict_is_json_ready(self, make_commit, now):
        commits = [make_commit(days_ago=1, message="Refactor core")]
        data = build_history(commits, "/repo", now).to_dict()

        json.dumps(data)
        assert data["historyVersion"] == "1.0"
        assert data["totalCommits"] == 1
        assert data["commitPattern"]["type"] == "active"
        assert data["fileChurn"]["src/app.py"]["churnScore"] >= 0
        assert data["fileOwnership"]["src/app.py"]["ownershipClarity"] == "clear"
        assert data["timeline"][0]["type"] == "major-refactor"
        assert data["lastCommit"]["filesChanged"] == ["src/app.py"]


class TestAnalyzeHistory:
    """Test analyze_history against real and fake repositories."""

    def test_not_a_repository(self, tmp_path):
        assert analyze_history(tmp_path) is None

    def test_repository_without_commits(self, git_repo):
        assert analyze_history(git_repo.root) is None

    def test_extraction_failure_is_unavailable(self, tmp_path, monkeypatch):
        (tmp_path / ".git").mkdir()

        def fail(self):
            raise TemporalError("boom", ErrorCode.HS401)

        monkeypatch.setattr(GitExtractor, "extract", fail)
        assert analyze_history(tmp_path) is None

    def test_unrunnable_git_is_unavailable(self, tmp_path, monkeypatch):
        (tmp_path / ".git").mkdir()

        def denied(*args, **kwargs):
            raise PermissionError("git: permission denied")

        monkeypatch.setattr(subprocess, "run", denied)
        assert analyze_history(tmp_path) is None

    def test_no_commits_is_unavailable(self, tmp_path, monkeypatch):
        (tmp_path / ".git").mkdir()
        monkeypatch.setattr(GitExtractor, "extract", lambda self: [])
        assert analyze_history(tmp_path) is None

    def test_real_repository(self, git_repo, now):
        git_repo.commit({"README.md": "hello\n"}, message="init", days_ago=30)
        git_repo.commit({"src/app.py": "x = 1\n"}, message="Add app", author="Bob", days_ago=10)
        git_repo.commit({"src/app.py": "x = 2\n"}, message="fix app", days_ago=2)

        history = analyze_history(git_repo.root, now=now)

        assert history is not None
        assert history.repo_path == str(git_repo.root.resolve())
        assert history.total_commits == 3
        assert history.total_authors == 2
        assert set(history.file_churn) == {"src/app.py"}
        churn = history.file_churn["src/app.py"]
        assert churn.authors == ["Alice", "Bob"]
        assert churn.days_since_last_change == 2
        assert history.file_ownership["src/app.py"].ownership_clarity == OwnershipClarity.SHARED

    def test_config_is_applied(self, git_repo, now):
        for i in range(5):
            git_repo.commit({"f.txt": f"{i}\n"}, message=f"c{i}", days_ago=5 - i)

        history = analyze_history(git_repo.root, HistorianConfig(max_commits=3), now=now)
        assert history.total_commits == 3

    def test_progress_is_logged(self, git_repo, now, caplog):
        git_repo.commit({"a.txt": "a\n"}, days_ago=1)
        with caplog.at_level("INFO", logger=analyzer.logger.name):
            analyze_history(git_repo.root, now=now)
        assert "History analysis complete: 1 commits" in caplog.text
