"""Shared fixtures: in-memory commits on a fixed clock, and real git repos."""

import itertools
import os
import shutil
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from repo_historian.cache import RepoCache
from repo_historian.numeric import to_epoch_ms
from repo_historian.temporal.analyzer import build_history
from repo_historian.temporal.git_extractor import build_commit_record

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
NOW_MS = to_epoch_ms(NOW)


def iso_days_ago(days: float) -> str:
    return (NOW - timedelta(days=days)).isoformat(timespec="seconds")


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def now_ms():
    return NOW_MS


@pytest.fixture
def make_commit():
    """Factory for CommitRecords dated relative to NOW.

    Build lists newest first, matching git log order.
    """
    counter = itertools.count(1)

    def _make(
        days_ago: float = 0,
        author: str = "alice",
        files=("src/app.py",),
        message: str = "update",
        insertions: int = 10,
        deletions: int = 0,
        email: str = "",
    ):
        return build_commit_record(
            f"{next(counter):040x}",
            author,
            email or f"{author}@example.com",
            iso_days_ago(days_ago),
            message,
            files_changed=files,
            insertions=insertions,
            deletions=deletions,
        )

    return _make


class GitRepo:
    """A throwaway repository whose commits carry controlled dates and authors."""

    def __init__(self, root: Path):
        self.root = root
        self._git("init", "-q")

    def _git(self, *args: str, env=None) -> str:
        result = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", "-C", str(self.root), *args],
            capture_output=True,
            text=True,
            env=env,
            check=True,
        )
        return result.stdout

    def commit(
        self,
        files: dict,
        message: str = "update",
        author: str = "Alice",
        email: str = "",
        days_ago: float = 0,
    ) -> str:
        """Write ``files`` (path -> content), commit them, return the hash."""
        for rel, content in files.items():
            path = self.root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

        date = iso_days_ago(days_ago)
        email = email or f"{author.lower()}@example.com"
        env = dict(
            os.environ,
            GIT_AUTHOR_NAME=author,
            GIT_AUTHOR_EMAIL=email,
            GIT_AUTHOR_DATE=date,
            GIT_COMMITTER_NAME=author,
            GIT_COMMITTER_EMAIL=email,
            GIT_COMMITTER_DATE=date,
        )
        self._git("add", "-A", env=env)
        self._git("commit", "-q", "-m", message, env=env)
        return self._git("rev-parse", "HEAD").strip()


@pytest.fixture
def git_repo(tmp_path):
    """An empty git repository; skipped when git is not installed."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    root = tmp_path / "repo"
    root.mkdir()
    return GitRepo(root)


SAMPLE_REPO = "/work/sample"


@pytest.fixture
def sample_commits(make_commit):
    """A small history: one hot, disputed file and a quiet stable core.

    src/app.py: 5 recent commits by 4 authors, 3 of them fixes
    lib/core.py: 2 old commits by one author
    """
    return [
        make_commit(days_ago=1, author="alice", files=("src/app.py", "src/util.py"), message="fix crash"),
        make_commit(days_ago=2, author="bob", message="fix race"),
        make_commit(days_ago=3, author="carol", message="bug in parser"),
        make_commit(days_ago=4, author="dave", message="Refactor app"),
        make_commit(days_ago=5, author="alice", message="Add feature"),
        make_commit(days_ago=100, author="erin", files=("lib/core.py",), message="init core"),
        make_commit(
            days_ago=120, author="erin", files=("lib/core.py", "README.md"), message="initial import"
        ),
    ]


@pytest.fixture
def sample_history(sample_commits, now):
    return build_history(sample_commits, SAMPLE_REPO, now)


@pytest.fixture
def loaded_cache(sample_history):
    """A RepoCache whose last analyzed repository is the sample history."""
    cache = RepoCache()
    cache.set(SAMPLE_REPO, sample_history)
    return cache
