"""Extract commit records from git via subprocess."""

from __future__ import annotations

import concurrent.futures
import re
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Iterable, Optional

from ..config import DEFAULT_CONFIG, HistorianConfig
from ..exceptions import ErrorCode, TemporalError
from ..logging_config import get_logger
from ..numeric import parse_iso_ms
from .classify import classify_message
from .models import CommitRecord

logger = get_logger(__name__)

# Record / field separators: cannot appear in names, dates or hashes
_RS = "\x1e"
_FS = "\x1f"
_LOG_FORMAT = "--format=%x1e%H%x1f%an%x1f%ae%x1f%aI%x1f%B"

_INSERTIONS_RE = re.compile(r"(\d+) insertions?\(\+\)")
_DELETIONS_RE = re.compile(r"(\d+) deletions?\(-\)")


def build_commit_record(
    commit_hash: str,
    author: str,
    email: str,
    date: str,
    message: str,
    files_changed: Iterable[str] = (),
    insertions: int = 0,
    deletions: int = 0,
) -> CommitRecord:
    """Build a CommitRecord from raw log fields, classifying the message.

    An unparseable date leaves the timestamp at 0 instead of failing.
    """
    message = message.strip()
    return CommitRecord(
        hash=commit_hash,
        short_hash=commit_hash[:7],
        author=author,
        email=email,
        date=date,
        timestamp=parse_iso_ms(date),
        message=message,
        message_first_line=message.split("\n")[0],
        files_changed=tuple(files_changed),
        insertions=insertions,
        deletions=deletions,
        **classify_message(message),
    )


def parse_shortstat(output: str) -> tuple[int, int]:
    """(insertions, deletions) from `git diff --shortstat` output."""
    insertions = _INSERTIONS_RE.search(output)
    deletions = _DELETIONS_RE.search(output)
    return (
        int(insertions.group(1)) if insertions else 0,
        int(deletions.group(1)) if deletions else 0,
    )


class GitExtractor:
    """Read the newest commits of a repository into CommitRecords.

    One `git log` call lists the commits; each commit then gets a name-only
    and a shortstat diff against its first parent. The diff lookups run on a
    bounded thread pool and come back in log order.
    """

    def __init__(self, repo_path: str | Path, config: Optional[HistorianConfig] = None):
        self.repo_path = str(Path(repo_path).resolve())
        self.config = config or DEFAULT_CONFIG
        self._excluded = frozenset(self.config.excluded_dirs)

    def is_available(self) -> bool:
        """True when the repository has a .git directory (or worktree file)."""
        return (Path(self.repo_path) / ".git").exists()

    def extract(self) -> list[CommitRecord]:
        """Return commits newest first.

        Raises:
            TemporalError: git is missing, the log cannot be read, or the
                whole extraction exceeds ``config.timeout_seconds``.
        """
        deadline = time.monotonic() + self.config.timeout_seconds

        raw = self._run_git(
            ["log", f"-n{self.config.max_commits}", _LOG_FORMAT],
            timeout=self.config.timeout_seconds,
            code=ErrorCode.HS401,
        )
        entries = self._parse_log(raw)
        logger.info("Found %d commits in %s", len(entries), self.repo_path)
        if not entries:
            return []

        diffs = self._collect_diffs(entries, deadline)

        return [
            build_commit_record(*entry, files_changed=files, insertions=ins, deletions=dels)
            for entry, (files, ins, dels) in zip(entries, diffs)
        ]

    def _parse_log(self, raw: str) -> list[tuple[str, str, str, str, str]]:
        entries = []
        for block in raw.split(_RS):
            if not block.strip():
                continue
            parts = block.split(_FS, 4)
            if len(parts) != 5:
                logger.debug("Skipping malformed log record: %r", block[:80])
                continue
            hash_, author, email, date, message = parts
            entries.append((hash_.strip(), author, email, date.strip(), message))
        return entries

    def _collect_diffs(
        self, entries: list[tuple[str, str, str, str, str]], deadline: float
    ) -> list[tuple[list[str], int, int]]:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise self._timeout_error()

        hashes = [entry[0] for entry in entries]
        workers = min(self.config.git_workers, len(hashes))
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            diffs = list(
                executor.map(partial(self._diff_stats, deadline=deadline), hashes, timeout=remaining)
            )
        except concurrent.futures.TimeoutError:
            # Running lookups end by the deadline on their own; don't wait for them
            executor.shutdown(wait=False, cancel_futures=True)
            raise self._timeout_error()
        executor.shutdown()
        return diffs

    def _diff_stats(self, commit_hash: str, deadline: float) -> tuple[list[str], int, int]:
        """Changed files and line totals against the first parent.

        The root commit has no parent; it (and any other failing lookup)
        contributes no files and no line counts. Each git call gets only
        the time left until ``deadline``, and nothing runs once it has passed.
        """
        rev_range = [f"{commit_hash}^", commit_hash]
        try:
            names = self._run_git(
                ["diff", *rev_range, "--name-only"],
                timeout=self._time_left(deadline),
                code=ErrorCode.HS403,
            )
            stats = self._run_git(
                ["diff", *rev_range, "--shortstat"],
                timeout=self._time_left(deadline),
                code=ErrorCode.HS403,
            )
        except TemporalError as e:
            logger.debug("No diff for %s: %s", commit_hash[:7], e)
            return [], 0, 0

        files = [line.strip() for line in names.splitlines() if line.strip()]
        files = [f for f in files if not self._is_excluded(f)]
        insertions, deletions = parse_shortstat(stats)
        return files, insertions, deletions

    def _is_excluded(self, path: str) -> bool:
        return any(part in self._excluded for part in path.split("/"))

    def _run_git(self, args: list[str], timeout: float, code: ErrorCode) -> str:
        cmd = ["git", "-c", "core.quotepath=off", "-C", self.repo_path, *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except FileNotFoundError:
            raise TemporalError(
                "git executable not found",
                ErrorCode.HS400,
                recoverable=False,
                recovery_hint="Install git and make sure it is on PATH",
            )
        except OSError as e:
            raise TemporalError(
                f"git could not be run: {e}",
                ErrorCode.HS400,
                context={"repo_path": self.repo_path},
                recoverable=False,
                recovery_hint="Check that the git on PATH is executable",
            )
        except subprocess.TimeoutExpired:
            raise TemporalError(
                f"git {args[0]} timed out after {timeout:.0f}s",
                ErrorCode.HS402,
                context={"repo_path": self.repo_path},
            )

        if result.returncode != 0:
            raise TemporalError(
                f"git {args[0]} failed: {result.stderr.strip()}",
                code,
                context={"repo_path": self.repo_path, "args": " ".join(args)},
            )
        return result.stdout

    def _time_left(self, deadline: float) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise TemporalError(
                "extraction deadline passed",
                ErrorCode.HS402,
                context={"repo_path": self.repo_path},
            )
        return max(0.1, remaining)

    def _timeout_error(self) -> TemporalError:
        return TemporalError(
            f"history extraction exceeded {self.config.timeout_seconds}s",
            ErrorCode.HS402,
            context={"repo_path": self.repo_path},
            recovery_hint="Raise timeout_seconds or lower max_commits",
        )
