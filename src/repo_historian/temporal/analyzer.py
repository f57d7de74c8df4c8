"""History analysis: extract commits, then derive every aggregate."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from ..config import DEFAULT_CONFIG, DEFAULT_THRESHOLDS, HistorianConfig, HistoryThresholds
from ..exceptions import TemporalError
from ..logging_config import get_logger
from ..numeric import to_epoch_ms
from .authors import assign_owned_files, build_author_stats
from .churn import build_file_churn
from .git_extractor import GitExtractor
from .insights import (
    analyze_commit_pattern,
    identify_fragile_files,
    identify_hot_paths,
    identify_stable_core,
)
from .models import CommitRecord, DateRange, GitHistory
from .ownership import build_file_ownership
from .timeline import build_timeline

logger = get_logger(__name__)


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a "Z" suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_history(
    commits: Sequence[CommitRecord],
    repo_path: str,
    now: datetime,
    thresholds: HistoryThresholds = DEFAULT_THRESHOLDS,
    lockfile_patterns: Sequence[str] = DEFAULT_CONFIG.lockfile_patterns,
    recent_commits_limit: int = DEFAULT_CONFIG.recent_commits_limit,
) -> GitHistory:
    """Derive the full history aggregate from commits in log order (newest first).

    ``now`` is captured once by the caller and used for every recency
    computation, so the result is deterministic for a given input.
    """
    now_ms = to_epoch_ms(now)
    t = thresholds

    file_churn = build_file_churn(commits, now_ms, t)
    logger.info("Analyzed churn for %d files", len(file_churn))

    author_stats = build_author_stats(commits)
    logger.info("Found %d authors", len(author_stats))

    file_ownership = build_file_ownership(file_churn, commits, t)
    assign_owned_files(author_stats, file_ownership)

    hot_paths = identify_hot_paths(file_churn, t, lockfile_patterns)
    stable_core = identify_stable_core(file_churn, t)
    fragile_files = identify_fragile_files(file_churn, commits, t)
    commit_pattern = analyze_commit_pattern(commits, now_ms, t)
    timeline = build_timeline(commits, t)

    by_score = sorted(file_churn.values(), key=lambda c: c.churn_score, reverse=True)
    high_churn_files = [c.path for c in by_score[: t.high_churn_count]]
    multi_author_files = [
        c.path for c in file_churn.values() if c.author_count >= t.multi_author_min
    ]
    recently_fragile = [
        f.path for f in fragile_files if f.fragile_score > t.recently_fragile_score
    ][: t.recently_fragile_count]

    first = commits[-1] if commits else None
    last = commits[0] if commits else None

    return GitHistory(
        analyzed_at=format_timestamp(now),
        repo_path=repo_path,
        total_commits=len(commits),
        total_authors=len(author_stats),
        first_commit=first,
        last_commit=last,
        date_range=DateRange(start=first.date, end=last.date) if commits else None,
        file_churn=file_churn,
        file_ownership=file_ownership,
        author_stats=author_stats,
        hot_paths=hot_paths,
        stable_core=stable_core,
        fragile_files=fragile_files,
        commit_pattern=commit_pattern,
        recent_commits=list(commits[:recent_commits_limit]),
        timeline=timeline,
        high_churn_files=high_churn_files,
        multi_author_files=multi_author_files,
        recently_fragile=recently_fragile,
    )


def analyze_history(
    repo_path: str | Path,
    config: Optional[HistorianConfig] = None,
    now: Optional[datetime] = None,
) -> Optional[GitHistory]:
    """Analyze a repository's git history.

    Returns None when history is unavailable: no .git directory, a failed
    or timed-out extraction, or a repository without commits. History is an
    optional enrichment, so none of these raise.
    """
    config = config or DEFAULT_CONFIG
    now = now or datetime.now(timezone.utc)
    repo = str(Path(repo_path).resolve())

    extractor = GitExtractor(repo, config)
    if not extractor.is_available():
        logger.info("Not a git repository: %s", repo)
        return None

    logger.info("Analyzing git history for %s", repo)
    try:
        commits = extractor.extract()
    except TemporalError as e:
        logger.warning("History analysis failed for %s: %s", repo, e)
        return None

    if not commits:
        logger.info("No commits found in %s", repo)
        return None

    history = build_history(
        commits,
        repo,
        now,
        thresholds=config.thresholds,
        lockfile_patterns=config.lockfile_patterns,
        recent_commits_limit=config.recent_commits_limit,
    )
    logger.info("History analysis complete: %d commits", history.total_commits)
    return history
