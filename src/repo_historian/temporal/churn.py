"""Fold commits into per-file churn statistics."""

from __future__ import annotations

import math
from typing import Sequence

from ..config import DEFAULT_THRESHOLDS, HistoryThresholds
from ..numeric import MS_PER_DAY, days_between, round_int
from .models import CommitRecord, FileChurn


def churn_score(
    total_commits: int,
    author_count: int,
    commits_last_30_days: int,
    commits_last_90_days: int,
    total_changes: float,
    thresholds: HistoryThresholds = DEFAULT_THRESHOLDS,
) -> int:
    """Relative volatility score; higher means more volatile.

    Unbounded: it ranks files against each other and is not a percentage.
    """
    t = thresholds
    score = min(total_commits * t.churn_commit_weight, t.churn_commit_cap)

    if author_count > 1:
        score += (author_count - 1) * t.churn_author_weight
    if author_count > t.churn_many_authors:
        score += t.churn_many_authors_bonus

    score += commits_last_30_days * t.churn_recent_30_weight
    score += commits_last_90_days * t.churn_recent_90_weight

    # Both size bonuses apply to very large totals
    if total_changes > t.churn_large_changes:
        score += t.churn_size_bonus
    if total_changes > t.churn_huge_changes:
        score += t.churn_size_bonus

    return round_int(score)


def build_file_churn(
    commits: Sequence[CommitRecord],
    now_ms: int,
    thresholds: HistoryThresholds = DEFAULT_THRESHOLDS,
) -> dict[str, FileChurn]:
    """One pass over the commits, then per-file derived fields.

    Line counts are apportioned: each file in a commit gets
    ``commit.insertions / len(commit.files_changed)`` (same for deletions).
    This approximates per-file diff stats and is what the score is tuned on.
    """
    recent_cutoff = now_ms - thresholds.recent_window_days * MS_PER_DAY
    extended_cutoff = now_ms - thresholds.extended_window_days * MS_PER_DAY

    churn: dict[str, FileChurn] = {}

    for commit in commits:
        divisor = max(len(commit.files_changed), 1)
        for path in commit.files_changed:
            fc = churn.get(path)
            if fc is None:
                fc = churn[path] = FileChurn(
                    path=path,
                    first_commit=commit.date,
                    last_commit=commit.date,
                    first_commit_ms=commit.timestamp,
                    last_commit_ms=commit.timestamp,
                )

            fc.total_commits += 1
            fc.total_insertions += commit.insertions / divisor
            fc.total_deletions += commit.deletions / divisor

            if commit.author not in fc.authors:
                fc.authors.append(commit.author)

            if commit.timestamp < fc.first_commit_ms:
                fc.first_commit, fc.first_commit_ms = commit.date, commit.timestamp
            if commit.timestamp > fc.last_commit_ms:
                fc.last_commit, fc.last_commit_ms = commit.date, commit.timestamp

            if commit.timestamp > recent_cutoff:
                fc.commits_last_30_days += 1
            if commit.timestamp > extended_cutoff:
                fc.commits_last_90_days += 1

    for fc in churn.values():
        fc.author_count = len(fc.authors)
        fc.net_change = fc.total_insertions - fc.total_deletions
        fc.days_since_last_change = math.floor(days_between(now_ms, fc.last_commit_ms))
        fc.churn_score = churn_score(
            fc.total_commits,
            fc.author_count,
            fc.commits_last_30_days,
            fc.commits_last_90_days,
            fc.total_changes,
            thresholds,
        )

    return churn
