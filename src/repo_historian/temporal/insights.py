"""Insights derived from churn, ownership and the commit sequence.

Four independent read-only passes:
- hot paths: files with high or recent volatility
- stable core: long-lived files that rarely change
- fragile files: files flagged by one or more evidence rules
- commit pattern: repository-level development cadence
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Iterable, Mapping, Optional, Sequence

import numpy as np

from ..config import DEFAULT_CONFIG, DEFAULT_THRESHOLDS, HistoryThresholds
from ..numeric import MS_PER_DAY, days_between, iso_date, round_half_up, round_int
from .models import (
    BusiestPeriod,
    CommitPattern,
    CommitRecord,
    EvidenceType,
    FileChurn,
    FragileEvidence,
    FragileFile,
    HotPath,
    PatternType,
    RiskLevel,
)

RECOMMEND_OWNERSHIP = "Assign clear ownership and document expected behavior."
RECOMMEND_TESTS = "Add comprehensive tests and consider a rewrite."
RECOMMEND_REVIEW = "Review this file for potential refactoring."


# ---------------------------------------------------------------------------
# Hot paths
# ---------------------------------------------------------------------------


def identify_hot_paths(
    file_churn: Mapping[str, FileChurn],
    thresholds: HistoryThresholds = DEFAULT_THRESHOLDS,
    skip_patterns: Iterable[str] = DEFAULT_CONFIG.lockfile_patterns,
) -> list[HotPath]:
    """Volatile files, highest churn score first.

    Risk only ever escalates: a recent-activity clause forces ``high`` and a
    later author clause cannot lower it.
    """
    t = thresholds
    skip = tuple(skip_patterns)
    hot: list[HotPath] = []

    for path, churn in file_churn.items():
        if any(pattern in path for pattern in skip):
            continue

        reasons: list[str] = []
        risk = RiskLevel.LOW

        if churn.churn_score > t.hot_high_score:
            reasons.append(f"Very high churn (score: {churn.churn_score})")
            risk = RiskLevel.HIGH
        elif churn.churn_score > t.hot_medium_score:
            reasons.append(f"High churn (score: {churn.churn_score})")
            risk = RiskLevel.MEDIUM

        if churn.commits_last_30_days >= t.hot_recent_commits:
            reasons.append(f"{churn.commits_last_30_days} commits in last 30 days")
            risk = RiskLevel.HIGH

        if churn.author_count >= t.hot_many_authors:
            reasons.append(f"{churn.author_count} different authors")
            if risk is RiskLevel.LOW:
                risk = RiskLevel.MEDIUM

        if reasons:
            hot.append(
                HotPath(
                    path=path,
                    reason="; ".join(reasons),
                    churn_score=churn.churn_score,
                    recent_commits=churn.commits_last_30_days,
                    author_count=churn.author_count,
                    risk_level=risk,
                )
            )

    hot.sort(key=lambda h: h.churn_score, reverse=True)
    return hot[: t.max_hot_paths]


# ---------------------------------------------------------------------------
# Stable core
# ---------------------------------------------------------------------------


def _is_config_like(path: str) -> bool:
    return "config" in path or path.endswith(".json")


def identify_stable_core(
    file_churn: Mapping[str, FileChurn],
    thresholds: HistoryThresholds = DEFAULT_THRESHOLDS,
) -> list[str]:
    """Paths of long-lived, rarely changed files, most stable first."""
    t = thresholds
    stable = [
        churn
        for path, churn in file_churn.items()
        if churn.total_commits >= t.stable_min_commits
        and churn.days_since_last_change >= t.stable_min_idle_days
        and churn.churn_score <= t.stable_max_score
        and not _is_config_like(path)
    ]
    stable.sort(key=lambda c: c.churn_score)
    return [churn.path for churn in stable[: t.max_stable_core]]


# ---------------------------------------------------------------------------
# Fragile files
# ---------------------------------------------------------------------------


def count_fix_commits(commits: Sequence[CommitRecord]) -> Counter:
    """Number of fix-flagged commits touching each path."""
    fixes: Counter = Counter()
    for commit in commits:
        if commit.is_fix:
            fixes.update(commit.files_changed)
    return fixes


def _recommend(author_count: int, fix_count: int, t: HistoryThresholds) -> str:
    if author_count >= t.fragile_many_authors:
        return RECOMMEND_OWNERSHIP
    if fix_count >= t.fragile_fix_commits:
        return RECOMMEND_TESTS
    return RECOMMEND_REVIEW


def identify_fragile_files(
    file_churn: Mapping[str, FileChurn],
    commits: Sequence[CommitRecord],
    thresholds: HistoryThresholds = DEFAULT_THRESHOLDS,
) -> list[FragileFile]:
    """Files with at least one fired evidence rule, highest score first.

    Each rule contributes one evidence item and one reason label; the
    fragile score is the sum of severities.
    """
    t = thresholds
    fixes = count_fix_commits(commits)
    fragile: list[FragileFile] = []

    for path, churn in file_churn.items():
        evidence: list[FragileEvidence] = []
        reasons: list[str] = []

        if churn.churn_score > t.fragile_churn_score:
            evidence.append(
                FragileEvidence(
                    EvidenceType.HIGH_CHURN,
                    f"Changed {churn.total_commits} times with churn score {churn.churn_score}",
                    min(10, churn.churn_score // 5),
                )
            )
            reasons.append("Frequently rewritten")

        if churn.author_count >= t.fragile_many_authors:
            evidence.append(
                FragileEvidence(
                    EvidenceType.MANY_AUTHORS,
                    f"{churn.author_count} different people have modified this file",
                    min(10, churn.author_count),
                )
            )
            reasons.append("Unclear ownership")

        fix_count = fixes.get(path, 0)
        if fix_count >= t.fragile_fix_commits:
            evidence.append(
                FragileEvidence(
                    EvidenceType.FREQUENT_FIXES,
                    f"{fix_count} bug fix commits reference this file",
                    min(10, fix_count),
                )
            )
            reasons.append("Bug-prone")

        if (
            churn.commits_last_30_days >= t.fragile_rewrite_recent
            and churn.total_commits <= t.fragile_rewrite_max_total
        ):
            evidence.append(
                FragileEvidence(
                    EvidenceType.RECENT_REWRITES,
                    f"{churn.commits_last_30_days} of {churn.total_commits} total commits "
                    "were in last 30 days",
                    t.fragile_rewrite_severity,
                )
            )
            reasons.append("Recently volatile")

        total_changes = churn.total_changes
        if (
            total_changes > t.fragile_yoyo_changes
            and churn.total_commits > t.fragile_yoyo_min_commits
        ):
            evidence.append(
                FragileEvidence(
                    EvidenceType.YO_YO_CHANGES,
                    f"{round_int(total_changes)} lines changed across "
                    f"{churn.total_commits} commits",
                    min(10, math.floor(total_changes / 200)),
                )
            )
            reasons.append("Heavily modified")

        if not evidence:
            continue

        fragile.append(
            FragileFile(
                path=path,
                reasons=reasons,
                evidence=evidence,
                fragile_score=sum(e.severity for e in evidence),
                recommendation=_recommend(churn.author_count, fix_count, t),
            )
        )

    fragile.sort(key=lambda f: f.fragile_score, reverse=True)
    return fragile[: t.max_fragile_files]


# ---------------------------------------------------------------------------
# Commit pattern
# ---------------------------------------------------------------------------


def _format_rate(value: float) -> str:
    # 10.0 -> "10", 2.5 -> "2.5"
    return f"{value:g}"


def longest_gap_days(timestamps: np.ndarray) -> int:
    """Longest gap between adjacent commits, in whole days.

    ``timestamps`` are in log order (newest first).
    """
    if timestamps.size < 2:
        return 0
    gaps = -np.diff(timestamps) / MS_PER_DAY
    return math.floor(max(0.0, float(gaps.max())))


def busiest_window(
    timestamps: np.ndarray, window_days: int = 30
) -> Optional[BusiestPeriod]:
    """Busiest trailing window ending at some commit.

    Every commit's timestamp is tried as a window end and commits in
    ``[end - window, end]`` are counted. Ties go to the first end in log
    order, i.e. the most recent window.
    """
    if timestamps.size == 0:
        return None

    window_ms = window_days * MS_PER_DAY
    ordered = np.sort(timestamps)
    ends = timestamps
    starts = ends - window_ms
    counts = np.searchsorted(ordered, ends, side="right") - np.searchsorted(
        ordered, starts, side="left"
    )

    best = int(np.argmax(counts))
    return BusiestPeriod(
        start=iso_date(int(starts[best])),
        end=iso_date(int(ends[best])),
        commits=int(counts[best]),
    )


def analyze_commit_pattern(
    commits: Sequence[CommitRecord],
    now_ms: int,
    thresholds: HistoryThresholds = DEFAULT_THRESHOLDS,
) -> CommitPattern:
    """Classify the repository's cadence from commits in log order."""
    t = thresholds
    if not commits:
        return CommitPattern(PatternType.ABANDONED, "No commits found", 0.0, 0, None)

    last_commit_age = days_between(now_ms, commits[0].timestamp)
    if last_commit_age > t.abandoned_after_days:
        days = math.floor(last_commit_age)
        return CommitPattern(
            PatternType.ABANDONED, f"No commits in {days} days", 0.0, days, None
        )

    timestamps = np.array([c.timestamp for c in commits], dtype=np.int64)

    day_span = max(1.0, days_between(commits[0].timestamp, commits[-1].timestamp))
    week_span = day_span / 7
    per_week = round_half_up(len(commits) / week_span, 1)

    gap = longest_gap_days(timestamps)
    busiest = busiest_window(timestamps, t.busiest_window_days)

    if per_week >= t.active_per_week:
        kind = PatternType.ACTIVE
        description = f"Highly active with ~{_format_rate(per_week)} commits/week"
    elif per_week >= t.steady_per_week:
        kind = PatternType.STEADY
        description = f"Steady development with ~{_format_rate(per_week)} commits/week"
    elif gap > t.sporadic_gap_days:
        kind = PatternType.SPORADIC
        description = f"Sporadic activity with gaps up to {gap} days"
    else:
        kind = PatternType.BURST
        state = "active" if last_commit_age < 7 else "quiet"
        description = f"Development in bursts, currently {state}"

    return CommitPattern(kind, description, per_week, gap, busiest)
