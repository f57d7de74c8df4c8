"""Merge recent commits and quiet periods into one event list."""

from __future__ import annotations

import math
from typing import Sequence

from ..config import DEFAULT_THRESHOLDS, HistoryThresholds
from ..numeric import days_between, parse_iso_ms
from .models import CommitRecord, EventType, TimelineEvent


def commit_event(commit: CommitRecord, thresholds: HistoryThresholds = DEFAULT_THRESHOLDS) -> TimelineEvent:
    """Event for a single commit.

    A large change replaces the whole description, so a large refactor
    loses its "Refactor: " prefix but keeps the major-refactor type.
    """
    kind = EventType.COMMIT
    description = commit.message_first_line

    if commit.is_refactor:
        kind = EventType.MAJOR_REFACTOR
        description = f"Refactor: {commit.message_first_line}"

    file_count = len(commit.files_changed)
    if file_count > thresholds.large_change_files:
        description = f"Large change ({file_count} files): {commit.message_first_line}"

    return TimelineEvent(
        date=commit.date,
        type=kind,
        description=description,
        files=list(commit.files_changed[: thresholds.timeline_max_files]),
        author=commit.author,
    )


def quiet_periods(
    commits: Sequence[CommitRecord], thresholds: HistoryThresholds = DEFAULT_THRESHOLDS
) -> list[TimelineEvent]:
    """One event per adjacent-commit gap above the threshold, dated at the older commit."""
    events = []
    for newer, older in zip(commits, commits[1:]):
        gap = days_between(newer.timestamp, older.timestamp)
        if gap > thresholds.quiet_period_days:
            events.append(
                TimelineEvent(
                    date=older.date,
                    type=EventType.QUIET_PERIOD,
                    description=f"{math.floor(gap)} day gap in development",
                )
            )
    return events


def build_timeline(
    commits: Sequence[CommitRecord], thresholds: HistoryThresholds = DEFAULT_THRESHOLDS
) -> list[TimelineEvent]:
    """Recent non-merge commits plus every quiet period, newest first.

    Merges are dropped before taking the most recent ``timeline_commits``, so
    a merge-heavy history still yields a full set of commit events. Quiet
    periods are scanned over the whole sequence.
    """
    non_merge = [c for c in commits if not c.is_merge]
    events = [commit_event(c, thresholds) for c in non_merge[: thresholds.timeline_commits]]
    events.extend(quiet_periods(commits, thresholds))

    events.sort(key=lambda e: parse_iso_ms(e.date), reverse=True)
    return events
