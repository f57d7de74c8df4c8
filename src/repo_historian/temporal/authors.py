"""Fold commits into per-author statistics."""

from __future__ import annotations

import math
from typing import Mapping, Sequence

from ..numeric import days_between, round_half_up
from .models import AuthorStats, CommitRecord, FileOwnership


def build_author_stats(commits: Sequence[CommitRecord]) -> dict[str, AuthorStats]:
    """Per-author totals keyed by display name.

    Two identities sharing a display name are merged, so ``len(result)`` can
    undercount people who commit under several emails with the same name.
    The email kept is the one on the newest commit.
    """
    stats: dict[str, AuthorStats] = {}

    for commit in commits:
        author = stats.get(commit.author)
        if author is None:
            author = stats[commit.author] = AuthorStats(
                name=commit.author,
                email=commit.email,
                first_commit=commit.date,
                last_commit=commit.date,
                first_commit_ms=commit.timestamp,
                last_commit_ms=commit.timestamp,
            )

        author.total_commits += 1
        author.total_insertions += commit.insertions
        author.total_deletions += commit.deletions

        for path in commit.files_changed:
            if path not in author.files_contributed:
                author.files_contributed.append(path)

        if commit.timestamp < author.first_commit_ms:
            author.first_commit, author.first_commit_ms = commit.date, commit.timestamp
        if commit.timestamp > author.last_commit_ms:
            author.last_commit, author.last_commit_ms = commit.date, commit.timestamp

    for author in stats.values():
        span = math.floor(days_between(author.last_commit_ms, author.first_commit_ms))
        author.active_days = max(1, span)
        author.average_commits_per_day = round_half_up(author.total_commits / author.active_days, 2)

    return stats


def assign_owned_files(
    stats: Mapping[str, AuthorStats], ownership: Mapping[str, FileOwnership]
) -> None:
    """Record on each author the files they are primary author of."""
    for path, record in ownership.items():
        if record.primary_author is None:
            continue
        author = stats.get(record.primary_author)
        if author is not None and path not in author.files_owned:
            author.files_owned.append(path)
