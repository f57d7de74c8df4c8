"""Per-file ownership breakdown and clarity verdict."""

from __future__ import annotations

from collections import defaultdict
from typing import Mapping, Sequence

from ..config import DEFAULT_THRESHOLDS, HistoryThresholds
from ..numeric import round_int
from .models import CommitRecord, Contributor, FileChurn, FileOwnership, OwnershipClarity


def classify_ownership(
    contributor_count: int,
    top_percent: int,
    thresholds: HistoryThresholds = DEFAULT_THRESHOLDS,
) -> OwnershipClarity:
    """Disputed is tested before shared; anything else is clear."""
    if (
        contributor_count >= thresholds.disputed_min_contributors
        and top_percent < thresholds.disputed_max_percent
    ):
        return OwnershipClarity.DISPUTED
    if (
        contributor_count >= thresholds.shared_min_contributors
        and top_percent < thresholds.shared_max_percent
    ):
        return OwnershipClarity.SHARED
    return OwnershipClarity.CLEAR


def build_file_ownership(
    file_churn: Mapping[str, FileChurn],
    commits: Sequence[CommitRecord],
    thresholds: HistoryThresholds = DEFAULT_THRESHOLDS,
) -> dict[str, FileOwnership]:
    """One FileOwnership per churned file.

    Per-author commit counts are re-tallied from the commits. The verdict is
    taken over every contributor; only the top ``max_contributors`` are kept
    on the record.
    """
    # path -> author -> [commits, last date, last ms]
    tallies: dict[str, dict[str, list]] = defaultdict(dict)
    for commit in commits:
        for path in commit.files_changed:
            entry = tallies[path].get(commit.author)
            if entry is None:
                entry = tallies[path][commit.author] = [0, commit.date, commit.timestamp]
            entry[0] += 1
            if commit.timestamp > entry[2]:
                entry[1], entry[2] = commit.date, commit.timestamp

    ownership: dict[str, FileOwnership] = {}
    for path, churn in file_churn.items():
        total = churn.total_commits
        contributors = [
            Contributor(
                author=author,
                commits=count,
                percent=round_int(count / total * 100) if total else 0,
                last_commit=last_date,
            )
            for author, (count, last_date, _) in tallies.get(path, {}).items()
        ]
        contributors.sort(key=lambda c: c.commits, reverse=True)

        top = contributors[0] if contributors else None
        top_percent = top.percent if top else 0

        ownership[path] = FileOwnership(
            path=path,
            primary_author=top.author if top else None,
            primary_author_percent=top_percent,
            contributors=contributors[: thresholds.max_contributors],
            ownership_clarity=classify_ownership(len(contributors), top_percent, thresholds),
        )

    return ownership
