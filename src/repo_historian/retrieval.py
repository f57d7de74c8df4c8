"""Named slices of a cached history, shaped for JSON consumers.

Every document carries a provenance ``_citation`` and the ``_analyzedAt``
timestamp of the analysis it was cut from.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

from .cache import RepoCache
from .exceptions import InvalidConfigError
from .numeric import round_int
from .temporal.models import GitHistory, OwnershipClarity, to_camel

NOT_ANALYZED = "No repository has been analyzed yet. Run `repo-historian analyze` first."
NO_HISTORY = "Git history not available. The repository may not have a .git directory."

_CLARITY_ORDER = {
    OwnershipClarity.DISPUTED: 0,
    OwnershipClarity.SHARED: 1,
    OwnershipClarity.CLEAR: 2,
}


def citation(history: GitHistory) -> str:
    return f"Source: Git history analysis of {history.repo_path} ({history.analyzed_at})"


def _by_commits(history: GitHistory):
    return sorted(history.author_stats.items(), key=lambda kv: kv[1].total_commits, reverse=True)


def _churn_section(history: GitHistory) -> dict[str, Any]:
    ranked = sorted(history.file_churn.items(), key=lambda kv: kv[1].churn_score, reverse=True)
    return {
        "_note": "File churn data - higher scores indicate more volatile files",
        "highChurnFiles": history.high_churn_files,
        "fileChurn": {
            path: {
                "totalCommits": churn.total_commits,
                "churnScore": churn.churn_score,
                "authors": churn.authors,
                "authorCount": churn.author_count,
                "commitsLast30Days": churn.commits_last_30_days,
                "commitsLast90Days": churn.commits_last_90_days,
                "daysSinceLastChange": churn.days_since_last_change,
                "totalInsertions": round_int(churn.total_insertions),
                "totalDeletions": round_int(churn.total_deletions),
            }
            for path, churn in ranked[:30]
        },
    }


def _authors_section(history: GitHistory) -> dict[str, Any]:
    return {
        "_note": "Author statistics and ownership signals",
        "totalAuthors": history.total_authors,
        "authors": {
            name: {
                "email": stats.email,
                "totalCommits": stats.total_commits,
                "totalInsertions": stats.total_insertions,
                "totalDeletions": stats.total_deletions,
                "filesContributedCount": len(stats.files_contributed),
                "filesOwnedCount": len(stats.files_owned),
                "firstCommit": stats.first_commit,
                "lastCommit": stats.last_commit,
                "activeDays": stats.active_days,
                "averageCommitsPerDay": stats.average_commits_per_day,
            }
            for name, stats in _by_commits(history)
        },
    }


def _fragile_section(history: GitHistory) -> dict[str, Any]:
    return {
        "_note": "Fragile files that may cause problems. Higher fragileScore = more concern.",
        "recentlyFragile": history.recently_fragile,
        "fragileFiles": to_camel(history.fragile_files),
    }


def _hot_paths_section(history: GitHistory) -> dict[str, Any]:
    return {
        "_note": "Hot paths (volatile) vs stable core (reliable)",
        "hotPaths": to_camel(history.hot_paths),
        "stableCore": history.stable_core,
    }


def _timeline_section(history: GitHistory) -> dict[str, Any]:
    return {
        "_note": "Timeline of significant events",
        "commitPattern": to_camel(history.commit_pattern),
        "dateRange": to_camel(history.date_range),
        "recentCommits": [
            {
                "hash": c.short_hash,
                "date": c.date,
                "author": c.author,
                "message": c.message_first_line,
                "filesChanged": len(c.files_changed),
                "isFix": c.is_fix,
                "isRefactor": c.is_refactor,
                "isFeature": c.is_feature,
            }
            for c in history.recent_commits[:20]
        ],
        "timeline": to_camel(history.timeline[:20]),
    }


def _ownership_section(history: GitHistory) -> dict[str, Any]:
    shared = [
        (path, record)
        for path, record in history.file_ownership.items()
        if len(record.contributors) > 1
    ]
    shared.sort(key=lambda kv: _CLARITY_ORDER[kv[1].ownership_clarity])
    return {
        "_note": "File ownership analysis - who owns what",
        "multiAuthorFiles": history.multi_author_files,
        "ownership": {
            path: {
                "primaryAuthor": record.primary_author,
                "primaryAuthorPercent": record.primary_author_percent,
                "ownershipClarity": record.ownership_clarity.value,
                "contributors": to_camel(record.contributors),
            }
            for path, record in shared[:30]
        },
    }


def _summary(history: GitHistory) -> dict[str, Any]:
    return {
        "totalCommits": history.total_commits,
        "totalAuthors": history.total_authors,
        "dateRange": to_camel(history.date_range),
        "commitPattern": to_camel(history.commit_pattern),
    }


def _insights(history: GitHistory) -> dict[str, Any]:
    return {
        "highChurnFiles": history.high_churn_files,
        "multiAuthorFiles": history.multi_author_files,
        "recentlyFragile": history.recently_fragile,
        "stableCore": history.stable_core[:10],
    }


def _summary_section(history: GitHistory) -> dict[str, Any]:
    return {
        "_note": "Repository-level history summary",
        "summary": _summary(history),
        "insights": _insights(history),
    }


def _all_section(history: GitHistory) -> dict[str, Any]:
    return {
        "_note": "This is the time dimension - it explains WHY code is the way it is.",
        "_usage": "Use a section ('churn', 'authors', 'fragile', 'hotPaths', 'timeline', "
        "'ownership', 'summary') for detailed data.",
        "summary": _summary(history),
        "insights": _insights(history),
        "hotPaths": [
            {"path": h.path, "reason": h.reason, "riskLevel": h.risk_level.value}
            for h in history.hot_paths[:10]
        ],
        "fragileFiles": [
            {"path": f.path, "reasons": f.reasons, "fragileScore": f.fragile_score}
            for f in history.fragile_files[:10]
        ],
        "topAuthors": [
            {
                "name": name,
                "commits": stats.total_commits,
                "filesContributed": len(stats.files_contributed),
            }
            for name, stats in _by_commits(history)[:5]
        ],
    }


SECTIONS: dict[str, Callable[[GitHistory], dict[str, Any]]] = {
    "churn": _churn_section,
    "authors": _authors_section,
    "fragile": _fragile_section,
    "hotPaths": _hot_paths_section,
    "timeline": _timeline_section,
    "ownership": _ownership_section,
    "summary": _summary_section,
    "all": _all_section,
}


def get_history(
    cache: RepoCache,
    repo_path: str | Path | None = None,
    section: str = "all",
) -> dict[str, Any]:
    """One named slice of the cached history for ``repo_path`` (default: last analyzed).

    Missing analyses are reported as ``{"error": ...}`` rather than raised.

    Raises:
        InvalidConfigError: ``section`` is not one of SECTIONS.
    """
    builder = SECTIONS.get(section)
    if builder is None:
        raise InvalidConfigError(
            "section", section, f"expected one of: {', '.join(SECTIONS)}"
        )

    entry = cache.get_entry(repo_path)
    if entry is None:
        return {"error": NOT_ANALYZED}
    if entry.history is None:
        return {"error": NO_HISTORY}

    history = entry.history
    doc: dict[str, Any] = {
        "_citation": citation(history),
        "_analyzedAt": entry.analyzed_at,
    }
    doc.update(builder(history))
    return doc


def get_history_json(
    cache: RepoCache,
    repo_path: str | Path | None = None,
    section: str = "all",
    indent: Optional[int] = 2,
) -> str:
    return json.dumps(get_history(cache, repo_path, section), indent=indent, ensure_ascii=False)
