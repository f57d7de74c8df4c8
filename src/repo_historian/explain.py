"""Markdown narrative explaining one file's history."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .cache import RepoCache
from .temporal.models import GitHistory, OwnershipClarity

NO_HISTORY_TEXT = (
    "Cannot analyze - no git history available. Run `repo-historian analyze` first."
)


def churn_label(score: int) -> str:
    if score > 40:
        return "HIGH"
    if score > 20:
        return "MEDIUM"
    return "LOW"


def normalize_path(file_path: str) -> str:
    """Repository-relative form of a user-supplied path ("./a\\b" -> "a/b")."""
    path = file_path.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


def explain_file(history: GitHistory, file_path: str) -> str:
    """Render what the history says about ``file_path``.

    Files never touched by an analyzed commit get a short "no history found"
    message instead of a report.
    """
    file_path = normalize_path(file_path)
    churn = history.file_churn.get(file_path)
    if churn is None:
        return (
            f'No history found for "{file_path}". '
            "The file may be new or the path may be incorrect."
        )

    ownership = history.file_ownership.get(file_path)
    fragile = history.fragile_for(file_path)

    lines = [
        f'# Why is "{file_path}" the way it is?',
        "",
        "*Based on git history analysis*",
        "",
        "## Change History",
        f"- **Total commits:** {churn.total_commits}",
        f"- **Authors:** {churn.author_count} ({', '.join(churn.authors)})",
        f"- **Churn score:** {churn.churn_score} {churn_label(churn.churn_score)}",
        f"- **Last changed:** {churn.days_since_last_change} days ago",
        f"- **Recent activity:** {churn.commits_last_30_days} commits in last 30 days",
        "",
    ]

    if churn.churn_score > 30 or churn.author_count >= 3 or fragile:
        lines += ["## Why It's Unusual", ""]

        if churn.total_commits > 20:
            lines += [
                f"**Heavily modified:** This file has been changed {churn.total_commits} "
                "times. That's a lot of iterations - the requirements may have been "
                "unclear or the implementation keeps needing fixes.",
                "",
            ]

        if churn.author_count >= 3:
            lines += [
                f"**Many hands:** {churn.author_count} different people have modified "
                "this file. Shared ownership can lead to inconsistent patterns and "
                '"design by committee" code.',
                "",
            ]

        if churn.commits_last_30_days >= 5:
            lines += [
                f"**Currently volatile:** {churn.commits_last_30_days} commits in the "
                "last 30 days suggests active work or recent problems being addressed.",
                "",
            ]

        if fragile:
            lines += [
                f"**Identified as fragile:** {', '.join(fragile.reasons)}",
                "",
                f"**Recommendation:** {fragile.recommendation}",
                "",
            ]
    else:
        lines += [
            "## This file looks healthy",
            "",
            "No significant concerns detected. The file has normal change patterns.",
            "",
        ]

    if ownership:
        lines += [
            "## Ownership",
            f"- **Primary author:** {ownership.primary_author or 'None'} "
            f"({ownership.primary_author_percent}%)",
            f"- **Ownership clarity:** {ownership.ownership_clarity.value}",
        ]
        if ownership.ownership_clarity is OwnershipClarity.DISPUTED:
            lines += ["", "No clear owner - consider assigning ownership."]

    return "\n".join(lines).rstrip() + "\n"


def why_is_this_weird(
    cache: RepoCache, file_path: str, repo_path: Optional[str | Path] = None
) -> str:
    """Explain ``file_path`` from the cached history of ``repo_path`` (default: last analyzed)."""
    history = cache.get(repo_path)
    if history is None:
        return NO_HISTORY_TEXT
    return explain_file(history, file_path)
