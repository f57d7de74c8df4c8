"""Keyword routing of plain-language questions onto a cached history."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from .cache import RepoCache
from .explain import explain_file
from .retrieval import NO_HISTORY, NOT_ANALYZED
from .temporal.models import GitHistory, OwnershipClarity


def matches_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(kw in text for kw in keywords)


def mentioned_path(history: GitHistory, question: str) -> Optional[str]:
    """The longest known file path that appears verbatim in the question."""
    hits = [path for path in history.file_churn if path in question]
    return max(hits, key=len) if hits else None


def answer_contributors(history: GitHistory) -> str:
    ranked = sorted(history.author_stats.values(), key=lambda a: a.total_commits, reverse=True)
    lines = ["# Contributors", "", f"**Total contributors:** {history.total_authors}", ""]
    for author in ranked[:10]:
        lines.append(
            f"- **{author.name}** <{author.email}>: {author.total_commits} commits, "
            f"{len(author.files_contributed)} files, primary author of {len(author.files_owned)}"
        )
    if len(ranked) > 10:
        lines.append(f"- ... and {len(ranked) - 10} more")
    return "\n".join(lines)


def answer_ownership(history: GitHistory) -> str:
    disputed = [
        o for o in history.file_ownership.values()
        if o.ownership_clarity is OwnershipClarity.DISPUTED
    ]
    shared = [
        o for o in history.file_ownership.values()
        if o.ownership_clarity is OwnershipClarity.SHARED
    ]
    lines = ["# Ownership", ""]
    if not disputed and not shared:
        lines.append("Every file has a clear primary author.")
        return "\n".join(lines)

    if disputed:
        lines += ["## Disputed (no clear owner)", ""]
        for o in disputed[:10]:
            lines.append(
                f"- `{o.path}`: {len(o.contributors)} contributors, "
                f"top share {o.primary_author_percent}% ({o.primary_author})"
            )
        lines.append("")
    if shared:
        lines += ["## Shared", ""]
        for o in shared[:10]:
            lines.append(f"- `{o.path}`: {o.primary_author} ({o.primary_author_percent}%)")
    return "\n".join(lines).rstrip()


def answer_fragile(history: GitHistory) -> str:
    if not history.fragile_files:
        return "# Fragile Files\n\nNo fragile files detected."
    lines = ["# Fragile Files", ""]
    for f in history.fragile_files[:10]:
        lines.append(f"- `{f.path}` (score {f.fragile_score}): {', '.join(f.reasons)}")
        lines.append(f"  - {f.recommendation}")
    return "\n".join(lines)


def answer_hot_paths(history: GitHistory) -> str:
    if not history.hot_paths:
        return "# Hot Paths\n\nNo volatile files detected."
    lines = ["# Hot Paths", ""]
    for h in history.hot_paths[:10]:
        lines.append(f"- `{h.path}` [{h.risk_level.value}]: {h.reason}")
    return "\n".join(lines)


def answer_stable_core(history: GitHistory) -> str:
    if not history.stable_core:
        return "# Stable Core\n\nNo long-lived, rarely changed files found yet."
    lines = ["# Stable Core", "", "Files that rarely change and form the reliable foundation:", ""]
    lines += [f"- `{path}`" for path in history.stable_core]
    return "\n".join(lines)


def answer_pattern(history: GitHistory) -> str:
    pattern = history.commit_pattern
    lines = [
        "# Development Pattern",
        "",
        f"**Pattern:** {pattern.type.value}",
        f"**Summary:** {pattern.description}",
        f"**Average commits/week:** {pattern.average_commits_per_week:g}",
        f"**Longest gap:** {pattern.longest_gap_days} days",
    ]
    if pattern.busiest_period:
        busiest = pattern.busiest_period
        lines.append(
            f"**Busiest period:** {busiest.start} to {busiest.end} ({busiest.commits} commits)"
        )
    return "\n".join(lines)


def answer_recent(history: GitHistory) -> str:
    lines = ["# Recent History", "", f"**Total commits:** {history.total_commits}"]
    if history.date_range:
        lines.append(f"**First commit:** {history.date_range.start}")
        lines.append(f"**Last commit:** {history.date_range.end}")
    lines += ["", "## Recent commits", ""]
    for c in history.recent_commits[:10]:
        lines.append(f"- **{c.short_hash}** {c.message_first_line} ({c.author})")
    return "\n".join(lines)


def answer_general(history: GitHistory) -> str:
    lines = [
        f"# History of {history.repo_path}",
        "",
        f"**History:** {history.total_commits} commits from {history.total_authors} author(s)",
        f"**Pattern:** {history.commit_pattern.description}",
        f"**Hot paths:** {len(history.hot_paths)}",
        f"**Fragile files:** {len(history.fragile_files)}",
        f"**Stable core:** {len(history.stable_core)} files",
        "",
        "For more specific information, try asking about:",
        "- Contributors and ownership",
        "- Fragile or risky files",
        "- Hot paths and stable core",
        "- Development pattern and recent history",
        "- Why a specific file is the way it is",
    ]
    return "\n".join(lines)


# Checked in order; the first matching route answers
ROUTES: list[tuple[tuple[str, ...], Callable[[GitHistory], str]]] = [
    (("owner", "owns", "ownership"), answer_ownership),
    (("who", "contributor", "author", "team"), answer_contributors),
    (("fragile", "risk", "concern", "problem", "bug", "worry"), answer_fragile),
    (("hot", "churn", "volatile"), answer_hot_paths),
    (("stable", "reliable", "foundation"), answer_stable_core),
    (("pattern", "activity", "active", "cadence", "pace"), answer_pattern),
    (("recent", "latest", "last", "history", "commit", "timeline"), answer_recent),
]


def ask_history(
    cache: RepoCache, question: str, repo_path: Optional[str | Path] = None
) -> str:
    """Answer ``question`` from the cached history of ``repo_path`` (default: last analyzed).

    A question naming a known file path is answered by the file explainer.
    """
    entry = cache.get_entry(repo_path)
    if entry is None:
        return NOT_ANALYZED
    if entry.history is None:
        return NO_HISTORY

    history = entry.history
    path = mentioned_path(history, question)
    if path is not None:
        return explain_file(history, path)

    q = question.lower()
    for keywords, answer in ROUTES:
        if matches_any(q, keywords):
            return answer(history)
    return answer_general(history)
