"""Commit-message keyword classification.

Best-effort heuristics: plain substring tests on the lower-cased message, so
"prefix" counts as a fix and "address" as a feature. Good enough to rank
files; not a classifier to trust per commit.
"""

from __future__ import annotations

FIX_KEYWORDS = ("fix", "bug")
FEATURE_KEYWORDS = ("feat", "add", "implement")


def is_merge(message: str) -> bool:
    return message.lower().startswith("merge")


def is_revert(message: str) -> bool:
    return "revert" in message.lower()


def is_refactor(message: str) -> bool:
    return "refactor" in message.lower()


def is_fix(message: str) -> bool:
    lowered = message.lower()
    return any(kw in lowered for kw in FIX_KEYWORDS)


def is_feature(message: str) -> bool:
    lowered = message.lower()
    return any(kw in lowered for kw in FEATURE_KEYWORDS)


def classify_message(message: str) -> dict[str, bool]:
    """All five flags for a message, keyed by CommitRecord field name."""
    return {
        "is_merge": is_merge(message),
        "is_revert": is_revert(message),
        "is_refactor": is_refactor(message),
        "is_fix": is_fix(message),
        "is_feature": is_feature(message),
    }
