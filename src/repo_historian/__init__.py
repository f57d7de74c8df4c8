"""
Repo Historian - the time dimension of a codebase

Reads a repository's git log and derives per-file churn, authorship,
ownership clarity, fragility, hot paths, the stable core, development
cadence and a timeline of notable events.
"""

__version__ = "0.1.0"

from .ask import ask_history
from .cache import CachedHistory, RepoCache
from .config import HistorianConfig, HistoryThresholds, load_config
from .explain import explain_file, why_is_this_weird
from .retrieval import get_history, get_history_json
from .temporal import GitHistory, analyze_history

__all__ = [
    "analyze_history",  # Main entry point
    "GitHistory",
    "HistorianConfig",
    "HistoryThresholds",
    "load_config",
    "RepoCache",
    "CachedHistory",
    "get_history",
    "get_history_json",
    "explain_file",
    "why_is_this_weird",
    "ask_history",
]
