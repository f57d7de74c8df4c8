"""In-memory cache of analyzed repositories.

Entries are keyed by resolved repository path and live for the lifetime of
the process. The cache remembers the last path stored so that callers can
omit the path and get "the repository analyzed most recently".

Usage:
    cache = RepoCache()
    cache.refresh("/path/to/repo")
    history = cache.get()  # last analyzed repo
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import HistorianConfig
from .exceptions import InvalidPathError
from .logging_config import get_logger
from .temporal import GitHistory, analyze_history
from .temporal.analyzer import format_timestamp

logger = get_logger(__name__)


@dataclass(frozen=True)
class CachedHistory:
    """One analysis outcome. ``history`` is None when the repo had no history."""

    history: Optional[GitHistory]
    analyzed_at: str


def _key(path: str | Path) -> str:
    return str(Path(path).resolve())


class RepoCache:
    """Thread-safe mapping from repository path to its last analysis."""

    def __init__(self) -> None:
        self._entries: dict[str, CachedHistory] = {}
        self._last_path: Optional[str] = None
        self._lock = threading.Lock()

    def set(
        self,
        path: str | Path,
        history: Optional[GitHistory],
        analyzed_at: Optional[str] = None,
    ) -> CachedHistory:
        """Store an outcome and make ``path`` the last analyzed repository."""
        key = _key(path)
        if analyzed_at is None:
            analyzed_at = (
                history.analyzed_at if history else format_timestamp(datetime.now(timezone.utc))
            )
        entry = CachedHistory(history=history, analyzed_at=analyzed_at)
        with self._lock:
            self._entries[key] = entry
            self._last_path = key
        return entry

    def get_entry(self, path: str | Path | None = None) -> Optional[CachedHistory]:
        """The cached outcome for ``path`` (default: last analyzed), or None if never analyzed."""
        with self._lock:
            key = _key(path) if path is not None else self._last_path
            if key is None:
                return None
            return self._entries.get(key)

    def get(self, path: str | Path | None = None) -> Optional[GitHistory]:
        entry = self.get_entry(path)
        return entry.history if entry else None

    def has(self, path: str | Path) -> bool:
        with self._lock:
            return _key(path) in self._entries

    @property
    def last_path(self) -> Optional[str]:
        with self._lock:
            return self._last_path

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._last_path = None

    def refresh(
        self,
        path: str | Path,
        config: Optional[HistorianConfig] = None,
        now: Optional[datetime] = None,
    ) -> CachedHistory:
        """Re-run the analysis for ``path`` and store the outcome.

        Each run recomputes from scratch; the previous entry is replaced.

        Raises:
            InvalidPathError: ``path`` does not exist or is not a directory.
        """
        target = Path(path)
        if not target.exists():
            raise InvalidPathError(target, "does not exist")
        if not target.is_dir():
            raise InvalidPathError(target, "not a directory")

        history = analyze_history(path, config=config, now=now)
        if history is not None:
            return self.set(path, history)

        logger.info("No git history for %s; caching empty result", _key(path))
        return self.set(path, None, format_timestamp(now or datetime.now(timezone.utc)))
