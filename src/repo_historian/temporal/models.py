"""Data models for git history analysis."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Optional


class OwnershipClarity(str, Enum):
    CLEAR = "clear"
    SHARED = "shared"
    DISPUTED = "disputed"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EvidenceType(str, Enum):
    HIGH_CHURN = "high-churn"
    MANY_AUTHORS = "many-authors"
    FREQUENT_FIXES = "frequent-fixes"
    RECENT_REWRITES = "recent-rewrites"
    YO_YO_CHANGES = "yo-yo-changes"


class PatternType(str, Enum):
    STEADY = "steady"
    BURST = "burst"
    SPORADIC = "sporadic"
    ABANDONED = "abandoned"
    ACTIVE = "active"


class EventType(str, Enum):
    COMMIT = "commit"
    BURST = "burst"  # reserved
    QUIET_PERIOD = "quiet-period"
    OWNERSHIP_CHANGE = "ownership-change"  # reserved
    MAJOR_REFACTOR = "major-refactor"


@dataclass(frozen=True)
class CommitRecord:
    hash: str
    short_hash: str
    author: str
    email: str
    date: str  # ISO-8601 as reported by git
    timestamp: int  # epoch ms
    message: str
    message_first_line: str
    files_changed: tuple[str, ...]
    insertions: int
    deletions: int
    is_merge: bool = False
    is_revert: bool = False
    is_refactor: bool = False
    is_fix: bool = False
    is_feature: bool = False


@dataclass
class FileChurn:
    path: str
    total_commits: int = 0
    total_insertions: float = 0.0  # apportioned across the commit's files
    total_deletions: float = 0.0
    net_change: float = 0.0
    authors: list[str] = field(default_factory=list)  # arrival order
    author_count: int = 0
    first_commit: str = ""
    last_commit: str = ""
    first_commit_ms: int = 0
    last_commit_ms: int = 0
    days_since_last_change: int = 0
    commits_last_30_days: int = 0
    commits_last_90_days: int = 0
    churn_score: int = 0

    @property
    def total_changes(self) -> float:
        return self.total_insertions + self.total_deletions


@dataclass
class AuthorStats:
    name: str
    email: str
    total_commits: int = 0
    total_insertions: int = 0
    total_deletions: int = 0
    files_owned: list[str] = field(default_factory=list)
    files_contributed: list[str] = field(default_factory=list)
    first_commit: str = ""
    last_commit: str = ""
    first_commit_ms: int = 0
    last_commit_ms: int = 0
    active_days: int = 1
    average_commits_per_day: float = 0.0


@dataclass(frozen=True)
class Contributor:
    author: str
    commits: int
    percent: int
    last_commit: str


@dataclass(frozen=True)
class FileOwnership:
    path: str
    primary_author: Optional[str]
    primary_author_percent: int
    contributors: list[Contributor]  # top N, most commits first
    ownership_clarity: OwnershipClarity


@dataclass(frozen=True)
class HotPath:
    path: str
    reason: str
    churn_score: int
    recent_commits: int
    author_count: int
    risk_level: RiskLevel


@dataclass(frozen=True)
class FragileEvidence:
    type: EvidenceType
    detail: str
    severity: int  # 1-10


@dataclass(frozen=True)
class FragileFile:
    path: str
    reasons: list[str]
    evidence: list[FragileEvidence]
    fragile_score: int
    recommendation: str


@dataclass(frozen=True)
class BusiestPeriod:
    start: str
    end: str
    commits: int


@dataclass(frozen=True)
class CommitPattern:
    type: PatternType
    description: str
    average_commits_per_week: float
    longest_gap_days: int
    busiest_period: Optional[BusiestPeriod]


@dataclass(frozen=True)
class TimelineEvent:
    date: str
    type: EventType
    description: str
    files: Optional[list[str]] = None
    author: Optional[str] = None


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str


@dataclass(frozen=True)
class GitHistory:
    """Everything the history analysis produces for one repository."""

    analyzed_at: str
    repo_path: str

    total_commits: int
    total_authors: int
    first_commit: Optional[CommitRecord]
    last_commit: Optional[CommitRecord]
    date_range: Optional[DateRange]

    file_churn: dict[str, FileChurn]
    file_ownership: dict[str, FileOwnership]
    author_stats: dict[str, AuthorStats]

    hot_paths: list[HotPath]
    stable_core: list[str]
    fragile_files: list[FragileFile]
    commit_pattern: CommitPattern

    recent_commits: list[CommitRecord]  # newest first
    timeline: list[TimelineEvent]

    high_churn_files: list[str]
    multi_author_files: list[str]
    recently_fragile: list[str]

    history_version: str = "1.0"

    def fragile_for(self, path: str) -> Optional[FragileFile]:
        for fragile in self.fragile_files:
            if fragile.path == path:
                return fragile
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys.

        Keys of the per-file and per-author maps are paths and names, so they
        are kept verbatim.
        """
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, dict):
                value = {key: to_camel(record) for key, record in value.items()}
            else:
                value = to_camel(value)
            out[_camel(f.name)] = value
        return out


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_camel(value: Any) -> Any:
    """Convert a record (or list of records) to plain JSON-ready data."""
    if is_dataclass(value) and not isinstance(value, type):
        value = asdict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {_camel(k): to_camel(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_camel(v) for v in value]
    return value
