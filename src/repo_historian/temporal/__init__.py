"""Temporal analysis: git history, churn, ownership and derived insights."""

from .analyzer import analyze_history, build_history
from .authors import assign_owned_files, build_author_stats
from .churn import build_file_churn, churn_score
from .git_extractor import GitExtractor, build_commit_record
from .insights import (
    analyze_commit_pattern,
    identify_fragile_files,
    identify_hot_paths,
    identify_stable_core,
)
from .models import (
    AuthorStats,
    BusiestPeriod,
    CommitPattern,
    CommitRecord,
    Contributor,
    DateRange,
    EventType,
    EvidenceType,
    FileChurn,
    FileOwnership,
    FragileEvidence,
    FragileFile,
    GitHistory,
    HotPath,
    OwnershipClarity,
    PatternType,
    RiskLevel,
    TimelineEvent,
)
from .ownership import build_file_ownership, classify_ownership
from .timeline import build_timeline

__all__ = [
    "AuthorStats",
    "BusiestPeriod",
    "CommitPattern",
    "CommitRecord",
    "Contributor",
    "DateRange",
    "EventType",
    "EvidenceType",
    "FileChurn",
    "FileOwnership",
    "FragileEvidence",
    "FragileFile",
    "GitExtractor",
    "GitHistory",
    "HotPath",
    "OwnershipClarity",
    "PatternType",
    "RiskLevel",
    "TimelineEvent",
    "analyze_commit_pattern",
    "analyze_history",
    "assign_owned_files",
    "build_author_stats",
    "build_commit_record",
    "build_file_churn",
    "build_file_ownership",
    "build_history",
    "build_timeline",
    "churn_score",
    "classify_ownership",
    "identify_fragile_files",
    "identify_hot_paths",
    "identify_stable_core",
]
