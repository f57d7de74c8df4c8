"""Configuration loading and management for repo-historian.

Configuration sources are merged in priority order:
    1. Defaults (defined in HistorianConfig)
    2. Global config (~/.repo-historian.toml)
    3. Project config (./repo-historian.toml)
    4. Explicit config file
    5. Environment variables (HISTORIAN_* prefix)
    6. Overrides passed as kwargs (typically CLI flags)

Example:
    >>> config = load_config(max_commits=200)
    >>> config.max_commits
    200
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, get_type_hints

from .exceptions import HistorianError


@dataclass(frozen=True)
class HistoryThresholds:
    """Scoring weights and thresholds for the history heuristics.

    The defaults reproduce the reference scoring; changing them shifts every
    churn score and derived insight, so treat them as a calibration knob.

    Attributes:
        Churn score:
            churn_commit_weight / churn_commit_cap: per-commit points, capped
            churn_author_weight: points per author beyond the first
            churn_many_authors / churn_many_authors_bonus: extra points above N authors
            churn_recent_30_weight / churn_recent_90_weight: recency points
            churn_large_changes / churn_huge_changes / churn_size_bonus:
                cumulative bonuses for total line changes

        Recency windows:
            recent_window_days / extended_window_days

        Ownership:
            disputed_min_contributors / disputed_max_percent
            shared_min_contributors / shared_max_percent
            max_contributors: contributors kept per ownership record

        Hot paths / stable core / fragile files / pattern / timeline:
            see field comments below.
    """

    # === Churn score ===
    churn_commit_weight: int = 2
    churn_commit_cap: int = 30
    churn_author_weight: int = 5
    churn_many_authors: int = 3
    churn_many_authors_bonus: int = 10
    churn_recent_30_weight: int = 3
    churn_recent_90_weight: int = 1
    churn_large_changes: int = 500
    churn_huge_changes: int = 1000
    churn_size_bonus: int = 10

    # === Recency windows ===
    recent_window_days: int = 30
    extended_window_days: int = 90

    # === Ownership ===
    disputed_min_contributors: int = 3
    disputed_max_percent: int = 50  # top share strictly below this
    shared_min_contributors: int = 2
    shared_max_percent: int = 70
    max_contributors: int = 5

    # === Hot paths ===
    hot_medium_score: int = 30  # strictly above
    hot_high_score: int = 50
    hot_recent_commits: int = 5
    hot_many_authors: int = 4
    max_hot_paths: int = 20

    # === Stable core ===
    stable_min_commits: int = 2
    stable_min_idle_days: int = 60
    stable_max_score: int = 15
    max_stable_core: int = 15

    # === Fragile files ===
    fragile_churn_score: int = 40  # strictly above
    fragile_many_authors: int = 4
    fragile_fix_commits: int = 3
    fragile_rewrite_recent: int = 5
    fragile_rewrite_max_total: int = 10
    fragile_rewrite_severity: int = 7
    fragile_yoyo_changes: int = 1000
    fragile_yoyo_min_commits: int = 5  # strictly above
    max_fragile_files: int = 20

    # === Commit pattern ===
    abandoned_after_days: int = 180
    active_per_week: float = 5.0
    steady_per_week: float = 1.0
    sporadic_gap_days: int = 30
    busiest_window_days: int = 30

    # === Timeline ===
    timeline_commits: int = 20
    large_change_files: int = 10
    quiet_period_days: int = 14
    timeline_max_files: int = 5

    # === Quick lookups ===
    high_churn_count: int = 10
    multi_author_min: int = 3
    recently_fragile_score: int = 5
    recently_fragile_count: int = 10

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        for name in ("disputed_max_percent", "shared_max_percent"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be between 0 and 100")

        if self.recent_window_days > self.extended_window_days:
            raise ValueError("recent_window_days must not exceed extended_window_days")

        if self.churn_large_changes > self.churn_huge_changes:
            raise ValueError("churn_large_changes must not exceed churn_huge_changes")

        if self.steady_per_week > self.active_per_week:
            raise ValueError("steady_per_week must not exceed active_per_week")

        caps = [
            "max_contributors",
            "max_hot_paths",
            "max_stable_core",
            "max_fragile_files",
            "timeline_commits",
            "timeline_max_files",
            "high_churn_count",
            "recently_fragile_count",
        ]
        for name in caps:
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")


DEFAULT_THRESHOLDS = HistoryThresholds()


@dataclass(frozen=True)
class HistorianConfig:
    """Configuration for one history analysis run.

    Attributes:
        max_commits: Newest commits to read from the log
        git_workers: Parallel per-commit diff lookups
        timeout_seconds: Budget for the whole extraction phase
        excluded_dirs: Directory names whose files are dropped from commits
        lockfile_patterns: Path substrings never reported as hot paths
        recent_commits_limit: Commits kept on GitHistory.recent_commits
        thresholds: Scoring weights and thresholds
    """

    max_commits: int = 1000
    git_workers: int = 8
    timeout_seconds: int = 120

    excluded_dirs: tuple[str, ...] = (
        "node_modules",
        "vendor",
        "bower_components",
        ".venv",
        "venv",
        "site-packages",
    )
    lockfile_patterns: tuple[str, ...] = (
        "package-lock",
        "yarn.lock",
        "pnpm-lock.yaml",
        "poetry.lock",
        "Pipfile.lock",
        "Cargo.lock",
        "composer.lock",
        "Gemfile.lock",
        "go.sum",
    )

    recent_commits_limit: int = 50

    thresholds: HistoryThresholds = field(default_factory=HistoryThresholds)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_commits < 1:
            raise ValueError("max_commits must be at least 1")
        if self.git_workers < 1:
            raise ValueError("git_workers must be at least 1")
        if self.timeout_seconds < 1:
            raise ValueError("timeout_seconds must be at least 1")
        if self.recent_commits_limit < 0:
            raise ValueError("recent_commits_limit must be non-negative")


DEFAULT_CONFIG = HistorianConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> HistorianConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated HistorianConfig instance

    Raises:
        HistorianError: If a config file is invalid or missing, or a value
            fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".repo-historian.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise HistorianError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "repo-historian.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise HistorianError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise HistorianError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise HistorianError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    merged.update({k: v for k, v in overrides.items() if v is not None})

    thresholds_dict = merged.pop("thresholds", None)
    if isinstance(thresholds_dict, dict):
        try:
            merged["thresholds"] = HistoryThresholds(**thresholds_dict)
        except (TypeError, ValueError) as e:
            raise HistorianError(f"Invalid [thresholds] config: {e}")
    elif isinstance(thresholds_dict, HistoryThresholds):
        merged["thresholds"] = thresholds_dict

    # TOML arrays arrive as lists
    for key in ("excluded_dirs", "lockfile_patterns"):
        if isinstance(merged.get(key), list):
            merged[key] = tuple(merged[key])

    try:
        return HistorianConfig(**merged)
    except (TypeError, ValueError) as e:
        raise HistorianError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from HISTORIAN_* environment variables.

    Only scalar fields are read (HISTORIAN_MAX_COMMITS, HISTORIAN_GIT_WORKERS,
    HISTORIAN_TIMEOUT_SECONDS, HISTORIAN_RECENT_COMMITS_LIMIT).
    """
    type_hints = get_type_hints(HistorianConfig)

    result: dict[str, Any] = {}

    for field_name in HistorianConfig.__dataclass_fields__:
        env_key = f"HISTORIAN_{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        if type_hints.get(field_name) is not int:
            continue

        try:
            result[field_name] = int(env_value)
        except ValueError:
            raise HistorianError(f"Invalid {env_key}: expected an integer, got '{env_value}'")

    return result


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file and return the parsed dict."""
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        return tomllib.load(f)
