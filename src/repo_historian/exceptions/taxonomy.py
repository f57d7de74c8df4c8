"""Error taxonomy with error codes and recovery hints.

Error Code Convention:
    HS4xx - Temporal (git history) errors
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Structured error codes for logging and debugging."""

    # Temporal errors (HS4xx)
    HS400 = "HS400"  # Git not found
    HS401 = "HS401"  # Git log failed
    HS402 = "HS402"  # Extraction timeout
    HS403 = "HS403"  # Per-commit diff failed


@dataclass
class HistorianFault(Exception):
    """Base exception with structured context.

    Attributes:
        message: Human-readable error description
        code: Structured error code for categorization
        context: Additional context (repository path, commit hash, ...)
        recoverable: Whether the run can continue without this data
        recovery_hint: Suggested fix for the user
    """

    message: str
    code: ErrorCode
    context: dict[str, Any] = field(default_factory=dict)
    recoverable: bool = True
    recovery_hint: str | None = None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def to_json(self) -> dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": self.context,
            "recoverable": self.recoverable,
            "recovery_hint": self.recovery_hint,
        }


class TemporalError(HistorianFault):
    """Errors while reading git history (HS4xx)."""

    pass
