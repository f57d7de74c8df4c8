"""Exception hierarchy for repo-historian."""

from .base import HistorianError
from .config import ConfigurationError, InvalidConfigError, InvalidPathError
from .taxonomy import ErrorCode, HistorianFault, TemporalError

__all__ = [
    "HistorianError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
    "ErrorCode",
    "HistorianFault",
    "TemporalError",
]
