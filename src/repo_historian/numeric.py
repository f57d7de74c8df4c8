"""Small numeric helpers shared by the history aggregators."""

import math
from datetime import datetime, timezone

MS_PER_DAY = 24 * 60 * 60 * 1000


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with .5 going up, unlike Python's banker's rounding.

    Percentages and averages are reported this way so 12.5% reads as 13%.
    """
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Half-up rounding to an int."""
    return int(math.floor(value + 0.5))


def days_between(later_ms: int, earlier_ms: int) -> float:
    """Fractional days between two epoch-millisecond timestamps."""
    return (later_ms - earlier_ms) / MS_PER_DAY


def to_epoch_ms(moment: datetime) -> int:
    """Epoch milliseconds for a datetime; naive values are taken as UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def parse_iso_ms(value: str) -> int:
    """Epoch milliseconds for an ISO-8601 string, or 0 when unparseable."""
    try:
        return to_epoch_ms(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except (ValueError, AttributeError):
        return 0


def iso_date(ms: float) -> str:
    """YYYY-MM-DD (UTC) for an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d")
