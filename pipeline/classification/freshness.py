"""
Freshness classifier.

Buckets a reading's age into a recency status:
    no timestamp   → unavailable
    age < 1h       → fresh
    1h ≤ age < 6h  → aging
    age ≥ 6h       → stale
"""

import logging
from datetime import datetime
from typing import Optional, Union

from pipeline.clock import as_utc
from pipeline.ingestion.models import FreshnessStatus

logger = logging.getLogger(__name__)

FRESH_MAX_HOURS = 1.0
AGING_MAX_HOURS = 6.0

TimestampLike = Union[datetime, str, None]


def parse_timestamp(value: TimestampLike) -> Optional[datetime]:
    """Parse an ISO-8601 string (or pass through a datetime) into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable timestamp: %r", value)
            return None
    return as_utc(dt)


def _age_hours(timestamp: datetime, now: datetime) -> float:
    return (as_utc(now) - timestamp).total_seconds() / 3600.0


def classify_freshness(timestamp: TimestampLike, now: datetime) -> FreshnessStatus:
    """
    Classify how recent a reading is.

    Args:
        timestamp: Reading instant (datetime or ISO-8601 string) or None.
        now: The current instant, supplied by the caller's clock.

    Returns:
        FreshnessStatus bucket. Timestamps in the future count as fresh.
    """
    ts = parse_timestamp(timestamp)
    if ts is None:
        return FreshnessStatus.UNAVAILABLE

    hours = _age_hours(ts, now)
    if hours < FRESH_MAX_HOURS:
        return FreshnessStatus.FRESH
    if hours < AGING_MAX_HOURS:
        return FreshnessStatus.AGING
    return FreshnessStatus.STALE


def time_since(timestamp: TimestampLike, now: datetime) -> str:
    """Human-readable age: 'Just now', '12m ago', '3h ago', '2d ago'."""
    ts = parse_timestamp(timestamp)
    if ts is None:
        return "Unknown"

    seconds = _age_hours(ts, now) * 3600
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    return f"{days}d ago"


def format_timestamp(timestamp: TimestampLike) -> str:
    """Format as '01 Jan 2025, 09:00 UTC', or 'N/A' when absent."""
    ts = parse_timestamp(timestamp)
    if ts is None:
        return "N/A"
    return ts.strftime("%d %b %Y, %H:%M UTC")
