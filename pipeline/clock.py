"""
Wall-clock source for everything that depends on "now".

Connectors and the freshness classifier take a Clock instead of calling
datetime.now() so tests can pin the instant.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(instant: datetime) -> datetime:
    """Treat a naive datetime as UTC; convert an aware one to UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


class FixedClock:
    """A clock frozen at a single instant."""

    def __init__(self, instant: datetime):
        self.instant = as_utc(instant)

    def __call__(self) -> datetime:
        return self.instant

    def __repr__(self) -> str:
        return f"FixedClock({self.instant.isoformat()})"
