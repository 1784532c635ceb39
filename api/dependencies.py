"""
Shared FastAPI dependencies.
"""
from pipeline.clock import Clock, utc_now


def get_clock() -> Clock:
    """FastAPI dependency — the wall clock used for freshness and IoT timestamps."""
    return utc_now
