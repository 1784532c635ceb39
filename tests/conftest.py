"""Shared test fixtures and configuration for the AQI Reconcile test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from pipeline.clock import FixedClock
from pipeline.ingestion.models import (
    AQIReading, ConfidenceLevel, DataSource, FreshnessStatus,
)

# Thirty minutes after the cached CPCB readings were published
NOW = datetime(2025, 1, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def clock():
    return FixedClock(NOW)


@pytest.fixture()
def make_reading():
    """Factory for AQIReadings with sensible defaults."""
    def _make(
        source=DataSource.GOVERNMENT,
        aqi=100,
        freshness=FreshnessStatus.FRESH,
        confidence=ConfidenceLevel.HIGH,
        timestamp=NOW - timedelta(minutes=10),
        notes=None,
    ):
        return AQIReading(
            source=source,
            aqi=aqi,
            pollutants=[],
            timestamp=timestamp,
            freshness=freshness,
            confidence=confidence,
            notes=notes,
        )
    return _make


@pytest.fixture(autouse=True)
def _no_openaq_key(monkeypatch):
    """Keep tests off the network unless a test sets the key explicitly."""
    monkeypatch.delenv("OPENAQ_API_KEY", raising=False)
