"""
Validator for AQIReading data.

Validates:
- AQI is within the 0–500 scale
- Timestamp is not in the future (5 minute tolerance)
- aqi/freshness follow the conventional pairing (no AQI ⇔ unavailable)
- Pollutant values are non-negative

Validation is advisory: failures are logged and reported, but readings are
never dropped from reconciliation because of them.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List

from pipeline.clock import as_utc
from pipeline.ingestion.models import AQI_MAX, AQI_MIN, AQIReading, FreshnessStatus

logger = logging.getLogger(__name__)

FUTURE_TOLERANCE = timedelta(minutes=5)


@dataclass
class ValidationResult:
    """Result of validating a single AQIReading."""
    is_valid: bool
    reasons: List[str] = field(default_factory=list)

    def add_error(self, msg: str):
        self.reasons.append(msg)
        self.is_valid = False

    def __str__(self) -> str:
        if self.is_valid:
            return "Valid"
        return "Invalid: " + "; ".join(self.reasons)


def validate_reading(reading: AQIReading, now: datetime) -> ValidationResult:
    """
    Validate an AQIReading produced by a connector.

    Args:
        reading: The reading to check.
        now: Current instant, used for the future-timestamp check.

    Returns:
        ValidationResult with is_valid flag and list of failure reasons.
    """
    result = ValidationResult(is_valid=True)

    # 1. AQI scale
    if reading.aqi is not None:
        if not isinstance(reading.aqi, (int, float)):
            result.add_error(f"aqi must be numeric, got {type(reading.aqi).__name__}")
        elif not AQI_MIN <= reading.aqi <= AQI_MAX:
            result.add_error(f"aqi={reading.aqi} outside [{AQI_MIN}, {AQI_MAX}]")

    # 2. Timestamp must not be in the future
    if reading.timestamp is not None and as_utc(reading.timestamp) - as_utc(now) > FUTURE_TOLERANCE:
        result.add_error(f"Timestamp is in the future: {reading.timestamp.isoformat()}")

    # 3. Conventional pairing
    unavailable = reading.freshness is FreshnessStatus.UNAVAILABLE
    if reading.aqi is None and not unavailable:
        result.add_error(f"aqi is missing but freshness is {reading.freshness.value}")
    if reading.aqi is not None and unavailable:
        result.add_error("aqi is present but freshness is unavailable")
    if unavailable and not reading.notes:
        result.add_error("Unavailable reading carries no explanatory notes")

    # 4. Pollutant values
    for pollutant in reading.pollutants:
        if pollutant.value is not None and pollutant.value < 0:
            result.add_error(f"{pollutant.name}={pollutant.value} is negative")

    if not result.is_valid:
        logger.warning(
            "Validation failed for %s reading: %s",
            reading.source.value,
            result.reasons,
        )
    return result
