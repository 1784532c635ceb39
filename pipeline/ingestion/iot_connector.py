"""
IoT sensor input.

Local sensor values are entered manually or simulated. They are always
fresh at creation, always uncalibrated, and never rescaled.
"""

import logging
import random
from dataclasses import dataclass
from typing import Iterable, Optional

from pipeline.clock import Clock, as_utc, utc_now
from pipeline.ingestion.models import (
    AQI_MAX, AQI_MIN, AQIReading, CityType, ConfidenceLevel, DataSource, FreshnessStatus,
)
from pipeline.normalization.scale import round_half_up

logger = logging.getLogger(__name__)

# (base, span) per city type; simulated AQI = base + U(0, span)
SIMULATION_RANGES = {
    CityType.METRO:      (150, 100),
    CityType.TIER2:      (100, 80),
    CityType.INDUSTRIAL: (200, 150),
}

ALIGNED_MAX_DIFF = 20
VARIATION_MAX_DIFF = 50


@dataclass(frozen=True)
class IoTComparison:
    """How an IoT value compares with the mean of the other sources."""
    level: str  # "info", "success", "warning", "error"
    message: str

    def to_dict(self) -> dict:
        return {"level": self.level, "message": self.message}


def _iot_reading(aqi: int, notes: str, clock: Clock) -> AQIReading:
    return AQIReading(
        source=DataSource.IOT_SENSOR,
        aqi=aqi,
        pollutants=[],
        timestamp=as_utc(clock()),
        freshness=FreshnessStatus.FRESH,
        confidence=ConfidenceLevel.UNCALIBRATED,
        notes=notes,
    )


def build_iot_reading(
    aqi: int,
    city_type: CityType = CityType.METRO,
    clock: Clock = utc_now,
) -> AQIReading:
    """
    Build a reading from a manually entered sensor value.

    Raises:
        ValueError: If aqi is not an integer in [0, 500].
    """
    if isinstance(aqi, bool) or not isinstance(aqi, int):
        raise ValueError(f"IoT AQI must be an integer, got {type(aqi).__name__}")
    if not AQI_MIN <= aqi <= AQI_MAX:
        raise ValueError(f"IoT AQI {aqi} outside [{AQI_MIN}, {AQI_MAX}]")

    city_type = CityType(city_type)
    reading = _iot_reading(
        aqi,
        notes=(
            f"Manual IoT sensor input. City type: {city_type.value.upper()}. "
            "Value is uncalibrated and should be treated with caution."
        ),
        clock=clock,
    )
    logger.info("IoT reading accepted: %s", reading)
    return reading


def simulate_iot_reading(
    city_type: CityType = CityType.METRO,
    clock: Clock = utc_now,
    rng: Optional[random.Random] = None,
) -> AQIReading:
    """Generate a plausible sensor value for the given kind of location."""
    rng = rng or random.Random()
    city_type = CityType(city_type)
    base, span = SIMULATION_RANGES[city_type]
    aqi = round_half_up(base + rng.random() * span)

    reading = _iot_reading(
        aqi,
        notes=(
            f"Simulated IoT sensor reading. City type: {city_type.value.upper()}. "
            "Value is for demonstration purposes."
        ),
        clock=clock,
    )
    logger.info("IoT reading simulated: %s", reading)
    return reading


def compare_iot_reading(iot_aqi: int, other_readings: Iterable[AQIReading]) -> IoTComparison:
    """Compare an IoT value against the average of the other sources that have an AQI."""
    others = [r.aqi for r in other_readings if r.aqi is not None and r.source is not DataSource.IOT_SENSOR]
    if not others:
        return IoTComparison("info", "No other sources available for comparison.")

    avg_other = sum(others) / len(others)
    diff = iot_aqi - avg_other
    abs_diff = abs(diff)

    if abs_diff <= ALIGNED_MAX_DIFF:
        return IoTComparison(
            "success",
            f"IoT reading aligns with other sources (within ±{round_half_up(abs_diff)} AQI).",
        )
    if abs_diff <= VARIATION_MAX_DIFF:
        direction = "higher" if diff > 0 else "lower"
        return IoTComparison(
            "warning",
            f"IoT reading {direction} than average by {round_half_up(abs_diff)} AQI. Possible local variation.",
        )
    sign = "+" if diff > 0 else ""
    return IoTComparison(
        "error",
        f"Significant deviation ({sign}{round_half_up(diff)} AQI). Possible local hotspot, "
        "sensor drift, or calibration needed.",
    )
