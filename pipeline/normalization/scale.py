"""
Scale normalizer.

Brings source-specific AQI values onto the Indian AQI reference scale.
International feeds report US-EPA AQI and are scaled by a flat 0.95;
every other source is already on the reference scale. IoT values are
uncalibrated and never rescaled.
"""

import logging
import math

from pipeline.ingestion.models import DataSource

logger = logging.getLogger(__name__)

INTERNATIONAL_SCALE_FACTOR = 0.95

SCALE_FACTORS = {
    DataSource.INTERNATIONAL: INTERNATIONAL_SCALE_FACTOR,
    DataSource.GOVERNMENT:    1.0,
    DataSource.HISTORICAL:    1.0,
    DataSource.IOT_SENSOR:    1.0,
}

# US-EPA PM2.5 breakpoints: (c_low, c_high, i_low, i_high), μg/m³ → AQI
PM25_BREAKPOINTS = [
    (0.0,   12.0,  0,   50),
    (12.1,  35.4,  51,  100),
    (35.5,  55.4,  101, 150),
    (55.5,  150.4, 151, 200),
    (150.5, 250.4, 201, 300),
    (250.5, 350.4, 301, 400),
    (350.5, 500.4, 401, 500),
]
PM25_OFF_SCALE_AQI = 500


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 towards positive infinity (not to even)."""
    return math.floor(value + 0.5)


def normalize_aqi(value: float, source: DataSource) -> float:
    """
    Adjust a raw AQI value from a source's scale to the reference scale.

    Only INTERNATIONAL readings are changed (× 0.95, rounded to an integer);
    the others are returned as given.
    """
    factor = SCALE_FACTORS[source]
    if factor == 1.0:
        return value
    normalized = round_half_up(value * factor)
    logger.debug("Normalized %s AQI %s → %s", source.value, value, normalized)
    return normalized


def aqi_from_pm25(pm25: float) -> int:
    """
    Approximate AQI from a PM2.5 concentration using linear interpolation
    within the US-EPA breakpoint band. Concentrations that fall in no band
    (including the gaps between bands and anything above 500.4) map to 500.
    """
    for c_low, c_high, i_low, i_high in PM25_BREAKPOINTS:
        if c_low <= pm25 <= c_high:
            return round_half_up(
                ((i_high - i_low) / (c_high - c_low)) * (pm25 - c_low) + i_low
            )
    return PM25_OFF_SCALE_AQI
