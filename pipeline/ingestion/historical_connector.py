"""
Historical dataset connector.

Serves readings from the cached historical dataset
(config/historical_cache.json). Historical data is stale by definition and
carries medium confidence regardless of its timestamp.
"""

import logging
from typing import Optional

from pipeline.classification.freshness import parse_timestamp
from pipeline.config import load_json_config
from pipeline.ingestion.models import (
    AQIReading, City, ConfidenceLevel, DataSource, FreshnessStatus, Pollutant,
)

logger = logging.getLogger(__name__)

CACHE_FILE = "historical_cache.json"

_CACHE: Optional[dict] = None


def _load_cache() -> dict:
    global _CACHE
    if _CACHE is None:
        _CACHE = load_json_config(CACHE_FILE, required=False, default={}).get("cities", {})
    return _CACHE


def reset_cache() -> None:
    global _CACHE
    _CACHE = None


def historical_base_aqi(city_id: str) -> Optional[int]:
    """Cached historical AQI for a city id, or None."""
    data = _load_cache().get(city_id)
    return data.get("aqi") if data else None


def fetch_historical_reading(city: City) -> AQIReading:
    """Return the cached historical reading for a city (always stale)."""
    data = _load_cache().get(city.id)
    if not data or data.get("aqi") is None:
        logger.warning("No historical data cached for %s", city.id)
        return AQIReading.unavailable(
            DataSource.HISTORICAL,
            notes=f"No historical data available for {city.name}.",
        )

    reading = AQIReading(
        source=DataSource.HISTORICAL,
        aqi=int(data["aqi"]),
        pollutants=[
            Pollutant(name="PM2.5", value=data.get("pm25"), unit="µg/m³"),
            Pollutant(name="PM10",  value=data.get("pm10"), unit="µg/m³"),
        ],
        timestamp=parse_timestamp(data.get("timestamp")),
        freshness=FreshnessStatus.STALE,
        confidence=ConfidenceLevel.MEDIUM,
        notes=(
            "Historical dataset (Kaggle-sourced). Useful for trend analysis "
            "but may not reflect current conditions."
        ),
    )
    logger.info("Historical reading for %s: %s", city.id, reading)
    return reading
