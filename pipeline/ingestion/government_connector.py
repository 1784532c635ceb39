"""
Government (CPCB) connector.

Serves the cached CPCB monitoring-network readings from
config/government_cache.json. CPCB reports on the Indian AQI scale, so no
rescaling is applied. Freshness is derived from the reading timestamp.
"""

import logging
from typing import Optional

from pipeline.classification.freshness import classify_freshness, parse_timestamp
from pipeline.clock import Clock, utc_now
from pipeline.config import load_json_config
from pipeline.ingestion.models import (
    AQIReading, City, ConfidenceLevel, DataSource, Pollutant,
)
from pipeline.normalization.scale import normalize_aqi

logger = logging.getLogger(__name__)

CACHE_FILE = "government_cache.json"

_CACHE: Optional[dict] = None


def _load_cache() -> dict:
    global _CACHE
    if _CACHE is None:
        _CACHE = load_json_config(CACHE_FILE, required=False, default={}).get("cities", {})
    return _CACHE


def reset_cache() -> None:
    global _CACHE
    _CACHE = None


def fetch_government_reading(city: City, clock: Clock = utc_now) -> AQIReading:
    """
    Return the latest cached CPCB reading for a city.

    Returns:
        AQIReading; an unavailable reading if the city is not in the cache.
    """
    data = _load_cache().get(city.id)
    if not data or data.get("aqi") is None:
        logger.warning("No CPCB data cached for %s", city.id)
        return AQIReading.unavailable(
            DataSource.GOVERNMENT,
            notes=f"No CPCB data available for {city.name}.",
        )

    timestamp = parse_timestamp(data.get("timestamp"))
    pollutants = [
        Pollutant(name="PM2.5", value=data.get("pm25"), unit="µg/m³"),
        Pollutant(name="PM10",  value=data.get("pm10"), unit="µg/m³"),
        Pollutant(name="NO₂",   value=data.get("no2"),  unit="ppb"),
    ]

    reading = AQIReading(
        source=DataSource.GOVERNMENT,
        aqi=int(normalize_aqi(data["aqi"], DataSource.GOVERNMENT)),
        pollutants=pollutants,
        timestamp=timestamp,
        freshness=classify_freshness(timestamp, clock()),
        confidence=ConfidenceLevel.HIGH,
        notes="Data from CPCB monitoring network. Considered authoritative for regulatory purposes.",
    )
    logger.info("CPCB reading for %s: %s", city.id, reading)
    return reading
