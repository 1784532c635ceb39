"""
OpenAQ (international) connector.

Fetches the latest measurements for a city from the OpenAQ v2 API and turns
them into an INTERNATIONAL AQIReading. The AQI is derived from PM2.5 with
the US-EPA breakpoints and then rescaled to the Indian reference scale.

Never raises: timeouts, HTTP errors, malformed responses and missing
fields all degrade to an unavailable reading whose notes explain why.
"""

import logging
import os
from typing import List, Optional

import httpx
from dotenv import load_dotenv

from pipeline.classification.freshness import classify_freshness, parse_timestamp
from pipeline.clock import Clock, utc_now
from pipeline.ingestion.models import (
    AQIReading, City, ConfidenceLevel, DataSource, Pollutant,
)
from pipeline.normalization.scale import aqi_from_pm25, normalize_aqi

load_dotenv()

logger = logging.getLogger(__name__)

OPENAQ_BASE_URL = "https://api.openaq.org/v2/latest"
DEFAULT_COUNTRY = "IN"
REQUEST_TIMEOUT = 10  # seconds


def _safe_float(val) -> Optional[float]:
    """Safely convert a value to float, returning None on failure."""
    if val is None or val == "-" or val == "":
        return None
    try:
        return float(val)
    except (TypeError, ValueError):
        return None


def _parse_measurements(measurements: list) -> List[Pollutant]:
    """Map OpenAQ measurement dicts to Pollutants, skipping entries with no parameter."""
    pollutants = []
    for m in measurements:
        parameter = m.get("parameter")
        if not parameter:
            continue
        pollutants.append(Pollutant(
            name=str(parameter).upper(),
            value=_safe_float(m.get("value")),
            unit=m.get("unit") or "",
        ))
    return pollutants


def _derive_aqi(measurements: list) -> Optional[int]:
    """AQI from the pm25 measurement, rescaled for the INTERNATIONAL source."""
    pm25 = next((m for m in measurements if m.get("parameter") == "pm25"), None)
    if pm25 is None:
        return None
    value = _safe_float(pm25.get("value"))
    if value is None:
        return None
    return int(normalize_aqi(aqi_from_pm25(value), DataSource.INTERNATIONAL))


def _failure(reason: str) -> AQIReading:
    return AQIReading.unavailable(
        DataSource.INTERNATIONAL,
        notes=f"Failed to fetch OpenAQ data: {reason}",
    )


def fetch_openaq_reading(city: City, clock: Clock = utc_now) -> AQIReading:
    """
    Fetch the latest OpenAQ reading for a city.

    Args:
        city: The city to query; openaq_name is used when set.
        clock: Source of "now" for freshness classification.

    Returns:
        AQIReading (source INTERNATIONAL). Unavailable on any failure.
    """
    api_key = os.getenv("OPENAQ_API_KEY", "")
    if not api_key:
        logger.error("OPENAQ_API_KEY not set in environment")
        return _failure("OpenAQ API key not configured")

    city_name = city.openaq_name or city.name
    url = os.getenv("OPENAQ_BASE_URL", OPENAQ_BASE_URL)
    params = {
        "country": os.getenv("OPENAQ_COUNTRY", DEFAULT_COUNTRY),
        "city": city_name,
        "limit": 1,
    }
    headers = {"Accept": "application/json", "X-API-Key": api_key}

    logger.info("Fetching OpenAQ data for city: %s", city_name)
    try:
        resp = httpx.get(url, params=params, headers=headers, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
    except httpx.TimeoutException:
        logger.error("OpenAQ request timed out for %s", city_name)
        return _failure("request timed out")
    except httpx.HTTPStatusError as e:
        logger.error("OpenAQ HTTP error %s for %s", e.response.status_code, city_name)
        return _failure(f"OpenAQ API returned {e.response.status_code}")
    except httpx.RequestError as e:
        logger.error("OpenAQ network error for %s: %s", city_name, e)
        return _failure(f"network error ({e})")

    try:
        payload = resp.json()
    except ValueError:
        logger.error("OpenAQ returned malformed JSON for %s", city_name)
        return _failure("malformed JSON response")

    results = payload.get("results") if isinstance(payload, dict) else None
    if not results:
        logger.warning("OpenAQ returned no results for %s", city_name)
        return AQIReading.unavailable(
            DataSource.INTERNATIONAL,
            notes=(
                f"No OpenAQ data available for {city.name}. City may not have "
                "monitoring stations in OpenAQ network."
            ),
        )

    try:
        measurements = results[0].get("measurements") or []
        aqi = _derive_aqi(measurements)
        pollutants = _parse_measurements(measurements)
        timestamp = parse_timestamp(measurements[0].get("lastUpdated")) if measurements else None
    except (AttributeError, TypeError) as e:
        logger.error("OpenAQ response for %s has unexpected shape: %s", city_name, e)
        return _failure("unexpected response shape")

    reading = AQIReading(
        source=DataSource.INTERNATIONAL,
        aqi=aqi,
        pollutants=pollutants,
        timestamp=timestamp,
        freshness=classify_freshness(timestamp, clock()),
        confidence=ConfidenceLevel.HIGH if aqi is not None else ConfidenceLevel.LOW,
        notes="Data from OpenAQ network. AQI calculated from PM2.5 concentration.",
    )
    logger.info("OpenAQ reading for %s: %s", city.id, reading)
    return reading
