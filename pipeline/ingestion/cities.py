"""
City registry.

Loads config/cities.json once. The registry is essential, so a missing
file fails fast.
"""

import logging
from typing import List, Optional

from pipeline.config import load_json_config
from pipeline.ingestion.models import City, CityType

logger = logging.getLogger(__name__)

CITIES_FILE = "cities.json"

_CITIES: Optional[List[City]] = None


def _load_cities() -> List[City]:
    global _CITIES
    if _CITIES is not None:
        return _CITIES

    raw = load_json_config(CITIES_FILE, required=True)
    _CITIES = [
        City(
            id=c["id"],
            name=c["name"],
            state=c["state"],
            type=CityType(c["type"]),
            openaq_name=c.get("openaq_name"),
        )
        for c in raw
    ]
    logger.info("Loaded %d cities", len(_CITIES))
    return _CITIES


def reset_cache() -> None:
    global _CITIES
    _CITIES = None


def list_cities() -> List[City]:
    return list(_load_cities())


def get_city(city_id: str) -> Optional[City]:
    """Look up a city by id (case-insensitive). Returns None if unknown."""
    key = city_id.lower()
    return next((c for c in _load_cities() if c.id == key), None)


def get_cities_by_type(city_type: CityType) -> List[City]:
    city_type = CityType(city_type)
    return [c for c in _load_cities() if c.type is city_type]
