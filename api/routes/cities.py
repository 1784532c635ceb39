"""
Cities routes — list and get entries of the city registry.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from pipeline.ingestion.cities import get_cities_by_type, get_city, list_cities
from pipeline.ingestion.models import CityType

router = APIRouter()


@router.get("/")
def list_all_cities(
    city_type: Optional[CityType] = Query(None, alias="type", description="Filter by city type"),
):
    """List all cities with an optional metro/tier2/industrial filter."""
    cities = get_cities_by_type(city_type) if city_type else list_cities()
    return [c.to_dict() for c in cities]


@router.get("/{city_id}")
def get_one_city(city_id: str):
    """Get a single city by id."""
    city = get_city(city_id)
    if not city:
        raise HTTPException(status_code=404, detail=f"City '{city_id}' not found")
    return city.to_dict()
