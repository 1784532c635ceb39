"""
Readings routes — reconciled AQI per city, IoT submission, and trend.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from api.dependencies import get_clock
from pipeline.classification.categories import get_aqi_category
from pipeline.clock import Clock
from pipeline.ingestion.cities import get_city
from pipeline.ingestion.iot_connector import (
    build_iot_reading, compare_iot_reading, simulate_iot_reading,
)
from pipeline.ingestion.models import CityType
from pipeline.reconciler import ReconciliationResult, reconcile_city
from pipeline.trends.generator import generate_trend_data

logger = logging.getLogger(__name__)

router = APIRouter()


class IoTSubmission(BaseModel):
    aqi: Optional[int] = Field(None, ge=0, le=500)
    city_type: CityType = CityType.METRO
    simulate: bool = False


def _require_city(city_id: str):
    city = get_city(city_id)
    if not city:
        raise HTTPException(status_code=404, detail=f"City '{city_id}' not found")
    return city


def _serialize(city, result: ReconciliationResult, clock: Clock) -> dict:
    body = result.to_dict()
    body["city"] = city.to_dict()
    body["category"] = (
        get_aqi_category(result.derived.value).to_dict()
        if result.derived.value is not None else None
    )
    body["generated_at"] = clock().isoformat()
    return body


@router.get("/{city_id}")
def get_reconciled_readings(city_id: str, clock: Clock = Depends(get_clock)):
    """Fetch all sources for a city and return readings, agreement, derived AQI and warnings."""
    city = _require_city(city_id)
    result = reconcile_city(city.id, clock=clock)
    return _serialize(city, result, clock)


@router.post("/{city_id}/iot")
def submit_iot_reading(
    city_id: str,
    body: IoTSubmission,
    clock: Clock = Depends(get_clock),
):
    """
    Reconcile a city's sources together with a local IoT sensor value.
    Either supply `aqi` (0–500) or set `simulate` to true.
    """
    city = _require_city(city_id)

    if body.simulate:
        iot_reading = simulate_iot_reading(body.city_type, clock=clock)
    elif body.aqi is None:
        raise HTTPException(status_code=400, detail="Provide 'aqi' or set 'simulate' to true")
    else:
        try:
            iot_reading = build_iot_reading(body.aqi, body.city_type, clock=clock)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    result = reconcile_city(city.id, clock=clock, iot_reading=iot_reading)
    response = _serialize(city, result, clock)
    response["iot_comparison"] = compare_iot_reading(iot_reading.aqi, result.readings).to_dict()
    return response


@router.get("/{city_id}/trend")
def get_trend(
    city_id: str,
    hours: int = Query(24, ge=1, le=168),
    clock: Clock = Depends(get_clock),
):
    """Synthetic hourly AQI trend for the last `hours` hours."""
    city = _require_city(city_id)
    return {"city_id": city.id, "hours": hours, "points": generate_trend_data(city.id, hours, clock=clock)}
