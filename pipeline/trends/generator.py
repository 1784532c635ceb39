"""
Synthetic 24-hour AQI trend.

There is no trend database: the series is generated around the city's
historical AQI (or 150 when unknown) with ±15 % random variation.
"""

import random
from datetime import timedelta
from typing import List, Optional

from pipeline.clock import Clock, utc_now
from pipeline.ingestion.historical_connector import historical_base_aqi
from pipeline.ingestion.models import AQI_MAX, AQI_MIN
from pipeline.normalization.scale import round_half_up

DEFAULT_BASE_AQI = 150
VARIATION = 0.3  # total band width as a fraction of the base


def generate_trend_data(
    city_id: str,
    hours: int = 24,
    clock: Clock = utc_now,
    rng: Optional[random.Random] = None,
) -> List[dict]:
    """
    Returns hours + 1 points, oldest first, one per hour ending at now:
    [{"time": iso8601, "aqi": int}, ...]
    """
    rng = rng or random.Random()
    base = historical_base_aqi(city_id) or DEFAULT_BASE_AQI
    now = clock()

    points = []
    for i in range(hours, -1, -1):
        variation = (rng.random() - 0.5) * VARIATION * base
        aqi = max(AQI_MIN, min(AQI_MAX, round_half_up(base + variation)))
        points.append({"time": (now - timedelta(hours=i)).isoformat(), "aqi": aqi})
    return points
