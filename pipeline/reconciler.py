"""
Reconciliation orchestration.

Fans out to the provider connectors concurrently, waits for all of them,
then runs the pure reconciliation functions over the collected snapshot:

    connectors ──► [readings] ──► analyze_agreement
                              ├─► calculate_derived_aqi
                              └─► build_warnings
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from pipeline.clock import Clock, utc_now
from pipeline.confidence.aggregator import DerivedAQI, calculate_derived_aqi
from pipeline.confidence.agreement import AgreementAnalysis, analyze_agreement
from pipeline.confidence.warnings import build_warnings
from pipeline.ingestion.cities import get_city
from pipeline.ingestion.government_connector import fetch_government_reading
from pipeline.ingestion.historical_connector import fetch_historical_reading
from pipeline.ingestion.models import AQIReading, City, DataSource
from pipeline.ingestion.openaq_connector import fetch_openaq_reading
from pipeline.ingestion.validator import validate_reading

logger = logging.getLogger(__name__)

Fetcher = Callable[[City, Clock], AQIReading]


@dataclass
class ReconciliationResult:
    """Everything computed for one city in one request."""
    readings: List[AQIReading]
    agreement: AgreementAnalysis
    derived: DerivedAQI
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "readings": [r.to_dict() for r in self.readings],
            "agreement": self.agreement.to_dict(),
            "derived": self.derived.to_dict(),
            "warnings": list(self.warnings),
        }


def default_fetchers() -> Dict[DataSource, Fetcher]:
    """Provider connectors in presentation order."""
    return {
        DataSource.GOVERNMENT:    lambda city, clock: fetch_government_reading(city, clock),
        DataSource.INTERNATIONAL: lambda city, clock: fetch_openaq_reading(city, clock),
        DataSource.HISTORICAL:    lambda city, clock: fetch_historical_reading(city),
    }


def _run_fetcher(source: DataSource, fetcher: Fetcher, city: City, clock: Clock) -> AQIReading:
    try:
        return fetcher(city, clock)
    except Exception as exc:
        # Connectors must not raise; keep the join intact if one does.
        logger.error("Connector %s raised for %s: %s", source.value, city.id, exc)
        return AQIReading.unavailable(source, notes=f"{source.value} connector failed: {exc}")


def collect_readings(
    city: City,
    clock: Clock = utc_now,
    iot_reading: Optional[AQIReading] = None,
    fetchers: Optional[Dict[DataSource, Fetcher]] = None,
) -> List[AQIReading]:
    """
    Fetch one reading per provider concurrently (wait-for-all).

    Returns:
        Readings in fetcher order, followed by iot_reading if given.
    """
    fetchers = fetchers if fetchers is not None else default_fetchers()

    with ThreadPoolExecutor(max_workers=max(1, len(fetchers))) as pool:
        futures = [
            pool.submit(_run_fetcher, source, fetcher, city, clock)
            for source, fetcher in fetchers.items()
        ]
        readings = [f.result() for f in futures]

    if iot_reading is not None:
        readings.append(iot_reading)

    now = clock()
    for reading in readings:
        validate_reading(reading, now)

    logger.info(
        "Collected %d readings for %s (%d usable)",
        len(readings), city.id, sum(1 for r in readings if r.is_usable),
    )
    return readings


def reconcile(readings: List[AQIReading]) -> ReconciliationResult:
    """Run agreement analysis, aggregation and warnings over a reading snapshot."""
    agreement = analyze_agreement(readings)
    derived = calculate_derived_aqi(readings)
    return ReconciliationResult(
        readings=list(readings),
        agreement=agreement,
        derived=derived,
        warnings=build_warnings(readings, agreement),
    )


def reconcile_city(
    city_id: str,
    clock: Clock = utc_now,
    iot_reading: Optional[AQIReading] = None,
    fetchers: Optional[Dict[DataSource, Fetcher]] = None,
) -> ReconciliationResult:
    """
    Collect and reconcile readings for a city.

    Raises:
        KeyError: If city_id is not in the registry.
    """
    city = get_city(city_id)
    if city is None:
        raise KeyError(f"Unknown city '{city_id}'")

    readings = collect_readings(city, clock=clock, iot_reading=iot_reading, fetchers=fetchers)
    result = reconcile(readings)
    logger.info(
        "Reconciled %s: agreement=%s %s",
        city.id, result.agreement.level.value, result.derived,
    )
    return result
