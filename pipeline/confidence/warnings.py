"""
Data-quality warnings shown alongside a reconciliation result.
"""

import logging
from typing import Iterable, List

from pipeline.confidence.agreement import AgreementAnalysis, AgreementLevel, usable_readings
from pipeline.ingestion.models import AQIReading, DataSource, FreshnessStatus
from pipeline.normalization.scale import round_half_up

logger = logging.getLogger(__name__)

IOT_DEVIATION_WARN = 50


def _sources(readings: List[AQIReading]) -> str:
    return ", ".join(r.source.value for r in readings)


def build_warnings(readings: Iterable[AQIReading], agreement: AgreementAnalysis) -> List[str]:
    """
    Collect human-readable warnings about missing, stale, single-source,
    disagreeing or deviating IoT data, in that order.
    """
    readings = list(readings)
    warnings: List[str] = []

    unavailable = [r for r in readings if r.freshness is FreshnessStatus.UNAVAILABLE]
    if unavailable:
        warnings.append(
            f"Missing data from: {_sources(unavailable)}. Cross-validation limited."
        )

    stale = [r for r in readings if r.freshness is FreshnessStatus.STALE]
    if stale:
        warnings.append(
            f"Stale data from: {_sources(stale)}. Values may not reflect current conditions."
        )

    usable = usable_readings(readings)
    if len(usable) == 1:
        warnings.append(
            f"Only {usable[0].source.value} data available. "
            "Cannot cross-validate with other sources."
        )

    if agreement.level is AgreementLevel.OUTLIER and agreement.spread is not None:
        warnings.append(
            f"Significant disagreement between sources (spread: {agreement.spread} AQI points). "
            "Possible local variations, sensor issues, or timing differences."
        )

    iot = next((r for r in readings if r.source is DataSource.IOT_SENSOR), None)
    if iot is not None and iot.aqi is not None:
        others = [r.aqi for r in readings if r.source is not DataSource.IOT_SENSOR and r.aqi is not None]
        if others:
            iot_diff = abs(iot.aqi - sum(others) / len(others))
            if iot_diff > IOT_DEVIATION_WARN:
                warnings.append(
                    f"IoT sensor reading differs significantly from other sources "
                    f"(±{round_half_up(iot_diff)} AQI). Possible local hotspot, sensor drift, "
                    "or calibration issue."
                )

    if warnings:
        logger.info("%d data-quality warning(s) raised", len(warnings))
    return warnings
