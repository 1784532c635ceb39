"""
Cross-source agreement analyzer.

Looks at the usable readings for a city and classifies how consistent the
sources are with each other, using both the spread (max − min) and the
population standard deviation of their AQI values:

    spread ≤ 20 and σ ≤ 10  → high
    spread ≤ 50 and σ ≤ 25  → partial
    otherwise               → outlier

Fewer than two usable readings cannot be cross-validated and are reported
as insufficient. Boundaries are inclusive.
"""

import enum
import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

from pipeline.ingestion.models import AQIReading

logger = logging.getLogger(__name__)

HIGH_MAX_SPREAD = 20
HIGH_MAX_STD_DEV = 10
PARTIAL_MAX_SPREAD = 50
PARTIAL_MAX_STD_DEV = 25


class AgreementLevel(str, enum.Enum):
    HIGH = "high"
    PARTIAL = "partial"
    OUTLIER = "outlier"
    INSUFFICIENT = "insufficient"


@dataclass(frozen=True)
class AgreementAnalysis:
    """Agreement classification for one set of readings."""
    level: AgreementLevel
    spread: Optional[float]
    explanation: str
    std_dev: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "level": self.level.value,
            "spread": self.spread,
            "std_dev": round(self.std_dev, 2) if self.std_dev is not None else None,
            "explanation": self.explanation,
        }

    def __str__(self) -> str:
        return f"[{self.level.value.upper()}] spread={self.spread} std_dev={self.std_dev}"


def usable_readings(readings: Iterable[AQIReading]) -> List[AQIReading]:
    """Readings with an AQI value and a known freshness, in input order."""
    return [r for r in readings if r.is_usable]


def _population_std_dev(values: List[float]) -> float:
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def analyze_agreement(readings: Iterable[AQIReading]) -> AgreementAnalysis:
    """
    Classify cross-source agreement.

    Args:
        readings: Any collection of AQIReadings; unusable ones are ignored.

    Returns:
        AgreementAnalysis. Never raises.
    """
    usable = usable_readings(readings)

    if not usable:
        return AgreementAnalysis(
            level=AgreementLevel.INSUFFICIENT,
            spread=None,
            explanation="No valid data available from any source.",
        )

    if len(usable) == 1:
        return AgreementAnalysis(
            level=AgreementLevel.INSUFFICIENT,
            spread=None,
            explanation=f"Only {usable[0].source.value} data available. Cannot cross-validate.",
        )

    values = [r.aqi for r in usable]
    spread = max(values) - min(values)
    std_dev = _population_std_dev(values)

    if spread <= HIGH_MAX_SPREAD and std_dev <= HIGH_MAX_STD_DEV:
        result = AgreementAnalysis(
            level=AgreementLevel.HIGH,
            spread=spread,
            std_dev=std_dev,
            explanation=f"Sources agree within {spread} AQI points. High confidence in data.",
        )
    elif spread <= PARTIAL_MAX_SPREAD and std_dev <= PARTIAL_MAX_STD_DEV:
        result = AgreementAnalysis(
            level=AgreementLevel.PARTIAL,
            spread=spread,
            std_dev=std_dev,
            explanation=(
                f"Sources differ by {spread} AQI points. Possible local variations "
                "or measurement timing differences."
            ),
        )
    else:
        result = AgreementAnalysis(
            level=AgreementLevel.OUTLIER,
            spread=spread,
            std_dev=std_dev,
            explanation=(
                f"Significant disagreement (spread: {spread}). Possible sensor calibration "
                "issues, local hotspots, or data staleness."
            ),
        )

    if result.level is AgreementLevel.OUTLIER:
        logger.warning("Source disagreement: %s", result)
    else:
        logger.debug("Source agreement: %s", result)

    return result
