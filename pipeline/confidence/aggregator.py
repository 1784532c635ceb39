"""
Derived-AQI aggregator.

Combines the usable source readings for a city into a single AQI value
using a weighted average. Each reading's weight is the product of three
fixed policy factors:

    weight = source reliability × freshness × stated confidence

The accompanying confidence percentage expresses the total weight as a
share of the best case, where every source is government-grade, fresh and
high-confidence (1.2 per reading), capped at 100.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from pipeline.confidence.agreement import usable_readings
from pipeline.ingestion.models import AQIReading, ConfidenceLevel, DataSource, FreshnessStatus
from pipeline.normalization.scale import round_half_up

logger = logging.getLogger(__name__)

SOURCE_RELIABILITY = {
    DataSource.GOVERNMENT:    1.2,
    DataSource.INTERNATIONAL: 1.0,
    DataSource.HISTORICAL:    0.6,
    DataSource.IOT_SENSOR:    0.3,
}

FRESHNESS_FACTOR = {
    FreshnessStatus.FRESH:       1.0,
    FreshnessStatus.AGING:       0.7,
    FreshnessStatus.STALE:       0.4,
    FreshnessStatus.UNAVAILABLE: 0.0,
}

CONFIDENCE_FACTOR = {
    ConfidenceLevel.HIGH:         1.0,
    ConfidenceLevel.MEDIUM:       0.8,
    ConfidenceLevel.LOW:          0.5,
    ConfidenceLevel.UNCALIBRATED: 0.3,
}

# Per-reading weight of a fresh, high-confidence government reading
BEST_CASE_WEIGHT = 1.2 * 1.0 * 1.0
MAX_CONFIDENCE = 100

METHODOLOGY_RATIONALE = "Higher weights given to government data and fresh readings."


@dataclass(frozen=True)
class DerivedAQI:
    """Single confidence-weighted AQI for a city."""
    value: Optional[int]
    confidence: int  # 0–100
    sources: List[DataSource] = field(default_factory=list)
    methodology: str = ""
    weights: List[Tuple[DataSource, float]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "confidence": self.confidence,
            "sources": [s.value for s in self.sources],
            "methodology": self.methodology,
            "weights": [
                {"source": source.value, "weight": round(weight, 4)}
                for source, weight in self.weights
            ],
        }

    def __str__(self) -> str:
        return (
            f"derived_aqi={self.value} confidence={self.confidence}% "
            f"sources={[s.value for s in self.sources]}"
        )


def reading_weight(reading: AQIReading) -> float:
    """Multiplicative weight of one reading. Unavailable readings weigh 0."""
    weight = 1.0
    weight *= SOURCE_RELIABILITY[reading.source]
    weight *= FRESHNESS_FACTOR[reading.freshness]
    weight *= CONFIDENCE_FACTOR[reading.confidence]
    return weight


def calculate_derived_aqi(readings: Iterable[AQIReading]) -> DerivedAQI:
    """
    Compute the confidence-weighted AQI across all usable readings.

    Args:
        readings: Any collection of AQIReadings; unusable ones are ignored.

    Returns:
        DerivedAQI. With no usable readings the value is None and
        confidence is 0. Never raises.
    """
    usable = usable_readings(readings)

    if not usable:
        return DerivedAQI(
            value=None,
            confidence=0,
            sources=[],
            methodology="No valid data available.",
        )

    weighted = [(r, reading_weight(r)) for r in usable]
    for r, w in weighted:
        logger.debug("Reading weight: %s weight=%.4f", r, w)

    total_weight = sum(w for _, w in weighted)
    weighted_sum = sum(r.aqi * w for r, w in weighted)
    value = round_half_up(weighted_sum / total_weight)

    max_possible_weight = len(usable) * BEST_CASE_WEIGHT
    confidence = min(MAX_CONFIDENCE, round_half_up((total_weight / max_possible_weight) * 100))

    weight_explanations = ", ".join(f"{r.source.value}: {w:.2f}" for r, w in weighted)
    methodology = (
        f"Weighted average using {len(usable)} source(s). "
        f"Weights: [{weight_explanations}]. {METHODOLOGY_RATIONALE}"
    )

    result = DerivedAQI(
        value=value,
        confidence=confidence,
        sources=[r.source for r in usable],
        methodology=methodology,
        weights=[(r.source, w) for r, w in weighted],
    )
    logger.info("Derived AQI: %s", result)
    return result
