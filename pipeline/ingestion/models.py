"""
Typed containers shared by every source connector and the reconciliation core.

All readings are request-scoped value objects: a connector builds one, the
agreement analyzer and the aggregator only ever read it.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

AQI_MIN = 0
AQI_MAX = 500


class DataSource(str, enum.Enum):
    GOVERNMENT = "GOVERNMENT"
    INTERNATIONAL = "INTERNATIONAL"
    HISTORICAL = "HISTORICAL"
    IOT_SENSOR = "IOT_SENSOR"


class FreshnessStatus(str, enum.Enum):
    FRESH = "fresh"
    AGING = "aging"
    STALE = "stale"
    UNAVAILABLE = "unavailable"


class ConfidenceLevel(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNCALIBRATED = "uncalibrated"


class CityType(str, enum.Enum):
    METRO = "metro"
    TIER2 = "tier2"
    INDUSTRIAL = "industrial"


@dataclass(frozen=True)
class Pollutant:
    """A single pollutant concentration as reported by a source."""
    name: str
    value: Optional[float]
    unit: str

    def to_dict(self) -> dict:
        return {"name": self.name, "value": self.value, "unit": self.unit}


@dataclass(frozen=True)
class AQIReading:
    """One source's view of a city's air quality at one instant."""
    source: DataSource
    aqi: Optional[int]
    pollutants: List[Pollutant] = field(default_factory=list)
    timestamp: Optional[datetime] = None
    freshness: FreshnessStatus = FreshnessStatus.UNAVAILABLE
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    notes: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        return self.aqi is not None and self.freshness is not FreshnessStatus.UNAVAILABLE

    @classmethod
    def unavailable(
        cls,
        source: DataSource,
        notes: str,
        confidence: ConfidenceLevel = ConfidenceLevel.LOW,
    ) -> "AQIReading":
        """Reading a connector returns when it has nothing usable to report."""
        return cls(
            source=source,
            aqi=None,
            pollutants=[],
            timestamp=None,
            freshness=FreshnessStatus.UNAVAILABLE,
            confidence=confidence,
            notes=notes,
        )

    def to_dict(self) -> dict:
        return {
            "source": self.source.value,
            "aqi": self.aqi,
            "pollutants": [p.to_dict() for p in self.pollutants],
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "freshness": self.freshness.value,
            "confidence": self.confidence.value,
            "notes": self.notes,
        }

    def __str__(self) -> str:
        return (
            f"[{self.source.value}] aqi={self.aqi} freshness={self.freshness.value} "
            f"confidence={self.confidence.value}"
        )


@dataclass(frozen=True)
class City:
    id: str
    name: str
    state: str
    type: CityType
    openaq_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "type": self.type.value,
            "openaq_name": self.openaq_name,
        }
