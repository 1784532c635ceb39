"""
Indian National AQI categories.
"""

from dataclasses import dataclass
from typing import Tuple

from pipeline.normalization.scale import round_half_up


@dataclass(frozen=True)
class AQICategory:
    range: Tuple[int, int]
    label: str
    health_implication: str

    def to_dict(self) -> dict:
        return {
            "range": list(self.range),
            "label": self.label,
            "health_implication": self.health_implication,
        }


AQI_CATEGORIES = [
    AQICategory((0, 50),    "Good",         "Minimal impact"),
    AQICategory((51, 100),  "Satisfactory", "Minor breathing discomfort to sensitive people"),
    AQICategory((101, 200), "Moderate",     "Breathing discomfort to people with lung/heart disease"),
    AQICategory((201, 300), "Poor",         "Breathing discomfort on prolonged exposure"),
    AQICategory((301, 400), "Very Poor",    "Respiratory illness on prolonged exposure"),
    AQICategory((401, 500), "Severe",       "Affects healthy people, serious impact on those with existing diseases"),
]


def get_aqi_category(aqi: float) -> AQICategory:
    """
    Return the category band containing aqi.

    Fractional values are rounded half-up onto the integer bands first.
    Values below the scale are Good; values above it are Severe.
    """
    value = round_half_up(aqi)
    if value < AQI_CATEGORIES[0].range[0]:
        return AQI_CATEGORIES[0]
    for category in AQI_CATEGORIES:
        low, high = category.range
        if low <= value <= high:
            return category
    return AQI_CATEGORIES[-1]
