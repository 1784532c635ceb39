"""
Tests for Module 05 — Derived-AQI Aggregator.
"""
import random

import pytest

from pipeline.confidence.aggregator import (
    BEST_CASE_WEIGHT, calculate_derived_aqi, reading_weight,
)
from pipeline.ingestion.models import AQIReading, ConfidenceLevel, DataSource, FreshnessStatus


class TestReadingWeight:
    def test_best_case_government(self, make_reading):
        assert reading_weight(make_reading(DataSource.GOVERNMENT)) == pytest.approx(1.2)
        assert BEST_CASE_WEIGHT == pytest.approx(1.2)

    def test_iot_fresh_uncalibrated(self, make_reading):
        reading = make_reading(DataSource.IOT_SENSOR, 150, FreshnessStatus.FRESH,
                               ConfidenceLevel.UNCALIBRATED)
        assert reading_weight(reading) == pytest.approx(0.09)

    def test_international_aging_high(self, make_reading):
        reading = make_reading(DataSource.INTERNATIONAL, 150, FreshnessStatus.AGING)
        assert reading_weight(reading) == pytest.approx(0.7)

    def test_historical_stale_medium(self, make_reading):
        reading = make_reading(DataSource.HISTORICAL, 150, FreshnessStatus.STALE,
                               ConfidenceLevel.MEDIUM)
        assert reading_weight(reading) == pytest.approx(0.192)

    def test_low_confidence_factor(self, make_reading):
        reading = make_reading(DataSource.INTERNATIONAL, 150, confidence=ConfidenceLevel.LOW)
        assert reading_weight(reading) == pytest.approx(0.5)

    def test_unavailable_weighs_nothing(self):
        reading = AQIReading.unavailable(DataSource.GOVERNMENT, notes="none")
        assert reading_weight(reading) == 0.0


class TestEmptyInput:
    def test_no_readings(self):
        result = calculate_derived_aqi([])
        assert result.value is None
        assert result.confidence == 0
        assert result.sources == []
        assert "No valid data" in result.methodology

    def test_all_unavailable(self, make_reading):
        readings = [
            AQIReading.unavailable(DataSource.GOVERNMENT, notes="none"),
            make_reading(DataSource.INTERNATIONAL, aqi=None, freshness=FreshnessStatus.UNAVAILABLE),
            make_reading(DataSource.HISTORICAL, aqi=210, freshness=FreshnessStatus.UNAVAILABLE),
        ]
        result = calculate_derived_aqi(readings)
        assert result.value is None
        assert result.confidence == 0
        assert result.sources == []


class TestWeightedAverage:
    def test_scenario(self, make_reading):
        readings = [
            make_reading(DataSource.GOVERNMENT, 278, FreshnessStatus.FRESH, ConfidenceLevel.HIGH),
            make_reading(DataSource.INTERNATIONAL, 252, FreshnessStatus.AGING, ConfidenceLevel.HIGH),
            make_reading(DataSource.HISTORICAL, 285, FreshnessStatus.STALE, ConfidenceLevel.MEDIUM),
        ]
        result = calculate_derived_aqi(readings)
        # (278·1.2 + 252·0.7 + 285·0.192) / 2.092 = 269.94
        assert result.value == 270
        # 2.092 / (3 · 1.2) = 58.1 %
        assert result.confidence == 58
        assert result.sources == [DataSource.GOVERNMENT, DataSource.INTERNATIONAL, DataSource.HISTORICAL]

    def test_methodology_lists_weights(self, make_reading):
        readings = [
            make_reading(DataSource.GOVERNMENT, 278),
            make_reading(DataSource.HISTORICAL, 285, FreshnessStatus.STALE, ConfidenceLevel.MEDIUM),
        ]
        methodology = calculate_derived_aqi(readings).methodology
        assert "2 source(s)" in methodology
        assert "GOVERNMENT: 1.20" in methodology
        assert "HISTORICAL: 0.19" in methodology
        assert "Higher weights given to government data" in methodology

    def test_single_best_case_source(self, make_reading):
        result = calculate_derived_aqi([make_reading(DataSource.GOVERNMENT, 143)])
        assert result.value == 143
        assert result.confidence == 100

    def test_confidence_capped_at_100(self, make_reading):
        readings = [make_reading(DataSource.GOVERNMENT, v) for v in (100, 110, 120)]
        assert calculate_derived_aqi(readings).confidence == 100

    def test_iot_contributes_less_than_government(self, make_reading):
        readings = [
            make_reading(DataSource.GOVERNMENT, 100),
            make_reading(DataSource.IOT_SENSOR, 400, confidence=ConfidenceLevel.UNCALIBRATED),
        ]
        result = calculate_derived_aqi(readings)
        # (100·1.2 + 400·0.09) / 1.29 = 120.9
        assert result.value == 121
        assert result.confidence == 54

    def test_many_low_trust_sources_drive_confidence_down(self, make_reading):
        readings = [
            make_reading(DataSource.IOT_SENSOR, 150 + i, confidence=ConfidenceLevel.UNCALIBRATED)
            for i in range(6)
        ]
        result = calculate_derived_aqi(readings)
        assert 0 <= result.confidence < 10

    def test_source_order_preserved(self, make_reading):
        readings = [
            make_reading(DataSource.HISTORICAL, 200, FreshnessStatus.STALE, ConfidenceLevel.MEDIUM),
            AQIReading.unavailable(DataSource.INTERNATIONAL, notes="none"),
            make_reading(DataSource.IOT_SENSOR, 210, confidence=ConfidenceLevel.UNCALIBRATED),
            make_reading(DataSource.GOVERNMENT, 190),
        ]
        result = calculate_derived_aqi(readings)
        assert result.sources == [DataSource.HISTORICAL, DataSource.IOT_SENSOR, DataSource.GOVERNMENT]
        assert [s for s, _ in result.weights] == result.sources


class TestProperties:
    def test_value_within_input_range_and_confidence_bounded(self, make_reading):
        rng = random.Random(42)
        sources = list(DataSource)
        freshness = [FreshnessStatus.FRESH, FreshnessStatus.AGING, FreshnessStatus.STALE]
        confidences = list(ConfidenceLevel)

        for _ in range(200):
            readings = [
                make_reading(
                    rng.choice(sources),
                    rng.randint(0, 500),
                    rng.choice(freshness),
                    rng.choice(confidences),
                )
                for _ in range(rng.randint(1, 6))
            ]
            result = calculate_derived_aqi(readings)
            values = [r.aqi for r in readings]
            assert min(values) <= result.value <= max(values)
            assert 0 <= result.confidence <= 100

    def test_to_dict(self, make_reading):
        data = calculate_derived_aqi([make_reading(DataSource.GOVERNMENT, 143)]).to_dict()
        assert data["value"] == 143
        assert data["sources"] == ["GOVERNMENT"]
        assert data["weights"] == [{"source": "GOVERNMENT", "weight": 1.2}]
