"""
Tests for Module 07 — Reconciliation Orchestration and CLI runner.
"""
import json
import threading
from datetime import datetime

import pytest

from pipeline.confidence.agreement import AgreementLevel
from pipeline.ingestion.cities import get_city
from pipeline.ingestion.iot_connector import build_iot_reading
from pipeline.ingestion.models import AQIReading, ConfidenceLevel, DataSource, FreshnessStatus
from pipeline.reconciler import collect_readings, reconcile, reconcile_city


def _fixed_fetchers(make_reading, values):
    return {
        source: (lambda city, clock, s=source, v=value: make_reading(s, v))
        for source, value in values.items()
    }


class TestCollectReadings:
    def test_fixed_source_order_then_iot(self, make_reading, clock):
        fetchers = _fixed_fetchers(make_reading, {
            DataSource.GOVERNMENT: 100,
            DataSource.INTERNATIONAL: 110,
            DataSource.HISTORICAL: 120,
        })
        iot = build_iot_reading(130, clock=clock)
        readings = collect_readings(get_city("delhi"), clock, iot_reading=iot, fetchers=fetchers)
        assert [r.source for r in readings] == [
            DataSource.GOVERNMENT, DataSource.INTERNATIONAL,
            DataSource.HISTORICAL, DataSource.IOT_SENSOR,
        ]
        assert [r.aqi for r in readings] == [100, 110, 120, 130]

    def test_connectors_run_concurrently(self, make_reading, clock):
        # Each fetcher waits for all three; a sequential fan-out would break the barrier.
        barrier = threading.Barrier(3, timeout=5)

        def fetcher(source, value):
            def _fetch(city, clock):
                barrier.wait()
                return make_reading(source, value)
            return _fetch

        fetchers = {
            DataSource.GOVERNMENT: fetcher(DataSource.GOVERNMENT, 100),
            DataSource.INTERNATIONAL: fetcher(DataSource.INTERNATIONAL, 105),
            DataSource.HISTORICAL: fetcher(DataSource.HISTORICAL, 110),
        }
        readings = collect_readings(get_city("delhi"), clock, fetchers=fetchers)
        assert all(r.is_usable for r in readings)

    def test_raising_connector_degrades_to_unavailable(self, make_reading, clock):
        def broken(city, clock):
            raise RuntimeError("socket exploded")

        fetchers = {
            DataSource.GOVERNMENT: lambda city, clock: make_reading(DataSource.GOVERNMENT, 100),
            DataSource.INTERNATIONAL: broken,
        }
        readings = collect_readings(get_city("delhi"), clock, fetchers=fetchers)
        failed = readings[1]
        assert failed.source is DataSource.INTERNATIONAL
        assert failed.aqi is None
        assert failed.freshness is FreshnessStatus.UNAVAILABLE
        assert "socket exploded" in failed.notes


class TestReconcile:
    def test_pure_over_snapshot(self, make_reading):
        readings = [
            make_reading(DataSource.GOVERNMENT, 278),
            make_reading(DataSource.INTERNATIONAL, 252, FreshnessStatus.AGING),
            make_reading(DataSource.HISTORICAL, 285, FreshnessStatus.STALE, ConfidenceLevel.MEDIUM),
        ]
        first = reconcile(readings)
        second = reconcile(list(reversed(readings)))
        assert first.agreement.level is AgreementLevel.PARTIAL
        assert first.derived.value == second.derived.value == 270
        assert first.agreement.spread == second.agreement.spread == 33

    def test_all_unavailable(self):
        readings = [AQIReading.unavailable(s, notes="none") for s in DataSource]
        result = reconcile(readings)
        assert result.derived.value is None
        assert result.derived.confidence == 0
        assert result.derived.sources == []
        assert result.agreement.level is AgreementLevel.INSUFFICIENT

    def test_to_dict_is_json_serialisable(self, make_reading):
        result = reconcile([make_reading(DataSource.GOVERNMENT, 120)])
        data = json.loads(json.dumps(result.to_dict()))
        assert data["derived"]["value"] == 120
        assert data["agreement"]["level"] == "insufficient"
        assert data["readings"][0]["source"] == "GOVERNMENT"


class TestReconcileCity:
    def test_delhi_without_openaq_key(self, clock):
        result = reconcile_city("delhi", clock=clock)
        sources = {r.source: r for r in result.readings}

        assert sources[DataSource.GOVERNMENT].aqi == 278
        assert sources[DataSource.GOVERNMENT].freshness is FreshnessStatus.FRESH
        assert sources[DataSource.INTERNATIONAL].freshness is FreshnessStatus.UNAVAILABLE
        assert sources[DataSource.HISTORICAL].freshness is FreshnessStatus.STALE

        # 278, 285 → spread 7
        assert result.agreement.level is AgreementLevel.HIGH
        assert result.agreement.spread == 7
        # (278·1.2 + 285·0.192) / 1.392 = 278.97
        assert result.derived.value == 279
        assert result.derived.confidence == 58
        assert any(w.startswith("Missing data from: INTERNATIONAL") for w in result.warnings)
        assert any(w.startswith("Stale data from: HISTORICAL") for w in result.warnings)

    def test_with_iot(self, clock):
        iot = build_iot_reading(400, clock=clock)
        result = reconcile_city("delhi", clock=clock, iot_reading=iot)
        assert result.readings[-1].source is DataSource.IOT_SENSOR
        assert DataSource.IOT_SENSOR in result.derived.sources
        assert result.agreement.level is AgreementLevel.OUTLIER

    def test_naive_clock(self):
        result = reconcile_city("delhi", clock=lambda: datetime(2025, 1, 1, 9, 30))
        sources = {r.source: r for r in result.readings}
        assert sources[DataSource.GOVERNMENT].freshness is FreshnessStatus.FRESH
        assert result.derived.value == 279

    def test_unknown_city_raises(self, clock):
        with pytest.raises(KeyError):
            reconcile_city("atlantis", clock=clock)


class TestCommandLine:
    def test_one_shot_prints_json(self, capsys):
        from pipeline.main import main
        assert main(["--city", "mumbai", "--iot", "120"]) == 0
        stdout = capsys.readouterr().out
        out = json.loads(stdout[stdout.index('{\n  "readings"'):])
        assert out["city"] == "mumbai"
        assert out["readings"][-1]["source"] == "IOT_SENSOR"

    def test_unknown_city_exit_code(self):
        from pipeline.main import main
        assert main(["--city", "atlantis"]) == 2

    def test_invalid_iot_exit_code(self):
        from pipeline.main import main
        assert main(["--city", "delhi", "--iot", "900"]) == 2
