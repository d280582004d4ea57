import json
from datetime import datetime, timedelta, timezone

import pytest

from traffic_analytics.core.analytics import AnalyticsService
from traffic_analytics.core.errors import DivisionByZeroError, WindowError
from traffic_analytics.core.periods import Period
from traffic_analytics.core.store import RecordStore
from traffic_analytics.utils.config import Config, ConfigurationError

NOW = datetime(2024, 2, 10, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def store(make_record):
    store = RecordStore()
    now = NOW.timestamp()
    store.add(
        [
            make_record(timestamp=now - 600, hostname="a.example.com"),
            make_record(timestamp=now - 3600, hostname="a.example.com", status=502),
            make_record(timestamp=now - 7200, hostname="b.example.com", path="/orders"),
            # Outside the hourly window
            make_record(timestamp=now - 6 * 3600, hostname="a.example.com"),
        ]
    )
    return store


@pytest.fixture
def service(store, thresholds):
    return AnalyticsService(store, thresholds)


class TestAnalyticsService:
    """Test the combined analytics report"""

    def test_hourly_report(self, service):
        report = service.report(period="hourly", now=NOW)

        assert report.window.period is Period.HOURLY
        assert report.record_count == 3
        assert [b.request_count for b in report.buckets] == [0, 0, 1, 1, 1]
        assert [b.error_count for b in report.buckets] == [0, 0, 0, 1, 0]
        assert len(report.metrics) == 6

    def test_host_filter(self, service):
        report = service.report(period="hourly", host="a.example.com", now=NOW)

        assert report.record_count == 2
        assert "b.example.com" not in [n.label for n in report.graph.nodes]

    def test_custom_window(self, service):
        start = (NOW - timedelta(hours=7)).timestamp()
        end = (NOW - timedelta(hours=1, minutes=30)).timestamp()
        report = service.report(period="custom", start=start, end=end, now=NOW)

        assert report.record_count == 2
        assert report.window.period is Period.MONTHLY
        assert report.buckets[-1].label == "Feb"

    def test_custom_window_requires_bounds(self, service):
        with pytest.raises(WindowError):
            service.report(period="custom", start=1000, now=NOW)

    def test_no_records_in_window(self, service):
        with pytest.raises(DivisionByZeroError):
            service.report(period="hourly", host="missing.example.com", now=NOW)

    def test_to_dict(self, service):
        result = service.report(period="hourly", now=NOW).to_dict()

        assert set(result) == {"endpointAreaChart", "endpointSankeyChart", "endpointRadialChart"}
        assert len(result["endpointAreaChart"]) == 5
        assert set(result["endpointSankeyChart"]) == {"nodes", "links"}
        assert [m["subject"] for m in result["endpointRadialChart"]][0] == "RPS"
        json.dumps(result)

    def test_flow_type_label(self, store, thresholds):
        service = AnalyticsService(store, thresholds, flow_type_label="API - gRPC")
        report = service.report(period="hourly", now=NOW)

        assert report.graph.nodes[1].label == "API - gRPC"


class TestFromConfig:
    """Test building the service from configuration"""

    def test_loads_configured_paths(self, tmp_path, make_document):
        path = tmp_path / "records.jsonl"
        path.write_text(json.dumps(make_document(NOW.timestamp() - 60)))
        config = Config.from_dict(
            {
                "storage": {"paths": [str(path)]},
                "analysis": {"time_zone": "Europe/Berlin"},
                "health_metrics": {"Latency": 25},
            }
        )

        service = AnalyticsService.from_config(config)

        assert len(service.store) == 1
        assert service.thresholds.latency == 25
        report = service.report(period="hourly", now=NOW)
        assert report.buckets[-1].label == "13:00"

    def test_uses_given_store(self, store):
        service = AnalyticsService.from_config(Config(), store=store)
        assert service.store is store

    def test_invalid_configuration(self, store):
        config = Config.from_dict({"health_metrics": {"RPS": 0}})

        with pytest.raises(ConfigurationError):
            AnalyticsService.from_config(config, store=store)
