from datetime import datetime, timezone

import pytest

from traffic_analytics.parsers.base import LogRecord
from traffic_analytics.utils.config import Thresholds

# Saturday 10 February 2024, 10:30 UTC
BASE_TIME = datetime(2024, 2, 10, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def base_ts():
    return BASE_TIME.timestamp()


@pytest.fixture
def make_record():
    """Factory for records with sensible defaults"""

    def _make(
        timestamp=BASE_TIME.timestamp(),
        status=200,
        client_ip="10.0.0.1",
        hostname="api.example.com",
        path="/users",
        method="GET",
        response_time=50.0,
    ):
        return LogRecord(
            timestamp=timestamp,
            hostname=hostname,
            path=path,
            method=method,
            response_status=status,
            response_time=response_time,
            client_ip=client_ip,
        )

    return _make


@pytest.fixture
def thresholds():
    return Thresholds(
        rps=100.0,
        uptime=100.0,
        success=100.0,
        latency=100.0,
        builders=80.0,
        inventory=90.0,
    )


@pytest.fixture
def make_document():
    """Factory for raw transaction log documents as stored by the gateway"""

    def _make(
        ts,
        status=200,
        ip="10.0.0.1",
        hostname="api.example.com",
        path="/users",
        method="GET",
        response_time=50,
    ):
        return {
            "ts": ts,
            "hostname": hostname,
            "path": path,
            "method": method,
            "response": {"status": status},
            "response_time": response_time,
            "session_analytics": {"ip_address": ip},
        }

    return _make
