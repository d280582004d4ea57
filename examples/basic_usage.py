import json
import time
from pathlib import Path

from traffic_analytics.core.analytics import AnalyticsService
from traffic_analytics.core.store import RecordStore
from traffic_analytics.utils.config import Config, Thresholds


def main():
    """Main function demonstrating different usage scenarios"""
    # Example 1: Report over a record file
    print("\nExample 1: Hourly Report")
    print("-" * 50)
    hourly_report()

    # Example 2: Report for a single host over a custom window
    print("\nExample 2: Custom Window for One Host")
    print("-" * 50)
    custom_window_report()


def sample_documents(now: float):
    """A few minutes of gateway traffic"""
    documents = []
    for offset, (host, path, method, status) in enumerate(
        [
            ("api.example.com", "/users", "GET", 200),
            ("api.example.com", "/users", "POST", 201),
            ("api.example.com", "/orders", "GET", 500),
            ("shop.example.com", "/cart", "GET", 200),
        ]
    ):
        documents.append(
            {
                "ts": now - 60 * (offset + 1),
                "hostname": host,
                "path": path,
                "method": method,
                "response": {"status": status},
                "response_time": 40 + 10 * offset,
                "session_analytics": {"ip_address": f"192.168.1.{100 + offset}"},
            }
        )
    return documents


def hourly_report():
    """Load a record file and print the combined report"""
    log_file = Path("temp_records.jsonl")
    log_file.write_text(
        "\n".join(json.dumps(d) for d in sample_documents(time.time()))
    )

    try:
        service = AnalyticsService.from_config(
            Config.from_dict({"storage": {"paths": [str(log_file)]}})
        )
        report = service.report(period="hourly")
        print(json.dumps(report.to_dict(), indent=2))
    finally:
        # Cleanup
        log_file.unlink()


def custom_window_report():
    """Build a store in memory and query a custom window"""
    now = time.time()
    store = RecordStore()
    for document in sample_documents(now):
        store.add([store.parser.parse_document(document)])

    thresholds = Thresholds(
        rps=50, uptime=100, success=100, latency=100, builders=100, inventory=100
    )
    service = AnalyticsService(store, thresholds)
    report = service.report(
        period="custom", host="api.example.com", start=now - 3600, end=now
    )

    for bucket in report.buckets:
        print(f"{bucket.label}: {bucket.request_count} requests, {bucket.error_count} errors")
    for metric in report.metrics:
        print(f"{metric.subject}: {metric.actual} ({metric.value:.2f})")


if __name__ == "__main__":
    main()
