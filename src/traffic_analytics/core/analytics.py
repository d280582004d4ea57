import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from ..utils.config import Config, Thresholds
from ..utils.constants import DEFAULT_CHUNK_SIZE
from ..utils.helpers import get_zone, localize
from ..utils.logging_utils import log_duration
from .buckets import TimeBucket, TimeBucketAggregator
from .flow_graph import FlowGraph, FlowGraphBuilder
from .health import HealthMetric, HealthScoreCalculator
from .periods import TimeWindow, resolve_window
from .reader import LogReader
from .store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class AnalyticsReport:
    window: TimeWindow
    record_count: int
    buckets: List[TimeBucket]
    graph: FlowGraph
    metrics: List[HealthMetric]

    def to_dict(self) -> Dict[str, Any]:
        """Combined response consumed by the area, sankey and radar charts"""
        return {
            "endpointAreaChart": [bucket.to_dict() for bucket in self.buckets],
            "endpointSankeyChart": self.graph.to_dict(),
            "endpointRadialChart": [metric.to_dict() for metric in self.metrics],
        }


class AnalyticsService:
    """Runs the three analytic views over records from one window"""

    def __init__(
        self,
        store: RecordStore,
        thresholds: Thresholds,
        time_zone: Optional[str] = "UTC",
        flow_type_label: Optional[str] = None,
    ):
        self.store = store
        self.thresholds = thresholds
        self.time_zone = time_zone
        self.aggregator = TimeBucketAggregator(time_zone=time_zone)
        self.graph_builder = (
            FlowGraphBuilder(flow_type_label) if flow_type_label else FlowGraphBuilder()
        )
        self.calculator = HealthScoreCalculator()

    @classmethod
    def from_config(cls, config: Config, store: Optional[RecordStore] = None) -> "AnalyticsService":
        """Create a service, loading every configured record path into a new store

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config.validate()
        if store is None:
            chunk_size = config.get("storage.chunk_size", DEFAULT_CHUNK_SIZE)
            reader = LogReader(chunk_size=chunk_size)
            store = RecordStore(reader=reader)
            for path in config.get("storage.paths", []):
                store.load(path)
        return cls(
            store=store,
            thresholds=Thresholds.from_config(config),
            time_zone=config.get("analysis.time_zone", "UTC"),
            flow_type_label=config.get("analysis.flow_type_label"),
        )

    def report(
        self,
        period: Optional[str] = None,
        host: Optional[str] = None,
        start: Optional[Union[datetime, int, float]] = None,
        end: Optional[Union[datetime, int, float]] = None,
        now: Optional[datetime] = None,
    ) -> AnalyticsReport:
        """Build the combined analytics report for a period.

        Raises:
            WindowError: If a custom window is incomplete
            DivisionByZeroError: If no records fall inside the window
        """
        now = localize(now, get_zone(self.time_zone))
        window = resolve_window(period, now=now, start=start, end=end, time_zone=self.time_zone)
        records = self.store.find(window.start, window.end, host)
        logger.debug(
            f"Found {len(records)} records between {window.start} and {window.end}"
            + (f" for {host}" if host else "")
        )

        with log_duration(logger, f"Computed {window.period.value} analytics in {{duration}}"):
            buckets = self.aggregator.aggregate(records, window.period, now)
            graph = self.graph_builder.build(records)
            metrics = self.calculator.compute(
                records, window.start, window.end, self.thresholds
            )

        return AnalyticsReport(
            window=window,
            record_count=len(records),
            buckets=buckets,
            graph=graph,
            metrics=metrics,
        )
