from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Union

from ..parsers.base import LogRecord
from ..utils.config import Thresholds
from .errors import DivisionByZeroError

# Normalized values are expressed on a 0-100 scale
FULL_SCALE = 100.0


@dataclass(frozen=True)
class HealthMetric:
    subject: str
    description: str
    actual: str
    value: float
    cap: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject,
            "description": self.description,
            "actual": self.actual,
            "value": self.value,
            "cap": self.cap,
        }


@dataclass(frozen=True)
class TrafficStats:
    """Aggregate statistics of the records in a window"""

    total_requests: int
    success_count: int
    error_count: int
    uptime_percent: float
    average_latency: float
    # Requests per second multiplied by 100, not a true rate
    requests_per_second_scaled: float
    success_rate: float

    @classmethod
    def from_records(
        cls,
        records: Iterable[LogRecord],
        window_start: Union[int, float],
        window_end: Union[int, float],
    ) -> "TrafficStats":
        """Compute statistics for ``records`` observed over the window

        Raises:
            DivisionByZeroError: If there are no records or the window is empty
        """
        records = list(records)
        total = len(records)
        if total == 0:
            raise DivisionByZeroError("Cannot compute health metrics without records")
        duration = window_end - window_start
        if duration <= 0:
            raise DivisionByZeroError(
                f"Cannot compute health metrics over a window of {duration} seconds"
            )

        success_count = sum(1 for record in records if record.is_success)
        error_count = sum(1 for record in records if record.is_error)

        return cls(
            total_requests=total,
            success_count=success_count,
            error_count=error_count,
            uptime_percent=(total - error_count) / total * 100,
            average_latency=sum(record.response_time for record in records) / total,
            requests_per_second_scaled=total / duration * 100,
            success_rate=success_count / total * 100,
        )


class HealthScoreCalculator:
    """Scores observed traffic against configured health thresholds.

    Only the latency score is clamped to the full scale; the others may exceed
    it and are left for the renderer to clamp.
    """

    def compute(
        self,
        records: Iterable[LogRecord],
        window_start: Union[int, float],
        window_end: Union[int, float],
        thresholds: Thresholds,
    ) -> List[HealthMetric]:
        """Return the RPS, Uptime, Success, Inventory, Builders and Latency metrics

        Raises:
            DivisionByZeroError: If there are no records or the window is empty
        """
        stats = TrafficStats.from_records(records, window_start, window_end)

        rps = round(stats.requests_per_second_scaled, 5)
        uptime_score = stats.uptime_percent / thresholds.uptime * 100

        return [
            HealthMetric(
                subject="RPS",
                description="Percent of overall RPS",
                actual=f"{stats.requests_per_second_scaled:.5f} rps",
                value=rps / thresholds.rps * 100,
                cap=FULL_SCALE,
            ),
            HealthMetric(
                subject="Uptime",
                description="Percent of time since last restart that this has been available",
                actual=f"{uptime_score}%",
                value=uptime_score,
                cap=FULL_SCALE,
            ),
            HealthMetric(
                subject="Success",
                description="Percent of responses that are 200 (Status Ok)",
                actual=f"{stats.success_rate}%",
                value=stats.success_rate,
                cap=FULL_SCALE,
            ),
            # Inventory and builder coverage are tracked elsewhere and always
            # reported as complete here.
            HealthMetric(
                subject="Inventory",
                description="Percent of OAS documentation that have descriptions",
                actual="100%",
                value=FULL_SCALE,
                cap=thresholds.inventory,
            ),
            HealthMetric(
                subject="Builders",
                description="Percent of endpoints that have builders setup",
                actual="100%",
                value=FULL_SCALE,
                cap=thresholds.builders,
            ),
            HealthMetric(
                subject="Latency",
                description=(
                    f"Average Latency of requests that are above {thresholds.latency:g}ms"
                ),
                actual=f"{stats.average_latency:.2f}ms",
                value=self._latency_score(stats.average_latency, thresholds.latency),
                cap=FULL_SCALE,
            ),
        ]

    @staticmethod
    def _latency_score(average_latency: float, threshold: float) -> float:
        if average_latency <= 0:
            return FULL_SCALE
        return min(FULL_SCALE, round(threshold / average_latency * 100, 2))
