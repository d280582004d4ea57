from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from ..parsers.base import LogRecord
from ..utils.constants import BUCKET_COUNT
from ..utils.helpers import get_zone, localize
from .periods import PERIOD_RULES, Period, bucket_starts


@dataclass(frozen=True)
class TimeBucket:
    label: str
    start: datetime
    end: datetime
    request_count: int = 0
    error_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.label, "req": self.request_count, "error": self.error_count}


class TimeBucketAggregator:
    """Counts requests and errors over the most recent periods"""

    def __init__(self, time_zone: Optional[str] = "UTC", bucket_count: int = BUCKET_COUNT):
        """Initialize aggregator

        Args:
            time_zone: Zone used for period alignment and labels
            bucket_count: Number of buckets produced per call
        """
        self.zone = get_zone(time_zone)
        self.bucket_count = bucket_count

    def aggregate(
        self,
        records: Iterable[LogRecord],
        period: Union[Period, str, None],
        now: Optional[datetime] = None,
    ) -> List[TimeBucket]:
        """Partition records into period aligned buckets, oldest first.

        The last bucket ends at ``now`` rather than at the next period
        boundary. A record belongs to a bucket only when its timestamp lies
        strictly between the bucket's start and end, so records exactly on a
        boundary are not counted anywhere.

        Args:
            records: Records to count
            period: Bucketing period; unknown values use monthly rules
            now: End of the most recent bucket, defaults to the current time

        Returns:
            ``bucket_count`` buckets in chronological order
        """
        period = Period.parse(period)
        rule = PERIOD_RULES[period]
        now = localize(now, self.zone)
        records = list(records)

        starts = bucket_starts(now, period, self.bucket_count)
        ends = starts[1:] + [now]

        buckets = []
        for start, end in zip(starts, ends):
            lower, upper = start.timestamp(), end.timestamp()
            request_count = error_count = 0
            for record in records:
                if lower < record.timestamp < upper:
                    request_count += 1
                    if record.is_error:
                        error_count += 1
            buckets.append(
                TimeBucket(
                    label=rule.label(start),
                    start=start,
                    end=end,
                    request_count=request_count,
                    error_count=error_count,
                )
            )
        return buckets
