"""Period rules shared by time bucketing and window resolution.

Each period is described by one ``PeriodRule``: how to align an instant down
to the start of the period containing it, how to step whole periods
forwards or backwards, and how a bucket starting at an instant is labelled.
Hourly steps are absolute (3600 seconds) while daily, weekly and monthly
steps move the wall clock, so a day across a DST change is 23 or 25 hours.
"""
import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from ..utils.constants import BUCKET_COUNT, MONTH_ABBREVIATIONS
from ..utils.helpers import get_zone, localize, to_epoch
from .errors import WindowError

logger = logging.getLogger(__name__)

CUSTOM_PERIOD = "custom"


class Period(str, Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value: Any) -> "Period":
        """Return the matching period, falling back to monthly for anything else"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            logger.debug(f"Unrecognised period {value!r}, using monthly rules")
            return cls.MONTHLY


def _start_of_hour(dt: datetime) -> datetime:
    return dt.replace(minute=0, second=0, microsecond=0)


def _start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0, fold=0)


def _start_of_week(dt: datetime) -> datetime:
    # Weeks start on Monday
    day = _start_of_day(dt)
    return day - timedelta(days=day.weekday())


def _start_of_month(dt: datetime) -> datetime:
    return _start_of_day(dt).replace(day=1)


def _shift_hours(dt: datetime, count: int) -> datetime:
    return (dt.astimezone(timezone.utc) + timedelta(hours=count)).astimezone(dt.tzinfo)


def _shift_days(dt: datetime, count: int) -> datetime:
    return dt + timedelta(days=count)


def _shift_weeks(dt: datetime, count: int) -> datetime:
    return dt + timedelta(weeks=count)


def shift_months(dt: datetime, count: int) -> datetime:
    """Move ``dt`` by whole months, clamping the day to the target month"""
    month_index = dt.month - 1 + count
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def _hour_label(dt: datetime) -> str:
    return dt.strftime("%H:00")


def _iso_label(dt: datetime) -> str:
    return dt.isoformat(timespec="milliseconds")


def _month_label(dt: datetime) -> str:
    return MONTH_ABBREVIATIONS[dt.month - 1]


@dataclass(frozen=True)
class PeriodRule:
    align: Callable[[datetime], datetime]
    shift: Callable[[datetime, int], datetime]
    label: Callable[[datetime], str]


PERIOD_RULES: Dict[Period, PeriodRule] = {
    Period.HOURLY: PeriodRule(_start_of_hour, _shift_hours, _hour_label),
    Period.DAILY: PeriodRule(_start_of_day, _shift_days, _iso_label),
    Period.WEEKLY: PeriodRule(_start_of_week, _shift_weeks, _iso_label),
    Period.MONTHLY: PeriodRule(_start_of_month, shift_months, _month_label),
}


def bucket_starts(now: datetime, period: Period, count: int = BUCKET_COUNT) -> List[datetime]:
    """Aligned starts of the ``count`` periods ending with the one holding ``now``.

    Returned oldest first.
    """
    rule = PERIOD_RULES[period]
    start = rule.align(now)
    starts = [start]
    for _ in range(count - 1):
        start = rule.align(rule.shift(start, -1))
        starts.append(start)
    starts.reverse()
    return starts


@dataclass(frozen=True)
class TimeWindow:
    """Epoch-second bounds of an analytics query and its bucketing period"""

    start: float
    end: float
    period: Period


def resolve_window(
    period: Optional[str],
    now: Optional[datetime] = None,
    start: Optional[Union[datetime, int, float]] = None,
    end: Optional[Union[datetime, int, float]] = None,
    time_zone: Optional[str] = "UTC",
) -> TimeWindow:
    """Resolve a requested period into concrete window bounds.

    Named periods look back ``BUCKET_COUNT`` periods from ``now``. A custom
    period takes explicit ``start`` and ``end`` and is bucketed monthly, as
    is a missing or unknown period, which looks back one month.

    Raises:
        WindowError: If a custom window lacks a bound or ends before it starts
    """
    now = localize(now, get_zone(time_zone))

    if period == CUSTOM_PERIOD:
        if start is None or end is None:
            raise WindowError("Custom period requires startDate and endDate")
        window = TimeWindow(to_epoch(start), to_epoch(end), Period.MONTHLY)
        if window.end <= window.start:
            raise WindowError(
                f"Custom window must end after it starts ({window.start} >= {window.end})"
            )
        return window

    try:
        parsed = Period(period)
    except ValueError:
        return TimeWindow(shift_months(now, -1).timestamp(), now.timestamp(), Period.MONTHLY)

    lookback = PERIOD_RULES[parsed].shift(now, -BUCKET_COUNT)
    return TimeWindow(lookback.timestamp(), now.timestamp(), parsed)
