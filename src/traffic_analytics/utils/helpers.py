import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


class TrafficAnalyticsError(Exception):
    """Base exception for traffic analytics errors"""

    pass


def get_zone(name: Optional[str]) -> ZoneInfo:
    """Resolve a time zone name.

    Args:
        name: IANA time zone name, ``None`` means UTC

    Returns:
        ZoneInfo instance

    Raises:
        ValueError: If the zone is unknown
    """
    try:
        return ZoneInfo(name or "UTC")
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone: {name}") from e


def localize(dt: Optional[datetime], zone: ZoneInfo) -> datetime:
    """Return ``dt`` as an aware datetime in ``zone``.

    Naive datetimes are taken to be wall-clock times in ``zone``; ``None``
    means the current time.
    """
    if dt is None:
        return datetime.now(timezone.utc).astimezone(zone)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=zone)
    return dt.astimezone(zone)


def to_epoch(value: Union[datetime, int, float]) -> float:
    """Convert a datetime or epoch value to epoch seconds"""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    return float(value)


def safe_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Safely convert value to float.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Converted float or default value
    """
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def get_nested(data: Dict[str, Any], path: str, default: Any = None) -> Any:
    """Look up a dot separated path in nested dictionaries"""
    value: Any = data
    for key in path.split("."):
        if not isinstance(value, dict) or key not in value:
            return default
        value = value[key]
    return value


def merge_dicts(dict1: Dict, dict2: Dict) -> Dict:
    """Deep merge two dictionaries.

    Args:
        dict1: First dictionary
        dict2: Second dictionary

    Returns:
        Merged dictionary
    """
    merged = dict1.copy()

    for key, value in dict2.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value

    return merged
