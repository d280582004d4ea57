import os

# Bucketing
BUCKET_COUNT = 5

# Monthly bucket labels, independent of the process locale
MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

# Responses at or above this status count as errors
ERROR_STATUS_THRESHOLD = 400
SUCCESS_STATUS = 200

# Constant protocol stage of the flow graph
DEFAULT_FLOW_TYPE_LABEL = "API - JSON"

# Record file settings
DEFAULT_CHUNK_SIZE = int(os.getenv("TRAFFIC_ANALYTICS_CHUNK_SIZE", "8192"))
RECORD_FILE_PATTERN = "*.json*"

# Health metric threshold keys as stored in settings
THRESHOLD_KEYS = ("RPS", "Uptime", "Success", "Latency", "Builders", "Inventory")

# Default configuration
DEFAULT_CONFIG = {
    "storage": {
        "paths": [],
        "chunk_size": DEFAULT_CHUNK_SIZE,
    },
    "analysis": {
        "time_zone": "UTC",
        "flow_type_label": DEFAULT_FLOW_TYPE_LABEL,
    },
    "health_metrics": {
        "RPS": 100.0,
        "Uptime": 100.0,
        "Success": 100.0,
        "Latency": 200.0,
        "Builders": 100.0,
        "Inventory": 100.0,
    },
    "logging": {
        "level": "INFO",
        "json_format": False,
        "file": None,
    },
    "server": {
        "host": "0.0.0.0",
        "port": 8000,
    },
}


def _as_bool(value: str) -> bool:
    return value.lower() in ("true", "yes", "1", "on")


def _as_list(value: str) -> list:
    return [item for item in value.split(",") if item]


# Environment variable mapping
ENV_VARS = {
    "TRAFFIC_ANALYTICS_RECORD_PATHS": ("storage.paths", _as_list),
    "TRAFFIC_ANALYTICS_TIME_ZONE": ("analysis.time_zone", str),
    "TRAFFIC_ANALYTICS_FLOW_TYPE_LABEL": ("analysis.flow_type_label", str),
    "TRAFFIC_ANALYTICS_RPS_THRESHOLD": ("health_metrics.RPS", float),
    "TRAFFIC_ANALYTICS_UPTIME_THRESHOLD": ("health_metrics.Uptime", float),
    "TRAFFIC_ANALYTICS_SUCCESS_THRESHOLD": ("health_metrics.Success", float),
    "TRAFFIC_ANALYTICS_LATENCY_THRESHOLD": ("health_metrics.Latency", float),
    "TRAFFIC_ANALYTICS_BUILDERS_THRESHOLD": ("health_metrics.Builders", float),
    "TRAFFIC_ANALYTICS_INVENTORY_THRESHOLD": ("health_metrics.Inventory", float),
    "TRAFFIC_ANALYTICS_LOG_LEVEL": ("logging.level", str),
    "TRAFFIC_ANALYTICS_LOG_JSON": ("logging.json_format", _as_bool),
    "TRAFFIC_ANALYTICS_LOG_FILE": ("logging.file", str),
    "TRAFFIC_ANALYTICS_HOST": ("server.host", str),
    "TRAFFIC_ANALYTICS_PORT": ("server.port", int),
}
