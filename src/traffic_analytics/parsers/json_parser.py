import json
from typing import Any, Dict, Optional

from ..utils.helpers import get_nested, safe_float
from .base import BaseParser, LogRecord, ParserError


class TransactionLogParser(BaseParser):
    """Parser for JSON transaction log documents"""

    # record attribute -> dotted document path
    FIELDS = {
        "timestamp": "ts",
        "hostname": "hostname",
        "path": "path",
        "method": "method",
        "response_status": "response.status",
        "response_time": "response_time",
        "client_ip": "session_analytics.ip_address",
    }

    def supports_format(self, line: str) -> bool:
        """Check if line is a JSON object carrying a timestamp and response"""
        try:
            data = json.loads(line)
        except (json.JSONDecodeError, TypeError):
            return False
        return isinstance(data, dict) and "ts" in data and "response" in data

    def parse_line(self, line: str) -> Optional[LogRecord]:
        """Parse a JSON log line

        Args:
            line: Raw JSON log line to parse

        Returns:
            LogRecord if successful, None for blank lines

        Raises:
            ParserError: If line cannot be parsed
        """
        if not line.strip():
            return None

        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise ParserError(f"Invalid JSON: {str(e)}") from e

        return self.parse_document(data)

    def parse_document(self, data: Dict[str, Any]) -> LogRecord:
        """Build a LogRecord from an already decoded document

        Raises:
            ParserError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ParserError(f"Expected a JSON object, got {type(data).__name__}")

        missing = [path for path in self.FIELDS.values() if get_nested(data, path) is None]
        if missing:
            raise ParserError(f"Missing required fields: {', '.join(missing)}")

        timestamp = data["ts"]
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            timestamp = safe_float(timestamp)
            if timestamp is None:
                raise ParserError(f"Invalid timestamp: {data['ts']!r}")

        status = get_nested(data, "response.status")
        try:
            status = int(status)
        except (ValueError, TypeError) as e:
            raise ParserError(f"Invalid response status: {status!r}") from e

        response_time = safe_float(data["response_time"])
        if response_time is None:
            raise ParserError(f"Invalid response time: {data['response_time']!r}")

        return LogRecord(
            timestamp=timestamp,
            hostname=str(data["hostname"]),
            path=str(data["path"]),
            method=str(data["method"]),
            response_status=status,
            response_time=response_time,
            client_ip=str(get_nested(data, "session_analytics.ip_address")),
        )
