from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from ..utils.constants import ERROR_STATUS_THRESHOLD, SUCCESS_STATUS
from ..utils.helpers import TrafficAnalyticsError


@dataclass(frozen=True)
class LogRecord:
    """A single HTTP request as recorded by the transaction log"""

    timestamp: Union[int, float]
    hostname: str
    path: str
    method: str
    response_status: int
    response_time: float
    client_ip: str

    @property
    def is_error(self) -> bool:
        return self.response_status >= ERROR_STATUS_THRESHOLD

    @property
    def is_success(self) -> bool:
        return self.response_status == SUCCESS_STATUS


class BaseParser(ABC):
    """Abstract base class for record parsers"""

    @abstractmethod
    def parse_line(self, line: str) -> Optional[LogRecord]:
        """Parse a single line of log text into a LogRecord

        Args:
            line: Raw log line to parse

        Returns:
            LogRecord if parsing successful, None if line should be skipped

        Raises:
            ParserError: If line cannot be parsed
        """
        pass

    @abstractmethod
    def supports_format(self, line: str) -> bool:
        """Check if this parser supports the given log format

        Args:
            line: Sample log line to check

        Returns:
            True if this parser can handle the format, False otherwise
        """
        pass


class ParserError(TrafficAnalyticsError):
    """Raised when a log line cannot be parsed"""

    pass

