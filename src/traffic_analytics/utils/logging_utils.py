import json
import logging
import logging.handlers
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def __init__(self, timestamp_format: str = "%Y-%m-%d %H:%M:%S.%f", **kwargs):
        """Initialize formatter.

        Args:
            timestamp_format: Timestamp format string
            **kwargs: Additional fields to include
        """
        super().__init__()
        self.timestamp_format = timestamp_format
        self.additional_fields = kwargs

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.fromtimestamp(record.created).strftime(
                self.timestamp_format
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        data.update(self.additional_fields)

        # Fields passed through ``extra={"extra_fields": {...}}``
        if hasattr(record, "extra_fields"):
            data.update(record.extra_fields)

        return json.dumps(data)


def setup_logging(
    level: Union[str, int] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    json_format: bool = False,
    **kwargs,
) -> List[logging.Handler]:
    """Set up root logging for the web server.

    Args:
        level: Log level
        log_file: Optional log file path
        json_format: Whether to use JSON formatting
        **kwargs: Additional fields for JSON formatter

    Returns:
        The handlers installed on the root logger
    """

    def make_formatter() -> logging.Formatter:
        if json_format:
            return JsonFormatter(**kwargs)
        return logging.Formatter(LOG_FORMAT)

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
            )
        )

    for handler in handlers:
        handler.setFormatter(make_formatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)

    return handlers


@contextmanager
def log_duration(
    logger: Union[str, logging.Logger], message: str, level: int = logging.INFO
) -> Iterator[None]:
    """Log duration of code block.

    Args:
        logger: Logger name or instance
        message: Message template with {duration}
        level: Log level
    """
    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        logger.log(level, message.format(duration=f"{duration:.3f}s"))
