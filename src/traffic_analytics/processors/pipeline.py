from abc import ABC, abstractmethod
from typing import Callable, Iterable, Iterator, List, Optional, Union

from ..parsers.base import LogRecord


class ProcessingStep(ABC):
    """Base class for record processing steps"""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def process(self, record: LogRecord) -> Optional[LogRecord]:
        """Process a record

        Args:
            record: Record to process

        Returns:
            Processed record or None if record should be filtered out
        """
        raise NotImplementedError


class Pipeline:
    """Processing pipeline for log records"""

    def __init__(self):
        self.steps: List[ProcessingStep] = []

    def add_step(self, step: ProcessingStep) -> None:
        """Add a processing step to the pipeline"""
        self.steps.append(step)

    def process(self, record: LogRecord) -> Optional[LogRecord]:
        """Process a record through the pipeline

        Args:
            record: Record to process

        Returns:
            Processed record or None if filtered out
        """
        current = record
        for step in self.steps:
            if current is None:
                break
            current = step.process(current)
        return current

    def run(self, records: Iterable[LogRecord]) -> Iterator[LogRecord]:
        """Yield every record that survives the pipeline"""
        for record in records:
            result = self.process(record)
            if result is not None:
                yield result


class FilterStep(ProcessingStep):
    """Filter records based on a predicate"""

    def __init__(self, name: str, predicate: Callable[[LogRecord], bool]):
        """Initialize filter step

        Args:
            name: Step name
            predicate: Function that returns True for records to keep
        """
        super().__init__(name)
        self.predicate = predicate

    def process(self, record: LogRecord) -> Optional[LogRecord]:
        return record if self.predicate(record) else None


class TimeRangeFilter(FilterStep):
    """Keep records whose timestamp lies within ``[start, end]``"""

    def __init__(self, start: Union[int, float], end: Union[int, float]):
        super().__init__("time_range", lambda r: start <= r.timestamp <= end)
        self.start = start
        self.end = end


class HostFilter(FilterStep):
    """Keep records addressed to a single hostname"""

    def __init__(self, hostname: str):
        super().__init__("hostname", lambda r: r.hostname == hostname)
        self.hostname = hostname
