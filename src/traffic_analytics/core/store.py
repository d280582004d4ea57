import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..parsers.base import LogRecord, ParserError
from ..parsers.json_parser import TransactionLogParser
from ..processors.pipeline import HostFilter, Pipeline, TimeRangeFilter
from ..utils.constants import RECORD_FILE_PATTERN
from .reader import LogReader

logger = logging.getLogger(__name__)


@dataclass
class LoadError:
    message: str
    line_number: Optional[int] = None


@dataclass
class LoadResult:
    path: str
    loaded: int = 0
    errors: List[LoadError] = field(default_factory=list)


class RecordStore:
    """In-memory collection of transaction log records.

    Records are read once and queried by time range and hostname, the same
    way the analytics endpoint queries its log collection.
    """

    def __init__(
        self,
        parser: Optional[TransactionLogParser] = None,
        reader: Optional[LogReader] = None,
    ):
        self.parser = parser or TransactionLogParser()
        self.reader = reader or LogReader()
        self._records: List[LogRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    def add(self, records: Iterable[LogRecord]) -> int:
        """Add already parsed records, returning how many were added"""
        before = len(self._records)
        self._records.extend(records)
        return len(self._records) - before

    def load(self, path: Union[str, Path]) -> List[LoadResult]:
        """Load a record file, or every matching file in a directory.

        Malformed lines are collected on the result instead of aborting the
        load.

        Raises:
            FileNotFoundError: If the path does not exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Record file not found: {path}")

        if path.is_dir():
            files = sorted(p for p in path.glob(RECORD_FILE_PATTERN) if p.is_file())
            return [self._load_file(p) for p in files]
        return [self._load_file(path)]

    def _load_file(self, path: Path) -> LoadResult:
        result = LoadResult(path=str(path))
        lines = self.reader.read_lines(path)

        first = next((line for line in lines if line.strip()), None)
        lines.close()
        if first is None:
            logger.warning(f"No records in {path}")
            return result

        if first.lstrip().startswith("["):
            self._load_array(path, result)
        else:
            self._load_lines(path, result)

        logger.info(
            f"Loaded {result.loaded} records from {path} ({len(result.errors)} errors)"
        )
        return result

    def _load_lines(self, path: Path, result: LoadResult) -> None:
        for line_number, line in enumerate(self.reader.read_lines(path), 1):
            try:
                record = self.parser.parse_line(line)
            except ParserError as e:
                logger.debug(f"{path}:{line_number}: {e}")
                result.errors.append(LoadError(str(e), line_number))
                continue
            if record is not None:
                self._records.append(record)
                result.loaded += 1

    def _load_array(self, path: Path, result: LoadResult) -> None:
        try:
            documents = json.loads(self.reader.read_text(path))
        except json.JSONDecodeError as e:
            result.errors.append(LoadError(f"Invalid JSON: {e}"))
            return

        if not isinstance(documents, list):
            result.errors.append(LoadError("Expected a JSON array of records"))
            return

        for position, document in enumerate(documents, 1):
            try:
                record = self.parser.parse_document(document)
            except ParserError as e:
                result.errors.append(LoadError(f"Document {position}: {e}"))
                continue
            self._records.append(record)
            result.loaded += 1

    def find(
        self,
        start: Union[int, float],
        end: Union[int, float],
        host: Optional[str] = None,
    ) -> List[LogRecord]:
        """Return records with ``start <= timestamp <= end``, optionally for one host"""
        pipeline = Pipeline()
        pipeline.add_step(TimeRangeFilter(start, end))
        if host:
            pipeline.add_step(HostFilter(host))
        return list(pipeline.run(self._records))

    def hostnames(self) -> List[str]:
        """Distinct hostnames in first-seen order"""
        return list(dict.fromkeys(record.hostname for record in self._records))
