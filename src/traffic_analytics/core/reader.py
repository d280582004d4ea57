import codecs
import gzip
from pathlib import Path
from typing import Iterator, Union

from ..utils.constants import DEFAULT_CHUNK_SIZE


class LogReader:
    """Streaming reader for plain and gzip compressed record files"""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, encoding: str = "utf-8"):
        """Initialize the log reader

        Args:
            chunk_size: Size of chunks to read at a time (bytes)
            encoding: Text encoding of the files
        """
        self.chunk_size = chunk_size
        self.encoding = encoding

    def read_lines(self, file_path: Union[str, Path]) -> Iterator[str]:
        """Read log file line by line

        Args:
            file_path: Path to log file

        Yields:
            Each line from the log file

        Raises:
            IOError: If file cannot be read
        """
        path = Path(file_path)

        if path.suffix == ".gz":
            yield from self._read_gzip(path)
        else:
            yield from self._read_text(path)

    def read_text(self, file_path: Union[str, Path]) -> str:
        """Read the whole file as text"""
        return "\n".join(self.read_lines(file_path))

    def _read_text(self, path: Path) -> Iterator[str]:
        """Read a plain text log file in chunks"""
        with open(path, "rb") as f:
            decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")
            remainder = ""
            for chunk in iter(lambda: f.read(self.chunk_size), b""):
                text = remainder + decoder.decode(chunk)
                lines = text.split("\n")
                remainder = lines.pop()
                for line in lines:
                    yield line.rstrip("\r")
            remainder += decoder.decode(b"", final=True)
            if remainder:
                yield remainder.rstrip("\r")

    def _read_gzip(self, path: Path) -> Iterator[str]:
        """Read a gzipped log file"""
        with gzip.open(path, "rt", encoding=self.encoding, errors="replace") as f:
            for line in f:
                yield line.rstrip("\r\n")
