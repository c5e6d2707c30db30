"""Byte stream helpers for publishing generated manuals.

BodyFilterReader:
    Wraps a binary stream and yields only the bytes strictly between a
    start marker line and an end marker line (``<body>`` and ``</body>`` by
    default). It is not an HTML parser: each marker must sit alone on its
    own line, matched byte for byte, line terminator included.

    The reader moves through three states:

    Searching
        Source lines are read and dropped until one equals the start
        marker. A source that ends first yields nothing.
    Streaming
        Source lines are copied into the caller's buffer one at a time.
        When a line does not fit, the remainder is kept as pending bytes
        and handed out first on the next call. The end marker line moves
        the reader to the closed state.
    Closed
        Every call returns zero bytes and end-of-stream without touching
        the source again.

    The bytes handed out, concatenated in call order, are the same for any
    sequence of buffer sizes.

write_file:
    Create or overwrite a file below an output directory from any binary
    stream, creating parent directories as needed.

Thread Safety:
    A BodyFilterReader belongs to one stream and one consumer. Dropping it
    mid-stream is safe; it holds no resources besides the source.

"""

from __future__ import annotations

import enum
import io
import shutil
from pathlib import Path
from typing import BinaryIO, Protocol

from lintian_ssg.errors import SourceReadError
from lintian_ssg.utils.logger import get_logger

logger = get_logger(__name__)

START_MARKER = b"<body>\n"
END_MARKER = b"</body>\n"


class ReadStatus(enum.Enum):
    """Outcome of one BodyFilterReader.read_status call."""

    MORE = "more"
    EOF = "eof"


class ByteSource(Protocol):
    """Anything with a binary ``read(size)``."""

    def read(self, size: int = -1, /) -> bytes: ...


class _LineSource:
    """Splits a byte source into lines, reading ``size`` bytes at a time."""

    __slots__ = ("_buffer", "_eof", "_size", "_source")

    def __init__(self, source: ByteSource, size: int) -> None:
        self._source = source
        self._size = size
        self._buffer = bytearray()
        self._eof = False

    def readline(self) -> bytes:
        """Next line with its terminator.

        The last line is returned without a terminator when the source does
        not end with one. Returns ``b""`` once the source is exhausted.
        """
        searched = 0
        while True:
            index = self._buffer.find(b"\n", searched)
            if index >= 0:
                line = bytes(self._buffer[: index + 1])
                del self._buffer[: index + 1]
                return line
            if self._eof:
                line = bytes(self._buffer)
                self._buffer.clear()
                return line
            searched = len(self._buffer)
            chunk = self._source.read(self._size)
            if chunk:
                self._buffer += chunk
            else:
                self._eof = True


class BodyFilterReader(io.RawIOBase):
    """Stream of the bytes between two marker lines of another stream.

    Args:
        source: Binary stream to filter
        buffer_size: Bytes requested from ``source`` per read
        start_marker: Line that opens the extracted region
        end_marker: Line that closes the extracted region

    Usage:
        >>> with open("lintian.html", "rb") as page:
        ...     body = BodyFilterReader(page).read()

    Besides the usual file methods, :meth:`read_status` reports whether more
    data may follow, the way a single ``read(buffer)`` call in other I/O
    libraries does.
    """

    def __init__(
        self,
        source: ByteSource,
        buffer_size: int = io.DEFAULT_BUFFER_SIZE,
        *,
        start_marker: bytes = START_MARKER,
        end_marker: bytes = END_MARKER,
    ) -> None:
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {buffer_size}")
        super().__init__()
        self._lines = _LineSource(source, buffer_size)
        self._start_marker = start_marker
        self._end_marker = end_marker
        self._opened = False
        self._finished = False
        self._pending = b""

    @property
    def opened(self) -> bool:
        """True once the start marker has been seen."""
        return self._opened

    @property
    def finished(self) -> bool:
        """True once end-of-stream has been reported for the region."""
        return self._finished and not self._pending

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        count, _ = self.read_status(buffer)
        return count

    def read_status(self, buffer: bytearray | memoryview) -> tuple[int, ReadStatus]:
        """Fill ``buffer`` with region bytes.

        Returns:
            (bytes written, MORE or EOF). EOF may come with the last bytes
            of the region.

        Raises:
            SourceReadError: The source failed. ``written`` tells how many
                bytes were copied into ``buffer`` before the failure.
        """
        if self.closed:
            raise ValueError("I/O operation on closed file.")
        if self.finished:
            return 0, ReadStatus.EOF
        view = memoryview(buffer).cast("B")
        size = len(view)
        if size == 0:
            return 0, ReadStatus.MORE

        count = 0
        try:
            if not self._opened and not self._find_start():
                return 0, ReadStatus.EOF
            while count < size:
                if self._pending:
                    n = min(size - count, len(self._pending))
                    view[count : count + n] = self._pending[:n]
                    self._pending = self._pending[n:]
                    count += n
                    continue
                if self._finished:
                    break
                line = self._lines.readline()
                if not line:
                    logger.debug("source ended before the end marker")
                    self._finished = True
                elif line == self._end_marker:
                    logger.debug("end marker found")
                    self._finished = True
                else:
                    self._pending = line
        except OSError as exc:
            raise SourceReadError(count, f"reading source failed: {exc}") from exc
        status = ReadStatus.EOF if self.finished else ReadStatus.MORE
        return count, status

    def _find_start(self) -> bool:
        while True:
            line = self._lines.readline()
            if not line:
                logger.debug("source ended before the start marker")
                self._finished = True
                return False
            if line == self._start_marker:
                logger.debug("start marker found")
                self._opened = True
                return True


def write_file(out_dir: str | Path, name: str, content: BinaryIO) -> Path:
    """Create or overwrite ``out_dir/name`` with the bytes of ``content``.

    Args:
        out_dir: Output directory (created if missing)
        name: Relative path of the file, may contain directories
        content: Binary stream to copy

    Returns:
        Path of the written file

    Raises:
        OSError: The directory or file could not be created or written, or
            reading ``content`` failed
    """
    path = Path(out_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as file:
        shutil.copyfileobj(content, file)
    return path


__all__ = ["END_MARKER", "START_MARKER", "BodyFilterReader", "ReadStatus", "write_file"]
