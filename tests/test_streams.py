"""Tests for BodyFilterReader and write_file."""

import io
import os

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from lintian_ssg import BodyFilterReader, ReadStatus, SourceReadError, write_file
from lintian_ssg.errors import LintianSsgError

DATA = (
    b"testdata0\ntestdata1\ntestdata2\n<body>\n"
    b"testdata3\ntestdata4\ntestdata5\n</body>\n"
    b"testdata6\ntestdata7\ntestdata8"
)
BODY = b"testdata3\ntestdata4\ntestdata5\n"


class ScriptedSource:
    """Returns the given chunks in order, then raises ``error``."""

    def __init__(self, chunks: list[bytes], error: Exception) -> None:
        self._chunks = list(chunks)
        self._error = error
        self.calls = 0

    def read(self, size: int = -1) -> bytes:
        self.calls += 1
        if self._chunks:
            return self._chunks.pop(0)
        raise self._error


def _drain(reader: BodyFilterReader, sizes: list[int]) -> bytes:
    out = bytearray()
    i = 0
    while True:
        buffer = bytearray(sizes[i % len(sizes)])
        i += 1
        n, status = reader.read_status(buffer)
        out += buffer[:n]
        if status is ReadStatus.EOF:
            return bytes(out)


class TestReadStatus:
    """Call-by-call results for fixed buffer sizes."""

    def test_empty_source(self) -> None:
        """An empty source reports EOF straight away."""
        reader = BodyFilterReader(io.BytesIO(b""))
        assert reader.read_status(bytearray(32)) == (0, ReadStatus.EOF)

    def test_whole_body_fits(self) -> None:
        """A large buffer takes the whole body in one call."""
        reader = BodyFilterReader(io.BytesIO(DATA))
        buffer = bytearray(32)
        assert reader.read_status(buffer) == (30, ReadStatus.EOF)
        assert bytes(buffer[:30]) == BODY
        assert reader.read_status(buffer) == (0, ReadStatus.EOF)

    def test_line_split_across_calls(self) -> None:
        """A line longer than the free space is split over two calls."""
        reader = BodyFilterReader(io.BytesIO(DATA))
        buffer = bytearray(16)
        assert reader.read_status(buffer) == (16, ReadStatus.MORE)
        assert bytes(buffer) == b"testdata3\ntestda"
        assert reader.read_status(buffer) == (14, ReadStatus.EOF)
        assert bytes(buffer[:14]) == b"ta4\ntestdata5\n"

    def test_exact_fit_reports_more_then_eof(self) -> None:
        """The end marker is only read on the call after the buffer fills."""
        reader = BodyFilterReader(io.BytesIO(DATA))
        buffer = bytearray(30)
        assert reader.read_status(buffer) == (30, ReadStatus.MORE)
        assert bytes(buffer) == BODY
        assert reader.read_status(buffer) == (0, ReadStatus.EOF)

    def test_long_line_small_buffer(self) -> None:
        """A line several buffers long is delivered in pieces."""
        data = b"<body>\ntestdata3 testdata4 testdata5\n</body>\n"
        reader = BodyFilterReader(io.BytesIO(data))
        buffer = bytearray(8)
        results = []
        while True:
            n, status = reader.read_status(buffer)
            results.append((bytes(buffer[:n]), status))
            if status is ReadStatus.EOF:
                break
        assert results == [
            (b"testdata", ReadStatus.MORE),
            (b"3 testda", ReadStatus.MORE),
            (b"ta4 test", ReadStatus.MORE),
            (b"data5\n", ReadStatus.EOF),
        ]

    def test_zero_length_buffer_does_not_touch_source(self) -> None:
        """An empty buffer returns MORE without reading the source."""
        source = ScriptedSource([], AssertionError("source read"))
        reader = BodyFilterReader(source)
        assert reader.read_status(bytearray()) == (0, ReadStatus.MORE)
        assert source.calls == 0

    def test_closed_state_does_not_touch_source(self) -> None:
        """Once the end marker is seen the source is left alone."""
        source = ScriptedSource([b"<body>\nX\n</body>\n"], AssertionError("source read"))
        reader = BodyFilterReader(source)
        assert reader.read_status(bytearray(8)) == (2, ReadStatus.EOF)
        calls = source.calls
        assert reader.read_status(bytearray(8)) == (0, ReadStatus.EOF)
        assert source.calls == calls

    def test_invalid_buffer_size(self) -> None:
        """Buffer sizes below one are rejected."""
        with pytest.raises(ValueError):
            BodyFilterReader(io.BytesIO(DATA), buffer_size=0)


class TestRegionBoundaries:
    """Marker handling and unusual sources."""

    def test_markers_must_match_whole_line(self) -> None:
        """Only lines equal to a marker count."""
        data = b"<body class='x'>\n <body>\n<body>\nA\n</body> \nB\n</body>\nC\n"
        assert BodyFilterReader(io.BytesIO(data)).read() == b"A\n</body> \nB\n"

    def test_absent_start_marker(self) -> None:
        """Without a start marker nothing is delivered."""
        reader = BodyFilterReader(io.BytesIO(b"a\nb\n"))
        assert reader.read_status(bytearray(8)) == (0, ReadStatus.EOF)
        assert reader.opened is False
        assert reader.finished is True

    def test_missing_end_marker_delivers_rest(self) -> None:
        """Everything after the start marker is delivered up to EOF."""
        assert BodyFilterReader(io.BytesIO(b"<body>\nX\nY")).read() == b"X\nY"

    def test_empty_region(self) -> None:
        """Adjacent markers give an empty body."""
        assert BodyFilterReader(io.BytesIO(b"<body>\n</body>\n")).read() == b""

    def test_custom_markers(self) -> None:
        """Other marker lines can be configured."""
        data = b"<body>\nno\n<main>\nyes\n</main>\n"
        reader = BodyFilterReader(io.BytesIO(data), start_marker=b"<main>\n", end_marker=b"</main>\n")
        assert reader.read() == b"yes\n"

    def test_file_interface(self) -> None:
        """The reader works as a plain raw stream."""
        reader = BodyFilterReader(io.BytesIO(DATA), buffer_size=3)
        assert reader.readable()
        assert reader.read() == BODY
        assert reader.read() == b""

    def test_buffered_wrapper_reads_lines(self) -> None:
        """BufferedReader can iterate the body line by line."""
        reader = io.BufferedReader(BodyFilterReader(io.BytesIO(DATA)))
        assert reader.readlines() == [b"testdata3\n", b"testdata4\n", b"testdata5\n"]

    def test_read_after_close(self) -> None:
        """Reading a closed reader raises ValueError."""
        reader = BodyFilterReader(io.BytesIO(DATA))
        reader.close()
        with pytest.raises(ValueError):
            reader.read_status(bytearray(8))


class TestSourceErrors:
    """Failures of the wrapped source."""

    def test_error_mid_stream_reports_written_bytes(self) -> None:
        """The error carries the bytes copied before it and its cause."""
        error = TimeoutError("timed out")
        reader = BodyFilterReader(ScriptedSource([b"<body>\nX\n"], error))
        buffer = bytearray(8)
        with pytest.raises(SourceReadError) as info:
            reader.read_status(buffer)
        assert info.value.written == 2
        assert bytes(buffer[:2]) == b"X\n"
        assert info.value.__cause__ is error

    def test_error_after_long_prefix(self) -> None:
        """A long junk prefix does not hide a later source error."""
        data = b"\x00" * 4070 + b"\n<body>\ntestdata1\ntestdata2\n</body>\n"
        source = ScriptedSource([data[:4096]], TimeoutError("timed out"))
        reader = BodyFilterReader(source, buffer_size=4096)
        buffer = bytearray(8)
        assert reader.read_status(buffer) == (8, ReadStatus.MORE)
        assert bytes(buffer) == b"testdata"
        with pytest.raises(SourceReadError) as info:
            reader.read_status(buffer)
        assert info.value.written == 2
        assert bytes(buffer[:2]) == b"1\n"

    def test_error_while_searching(self) -> None:
        """Errors before the start marker report nothing written."""
        reader = BodyFilterReader(ScriptedSource([b"no body\n"], OSError("broken")))
        with pytest.raises(SourceReadError) as info:
            reader.read_status(bytearray(8))
        assert info.value.written == 0

    def test_error_is_os_error(self) -> None:
        """Source errors can be caught as OSError."""
        reader = BodyFilterReader(ScriptedSource([], OSError("broken")))
        with pytest.raises(OSError):
            reader.read()
        assert issubclass(SourceReadError, LintianSsgError)


_line = st.binary(max_size=20).filter(
    lambda b: b"\n" not in b and b not in (b"<body>", b"</body>")
)


class TestChunkingProperty:
    """The delivered bytes do not depend on the buffer sizes used."""

    @given(
        prefix=st.lists(_line, max_size=5),
        body=st.lists(_line, max_size=10),
        suffix=st.lists(_line, max_size=5),
        sizes=st.lists(st.integers(min_value=1, max_value=64), min_size=1, max_size=8),
        buffer_size=st.integers(min_value=1, max_value=32),
    )
    @settings(max_examples=200)
    def test_any_buffer_sizes_yield_body(
        self,
        prefix: list[bytes],
        body: list[bytes],
        suffix: list[bytes],
        sizes: list[int],
        buffer_size: int,
    ) -> None:
        """Any source chunking and buffer size give the same body."""

        def lines(items: list[bytes]) -> bytes:
            return b"".join(item + b"\n" for item in items)

        source = lines(prefix) + b"<body>\n" + lines(body) + b"</body>\n" + lines(suffix)
        reader = BodyFilterReader(io.BytesIO(source), buffer_size=buffer_size)
        assert _drain(reader, sizes) == lines(body)

    @pytest.mark.parametrize("size", [32, 16, 30, 1, 7])
    def test_small_document(self, size: int) -> None:
        """Each buffer size gives the same body."""
        source = b"a\nb\nc\n<body>\nX\nY\nZ\n</body>\nd\n"
        assert _drain(BodyFilterReader(io.BytesIO(source)), [size]) == b"X\nY\nZ\n"


class TestWriteFile:
    """Creating output files from streams."""

    def test_creates_nested_file(self, tmp_path) -> None:
        """Missing parent directories are created."""
        path = write_file(tmp_path, "some/nested/dir/file.html", io.BytesIO(b"content\n"))
        assert path == tmp_path / "some" / "nested" / "dir" / "file.html"
        assert path.read_bytes() == b"content\n"

    def test_overwrites_existing_file(self, tmp_path) -> None:
        """An existing file is truncated and replaced."""
        write_file(tmp_path, "file.html", io.BytesIO(b"old content that is longer"))
        path = write_file(tmp_path, "file.html", io.BytesIO(b"new"))
        assert path.read_bytes() == b"new"

    def test_accepts_filtered_stream(self, tmp_path) -> None:
        """The filtered body can be written directly."""
        path = write_file(str(tmp_path), "manual/index.html", BodyFilterReader(io.BytesIO(DATA)))
        assert path.read_bytes() == BODY

    @pytest.mark.skipif(
        hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores file permissions"
    )
    def test_permission_denied(self, tmp_path) -> None:
        """A read-only target file cannot be overwritten."""
        target = tmp_path / "file.html"
        target.write_bytes(b"")
        target.chmod(0o400)
        with pytest.raises(OSError):
            write_file(tmp_path, "file.html", io.BytesIO(b"content"))

    def test_name_too_long(self, tmp_path) -> None:
        """An overlong file name raises OSError."""
        with pytest.raises(OSError):
            write_file(tmp_path, "x" * 1000, io.BytesIO(b"content"))

    def test_reader_error_propagates(self, tmp_path) -> None:
        """A failing reader aborts the write with its error."""
        error = OSError("unexpected end of stream")
        with pytest.raises(OSError) as info:
            write_file(tmp_path, "file.html", ScriptedSource([], error))
        assert info.value is error
