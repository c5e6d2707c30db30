"""Source segments and the line reader shared by block and inline parsers.

A :class:`Segment` is a ``(start, stop, padding)`` view into the immutable
source string of a document. Parsers never copy line content; they store
segments and resolve them against the source when rendering.

Tab stops are four columns wide. When a tab is only partially consumed as
indentation, the leftover columns are carried on the segment as ``padding``
(virtual leading spaces).

Example:
    >>> source = "\\tcode\\n"
    >>> reader = BlockReader.from_source(source)
    >>> line, segment = reader.peek_line()
    >>> indent_position(line, reader.line_offset(), 2)
    (1, 2)

Thread Safety:
    Segments are frozen. A BlockReader is local to one parse call.

"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from lintian_ssg.utils.charsets import WHITESPACE

TAB_STOP = 4


def tab_width(column: int) -> int:
    """Width of a tab character starting at ``column``."""
    return TAB_STOP - column % TAB_STOP


def is_blank(text: str) -> bool:
    """True if ``text`` holds nothing but whitespace."""
    for char in text:
        if char not in WHITESPACE:
            return False
    return True


def indent_width(line: str, column: int) -> tuple[int, int]:
    """Measure the leading indentation of ``line``.

    Args:
        line: Line content (may start with padding spaces)
        column: Column at which ``line`` starts

    Returns:
        (width in columns, number of characters consumed)
    """
    width = 0
    pos = 0
    for char in line:
        if char == " ":
            width += 1
        elif char == "\t":
            width += tab_width(column + width)
        else:
            break
        pos += 1
    return width, pos


def indent_position(
    line: str, column: int, width: int, padding: int = 0
) -> tuple[int, int] | None:
    """Find where ``width`` columns of indentation end in ``line``.

    Consumes spaces and tabs while fewer than ``width`` columns have been
    seen. A tab that overshoots the requested width leaves the extra columns
    as padding.

    Args:
        line: Line content
        column: Column at which ``line`` starts
        width: Columns of indentation to consume
        padding: Padding already carried by the line's segment

    Returns:
        (character position, leftover padding), or None if the line does not
        supply ``width`` columns of indentation.
    """
    if width == 0:
        return 0, padding
    w = 0
    i = 0
    for char in line:
        if char == "\t" and w < width:
            w += tab_width(column + w)
        elif char == " " and w < width:
            w += 1
        else:
            break
        i += 1
    if w >= width:
        return i - padding, w - width
    return None


@dataclass(frozen=True, slots=True)
class Segment:
    """A view into the source string.

    ``value(source)`` is ``padding`` spaces followed by
    ``source[start:stop]``.
    """

    start: int
    stop: int
    padding: int = 0

    def value(self, source: str) -> str:
        if self.padding:
            return " " * self.padding + source[self.start : self.stop]
        return source[self.start : self.stop]

    def __len__(self) -> int:
        return self.stop - self.start + self.padding

    @property
    def is_empty(self) -> bool:
        return self.start >= self.stop

    def with_start(self, start: int) -> Segment:
        return Segment(start, self.stop, self.padding)

    def with_stop(self, stop: int) -> Segment:
        return Segment(self.start, stop, self.padding)

    def with_padding(self, padding: int) -> Segment:
        return Segment(self.start, self.stop, padding)

    def between(self, other: Segment) -> Segment:
        """Segment from this start up to ``other``'s start on the same line."""
        if self.stop != other.stop:
            raise ValueError("segments do not share a line")
        return Segment(self.start, other.start, self.padding - other.padding)

    def trim_left_space(self, source: str) -> Segment:
        start = self.start
        while start < self.stop and source[start] in WHITESPACE:
            start += 1
        return Segment(start, self.stop)

    def trim_right_space(self, source: str) -> Segment:
        stop = self.stop
        while stop > self.start and source[stop - 1] in WHITESPACE:
            stop -= 1
        return Segment(self.start, stop, self.padding)

    def trim_left_space_width(self, width: int, source: str) -> Segment:
        """Strip up to ``width`` columns of leading indentation.

        Padding is consumed first. The terminating newline is never stripped
        and a tab that overshoots leaves the difference as padding.
        """
        padding = self.padding
        while width > 0 and padding:
            padding -= 1
            width -= 1
        if width == 0:
            return Segment(self.start, self.stop, padding)
        start = self.start
        while start < self.stop - 1 and width > 0:
            char = source[start]
            if char == " ":
                width -= 1
            elif char == "\t":
                width -= TAB_STOP
            else:
                break
            start += 1
        if width < 0:
            padding = -width
        return Segment(start, self.stop, padding)

    def is_blank(self, source: str) -> bool:
        return is_blank(source[self.start : self.stop])


def split_lines(source: str) -> list[Segment]:
    """Split ``source`` into line segments that keep their newline."""
    lines: list[Segment] = []
    start = 0
    length = len(source)
    while start < length:
        stop = source.find("\n", start)
        stop = length if stop == -1 else stop + 1
        lines.append(Segment(start, stop))
        start = stop
    return lines


class BlockReader:
    """Line-oriented cursor over a sequence of segments.

    Used over the physical lines of a document while parsing blocks, and over
    the stored lines of a single block while parsing inlines.

    """

    __slots__ = ("_last", "_line", "_line_offset", "_lines", "_pos", "source")

    def __init__(self, source: str, lines: Sequence[Segment]) -> None:
        self.source = source
        self._lines = lines
        self._last = lines[-1].stop if lines else 0
        self._line = -1
        self._pos = Segment(-1, -1)
        self._line_offset = -1
        self.advance_line()

    @classmethod
    def from_source(cls, source: str) -> BlockReader:
        return cls(source, split_lines(source))

    def peek_line(self) -> tuple[str | None, Segment]:
        """Return the unconsumed rest of the current line.

        The string is None once the reader is exhausted.
        """
        pos = self._pos
        if self._line < len(self._lines) and 0 <= pos.start < self._last:
            return pos.value(self.source), pos
        return None, pos

    def peek(self) -> str:
        """Next character, or an empty string at the end."""
        pos = self._pos
        if pos.padding:
            return " "
        if self._line < len(self._lines) and pos.start < pos.stop:
            return self.source[pos.start]
        return ""

    def position(self) -> tuple[int, Segment]:
        return self._line, self._pos

    def set_position(self, line: int, pos: Segment) -> None:
        self._line_offset = -1
        self._line = line
        self._pos = pos

    def set_padding(self, padding: int) -> None:
        self._line_offset = -1
        self._pos = self._pos.with_padding(padding)

    def advance(self, n: int) -> None:
        """Consume ``n`` characters, padding first, crossing line ends."""
        self._line_offset = -1
        pos = self._pos
        if n < pos.stop - pos.start and pos.padding == 0:
            self._pos = Segment(pos.start + n, pos.stop)
            return
        while n > 0:
            pos = self._pos
            if pos.padding:
                self._pos = pos.with_padding(pos.padding - 1)
            elif pos.start >= pos.stop - 1 and pos.stop < self._last:
                self.advance_line()
            else:
                self._pos = pos.with_start(pos.start + 1)
            n -= 1

    def advance_and_set_padding(self, n: int, padding: int) -> None:
        self.advance(n)
        if padding > self._pos.padding:
            self.set_padding(padding)

    def advance_line(self) -> None:
        self._line += 1
        self._line_offset = -1
        if self._line < len(self._lines):
            self._pos = self._lines[self._line]

    def skip_blank_lines(self) -> tuple[int, bool]:
        """Skip blank lines.

        Returns:
            (number of lines skipped, whether a non-blank line remains)
        """
        count = 0
        while True:
            line, _ = self.peek_line()
            if line is None:
                return count, False
            if not is_blank(line):
                return count, True
            count += 1
            self.advance_line()

    def line_offset(self) -> int:
        """Column of the cursor on its physical line, minus its padding."""
        if self._line_offset < 0:
            head = self._lines[self._line].start if self._line < len(self._lines) else 0
            column = 0
            for i in range(head, self._pos.start):
                if self.source[i] == "\t":
                    column += tab_width(column)
                else:
                    column += 1
            self._line_offset = column - self._pos.padding
        return self._line_offset


def preserve_leading_tab(segment: Segment, reader: BlockReader, indent: int) -> Segment:
    """Keep a literal tab when it ends exactly on the indentation boundary.

    Re-probes the column one character before ``segment``. When that column
    equals the current one (plus ``indent``), the padding came from a tab that
    the boundary fell inside of: the tab itself is kept and padding dropped.
    """
    offset_with_padding = reader.line_offset() + indent
    line, pos = reader.position()
    reader.set_position(line, Segment(pos.start - 1, pos.stop))
    try:
        if offset_with_padding == reader.line_offset():
            return Segment(segment.start - 1, segment.stop)
        return segment
    finally:
        reader.set_position(line, pos)
