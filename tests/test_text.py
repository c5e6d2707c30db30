"""Tests for segments, indentation helpers and BlockReader."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lintian_ssg.text import (
    BlockReader,
    Segment,
    indent_position,
    indent_width,
    is_blank,
    preserve_leading_tab,
    split_lines,
    tab_width,
)


class TestSegment:
    """Views into the source string."""

    def test_value_with_padding(self) -> None:
        """Padding is written as leading spaces."""
        assert Segment(2, 5, padding=2).value("abcdefg") == "  cde"

    def test_len_counts_padding(self) -> None:
        """The length includes padding."""
        assert len(Segment(2, 5, padding=2)) == 5

    def test_between(self) -> None:
        """The span up to another segment on the same line."""
        assert Segment(0, 10).between(Segment(4, 10)) == Segment(0, 4)

    def test_between_different_lines(self) -> None:
        """Segments ending differently cannot be joined."""
        with pytest.raises(ValueError):
            Segment(0, 10).between(Segment(4, 12))

    def test_trim(self) -> None:
        """Whitespace trimming on either side."""
        source = "  ab  \n"
        assert Segment(0, 7).trim_left_space(source) == Segment(2, 7)
        assert Segment(0, 6).trim_right_space(source) == Segment(0, 4)

    def test_trim_left_space_width_keeps_newline(self) -> None:
        """The newline survives a wider trim."""
        source = " \n"
        assert Segment(0, 2).trim_left_space_width(4, source).value(source) == "\n"

    def test_trim_left_space_width_overshooting_tab(self) -> None:
        """A tab wider than the trim leaves padding."""
        source = "\tx\n"
        trimmed = Segment(0, 3).trim_left_space_width(2, source)
        assert trimmed == Segment(1, 3, padding=2)

    def test_is_empty(self) -> None:
        """Zero-length segments are empty."""
        assert Segment(3, 3).is_empty
        assert not Segment(3, 4).is_empty


class TestIndentation:
    """Tab stops are four columns wide."""

    @pytest.mark.parametrize(("column", "width"), [(0, 4), (1, 3), (3, 1), (4, 4)])
    def test_tab_width(self, column: int, width: int) -> None:
        """A tab reaches the next multiple of four."""
        assert tab_width(column) == width

    def test_indent_width(self) -> None:
        """Spaces and tabs are measured in columns."""
        assert indent_width("  x", 0) == (2, 2)
        assert indent_width("\t x", 0) == (5, 2)
        assert indent_width(" \tx", 0) == (4, 2)

    def test_indent_position_exact(self) -> None:
        """Exactly enough spaces leave no padding."""
        assert indent_position("  x", 0, 2) == (2, 0)

    def test_indent_position_tab_overshoot(self) -> None:
        """A tab past the width reports the overshoot."""
        assert indent_position("\tx", 0, 2) == (1, 2)

    def test_indent_position_insufficient(self) -> None:
        """Too little indentation is reported as None."""
        assert indent_position("  x", 0, 4) is None

    def test_indent_position_zero_width(self) -> None:
        """Zero width always matches at the start."""
        assert indent_position("x", 0, 0) == (0, 0)

    def test_is_blank(self) -> None:
        """Only whitespace counts as blank."""
        assert is_blank(" \t\n")
        assert not is_blank(" x\n")

    @given(spaces=st.integers(min_value=0, max_value=8), width=st.integers(min_value=1, max_value=4))
    def test_spaces_position_property(self, spaces: int, width: int) -> None:
        """Pure space indentation matches exactly when wide enough."""
        found = indent_position(" " * spaces + "x", 0, width)
        if spaces >= width:
            assert found == (width, 0)
        else:
            assert found is None


class TestBlockReader:
    """The line cursor used by both parsing phases."""

    def test_split_lines_keeps_newlines(self) -> None:
        """Each line segment includes its newline."""
        assert split_lines("a\nbc\n") == [Segment(0, 2), Segment(2, 5)]

    def test_peek_and_advance(self) -> None:
        """Advancing moves within the line."""
        reader = BlockReader.from_source("ab\ncd\n")
        assert reader.peek_line() == ("ab\n", Segment(0, 3))
        reader.advance(1)
        assert reader.peek_line() == ("b\n", Segment(1, 3))
        assert reader.peek() == "b"

    def test_advance_line(self) -> None:
        """Moving past the last line exhausts the reader."""
        reader = BlockReader.from_source("ab\ncd\n")
        reader.advance_line()
        assert reader.peek_line() == ("cd\n", Segment(3, 6))
        reader.advance_line()
        line, _ = reader.peek_line()
        assert line is None

    def test_advance_crosses_line_end(self) -> None:
        """Advancing past a newline moves to the next line."""
        reader = BlockReader.from_source("ab\ncd\n")
        reader.advance(3)
        line, _ = reader.peek_line()
        assert line == "cd\n"

    def test_skip_blank_lines(self) -> None:
        """Blank lines are counted and skipped."""
        reader = BlockReader.from_source("\n  \nx\n")
        assert reader.skip_blank_lines() == (2, True)
        assert reader.peek() == "x"

    def test_line_offset_after_tab(self) -> None:
        """Line offset counts tab stops."""
        reader = BlockReader.from_source(" \tx\n")
        reader.advance(2)
        assert reader.line_offset() == 4

    def test_padding_is_consumed_first(self) -> None:
        """Padding is read as spaces before the next character."""
        reader = BlockReader.from_source("\tx\n")
        reader.advance(1)
        reader.set_padding(2)
        assert reader.peek() == " "
        reader.advance(2)
        assert reader.peek() == "x"


class TestPreserveLeadingTab:
    """A tab left whole by the indentation boundary is kept as a tab."""

    def test_unconsumed_tab_kept(self) -> None:
        """Padding covering the whole tab is swapped back for the tab."""
        reader = BlockReader.from_source("\tx\n")
        reader.advance(1)
        reader.set_padding(4)
        _, segment = reader.peek_line()
        assert preserve_leading_tab(segment, reader, 0) == Segment(0, 3)

    def test_partly_consumed_tab_stays_padding(self) -> None:
        """Padding left over from a split tab is kept as spaces."""
        reader = BlockReader.from_source("\tx\n")
        reader.advance(1)
        reader.set_padding(2)
        _, segment = reader.peek_line()
        assert preserve_leading_tab(segment, reader, 0) == Segment(1, 3, padding=2)
        assert reader.position() == (0, Segment(1, 3, padding=2))
