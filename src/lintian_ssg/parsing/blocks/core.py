"""Built-in leaf and container block parsers.

Paragraphs, ATX headings, thematic breaks, fenced code, block quotes and
HTML blocks. Lists live in :mod:`lintian_ssg.parsing.blocks.list`.

Every parser declines by returning ``(None, BlockState.NO_CHILDREN)`` and
leaves the reader where it found it.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, cast

from lintian_ssg.nodes import (
    Block,
    BlockQuote,
    FencedCodeBlock,
    Heading,
    HtmlBlock,
    Node,
    Paragraph,
    ThematicBreak,
)
from lintian_ssg.parsing.protocols import BlockState
from lintian_ssg.text import (
    BlockReader,
    Segment,
    indent_position,
    indent_width,
    is_blank,
    preserve_leading_tab,
    tab_width,
)
from lintian_ssg.utils.charsets import FENCE_CHARS, THEMATIC_BREAK_CHARS, WHITESPACE

if TYPE_CHECKING:
    from lintian_ssg.parsing.context import ParseContext

_WS = "".join(sorted(WHITESPACE))
_DECLINE = (None, BlockState.NO_CHILDREN)


# =============================================================================
# Paragraph
# =============================================================================


class ParagraphParser:
    """Fallback parser: any non-blank line starts or continues a paragraph.

    Indented lines are accepted too, so text is never dropped when no code
    block parser is registered.
    """

    def trigger(self) -> str | None:
        return None

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]:
        _, segment = reader.peek_line()
        segment = segment.trim_left_space(pc.source)
        if segment.is_empty:
            return _DECLINE
        node = Paragraph(lines=[segment])
        reader.advance(len(segment) - 1)
        return node, BlockState.NO_CHILDREN

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState:
        line, segment = reader.peek_line()
        if line is None or is_blank(line):
            return BlockState.CLOSE
        node.lines.append(segment)
        reader.advance(len(segment) - 1)
        return BlockState.CONTINUE | BlockState.NO_CHILDREN

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None:
        source = pc.source
        lines = [line.trim_left_space(source) for line in node.lines]
        if not lines:
            if node.parent is not None:
                node.parent.remove_child(node)
            return
        lines[-1] = lines[-1].trim_right_space(source)
        node.lines = lines

    def can_interrupt_paragraph(self) -> bool:
        return False

    def can_accept_indented_line(self) -> bool:
        return True


# =============================================================================
# ATX Heading
# =============================================================================


class AtxHeadingParser:
    """``#`` through ``######`` headings on a single line."""

    def trigger(self) -> str | None:
        return "#"

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]:
        line, segment = reader.peek_line()
        pos = pc.block_offset
        if line is None or pos < 0:
            return _DECLINE
        i = pos
        while i < len(line) and line[i] == "#":
            i += 1
        level = i - pos
        if level == 0 or level > 6:
            return _DECLINE
        node = Heading(level=level)
        rest = line[i:]
        skipped = len(rest) - len(rest.lstrip(_WS))
        if skipped == 0:
            return _DECLINE
        start = min(i + skipped, len(line) - 1)
        stop = len(line.rstrip(_WS))
        if stop <= start:
            stop = start
        else:
            # optional closing sequence, preceded by a space
            j = stop - 1
            while j >= start and line[j] == "#":
                j -= 1
            if j != stop - 1 and line[j] not in WHITESPACE:
                j = stop - 1
            stop = j + 1
        content = line[start:stop].rstrip(_WS)
        if content:
            base = segment.start - segment.padding
            node.lines.append(Segment(base + start, base + start + len(content)))
        reader.advance(len(segment) - 1)
        return node, BlockState.NO_CHILDREN

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState:
        return BlockState.CLOSE

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None:
        pass

    def can_interrupt_paragraph(self) -> bool:
        return True

    def can_accept_indented_line(self) -> bool:
        return False


# =============================================================================
# Thematic Break
# =============================================================================


def is_thematic_break(line: str, column: int) -> bool:
    """Three or more matching ``-``, ``*`` or ``_`` with optional spaces."""
    width, pos = indent_width(line, column)
    if width > 3:
        return False
    mark = ""
    count = 0
    for char in line[pos:]:
        if char in WHITESPACE:
            continue
        if not mark:
            if char not in THEMATIC_BREAK_CHARS:
                return False
            mark = char
        elif char != mark:
            return False
        count += 1
    return count > 2


class ThematicBreakParser:
    def trigger(self) -> str | None:
        return "-*_"

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]:
        line, segment = reader.peek_line()
        if line is not None and is_thematic_break(line, reader.line_offset()):
            reader.advance(len(segment) - 1)
            return ThematicBreak(), BlockState.NO_CHILDREN
        return _DECLINE

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState:
        return BlockState.CLOSE

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None:
        pass

    def can_interrupt_paragraph(self) -> bool:
        return True

    def can_accept_indented_line(self) -> bool:
        return False


# =============================================================================
# Fenced Code
# =============================================================================


class FencedCodeBlockParser:
    """Code between two fences of at least three backticks or tildes.

    The opening fence's indentation is stripped from every content line. A
    backtick fence's info string may not contain backticks.
    """

    def trigger(self) -> str | None:
        return "`~"

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]:
        line, segment = reader.peek_line()
        pos = pc.block_offset
        if line is None or pos < 0 or line[pos] not in FENCE_CHARS:
            return _DECLINE
        fence_char = line[pos]
        i = pos
        while i < len(line) and line[i] == fence_char:
            i += 1
        fence_length = i - pos
        if fence_length < 3:
            return _DECLINE
        info = None
        if i < len(line) - 1:
            rest = line[i:]
            left = len(rest) - len(rest.lstrip(_WS))
            right = len(rest) - len(rest.rstrip(_WS))
            if left < len(rest) - right:
                value = rest[left : len(rest) - right]
                if fence_char == "`" and "`" in value:
                    return _DECLINE
                info_start = segment.start - segment.padding + i + left
                info_stop = segment.stop - right
                if info_start != info_stop:
                    info = Segment(info_start, info_stop)
        node = FencedCodeBlock(
            info=info,
            fence_char=fence_char,
            fence_length=fence_length,
            fence_indent=pos,
        )
        return node, BlockState.NO_CHILDREN

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState:
        node = cast(FencedCodeBlock, node)
        line, segment = reader.peek_line()
        if line is None:
            return BlockState.CLOSE
        width, pos = indent_width(line, reader.line_offset())
        if width < 4:
            i = pos
            while i < len(line) and line[i] == node.fence_char:
                i += 1
            if i - pos >= node.fence_length and is_blank(line[i:]):
                newline = 1 if line.endswith("\n") else 0
                reader.advance(segment.stop - segment.start - newline + segment.padding)
                return BlockState.CLOSE

        found = indent_position(line, reader.line_offset(), node.fence_indent, segment.padding)
        if found is None:
            stripped = len(line) - len(line.lstrip(_WS))
            pos, padding = (stripped if stripped < len(line) else 0), 0
        else:
            pos, padding = found
        content = Segment(segment.start + pos, segment.stop, padding)
        if padding:
            content = preserve_leading_tab(content, reader, node.fence_indent)
        node.lines.append(content)
        reader.advance_and_set_padding(segment.stop - segment.start - pos - 1, padding)
        return BlockState.CONTINUE | BlockState.NO_CHILDREN

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None:
        pass

    def can_interrupt_paragraph(self) -> bool:
        return True

    def can_accept_indented_line(self) -> bool:
        return False


# =============================================================================
# Block Quote
# =============================================================================


class BlockQuoteParser:
    """``>`` containers. One optional space after the marker is consumed."""

    def trigger(self) -> str | None:
        return ">"

    @staticmethod
    def _consume_marker(reader: BlockReader) -> bool:
        line, _ = reader.peek_line()
        if line is None:
            return False
        width, pos = indent_width(line, reader.line_offset())
        if width > 3 or pos >= len(line) or line[pos] != ">":
            return False
        pos += 1
        if pos >= len(line) or line[pos] == "\n":
            reader.advance(pos)
            return True
        reader.advance(pos)
        if line[pos] in " \t":
            padding = 0
            if line[pos] == "\t":
                padding = tab_width(reader.line_offset()) - 1
            reader.advance_and_set_padding(1, padding)
        return True

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]:
        if self._consume_marker(reader):
            return BlockQuote(), BlockState.HAS_CHILDREN
        return _DECLINE

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState:
        if self._consume_marker(reader):
            return BlockState.CONTINUE | BlockState.HAS_CHILDREN
        return BlockState.CLOSE

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None:
        pass

    def can_interrupt_paragraph(self) -> bool:
        return True

    def can_accept_indented_line(self) -> bool:
        return False


# =============================================================================
# HTML Block
# =============================================================================

_BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "base", "basefont", "blockquote", "body",
        "caption", "center", "col", "colgroup", "dd", "details", "dialog", "dir",
        "div", "dl", "dt", "fieldset", "figcaption", "figure", "footer", "form",
        "frame", "frameset", "h1", "h2", "h3", "h4", "h5", "h6", "head", "header",
        "hr", "html", "iframe", "legend", "li", "link", "main", "menu",
        "menuitem", "meta", "nav", "noframes", "ol", "optgroup", "option", "p",
        "param", "search", "section", "summary", "table", "tbody", "td", "tfoot",
        "th", "thead", "title", "tr", "track", "ul",
    }
)  # fmt: skip

_ATTRIBUTE_NAME = r"[a-zA-Z_:][a-zA-Z0-9_.:\-]*"
_ATTRIBUTE_VALUE = r"(?:[^ \"'=<>`]+|'[^']*'|\"[^\"]*\")"
ATTRIBUTE_PATTERN = rf"(?:[\r\n \t]+{_ATTRIBUTE_NAME}(?:[\r\n \t]*=[\r\n \t]*{_ATTRIBUTE_VALUE})?)"

# (open pattern, closing marker) for start conditions 1-5
_TYPE1_OPEN = re.compile(r"^ {0,3}<(script|pre|style|textarea)(?:\s.*|>.*|/>.*|)\n?$", re.I)
_TYPE1_CLOSE = re.compile(r"</(?:script|pre|style|textarea)>", re.I)
_CLOSED_KINDS: tuple[tuple[int, re.Pattern[str], str], ...] = (
    (2, re.compile(r"^ {0,3}<!--"), "-->"),
    (3, re.compile(r"^ {0,3}<\?"), "?>"),
    (4, re.compile(r"^ {0,3}<![A-Z]+"), ">"),
    (5, re.compile(r"^ {0,3}<!\[CDATA\["), "]]>"),
)
_TYPE6 = re.compile(r"^ {0,3}</?([a-zA-Z][a-zA-Z0-9\-]*)(?:[ \t].*|>.*|/>.*|)\n?$")
_TYPE7 = re.compile(
    rf"^ {{0,3}}<(/ *)?([a-zA-Z][a-zA-Z0-9\-]*)({ATTRIBUTE_PATTERN}*)[ \t]*/?>[ \t]*\n?$"
)
_TYPE1_TAGS = frozenset({"script", "pre", "style", "textarea"})


def _closes(node: HtmlBlock, text: str) -> bool:
    if node.kind == 1:
        return _TYPE1_CLOSE.search(text) is not None
    for kind, _, marker in _CLOSED_KINDS:
        if kind == node.kind:
            return marker in text
    return False


class HtmlBlockParser:
    """Raw HTML blocks, classified by the CommonMark start conditions.

    Kinds 1-5 end at the line holding their closing marker, kinds 6 and 7 at
    the next blank line. Kind 7 (any complete tag alone on its line) cannot
    interrupt a paragraph.
    """

    def trigger(self) -> str | None:
        return "<"

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]:
        line, segment = reader.peek_line()
        if line is None:
            return _DECLINE
        kind = 0
        after_opener = 0
        match = _TYPE1_OPEN.match(line)
        if match is not None:
            kind, after_opener = 1, match.end(1)
        else:
            for candidate, pattern, _ in _CLOSED_KINDS:
                match = pattern.match(line)
                if match is not None:
                    kind, after_opener = candidate, match.end()
                    break
        if kind == 0:
            match = _TYPE6.match(line)
            if match is not None and match.group(1).lower() in _BLOCK_TAGS:
                kind = 6
        if kind == 0:
            last = pc.last_opened_block
            interrupting = last is not None and isinstance(last.node, Paragraph)
            match = _TYPE7.match(line)
            if (
                match is not None
                and not interrupting
                and match.group(2).lower() not in _TYPE1_TAGS
            ):
                kind = 7
        if kind == 0:
            return _DECLINE

        node = HtmlBlock(kind=kind, lines=[segment])
        if kind <= 5 and _closes(node, line[after_opener:]):
            node.closed = True
        reader.advance(len(segment) - 1)
        return node, BlockState.NO_CHILDREN

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState:
        node = cast(HtmlBlock, node)
        if node.closed:
            return BlockState.CLOSE
        line, segment = reader.peek_line()
        if line is None:
            return BlockState.CLOSE
        if node.kind >= 6:
            if is_blank(line):
                return BlockState.CLOSE
        elif _closes(node, line):
            node.closed = True
        node.lines.append(segment)
        reader.advance(len(segment) - 1)
        return BlockState.CONTINUE | BlockState.NO_CHILDREN

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None:
        pass

    def can_interrupt_paragraph(self) -> bool:
        return True

    def can_accept_indented_line(self) -> bool:
        return False


__all__ = [
    "ATTRIBUTE_PATTERN",
    "AtxHeadingParser",
    "BlockQuoteParser",
    "FencedCodeBlockParser",
    "HtmlBlockParser",
    "ParagraphParser",
    "ThematicBreakParser",
    "is_thematic_break",
]
