"""List and list item parsers.

A list opens on the first item marker and continues while following lines
either belong to its last item (indented to the item's content offset) or
start a new item with a compatible marker. Items are opened by a separate
parser that only accepts a List as parent.

Tightness is settled when the list closes: a list is loose if any item but
the first, or any block after the first inside an item, follows a blank
line. Paragraphs of tight lists are turned into TextBlocks so they render
without <p> tags.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from lintian_ssg.nodes import Block, List, ListItem, Node, Paragraph, TextBlock
from lintian_ssg.parsing.blocks.core import is_thematic_break
from lintian_ssg.parsing.protocols import BlockState
from lintian_ssg.text import BlockReader, indent_position, indent_width, is_blank
from lintian_ssg.utils.charsets import BULLET_LIST_MARKERS, DIGITS, ORDERED_LIST_DELIMITERS

if TYPE_CHECKING:
    from lintian_ssg.parsing.context import ParseContext

_DECLINE = (None, BlockState.NO_CHILDREN)
_LIST_TRIGGERS = "-+*0123456789"


@dataclass(frozen=True, slots=True)
class ListItemMatch:
    """Positions within a line that starts a list item.

    Attributes:
        indent: Spaces before the marker
        marker_end: Position right after the marker (delimiter included)
        content_start: Start of the item content, or -1 if the line ends
        content_stop: End of the item content (newline excluded), or -1
        ordered: Whether the marker is a number

    """

    indent: int
    marker_end: int
    content_start: int
    content_stop: int
    ordered: bool

    def marker(self, line: str) -> str:
        return line[self.marker_end - 1]

    def number(self, line: str) -> int:
        return int(line[self.indent : self.marker_end - 1])

    def content_is_blank(self, line: str) -> bool:
        return self.content_start < 0 or is_blank(line[self.content_start : self.content_stop])


def parse_list_item(line: str) -> ListItemMatch | None:
    """Recognize ``-``, ``+``, ``*`` or ``1.``/``1)`` item markers."""
    length = len(line)
    i = 0
    while i < length and line[i] == " ":
        i += 1
    if i > 3:
        return None
    indent = i
    if i < length and line[i] in BULLET_LIST_MARKERS:
        i += 1
        ordered = False
    elif i < length:
        while i < length and line[i] in DIGITS:
            i += 1
        digits = i - indent
        if digits == 0 or digits > 9:
            return None
        if i < length and line[i] in ORDERED_LIST_DELIMITERS:
            i += 1
        else:
            return None
        ordered = True
    else:
        return None
    marker_end = i
    if i < length and line[i] != "\n":
        width, _ = indent_width(line[i:], 0)
        if width == 0:
            return None
    if i >= length:
        return ListItemMatch(indent, marker_end, -1, -1, ordered)
    content_stop = length
    if line[content_stop - 1] == "\n" and line[i] != "\n":
        content_stop -= 1
    return ListItemMatch(indent, marker_end, i, content_stop, ordered)


def matches_list_item(line: str, strict: bool) -> ListItemMatch | None:
    match = parse_list_item(line)
    if match is not None and (not strict or match.indent < 4):
        return match
    return None


def calc_list_offset(line: str, match: ListItemMatch) -> int:
    """Columns between the marker and the item content."""
    if match.content_start < 0 or is_blank(line[match.content_start :]):
        return 1
    offset, _ = indent_width(line[match.content_start :], match.content_start)
    # content indented that much is an indented code block inside the item
    return 1 if offset > 4 else offset


def last_offset(node: Node) -> int:
    last = node.last_child
    return last.offset if isinstance(last, ListItem) else 0


class ListParser:
    """Opens List containers.

    Only ordered lists starting at 1 and non-empty items may interrupt a
    paragraph.
    """

    def trigger(self) -> str | None:
        return _LIST_TRIGGERS

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]:
        last_block = pc.last_opened_block
        last = last_block.node if last_block is not None else None
        if isinstance(last, List) or pc.skip_list_parser:
            pc.skip_list_parser = False
            return _DECLINE
        line, _ = reader.peek_line()
        if line is None:
            return _DECLINE
        match = matches_list_item(line, strict=True)
        if match is None:
            return _DECLINE
        start = match.number(line) if match.ordered else 1
        if isinstance(last, Paragraph) and last.parent is parent:
            if match.ordered and start != 1:
                return _DECLINE
            if match.content_is_blank(line):
                return _DECLINE
        pc.empty_list_item_with_blank_lines = False
        return List(marker=match.marker(line), start=start), BlockState.HAS_CHILDREN

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState:
        node = cast(List, node)
        line, _ = reader.peek_line()
        if line is None:
            return BlockState.CLOSE
        last_item = node.last_child
        last_is_empty = last_item is not None and not last_item.children
        if is_blank(line):
            if last_is_empty:
                pc.empty_list_item_with_blank_lines = True
            return BlockState.CONTINUE | BlockState.HAS_CHILDREN

        offset = last_offset(node)
        indent, _ = indent_width(line, reader.line_offset())
        if indent < offset or last_is_empty:
            if indent < 4:
                match = matches_list_item(line, strict=False)
                if match is not None and match.indent - offset < 4:
                    if not node.can_continue(match.marker(line), match.ordered):
                        return BlockState.CLOSE
                    # thematic breaks take precedence over list items
                    if is_thematic_break(line[match.marker_end - 1 :], 0):
                        return BlockState.CLOSE
                    return BlockState.CONTINUE | BlockState.HAS_CHILDREN
            if not last_is_empty:
                return BlockState.CLOSE

        if last_is_empty and indent < offset:
            return BlockState.CLOSE
        # a non-empty item cannot follow an empty item and blank lines
        if pc.empty_list_item_with_blank_lines:
            return BlockState.CLOSE
        return BlockState.CONTINUE | BlockState.HAS_CHILDREN

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None:
        node = cast(List, node)
        for index, item in enumerate(node.children):
            if not node.tight:
                break
            if index and getattr(item, "blank_previous_lines", False):
                node.tight = False
            for child in item.children[1:]:
                if getattr(child, "blank_previous_lines", False):
                    node.tight = False
                    break
        if not node.tight:
            return
        for item in node.children:
            for child in list(item.children):
                if isinstance(child, Paragraph):
                    item.replace_child(child, TextBlock(lines=child.lines))

    def can_interrupt_paragraph(self) -> bool:
        return True

    def can_accept_indented_line(self) -> bool:
        return False


class ListItemParser:
    """Opens ListItem blocks inside a List.

    The item's ``offset`` is the column its content starts at. Continuation
    lines must be indented at least that far, or be blank.
    """

    def trigger(self) -> str | None:
        return _LIST_TRIGGERS

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]:
        if not isinstance(parent, List):
            return _DECLINE
        offset = last_offset(parent)
        line, _ = reader.peek_line()
        if line is None:
            return _DECLINE
        match = matches_list_item(line, strict=False)
        if match is None or match.indent - offset > 3:
            return _DECLINE

        pc.empty_list_item_with_blank_lines = False
        item_offset = calc_list_offset(line, match)
        node = ListItem(offset=match.marker_end + item_offset)
        if match.content_is_blank(line):
            return node, BlockState.NO_CHILDREN

        found = indent_position(
            line[match.content_start :], match.content_start, item_offset
        )
        pos, padding = found if found is not None else (0, 0)
        reader.advance_and_set_padding(match.marker_end + pos, padding)
        return node, BlockState.HAS_CHILDREN

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState:
        line, _ = reader.peek_line()
        if line is None:
            return BlockState.CLOSE
        if is_blank(line):
            reader.advance(len(line) - 1)
            return BlockState.CONTINUE | BlockState.HAS_CHILDREN

        offset = last_offset(node.parent) if node.parent is not None else 0
        is_empty = not node.children and pc.empty_list_item_with_blank_lines
        indent, _ = indent_width(line, reader.line_offset())
        if (is_empty or indent < offset) and indent < 4:
            if matches_list_item(line, strict=True) is not None:
                # let the enclosing list open the next item
                pc.skip_list_parser = True
                return BlockState.CLOSE
            if not is_empty:
                return BlockState.CLOSE
        found = indent_position(line, reader.line_offset(), offset)
        if found is not None:
            reader.advance_and_set_padding(*found)
        return BlockState.CONTINUE | BlockState.HAS_CHILDREN

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None:
        pass

    def can_interrupt_paragraph(self) -> bool:
        return True

    def can_accept_indented_line(self) -> bool:
        return False


__all__ = [
    "ListItemMatch",
    "ListItemParser",
    "ListParser",
    "calc_list_offset",
    "matches_list_item",
    "parse_list_item",
]
