"""Link label and autolink parsing.

``[`` pushes a LinkLabelState marker onto the block's children and onto the
context's label list, so other inline parsers can tell they are inside a
link label. ``]`` closes the most recent label: when an inline destination
``(url "title")`` follows, the nodes after the marker move into a new Link.
Otherwise the marker turns back into literal text.

Links cannot contain links: a label whose content already holds a Link is
rejected when its ``]`` is reached.

Destination and title grammar (CommonMark 6.3):
- Destinations are angle-bracket delimited or raw with balanced parens
- Titles are enclosed in ``"``, ``'`` or ``()``
- Backslash escapes work in destinations and titles
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from lintian_ssg.nodes import AutoLink, Inline, Link, LinkLabelState, Node, Text
from lintian_ssg.nodes import merge_or_replace_text_segment
from lintian_ssg.text import BlockReader, Segment
from lintian_ssg.utils.charsets import ASCII_PUNCTUATION

if TYPE_CHECKING:
    from lintian_ssg.parsing.context import ParseContext


# Pattern to find backslash escapes
_ESCAPE_PATTERN = re.compile(r"\\([!\"#$%&'()*+,\-./:;<=>?@\[\\\]^_`{|}~])")


def _process_escapes(text: str) -> str:
    """Replace a backslash followed by ASCII punctuation with the literal char."""
    return _ESCAPE_PATTERN.sub(r"\1", text)


def _parse_link_destination(text: str, pos: int) -> tuple[str, int] | None:
    """Parse a link destination starting at pos.

    Args:
        text: The text being parsed
        pos: Position after the opening (

    Returns:
        (url, end_pos) or None if invalid

    """
    text_len = len(text)
    while pos < text_len and text[pos] in " \t":
        pos += 1
    if pos >= text_len:
        return None

    if text[pos] == "<":
        pos += 1
        start = pos
        while pos < text_len:
            char = text[pos]
            if char == ">":
                return _process_escapes(text[start:pos]), pos + 1
            if char in "\n\r<":
                return None
            if char == "\\" and pos + 1 < text_len:
                pos += 2
                continue
            pos += 1
        return None

    # Raw destination: no spaces or control characters, balanced parens
    start = pos
    paren_depth = 0
    while pos < text_len:
        char = text[pos]
        if char in " \t\n\r" or ord(char) < 0x20:
            break
        if char == "(":
            paren_depth += 1
        elif char == ")":
            if paren_depth == 0:
                break
            paren_depth -= 1
        elif char == "\\" and pos + 1 < text_len and text[pos + 1] in ASCII_PUNCTUATION:
            pos += 2
            continue
        pos += 1
    if paren_depth:
        return None
    return _process_escapes(text[start:pos]), pos


def _parse_link_title(text: str, pos: int) -> tuple[str | None, int]:
    """Parse an optional link title starting at pos.

    Returns:
        (title, end_pos); title is None if no valid title starts at pos

    """
    text_len = len(text)
    while pos < text_len and text[pos] in " \t\n\r":
        pos += 1
    if pos >= text_len:
        return None, pos

    closer = {'"': '"', "'": "'", "(": ")"}.get(text[pos])
    if closer is None:
        return None, pos
    pos += 1
    start = pos
    while pos < text_len:
        char = text[pos]
        if char == closer:
            return _process_escapes(text[start:pos]), pos + 1
        if char == "\\" and pos + 1 < text_len:
            pos += 2
            continue
        pos += 1
    return None, start - 1


def _parse_inline_link(text: str, pos: int) -> tuple[str, str | None, int] | None:
    """Parse ``(url)``, ``(url "title")`` or ``(<url> 'title')`` at pos.

    Returns:
        (url, title, end_pos) or None if invalid

    """
    if pos >= len(text) or text[pos] != "(":
        return None
    pos += 1
    while pos < len(text) and text[pos] in " \t\n\r":
        pos += 1
    if pos < len(text) and text[pos] == ")":
        return "", None, pos + 1

    destination = _parse_link_destination(text, pos)
    if destination is None:
        return None
    url, pos = destination

    while pos < len(text) and text[pos] in " \t\n\r":
        pos += 1
    if pos >= len(text):
        return None
    if text[pos] == ")":
        return url, None, pos + 1

    title, pos = _parse_link_title(text, pos)
    while pos < len(text) and text[pos] in " \t\n\r":
        pos += 1
    if pos >= len(text) or text[pos] != ")":
        return None
    return url, title, pos + 1


def _contains_link(state: LinkLabelState) -> bool:
    node = state.next_sibling
    while node is not None:
        if isinstance(node, Link):
            return True
        node = node.next_sibling
    return False


class LinkParser:
    """Inline links ``[label](destination "title")``."""

    def trigger(self) -> str:
        return "[]"

    def parse(self, parent: Node, reader: BlockReader, pc: ParseContext) -> Inline | None:
        line, segment = reader.peek_line()
        if not line:
            return None
        if line[0] == "[":
            state = LinkLabelState(segment=segment.with_stop(segment.start + 1))
            pc.push_link_label(state)
            reader.advance(1)
            return state
        if line[0] != "]":
            return None

        last = pc.last_link_label
        if last is None or last.parent is None:
            return None
        label_parent = last.parent
        pc.remove_link_label(last)
        if _contains_link(last):
            merge_or_replace_text_segment(label_parent, last, last.segment)
            return None

        result = _parse_inline_link(line, 1)
        if result is None:
            merge_or_replace_text_segment(label_parent, last, last.segment)
            return None
        destination, title, end = result

        link = Link(destination=destination, title=title)
        node = last.next_sibling
        while node is not None:
            following = node.next_sibling
            link.append_child(node)
            node = following
        label_parent.remove_child(last)
        reader.advance(end)
        return link

    def close_block(self, parent: Node, pc: ParseContext) -> None:
        """Turn labels that never met their ``]`` into literal text."""
        for state in pc.link_labels:
            if state.parent is not None:
                state.parent.replace_child(state, Text(segment=state.segment))
        pc.clear_link_labels()


# URI autolink: scheme of 2-32 characters, then no spaces or angle brackets
_URI_AUTOLINK_RE = re.compile(r"<([a-zA-Z][a-zA-Z0-9+.\-]{1,31}:[^\s<>]*)>")

_EMAIL_AUTOLINK_RE = re.compile(
    r"<([a-zA-Z0-9.!#$%&'*+/=?^_`{|}~\-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9\-]{0,61}[a-zA-Z0-9])?)*)>"
)


class AutoLinkParser:
    """``<scheme:...>`` and ``<local@domain>`` autolinks."""

    def trigger(self) -> str:
        return "<"

    def parse(self, parent: Node, reader: BlockReader, pc: ParseContext) -> Inline | None:
        line, segment = reader.peek_line()
        if not line:
            return None
        link_type = "email"
        match = _EMAIL_AUTOLINK_RE.match(line)
        if match is None:
            link_type = "url"
            match = _URI_AUTOLINK_RE.match(line)
        if match is None:
            return None
        label = Segment(segment.start + match.start(1), segment.start + match.end(1))
        reader.advance(match.end())
        return AutoLink(label=label, link_type=link_type)


__all__ = ["AutoLinkParser", "LinkParser"]
