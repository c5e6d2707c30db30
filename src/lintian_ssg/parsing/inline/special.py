"""Code spans and inline raw HTML.

Code spans may run over several lines of their block; each line becomes a
raw Text child so the renderer can turn line ends into spaces. Raw HTML is
recognized on the current line only.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from lintian_ssg.nodes import CodeSpan, Inline, Node, RawHtml, Text
from lintian_ssg.text import BlockReader, Segment

if TYPE_CHECKING:
    from lintian_ssg.parsing.context import ParseContext


class CodeSpanParser:
    """Backtick code spans. The closing run must match the opening length."""

    def trigger(self) -> str:
        return "`"

    def parse(self, parent: Node, reader: BlockReader, pc: ParseContext) -> Inline | None:
        line, start_segment = reader.peek_line()
        if not line:
            return None
        opener = len(line) - len(line.lstrip("`"))
        reader.advance(opener)
        saved_line, saved_pos = reader.position()
        node = CodeSpan()
        while True:
            line, segment = reader.peek_line()
            if line is None:
                # no closing run: the backticks are literal
                reader.set_position(saved_line, saved_pos)
                return Text(segment=start_segment.with_stop(start_segment.start + opener))
            i = 0
            while i < len(line):
                if line[i] != "`":
                    i += 1
                    continue
                run_start = i
                while i < len(line) and line[i] == "`":
                    i += 1
                if i - run_start == opener:
                    content = segment.with_stop(segment.start + run_start)
                    if not content.is_empty:
                        node.append_child(Text(segment=content, raw=True))
                    reader.advance(i)
                    self._trim_half_space(node, pc.source)
                    return node
            node.append_child(Text(segment=segment, raw=True))
            reader.advance_line()

    @staticmethod
    def _trim_half_space(node: CodeSpan, source: str) -> None:
        """Strip one space from each end when both ends have one."""
        texts = [child for child in node.children if isinstance(child, Text)]
        if not texts or all(t.segment.is_blank(source) for t in texts):
            return
        first, last = texts[0].segment, texts[-1].segment
        if first.is_empty or last.is_empty:
            return
        if source[first.start] in " \n" and source[last.stop - 1] in " \n":
            texts[0].segment = first.with_start(first.start + 1)
            texts[-1].segment = texts[-1].segment.with_stop(texts[-1].segment.stop - 1)


# Closing tag: </name optional-space>
_CLOSE_TAG_RE = re.compile(r"</[a-zA-Z][a-zA-Z0-9\-]*[ \t]*>")
_COMMENT_RE = re.compile(r"<!-->|<!--->|<!--.*?-->")
_PROCESSING_RE = re.compile(r"<\?.*?\?>")
_DECLARATION_RE = re.compile(r"<![A-Z]+[^>]*>")
_CDATA_RE = re.compile(r"<!\[CDATA\[.*?\]\]>")


def _parse_html_open_tag(text: str) -> int | None:
    """Length of the HTML open tag at the start of ``text``, or None.

    - Tag name: ASCII letter followed by letters, digits, hyphens
    - Attribute names: [a-zA-Z_:][a-zA-Z0-9_.:-]*
    - Attribute values: unquoted (no spaces/quotes/=/<>/`),
      single-quoted (no '), double-quoted (no ")
    - Whitespace required before every attribute
    - Optional / before the final >

    """
    length = len(text)
    if length < 3 or text[0] != "<" or not text[1].isascii() or not text[1].isalpha():
        return None
    i = 2
    while i < length and text[i].isascii() and (text[i].isalnum() or text[i] == "-"):
        i += 1

    while i < length:
        # whitespace before an attribute, /> or >
        ws_start = i
        while i < length and text[i] in " \t\n":
            i += 1
        if i >= length:
            return None
        char = text[i]
        if char == ">":
            return i + 1
        if char == "/":
            return i + 2 if i + 1 < length and text[i + 1] == ">" else None
        if i == ws_start or not (char.isascii() and (char.isalpha() or char in "_:")):
            return None

        i += 1
        while i < length and text[i].isascii() and (text[i].isalnum() or text[i] in "_.:-"):
            i += 1

        j = i
        while j < length and text[j] in " \t\n":
            j += 1
        if j >= length or text[j] != "=":
            # boolean attribute
            continue
        i = j + 1
        while i < length and text[i] in " \t\n":
            i += 1
        if i >= length:
            return None
        quote = text[i]
        if quote in "\"'":
            close = text.find(quote, i + 1)
            if close == -1:
                return None
            i = close + 1
        else:
            value_start = i
            while i < length and text[i] not in "\"'=<>` \t\n":
                i += 1
            if i == value_start:
                return None
    return None


class RawHtmlParser:
    """Open and closing tags, comments, processing instructions,
    declarations and CDATA sections."""

    def trigger(self) -> str:
        return "<"

    def parse(self, parent: Node, reader: BlockReader, pc: ParseContext) -> Inline | None:
        line, segment = reader.peek_line()
        if not line or line[0] != "<":
            return None
        length: int | None = None
        if len(line) > 1 and line[1].isalnum():
            length = _parse_html_open_tag(line)
        else:
            for pattern in (_CLOSE_TAG_RE, _COMMENT_RE, _PROCESSING_RE, _DECLARATION_RE, _CDATA_RE):
                match = pattern.match(line)
                if match is not None:
                    length = match.end()
                    break
        if length is None:
            return None
        reader.advance(length)
        return RawHtml(segments=[Segment(segment.start, segment.start + length)])


__all__ = ["CodeSpanParser", "RawHtmlParser"]
