"""Bug links plugin for lintian-ssg.

Turns ``Bug#NNNN`` references into links to the Debian bug tracker.

Usage:
    >>> md = Markdown(plugins=["bug_links"])
    >>> md("see Bug#12345.")
    '<p>see <a href="https://bugs.debian.org/12345">Bug#12345</a>.</p>\\n'

Syntax:
A reference starts a scan run, follows whitespace, or follows an opening
parenthesis. The link text is the reference exactly as written; the bug
number is parsed as an integer for the destination.

Notes:
- References inside link labels stay plain text
- ``(Bug#12345)`` keeps both parentheses outside the link

Thread Safety:
This plugin is stateless and thread-safe.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from lintian_ssg.nodes import Inline, Link, Node, Text, merge_or_append_text_segment
from lintian_ssg.plugins import register_plugin
from lintian_ssg.text import BlockReader, Segment

if TYPE_CHECKING:
    from lintian_ssg.parsing.context import ParseContext
    from lintian_ssg.parsing.core import ParserBuilder
    from lintian_ssg.renderers.html import HtmlRenderer

BUG_URL_TEMPLATE = "https://bugs.debian.org/{}"

PRIORITY = 200

_BUG_LINK_RE = re.compile(r"Bug#(\d+)\b", re.ASCII)
_PREFIX_CHARS = frozenset(" \t(")


class BugLinkParser:
    """Inline parser for ``Bug#NNNN`` references.

    Args:
        url_template: ``str.format`` template filled with the bug number

    """

    __slots__ = ("url_template",)

    def __init__(self, url_template: str = BUG_URL_TEMPLATE) -> None:
        self.url_template = url_template

    def trigger(self) -> str:
        # " " stands for any whitespace and the head of a scan run
        return " ("

    def parse(self, parent: Node, reader: BlockReader, pc: ParseContext) -> Inline | None:
        if pc.in_link_label:
            return None
        line, segment = reader.peek_line()
        if not line:
            return None
        consumes = 0
        start = segment.start
        if line[0] in _PREFIX_CHARS:
            consumes = 1
            start += 1
        match = _BUG_LINK_RE.match(line, consumes)
        if match is None:
            return None

        stop = match.end() - consumes
        link = Link(destination=self.url_template.format(int(match.group(1))))
        link.append_child(Text(segment=Segment(start, start + stop)))

        reader.advance(stop + consumes)
        if consumes:
            merge_or_append_text_segment(parent, segment.with_stop(segment.start + consumes))
        return link


@register_plugin("bug_links")
class BugLinksPlugin:
    """Plugin linking ``Bug#NNNN`` references.

    Registered at the link parser's priority so both are tried in
    registration order at a shared trigger.

    """

    @property
    def name(self) -> str:
        return "bug_links"

    def extend_parser(self, builder: ParserBuilder) -> None:
        builder.add_inline_parser(BugLinkParser(), PRIORITY)

    def extend_renderer(self, renderer: HtmlRenderer) -> None:
        """Bug links render as ordinary links."""
        pass
