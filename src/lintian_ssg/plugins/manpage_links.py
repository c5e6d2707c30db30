"""Manpage links plugin for lintian-ssg.

Turns ``name(N)`` manual page references into links to manpages.debian.org.

Usage:
    >>> md = Markdown(plugins=["manpage_links"])
    >>> md("see lintian(1).")
    '<p>see <a href="https://manpages.debian.org/lintian(1)">lintian(1)</a>.</p>\\n'

Syntax:
A name made of word characters, hyphens and dots, directly followed by a
section number from 1 to 9 in parentheses: ``update-rc.d(8)``. The
reference must start a scan run or follow whitespace.

Notes:
- References inside link labels stay plain text
- Text between raw ``<code>`` tags is still scanned, so references in
  ``<code>lintian(1)</code>`` become links; backtick code spans are not

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

MANPAGE_URL_TEMPLATE = "https://manpages.debian.org/{}"

PRIORITY = 200

_MANPAGE_LINK_RE = re.compile(r"[-\w.]+\([1-9]\)", re.ASCII)
_PREFIX_CHARS = frozenset(" \t")


class ManpageLinkParser:
    """Inline parser for ``name(N)`` manual page references.

    Args:
        url_template: ``str.format`` template filled with ``name(N)``

    """

    __slots__ = ("url_template",)

    def __init__(self, url_template: str = MANPAGE_URL_TEMPLATE) -> None:
        self.url_template = url_template

    def trigger(self) -> str:
        # " " stands for any whitespace and the head of a scan run
        return " "

    def parse(self, parent: Node, reader: BlockReader, pc: ParseContext) -> Inline | None:
        if pc.in_link_label:
            return None
        line, segment = reader.peek_line()
        if not line:
            return None
        consumes = 1 if line[0] in _PREFIX_CHARS else 0
        start = segment.start + consumes
        match = _MANPAGE_LINK_RE.match(line, consumes)
        if match is None:
            return None

        stop = match.end() - consumes
        link = Link(destination=self.url_template.format(match.group()))
        link.append_child(Text(segment=Segment(start, start + stop)))

        reader.advance(stop + consumes)
        if consumes:
            merge_or_append_text_segment(parent, segment.with_stop(segment.start + consumes))
        return link


@register_plugin("manpage_links")
class ManpageLinksPlugin:
    """Plugin linking manual page references."""

    @property
    def name(self) -> str:
        return "manpage_links"

    def extend_parser(self, builder: ParserBuilder) -> None:
        builder.add_inline_parser(ManpageLinkParser(), PRIORITY)

    def extend_renderer(self, renderer: HtmlRenderer) -> None:
        """Manpage links render as ordinary links."""
        pass
