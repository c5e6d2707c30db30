"""Linkify plugin for lintian-ssg.

Adds automatic URL and email detection.

Usage:
    >>> md = Markdown(plugins=["linkify"])
    >>> md("Visit https://lintian.debian.org for more info.")
    '<p>Visit <a href="https://lintian.debian.org">https://lintian.debian.org</a> for more info.</p>\\n'

Syntax:
URLs are automatically linked:
- http://example.com, https://example.com, ftp://example.com
- www.example.com (linked with the http protocol)

Emails are automatically linked:
- user@example.com

Notes:
- URLs in code spans are not linked
- URLs in link labels are not double-linked
- Trailing punctuation, unbalanced closing parentheses and a trailing
  entity reference are left out of the link

Thread Safety:
This plugin is stateless and thread-safe.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from lintian_ssg.nodes import AutoLink, Inline, Node, merge_or_append_text_segment
from lintian_ssg.plugins import register_plugin
from lintian_ssg.text import BlockReader, Segment
from lintian_ssg.utils.charsets import ASCII_PUNCTUATION

if TYPE_CHECKING:
    from lintian_ssg.parsing.context import ParseContext
    from lintian_ssg.parsing.core import ParserBuilder
    from lintian_ssg.renderers.html import HtmlRenderer

# After every other inline parser
PRIORITY = 999

_HOST = r"[-a-zA-Z0-9@:%._\+~#=]{1,256}\.[a-z]+(?::\d+)?"
_PATH = r"(?:[/#?][-a-zA-Z0-9@:%_\+.~#$!?&/=\(\);,'\">\^{}\[\]`]*)?"

_URL_RE = re.compile(r"(?:http|https|ftp)://" + _HOST + _PATH)
_WWW_RE = re.compile(r"www\." + _HOST + _PATH)
_EMAIL_RE = re.compile(r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~\-]+@[a-zA-Z0-9._\-]+")

_PREFIX_CHARS = frozenset(" *_~(")
_TRAILING_PUNCTUATION = frozenset("?!.,:*_~")


def _trim_url(text: str, stop: int) -> int:
    last = text[stop - 1]
    if last == ".":
        return stop - 1
    if last == ")":
        closing = 0
        for char in text[:stop]:
            if char == ")":
                closing += 1
            elif char == "(":
                closing -= 1
        return stop - closing if closing > 0 else stop
    if last == ";":
        # trailing entity reference such as &amp;
        i = stop - 2
        while i >= 0 and text[i].isascii() and text[i].isalnum():
            i -= 1
        if i != stop - 2 and i >= 0 and text[i] == "&":
            return i
    return stop


class LinkifyParser:
    """Inline parser for bare URLs and email addresses.

    Only active while the configuration has ``linkify_enabled`` set, which
    :class:`~lintian_ssg.Markdown` does when the plugin is selected.

    """

    def trigger(self) -> str:
        return " *_~("

    def parse(self, parent: Node, reader: BlockReader, pc: ParseContext) -> Inline | None:
        if not pc.config.linkify_enabled or pc.in_link_label:
            return None
        line, segment = reader.peek_line()
        if not line:
            return None
        consumes = 1 if line[0] in _PREFIX_CHARS else 0
        text = line[consumes:]

        link_type = "url"
        protocol: str | None = None
        stop = 0
        match = _URL_RE.match(text)
        if match is None and text.startswith("www."):
            match = _WWW_RE.match(text)
            protocol = "http"
        if match is not None:
            stop = _trim_url(text, match.end())
        else:
            if not text or text[0] in ASCII_PUNCTUATION:
                return None
            match = _EMAIL_RE.match(text)
            if match is None:
                return None
            domain = text[text.index("@") + 1 : match.end()]
            if "." not in domain:
                return None
            link_type = "email"
            stop = match.end()
            if text[stop - 1] == ".":
                stop -= 1
            if stop < len(text) and text[stop] in "-_":
                return None

        while stop > 1 and text[stop - 1] in _TRAILING_PUNCTUATION:
            stop -= 1
        if stop == 0:
            return None

        if consumes:
            merge_or_append_text_segment(parent, segment.with_stop(segment.start + consumes))
        reader.advance(consumes + stop)
        start = segment.start + consumes
        return AutoLink(label=Segment(start, start + stop), link_type=link_type, protocol=protocol)


@register_plugin("linkify")
class LinkifyPlugin:
    """Plugin for automatic URL and email linking.

    Adds the linkify parser with the lowest precedence so explicit links,
    autolinks and the reference recognizers win at shared triggers.

    """

    @property
    def name(self) -> str:
        return "linkify"

    def extend_parser(self, builder: ParserBuilder) -> None:
        builder.add_inline_parser(LinkifyParser(), PRIORITY)

    def extend_renderer(self, renderer: HtmlRenderer) -> None:
        """AutoLink nodes use the default renderer."""
        pass
