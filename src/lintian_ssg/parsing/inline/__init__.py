"""Built-in inline parsers.

Default priorities (lower is tried first among parsers sharing a trigger):

================  ========  =======
Parser            Trigger   Priority
================  ========  =======
CodeSpanParser    `         100
LinkParser        [ ]       200
AutoLinkParser    <         300
RawHtmlParser     <         400
================  ========  =======
"""

from lintian_ssg.parsing.inline.links import AutoLinkParser, LinkParser
from lintian_ssg.parsing.inline.special import CodeSpanParser, RawHtmlParser
from lintian_ssg.parsing.protocols import InlineParser, Prioritized


def default_inline_parsers() -> list[Prioritized[InlineParser]]:
    """Built-in inline parsers with their default priorities."""
    return [
        Prioritized(CodeSpanParser(), 100),
        Prioritized(LinkParser(), 200),
        Prioritized(AutoLinkParser(), 300),
        Prioritized(RawHtmlParser(), 400),
    ]


__all__ = [
    "AutoLinkParser",
    "CodeSpanParser",
    "LinkParser",
    "RawHtmlParser",
    "default_inline_parsers",
]
