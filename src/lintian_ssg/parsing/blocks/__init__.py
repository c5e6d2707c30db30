"""Built-in block parsers.

Default priorities (lower is tried first):

============================  ========
Parser                        Priority
============================  ========
ThematicBreakParser           200
ListParser                    300
ListItemParser                400
AtxHeadingParser              600
FencedCodeBlockParser         700
BlockQuoteParser              800
HtmlBlockParser               900
ParagraphParser               1000
============================  ========

Priority 500 is left for an indented code block parser, which is supplied
by the ``indented_code`` plugin.
"""

from __future__ import annotations

from lintian_ssg.parsing.blocks.core import (
    AtxHeadingParser,
    BlockQuoteParser,
    FencedCodeBlockParser,
    HtmlBlockParser,
    ParagraphParser,
    ThematicBreakParser,
    is_thematic_break,
)
from lintian_ssg.parsing.blocks.list import ListItemParser, ListParser
from lintian_ssg.parsing.protocols import BlockParser, Prioritized


def default_block_parsers(*, headings: bool = True) -> list[Prioritized[BlockParser]]:
    """Built-in block parsers with their default priorities.

    Args:
        headings: Include the ATX heading parser
    """
    parsers: list[Prioritized[BlockParser]] = [
        Prioritized(ThematicBreakParser(), 200),
        Prioritized(ListParser(), 300),
        Prioritized(ListItemParser(), 400),
        Prioritized(FencedCodeBlockParser(), 700),
        Prioritized(BlockQuoteParser(), 800),
        Prioritized(HtmlBlockParser(), 900),
        Prioritized(ParagraphParser(), 1000),
    ]
    if headings:
        parsers.append(Prioritized(AtxHeadingParser(), 600))
    return parsers


__all__ = [
    "AtxHeadingParser",
    "BlockQuoteParser",
    "FencedCodeBlockParser",
    "HtmlBlockParser",
    "ListItemParser",
    "ListParser",
    "ParagraphParser",
    "ThematicBreakParser",
    "default_block_parsers",
    "is_thematic_break",
]
