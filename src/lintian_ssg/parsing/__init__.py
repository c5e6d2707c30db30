"""Parsing subsystem for lintian-ssg.

The parser core drives pluggable block and inline parsers:

- `BlockParser` / `InlineParser`: the parser contracts (see protocols)
- `ParseContext`: per-document state, including the open link labels
- `Parser` / `ParserBuilder`: prioritized parser tables and the driver loops

Example:
    >>> from lintian_ssg.parsing import ParserBuilder
    >>> parser = ParserBuilder.with_defaults().build()
    >>> doc = parser.parse("- item\\n")

"""

from lintian_ssg.parsing.context import OpenedBlock, ParseContext
from lintian_ssg.parsing.core import Parser, ParserBuilder, normalize_source
from lintian_ssg.parsing.protocols import BlockParser, BlockState, InlineParser, Prioritized

__all__ = [
    "BlockParser",
    "BlockState",
    "InlineParser",
    "OpenedBlock",
    "ParseContext",
    "Parser",
    "ParserBuilder",
    "Prioritized",
    "normalize_source",
]
