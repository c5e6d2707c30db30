"""Markdown to HTML conversion presets used by the site generator.

Two styles exist:

INLINE
    Short texts such as tag names and one-line descriptions: paragraphs
    only, with code spans, links, autolinks and raw HTML (omitted).

FULL
    Tag explanations: every block kind except headings, indented code at
    any width from 1 to 4, bug and manual page links, linkify, and raw
    HTML passed through.

Explanations shipped by lintian spell some characters as entity references
(``&lowbar;``, ``&lt;``, ``&gt;``, ``&ast;``) so its plain text output reads
well. Those would stay escaped inside code blocks, so FULL sources get them
replaced back before parsing.

Thread Safety:
    Converters are built on first use and shared; Markdown instances are
    safe for concurrent use.

"""

from __future__ import annotations

import enum
import re
from functools import cache
from typing import TYPE_CHECKING

from lintian_ssg.utils.logger import get_logger

if TYPE_CHECKING:
    from lintian_ssg import Markdown

logger = get_logger(__name__)

FULL_PLUGINS = ("indented_code", "bug_links", "manpage_links", "linkify")

_ENTITIES = {"lowbar": "_", "lt": "<", "gt": ">", "ast": "*"}
_ENTITY_RE = re.compile(r"&(lowbar|lt|gt|ast);")


class Style(enum.Enum):
    """Conversion preset."""

    INLINE = "inline"
    FULL = "full"


def replace_entities(src: str) -> str:
    """Replace ``&lowbar;``, ``&lt;``, ``&gt;`` and ``&ast;`` in one pass."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(1)], src)


@cache
def _converter(style: Style) -> Markdown:
    from lintian_ssg import Markdown

    logger.debug("building %s converter", style.value)
    if style is Style.INLINE:
        return Markdown(blocks=False)
    return Markdown(plugins=FULL_PLUGINS, html_enabled=True, headings=False)


def to_html(src: str, style: Style) -> str:
    """Convert Markdown to HTML with one of the presets.

    Args:
        src: Markdown source
        style: Conversion preset

    Returns:
        HTML string

    Example:
        >>> to_html("# no header", Style.INLINE)
        '<p># no header</p>\\n'
    """
    if style is Style.FULL:
        src = replace_entities(src)
    return _converter(style)(src)


__all__ = ["FULL_PLUGINS", "Style", "replace_entities", "to_html"]
