"""HTML renderer using StringBuilder pattern.

Rendering is a dispatch table from node class to render function. Each
function writes the markup for one node and asks the renderer to render its
children. Plugins add node kinds by registering more functions.

Thread Safety:
All per-render state is encapsulated in RenderContext, created fresh for each
render() call. Multiple threads can safely share a single HtmlRenderer instance
and call render() concurrently, as long as no one registers functions at the
same time.

Output Format:
The markup follows the usual goldmark conventions: ``<hr>`` and ``<br>`` are
written without a closing slash, tight list items hold their text directly,
and raw HTML is replaced with ``<!-- raw HTML omitted -->`` unless
``html_enabled`` is set.

"""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import cast
from urllib.parse import quote as url_quote

from lintian_ssg.config import get_parse_config
from lintian_ssg.errors import RenderError
from lintian_ssg.nodes import (
    AutoLink,
    BlockQuote,
    CodeSpan,
    Document,
    FencedCodeBlock,
    Heading,
    HtmlBlock,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    RawHtml,
    Text,
    TextBlock,
    ThematicBreak,
)
from lintian_ssg.stringbuilder import StringBuilder

RAW_HTML_OMITTED = "<!-- raw HTML omitted -->"

# Backslash escape or entity reference, resolved by write_text
_ESCAPE_OR_ENTITY = re.compile(
    r"\\([!\"#$%&'()*+,\-./:;<=>?@\[\\\]^_`{|}~])"
    r"|(&(?:#[xX][0-9a-fA-F]{1,6}|#[0-9]{1,7}|[a-zA-Z][a-zA-Z0-9]{1,31});)"
)

_DANGEROUS_URL = re.compile(r"(?:javascript|vbscript|file):", re.IGNORECASE)
_DATA_URL = re.compile(r"data:", re.IGNORECASE)
_SAFE_DATA_URL = re.compile(r"data:image/(?:png|gif|jpeg|webp);", re.IGNORECASE)


def html_escape(s: str) -> str:
    """Escape HTML special characters.

    Escapes <, >, &, " but NOT single quotes.
    """
    return html.escape(s, quote=False).replace('"', "&quot;")


def _encode_url(url: str) -> str:
    """Decode entities, then percent-encode what does not belong in a URL.

    Returns URL safe for href attribute (still needs html_escape for quotes).
    """
    decoded = html.unescape(url)
    return url_quote(decoded, safe="/:?#[]@!$&'()*+,;=-_.~%")


def is_dangerous_url(url: str) -> bool:
    """True for script-capable schemes (images in data: URLs are allowed)."""
    if _DANGEROUS_URL.match(url):
        return True
    return bool(_DATA_URL.match(url)) and not _SAFE_DATA_URL.match(url)


def _resolve(match: re.Match[str]) -> str:
    if match.group(1) is not None:
        return match.group(1)
    return html.unescape(match.group(2))


def write_text(sb: StringBuilder, text: str) -> None:
    """Write ``text`` with escapes and entity references resolved, then escaped."""
    sb.append(html_escape(_ESCAPE_OR_ENTITY.sub(_resolve, text)))


def raw_write(sb: StringBuilder, text: str) -> None:
    """Write ``text`` with HTML special characters escaped and nothing else."""
    sb.append(html_escape(text))


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Per-render state.

    Attributes:
        source: Normalized source the document's segments point into
        html_enabled: Pass raw HTML through unchanged
        hard_wraps: Render soft line breaks as <br>

    """

    source: str
    html_enabled: bool = False
    hard_wraps: bool = False


RenderFunc = Callable[["HtmlRenderer", Node, StringBuilder, RenderContext], None]


class HtmlRenderer:
    """Render a document tree to HTML.

    Usage:
        >>> renderer = HtmlRenderer()
        >>> renderer.register(MyNode, render_my_node)
        >>> html = renderer.render(doc)

    Lookup walks the node's class hierarchy, so a function registered for
    a base class also renders its subclasses unless they have their own.
    """

    __slots__ = ("_funcs",)

    def __init__(self) -> None:
        self._funcs: dict[type[Node], RenderFunc] = dict(_DEFAULT_FUNCS)

    def register(self, kind: type[Node], func: RenderFunc) -> HtmlRenderer:
        """Register ``func`` for nodes of class ``kind``, replacing any other."""
        self._funcs[kind] = func
        return self

    def render(self, document: Document) -> str:
        """Render the document to an HTML string.

        Raw HTML handling and hard wraps are read from the active
        :class:`~lintian_ssg.config.ParseConfig`.
        """
        config = get_parse_config()
        ctx = RenderContext(
            source=document.source,
            html_enabled=config.html_enabled,
            hard_wraps=config.hard_wraps,
        )
        sb = StringBuilder()
        self.render_node(document, sb, ctx)
        return sb.build()

    def render_node(self, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
        for kind in type(node).__mro__:
            func = self._funcs.get(kind)
            if func is not None:
                func(self, node, sb, ctx)
                return
        raise RenderError(type(node).__name__)

    def render_children(self, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
        for child in node.children:
            self.render_node(child, sb, ctx)


# =============================================================================
# Block rendering
# =============================================================================


def _render_document(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    r.render_children(node, sb, ctx)


def _render_paragraph(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    sb.append("<p>")
    r.render_children(node, sb, ctx)
    sb.append_line("</p>")


def _render_text_block(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    r.render_children(node, sb, ctx)
    if node.children and node.next_sibling is not None:
        sb.append_line()


def _render_heading(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    node = cast(Heading, node)
    sb.append(f"<h{node.level}>")
    r.render_children(node, sb, ctx)
    sb.append_line(f"</h{node.level}>")


def _render_thematic_break(
    r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext
) -> None:
    sb.append_line("<hr>")


def _render_blockquote(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    sb.append_line("<blockquote>")
    r.render_children(node, sb, ctx)
    sb.append_line("</blockquote>")


def _render_list(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    node = cast(List, node)
    tag = "ol" if node.ordered else "ul"
    if node.ordered and node.start != 1:
        sb.append_line(f'<ol start="{node.start}">')
    else:
        sb.append_line(f"<{tag}>")
    r.render_children(node, sb, ctx)
    sb.append_line(f"</{tag}>")


def _render_list_item(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    sb.append("<li>")
    first = node.first_child
    if first is not None and not isinstance(first, TextBlock):
        sb.append_line()
    r.render_children(node, sb, ctx)
    sb.append_line("</li>")


def _render_fenced_code(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    node = cast(FencedCodeBlock, node)
    language = node.language(ctx.source)
    if language:
        sb.append(f'<pre><code class="language-{html_escape(html.unescape(language))}">')
    else:
        sb.append("<pre><code>")
    for line in node.lines:
        raw_write(sb, line.value(ctx.source))
    sb.append_line("</code></pre>")


def _render_html_block(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    node = cast(HtmlBlock, node)
    if not ctx.html_enabled:
        sb.append_line(RAW_HTML_OMITTED)
        return
    for line in node.lines:
        sb.append(line.value(ctx.source))


# =============================================================================
# Inline rendering
# =============================================================================


def _render_text(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    node = cast(Text, node)
    value = node.value(ctx.source)
    if node.raw:
        raw_write(sb, value)
        return
    write_text(sb, value)
    if node.hard_line_break or (node.soft_line_break and ctx.hard_wraps):
        sb.append_line("<br>")
    elif node.soft_line_break:
        sb.append_line()


def _render_code_span(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    sb.append("<code>")
    for child in node.children:
        if not isinstance(child, Text):
            r.render_node(child, sb, ctx)
            continue
        value = child.value(ctx.source)
        if value.endswith("\n"):
            raw_write(sb, value[:-1])
            sb.append(" ")
        else:
            raw_write(sb, value)
    sb.append("</code>")


def _render_link(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    node = cast(Link, node)
    href = ""
    if ctx.html_enabled or not is_dangerous_url(node.destination):
        href = html_escape(_encode_url(node.destination))
    sb.append(f'<a href="{href}"')
    if node.title is not None:
        sb.append(f' title="{html_escape(html.unescape(node.title))}"')
    sb.append(">")
    r.render_children(node, sb, ctx)
    sb.append("</a>")


def _render_auto_link(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    node = cast(AutoLink, node)
    url = node.url(ctx.source)
    label = node.label.value(ctx.source)
    sb.append('<a href="')
    if node.link_type == "email" and not url.lower().startswith("mailto:"):
        sb.append("mailto:")
    if ctx.html_enabled or not is_dangerous_url(url):
        sb.append(html_escape(_encode_url(url)))
    sb.append('">')
    raw_write(sb, label)
    sb.append("</a>")


def _render_raw_html(r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext) -> None:
    node = cast(RawHtml, node)
    if not ctx.html_enabled:
        sb.append(RAW_HTML_OMITTED)
        return
    for segment in node.segments:
        sb.append(segment.value(ctx.source))


_DEFAULT_FUNCS: dict[type[Node], RenderFunc] = {
    Document: _render_document,
    Paragraph: _render_paragraph,
    TextBlock: _render_text_block,
    Heading: _render_heading,
    ThematicBreak: _render_thematic_break,
    BlockQuote: _render_blockquote,
    List: _render_list,
    ListItem: _render_list_item,
    FencedCodeBlock: _render_fenced_code,
    HtmlBlock: _render_html_block,
    Text: _render_text,
    CodeSpan: _render_code_span,
    Link: _render_link,
    AutoLink: _render_auto_link,
    RawHtml: _render_raw_html,
}


__all__ = [
    "RAW_HTML_OMITTED",
    "HtmlRenderer",
    "RenderContext",
    "RenderFunc",
    "html_escape",
    "is_dangerous_url",
    "raw_write",
    "write_text",
]
