"""
lintian-ssg: text core of the lintian tag documentation generator.

Converts lintian tag descriptions from Markdown to HTML, linking Debian bug
and manual page references, and extracts the body of generated HTML
manuals from byte streams. Zero runtime dependencies.

Quick Start:
    >>> from lintian_ssg import Style, to_html
    >>> to_html("see lintian(1)", Style.FULL)
    '<p>see <a href="https://manpages.debian.org/lintian(1)">lintian(1)</a></p>\\n'

    >>> # Or configure a converter
    >>> from lintian_ssg import Markdown
    >>> md = Markdown(plugins=["bug_links"], headings=False)
    >>> html = md("Closes: Bug#12345")

Body Extraction:
    >>> from lintian_ssg import BodyFilterReader, write_file
    >>> with open("lintian.html", "rb") as page:
    ...     write_file("out", "manual/index.html", BodyFilterReader(page))

"""

from collections.abc import Iterable

from lintian_ssg.config import (
    ParseConfig,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from lintian_ssg.convert import Style, replace_entities, to_html
from lintian_ssg.errors import LintianSsgError, PluginError, RenderError, SourceReadError
from lintian_ssg.nodes import (
    AutoLink,
    Block,
    BlockQuote,
    CodeSpan,
    Document,
    FencedCodeBlock,
    Heading,
    HtmlBlock,
    Inline,
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
from lintian_ssg.parsing import (
    BlockParser,
    BlockState,
    InlineParser,
    ParseContext,
    Parser,
    ParserBuilder,
    Prioritized,
)
from lintian_ssg.plugins import (
    BugLinkParser,
    BugLinksPlugin,
    IndentedCodeBlock,
    IndentedCodeBlockParser,
    IndentedCodePlugin,
    LinkifyParser,
    LinkifyPlugin,
    ManpageLinkParser,
    ManpageLinksPlugin,
    MarkdownPlugin,
    apply_plugins,
    resolve_plugin_names,
)
from lintian_ssg.renderers.html import HtmlRenderer
from lintian_ssg.streams import BodyFilterReader, ReadStatus, write_file
from lintian_ssg.text import BlockReader, Segment

__version__ = "0.3.0"


def parse(source: str, *, plugins: Iterable[str] | None = None) -> Document:
    """Parse Markdown source into a document tree.

    Args:
        source: Markdown source text
        plugins: Plugin names to enable (``"all"`` for every built-in)

    Returns:
        Document root node; its ``source`` is the normalized text

    Example:
        >>> doc = parse("see Bug#1", plugins=["bug_links"])
        >>> doc.children[0]
        Paragraph(...)
    """
    return Markdown(plugins=plugins).parse(source)


def render(
    doc: Document,
    *,
    plugins: Iterable[str] | None = None,
    html_enabled: bool = False,
    hard_wraps: bool = False,
) -> str:
    """Render a document tree to HTML.

    Args:
        doc: Document to render
        plugins: Plugins whose node kinds appear in the tree
        html_enabled: Pass raw HTML through
        hard_wraps: Render soft line breaks as <br>

    Returns:
        HTML string
    """
    md = Markdown(plugins=plugins, html_enabled=html_enabled, hard_wraps=hard_wraps)
    return md.render(doc)


class Markdown:
    """High-level Markdown processor combining parser and renderer.

    Usage:
        >>> md = Markdown(plugins=["indented_code"])
        >>> md("text\\n\\n  code\\n")
        '<p>text</p>\\n<pre><code>code\\n</code></pre>\\n'
        >>> # Access the tree
        >>> doc = md.parse("text")

    Thread Safety:
        The parser and renderer are built once and hold no per-document
        state. Configuration is set via ContextVar around each call, so one
        instance can be shared between threads.
    """

    __slots__ = ("_config", "_parser", "_plugins", "_renderer")

    def __init__(
        self,
        *,
        plugins: Iterable[str] | None = None,
        html_enabled: bool = False,
        hard_wraps: bool = False,
        blocks: bool = True,
        headings: bool = True,
    ) -> None:
        """Initialize Markdown processor.

        Args:
            plugins: Plugin names to enable (e.g., ["bug_links"]).
                Use ["all"] to enable all built-in plugins.
            html_enabled: Pass raw HTML through instead of omitting it
            hard_wraps: Render soft line breaks as <br>
            blocks: Recognize the built-in block kinds. When False only
                paragraphs are recognized (plugins may still add blocks).
            headings: Recognize ATX headings

        Raises:
            PluginError: If a plugin name is not recognized
        """
        self._plugins = tuple(resolve_plugin_names(plugins or ()))
        # Build immutable config once (thread-safe, reused across calls)
        self._config = ParseConfig(
            html_enabled=html_enabled,
            hard_wraps=hard_wraps,
            linkify_enabled="linkify" in self._plugins,
        )
        builder = ParserBuilder.with_defaults(blocks=blocks, headings=headings)
        self._renderer = HtmlRenderer()
        apply_plugins(self._plugins, builder, self._renderer)
        self._parser = builder.build()

    @property
    def plugins(self) -> tuple[str, ...]:
        return self._plugins

    @property
    def config(self) -> ParseConfig:
        return self._config

    def __call__(self, source: str) -> str:
        """Parse and render Markdown in one call."""
        with parse_config_context(self._config):
            return self._renderer.render(self._parser.parse(source))

    def parse(self, source: str) -> Document:
        """Parse Markdown source into a document tree."""
        with parse_config_context(self._config):
            return self._parser.parse(source)

    def render(self, doc: Document) -> str:
        """Render a document tree produced by this instance."""
        with parse_config_context(self._config):
            return self._renderer.render(doc)


__all__ = [
    "AutoLink",
    "Block",
    "BlockParser",
    "BlockQuote",
    "BlockReader",
    "BlockState",
    "BodyFilterReader",
    "BugLinkParser",
    "BugLinksPlugin",
    "CodeSpan",
    "Document",
    "FencedCodeBlock",
    "Heading",
    "HtmlBlock",
    "HtmlRenderer",
    "IndentedCodeBlock",
    "IndentedCodeBlockParser",
    "IndentedCodePlugin",
    "Inline",
    "InlineParser",
    "Link",
    "LinkifyParser",
    "LinkifyPlugin",
    "LintianSsgError",
    "List",
    "ListItem",
    "ManpageLinkParser",
    "ManpageLinksPlugin",
    "Markdown",
    "MarkdownPlugin",
    "Node",
    "Paragraph",
    "ParseConfig",
    "ParseContext",
    "Parser",
    "ParserBuilder",
    "PluginError",
    "Prioritized",
    "RawHtml",
    "ReadStatus",
    "RenderError",
    "Segment",
    "SourceReadError",
    "Style",
    "Text",
    "TextBlock",
    "ThematicBreak",
    "__version__",
    "get_parse_config",
    "parse",
    "parse_config_context",
    "render",
    "replace_entities",
    "reset_parse_config",
    "set_parse_config",
    "to_html",
    "write_file",
]
