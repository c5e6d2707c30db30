"""Plugin system for lintian-ssg.

Plugins extend the default engine with the recognizers the lintian tag
pages need:
- indented_code: code blocks indented by 1 to 4 columns or a tab
- bug_links: ``Bug#NNNN`` references to the Debian bug tracker
- manpage_links: ``name(N)`` references to Debian manual pages
- linkify: bare URLs, ``www.`` hosts and email addresses

Usage:
    >>> from lintian_ssg import Markdown
    >>>
    >>> md = Markdown(plugins=["bug_links", "manpage_links"])
    >>> html = md("see lintian(1) and Bug#12345")
    >>>
    >>> md = Markdown(plugins=["all"])

Plugin Architecture:
A plugin is applied to one ParserBuilder and one HtmlRenderer when a
Markdown instance is built:

1. extend_parser: add block or inline parsers at a priority
2. extend_renderer: register render functions for new node kinds

Thread Safety:
All plugins are stateless. State is stored in tree nodes or in the
per-parse ParseContext, so plugin instances can be shared between threads.

"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from lintian_ssg.errors import PluginError
from lintian_ssg.utils.logger import get_logger

if TYPE_CHECKING:
    from lintian_ssg.parsing.core import ParserBuilder
    from lintian_ssg.renderers.html import HtmlRenderer

__all__ = [
    "BUILTIN_PLUGINS",
    "MarkdownPlugin",
    "apply_plugins",
    "get_plugin",
    "register_plugin",
    "resolve_plugin_names",
]

logger = get_logger(__name__)


@runtime_checkable
class MarkdownPlugin(Protocol):
    """Protocol for lintian-ssg plugins.

    Thread Safety:
        Plugins must be stateless. All state should be in tree nodes.

    """

    @property
    def name(self) -> str:
        """Plugin identifier."""
        ...

    def extend_parser(self, builder: ParserBuilder) -> None:
        """Add parsers to the builder.

        Called once per Markdown instance, before the parser is built.
        """
        ...

    def extend_renderer(self, renderer: HtmlRenderer) -> None:
        """Register render functions for the plugin's node kinds."""
        ...


# Registry of built-in plugins
BUILTIN_PLUGINS: dict[str, type[MarkdownPlugin]] = {}


def register_plugin(
    name: str,
) -> Callable[[type[MarkdownPlugin]], type[MarkdownPlugin]]:
    """Decorator to register a plugin.

    Args:
        name: Plugin name for lookup

    Returns:
        Decorator function that registers and returns the class

    Raises:
        PluginError: If another plugin already uses the name

    Usage:
        @register_plugin("bug_links")
        class BugLinksPlugin:
                ...

    """

    def decorator(cls: type[MarkdownPlugin]) -> type[MarkdownPlugin]:
        existing = BUILTIN_PLUGINS.get(name)
        if existing is not None and existing is not cls:
            raise PluginError(name, f"already registered by {existing.__name__}")
        BUILTIN_PLUGINS[name] = cls
        return cls

    return decorator


def get_plugin(name: str) -> MarkdownPlugin:
    """Get a plugin instance by name.

    Args:
        name: Plugin name (e.g., "indented_code", "bug_links")

    Returns:
        Plugin instance

    Raises:
        PluginError: If plugin name is not recognized

    """
    if name not in BUILTIN_PLUGINS:
        available = ", ".join(sorted(BUILTIN_PLUGINS))
        raise PluginError(name, f"unknown plugin. Available: {available}")
    return BUILTIN_PLUGINS[name]()


def resolve_plugin_names(plugins: Iterable[str]) -> list[str]:
    """Expand ``"all"`` and drop duplicates, keeping the given order."""
    names: list[str] = []
    for plugin_name in plugins:
        expanded = BUILTIN_PLUGINS if plugin_name == "all" else (plugin_name,)
        for name in expanded:
            if name not in names:
                names.append(name)
    return names


def apply_plugins(
    plugins: Iterable[str],
    builder: ParserBuilder,
    renderer: HtmlRenderer,
) -> None:
    """Apply plugins to a parser builder and a renderer.

    Args:
        plugins: Plugin names to apply (``"all"`` applies every built-in)
        builder: Builder of the parser being configured
        renderer: Renderer to extend

    Raises:
        PluginError: If a plugin name is not recognized

    """
    for name in resolve_plugin_names(plugins):
        plugin = get_plugin(name)
        plugin.extend_parser(builder)
        plugin.extend_renderer(renderer)
        logger.debug("applied plugin %s", name)


# Import built-in plugins to register them
# These imports trigger the @register_plugin decorators
from lintian_ssg.plugins.bug_links import BugLinkParser, BugLinksPlugin  # noqa: E402
from lintian_ssg.plugins.indented_code import (  # noqa: E402
    IndentedCodeBlock,
    IndentedCodeBlockParser,
    IndentedCodePlugin,
)
from lintian_ssg.plugins.linkify import LinkifyParser, LinkifyPlugin  # noqa: E402
from lintian_ssg.plugins.manpage_links import ManpageLinkParser, ManpageLinksPlugin  # noqa: E402

__all__ += [
    "BugLinkParser",
    "BugLinksPlugin",
    "IndentedCodeBlock",
    "IndentedCodeBlockParser",
    "IndentedCodePlugin",
    "LinkifyParser",
    "LinkifyPlugin",
    "ManpageLinkParser",
    "ManpageLinksPlugin",
]
