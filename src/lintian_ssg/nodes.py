"""Document tree nodes for lintian-ssg.

Nodes are mutable slotted dataclasses: block parsers append lines while a
block is open, list parsers retype paragraphs when a list turns out tight,
and inline parsers move siblings into links. A tree is owned by the parse
call that built it and is not shared while it is being built.

Text content is never copied into the tree. Blocks keep ``lines`` and
inline nodes keep :class:`~lintian_ssg.text.Segment` views into the source
string held by the :class:`Document`.

Node Hierarchy:
Node (base)
├── Block (block-level elements)
│   ├── Document
│   ├── Paragraph
│   ├── TextBlock
│   ├── Heading
│   ├── ThematicBreak
│   ├── FencedCodeBlock
│   ├── BlockQuote
│   ├── List
│   ├── ListItem
│   └── HtmlBlock
└── Inline (inline elements)
    ├── Text
    ├── CodeSpan
    ├── Link
    ├── AutoLink
    ├── RawHtml
    └── LinkLabelState

Plugins add node kinds by subclassing Block or Inline (see
``lintian_ssg.plugins.indented_code``).

"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Literal

from lintian_ssg.text import Segment

# =============================================================================
# Base Node
# =============================================================================


@dataclass(eq=False, slots=True, kw_only=True)
class Node:
    """Base class for all tree nodes."""

    children: list[Node] = field(default_factory=list)
    parent: Node | None = field(default=None, repr=False)

    @property
    def first_child(self) -> Node | None:
        return self.children[0] if self.children else None

    @property
    def last_child(self) -> Node | None:
        return self.children[-1] if self.children else None

    @property
    def next_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = _index_of(siblings, self)
        return siblings[index + 1] if index + 1 < len(siblings) else None

    @property
    def previous_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = _index_of(siblings, self)
        return siblings[index - 1] if index > 0 else None

    def append_child(self, child: Node) -> None:
        if child.parent is not None:
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)

    def remove_child(self, child: Node) -> None:
        del self.children[_index_of(self.children, child)]
        child.parent = None

    def replace_child(self, old: Node, new: Node) -> None:
        index = _index_of(self.children, old)
        if new.parent is not None:
            new.parent.remove_child(new)
            index = _index_of(self.children, old)
        self.children[index] = new
        new.parent = self
        old.parent = None


def _index_of(nodes: list[Node], node: Node) -> int:
    # identity, not equality
    for i, candidate in enumerate(nodes):
        if candidate is node:
            return i
    raise ValueError(f"{type(node).__name__} is not a child of this node")


# =============================================================================
# Block Nodes
# =============================================================================


@dataclass(eq=False, slots=True, kw_only=True)
class Block(Node):
    """Base class for block-level nodes.

    ``lines`` holds the source segments collected while the block was open.
    Blocks whose ``has_inline_content`` is true get their lines parsed into
    inline children once the document is complete.

    """

    has_inline_content: ClassVar[bool] = False

    lines: list[Segment] = field(default_factory=list, repr=False)
    blank_previous_lines: bool = False

    def text(self, source: str) -> str:
        """Concatenated value of all stored lines."""
        return "".join(line.value(source) for line in self.lines)


@dataclass(eq=False, slots=True, kw_only=True)
class Document(Block):
    """Root node. Holds the (normalized) source the segments point into."""

    source: str = ""


@dataclass(eq=False, slots=True, kw_only=True)
class Paragraph(Block):
    """Paragraph of inline content.

    HTML: <p>...</p>

    """

    has_inline_content: ClassVar[bool] = True


@dataclass(eq=False, slots=True, kw_only=True)
class TextBlock(Block):
    """Paragraph inside a tight list, rendered without <p> tags."""

    has_inline_content: ClassVar[bool] = True


@dataclass(eq=False, slots=True, kw_only=True)
class Heading(Block):
    """ATX heading.

    Markdown: ## Title
    HTML: <h2>Title</h2>

    """

    has_inline_content: ClassVar[bool] = True

    level: int = 1


@dataclass(eq=False, slots=True, kw_only=True)
class ThematicBreak(Block):
    """Horizontal rule.

    Markdown: --- or *** or ___
    HTML: <hr>

    """


@dataclass(eq=False, slots=True, kw_only=True)
class FencedCodeBlock(Block):
    """Fenced code block.

    Markdown:
        ```python
        code
        ```

    HTML: <pre><code class="language-python">code</code></pre>

    """

    info: Segment | None = None
    fence_char: str = "`"
    fence_length: int = 3
    fence_indent: int = 0

    def language(self, source: str) -> str | None:
        """First word of the info string."""
        if self.info is None:
            return None
        info = self.info.value(source)
        return info.split(None, 1)[0] if info.strip() else None


@dataclass(eq=False, slots=True, kw_only=True)
class BlockQuote(Block):
    """Block quote container.

    Markdown: > quoted text
    HTML: <blockquote>...</blockquote>

    """


@dataclass(eq=False, slots=True, kw_only=True)
class List(Block):
    """Ordered or unordered list.

    ``marker`` is the bullet character for unordered lists and the delimiter
    (``.`` or ``)``) for ordered ones. ``tight`` is settled when the list
    closes.

    """

    marker: str = "-"
    start: int = 1
    tight: bool = True

    @property
    def ordered(self) -> bool:
        return self.marker in ".)"

    def can_continue(self, marker: str, ordered: bool) -> bool:
        return marker == self.marker and ordered == self.ordered


@dataclass(eq=False, slots=True, kw_only=True)
class ListItem(Block):
    """List item. ``offset`` is the content column relative to the list."""

    offset: int = 0


@dataclass(eq=False, slots=True, kw_only=True)
class HtmlBlock(Block):
    """Raw HTML block.

    ``kind`` is the CommonMark start condition (1-7) that opened it.

    """

    kind: int = 7
    closed: bool = False


# =============================================================================
# Inline Nodes
# =============================================================================


@dataclass(eq=False, slots=True, kw_only=True)
class Inline(Node):
    """Base class for inline nodes."""


@dataclass(eq=False, slots=True, kw_only=True)
class Text(Inline):
    """Plain text.

    ``raw`` text is written without resolving escapes or entities.

    """

    segment: Segment
    soft_line_break: bool = False
    hard_line_break: bool = False
    raw: bool = False

    def value(self, source: str) -> str:
        return self.segment.value(source)


@dataclass(eq=False, slots=True, kw_only=True)
class CodeSpan(Inline):
    """Inline code. Children are raw Text nodes, one per source line.

    Markdown: `code`
    HTML: <code>code</code>

    """


@dataclass(eq=False, slots=True, kw_only=True)
class Link(Inline):
    """Hyperlink.

    Markdown: [text](url "title")
    HTML: <a href="url" title="title">text</a>

    """

    destination: str
    title: str | None = None


@dataclass(eq=False, slots=True, kw_only=True)
class AutoLink(Inline):
    """Link whose label is its own target.

    Markdown: <https://example.com> or a bare URL when linkify is enabled
    HTML: <a href="https://example.com">https://example.com</a>

    """

    label: Segment
    link_type: Literal["url", "email"] = "url"
    protocol: str | None = None

    def url(self, source: str) -> str:
        label = self.label.value(source)
        if self.protocol is not None:
            return f"{self.protocol}://{label}"
        return label


@dataclass(eq=False, slots=True, kw_only=True)
class RawHtml(Inline):
    """Inline HTML tag, comment or declaration."""

    segments: list[Segment] = field(default_factory=list)


@dataclass(eq=False, slots=True, kw_only=True)
class LinkLabelState(Inline):
    """Marker for an open ``[``, removed before rendering."""

    segment: Segment


# =============================================================================
# Tree Helpers
# =============================================================================


def merge_or_append_text_segment(parent: Node, segment: Segment) -> None:
    """Extend the trailing text of ``parent`` or append a new Text node."""
    last = parent.last_child
    if (
        isinstance(last, Text)
        and last.segment.stop == segment.start
        and not last.soft_line_break
    ):
        last.segment = last.segment.with_stop(segment.stop)
    else:
        parent.append_child(Text(segment=segment))


def merge_or_replace_text_segment(parent: Node, node: Node, segment: Segment) -> None:
    """Turn ``node`` into text, merging with a contiguous preceding Text."""
    previous = node.previous_sibling
    if (
        isinstance(previous, Text)
        and previous.segment.stop == segment.start
        and not previous.soft_line_break
    ):
        previous.segment = previous.segment.with_stop(segment.stop)
        parent.remove_child(node)
    else:
        parent.replace_child(node, Text(segment=segment))


__all__ = [
    "AutoLink",
    "Block",
    "BlockQuote",
    "CodeSpan",
    "Document",
    "FencedCodeBlock",
    "Heading",
    "HtmlBlock",
    "Inline",
    "Link",
    "LinkLabelState",
    "List",
    "ListItem",
    "Node",
    "Paragraph",
    "RawHtml",
    "Text",
    "TextBlock",
    "ThematicBreak",
    "merge_or_append_text_segment",
    "merge_or_replace_text_segment",
]
