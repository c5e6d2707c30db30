"""Indented code plugin for lintian-ssg.

Adds code blocks indented by any width from one to four columns, or by a
tab. Lintian tag explanations indent their examples inconsistently, so the
usual four-column rule would leave most of them as paragraphs.

Usage:
    >>> md = Markdown(plugins=["indented_code"])
    >>> md("text\\n\\n  $ lintian foo.changes\\n")
    '<p>text</p>\\n<pre><code>$ lintian foo.changes\\n</code></pre>\\n'

Syntax:
The first line of the block picks the indentation width: the widest of 4,
3, 2 and 1 columns the line supplies. Every following line must supply the
same width, which is stripped from it. Blank lines are kept whatever their
indentation; trailing blank lines are dropped when the block closes.

Rendering:
Blocks indented by four columns are written with HTML special characters
escaped and nothing else interpreted. Blocks indented by fewer columns are
written like ordinary text: backslash escapes and entity references are
resolved first.

Notes:
- An indented line never interrupts a paragraph; a blank line must come first.

Thread Safety:
The locked width lives on the node, so the parser is stateless.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from lintian_ssg.nodes import Block, Node
from lintian_ssg.parsing.protocols import BlockState
from lintian_ssg.plugins import register_plugin
from lintian_ssg.renderers.html import raw_write, write_text
from lintian_ssg.text import BlockReader, indent_position, is_blank, preserve_leading_tab
from lintian_ssg.utils.logger import get_logger

if TYPE_CHECKING:
    from lintian_ssg.parsing.context import ParseContext
    from lintian_ssg.parsing.core import ParserBuilder
    from lintian_ssg.renderers.html import HtmlRenderer, RenderContext
    from lintian_ssg.stringbuilder import StringBuilder

logger = get_logger(__name__)

INDENT_MIN = 1
INDENT_MAX = 4

PRIORITY = 500


@dataclass(eq=False, slots=True, kw_only=True)
class IndentedCodeBlock(Block):
    """Code block with the indentation width locked when it opened.

    HTML: <pre><code>...</code></pre>

    """

    indent: int = INDENT_MAX


class IndentedCodeBlockParser:
    """Block parser for code indented by 1 to 4 columns or a tab."""

    def trigger(self) -> str | None:
        return None

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]:
        line, _ = reader.peek_line()
        if line is None or is_blank(line):
            return None, BlockState.NO_CHILDREN
        offset = reader.line_offset()
        for indent in range(INDENT_MAX, INDENT_MIN - 1, -1):
            found = indent_position(line, offset, indent)
            if found is not None:
                break
        else:
            return None, BlockState.NO_CHILDREN

        logger.debug("opening indented code block at width %d", indent)
        node = IndentedCodeBlock(indent=indent)
        self._append_line(node, reader, *found)
        return node, BlockState.NO_CHILDREN

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState:
        node = cast(IndentedCodeBlock, node)
        line, segment = reader.peek_line()
        if line is None:
            return BlockState.CLOSE
        if is_blank(line):
            node.lines.append(segment.trim_left_space_width(node.indent, reader.source))
            return BlockState.CONTINUE | BlockState.NO_CHILDREN
        found = indent_position(line, reader.line_offset(), node.indent)
        if found is None:
            return BlockState.CLOSE
        self._append_line(node, reader, *found)
        return BlockState.CONTINUE | BlockState.NO_CHILDREN

    @staticmethod
    def _append_line(node: IndentedCodeBlock, reader: BlockReader, pos: int, padding: int) -> None:
        reader.advance_and_set_padding(pos, padding)
        _, segment = reader.peek_line()
        if segment.padding:
            segment = preserve_leading_tab(segment, reader, 0)
        node.lines.append(segment)
        reader.advance(len(segment) - 1)

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None:
        lines = node.lines
        while lines and lines[-1].is_blank(reader.source):
            lines.pop()

    def can_interrupt_paragraph(self) -> bool:
        return False

    def can_accept_indented_line(self) -> bool:
        return True


def render_indented_code(
    r: HtmlRenderer, node: Node, sb: StringBuilder, ctx: RenderContext
) -> None:
    node = cast(IndentedCodeBlock, node)
    sb.append("<pre><code>")
    for line in node.lines:
        value = line.value(ctx.source)
        if node.indent == INDENT_MAX:
            raw_write(sb, value)
        else:
            write_text(sb, value)
    sb.append_line("</code></pre>")


@register_plugin("indented_code")
class IndentedCodePlugin:
    """Plugin for code blocks indented by 1 to 4 columns.

    The parser is tried before the paragraph parser, and the node kind
    gets its own render function.

    """

    @property
    def name(self) -> str:
        return "indented_code"

    def extend_parser(self, builder: ParserBuilder) -> None:
        builder.add_block_parser(IndentedCodeBlockParser(), PRIORITY)

    def extend_renderer(self, renderer: HtmlRenderer) -> None:
        renderer.register(IndentedCodeBlock, render_indented_code)
