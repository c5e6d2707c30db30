"""Parser core: drives block parsers line by line, then inline parsers.

Block phase:
    For every line, each open block is asked whether it continues. When a
    container continues and the line still has content, new child blocks are
    opened in it. When a block declines, new blocks are opened at that depth
    and the blocks that did not continue are closed. A paragraph that no new
    block could interrupt continues lazily.

    Parsers registered with trigger characters are tried first for lines
    whose first non-indent character is one of them, followed by the
    parsers that have no trigger. Lines indented four columns or more are
    offered only to parsers that accept indented lines.

Inline phase:
    Every block holding inline content gets its lines scanned. At the head
    of a scan run, at each whitespace and at each unescaped punctuation
    character, inline parsers triggered by that character are offered the
    position. The text in between becomes Text nodes. Soft and hard line
    breaks are recorded on the last text of each line.

Thread Safety:
    Parser instances hold only immutable parser tables. All per-document
    state lives in a fresh ParseContext and BlockReader per call.

"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from typing import TYPE_CHECKING

from lintian_ssg.nodes import Block, Document, Node, Paragraph, Text, merge_or_append_text_segment
from lintian_ssg.parsing.context import OpenedBlock, ParseContext
from lintian_ssg.parsing.protocols import (
    BlockParser,
    BlockState,
    InlineParser,
    Prioritized,
    sort_prioritized,
)
from lintian_ssg.text import BlockReader, indent_width, is_blank
from lintian_ssg.utils.charsets import ASCII_PUNCTUATION
from lintian_ssg.utils.logger import get_logger

if TYPE_CHECKING:
    from lintian_ssg.config import ParseConfig

logger = get_logger(__name__)

# Whitespace that triggers " " parsers (line terminators excluded)
_INLINE_SPACE = frozenset(" \t\f\v")


class _OpenResult(enum.Enum):
    NO_BLOCKS = enum.auto()
    NEW_BLOCKS = enum.auto()
    PARAGRAPH_CONTINUATION = enum.auto()


class _LineBreak(enum.IntFlag):
    NONE = 0
    SOFT = enum.auto()
    HARD = enum.auto()
    VISIBLE = enum.auto()


def normalize_source(source: str) -> str:
    """Normalize line endings and make the last line end with a newline."""
    if "\r" in source:
        source = source.replace("\r\n", "\n").replace("\r", "\n")
    if source and not source.endswith("\n"):
        source += "\n"
    return source


class Parser:
    """Markdown parser built from prioritized block and inline parsers.

    Usage:
        >>> parser = ParserBuilder.with_defaults().build()
        >>> doc = parser.parse("Hello [world](https://example.com)")

    """

    __slots__ = ("_block_parsers", "_free_block_parsers", "_inline_closers", "_inline_parsers")

    def __init__(
        self,
        block_parsers: Iterable[Prioritized[BlockParser]],
        inline_parsers: Iterable[Prioritized[InlineParser]],
    ) -> None:
        free: list[BlockParser] = []
        triggered: dict[str, list[BlockParser]] = {}
        for item in sort_prioritized(list(block_parsers)):
            triggers = item.value.trigger()
            if triggers is None:
                free.append(item.value)
                continue
            for char in dict.fromkeys(triggers):
                triggered.setdefault(char, []).append(item.value)
        self._free_block_parsers: tuple[BlockParser, ...] = tuple(free)
        self._block_parsers: dict[str, tuple[BlockParser, ...]] = {
            char: (*parsers, *free) for char, parsers in triggered.items()
        }

        inline: dict[str, list[InlineParser]] = {}
        closers: list[InlineParser] = []
        for item in sort_prioritized(list(inline_parsers)):
            for char in dict.fromkeys(item.value.trigger()):
                inline.setdefault(char, []).append(item.value)
            if hasattr(item.value, "close_block"):
                closers.append(item.value)
        self._inline_parsers: dict[str, tuple[InlineParser, ...]] = {
            char: tuple(parsers) for char, parsers in inline.items()
        }
        self._inline_closers: tuple[InlineParser, ...] = tuple(closers)

    def parse(self, source: str, config: ParseConfig | None = None) -> Document:
        """Parse ``source`` into a document tree.

        Args:
            source: Markdown source text
            config: Configuration snapshot (defaults to the active context's)

        Returns:
            Document whose ``source`` is the normalized text segments refer to
        """
        source = normalize_source(source)
        pc = ParseContext(source) if config is None else ParseContext(source, config)
        document = Document(source=source)
        reader = BlockReader.from_source(source)
        self._parse_blocks(document, reader, pc)
        self._walk_inlines(document, pc)
        return document

    # =========================================================================
    # Block phase
    # =========================================================================

    def _parse_blocks(self, root: Document, reader: BlockReader, pc: ParseContext) -> None:
        pc.opened_blocks = []
        previous_blank = False
        while True:
            skipped, ok = reader.skip_blank_lines()
            if not ok:
                return
            blank_before = previous_blank or skipped > 0
            if self._open_blocks(root, blank_before, reader, pc) is not _OpenResult.NEW_BLOCKS:
                line_number, _ = reader.position()
                logger.debug("no block parser accepted line %d, skipping it", line_number + 1)
                reader.advance_line()
                previous_blank = False
                continue
            reader.advance_line()
            previous_blank = False

            while pc.opened_blocks:
                line, _ = reader.peek_line()
                if line is None:
                    self._close_blocks(len(pc.opened_blocks) - 1, 0, reader, pc)
                    return
                blank = is_blank(line)
                opened = list(pc.opened_blocks)
                last_index = len(opened) - 1
                for i, entry in enumerate(opened):
                    if not isinstance(entry.node, Paragraph):
                        state = entry.parser.continue_(entry.node, reader, pc)
                        if state & BlockState.CONTINUE:
                            if state & BlockState.HAS_CHILDREN and i == last_index:
                                self._open_blocks(entry.node, previous_blank, reader, pc)
                                break
                            continue
                    # closed, or a paragraph that may continue lazily
                    parent: Node = root if i == 0 else opened[i - 1].node
                    result = self._open_blocks(parent, previous_blank, reader, pc)
                    if result is not _OpenResult.PARAGRAPH_CONTINUATION:
                        self._close_blocks(last_index, i, reader, pc)
                    break
                previous_blank = blank
                reader.advance_line()

    def _open_blocks(
        self, parent: Node, blank_line: bool, reader: BlockReader, pc: ParseContext
    ) -> _OpenResult:
        result = _OpenResult.NO_BLOCKS
        last = pc.last_opened_block
        continuable = last is not None and isinstance(last.node, Paragraph)

        while True:
            line, _ = reader.peek_line()
            if line is None:
                break
            width, pos = indent_width(line, reader.line_offset())
            if width >= len(line):
                pc.block_offset = -1
                pc.block_indent = -1
            else:
                pc.block_offset = pos
                pc.block_indent = width
            if line[0] == "\n":
                break
            parsers = self._free_block_parsers
            if pos < len(line):
                parsers = self._block_parsers.get(line[pos], self._free_block_parsers)

            opened_container = False
            for bp in parsers:
                if continuable and result is _OpenResult.NO_BLOCKS and not bp.can_interrupt_paragraph():
                    continue
                if width > 3 and not bp.can_accept_indented_line():
                    continue
                saved_line, saved_pos = reader.position()
                node, state = bp.open(parent, reader, pc)
                if node is None:
                    reader.set_position(saved_line, saved_pos)
                    continue
                node.blank_previous_lines = blank_line
                parent.append_child(node)
                pc.opened_blocks.append(OpenedBlock(node, bp))
                result = _OpenResult.NEW_BLOCKS
                if state & BlockState.HAS_CHILDREN:
                    parent = node
                    opened_container = True
                break
            if not opened_container:
                break

        if result is _OpenResult.NO_BLOCKS and continuable and last is not None:
            state = last.parser.continue_(last.node, reader, pc)
            if state & BlockState.CONTINUE:
                result = _OpenResult.PARAGRAPH_CONTINUATION
        return result

    def _close_blocks(self, start: int, stop: int, reader: BlockReader, pc: ParseContext) -> None:
        """Close opened blocks ``start`` down to ``stop`` (inclusive)."""
        blocks = pc.opened_blocks
        for i in range(start, stop - 1, -1):
            entry = blocks[i]
            entry.parser.close(entry.node, reader, pc)
        del blocks[stop : start + 1]

    # =========================================================================
    # Inline phase
    # =========================================================================

    def _walk_inlines(self, document: Document, pc: ParseContext) -> None:
        stack: list[Node] = [document]
        while stack:
            node = stack.pop()
            if isinstance(node, Block) and node.has_inline_content:
                self._parse_inlines(node, pc)
                continue
            stack.extend(reversed(node.children))

    def _parse_inlines(self, block: Block, pc: ParseContext) -> None:
        if not block.lines:
            return
        source = pc.source
        reader = BlockReader(source, block.lines)
        escaped = False
        while True:
            line, _ = reader.peek_line()
            if line is None:
                break
            length = len(line)
            flags = _LineBreak.NONE
            has_newline = line.endswith("\n")
            if has_newline and (
                (length >= 3 and line[-2] == "\\" and line[-3] != "\\")
                or (length == 2 and line[-2] == "\\")
            ):
                length -= 2
                flags = _LineBreak.HARD | _LineBreak.VISIBLE
            elif has_newline and length >= 3 and line[-3] == " " and line[-2] == " ":
                length -= 3
                flags = _LineBreak.HARD
            elif has_newline:
                flags = _LineBreak.SOFT

            _, start = reader.position()
            n = 0
            restart = False
            for i in range(length):
                char = line[i]
                if char == "\n":
                    break
                is_space = char in _INLINE_SPACE
                is_punct = char in ASCII_PUNCTUATION
                if (is_punct and not escaped) or is_space or i == 0:
                    trigger = " " if is_space or (i == 0 and not is_punct) else char
                    parsers = self._inline_parsers.get(trigger)
                    if parsers:
                        reader.advance(n)
                        n = 0
                        saved_line, saved_pos = reader.position()
                        if i != 0:
                            merge_or_append_text_segment(block, start.between(saved_pos))
                            start = saved_pos
                        node = None
                        for ip in parsers:
                            node = ip.parse(block, reader, pc)
                            if node is not None:
                                break
                            reader.set_position(saved_line, saved_pos)
                        if node is not None:
                            block.append_child(node)
                            restart = True
                            break
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                n += 1
            if restart:
                continue

            reader.advance(n)
            _, current = reader.position()
            segment = start.between(current)
            if not flags & _LineBreak.VISIBLE:
                segment = segment.trim_right_space(source)
            if not segment.is_empty or flags:
                block.append_child(
                    Text(
                        segment=segment,
                        soft_line_break=bool(flags & _LineBreak.SOFT),
                        hard_line_break=bool(flags & _LineBreak.HARD),
                    )
                )
            reader.advance_line()

        for ip in self._inline_closers:
            ip.close_block(block, pc)  # type: ignore[attr-defined]
        pc.clear_link_labels()


class ParserBuilder:
    """Collects prioritized parsers and builds an immutable Parser.

    Usage:
        >>> builder = ParserBuilder()
        >>> builder.add_block_parser(ParagraphParser(), 1000)
        >>> parser = builder.build()

    """

    __slots__ = ("_block_parsers", "_inline_parsers")

    def __init__(self) -> None:
        self._block_parsers: list[Prioritized[BlockParser]] = []
        self._inline_parsers: list[Prioritized[InlineParser]] = []

    @classmethod
    def with_defaults(cls, *, blocks: bool = True, headings: bool = True) -> ParserBuilder:
        """Builder preloaded with the built-in parsers.

        Args:
            blocks: Include every built-in block parser. Without them only
                paragraphs are recognized.
            headings: Include the ATX heading parser (ignored without blocks)
        """
        from lintian_ssg.parsing.blocks import ParagraphParser, default_block_parsers
        from lintian_ssg.parsing.inline import default_inline_parsers

        builder = cls()
        if blocks:
            builder._block_parsers.extend(default_block_parsers(headings=headings))
        else:
            builder.add_block_parser(ParagraphParser(), 1000)
        builder._inline_parsers.extend(default_inline_parsers())
        return builder

    def add_block_parser(self, parser: BlockParser, priority: int) -> ParserBuilder:
        self._block_parsers.append(Prioritized(parser, priority))
        return self

    def add_inline_parser(self, parser: InlineParser, priority: int) -> ParserBuilder:
        self._inline_parsers.append(Prioritized(parser, priority))
        return self

    def build(self) -> Parser:
        return Parser(self._block_parsers, self._inline_parsers)


__all__ = ["Parser", "ParserBuilder", "normalize_source"]
