"""Per-document parsing state.

A fresh ParseContext is created for every parse call, so parser and plugin
instances stay stateless and can be shared between threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lintian_ssg.config import ParseConfig, get_parse_config
from lintian_ssg.nodes import Block, LinkLabelState

if TYPE_CHECKING:
    from lintian_ssg.parsing.protocols import BlockParser


@dataclass(slots=True)
class OpenedBlock:
    """An open block together with the parser that drives it."""

    node: Block
    parser: BlockParser


@dataclass(slots=True)
class ParseContext:
    """Mutable state shared by all parsers during one parse call.

    Attributes:
        source: Normalized document source
        config: Configuration snapshot taken when parsing started
        opened_blocks: Open blocks, outermost first
        block_offset: Position of the first non-indent character on the
            current line, or -1 for a blank line
        block_indent: Indentation width of the current line, or -1
        skip_list_parser: Set by a closing list item so the next line is
            offered to the enclosing list instead of opening a new one
        empty_list_item_with_blank_lines: The last list item is empty and
            was followed by blank lines

    """

    source: str
    config: ParseConfig = field(default_factory=get_parse_config)
    opened_blocks: list[OpenedBlock] = field(default_factory=list)
    block_offset: int = -1
    block_indent: int = -1
    skip_list_parser: bool = False
    empty_list_item_with_blank_lines: bool = False
    _link_labels: list[LinkLabelState] = field(default_factory=list, init=False, repr=False)

    @property
    def last_opened_block(self) -> OpenedBlock | None:
        return self.opened_blocks[-1] if self.opened_blocks else None

    # Link labels

    @property
    def in_link_label(self) -> bool:
        """True while at least one ``[`` is waiting for its ``]``."""
        return bool(self._link_labels)

    @property
    def link_labels(self) -> tuple[LinkLabelState, ...]:
        return tuple(self._link_labels)

    @property
    def last_link_label(self) -> LinkLabelState | None:
        return self._link_labels[-1] if self._link_labels else None

    def push_link_label(self, state: LinkLabelState) -> None:
        self._link_labels.append(state)

    def remove_link_label(self, state: LinkLabelState) -> None:
        for i, candidate in enumerate(self._link_labels):
            if candidate is state:
                del self._link_labels[i]
                return

    def clear_link_labels(self) -> None:
        self._link_labels.clear()


__all__ = ["OpenedBlock", "ParseContext"]
