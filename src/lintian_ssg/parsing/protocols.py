"""Protocols defining the block and inline parser contracts.

A block parser is driven line by line: ``open`` decides whether the current
line starts a block, ``continue_`` whether an open block takes the next
line, ``close`` finalizes it. An inline parser is offered positions inside a
block's text at its trigger characters and either produces a node or
declines by returning None without consuming anything.

Parsers are registered as :class:`Prioritized` values. Lower priority
values are tried first; ties keep registration order.

Thread Safety:
    Parser instances must be stateless. Per-document state lives in the
    ParseContext passed to every call.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from lintian_ssg.nodes import Block, Inline, Node
    from lintian_ssg.parsing.context import ParseContext
    from lintian_ssg.text import BlockReader


class BlockState(enum.IntFlag):
    """Result flags of ``open`` and ``continue_``."""

    NONE = 0
    CONTINUE = enum.auto()
    CLOSE = enum.auto()
    HAS_CHILDREN = enum.auto()
    NO_CHILDREN = enum.auto()


@runtime_checkable
class BlockParser(Protocol):
    """Contract for block parsers."""

    def trigger(self) -> str | None:
        """Characters that may start this block, or None to be tried on every line."""
        ...

    def open(
        self, parent: Node, reader: BlockReader, pc: ParseContext
    ) -> tuple[Block | None, BlockState]: ...

    def continue_(self, node: Block, reader: BlockReader, pc: ParseContext) -> BlockState: ...

    def close(self, node: Block, reader: BlockReader, pc: ParseContext) -> None: ...

    def can_interrupt_paragraph(self) -> bool: ...

    def can_accept_indented_line(self) -> bool: ...


@runtime_checkable
class InlineParser(Protocol):
    """Contract for inline parsers.

    A trigger of ``" "`` stands for any whitespace and for the head of a
    scan run (start of a line or the position right after an inline node).
    Parsers may also define ``close_block(parent, pc)``, called once after
    all lines of a block have been scanned.
    """

    def trigger(self) -> str: ...

    def parse(self, parent: Node, reader: BlockReader, pc: ParseContext) -> Inline | None: ...


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Prioritized(Generic[T]):
    """A parser or transformer together with its priority."""

    value: T
    priority: int


def sort_prioritized(items: list[Prioritized[T]]) -> list[Prioritized[T]]:
    """Stable sort by ascending priority."""
    return sorted(items, key=lambda item: item.priority)


__all__ = [
    "BlockParser",
    "BlockState",
    "InlineParser",
    "Prioritized",
    "sort_prioritized",
]
