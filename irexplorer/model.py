"""Compiled-block data model shared by resolvers, navigation, and rendering.

Blocks own their source bytes and an immutable instruction list.
Each instruction carries exactly one span, formatted text, and comment.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Span:
    """Byte range in absolute source coordinates."""

    start: int
    end: int

    def contains(self, other: Span) -> bool:
        """Return whether ``other`` lies within this span (inclusive bounds)."""
        return self.start <= other.start and other.end <= self.end


class InstructionKind(enum.Enum):
    CALL = "call"
    LOAD_LITERAL = "load_literal"
    BRANCH = "branch"
    OTHER = "other"


class LiteralKind(enum.Enum):
    PLAIN = "plain"
    BLOCK = "block"
    CLOSURE = "closure"
    ROW_CONDITION = "row_condition"


NESTED_LITERAL_KINDS = frozenset({LiteralKind.BLOCK, LiteralKind.CLOSURE, LiteralKind.ROW_CONDITION})


class ReferenceKind(enum.Enum):
    """How a resolver should look an identifier up."""

    DEFINITION = "definition"
    BLOCK = "block"


@dataclass(frozen=True)
class Instruction:
    """One compiled step, identified by its index within the owning block."""

    kind: InstructionKind
    text: str
    comment: str = ""
    span: Span | None = None
    branch_target: int | None = None
    literal_kind: LiteralKind | None = None
    target: object = None
    raw: object = None

    @property
    def enters_nested_block(self) -> bool:
        """Return whether jumping forward from here materializes another block."""
        if self.kind is InstructionKind.CALL:
            return self.target is not None
        return (
            self.kind is InstructionKind.LOAD_LITERAL
            and self.literal_kind in NESTED_LITERAL_KINDS
            and self.target is not None
        )


@dataclass
class Block:
    """One compiled unit with its source text and a persisted cursor.

    ``source`` holds the raw bytes that ``span`` covers, in the same encoding
    the spans are measured in.
    """

    block_id: object
    span: Span
    instructions: tuple[Instruction, ...]
    source: bytes
    selected: int | None = field(default=None)
    name: str = ""
    language: str = ""

    def __post_init__(self) -> None:
        self.instructions = tuple(self.instructions)
        if isinstance(self.source, str):
            self.source = self.source.encode("utf-8")
        if self.selected is None and self.instructions:
            self.selected = 0

    @classmethod
    def from_parallel(
        cls,
        *,
        block_id: object,
        span: Span,
        source: bytes | str,
        instructions: Sequence[Instruction],
        spans: Sequence[Span | None],
        formatted: Sequence[str],
        comments: Sequence[str],
        name: str = "",
        language: str = "",
    ) -> Block:
        """Build a block from a resolver's parallel arrays.

        Raises ``ValueError`` unless all four sequences have the same length.
        The span, text, and comment of each entry replace those on the
        matching instruction.
        """
        lengths = {len(instructions), len(spans), len(formatted), len(comments)}
        if len(lengths) != 1:
            raise ValueError(
                "instruction arrays differ in length: "
                f"instructions={len(instructions)} spans={len(spans)} "
                f"formatted={len(formatted)} comments={len(comments)}"
            )
        merged = tuple(
            Instruction(
                kind=inst.kind,
                text=text,
                comment=comment or "",
                span=inst_span,
                branch_target=inst.branch_target,
                literal_kind=inst.literal_kind,
                target=inst.target,
                raw=inst.raw,
            )
            for inst, inst_span, text, comment in zip(instructions, spans, formatted, comments)
        )
        if isinstance(source, str):
            source = source.encode("utf-8")
        return cls(
            block_id=block_id,
            span=span,
            instructions=merged,
            source=source,
            name=name,
            language=language,
        )

    @property
    def spans(self) -> tuple[Span | None, ...]:
        return tuple(inst.span for inst in self.instructions)

    @property
    def formatted(self) -> tuple[str, ...]:
        return tuple(inst.text for inst in self.instructions)

    @property
    def comments(self) -> tuple[str, ...]:
        return tuple(inst.comment for inst in self.instructions)

    @property
    def source_text(self) -> str:
        """Source decoded for display; invalid UTF-8 is replaced."""
        return self.source.decode("utf-8", errors="replace")

    @property
    def title(self) -> str:
        """Name shown in the breadcrumb."""
        return self.name or str(self.block_id)

    def selected_instruction(self) -> Instruction | None:
        """Return the instruction under the cursor, or ``None`` when stale/empty."""
        index = self.selected
        if index is None or not 0 <= index < len(self.instructions):
            return None
        return self.instructions[index]
