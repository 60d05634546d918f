"""Navigation engine: block stack, jump history, and jump resolution.

This module intentionally has no UI concerns.
Jumps (forward, backward, goto) are recorded and undoable; selection moves
are not. Every operation either applies fully or raises before mutating.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .model import Block, InstructionKind, NESTED_LITERAL_KINDS, ReferenceKind
from .resolvers import BlockResolver, ResolutionError

logger = logging.getLogger(__name__)


class NavigationError(Exception):
    """Base class for recoverable navigation failures shown in the status bar."""

    message = "navigation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class NothingSelected(NavigationError):
    message = "no instruction selected"


class NoTarget(NavigationError):
    message = "instruction has no jump target"


class ResolutionFailed(NavigationError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"can't resolve block: {reason}")
        self.reason = reason


class AtRoot(NavigationError):
    message = "already at the entry block"


class NoHistory(NavigationError):
    message = "no jump history"


class IndexOutOfRange(NavigationError):
    message = "index out of range"


class InvalidGotoInput(NavigationError):
    message = "expected a non-negative instruction index"


@dataclass(frozen=True)
class EnteredNestedBlock:
    """Undo by popping the block stack."""


@dataclass(frozen=True)
class LocalGoto:
    """Undo by restoring ``previous_index`` as the current selection."""

    previous_index: int


JumpRecord = EnteredNestedBlock | LocalGoto


class Navigator:
    """Owns the stack of visited blocks and the undo log of jumps.

    The bottom of ``blocks`` is the entry block and is never popped; the top
    is the block that renders and receives input.
    """

    def __init__(self, root: Block, resolver: BlockResolver) -> None:
        self.blocks: list[Block] = [root]
        self.history: list[JumpRecord] = []
        self.resolver = resolver

    @property
    def current(self) -> Block:
        """The block on top of the stack; it renders and receives input."""
        return self.blocks[-1]

    @property
    def depth(self) -> int:
        """Number of open blocks, counting the entry block."""
        return len(self.blocks)

    def enter(self, block: Block) -> None:
        """Push ``block``; its persisted cursor becomes the active selection."""
        self.blocks.append(block)

    def jump_forward(self) -> None:
        """Follow the selected instruction into a nested block or branch target."""
        block = self.current
        instruction = block.selected_instruction()
        if instruction is None:
            raise NothingSelected()

        if instruction.kind is InstructionKind.CALL:
            self._enter_resolved(instruction.target, ReferenceKind.DEFINITION)
            return
        if instruction.kind is InstructionKind.LOAD_LITERAL and instruction.literal_kind in NESTED_LITERAL_KINDS:
            self._enter_resolved(instruction.target, ReferenceKind.BLOCK)
            return
        if instruction.branch_target is not None:
            target = instruction.branch_target
            if not 0 <= target < len(block.instructions):
                raise NoTarget(f"branch target {target} is outside the block")
            self.history.append(LocalGoto(previous_index=block.selected))
            block.selected = target
            logger.debug("branch %s -> %s in %s", self.history[-1].previous_index, target, block.block_id)
            return
        raise NoTarget()

    def _enter_resolved(self, identifier: object, kind: ReferenceKind) -> None:
        if identifier is None:
            raise NoTarget()
        try:
            nested = self.resolver.resolve(identifier, kind)
        except ResolutionError as exc:
            logger.warning("failed to resolve %s %r: %s", kind.value, identifier, exc.reason)
            raise ResolutionFailed(exc.reason) from exc
        self.history.append(EnteredNestedBlock())
        self.enter(nested)
        logger.debug("entered %s (depth %d)", nested.block_id, self.depth)

    def jump_backward(self) -> None:
        """Undo the most recent jump.

        An ``EnteredNestedBlock`` record is consumed even when the stack is
        already at the root, in which case ``AtRoot`` is raised.
        """
        if not self.history:
            raise NoHistory()
        record = self.history.pop()
        if isinstance(record, EnteredNestedBlock):
            if len(self.blocks) <= 1:
                raise AtRoot()
            left = self.blocks.pop()
            logger.debug("left %s (depth %d)", left.block_id, self.depth)
            return
        self.current.selected = record.previous_index

    def goto(self, index: int) -> None:
        """Select ``index`` in the current block as an undoable jump."""
        block = self.current
        if index < 0 or index >= len(block.instructions):
            raise IndexOutOfRange(f"index {index} out of range (block has {len(block.instructions)} instructions)")
        if block.selected is not None:
            self.history.append(LocalGoto(previous_index=block.selected))
        block.selected = index

    def move_selection(self, delta: int) -> None:
        """Move the cursor by ``delta``, clamped to the block; never recorded."""
        block = self.current
        count = len(block.instructions)
        if count == 0:
            return
        if block.selected is None:
            block.selected = 0 if delta >= 0 else count - 1
            return
        block.selected = max(0, min(count - 1, block.selected + delta))


def parse_goto_index(text: str) -> int:
    """Parse goto-prompt input as a non-negative integer."""
    stripped = text.strip()
    if not stripped.isdigit() or not stripped.isascii():
        raise InvalidGotoInput(f"invalid index: {text!r}")
    return int(stripped)
