from __future__ import annotations

from dataclasses import dataclass

from ..model import Block
from ..navigation import Navigator


@dataclass
class SessionState:
    """Mutable state of one interactive session, shared by input and render."""

    navigator: Navigator
    show_inspector: bool = False
    goto_active: bool = False
    goto_buffer: str = ""
    error: str | None = None
    should_quit: bool = False
    left_percent: float = 50.0
    list_start: int = 0
    source_start: int = 0
    last_block: Block | None = None
    page_rows: int = 10

    @property
    def block(self) -> Block:
        """Shortcut for the navigator's current block."""
        return self.navigator.current
