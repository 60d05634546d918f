"""Main interactive event loop for the terminal UI.

Each iteration recomputes viewports, redraws, then waits a bounded time for
one key. Key semantics live in ``irexplorer.input.keys``.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass

from ..input import handle_key, normal_key_registry, read_key
from ..render import RenderContext, content_rows, pane_widths, render_frame, scroll_start
from ..source_pane import first_highlighted_line, source_rows_for_block
from ..ui_theme import UITheme
from .state import SessionState
from .terminal import TerminalController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    poll_timeout_ms: int = 50


@dataclass(frozen=True)
class RuntimeLoopView:
    """Presentation settings fixed for the whole session."""

    theme: UITheme
    style: str
    colorize: bool = True


def build_render_context(state: SessionState, view: RuntimeLoopView, columns: int, lines: int) -> RenderContext:
    """Update viewport offsets on ``state`` and snapshot everything render needs."""
    navigator = state.navigator
    block = navigator.current
    rows = content_rows(lines)
    state.page_rows = rows
    left_width, _right_width = pane_widths(columns, state.left_percent)

    source_rows, source_lines = source_rows_for_block(block, view.theme, view.style, colorize=view.colorize)

    if block is not state.last_block:
        state.list_start = 0
        state.source_start = 0
        state.last_block = block

    state.list_start = scroll_start(state.list_start, block.selected, rows, len(block.instructions))
    state.source_start = scroll_start(
        state.source_start,
        first_highlighted_line(source_lines),
        rows,
        len(source_rows),
    )

    return RenderContext(
        block=block,
        depth=navigator.depth,
        history_len=len(navigator.history),
        width=columns,
        height=lines,
        left_width=left_width,
        list_start=state.list_start,
        source_rows=source_rows,
        source_start=state.source_start,
        theme=view.theme,
        breadcrumb=tuple(entry.title for entry in navigator.blocks),
        show_inspector=state.show_inspector,
        goto_active=state.goto_active,
        goto_buffer=state.goto_buffer,
        error=state.error,
    )


def run_main_loop(
    state: SessionState,
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming,
    view: RuntimeLoopView,
) -> None:
    """Run the interactive loop until a quit key sets ``state.should_quit``.

    Terminal mode is held for the whole loop and restored on every exit path,
    including exceptions raised by rendering or key handling.
    """
    registry = normal_key_registry(state)
    with terminal.raw_mode():
        while not state.should_quit:
            term = shutil.get_terminal_size((80, 24))
            render_frame(build_render_context(state, view, term.columns, term.lines))

            try:
                key = read_key(stdin_fd, timeout_ms=timing.poll_timeout_ms)
            except KeyboardInterrupt:
                # Ignore SIGINT-style interrupts; CTRL_C arrives as a key in raw mode.
                continue
            if key == "":
                continue
            handle_key(state, key, registry)
    logger.debug("session ended at depth %d", state.navigator.depth)
