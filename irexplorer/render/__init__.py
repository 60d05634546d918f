"""Rendering engine for the split instruction/source terminal view.

Defines render context data and writes fully composed ANSI frames.
Frame building is pure; only ``render_frame`` touches stdout.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass

from ..ansi import clip_ansi_line, display_width, pad_ansi_line
from ..model import Block
from ..ui_theme import UITheme
from .inspector import render_inspector

MIN_PANE_WIDTH = 10

STATUS_BINDINGS: tuple[tuple[str, str], ...] = (
    ("<q>", "quit"),
    ("<space>", "inspect"),
    ("<g>", "goto"),
    ("<up/k>", "previous"),
    ("<down/j>", "next"),
    ("<right/l>", "jump"),
    ("<left/h>", "back"),
)


@dataclass
class RenderContext:
    """Snapshot of everything one frame needs; rendering never mutates state."""

    block: Block
    depth: int
    history_len: int
    width: int
    height: int
    left_width: int
    list_start: int
    source_rows: list[str]
    source_start: int
    theme: UITheme
    breadcrumb: tuple[str, ...] = ()
    show_inspector: bool = False
    goto_active: bool = False
    goto_buffer: str = ""
    error: str | None = None


def pane_widths(width: int, left_percent: float) -> tuple[int, int]:
    """Split ``width`` into instruction-pane and source-pane widths."""
    usable = max(2, width - 1)
    left = int(usable * left_percent / 100.0)
    if usable >= 2 * MIN_PANE_WIDTH:
        left = max(MIN_PANE_WIDTH, min(usable - MIN_PANE_WIDTH, left))
    else:
        left = max(1, min(usable - 1, left))
    return left, usable - left


def content_rows(height: int) -> int:
    """Rows available to list entries (minus title row and status bar)."""
    return max(1, height - 2)


def scroll_start(start: int, target: int | None, rows: int, total: int) -> int:
    """Return a viewport start keeping ``target`` visible within ``rows``."""
    rows = max(1, rows)
    if target is not None:
        if target < start:
            start = target
        elif target >= start + rows:
            start = target - rows + 1
    return max(0, min(start, max(0, total - rows)))


def selected_with_ansi(text: str, theme: UITheme) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text or not theme.reverse:
        return text
    # Keep reverse video active even when the text contains internal resets.
    return theme.reverse + text.replace("\033[0m", "\033[0;7m") + theme.reset


def format_instruction_row(block: Block, index: int, theme: UITheme) -> str:
    """Render ``index: text  # comment`` with kind colors."""
    instruction = block.instructions[index]
    color = theme.instruction_color(instruction.kind, nested=instruction.enters_nested_block)
    text = f"{color}{instruction.text}{theme.reset}" if color else instruction.text
    row = f"{theme.index}{index:4}: {theme.reset}{text}"
    if instruction.comment:
        row += f"{theme.comment}  # {instruction.comment}{theme.reset}"
    return row


def build_status_line(left_text: str, width: int, right_text: str) -> str:
    """Left-aligned ``left_text`` with ``right_text`` pinned to the right edge."""
    usable = max(1, width - 1)
    right_width = display_width(right_text)
    if usable <= right_width:
        return clip_ansi_line(right_text, usable)
    left = clip_ansi_line(left_text, max(0, usable - right_width - 1))
    gap = " " * (usable - display_width(left) - right_width)
    return f"{left}{gap}{right_text}"


def status_bar_text(context: RenderContext) -> tuple[str, int | None]:
    """Return status-bar text and the cursor column for the goto prompt."""
    theme = context.theme
    if context.error:
        text = f"{theme.error_label}Error: {theme.reset}{theme.error_text}{context.error}{theme.reset}"
        return text, None
    if context.goto_active:
        prompt = f"{theme.status_desc}Go to index: {theme.reset}{context.goto_buffer}"
        return prompt, min(context.width, display_width(prompt) + 1)
    parts = [
        f"{theme.status_key}{key}{theme.reset}{theme.status_desc} {desc}  {theme.reset}"
        for key, desc in STATUS_BINDINGS
    ]
    return "".join(parts), None


def build_frame(context: RenderContext) -> str:
    """Compose one full ANSI frame for ``context``."""
    theme = context.theme
    block = context.block
    left_width = context.left_width
    right_width = max(1, context.width - left_width - 1)
    rows = content_rows(context.height)
    divider = f"{theme.reset}{theme.divider}│{theme.reset}"

    out: list[str] = ["\033[H"]

    trail = " › ".join(context.breadcrumb) if context.breadcrumb else block.title
    left_title = f"{theme.title} IR instructions{theme.reset} {theme.index}{trail}{theme.reset}"
    right_title = f"{theme.title} Source code{theme.reset}"
    out.append(pad_ansi_line(left_title, left_width))
    out.append(divider)
    out.append(pad_ansi_line(right_title, right_width))
    out.append("\r\n")

    for row in range(rows):
        index = context.list_start + row
        if index < len(block.instructions):
            left = clip_ansi_line(format_instruction_row(block, index, theme), left_width)
            left = pad_ansi_line(left, left_width)
            if index == block.selected:
                left = selected_with_ansi(left, theme)
        else:
            left = " " * left_width
        out.append(left)
        out.append(divider)

        source_index = context.source_start + row
        if source_index < len(context.source_rows):
            out.append(pad_ansi_line(context.source_rows[source_index], right_width))
            out.append(theme.reset)
        else:
            out.append(" " * right_width)
        out.append("\r\n")

    status_text, cursor_col = status_bar_text(context)
    right_status = f"depth {context.depth}  history {context.history_len} "
    if context.error or context.goto_active:
        status = pad_ansi_line(status_text, max(1, context.width - 1))
    else:
        status = build_status_line(status_text, context.width, right_status)
    out.append(status)
    out.append(theme.reset)

    if context.show_inspector:
        out.append(
            render_inspector(
                block.selected_instruction(),
                block.selected,
                context.width,
                context.height,
                theme,
            )
        )

    if cursor_col is not None:
        out.append(f"\033[{context.height};{cursor_col}H\033[?25h")
    else:
        out.append("\033[?25l")
    return "".join(out)


def render_frame(context: RenderContext) -> None:
    """Write one frame to stdout in a single ``os.write`` call."""
    frame = build_frame(context)
    os.write(sys.stdout.fileno(), frame.encode("utf-8", errors="replace"))


__all__ = [
    "RenderContext",
    "build_frame",
    "build_status_line",
    "content_rows",
    "format_instruction_row",
    "pane_widths",
    "render_frame",
    "scroll_start",
    "selected_with_ansi",
    "status_bar_text",
]
