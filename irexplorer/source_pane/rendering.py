"""Turn composed source lines into styled terminal rows.

Plain segments keep their Pygments colors (sliced out of the colored line by
display column); highlighted segments are drawn in the theme's highlight style.
"""

from __future__ import annotations

from functools import lru_cache

from ..ansi import display_width, expand_tabs, slice_ansi_line
from ..model import Block
from ..ui_theme import UITheme
from .highlighting import SourceLine, compose_source_lines
from .syntax import colorize_lines, sanitize_terminal_text


@lru_cache(maxsize=32)
def _colored_source(source: str, language: str, style: str) -> tuple[str, ...] | None:
    lines = colorize_lines(source, language, style)
    return tuple(lines) if lines is not None else None


def styled_source_row(line: SourceLine, colored: str | None, theme: UITheme) -> str:
    """Render one composed line, overlaying the highlight on syntax colors."""
    if not line.highlighted and colored is not None:
        return colored

    out: list[str] = []
    col = 0
    for segment in line.segments:
        text = sanitize_terminal_text(segment.text)
        width = display_width(text, col)
        if segment.highlighted:
            out.append(f"{theme.source_highlight}{expand_tabs(text, col)}{theme.reset}")
        elif colored is not None:
            out.append(slice_ansi_line(colored, col, width))
            out.append(theme.reset)
        else:
            out.append(expand_tabs(text, col))
        col += width
    return "".join(out)


def source_rows_for_block(block: Block, theme: UITheme, style: str, *, colorize: bool = True) -> tuple[list[str], list[SourceLine]]:
    """Return styled rows and the composed lines for the block's selection."""
    instruction = block.selected_instruction()
    lines = compose_source_lines(block.source, block.span, instruction.span if instruction else None)
    colored: tuple[str, ...] | None = None
    if colorize:
        colored = _colored_source(sanitize_terminal_text(block.source_text), block.language, style)
        if colored is not None and len(colored) != len(lines):
            colored = None
    rows = [
        styled_source_row(line, colored[index] if colored is not None else None, theme)
        for index, line in enumerate(lines)
    ]
    return rows, lines
