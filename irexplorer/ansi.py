"""ANSI-aware text measurement and clipping for pane rendering.

Escape sequences never count toward width; tabs expand to 8-column stops and
East Asian wide characters take two cells.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Cells taken by ``ch`` when drawn at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - col % TAB_STOP
    if unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1


def _tokens(text: str) -> Iterator[tuple[str, bool]]:
    """Yield ``(token, is_escape)`` pairs: whole escape sequences or single chars."""
    pos = 0
    for match in ANSI_ESCAPE_RE.finditer(text):
        yield from ((ch, False) for ch in text[pos : match.start()])
        yield match.group(0), True
        pos = match.end()
    yield from ((ch, False) for ch in text[pos:])


def display_width(text: str, start_col: int = 0) -> int:
    """Number of cells ``text`` occupies when drawn at ``start_col``."""
    col = start_col
    for token, is_escape in _tokens(text):
        if not is_escape:
            col += char_display_width(token, col)
    return col - start_col


def expand_tabs(text: str, start_col: int = 0) -> str:
    """Replace tabs with spaces aligned to stops counted from ``start_col``."""
    if "\t" not in text:
        return text
    pieces: list[str] = []
    col = start_col
    for ch in text:
        cells = char_display_width(ch, col)
        pieces.append(" " * cells if ch == "\t" else ch)
        col += cells
    return "".join(pieces)


def slice_ansi_line(text: str, start_cols: int, max_cols: int) -> str:
    """Return up to ``max_cols`` cells of a styled line starting at ``start_cols``.

    The last SGR sequence skipped before the slice is re-emitted so the
    visible part keeps its color. Tabs become spaces.
    """
    if max_cols <= 0 or not text:
        return ""
    start_cols = max(0, start_cols)

    pieces: list[str] = []
    carried_sgr = ""
    col = 0
    taken = 0
    for token, is_escape in _tokens(text):
        if is_escape:
            if col < start_cols:
                if token.endswith("m"):
                    carried_sgr = token
            else:
                carried_sgr = ""
                pieces.append(token)
            continue
        cells = char_display_width(token, col)
        if col + cells <= start_cols:
            col += cells
            continue
        if taken + cells > max_cols:
            break
        if carried_sgr:
            pieces.append(carried_sgr)
            carried_sgr = ""
        pieces.append(" " * cells if token == "\t" else token)
        taken += cells
        col += cells
        if taken >= max_cols:
            break
    return "".join(pieces)


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    Escape sequences before the cut are kept verbatim.
    """
    return slice_ansi_line(text, 0, max_cols)


def pad_ansi_line(text: str, width: int) -> str:
    """Clip ``text`` to ``width`` cells and right-pad it with spaces."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))
