"""Source sanitization and Pygments syntax coloring for the source pane.

Pygments modules are imported on first use and formatters are cached per
style. Control bytes are neutralized so source text can never drive the
terminal.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "monokai"

# C0 controls except newline and tab, DEL, and C1 controls.
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")
_LEXER_OPTIONS = {"stripnl": False, "ensurenl": False}


def _escape_control(match: re.Match[str]) -> str:
    ch = match.group(0)
    return "" if ch == "\r" else f"\\x{ord(ch):02x}"


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes as ``\\xNN``; carriage returns are dropped."""
    return _CONTROL_RE.sub(_escape_control, source)


@lru_cache(maxsize=None)
def _formatter(style: str):
    from pygments.formatters import Terminal256Formatter
    from pygments.styles import get_style_by_name
    from pygments.util import ClassNotFound

    try:
        get_style_by_name(style)
    except ClassNotFound:
        logger.warning("unknown Pygments style %r, using %s", style, DEFAULT_STYLE)
        style = DEFAULT_STYLE
    return Terminal256Formatter(style=style)


@lru_cache(maxsize=32)
def _lexer(language: str):
    from pygments.lexers import TextLexer, get_lexer_by_name
    from pygments.util import ClassNotFound

    try:
        return get_lexer_by_name(language or "text", **_LEXER_OPTIONS)
    except ClassNotFound:
        return TextLexer(**_LEXER_OPTIONS)


def colorize_lines(source: str, language: str, style: str = DEFAULT_STYLE) -> list[str] | None:
    """Return ANSI-colored lines of ``source`` (split on ``\\n``).

    Returns ``None`` when the colored output does not line up one-to-one with
    the input lines, so callers can fall back to plain rows.
    """
    from pygments import highlight

    rendered = highlight(source, _lexer(language), _formatter(style))
    lines = rendered.split("\n")
    if len(lines) != source.count("\n") + 1:
        logger.debug("colored output has %d lines, source has %d", len(lines), source.count("\n") + 1)
        return None
    return lines
