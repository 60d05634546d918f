"""Source pane: span highlight composition and styled row rendering."""

from .highlighting import (
    Segment,
    SourceLine,
    compose_source_lines,
    first_highlighted_line,
    plain_text,
)
from .rendering import source_rows_for_block, styled_source_row

__all__ = [
    "Segment",
    "SourceLine",
    "compose_source_lines",
    "first_highlighted_line",
    "plain_text",
    "source_rows_for_block",
    "styled_source_row",
]
