"""Span highlight compositor for the source pane.

Maps an instruction's byte-range span onto the owning block's source and
returns display lines split into plain and highlighted segments. Splitting
happens on bytes; segments are decoded afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..model import Span


@dataclass(frozen=True)
class Segment:
    text: str
    highlighted: bool = False


@dataclass(frozen=True)
class SourceLine:
    segments: tuple[Segment, ...] = ()

    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)

    @property
    def highlighted(self) -> bool:
        return any(segment.highlighted for segment in self.segments)


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def _line(*parts: tuple[bytes, bool]) -> SourceLine:
    return SourceLine(tuple(Segment(_decode(raw), highlighted) for raw, highlighted in parts if raw))


def _plain_lines(source: bytes) -> list[SourceLine]:
    return [_line((line, False)) for line in source.split(b"\n")]


def compose_source_lines(
    source: bytes | str,
    block_span: Span,
    instruction_span: Span | None,
) -> list[SourceLine]:
    """Split ``source`` into lines with ``instruction_span`` highlighted.

    Both spans are in absolute coordinates; ``block_span.start`` is the
    offset of ``source[0]``. When the instruction span is missing, inverted,
    or not contained in the block span, every line is returned plain.
    """
    if isinstance(source, str):
        source = source.encode("utf-8")

    if (
        instruction_span is None
        or instruction_span.start > instruction_span.end
        or not block_span.contains(instruction_span)
    ):
        return _plain_lines(source)

    start = min(len(source), instruction_span.start - block_span.start)
    end = min(len(source), instruction_span.end - block_span.start)
    initial = source[:start].split(b"\n")
    highlighted = source[start:end].split(b"\n")
    final = source[end:].split(b"\n")

    lines = [_line((raw, False)) for raw in initial[:-1]]
    if len(highlighted) == 1:
        lines.append(_line((initial[-1], False), (highlighted[0], True), (final[0], False)))
    else:
        lines.append(_line((initial[-1], False), (highlighted[0], True)))
        lines.extend(_line((raw, True)) for raw in highlighted[1:-1])
        lines.append(_line((highlighted[-1], True), (final[0], False)))
    lines.extend(_line((raw, False)) for raw in final[1:])
    return lines


def plain_text(lines: list[SourceLine]) -> str:
    """Rejoin composed lines into the text they were split from."""
    return "\n".join(line.text for line in lines)


def first_highlighted_line(lines: list[SourceLine]) -> int | None:
    """Index of the first line carrying a highlighted segment, if any."""
    for index, line in enumerate(lines):
        if line.highlighted:
            return index
    return None
