"""Inspector modal showing the full debug form of the selected instruction.

Rendering helpers here are presentation-only and side-effect free.
"""

from __future__ import annotations

import pprint

from ..ansi import clip_ansi_line, display_width
from ..model import Instruction
from ..ui_theme import UITheme

MODAL_MAX_WIDTH = 60
MODAL_MAX_HEIGHT = 20


def _chunk(line: str, width: int) -> list[str]:
    if width <= 0:
        return []
    if not line:
        return [""]
    return [line[i : i + width] for i in range(0, len(line), width)]


def instruction_debug_lines(instruction: Instruction, width: int) -> list[str]:
    """Describe ``instruction`` as plain lines no wider than ``width``."""
    kind = instruction.kind.value
    if instruction.literal_kind is not None:
        kind = f"{kind} ({instruction.literal_kind.value})"
    span = instruction.span
    lines = [
        f"kind: {kind}",
        f"span: {span.start}..{span.end}" if span is not None else "span: none",
    ]
    if instruction.branch_target is not None:
        lines.append(f"branch target: {instruction.branch_target}")
    if instruction.target is not None:
        lines.append(f"target: {instruction.target}")
    if instruction.comment:
        lines.append(f"comment: {instruction.comment}")
    lines.append("")
    lines.extend(pprint.pformat(instruction.raw, width=max(20, width), sort_dicts=False).splitlines())

    out: list[str] = []
    for line in lines:
        out.extend(_chunk(line, width))
    return out


def render_inspector(
    instruction: Instruction | None,
    index: int | None,
    width: int,
    height: int,
    theme: UITheme,
) -> str:
    """Return cursor-addressed output drawing the modal over the frame."""
    modal_w = min(MODAL_MAX_WIDTH, max(20, width - 4))
    modal_h = min(MODAL_MAX_HEIGHT, max(6, height - 2))
    x = max(0, (width - modal_w) // 2)
    y = max(0, (height - modal_h) // 2)
    inner_w = max(1, modal_w - 2)
    inner_h = max(1, modal_h - 2)
    border = theme.modal_border
    reset = theme.reset

    out: list[str] = []
    out.append(f"\033[{y + 1};{x + 1}H{border}╭{'─' * inner_w}╮{reset}")
    for i in range(inner_h):
        out.append(f"\033[{y + 2 + i};{x + 1}H{border}│{reset}{' ' * inner_w}{border}│{reset}")
    out.append(f"\033[{y + modal_h};{x + 1}H{border}╰{'─' * inner_w}╯{reset}")

    title = "Inspect instruction"
    title_x = x + max(2, (modal_w - len(title)) // 2)
    out.append(f"\033[{y + 1};{title_x + 1}H{theme.modal_title}{title}{reset}")

    body: list[str] = []
    if instruction is not None and index is not None:
        body.append(f"{theme.index}{index:4}: {reset}{instruction.text}")
        body.append(f"{theme.divider}{'─' * (inner_w - 2)}{reset}")
        body.extend(instruction_debug_lines(instruction, inner_w - 2))
    else:
        body.append("no instruction selected")

    footer = f"{theme.status_key}<esc>{reset}{theme.status_desc} close inspector{reset}"
    body_rows = max(0, inner_h - 1)
    for i, text in enumerate(body[:body_rows]):
        out.append(f"\033[{y + 2 + i};{x + 3}H{clip_ansi_line(text, inner_w - 2)}{reset}")
    footer_text = clip_ansi_line(footer, inner_w - 2)
    footer_x = x + 1 + max(1, inner_w - display_width(footer_text) - 1)
    out.append(f"\033[{y + 1 + inner_h};{footer_x + 1}H{footer_text}{reset}")
    return "".join(out)
