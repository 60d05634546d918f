"""UI theme definitions and selection helpers.

Themes are UI-only ANSI palettes (panes, status bar, inspector). Syntax
highlighting style for source code remains a separate setting.
"""

from __future__ import annotations

from dataclasses import dataclass

from .model import InstructionKind


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    divider: str
    reverse: str
    reset: str
    title: str
    index: str
    comment: str
    inst_call: str
    inst_literal: str
    inst_nested_literal: str
    inst_branch: str
    inst_other: str
    source_highlight: str
    status_key: str
    status_desc: str
    error_label: str
    error_text: str
    modal_title: str
    modal_border: str

    def instruction_color(self, kind: InstructionKind, nested: bool = False) -> str:
        """Return the color for an instruction row of ``kind``."""
        if kind is InstructionKind.CALL:
            return self.inst_call
        if kind is InstructionKind.LOAD_LITERAL:
            return self.inst_nested_literal if nested else self.inst_literal
        if kind is InstructionKind.BRANCH:
            return self.inst_branch
        return self.inst_other


DEFAULT_THEME = UITheme(
    name="default",
    divider="\033[2m",
    reverse="\033[7m",
    reset="\033[0m",
    title="\033[1m",
    index="\033[2m",
    comment="\033[2;38;5;245m",
    inst_call="\033[38;5;81m",
    inst_literal="\033[38;5;229m",
    inst_nested_literal="\033[1;38;5;214m",
    inst_branch="\033[38;5;177m",
    inst_other="",
    source_highlight="\033[1;7;34m",
    status_key="\033[1;34m",
    status_desc="\033[3m",
    error_label="\033[1;31m",
    error_text="\033[31m",
    modal_title="\033[1;38;5;45m",
    modal_border="\033[38;5;45m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    divider="\033[2;38;5;31m",
    reverse="\033[7m",
    reset="\033[0m",
    title="\033[1;38;5;45m",
    index="\033[2;38;5;110m",
    comment="\033[2;38;5;110m",
    inst_call="\033[38;5;45m",
    inst_literal="\033[38;5;153m",
    inst_nested_literal="\033[1;38;5;215m",
    inst_branch="\033[38;5;117m",
    inst_other="",
    source_highlight="\033[1;7;38;5;39m",
    status_key="\033[1;38;5;45m",
    status_desc="\033[3;38;5;153m",
    error_label="\033[1;38;5;203m",
    error_text="\033[38;5;203m",
    modal_title="\033[1;38;5;39m",
    modal_border="\033[38;5;39m",
)

PLAIN_THEME = UITheme(
    name="plain",
    divider="",
    reverse="\033[7m",
    reset="\033[0m",
    title="",
    index="",
    comment="",
    inst_call="",
    inst_literal="",
    inst_nested_literal="",
    inst_branch="",
    inst_other="",
    source_highlight="\033[7m",
    status_key="",
    status_desc="",
    error_label="",
    error_text="",
    modal_title="",
    modal_border="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode.

    The plain theme keeps reverse video so the selection and the source
    highlight stay visible without colors.
    """
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
