"""Session key dispatch for the goto prompt and normal mode.

Every key clears the transient error first. Navigation failures raised by the
engine are caught here and become the next status-bar error.
"""

from __future__ import annotations

import logging

from ..navigation import NavigationError, parse_goto_index
from ..runtime.state import SessionState
from .key_registry import KeyComboBinding, KeyComboRegistry

logger = logging.getLogger(__name__)


def _handle_goto_key(state: SessionState, key: str) -> None:
    if key == "ENTER":
        text = state.goto_buffer
        state.goto_active = False
        state.goto_buffer = ""
        state.navigator.goto(parse_goto_index(text))
        return
    if key == "BACKSPACE":
        state.goto_buffer = state.goto_buffer[:-1]
        return
    if key == "ESC":
        state.goto_active = False
        state.goto_buffer = ""
        return
    if len(key) == 1 and key.isprintable():
        state.goto_buffer += key


def normal_key_registry(state: SessionState) -> KeyComboRegistry:
    """Build the normal-mode bindings operating on ``state``."""
    navigator = state.navigator

    def quit_session() -> None:
        state.should_quit = True

    def open_inspector() -> None:
        state.show_inspector = True

    def open_goto_prompt() -> None:
        state.goto_active = True
        state.goto_buffer = ""

    def close_overlays() -> None:
        state.show_inspector = False
        state.goto_active = False

    def select_edge(last: bool) -> None:
        count = len(state.block.instructions)
        if count:
            state.block.selected = count - 1 if last else 0

    return KeyComboRegistry().register_bindings(
        KeyComboBinding(("q", "CTRL_C"), quit_session, "quit"),
        KeyComboBinding((" ",), open_inspector, "inspect"),
        KeyComboBinding(("g",), open_goto_prompt, "goto"),
        KeyComboBinding(("ESC",), close_overlays, "close"),
        KeyComboBinding(("UP", "k"), lambda: navigator.move_selection(-1), "previous"),
        KeyComboBinding(("DOWN", "j"), lambda: navigator.move_selection(1), "next"),
        KeyComboBinding(("PAGE_UP",), lambda: navigator.move_selection(-state.page_rows), "page up"),
        KeyComboBinding(("PAGE_DOWN",), lambda: navigator.move_selection(state.page_rows), "page down"),
        KeyComboBinding(("HOME",), lambda: select_edge(False), "first"),
        KeyComboBinding(("END",), lambda: select_edge(True), "last"),
        KeyComboBinding(("LEFT", "h", "BACKSPACE"), navigator.jump_backward, "back"),
        KeyComboBinding(("RIGHT", "l", "ENTER"), navigator.jump_forward, "jump"),
    )


def handle_key(state: SessionState, key: str, registry: KeyComboRegistry | None = None) -> bool:
    """Apply one key press to ``state``; return whether the key was handled."""
    state.error = None
    try:
        if state.goto_active:
            _handle_goto_key(state, key)
            return True
        if registry is None:
            registry = normal_key_registry(state)
        return registry.dispatch(key)
    except NavigationError as exc:
        logger.debug("key %r failed: %s", key, exc)
        state.error = str(exc)
        return True
