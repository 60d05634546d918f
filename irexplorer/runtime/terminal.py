"""Terminal ownership for one interactive session.

Covers the host check, raw input mode, and the alternate screen.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty
from typing import IO

ENTER_SCREEN = b"\x1b[?1049h\x1b[?25l"
LEAVE_SCREEN = b"\x1b[?25h\x1b[?1049l"


class UnsupportedHostError(RuntimeError):
    """Raised when stdin/stdout cannot host an interactive terminal session."""


def _is_tty(stream: IO) -> bool:
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError):
        return False


def ensure_interactive_host(stdin: IO, stdout: IO) -> None:
    """Refuse to start unless both standard streams are attached to a terminal."""
    for label, stream in (("stdin", stdin), ("stdout", stdout)):
        if not _is_tty(stream):
            raise UnsupportedHostError(
                f"{label} is not a terminal; an interactive session needs a TTY (use --print for plain output)"
            )


class TerminalController:
    """Switch the controlling terminal in and out of session mode."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        # Snapshot taken before any change so leaving always restores it.
        self._original_attrs = termios.tcgetattr(stdin_fd)

    def enter_session_mode(self) -> None:
        """Raw keystrokes, alternate screen, hidden cursor."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, ENTER_SCREEN)

    def leave_session_mode(self) -> None:
        """Undo ``enter_session_mode``; the saved tty attributes come back last."""
        try:
            os.write(self.stdout_fd, LEAVE_SCREEN)
        finally:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._original_attrs)

    @contextlib.contextmanager
    def raw_mode(self):
        """Hold session mode for the body of a ``with`` block, on every exit path."""
        try:
            self.enter_session_mode()
            yield self
        finally:
            self.leave_session_mode()
