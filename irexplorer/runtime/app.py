"""Runtime composition layer for irexplorer.

Resolves the entry block, builds session state, acquires the terminal, and
starts the loop. Setup failures propagate to the CLI untouched.
"""

from __future__ import annotations

import logging
import sys

from ..model import Block, ReferenceKind
from ..navigation import Navigator
from ..resolvers import BlockResolver
from ..ui_theme import UITheme
from .loop import RuntimeLoopTiming, RuntimeLoopView, run_main_loop
from .state import SessionState
from .terminal import TerminalController, ensure_interactive_host

logger = logging.getLogger(__name__)


def resolve_entry_block(resolver: BlockResolver, target: str, is_block: bool) -> Block:
    """Resolve the block named on the command line; raises ``ResolutionError``."""
    kind = ReferenceKind.BLOCK if is_block else ReferenceKind.DEFINITION
    logger.info("resolving entry %s %r", kind.value, target)
    return resolver.resolve(target, kind)


def run_explorer(
    root: Block,
    resolver: BlockResolver,
    *,
    theme: UITheme,
    style: str,
    colorize: bool = True,
    left_percent: float = 50.0,
    poll_timeout_ms: int = 50,
) -> None:
    """Run one interactive session rooted at ``root``.

    The host check runs before any terminal state is touched, so a piped
    stdin/stdout fails fast with ``UnsupportedHostError``.
    """
    ensure_interactive_host(sys.stdin, sys.stdout)
    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())

    state = SessionState(navigator=Navigator(root, resolver), left_percent=left_percent)
    run_main_loop(
        state,
        terminal,
        stdin_fd,
        RuntimeLoopTiming(poll_timeout_ms=poll_timeout_ms),
        RuntimeLoopView(theme=theme, style=style, colorize=colorize),
    )
