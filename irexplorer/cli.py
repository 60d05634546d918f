"""Command-line front door for irexplorer.

Parses CLI options, resolves the entry block, and dispatches into the
interactive runtime (or prints the instruction listing with ``--print``).
"""

from __future__ import annotations

import argparse
import logging
import sys
import termios

from .config import (
    LOG_LEVELS,
    load_config,
    load_left_pane_percent,
    load_log_level,
    load_nu_executable,
    load_poll_timeout_ms,
    load_resolver_timeout_seconds,
    load_style_name,
    load_theme_name,
    save_theme_name,
)
from .logging_setup import configure_logging
from .model import Block
from .resolvers import RESOLVER_NAMES, ResolutionError, make_resolver
from .runtime import run_explorer
from .runtime.app import resolve_entry_block
from .runtime.terminal import UnsupportedHostError
from .source_pane.syntax import DEFAULT_STYLE
from .ui_theme import available_theme_names, resolve_theme

logger = logging.getLogger(__name__)


def format_listing(block: Block) -> str:
    """Plain-text instruction listing for ``block``, one instruction per line."""
    out = [f"# {block.title}"]
    for index, instruction in enumerate(block.instructions):
        line = f"{index:4}: {instruction.text}"
        if instruction.comment:
            line += f"  # {instruction.comment}"
        out.append(line)
    return "\n".join(out) + "\n"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="irexplorer",
        description="Explore compiled IR instructions side by side with their source.",
    )
    parser.add_argument(
        "target",
        help="Definition to open (e.g. path/to/file.py:func or a Nushell command name).",
    )
    parser.add_argument(
        "--block",
        action="store_true",
        help="Treat TARGET as a block reference instead of a definition.",
    )
    parser.add_argument(
        "--resolver",
        choices=RESOLVER_NAMES,
        default="python",
        help="Backend used to resolve definitions and blocks (default: python).",
    )
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--style", default=None, help=f"Pygments style name (default: {DEFAULT_STYLE}).")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument(
        "--print",
        dest="print_listing",
        action="store_true",
        help="Print the instruction listing of TARGET and exit.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level for the log file (default: WARNING).",
    )
    parser.add_argument("--log-file", default=None, help="Write logs to this file instead of the default location.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch an exploration session.

    ``argv`` is primarily for tests; when omitted ``sys.argv`` is used.
    Setup failures exit with a message before the terminal is touched.
    """
    args = build_parser().parse_args(argv)
    config = load_config()

    try:
        configure_logging(args.log_level or load_log_level(config), args.log_file)
    except OSError as exc:
        raise SystemExit(f"Cannot open log file: {exc}") from exc

    options: dict[str, object] = {}
    if args.resolver == "nu":
        options = {
            "executable": load_nu_executable(config),
            "timeout_seconds": load_resolver_timeout_seconds(config),
        }
    resolver = make_resolver(args.resolver, **options)

    try:
        root = resolve_entry_block(resolver, args.target, args.block)
    except ResolutionError as exc:
        logger.warning("entry resolution failed: %s", exc.reason)
        raise SystemExit(f"Cannot resolve {args.target!r}: {exc.reason}") from exc

    if args.print_listing:
        sys.stdout.write(format_listing(root))
        return

    theme_name = args.theme.strip().lower() if args.theme else None
    if theme_name in available_theme_names():
        save_theme_name(theme_name)
    theme = resolve_theme(theme_name or load_theme_name(config), no_color=args.no_color)
    try:
        run_explorer(
            root,
            resolver,
            theme=theme,
            style=args.style or load_style_name(config) or DEFAULT_STYLE,
            colorize=not args.no_color,
            left_percent=load_left_pane_percent(config),
            poll_timeout_ms=load_poll_timeout_ms(config),
        )
    except UnsupportedHostError as exc:
        raise SystemExit(str(exc)) from exc
    except (termios.error, OSError) as exc:
        logger.warning("terminal error: %s", exc)
        raise SystemExit(f"Terminal error: {exc}") from exc


if __name__ == "__main__":
    main()
