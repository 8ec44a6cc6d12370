#!/usr/bin/env python3
"""valija/main.py — CLI entry-point for the Valija runtime tools.

Usage examples
--------------
    # Show the redacted toString a disfunction would get for some source
    python -m valija header point.js
    echo 'function Point($dis, x, y) { ... }' | python -m valija header

    # Override the recovered name
    python -m valija header point.js --name Vec

    # Check a mitigation option record
    python -m valija options '{"rewritePropertyUpdateExpr": true}'

    # Show version and exit
    python -m valija --version

Exit codes
----------
    0   Success.
    1   Invalid input (bad option record).
    2   Infrastructure failure (unreadable file, etc.).

The module doubles as ``python -m valija`` via the companion
``valija/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from pathlib import Path
from typing import Optional, Sequence

from valija import __version__
from valija.config import RuntimeConfig
from valija.disfunction import header_pattern, render_header
from valija.errors import ConfigurationError
from valija.mitigation import MitigateOptions

_log = logging.getLogger("valija")

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``valija`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("valija")
    root.setLevel(level)
    # Repeated main() calls in one process must not stack handlers.
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)


def _read_source(raw: Optional[str]) -> str:
    """Read *raw* (a path, or ``None``/``"-"`` for stdin)."""
    if raw is None or raw == "-":
        return sys.stdin.read()
    p = Path(raw).expanduser().resolve()
    if not p.exists():
        _log.error("source file not found: %s", p)
        raise SystemExit(EXIT_INFRA)
    return p.read_text(encoding="utf-8")


# ===========================================================================
# Subcommands
# ===========================================================================

def _cmd_header(args: argparse.Namespace) -> int:
    config = RuntimeConfig(receiver_param=args.receiver)
    text, _ = render_header(
        _read_source(args.source),
        args.name,
        pattern=header_pattern(config.receiver_param),
        body=config.redacted_body,
    )
    print(text)
    return EXIT_OK


def _cmd_options(args: argparse.Namespace) -> int:
    try:
        record = json.loads(args.record)
    except json.JSONDecodeError as exc:
        _log.error("option record is not valid JSON: %s", exc)
        return EXIT_ERROR
    if not isinstance(record, dict):
        _log.error("option record must be a JSON object")
        return EXIT_ERROR
    try:
        options = MitigateOptions.from_mapping(record)
    except ConfigurationError as exc:
        _log.error("%s", exc)
        return EXIT_ERROR
    enabled = options.enabled()
    print(", ".join(enabled) if enabled else "(no rewrites enabled)")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="valija",
        description="Valija runtime tools.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              valija header point.js
              valija options '{"rewritePropertyUpdateExpr": true}'
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # --- header ------------------------------------------------------------
    p_header = subparsers.add_parser(
        "header",
        help="Print the redacted toString of a function's source.",
    )
    p_header.add_argument(
        "source",
        nargs="?",
        default=None,
        help='Source file ("-" or omit for stdin).',
    )
    p_header.add_argument(
        "--name",
        default=None,
        help="Display name (default: recovered from the header).",
    )
    p_header.add_argument(
        "--receiver",
        default=RuntimeConfig.receiver_param,
        help="Reserved receiver parameter to strip (default: %(default)s).",
    )
    p_header.set_defaults(func=_cmd_header)

    # --- options -----------------------------------------------------------
    p_options = subparsers.add_parser(
        "options",
        help="Validate a mitigation option record (JSON).",
    )
    p_options.add_argument("record", help="JSON object of rewrite flags.")
    p_options.set_defaults(func=_cmd_options)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the valija CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except OSError as exc:
        _log.error("I/O failure: %s", exc)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
