#!/usr/bin/env python3
"""gomacro/main.py — command-line entry point.

Usage examples
--------------
    # Expand a template into a Go source file
    gomacro input.go.tmpl output.go

    # Expand macro bodies against earlier macros first
    gomacro -r input.go.tmpl output.go

    # Write to stdout, with progress logging
    gomacro -v input.go.tmpl -

Exit codes
----------
    0   Success.
    1   The template could not be parsed or expanded.
    2   Infrastructure failure (unreadable input, unwritable output,
        bad options).

The module doubles as ``python -m gomacro`` via the companion
``gomacro/__main__.py``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from gomacro import __version__
from gomacro.config import DEFAULT_PREFIX, ExpanderConfig
from gomacro.errors import MacroError, OutputError
from gomacro.expander import expand_file

_log = logging.getLogger("gomacro")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the root ``gomacro`` logger.

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
        logging.Formatter(fmt="%(name)s: %(levelname)s: %(message)s")
    )
    root = logging.getLogger("gomacro")
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)


def _resolve_path(raw: str, label: str = "file") -> Path:
    """Resolve *raw* to an absolute ``Path``, raising on missing files."""
    p = Path(raw).expanduser().resolve()
    if not p.is_file():
        _log.error("%s not found: %s", label, p)
        raise SystemExit(EXIT_INFRA)
    return p


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gomacro",
        description=(
            "Expand MACRO_-prefixed function templates inline in Go source."
        ),
    )
    parser.add_argument(
        "input",
        metavar="INPUT",
        help="Template file to expand.",
    )
    parser.add_argument(
        "output",
        metavar="OUTPUT",
        help='Destination file ("-" for stdout).',
    )
    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Expand macros recursively (macro bodies may use earlier macros).",
    )
    parser.add_argument(
        "--prefix",
        default=DEFAULT_PREFIX,
        metavar="PREFIX",
        help=f"Name prefix marking macro declarations (default: {DEFAULT_PREFIX}).",
    )
    parser.add_argument(
        "--no-strict-arity",
        dest="strict_arity",
        action="store_false",
        help="Tolerate macro calls with too few or too many arguments.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v INFO, -vv DEBUG).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the gomacro CLI.

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
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA

    _configure_logging(args.verbose)

    config = ExpanderConfig(
        recursive=args.recursive,
        prefix=args.prefix,
        strict_arity=args.strict_arity,
    )
    problems = config.validate()
    if problems:
        for problem in problems:
            _log.error("invalid configuration: %s", problem)
        return EXIT_INFRA

    try:
        _resolve_path(args.input, "input file")
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA

    try:
        expand_file(args.input, args.output, config)
    except OutputError as exc:
        print(exc.to_gcc_format(), file=sys.stderr)
        return EXIT_INFRA
    except MacroError as exc:
        print(exc.to_gcc_format(), file=sys.stderr)
        return EXIT_ERROR
    except (OSError, UnicodeDecodeError) as exc:
        _log.error("cannot read %s: %s", args.input, exc)
        return EXIT_INFRA

    _log.info("wrote %s", args.output)
    return EXIT_OK


# ---------------------------------------------------------------------------
# Module execution support
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    raise SystemExit(main())
