"""Command-line entry point: ``py-sh`` / ``python -m py_sh``.

    py-sh [--config PATH] [-v | -vv] [--quiet]

``-v`` echoes INFO entries (parsed pipelines, exit statuses) to
stderr, ``-vv`` adds DEBUG (every matched token, every fork).
``--quiet`` drops the banner and prompt; subshells are started with it.
"""

import argparse
import dataclasses
import sys
from pathlib import Path

from py_sh.config import load_config
from py_sh.errors import ConfigError
from py_sh.logging import LogLevel
from py_sh.repl import run
from py_sh.shell import Shell

EXIT_BAD_CONFIG = 2

_VERBOSITY = {1: LogLevel.INFO, 2: LogLevel.DEBUG}


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the command line."""
    parser = argparse.ArgumentParser(
        prog="py-sh",
        description="A small Unix shell with pipelines, redirection and subshells.",
    )
    parser.add_argument("--config", type=Path, help="JSON configuration file")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="echo the shell's log to stderr (-v: info, -vv: debug)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="no banner and no prompt",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse the command line, then run the shell until it exits."""
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"py-sh: {e}", file=sys.stderr)  # noqa: T201
        return EXIT_BAD_CONFIG

    if args.verbose:
        level = _VERBOSITY.get(args.verbose, LogLevel.DEBUG)
        config = dataclasses.replace(config, log_level=level)

    return run(Shell(config=config), quiet=args.quiet)


if __name__ == "__main__":
    sys.exit(main())
