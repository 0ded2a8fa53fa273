#!/usr/bin/env python3
"""
dusort - live ranked viewer for `du` output.

This module implements the command-line entry point: it checks that input
is actually piped in, loads configuration, and then either runs the curses
viewer or (with --no-tui) prints the final ranking to stdout.

Usage:
    du -sh /path/to/dir/* | dusort
    du -sh /path/to/dir/* | python -m dusort --no-tui

Configuration:
    .env in the current directory is loaded first (existing environment
    variables win). Recognised variables:
        DUSORT_LOG_ROOT   directory holding dusort.log
        DUSORT_DELIMITER  field delimiter (default: tab)

Exit Codes:
    0: User quit, or --no-tui finished
    1: stdin is not piped, or the terminal / log file could not be set up
"""

import argparse
import curses
import os
import sys
import threading
from pathlib import Path
from queue import Queue
from typing import Iterable, List, Optional, TextIO

from . import __version__
from .tui.model import Record
from .tui.reader import DEFAULT_DELIMITER, RecordReader
from .tui.stream import StreamCoordinator
from .tui.views import QUEUE_SIZE, PlainRenderer, run_viewer
from .utils.runlog import RunLogger
from .utils.terminal import TerminalError, detach_stdin, stdin_is_piped

NOT_PIPED_MESSAGE = "stdin is not pipe. please use `du -sh /path/to/dir/* | dusort`"

# ============================================================
# Environment Configuration
# ============================================================

def load_dotenv(path: Optional[Path] = None) -> None:
    """
    Load a .env file into os.environ if present.

    Args:
        path: File to read. Defaults to .env in the current directory.

    Side Effects:
        Adds variables that aren't already set (setdefault, so existing
        environment variables win).
    """
    env_path = Path(path) if path is not None else Path.cwd() / ".env"

    if not env_path.exists():
        return

    with env_path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            # Skip empty lines and comments
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key.strip(), value.strip())


def delimiter_arg(value: str) -> str:
    """argparse type for --delimiter: accepts a literal "\\t" for tab."""
    value = value.replace("\\t", "\t")
    if not value:
        raise argparse.ArgumentTypeError("delimiter must not be empty")
    return value


# ============================================================
# Runners
# ============================================================

def run_plain(lines: Iterable[str], out: TextIO, logger: RunLogger,
              delimiter: str = DEFAULT_DELIMITER) -> List[Record]:
    """
    Rank the whole input and print it once the stream ends.

    Uses the same reader / coordinator pair as the viewer, with a renderer
    that only writes the finished ranking.

    Returns:
        The final ranked list of Records.
    """
    record_queue: Queue = Queue(maxsize=QUEUE_SIZE)
    coordinator = StreamCoordinator(PlainRenderer(out), logger)
    reader = RecordReader(lines, record_queue, logger, delimiter)

    threading.Thread(target=reader.run, name="dusort-reader", daemon=True).start()
    coordinator.consume(record_queue)
    return coordinator.snapshot()


def run_tui(logger: RunLogger, delimiter: str) -> None:
    """
    Run the curses viewer on the piped stdin.

    Raises:
        TerminalError: If no controlling terminal can be attached.
        curses.error: If curses fails to initialise.
    """
    stream = detach_stdin()
    # Esc should quit at once rather than after the default 1s escape delay
    os.environ.setdefault("ESCDELAY", "25")
    curses.wrapper(run_viewer, stream, logger, delimiter)


# ============================================================
# Command-Line Argument Parsing
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="dusort",
        description="Live ranked viewer for `du -h` style output read from stdin",
        epilog="example: du -sh /path/to/dir/* | dusort",
    )
    parser.add_argument(
        "--delimiter",
        type=delimiter_arg,
        default=delimiter_arg(os.environ.get("DUSORT_DELIMITER") or DEFAULT_DELIMITER),
        help="Field delimiter between size and label (default: tab)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Append diagnostics to this file (default: $DUSORT_LOG_ROOT/dusort.log)",
    )
    parser.add_argument(
        "--no-tui",
        action="store_true",
        help="Print the final ranking to stdout instead of the live viewer",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def fatal(message: str) -> None:
    """Print a diagnostic to stderr and exit with status 1."""
    print(f"dusort: {message}", file=sys.stderr)
    sys.exit(1)


# ============================================================
# Entry Point
# ============================================================

def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the dusort CLI.

    1. Loads .env configuration
    2. Parses arguments
    3. Refuses to run on an interactive stdin
    4. Runs the viewer (or plain mode) until quit / end of input
    """
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not stdin_is_piped(sys.stdin):
        fatal(NOT_PIPED_MESSAGE)

    try:
        logger = RunLogger(args.log_file)
    except OSError as exc:
        fatal(f"cannot open log file: {exc}")

    if args.no_tui:
        sys.stdin.reconfigure(errors="replace")
        run_plain(sys.stdin, sys.stdout, logger, args.delimiter)
        sys.exit(0)

    logger.info("dusort", "viewer started")
    try:
        run_tui(logger, args.delimiter)
    except TerminalError as exc:
        fatal(str(exc))
    except curses.error as exc:
        fatal(f"failed to initialize terminal: {exc}")
    except KeyboardInterrupt:
        pass

    sys.exit(0)


if __name__ == "__main__":
    main()
