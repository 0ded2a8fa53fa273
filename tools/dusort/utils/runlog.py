"""
Run logging for dusort.

While the viewer is on screen curses owns the terminal, so anything printed
to stderr would tear the display. Diagnostics are written instead to an
append-only log file that can be followed with `tail -f` from another
terminal.

Design Decisions:
    - One log file shared by every run, each line tagged with a run id
    - Append-only writes, one open/close per line
    - UTC timestamps
"""

from __future__ import annotations

import datetime
import os
import uuid
from pathlib import Path
from typing import Optional


def log_root() -> Path:
    """
    Return the directory that holds the dusort log.

    Uses the DUSORT_LOG_ROOT environment variable if set, otherwise falls
    back to ~/.cache/dusort.

    Example:
        >>> os.environ["DUSORT_LOG_ROOT"] = "/var/log/dusort"
        >>> log_root()
        PosixPath('/var/log/dusort')
    """
    root = os.environ.get("DUSORT_LOG_ROOT")
    if root:
        return Path(root)
    return Path.home() / ".cache" / "dusort"


def run_log_path() -> Path:
    """Return the default log file path."""
    return log_root() / "dusort.log"


class RunLogger:
    """
    Minimal append-only run logger.

    Attributes:
        run_id: Short identifier tagging every line of this run.
        path: The filesystem path to the log file.

    Log Line Format:
        <timestamp> [run=<id>] [stage=<stage>] <LEVEL> <message>

    Example:
        >>> logger = RunLogger()
        >>> logger.warn("reader", "parse error 'abcK'")
        # Writes: 2024-01-15T12:00:00Z [run=1a2b3c4d] [stage=reader] WARN parse error 'abcK'
    """

    def __init__(self, path: Optional[Path] = None, run_id: Optional[str] = None) -> None:
        """
        Initialize a logger, creating the log directory if needed.

        Args:
            path: Log file to append to. Defaults to run_log_path().
            run_id: Identifier for this run. Defaults to a random 8-char id.

        Raises:
            OSError: If the log directory cannot be created.
        """
        self.run_id = run_id or uuid.uuid4().hex[:8]
        self.path = Path(path) if path is not None else run_log_path()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _ts(self) -> str:
        return (
            datetime.datetime.now(datetime.timezone.utc)
            .isoformat(timespec="seconds")
            .replace("+00:00", "Z")
        )

    def log(self, stage: str, level: str, message: str) -> None:
        """
        Append one structured line to the log file.

        Args:
            stage: Component emitting the line ("reader", "stream", "dusort").
            level: Severity ("INFO", "WARN", "ERROR").
            message: Human-readable message.
        """
        line = (
            f"{self._ts()} "
            f"[run={self.run_id}] "
            f"[stage={stage}] "
            f"{level.upper()} {message}\n"
        )
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line)

    def info(self, stage: str, message: str) -> None:
        self.log(stage, "INFO", message)

    def warn(self, stage: str, message: str) -> None:
        self.log(stage, "WARN", message)

    def error(self, stage: str, message: str) -> None:
        self.log(stage, "ERROR", message)
