"""
Terminal plumbing for the viewer.

dusort reads its records from a pipe on stdin, but curses reads key presses
from fd 0 as well. Before curses starts, the piped descriptor is moved aside
for the record reader and fd 0 is re-pointed at the controlling terminal.
"""

import io
import os
import stat


class TerminalError(RuntimeError):
    """Raised when no controlling terminal is available for the viewer."""


def stdin_is_piped(stream) -> bool:
    """
    Return True if the stream is a pipe or file rather than a terminal.

    Args:
        stream: Any object with a fileno() method (usually sys.stdin).

    Returns:
        bool: False when the descriptor is a character device (interactive
              terminal), True otherwise.
    """
    mode = os.fstat(stream.fileno()).st_mode
    return not stat.S_ISCHR(mode)


def detach_stdin(encoding: str = "utf-8") -> io.TextIOWrapper:
    """
    Hand the piped stdin to the caller and attach fd 0 to /dev/tty.

    Returns:
        A text stream reading the original piped input. Undecodable bytes
        are replaced rather than raising.

    Raises:
        TerminalError: If /dev/tty cannot be opened.
    """
    data_fd = os.dup(0)
    try:
        tty_fd = os.open("/dev/tty", os.O_RDONLY)
    except OSError as exc:
        os.close(data_fd)
        raise TerminalError(f"cannot open controlling terminal: {exc}") from exc

    os.dup2(tty_fd, 0)
    os.close(tty_fd)
    return io.open(data_fd, "r", encoding=encoding, errors="replace", newline="\n")
