"""
Curses-based views for the ranked size listing.

This module paints the current ranking to the terminal and runs the
foreground key loop. Row formatting is kept separate from painting so the
visible grid can be computed (and tested) without a terminal.

Architecture:
    - Reader thread: RecordReader pushes Records onto a queue
    - Consumer thread: StreamCoordinator inserts and calls the renderer
    - Main thread: polls for q / Esc and terminal resizes
    - The renderer's screen lock serialises every curses call between the
      consumer thread and the main thread
"""

import curses
import select
import threading
from queue import Queue
from typing import Iterable, List, TextIO

from ..utils.runlog import RunLogger
from .model import Record
from .reader import DEFAULT_DELIMITER, RecordReader
from .stream import StreamCoordinator

STATUS_WAITING = "Waiting input..."
STATUS_FINISHED = "Finished"

KEY_ESCAPE = 27
QUIT_KEYS = (ord("q"), KEY_ESCAPE)

# Bounded so a fast producer waits for the renderer instead of buffering
# an entire `du` run in memory
QUEUE_SIZE = 2000

POLL_INTERVAL = 0.1


def format_rows(records: List[Record], finished: bool, height: int, width: int) -> List[str]:
    """
    Lay out the status line and listing rows for a grid of the given size.

    Args:
        records: Ranked records, largest first.
        finished: Whether the input stream is exhausted.
        height: Number of terminal rows available.
        width: Number of terminal columns available.

    Returns:
        List[str]: At most `height` rows, each at most `width - 1` characters
                   (the last column is left free so curses never writes the
                   bottom-right cell). Tabs are expanded to 8-column stops.

    Note:
        Clipping counts code points, not display cells, so wide (CJK or
        emoji) labels can still overflow a row.
    """
    if height <= 0 or width <= 1:
        return []

    status = STATUS_FINISHED if finished else STATUS_WAITING
    rows = [status]
    for record in records:
        if len(rows) >= height:
            break
        rows.append(record.display())

    return [row.expandtabs(8)[: width - 1] for row in rows]


class CursesRenderer:
    """
    Paint rankings onto a curses window.

    Callable as render(records, finished), which is the shape
    StreamCoordinator expects. Safe to call from the consumer thread while
    the main thread polls for keys.
    """

    def __init__(self, stdscr):
        self.stdscr = stdscr
        self.screen_lock = threading.Lock()
        self.closed = False

    def __call__(self, records: List[Record], finished: bool) -> None:
        with self.screen_lock:
            if self.closed:
                return
            self.stdscr.erase()
            h, w = self.stdscr.getmaxyx()
            for y, row in enumerate(format_rows(records, finished, h, w)):
                try:
                    self.stdscr.addstr(y, 0, row)
                except (curses.error, ValueError):
                    # Unpaintable label (e.g. embedded NUL); leave the row blank
                    pass
            self.stdscr.refresh()

    def poll_key(self, timeout: float = POLL_INTERVAL) -> int:
        """Wait up to `timeout` seconds for terminal input; return getch()."""
        select.select([0], [], [], timeout)
        with self.screen_lock:
            return self.stdscr.getch()

    def close(self) -> None:
        """Stop painting; later render calls become no-ops."""
        with self.screen_lock:
            self.closed = True


class PlainRenderer:
    """
    Print the final ranking to a text stream.

    Used by --no-tui: intermediate renders are ignored and only the
    finished ranking is written, one `<size>\\t<label>` line per record.
    """

    def __init__(self, out: TextIO):
        self.out = out

    def __call__(self, records: List[Record], finished: bool) -> None:
        if not finished:
            return
        for record in records:
            self.out.write(record.display() + "\n")
        self.out.flush()


def run_viewer(stdscr, lines: Iterable[str], logger: RunLogger,
               delimiter: str = DEFAULT_DELIMITER) -> None:
    """
    Run the interactive ranked listing until the user quits.

    Args:
        stdscr: The curses standard screen (provided by curses.wrapper).
        lines: Piped input lines to rank.
        logger: RunLogger for reader and lifecycle messages.
        delimiter: Field separator between size and label.

    Side Effects:
        - Starts daemon reader and consumer threads
        - Takes over the terminal until the user presses q or Esc
    """
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    stdscr.nodelay(True)
    stdscr.keypad(True)

    record_queue: Queue = Queue(maxsize=QUEUE_SIZE)
    renderer = CursesRenderer(stdscr)
    coordinator = StreamCoordinator(renderer, logger)
    reader = RecordReader(lines, record_queue, logger, delimiter)

    threading.Thread(target=reader.run, name="dusort-reader", daemon=True).start()
    coordinator.start(record_queue)

    while True:
        ch = renderer.poll_key()
        if ch in QUIT_KEYS:
            logger.info("dusort", "user requested exit")
            renderer.close()
            return
        if ch == curses.KEY_RESIZE:
            coordinator.redraw()
