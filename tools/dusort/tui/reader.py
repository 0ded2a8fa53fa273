"""
Record reading from the upstream pipeline.

This module turns raw `du -h` style lines into Record objects and feeds
them to the viewer through a queue. It is the producer half of the
producer-consumer pair; StreamCoordinator is the consumer.

Line Format:
    <size><delimiter><label>
    e.g. "4.0K\tsrc/dusort"

Design Decisions:
    - A bad size never drops the line: it is logged and ranked as 0 bytes
    - A line with no delimiter is logged and skipped
    - Blank lines are skipped silently
    - A read error ends the stream exactly like end-of-file
    - End of stream is signalled by putting END_OF_STREAM on the queue
"""

from dataclasses import dataclass
from queue import Queue
from typing import Iterable, Optional, Tuple

from ..utils.runlog import RunLogger
from ..utils.sizes import SizeParseError, parse_size
from .model import Record

DEFAULT_DELIMITER = "\t"

# Queue marker meaning "no more records will follow"
END_OF_STREAM = None


class MalformedLineError(ValueError):
    """Raised when an input line has no delimiter separating size and label."""


def split_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> Tuple[str, str]:
    """
    Split an input line into its size and label fields.

    The label is everything after the first delimiter, so labels that
    themselves contain the delimiter survive intact.

    Raises:
        MalformedLineError: If the delimiter does not occur in the line.
    """
    size_text, sep, label = line.partition(delimiter)
    if not sep:
        raise MalformedLineError(f"missing delimiter {delimiter!r} in line {line!r}")
    return size_text, label


@dataclass
class ReaderStats:
    """Counters for one read of the input stream."""
    lines: int = 0
    records: int = 0
    skipped: int = 0
    parse_errors: int = 0


class RecordReader:
    """
    Read lines from a text stream and emit Records onto a queue.

    Attributes:
        lines: Iterable of raw text lines (usually the piped stdin).
        out_queue: Queue the records are put on.
        logger: RunLogger receiving per-line warnings and read errors.
        delimiter: Field separator between size and label.
        stats: Counters updated while reading.

    Example:
        >>> q = Queue()
        >>> RecordReader(["4.0K\\tfoo\\n"], q, logger).run()
        >>> q.get()
        Record(label='foo', display_size='4.0K', magnitude=4096.0)
    """

    def __init__(self, lines: Iterable[str], out_queue: Queue, logger: RunLogger,
                 delimiter: str = DEFAULT_DELIMITER):
        self.lines = lines
        self.out_queue = out_queue
        self.logger = logger
        self.delimiter = delimiter
        self.stats = ReaderStats()

    def parse(self, line: str) -> Optional[Record]:
        """
        Build a Record from one raw input line.

        Args:
            line: The line, with or without its trailing newline.

        Returns:
            Record, or None if the line is blank or has no delimiter.
        """
        line = line.rstrip("\r\n")
        if not line.strip():
            return None

        try:
            size_text, label = split_line(line, self.delimiter)
        except MalformedLineError as exc:
            self.stats.skipped += 1
            self.logger.warn("reader", f"skipping line {self.stats.lines}: {exc}")
            return None

        try:
            magnitude = parse_size(size_text)
        except SizeParseError as exc:
            # Keep the line; it ranks as 0 bytes
            self.stats.parse_errors += 1
            self.logger.warn("reader", f"parse error {size_text!r}: {exc}")
            magnitude = 0.0

        return Record(label=label, display_size=size_text, magnitude=magnitude)

    def run(self) -> None:
        """
        Read until the stream is exhausted, then put END_OF_STREAM.

        Meant to run in a background thread. A failing read (I/O or decoding
        error) is logged and treated as end of stream so the viewer still
        shows its final ranking.
        """
        try:
            for line in self.lines:
                self.stats.lines += 1
                record = self.parse(line)
                if record is None:
                    continue
                self.stats.records += 1
                self.out_queue.put(record)
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.error("reader", f"error reading input: {exc}")
        finally:
            self.out_queue.put(END_OF_STREAM)

        self.logger.info(
            "reader",
            f"input finished lines={self.stats.lines} records={self.stats.records} "
            f"skipped={self.stats.skipped} parse_errors={self.stats.parse_errors}",
        )
