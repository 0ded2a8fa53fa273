"""
Stream coordination between the record reader and the renderer.

StreamCoordinator is the consumer half of the producer-consumer pair. It
takes Records off the queue one at a time, inserts each into the
RankedSequence and hands the new ranking to the renderer.

Architecture:
    - Reader thread: RecordReader.run() puts Records, then END_OF_STREAM
    - Consumer thread: StreamCoordinator.consume() inserts and renders
    - Both the insert and the snapshot handed to the renderer happen under
      one lock, so a render never sees a half-spliced chain

Render Sequence:
    1. One render with an empty list and finished=False before any record
    2. One render per record, finished=False
    3. One render with finished=True after END_OF_STREAM
"""

import threading
from queue import Queue
from typing import Callable, List, Optional

from ..utils.runlog import RunLogger
from .model import Record
from .ranking import RankedSequence
from .reader import END_OF_STREAM

# render(records, finished)
Renderer = Callable[[List[Record], bool], None]


class StreamCoordinator:
    """
    Serialize insertions and renders over a single RankedSequence.

    Attributes:
        render: Callable painting (records, finished).
        sequence: The ranked records received so far.
        finished: True once END_OF_STREAM has been consumed.
        lock: Guards every mutation and read of the sequence.
    """

    def __init__(self, render: Renderer, logger: Optional[RunLogger] = None):
        self.render = render
        self.logger = logger
        self.sequence = RankedSequence()
        self.finished = False
        self.lock = threading.Lock()

    def snapshot(self) -> List[Record]:
        """Return the current ranking, taken under the lock."""
        with self.lock:
            return self.sequence.to_list()

    def add(self, record: Record) -> None:
        """Insert one record and render the resulting ranking."""
        with self.lock:
            self.sequence.insert(record)
            self.render(self.sequence.to_list(), False)

    def finish(self) -> None:
        """Mark the stream complete and render the final ranking."""
        with self.lock:
            self.finished = True
            self.render(self.sequence.to_list(), True)

        if self.logger is not None:
            self.logger.info("stream", f"stream finished records={len(self.sequence)}")

    def redraw(self) -> None:
        """Render the current ranking again, e.g. after a terminal resize."""
        with self.lock:
            self.render(self.sequence.to_list(), self.finished)

    def consume(self, in_queue: Queue) -> None:
        """
        Drain the queue until END_OF_STREAM, rendering after every record.

        Blocks on the queue between records. Returns after the final render;
        the caller decides whether the process keeps running.
        """
        with self.lock:
            self.render([], False)

        while True:
            record = in_queue.get()
            if record is END_OF_STREAM:
                break
            self.add(record)

        self.finish()

    def start(self, in_queue: Queue) -> threading.Thread:
        """Run consume() in a daemon thread and return the thread."""
        thread = threading.Thread(target=self.consume, args=(in_queue,),
                                  name="dusort-consumer", daemon=True)
        thread.start()
        return thread
