"""
Incrementally ranked sequence of records.

This module keeps the records read so far in descending size order while
they are still arriving, so the viewer can redraw a complete ranking after
every single insertion.

Purpose:
    `du` reports entries in directory order, not size order. The viewer
    shows a sorted listing from the first line onward, which means the
    ordering has to be maintained one record at a time rather than by
    sorting once at the end.

Design Decisions:
    - Doubly linked chain stored as an arena: nodes are integer handles
      into parallel lists, with -1 standing for "no link"
    - Insertion walks from the head and splices before the first node that
      is not larger than the new record (O(1) splice once found)
    - Equal sizes may end up in either relative order
    - Nothing is ever removed; the sequence only grows
    - Not thread-safe on its own; StreamCoordinator holds the lock
"""

from typing import Iterator, List

from .model import Record

# Sentinel handle for "no predecessor" / "no successor"
NIL = -1


class RankedSequence:
    """
    A growing sequence of Records kept in non-increasing magnitude order.

    Attributes:
        head: Handle of the largest record, or NIL when empty.

    Example:
        >>> seq = RankedSequence()
        >>> seq.insert(Record("a", "4.0K", 4096.0))
        0
        >>> seq.insert(Record("b", "1.0M", 1048576.0))
        1
        >>> [r.label for r in seq.to_list()]
        ['b', 'a']
    """

    def __init__(self) -> None:
        self._records: List[Record] = []
        self._prev: List[int] = []
        self._next: List[int] = []
        self.head = NIL

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        handle = self.head
        while handle != NIL:
            yield self._records[handle]
            handle = self._next[handle]

    def record(self, handle: int) -> Record:
        """Return the record stored at a handle."""
        return self._records[handle]

    def predecessor(self, handle: int) -> int:
        """Return the handle before `handle`, or NIL at the head."""
        return self._prev[handle]

    def successor(self, handle: int) -> int:
        """Return the handle after `handle`, or NIL at the tail."""
        return self._next[handle]

    def first(self, handle: int) -> int:
        """
        Walk predecessor links from any handle back to the head.

        Args:
            handle: Any live node handle.

        Returns:
            int: The handle of the node with no predecessor.
        """
        while self._prev[handle] != NIL:
            handle = self._prev[handle]
        return handle

    def last(self) -> int:
        """Return the tail handle, or NIL when the sequence is empty."""
        handle = self.head
        if handle == NIL:
            return NIL
        while self._next[handle] != NIL:
            handle = self._next[handle]
        return handle

    def _new_node(self, record: Record) -> int:
        self._records.append(record)
        self._prev.append(NIL)
        self._next.append(NIL)
        return len(self._records) - 1

    def insert(self, record: Record) -> int:
        """
        Insert a record at its ranked position.

        Walks forward from the head and places the record just before the
        first node whose magnitude is less than or equal to its own. If
        every node is strictly larger, the record becomes the new tail.

        Args:
            record: The record to add.

        Returns:
            int: The head handle after the insertion.
        """
        node = self._new_node(record)

        if self.head == NIL:
            self.head = node
            return self.head

        cur = self.head
        while True:
            if self._records[cur].magnitude <= record.magnitude:
                before = self._prev[cur]
                if before != NIL:
                    self._next[before] = node
                self._prev[node] = before
                self._next[node] = cur
                self._prev[cur] = node
                self.head = self.first(cur)
                return self.head

            if self._next[cur] == NIL:
                self._next[cur] = node
                self._prev[node] = cur
                self.head = self.first(cur)
                return self.head

            cur = self._next[cur]

    def to_list(self) -> List[Record]:
        """
        Return the records in display order (largest first).

        Returns:
            List[Record]: A new list; empty if nothing has been inserted.
        """
        return list(self)
