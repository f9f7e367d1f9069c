"""
Fixed-capacity circular buffer for the most recent lines of a tailed file.

Slots are addressed by a monotonically increasing write counter modulo the
capacity, so there is no separate "is full" bookkeeping: once the counter
passes the capacity the oldest line is simply overwritten.
"""

from __future__ import annotations

import threading
from typing import List

# Number of lines retained by default.
BUFFER_SIZE = 4


class LineRingBuffer:
    """Thread-safe ring buffer of text lines."""

    def __init__(self, capacity: int = BUFFER_SIZE):
        if not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._slots: List[str] = [""] * capacity
        self._write_count = 0
        # Sequence number of the first line written after the last reset.
        self._cleared_at = 0
        # Re-entrant so a writer can hold it across several appends.
        self._lock = threading.RLock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def write_count(self) -> int:
        """Total number of lines ever appended (see reset())."""
        with self._lock:
            return self._write_count

    @property
    def lock(self) -> threading.RLock:
        """
        The lock guarding slots and the write counter.

        Holding it lets a caller commit several lines, plus any state that
        must be published together with them, as one atomic step.
        """
        return self._lock

    def append(self, line: str) -> None:
        with self._lock:
            self._slots[self._write_count % self._capacity] = line
            self._write_count += 1

    def latest(self) -> str:
        """
        Return the most recently appended line.

        Returns:
            The line, or an empty string when nothing has been appended yet.
        """
        with self._lock:
            if self._write_count == 0:
                return ""
            return self._slots[(self._write_count - 1) % self._capacity]

    def reset(self, restart_sequence: bool = False) -> None:
        """
        Clear every slot to the empty string.

        Args:
            restart_sequence: Also set the write counter back to zero. By
                default the counter keeps running, so the next append lands
                in whatever slot the ring phase dictates.
        """
        with self._lock:
            for i in range(self._capacity):
                self._slots[i] = ""
            if restart_sequence:
                self._write_count = 0
            self._cleared_at = self._write_count

    def _first_retained(self) -> int:
        return max(self._write_count - self._capacity, self._cleared_at)

    def lines(self) -> List[str]:
        """Return the retained lines, oldest first."""
        with self._lock:
            return [
                self._slots[i % self._capacity]
                for i in range(self._first_retained(), self._write_count)
            ]

    def __len__(self) -> int:
        with self._lock:
            return self._write_count - self._first_retained()
