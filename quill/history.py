"""
Command history for the line editor.

Holds the lines the user has submitted during this process, oldest first, for
Up/Down arrow recall. History is never written to disk.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from .config import HISTORY_MAX


class History:
    """Bounded log of submitted input lines."""

    def __init__(self, capacity: int = HISTORY_MAX) -> None:
        self.capacity = capacity
        self._entries: deque[str] = deque(maxlen=capacity)

    def append(self, line: str) -> bool:
        """Remember a submitted line.

        Empty lines and a repeat of the most recent entry are skipped, so
        pressing Enter twice on the same command stores it once. The same text
        may still appear again once something else has been entered in between.
        When the log is full the oldest entry is dropped.

        Returns True if the line was stored.
        """
        if not line:
            return False
        if line == self.last:
            return False
        self._entries.append(line)
        return True

    @property
    def last(self) -> str | None:
        """The most recent entry, or None when nothing was stored yet."""
        return self._entries[-1] if self._entries else None

    def __getitem__(self, index: int) -> str:
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
