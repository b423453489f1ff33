"""Bounded undo/redo over a text buffer."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from .buffer import TextBuffer, check_lines
from .config import UNDO_MAX

Snapshot = tuple[str, ...]


class SnapshotStack:
    """LIFO of line snapshots that forgets its oldest entry when full."""

    def __init__(self, capacity: int = UNDO_MAX) -> None:
        self.capacity = capacity
        self._stack: deque[Snapshot] = deque(maxlen=capacity)

    def push(self, lines: Iterable[str]) -> None:
        self._stack.append(tuple(lines))

    def pop(self) -> Snapshot | None:
        """Pop and return the most recent snapshot, or None if empty."""
        return self._stack.pop() if self._stack else None

    def clear(self) -> None:
        self._stack.clear()

    def __len__(self) -> int:
        return len(self._stack)


class EditHistory:
    """A buffer together with its undo and redo stacks.

    Every structural edit snapshots the current lines onto the undo stack and
    empties the redo stack before touching the buffer. Undo and redo move
    snapshots between the two stacks and leave the other stack alone.
    """

    def __init__(self, buffer: TextBuffer | None = None, capacity: int = UNDO_MAX) -> None:
        self.buffer = buffer if buffer is not None else TextBuffer()
        self.undo_stack = SnapshotStack(capacity)
        self.redo_stack = SnapshotStack(capacity)

    def checkpoint(self) -> None:
        """Record the current lines as an undo step and drop any redo steps."""
        self.undo_stack.push(self.buffer.lines)
        self.redo_stack.clear()

    def insert_lines(self, index: int, lines: Iterable[str]) -> None:
        lines = check_lines(lines)
        self.checkpoint()
        self.buffer.insert_lines(index, lines)

    def append_lines(self, lines: Iterable[str]) -> None:
        self.insert_lines(len(self.buffer), lines)

    def delete_range(self, lo: int, hi: int) -> list[str]:
        self.checkpoint()
        return self.buffer.delete_range(lo, hi)

    def replace_range(self, lo: int, hi: int, lines: Iterable[str]) -> None:
        lines = check_lines(lines)
        self.checkpoint()
        self.buffer.replace_range(lo, hi, lines)

    def replace_all(self, lines: Iterable[str]) -> None:
        lines = check_lines(lines)
        self.checkpoint()
        self.buffer.set_lines(lines)

    def undo(self) -> bool:
        """Step back one edit. Returns False when there is nothing to undo."""
        snapshot = self.undo_stack.pop()
        if snapshot is None:
            return False
        self.redo_stack.push(self.buffer.lines)
        self.buffer.set_lines(snapshot)
        return True

    def redo(self) -> bool:
        """Re-apply the last undone edit. Returns False when there is none."""
        snapshot = self.redo_stack.pop()
        if snapshot is None:
            return False
        self.undo_stack.push(self.buffer.lines)
        self.buffer.set_lines(snapshot)
        return True
