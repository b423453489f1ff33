"""
In-memory text buffer and line-range parsing.

A buffer is the ordered list of lines of the file being edited. Lines never
contain line terminators; the terminator is added back on save. The raw
mutators here mark the buffer dirty but do not record undo state; editing
commands go through `quill.undo.EditHistory`, which snapshots first.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

_DIGITS = re.compile(r"[0-9]+")


class InvalidRangeError(ValueError):
    """A line range that cannot be applied to the buffer."""


def check_lines(lines: Iterable[str]) -> list[str]:
    out = list(lines)
    for line in out:
        if "\n" in line or "\r" in line:
            raise ValueError(f"line contains a line terminator: {line!r}")
    return out


@dataclass
class TextBuffer:
    path: Path | None = None
    lines: list[str] = field(default_factory=list)
    dirty: bool = False
    number: bool = True
    backup: bool = True
    highlight: bool = False

    def __post_init__(self) -> None:
        self.lines = check_lines(self.lines)

    @property
    def name(self) -> str:
        return str(self.path) if self.path is not None else "(unnamed)"

    @property
    def char_count(self) -> int:
        return sum(len(line) + 1 for line in self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def snapshot(self) -> tuple[str, ...]:
        return tuple(self.lines)

    def set_lines(self, lines: Iterable[str]) -> None:
        self.lines = check_lines(lines)
        self.dirty = True

    def insert_lines(self, index: int, lines: Iterable[str]) -> None:
        """Insert before the 0-based `index`, clamped to the buffer."""
        new = check_lines(lines)
        index = max(0, min(index, len(self.lines)))
        self.lines[index:index] = new
        self.dirty = True

    def delete_range(self, lo: int, hi: int) -> list[str]:
        """Delete 1-based inclusive lines lo..hi and return them."""
        removed = self.lines[lo - 1 : hi]
        del self.lines[lo - 1 : hi]
        self.dirty = True
        return removed

    def replace_range(self, lo: int, hi: int, lines: Iterable[str]) -> None:
        """Replace 1-based inclusive lines lo..hi with `lines`."""
        self.lines[lo - 1 : hi] = check_lines(lines)
        self.dirty = True


def _parse_bound(text: str) -> int:
    if not _DIGITS.fullmatch(text):
        raise InvalidRangeError(f"not a line number: {text!r}")
    return int(text)


def parse_range(text: str, line_count: int) -> tuple[int, int]:
    """Parse a 1-based inclusive line range.

    ""     -> (1, line_count)
    "N"    -> (N, N)
    "A-B"  -> (A, B); a missing A means 1, a missing B means line_count

    The upper bound is clamped to line_count. Non-numeric bounds, zero, a
    reversed range, or a range starting past the last line raise
    InvalidRangeError.
    """
    text = text.strip()
    if not text:
        return 1, line_count

    if "-" in text:
        left, right = (part.strip() for part in text.split("-", 1))
        lo = _parse_bound(left) if left else 1
        hi = _parse_bound(right) if right else line_count
    else:
        lo = hi = _parse_bound(text)

    if lo == 0 or hi == 0 or lo > hi:
        raise InvalidRangeError(f"bad range: {text!r}")
    hi = min(hi, line_count)
    if lo > hi:
        raise InvalidRangeError(f"range {text!r} is past the end ({line_count} lines)")
    return lo, hi
