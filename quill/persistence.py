"""
Loading and saving buffers.

Saves are atomic: lines are written to a temporary file in the target's own
directory, flushed and fsynced, then renamed over the target with
`os.replace`. A crash at any point leaves the target holding either the old
content or the new content, never a mix. Before the rename an optional
backup copy of the old file is made next to it.

Autosave writes the dirty buffer to a recovery file under RECOVERY_DIR,
named after an FNV-1a hash of the buffer's path. It never touches the file
being edited, the dirty flag or the undo history.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from .buffer import TextBuffer
from .config import RECOVERY_DIR

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".~"
RECOVERY_PREFIX = "quill-recover-"
NEW_FILE_MODE = 0o644

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
_MASK64 = 0xFFFFFFFFFFFFFFFF


def fnv1a_64(data: bytes) -> int:
    """64-bit FNV-1a hash; stable across runs, not cryptographic."""
    h = FNV_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME) & _MASK64
    return h


def backup_path(path: Path) -> Path:
    return path.with_suffix(BACKUP_SUFFIX)


def recovery_path(source: Path | str, directory: Path = RECOVERY_DIR) -> Path:
    digest = fnv1a_64(str(source).encode("utf-8"))
    return Path(directory) / f"{RECOVERY_PREFIX}{digest:016x}"


def load_lines(path: Path) -> list[str]:
    """Read a text file as a list of lines without terminators.

    Lines are split on "\\n"; a "\\r" left before it (CRLF files) is dropped.
    """
    with open(path, encoding="utf-8", newline="\n") as f:
        return [line.removesuffix("\n").removesuffix("\r") for line in f]


def write_lines_atomic(path: Path, lines: Iterable[str]) -> None:
    """Replace `path` with `lines`, each followed by one newline, atomically.

    On failure the temporary file is removed, `path` is left as it was and
    the OSError propagates.
    """
    path = Path(path)
    directory = path.parent
    try:
        mode = path.stat().st_mode & 0o777
    except FileNotFoundError:
        mode = NEW_FILE_MODE

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            for line in lines:
                f.write(line)
                f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def make_backup(path: Path) -> Path | None:
    """Copy `path` to its backup sibling. Failures are logged, not raised."""
    target = backup_path(path)
    try:
        shutil.copy2(path, target)
    except OSError as e:
        logger.warning("backup of %s failed: %s", path, e)
        return None
    return target


def atomic_save(path: Path, lines: Iterable[str], backup: bool = True) -> None:
    path = Path(path)
    if backup and path.exists():
        make_backup(path)
    write_lines_atomic(path, lines)


def save_buffer(
    buffer: TextBuffer,
    path: Path | str | None = None,
    recovery_dir: Path = RECOVERY_DIR,
) -> Path:
    """Save `buffer` to `path` (default: its own path) and return the target.

    On success the buffer adopts the target as its path, is marked clean and
    any recovery snapshot for that path is discarded. Raises ValueError when
    there is nowhere to save and OSError when the write fails; the buffer is
    untouched in both cases.
    """
    if path is not None:
        target = Path(path)
    elif buffer.path is not None:
        target = buffer.path
    else:
        raise ValueError("no filename")

    atomic_save(target, buffer.lines, backup=buffer.backup)
    buffer.path = target
    buffer.dirty = False
    logger.debug("saved %d lines to %s", len(buffer.lines), target)
    discard_recovery(target, recovery_dir)
    return target


def load_buffer(path: Path | str, **flags) -> tuple[TextBuffer, bool]:
    """Open `path` into a fresh buffer.

    Returns (buffer, existed). A missing file gives an empty buffer bound to
    that path; other read errors propagate.
    """
    path = Path(path)
    try:
        lines = load_lines(path)
    except FileNotFoundError:
        return TextBuffer(path=path, **flags), False
    return TextBuffer(path=path, lines=lines, **flags), True


def find_recovery(source: Path | str, directory: Path = RECOVERY_DIR) -> Path | None:
    candidate = recovery_path(source, directory)
    return candidate if candidate.is_file() else None


def discard_recovery(source: Path | str, directory: Path = RECOVERY_DIR) -> None:
    try:
        recovery_path(source, directory).unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("could not remove recovery file for %s: %s", source, e)


class Autosaver:
    """Writes recovery snapshots of a dirty buffer at most once per interval.

    There is no timer: `maybe_save()` is called at the start of every command
    and only acts when `interval` seconds have passed since the last time it
    acted. An interval of 0 disables autosave.
    """

    def __init__(
        self,
        interval: int,
        directory: Path = RECOVERY_DIR,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval = interval
        self.directory = Path(directory)
        self._clock = clock
        self.last_check = clock()

    def due(self, buffer: TextBuffer) -> bool:
        if self.interval <= 0 or not buffer.dirty:
            return False
        return self._clock() - self.last_check >= self.interval

    def maybe_save(self, buffer: TextBuffer) -> Path | None:
        """Write a recovery snapshot if one is due. Returns its path if written."""
        if not self.due(buffer):
            return None
        self.last_check = self._clock()
        return self.save_now(buffer)

    def save_now(self, buffer: TextBuffer) -> Path | None:
        if buffer.path is None:
            return None
        target = recovery_path(buffer.path, self.directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            write_lines_atomic(target, buffer.lines)
        except OSError as e:
            logger.warning("autosave of %s failed: %s", buffer.name, e)
            return None
        logger.debug("autosaved %s to %s", buffer.name, target)
        return target
