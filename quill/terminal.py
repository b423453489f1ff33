"""
Raw terminal mode around a blocking read.

`RawTerminalSession` is a context manager: entering it saves the terminal
attributes of a file descriptor and switches it to non-canonical, non-echoing
input; leaving it restores the saved attributes exactly once, whichever way
the block is left (normal return, end of stream, KeyboardInterrupt, error).

Only ECHO and ICANON are cleared. Output post-processing and signal keys stay
as they are, so "\\n" still renders as a newline and Ctrl+C still raises
KeyboardInterrupt in the reading code.
"""

from __future__ import annotations

import logging
import os
import termios

logger = logging.getLogger(__name__)

# Indexes into the list returned by termios.tcgetattr
LFLAG = 3
CC = 6


class TerminalUnavailable(Exception):
    """Raised when raw mode cannot be engaged (not a tty, unsupported, ...)."""


class TerminalRestoreError(Exception):
    """Raised when the saved terminal attributes could not be put back."""


def is_interactive(fd: int, out) -> bool:
    """True when both the input fd and the output stream are terminals."""
    try:
        return os.isatty(fd) and out.isatty()
    except (AttributeError, ValueError, OSError):
        return False


class RawTerminalSession:
    """Holds a terminal in non-canonical, non-echo mode for one read."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._saved: list | None = None

    @property
    def active(self) -> bool:
        return self._saved is not None

    def __enter__(self) -> RawTerminalSession:
        if self._saved is not None:
            raise RuntimeError("raw mode is already active for this session")
        try:
            saved = termios.tcgetattr(self.fd)
            raw = termios.tcgetattr(self.fd)
            raw[LFLAG] &= ~(termios.ECHO | termios.ICANON)
            raw[CC][termios.VMIN] = 1
            raw[CC][termios.VTIME] = 0
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, raw)
        except (termios.error, OSError) as e:
            raise TerminalUnavailable(str(e)) from e
        self._saved = saved
        logger.debug("raw mode on (fd %d)", self.fd)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    def restore(self) -> None:
        """Put back the attributes saved on entry; later calls are no-ops."""
        if self._saved is None:
            return
        saved, self._saved = self._saved, None
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, saved)
        except (termios.error, OSError) as e:
            raise TerminalRestoreError(f"could not restore terminal mode: {e}") from e
        logger.debug("raw mode off (fd %d)", self.fd)
