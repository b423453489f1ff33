"""
Raw-mode line editor for the command prompt.

`LineEditor.read_line()` reads stdin one byte at a time with the terminal in
raw mode and keeps a small edit state: the bytes typed so far and a cursor.
Arrow keys move the cursor or recall history, Tab completes, Backspace
deletes, Enter submits. After every change the whole line is redrawn:

    \\r ESC[2K  prompt  input-colour  buffer  ESC[0m  ESC[<n>D

where n is the number of bytes to the right of the cursor. There is no
incremental diffing.

Editing is byte-wise. A multi-byte UTF-8 character occupies several cursor
positions and Backspace removes one byte of it at a time. The submitted line
is decoded as UTF-8, so text typed without mid-character edits comes back
intact.

When stdin or stdout is not a terminal, or raw mode cannot be switched on,
`read_line()` degrades to plain line-buffered reading with no escape
sequences at all.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import BinaryIO

from .completion import CompletionProvider, replace_last_token
from .history import History
from .terminal import RawTerminalSession, TerminalUnavailable, is_interactive

logger = logging.getLogger(__name__)

# Input bytes
BS = 0x08
TAB = 0x09
LF = 0x0A
CR = 0x0D
ESC = 0x1B
DEL = 0x7F
CSI = ord("[")
SS3 = ord("O")

# Parameter and intermediate bytes inside a CSI sequence
CSI_PARAM_FIRST = 0x20
CSI_PARAM_LAST = 0x3F

# Output sequences
ERASE_LINE = b"\r\x1b[2K"
RESET = b"\x1b[0m"

# Candidates per row when Tab finds several matches
GRID_COLUMNS = 6


class EditSession:
    """Edit state for one read_line call."""

    def __init__(self, history_length: int) -> None:
        self.buf = bytearray()
        self.cursor = 0
        self.history_index = history_length

    @property
    def text(self) -> str:
        return self.buf.decode("utf-8", errors="replace")

    def set_text(self, text: str) -> None:
        """Replace the whole buffer and put the cursor at the end."""
        self.buf = bytearray(text.encode("utf-8"))
        self.cursor = len(self.buf)

    def insert(self, byte: int) -> None:
        self.buf.insert(self.cursor, byte)
        self.cursor += 1

    def backspace(self) -> bool:
        if self.cursor == 0:
            return False
        del self.buf[self.cursor - 1]
        self.cursor -= 1
        return True

    def move_left(self) -> bool:
        if self.cursor == 0:
            return False
        self.cursor -= 1
        return True

    def move_right(self) -> bool:
        if self.cursor >= len(self.buf):
            return False
        self.cursor += 1
        return True


class LineEditor:
    """Reads edited, history-aware, completion-aware lines from a terminal."""

    def __init__(
        self,
        history: History | None = None,
        completer: CompletionProvider | None = None,
        stdin_fd: int | None = None,
        stdout: BinaryIO | None = None,
        interactive: bool | None = None,
    ) -> None:
        self.history = history if history is not None else History()
        self.completer = completer if completer is not None else CompletionProvider()
        self.fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self.out = sys.stdout.buffer if stdout is None else stdout
        self._interactive = interactive
        self.input_color = b""
        self.at_eof = False

    @property
    def interactive(self) -> bool:
        if self._interactive is None:
            return is_interactive(self.fd, self.out)
        return self._interactive

    def set_input_color(self, sequence: str) -> None:
        """ANSI sequence written before the typed text on every redraw."""
        self.input_color = sequence.encode("utf-8")

    def read_line(self, prompt: str, record: bool = True) -> str:
        """Show `prompt` and return the line the user submits.

        Submitted lines are added to history unless `record` is False. At end
        of stream the result is "" and `at_eof` is set; nothing is recorded.
        """
        self.at_eof = False
        if not self.interactive:
            return self._read_line_buffered(prompt, record)
        try:
            with RawTerminalSession(self.fd):
                return self._edit(prompt.encode("utf-8"), record)
        except TerminalUnavailable as e:
            logger.debug("raw mode unavailable, using line-buffered input: %s", e)
            return self._read_line_buffered(prompt, record)

    # -- raw mode ------------------------------------------------------------

    def _edit(self, prompt: bytes, record: bool) -> str:
        session = EditSession(len(self.history))
        self._write(prompt)

        while True:
            byte = self._read_byte()
            if byte is None:
                self.at_eof = True
                return ""

            if byte in (CR, LF):
                self._write(b"\n")
                line = session.text
                if record:
                    self.history.append(line)
                return line

            if byte in (DEL, BS):
                if session.backspace():
                    self._redraw(prompt, session)
            elif byte == TAB:
                self._complete(prompt, session)
            elif byte == ESC:
                self._escape(prompt, session)
            else:
                session.insert(byte)
                self._redraw(prompt, session)

    def _escape(self, prompt: bytes, session: EditSession) -> None:
        """Consume one escape sequence; only bare arrow keys do anything.

        CSI sequences run to their final byte (0x40-0x7E), so keys such as
        Delete (ESC [ 3 ~) or Ctrl+Right (ESC [ 1 ; 5 C) leave nothing behind.
        Application-mode arrows (ESC O A) count as arrows.
        """
        intro = self._read_byte()
        if intro == CSI:
            params = bytearray()
            final = self._read_byte()
            while final is not None and CSI_PARAM_FIRST <= final <= CSI_PARAM_LAST:
                params.append(final)
                final = self._read_byte()
            if params:
                return
        elif intro == SS3:
            final = self._read_byte()
        else:
            return

        if final == ord("A"):
            changed = self._history_prev(session)
        elif final == ord("B"):
            changed = self._history_next(session)
        elif final == ord("C"):
            changed = session.move_right()
        elif final == ord("D"):
            changed = session.move_left()
        else:
            changed = False
        if changed:
            self._redraw(prompt, session)

    def _history_prev(self, session: EditSession) -> bool:
        if session.history_index <= 0:
            return False
        session.history_index -= 1
        session.set_text(self.history[session.history_index])
        return True

    def _history_next(self, session: EditSession) -> bool:
        if session.history_index < len(self.history) - 1:
            session.history_index += 1
            session.set_text(self.history[session.history_index])
        else:
            # Past the newest entry: back to an empty line
            session.history_index = len(self.history)
            session.set_text("")
        return True

    def _complete(self, prompt: bytes, session: EditSession) -> None:
        text = session.text
        candidates = self.completer.complete(text)
        if not candidates:
            return
        if len(candidates) == 1:
            session.set_text(replace_last_token(text, candidates[0]))
        else:
            self._write(format_candidates(candidates))
        self._redraw(prompt, session)

    def _redraw(self, prompt: bytes, session: EditSession) -> None:
        data = ERASE_LINE + prompt + self.input_color + bytes(session.buf) + RESET
        tail = len(session.buf) - session.cursor
        if tail > 0:
            data += b"\x1b[%dD" % tail
        self._write(data)

    # -- fallback ------------------------------------------------------------

    def _read_line_buffered(self, prompt: str, record: bool) -> str:
        self._write(prompt.encode("utf-8"))
        data = bytearray()
        while True:
            byte = self._read_byte()
            if byte is None:
                if not data:
                    self.at_eof = True
                    return ""
                break
            if byte == LF:
                break
            data.append(byte)
        line = data.decode("utf-8", errors="replace").rstrip("\r\n")
        if record:
            self.history.append(line)
        return line

    # -- io ------------------------------------------------------------------

    def _read_byte(self) -> int | None:
        chunk = os.read(self.fd, 1)
        return chunk[0] if chunk else None

    def _write(self, data: bytes) -> None:
        self.out.write(data)
        self.out.flush()


def format_candidates(candidates: list[str]) -> bytes:
    """Lay candidates out below the prompt, GRID_COLUMNS per row."""
    rows = [
        "".join(f"{c}  " for c in candidates[i : i + GRID_COLUMNS])
        for i in range(0, len(candidates), GRID_COLUMNS)
    ]
    return ("\n" + "\n".join(rows) + "\n").encode("utf-8")
