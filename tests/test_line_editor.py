"""Tests for the raw-mode line editor (quill/line_editor.py).

Input is fed through a pipe and output collected in a BytesIO. Raw mode runs
against the fake termios from test_terminal, so every test can also check that
the terminal attributes were put back.
"""

import io
import os
from unittest.mock import patch

import pytest

from quill.completion import CompletionProvider
from quill.history import History
from quill.line_editor import LineEditor, format_candidates

from .test_terminal import FakeTermios, initial_attrs

UP = b"\x1b[A"
DOWN = b"\x1b[B"
RIGHT = b"\x1b[C"
LEFT = b"\x1b[D"


@pytest.fixture
def fake_tty():
    fake = FakeTermios()
    with fake.patch():
        yield fake


@pytest.fixture
def pipes():
    opened = []

    def make(data: bytes) -> int:
        r, w = os.pipe()
        os.write(w, data)
        os.close(w)
        opened.append(r)
        return r

    yield make
    for fd in opened:
        os.close(fd)


def make_editor(fd, history=None, commands=(), interactive=True):
    return LineEditor(
        history=history if history is not None else History(),
        completer=CompletionProvider(commands),
        stdin_fd=fd,
        stdout=io.BytesIO(),
        interactive=interactive,
    )


class TestRawEditing:
    def test_enter_returns_line_and_records(self, fake_tty, pipes):
        editor = make_editor(pipes(b"print\r"))
        assert editor.read_line("> ") == "print"
        assert list(editor.history) == ["print"]
        assert not editor.at_eof

    def test_linefeed_also_submits(self, fake_tty, pipes):
        editor = make_editor(pipes(b"info\n"))
        assert editor.read_line("> ") == "info"

    def test_backspace_and_delete(self, fake_tty, pipes):
        editor = make_editor(pipes(b"abX\x7fY\x08c\r"))
        assert editor.read_line("> ") == "abc"

    def test_backspace_at_start_is_noop(self, fake_tty, pipes):
        editor = make_editor(pipes(b"\x7f\x7fok\r"))
        assert editor.read_line("> ") == "ok"

    def test_insert_in_middle(self, fake_tty, pipes):
        editor = make_editor(pipes(b"ac" + LEFT + b"b\r"))
        assert editor.read_line("> ") == "abc"

    def test_cursor_is_clamped(self, fake_tty, pipes):
        editor = make_editor(pipes(LEFT + LEFT + b"b" + RIGHT + RIGHT + b"c" + LEFT * 5 + b"a\r"))
        assert editor.read_line("> ") == "abc"

    def test_unknown_escape_ignored(self, fake_tty, pipes):
        editor = make_editor(pipes(b"\x1b[Zx\x1bXy\r"))
        assert editor.read_line("> ") == "xy"

    def test_sequences_with_parameters_leave_no_bytes(self, fake_tty, pipes):
        # Delete, then Ctrl+Right: the whole sequence is swallowed
        editor = make_editor(pipes(b"ab\x1b[3~\x1b[1;5C\r"))
        assert editor.read_line("> ") == "ab"

    def test_parameterised_arrow_does_not_move(self, fake_tty, pipes):
        editor = make_editor(pipes(b"ac\x1b[1;5Db\r"))
        assert editor.read_line("> ") == "acb"

    def test_application_mode_arrows(self, fake_tty, pipes):
        editor = make_editor(pipes(b"ac\x1bODb\r"))
        assert editor.read_line("> ") == "abc"

    def test_escape_at_end_of_stream(self, fake_tty, pipes):
        editor = make_editor(pipes(b"ab\x1b[1;"))
        assert editor.read_line("> ") == ""
        assert editor.at_eof
        assert fake_tty.attrs == initial_attrs()

    def test_utf8_survives(self, fake_tty, pipes):
        editor = make_editor(pipes("héllo ✓\r".encode()))
        assert editor.read_line("> ") == "héllo ✓"

    def test_record_false_skips_history(self, fake_tty, pipes):
        editor = make_editor(pipes(b"text line\r"))
        assert editor.read_line("> ", record=False) == "text line"
        assert len(editor.history) == 0

    def test_empty_line_not_recorded(self, fake_tty, pipes):
        editor = make_editor(pipes(b"\r"))
        assert editor.read_line("> ") == ""
        assert len(editor.history) == 0
        assert not editor.at_eof


class TestHistoryNavigation:
    def history(self, *lines):
        history = History()
        for line in lines:
            history.append(line)
        return history

    def test_up_recalls_newest(self, fake_tty, pipes):
        editor = make_editor(pipes(UP + b"\r"), history=self.history("one", "two"))
        assert editor.read_line("> ") == "two"

    def test_application_mode_up(self, fake_tty, pipes):
        editor = make_editor(pipes(b"\x1bOA\r"), history=self.history("one", "two"))
        assert editor.read_line("> ") == "two"

    def test_up_clamps_at_oldest(self, fake_tty, pipes):
        editor = make_editor(pipes(UP * 5 + b"\r"), history=self.history("one", "two"))
        assert editor.read_line("> ") == "one"

    def test_down_past_newest_clears(self, fake_tty, pipes):
        editor = make_editor(pipes(UP + DOWN + b"\r"), history=self.history("one", "two"))
        assert editor.read_line("> ") == ""

    def test_up_then_down(self, fake_tty, pipes):
        editor = make_editor(pipes(UP + UP + DOWN + b"\r"), history=self.history("one", "two"))
        assert editor.read_line("> ") == "two"

    def test_recalled_line_can_be_edited(self, fake_tty, pipes):
        editor = make_editor(pipes(UP + b" 3\r"), history=self.history("print 1-"))
        assert editor.read_line("> ") == "print 1- 3"

    def test_recalled_repeat_not_duplicated(self, fake_tty, pipes):
        history = self.history("info")
        editor = make_editor(pipes(UP + b"\r"), history=history)
        editor.read_line("> ")
        assert list(history) == ["info"]


class TestCompletion:
    def test_single_candidate_replaces_token(self, fake_tty, pipes):
        editor = make_editor(pipes(b"o\t\r"), commands=["open", "write", "quit"])
        assert editor.read_line("> ") == "open"

    def test_single_candidate_moves_cursor_to_end(self, fake_tty, pipes):
        editor = make_editor(pipes(b"o\t x\r"), commands=["open"])
        assert editor.read_line("> ") == "open x"

    def test_several_candidates_listed_and_line_unchanged(self, fake_tty, pipes):
        editor = make_editor(pipes(b"w\t\r"), commands=["write", "wq", "quit"])
        assert editor.read_line("> ") == "w"
        assert b"\nwrite  wq  \n" in editor.out.getvalue()

    def test_no_candidates_is_noop(self, fake_tty, pipes):
        editor = make_editor(pipes(b"zz\t\r"), commands=["open"])
        assert editor.read_line("> ") == "zz"

    def test_path_completion(self, fake_tty, pipes, tmp_path, monkeypatch):
        (tmp_path / "notes.txt").write_text("")
        monkeypatch.chdir(tmp_path)
        editor = make_editor(pipes(b"open no\t\r"), commands=["open"])
        assert editor.read_line("> ") == "open notes.txt"

    def test_format_candidates_rows_of_six(self):
        out = format_candidates([str(n) for n in range(8)])
        assert out == b"\n0  1  2  3  4  5  \n6  7  \n"


class TestRedraw:
    def test_full_redraw_with_cursor_offset(self, fake_tty, pipes):
        editor = make_editor(pipes(b"ab" + LEFT + b"\r"))
        editor.set_input_color("\x1b[97m")
        editor.read_line("> ")
        out = editor.out.getvalue()
        assert out.startswith(b"> ")
        assert b"\r\x1b[2K> \x1b[97mab\x1b[0m\x1b[1D" in out

    def test_no_offset_at_end_of_line(self, fake_tty, pipes):
        editor = make_editor(pipes(b"a\r"))
        editor.read_line("> ")
        assert editor.out.getvalue() == b"> \r\x1b[2K> a\x1b[0m\n"


class TestTerminalRestored:
    def test_after_enter(self, fake_tty, pipes):
        make_editor(pipes(b"x\r")).read_line("> ")
        assert fake_tty.attrs == initial_attrs()

    def test_after_eof(self, fake_tty, pipes):
        editor = make_editor(pipes(b"partial"))
        history = editor.history
        assert editor.read_line("> ") == ""
        assert editor.at_eof
        assert len(history) == 0
        assert fake_tty.attrs == initial_attrs()

    def test_after_interrupted_read(self, fake_tty, pipes):
        editor = make_editor(pipes(b""))
        with patch.object(editor, "_read_byte", side_effect=[ord("a"), KeyboardInterrupt()]):
            with pytest.raises(KeyboardInterrupt):
                editor.read_line("> ")
        assert fake_tty.attrs == initial_attrs()
        assert len(editor.history) == 0


class TestFallback:
    def test_line_buffered_when_not_interactive(self, pipes):
        editor = make_editor(pipes(b"hello\r\nworld\n"), interactive=False)
        assert editor.read_line("> ") == "hello"
        assert editor.read_line("> ") == "world"
        assert list(editor.history) == ["hello", "world"]
        assert b"\x1b" not in editor.out.getvalue()

    def test_escapes_are_not_interpreted(self, pipes):
        editor = make_editor(pipes(b"ab\x1b[D\n"), interactive=False)
        assert editor.read_line("> ") == "ab\x1b[D"

    def test_last_line_without_newline(self, pipes):
        editor = make_editor(pipes(b"tail"), interactive=False)
        assert editor.read_line("> ") == "tail"
        assert not editor.at_eof
        assert editor.read_line("> ") == ""
        assert editor.at_eof

    def test_falls_back_when_raw_mode_unavailable(self, pipes):
        fake = FakeTermios(fail_get=True)
        editor = make_editor(pipes(b"plain\n"))
        with fake.patch():
            assert editor.read_line("> ") == "plain"
        assert b"\x1b" not in editor.out.getvalue()
