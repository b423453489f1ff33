"""
Tests for the text buffer and line-range parsing (quill/buffer.py).

  1. **TestTextBuffer**: buffer mutations set the dirty flag, derived values
     (name, character count) follow the lines, and text containing a line
     terminator is refused.

  2. **TestParseRange**: the range grammar used by print, delete and fmt.
     Ranges are 1-based and inclusive; the table covers the empty range,
     single lines, open ends, clamping past the end and every rejected form.
"""

import unittest
from pathlib import Path

import pytest

from quill.buffer import InvalidRangeError, TextBuffer, check_lines, parse_range


class TestTextBuffer(unittest.TestCase):
    """Test buffer mutations and derived values"""

    def test_new_buffer_is_clean_and_unnamed(self):
        buf = TextBuffer()
        self.assertEqual(buf.lines, [])
        self.assertFalse(buf.dirty)
        self.assertEqual(buf.name, "(unnamed)")
        self.assertEqual(len(buf), 0)

    def test_name_is_path(self):
        buf = TextBuffer(path=Path("notes/todo.md"))
        self.assertEqual(buf.name, str(Path("notes/todo.md")))

    def test_char_count_includes_newlines(self):
        buf = TextBuffer(lines=["ab", "", "cde"])
        self.assertEqual(buf.char_count, 8)

    def test_rejects_line_terminators(self):
        with self.assertRaises(ValueError):
            TextBuffer(lines=["one\ntwo"])
        with self.assertRaises(ValueError):
            check_lines(["carriage\r"])

    def test_insert_lines_clamps_index(self):
        buf = TextBuffer(lines=["a", "b"])
        buf.insert_lines(99, ["z"])
        buf.insert_lines(-3, ["first"])
        self.assertEqual(buf.lines, ["first", "a", "b", "z"])
        self.assertTrue(buf.dirty)

    def test_delete_range_returns_removed(self):
        buf = TextBuffer(lines=["a", "b", "c", "d"])
        removed = buf.delete_range(2, 3)
        self.assertEqual(removed, ["b", "c"])
        self.assertEqual(buf.lines, ["a", "d"])
        self.assertTrue(buf.dirty)

    def test_replace_range(self):
        buf = TextBuffer(lines=["a", "b", "c"])
        buf.replace_range(2, 3, ["x", "y", "z"])
        self.assertEqual(buf.lines, ["a", "x", "y", "z"])

    def test_set_lines_copies(self):
        source = ("a", "b")
        buf = TextBuffer()
        buf.set_lines(source)
        self.assertEqual(buf.lines, ["a", "b"])
        self.assertIsInstance(buf.lines, list)
        self.assertTrue(buf.dirty)


class TestParseRange:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("", (1, 10)),
            ("3", (3, 3)),
            ("5", (5, 5)),
            ("3-", (3, 10)),
            ("2-5", (2, 5)),
            ("-4", (1, 4)),
            ("7-", (7, 10)),
            ("5-20", (5, 10)),
            (" 2 - 3 ", (2, 3)),
            ("10", (10, 10)),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_range(text, 10) == expected

    @pytest.mark.parametrize("text", ["0", "0-3", "3-0", "5-2", "x", "1-y", "+3", "١", "12"])
    def test_invalid(self, text):
        with pytest.raises(InvalidRangeError):
            parse_range(text, 10)

    def test_invalid_range_is_value_error(self):
        assert issubclass(InvalidRangeError, ValueError)

    def test_empty_on_empty_buffer(self):
        assert parse_range("", 0) == (1, 0)
