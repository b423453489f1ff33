"""Tests for the snippet table behind `snip` (quill/snippets.py)."""

import pytest

from quill.buffer import check_lines
from quill.snippets import SNIPPETS, SnippetError, get_snippet


class TestSnippets:
    def test_every_snippet_is_valid_buffer_text(self):
        for kind in SNIPPETS:
            lines = get_snippet(kind, "Thing")
            assert lines
            assert check_lines(lines) == lines

    def test_kind_is_case_insensitive(self):
        assert get_snippet("MAIN") == get_snippet("main")

    def test_class_name_is_substituted(self):
        lines = get_snippet("class", " Widget ")
        assert lines[0] == "class Widget:"
        assert lines[-1] == '        return f"Widget(id={self.id})"'

    @pytest.mark.parametrize("name", ["", "two words", "9lives"])
    def test_class_rejects_bad_names(self, name):
        with pytest.raises(SnippetError):
            get_snippet("class", name)

    def test_unknown_kind_lists_choices(self):
        with pytest.raises(SnippetError, match="main, module, class"):
            get_snippet("struct")

    def test_snippet_error_is_a_value_error(self):
        assert issubclass(SnippetError, ValueError)
