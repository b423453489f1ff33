"""
Command handlers for the quill prompt.

Provides CommandHandlersMixin with all cmd_* methods for interactive commands,
mixed into Editor. Each handler receives the text after the command word,
already stripped; "delete 3-5" arrives as cmd_delete("3-5").
"""

from __future__ import annotations

import logging
import os
import shlex
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from rich.text import Text

from .buffer import InvalidRangeError, TextBuffer, parse_range
from .commands import get_help_text
from .config import (
    CONFIG_FILE,
    DEFAULT_CONFIG,
    TRUTHY,
    Settings,
    get_setting,
    load_config,
    save_config,
)
from .console import configure_logging, console
from .persistence import (
    Autosaver,
    find_recovery,
    load_buffer,
    load_lines,
    save_buffer,
)
from .snippets import SNIPPETS, SnippetError, get_snippet
from .theme import Palette, Theme, ansi_color, palette_for
from .tools import ToolError, format_lines, run_lines, run_tool
from .undo import EditHistory
from .utils import detect_language, expand_home, version_string

if TYPE_CHECKING:
    from .line_editor import LineEditor

logger = logging.getLogger(__name__)


def _line_number(text: str) -> int | None:
    """Parse a plain ASCII line number, or None."""
    if text.isascii() and text.isdigit():
        return int(text)
    return None


class CommandHandlersMixin:
    """Mixin providing all cmd_* command handler methods."""

    # Type stubs for attributes provided by Editor
    settings: Settings
    theme: Theme
    palette: Palette
    edits: EditHistory
    others: list[EditHistory]
    aliases: dict[str, str]
    last_search: str
    last_icase: bool
    autosaver: Autosaver
    reader: LineEditor
    running: bool

    # Method stubs for Editor methods, only present during type checking so
    # they don't shadow real methods inherited via MRO at runtime.
    if TYPE_CHECKING:

        def _log_system(self, text: str, style: str = "dim") -> None: ...

    @property
    def buf(self) -> TextBuffer:
        return self.edits.buffer

    # -------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------

    def new_buffer(self, path: Path | None = None) -> TextBuffer:
        return TextBuffer(
            path=path, number=self.settings.line_numbers, backup=self.settings.backup
        )

    def open_path(self, text: str) -> bool:
        """Load `text` into a fresh buffer with its own undo history.

        A missing file gives an empty buffer bound to that path. Any other
        read error is reported and the current buffer is kept.
        """
        path = Path(expand_home(text))
        try:
            buffer, existed = load_buffer(
                path, number=self.settings.line_numbers, backup=self.settings.backup
            )
        except (OSError, ValueError) as e:
            self._log_system(f"open: {e}", style=self.palette.err)
            return False

        self.edits = EditHistory(buffer)
        if existed:
            self._log_system(f"opened {path} ({len(buffer)} lines)", style=self.palette.ok)
        else:
            self._log_system(f"(new) {path}", style=self.palette.warn)
        if find_recovery(path, self.autosaver.directory) is not None:
            self._log_system(
                "a recovery snapshot exists for this file, type 'recover' to load it",
                style=self.palette.warn,
            )
        return True

    def save_to(self, text: str | None) -> bool:
        target = Path(expand_home(text)) if text else None
        if target is None and self.buf.path is None:
            self._log_system("save: no filename", style=self.palette.warn)
            return False
        try:
            saved = save_buffer(self.buf, target, recovery_dir=self.autosaver.directory)
        except (OSError, ValueError) as e:
            self._log_system(f"save: {e}", style=self.palette.err)
            return False
        self._log_system(f"saved to {saved}", style=self.palette.ok)
        return True

    def set_theme(self, name: str) -> None:
        self.theme = Theme.from_name(name)
        self.settings.theme = self.theme
        self.palette = palette_for(self.theme)
        self.reader.set_input_color(ansi_color(self.palette.input))

    def print_line(self, index: int) -> None:
        """Print 1-based line `index` with the gutter and truncation settings."""
        line = self.buf.lines[index - 1]
        text = Text()
        gutter_width = 0
        if self.buf.number:
            width = len(str(len(self.buf)))
            gutter_width = width + 3
            text.append(f"{index:>{width}} | ", style=self.palette.gutter)
        if self.settings.truncate_long:
            room = max(console.width - gutter_width, 1)
            if len(line) > room:
                line = line[: room - 1] + "…"
        text.append(line)
        console.print(text, soft_wrap=True)

    def scratch_suffix(self) -> str:
        """File suffix for scratch copies of the buffer, so tools see the language."""
        path = self.buf.path
        return path.suffix if path is not None and path.suffix else ".py"

    def print_range(self, lo: int, hi: int) -> None:
        for index in range(lo, hi + 1):
            self.print_line(index)

    def read_block(self) -> list[str]:
        """Read text lines from the prompt until a line holding only '.'."""
        self._log_system("enter text; '.' on a line ends", style=self.palette.dim)
        lines = []
        while True:
            line = self.reader.read_line("> ", record=False)
            if self.reader.at_eof or line == ".":
                break
            lines.append(line)
        return lines

    def search(self, query: str, icase: bool) -> int:
        self.last_search = query
        self.last_icase = icase
        needle = query.lower() if icase else query
        hits = 0
        for number, line in enumerate(self.buf.lines, start=1):
            haystack = line.lower() if icase else line
            if needle in haystack:
                console.print(Text(f"match at {number}: {line}"), soft_wrap=True)
                hits += 1
        if hits == 0:
            self._log_system("no matches", style=self.palette.dim)
        return hits

    # -------------------------------------------------------------------
    # Command Handlers
    # -------------------------------------------------------------------

    def cmd_help(self, _rest: str):
        console.print(get_help_text(self.palette))

    def cmd_version(self, _rest: str):
        self._log_system(version_string(), style=self.palette.title)

    def cmd_open(self, rest: str):
        if not rest:
            self._log_system("usage: open <path>", style=self.palette.warn)
        elif self.buf.dirty:
            self._log_system("unsaved changes, save first", style=self.palette.warn)
        else:
            self.open_path(rest)

    def cmd_info(self, _rest: str):
        buf = self.buf
        self._log_system(f"file: {buf.name}{' *' if buf.dirty else ''}", style="")
        self._log_system(f"  lines: {len(buf)}", style="")
        self._log_system(f"  chars: {buf.char_count}", style="")
        self._log_system(f"  lang: {detect_language(buf.path)}", style="")

    def cmd_write(self, rest: str):
        self.save_to(rest or None)

    def cmd_wq(self, _rest: str):
        """Handle wq: save, and quit only if the save went through."""
        if self.save_to(None):
            self._log_system("bye!", style=self.palette.dim)
            self.running = False

    def cmd_quit(self, _rest: str):
        if self.buf.dirty:
            answer = self.reader.read_line("Unsaved changes. Quit anyway? [y/N] ", record=False)
            if answer.strip().lower() != "y":
                return
        self._log_system("bye!", style=self.palette.dim)
        self.running = False

    def cmd_print(self, rest: str):
        if not self.buf.lines:
            self._log_system("(empty)", style=self.palette.dim)
            return
        try:
            lo, hi = parse_range(rest, len(self.buf))
        except InvalidRangeError:
            self._log_system("bad range", style=self.palette.warn)
            return
        self.print_range(lo, hi)

    def cmd_r(self, rest: str, name: str = "r"):
        number = _line_number(rest)
        if number is None:
            self._log_system(f"usage: {name} <n>", style=self.palette.warn)
        elif not 1 <= number <= len(self.buf):
            self._log_system(f"no line {number} ({len(self.buf)} lines)", style=self.palette.warn)
        else:
            self.print_line(number)

    def cmd_goto(self, rest: str):
        self.cmd_r(rest, name="goto")

    def cmd_append(self, _rest: str):
        """Handle append: read lines until '.', add them as one undo step."""
        lines = self.read_block()
        if not lines:
            self._log_system("nothing added", style=self.palette.dim)
            return
        self.edits.append_lines(lines)
        self._log_system(f"appended {len(lines)} line(s)", style=self.palette.ok)

    def cmd_insert(self, rest: str):
        """Handle insert <n>: read lines until '.', insert them before line n.

        n is clamped, so 0 or 1 inserts at the top and anything past the end
        appends.
        """
        number = _line_number(rest)
        if number is None:
            self._log_system("usage: insert <n>", style=self.palette.warn)
            return
        lines = self.read_block()
        if not lines:
            self._log_system("nothing added", style=self.palette.dim)
            return
        self.edits.insert_lines(number - 1, lines)
        self._log_system(f"inserted {len(lines)} line(s)", style=self.palette.ok)

    def cmd_delete(self, rest: str):
        if not self.buf.lines:
            self._log_system("(empty)", style=self.palette.dim)
            return
        if not rest:
            self._log_system("usage: delete <range>", style=self.palette.warn)
            return
        try:
            lo, hi = parse_range(rest, len(self.buf))
        except InvalidRangeError:
            self._log_system("bad range", style=self.palette.warn)
            return
        removed = self.edits.delete_range(lo, hi)
        self._log_system(f"deleted {len(removed)} line(s)", style=self.palette.ok)

    def cmd_find(self, rest: str, icase: bool = False):
        """Handle find/findi. With no text, repeat the previous search."""
        if rest:
            self.search(rest, icase)
        elif self.last_search:
            self.search(self.last_search, self.last_icase)
        else:
            name = "findi" if icase else "find"
            self._log_system(f"usage: {name} <text>", style=self.palette.warn)

    def cmd_findi(self, rest: str):
        self.cmd_find(rest, icase=True)

    def cmd_number(self, _rest: str):
        self.buf.number = not self.buf.number
        self._log_system(f"number: {'on' if self.buf.number else 'off'}", style="")

    def cmd_theme(self, rest: str):
        if not rest:
            self._log_system("usage: theme <name>", style=self.palette.warn)
            return
        self.set_theme(rest)
        if self.theme.value != rest.strip().lower():
            self._log_system(f"unknown theme {rest!r}, using default", style=self.palette.warn)
        self._log_system(f"theme set: {self.theme.value}", style=self.palette.ok)

    def cmd_alias(self, rest: str):
        parts = rest.split(None, 1)
        if len(parts) < 2:
            self._log_system("usage: alias <from> <to...>", style=self.palette.warn)
            return
        source, expansion = parts
        self.aliases[source.lower()] = expansion
        self._log_system(f"alias: {source} -> {expansion}", style="")

    def cmd_new(self, _rest: str):
        self.others.append(self.edits)
        self.edits = EditHistory(self.new_buffer())
        self._log_system("(new buffer)", style=self.palette.ok)

    def cmd_bnext(self, _rest: str):
        """Handle bnext: the current buffer goes to the back of the ring."""
        if not self.others:
            self._log_system("(only one buffer)", style=self.palette.dim)
            return
        self.others.append(self.edits)
        self.edits = self.others.pop(0)
        self._log_system(f"[bnext] {self.buf.name}", style="")

    def cmd_bprev(self, _rest: str):
        """Handle bprev: undo one bnext."""
        if not self.others:
            self._log_system("(only one buffer)", style=self.palette.dim)
            return
        self.others.insert(0, self.edits)
        self.edits = self.others.pop()
        self._log_system(f"[bprev] {self.buf.name}", style="")

    def cmd_lsb(self, _rest: str):
        buffers = [self.edits, *self.others]
        for index, edits in enumerate(buffers):
            dirty = " +" if edits.buffer.dirty else ""
            if index == 0:
                self._log_system(f"* 0 {edits.buffer.name}{dirty}", style="bold")
            else:
                self._log_system(f"  {index} {edits.buffer.name}{dirty}", style="")

    def cmd_pwd(self, _rest: str):
        try:
            self._log_system(os.getcwd(), style="")
        except OSError as e:
            self._log_system(f"pwd: {e}", style=self.palette.err)

    def cmd_cd(self, rest: str):
        if not rest:
            self._log_system("cd: missing path", style=self.palette.warn)
            return
        target = expand_home(rest)
        try:
            os.chdir(target)
        except OSError as e:
            self._log_system(f"cd: {e}", style=self.palette.err)
            return
        self._log_system(f"cd: {os.getcwd()}", style=self.palette.ok)

    def cmd_ls(self, rest: str):
        """Handle ls [-a] [-l] [path]: hidden entries need -a, -l adds mode and size."""
        show_all = False
        long_format = False
        target = "."
        for token in rest.split():
            if token in ("-a", "-l", "-al", "-la"):
                show_all = show_all or "a" in token
                long_format = long_format or "l" in token
            else:
                target = token

        path = Path(expand_home(target))
        try:
            st = path.stat()
        except OSError as e:
            self._log_system(f"ls: {e}", style=self.palette.err)
            return

        if not stat.S_ISDIR(st.st_mode):
            self._print_ls_entry(path.name, st, long_format)
            return

        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            self._log_system(f"ls: {e}", style=self.palette.err)
            return
        for entry in entries:
            if not show_all and entry.name.startswith("."):
                continue
            try:
                entry_stat = entry.stat()
            except OSError:
                entry_stat = None
            self._print_ls_entry(entry.name, entry_stat, long_format)

    def _print_ls_entry(self, name: str, st: os.stat_result | None, long_format: bool) -> None:
        shown = f"{name}/" if st is not None and stat.S_ISDIR(st.st_mode) else name
        if not long_format:
            self._log_system(shown, style="")
        elif st is None:
            self._log_system(f"{'??????????':10} {'?':>8}  {shown}", style="")
        else:
            self._log_system(f"{stat.filemode(st.st_mode):10} {st.st_size:8}  {shown}", style="")

    def cmd_undo(self, _rest: str):
        if self.edits.undo():
            self._log_system("undo", style="")
        else:
            self._log_system("nothing to undo", style=self.palette.dim)

    def cmd_redo(self, _rest: str):
        if self.edits.redo():
            self._log_system("redo", style="")
        else:
            self._log_system("nothing to redo", style=self.palette.dim)

    def cmd_clear(self, _rest: str):
        console.clear()

    def cmd_fmt(self, rest: str):
        """Handle fmt [range]: pipe the buffer, or a range of it, through the formatter.

        The formatted text replaces the original as one undo step. Nothing
        changes when the formatter fails or leaves the text as it was.
        """
        if not self.buf.lines:
            self._log_system("(empty)", style=self.palette.dim)
            return
        try:
            lo, hi = parse_range(rest, len(self.buf))
        except InvalidRangeError:
            self._log_system("fmt: bad range", style=self.palette.warn)
            return

        command = self.settings.formatter
        suffix = self.scratch_suffix()
        selected = self.buf.lines[lo - 1 : hi]
        try:
            formatted = format_lines(selected, command, suffix=suffix)
        except (ToolError, OSError, ValueError) as e:
            self._log_system(f"fmt: {e}", style=self.palette.err)
            return

        if formatted == selected:
            self._log_system("fmt: already formatted", style=self.palette.dim)
            return
        if rest:
            self.edits.replace_range(lo, hi, formatted)
        else:
            self.edits.replace_all(formatted)
        self._log_system(f"{command[0]} applied", style=self.palette.ok)

    def cmd_run(self, rest: str):
        if not rest:
            self._log_system("usage: run <cmd...>", style=self.palette.warn)
            return
        try:
            args = shlex.split(rest)
        except ValueError as e:
            self._log_system(f"run: {e}", style=self.palette.warn)
            return
        self._log_system(f"[run {shlex.join(args)}]", style=self.palette.dim)
        try:
            result = run_tool(args)
        except ToolError as e:
            self._log_system(f"run: {e}", style=self.palette.err)
            return
        style = self.palette.dim if result.ok else self.palette.warn
        self._log_system(f"{args[0]} exited with status {result.returncode}", style=style)

    def cmd_runbuf(self, _rest: str):
        """Handle runbuf: run the buffer's text with the configured runner.

        The text goes to a scratch file, so unsaved edits run too and the file
        on disk is not touched.
        """
        if not self.buf.lines:
            self._log_system("(empty)", style=self.palette.dim)
            return
        command = self.settings.runner
        suffix = self.scratch_suffix()
        self._log_system(f"[runbuf {shlex.join(command)}]", style=self.palette.dim)
        try:
            result = run_lines(self.buf.lines, command, suffix=suffix)
        except (ToolError, OSError, ValueError) as e:
            self._log_system(f"runbuf: {e}", style=self.palette.err)
            return
        style = self.palette.dim if result.ok else self.palette.warn
        self._log_system(f"{command[0]} exited with status {result.returncode}", style=style)

    def cmd_snip(self, rest: str):
        """Handle snip <kind> [name]: append a code snippet as one undo step."""
        kind, _, name = rest.partition(" ")
        if not kind:
            self._log_system(f"usage: snip <{'|'.join(SNIPPETS)}> [name]", style=self.palette.warn)
            return
        try:
            lines = get_snippet(kind, name)
        except SnippetError as e:
            self._log_system(f"snip: {e}", style=self.palette.warn)
            return
        self.edits.append_lines(lines)
        self._log_system("snippet inserted", style=self.palette.ok)

    def cmd_recover(self, _rest: str):
        """Handle recover: replace the buffer with its autosave snapshot.

        The replacement is a normal edit, so undo brings the old text back.
        """
        if self.buf.path is None:
            self._log_system("recover: buffer has no filename", style=self.palette.warn)
            return
        snapshot = find_recovery(self.buf.path, self.autosaver.directory)
        if snapshot is None:
            self._log_system(f"no recovery snapshot for {self.buf.name}", style=self.palette.dim)
            return
        try:
            lines = load_lines(snapshot)
        except (OSError, ValueError) as e:
            self._log_system(f"recover: {e}", style=self.palette.err)
            return
        self.edits.replace_all(lines)
        self._log_system(
            f"recovered {len(lines)} line(s) from {snapshot}, 'undo' reverts",
            style=self.palette.ok,
        )

    def cmd_config(self, rest: str):
        """Handle config list|get KEY|set KEY VALUE.

        Values resolve env var > config file > default, the same order used at
        startup. `set` writes the config file and applies the value to the
        running editor.
        """
        parts = rest.split(None, 2)
        if not parts or parts[0] == "list":
            console.print("[bold]Configuration:[/bold]")
            for key, default in DEFAULT_CONFIG.items():
                value = get_setting(key, default)
                console.print(Text.assemble(f"  {key + ':':<20}", (value, self.palette.accent)))
            console.print(Text.assemble(f"  {'Config File:':<20}", (str(CONFIG_FILE), "dim")))
        elif parts[0] == "get" and len(parts) >= 2:
            key = parts[1].upper()
            if key in DEFAULT_CONFIG:
                self._log_system(f"{key} = {get_setting(key, DEFAULT_CONFIG[key])}", style="")
            else:
                self._log_system(f"Unknown setting: {key}", style=self.palette.warn)
                self._log_system(f"Available keys: {', '.join(DEFAULT_CONFIG)}", style="")
        elif parts[0] == "set" and len(parts) == 3:
            key = parts[1].upper()
            value = parts[2].strip()
            if key not in DEFAULT_CONFIG:
                self._log_system(f"Unknown setting: {key}", style=self.palette.warn)
                self._log_system(f"Available keys: {', '.join(DEFAULT_CONFIG)}", style="")
                return
            if not self._apply_setting(key, value):
                return
            config = load_config()
            config[key] = value
            if save_config(config):
                self._log_system(f"Updated {key} in {CONFIG_FILE}", style=self.palette.ok)
        else:
            console.print("[bold]Usage:[/bold]")
            console.print("  config list               - Show current configuration")
            console.print("  config set <KEY> <VALUE>  - Set a configuration value")
            console.print("  config get <KEY>          - Get a specific configuration value")

    def _apply_setting(self, key: str, value: str) -> bool:
        """Apply a new setting to the running editor; False if the value is invalid."""
        if key == "AUTOSAVE_INTERVAL":
            try:
                interval = int(value)
            except ValueError:
                self._log_system(f"Invalid integer value: {value}", style=self.palette.err)
                return False
            self.settings.autosave_interval = max(interval, 0)
            self.autosaver.interval = self.settings.autosave_interval
        elif key == "BACKUP":
            self.settings.backup = value.lower() in TRUTHY
            self.buf.backup = self.settings.backup
        elif key == "THEME":
            self.set_theme(value)
        elif key == "LINE_NUMBERS":
            self.settings.line_numbers = value.lower() in TRUTHY
            self.buf.number = self.settings.line_numbers
        elif key == "TRUNCATE_LONG":
            self.settings.truncate_long = value.lower() in TRUTHY
        elif key == "FORMATTER":
            try:
                self.settings.formatter = shlex.split(value)
            except ValueError as e:
                self._log_system(f"Invalid formatter command: {e}", style=self.palette.err)
                return False
        elif key == "RUNNER":
            try:
                self.settings.runner = shlex.split(value)
            except ValueError as e:
                self._log_system(f"Invalid runner command: {e}", style=self.palette.err)
                return False
        elif key == "LOG_LEVEL":
            self.settings.log_level = value.upper()
            configure_logging(self.settings.log_level)
        return True
