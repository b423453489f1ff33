"""
quill: the interactive loop.

Editor owns everything one editing session needs: the current buffer and its
undo history, the other open buffers, aliases, the theme and the line editor
that reads commands. Each loop iteration prints a status line, reads one
command and dispatches it to a cmd_* handler from handlers.py.

The loop survives everything except end of input, `quit`, and a terminal
whose mode could not be restored. That last case is fatal: a recovery
snapshot of the buffer is written first, then the error propagates and
`main()` exits with status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.text import Text

from .commands import get_command_names, get_handler_names
from .completion import CompletionProvider
from .config import Settings, load_settings
from .console import configure_logging, console
from .handlers import CommandHandlersMixin
from .line_editor import LineEditor
from .persistence import Autosaver
from .terminal import TerminalRestoreError
from .theme import ansi_color, palette_for, prompt_text
from .undo import EditHistory
from .utils import detect_language, print_header, version_string

logger = logging.getLogger(__name__)


class Editor(CommandHandlersMixin):
    """A command-driven editing session."""

    def __init__(
        self,
        settings: Settings | None = None,
        reader: LineEditor | None = None,
        autosaver: Autosaver | None = None,
    ) -> None:
        self.settings = settings if settings is not None else load_settings()
        self.theme = self.settings.theme
        self.palette = palette_for(self.theme)

        self.edits = EditHistory(self.new_buffer())
        self.others: list[EditHistory] = []
        self.aliases: dict[str, str] = {}
        self.last_search = ""
        self.last_icase = False

        self.autosaver = (
            autosaver if autosaver is not None else Autosaver(self.settings.autosave_interval)
        )
        self.reader = (
            reader
            if reader is not None
            else LineEditor(completer=CompletionProvider(get_command_names()))
        )
        self.reader.set_input_color(ansi_color(self.palette.input))
        self.running = True

        # "w" and "write" both resolve to cmd_write, and so on
        self.handlers = {
            trigger: getattr(self, f"cmd_{name}") for trigger, name in get_handler_names().items()
        }

    def _log_system(self, text: str, style: str = "dim") -> None:
        console.print(Text(text, style=style), soft_wrap=True)

    def prompt(self) -> str:
        return prompt_text(self.buf.dirty, self.palette, color=self.reader.interactive)

    def status_line(self) -> str:
        buf = self.buf
        return (
            f"[{buf.name}] lines={len(buf)} chars={buf.char_count} "
            f"lang={detect_language(buf.path)} theme={self.theme.value}"
        )

    def print_status(self) -> None:
        self._log_system(self.status_line(), style=self.palette.dim)

    def dispatch(self, line: str) -> bool:
        """Run one command line. Returns False once the editor should stop."""
        self.autosaver.maybe_save(self.buf)

        line = line.strip()
        if line.startswith(":"):
            line = line[1:].strip()
        if not line:
            return self.running

        first, _, rest = line.partition(" ")
        expansion = self.aliases.get(first.lower())
        if expansion is not None:
            line = f"{expansion} {rest}".strip()

        parts = line.split(None, 1)
        name = parts[0].lower()
        rest = parts[1].strip() if len(parts) > 1 else ""

        handler = self.handlers.get(name)
        if handler is None:
            self._log_system("unknown command, type 'help'", style=self.palette.warn)
        else:
            handler(rest)
        return self.running

    def run(self) -> None:
        while self.running:
            try:
                self.print_status()
                line = self.reader.read_line(self.prompt())
                if self.reader.at_eof:
                    self._finish_at_eof()
                    break
                self.dispatch(line)
            except TerminalRestoreError:
                self.autosaver.save_now(self.buf)
                raise
            except KeyboardInterrupt:
                self._log_system("\nInterrupted. Type 'quit' to exit.", style=self.palette.warn)
                continue
            except Exception as e:
                logger.debug("command failed", exc_info=True)
                self._log_system(f"Error: {e}", style=self.palette.err)
                continue

    def _finish_at_eof(self) -> None:
        """End of input with unsaved edits leaves a recovery snapshot behind."""
        if not self.buf.dirty:
            return
        snapshot = self.autosaver.save_now(self.buf)
        if snapshot is not None:
            self._log_system(
                f"unsaved changes kept in {snapshot}", style=self.palette.warn
            )
        else:
            self._log_system("unsaved changes discarded", style=self.palette.warn)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quill", description="Command-driven terminal text editor."
    )
    parser.add_argument("path", nargs="?", help="file to open")
    parser.add_argument("-V", "--version", action="version", version=version_string())
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    settings = load_settings()
    configure_logging(settings.log_level)

    editor = Editor(settings)
    if args.path:
        editor.open_path(args.path)

    print_header(editor.buf.name, len(editor.buf), accent=editor.palette.accent)

    try:
        editor.run()
    except TerminalRestoreError as e:
        console.print(Text(f"fatal: {e}", style=editor.palette.err))
        sys.exit(1)


if __name__ == "__main__":
    main()
