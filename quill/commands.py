"""
Command registry for quill.

This module is the single source of truth for the commands the prompt
understands. The help table and Tab completion both read from `COMMANDS`, so
adding a command here makes it show up in `help` and complete on Tab.

The handlers themselves (the code that runs when you type `write`, `undo`,
...) live in handlers.py as `cmd_*` methods. This module only defines the
metadata, which keeps it free of runtime dependencies.
"""

from typing import TypedDict

from rich.markup import escape

from .theme import Palette, Theme


class CommandInfo(TypedDict):
    """Type definition for command information."""

    triggers: list[str]  # Words that invoke the command, e.g. ["write", "w"]
    usage: str  # Argument synopsis shown after the triggers in help
    description: str  # Short one-line description for help display


# Centralized registry of all interactive commands. The first trigger is the
# handler name: "write" dispatches to cmd_write.
COMMANDS: list[CommandInfo] = [
    {"triggers": ["help", "h", "?"], "usage": "", "description": "show this help"},
    {"triggers": ["version", "ver"], "usage": "", "description": "show version"},
    {"triggers": ["open"], "usage": "<path>", "description": "open file"},
    {"triggers": ["info"], "usage": "", "description": "buffer info"},
    {"triggers": ["write", "w"], "usage": "[path]", "description": "save"},
    {"triggers": ["wq"], "usage": "", "description": "save & quit"},
    {"triggers": ["quit", "q"], "usage": "", "description": "quit"},
    {"triggers": ["print", "p"], "usage": "[range]", "description": "print lines"},
    {"triggers": ["r"], "usage": "<n>", "description": "print line"},
    {"triggers": ["goto"], "usage": "<n>", "description": "jump to line"},
    {"triggers": ["append", "a"], "usage": "", "description": "append lines"},
    {"triggers": ["insert", "i"], "usage": "<n>", "description": "insert before n"},
    {"triggers": ["delete", "d"], "usage": "<range>", "description": "delete lines"},
    {"triggers": ["find"], "usage": "<text>", "description": "search"},
    {"triggers": ["findi"], "usage": "<text>", "description": "search (ignore case)"},
    {"triggers": ["number"], "usage": "", "description": "toggle line numbers"},
    {"triggers": ["theme"], "usage": "<name>", "description": "set theme"},
    {"triggers": ["alias"], "usage": "<from> <to...>", "description": "make alias"},
    {"triggers": ["new"], "usage": "", "description": "new buffer"},
    {"triggers": ["bnext"], "usage": "", "description": "next buffer"},
    {"triggers": ["bprev"], "usage": "", "description": "previous buffer"},
    {"triggers": ["lsb"], "usage": "", "description": "list buffers"},
    {"triggers": ["pwd"], "usage": "", "description": "print working directory"},
    {"triggers": ["cd"], "usage": "<dir>", "description": "change directory"},
    {"triggers": ["ls"], "usage": "[-a] [-l] [path]", "description": "list directory"},
    {"triggers": ["undo", "u"], "usage": "", "description": "undo last edit"},
    {"triggers": ["redo"], "usage": "", "description": "redo last undo"},
    {"triggers": ["clear"], "usage": "", "description": "clear screen"},
    {"triggers": ["fmt"], "usage": "[range]", "description": "run the formatter"},
    {"triggers": ["run"], "usage": "<cmd...>", "description": "run an external command"},
    {"triggers": ["runbuf"], "usage": "", "description": "run the buffer with the runner"},
    {"triggers": ["snip"], "usage": "<kind> [name]", "description": "append a snippet"},
    {"triggers": ["recover"], "usage": "", "description": "load the autosave snapshot"},
    {
        "triggers": ["config"],
        "usage": "[list|get KEY|set KEY VALUE]",
        "description": "manage settings",
    },
]


def get_command_names() -> list[str]:
    """Every trigger word, in registry order, for Tab completion."""
    return [trigger for cmd in COMMANDS for trigger in cmd["triggers"]]


def get_handler_names() -> dict[str, str]:
    """Map every trigger to the name of the command that handles it."""
    return {trigger: cmd["triggers"][0] for cmd in COMMANDS for trigger in cmd["triggers"]}


def get_help_text(palette: Palette | None = None) -> str:
    """Generate Rich-markup help text for the help command.

    Synopses are escaped because `[range]` and friends would otherwise be
    read as markup tags.
    """
    cmd_style = palette.help_cmd if palette else "cyan"
    arg_style = palette.help_arg if palette else "dim"
    text_style = palette.help_text if palette else "dim"

    lines = ["[bold]Available Commands:[/bold]"]
    for cmd in COMMANDS:
        trigger_str = "|".join(cmd["triggers"])
        synopsis = f"{trigger_str} {cmd['usage']}".rstrip()
        # Descriptions start in column 32; longer synopses get one space
        padding = " " * max(30 - len(synopsis), 1)
        usage = f" [{arg_style}]{escape(cmd['usage'])}[/{arg_style}]" if cmd["usage"] else ""
        lines.append(
            f"  [{cmd_style}]{trigger_str}[/{cmd_style}]{usage}{padding}"
            f"[{text_style}]{cmd['description']}[/{text_style}]"
        )

    lines.append("")
    themes = ", ".join(t.value for t in Theme)
    lines.append(f"[{arg_style}]themes:[/{arg_style}] [{text_style}]{themes}[/{text_style}]")
    lines.append("")
    lines.append("[bold]Keyboard Shortcuts:[/bold]")
    lines.append(f"  [{cmd_style}]Up/Down[/{cmd_style}]       - Recall history")
    lines.append(f"  [{cmd_style}]Left/Right[/{cmd_style}]    - Move the cursor")
    lines.append(f"  [{cmd_style}]Tab[/{cmd_style}]           - Complete command or path")
    lines.append(f"  [{cmd_style}]Ctrl+C[/{cmd_style}]        - Cancel the current line")

    return "\n".join(lines)
