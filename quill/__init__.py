"""quill - command-driven terminal text editor"""

from .buffer import InvalidRangeError, TextBuffer, parse_range
from .commands import COMMANDS, get_command_names, get_help_text
from .completion import CompletionProvider
from .config import (
    CONFIG_FILE,
    DEFAULT_CONFIG,
    HISTORY_MAX,
    QUILL_DIR,
    RECOVERY_DIR,
    UNDO_MAX,
    Settings,
    ensure_quill_dir,
    get_bool_setting,
    get_int_setting,
    get_setting,
    load_config,
    load_settings,
    save_config,
)
from .console import configure_logging, console
from .history import History
from .line_editor import LineEditor
from .persistence import (
    Autosaver,
    atomic_save,
    fnv1a_64,
    load_lines,
    recovery_path,
    save_buffer,
)
from .terminal import RawTerminalSession, TerminalRestoreError, TerminalUnavailable
from .snippets import SNIPPETS, SnippetError, get_snippet
from .theme import Theme
from .tools import ToolError, ToolResult, run_lines, run_tool
from .undo import EditHistory, SnapshotStack

__all__ = [
    # Buffer
    "InvalidRangeError",
    "TextBuffer",
    "parse_range",
    # Commands
    "COMMANDS",
    "get_command_names",
    "get_help_text",
    # Completion
    "CompletionProvider",
    # Config
    "CONFIG_FILE",
    "DEFAULT_CONFIG",
    "HISTORY_MAX",
    "QUILL_DIR",
    "RECOVERY_DIR",
    "UNDO_MAX",
    "Settings",
    "ensure_quill_dir",
    "get_bool_setting",
    "get_int_setting",
    "get_setting",
    "load_config",
    "load_settings",
    "save_config",
    # Console
    "configure_logging",
    "console",
    # Line editing
    "History",
    "LineEditor",
    "RawTerminalSession",
    "TerminalRestoreError",
    "TerminalUnavailable",
    # Persistence
    "Autosaver",
    "atomic_save",
    "fnv1a_64",
    "load_lines",
    "recovery_path",
    "save_buffer",
    # Snippets
    "SNIPPETS",
    "SnippetError",
    "get_snippet",
    # Theme
    "Theme",
    # Tools
    "ToolError",
    "ToolResult",
    "run_lines",
    "run_tool",
    # Undo
    "EditHistory",
    "SnapshotStack",
]
