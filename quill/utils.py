"""
Utility functions for quill.

Shared helpers with no editor state: version lookup, the startup header,
language detection from a file extension and `~` expansion for paths typed at
the prompt.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from rich import box
from rich.markup import escape
from rich.panel import Panel

from .console import console

APP_NAME = "quill"

LANGUAGES = {
    ".rs": "rust",
    ".c": "cpp",
    ".cc": "cpp",
    ".cpp": "cpp",
    ".cxx": "cpp",
    ".h": "cpp",
    ".hpp": "cpp",
    ".py": "python",
    ".sh": "shell",
    ".bash": "shell",
    ".zsh": "shell",
    ".js": "js",
    ".ts": "js",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".json": "json",
    ".md": "markdown",
    ".toml": "toml",
}


def get_version() -> str:
    """Get the installed package version from Python package metadata.

    Returns "dev" when running from a source checkout that was never installed.
    """
    try:
        return version(APP_NAME)
    except PackageNotFoundError:
        return "dev"


def version_string() -> str:
    return f"{APP_NAME} v{get_version()}"


def detect_language(path: Path | None) -> str:
    """Guess the language of a buffer from its file extension."""
    if path is None:
        return "plain"
    return LANGUAGES.get(path.suffix.lower(), "plain")


def expand_home(token: str) -> str:
    """Expand a leading `~` or `~/` to the user's home directory.

    Only those two forms are expanded; `~user` is left alone.
    """
    if token == "~":
        return str(Path.home())
    if token.startswith("~/"):
        return str(Path.home() / token[2:])
    return token


def print_header(name: str, line_count: int, accent: str = "cyan"):
    """Print the startup banner with the buffer being edited."""
    header_text = (
        f"[bold {accent}]{APP_NAME}[/bold {accent}] [dim]{get_version()}[/dim]\n"
        f"[dim]editing {escape(name)} ({line_count} lines)[/dim]\n"
        f"[dim]type[/dim] [green]help[/green] [dim]for commands,[/dim] "
        f"[green]Tab[/green] [dim]to complete[/dim]"
    )
    console.print(Panel(header_text, box=box.ROUNDED, expand=False))
