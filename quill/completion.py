"""
Tab completion for the command prompt.

The first word of a line completes against the registered command names;
later words complete against the filesystem. `cd` only offers directories.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from .utils import expand_home

logger = logging.getLogger(__name__)

DIRECTORY_COMMANDS = frozenset({"cd"})


def split_path_token(token: str) -> tuple[str, str]:
    """Split a path token into (directory, name prefix).

    A token without a slash lists the current directory, marked as ".".
    """
    idx = token.rfind("/")
    if idx == -1:
        return ".", token
    return token[:idx], token[idx + 1 :]


def replace_last_token(buf: str, candidate: str) -> str:
    """Replace the word being completed with `candidate`.

    Everything up to and including the last whitespace character is kept; a
    buffer with no whitespace is replaced entirely.
    """
    for idx in range(len(buf) - 1, -1, -1):
        if buf[idx].isspace():
            return buf[: idx + 1] + candidate
    return candidate


class CompletionProvider:
    """Computes completion candidates for the current input line."""

    def __init__(self, commands: Iterable[str] = ()) -> None:
        self.commands: list[str] = list(commands)

    def set_commands(self, commands: Iterable[str]) -> None:
        self.commands = list(commands)

    def complete(self, buf: str) -> list[str]:
        tokens = buf.split()
        fresh = bool(buf) and buf[-1].isspace()

        if not tokens:
            return list(self.commands)
        if len(tokens) == 1 and not fresh:
            prefix = tokens[0]
            return [c for c in self.commands if c.startswith(prefix)]

        last = "" if fresh else tokens[-1]
        dirs_only = tokens[0] in DIRECTORY_COMMANDS
        return self.complete_path(last, dirs_only=dirs_only)

    def complete_path(self, token: str, dirs_only: bool = False) -> list[str]:
        """List filesystem entries whose names start with the token's last segment."""
        directory, base = split_path_token(expand_home(token))
        listing_dir = directory or "/"
        try:
            with os.scandir(listing_dir) as it:
                entries = list(it)
        except OSError as e:
            logger.debug("completion: cannot list %s: %s", listing_dir, e)
            return []

        out = []
        for entry in entries:
            if not entry.name.startswith(base):
                continue
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False
            if dirs_only and not is_dir:
                continue
            path = entry.name if directory == "." else f"{directory}/{entry.name}"
            out.append(f"{path}/" if is_dir else path)
        out.sort()
        return out
