"""
Shared Rich Console singleton for terminal output.

Every user-facing message in quill goes through this one Console instance, so
Rich can track terminal width and colour support in a single place. Tests mock
`console` here and every module picks up the mock.

Diagnostics (raw-mode fallbacks, autosave writes, backup failures) are not
user output. They go through the standard `logging` module; call
`configure_logging()` once at startup to route them to stderr through Rich.

Usage:
    from .console import console
    console.print("[green]saved[/green]")
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# All terminal output in quill flows through this object.
console = Console(highlight=False)

# Log records go to stderr so they never interleave with the line editor's
# in-place redraws on stdout.
log_console = Console(stderr=True)


def configure_logging(level: str = "WARNING") -> None:
    """Install a RichHandler on the root `quill` logger."""
    logger = logging.getLogger("quill")
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.WARNING
    logger.setLevel(resolved)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=log_console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.propagate = False
