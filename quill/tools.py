"""
External commands: `run`, the buffer runner behind `runbuf` and the code
formatter behind `fmt`.

Commands run synchronously with no timeout. `run` and `runbuf` inherit the
terminal so interactive programs work; `fmt` captures output so a failure can
be shown.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .persistence import load_lines, write_lines_atomic

logger = logging.getLogger(__name__)


class ToolError(Exception):
    """An external command could not be started or did not succeed."""


@dataclass
class ToolResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_tool(args: Sequence[str], capture: bool = False) -> ToolResult:
    """Run `args` and wait for it to finish.

    With capture=False the child shares this process's stdin, stdout and
    stderr. A missing or unstartable executable raises ToolError; a non-zero
    exit status is returned, not raised.
    """
    if not args:
        raise ToolError("no command given")
    logger.debug("running %s", list(args))
    try:
        completed = subprocess.run(
            list(args),
            capture_output=capture,
            text=capture,
            check=False,
        )
    except OSError as e:
        raise ToolError(f"{args[0]}: {e.strerror or e}") from e
    return ToolResult(
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


def format_lines(lines: Sequence[str], command: Sequence[str], suffix: str = ".py") -> list[str]:
    """Run a formatter over `lines` in a scratch file and return the result.

    The formatter gets the scratch file's path as its last argument and is
    expected to rewrite it in place. Raises ToolError with the formatter's
    stderr when it exits non-zero.
    """
    if not command:
        raise ToolError("no formatter configured")
    with tempfile.TemporaryDirectory(prefix="quill-fmt-") as tmp:
        scratch = Path(tmp) / f"buffer{suffix}"
        write_lines_atomic(scratch, lines)
        result = run_tool([*command, str(scratch)], capture=True)
        if not result.ok:
            detail = result.stderr.strip() or f"exit status {result.returncode}"
            raise ToolError(f"{command[0]} failed: {detail}")
        return load_lines(scratch)


def run_lines(lines: Sequence[str], command: Sequence[str], suffix: str = ".py") -> ToolResult:
    """Write `lines` to a scratch file and run `command` on it.

    The scratch file's path is appended to the command. The child inherits
    the terminal, like `run`, and the scratch directory is removed once it
    exits.
    """
    if not command:
        raise ToolError("no runner configured")
    with tempfile.TemporaryDirectory(prefix="quill-run-") as tmp:
        scratch = Path(tmp) / f"buffer{suffix}"
        write_lines_atomic(scratch, lines)
        return run_tool([*command, str(scratch)])
