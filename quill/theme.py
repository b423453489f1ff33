"""
Themes and palettes.

A theme is an enumerated value carried by the editor's settings; the palette
maps each role (ok, warn, err, prompt, input, ...) to a Rich style string.
Console messages use the styles directly; the raw-mode line editor needs plain
ANSI bytes, which `ansi_color()` and `prompt_text()` derive from the same styles.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rich.color import Color, ColorParseError, ColorSystem
from rich.style import Style


class Theme(Enum):
    DEFAULT = "default"
    DARK = "dark"
    NEON = "neon"
    MATRIX = "matrix"
    PAPER = "paper"

    @classmethod
    def from_name(cls, name: str) -> Theme:
        """Look up a theme by name; unknown names select the default theme."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            return cls.DEFAULT


@dataclass(frozen=True)
class Palette:
    accent: str
    ok: str
    warn: str
    err: str
    dim: str
    prompt: str
    input: str
    gutter: str
    title: str
    help_cmd: str
    help_arg: str
    help_text: str


PALETTES: dict[Theme, Palette] = {
    Theme.DEFAULT: Palette(
        accent="cyan",
        ok="green",
        warn="yellow",
        err="red",
        dim="dim",
        prompt="cyan",
        input="bright_white",
        gutter="bright_black",
        title="bold cyan",
        help_cmd="cyan",
        help_arg="dim",
        help_text="dim",
    ),
    Theme.DARK: Palette(
        accent="cyan",
        ok="green",
        warn="yellow",
        err="red",
        dim="bright_black",
        prompt="bright_cyan",
        input="bright_black",
        gutter="bright_black",
        title="bold cyan",
        help_cmd="bright_cyan",
        help_arg="bright_black",
        help_text="bright_black",
    ),
    Theme.NEON: Palette(
        accent="bright_magenta",
        ok="bright_green",
        warn="bright_yellow",
        err="bright_red",
        dim="bright_black",
        prompt="bright_magenta",
        input="bright_cyan",
        gutter="bright_black",
        title="bold bright_magenta",
        help_cmd="bright_magenta",
        help_arg="bright_black",
        help_text="bright_black",
    ),
    Theme.MATRIX: Palette(
        accent="green",
        ok="bright_green",
        warn="yellow",
        err="red",
        dim="bright_black",
        prompt="bright_green",
        input="bright_green",
        gutter="bright_black",
        title="bold green",
        help_cmd="bright_green",
        help_arg="bright_black",
        help_text="bright_black",
    ),
    Theme.PAPER: Palette(
        accent="bright_black",
        ok="green",
        warn="yellow",
        err="red",
        dim="bright_black",
        prompt="bright_black",
        input="bright_black",
        gutter="bright_black",
        title="bold bright_black",
        help_cmd="bright_black",
        help_arg="bright_black",
        help_text="bright_black",
    ),
}


def palette_for(theme: Theme) -> Palette:
    return PALETTES[theme]


def ansi_color(name: str) -> str:
    """Return the SGR escape that switches the foreground to `name`, or ''."""
    try:
        codes = Color.parse(name).get_ansi_codes(foreground=True)
    except ColorParseError:
        return ""
    return f"\x1b[{';'.join(codes)}m"


def prompt_text(dirty: bool, palette: Palette, color: bool = True) -> str:
    """Build the command prompt, `*quill> ` when the buffer has unsaved edits.

    With colour each character cycles through the title, accent, help and
    input styles. The trailing space is left unstyled.
    """
    base = "*quill>" if dirty else "quill>"
    if not color:
        return f"{base} "
    styles = [palette.title, palette.accent, palette.help_cmd, palette.input]
    rendered = [
        Style.parse(styles[i % len(styles)]).render(ch, color_system=ColorSystem.STANDARD)
        for i, ch in enumerate(base)
    ]
    return "".join(rendered) + " "
