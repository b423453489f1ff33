"""
Code snippets for the `snip` command.

Each snippet is a function that takes the optional name typed after the
snippet kind and returns the lines to insert. `class` needs a name; the
others ignore it.
"""

from collections.abc import Callable


class SnippetError(ValueError):
    """Unknown snippet kind, or a snippet used without its required name."""


def _main(_name: str) -> list[str]:
    return [
        "def main():",
        '    print("hello from quill")',
        "",
        "",
        'if __name__ == "__main__":',
        "    main()",
    ]


def _module(_name: str) -> list[str]:
    return [
        '"""Module summary."""',
        "",
        "import logging",
        "",
        "logger = logging.getLogger(__name__)",
    ]


def _class(name: str) -> list[str]:
    if not name.isidentifier():
        raise SnippetError("class snippet needs a name, e.g. 'snip class Foo'")
    return [
        f"class {name}:",
        "    def __init__(self, id: int) -> None:",
        "        self.id = id",
        "",
        "    def __repr__(self) -> str:",
        f'        return f"{name}(id={{self.id}})"',
    ]


SNIPPETS: dict[str, Callable[[str], list[str]]] = {
    "main": _main,
    "module": _module,
    "class": _class,
}


def get_snippet(kind: str, name: str = "") -> list[str]:
    """Lines for snippet `kind`. Raises SnippetError for unknown kinds."""
    builder = SNIPPETS.get(kind.lower())
    if builder is None:
        raise SnippetError(f"unknown snippet (try: {', '.join(SNIPPETS)})")
    return builder(name.strip())
