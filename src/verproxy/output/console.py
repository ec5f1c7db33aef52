"""Rich Console factory and theme for verproxy output.

Consoles render into a StringIO buffer so formatters return plain strings.
In non-TTY environments (tests, pipes) Rich drops color codes by itself.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

PROXY_THEME = Theme(
    {
        "proxy.ok": "bold green",
        "proxy.error": "bold red",
        "proxy.op": "bold cyan",
        "proxy.key": "dim",
        "proxy.path": "dim",
        "proxy.value": "bold",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=PROXY_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
