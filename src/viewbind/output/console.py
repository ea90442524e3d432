"""Rich console used by the result renderers.

Output goes to an in-memory buffer and comes back as a string, so the
renderers stay pure and the CLI decides where the text is written.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

VIEWBIND_THEME = Theme(
    {
        "vb.ok": "bold green",
        "vb.error": "bold red",
        "vb.warning": "bold yellow",
        "vb.op": "bold cyan",
        "vb.key": "dim",
        "vb.slot": "bold blue",
        "vb.fallback": "dim italic",
        "vb.empty": "yellow",
        "vb.markup": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=VIEWBIND_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
