"""Rich Console factory and the ``gk.*`` theme.

Consoles render into a StringIO buffer so renderers keep the
``format_result() -> str`` contract; the CLI decides which stream the
text goes to. Rich drops color codes by itself when not on a TTY.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GK_THEME = Theme(
    {
        "gk.ok": "bold green",
        "gk.error": "bold red",
        "gk.warning": "bold yellow",
        "gk.op": "bold cyan",
        "gk.key": "dim",
        "gk.id": "bold blue",
        "gk.path": "dim",
        "gk.name": "bold",
        "gk.count": "magenta",
    }
)

PATH_KEYS = frozenset({"path", "source", "output", "directory", "previous"})


def field_style(key: str) -> str:
    """Theme style for the value of a ``key: value`` line."""
    if key == "id" or key.endswith("_id"):
        return "gk.id"
    if key in PATH_KEYS:
        return "gk.path"
    if key == "name":
        return "gk.name"
    if key == "count" or key.endswith("_count"):
        return "gk.count"
    return ""


def severity_style(severity: str) -> str:
    """Theme style for a check issue severity (``""`` if unknown)."""
    return {"error": "gk.error", "warning": "gk.warning"}.get(severity, "")


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Width defaults to 120 so tables lay out the same in tests and pipes.
    """
    return Console(
        file=StringIO(),
        theme=GK_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
