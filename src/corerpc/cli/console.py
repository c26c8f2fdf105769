"""Console styling helpers for the corerpc CLI."""

from __future__ import annotations

from collections.abc import Iterable

from rich import box
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

CORERPC_THEME = Theme(
    {
        "corerpc.title": "bold #F7931A",
        "corerpc.key": "#94A3B8",
        "corerpc.value": "#E6FFFA",
        "corerpc.hash": "#38BDF8",
        "corerpc.success": "bold #14F195",
        "corerpc.warning": "bold #FBBF24",
        "corerpc.error": "bold #FB7185",
    }
)


def themed_console(**kwargs: object) -> Console:
    """Return a Console configured with the corerpc theme."""
    return Console(theme=CORERPC_THEME, **kwargs)


def key_value_table(title: str, rows: Iterable[tuple[str, object]]) -> Table:
    table = Table(title=title, title_style="corerpc.title", box=box.SIMPLE, show_header=False)
    table.add_column("field", style="corerpc.key", no_wrap=True)
    table.add_column("value", style="corerpc.value", overflow="fold")
    for key, value in rows:
        table.add_row(key, "-" if value is None else str(value))
    return table


__all__ = ["CORERPC_THEME", "key_value_table", "themed_console"]
