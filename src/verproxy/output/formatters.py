"""Command results and their Rich/JSON renderings.

Every CLI command produces a CommandResult; the formatter turns it into a
Rich rendering for humans or JSON for machines (``--json``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from rich.table import Table
from rich.text import Text

from verproxy.output.console import create_console, get_output


class CommandResult(BaseModel):
    """Outcome of one CLI command.

    Attributes:
        ok: Whether the command succeeded.
        op: Command name (e.g. ``"binaries"``).
        data: Command-specific payload. A list under ``items`` renders as a table.
        error: Error message when ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


def _render_items(items: list[Any], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="proxy.key")
    columns = list(items[0].keys()) if isinstance(items[0], dict) else ["value"]
    for column in columns:
        table.add_column(column)
    for item in items:
        row = item if isinstance(item, dict) else {"value": item}
        table.add_row(*(str(row.get(column, "")) for column in columns))
    return table


def format_result(result: CommandResult, *, json_output: bool = False) -> str:
    """Format *result* as indented JSON or as Rich-rendered text."""
    if json_output:
        return result.model_dump_json(indent=2)

    console = create_console()
    if not result.ok:
        console.print(Text("ERROR", style="proxy.error"), Text(f"  {result.op}", style="proxy.op"))
        console.print(f"  {result.error or 'Unknown error'}")
        return get_output(console).rstrip("\n")

    console.print(Text("OK", style="proxy.ok"), Text(f"  {result.op}", style="proxy.op"))
    for key, value in result.data.items():
        if key == "items" and isinstance(value, list):
            if value:
                console.print(_render_items(value, result.op))
            continue
        console.print(Text(f"  {key}:", style="proxy.key"), Text(str(value), style="proxy.value"))
    return get_output(console).rstrip("\n")
