"""Command: list the binary locations a directory artifact enumerates."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from verproxy.commands._base import ProxyCommand

if TYPE_CHECKING:
    from verproxy.commands._context import AppContext


@click.command(
    cls=ProxyCommand,
    examples="""\
  verproxy binaries libs mylib --version 1.0
  verproxy binaries libs mylib/2.0 --ext zip --ext whl
  verproxy --json binaries libs mylib/1.0""",
)
@click.argument("root")
@click.argument("name")
@click.option("--version", "version", default=None, help="Version directory under NAME.")
@click.option("--ext", "extensions", multiple=True, help="Accepted extension (repeatable).")
@click.pass_obj
def binaries(
    app: AppContext,
    root: str,
    name: str,
    version: str | None,
    extensions: tuple[str, ...],
) -> None:
    """List the binaries the artifact ROOT/NAME[/VERSION] would load."""
    from verproxy.output.formatters import CommandResult

    artifact = app.artifact(root, name, version, extensions)
    locations = artifact.enumerate_binaries()
    app.emit(
        CommandResult(
            ok=True,
            op="binaries",
            data={
                "name": artifact.name,
                "label": artifact.label,
                "version": artifact.version,
                "count": len(locations),
                "items": [{"path": str(location)} for location in locations],
            },
        )
    )
