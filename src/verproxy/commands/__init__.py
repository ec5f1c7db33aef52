"""Subcommand modules for verproxy.

register_commands() imports command modules lazily so ``verproxy --help``
stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach every standalone command to the root group."""
    from verproxy.commands.binaries import binaries
    from verproxy.commands.call import call

    cli.add_command(binaries)
    cli.add_command(call)
