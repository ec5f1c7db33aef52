"""Click base classes with ``--examples`` support.

Commands and groups built with ``examples=`` gain an eager ``--examples``
flag that prints the usage examples and exits, keeping ``--help`` short.
"""

from __future__ import annotations

from typing import Any

import click


class ExamplesOption(click.Option):
    """Eager ``--examples`` flag bound to one block of example text."""

    def __init__(self, examples: str) -> None:
        super().__init__(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=self._show,
            help="Show usage examples.",
        )
        self.examples = examples

    def _show(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(self.examples)
        ctx.exit(0)


class _ExamplesMixin:
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(ExamplesOption(examples))  # type: ignore[attr-defined]


class ProxyCommand(_ExamplesMixin, click.Command):
    """Command that supports an ``--examples`` flag."""


class ProxyGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands are ProxyCommands by default."""

    command_class = ProxyCommand
