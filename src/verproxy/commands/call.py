"""Command: build an object from an artifact and call one capability on it."""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

import click

from verproxy.commands._base import ProxyCommand

if TYPE_CHECKING:
    from verproxy.commands._context import AppContext


def _parse_arg(raw: str) -> Any:
    """Python literal when *raw* parses as one (``1``, ``2.5``, ``True``), else the string."""
    try:
        return ast.literal_eval(raw)
    except (ValueError, SyntaxError):
        return raw


@click.command(
    cls=ProxyCommand,
    examples="""\
  verproxy call libs mylib/1.0 mylib.lib_class.LibClass get_lib_version
  verproxy call libs mylib mylib.calc:Calculator add 2 3 --version 2.0
  verproxy --json call libs mylib/1.0 mylib.lib_class.LibClass describe""",
)
@click.argument("root")
@click.argument("name")
@click.argument("class_name")
@click.argument("method")
@click.argument("args", nargs=-1)
@click.option("--version", "version", default=None, help="Version directory under NAME.")
@click.option("--static", "static_object", is_flag=True, help="Call without constructing an instance.")
@click.pass_obj
def call(
    app: AppContext,
    root: str,
    name: str,
    class_name: str,
    method: str,
    args: tuple[str, ...],
    version: str | None,
    static_object: bool,
) -> None:
    """Construct CLASS_NAME from ROOT/NAME[/VERSION] and call METHOD with ARGS."""
    from verproxy.domain.capability import Capability
    from verproxy.errors import ProxyError
    from verproxy.output.formatters import CommandResult
    from verproxy.proxy.builder import ObjectBuilder

    artifact = app.artifact(root, name, version)
    params = [_parse_arg(arg) for arg in args]
    try:
        caller = ObjectBuilder(
            class_name,
            artifact=artifact,
            static_object=static_object,
            registry=app.registry,
        ).build()
        capability = Capability.build(method, params=params, static=static_object)
        result = caller.call(capability)
    except ProxyError as exc:
        app.emit(CommandResult(ok=False, op="call", error=str(exc)))
        return

    app.emit(
        CommandResult(
            ok=True,
            op="call",
            data={
                "class": class_name,
                "method": method,
                "label": result.label,
                "version": result.version,
                "result": result.as_string(),
            },
        )
    )
