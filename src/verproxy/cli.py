"""Root CLI group for verproxy with global flags and command registration."""

from __future__ import annotations

import click

from verproxy import __version__
from verproxy.commands import register_commands
from verproxy.commands._base import ProxyGroup
from verproxy.commands._context import AppContext
from verproxy.config.settings import ProxySettings


@click.group(
    cls=ProxyGroup,
    invoke_without_command=True,
    examples="""\
  verproxy binaries libs mylib/1.0
  verproxy call libs mylib/1.0 mylib.lib_class.LibClass get_lib_version
  verproxy -v --log-json call libs mylib/2.0 mylib.lib_class.LibClass get_lib_version""",
)
@click.version_option(version=__version__, prog_name="verproxy")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging to stderr.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """verproxy — load and call versioned libraries side by side."""
    ctx.ensure_object(dict)
    settings = ProxySettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
