"""AppContext — shared Click context for all commands.

Created once by the root group and handed to subcommands via
``@click.pass_obj``. The plugin manager and domain registry are built
lazily, so ``--help`` and ``--version`` never import plugins.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from verproxy.output.formatters import CommandResult, format_result

if TYPE_CHECKING:
    from verproxy.config.settings import ProxySettings
    from verproxy.infrastructure.artifacts import DirArtifact
    from verproxy.infrastructure.registry import DomainRegistry
    from verproxy.plugins.manager import PluginManager


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: ProxySettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None
        self._registry: DomainRegistry | None = None

        from verproxy.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def plugins(self) -> PluginManager | None:
        """Loaded plugin manager, or None when plugins are disabled."""
        if not self.settings.plugins.enabled:
            return None
        if self._plugins is None:
            from verproxy.plugins.manager import PluginManager

            self._plugins = PluginManager()
            self._plugins.discover_and_load(local_dir=self.settings.plugin_dir)
        return self._plugins

    @property
    def registry(self) -> DomainRegistry:
        """Registry for this invocation, wired to the plugin manager."""
        if self._registry is None:
            from verproxy.infrastructure.registry import DomainRegistry

            self._registry = DomainRegistry(plugin_manager=self.plugins)
        return self._registry

    def artifact(
        self,
        root: str,
        name: str,
        version: str | None = None,
        extensions: tuple[str, ...] = (),
    ) -> DirArtifact:
        """Directory artifact for ``ROOT/NAME[/VERSION]``.

        Without *version*, NAME itself must end in the version directory.
        """
        from verproxy.infrastructure.artifacts import DirArtifact

        directory = Path(root) / name
        if version:
            directory = directory / version
        loader = self.settings.loader
        plugins = self.plugins
        return DirArtifact.from_version_dir(
            directory,
            extensions=frozenset(extensions or loader.extensions),
            uses_system_loader=loader.use_system_loader,
            temp=loader.temp,
            callback=plugins.extract_callback() if plugins is not None else None,
        )

    def emit(self, result: CommandResult) -> None:
        """Print *result*: stdout on success, stderr and exit code 1 on failure."""
        output = format_result(result, json_output=self.settings.json_output)
        if result.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
