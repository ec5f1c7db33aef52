"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``VERPROXY_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``verproxy.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from verproxy.config.discovery import read_config, resolve_config_path
from verproxy.config.models import LoaderConfig, PluginsConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``verproxy.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = read_config(toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class ProxySettings(BaseSettings):
    """Settings for the verproxy loader and CLI.

    Attributes:
        project_root: Parent of the discovered ``verproxy.toml``, or CWD.
            Relative ``lib_root``/``local_dir`` values are resolved against it.
        config_path: Config file in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "VERPROXY_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @property
    def lib_root(self) -> Path:
        """``loader.lib_root`` anchored at :attr:`project_root`."""
        return self.project_root / self.loader.lib_root

    @property
    def plugin_dir(self) -> Path | None:
        local_dir = self.plugins.local_dir
        return self.project_root / local_dir if local_dir is not None else None

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> ProxySettings:
        """Construct settings from a CLI invocation.

        Discovers ``verproxy.toml`` via walk-up (or uses *config_path*),
        anchors *project_root* at the config file's directory, and applies
        CLI flags as highest-priority overrides.
        """
        toml_path = resolve_config_path(config_path, project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None
