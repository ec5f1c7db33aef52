"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, verproxy.toml only contains
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class LoaderConfig(BaseModel):
    """[loader] section."""

    model_config = {"frozen": True}

    lib_root: Path = Path("libs")
    extensions: list[str] = Field(default_factory=lambda: ["zip"])
    use_system_loader: bool = True
    extract_dir: Path | None = None
    temp: bool = True

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized = [ext.strip().lower().lstrip(".") for ext in value if ext.strip()]
        return normalized or ["zip"]


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: Path | None = None


class ProxyConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
