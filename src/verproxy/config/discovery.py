"""Config file location and parsing for ``verproxy.toml``.

One place decides which file is in effect (explicit ``--config`` path,
``VERPROXY_CONFIG``, or a walk-up from the working directory) and turns it
into a raw table. ``ProxySettings`` and ``load_config`` both read through here,
so a malformed file fails the same way everywhere.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

import click

from verproxy.config.models import ProxyConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "verproxy.toml"
CONFIG_ENV_VAR = "VERPROXY_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Nearest ``verproxy.toml`` at or above *start* (default: cwd).

    ``VERPROXY_CONFIG`` short-circuits the walk; when it names a file that
    does not exist, no config is in effect.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return _existing(Path(override), CONFIG_ENV_VAR)

    origin = (start or Path.cwd()).resolve()
    return next(
        (d / CONFIG_FILENAME for d in (origin, *origin.parents) if (d / CONFIG_FILENAME).is_file()),
        None,
    )


def resolve_config_path(explicit: str | Path | None, start: Path | None = None) -> Path | None:
    """Config file for a CLI run: *explicit* when given, otherwise discovered."""
    if explicit:
        return _existing(Path(explicit), "--config")
    return find_config(start)


def read_config(path: Path | None) -> dict[str, Any]:
    """Raw TOML table of *path*; ``{}`` when there is no file.

    Raises:
        click.ClickException: the file is not valid TOML.
    """
    if path is None or not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> ProxyConfig:
    """Validated sections of *path* (or the discovered file), defaults if none."""
    return ProxyConfig.model_validate(read_config(path if path is not None else find_config(cwd)))


def _existing(path: Path, origin: str) -> Path | None:
    if path.is_file():
        return path
    logger.warning("Config file %s from %s does not exist; using defaults", path, origin)
    return None
