"""Version provenance — which library version a type or value came from.

Every Result carries a VersionInfo. When the producing caller is known its
artifact supplies the provenance; otherwise it is recovered from the source
location of the value's own type.
"""

from __future__ import annotations

import functools
import inspect
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from verproxy.domain.paths import UNKNOWN, get_version, join_path

# Synthetic root packages created for loading domains start with this prefix.
DOMAIN_PACKAGE_PREFIX = "_verproxy_domain_"


@dataclass(frozen=True)
class VersionInfo:
    """Label/version/name triple identifying one library version."""

    label: str = UNKNOWN
    version: str = UNKNOWN
    name: str = UNKNOWN

    @property
    def path(self) -> str:
        """``label/version``, or ``"unknown"`` for the unknown version."""
        if self == UNKNOWN_VERSION:
            return UNKNOWN
        return join_path(self.label, self.version)

    @property
    def is_unknown(self) -> bool:
        return self == UNKNOWN_VERSION

    @classmethod
    def from_dir(cls, directory: str | Path, name: str = UNKNOWN) -> VersionInfo:
        """Derive label and version from a ``<label>/<version>`` directory."""
        path = Path(directory).absolute()
        return cls(label=path.parent.name, version=get_version(path), name=name)


UNKNOWN_VERSION = VersionInfo()


def import_root(module_name: str, source: str | Path) -> Path:
    """Return the import-path entry that *module_name* was loaded from.

    ``pkg.mod`` at ``/libs/pkg/mod.py`` has import root ``/libs``. The synthetic
    root package of a loading domain has no directory of its own and is
    skipped.
    """
    parts = module_name.split(".")
    if parts[0].startswith(DOMAIN_PACKAGE_PREFIX):
        parts = parts[1:]
    path = Path(source)
    depth = len(parts) if path.stem == "__init__" else len(parts) - 1
    depth = max(depth, 0)
    return path.parents[depth]


@functools.lru_cache(maxsize=512)
def version_from_type(cls: type) -> VersionInfo:
    """Recover provenance from the location *cls* was loaded from.

    Inside an archive (``libs/mylib/1.0/mylib.zip``) the label comes from the
    archive's grandparent and the version from its parent. A plain directory
    import root (``libs/mylib/1.0/``) is its own version, labelled by its parent.
    """
    module = sys.modules.get(cls.__module__)
    try:
        source = inspect.getfile(cls)
    except (TypeError, OSError):
        return UNKNOWN_VERSION
    if module is None:
        return UNKNOWN_VERSION

    root = import_root(module.__name__, source)
    if root.is_file():
        return VersionInfo(label=get_version(root.parent.parent), version=get_version(root))
    return VersionInfo(label=get_version(root.parent), version=get_version(root))


def version_from_object(value: Any) -> VersionInfo:
    """Provenance of *value*'s runtime type; unknown for ``None``."""
    if value is None:
        return UNKNOWN_VERSION
    return version_from_type(type(value))
