"""Loading domains — one private import namespace per library version.

A Domain owns a synthetic root package (``_verproxy_domain_<n>_<slug>``)
whose ``__path__`` is the domain's binary locations. Every module the domain
loads is imported beneath that prefix, so two versions of the same library
never share ``sys.modules`` entries with each other or with the host.

Names the domain cannot resolve fall back to the host's regular imports
when the domain uses the system loader; isolated domains fail instead.

The *ambient* domain is a per-thread slot that library code can consult
through :func:`current_domain`. :func:`activate` swaps it for the duration
of a ``with`` block and always restores the previous value.
"""

from __future__ import annotations

import importlib
import importlib.machinery
import importlib.util
import itertools
import logging
import re
import sys
import threading
import weakref
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from types import ModuleType
from typing import Any

from verproxy.domain.versions import DOMAIN_PACKAGE_PREFIX

logger = logging.getLogger(__name__)

_counter = itertools.count(1)
_SLUG_PATTERN = re.compile(r"[^0-9A-Za-z]+")

# Root package name -> Domain, for mapping loaded types back to their domain.
_DOMAINS: weakref.WeakValueDictionary[str, Domain] = weakref.WeakValueDictionary()

_ambient = threading.local()


def _slug(name: str) -> str:
    return _SLUG_PATTERN.sub("_", name).strip("_").lower() or "anon"


def _is_missing(exc: ModuleNotFoundError, module_name: str) -> bool:
    """True when *exc* reports *module_name* itself (or a parent) as missing."""
    missing = exc.name or ""
    return module_name == missing or module_name.startswith(f"{missing}.")


def _resolve_attr(module: ModuleType, attr_path: str) -> Any:
    target: Any = module
    for part in attr_path.split("."):
        target = getattr(target, part)
    return target


class Domain:
    """An isolated loading boundary associated with one artifact name.

    Attributes:
        name: Artifact name this domain was built for.
        locations: Binary locations (zip archives or directories) it imports from.
        uses_system_loader: Whether unresolved names fall back to host imports.
        package: Name of the synthetic root package in ``sys.modules``.
    """

    def __init__(
        self,
        name: str,
        locations: Iterable[Path | str] = (),
        *,
        uses_system_loader: bool = True,
    ) -> None:
        self.name = name
        self.locations: tuple[Path, ...] = tuple(Path(location) for location in locations)
        self.uses_system_loader = uses_system_loader
        self.package = f"{DOMAIN_PACKAGE_PREFIX}{next(_counter)}_{_slug(name)}"
        self._root = self._install_root()
        _DOMAINS[self.package] = self

    def _install_root(self) -> ModuleType:
        spec = importlib.machinery.ModuleSpec(self.package, None, is_package=True)
        spec.submodule_search_locations = [str(location) for location in self.locations]
        module = importlib.util.module_from_spec(spec)
        module.__verproxy_domain__ = self.name  # type: ignore[attr-defined]
        sys.modules[self.package] = module
        return module

    @property
    def is_empty(self) -> bool:
        return not self.locations

    def owns(self, cls: type) -> bool:
        """Whether *cls* was loaded through this domain."""
        return cls.__module__ == self.package or cls.__module__.startswith(f"{self.package}.")

    def import_module(self, module_name: str) -> ModuleType:
        """Import *module_name* from this domain's locations.

        Raises:
            ModuleNotFoundError: The module is neither in the domain nor, when
                the system loader is used, importable by the host.
        """
        if self.locations:
            qualified = f"{self.package}.{module_name}"
            try:
                return importlib.import_module(qualified)
            except ModuleNotFoundError as exc:
                if not _is_missing(exc, qualified):
                    raise
        if self.uses_system_loader:
            return importlib.import_module(module_name)
        msg = f"No module named {module_name!r} in domain {self.name!r}"
        raise ModuleNotFoundError(msg, name=module_name)

    def load_type(self, qualified_name: str) -> Any:
        """Load a class (or any module attribute) by qualified name.

        Accepts ``"pkg.mod:Class"`` or dotted ``"pkg.mod.Class"``; the dotted
        form tries the longest importable module prefix first.

        Raises:
            LookupError: No module prefix imports and exposes the attribute.
        """
        module_name, _, attr_path = qualified_name.partition(":")
        if attr_path:
            candidates = [(module_name, attr_path)]
        else:
            parts = qualified_name.split(".")
            candidates = [
                (".".join(parts[:i]), ".".join(parts[i:])) for i in range(len(parts) - 1, 0, -1)
            ]

        for module_name, attr_path in candidates:
            try:
                module = self.import_module(module_name)
            except ModuleNotFoundError as exc:
                if _is_missing(exc, module_name):
                    continue
                raise
            try:
                return _resolve_attr(module, attr_path)
            except AttributeError:
                continue

        msg = f"Type {qualified_name!r} is not found in domain {self.name!r}"
        raise LookupError(msg)

    def __repr__(self) -> str:
        return (
            f"Domain(name={self.name!r}, package={self.package!r}, "
            f"locations={[str(location) for location in self.locations]!r})"
        )


def domain_of(cls: type) -> Domain | None:
    """Return the domain that loaded *cls*, or None for host types."""
    root = cls.__module__.partition(".")[0]
    return _DOMAINS.get(root)


def current_domain() -> Domain | None:
    """The calling thread's ambient domain (None means the host's imports)."""
    return getattr(_ambient, "domain", None)


@contextmanager
def activate(domain: Domain | None) -> Iterator[Domain | None]:
    """Make *domain* the calling thread's ambient domain inside the block.

    Nested activations compose: each exit restores the domain that was
    ambient when it was entered, on normal return and on failure alike.
    """
    previous = current_domain()
    _ambient.domain = domain
    logger.debug("Activated domain %s", domain.name if domain else None)
    try:
        yield domain
    finally:
        _ambient.domain = previous
