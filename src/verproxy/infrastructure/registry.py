"""Domain registry — artifact name -> loading domain, built once, lazily.

INVARIANT: At most one Domain is constructed per artifact name for the
registry's lifetime, even under concurrent first use. Lookups hitting the
cache take no lock; construction is serialised by a double-checked lock.
INVARIANT: Missing binaries are not an error. The registry logs a warning
and hands out an empty, inert domain; lookups against it fail later, at the
point of use.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from verproxy.domain.versions import import_root
from verproxy.errors import ConfigurationError
from verproxy.infrastructure.loading import Domain

if TYPE_CHECKING:
    from verproxy.infrastructure.artifacts import Artifact
    from verproxy.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


def _walk_fallbacks(artifact: Artifact) -> list[Path]:
    """Enumerate *artifact*, then its fallbacks, until one yields binaries."""
    seen: set[int] = set()
    current: Artifact | None = artifact
    locations: list[Path] = []
    while current is not None:
        if id(current) in seen:
            raise ConfigurationError(artifact.name, artifact.label, "Fallback chain contains a cycle")
        seen.add(id(current))
        locations = current.enumerate_binaries()
        if locations or not current.has_fallback:
            break
        current = current.fallback
        logger.info("Fallback to %s", current)
    return locations


def _include_location(name: str) -> Path | None:
    """Import root of a host module or class named ``pkg.mod`` or ``pkg.mod:Class``."""
    module_name, _, attr = name.partition(":")
    try:
        module = importlib.import_module(module_name)
        target = getattr(module, attr) if attr else module
        source = inspect.getfile(target)
    except (ImportError, AttributeError, TypeError, OSError):
        logger.error("Failed to load %s", name)
        return None
    return import_root(getattr(target, "__module__", None) or module.__name__, source)


class DomainRegistry:
    """Process-scoped cache of loading domains keyed by artifact name.

    Parameters:
        plugin_manager: Optional PluginManager notified after each build.
    """

    def __init__(self, *, plugin_manager: PluginManager | None = None) -> None:
        self._domains: dict[str, Domain] = {}
        self._lock = threading.Lock()
        self._plugin_manager = plugin_manager
        self.build_count = 0

    def get(self, artifact: Artifact) -> Domain:
        """Return the domain for *artifact*, building it on first use."""
        name = artifact.name
        domain = self._domains.get(name)
        if domain is not None:
            return domain
        with self._lock:
            domain = self._domains.get(name)
            if domain is None:
                domain = self._build(artifact)
                self._domains[name] = domain
        return domain

    def contains(self, name: str | None) -> bool:
        """Whether a domain is already registered under *name*. Never builds."""
        if not name or not name.strip():
            return False
        return name in self._domains

    def reset_all(self) -> None:
        """Forget every cached domain.

        Domains already handed out keep working; only future lookups build
        new ones.
        """
        with self._lock:
            self._domains.clear()

    def names(self) -> list[str]:
        return sorted(self._domains)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _build(self, artifact: Artifact) -> Domain:
        try:
            locations = _walk_fallbacks(artifact)
            for name in artifact.include:
                location = _include_location(name)
                if location is not None and location not in locations:
                    locations = [*locations, location]
        except ConfigurationError:
            raise
        except Exception:
            logger.warning(
                "Failed to load libraries for %s. Application may not function properly",
                artifact.name,
                exc_info=True,
            )
            locations = []

        if not locations:
            logger.warning(
                "Did not find any lib locations for lib=%s. Application may not function properly",
                artifact.name,
            )
        else:
            logger.info(
                "Loading %s from %s",
                artifact.name,
                "\n".join(str(location) for location in locations),
            )

        domain = Domain(artifact.name, locations, uses_system_loader=artifact.uses_system_loader)
        self.build_count += 1
        self._notify(artifact.name, domain)
        return domain

    def _notify(self, artifact_name: str, domain: Domain) -> None:
        """Fire ``post_domain_build``. Plugin failures are warnings, never errors."""
        if self._plugin_manager is None:
            return
        try:
            self._plugin_manager.hook.post_domain_build(
                artifact_name=artifact_name,
                locations=[str(location) for location in domain.locations],
                empty=domain.is_empty,
            )
        except Exception:
            logger.warning("post_domain_build hook failed for %s", artifact_name, exc_info=True)


_default_registry: DomainRegistry | None = None
_default_lock = threading.Lock()


def get_registry() -> DomainRegistry:
    """Return the process-wide default registry, creating it on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = DomainRegistry()
    return _default_registry
