"""Pluggy hook specifications for verproxy lifecycle events.

Two events: a loading domain was built, and a library binary was extracted
from the host archive. Both are notifications; return values are ignored.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("verproxy")


class VerproxyHookSpec:
    """Hook specifications for the verproxy plugin system."""

    @hookspec
    def post_domain_build(
        self,
        artifact_name: str,
        locations: list[str],
        empty: bool,
    ) -> None:
        """Called after the registry builds a loading domain."""

    @hookspec
    def post_extract(
        self,
        artifact_name: str,
        origin: str,
        destination: str,
    ) -> None:
        """Called after one archive entry is extracted to disk."""
