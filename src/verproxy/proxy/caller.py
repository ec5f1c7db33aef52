"""Callers — dynamically dispatched handles bound to a target and an artifact.

Every named call goes through :meth:`Caller.call`, which resolves the
capability against the target's type (once per caller, then from a private
cache), optionally activates the type's loading domain, dispatches, and
wraps the outcome in a :class:`~verproxy.proxy.result.Result`.

INVARIANT: Every failure while resolving or invoking is re-raised as a
ProxyError naming the capability and the caller's label.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from verproxy.domain.capability import Capability, Wrapped, unwrap
from verproxy.domain.paths import UNKNOWN
from verproxy.domain.versions import VersionInfo
from verproxy.errors import ProxyError, ResolutionError
from verproxy.infrastructure.artifacts import UNKNOWN_ARTIFACT, Artifact
from verproxy.infrastructure.loading import activate, domain_of
from verproxy.proxy import resolution
from verproxy.proxy.result import Result

if TYPE_CHECKING:
    from verproxy.proxy.resolution import ResolvedCapability

logger = logging.getLogger(__name__)


class Caller(Wrapped):
    """Handle through which all calls on one target are routed.

    Parameters:
        target: Bound instance, or None for a null/static caller.
        cls: Type used for resolution (default: ``type(target)``).
        artifact: Artifact the type was loaded from.
        data: Named, pre-bound Results available through :meth:`data`.
    """

    def __init__(
        self,
        target: Any,
        cls: type | None = None,
        artifact: Artifact | None = None,
        data: Mapping[str, Result] | None = None,
    ) -> None:
        if cls is None and target is not None:
            cls = type(target)
        self._target = target
        self._type = cls
        self._artifact = artifact if artifact is not None else UNKNOWN_ARTIFACT
        self._data: dict[str, Result] = dict(data or {})
        self._cache: dict[Capability, ResolvedCapability] = {}

    @classmethod
    def wrap(cls, value: Any, artifact: Artifact | None = None) -> Caller:
        """Bind *value* (raw, Caller, or Result) to a new caller on *artifact*."""
        raw, raw_type = unwrap(value)
        return cls(raw, raw_type if raw is not None else None, artifact)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def see(self) -> Any:
        """The raw bound instance (None for null and static callers)."""
        return self._target

    def unwrap(self) -> tuple[Any, type]:
        return self.see(), self._type if self._type is not None else type(None)

    @property
    def type(self) -> type | None:
        return self._type

    @property
    def artifact(self) -> Artifact:
        return self._artifact

    @property
    def is_null(self) -> bool:
        return self.see() is None

    @property
    def name(self) -> str:
        if self._type is None:
            return UNKNOWN
        return f"{self._type.__module__}.{self._type.__qualname__}"

    @property
    def label(self) -> str:
        return self._artifact.label

    @property
    def version(self) -> str:
        return self._artifact.version

    @property
    def path(self) -> str:
        return self._artifact.path

    @property
    def version_info(self) -> VersionInfo:
        return self._artifact.version_info

    def is_instance_of(self, name: str) -> bool:
        """Check the bound instance against a simple or qualified type name.

        Simple names compare case-insensitively with the caller's type name.
        Qualified names are loaded from the type's own domain.
        """
        if self._type is None:
            return False
        if "." not in name and ":" not in name:
            return self._type.__name__.lower() == name.lower()
        domain = domain_of(self._type)
        try:
            if domain is not None:
                named = domain.load_type(name)
            else:
                from verproxy.infrastructure.loading import Domain

                named = Domain(name, ()).load_type(name)
            return isinstance(self.see(), named)
        except Exception:
            return False

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def data(self, name: str) -> Result | None:
        """Named Result pre-bound when the caller was built."""
        return self._data.get(name)

    def call(self, capability: str | Capability, *params: Any) -> Result:
        """Invoke a capability by name (signature inferred) or by descriptor.

        With a descriptor, *params* replace its argument snapshot while its
        declared signature is kept.
        """
        if isinstance(capability, Capability):
            descriptor = capability.with_params(*params) if params else capability
        else:
            descriptor = Capability.method(capability, *params)
        return self._make_call(descriptor)

    def resolve(self, capability: Capability) -> ResolvedCapability:
        """Resolve *capability*, consulting this caller's private cache first."""
        resolved = self._cache.get(capability)
        if resolved is not None:
            return resolved
        if self._type is None:
            msg = f"Caller has no type to resolve {capability.name!r} against"
            raise LookupError(msg)
        resolved = resolution.find_capability(self._type, capability, self.see())
        self._cache[capability] = resolved
        return resolved

    def _make_call(self, capability: Capability) -> Result:
        try:
            resolved = self.resolve(capability)
        except LookupError as exc:
            raise ResolutionError(capability.name, self.label, str(exc)) from exc
        try:
            if capability.push_domain and self._type is not None:
                with activate(domain_of(self._type)):
                    outcome = resolved.invoke(self.see(), capability.params)
            else:
                outcome = resolved.invoke(self.see(), capability.params)
        except Exception as exc:
            raise ProxyError(
                capability.name, self.label, f"Failed to call method {capability.name}"
            ) from exc
        return Result(capability, outcome, caller=self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.name!r}, label={self.label!r}, null={self.is_null})"


class StaticCaller(Caller):
    """Caller bound to a type only; every dispatch is static."""

    def __init__(
        self,
        cls: type | None,
        artifact: Artifact | None = None,
        data: Mapping[str, Result] | None = None,
    ) -> None:
        super().__init__(None, cls, artifact, data)

    def see(self) -> Any:
        return None


class EnumCaller(Caller):
    """Caller bound to one member of an enumeration type."""

    @property
    def member_name(self) -> str:
        if self.is_null:
            return ""
        return self.call("name").as_string()

    def ordinal(self) -> int:
        """Position of the member within its enumeration, or -1 when null."""
        if self.is_null or self.type is None:
            return -1
        return list(self.type).index(self.see())  # type: ignore[call-overload]

    def is_same_name(self, name: str) -> bool:
        return self.member_name.lower() == name.lower()


NULL_ENUM = EnumCaller(None)
