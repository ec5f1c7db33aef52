"""Results — provenance-carrying wrappers around one call's outcome.

Every projection is total: it never raises and degrades to a safe default
(``0``, ``False``, ``""``, ``Path(".")``, an empty mapping or list) when the
outcome does not have the requested shape.
"""

from __future__ import annotations

import decimal
import logging
import math
import numbers
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from verproxy.domain.boxing import unbox
from verproxy.domain.capability import Capability, Wrapped, unwrap
from verproxy.domain.versions import VersionInfo, version_from_object

if TYPE_CHECKING:
    from verproxy.infrastructure.artifacts import Artifact
    from verproxy.proxy.caller import Caller, EnumCaller

logger = logging.getLogger(__name__)

_STRING_CAPABILITY = Capability.method("__str__")


class Result(Wrapped):
    """Outcome of invoking *capability* through *caller*.

    Provenance comes from the caller's artifact or, without a caller, from
    the outcome's own runtime type.
    """

    def __init__(
        self,
        capability: Capability | None,
        value: Any,
        *,
        caller: Caller | None = None,
        version_info: VersionInfo | None = None,
    ) -> None:
        self._capability = capability
        self._value = value
        self._caller = caller
        if version_info is None:
            if caller is not None and not caller.version_info.is_unknown:
                version_info = caller.version_info
            else:
                version_info = version_from_object(value)
        self._version_info = version_info

    # ------------------------------------------------------------------
    # Identity and provenance
    # ------------------------------------------------------------------

    @property
    def capability(self) -> Capability | None:
        return self._capability

    @property
    def value(self) -> Any:
        return self._value

    @property
    def caller(self) -> Caller | None:
        return self._caller

    @property
    def is_null(self) -> bool:
        return self._value is None

    @property
    def version_info(self) -> VersionInfo:
        return self._version_info

    @property
    def name(self) -> str:
        return self._version_info.name

    @property
    def label(self) -> str:
        return self._version_info.label

    @property
    def version(self) -> str:
        return self._version_info.version

    @property
    def path(self) -> str:
        return self._version_info.path

    @property
    def artifact(self) -> Artifact | None:
        return self._caller.artifact if self._caller is not None else None

    def see(self) -> Any:
        return self._value

    def unwrap(self) -> tuple[Any, type]:
        return self._value, type(self._value)

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def as_long(self) -> int:
        """Integer value of a real-number or Decimal outcome, else ``0``. ``bool`` is not numeric."""
        value = unbox(self._value)
        if isinstance(value, decimal.Decimal):
            return int(value) if value.is_finite() else 0
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            return 0
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return 0

    def as_bool(self) -> bool:
        value = unbox(self._value)
        return value if isinstance(value, bool) else False

    def as_string(self) -> str:
        if self._value is None:
            return ""
        try:
            return str(self._value)
        except Exception:
            logger.debug("String conversion failed for %r", type(self._value), exc_info=True)
            return ""

    def as_file(self) -> Path:
        if isinstance(self._value, os.PathLike):
            try:
                return Path(self._value)
            except TypeError:
                return Path(".")
        return Path(".")

    def as_map(self) -> dict[str, str]:
        """Mapping outcome rendered key by key through each object's own ``__str__``."""
        if not isinstance(self._value, Mapping):
            return {}
        artifact = self.artifact
        try:
            return {
                self.to_string(key, artifact): self.to_string(value, artifact)
                for key, value in self._value.items()
            }
        except Exception:
            logger.debug("Mapping conversion failed", exc_info=True)
            return {}

    def as_list(self) -> list[Caller]:
        """Elements of an iterable outcome, each bound to a Caller on the same artifact."""
        from verproxy.proxy.caller import Caller

        value = self._value
        if value is None or isinstance(value, str | bytes | bytearray | Mapping):
            return []
        if not isinstance(value, Iterable):
            return []
        artifact = self.artifact
        try:
            return [Caller.wrap(item, artifact) for item in value]
        except Exception:
            logger.debug("Iteration failed for %r", type(value), exc_info=True)
            return []

    def as_enum(self) -> EnumCaller:
        from verproxy.proxy.caller import EnumCaller

        return EnumCaller.wrap(self._value, self.artifact)  # type: ignore[return-value]

    def as_proxy(self) -> Caller:
        from verproxy.proxy.caller import Caller

        return Caller.wrap(self._value, self.artifact)

    def same_as(self, other: Any) -> bool:
        """Identity-free equality with a Caller, Result, or raw value."""
        other_value = unwrap(other)[0] if other is not None else None
        if self._value is None:
            return other_value is None
        if other_value is None:
            return False
        try:
            return bool(self._value == other_value)
        except Exception:
            return False

    def rerun(self, *params: Any) -> Result:
        """Re-issue the originating capability with *params* on the same caller.

        *params* replace the original arguments outright; ``rerun()`` calls
        with none. Returns a null Result when there is no origin to re-issue.
        """
        if self._capability is None or self._caller is None:
            return Result(None, None)
        return self._caller._make_call(self._capability.with_params(*params))

    @staticmethod
    def to_string(obj: Any, artifact: Artifact | None = None) -> str:
        """Render *obj* through its own ``__str__`` capability."""
        from verproxy.proxy.caller import Caller

        if obj is None:
            return ""
        return Caller.wrap(obj, artifact).call(_STRING_CAPABILITY).as_string()

    def __repr__(self) -> str:
        name = self._capability.name if self._capability is not None else None
        return f"Result(capability={name!r}, value={self._value!r}, label={self.label!r})"
