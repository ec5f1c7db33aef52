"""ProxyError — the single failure type raised by verproxy.

INVARIANT: Every fatal failure is a ProxyError carrying the originating
name, the originating label, and the underlying cause (``__cause__``).
Non-fatal degradations (missing binaries, failed extraction, broken
plugins) are only logged.
"""

from __future__ import annotations

from typing import Any

from verproxy.domain.paths import UNKNOWN

_MESSAGE = "Failed to invoke {name} with label {label}"


def _or_unknown(value: Any) -> str:
    text = "" if value is None else str(value)
    return text if text.strip() else UNKNOWN


class ProxyError(Exception):
    """Raised when a dynamic call, construction, or type load fails.

    Attributes:
        name: Name of the originating capability, type, or builder.
        label: Display label of the originating caller or artifact.
        message: Optional human-readable detail.
    """

    def __init__(self, name: str | None, label: str | None, message: str | None = None) -> None:
        self.name = _or_unknown(name)
        self.label = _or_unknown(label)
        self.message = message
        text = _MESSAGE.format(name=self.name, label=self.label)
        if message:
            text = f"{text}. Message: {message}"
        super().__init__(text)

    @classmethod
    def of(cls, origin: Any, message: str | None = None) -> ProxyError:
        """Build an error from any object exposing ``name`` and ``label``."""
        return cls(getattr(origin, "name", None), getattr(origin, "label", None), message)


class ResolutionError(ProxyError):
    """A capability, constructor, or type could not be found."""


class ConfigurationError(ProxyError):
    """A builder or descriptor was configured inconsistently."""
