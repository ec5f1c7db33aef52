"""Capability descriptors — a name plus a parameter-type signature.

A Capability identifies one dynamically dispatched operation. It is built
either from call syntax (``Capability.method("add", 1, 2)`` infers the
signature from the argument types) or explicitly with ``Capability.build``,
which can pin a signature, mark the operation static, or request that the
target's loading domain be activated for the duration of the call.

INVARIANT: Equality and hash ignore parameter values. Two descriptors are
equal iff their names and static flags match and their signatures hold the
same set of type names.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from verproxy.errors import ConfigurationError


class Wrapped(ABC):
    """A proxy-side object standing in for a raw value from a loading domain."""

    @abstractmethod
    def unwrap(self) -> tuple[Any, type]:
        """Return ``(raw value, declared type)``."""


def unwrap(value: Any) -> tuple[Any, type]:
    """Split *value* into its raw object and the type used for signature matching."""
    if isinstance(value, Wrapped):
        return value.unwrap()
    return value, type(value)


def unwrap_values(values: Iterable[Any]) -> tuple[Any, ...]:
    return tuple(unwrap(value)[0] for value in values)


def infer_signature(values: Iterable[Any]) -> tuple[type, ...]:
    return tuple(unwrap(value)[1] for value in values)


def _type_name(tp: type) -> str:
    return f"{tp.__module__}.{tp.__qualname__}"


class Capability:
    """Immutable descriptor of one named operation and one call's arguments."""

    __slots__ = ("_name", "_params", "_signature", "_static", "_push_domain")

    def __init__(
        self,
        name: str,
        params: Iterable[Any] = (),
        signature: Iterable[type] | None = None,
        *,
        static: bool = False,
        push_domain: bool = False,
    ) -> None:
        if name is None or not str(name).strip():
            raise ConfigurationError(name, name, "Capability name cannot be blank")
        values = tuple(params)
        self._name = name
        self._params = unwrap_values(values)
        self._signature = tuple(signature) if signature else infer_signature(values)
        self._static = static
        self._push_domain = push_domain

    @classmethod
    def method(cls, name: str, *args: Any) -> Capability:
        """Descriptor for an instance call, signature inferred from *args*."""
        return cls(name, args)

    @classmethod
    def build(
        cls,
        name: str,
        *,
        params: Iterable[Any] = (),
        signature: Iterable[type] | None = None,
        static: bool = False,
        push_domain: bool = False,
    ) -> Capability:
        """Explicit builder: pin *signature*, mark *static*, or *push_domain*."""
        return cls(name, params, signature, static=static, push_domain=push_domain)

    def with_params(self, *args: Any) -> Capability:
        """Same operation and signature, different argument snapshot."""
        return Capability(
            self._name,
            args,
            self._signature,
            static=self._static,
            push_domain=self._push_domain,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> str:
        return self._name

    @property
    def params(self) -> tuple[Any, ...]:
        return self._params

    @property
    def signature(self) -> tuple[type, ...]:
        return self._signature

    @property
    def static(self) -> bool:
        return self._static

    @property
    def push_domain(self) -> bool:
        return self._push_domain

    @property
    def full_name(self) -> str:
        """``name/type/type…`` for logs."""
        return "/".join([self._name, *(_type_name(tp) for tp in self._signature)])

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Capability):
            return NotImplemented
        return (
            self._static == other._static
            and self._name == other._name
            and len(self._signature) == len(other._signature)
            and {_type_name(tp) for tp in self._signature}
            == {_type_name(tp) for tp in other._signature}
        )

    def __hash__(self) -> int:
        names = frozenset(_type_name(tp) for tp in self._signature)
        return hash((self._name, self._static, names))

    def __repr__(self) -> str:
        return f"Capability(name={self.full_name!r}, static={self._static}, label={self.label!r})"
