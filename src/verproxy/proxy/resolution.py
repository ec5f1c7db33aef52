"""Capability resolution — find the member a descriptor names, by signature.

Python has no overloading, so resolution checks that the named member
exists and that its declared parameters accept the descriptor's signature:
the arity must bind, and every annotated parameter must accept the matching
argument type. Unannotated parameters accept anything, and ``None``
arguments are accepted everywhere.

Resolution is a two-step search. The exact attempt compares types as
declared; when it fails, a second attempt normalises boxed ctypes on both
sides to their primitive counterparts and records per-argument converters
so a ``c_int`` argument reaches an ``int`` parameter (and vice versa).
"""

from __future__ import annotations

import inspect
import logging
import types
import typing
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from verproxy.domain.boxing import coercer, to_primitive
from verproxy.domain.capability import Capability

logger = logging.getLogger(__name__)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_NONE_TYPE = type(None)

Converter = Callable[[Any], Any]


class MemberKind(StrEnum):
    """How a resolved member is dispatched."""

    INSTANCE = "instance"  # plain function on the class, receives the target
    STATIC = "static"  # staticmethod, or a constructor
    CLASS = "class"  # classmethod, already bound to the class
    BOUND = "bound"  # callable stored on the target itself
    ATTRIBUTE = "attribute"  # property or data attribute, read not called


@dataclass(frozen=True)
class ResolvedCapability:
    """A descriptor bound to a concrete member of a target type."""

    capability: Capability
    owner: type
    kind: MemberKind
    function: Any
    converters: tuple[Converter | None, ...] = ()
    coerced: bool = False

    def convert(self, args: Sequence[Any]) -> tuple[Any, ...]:
        if not self.converters:
            return tuple(args)
        converted = []
        for index, value in enumerate(args):
            convert = self.converters[index] if index < len(self.converters) else None
            converted.append(convert(value) if convert is not None else value)
        return tuple(converted)

    def invoke(self, target: Any, args: Sequence[Any]) -> Any:
        """Dispatch on *target* (ignored for static members) with raw *args*."""
        values = self.convert(args)
        name = self.capability.name
        if self.kind is MemberKind.ATTRIBUTE:
            return getattr(target if target is not None else self.owner, name)
        if self.kind is MemberKind.BOUND:
            return getattr(target, name)(*values)
        if self.kind is MemberKind.INSTANCE:
            if self.capability.static or target is None:
                msg = f"Capability {name!r} needs an instance of {self.owner.__qualname__}"
                raise TypeError(msg)
            return self.function(target, *values)
        return self.function(*values)


# ---------------------------------------------------------------------------
# Signature matching
# ---------------------------------------------------------------------------


def _hints(function: Any) -> dict[str, Any]:
    """Resolved annotations of *function*, or ``{}`` when they cannot be evaluated."""
    target = function.__init__ if inspect.isclass(function) else function
    try:
        return typing.get_type_hints(target)
    except Exception:
        return {}


def _parameters(function: Any, *, drop_first: bool) -> list[inspect.Parameter] | None:
    """Parameters of *function*, or None when the signature is not introspectable."""
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return None
    params = list(signature.parameters.values())
    if drop_first and params and params[0].kind in _POSITIONAL:
        params = params[1:]
    return params


def _slots(params: list[inspect.Parameter], count: int) -> list[inspect.Parameter] | None:
    """Parameters receiving *count* positional arguments, or None if the arity cannot bind."""
    positional = [p for p in params if p.kind in _POSITIONAL]
    variadic = next((p for p in params if p.kind is inspect.Parameter.VAR_POSITIONAL), None)
    required = [p for p in positional if p.default is inspect.Parameter.empty]
    if any(
        p.kind is inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty
        for p in params
    ):
        return None
    if count < len(required):
        return None
    if count > len(positional) and variadic is None:
        return None
    return [positional[i] if i < len(positional) else variadic for i in range(count)]  # type: ignore[misc]


def _accepts(annotation: Any, arg_type: Any) -> bool:
    if annotation is inspect.Parameter.empty or annotation is Any or annotation is object:
        return True
    if arg_type is _NONE_TYPE or isinstance(annotation, str):
        return True
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        return any(_accepts(member, arg_type) for member in typing.get_args(annotation))
    if origin is not None:
        annotation = origin
    if not isinstance(annotation, type):
        return True
    try:
        return issubclass(arg_type, annotation)
    except TypeError:
        return True


def _match(
    function: Any,
    signature: tuple[type, ...],
    *,
    drop_first: bool,
    coerce: bool,
) -> tuple[Converter | None, ...] | None:
    """Converters for a successful match of *signature*, or None on mismatch."""
    params = _parameters(function, drop_first=drop_first)
    if params is None:
        return ()
    slots = _slots(params, len(signature))
    if slots is None:
        return None

    hints = _hints(function)
    converters: list[Converter | None] = []
    for param, arg_type in zip(slots, signature, strict=True):
        annotation = hints.get(param.name, param.annotation)
        if coerce:
            if not _accepts(to_primitive(annotation), to_primitive(arg_type)):
                return None
            converters.append(coercer(arg_type, annotation))
        elif not _accepts(annotation, arg_type):
            return None
        else:
            converters.append(None)
    return tuple(converters) if any(converters) else ()


def _lookup(owner: type, target: Any, name: str) -> tuple[MemberKind, Any]:
    """Locate *name* on *target* (when bound) or *owner*.

    Raises:
        AttributeError: No such member.
    """
    instance_attrs = getattr(target, "__dict__", None) if target is not None else None
    if isinstance(instance_attrs, dict) and name in instance_attrs:
        value = instance_attrs[name]
        return (MemberKind.BOUND, value) if callable(value) else (MemberKind.ATTRIBUTE, None)

    raw = inspect.getattr_static(owner, name)
    if isinstance(raw, staticmethod):
        return MemberKind.STATIC, getattr(owner, name)
    if isinstance(raw, classmethod):
        return MemberKind.CLASS, getattr(owner, name)
    if isinstance(raw, property) or not callable(raw):
        return MemberKind.ATTRIBUTE, None
    return MemberKind.INSTANCE, getattr(owner, name)


def _attempt(
    owner: type,
    target: Any,
    capability: Capability,
    *,
    coerce: bool,
) -> ResolvedCapability | None:
    try:
        kind, function = _lookup(owner, target, capability.name)
    except AttributeError:
        return None

    signature = capability.signature
    if kind is MemberKind.ATTRIBUTE:
        if signature:
            return None
        return ResolvedCapability(capability, owner, kind, None)

    checked = getattr(target, capability.name) if kind is MemberKind.BOUND else function
    converters = _match(
        checked,
        signature,
        drop_first=kind is MemberKind.INSTANCE,
        coerce=coerce,
    )
    if converters is None:
        return None
    return ResolvedCapability(capability, owner, kind, function, converters, coerce)


def find_capability(owner: type, capability: Capability, target: Any = None) -> ResolvedCapability:
    """Resolve *capability* against *owner* (and *target*, when bound).

    Tries the declared signature first, then the boxed/primitive-normalised
    one.

    Raises:
        LookupError: Neither attempt found a matching member.
    """
    resolved = _attempt(owner, target, capability, coerce=False)
    if resolved is None:
        logger.info(
            "Capability %s for signature not found on %s. Trying with primitives.",
            capability.full_name,
            owner.__qualname__,
        )
        resolved = _attempt(owner, target, capability, coerce=True)
    if resolved is None:
        msg = f"No capability {capability.full_name!r} on {owner.__module__}.{owner.__qualname__}"
        raise LookupError(msg)
    return resolved


def find_constructor(cls: type, signature: tuple[type, ...]) -> ResolvedCapability:
    """Resolve a constructor of *cls* accepting *signature*.

    Raises:
        LookupError: The constructor rejects the signature under both attempts.
    """
    capability = Capability.build("__init__", signature=signature, static=True)
    for coerce in (False, True):
        converters = _match(cls, signature, drop_first=False, coerce=coerce)
        if converters is not None:
            return ResolvedCapability(capability, cls, MemberKind.STATIC, cls, converters, coerce)
        if not coerce:
            logger.info(
                "Constructor of %s for signature not found. Trying with primitives.",
                cls.__qualname__,
            )
    msg = f"No constructor of {cls.__module__}.{cls.__qualname__} accepts {signature!r}"
    raise LookupError(msg)
