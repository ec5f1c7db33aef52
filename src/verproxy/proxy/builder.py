"""ObjectBuilder — construct a target from an artifact and bind it to a Caller.

The builder resolves the target's qualified name, loads the type from the
artifact's loading domain, and then produces one of four callers:

* an interface proxy backed by a handler (``interface_name`` set),
* an instance produced by a static factory (``factory_method`` set),
* a static-only caller with no instance (``static_object``),
* a freshly constructed instance (constructor matched against ``params``).

Post-construction ``descriptors`` are then invoked in order against the
built caller; their Results are kept in :attr:`descriptor_results`.

INVARIANT: ``class_name`` and ``interface_name`` are mutually exclusive.
Assigning one clears the other; a builder constructed with both fails at
build time with ConfigurationError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import nullcontext
from typing import Any

from verproxy.domain.capability import Capability, infer_signature, unwrap_values
from verproxy.domain.paths import UNKNOWN
from verproxy.domain.versions import UNKNOWN_VERSION, VersionInfo
from verproxy.errors import ConfigurationError, ProxyError, ResolutionError
from verproxy.infrastructure.artifacts import Artifact
from verproxy.infrastructure.loading import Domain, activate
from verproxy.infrastructure.registry import DomainRegistry, get_registry
from verproxy.proxy import resolution
from verproxy.proxy.caller import Caller, EnumCaller, StaticCaller
from verproxy.proxy.interface import Handler, build_interface_proxy
from verproxy.proxy.result import Result

logger = logging.getLogger(__name__)


class EnumSet(Mapping[str, EnumCaller]):
    """Read-only mapping of enum member name to EnumCaller, case-insensitive."""

    def __init__(self, members: Iterable[EnumCaller] = ()) -> None:
        self._members: dict[str, EnumCaller] = {}
        self._names: dict[str, str] = {}
        for member in members:
            name = member.member_name
            self._members[name.lower()] = member
            self._names[name.lower()] = name

    def __getitem__(self, name: str) -> EnumCaller:
        return self._members[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._members

    def __iter__(self) -> Iterator[str]:
        return iter(self._names.values())

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"EnumSet({list(self)!r})"


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class ObjectBuilder:
    """Builds Callers over types loaded from an artifact's domain.

    Parameters:
        class_name: Target class, ``"pkg.mod.Class"`` or ``"pkg.mod:Class"``.
        interface_name: Interface to implement with *handler* instead.
        package_name: Prefix joined to the class or interface name with a dot.
        params: Constructor or factory arguments (raw values, Callers, or Results).
        artifact: Where the target's library lives.
        version_info: Provenance override (default: the artifact's).
        factory_method: Static member producing the instance.
        handler: ``handler(proxy, name, args)`` backing an interface proxy.
        descriptors: Capabilities invoked in order after construction.
        data: Named values pre-bound on the built caller.
        static_object: Build a caller with no instance.
        push_domain: Keep the target's domain ambient while loading,
            constructing, and running *descriptors*.
        registry: Domain registry (default: the process-wide one).
    """

    def __init__(
        self,
        class_name: str | None = None,
        *,
        interface_name: str | None = None,
        package_name: str | None = None,
        params: Iterable[Any] = (),
        artifact: Artifact | None = None,
        version_info: VersionInfo | None = None,
        factory_method: str | None = None,
        handler: Handler | None = None,
        descriptors: Iterable[Capability] = (),
        data: Mapping[str, Any] | None = None,
        static_object: bool = False,
        push_domain: bool = False,
        registry: DomainRegistry | None = None,
    ) -> None:
        self._class_name = None if _blank(class_name) else class_name
        self._interface_name = None if _blank(interface_name) else interface_name
        self.package_name = package_name
        self.params: tuple[Any, ...] = tuple(params)
        self.artifact = artifact
        self._version_info = version_info
        self.factory_method = factory_method
        self.handler = handler
        self.descriptors: list[Capability] = list(descriptors)
        self._data: dict[str, Any] = dict(data or {})
        self.static_object = static_object
        self.push_domain = push_domain
        self.registry = registry
        self.descriptor_results: list[Result] = []

    @classmethod
    def copy_of(cls, builder: ObjectBuilder) -> ObjectBuilder:
        """New builder for the same target and artifact.

        Arguments, descriptors, data, and the static flag are not copied.
        """
        return cls(
            builder.class_name,
            interface_name=builder.interface_name,
            package_name=builder.package_name,
            artifact=builder.artifact,
            version_info=builder._version_info,
            factory_method=builder.factory_method,
            handler=builder.handler,
            push_domain=builder.push_domain,
            registry=builder.registry,
        )

    # ------------------------------------------------------------------
    # Target name
    # ------------------------------------------------------------------

    @property
    def class_name(self) -> str | None:
        return self._class_name

    @class_name.setter
    def class_name(self, value: str | None) -> None:
        if _blank(value):
            self._class_name = None
            return
        self._class_name = value
        self._interface_name = None

    @property
    def interface_name(self) -> str | None:
        return self._interface_name

    @interface_name.setter
    def interface_name(self, value: str | None) -> None:
        if _blank(value):
            self._interface_name = None
            return
        self._interface_name = value
        self._class_name = None

    @property
    def data(self) -> dict[str, Result]:
        """Pre-bound data, every value wrapped as a Result."""
        return {
            key: value
            if isinstance(value, Result)
            else Result(Capability.method(key), value, version_info=self.version_info)
            for key, value in self._data.items()
        }

    @data.setter
    def data(self, value: Mapping[str, Any] | None) -> None:
        self._data = dict(value or {})

    # ------------------------------------------------------------------
    # Provenance
    # ------------------------------------------------------------------

    @property
    def version_info(self) -> VersionInfo:
        if self._version_info is not None:
            return self._version_info
        if self.artifact is not None:
            return self.artifact.version_info
        return UNKNOWN_VERSION

    @version_info.setter
    def version_info(self, value: VersionInfo | None) -> None:
        self._version_info = value

    @property
    def name(self) -> str:
        return self._class_name or self._interface_name or UNKNOWN

    @property
    def label(self) -> str:
        return self.version_info.label

    @property
    def version(self) -> str:
        return self.version_info.version

    @property
    def path(self) -> str:
        return self.version_info.path

    def resolve_class_name(self) -> str:
        """Qualified target name: package prefix plus class or interface name.

        Raises:
            ConfigurationError: Both or neither of class and interface name are set.
        """
        if self._class_name and self._interface_name:
            msg = (
                "Cannot resolve class name. Cannot have class name "
                f"{self._class_name} and interface {self._interface_name} defined at the same time"
            )
            raise ConfigurationError(self.name, self.label, msg)
        target = self._class_name or self._interface_name
        if _blank(target):
            raise ConfigurationError(self.name, self.label, "Class name cannot be blank")
        if self.package_name:
            return f"{self.package_name}.{target}"
        return target  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _domain(self) -> Domain:
        if self.artifact is None:
            raise ConfigurationError(self.name, self.label, "Artifact cannot be null")
        if self.version_info.is_unknown:
            raise ConfigurationError(self.name, self.label, "Lib version info cannot be null or unknown")
        registry = self.registry if self.registry is not None else get_registry()
        return registry.get(self.artifact)

    def _load(self, domain: Domain, qualified_name: str) -> type:
        logger.debug("Loading class %s from %s", qualified_name, domain.name)
        try:
            return domain.load_type(qualified_name)
        except (LookupError, ImportError) as exc:
            raise ResolutionError(self.name, self.label, f"Class {qualified_name} not found") from exc

    def load_type(self) -> type:
        """Load the target type from the artifact's domain.

        Raises:
            ConfigurationError: The builder is misconfigured.
            ResolutionError: The type is not found in the domain.
        """
        qualified_name = self.resolve_class_name()
        return self._load(self._domain(), qualified_name)

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def build(self) -> Caller:
        """Construct the target and return a Caller bound to it."""
        qualified_name = self.resolve_class_name()
        domain = self._domain()
        with activate(domain) if self.push_domain else nullcontext():
            target_type = self._load(domain, qualified_name)
            try:
                if self._interface_name:
                    caller = self._build_interface(target_type)
                elif self.factory_method:
                    caller = self._build_from_factory(target_type)
                elif self.static_object:
                    caller = StaticCaller(target_type, self.artifact, self.data)
                else:
                    caller = self._build_instance(target_type)
            except ProxyError:
                raise
            except Exception as exc:
                raise ProxyError.of(
                    self, f"Failed to create new instance of the class: {qualified_name}"
                ) from exc
            return self._setup(caller, target_type)

    def _build_interface(self, target_type: type) -> Caller:
        if self.handler is None:
            raise ConfigurationError(
                self.name,
                self.label,
                f"Cannot create proxy class {target_type.__qualname__}. Handler is null",
            )
        logger.debug("Build proxy interface %s", target_type.__qualname__)
        proxy = build_interface_proxy(target_type, self.handler)
        return Caller(proxy, None, self.artifact, self.data)

    def _build_from_factory(self, target_type: type) -> Caller:
        logger.debug(
            "Building class %s from factory method %s", target_type.__qualname__, self.factory_method
        )
        factory = Capability.build(self.factory_method, params=self.params, static=True)  # type: ignore[arg-type]
        produced = StaticCaller(target_type, self.artifact).call(factory)
        return Caller(produced.value, None, self.artifact, self.data)

    def _build_instance(self, target_type: type) -> Caller:
        if self.params:
            logger.debug(
                "Calling constructor for class %s with params %s",
                target_type.__qualname__,
                ",".join(repr(param) for param in self.params),
            )
        else:
            logger.debug("Calling empty constructor for class %s", target_type.__qualname__)
        try:
            constructor = resolution.find_constructor(target_type, infer_signature(self.params))
        except LookupError as exc:
            raise ResolutionError(self.name, self.label, str(exc)) from exc
        instance = constructor.invoke(None, unwrap_values(self.params))
        return Caller(instance, target_type, self.artifact, self.data)

    def _setup(self, caller: Caller, target_type: type) -> Caller:
        self.descriptor_results = []
        if not self.descriptors:
            return caller
        logger.debug("Call setters on target %s", target_type.__qualname__)
        results = []
        for descriptor in self.descriptors:
            try:
                results.append(caller.call(descriptor))
            except Exception as exc:
                raise ProxyError(
                    descriptor.name,
                    descriptor.label,
                    f"Failed to call method on object {target_type.__qualname__}",
                ) from exc
        self.descriptor_results = results
        return caller

    def build_enum(self) -> EnumSet:
        """Load an enumeration type and wrap each member as an EnumCaller.

        Raises:
            ResolutionError: The target type is not an enumeration.
        """
        target_type = self.load_type()
        logger.debug("Loading enum %s", target_type.__qualname__)
        try:
            members = list(target_type)  # type: ignore[call-overload]
        except TypeError as exc:
            raise ResolutionError(
                self.name, self.label, f"{target_type.__qualname__} is not an enumeration"
            ) from exc
        return EnumSet(EnumCaller(member, target_type, self.artifact) for member in members)

    def __repr__(self) -> str:
        return f"ObjectBuilder(name={self.name!r}, label={self.label!r}, version={self.version!r})"
