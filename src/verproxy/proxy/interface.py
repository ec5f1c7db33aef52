"""Dynamic-interface proxies — an interface type implemented by a handler.

:func:`build_interface_proxy` generates a subclass of an interface type
(an ABC, a Protocol, or a plain class) in which every public callable
forwards to ``handler(proxy, name, args)``. The generated instance is an
``isinstance`` match for the interface, so it can be handed back to library
code loaded from a domain as a listener or callback.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any

from verproxy.domain.versions import UNKNOWN_VERSION, VersionInfo

logger = logging.getLogger(__name__)

# Called as handler(proxy, name, args) for every forwarded call.
Handler = Callable[[Any, str, tuple[Any, ...]], Any]


def _forwarded_names(interface: type) -> list[str]:
    names: set[str] = set(getattr(interface, "__abstractmethods__", ()))
    for klass in interface.__mro__:
        if klass is object:
            continue
        for name, raw in vars(klass).items():
            if name.startswith("_"):
                continue
            if isinstance(raw, staticmethod | classmethod | property):
                continue
            if inspect.isfunction(raw):
                names.add(name)
    return sorted(names)


def _forwarder(name: str) -> Callable[..., Any]:
    def forward(self: Any, *args: Any) -> Any:
        return self.__verproxy_handler__(self, name, args)

    forward.__name__ = name
    forward.__qualname__ = name
    return forward


def build_interface_proxy(interface: type, handler: Handler) -> Any:
    """Instantiate a generated implementation of *interface* backed by *handler*.

    Raises:
        TypeError: *interface* is not a class or cannot be subclassed.
    """
    if not inspect.isclass(interface):
        msg = f"Cannot build a proxy over {interface!r}: not a class"
        raise TypeError(msg)

    namespace: dict[str, Any] = {name: _forwarder(name) for name in _forwarded_names(interface)}
    namespace["__verproxy_handler__"] = staticmethod(handler)
    namespace["__module__"] = interface.__module__
    namespace["__init__"] = lambda self: None
    if getattr(interface, "_is_protocol", False):
        # Protocol subclasses are protocols too unless they say otherwise.
        namespace["_is_protocol"] = False

    proxy_type = type(f"{interface.__name__}Proxy", (interface,), namespace)
    logger.debug("Built proxy type %s forwarding %s", proxy_type.__qualname__, sorted(namespace))
    return proxy_type()


class InterfaceHandler:
    """Base class for handlers of dynamic-interface proxies.

    Answers identity requests itself (``hash_code`` and ``equal``, as
    issued by listener-style interfaces) from the handler's own identity;
    every other call goes to :meth:`process`.

    Parameters:
        id: Identifier of this handler instance.
        version_info: Provenance of the library the handler listens to.
        callback: Optional callable the handler reports to.
    """

    def __init__(
        self,
        id: str = "",
        version_info: VersionInfo = UNKNOWN_VERSION,
        callback: Callable[..., Any] | None = None,
    ) -> None:
        self.id = id
        self.version_info = version_info
        self.callback = callback

    def __call__(self, proxy: Any, name: str, args: tuple[Any, ...]) -> Any:
        if name in ("hash_code", "hashCode"):
            return hash((self.callback, self.id, self.version_info))
        if name in ("equal", "equals") and len(args) == 2:
            return args[0] == args[1]
        return self.process(proxy, name, args)

    def process(self, proxy: Any, name: str, args: tuple[Any, ...]) -> Any:
        """Handle one forwarded call. Subclasses override this."""
        raise NotImplementedError(name)
