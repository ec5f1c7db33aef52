"""verproxy — call into several versions of one library from a single process.

Each library version is loaded into its own import domain; every call is
routed by name through a Caller and comes back as a Result.
"""

from __future__ import annotations

__version__ = "0.1.0"

from verproxy.domain.capability import Capability
from verproxy.domain.versions import VersionInfo
from verproxy.errors import ConfigurationError, ProxyError, ResolutionError
from verproxy.infrastructure.artifacts import UNKNOWN_ARTIFACT, ArchiveArtifact, Artifact, DirArtifact
from verproxy.infrastructure.loading import activate, current_domain
from verproxy.infrastructure.registry import DomainRegistry, get_registry
from verproxy.proxy.builder import EnumSet, ObjectBuilder
from verproxy.proxy.caller import Caller, EnumCaller, StaticCaller
from verproxy.proxy.interface import InterfaceHandler, build_interface_proxy
from verproxy.proxy.result import Result

__all__ = [
    "UNKNOWN_ARTIFACT",
    "ArchiveArtifact",
    "Artifact",
    "Caller",
    "Capability",
    "ConfigurationError",
    "DirArtifact",
    "DomainRegistry",
    "EnumCaller",
    "EnumSet",
    "InterfaceHandler",
    "ObjectBuilder",
    "ProxyError",
    "ResolutionError",
    "Result",
    "StaticCaller",
    "VersionInfo",
    "__version__",
    "activate",
    "build_interface_proxy",
    "current_domain",
    "get_registry",
]
