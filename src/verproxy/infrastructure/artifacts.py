"""Artifacts — where a versioned library lives and how to enumerate it.

An artifact names one version of an external library and knows how to list
its binary locations (importable zip archives). Directory artifacts scan
the filesystem; archive artifacts extract entries from the archive the host
runs from. Either may point at a fallback artifact tried when it yields
nothing.

INVARIANT: Enumeration never raises. Missing directories, empty listings,
and I/O errors are logged and reported as zero binaries.
"""

from __future__ import annotations

import logging
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from verproxy.domain.paths import UNKNOWN, archive_path, extension, get_version, normalize_to_unix
from verproxy.domain.versions import VersionInfo
from verproxy.infrastructure.archive import enclosing_archive, extract_from_archive

if TYPE_CHECKING:
    from verproxy.config.settings import ProxySettings

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: frozenset[str] = frozenset({"zip"})

# Called as callback(artifact_name, origin, destination) after each extraction.
ExtractCallback = Callable[[str, str, str], None]


class SourceType(StrEnum):
    """Where an artifact's binaries come from."""

    DIR = "dir"
    ARCHIVE = "archive"
    UNKNOWN = "unknown"


def is_keep_artifact(root: str, name: str, path: str, extensions: Iterable[str]) -> bool:
    """Default keep-predicate for candidate binary paths.

    Keeps *path* when it lies under ``root/name`` (case-insensitive) and has
    one of *extensions*, or when it lies under ``root/runtime/``.
    """
    test_input = normalize_to_unix(path).lower()
    lib_path = "/".join(part for part in (root, name) if part and part != UNKNOWN)
    test_path = normalize_to_unix(lib_path).lower() if lib_path else ""
    test_runtime = normalize_to_unix(f"{root}/runtime/" if root else "runtime/").lower()

    logger.debug("Testing input %s for %s or runtime %s", test_input, test_path, test_runtime)
    ext = extension(path).lower()
    return (test_path in test_input and ext in extensions) or test_runtime in test_input


def _normalize_extensions(extensions: Iterable[str] | None) -> frozenset[str]:
    if not extensions:
        return DEFAULT_EXTENSIONS
    return frozenset(ext.lower().lstrip(".") for ext in extensions)


def _or_unknown(value: str | None) -> str:
    return value if value and value.strip() else UNKNOWN


@dataclass(frozen=True)
class Artifact(ABC):
    """A named, versioned library and its binary-location policy.

    Attributes:
        root: Directory (absolute, or relative to *base*) holding libraries.
        name: Library name under *root*; also the loading-domain identity.
        version: Version label.
        label: Display label, usually the library name without version.
        extensions: Accepted binary extensions (default ``{"zip"}``).
        fallback: Artifact tried when this one enumerates nothing.
        predicate: Keep-predicate over absolute paths (default
            :func:`is_keep_artifact`).
        destination: Extraction directory for archive-backed artifacts.
        base: Anchor for a relative *root* (default: CWD at enumeration time).
        include: Host modules or classes whose own import root is added to
            the domain (``"pkg.mod"`` or ``"pkg.mod:Class"``).
        uses_system_loader: Fall back to host imports for names the domain
            cannot resolve.
        temp: Delete extracted files at interpreter exit.
        callback: Notified after each archive entry is extracted.
    """

    root: str = ""
    name: str = UNKNOWN
    version: str = UNKNOWN
    label: str = UNKNOWN
    extensions: frozenset[str] = DEFAULT_EXTENSIONS
    fallback: Artifact | None = None
    predicate: Callable[[str], bool] | None = field(default=None, compare=False)
    destination: Path | None = None
    base: Path | None = None
    include: tuple[str, ...] = ()
    uses_system_loader: bool = True
    temp: bool = True
    callback: ExtractCallback | None = field(default=None, compare=False, repr=False)

    source_type: ClassVar[SourceType] = SourceType.UNKNOWN

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", _or_unknown(self.name))
        object.__setattr__(self, "version", _or_unknown(self.version))
        object.__setattr__(self, "label", _or_unknown(self.label))
        object.__setattr__(self, "extensions", _normalize_extensions(self.extensions))
        object.__setattr__(self, "include", tuple(self.include))

    @abstractmethod
    def enumerate_binaries(self) -> list[Path]:
        """Return the ordered binary locations of this artifact, or ``[]``."""

    @property
    def has_fallback(self) -> bool:
        return self.fallback is not None

    @property
    def version_info(self) -> VersionInfo:
        return VersionInfo(label=self.label, version=self.version, name=self.name)

    @property
    def path(self) -> str:
        """``root/name``, or ``root`` when the name is unknown."""
        if self.name != UNKNOWN:
            return f"{self.root}/{self.name}" if self.root else self.name
        return self.root

    def to_path(self) -> Path:
        """Installed layout: ``base/root/name``."""
        return (self.base or Path.cwd()) / self.path

    def to_parent_path(self) -> Path:
        """In-place build layout: the same path beside *base* instead of under it."""
        return (self.base or Path.cwd()).parent / self.path

    def keep(self, path: str) -> bool:
        if self.predicate is not None:
            return self.predicate(path)
        return is_keep_artifact(self.root, self.name, path, self.extensions)

    def destination_for(self, entry: str) -> Path:
        """Directory that extracted copies of *entry* are written to."""
        if self.destination is not None:
            return self.destination
        return Path(tempfile.gettempdir()) / "verproxy" / archive_path(self.label, self.version)


@dataclass(frozen=True)
class UnknownArtifact(Artifact):
    """Placeholder artifact that never has binaries."""

    def enumerate_binaries(self) -> list[Path]:
        return []


UNKNOWN_ARTIFACT: Artifact = UnknownArtifact(root="/")


@dataclass(frozen=True)
class DirArtifact(Artifact):
    """Artifact whose binaries sit in a directory on disk."""

    source_type: ClassVar[SourceType] = SourceType.DIR

    @classmethod
    def from_version_dir(cls, directory: str | Path, **kwargs: object) -> DirArtifact:
        """Artifact for a ``<root>/<label>/<version>`` directory.

        The name becomes ``label/version`` so every version gets its own
        loading domain.
        """
        path = Path(directory).absolute()
        label = path.parent.name
        version = get_version(path)
        return cls(
            root=str(path.parent.parent),
            name=f"{label}/{path.name}",
            version=version,
            label=label,
            **kwargs,  # type: ignore[arg-type]
        )

    @classmethod
    def from_settings(cls, settings: ProxySettings, name: str, version: str) -> DirArtifact:
        """Artifact for ``<lib_root>/<name>/<version>`` using configured defaults."""
        loader = settings.loader
        return cls(
            root=str(settings.lib_root),
            name=f"{name}/{version}",
            version=version,
            label=name,
            extensions=frozenset(loader.extensions),
            destination=loader.extract_dir,
            uses_system_loader=loader.use_system_loader,
            temp=loader.temp,
        )

    def enumerate_binaries(self) -> list[Path]:
        logger.debug("Loading DIR artifact %s", self)
        lib_dir = self.to_path()
        parent_dir = self.to_parent_path()

        if not lib_dir.is_dir() and not parent_dir.exists():
            logger.warning(
                "Artifact '%s' is not found at %s. Application may not function properly",
                self.name,
                lib_dir,
            )
            return []

        try:
            candidates: list[Path] = []
            for directory in (lib_dir, parent_dir):
                if directory.is_dir():
                    candidates.extend(sorted(directory.iterdir()))
            if not candidates:
                logger.warning(
                    "No files found in %s. Application may not function properly",
                    lib_dir,
                )
                return []

            binaries: list[Path] = []
            seen: set[Path] = set()
            for candidate in candidates:
                resolved = candidate.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                if not candidate.is_file():
                    continue
                if extension(candidate.name).lower() not in self.extensions:
                    continue
                if not self.keep(str(candidate.absolute())):
                    continue
                logger.info("Adding file %s", candidate.absolute())
                binaries.append(candidate.absolute())
            return binaries
        except OSError:
            logger.warning(
                "Failed to load artifacts from dir %s. Application may not function properly",
                lib_dir,
                exc_info=True,
            )
            return []


@dataclass(frozen=True)
class ArchiveArtifact(Artifact):
    """Artifact whose binaries are entries of the archive the host runs from.

    Entry names are matched relative to the archive root, so *root* is an
    in-archive prefix such as ``"libs"``.
    """

    archive: Path | None = None

    source_type: ClassVar[SourceType] = SourceType.ARCHIVE

    def enumerate_binaries(self) -> list[Path]:
        archive = self.archive if self.archive is not None else enclosing_archive()
        return extract_from_archive(self, archive, self.keep)
