"""Path classification, version extraction, and path formatting.

Pure functions, no shared state. A versioned library lives under
``<root>/<label>/<version>/``; these helpers recover the label and the
version from any path inside that layout and render storage paths for it.
"""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path

UNKNOWN = "unknown"

# Version-like directory names: "1.0.3", "2-1", "10".
_VERSION_SPLITTER = re.compile(r"[.\-]")


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def extension(name: str) -> str:
    """Return the text after the last ``.`` in *name*, or ``""``."""
    _, dot, ext = name.rpartition(".")
    return ext if dot else ""


def _looks_like_directory(name: str) -> bool:
    segments = _VERSION_SPLITTER.split(name)[:3]
    if all(segment.isdigit() for segment in segments):
        return True
    # Special folders that start with a period, like .ssh
    if name.startswith(".") and name.count(".") == 1:
        return True
    return extension(name) == ""


def is_directory_like(path: str | os.PathLike[str] | None) -> bool:
    """Classify *path* as a directory-like segment.

    Existing paths answer from the filesystem. Otherwise digits-only
    dot/dash-separated names, dot-files, and extensionless names count as
    directories.
    """
    if path is None:
        return False
    candidate = Path(path)
    if candidate.exists():
        return candidate.is_dir()
    return _looks_like_directory(candidate.name)


def get_version(path: str | os.PathLike[str] | None) -> str:
    """Extract the version label carried by *path*.

    Directory-like paths are their own version (``libs/mylib/1.0`` → ``1.0``).
    Files with a numeric extension keep their name; any other file takes the
    name of its parent directory (``libs/mylib/1.0/mylib.zip`` → ``1.0``).
    """
    if path is None:
        return ""
    if isinstance(path, str) and _is_blank(path):
        return path

    candidate = Path(path).absolute()
    if is_directory_like(candidate):
        return candidate.name

    ext = extension(candidate.name)
    if ext and ext.isdigit():
        return candidate.name
    return candidate.parent.name


def join_path(label: str | None, version: str | None) -> str:
    """Join *label* and *version* with the platform separator."""
    if _is_blank(label):
        return UNKNOWN
    if _is_blank(version):
        return label  # type: ignore[return-value]
    return f"{label}{os.sep}{version}"


def normalize_to_unix(path: str) -> str:
    """Normalize *path* and force forward slashes, keeping a trailing slash."""
    unix = path.replace("\\", "/")
    trailing = unix.endswith("/")
    normalized = posixpath.normpath(unix)
    if trailing and not normalized.endswith("/"):
        normalized += "/"
    return normalized


def archive_path(label: str | None, version: str | None) -> str:
    """Entry prefix of a versioned library inside an archive (``label/version``)."""
    if _is_blank(label):
        return UNKNOWN
    if _is_blank(version):
        return label  # type: ignore[return-value]
    return f"{label}/{version}"


def s3_path(label: str | None, version: str | None, name: str | None = None) -> str:
    """Remote-storage key prefix: ``engine/<label>[/<version>/[<name>/]]``."""
    if _is_blank(label):
        return UNKNOWN
    if _is_blank(version):
        return normalize_to_unix(f"engine/{label}")
    if _is_blank(name) or name.lower() == UNKNOWN:  # type: ignore[union-attr]
        return normalize_to_unix(f"engine/{label}/{version}/")
    return normalize_to_unix(f"engine/{label}/{version}/{name}/")


def version_with_default(version: str | None, default: str) -> str:
    """Return *version* unless it is blank, ``"null"``, or ``"unknown"``."""
    if version is None or version.lower() in ("null", UNKNOWN) or _is_blank(version):
        return default
    return version
