"""Archive extraction — materialise library archives packed inside the host.

When the host runs as a zipapp, versioned libraries ship as entries inside
it. Matching entries are copied to a destination directory so a loading
domain can import them from disk.

INVARIANT: Extraction is idempotent per destination file. An existing file
is reused, never rewritten.
INVARIANT: Extraction failures are warnings, never errors. Partial output
is deleted and the artifact enumerates zero binaries.
"""

from __future__ import annotations

import atexit
import contextlib
import logging
import shutil
import sys
import zipfile
from collections.abc import Callable
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from verproxy.infrastructure.artifacts import Artifact

logger = logging.getLogger(__name__)


def enclosing_archive() -> Path | None:
    """Return the zip archive the host process is running from, if any."""
    if not sys.argv or not sys.argv[0]:
        return None
    candidate = Path(sys.argv[0])
    if candidate.is_file() and zipfile.is_zipfile(candidate):
        return candidate.absolute()
    return None


def _remove_quietly(path: Path) -> None:
    with contextlib.suppress(OSError):
        if path.is_dir():
            shutil.rmtree(path, ignore_errors=True)
        else:
            path.unlink(missing_ok=True)


def delete_on_exit(path: Path) -> None:
    """Best-effort removal of *path* when the interpreter exits."""
    atexit.register(_remove_quietly, path)


def _notify(artifact: Artifact, origin: str, destination: Path) -> None:
    if artifact.callback is None:
        return
    try:
        artifact.callback(artifact.name, origin, str(destination))
    except Exception:
        logger.warning("Extraction callback failed for %s", origin, exc_info=True)


def extract_from_archive(
    artifact: Artifact,
    archive: Path | None,
    keep: Callable[[str], bool],
) -> list[Path]:
    """Extract the entries of *archive* accepted by *keep*.

    Entries land in ``artifact.destination_for(entry)``. Files that already
    exist there are reused. When ``artifact.temp`` is set, the destination and
    every extracted file are scheduled for deletion at exit.

    Returns the extracted (or reused) file paths, or ``[]`` on failure.
    """
    if archive is None:
        logger.info("Cannot load %s from an archive. Host is not running from one", artifact.name)
        return []

    logger.debug("Loading archive artifact %s from %s", artifact.name, archive)
    destination: Path | None = None
    extracted: list[Path] = []
    try:
        with zipfile.ZipFile(archive) as bundle:
            for entry in bundle.infolist():
                if entry.is_dir() or not keep(entry.filename):
                    continue
                if destination is None:
                    destination = artifact.destination_for(entry.filename)
                    destination.mkdir(parents=True, exist_ok=True)
                    if artifact.temp:
                        delete_on_exit(destination)

                target = destination / PurePosixPath(entry.filename).name
                if target.exists():
                    logger.info("Lib %s is loaded", target)
                else:
                    if artifact.temp:
                        delete_on_exit(target)
                    logger.info("Extracting lib %s", target)
                    with bundle.open(entry) as source, target.open("wb") as sink:
                        shutil.copyfileobj(source, sink)
                    _notify(artifact, entry.filename, target)
                extracted.append(target)
    except (OSError, zipfile.BadZipFile):
        if destination is not None:
            shutil.rmtree(destination, ignore_errors=True)
        logger.warning(
            "Failed to load artifact %s from archive %s. Application may not function properly",
            artifact.name,
            archive,
            exc_info=True,
        )
        return []
    return extracted
