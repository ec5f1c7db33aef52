"""Tests for extracting library archives out of the host archive."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import pytest

from verproxy.infrastructure.archive import enclosing_archive, extract_from_archive
from verproxy.infrastructure.artifacts import ArchiveArtifact, SourceType


@pytest.fixture
def host_archive(lib_root: Path, tmp_path: Path) -> Path:
    """A zipapp-style archive carrying libs/testlib/1.0/testlib-1.0.zip."""
    app = tmp_path / "app.pyz"
    with zipfile.ZipFile(app, "w") as bundle:
        bundle.writestr("__main__.py", "print('host')\n")
        library = lib_root / "testlib" / "1.0" / "testlib-1.0.zip"
        bundle.write(library, "libs/testlib/1.0/testlib-1.0.zip")
        bundle.writestr("libs/other/1.0/other-1.0.zip", b"not a library")
    return app


def _artifact(archive: Path | None, destination: Path, **kwargs: object) -> ArchiveArtifact:
    return ArchiveArtifact(
        root="libs",
        name="testlib/1.0",
        version="1.0",
        label="testlib",
        archive=archive,
        destination=destination,
        temp=False,
        **kwargs,  # type: ignore[arg-type]
    )


class TestArchiveArtifact:
    def test_source_type(self, tmp_path: Path) -> None:
        assert _artifact(None, tmp_path).source_type is SourceType.ARCHIVE

    def test_extracts_matching_entries(self, host_archive: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        binaries = _artifact(host_archive, out).enumerate_binaries()
        assert binaries == [out / "testlib-1.0.zip"]
        assert zipfile.is_zipfile(binaries[0])

    def test_existing_file_is_reused(
        self, host_archive: Path, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        out = tmp_path / "out"
        out.mkdir()
        existing = out / "testlib-1.0.zip"
        existing.write_bytes(b"cached")
        caplog.set_level(logging.INFO, logger="verproxy.infrastructure.archive")

        assert _artifact(host_archive, out).enumerate_binaries() == [existing]
        assert existing.read_bytes() == b"cached"
        assert "is loaded" in caplog.text

    def test_callback_notified_per_extraction(self, host_archive: Path, tmp_path: Path) -> None:
        seen: list[tuple[str, str, str]] = []
        artifact = _artifact(
            host_archive, tmp_path / "out", callback=lambda *args: seen.append(args)
        )
        artifact.enumerate_binaries()
        artifact.enumerate_binaries()
        assert len(seen) == 1
        name, origin, destination = seen[0]
        assert name == "testlib/1.0"
        assert origin == "libs/testlib/1.0/testlib-1.0.zip"
        assert destination.endswith("testlib-1.0.zip")

    def test_failing_callback_is_not_fatal(self, host_archive: Path, tmp_path: Path) -> None:
        def explode(*_args: str) -> None:
            raise RuntimeError("listener down")

        artifact = _artifact(host_archive, tmp_path / "out", callback=explode)
        assert len(artifact.enumerate_binaries()) == 1

    def test_corrupt_archive_yields_nothing(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        broken = tmp_path / "broken.pyz"
        broken.write_bytes(b"definitely not a zip")
        caplog.set_level(logging.WARNING, logger="verproxy.infrastructure.archive")
        assert _artifact(broken, tmp_path / "out").enumerate_binaries() == []
        assert "Failed to load artifact" in caplog.text

    def test_not_running_from_archive(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", [str(tmp_path / "script.py")])
        assert enclosing_archive() is None
        assert _artifact(None, tmp_path / "out").enumerate_binaries() == []

    def test_enclosing_archive_detected(
        self, host_archive: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("sys.argv", [str(host_archive)])
        assert enclosing_archive() == host_archive.absolute()


class TestExtractFromArchive:
    def test_keep_predicate_applies(self, host_archive: Path, tmp_path: Path) -> None:
        artifact = _artifact(host_archive, tmp_path / "out")
        extracted = extract_from_archive(artifact, host_archive, lambda entry: "other" in entry)
        assert [path.name for path in extracted] == ["other-1.0.zip"]

    def test_no_match_creates_nothing(self, host_archive: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"
        artifact = _artifact(host_archive, out)
        assert extract_from_archive(artifact, host_archive, lambda entry: False) == []
        assert not out.exists()
