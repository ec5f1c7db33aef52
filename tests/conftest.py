"""Shared pytest fixtures and test helpers for verproxy tests.

Test libraries are real zip archives laid out the way verproxy expects
(``<root>/<label>/<version>/<label>-<version>.zip``), so every test drives
the actual import machinery.
"""

from __future__ import annotations

import logging
import zipfile
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from verproxy.infrastructure.artifacts import DirArtifact
from verproxy.infrastructure.registry import DomainRegistry

LIB_NAME = "testlib"

_INIT_SRC = 'VERSION = "{version}"\n'

_LIB_CLASS_SRC = '''\
from __future__ import annotations

import ctypes
from enum import Enum
from pathlib import Path

from . import VERSION


class Color(Enum):
    RED = 1
    GREEN = 2
    BLUE = 3


class Label:
    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return f"<{self.text}>"


class LibClass:
    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix
        self.values: list[int] = []

    def get_lib_version(self) -> str:
        return VERSION

    def add(self, a: int, b: int) -> int:
        return a + b

    def scale(self, factor: ctypes.c_double) -> float:
        return factor.value * 2

    def concat(self, left: str, right: str) -> str:
        return self.prefix + left + right

    def set_value(self, value: int) -> None:
        self.values.append(value)

    def get_values(self) -> list[int]:
        return list(self.values)

    def get_labels(self) -> dict:
        return {Label("k"): Label("v")}

    def get_color(self, name: str) -> Color:
        return Color[name]

    def is_ready(self) -> bool:
        return True

    def get_home(self) -> Path:
        return Path("lib-home")

    def nothing(self) -> None:
        return None

    def fail(self) -> None:
        raise RuntimeError("boom")

    def ambient_name(self) -> str | None:
        from verproxy.infrastructure.loading import current_domain

        domain = current_domain()
        return domain.name if domain is not None else None

    @staticmethod
    def create(prefix: str) -> LibClass:
        return LibClass(prefix)

    @classmethod
    def default(cls) -> LibClass:
        return cls("default:")

    @staticmethod
    def static_version() -> str:
        return VERSION


class Listener:
    def on_event(self, name: str) -> None:
        raise NotImplementedError

    def on_count(self, count: int) -> int:
        raise NotImplementedError


class Notifier:
    def __init__(self, listener: Listener) -> None:
        self.listener = listener

    def fire(self, name: str) -> None:
        self.listener.on_event(name)

    def count(self, value: int) -> int:
        return self.listener.on_count(value)
'''


def write_library(root: Path, version: str, name: str = LIB_NAME) -> Path:
    """Write ``root/name/version/name-version.zip`` and return its version directory."""
    version_dir = root / name / version
    version_dir.mkdir(parents=True, exist_ok=True)
    archive = version_dir / f"{name}-{version}.zip"
    with zipfile.ZipFile(archive, "w") as bundle:
        bundle.writestr(f"{name}/__init__.py", _INIT_SRC.format(version=version))
        bundle.writestr(f"{name}/lib_class.py", _LIB_CLASS_SRC)
    return version_dir


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def lib_root(tmp_path: Path) -> Path:
    """Library root holding testlib 1.0 and 2.0."""
    root = tmp_path / "libs"
    write_library(root, "1.0")
    write_library(root, "2.0")
    return root


@pytest.fixture
def artifact(lib_root: Path) -> DirArtifact:
    """Directory artifact for testlib 1.0."""
    return DirArtifact.from_version_dir(lib_root / LIB_NAME / "1.0")


@pytest.fixture
def artifact_v2(lib_root: Path) -> DirArtifact:
    """Directory artifact for testlib 2.0."""
    return DirArtifact.from_version_dir(lib_root / LIB_NAME / "2.0")


@pytest.fixture
def registry() -> DomainRegistry:
    """Fresh registry, so domains never leak between tests."""
    return DomainRegistry()


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo logger changes made by configure_logging() in CLI tests."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    proxy_logger = logging.getLogger("verproxy")
    proxy_level = proxy_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    proxy_logger.setLevel(proxy_level)
