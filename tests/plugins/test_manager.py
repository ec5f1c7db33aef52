"""Tests for PluginManager — registration, hook relay, and extract callbacks."""

from __future__ import annotations

import logging

import pluggy
import pytest

from verproxy.plugins.manager import PluginManager

hookimpl = pluggy.HookimplMarker("verproxy")


class _DummyPlugin:
    """Minimal plugin for registration tests."""

    @hookimpl
    def post_domain_build(self, artifact_name: str, locations: list[str], empty: bool) -> None:
        pass


class _ExtractRecorder:
    def __init__(self) -> None:
        self.calls: list[dict[str, str]] = []

    @hookimpl
    def post_extract(self, artifact_name: str, origin: str, destination: str) -> None:
        self.calls.append(
            {"artifact_name": artifact_name, "origin": origin, "destination": destination}
        )


class _BrokenExtract:
    @hookimpl
    def post_extract(self, artifact_name: str, origin: str, destination: str) -> None:
        raise RuntimeError("plugin down")


class TestPluginManager:
    def test_hook_relay_accessible(self) -> None:
        pm = PluginManager()
        assert hasattr(pm.hook, "post_domain_build")
        assert hasattr(pm.hook, "post_extract")

    def test_register_plugin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin(), name="dummy")
        assert "dummy" in pm.list_plugin_names()

    def test_register_plugin_default_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin())
        assert "_DummyPlugin" in pm.list_plugin_names()

    def test_unregister_plugin(self) -> None:
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin, name="dummy")
        pm.unregister(plugin)
        assert "dummy" not in pm.list_plugin_names()
        assert pm.get_plugins() == []

    def test_discover_marks_loaded(self) -> None:
        pm = PluginManager()
        assert not pm.is_loaded
        pm.discover_and_load()
        assert pm.is_loaded

    def test_hook_dispatch(self) -> None:
        pm = PluginManager()
        recorder = _ExtractRecorder()
        pm.register_plugin(recorder)
        pm.hook.post_extract(artifact_name="lib/1.0", origin="libs/a.zip", destination="/tmp/a.zip")
        assert recorder.calls[0]["origin"] == "libs/a.zip"


class TestExtractCallback:
    def test_fires_post_extract(self) -> None:
        pm = PluginManager()
        recorder = _ExtractRecorder()
        pm.register_plugin(recorder)

        pm.extract_callback()("lib/1.0", "libs/lib/1.0/a.zip", "/tmp/a.zip")

        assert recorder.calls == [
            {
                "artifact_name": "lib/1.0",
                "origin": "libs/lib/1.0/a.zip",
                "destination": "/tmp/a.zip",
            }
        ]

    def test_plugin_failure_is_a_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(_BrokenExtract())
        caplog.set_level(logging.WARNING, logger="verproxy.plugins.manager")

        pm.extract_callback()("lib/1.0", "libs/a.zip", "/tmp/a.zip")

        assert "post_extract hook failed" in caplog.text
