"""Tests for ProxySettings — unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from verproxy.config.settings import ProxySettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("VERPROXY_CONFIG", raising=False)
    monkeypatch.delenv("VERPROXY_LOADER__TEMP", raising=False)


class TestProxySettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = ProxySettings.from_cli(project_root=tmp_path)
        assert settings.project_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.verbose is False
        assert settings.loader.extensions == ["zip"]
        assert settings.loader.use_system_loader is True
        assert settings.plugins.enabled is True
        assert settings.lib_root == tmp_path / "libs"
        assert settings.plugin_dir is None

    def test_frozen(self, tmp_path: Path) -> None:
        settings = ProxySettings.from_cli(project_root=tmp_path)
        with pytest.raises(Exception):
            settings.verbose = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        toml = tmp_path / "verproxy.toml"
        toml.write_text('[loader]\nlib_root = "vendor"\nextensions = [".ZIP", "whl"]\n')
        settings = ProxySettings.from_cli(project_root=tmp_path)
        assert settings.lib_root == tmp_path / "vendor"
        assert settings.loader.extensions == ["zip", "whl"]
        assert settings.loader.temp is True  # default preserved

    def test_project_root_follows_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "verproxy.toml").write_text('[plugins]\nlocal_dir = "plugins"\n')
        child = tmp_path / "a" / "b"
        child.mkdir(parents=True)
        monkeypatch.chdir(child)
        settings = ProxySettings.from_cli()
        assert settings.project_root == tmp_path.resolve()
        assert settings.plugin_dir == tmp_path.resolve() / "plugins"

    def test_empty_toml_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "verproxy.toml").write_text("")
        settings = ProxySettings.from_cli(project_root=tmp_path)
        assert settings.loader.lib_root == Path("libs")

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text("[loader]\nuse_system_loader = false\n")
        settings = ProxySettings.from_cli(config_path=str(custom), project_root=tmp_path)
        assert settings.loader.use_system_loader is False
        assert settings.config_path == custom

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "verproxy.toml").write_text("[loader\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            ProxySettings.from_cli(project_root=tmp_path)


class TestPriority:
    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = ProxySettings.from_cli(
            project_root=tmp_path, json_output=True, verbose=True, log_json=True
        )
        assert settings.json_output is True
        assert settings.verbose is True
        assert settings.log_json is True

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "verproxy.toml").write_text("[loader]\ntemp = true\nuse_system_loader = false\n")
        monkeypatch.setenv("VERPROXY_LOADER__TEMP", "false")
        settings = ProxySettings.from_cli(project_root=tmp_path)
        assert settings.loader.temp is False
        assert settings.loader.use_system_loader is False
