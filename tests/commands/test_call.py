"""Tests for the call command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from verproxy.cli import cli
from verproxy.commands.call import _parse_arg

LIB_CLASS = "testlib.lib_class.LibClass"


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("VERPROXY_CONFIG", raising=False)


def _call(cli_runner: CliRunner, lib_root: Path, *args: str) -> dict:
    result = cli_runner.invoke(cli, ["--json", "call", str(lib_root), *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestParseArg:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("1", 1), ("2.5", 2.5), ("True", True), ("'x'", "x"), ("hello", "hello"), ("a b", "a b")],
    )
    def test_literals(self, raw: str, expected: object) -> None:
        assert _parse_arg(raw) == expected


class TestCall:
    def test_calls_method(self, cli_runner: CliRunner, lib_root: Path) -> None:
        payload = _call(cli_runner, lib_root, "testlib/1.0", LIB_CLASS, "get_lib_version")
        assert payload["ok"] is True
        assert payload["data"]["result"] == "1.0"
        assert payload["data"]["label"] == "testlib"
        assert payload["data"]["version"] == "1.0"

    def test_version_option(self, cli_runner: CliRunner, lib_root: Path) -> None:
        payload = _call(
            cli_runner, lib_root, "testlib", LIB_CLASS, "get_lib_version", "--version", "2.0"
        )
        assert payload["data"]["result"] == "2.0"

    def test_arguments_parsed(self, cli_runner: CliRunner, lib_root: Path) -> None:
        payload = _call(cli_runner, lib_root, "testlib/1.0", LIB_CLASS, "add", "2", "3")
        assert payload["data"]["result"] == "5"

    def test_static_call(self, cli_runner: CliRunner, lib_root: Path) -> None:
        payload = _call(
            cli_runner, lib_root, "testlib/1.0", LIB_CLASS, "static_version", "--static"
        )
        assert payload["data"]["result"] == "1.0"

    def test_unknown_method_fails(self, cli_runner: CliRunner, lib_root: Path) -> None:
        result = cli_runner.invoke(
            cli, ["call", str(lib_root), "testlib/1.0", LIB_CLASS, "missing"]
        )
        assert result.exit_code == 1
        assert "ERROR" in result.output
        assert "missing" in result.output

    def test_unknown_class_fails(self, cli_runner: CliRunner, lib_root: Path) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "call", str(lib_root), "testlib/1.0", "testlib.lib_class.Nope", "x"]
        )
        assert result.exit_code == 1
        assert '"ok": false' in result.output
