"""Tests for Result projections, equality, and re-runs."""

from __future__ import annotations

import ctypes
from decimal import Decimal
from pathlib import Path

import pytest

from verproxy.domain.capability import Capability
from verproxy.domain.versions import UNKNOWN_VERSION, VersionInfo
from verproxy.infrastructure.artifacts import DirArtifact
from verproxy.infrastructure.registry import DomainRegistry
from verproxy.proxy.caller import Caller
from verproxy.proxy.result import Result


@pytest.fixture
def caller(artifact: DirArtifact, registry: DomainRegistry) -> Caller:
    lib_class = registry.get(artifact).load_type("testlib.lib_class.LibClass")
    return Caller(lib_class(), lib_class, artifact)


class Collector:
    def collect(self, *items: int) -> tuple[int, ...]:
        return items


def _raw(value: object) -> Result:
    return Result(None, value)


class TestProvenance:
    def test_from_caller(self, caller: Caller) -> None:
        result = caller.call("add", 1, 2)
        assert result.label == "testlib"
        assert result.version == "1.0"
        assert result.artifact is caller.artifact

    def test_explicit_version_info(self) -> None:
        info = VersionInfo("mylib", "9.9")
        assert Result(None, 1, version_info=info).version_info is info

    def test_recovered_from_value(self, caller: Caller) -> None:
        labels = caller.call("get_labels").value
        key = next(iter(labels))
        assert _raw(key).version == "1.0"

    def test_host_value_is_unknown(self) -> None:
        assert _raw("text").version_info == UNKNOWN_VERSION
        assert _raw("text").artifact is None


class TestProjections:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (7, 7),
            (7.9, 7),
            (ctypes.c_int(5), 5),
            (Decimal("7"), 7),
            (Decimal("-2.9"), -2),
            (Decimal("NaN"), 0),
            (True, 0),
            ("7", 0),
            (None, 0),
            (float("nan"), 0),
            (float("inf"), 0),
        ],
    )
    def test_as_long(self, value: object, expected: int) -> None:
        assert _raw(value).as_long() == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(True, True), (False, False), (ctypes.c_bool(True), True), (1, False), (None, False)],
    )
    def test_as_bool(self, value: object, expected: bool) -> None:
        assert _raw(value).as_bool() is expected

    def test_as_string(self) -> None:
        assert _raw(None).as_string() == ""
        assert _raw(12).as_string() == "12"

    def test_as_file(self, caller: Caller) -> None:
        assert caller.call("get_home").as_file() == Path("lib-home")
        assert _raw("lib-home").as_file() == Path(".")

    def test_as_map_uses_value_strings(self, caller: Caller) -> None:
        assert caller.call("get_labels").as_map() == {"<k>": "<v>"}
        assert _raw([1, 2]).as_map() == {}

    def test_as_list(self, caller: Caller) -> None:
        caller.call("set_value", 1)
        caller.call("set_value", 2)
        items = caller.call("get_values").as_list()
        assert [item.see() for item in items] == [1, 2]
        assert all(item.artifact is caller.artifact for item in items)

    @pytest.mark.parametrize("value", [None, 3, "abc", b"abc", {"a": 1}])
    def test_as_list_non_sequences(self, value: object) -> None:
        assert _raw(value).as_list() == []

    def test_as_enum_null(self) -> None:
        enum = _raw(None).as_enum()
        assert enum.is_null
        assert enum.ordinal() == -1

    def test_as_proxy(self, caller: Caller) -> None:
        proxy = caller.call("create", "p:").as_proxy()
        assert proxy.call("concat", "a", "b").value == "p:ab"

    def test_bool_outcome(self, caller: Caller) -> None:
        assert caller.call("is_ready").as_bool() is True

    def test_none_outcome(self, caller: Caller) -> None:
        result = caller.call("nothing")
        assert result.is_null
        assert result.as_long() == 0
        assert result.as_string() == ""


class TestSameAs:
    def test_both_null(self) -> None:
        assert _raw(None).same_as(None)
        assert _raw(None).same_as(_raw(None))

    def test_one_null(self) -> None:
        assert not _raw(None).same_as(1)
        assert not _raw(1).same_as(None)

    def test_against_caller_and_result(self, caller: Caller) -> None:
        version = caller.call("get_lib_version")
        assert version.same_as("1.0")
        assert version.same_as(caller.call("static_version"))
        assert version.same_as(Caller("1.0"))
        assert not version.same_as("2.0")


class TestRerun:
    def test_rerun_with_new_arguments(self, caller: Caller) -> None:
        first = caller.call("add", 1, 2)
        second = first.rerun(5, 6)
        assert first.value == 3
        assert second.value == 11
        assert second is not first
        assert second.capability == first.capability

    def test_rerun_with_no_arguments(self) -> None:
        first = Caller(Collector()).call("collect", 1, 2)
        assert first.value == (1, 2)
        assert first.rerun().value == ()
        assert first.rerun(3).value == (3,)

    def test_rerun_without_origin(self) -> None:
        assert _raw(1).rerun(2).is_null


class TestToString:
    def test_none(self) -> None:
        assert Result.to_string(None) == ""

    def test_uses_object_str(self, caller: Caller) -> None:
        label = next(iter(caller.call("get_labels").value))
        assert Result.to_string(label) == "<k>"
        assert Result.to_string(5) == "5"

    def test_capability_recorded(self) -> None:
        assert Result(Capability.method("x"), 1).capability == Capability.method("x")
