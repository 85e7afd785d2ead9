"""Tests for the build freshness rules."""

import os
from unittest.mock import Mock

import pytest

from lambda_workbench.core.freshness import BuildFreshnessOracle, RebuildReason
from lambda_workbench.core.manifest import FunctionConfiguration

BASE_NS = 1_700_000_000 * 10**9


def set_mtime(path, offset_seconds):
    stamp = BASE_NS + offset_seconds * 10**9
    os.utime(path, ns=(stamp, stamp))


@pytest.fixture
def function_dir(tmp_path):
    """Function directory with a manifest, a built artifact and a source file.

    Initial times: source 0s, manifest 10s, artifact 20s (fresh).
    """
    function_dir = tmp_path / "orders"
    (function_dir / "build").mkdir(parents=True)
    (function_dir / "template.yaml").write_text("Resources: {}\n")
    (function_dir / "build" / "bootstrap").write_bytes(b"\x7fELF")
    source = tmp_path / "src" / "main.go"
    source.parent.mkdir()
    source.write_text("package main\n")

    set_mtime(source, 0)
    set_mtime(function_dir / "template.yaml", 10)
    set_mtime(function_dir / "build" / "bootstrap", 20)
    return function_dir


@pytest.fixture
def source_file(function_dir):
    return function_dir.parent / "src" / "main.go"


@pytest.fixture
def oracle():
    return BuildFreshnessOracle()


class TestCheckPaths:
    def test_fresh_build(self, oracle, source_file, function_dir):
        decision = oracle.check_paths(source_file, function_dir)

        assert decision.needed is False
        assert decision.reason is RebuildReason.UP_TO_DATE

    def test_missing_source(self, oracle, function_dir):
        decision = oracle.check_paths(function_dir / "gone.go", function_dir)

        assert decision.needed is True
        assert decision.reason is RebuildReason.SOURCE_MISSING

    def test_empty_source_path(self, oracle, function_dir):
        assert oracle.check_paths("", function_dir).reason is RebuildReason.SOURCE_MISSING

    def test_missing_build_directory(self, oracle, source_file, function_dir):
        (function_dir / "build" / "bootstrap").unlink()
        (function_dir / "build").rmdir()

        decision = oracle.check_paths(source_file, function_dir)

        assert decision.needed is True
        assert decision.reason is RebuildReason.ARTIFACT_MISSING

    def test_build_path_is_a_file(self, oracle, source_file, tmp_path):
        function_dir = tmp_path / "odd"
        function_dir.mkdir()
        (function_dir / "build").write_text("not a directory")

        assert oracle.check_paths(source_file, function_dir).reason is RebuildReason.ARTIFACT_MISSING

    def test_missing_artifact(self, oracle, source_file, function_dir):
        (function_dir / "build" / "bootstrap").unlink()

        assert oracle.check_paths(source_file, function_dir).reason is RebuildReason.ARTIFACT_MISSING

    def test_manifest_newer_than_artifact(self, oracle, source_file, function_dir):
        set_mtime(function_dir / "template.yaml", 30)

        decision = oracle.check_paths(source_file, function_dir)

        assert decision.needed is True
        assert decision.reason is RebuildReason.MANIFEST_NEWER

    def test_source_newer_than_artifact(self, oracle, source_file, function_dir):
        set_mtime(source_file, 30)

        decision = oracle.check_paths(source_file, function_dir)

        assert decision.needed is True
        assert decision.reason is RebuildReason.SOURCE_NEWER

    def test_manifest_rule_checked_before_source_rule(self, oracle, source_file, function_dir):
        set_mtime(source_file, 30)
        set_mtime(function_dir / "template.yaml", 40)

        assert oracle.check_paths(source_file, function_dir).reason is RebuildReason.MANIFEST_NEWER

    def test_equal_times_are_fresh(self, oracle, source_file, function_dir):
        set_mtime(source_file, 20)
        set_mtime(function_dir / "template.yaml", 20)

        assert oracle.check_paths(source_file, function_dir).needed is False

    def test_missing_manifest_does_not_force_rebuild(self, oracle, source_file, function_dir):
        (function_dir / "template.yaml").unlink()

        assert oracle.check_paths(source_file, function_dir).needed is False

    def test_filesystem_error_means_rebuild(self, source_file, function_dir):
        oracle = BuildFreshnessOracle(stat=Mock(side_effect=PermissionError("denied")))

        decision = oracle.check_paths(source_file, function_dir)

        assert decision.needed is True
        assert decision.reason is RebuildReason.ERROR
        assert "denied" in decision.detail


class TestCheckConfiguration:
    def test_needs_rebuild_uses_configuration_paths(self, oracle, source_file, function_dir):
        config = FunctionConfiguration(
            function_name="orders",
            workspace_path=function_dir.parent,
            function_dir=function_dir,
            resource_name="OrdersFunction",
            source_file=str(source_file),
        )

        assert oracle.needs_rebuild(config) is False

        set_mtime(source_file, 30)
        assert oracle.needs_rebuild(config) is True


def test_architecture_change_triggers_rebuild(tmp_path, store, settings):
    function_dir = tmp_path / "workspace" / "orders"
    store.create_manifest(function_dir, settings)
    (function_dir / "build").mkdir()
    (function_dir / "build" / "bootstrap").write_bytes(b"\x7fELF")
    set_mtime(settings.source_file, 0)
    set_mtime(function_dir / "template.yaml", 10)
    set_mtime(function_dir / "build" / "bootstrap", 20)
    oracle = BuildFreshnessOracle()
    assert oracle.needs_rebuild(store.extract_configuration(function_dir)) is False

    document = store.load(function_dir)
    document["Resources"]["OrdersFunction"]["Properties"]["Architectures"] = ["x86_64"]
    store.save(function_dir, document)
    set_mtime(function_dir / "template.yaml", 30)

    assert oracle.needs_rebuild(store.extract_configuration(function_dir)) is True
