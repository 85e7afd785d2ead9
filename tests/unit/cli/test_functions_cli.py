"""CLI tests for configure, list, status, event and remove."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from lambda_workbench.cli.main import app
from lambda_workbench.core.manifest import ManifestStore
from lambda_workbench.core.registry import FunctionRegistry


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def source(go_source):
    return go_source.resolve()


def configure(runner, workspace, source, *extra):
    return runner.invoke(
        app, ["configure", str(source), "--workspace", str(workspace.root), *extra]
    )


class TestMainApp:
    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "Lambda Workbench CLI v" in result.stdout

    def test_no_args_shows_help(self, runner):
        result = runner.invoke(app, [])

        assert "Usage" in result.output


class TestConfigure:
    def test_configures_new_function(self, runner, workspace, source):
        result = configure(runner, workspace, source)

        assert result.exit_code == 0, result.stdout
        assert "Function Configured" in result.stdout

        function_dir = workspace.function_dir("orders")
        config = ManifestStore().extract_configuration(function_dir)
        assert config.source_file == str(source)
        assert config.event_type == "apigateway"
        assert (function_dir / "event.json").is_file()

    def test_explicit_event_type_and_name(self, runner, workspace, source):
        result = configure(runner, workspace, source, "--event-type", "sqs", "--name", "Order Queue")

        assert result.exit_code == 0, result.stdout
        config = ManifestStore().extract_configuration(workspace.function_dir("order-queue"))
        assert config.event_type == "sqs"
        event = json.loads((workspace.function_dir("order-queue") / "event.json").read_text())
        assert event["Records"][0]["eventSource"] == "aws:sqs"

    def test_reconfigure_updates_metadata(self, runner, workspace, source):
        configure(runner, workspace, source)

        result = configure(runner, workspace, source, "--event-type", "s3")

        assert result.exit_code == 0, result.stdout
        assert "Function Updated" in result.stdout
        config = ManifestStore().extract_configuration(workspace.function_dir("orders"))
        assert config.event_type == "s3"
        # the trigger written at creation is left alone
        resource = ManifestStore().load(config.function_dir)["Resources"]["OrdersFunction"]
        assert "ApiEvent" in resource["Properties"]["Events"]

    def test_rejects_non_lambda_source(self, runner, workspace, tmp_path):
        source = tmp_path / "tool" / "main.go"
        source.parent.mkdir()
        source.write_text("package main\n\nfunc main() {}\n")

        result = configure(runner, workspace, source)

        assert result.exit_code == 1
        assert "Error:" in result.stdout
        assert not workspace.function_dir("tool").exists()

    def test_force_accepts_any_source(self, runner, workspace, tmp_path):
        source = tmp_path / "tool" / "main.go"
        source.parent.mkdir()
        source.write_text("package main\n\nfunc main() {}\n")

        result = configure(runner, workspace, source.resolve(), "--force")

        assert result.exit_code == 0, result.stdout
        assert workspace.function_dir("tool").is_dir()

    def test_unknown_event_type(self, runner, workspace, source):
        result = configure(runner, workspace, source, "--event-type", "kinesis")

        assert result.exit_code == 2

    def test_workspace_from_environment(self, runner, workspace, source):
        result = runner.invoke(
            app, ["configure", str(source)], env={"LWB_WORKSPACE": str(workspace.root)}
        )

        assert result.exit_code == 0, result.stdout
        assert workspace.function_dir("orders").is_dir()

    def test_name_taken_by_another_source(self, runner, workspace, source, tmp_path):
        other = tmp_path / "elsewhere" / "orders" / "main.go"
        other.parent.mkdir(parents=True)
        other.write_text(source.read_text())
        configure(runner, workspace, source)

        result = configure(runner, workspace, other.resolve(), "--event-type", "sqs")

        assert result.exit_code == 1
        assert "--name" in result.stdout
        config = ManifestStore().extract_configuration(workspace.function_dir("orders"))
        assert config.source_file == str(source)
        assert config.event_type == "apigateway"

        renamed = configure(runner, workspace, other.resolve(), "--name", "orders-v2")
        assert renamed.exit_code == 0, renamed.stdout
        assert FunctionRegistry(workspace).is_configured(str(source))


class TestList:
    def test_empty_workspace(self, runner, workspace):
        result = runner.invoke(app, ["list", "-w", str(workspace.root)])

        assert result.exit_code == 0
        assert "No functions found" in result.stdout

    def test_lists_functions_and_skips_bare_manifests(
        self, runner, workspace, source, write_manifest, bare_manifest
    ):
        configure(runner, workspace, source)
        write_manifest(workspace.function_dir("legacy"), bare_manifest)

        result = runner.invoke(app, ["list", "-w", str(workspace.root)])

        assert result.exit_code == 0
        assert "orders" in result.stdout
        assert "stale" in result.stdout
        assert "Skipped" in result.stdout
        assert "legacy" in result.stdout


class TestStatus:
    def test_shows_rebuild_reason(self, runner, workspace, source):
        configure(runner, workspace, source)

        result = runner.invoke(app, ["status", str(source), "-w", str(workspace.root)])

        assert result.exit_code == 0
        assert "Rebuild needed" in result.stdout
        assert "artifact-missing" in result.stdout
        assert "Manifest:" in result.stdout

    def test_unconfigured_source(self, runner, workspace, source):
        result = runner.invoke(app, ["status", str(source), "-w", str(workspace.root)])

        assert result.exit_code == 1
        assert "Error:" in result.stdout


class TestEvent:
    def test_regenerates_event_file(self, runner, workspace, source):
        configure(runner, workspace, source)
        event_file = workspace.function_dir("orders") / "event.json"
        event_file.write_text("{}")

        kept = runner.invoke(app, ["event", str(source), "-w", str(workspace.root)])
        assert kept.exit_code == 0
        assert event_file.read_text() == "{}"

        result = runner.invoke(app, ["event", str(source), "--overwrite", "-w", str(workspace.root)])
        assert result.exit_code == 0
        assert json.loads(event_file.read_text())["httpMethod"] == "GET"


class TestRemove:
    def test_force_removes_function(self, runner, workspace, source):
        configure(runner, workspace, source)

        result = runner.invoke(app, ["remove", str(source), "--force", "-w", str(workspace.root)])

        assert result.exit_code == 0
        assert not workspace.function_dir("orders").exists()
        assert source.exists()

    @patch("lambda_workbench.cli.commands.functions.questionary.confirm")
    def test_declined_confirmation_keeps_function(self, mock_confirm, runner, workspace, source):
        configure(runner, workspace, source)
        mock_confirm.return_value.ask.return_value = False

        result = runner.invoke(app, ["remove", str(source), "-w", str(workspace.root)])

        assert result.exit_code == 0
        assert "cancelled" in result.stdout
        assert FunctionRegistry(workspace).is_configured(str(source))

    @patch("lambda_workbench.cli.commands.functions.questionary.confirm")
    def test_confirmed_removal(self, mock_confirm, runner, workspace, source):
        configure(runner, workspace, source)
        mock_confirm.return_value.ask.return_value = True

        result = runner.invoke(app, ["remove", str(source), "-w", str(workspace.root)])

        assert result.exit_code == 0
        assert not workspace.function_dir("orders").exists()
