"""
Test configuration and fixtures for lambda-workbench tests.

Provides shared fixtures for:
- Temporary workspaces and Go source files
- Manifests with and without private metadata
- Environment variable management
"""

from pathlib import Path
from typing import Any, Dict

import pytest

from lambda_workbench.config import WorkspacePaths, get_workspace_paths
from lambda_workbench.core.manifest import FunctionSettings, ManifestStore
from lambda_workbench.core.utils.yaml_io import dump_yaml

GO_HANDLER = """package main

import (
\t"context"

\t"github.com/aws/aws-lambda-go/events"
\t"github.com/aws/aws-lambda-go/lambda"
)

func handler(ctx context.Context, req events.APIGatewayProxyRequest) (events.APIGatewayProxyResponse, error) {
\treturn events.APIGatewayProxyResponse{StatusCode: 200, Body: "ok"}, nil
}

func main() {
\tlambda.Start(handler)
}
"""


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch):
    """Keep tests independent of the caller's workspace and UI settings."""
    monkeypatch.delenv("LWB_WORKSPACE", raising=False)
    monkeypatch.setenv("LWB_RICH_UI", "false")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspacePaths:
    """Provide an existing, empty function workspace.

    Returns:
        WorkspacePaths rooted in a temporary directory.
    """
    paths = get_workspace_paths(tmp_path / "workspace")
    paths.ensure_root()
    return paths


@pytest.fixture
def store() -> ManifestStore:
    return ManifestStore()


@pytest.fixture
def go_source(tmp_path: Path) -> Path:
    """Provide a Go Lambda entry point at projects/orders/main.go."""
    source = tmp_path / "projects" / "orders" / "main.go"
    source.parent.mkdir(parents=True)
    source.write_text(GO_HANDLER)
    return source


@pytest.fixture
def settings(go_source: Path) -> FunctionSettings:
    return FunctionSettings(
        function_name="orders",
        source_file=str(go_source),
        source_dir=str(go_source.parent),
        event_type="apigateway",
    )


@pytest.fixture
def bare_manifest() -> Dict[str, Any]:
    """Provide a deployment-only manifest without private metadata.

    Returns:
        Manifest document whose only function is triggered by SQS.
    """
    return {
        "AWSTemplateFormatVersion": "2010-09-09",
        "Transform": "AWS::Serverless-2016-10-31",
        "Description": "Queue consumer",
        "Resources": {
            "QueueWorkerFunction": {
                "Type": "AWS::Serverless::Function",
                "Properties": {
                    "FunctionName": "queue-worker",
                    "CodeUri": "build/",
                    "Handler": "bootstrap",
                    "Runtime": "provided.al2023",
                    "Architectures": ["x86_64"],
                    "Timeout": 15,
                    "MemorySize": 256,
                    "Events": {
                        "Queue": {"Type": "SQS", "Properties": {"Queue": "arn:aws:sqs:::jobs"}}
                    },
                },
            }
        },
    }


@pytest.fixture
def write_manifest():
    """Provide a helper that writes a document as a function's template.yaml."""

    def _write(function_dir: Path, document: Dict[str, Any]) -> Path:
        function_dir.mkdir(parents=True, exist_ok=True)
        manifest = function_dir / "template.yaml"
        manifest.write_text(dump_yaml(document), encoding="utf-8")
        return manifest

    return _write
