"""Workspace and function path configuration for lambda-workbench."""

import os
from pathlib import Path
from typing import NamedTuple, Optional, Union

WORKSPACE_ENV_VAR = "LWB_WORKSPACE"
DEFAULT_WORKSPACE_DIRNAME = "lambda-workspace"

MANIFEST_FILENAME = "template.yaml"
BUILD_DIRNAME = "build"
ARTIFACT_FILENAME = "bootstrap"
PACKAGE_FILENAME = "lambda-function.zip"
EVENT_FILENAME = "event.json"
RESPONSE_FILENAME = "response.json"

LEGACY_REGISTRY_FILENAME = ".lambda-workbench-config.json"
LEGACY_BACKUP_SUFFIX = ".backup"


class FunctionPaths(NamedTuple):
    """Paths of the files owned by a single function directory."""

    function_dir: Path
    manifest: Path
    build_dir: Path
    artifact: Path
    package: Path
    event_file: Path
    response_file: Path

    @classmethod
    def for_dir(cls, function_dir: Union[str, Path]) -> "FunctionPaths":
        function_dir = Path(function_dir)
        build_dir = function_dir / BUILD_DIRNAME
        return cls(
            function_dir=function_dir,
            manifest=function_dir / MANIFEST_FILENAME,
            build_dir=build_dir,
            artifact=build_dir / ARTIFACT_FILENAME,
            package=build_dir / PACKAGE_FILENAME,
            event_file=function_dir / EVENT_FILENAME,
            response_file=function_dir / RESPONSE_FILENAME,
        )


class WorkspacePaths(NamedTuple):
    """Paths for a function workspace.

    Passed explicitly to every component that needs to know where functions
    live, instead of being read from a process-wide setting.
    """

    root: Path
    legacy_registry: Path
    legacy_backup: Path

    def function_dir(self, function_name: str) -> Path:
        return self.root / function_name

    def function_paths(self, function_name: str) -> FunctionPaths:
        return FunctionPaths.for_dir(self.function_dir(function_name))

    def ensure_root(self) -> None:
        """Ensure the workspace directory exists."""
        self.root.mkdir(parents=True, exist_ok=True)


def default_workspace() -> Path:
    """Workspace used when neither an argument nor the environment names one."""
    return Path.home() / DEFAULT_WORKSPACE_DIRNAME


def get_workspace_paths(
    workspace: Optional[Union[str, Path]] = None,
) -> WorkspacePaths:
    """Get standardized paths for a function workspace.

    Resolution order: explicit argument, ``LWB_WORKSPACE`` environment
    variable, ``~/lambda-workspace``.
    """
    if workspace is None:
        workspace = os.environ.get(WORKSPACE_ENV_VAR) or default_workspace()

    root = Path(workspace).expanduser().absolute()
    legacy_registry = root / LEGACY_REGISTRY_FILENAME

    return WorkspacePaths(
        root=root,
        legacy_registry=legacy_registry,
        legacy_backup=root / (LEGACY_REGISTRY_FILENAME + LEGACY_BACKUP_SUFFIX),
    )
