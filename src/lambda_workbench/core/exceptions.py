"""Custom exceptions for lambda_workbench.

Each error carries the path of the file it concerns so callers can surface
the original message without rewording it.
"""

from pathlib import Path
from typing import Union


class WorkbenchError(Exception):
    """Base class for every error raised by the workbench core."""

    def __init__(self, message: str, path: Union[str, Path, None] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ManifestNotFoundError(WorkbenchError):
    """Raised when a function directory has no manifest file.

    Often not fatal: it signals that a function still needs configuration.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__(
            f"Manifest not found: {path}. Please reconfigure the function.", path
        )


class ManifestParseError(WorkbenchError):
    """Raised when a manifest exists but is not a valid YAML mapping."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.reason = reason
        super().__init__(f"Failed to parse manifest {path}: {reason}", path)


class MissingResourceError(WorkbenchError):
    """Raised when a parseable manifest has no serverless function resource."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(f"Function resource not found in manifest: {path}", path)


class LegacyRegistryError(WorkbenchError):
    """Raised when the legacy global registry file cannot be read."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.reason = reason
        super().__init__(f"Failed to read legacy registry {path}: {reason}", path)


class FunctionNameConflictError(WorkbenchError):
    """Raised when a function directory already belongs to another source file."""

    def __init__(self, function_name: str, claimed_by: str, path: Union[str, Path]):
        self.function_name = function_name
        self.claimed_by = claimed_by
        super().__init__(
            f"Function '{function_name}' is already configured for {claimed_by}. "
            "Choose another name with --name.",
            path,
        )
