# Load .env vars from file before everything else
from dotenv import load_dotenv

load_dotenv()

from .logger import setup_logging  # noqa: E402

setup_logging()

# TYPE_CHECKING imports provide full IDE support (autocomplete, type hints)
# while __getattr__ enables lazy loading at runtime for fast CLI startup
from typing import TYPE_CHECKING  # noqa: E402

if TYPE_CHECKING:
    from .config import WorkspacePaths, get_workspace_paths
    from .core.freshness import BuildFreshnessOracle
    from .core.manifest import FunctionConfiguration, FunctionSettings, ManifestStore
    from .core.migration import WorkspaceMigrator
    from .core.registry import FunctionRegistry
    from .core.validation import MetadataValidator


def __getattr__(name):
    """Lazily import core modules only when accessed."""
    if name in ("WorkspacePaths", "get_workspace_paths"):
        from . import config

        return getattr(config, name)
    elif name in ("FunctionConfiguration", "FunctionSettings", "ManifestStore"):
        from .core import manifest

        return getattr(manifest, name)
    elif name == "BuildFreshnessOracle":
        from .core.freshness import BuildFreshnessOracle

        return BuildFreshnessOracle
    elif name == "FunctionRegistry":
        from .core.registry import FunctionRegistry

        return FunctionRegistry
    elif name == "MetadataValidator":
        from .core.validation import MetadataValidator

        return MetadataValidator
    elif name == "WorkspaceMigrator":
        from .core.migration import WorkspaceMigrator

        return WorkspaceMigrator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "BuildFreshnessOracle",
    "FunctionConfiguration",
    "FunctionRegistry",
    "FunctionSettings",
    "ManifestStore",
    "MetadataValidator",
    "WorkspaceMigrator",
    "WorkspacePaths",
    "get_workspace_paths",
]
