"""Discovery of functions in a workspace and mapping from source files."""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Optional, Union

from ..config import WorkspacePaths
from .detector import detect_event_type
from .exceptions import FunctionNameConflictError, WorkbenchError
from .manifest.models import (
    DEFAULT_EVENT_TYPE,
    DEFAULT_FUNCTION_NAME,
    FunctionConfiguration,
    FunctionSettings,
    missing_metadata_fields,
)
from .manifest.store import ManifestStore, metadata_block
from .results import ItemResult, Report

log = logging.getLogger(__name__)

# Directory names too generic to identify a function (Go's cmd/ layout)
GENERIC_CONTAINER_DIRS = frozenset({"cmd"})

ScanReport = Report[FunctionConfiguration]


def sanitize_function_name(name: str) -> str:
    """Restrict a name to ``[a-z0-9-_]``.

    Other characters become ``-``, leading/trailing dashes are trimmed and
    the result is lower-cased. An empty result yields the default name.
    """
    sanitized = re.sub(r"[^A-Za-z0-9\-_]", "-", name)
    sanitized = sanitized.strip("-").lower()
    return sanitized or DEFAULT_FUNCTION_NAME


def derive_function_name(source_file: Union[str, Path]) -> str:
    """Candidate function name for a source file.

    Uses the parent directory name, or the grandparent's when the parent is
    a generic container such as ``cmd``.
    """
    source_dir = Path(source_file).parent
    candidate = source_dir.name
    if candidate in GENERIC_CONTAINER_DIRS:
        candidate = source_dir.parent.name
    return sanitize_function_name(candidate)


class FunctionRegistry:
    """Maps source files to functions and enumerates a workspace.

    Lookups scan every manifest in the workspace.
    """

    def __init__(self, paths: WorkspacePaths, store: Optional[ManifestStore] = None):
        self.paths = paths
        self.store = store or ManifestStore()

    def function_dirs(self) -> list[Path]:
        """Workspace subdirectories that contain a manifest, sorted by name."""
        root = self.paths.root
        if not root.is_dir():
            return []

        return sorted(
            (entry for entry in root.iterdir() if entry.is_dir() and self.store.exists(entry)),
            key=lambda entry: entry.name,
        )

    def scan(self) -> ScanReport:
        """Load every function of the workspace.

        Functions whose private metadata is absent or incomplete are skipped
        because they cannot be attributed to a source file. Unreadable
        manifests are recorded as failures; neither stops the scan.
        """
        report: ScanReport = Report()

        for function_dir in self.function_dirs():
            item: ItemResult[FunctionConfiguration] = ItemResult(
                name=function_dir.name, path=function_dir
            )
            try:
                document = self.store.load(function_dir)
                block = metadata_block(document)
                if block is None:
                    item.skipped = "no private metadata"
                    log.info(f"No private metadata found in {function_dir.name}, skipping")
                elif missing := missing_metadata_fields(block):
                    item.skipped = "incomplete private metadata"
                    log.warning(
                        f"Incomplete private metadata in {function_dir.name} "
                        f"(missing {', '.join(missing)}), skipping"
                    )
                else:
                    item.value = self.store.extract_configuration(function_dir)
            except (WorkbenchError, OSError) as e:
                item.error = str(e)
                log.error(f"Could not load function {function_dir.name}: {e}")
            report.add(item)

        return report

    def list_all(self) -> list[FunctionConfiguration]:
        """Configurations of every function with complete private metadata."""
        return self.scan().values

    def find_by_source_file(
        self, source_file: Union[str, Path]
    ) -> Optional[FunctionConfiguration]:
        """Return the function whose metadata claims ``source_file``.

        Matching is an exact string comparison against the recorded path.
        A block missing required fields never matches. None means the source
        file is not configured yet.
        """
        wanted = os.fspath(source_file)

        for function_dir in self.function_dirs():
            try:
                meta = self.store.read_metadata(function_dir)
                if meta is None or meta.get("sourceFile") != wanted:
                    continue
                if missing_metadata_fields(meta):
                    log.warning(
                        f"{function_dir.name} claims {wanted} but its private metadata "
                        "is incomplete; run repair before using it"
                    )
                    continue
                return self.store.extract_configuration(function_dir)
            except (WorkbenchError, OSError) as e:
                log.error(f"Could not read manifest in {function_dir.name}: {e}")

        return None

    def is_configured(self, source_file: Union[str, Path]) -> bool:
        return self.find_by_source_file(source_file) is not None

    def settings_for(
        self,
        source_file: Union[str, Path],
        event_type: Optional[str] = None,
        function_name: Optional[str] = None,
    ) -> FunctionSettings:
        """Settings for configuring ``source_file`` with derived defaults.

        When no event type is given it is detected from the source, falling
        back to the default event type.
        """
        source_path = Path(source_file)
        if event_type is None:
            try:
                content = source_path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                log.warning(f"Cannot read {source_path} to detect its event type: {e}")
                content = ""
            event_type = detect_event_type(content) or DEFAULT_EVENT_TYPE

        return FunctionSettings(
            function_name=(
                sanitize_function_name(function_name)
                if function_name
                else derive_function_name(source_path)
            ),
            source_file=os.fspath(source_file),
            source_dir=os.fspath(source_path.parent),
            event_type=event_type,
        )

    def register(self, settings: FunctionSettings) -> FunctionConfiguration:
        """Record ``settings`` in the function's manifest.

        Creates the function directory and a full manifest when none exists;
        otherwise merges the private metadata into the existing manifest.

        Raises:
            FunctionNameConflictError: If the existing manifest already records
                a different source file.
        """
        function_dir = self.paths.function_dir(settings.function_name)

        if self.store.exists(function_dir):
            meta = self.store.read_metadata(function_dir) or {}
            claimed_by = meta.get("sourceFile")
            if claimed_by and claimed_by != settings.source_file:
                raise FunctionNameConflictError(
                    settings.function_name, str(claimed_by), self.store.manifest_path(function_dir)
                )
            self.store.write_metadata(
                function_dir,
                settings.source_file,
                settings.source_dir,
                settings.event_type,
            )
        else:
            self.store.create_manifest(function_dir, settings)

        log.info(f"Function '{settings.function_name}' registered for {settings.source_file}")
        return self.store.extract_configuration(function_dir)

    def unregister(self, source_file: Union[str, Path]) -> bool:
        """Delete the function directory owning ``source_file``.

        The source file itself is never touched. Returns False, after logging,
        when no function claims the source file.
        """
        config = self.find_by_source_file(source_file)
        if config is None:
            log.warning(f"No function configured for {source_file}, nothing to remove")
            return False

        try:
            shutil.rmtree(config.function_dir)
        except FileNotFoundError:
            log.warning(f"Function directory already removed: {config.function_dir}")
            return False
        log.info(f"Function directory removed: {config.function_dir}")
        return True
