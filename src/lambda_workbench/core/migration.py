"""One-time migration from the legacy global registry.

Older releases kept every function's configuration in a single
``.lambda-workbench-config.json`` at the workspace root. Migration turns each
entry into (or repairs) a per-function manifest and then renames the legacy
file with a ``.backup`` suffix. The backup is never deleted or written again.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..config import WorkspacePaths
from .exceptions import LegacyRegistryError, WorkbenchError
from .manifest.models import DEFAULT_EVENT_TYPE, FunctionSettings
from .manifest.store import ManifestStore
from .registry import derive_function_name, sanitize_function_name
from .results import ItemResult, Report
from .validation import ManifestState, MetadataValidator

log = logging.getLogger(__name__)

# Keys under which a legacy registry may nest its entries
LEGACY_CONTAINER_KEYS = ("functions", "lambdas")


@dataclass(frozen=True)
class LegacyEntry:
    """One function as recorded by the legacy registry."""

    function_name: str
    source_file: str
    source_dir: str
    event_type: str


@dataclass
class MigrationReport:
    performed: bool = False
    backup_path: Optional[Path] = None
    results: Report[ManifestState] = field(default_factory=Report)


def _looks_like_path(key: str) -> bool:
    return "/" in key or "\\" in key or key.endswith(".go")


def _entry_from_legacy(key: Optional[str], raw: Mapping[str, Any]) -> LegacyEntry:
    source_file = str(raw.get("sourceFile") or raw.get("sourceMainFile") or "")
    function_name = raw.get("functionName")

    if key:
        if not source_file and _looks_like_path(key):
            source_file = key
        elif not function_name and not _looks_like_path(key):
            function_name = key

    if function_name:
        function_name = sanitize_function_name(str(function_name))
    elif source_file:
        function_name = derive_function_name(source_file)
    else:
        raise ValueError("entry has neither a function name nor a source file")

    return LegacyEntry(
        function_name=function_name,
        source_file=source_file,
        source_dir=str(raw.get("sourceDir") or (os.path.dirname(source_file) if source_file else "")),
        event_type=str(raw.get("eventType") or DEFAULT_EVENT_TYPE),
    )


def parse_legacy_registry(data: Any) -> list[tuple[Optional[str], Any]]:
    """Flatten the accepted registry shapes into ``(key, raw_entry)`` pairs."""
    if isinstance(data, Mapping):
        for container_key in LEGACY_CONTAINER_KEYS:
            if container_key in data:
                return parse_legacy_registry(data[container_key])
        return [(str(key), value) for key, value in data.items()]
    if isinstance(data, list):
        return [(None, value) for value in data]
    raise ValueError(f"unsupported registry shape: {type(data).__name__}")


class WorkspaceMigrator:
    """Moves a workspace from the legacy registry to per-function manifests."""

    def __init__(
        self,
        paths: WorkspacePaths,
        store: Optional[ManifestStore] = None,
        validator: Optional[MetadataValidator] = None,
    ):
        self.paths = paths
        self.store = store or ManifestStore()
        self.validator = validator or MetadataValidator(paths, self.store)

    def needs_migration(self) -> bool:
        return self.paths.legacy_registry.is_file()

    def read_legacy_registry(self) -> list[tuple[Optional[str], Any]]:
        path = self.paths.legacy_registry
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return parse_legacy_registry(data)
        except (json.JSONDecodeError, ValueError) as e:
            raise LegacyRegistryError(path, str(e)) from e

    def migrate(self) -> MigrationReport:
        """Migrate every legacy entry, then back up the legacy file.

        A workspace without a legacy file is left as is. A failing entry is
        recorded in the report and the remaining entries still migrate.

        Raises:
            LegacyRegistryError: If the legacy file is not valid JSON in one
                of the accepted shapes. The file is then left in place.
        """
        report = MigrationReport()
        if not self.needs_migration():
            log.info("No legacy registry found, nothing to migrate")
            return report

        log.info(f"Migrating legacy registry {self.paths.legacy_registry}")
        for key, raw in self.read_legacy_registry():
            label = key or (raw.get("functionName") if isinstance(raw, Mapping) else None) or "?"
            item: ItemResult[ManifestState] = ItemResult(name=str(label), path=self.paths.root)
            try:
                if not isinstance(raw, Mapping):
                    raise ValueError(f"entry is a {type(raw).__name__}, expected an object")
                entry = _entry_from_legacy(key, raw)
                item.name = entry.function_name
                item.path = self.paths.function_dir(entry.function_name)
                item.value = self._migrate_entry(entry)
            except (WorkbenchError, OSError, ValueError) as e:
                item.error = str(e)
                log.error(f"Could not migrate legacy entry {label}: {e}")
            report.results.add(item)

        os.replace(self.paths.legacy_registry, self.paths.legacy_backup)
        report.performed = True
        report.backup_path = self.paths.legacy_backup
        log.info(f"Moved legacy registry to backup: {self.paths.legacy_backup}")
        return report

    def _migrate_entry(self, entry: LegacyEntry) -> ManifestState:
        function_dir = self.paths.function_dir(entry.function_name)

        if not self.store.exists(function_dir):
            self.store.create_manifest(
                function_dir,
                FunctionSettings(
                    function_name=entry.function_name,
                    source_file=entry.source_file,
                    source_dir=entry.source_dir,
                    event_type=entry.event_type,
                ),
            )
            log.info(f"Created manifest for legacy function {entry.function_name}")
            return ManifestState.VALID

        return self.validator.repair(
            function_dir, entry.source_file, entry.source_dir, entry.event_type
        )

    def legacy_entries(self) -> Dict[str, LegacyEntry]:
        """Parsed legacy entries keyed by function name, for previews."""
        entries: Dict[str, LegacyEntry] = {}
        for key, raw in self.read_legacy_registry():
            if not isinstance(raw, Mapping):
                continue
            try:
                entry = _entry_from_legacy(key, raw)
            except ValueError as e:
                log.warning(f"Skipping legacy entry {key}: {e}")
                continue
            entries[entry.function_name] = entry
        return entries
