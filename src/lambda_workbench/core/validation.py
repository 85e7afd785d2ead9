"""Validation and repair of private metadata across a workspace.

Each manifest is in one of these states:

``ABSENT``
    no manifest file; nothing to repair.
``UNREADABLE``
    the manifest cannot be parsed; reported, left for the user to fix.
``MISSING_METADATA``
    a manifest without the private metadata block.
``INCOMPLETE``
    the block lacks one of the required fields.
``VALID``
    every required field is present.

``MISSING_METADATA`` and ``INCOMPLETE`` both move to ``VALID`` through
:meth:`MetadataValidator.repair`, which always writes a complete
replacement block rather than patching individual fields.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..config import WorkspacePaths
from .exceptions import ManifestNotFoundError, ManifestParseError, WorkbenchError
from .manifest.models import (
    DEFAULT_EVENT_TYPE,
    METADATA_KEY,
    FunctionConfiguration,
    missing_metadata_fields,
)
from .manifest.store import ManifestStore, metadata_block
from .registry import FunctionRegistry
from .results import ItemResult, Report

log = logging.getLogger(__name__)


class ManifestState(str, Enum):
    ABSENT = "absent"
    UNREADABLE = "unreadable"
    MISSING_METADATA = "missing-metadata"
    INCOMPLETE = "incomplete"
    VALID = "valid"


REPAIRABLE_STATES = frozenset({ManifestState.MISSING_METADATA, ManifestState.INCOMPLETE})


@dataclass
class ManifestInspection:
    """State of one function manifest."""

    function_dir: Path
    state: ManifestState
    metadata: Optional[Dict[str, Any]] = None
    missing_fields: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.state is ManifestState.VALID

    @property
    def needs_repair(self) -> bool:
        return self.state in REPAIRABLE_STATES


@dataclass(frozen=True)
class ValidationIssue:
    """A non-fatal problem found in one function's manifest."""

    function_name: str
    function_dir: Path
    state: ManifestState
    message: str


@dataclass
class ValidationReport:
    valid: list[str] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.issues

    @property
    def invalid_functions(self) -> list[str]:
        return sorted({issue.function_name for issue in self.issues})


RepairReport = Report[ManifestState]


def _inspect_document(function_dir: Path, document: Mapping[str, Any]) -> ManifestInspection:
    block = metadata_block(document)
    if block is None:
        return ManifestInspection(
            function_dir=function_dir,
            state=ManifestState.MISSING_METADATA,
            issues=[f"No {METADATA_KEY} metadata found in manifest"],
        )

    missing = missing_metadata_fields(block)
    if missing:
        return ManifestInspection(
            function_dir=function_dir,
            state=ManifestState.INCOMPLETE,
            metadata=block,
            missing_fields=missing,
            issues=[f"Missing {name} in metadata" for name in missing],
        )

    return ManifestInspection(
        function_dir=function_dir, state=ManifestState.VALID, metadata=block
    )


class MetadataValidator:
    """Enforces the "manifest has valid private metadata" invariant."""

    def __init__(
        self,
        paths: WorkspacePaths,
        store: Optional[ManifestStore] = None,
        registry: Optional[FunctionRegistry] = None,
    ):
        self.paths = paths
        self.store = store or ManifestStore()
        self.registry = registry or FunctionRegistry(paths, self.store)

    def inspect(self, function_dir: Union[str, Path]) -> ManifestInspection:
        function_dir = Path(function_dir)
        try:
            document = self.store.load(function_dir)
        except ManifestNotFoundError as e:
            return ManifestInspection(function_dir, ManifestState.ABSENT, issues=[str(e)])
        except ManifestParseError as e:
            return ManifestInspection(function_dir, ManifestState.UNREADABLE, issues=[str(e)])
        return _inspect_document(function_dir, document)

    def validate_workspace(self) -> ValidationReport:
        """Inspect every function manifest of the workspace."""
        report = ValidationReport()

        for function_dir in self.registry.function_dirs():
            try:
                inspection = self.inspect(function_dir)
            except OSError as e:
                report.issues.append(
                    ValidationIssue(function_dir.name, function_dir, ManifestState.UNREADABLE, str(e))
                )
                continue

            if inspection.is_valid:
                report.valid.append(function_dir.name)
                continue

            for message in inspection.issues:
                report.issues.append(
                    ValidationIssue(function_dir.name, function_dir, inspection.state, message)
                )

        log.info(
            f"Validation: {len(report.valid)} valid, "
            f"{len(report.invalid_functions)} invalid"
        )
        return report

    def repair(
        self,
        function_dir: Union[str, Path],
        source_file: Optional[str] = None,
        source_dir: Optional[str] = None,
        event_type: Optional[str] = None,
    ) -> ManifestState:
        """Bring a manifest to the ``VALID`` state.

        Values not supplied by the caller come from what the manifest already
        records or implies, then default to an empty string and the default
        event type. A valid manifest is left untouched.

        Returns:
            The state after the call, always ``VALID``.

        Raises:
            ManifestNotFoundError: If there is no manifest to repair.
            ManifestParseError: If the manifest cannot be parsed.
        """
        function_dir = Path(function_dir)
        document = self.store.load(function_dir)
        inspection = _inspect_document(function_dir, document)

        if inspection.is_valid:
            log.info(f"Manifest already has valid metadata: {function_dir}")
            return ManifestState.VALID

        known = self._best_known(function_dir, inspection.metadata or {})
        extra = {
            key: value
            for key, value in (
                ("buildMethod", known.get("build_method")),
                ("architecture", known.get("architecture")),
                ("runtime", known.get("runtime")),
            )
            if value
        }

        log.info(f"Repairing {inspection.state.value} manifest: {function_dir}")
        self.store.write_metadata(
            function_dir,
            source_file if source_file is not None else known.get("source_file", ""),
            source_dir if source_dir is not None else known.get("source_dir", ""),
            event_type or known.get("event_type") or DEFAULT_EVENT_TYPE,
            replace=True,
            extra=extra,
        )
        return ManifestState.VALID

    def _best_known(self, function_dir: Path, metadata: Mapping[str, Any]) -> Dict[str, Any]:
        """Values the manifest already records or implies."""
        try:
            config: FunctionConfiguration = self.store.extract_configuration(function_dir)
        except WorkbenchError as e:
            log.warning(f"Cannot infer values for {function_dir.name}: {e}")
            return {
                "source_file": str(metadata.get("sourceFile") or ""),
                "source_dir": str(metadata.get("sourceDir") or ""),
                "event_type": metadata.get("eventType"),
            }
        return config.model_dump(
            include={"source_file", "source_dir", "event_type", "build_method", "architecture", "runtime"}
        )

    def repair_workspace(self) -> RepairReport:
        """Repair every repairable manifest; failures do not stop the run."""
        report: RepairReport = Report()

        for function_dir in self.registry.function_dirs():
            item: ItemResult[ManifestState] = ItemResult(name=function_dir.name, path=function_dir)
            try:
                inspection = self.inspect(function_dir)
                if inspection.state is ManifestState.UNREADABLE:
                    item.error = "; ".join(inspection.issues)
                elif not inspection.needs_repair:
                    item.skipped = f"manifest is {inspection.state.value}"
                else:
                    item.value = self.repair(function_dir)
            except (WorkbenchError, OSError) as e:
                item.error = str(e)
                log.error(f"Could not repair {function_dir.name}: {e}")
            report.add(item)

        log.info(f"Repaired {len(report.succeeded)} manifest(s)")
        return report
