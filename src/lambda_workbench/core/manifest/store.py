"""Read, merge and write per-function manifests.

The manifest (``template.yaml``) is the single source of truth for a
function. It holds the deployment description consumed by the external
build/deploy tool and, under ``Metadata.LambdaWorkbench``, the private
metadata owned by this package.

Every mutation reads the file immediately before merging its change and
rewrites the whole document. There is no locking: an edit made in an open
editor between the read and the write is lost.
"""

import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import yaml

from ...config import MANIFEST_FILENAME
from ..exceptions import ManifestNotFoundError, ManifestParseError, MissingResourceError
from ..utils.yaml_io import dump_yaml, load_yaml
from .models import (
    CURRENT_SCHEMA_VERSION,
    DEFAULT_ARCHITECTURE,
    DEFAULT_BUILD_METHOD,
    DEFAULT_CODE_URI,
    DEFAULT_EVENT_TYPE,
    DEFAULT_HANDLER,
    DEFAULT_MEMORY_SIZE,
    DEFAULT_RUNTIME,
    DEFAULT_TIMEOUT,
    FUNCTION_RESOURCE_TYPE,
    METADATA_KEY,
    EnvironmentInfo,
    EnvironmentSettings,
    EnvironmentSource,
    FunctionConfiguration,
    FunctionSettings,
    PrivateMetadata,
)
from .triggers import match_trigger, trigger_skeleton

log = logging.getLogger(__name__)

PathLike = Union[str, Path]


def utc_timestamp() -> str:
    """Current UTC time in ISO 8601 with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def to_pascal_case(name: str) -> str:
    """Convert ``my-function_name`` to ``MyFunctionName``."""
    converted = re.sub(r"[-_](\w)", lambda match: match.group(1).upper(), name)
    return converted[:1].upper() + converted[1:]


def find_function_resource(
    document: Mapping[str, Any],
) -> Optional[Tuple[str, Dict[str, Any]]]:
    """Return ``(logical_id, resource)`` of the first serverless function."""
    resources = document.get("Resources")
    if not isinstance(resources, Mapping):
        return None

    for logical_id, resource in resources.items():
        if isinstance(resource, dict) and resource.get("Type") == FUNCTION_RESOURCE_TYPE:
            return str(logical_id), resource
    return None


def metadata_block(document: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the private metadata block, or None when it is absent."""
    metadata = document.get("Metadata")
    if not isinstance(metadata, Mapping):
        return None
    block = metadata.get(METADATA_KEY)
    return block if isinstance(block, dict) else None


def _pick(*candidates: Any, default: Any) -> Any:
    """First candidate that is neither None nor an empty string."""
    for candidate in candidates:
        if candidate is not None and candidate != "":
            return candidate
    return default


def _optional_text(value: Any) -> Optional[str]:
    return None if value is None or value == "" else str(value)


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _ensure_mapping(container: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return ``container[key]`` as a dict, creating it when missing."""
    value = container.get(key)
    if not isinstance(value, dict):
        if value is not None:
            log.warning(f"Replacing non-mapping '{key}' section while updating manifest")
        value = {}
        container[key] = value
    return value


class ManifestStore:
    """Durable read/modify/write access to one manifest per function directory."""

    def __init__(
        self,
        manifest_name: str = MANIFEST_FILENAME,
        clock: Callable[[], str] = utc_timestamp,
    ):
        self.manifest_name = manifest_name
        self._clock = clock

    def manifest_path(self, function_dir: PathLike) -> Path:
        return Path(function_dir) / self.manifest_name

    def exists(self, function_dir: PathLike) -> bool:
        return self.manifest_path(function_dir).is_file()

    def load(self, function_dir: PathLike) -> Dict[str, Any]:
        """Parse the manifest of ``function_dir``.

        Parsing is permissive: every key, including ones this package does
        not interpret, is kept so that a later :meth:`save` loses nothing.

        Raises:
            ManifestNotFoundError: If the manifest file does not exist.
            ManifestParseError: If it is not YAML or its root is not a mapping.
        """
        path = self.manifest_path(function_dir)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ManifestNotFoundError(path) from None

        try:
            document = load_yaml(content)
        except yaml.YAMLError as e:
            raise ManifestParseError(path, str(e)) from e

        if not isinstance(document, dict):
            raise ManifestParseError(
                path,
                f"expected a mapping at the document root, got {type(document).__name__}",
            )
        return document

    def save(self, function_dir: PathLike, document: Mapping[str, Any]) -> Path:
        """Write the whole document back to disk."""
        path = self.manifest_path(function_dir)
        path.write_text(dump_yaml(dict(document)), encoding="utf-8")
        log.debug(f"Saved manifest {path}")
        return path

    def read_metadata(self, function_dir: PathLike) -> Optional[Dict[str, Any]]:
        return metadata_block(self.load(function_dir))

    def extract_configuration(
        self,
        function_dir: PathLike,
        fallback: Optional[Mapping[str, Any]] = None,
    ) -> FunctionConfiguration:
        """Build the normalized view of a function.

        Each field resolves from private metadata, then from the deployment
        section, then from ``fallback`` (keys named like the
        :class:`FunctionConfiguration` fields), then from a default. Missing
        private metadata is not an error; ``has_metadata`` reports it.

        Raises:
            ManifestNotFoundError, ManifestParseError: From :meth:`load`.
            MissingResourceError: If no serverless function resource exists.
        """
        function_dir = Path(function_dir)
        document = self.load(function_dir)
        fallback = fallback or {}

        found = find_function_resource(document)
        if found is None:
            raise MissingResourceError(self.manifest_path(function_dir))
        resource_name, resource = found

        meta = metadata_block(document)
        has_metadata = meta is not None
        if meta is None:
            log.debug(f"No private metadata in {function_dir.name}, inferring values")
            meta = {}

        properties = resource.get("Properties")
        if not isinstance(properties, Mapping):
            properties = {}
        globals_section = document.get("Globals")
        globals_function = (
            globals_section.get("Function") if isinstance(globals_section, Mapping) else None
        )
        if not isinstance(globals_function, Mapping):
            globals_function = {}

        source_file = str(_pick(meta.get("sourceFile"), fallback.get("source_file"), default=""))
        source_dir = str(
            _pick(
                meta.get("sourceDir"),
                os.path.dirname(source_file) if source_file else None,
                fallback.get("source_dir"),
                default="",
            )
        )

        inferred_event = match_trigger(properties.get("Events"))
        event_type = str(
            _pick(
                meta.get("eventType"),
                inferred_event.value if inferred_event is not None else None,
                fallback.get("event_type"),
                default=DEFAULT_EVENT_TYPE,
            )
        )

        architectures = properties.get("Architectures")
        first_architecture = (
            architectures[0] if isinstance(architectures, list) and architectures else None
        )

        environment = properties.get("Environment")
        variables = environment.get("Variables") if isinstance(environment, Mapping) else None
        env_info = meta.get("environmentInfo")
        if not isinstance(env_info, Mapping):
            env_info = {}

        description = _pick(
            document.get("Description"),
            fallback.get("description"),
            default=f"Lambda function for {event_type} events",
        )

        return FunctionConfiguration(
            function_name=function_dir.name,
            workspace_path=function_dir.parent,
            function_dir=function_dir,
            resource_name=resource_name,
            source_file=source_file,
            source_dir=source_dir,
            event_type=event_type,
            last_modified=_optional_text(meta.get("lastModified")),
            schema_version=_optional_text(meta.get("version")),
            runtime=str(
                _pick(
                    meta.get("runtime"),
                    properties.get("Runtime"),
                    globals_function.get("Runtime"),
                    fallback.get("runtime"),
                    default=DEFAULT_RUNTIME,
                )
            ),
            architecture=str(
                _pick(
                    meta.get("architecture"),
                    first_architecture,
                    fallback.get("architecture"),
                    default=DEFAULT_ARCHITECTURE,
                )
            ),
            build_method=str(
                _pick(meta.get("buildMethod"), fallback.get("build_method"), default=DEFAULT_BUILD_METHOD)
            ),
            environment=EnvironmentSettings(
                variables=dict(variables) if isinstance(variables, Mapping) else {},
                last_updated=str(env_info.get("lastUpdated") or ""),
                source=str(env_info.get("source") or EnvironmentSource.MANUAL.value),
                origin_label=_optional_text(env_info.get("originLabel")),
            ),
            timeout=_as_int(
                _pick(
                    properties.get("Timeout"),
                    globals_function.get("Timeout"),
                    fallback.get("timeout"),
                    default=DEFAULT_TIMEOUT,
                ),
                DEFAULT_TIMEOUT,
            ),
            memory_size=_as_int(
                _pick(
                    properties.get("MemorySize"),
                    globals_function.get("MemorySize"),
                    fallback.get("memory_size"),
                    default=DEFAULT_MEMORY_SIZE,
                ),
                DEFAULT_MEMORY_SIZE,
            ),
            description=str(description),
            has_metadata=has_metadata,
        )

    def write_metadata(
        self,
        function_dir: PathLike,
        source_file: str,
        source_dir: str,
        event_type: str,
        *,
        replace: bool = False,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Merge private metadata into the manifest and rewrite it.

        Every other section of the document is left untouched. The block is
        always stamped with a fresh ``lastModified`` and the current schema
        version. With ``replace=True`` the existing block is discarded and a
        complete new one written in its place.

        Returns:
            The metadata block as written.
        """
        document = self.load(function_dir)
        metadata = _ensure_mapping(document, "Metadata")

        if replace:
            block = PrivateMetadata(
                source_file=source_file,
                source_dir=source_dir,
                event_type=event_type,
                last_modified=self._clock(),
                build_method=(extra or {}).get("buildMethod"),
                architecture=(extra or {}).get("architecture"),
                runtime=(extra or {}).get("runtime"),
            ).to_block()
        else:
            existing = metadata.get(METADATA_KEY)
            block = dict(existing) if isinstance(existing, dict) else {}
            block.update(extra or {})
            block.update(
                {
                    "sourceFile": source_file,
                    "sourceDir": source_dir,
                    "eventType": event_type,
                    "lastModified": self._clock(),
                    "version": CURRENT_SCHEMA_VERSION,
                }
            )

        metadata[METADATA_KEY] = block
        path = self.save(function_dir, document)
        log.info(f"Private metadata updated in {path}")
        return block

    def update_environment(
        self,
        function_dir: PathLike,
        variables: Mapping[str, str],
        origin_label: Optional[str] = None,
    ) -> FunctionConfiguration:
        """Replace the function's environment variables.

        The whole ``Environment.Variables`` mapping is replaced, not merged.
        Provenance is recorded in private metadata: ``manual`` when no
        ``origin_label`` is given, ``external-sync`` otherwise. A manifest
        without a private metadata block gets the variables only.

        Raises:
            MissingResourceError: If no serverless function resource exists.
        """
        document = self.load(function_dir)
        found = find_function_resource(document)
        if found is None:
            raise MissingResourceError(self.manifest_path(function_dir))
        _, resource = found

        properties = _ensure_mapping(resource, "Properties")
        environment = _ensure_mapping(properties, "Environment")
        environment["Variables"] = dict(variables)

        block = metadata_block(document)
        if block is None:
            log.warning(
                f"No private metadata in {self.manifest_path(function_dir)}; "
                "environment provenance not recorded"
            )
        else:
            now = self._clock()
            block["environmentInfo"] = EnvironmentInfo(
                last_updated=now,
                source=(
                    EnvironmentSource.EXTERNAL_SYNC if origin_label else EnvironmentSource.MANUAL
                ),
                origin_label=origin_label or "manual",
                variable_count=len(variables),
            ).model_dump(mode="json")
            block["lastModified"] = now

        path = self.save(function_dir, document)
        log.info(f"Environment variables updated in {path} ({len(variables)} variables)")
        return self.extract_configuration(function_dir)

    def create_manifest(
        self, function_dir: PathLike, settings: FunctionSettings
    ) -> Dict[str, Any]:
        """Generate and write a brand-new manifest for ``settings``."""
        function_dir = Path(function_dir)
        function_dir.mkdir(parents=True, exist_ok=True)

        logical_id = f"{to_pascal_case(settings.function_name)}Function"
        description = (
            settings.description or f"Lambda function for {settings.event_type} events"
        )

        properties: Dict[str, Any] = {
            "CodeUri": DEFAULT_CODE_URI,
            "Handler": DEFAULT_HANDLER,
            "Runtime": settings.runtime,
            "Architectures": [settings.architecture],
        }
        if settings.environment:
            properties["Environment"] = {"Variables": dict(settings.environment)}
        properties["Events"] = trigger_skeleton(settings.event_type)

        document: Dict[str, Any] = {
            "AWSTemplateFormatVersion": "2010-09-09",
            "Transform": "AWS::Serverless-2016-10-31",
            "Description": f"{settings.function_name}\n\n{description}",
            "Metadata": {
                METADATA_KEY: PrivateMetadata(
                    source_file=settings.source_file,
                    source_dir=settings.source_dir,
                    event_type=settings.event_type,
                    last_modified=self._clock(),
                    build_method=settings.build_method,
                    architecture=settings.architecture,
                    runtime=settings.runtime,
                ).to_block()
            },
            "Globals": {
                "Function": {
                    "Timeout": settings.timeout,
                    "MemorySize": settings.memory_size,
                    "Runtime": settings.runtime,
                }
            },
            "Resources": {
                logical_id: {
                    "Type": FUNCTION_RESOURCE_TYPE,
                    "Properties": properties,
                }
            },
            "Outputs": {
                logical_id: {
                    "Description": "Lambda Function ARN",
                    "Value": {"Fn::GetAtt": [logical_id, "Arn"]},
                },
                f"{logical_id}IamRole": {
                    "Description": "Implicit IAM Role created for function",
                    "Value": {"Fn::GetAtt": [f"{logical_id}Role", "Arn"]},
                },
            },
        }

        path = self.save(function_dir, document)
        log.info(f"Manifest created: {path}")
        return document
