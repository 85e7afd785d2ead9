"""Typed views over manifest content."""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...config import FunctionPaths

# Namespace of the tool-owned block inside the manifest's Metadata section
METADATA_KEY = "LambdaWorkbench"
CURRENT_SCHEMA_VERSION = "2.0"
FUNCTION_RESOURCE_TYPE = "AWS::Serverless::Function"

# Fields a metadata block must carry to be trusted for function identity
REQUIRED_METADATA_FIELDS = ("sourceFile", "sourceDir", "eventType", "version")


def missing_metadata_fields(block: Mapping[str, Any]) -> list[str]:
    """Required fields that are absent (or null) in a metadata block."""
    return [name for name in REQUIRED_METADATA_FIELDS if block.get(name) is None]


DEFAULT_FUNCTION_NAME = "lambda-function"
DEFAULT_RUNTIME = "provided.al2023"
DEFAULT_ARCHITECTURE = "arm64"
DEFAULT_BUILD_METHOD = "direct"
DEFAULT_TIMEOUT = 30
DEFAULT_MEMORY_SIZE = 128
DEFAULT_CODE_URI = "build/"
DEFAULT_HANDLER = "bootstrap"


class EventType(str, Enum):
    """Event sources a function can be configured for."""

    APIGATEWAY = "apigateway"
    S3 = "s3"
    DYNAMODB = "dynamodb"
    SQS = "sqs"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


DEFAULT_EVENT_TYPE = EventType.APIGATEWAY.value


class EnvironmentSource(str, Enum):
    """Provenance of a function's environment variables."""

    MANUAL = "manual"
    EXTERNAL_SYNC = "external-sync"


class EnvironmentInfo(BaseModel):
    """Environment provenance block stored under private metadata."""

    model_config = ConfigDict(
        validate_by_name=True,
        serialize_by_alias=True,
    )

    last_updated: str = Field(alias="lastUpdated")
    source: EnvironmentSource = EnvironmentSource.MANUAL
    origin_label: str = Field(alias="originLabel", default="manual")
    variable_count: int = Field(alias="variableCount", default=0)


class PrivateMetadata(BaseModel):
    """A complete private metadata block as written by this tool."""

    model_config = ConfigDict(
        validate_by_name=True,
        serialize_by_alias=True,
    )

    source_file: str = Field(alias="sourceFile", default="")
    source_dir: str = Field(alias="sourceDir", default="")
    event_type: str = Field(alias="eventType", default=DEFAULT_EVENT_TYPE)
    last_modified: str = Field(alias="lastModified")
    version: str = CURRENT_SCHEMA_VERSION
    build_method: Optional[str] = Field(alias="buildMethod", default=None)
    architecture: Optional[str] = None
    runtime: Optional[str] = None

    def to_block(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class EnvironmentSettings(BaseModel):
    """Environment variables of a function and where they came from."""

    model_config = ConfigDict(frozen=True)

    variables: Dict[str, Any] = Field(default_factory=dict)
    last_updated: str = ""
    source: str = EnvironmentSource.MANUAL.value
    origin_label: Optional[str] = None


class FunctionSettings(BaseModel):
    """Input used to create or register a function."""

    function_name: str
    source_file: str = ""
    source_dir: str = ""
    event_type: str = DEFAULT_EVENT_TYPE
    runtime: str = DEFAULT_RUNTIME
    architecture: str = DEFAULT_ARCHITECTURE
    build_method: str = DEFAULT_BUILD_METHOD
    timeout: int = DEFAULT_TIMEOUT
    memory_size: int = DEFAULT_MEMORY_SIZE
    description: Optional[str] = None
    environment: Dict[str, str] = Field(default_factory=dict)


class FunctionConfiguration(BaseModel):
    """Normalized, read-only view of a function.

    Built from the manifest on every read and never persisted, so the
    manifest stays the only source of truth. ``has_metadata`` is False for
    legacy manifests whose values were inferred rather than recorded.
    """

    model_config = ConfigDict(frozen=True)

    function_name: str
    workspace_path: Path
    function_dir: Path
    resource_name: str
    source_file: str = ""
    source_dir: str = ""
    event_type: str = DEFAULT_EVENT_TYPE
    last_modified: Optional[str] = None
    schema_version: Optional[str] = None
    runtime: str = DEFAULT_RUNTIME
    architecture: str = DEFAULT_ARCHITECTURE
    build_method: str = DEFAULT_BUILD_METHOD
    environment: EnvironmentSettings = Field(default_factory=EnvironmentSettings)
    timeout: int = DEFAULT_TIMEOUT
    memory_size: int = DEFAULT_MEMORY_SIZE
    description: str = ""
    has_metadata: bool = False

    @property
    def paths(self) -> FunctionPaths:
        return FunctionPaths.for_dir(self.function_dir)

    @property
    def manifest_path(self) -> Path:
        return self.paths.manifest
