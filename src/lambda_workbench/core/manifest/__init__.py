from .models import (
    CURRENT_SCHEMA_VERSION,
    METADATA_KEY,
    EnvironmentSettings,
    EnvironmentSource,
    EventType,
    FunctionConfiguration,
    FunctionSettings,
)
from .store import ManifestStore
from .triggers import TriggerType, trigger_skeleton

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "METADATA_KEY",
    "EnvironmentSettings",
    "EnvironmentSource",
    "EventType",
    "FunctionConfiguration",
    "FunctionSettings",
    "ManifestStore",
    "TriggerType",
    "trigger_skeleton",
]
