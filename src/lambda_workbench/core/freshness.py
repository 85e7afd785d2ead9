"""Decide whether a function's build artifact is stale."""

import logging
import os
import stat as stat_module
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from ..config import FunctionPaths
from .manifest.models import FunctionConfiguration

log = logging.getLogger(__name__)

StatProvider = Callable[[Union[str, Path]], os.stat_result]


class RebuildReason(str, Enum):
    SOURCE_MISSING = "source-missing"
    ARTIFACT_MISSING = "artifact-missing"
    MANIFEST_NEWER = "manifest-newer"
    SOURCE_NEWER = "source-newer"
    UP_TO_DATE = "up-to-date"
    ERROR = "error"


@dataclass(frozen=True)
class RebuildDecision:
    """Whether a rebuild is needed and the rule that decided it."""

    needed: bool
    reason: RebuildReason
    detail: str = ""


class BuildFreshnessOracle:
    """Compares source, manifest and artifact modification times.

    Rules, first match wins:

    1. source file missing -> rebuild
    2. build directory or artifact missing -> rebuild
    3. manifest newer than artifact -> rebuild (configuration changed)
    4. source newer than artifact -> rebuild
    5. otherwise the artifact is fresh

    Any filesystem error yields "rebuild needed"; the oracle never skips a
    rebuild it could not prove unnecessary.
    """

    def __init__(self, stat: StatProvider = os.stat):
        self._stat = stat

    def _stat_or_none(self, path: Union[str, Path]) -> Optional[os.stat_result]:
        try:
            return self._stat(path)
        except FileNotFoundError:
            return None

    def check_paths(
        self, source_file: Union[str, Path, None], function_dir: Union[str, Path]
    ) -> RebuildDecision:
        return self._decide(source_file, FunctionPaths.for_dir(function_dir))

    def _decide(self, source_file: Union[str, Path, None], paths: FunctionPaths) -> RebuildDecision:
        try:
            source_stat = self._stat_or_none(source_file) if source_file else None
            if source_stat is None:
                return RebuildDecision(
                    True, RebuildReason.SOURCE_MISSING, f"Source file not found: {source_file}"
                )

            build_stat = self._stat_or_none(paths.build_dir)
            if build_stat is None or not stat_module.S_ISDIR(build_stat.st_mode):
                return RebuildDecision(
                    True, RebuildReason.ARTIFACT_MISSING, f"No build directory: {paths.build_dir}"
                )

            artifact_stat = self._stat_or_none(paths.artifact)
            if artifact_stat is None:
                return RebuildDecision(
                    True, RebuildReason.ARTIFACT_MISSING, f"No build artifact: {paths.artifact}"
                )

            manifest_stat = self._stat_or_none(paths.manifest)
            if manifest_stat is not None and manifest_stat.st_mtime_ns > artifact_stat.st_mtime_ns:
                return RebuildDecision(
                    True, RebuildReason.MANIFEST_NEWER, "Manifest is newer than the build artifact"
                )

            if source_stat.st_mtime_ns > artifact_stat.st_mtime_ns:
                return RebuildDecision(
                    True, RebuildReason.SOURCE_NEWER, "Source file is newer than the build artifact"
                )

            return RebuildDecision(False, RebuildReason.UP_TO_DATE, "Build artifact is up to date")
        except OSError as e:
            log.error(f"Error checking build status of {paths.function_dir}: {e}")
            return RebuildDecision(True, RebuildReason.ERROR, str(e))

    def check(self, config: FunctionConfiguration) -> RebuildDecision:
        decision = self._decide(config.source_file, config.paths)
        log.debug(f"{config.function_name}: {decision.reason.value} ({decision.detail})")
        return decision

    def needs_rebuild(self, config: FunctionConfiguration) -> bool:
        return self.check(config).needed
