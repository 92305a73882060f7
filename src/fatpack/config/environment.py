"""Build environment validation.

Checks that every external tool and directory the selected stages depend
on is present before any stage starts, so a run never fails half-way for a
reason that was knowable up front.
"""

import logging
import shutil
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..errors import EnvironmentCheckError
from .build_config import BuildConfiguration, Stage
from .project_settings import ProjectSettings

logger = logging.getLogger(__name__)

LIPO = "lipo"
XCODEBUILD = "xcodebuild"


class EnvironmentChecker:
    """Verifies tools and directories needed by a pipeline run.

    Args:
        settings: Loaded project settings
        which: Tool lookup function (defaults to shutil.which)
    """

    def __init__(
        self,
        settings: ProjectSettings,
        which: Optional[Callable[[str], Optional[str]]] = None,
    ):
        self.settings = settings
        self.which = which or shutil.which

    def required_tools(self, stage: Stage) -> List[str]:
        """Return the executables a stage invokes."""
        if stage is Stage.MEDIA_ENGINE:
            return [self.settings.media_engine.command[0]]
        if stage is Stage.CORE_LIBRARY:
            core = self.settings.core_library
            return [core.cargo, core.header_generator, LIPO]
        platform = self.settings.application_platform
        return [XCODEBUILD, LIPO, platform.dependency_manager[0]]

    def required_directories(self, stage: Stage) -> List[Path]:
        """Return the source directories a stage runs in."""
        if stage is Stage.MEDIA_ENGINE:
            return [self.settings.media_engine.source_dir]
        if stage is Stage.CORE_LIBRARY:
            return [self.settings.core_library.crate_dir]
        return [self.settings.application_platform.project_dir]

    def check(self, config: BuildConfiguration) -> None:
        """Check prerequisites for every stage selected by config.

        Raises:
            EnvironmentCheckError: Listing every missing tool or directory
        """
        missing = []
        for stage in config.stages():
            for tool in self._unique(self.required_tools(stage)):
                if not self._tool_available(tool, stage):
                    missing.append(f"{stage.label}: tool '{tool}' not found")
            for directory in self.required_directories(stage):
                if not directory.is_dir():
                    missing.append(f"{stage.label}: directory not found: {directory}")

        if missing:
            raise EnvironmentCheckError(missing)
        logger.debug("Environment check passed for stages: %s",
                     ", ".join(s.label for s in config.stages()))

    def _tool_available(self, tool: str, stage: Stage) -> bool:
        if self.which(tool):
            return True
        # Relative commands such as ./build.sh resolve against the stage directory
        for directory in self.required_directories(stage):
            candidate = directory / tool
            if candidate.is_file():
                return True
        return Path(tool).is_absolute() and Path(tool).is_file()

    @staticmethod
    def _unique(items: Iterable[str]) -> List[str]:
        seen: List[str] = []
        for item in items:
            if item not in seen:
                seen.append(item)
        return seen
