"""
Build configuration for a single pipeline run.

A BuildConfiguration is created once from the command line and never
changes while the pipeline runs. It decides which stages execute and which
per-build-type output subtree they write into.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Stage(Enum):
    """Independently buildable parts of the package, in dependency order."""

    MEDIA_ENGINE = "media-engine"
    CORE_LIBRARY = "core-library"
    APPLICATION_PLATFORM = "application-platform"

    @property
    def label(self) -> str:
        return self.value


# The application platform links against both earlier stages.
STAGE_ORDER: Tuple[Stage, ...] = (
    Stage.MEDIA_ENGINE,
    Stage.CORE_LIBRARY,
    Stage.APPLICATION_PLATFORM,
)


class StageSelector(Enum):
    """Which stage group a run executes."""

    ALL = "all"
    MEDIA_ENGINE = "media-engine"
    CORE_LIBRARY = "core-library"
    APPLICATION_PLATFORM = "application-platform"


class BuildType(Enum):
    """Build configuration forwarded to every external tool."""

    DEBUG = "debug"
    RELEASE = "release"

    @property
    def configuration(self) -> str:
        """Capitalised name used by Xcode-style tools ("Debug"/"Release")."""
        return self.value.capitalize()

    @property
    def is_release(self) -> bool:
        return self is BuildType.RELEASE


@dataclass(frozen=True)
class BuildConfiguration:
    """Stage selection plus build type for one pipeline invocation."""

    stage_selector: StageSelector = StageSelector.ALL
    build_type: BuildType = BuildType.RELEASE

    def stages(self) -> Tuple[Stage, ...]:
        """Return the stages to execute in fixed dependency order.

        Returns:
            All three stages for StageSelector.ALL, otherwise exactly the
            selected one.
        """
        if self.stage_selector is StageSelector.ALL:
            return STAGE_ORDER
        return tuple(
            stage for stage in STAGE_ORDER if stage.value == self.stage_selector.value
        )
