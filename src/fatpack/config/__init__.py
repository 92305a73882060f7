"""Configuration modules for fatpack."""

from .build_config import STAGE_ORDER, BuildConfiguration, BuildType, Stage, StageSelector
from .environment import EnvironmentChecker
from .project_settings import (
    CONFIG_FILE_NAME,
    ApplicationPlatformSettings,
    CoreLibrarySettings,
    MediaEngineSettings,
    ProjectSettings,
)

__all__ = [
    "STAGE_ORDER",
    "BuildConfiguration",
    "BuildType",
    "Stage",
    "StageSelector",
    "EnvironmentChecker",
    "CONFIG_FILE_NAME",
    "ApplicationPlatformSettings",
    "CoreLibrarySettings",
    "MediaEngineSettings",
    "ProjectSettings",
]
