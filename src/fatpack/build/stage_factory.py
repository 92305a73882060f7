"""
Stage factory for the fatpack pipeline.

Centralizes the creation of stage builders so the orchestrator only deals
with the Stage enum, and tests can substitute their own builders.
"""

from typing import Dict, Type

from ..config.build_config import Stage
from ..config.project_settings import ProjectSettings
from .layout import ArtifactLayout
from .stage import StageBuilder
from .stage_core_library import CoreLibraryStage
from .stage_media_engine import MediaEngineStage
from .stage_platform import ApplicationPlatformStage
from .tool_runner import ToolRunner


class StageFactory:
    """
    Factory for creating stage builders.

    Example usage:
        factory = StageFactory(settings, runner, verbose=True)
        builder = factory.create(Stage.CORE_LIBRARY, layout)
        result = builder.build()
    """

    BUILDERS: Dict[Stage, Type[StageBuilder]] = {
        Stage.MEDIA_ENGINE: MediaEngineStage,
        Stage.CORE_LIBRARY: CoreLibraryStage,
        Stage.APPLICATION_PLATFORM: ApplicationPlatformStage,
    }

    def __init__(self, settings: ProjectSettings, runner: ToolRunner, verbose: bool = False):
        self.settings = settings
        self.runner = runner
        self.verbose = verbose

    def create(self, stage: Stage, layout: ArtifactLayout) -> StageBuilder:
        """Create the builder for one stage.

        Args:
            stage: Stage to build
            layout: Layout for the run's build type

        Returns:
            Configured StageBuilder
        """
        builder_class = self.BUILDERS[stage]
        return builder_class(self.settings, layout, self.runner, verbose=self.verbose)
