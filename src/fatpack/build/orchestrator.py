"""
Pipeline orchestration for fatpack.

This module is the top-level driver. It validates the environment, then
runs the selected stages in fixed dependency order:

1. media-engine          (external native build system)
2. core-library          (cross-compile, merge, header, module map)
3. application-platform  (dependency install, per-SDK builds, merge)

Only one stage group runs per invocation and stages never run
concurrently. The first failure stops the run; no later stage is started.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.build_config import BuildConfiguration, BuildType, Stage
from ..config.environment import EnvironmentChecker
from ..config.project_settings import ProjectSettings
from ..errors import FilesystemError, PipelineError
from .layout import ArtifactLayout
from .stage_factory import StageFactory
from .tool_runner import SubprocessToolRunner, ToolRunner

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Result of a complete pipeline run."""

    success: bool
    build_type: BuildType
    stages_completed: List[Stage] = field(default_factory=list)
    artifacts: List[Path] = field(default_factory=list)
    build_time: float = 0.0
    message: str = ""
    failed_stage: Optional[str] = None


class PipelineOrchestrator:
    """
    Runs the fatpack pipeline for one BuildConfiguration.

    Example usage:
        settings = ProjectSettings.load(Path("."))
        orchestrator = PipelineOrchestrator(settings, verbose=True)
        result = orchestrator.run(
            BuildConfiguration(StageSelector.ALL, BuildType.RELEASE)
        )
        if result.success:
            for artifact in result.artifacts:
                print(artifact)
    """

    def __init__(
        self,
        settings: ProjectSettings,
        runner: Optional[ToolRunner] = None,
        verbose: bool = False,
        stage_factory: Optional[StageFactory] = None,
        environment_checker: Optional[EnvironmentChecker] = None,
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            settings: Project settings loaded at startup
            runner: ToolRunner for external commands (subprocess by default)
            verbose: Enable verbose output
            stage_factory: Factory for stage builders
            environment_checker: Prerequisite checker run before any stage
        """
        self.settings = settings
        self.verbose = verbose
        self.runner = runner or SubprocessToolRunner(verbose=verbose)
        self.stage_factory = stage_factory or StageFactory(
            settings, self.runner, verbose=verbose
        )
        self.environment_checker = environment_checker or EnvironmentChecker(settings)

    def run(self, config: BuildConfiguration) -> PipelineResult:
        """
        Execute the selected stages.

        Args:
            config: Stage selection and build type

        Returns:
            PipelineResult; success is False if the environment check or any
            stage failed, with failed_stage naming the stage
        """
        start_time = time.time()
        layout = ArtifactLayout(self.settings, config.build_type)
        stages = config.stages()
        completed: List[Stage] = []
        artifacts: List[Path] = []
        current: Optional[Stage] = None

        try:
            if self.verbose:
                print("[0] Checking build environment...")
            self.environment_checker.check(config)

            for index, stage in enumerate(stages, start=1):
                current = stage
                print(f"[{index}/{len(stages)}] Building {stage.label} "
                      f"({config.build_type.value})...")
                builder = self.stage_factory.create(stage, layout)
                stage_result = builder.build()
                completed.append(stage)
                artifacts.extend(stage_result.artifacts)
                logger.info("Stage %s completed in %.2fs", stage.label, stage_result.build_time)
                if self.verbose:
                    print(f"      Done in {stage_result.build_time:.2f}s")

            return PipelineResult(
                success=True,
                build_type=config.build_type,
                stages_completed=completed,
                artifacts=artifacts,
                build_time=time.time() - start_time,
                message="Build successful",
            )

        except OSError as e:
            error = FilesystemError(str(e), current.label if current else None)
            return self._failure(config, completed, artifacts, start_time, error, current)
        except PipelineError as e:
            return self._failure(config, completed, artifacts, start_time, e, current)
        except KeyboardInterrupt as ke:
            from fatpack.interrupt_utils import handle_keyboard_interrupt_properly
            handle_keyboard_interrupt_properly(ke)
            raise  # Never reached, but satisfies type checker

    def _failure(
        self,
        config: BuildConfiguration,
        completed: List[Stage],
        artifacts: List[Path],
        start_time: float,
        error: PipelineError,
        current: Optional[Stage],
    ) -> PipelineResult:
        if error.stage is None and current is not None:
            error.stage = current.label
        logger.error("Pipeline failed: %s", error)
        return PipelineResult(
            success=False,
            build_type=config.build_type,
            stages_completed=completed,
            artifacts=artifacts,
            build_time=time.time() - start_time,
            message=str(error),
            failed_stage=error.stage,
        )
