"""
Abstract base class for pipeline stages.

Each stage invokes its external build, then relocates, merges and stamps
the outputs into the canonical layout. A stage either completes fully or
raises; nothing is moved into a final path before the producing step has
succeeded.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config.build_config import Stage
from ..config.project_settings import ProjectSettings
from ..errors import MissingSliceError
from .layout import ArtifactLayout
from .provenance import Provenance, write_provenance
from .tool_runner import ExternalTool, ToolRunner


@dataclass
class StageResult:
    """Outputs of one completed stage."""

    stage: Stage
    artifacts: List[Path] = field(default_factory=list)
    build_time: float = 0.0


class StageBuilder(ABC):
    """Base class for the media-engine, core-library and platform stages.

    Args:
        settings: Project settings
        layout: Artifact layout for the run's build type
        runner: ToolRunner used for every external command
        verbose: Print per-step progress
    """

    stage: Stage

    def __init__(
        self,
        settings: ProjectSettings,
        layout: ArtifactLayout,
        runner: ToolRunner,
        verbose: bool = False,
    ):
        self.settings = settings
        self.layout = layout
        self.runner = runner
        self.verbose = verbose
        self.tool = ExternalTool(runner, self.stage.label)

    @property
    def build_type(self):
        return self.layout.build_type

    def build(self) -> StageResult:
        """Run the stage to completion.

        Returns:
            StageResult listing the final artifacts

        Raises:
            PipelineError: On any failure, labelled with this stage
        """
        start_time = time.time()
        artifacts = self._build()
        return StageResult(
            stage=self.stage,
            artifacts=artifacts,
            build_time=time.time() - start_time,
        )

    @abstractmethod
    def _build(self) -> List[Path]:
        """Stage-specific work; returns the final artifact paths."""
        pass

    def _log(self, message: str) -> None:
        if self.verbose:
            print(f"      {message}")

    def _stamp(self, bundle: Path) -> Path:
        """Write provenance metadata into a bundle."""
        provenance = Provenance(
            upstream_version=self.settings.upstream_version,
            package_version=self.settings.package_version,
        )
        return write_provenance(bundle, provenance)

    def _require(self, path: Path, description: str, hint: Optional[str] = None) -> Path:
        """Fail with a stage-labelled error if an expected product is absent."""
        if not path.exists():
            message = f"{description} not found: {path}"
            if hint:
                message += f"\n{hint}"
            raise MissingSliceError(message, self.stage.label)
        return path
