"""
Media-engine stage.

Runs the media engine's own build system, which produces a framework
bundle and its debug symbols, then relocates both into the canonical
layout and stamps provenance.
"""

import logging
from pathlib import Path
from typing import List

from ..config.build_config import Stage
from .fs_utils import fresh_directory, replace_tree
from .stage import StageBuilder

logger = logging.getLogger(__name__)


class MediaEngineStage(StageBuilder):
    """Builds and relocates the media-engine framework."""

    stage = Stage.MEDIA_ENGINE

    def command(self, output_dir: Path) -> List[str]:
        """Media-engine build command for the current build type."""
        media = self.settings.media_engine
        return [
            *media.command,
            "--output-dir",
            str(output_dir),
            "--configuration",
            self.build_type.configuration,
        ]

    def _build(self) -> List[Path]:
        media = self.settings.media_engine
        label = self.stage.label

        output_dir = fresh_directory(self.layout.media_engine_work_dir, label)
        self._log(f"Running media-engine build ({self.build_type.configuration})...")
        self.tool.check_run(self.command(output_dir), cwd=media.source_dir)

        product_dir = output_dir / media.product_dir
        bundle = self._require(
            product_dir / self.layout.media_engine_bundle.name, "Media-engine framework"
        )
        dsym = self._require(
            product_dir / self.layout.media_engine_dsym.name, "Media-engine debug symbols"
        )

        # Stamp the freshly built copy so the final bundle appears complete
        self._stamp(bundle)
        replace_tree(bundle, self.layout.media_engine_bundle, label)
        replace_tree(dsym, self.layout.media_engine_dsym, label)
        self._log(f"Framework: {self.layout.media_engine_bundle}")
        logger.debug("Media-engine stage relocated %s", bundle)

        return [self.layout.media_engine_bundle, self.layout.media_engine_dsym]
