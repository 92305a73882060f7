"""Interface Header Generator.

This module runs the header generator (cbindgen) against the core
library's exported interface and places the resulting binding header at
its canonical path.

Design:
    - The generator is a black box; this wrapper only locates inputs,
      passes flags and moves the result into place
    - The header is written to a temporary file first, so a failed run
      never leaves a partial header at the output path
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..errors import ExternalBuildFailure, HeaderGenerationError
from .fs_utils import replace_file
from .tool_runner import ExternalTool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeaderArtifact:
    """A generated binding header."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name


class HeaderGenerator:
    """Generates the C binding header for the core library.

    Args:
        tool: ExternalTool used to run the generator
        executable: Header generator executable
    """

    def __init__(self, tool: ExternalTool, executable: str = "cbindgen"):
        self.tool = tool
        self.executable = executable

    def generate(
        self,
        interface_source_root: Path,
        config_file: Path,
        output_header: Path,
        entry_point: str = "src/lib.rs",
    ) -> HeaderArtifact:
        """Generate the binding header.

        Args:
            interface_source_root: Crate directory holding the interface sources
            config_file: Generator configuration file
            output_header: Final header path
            entry_point: Interface entry point, relative to interface_source_root

        Returns:
            HeaderArtifact for output_header

        Raises:
            HeaderGenerationError: If inputs are missing or the generator fails
        """
        entry = interface_source_root / entry_point
        if not entry.is_file():
            raise HeaderGenerationError(
                f"Interface entry point not found: {entry}", self.tool.stage
            )
        if not config_file.is_file():
            raise HeaderGenerationError(
                f"Header generator config not found: {config_file}", self.tool.stage
            )

        output_header.parent.mkdir(parents=True, exist_ok=True)
        tmp_header = output_header.with_name(f".{output_header.name}.tmp")
        tmp_header.unlink(missing_ok=True)

        cmd = [
            self.executable,
            "--config",
            str(config_file),
            "--output",
            str(tmp_header),
            str(entry),
        ]

        try:
            self.tool.check_run(cmd, cwd=interface_source_root)
        except ExternalBuildFailure as e:
            tmp_header.unlink(missing_ok=True)
            raise HeaderGenerationError(
                f"Header generation failed: {e.message}", self.tool.stage
            ) from e

        if not tmp_header.is_file():
            raise HeaderGenerationError(
                f"Header generator did not write {tmp_header}", self.tool.stage
            )

        replace_file(tmp_header, output_header, self.tool.stage)
        logger.debug("Generated binding header %s", output_header)
        return HeaderArtifact(path=output_header)
