"""Universal Binary Merger.

This module combines single-architecture binaries (slices) into one
universal binary with lipo, and merges the per-architecture module
interface trees that ship beside framework binaries.

Design:
    - All validation happens before anything is written; a rejected merge
      leaves no output file behind
    - A single slice is copied rather than run through lipo
    - lipo writes to a temporary file that is moved into place on success
    - Interface trees are plain files keyed by architecture; they are
      copied side by side, never binary-merged
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import BinaryNameMismatch, FilesystemError, MergeError, MissingSliceError
from .fs_utils import replace_file
from .tool_runner import ExternalTool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchitectureSlice:
    """A binary built for exactly one architecture.

    Attributes:
        binary_path: Path to the single-architecture binary
        arch: Architecture name (e.g. "arm64", "x86_64")
        interface_dir: Optional companion interface tree (e.g. a
            .swiftmodule directory holding per-architecture files)
    """

    binary_path: Path
    arch: str
    interface_dir: Optional[Path] = None

    @property
    def binary_name(self) -> str:
        """Logical binary name shared by every slice of one universal binary."""
        return self.binary_path.name


class UniversalBinaryMerger:
    """Merges architecture slices into universal binaries.

    Args:
        tool: ExternalTool used to call lipo
        lipo: lipo executable
        show_progress: Whether to print merge progress
    """

    def __init__(self, tool: ExternalTool, lipo: str = "lipo", show_progress: bool = False):
        self.tool = tool
        self.lipo = lipo
        self.show_progress = show_progress

    def validate(self, slices: Sequence[ArchitectureSlice]) -> str:
        """Check that slices can be merged.

        Returns:
            The shared binary name

        Raises:
            MissingSliceError: If there are no slices or a slice file is absent
            BinaryNameMismatch: If the slices name different binaries
        """
        if not slices:
            raise MissingSliceError("No architecture slices to merge", self.tool.stage)

        names = sorted({s.binary_name for s in slices})
        if len(names) > 1:
            raise BinaryNameMismatch(
                f"Cannot merge slices of different binaries: {', '.join(names)}",
                self.tool.stage,
            )

        for s in slices:
            if not s.binary_path.is_file():
                raise MissingSliceError(
                    f"Slice for {s.arch} not found: {s.binary_path}", self.tool.stage
                )
        return names[0]

    def merge(self, slices: Sequence[ArchitectureSlice], output_binary: Path) -> Path:
        """Merge slices into output_binary.

        Args:
            slices: Slices in the order they should appear in the output
            output_binary: Destination path (overwritten)

        Returns:
            output_binary

        Raises:
            MergeError: On invalid slices
            ExternalBuildFailure: If lipo fails
            FilesystemError: If the result cannot be moved into place
        """
        binary_name = self.validate(slices)
        output_binary.parent.mkdir(parents=True, exist_ok=True)
        tmp_output = output_binary.with_name(f".{output_binary.name}.tmp")

        if len(slices) == 1:
            try:
                shutil.copy2(slices[0].binary_path, tmp_output)
            except OSError as e:
                raise FilesystemError(
                    f"Failed to copy slice {slices[0].binary_path}: {e}", self.tool.stage
                ) from e
        else:
            cmd = [self.lipo, "-create"]
            cmd.extend(str(s.binary_path) for s in slices)
            cmd.extend(["-output", str(tmp_output)])
            try:
                self.tool.check_run(cmd)
            except Exception:
                tmp_output.unlink(missing_ok=True)
                raise
            if not tmp_output.exists():
                raise MergeError(
                    f"lipo did not produce {tmp_output}", self.tool.stage
                )

        replace_file(tmp_output, output_binary, self.tool.stage)

        if self.show_progress:
            archs = ", ".join(s.arch for s in slices)
            print(f"      Merged {binary_name} ({archs})")
        logger.debug("Merged %d slice(s) of %s into %s", len(slices), binary_name, output_binary)
        return output_binary

    def merge_interface_trees(
        self, slices: Sequence[ArchitectureSlice], output_dir: Path
    ) -> Path:
        """Copy every slice's interface tree into output_dir.

        Files keep their relative sub-paths, which are keyed by architecture
        (e.g. arm64-apple-ios.swiftinterface), so trees from different
        slices sit side by side. output_dir is only created when at least
        one slice has a tree to copy.

        Raises:
            FilesystemError: If a copy fails
        """
        for s in slices:
            if s.interface_dir is None:
                continue
            if not s.interface_dir.is_dir():
                logger.warning("Interface tree for %s not found: %s", s.arch, s.interface_dir)
                continue
            try:
                shutil.copytree(s.interface_dir, output_dir, dirs_exist_ok=True)
            except OSError as e:
                raise FilesystemError(
                    f"Failed to merge interface tree {s.interface_dir}: {e}",
                    self.tool.stage,
                ) from e
        return output_dir

    def architectures(self, binary: Path) -> List[str]:
        """Return the architectures present in a binary (lipo -archs).

        Raises:
            ExternalBuildFailure: If lipo fails
        """
        result = self.tool.check_run([self.lipo, "-archs", str(binary)])
        return result.stdout.split()
