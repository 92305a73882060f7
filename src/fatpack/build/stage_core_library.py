"""
Core-library stage.

Cross-compiles the core interface library for every configured target
triple, merges the per-triple static libraries into one universal library,
generates the binding header and composes the module descriptor. All three
are assembled in a staging directory and relocated together.
"""

import logging
from pathlib import Path
from typing import List

from ..config.build_config import Stage
from .fs_utils import fresh_directory, replace_tree
from .header_generator import HeaderGenerator
from .layout import CORE_LIBRARY_DIR_NAME, MODULE_MAP_NAME
from .module_map import compose_module_map, write_module_map
from .stage import StageBuilder
from .universal_merger import ArchitectureSlice, UniversalBinaryMerger

logger = logging.getLogger(__name__)

# Triple prefixes whose name differs from the Mach-O architecture name
_TRIPLE_ARCH_NAMES = {
    "aarch64": "arm64",
}


def arch_for_triple(triple: str) -> str:
    """Return the Mach-O architecture name for a target triple.

    Example:
        arch_for_triple("aarch64-apple-ios") -> "arm64"
    """
    prefix = triple.split("-", 1)[0]
    return _TRIPLE_ARCH_NAMES.get(prefix, prefix)


class CoreLibraryStage(StageBuilder):
    """Builds the universal core library, binding header and module map."""

    stage = Stage.CORE_LIBRARY

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.merger = UniversalBinaryMerger(self.tool, show_progress=self.verbose)
        self.header_generator = HeaderGenerator(
            self.tool, executable=self.settings.core_library.header_generator
        )

    def command(self) -> List[str]:
        """Cross-compilation command for every target triple."""
        core = self.settings.core_library
        cmd = [core.cargo, "build", "--lib"]
        for triple in core.targets:
            cmd.extend(["--target", triple])
        if self.build_type.is_release:
            cmd.append("--release")
        return cmd

    def slices(self) -> List[ArchitectureSlice]:
        """Static library slices the cross-compiler produces."""
        return [
            ArchitectureSlice(
                binary_path=self.layout.slice_library(triple),
                arch=arch_for_triple(triple),
            )
            for triple in self.settings.core_library.targets
        ]

    def _build(self) -> List[Path]:
        core = self.settings.core_library
        label = self.stage.label

        self._log(f"Cross-compiling for {', '.join(core.targets)}...")
        self.tool.check_run(self.command(), cwd=core.crate_dir)

        staging = fresh_directory(self.layout.staging_dir / CORE_LIBRARY_DIR_NAME, label)

        self._log("Merging static library slices...")
        self.merger.merge(self.slices(), staging / core.binary_file_name)

        self._log("Generating binding header...")
        header = self.header_generator.generate(
            interface_source_root=core.crate_dir,
            config_file=core.crate_dir / core.header_config,
            output_header=staging / core.header_file_name,
            entry_point=core.interface_entry,
        )

        descriptor = compose_module_map(
            framework_name=self.settings.application_platform.framework_name,
            header_file_name=header.name,
            binary_name=core.library_name,
        )
        write_module_map(staging / MODULE_MAP_NAME, descriptor)

        replace_tree(staging, self.layout.core_library_dir, label)
        self._log(f"Core library: {self.layout.core_library_dir}")
        logger.debug("Core-library stage relocated %s", staging)

        return [
            self.layout.core_library_binary,
            self.layout.binding_header,
            self.layout.module_descriptor,
        ]
