"""
Application-platform stage.

Installs the platform project's third-party dependencies, builds the
platform framework once per SDK (device and simulator) in isolated object
and symbol roots, and merges the two builds into one universal framework
and one universal dSYM. The core library's module descriptor and binding
header are installed into the merged bundle before it is relocated.

The stage links against the media-engine and core-library outputs for the
same build type, so both must already be in the canonical layout.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Tuple

from ..config.build_config import Stage
from ..errors import FilesystemError
from .fs_utils import fresh_directory, replace_tree
from .layout import MODULE_MAP_NAME
from .stage import StageBuilder
from .universal_merger import ArchitectureSlice, UniversalBinaryMerger

logger = logging.getLogger(__name__)

XCODEBUILD = "xcodebuild"


class ApplicationPlatformStage(StageBuilder):
    """Builds and merges the application-platform framework."""

    stage = Stage.APPLICATION_PLATFORM

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.merger = UniversalBinaryMerger(self.tool, show_progress=self.verbose)

    @property
    def framework_name(self) -> str:
        return self.settings.application_platform.framework_name

    def build_command(self, sdk: str) -> List[str]:
        """Platform build command for one SDK."""
        platform = self.settings.application_platform
        return [
            XCODEBUILD,
            "build",
            "-workspace",
            str(platform.workspace_path),
            "-scheme",
            platform.scheme,
            "-configuration",
            self.build_type.configuration,
            "-sdk",
            sdk,
            f"ARCHS={platform.archs_for(sdk)}",
            "ONLY_ACTIVE_ARCH=NO",
            f"OBJROOT={self.layout.platform_obj_root(sdk)}",
            f"SYMROOT={self.layout.platform_sym_root(sdk)}",
            "BUILD_LIBRARY_FOR_DISTRIBUTION=YES",
            "SKIP_INSTALL=NO",
            f"FATPACK_MEDIA_ENGINE_DIR={self.layout.build_type_root}",
            f"FATPACK_CORE_LIBRARY_DIR={self.layout.core_library_dir}",
        ]

    def _check_dependencies(self) -> None:
        hint = "Run the media-engine and core-library stages for this build type first."
        self._require(self.layout.media_engine_bundle, "Media-engine framework", hint)
        self._require(self.layout.core_library_binary, "Core library", hint)
        self._require(self.layout.binding_header, "Binding header", hint)
        self._require(self.layout.module_descriptor, "Module descriptor", hint)

    def _build_sdk(self, sdk: str) -> Tuple[Path, Path]:
        """Build one SDK and return its (framework, dSYM) products."""
        label = self.stage.label
        fresh_directory(self.layout.platform_obj_root(sdk), label)
        fresh_directory(self.layout.platform_sym_root(sdk), label)

        self._log(f"Building {self.framework_name} for {sdk}...")
        self.tool.check_run(
            self.build_command(sdk), cwd=self.settings.application_platform.project_dir
        )

        product_dir = self.layout.platform_product_dir(sdk)
        framework = self._require(
            product_dir / self.layout.platform_bundle.name, f"{sdk} framework"
        )
        dsym = self._require(
            product_dir / self.layout.platform_dsym.name, f"{sdk} debug symbols"
        )
        return framework, dsym

    def framework_slices(self, products: List[Tuple[str, Path]]) -> List[ArchitectureSlice]:
        """Binary slices (with their swiftmodule trees) of per-SDK frameworks."""
        platform = self.settings.application_platform
        name = self.framework_name
        return [
            ArchitectureSlice(
                binary_path=framework / name,
                arch=platform.archs_for(sdk),
                interface_dir=framework / "Modules" / f"{name}.swiftmodule",
            )
            for sdk, framework in products
        ]

    def dsym_slices(self, products: List[Tuple[str, Path]]) -> List[ArchitectureSlice]:
        """DWARF slices of per-SDK dSYM bundles."""
        platform = self.settings.application_platform
        return [
            ArchitectureSlice(
                binary_path=dsym / "Contents" / "Resources" / "DWARF" / self.framework_name,
                arch=platform.archs_for(sdk),
            )
            for sdk, dsym in products
        ]

    def _install_module(self, bundle: Path) -> None:
        """Copy the module descriptor and binding header into a bundle."""
        try:
            modules_dir = bundle / "Modules"
            modules_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(self.layout.module_descriptor, modules_dir / MODULE_MAP_NAME)

            headers_dir = bundle / "PrivateHeaders"
            headers_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(
                self.layout.binding_header, headers_dir / self.layout.binding_header.name
            )
        except OSError as e:
            raise FilesystemError(
                f"Failed to install module descriptor into {bundle}: {e}", self.stage.label
            ) from e

    def _build(self) -> List[Path]:
        platform = self.settings.application_platform
        label = self.stage.label

        self._check_dependencies()

        self._log("Installing dependencies...")
        self.tool.check_run(list(platform.dependency_manager), cwd=platform.project_dir)

        frameworks = []
        dsyms = []
        for sdk in platform.sdks:
            framework, dsym = self._build_sdk(sdk)
            frameworks.append((sdk, framework))
            dsyms.append((sdk, dsym))

        # The device build is the template; its binaries are replaced by the merges
        staging = fresh_directory(self.layout.staging_dir / "platform", label)
        staged_bundle = replace_tree(frameworks[0][1], staging / self.layout.platform_bundle.name, label)
        staged_dsym = replace_tree(dsyms[0][1], staging / self.layout.platform_dsym.name, label)

        self._log("Merging framework slices...")
        slices = self.framework_slices(frameworks)
        self.merger.merge(slices, staged_bundle / self.framework_name)
        self.merger.merge_interface_trees(
            slices, staged_bundle / "Modules" / f"{self.framework_name}.swiftmodule"
        )
        self.merger.merge(
            self.dsym_slices(dsyms),
            staged_dsym / "Contents" / "Resources" / "DWARF" / self.framework_name,
        )

        self._install_module(staged_bundle)
        self._stamp(staged_bundle)

        replace_tree(staged_bundle, self.layout.platform_bundle, label)
        replace_tree(staged_dsym, self.layout.platform_dsym, label)
        self._log(f"Framework: {self.layout.platform_bundle}")
        logger.debug("Application-platform stage relocated %s", staged_bundle)

        return [self.layout.platform_bundle, self.layout.platform_dsym]
