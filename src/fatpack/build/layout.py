"""Canonical artifact layout for fatpack outputs.

This module defines where every stage writes its products. Debug and
release outputs live in disjoint subtrees so both can coexist.

Layout Structure:
    <output_dir>/
    ├── debug/ | release/
    │   ├── {Media}.framework/          # Media-engine bundle + BUILD_INFO
    │   ├── {Media}.framework.dSYM/
    │   ├── CoreLibrary/
    │   │   ├── lib{name}.a             # Universal static library
    │   │   ├── {name}.h                # Generated binding header
    │   │   └── module.modulemap        # Module descriptor
    │   ├── {Platform}.framework/       # Universal platform bundle + BUILD_INFO
    │   └── {Platform}.framework.dSYM/
    <work_dir>/
    └── debug/ | release/
        ├── media-engine/               # Media-engine tool output directory
        ├── staging/                    # Merge results before relocation
        └── platform/{sdk}/
            ├── obj/                    # Isolated OBJROOT
            └── sym/                    # Isolated SYMROOT

Nothing reaches a final path until the step producing it has fully
succeeded; partial results stay under the work directory.
"""

from pathlib import Path
from typing import List

from ..config.build_config import BuildType
from ..config.project_settings import ProjectSettings

CORE_LIBRARY_DIR_NAME = "CoreLibrary"
MODULE_MAP_NAME = "module.modulemap"
PROVENANCE_FILE_NAME = "BUILD_INFO"


class ArtifactLayout:
    """Resolves canonical paths for one build type.

    Args:
        settings: Project settings
        build_type: Build type whose subtree this layout addresses
    """

    def __init__(self, settings: ProjectSettings, build_type: BuildType):
        self.settings = settings
        self.build_type = build_type

    @classmethod
    def for_all_build_types(cls, settings: ProjectSettings) -> List["ArtifactLayout"]:
        """Return one layout per build type (debug first)."""
        return [cls(settings, build_type) for build_type in BuildType]

    @property
    def build_type_root(self) -> Path:
        """Final output subtree for this build type."""
        return self.settings.output_dir / self.build_type.value

    @property
    def work_root(self) -> Path:
        """Scratch subtree for this build type."""
        return self.settings.work_dir / self.build_type.value

    @property
    def staging_dir(self) -> Path:
        return self.work_root / "staging"

    # Media engine

    @property
    def media_engine_bundle(self) -> Path:
        return self.build_type_root / f"{self.settings.media_engine.framework_name}.framework"

    @property
    def media_engine_dsym(self) -> Path:
        return self.build_type_root / f"{self.media_engine_bundle.name}.dSYM"

    @property
    def media_engine_work_dir(self) -> Path:
        """Output directory handed to the media-engine build system."""
        return self.work_root / "media-engine"

    # Core library

    @property
    def core_library_dir(self) -> Path:
        return self.build_type_root / CORE_LIBRARY_DIR_NAME

    @property
    def core_library_binary(self) -> Path:
        return self.core_library_dir / self.settings.core_library.binary_file_name

    @property
    def binding_header(self) -> Path:
        return self.core_library_dir / self.settings.core_library.header_file_name

    @property
    def module_descriptor(self) -> Path:
        return self.core_library_dir / MODULE_MAP_NAME

    def slice_library(self, triple: str) -> Path:
        """Path where the cross-compiler leaves the slice for one target triple.

        Args:
            triple: Target triple (e.g. 'aarch64-apple-ios')
        """
        core = self.settings.core_library
        return core.crate_dir / "target" / triple / self.build_type.value / core.binary_file_name

    # Application platform

    @property
    def platform_bundle(self) -> Path:
        return (
            self.build_type_root
            / f"{self.settings.application_platform.framework_name}.framework"
        )

    @property
    def platform_dsym(self) -> Path:
        return self.build_type_root / f"{self.platform_bundle.name}.dSYM"

    def platform_obj_root(self, sdk: str) -> Path:
        return self.work_root / "platform" / sdk / "obj"

    def platform_sym_root(self, sdk: str) -> Path:
        return self.work_root / "platform" / sdk / "sym"

    def platform_product_dir(self, sdk: str) -> Path:
        """Directory the platform build tool writes products into for one SDK."""
        return self.platform_sym_root(sdk) / f"{self.build_type.configuration}-{sdk}"

    # Shared

    @staticmethod
    def provenance_file(bundle: Path) -> Path:
        return bundle / PROVENANCE_FILE_NAME

    def canonical_outputs(self) -> List[Path]:
        """Every final output path for this build type."""
        return [
            self.media_engine_bundle,
            self.media_engine_dsym,
            self.core_library_dir,
            self.platform_bundle,
            self.platform_dsym,
        ]

    def external_caches(self) -> List[Path]:
        """Caches created by tools fatpack invokes, outside the output root.

        Includes the cross-compilation target tree, the dependency-manager
        install tree and the IDE workspace user-state tree.
        """
        platform = self.settings.application_platform
        return [
            self.settings.core_library.crate_dir / "target",
            platform.project_dir / "Pods",
            platform.workspace_path / "xcuserdata",
        ]
