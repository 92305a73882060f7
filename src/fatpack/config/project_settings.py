"""
fatpack.ini configuration parser.

This module reads the project file that describes where each stage's
sources live, which tools to call and which versions to stamp into the
produced bundles. It is read once at startup; every component receives the
resulting ProjectSettings explicitly.

Example fatpack.ini:
    [package]
    name = VoiceKit
    package_version = 1.4.0
    upstream_version = M120

    [media_engine]
    command = ./scripts/build_media_engine.sh
    framework_name = MediaEngine

    [core_library]
    crate_dir = core
    library_name = voicekit_core

    [application_platform]
    project_dir = platform
    workspace = VoiceKit.xcworkspace
    scheme = VoiceKit
    framework_name = VoiceKit
"""

import configparser
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from ..errors import ProjectSettingsError

CONFIG_FILE_NAME = "fatpack.ini"

DEFAULT_TARGETS = ("aarch64-apple-ios", "x86_64-apple-ios")


@dataclass(frozen=True)
class MediaEngineSettings:
    """Settings for the external media-engine build system."""

    command: Tuple[str, ...]
    framework_name: str
    source_dir: Path
    product_dir: str = "."


@dataclass(frozen=True)
class CoreLibrarySettings:
    """Settings for the cross-compiled core interface library."""

    crate_dir: Path
    library_name: str
    targets: Tuple[str, ...] = DEFAULT_TARGETS
    header_config: str = "cbindgen.toml"
    interface_entry: str = "src/lib.rs"
    header_name: str = ""
    cargo: str = "cargo"
    header_generator: str = "cbindgen"

    @property
    def binary_file_name(self) -> str:
        """Static library file name (e.g. libvoicekit_core.a)."""
        return f"lib{self.library_name}.a"

    @property
    def header_file_name(self) -> str:
        return self.header_name or f"{self.library_name}.h"


@dataclass(frozen=True)
class ApplicationPlatformSettings:
    """Settings for the application-platform framework build."""

    project_dir: Path
    workspace: str
    scheme: str
    framework_name: str
    device_sdk: str = "iphoneos"
    simulator_sdk: str = "iphonesimulator"
    device_archs: str = "arm64"
    simulator_archs: str = "x86_64"
    dependency_manager: Tuple[str, ...] = ("pod", "install")

    @property
    def workspace_path(self) -> Path:
        return self.project_dir / self.workspace

    @property
    def sdks(self) -> Tuple[str, str]:
        """SDKs built per run; the device SDK comes first."""
        return (self.device_sdk, self.simulator_sdk)

    def archs_for(self, sdk: str) -> str:
        """Space separated architectures built for one SDK."""
        if sdk == self.device_sdk:
            return self.device_archs
        return self.simulator_archs


@dataclass(frozen=True)
class ProjectSettings:
    """Everything the pipeline needs to know about a project."""

    project_dir: Path
    name: str
    package_version: str
    upstream_version: str
    output_dir: Path
    work_dir: Path
    media_engine: MediaEngineSettings
    core_library: CoreLibrarySettings
    application_platform: ApplicationPlatformSettings

    @classmethod
    def load(
        cls,
        project_dir: Path,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ProjectSettings":
        """Load settings from <project_dir>/fatpack.ini.

        Environment overrides (FATPACK_OUTPUT_DIR, FATPACK_UPSTREAM_VERSION,
        FATPACK_PACKAGE_VERSION) are applied here and nowhere else.

        Args:
            project_dir: Directory containing fatpack.ini
            environ: Environment mapping (defaults to os.environ)

        Returns:
            Fully resolved ProjectSettings

        Raises:
            ProjectSettingsError: If the file is missing, unparsable or
                lacks a required key
        """
        project_dir = Path(project_dir).resolve()
        ini_path = project_dir / CONFIG_FILE_NAME
        if not ini_path.exists():
            raise ProjectSettingsError(f"Configuration file not found: {ini_path}")

        parser = configparser.ConfigParser(
            interpolation=configparser.ExtendedInterpolation()
        )
        try:
            parser.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ProjectSettingsError(f"Failed to parse {ini_path}: {e}") from e

        env = os.environ if environ is None else environ
        reader = _SectionReader(parser, ini_path)

        package_version = env.get("FATPACK_PACKAGE_VERSION") or reader.require(
            "package", "package_version"
        )
        upstream_version = env.get("FATPACK_UPSTREAM_VERSION") or reader.require(
            "package", "upstream_version"
        )
        output_dir = env.get("FATPACK_OUTPUT_DIR") or reader.get(
            "package", "output_dir", "dist"
        )

        media_engine = MediaEngineSettings(
            command=tuple(shlex.split(reader.require("media_engine", "command"))),
            framework_name=reader.require("media_engine", "framework_name"),
            source_dir=_resolve(
                project_dir, reader.get("media_engine", "source_dir", ".")
            ),
            product_dir=reader.get("media_engine", "product_dir", "."),
        )
        if not media_engine.command:
            raise ProjectSettingsError(
                f"[media_engine] command is empty in {ini_path}"
            )

        targets = tuple(
            reader.get("core_library", "targets", " ".join(DEFAULT_TARGETS)).split()
        )
        if not targets:
            raise ProjectSettingsError(
                f"[core_library] targets must list at least one triple in {ini_path}"
            )
        core_library = CoreLibrarySettings(
            crate_dir=_resolve(project_dir, reader.require("core_library", "crate_dir")),
            library_name=reader.require("core_library", "library_name"),
            targets=targets,
            header_config=reader.get("core_library", "header_config", "cbindgen.toml"),
            interface_entry=reader.get("core_library", "interface_entry", "src/lib.rs"),
            header_name=reader.get("core_library", "header_name", ""),
            cargo=reader.get("core_library", "cargo", "cargo"),
            header_generator=reader.get("core_library", "header_generator", "cbindgen"),
        )

        application_platform = ApplicationPlatformSettings(
            project_dir=_resolve(
                project_dir, reader.require("application_platform", "project_dir")
            ),
            workspace=reader.require("application_platform", "workspace"),
            scheme=reader.require("application_platform", "scheme"),
            framework_name=reader.require("application_platform", "framework_name"),
            device_sdk=reader.get("application_platform", "device_sdk", "iphoneos"),
            simulator_sdk=reader.get(
                "application_platform", "simulator_sdk", "iphonesimulator"
            ),
            device_archs=reader.get("application_platform", "device_archs", "arm64"),
            simulator_archs=reader.get(
                "application_platform", "simulator_archs", "x86_64"
            ),
            dependency_manager=tuple(
                shlex.split(
                    reader.get("application_platform", "dependency_manager", "pod install")
                )
            ),
        )

        return cls(
            project_dir=project_dir,
            name=reader.get("package", "name", project_dir.name),
            package_version=package_version,
            upstream_version=upstream_version,
            output_dir=_resolve(project_dir, output_dir),
            work_dir=_resolve(project_dir, reader.get("package", "work_dir", ".fatpack")),
            media_engine=media_engine,
            core_library=core_library,
            application_platform=application_platform,
        )


class _SectionReader:
    """Small helper for reading required and optional INI values."""

    def __init__(self, parser: configparser.ConfigParser, ini_path: Path):
        self.parser = parser
        self.ini_path = ini_path

    def get(self, section: str, key: str, default: str) -> str:
        if not self.parser.has_section(section):
            return default
        value = self.parser.get(section, key, fallback=default)
        return value.strip() if value is not None else default

    def require(self, section: str, key: str) -> str:
        if not self.parser.has_section(section):
            raise ProjectSettingsError(
                f"Section [{section}] not found in {self.ini_path}"
            )
        value = self.parser.get(section, key, fallback="").strip()
        if not value:
            raise ProjectSettingsError(
                f"Missing required key '{key}' in [{section}] of {self.ini_path}"
            )
        return value


def _resolve(base: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return path.resolve()
