"""
Shared fixtures for fatpack tests.

FakeToolRunner stands in for every external tool. Instead of compiling it
writes the files each real tool would produce, so stages, merges and
relocation run for real against tmp_path.

Binaries written by the fake contain their architecture names as text;
the fake lipo merges them by concatenating those names, and
`lipo -archs` reads them back.
"""

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pytest

from fatpack.build.stage_core_library import arch_for_triple
from fatpack.build.tool_runner import ToolResult, ToolRunner
from fatpack.config import EnvironmentChecker, ProjectSettings

FATPACK_INI = """\
[package]
name = VoiceKit
package_version = 1.4.0
upstream_version = M120

[media_engine]
command = ./scripts/build_media_engine.sh
framework_name = MediaEngine
product_dir = out

[core_library]
crate_dir = core
library_name = voicekit_core

[application_platform]
project_dir = platform
workspace = VoiceKit.xcworkspace
scheme = VoiceKit
framework_name = VoiceKit
"""


class FakeToolRunner(ToolRunner):
    """Records invocations and simulates tool products on disk.

    Args:
        settings: Project settings (for framework and library names)
        fail_on: Tool keys that return a non-zero status without output
    """

    def __init__(self, settings: ProjectSettings, fail_on: Optional[Dict[str, int]] = None):
        self.settings = settings
        self.fail_on = dict(fail_on or {})
        self.calls: List[Tuple[List[str], Optional[Path]]] = []

    def tool_key(self, args: Sequence[str]) -> str:
        if args[0] == self.settings.media_engine.command[0]:
            return "media-engine"
        return Path(args[0]).name

    def invoked_tools(self) -> List[str]:
        return [self.tool_key(args) for args, _cwd in self.calls]

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ToolResult:
        args = [str(a) for a in args]
        self.calls.append((args, cwd))
        key = self.tool_key(args)

        if key in self.fail_on:
            return ToolResult(returncode=self.fail_on[key], stderr=f"{key}: simulated failure")

        handler = {
            "media-engine": self._media_engine,
            "cargo": self._cargo,
            "cbindgen": self._cbindgen,
            "lipo": self._lipo,
            "xcodebuild": self._xcodebuild,
            "pod": self._pod,
        }[key]
        return handler(args, cwd)

    @staticmethod
    def _option(args: List[str], name: str) -> str:
        return args[args.index(name) + 1]

    @staticmethod
    def _setting(args: List[str], name: str) -> str:
        prefix = f"{name}="
        return next(a[len(prefix):] for a in args if a.startswith(prefix))

    @staticmethod
    def _write(path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)

    def _media_engine(self, args, cwd):
        media = self.settings.media_engine
        product_dir = Path(self._option(args, "--output-dir")) / media.product_dir
        name = media.framework_name
        self._write(product_dir / f"{name}.framework" / name, "arm64 x86_64\n")
        self._write(product_dir / f"{name}.framework" / "Info.plist", "<plist/>\n")
        self._write(
            product_dir / f"{name}.framework.dSYM" / "Contents" / "Resources" / "DWARF" / name,
            "arm64 x86_64\n",
        )
        return ToolResult(returncode=0)

    def _cargo(self, args, cwd):
        core = self.settings.core_library
        profile = "release" if "--release" in args else "debug"
        triples = [args[i + 1] for i, a in enumerate(args) if a == "--target"]
        for triple in triples:
            self._write(
                Path(cwd) / "target" / triple / profile / core.binary_file_name,
                f"{arch_for_triple(triple)}\n",
            )
        return ToolResult(returncode=0)

    def _cbindgen(self, args, cwd):
        self._write(Path(self._option(args, "--output")), "#pragma once\nvoid vk_init(void);\n")
        return ToolResult(returncode=0)

    def _lipo(self, args, cwd):
        if "-archs" in args:
            binary = Path(self._option(args, "-archs"))
            return ToolResult(returncode=0, stdout=" ".join(binary.read_text().split()) + "\n")

        inputs = args[args.index("-create") + 1:args.index("-output")]
        archs: List[str] = []
        for item in inputs:
            archs.extend(Path(item).read_text().split())
        self._write(Path(self._option(args, "-output")), " ".join(archs) + "\n")
        return ToolResult(returncode=0)

    def _xcodebuild(self, args, cwd):
        platform = self.settings.application_platform
        name = platform.framework_name
        sdk = self._option(args, "-sdk")
        configuration = self._option(args, "-configuration")
        archs = self._setting(args, "ARCHS").split()
        product_dir = Path(self._setting(args, "SYMROOT")) / f"{configuration}-{sdk}"

        framework = product_dir / f"{name}.framework"
        self._write(framework / name, " ".join(archs) + "\n")
        self._write(framework / "Info.plist", "<plist/>\n")
        self._write(framework / "Headers" / f"{name}.h", "#import <Foundation/Foundation.h>\n")
        suffix = "-simulator" if sdk == platform.simulator_sdk else ""
        for arch in archs:
            self._write(
                framework / "Modules" / f"{name}.swiftmodule" / f"{arch}-apple-ios{suffix}.swiftinterface",
                f"// {arch}\n",
            )
        self._write(
            product_dir / f"{name}.framework.dSYM" / "Contents" / "Resources" / "DWARF" / name,
            " ".join(archs) + "\n",
        )
        return ToolResult(returncode=0)

    def _pod(self, args, cwd):
        self._write(Path(cwd) / "Pods" / "Manifest.lock", "PODFILE CHECKSUM: 0\n")
        return ToolResult(returncode=0)


@pytest.fixture
def project_dir(tmp_path):
    """Create a project tree with fatpack.ini and every stage's sources."""
    project = tmp_path / "project"
    (project / "scripts").mkdir(parents=True)
    (project / "scripts" / "build_media_engine.sh").write_text("#!/bin/sh\n")
    (project / "core" / "src").mkdir(parents=True)
    (project / "core" / "src" / "lib.rs").write_text("pub extern \"C\" fn vk_init() {}\n")
    (project / "core" / "cbindgen.toml").write_text("language = \"C\"\n")
    (project / "platform" / "VoiceKit.xcworkspace").mkdir(parents=True)
    (project / "fatpack.ini").write_text(FATPACK_INI)
    return project


@pytest.fixture
def settings(project_dir):
    """Project settings loaded without environment overrides."""
    return ProjectSettings.load(project_dir, environ={})


@pytest.fixture
def fake_runner(settings):
    """FakeToolRunner that succeeds for every tool."""
    return FakeToolRunner(settings)


@pytest.fixture
def env_checker(settings):
    """EnvironmentChecker that finds every tool on PATH."""
    return EnvironmentChecker(settings, which=lambda tool: f"/usr/bin/{tool}")


@pytest.fixture
def make_runner(settings):
    """Factory for FakeToolRunner instances with simulated failures."""

    def _make(fail_on: Optional[Dict[str, int]] = None) -> FakeToolRunner:
        return FakeToolRunner(settings, fail_on=fail_on)

    return _make
