"""
Unit tests for PipelineOrchestrator.

Stage ordering is checked with mocked builders; end-to-end layout
scenarios run the real stages against FakeToolRunner.
"""

from unittest.mock import MagicMock, Mock

import pytest

from fatpack.build.layout import ArtifactLayout
from fatpack.build.orchestrator import PipelineOrchestrator, PipelineResult
from fatpack.build.stage import StageResult
from fatpack.config import BuildConfiguration, BuildType, Stage, StageSelector
from fatpack.errors import EnvironmentCheckError, ExternalBuildFailure


def _recording_factory(calls, fail_stage=None):
    """StageFactory stand-in that records which stages are built."""
    factory = MagicMock()

    def create(stage, layout):
        builder = Mock()

        def build():
            calls.append((stage, layout.build_type))
            if stage is fail_stage:
                raise ExternalBuildFailure(stage.label, ["tool"], 1)
            return StageResult(stage=stage, artifacts=[layout.build_type_root / stage.label])

        builder.build.side_effect = build
        return builder

    factory.create.side_effect = create
    return factory


def _bundle_files(root):
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())


class TestStageOrdering:
    """Test cases for which stages run and in what order."""

    @pytest.mark.parametrize("selector,expected", [
        (StageSelector.ALL, [Stage.MEDIA_ENGINE, Stage.CORE_LIBRARY, Stage.APPLICATION_PLATFORM]),
        (StageSelector.MEDIA_ENGINE, [Stage.MEDIA_ENGINE]),
        (StageSelector.CORE_LIBRARY, [Stage.CORE_LIBRARY]),
        (StageSelector.APPLICATION_PLATFORM, [Stage.APPLICATION_PLATFORM]),
    ])
    def test_selected_stages_run_in_order(self, settings, fake_runner, env_checker, selector, expected):
        calls = []
        orchestrator = PipelineOrchestrator(
            settings,
            runner=fake_runner,
            stage_factory=_recording_factory(calls),
            environment_checker=env_checker,
        )

        result = orchestrator.run(BuildConfiguration(selector, BuildType.DEBUG))

        assert result.success
        assert result.stages_completed == expected
        assert calls == [(stage, BuildType.DEBUG) for stage in expected]

    def test_failure_stops_later_stages(self, settings, fake_runner, env_checker):
        """Test that no stage starts after a failing one."""
        calls = []
        orchestrator = PipelineOrchestrator(
            settings,
            runner=fake_runner,
            stage_factory=_recording_factory(calls, fail_stage=Stage.CORE_LIBRARY),
            environment_checker=env_checker,
        )

        result = orchestrator.run(BuildConfiguration())

        assert not result.success
        assert result.failed_stage == "core-library"
        assert result.stages_completed == [Stage.MEDIA_ENGINE]
        assert [stage for stage, _ in calls] == [Stage.MEDIA_ENGINE, Stage.CORE_LIBRARY]

    def test_progress_lines(self, settings, fake_runner, env_checker, capsys):
        orchestrator = PipelineOrchestrator(
            settings,
            runner=fake_runner,
            stage_factory=_recording_factory([]),
            environment_checker=env_checker,
        )

        orchestrator.run(BuildConfiguration(StageSelector.ALL, BuildType.RELEASE))

        out = capsys.readouterr().out
        assert "[1/3] Building media-engine (release)..." in out
        assert "[3/3] Building application-platform (release)..." in out


class TestEnvironmentCheck:
    """Test cases for the up-front prerequisite check."""

    def test_missing_tool_runs_nothing(self, settings, fake_runner):
        """Test that a missing tool fails the run before any stage starts."""
        calls = []
        checker = Mock()
        checker.check.side_effect = EnvironmentCheckError(["core-library: tool 'cargo' not found"])
        orchestrator = PipelineOrchestrator(
            settings,
            runner=fake_runner,
            stage_factory=_recording_factory(calls),
            environment_checker=checker,
        )

        result = orchestrator.run(BuildConfiguration())

        assert not result.success
        assert result.failed_stage is None
        assert "cargo" in result.message
        assert calls == []
        assert fake_runner.calls == []

    def test_uses_configuration(self, settings, fake_runner):
        checker = Mock()
        orchestrator = PipelineOrchestrator(
            settings,
            runner=fake_runner,
            stage_factory=_recording_factory([]),
            environment_checker=checker,
        )
        config = BuildConfiguration(StageSelector.CORE_LIBRARY, BuildType.DEBUG)

        orchestrator.run(config)

        checker.check.assert_called_once_with(config)


class TestPipelineScenarios:
    """End-to-end runs against the fake tools."""

    def _orchestrator(self, settings, runner, env_checker):
        return PipelineOrchestrator(settings, runner=runner, environment_checker=env_checker)

    def test_core_library_release_only(self, settings, fake_runner, env_checker):
        """Test that a single-stage run touches only its own outputs."""
        result = self._orchestrator(settings, fake_runner, env_checker).run(
            BuildConfiguration(StageSelector.CORE_LIBRARY, BuildType.RELEASE)
        )

        assert result.success
        release_root = settings.output_dir / "release"
        assert [p.name for p in release_root.iterdir()] == ["CoreLibrary"]
        assert sorted(p.name for p in (release_root / "CoreLibrary").iterdir()) == [
            "libvoicekit_core.a",
            "module.modulemap",
            "voicekit_core.h",
        ]
        assert not (settings.output_dir / "debug").exists()

    def test_full_debug_then_release(self, settings, fake_runner, env_checker):
        """Test that debug and release trees coexist and stay intact."""
        orchestrator = self._orchestrator(settings, fake_runner, env_checker)

        debug = orchestrator.run(BuildConfiguration(StageSelector.ALL, BuildType.DEBUG))
        debug_root = settings.output_dir / "debug"
        debug_files = _bundle_files(debug_root)
        release = orchestrator.run(BuildConfiguration(StageSelector.ALL, BuildType.RELEASE))

        assert debug.success and release.success
        assert _bundle_files(debug_root) == debug_files
        assert _bundle_files(settings.output_dir / "release") == debug_files

        for build_type in BuildType:
            layout = ArtifactLayout(settings, build_type)
            for path in layout.canonical_outputs():
                assert path.exists(), path

    def test_full_run_provenance_once_per_bundle(self, settings, fake_runner, env_checker):
        self._orchestrator(settings, fake_runner, env_checker).run(BuildConfiguration())

        release_root = settings.output_dir / "release"
        stamps = sorted(p.relative_to(release_root).as_posix() for p in release_root.rglob("BUILD_INFO"))
        assert stamps == ["MediaEngine.framework/BUILD_INFO", "VoiceKit.framework/BUILD_INFO"]

    def test_media_engine_failure(self, settings, make_runner, env_checker):
        """Test that a failing media-engine build stops the whole run."""
        runner = make_runner({"media-engine": 1})

        result = self._orchestrator(settings, runner, env_checker).run(BuildConfiguration())

        assert isinstance(result, PipelineResult)
        assert not result.success
        assert result.failed_stage == "media-engine"
        assert runner.invoked_tools() == ["media-engine"]
        assert "exit code 1" in result.message
        assert not (settings.output_dir / "release" / "MediaEngine.framework").exists()

    def test_platform_without_dependencies(self, settings, fake_runner, env_checker):
        """Test that the platform stage alone fails when earlier outputs are absent."""
        result = self._orchestrator(settings, fake_runner, env_checker).run(
            BuildConfiguration(StageSelector.APPLICATION_PLATFORM, BuildType.RELEASE)
        )

        assert not result.success
        assert result.failed_stage == "application-platform"
        assert fake_runner.calls == []

    def test_rerun_is_stable(self, settings, fake_runner, env_checker):
        orchestrator = self._orchestrator(settings, fake_runner, env_checker)

        orchestrator.run(BuildConfiguration())
        release_root = settings.output_dir / "release"
        first = _bundle_files(release_root)
        orchestrator.run(BuildConfiguration())

        assert _bundle_files(release_root) == first
