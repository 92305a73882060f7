"""
Command-line interface for fatpack.

This module provides the `fatpack` CLI tool for assembling the universal
mobile package.
"""

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from fatpack import __version__
from fatpack.build import Cleaner, PipelineOrchestrator
from fatpack.cli_utils import ErrorFormatter, PathValidator
from fatpack.config import BuildConfiguration, BuildType, ProjectSettings, StageSelector
from fatpack.errors import PipelineError


@dataclass
class BuildArgs:
    """Arguments for a pipeline run."""

    project_dir: Path
    stage_selector: StageSelector = StageSelector.ALL
    build_type: BuildType = BuildType.RELEASE
    verbose: bool = False


@dataclass
class CleanArgs:
    """Arguments for the clean action."""

    project_dir: Path
    verbose: bool = False


def build_command(args: BuildArgs) -> None:
    """Run the selected pipeline stages.

    Examples:
        fatpack                   # Build all stages (release)
        fatpack -d                # Build all stages (debug)
        fatpack -r                # Core library only
        fatpack -x -d             # Application platform only, debug
    """
    print(f"fatpack v{__version__}")
    print()

    try:
        settings = ProjectSettings.load(args.project_dir)
        orchestrator = PipelineOrchestrator(settings, verbose=args.verbose)
        config = BuildConfiguration(
            stage_selector=args.stage_selector, build_type=args.build_type
        )

        if args.verbose:
            print(f"Project: {settings.project_dir}")
            print(f"Stages: {', '.join(s.label for s in config.stages())}")
            print(f"Build type: {config.build_type.value}")
            print(f"Output: {settings.output_dir}")
            print()

        start_time = time.time()
        result = orchestrator.run(config)
        build_time = time.time() - start_time

        if result.success:
            ErrorFormatter.print_success("Build successful!")
            print()
            for artifact in result.artifacts:
                print(f"  {artifact}")
            print()
            print(f"Build time: {build_time:.2f}s")
            sys.exit(0)
        else:
            ErrorFormatter.report_failure("Build", result.failed_stage, result.message)

    except PipelineError as e:
        ErrorFormatter.handle_pipeline_error(e, action="Build")
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt(action="Build")
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, action="Build", verbose=args.verbose)


def clean_command(args: CleanArgs) -> None:
    """Remove every output for both build types and exit."""
    try:
        settings = ProjectSettings.load(args.project_dir)
        result = Cleaner(settings, show_progress=args.verbose).clean()
        ErrorFormatter.print_success(
            f"Clean complete ({len(result.removed)} path(s) removed)"
        )
        sys.exit(0)
    except PipelineError as e:
        ErrorFormatter.handle_pipeline_error(e, action="Clean")
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt(action="Clean")
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, action="Clean", verbose=args.verbose)


def main() -> None:
    """fatpack - universal mobile package assembler."""
    parser = argparse.ArgumentParser(
        prog="fatpack",
        description="Build the media engine, core library and application "
        "platform framework into a universal mobile package",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"fatpack {__version__}",
    )
    parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory containing fatpack.ini (default: current directory)",
    )

    # Only one stage group may be selected per run
    stages = parser.add_mutually_exclusive_group()
    stages.add_argument(
        "-w",
        "--media-engine",
        dest="stage_selector",
        action="store_const",
        const=StageSelector.MEDIA_ENGINE,
        help="Build only the media-engine framework",
    )
    stages.add_argument(
        "-r",
        "--core-library",
        dest="stage_selector",
        action="store_const",
        const=StageSelector.CORE_LIBRARY,
        help="Build only the core library, binding header and module map",
    )
    stages.add_argument(
        "-x",
        "--application-platform",
        dest="stage_selector",
        action="store_const",
        const=StageSelector.APPLICATION_PLATFORM,
        help="Build only the application-platform framework",
    )
    parser.set_defaults(stage_selector=StageSelector.ALL)

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Debug build (default: release)",
    )
    parser.add_argument(
        "-c",
        "--clean",
        action="store_true",
        help="Remove all outputs for both build types and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose build output",
    )

    parsed_args = parser.parse_args()

    PathValidator.validate_project_dir(parsed_args.project_dir)

    if parsed_args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if parsed_args.clean:
        clean_command(CleanArgs(
            project_dir=parsed_args.project_dir,
            verbose=parsed_args.verbose,
        ))
    else:
        build_command(BuildArgs(
            project_dir=parsed_args.project_dir,
            stage_selector=parsed_args.stage_selector,
            build_type=BuildType.DEBUG if parsed_args.debug else BuildType.RELEASE,
            verbose=parsed_args.verbose,
        ))


if __name__ == "__main__":
    main()
