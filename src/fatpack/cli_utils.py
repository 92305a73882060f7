"""Console reporting helpers for the fatpack CLI.

Both CLI actions (build and clean) report through ErrorFormatter, which
names the action and, when known, the stage in every failure title:

    ✗ core-library failed during build
    ✗ Clean failed
    ✗ Build interrupted
"""

import sys
import traceback
from pathlib import Path
from typing import Optional

from fatpack.config import CONFIG_FILE_NAME
from fatpack.errors import PipelineError, ProjectSettingsError

# Exit statuses
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


class ErrorFormatter:
    """Prints action-labelled results with ANSI colours and exits."""

    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def failure_title(action: str, stage: Optional[str] = None) -> str:
        """Title for a failed action.

        Example:
            failure_title("Build", "core-library") -> "core-library failed during build"
            failure_title("Clean") -> "Clean failed"
        """
        if stage:
            return f"{stage} failed during {action.lower()}"
        return f"{action} failed"

    @classmethod
    def print_error(cls, title: str, details: str = "") -> None:
        print()
        print(f"{cls.RED}✗ {title}{cls.RESET}")
        if details:
            print()
            print(details)
        print()

    @classmethod
    def print_success(cls, message: str) -> None:
        print()
        print(f"{cls.GREEN}✓ {message}{cls.RESET}")

    @classmethod
    def report_failure(cls, action: str, stage: Optional[str], details: str) -> None:
        """Print a failed action and exit with status 1."""
        cls.print_error(cls.failure_title(action, stage), details)
        sys.exit(EXIT_FAILURE)

    @classmethod
    def handle_pipeline_error(cls, error: PipelineError, action: str = "Build") -> None:
        """Report a PipelineError raised while running an action.

        Settings errors get a hint about the project file, since they are
        the usual result of pointing fatpack at the wrong directory.
        """
        details = str(error)
        if isinstance(error, ProjectSettingsError):
            details += f"\nRun fatpack from a directory containing {CONFIG_FILE_NAME}."
        cls.report_failure(action, error.stage, details)

    @classmethod
    def handle_keyboard_interrupt(cls, action: str = "Build") -> None:
        print()
        print(f"{cls.YELLOW}✗ {action} interrupted{cls.RESET}")
        sys.exit(EXIT_INTERRUPTED)

    @classmethod
    def handle_unexpected_error(
        cls, error: Exception, action: str = "Build", verbose: bool = False
    ) -> None:
        """Report an exception that is not a PipelineError.

        The traceback is only shown with --verbose.
        """
        details = f"{type(error).__name__}: {error}"
        if verbose:
            details += "\n\nTraceback:\n" + traceback.format_exc()
        cls.print_error(f"{action} failed unexpectedly", details)
        sys.exit(EXIT_FAILURE)


class PathValidator:
    """Checks the project directory argument before any action runs."""

    @staticmethod
    def validate_project_dir(project_dir: Path) -> None:
        """Exit with status 2 unless project_dir is an existing directory."""
        if not project_dir.exists():
            problem = "Project directory not found"
        elif not project_dir.is_dir():
            problem = "Project path is not a directory"
        else:
            return
        ErrorFormatter.print_error(f"{problem}: {project_dir}")
        sys.exit(EXIT_USAGE)
