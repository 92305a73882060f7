"""Error hierarchy for fatpack.

Every failure the pipeline can report derives from PipelineError so the CLI
can map them onto a single stage-labelled message and exit code.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all pipeline failures.

    Args:
        message: Human readable description
        stage: Label of the stage that failed (e.g. "core-library"), if known
    """

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class EnvironmentCheckError(PipelineError):
    """Raised when a required tool, directory or setting is missing."""

    def __init__(self, missing: list, stage: Optional[str] = None):
        self.missing = list(missing)
        lines = "\n".join(f"  - {item}" for item in self.missing)
        super().__init__(f"Missing build prerequisites:\n{lines}", stage)


class ExternalBuildFailure(PipelineError):
    """Raised when a delegated build step returns a non-success result."""

    def __init__(
        self,
        stage: Optional[str],
        command: list,
        returncode: int,
        output: str = "",
    ):
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        message = f"Command failed with exit code {returncode}: {' '.join(self.command)}"
        if output.strip():
            message += f"\n{output.strip()}"
        super().__init__(message, stage)


class FilesystemError(PipelineError):
    """Raised when copying, moving or deleting an artifact fails."""
    pass


class MergeError(PipelineError):
    """Raised when architecture slices cannot be merged."""
    pass


class BinaryNameMismatch(MergeError):
    """Raised when slices of different logical binaries are merged together."""
    pass


class MissingSliceError(MergeError):
    """Raised when an expected architecture slice or stage output is absent."""
    pass


class HeaderGenerationError(PipelineError):
    """Raised when the binding header cannot be generated."""
    pass


class ModuleMapError(PipelineError):
    """Raised for invalid module descriptor inputs."""
    pass


class ProvenanceError(PipelineError):
    """Raised for invalid or unreadable provenance metadata."""
    pass


class ProjectSettingsError(PipelineError):
    """Raised when fatpack.ini is missing or incomplete."""
    pass


class CleanError(PipelineError):
    """Raised when teardown fails for a reason other than a missing path."""
    pass
