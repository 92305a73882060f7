"""External Tool Runner.

This module wraps every call fatpack makes to an external build tool
(media-engine build script, cargo, cbindgen, lipo, xcodebuild, pod).

Design:
    - ToolRunner is the single seam between the pipeline and the outside
      world; tests substitute a fake that simulates success or failure
    - Calls are synchronous and have no timeout; the tool's own exit
      behaviour decides how long a stage takes
    - On interrupt the whole child process tree is terminated so no
      orphaned compiler keeps writing into the output directories
"""

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

import psutil

from ..errors import ExternalBuildFailure

logger = logging.getLogger(__name__)

# Exit status reported when the executable itself cannot be started
COMMAND_NOT_FOUND = 127


@dataclass
class ToolResult:
    """Result of one external tool invocation."""

    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stderr, self.stdout) if part.strip())


class ToolRunner(ABC):
    """Interface for invoking an external tool."""

    @abstractmethod
    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ToolResult:
        """Run a command to completion.

        Args:
            args: Command and arguments
            cwd: Working directory
            env: Extra environment variables layered over the current ones

        Returns:
            ToolResult with exit status and captured output
        """


class SubprocessToolRunner(ToolRunner):
    """Runs tools as child processes.

    Args:
        verbose: Stream tool output to the console instead of capturing it
        grace_period: Seconds to wait after terminate() before kill()
    """

    def __init__(self, verbose: bool = False, grace_period: float = 3.0):
        self.verbose = verbose
        self.grace_period = grace_period

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ToolResult:
        cmd = [str(arg) for arg in args]
        logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)

        run_env = None
        if env:
            run_env = {**os.environ, **env}

        try:
            process = subprocess.Popen(
                cmd,
                cwd=str(cwd) if cwd else None,
                env=run_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if self.verbose else subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.debug("Failed to start %s: %s", cmd[0], e)
            return ToolResult(returncode=COMMAND_NOT_FOUND, stderr=str(e))

        try:
            if self.verbose:
                lines: List[str] = []
                assert process.stdout is not None
                for line in process.stdout:
                    print(line, end="")
                    lines.append(line)
                returncode = process.wait()
                return ToolResult(returncode=returncode, stdout="".join(lines))

            stdout, stderr = process.communicate()
            return ToolResult(
                returncode=process.returncode, stdout=stdout or "", stderr=stderr or ""
            )
        except KeyboardInterrupt as ke:
            self.terminate_tree(process.pid)
            from fatpack.interrupt_utils import handle_keyboard_interrupt_properly

            handle_keyboard_interrupt_properly(ke)
            raise  # Never reached, but satisfies type checker

    def terminate_tree(self, root_pid: int) -> int:
        """Terminate a process and all of its descendants.

        Children are terminated before their parents; anything still alive
        after the grace period is killed.

        Args:
            root_pid: PID of the tool process

        Returns:
            Number of processes signalled
        """
        try:
            root = psutil.Process(root_pid)
        except psutil.NoSuchProcess:
            return 0

        try:
            processes = root.children(recursive=True)
        except psutil.NoSuchProcess:
            processes = []
        processes = list(reversed(processes)) + [root]

        signalled = []
        for proc in processes:
            try:
                proc.terminate()
                signalled.append(proc)
            except psutil.NoSuchProcess:
                pass  # Already exited

        _gone, alive = psutil.wait_procs(signalled, timeout=self.grace_period)
        for proc in alive:
            try:
                proc.kill()
                logger.warning("Force killed stubborn process %s", proc.pid)
            except psutil.NoSuchProcess:
                pass

        return len(signalled)


class ExternalTool:
    """A ToolRunner bound to the stage that owns the invocation.

    Args:
        runner: Runner used to execute commands
        stage: Stage label attached to failures
    """

    def __init__(self, runner: ToolRunner, stage: Optional[str] = None):
        self.runner = runner
        self.stage = stage

    def check_run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> ToolResult:
        """Run a command and raise if it does not succeed.

        Raises:
            ExternalBuildFailure: On any non-zero exit status
        """
        result = self.runner.run(args, cwd=cwd, env=env)
        if not result.success:
            raise ExternalBuildFailure(
                self.stage, [str(a) for a in args], result.returncode, result.output
            )
        return result
