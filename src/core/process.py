"""
External process execution.

Runs an executable, captures its output, and returns the exit code. A
non-zero exit is never raised; interpreting it is left to the caller.
"""

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

LAUNCH_FAILURE_EXIT_CODE = 127
"""Exit code reported when the executable cannot be started."""


@dataclass(frozen=True)
class ProcessResult:
    """Captured output of a finished process."""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class ProcessRunner:
    """Runs external executables sequentially, one process at a time."""

    def run(
        self,
        binary: Union[str, Path],
        args: list[str],
        env: Optional[dict[str, str]] = None,
        silent: bool = False,
    ) -> ProcessResult:
        """
        Run an executable to completion.

        Args:
            binary: Executable path or name
            args: Command-line arguments
            env: Variables set on top of the inherited environment
            silent: Do not log captured stdout

        Returns:
            ProcessResult with stdout, stderr and exit code
        """
        cmd = [str(binary), *args]
        process_env = {**os.environ, **(env or {})}

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=process_env,
                check=False,
            )
        except OSError as e:
            logger.debug(f"Failed to start {binary}: {e}")
            return ProcessResult(stdout="", stderr=str(e), exit_code=LAUNCH_FAILURE_EXIT_CODE)

        if not silent and result.stdout.strip():
            logger.info(result.stdout.rstrip())

        logger.debug(f"{Path(str(binary)).name} exited with code {result.returncode}")
        return ProcessResult(
            stdout=result.stdout,
            stderr=result.stderr,
            exit_code=result.returncode,
        )


__all__ = [
    "ProcessResult",
    "ProcessRunner",
]
