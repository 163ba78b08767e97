# SPDX-License-Identifier: MIT
"""Process execution as request/response messages.

Everything that spawns an external program goes through a :class:`ProcessRunner`,
so the git state machine can be driven by a scripted runner in tests.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class ProcessError(Exception):
    """Raised when a process cannot be started at all."""

    def __init__(self, request: "ProcessRequest", reason: str):
        self.request = request
        self.reason = reason
        super().__init__(f"Failed to run {request}: {reason}")


@dataclass(frozen=True, slots=True)
class ProcessRequest:
    """A program invocation.

    Attributes:
        program: Executable name or path
        args: Arguments after the program
        cwd: Working directory, None for the current one
    """

    program: str
    args: tuple[str, ...] = field(default_factory=tuple)
    cwd: Optional[Path] = None

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Outcome of a finished process."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ProcessRunner(Protocol):
    """Runs one process to completion."""

    def run(self, request: ProcessRequest) -> ProcessResult: ...


class SubprocessRunner:
    """:class:`ProcessRunner` backed by :func:`subprocess.run`."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def run(self, request: ProcessRequest) -> ProcessResult:
        """Run ``request`` and wait for it to exit.

        Raises:
            ProcessError: If the program is missing, cannot be executed or times out
        """
        logger.debug("Running %s", request)
        try:
            result = subprocess.run(
                request.argv,
                cwd=request.cwd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise ProcessError(request, f"executable not found: {request.program}") from None
        except subprocess.TimeoutExpired as e:
            raise ProcessError(request, f"timed out after {e.timeout} seconds") from e
        except OSError as e:
            raise ProcessError(request, str(e)) from e

        return ProcessResult(exit_code=result.returncode, stdout=result.stdout, stderr=result.stderr)
