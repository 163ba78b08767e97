# SPDX-License-Identifier: MIT
"""Narrow git wrapper over the process port.

Only the handful of commands the publish flow needs are modeled. Each call
against an existing repository is issued as ``git -C <dir> ...``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .process import ProcessError, ProcessRequest, ProcessResult, ProcessRunner, SubprocessRunner

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Raised when git is unavailable or a git command exits non-zero.

    Attributes:
        args_: The git arguments that failed
        exit_code: Exit code, None when git could not be started
        stderr: Captured standard error
    """

    def __init__(self, message: str, args_: tuple[str, ...] = (), exit_code: Optional[int] = None, stderr: str = ""):
        self.args_ = args_
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(message)


class Git:
    """Issue git commands through a :class:`ProcessRunner`.

    Args:
        runner: Process port, a :class:`SubprocessRunner` by default
        executable: Name or path of the git executable
    """

    def __init__(self, runner: Optional[ProcessRunner] = None, executable: str = "git"):
        self.runner = runner or SubprocessRunner()
        self.executable = executable

    def run(self, *args: str, repo: Optional[Path] = None, check: bool = True) -> ProcessResult:
        """Run ``git [-C repo] args...``.

        Args:
            args: Git arguments
            repo: Repository to scope the command to
            check: Raise GitError on a non-zero exit

        Raises:
            GitError: If git cannot be started, or exits non-zero and ``check`` is set
        """
        full_args = (("-C", str(repo)) if repo is not None else ()) + tuple(args)
        request = ProcessRequest(self.executable, full_args)
        logger.debug("$ %s", request)

        try:
            result = self.runner.run(request)
        except ProcessError as e:
            raise GitError(f"git is not available: {e.reason}", full_args) from e

        if check and not result.ok:
            detail = result.stderr.strip() or result.stdout.strip()
            raise GitError(
                f"`{request}` failed with exit code {result.exit_code}" + (f": {detail}" if detail else ""),
                full_args,
                result.exit_code,
                result.stderr,
            )
        return result

    def clone(self, url: str, directory: Path, depth: Optional[int] = 1) -> None:
        args = ["clone"]
        if depth is not None:
            args += ["--depth", str(depth)]
        self.run(*args, url, str(directory))

    def remote_url(self, repo: Path, remote: str) -> Optional[str]:
        """URL of ``remote``, None when the remote does not exist."""
        result = self.run("remote", "get-url", remote, repo=repo, check=False)
        return result.stdout.strip() if result.ok else None

    def set_remote(self, repo: Path, remote: str, url: str) -> None:
        """Point ``remote`` at ``url``, adding it if missing."""
        current = self.remote_url(repo, remote)
        if current is None:
            self.run("remote", "add", remote, url, repo=repo)
        else:
            self.run("remote", "set-url", remote, url, repo=repo)

    def is_clean(self, repo: Path) -> bool:
        return not self.run("status", "--porcelain", repo=repo).stdout.strip()

    def version(self) -> str:
        """``git --version`` output, e.g. "git version 2.43.0"."""
        return self.run("--version").stdout.strip()
