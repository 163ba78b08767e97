# SPDX-License-Identifier: MIT
"""Drive a local checkout of the packages repository into a known state.

The target directory can be in one of three states:

- absent: it is cloned (shallow)
- present but not a git repository: after confirmation it is removed and cloned
- a git repository: untracked files are removed, ``origin`` is pointed at the
  upstream, all remotes are fetched and the default branch is force-reset to
  the upstream tip

Afterwards the branch for the package is recreated from that tip, or, when
updating an existing pull request, the pull request's head branch is checked
out from a remote named after its owner.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import httpx
from tyler_index import NetworkError

from .decisions import DecisionProvider, UserAbort
from .git import Git

logger = logging.getLogger(__name__)

UPSTREAM_URL = "https://github.com/typst/packages.git"
UPSTREAM_REPO = "typst/packages"
DEFAULT_BRANCH = "main"
GITHUB_API_URL = "https://api.github.com"

DRY_RUN_PREFIX = "(dry-run) "


def default_repository_dir() -> Path:
    """``<tempdir>/tyler-publish/packages``"""
    return Path(tempfile.gettempdir()) / "tyler-publish" / "packages"


def package_branch(name: str, version: str) -> str:
    """Branch a package version is submitted from.

    Examples:
        >>> package_branch("cetz", "0.3.0")
        'cetz-0.3.0'
    """
    return f"{name}-{version}"


class RepositoryState(str, Enum):
    ABSENT = "absent"
    INVALID_NON_REPO = "invalid"
    VALID_REPO = "valid"


def detect_state(directory: Path) -> RepositoryState:
    """Classify ``directory`` by looking at the file system only."""
    if not directory.exists():
        return RepositoryState.ABSENT
    if (directory / ".git").exists():
        return RepositoryState.VALID_REPO
    return RepositoryState.INVALID_NON_REPO


class MalformedPrReference(Exception):
    """Raised when a pull request reference lacks its head repository details."""

    pass


@dataclass(frozen=True, slots=True)
class PullRequestRef:
    """The parts of a pull request needed to push more commits to it.

    Attributes:
        head_ref: Branch name in the head repository
        clone_url: Clone URL of the head repository
        owner: Login of the head repository owner
        number: Pull request number, if known
    """

    head_ref: str
    clone_url: str
    owner: str
    number: Optional[int] = None

    @property
    def remote(self) -> str:
        return self.owner

    @classmethod
    def from_payload(cls, payload: Any) -> "PullRequestRef":
        """Extract the head details from a GitHub pull request object.

        Raises:
            MalformedPrReference: If ``head.ref``, ``head.repo.clone_url`` or
                ``head.repo.owner.login`` is missing
        """
        try:
            head = payload["head"]
            head_ref = head["ref"]
            repo = head["repo"]
            clone_url = repo["clone_url"]
            owner = repo["owner"]["login"]
        except (KeyError, TypeError) as e:
            raise MalformedPrReference(
                f"Pull request is missing head repository information ({e})"
            ) from e

        required = {
            "head.ref": head_ref,
            "head.repo.clone_url": clone_url,
            "head.repo.owner.login": owner,
        }
        for label, value in required.items():
            if not isinstance(value, str) or not value:
                raise MalformedPrReference(f"Pull request has no {label}")

        number = payload.get("number")
        return cls(
            head_ref=head_ref,
            clone_url=clone_url,
            owner=owner,
            number=number if isinstance(number, int) else None,
        )


def fetch_pull_request(
    number: int,
    *,
    repo: str = UPSTREAM_REPO,
    api_url: str = GITHUB_API_URL,
    timeout: float = 30.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> PullRequestRef:
    """Look up a pull request on GitHub.

    Raises:
        NetworkError: If the pull request cannot be fetched
        MalformedPrReference: If the response lacks head repository details
    """
    url = f"{api_url}/repos/{repo}/pulls/{number}"
    logger.debug("Fetching pull request from %s", url)
    try:
        with httpx.Client(follow_redirects=True, timeout=timeout, transport=transport) as client:
            response = client.get(url, headers={"Accept": "application/vnd.github+json"})
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPStatusError as e:
        raise NetworkError(url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise NetworkError(url, str(e) or type(e).__name__) from e
    except ValueError as e:
        raise MalformedPrReference(f"Pull request #{number} response is not valid JSON") from e

    return PullRequestRef.from_payload(payload)


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Where reconciliation left the repository.

    Attributes:
        directory: The repository directory
        initial_state: State found before reconciling
        branch: Branch checked out at the end
        remote: Remote the branch belongs to
        dry_run: Whether anything was actually done
    """

    directory: Path
    initial_state: RepositoryState
    branch: str
    remote: str
    dry_run: bool = False


class RepositoryReconciler:
    """State machine bringing one directory to a clean checkout of the upstream.

    Args:
        git: Git wrapper issuing the commands
        decisions: Asked before a foreign directory is removed
        directory: Repository location, :func:`default_repository_dir` by default
        upstream: Clone URL of the packages repository
        branch: Default branch of the upstream
        dry_run: Log every action instead of performing it
    """

    def __init__(
        self,
        git: Git,
        decisions: DecisionProvider,
        directory: Optional[Path] = None,
        upstream: str = UPSTREAM_URL,
        branch: str = DEFAULT_BRANCH,
        dry_run: bool = False,
    ):
        self.git = git
        self.decisions = decisions
        self.directory = Path(directory) if directory is not None else default_repository_dir()
        self.upstream = upstream
        self.branch = branch
        self.dry_run = dry_run

    def _would(self, message: str, *args: Any) -> bool:
        if self.dry_run:
            logger.info(DRY_RUN_PREFIX + "Would " + message, *args)
        return self.dry_run

    def reconcile(
        self,
        name: str,
        version: str,
        pull_request: Optional[PullRequestRef] = None,
    ) -> ReconcileResult:
        """Bring the repository up to date and check out the submission branch.

        Args:
            name: Package name
            version: Package version
            pull_request: Existing pull request to add commits to

        Raises:
            UserAbort: If removing a foreign directory is declined
            GitError: If a required git command fails
        """
        state = detect_state(self.directory)
        logger.info("Repository %s is %s", self.directory, state.value)

        if state is RepositoryState.INVALID_NON_REPO:
            self.remove_foreign_directory()
            self.clone()
        elif state is RepositoryState.ABSENT:
            self.clone()
        else:
            self.refresh()

        if pull_request is not None:
            branch, remote = self.checkout_pull_request(pull_request)
        else:
            branch, remote = self.recreate_branch(package_branch(name, version)), "origin"

        return ReconcileResult(
            directory=self.directory,
            initial_state=state,
            branch=branch,
            remote=remote,
            dry_run=self.dry_run,
        )

    def remove_foreign_directory(self) -> None:
        if self._would("remove %s, which is not a git repository", self.directory):
            return
        prompt = f"{self.directory} exists but is not a git repository. Remove it and clone {self.upstream}?"
        if not self.decisions.ask_confirm(prompt, default=False):
            raise UserAbort(f"Kept {self.directory}, cannot publish without a clean clone")
        shutil.rmtree(self.directory)
        logger.info("Removed %s", self.directory)

    def clone(self) -> None:
        if self._would("clone %s into %s", self.upstream, self.directory):
            return
        self.directory.parent.mkdir(parents=True, exist_ok=True)
        self.git.clone(self.upstream, self.directory, depth=1)
        logger.info("Cloned %s into %s", self.upstream, self.directory)

    def refresh(self) -> None:
        """Reset an existing clone onto the upstream tip of the default branch."""
        repo = self.directory
        upstream_branch = f"origin/{self.branch}"

        if self._would("clean, fetch and reset %s onto %s", repo, upstream_branch):
            return

        self.git.run("clean", "-fd", repo=repo)
        self.git.set_remote(repo, "origin", self.upstream)
        self.git.run("fetch", "--all", "--prune", repo=repo)
        self.git.run("checkout", "-f", "-B", self.branch, upstream_branch, repo=repo)
        self.git.run("reset", "--hard", upstream_branch, repo=repo)
        logger.info("Reset %s onto %s", repo, upstream_branch)

    def recreate_branch(self, branch: str) -> str:
        """Create ``branch`` fresh from the current tip, deleting a stale one first."""
        if self._would("recreate branch %s in %s", branch, self.directory):
            return branch

        result = self.git.run("branch", "-D", branch, repo=self.directory, check=False)
        if result.ok:
            logger.debug("Deleted stale branch %s", branch)
        self.git.run("checkout", "-b", branch, repo=self.directory)
        logger.info("Checked out new branch %s", branch)
        return branch

    def checkout_pull_request(self, pull_request: PullRequestRef) -> tuple[str, str]:
        """Track the head branch of an existing pull request."""
        remote = pull_request.remote
        branch = pull_request.head_ref

        if self._would("check out %s/%s in %s", remote, branch, self.directory):
            return branch, remote

        repo = self.directory
        self.git.set_remote(repo, remote, pull_request.clone_url)
        self.git.run("fetch", remote, repo=repo)
        self.git.run("checkout", "-B", branch, "--track", f"{remote}/{branch}", repo=repo)
        logger.info("Checked out %s tracking %s/%s", branch, remote, branch)
        return branch, remote
