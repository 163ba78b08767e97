# SPDX-License-Identifier: MIT
"""Stage a built package in the packages repository and explain the next steps."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tyler_manifest import REGISTRY_NAMESPACE

from .git import Git
from .reconciler import DRY_RUN_PREFIX, UPSTREAM_URL, PullRequestRef

logger = logging.getLogger(__name__)

GH_INSTALL_URL = "https://cli.github.com/manual/installation"


def package_path(name: str, version: str) -> str:
    """Location of a package version inside the packages repository.

    Examples:
        >>> package_path("cetz", "0.3.0")
        'packages/preview/cetz/0.3.0'
    """
    return f"packages/{REGISTRY_NAMESPACE}/{name}/{version}"


def commit_message(name: str, version: str) -> str:
    return f"{name}:{version}"


@dataclass(frozen=True, slots=True)
class StagingResult:
    """Outcome of staging a package.

    Attributes:
        package_dir: Where the package was copied
        committed: Whether a commit was created
    """

    package_dir: Path
    committed: bool


def stage_package(
    git: Git,
    repo: Path,
    outdir: Path,
    name: str,
    version: str,
    dry_run: bool = False,
) -> StagingResult:
    """Copy the build into the repository and commit it.

    The package directory is replaced wholesale. No commit is made when the
    working tree has nothing to commit, so re-running a publish is harmless.

    Raises:
        GitError: If staging or committing fails
    """
    rel_path = package_path(name, version)
    package_dir = repo / rel_path
    message = commit_message(name, version)

    if dry_run:
        logger.info("%sWould copy %s to %s", DRY_RUN_PREFIX, outdir, package_dir)
        logger.info("%sWould run git add %s and git commit -m %s", DRY_RUN_PREFIX, rel_path, message)
        return StagingResult(package_dir=package_dir, committed=False)

    if package_dir.exists():
        shutil.rmtree(package_dir)
    shutil.copytree(outdir, package_dir)
    logger.info("Copied files from %s to %s", outdir, package_dir)

    git.run("add", rel_path, repo=repo)
    if git.is_clean(repo):
        logger.info("Nothing to commit, %s is already up to date", rel_path)
        return StagingResult(package_dir=package_dir, committed=False)

    git.run("commit", "-m", message, repo=repo)
    logger.info("Committed %s", message)
    return StagingResult(package_dir=package_dir, committed=True)


def gh_available() -> bool:
    return shutil.which("gh") is not None


def publish_instructions(
    repo: Path,
    name: str,
    version: str,
    body_file: Optional[Path] = None,
    gh_installed: Optional[bool] = None,
    pull_request: Optional[PullRequestRef] = None,
) -> list[str]:
    """Commands that open (or update) the pull request. ``gh`` is never run for the user."""
    if pull_request is not None:
        target = f"#{pull_request.number}" if pull_request.number is not None else pull_request.head_ref
        return [
            f"To add the commit to the existing pull request {target}, push the branch:",
            f"  $ git -C {repo} push {pull_request.remote} HEAD:{pull_request.head_ref}",
        ]

    if gh_installed is None:
        gh_installed = gh_available()

    lines: list[str] = []
    if not gh_installed:
        lines.append(f"To publish the package from the command line, install the GitHub CLI: {GH_INSTALL_URL}")

    body = str(body_file) if body_file is not None else ".github/pull_request_template.md"
    lines += [
        "To publish the package, run the following commands "
        "(run `gh auth login` first if you are not logged in to the GitHub CLI):",
        f"  $ cd {repo}",
        f"  $ gh repo set-default {UPSTREAM_URL}",
        f'  $ gh pr create --title "{commit_message(name, version)}" --body-file "{body}" --draft',
        "  $ cd -",
        "Then open the draft pull request on GitHub (https://github.com/typst/packages/pull/<number>), "
        "review the details and mark it ready for review.",
    ]
    return lines
