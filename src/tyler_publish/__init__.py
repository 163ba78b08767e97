# SPDX-License-Identifier: MIT
"""Publishing to the typst/packages repository.

This package provides the publish half of ``tyler build --publish``:
- A process port and the narrow git wrapper built on it
- The repository reconciler state machine
- Staging and committing a built package
- The pull request description

Example:
    >>> from tyler_publish import Git, NonInteractiveDecisions, RepositoryReconciler
    >>>
    >>> reconciler = RepositoryReconciler(Git(), NonInteractiveDecisions())
    >>> result = reconciler.reconcile("my-package", "0.1.0")
    >>> result.branch
    'my-package-0.1.0'
"""

__version__ = "0.1.0"

from .process import (
    ProcessError,
    ProcessRequest,
    ProcessResult,
    ProcessRunner,
    SubprocessRunner,
)
from .git import (
    Git,
    GitError,
)
from .decisions import (
    DecisionProvider,
    NonInteractiveDecisions,
    UserAbort,
)
from .reconciler import (
    DEFAULT_BRANCH,
    UPSTREAM_URL,
    MalformedPrReference,
    PullRequestRef,
    ReconcileResult,
    RepositoryReconciler,
    RepositoryState,
    default_repository_dir,
    detect_state,
    fetch_pull_request,
    package_branch,
)
from .staging import (
    StagingResult,
    gh_available,
    package_path,
    publish_instructions,
    stage_package,
)
from .pr_body import (
    GUIDELINES,
    PR_BODY_FILENAME,
    PullRequestBody,
    TemplateError,
    collect_pr_body,
    write_pr_body,
)

__all__ = [
    # Processes
    "ProcessError",
    "ProcessRequest",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    # Git
    "Git",
    "GitError",
    # Decisions
    "DecisionProvider",
    "NonInteractiveDecisions",
    "UserAbort",
    # Reconciliation
    "DEFAULT_BRANCH",
    "UPSTREAM_URL",
    "MalformedPrReference",
    "PullRequestRef",
    "ReconcileResult",
    "RepositoryReconciler",
    "RepositoryState",
    "default_repository_dir",
    "detect_state",
    "fetch_pull_request",
    "package_branch",
    # Staging
    "StagingResult",
    "gh_available",
    "package_path",
    "publish_instructions",
    "stage_package",
    # Pull request description
    "GUIDELINES",
    "PR_BODY_FILENAME",
    "PullRequestBody",
    "TemplateError",
    "collect_pr_body",
    "write_pr_body",
]
