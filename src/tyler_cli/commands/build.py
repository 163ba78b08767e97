# SPDX-License-Identifier: MIT
"""Build, install, and publish Typst packages."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from tyler_build import BuildError, assemble, install_locally, plan_build
from tyler_index import NetworkError, fetch_index
from tyler_manifest import ManifestValidationError, validate_package_strict
from tyler_publish import (
    PR_BODY_FILENAME,
    DecisionProvider,
    Git,
    GitError,
    MalformedPrReference,
    NonInteractiveDecisions,
    ProcessError,
    PullRequestRef,
    RepositoryReconciler,
    TemplateError,
    UserAbort,
    collect_pr_body,
    fetch_pull_request,
    publish_instructions,
    stage_package,
    write_pr_body,
)
from tyler_version import VersionError, resolve_target

from ..bump import choose_version
from ..main import Context, echo_error, echo_info, echo_success, echo_warning, pass_context
from ..prompts import ClickDecisions
from .check import load_or_exit, print_report


def _decisions(ctx: Context, yes: bool) -> tuple[DecisionProvider, bool]:
    """Pick the decision provider and whether asking questions is possible."""
    if yes:
        return NonInteractiveDecisions(assume_yes=True), False
    if ctx.decisions is not None:
        return ctx.decisions, True
    if sys.stdin.isatty():
        return ClickDecisions(), True
    return NonInteractiveDecisions(assume_yes=False), False


@click.command()
@click.argument("entrypoint", required=False)
@click.option(
    "--bump",
    "-b",
    help="patch, minor, major, skip, or an explicit version. Asked interactively when omitted.",
)
@click.option(
    "--no-bump",
    "-n",
    is_flag=True,
    help="Keep the current version.",
)
@click.option(
    "--dry-run",
    "-d",
    is_flag=True,
    help="Show what would be done without modifying anything.",
)
@click.option(
    "--srcdir",
    "-s",
    help="Source directory of the package (default: src, or [tool.tyler].srcdir).",
)
@click.option(
    "--outdir",
    "-o",
    help="Output directory of the build (default: dist, or [tool.tyler].outdir).",
)
@click.option(
    "--ignore",
    help="Comma-separated patterns of source files to leave out of the build.",
)
@click.option(
    "--install",
    "-i",
    is_flag=True,
    help="Install the build into the @local package namespace.",
)
@click.option(
    "--publish",
    "-p",
    is_flag=True,
    help="Prepare a commit for the typst/packages repository.",
)
@click.option(
    "--pr",
    "pr_number",
    type=int,
    help="Add the commit to this existing typst/packages pull request (with --publish).",
)
@click.option(
    "--pr-body",
    is_flag=True,
    help="Write a pull request description from the submission checklist (with --publish).",
)
@click.option(
    "--no-check",
    is_flag=True,
    help="Skip package checks before building.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Answer yes to every confirmation.",
)
@pass_context
def build(
    ctx: Context,
    entrypoint: Optional[str],
    bump: Optional[str],
    no_bump: bool,
    dry_run: bool,
    srcdir: Optional[str],
    outdir: Optional[str],
    ignore: Optional[str],
    install: bool,
    publish: bool,
    pr_number: Optional[int],
    pr_body: bool,
    no_check: bool,
    yes: bool,
) -> None:
    """Build a package into its output directory.

    ENTRYPOINT is the typst.toml file or the directory containing it
    (defaults to the current directory).

    \b
    Examples:
        tyler build --bump patch
        tyler build -n --install
        tyler build -b 1.0.0 --publish --pr-body
        tyler build --publish --pr 1234 --dry-run
    """
    if (pr_number is not None or pr_body) and not publish:
        echo_error("--pr and --pr-body require --publish")
        raise SystemExit(1)

    package = load_or_exit(entrypoint, srcdir=srcdir, outdir=outdir, ignore=ignore)
    manifest = package.manifest
    prefix = "(dry-run) " if dry_run else ""
    echo_info(f"{prefix}Building package in {package.workdir}...")

    try:
        registry = fetch_index(ctx.index_url, transport=ctx.http_transport)
    except NetworkError as e:
        echo_error(str(e))
        raise SystemExit(1)

    if not no_check:
        try:
            report = validate_package_strict(manifest, package.workdir, package.options.srcdir, registry)
        except ManifestValidationError as e:
            print_report(e.report)
            raise SystemExit(1)
        print_report(report)

    decisions, interactive = _decisions(ctx, yes)
    published = registry.latest(manifest.name)
    if published is None:
        echo_info(f"Building for an unpublished package {manifest.name}...")

    try:
        version = choose_version(manifest.version, bump, no_bump, decisions, interactive)
        resolution = resolve_target(manifest.version, version, published)
    except VersionError as e:
        echo_error(str(e))
        raise SystemExit(1)
    except UserAbort as e:
        echo_info(str(e))
        return

    for warning in resolution.warnings:
        echo_warning(warning)
    if resolution.version != published and registry.is_published(manifest.name, resolution.version):
        echo_warning(f"Version {resolution.version} of {manifest.name} is already published on the index")

    try:
        plan = plan_build(manifest, package.manifest_path, package.options, resolution.version)
        result = assemble(plan, dry_run=dry_run)
    except (BuildError, OSError) as e:
        echo_error(f"Build failed: {e}")
        raise SystemExit(1)

    echo_success(
        f"{prefix}Built {plan.name}:{plan.version} into {plan.outdir} ({len(result.files)} file(s))"
    )

    if install:
        try:
            install_locally(plan.outdir, plan.name, plan.version, dry_run, ctx.local_packages_dir)
        except OSError as e:
            echo_error(f"Install failed: {e}")
            raise SystemExit(1)

    if publish:
        try:
            _publish(
                ctx,
                plan.outdir,
                plan.name,
                plan.version,
                pr_number=pr_number,
                pr_body=pr_body,
                decisions=decisions,
                dry_run=dry_run,
                is_update=published is not None,
                is_template=manifest.template is not None,
            )
        except UserAbort as e:
            echo_info(str(e))
            return
        except (NetworkError, MalformedPrReference, GitError, ProcessError, TemplateError, OSError) as e:
            echo_error(f"Publish failed: {e}")
            raise SystemExit(1)


def _publish(
    ctx: Context,
    outdir: Path,
    name: str,
    version: str,
    pr_number: Optional[int],
    pr_body: bool,
    decisions: DecisionProvider,
    dry_run: bool,
    is_update: bool,
    is_template: bool,
) -> None:
    pull_request: Optional[PullRequestRef] = None
    if pr_number is not None:
        pull_request = fetch_pull_request(pr_number, transport=ctx.http_transport)
        echo_info(f"Updating pull request #{pr_number} from {pull_request.owner}:{pull_request.head_ref}")

    git = Git(ctx.process_runner)
    reconciler = RepositoryReconciler(git, decisions, ctx.repository_dir, dry_run=dry_run)
    reconciled = reconciler.reconcile(name, version, pull_request)
    staged = stage_package(git, reconciled.directory, outdir, name, version, dry_run)

    body_file = None
    if pr_body:
        body = collect_pr_body(decisions, name, version, is_update=is_update, is_template=is_template)
        body_file = reconciled.directory.parent / PR_BODY_FILENAME
        if dry_run:
            echo_info(f"(dry-run) Would write the pull request description to {body_file}")
        else:
            write_pr_body(body, body_file)
            echo_info(f"Wrote the pull request description to {body_file}")

    if not dry_run and not staged.committed:
        echo_warning(f"{name}:{version} is already committed on {reconciled.branch}")

    for line in publish_instructions(reconciled.directory, name, version, body_file, pull_request=pull_request):
        echo_info(line)
