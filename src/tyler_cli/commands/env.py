# SPDX-License-Identifier: MIT
"""Show the tools and directories tyler works with."""

from __future__ import annotations

import shutil

import click

from tyler_build import local_packages_dir
from tyler_publish import Git, GitError, ProcessError, ProcessRequest, SubprocessRunner, gh_available

from ..main import Context, echo_info, echo_warning, pass_context


@click.command()
@pass_context
def env(ctx: Context) -> None:
    """Show the environment used for building and publishing.

    Prints the typst executable and its version, the git version, whether
    the GitHub CLI is installed and where local packages are installed.
    """
    runner = ctx.process_runner or SubprocessRunner(timeout=30)

    typst = shutil.which("typst")
    if typst is None:
        echo_warning("typst executable not found on PATH")
    else:
        echo_info(f"typst: {typst}")
        try:
            result = runner.run(ProcessRequest(typst, ("--version",)))
        except ProcessError as e:
            echo_warning(str(e))
        else:
            echo_info(f"  {result.stdout.strip() or result.stderr.strip()}")

    try:
        echo_info(f"git: {Git(runner).version()}")
    except GitError as e:
        echo_warning(str(e))

    echo_info(f"gh: {'installed' if gh_available() else 'not installed'}")

    packages = ctx.local_packages_dir or local_packages_dir()
    state = "exists" if packages.is_dir() else "does not exist yet"
    echo_info(f"local packages: {packages} ({state})")
