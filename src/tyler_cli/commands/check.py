# SPDX-License-Identifier: MIT
"""Check a package for problems before building it."""

from __future__ import annotations

from typing import Optional

import click

from tyler_build import BuildConfigError
from tyler_index import NetworkError, RegistrySnapshot, fetch_index
from tyler_manifest import ParseError, SchemaError, Severity, ValidationReport, validate_package

from ..config import ConfigError, PackageContext, load_package
from ..main import Context, echo_error, echo_info, echo_success, echo_warning, pass_context


def print_report(report: ValidationReport) -> None:
    """Print every finding in order."""
    for finding in report.findings:
        if finding.severity is Severity.ERROR:
            echo_error(finding.message)
        elif finding.severity is Severity.WARNING:
            echo_warning(finding.message)
        else:
            echo_info(finding.message)


def load_or_exit(entrypoint: Optional[str], **overrides: Optional[str]) -> PackageContext:
    """Load the package, printing the problem and exiting 1 if that fails."""
    try:
        return load_package(entrypoint, **overrides)
    except SchemaError as e:
        echo_error(str(e))
        for detail in e.errors[1:]:
            echo_error(f"  {detail}")
        raise SystemExit(1)
    except (ConfigError, ParseError, BuildConfigError) as e:
        echo_error(str(e))
        raise SystemExit(1)


@click.command()
@click.argument("entrypoint", required=False)
@click.option(
    "--srcdir",
    "-s",
    help="Source directory of the package (default: src, or [tool.tyler].srcdir).",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Treat warnings as errors.",
)
@pass_context
def check(ctx: Context, entrypoint: Optional[str], srcdir: Optional[str], strict: bool) -> None:
    """Check a package for errors.

    ENTRYPOINT is the typst.toml file or the directory containing it
    (defaults to the current directory). Checks that need the package index
    are skipped with a warning when it cannot be reached.

    \b
    Examples:
        tyler check
        tyler check path/to/package
        tyler check --strict
    """
    package = load_or_exit(entrypoint, srcdir=srcdir)
    echo_info(f"Checking package in {package.workdir}...")

    registry: Optional[RegistrySnapshot]
    try:
        registry = fetch_index(ctx.index_url, transport=ctx.http_transport)
    except NetworkError as e:
        echo_warning(f"{e}; checks against the package index will be skipped")
        registry = None

    report = validate_package(package.manifest, package.workdir, package.options.srcdir, registry)
    print_report(report)

    if not report.ok:
        raise SystemExit(1)

    if strict and report.warnings:
        echo_error(f"Check failed with {len(report.warnings)} warning(s) in strict mode")
        raise SystemExit(1)

    echo_success(f"Check passed for {package.manifest.name}:{package.manifest.version}")
