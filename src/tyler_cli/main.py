# SPDX-License-Identifier: MIT
"""CLI entry point for the tyler command."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
import httpx

from tyler_index import INDEX_URL
from tyler_publish import DecisionProvider, ProcessRunner

# Loggers of every package whose records are shown to the user
LOGGER_NAMES = (
    "tyler_version",
    "tyler_manifest",
    "tyler_index",
    "tyler_build",
    "tyler_publish",
    "tyler_cli",
)


class Context:
    """CLI context object passed to commands.

    The collaborator attributes default to the real implementations; tests
    pass a prepared Context as ``obj`` to swap them out.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.index_url: str = INDEX_URL
        self.http_transport: Optional[httpx.BaseTransport] = None
        self.process_runner: Optional[ProcessRunner] = None
        self.decisions: Optional[DecisionProvider] = None
        self.repository_dir: Optional[Path] = None
        self.local_packages_dir: Optional[Path] = None


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.secho(f"Warning: {message}", fg="yellow", err=True)


class ClickHandler(logging.Handler):
    """Render log records through the echo helpers."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return

        if record.levelno >= logging.ERROR:
            echo_error(message)
        elif record.levelno >= logging.WARNING:
            echo_warning(message)
        else:
            echo_info(message)


def configure_logging(verbose: bool) -> None:
    """Route package loggers to the terminal; DEBUG when verbose."""
    level = logging.DEBUG if verbose else logging.INFO
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            if isinstance(handler, ClickHandler):
                logger.removeHandler(handler)
        logger.addHandler(ClickHandler())
        logger.setLevel(level)
        logger.propagate = False


@click.group()
@click.version_option(package_name="tyler")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output.",
)
@pass_context
def cli(ctx: Context, verbose: bool) -> None:
    """Typst package build tool.

    Check, build, install, and publish packages for the Typst package index.

    \b
    Examples:
        tyler check
        tyler build --bump patch
        tyler build path/to/typst.toml -b minor --install
        tyler build --publish --dry-run
        tyler env
    """
    ctx.verbose = verbose
    configure_logging(verbose)


# Import and register commands
from .commands import build, check, env

cli.add_command(build.build)
cli.add_command(check.check)
cli.add_command(env.env)


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except Exception as e:
        echo_error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
