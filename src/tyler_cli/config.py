# SPDX-License-Identifier: MIT
"""Locating the package a command operates on."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tyler_build import BuildOptions
from tyler_manifest import MANIFEST_FILENAME, Manifest, read_manifest

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the package to operate on cannot be located."""

    pass


def resolve_working_directory(entrypoint: Optional[str | Path] = None) -> Path:
    """Directory holding the package's ``typst.toml``.

    Args:
        entrypoint: A ``typst.toml`` file, a directory containing one, or None
            for the current directory

    Raises:
        ConfigError: If ``entrypoint`` does not exist
    """
    if entrypoint is None:
        return Path.cwd()

    path = Path(entrypoint).resolve()
    if not path.exists():
        raise ConfigError(f"Entrypoint {entrypoint} does not exist")
    return path if path.is_dir() else path.parent


@dataclass(frozen=True)
class PackageContext:
    """A loaded package and its resolved build layout."""

    workdir: Path
    manifest_path: Path
    manifest: Manifest
    options: BuildOptions


def load_package(
    entrypoint: Optional[str | Path] = None,
    *,
    srcdir: Optional[str] = None,
    outdir: Optional[str] = None,
    ignore: Optional[str] = None,
) -> PackageContext:
    """Read ``typst.toml`` and resolve the build options layered over it.

    Raises:
        ConfigError: If ``entrypoint`` does not exist
        ParseError: If ``typst.toml`` is missing or malformed
        SchemaError: If ``typst.toml`` has no ``[package]`` table
        BuildConfigError: If ``[tool.tyler]`` holds invalid values
    """
    workdir = resolve_working_directory(entrypoint)
    manifest_path = workdir / MANIFEST_FILENAME
    manifest = read_manifest(manifest_path)
    logger.info("Loaded %s for package %s:%s", MANIFEST_FILENAME, manifest.name, manifest.version)

    tool_config = manifest.tool_config
    if tool_config:
        logger.info("Found [tool.tyler] in %s", MANIFEST_FILENAME)

    options = BuildOptions.resolve(workdir, tool_config, srcdir=srcdir, outdir=outdir, ignore=ignore)
    return PackageContext(workdir=workdir, manifest_path=manifest_path, manifest=manifest, options=options)
