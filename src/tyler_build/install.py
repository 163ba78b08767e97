# SPDX-License-Identifier: MIT
"""Install a built package into Typst's ``@local`` package namespace."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from platformdirs import user_data_dir

from .assembler import DRY_RUN_PREFIX, clear_directory

logger = logging.getLogger(__name__)

LOCAL_NAMESPACE = "local"


def data_dir() -> Path:
    """Per-user data directory Typst reads local packages from.

    ``~/.local/share`` on Linux, ``~/Library/Application Support`` on macOS and
    the roaming AppData directory on Windows.
    """
    return Path(user_data_dir(roaming=True))


def local_packages_dir() -> Path:
    return data_dir() / "typst" / "packages" / LOCAL_NAMESPACE


def install_locally(
    outdir: Path,
    name: str,
    version: str,
    dry_run: bool = False,
    packages_dir: Optional[Path] = None,
) -> Path:
    """Copy a built package to ``<packages>/<name>/<version>``.

    A previous install of the same version is replaced.

    Args:
        outdir: Output directory of the build
        name: Package name
        version: Package version
        dry_run: Only log what would happen
        packages_dir: Override for the local packages directory

    Returns:
        The install location
    """
    target = (packages_dir or local_packages_dir()) / name / version

    if dry_run:
        logger.info("%sWould install to %s", DRY_RUN_PREFIX, target)
        return target

    if target.exists():
        clear_directory(target)
    shutil.copytree(outdir, target, dirs_exist_ok=True)
    logger.info("Installed to %s (import it as @local/%s:%s)", target, name, version)
    return target
