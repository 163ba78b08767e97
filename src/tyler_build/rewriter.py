# SPDX-License-Identifier: MIT
"""Rewrite relative library imports in template files to registry imports.

A template scaffold imports the package it ships with by relative path while
it lives in the package sources (``#import "../lib.typ": *``). Once published,
it has to import the registry copy instead (``#import "@preview/name:1.0.0": *``).
"""

from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path

from tyler_manifest import REGISTRY_NAMESPACE

logger = logging.getLogger(__name__)


def registry_import(name: str, version: str, namespace: str = REGISTRY_NAMESPACE) -> str:
    """Import statement target for a published package.

    Examples:
        >>> registry_import("cetz", "0.3.0")
        'import "@preview/cetz:0.3.0"'
    """
    return f'import "@{namespace}/{name}:{version}"'


def relative_import(entrypoint: str, template_file: str) -> str:
    """The import a template file uses to reach the library entrypoint.

    The path is computed from the template file's path relative to the
    template directory, so a file at the template root reaches a top-level
    entrypoint through one ``..``.

    Examples:
        >>> relative_import("lib.typ", "main.typ")
        'import "../lib.typ"'
        >>> relative_import("lib.typ", "chapters/intro.typ")
        'import "../../lib.typ"'
    """
    return f'import "{posixpath.relpath(entrypoint, start=template_file)}"'


def _read_text(path: Path) -> str | None:
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError:
        logger.debug("Skipping non-UTF-8 template file %s", path)
        return None


def rewrite_template_imports(
    srcdir: Path,
    template_path: str,
    entrypoint: str,
    name: str,
    version: str,
) -> dict[str, str]:
    """Compute the rewritten content of every template file that imports the library.

    Matching is by exact string: only the literal ``import "<relative path>"``
    is replaced, every occurrence of it. Nothing is written.

    Args:
        srcdir: Source directory of the package
        template_path: ``template.path`` from the manifest, relative to ``srcdir``
        entrypoint: Library entrypoint relative to ``srcdir``
        name: Package name
        version: Version the build carries

    Returns:
        Mapping of file path relative to ``srcdir`` (posix) to new content
    """
    template_dir = srcdir / template_path
    if not template_dir.is_dir():
        logger.warning("Template directory %s not found in %s, no imports rewritten", template_path, srcdir)
        return {}

    replacement = registry_import(name, version)
    rewrites: dict[str, str] = {}

    for root, dirs, files in os.walk(template_dir):
        dirs.sort()
        for filename in sorted(files):
            full_path = Path(root) / filename
            in_template = full_path.relative_to(template_dir).as_posix()
            needle = relative_import(entrypoint, in_template)

            content = _read_text(full_path)
            if content is None or needle not in content:
                continue

            rel_path = full_path.relative_to(srcdir).as_posix()
            rewrites[rel_path] = content.replace(needle, replacement)
            logger.debug("Rewrote %s to %s in %s", needle, replacement, rel_path)

    return rewrites
