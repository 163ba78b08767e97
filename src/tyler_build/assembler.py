# SPDX-License-Identifier: MIT
"""Assemble a publishable package directory.

Planning is read-only and separate from assembly, so a dry run computes
exactly what a real run would do and only differs in not touching the file
system.

Example:
    >>> plan = plan_build(manifest, manifest_path, options, "0.2.0")
    >>> result = assemble(plan)
    >>> result.files
    ['typst.toml', 'README.md', 'LICENSE', 'lib.typ']
"""

from __future__ import annotations

import fnmatch
import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from tyler_manifest import MANIFEST_FILENAME, Manifest, write_manifest

from .config import BuildOptions
from .rewriter import rewrite_template_imports

logger = logging.getLogger(__name__)

META_FILES = ("README.md", "LICENSE")

DRY_RUN_PREFIX = "(dry-run) "


class BuildError(Exception):
    """Raised when a package cannot be assembled."""

    pass


@dataclass(frozen=True)
class BuildPlan:
    """Everything a build will do, computed before anything is written.

    Attributes:
        options: Resolved directory layout and ignore patterns
        manifest_path: The source ``typst.toml``
        source_manifest: Manifest as read from disk
        manifest: Manifest carrying the target version
        entrypoint: Library entrypoint relative to the source directory
        rewrites: Template files (posix path relative to srcdir) to their new content
    """

    options: BuildOptions
    manifest_path: Path
    source_manifest: Manifest
    manifest: Manifest
    entrypoint: str
    rewrites: dict[str, str] = field(default_factory=dict)

    @property
    def workdir(self) -> Path:
        return self.options.workdir

    @property
    def srcdir(self) -> Path:
        return self.options.srcdir

    @property
    def outdir(self) -> Path:
        return self.options.outdir

    @property
    def name(self) -> str:
        return self.manifest.name

    @property
    def version(self) -> str:
        return self.manifest.version

    @property
    def version_changed(self) -> bool:
        return self.source_manifest.version != self.manifest.version


@dataclass
class BuildResult:
    """Result of assembling a package.

    Attributes:
        plan: The plan that was carried out
        dry_run: Whether the file system was left untouched
        files: Files written to (or, in a dry run, planned for) the output directory
        ignored: Source paths left out because of an ignore pattern
        warnings: Non-fatal problems found while assembling
    """

    plan: BuildPlan
    dry_run: bool = False
    files: list[str] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def matches_any_pattern(path: str, patterns: Iterable[str]) -> bool:
    """Check if a posix path or its last component matches any fnmatch pattern.

    Examples:
        >>> matches_any_pattern("docs/manual.pdf", ["*.pdf"])
        True
        >>> matches_any_pattern("tests", ["tests"])
        True
    """
    name = path.rsplit("/", 1)[-1]
    return any(fnmatch.fnmatch(path, p) or fnmatch.fnmatch(name, p) for p in patterns)


def clear_directory(directory: Path) -> None:
    """Remove everything inside ``directory`` but keep the directory itself.

    The directory may be a mount point or the target of a symlink, so it is
    never removed and recreated.
    """
    for entry in directory.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def _relative(path: Path, start: Path) -> str:
    try:
        return os.path.relpath(path, start)
    except ValueError:
        return str(path)


def plan_build(
    manifest: Manifest,
    manifest_path: Path,
    options: BuildOptions,
    version: str,
) -> BuildPlan:
    """Compute a build without touching the file system.

    Args:
        manifest: The validated source manifest
        manifest_path: Where the source manifest lives
        options: Resolved build options
        version: Version the build carries

    Raises:
        BuildError: If the source directory does not exist, or the output
            directory would cover the package or its sources
    """
    if not options.srcdir.is_dir():
        raise BuildError(f"Source directory not found: {options.srcdir}")
    outdir = options.outdir.resolve()
    for protected in (options.workdir.resolve(), options.srcdir.resolve()):
        if outdir == protected or outdir in protected.parents:
            raise BuildError(f"Output directory {options.outdir} would overwrite the package in {protected}")
    logger.info("Source directory found in %s", options.srcdir)
    logger.info("Output directory will be %s", options.outdir)

    bumped = manifest.with_version(version)
    entrypoint = manifest.entrypoint_or_default

    rewrites: dict[str, str] = {}
    template = manifest.template
    if template is not None and template.path:
        rewrites = rewrite_template_imports(
            options.srcdir, template.path, entrypoint, manifest.name, version
        )

    return BuildPlan(
        options=options,
        manifest_path=Path(manifest_path),
        source_manifest=manifest,
        manifest=bumped,
        entrypoint=entrypoint,
        rewrites=rewrites,
    )


class _Assembler:
    def __init__(self, plan: BuildPlan, dry_run: bool):
        self.plan = plan
        self.dry_run = dry_run
        self.result = BuildResult(plan=plan, dry_run=dry_run)
        self.prefix = DRY_RUN_PREFIX if dry_run else ""

    def rel(self, path: Path) -> str:
        return _relative(path, self.plan.workdir)

    def record(self, rel_path: str) -> None:
        if rel_path not in self.result.files:
            self.result.files.append(rel_path)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.result.warnings.append(message)

    def run(self) -> BuildResult:
        self.update_source_manifest()
        self.prepare_outdir()
        self.write_published_manifest()
        self.copy_meta_files()
        self.copy_sources()
        return self.result

    def update_source_manifest(self) -> None:
        plan = self.plan
        if not plan.version_changed:
            logger.debug("Version unchanged, leaving %s as is", plan.manifest_path)
            return
        if self.dry_run:
            logger.info("%sWould bump version in %s to %s", self.prefix, self.rel(plan.manifest_path), plan.version)
            return
        write_manifest(plan.manifest, plan.manifest_path)
        logger.info("Bumped version in %s to %s", self.rel(plan.manifest_path), plan.version)

    def prepare_outdir(self) -> None:
        outdir = self.plan.outdir
        if self.dry_run:
            logger.info("%sWould create and clear %s", self.prefix, self.rel(outdir))
            return
        outdir.mkdir(parents=True, exist_ok=True)
        clear_directory(outdir)
        logger.debug("Cleared %s", outdir)

    def write_published_manifest(self) -> None:
        target = self.plan.outdir / MANIFEST_FILENAME
        self.record(MANIFEST_FILENAME)
        if self.dry_run:
            logger.info("%sWould write %s without [tool]", self.prefix, self.rel(target))
            return
        write_manifest(self.plan.manifest.published(), target)
        logger.info("Wrote %s", self.rel(target))

    def copy_meta_files(self) -> None:
        for name in META_FILES:
            self.copy_from_workdir(name, required=True)

        template = self.plan.manifest.template
        if template is not None and template.thumbnail:
            self.copy_from_workdir(template.thumbnail, required=False)

    def copy_from_workdir(self, name: str, required: bool) -> None:
        source = self.plan.workdir / name
        target = self.plan.outdir / name
        if not source.is_file():
            if required:
                self.warn(f"{name} is required but not found in {self.plan.workdir}")
            return

        self.record(Path(name).as_posix())
        if self.dry_run:
            logger.info("%sWould copy %s to %s", self.prefix, name, self.rel(target))
            return
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        logger.info("Copied %s to %s", name, self.rel(target))

    def skip_dir(self, path: Path, rel_path: str) -> bool:
        if path.resolve() == self.plan.outdir.resolve():
            return True
        if matches_any_pattern(rel_path, self.plan.options.ignore):
            self.ignore(rel_path)
            return True
        return False

    def ignore(self, rel_path: str) -> None:
        self.result.ignored.append(rel_path)
        logger.info("Ignoring %s because it matches %s", rel_path, ", ".join(self.plan.options.ignore))

    def copy_sources(self) -> None:
        plan = self.plan
        srcdir = plan.srcdir
        source_manifest = plan.manifest_path.resolve()

        for root, dirs, files in os.walk(srcdir):
            root_path = Path(root)
            dirs.sort()
            dirs[:] = [
                d for d in dirs
                if not self.skip_dir(root_path / d, (root_path / d).relative_to(srcdir).as_posix())
            ]

            for filename in sorted(files):
                source = root_path / filename
                rel_path = source.relative_to(srcdir).as_posix()

                if source.resolve() == source_manifest:
                    continue
                if matches_any_pattern(rel_path, plan.options.ignore):
                    self.ignore(rel_path)
                    continue

                self.copy_source_file(source, rel_path)

    def copy_source_file(self, source: Path, rel_path: str) -> None:
        target = self.plan.outdir / rel_path
        rewritten = self.plan.rewrites.get(rel_path)
        self.record(rel_path)

        if self.dry_run:
            action = "write modified version of" if rewritten is not None else "copy"
            logger.info("%sWould %s %s to %s", self.prefix, action, rel_path, self.rel(target))
            return

        target.parent.mkdir(parents=True, exist_ok=True)
        if rewritten is not None:
            with open(target, "w", encoding="utf-8", newline="") as f:
                f.write(rewritten)
            logger.info("Copied modified version of %s to %s", rel_path, self.rel(target))
        else:
            shutil.copy2(source, target)
            logger.info("Copied %s to %s", rel_path, self.rel(target))


def assemble(plan: BuildPlan, dry_run: bool = False) -> BuildResult:
    """Carry out a build plan.

    Steps, in order: bump the source manifest, create and clear the output
    directory, write the published manifest, copy README.md, LICENSE and the
    template thumbnail, then copy the source tree with template rewrites
    applied and ignored paths left out.

    Args:
        plan: Plan from :func:`plan_build`
        dry_run: Log every action instead of performing it

    Returns:
        BuildResult listing the files of the output directory
    """
    return _Assembler(plan, dry_run).run()
