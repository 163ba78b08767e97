# SPDX-License-Identifier: MIT
"""Package validation for Typst manifests.

Validation is an ordered battery of checks. Every check records findings on a
:class:`ValidationReport`; an error finding stops the battery so later checks,
which usually depend on earlier fields, never run against a broken manifest.

Example:
    >>> report = validate_package(manifest, workdir, workdir / "src", registry)
    >>> if not report.ok:
    ...     print(report.failure.message)
"""

from __future__ import annotations

import fnmatch
import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Protocol
from urllib.parse import urlsplit

from license_expression import ExpressionError, get_spdx_licensing
from tyler_version import FIRST_VERSION, compare_versions, is_valid_semver

from .model import Manifest, ManifestError
from .schema import (
    AUTHOR_PATTERN,
    CATEGORIES,
    DISCIPLINES,
    GLOB_CHARS,
    LICENSE_REF_PATTERN,
    MAX_THUMBNAIL_BYTES,
    MIN_THUMBNAIL_SIZE,
    NAME_CHAR_PATTERN,
    NAME_PATTERN,
    THUMBNAIL_EXTENSIONS,
)
from .thumbnail import inspect_thumbnail

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class RegistryLookup(Protocol):
    """The part of a registry snapshot the validator needs."""

    def latest(self, name: str) -> Optional[str]: ...

    def keywords(self) -> frozenset[str]: ...


@dataclass(frozen=True, slots=True)
class Finding:
    """A single validation outcome.

    Attributes:
        rule: Name of the check that produced the finding (e.g. "name", "template.thumbnail")
        severity: info for passes, warning for advisories, error for failures
        message: Human-readable message
        field: Manifest field the finding is about, if any
        value: The offending value, if any
    """

    rule: str
    severity: Severity
    message: str
    field: Optional[str] = None
    value: Any = None


@dataclass
class ValidationReport:
    """Ordered findings of one validation run."""

    findings: list[Finding] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def failure(self) -> Optional[Finding]:
        for finding in self.findings:
            if finding.severity is Severity.ERROR:
                return finding
        return None

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if f.severity is Severity.WARNING]

    def info(self, rule: str, message: str, field: Optional[str] = None) -> None:
        self.findings.append(Finding(rule, Severity.INFO, message, field))

    def warn(self, rule: str, message: str, field: Optional[str] = None, value: Any = None) -> None:
        self.findings.append(Finding(rule, Severity.WARNING, message, field, value))

    def fail(self, rule: str, message: str, field: Optional[str] = None, value: Any = None) -> None:
        self.findings.append(Finding(rule, Severity.ERROR, message, field, value))


class ManifestValidationError(ManifestError):
    """Raised when a package fails validation.

    Attributes:
        report: The full report, whose last finding is the failure
    """

    def __init__(self, report: ValidationReport):
        self.report = report
        failure = report.failure
        super().__init__(failure.message if failure else "Package validation failed")


@dataclass(frozen=True, slots=True)
class _Context:
    manifest: Manifest
    workdir: Path
    srcdir: Path
    registry: Optional[RegistryLookup]


def _missing(report: ValidationReport, field_name: str) -> None:
    report.fail(field_name, f"typst.toml is missing required field package.{field_name}", field_name)


def invalid_name_chars(name: str) -> list[str]:
    """Characters of ``name`` outside ``[a-z0-9-]``, deduplicated in order of appearance.

    Examples:
        >>> invalid_name_chars("My_Package")
        ['M', '_', 'P']
    """
    seen: list[str] = []
    for char in name:
        if not NAME_CHAR_PATTERN.fullmatch(char) and char not in seen:
            seen.append(char)
    return seen


def is_valid_author(author: str) -> bool:
    """Check an author entry against the accepted contact forms.

    Examples:
        >>> is_valid_author("Jane Doe <@janedoe>")
        True
        >>> is_valid_author("Jane Doe <invalid>")
        False
    """
    return AUTHOR_PATTERN.fullmatch(author) is not None


@functools.lru_cache(maxsize=1)
def _spdx_licensing():
    return get_spdx_licensing()


def is_valid_license(expression: str) -> bool:
    """Check that ``expression`` parses as an SPDX-2 license expression.

    Every license id must be a known SPDX id or a ``LicenseRef-`` reference.

    Examples:
        >>> is_valid_license("MIT OR LicenseRef-Custom")
        True
        >>> is_valid_license("MIT OR")
        False
    """
    licensing = _spdx_licensing()
    try:
        parsed = licensing.parse(expression, strict=True)
    except ExpressionError:
        return False
    if parsed is None:
        return False
    return all(LICENSE_REF_PATTERN.fullmatch(key) for key in licensing.unknown_license_keys(parsed))


def is_valid_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parts = urlsplit(value)
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


def _check_package(ctx: _Context, report: ValidationReport) -> None:
    if not ctx.manifest.has_package_table:
        report.fail("package", "typst.toml is missing required section [package]", "package")


def _check_name(ctx: _Context, report: ValidationReport) -> None:
    name = ctx.manifest.name
    if not name:
        _missing(report, "name")
        return

    if not isinstance(name, str):
        report.fail("name", f"The package name must be a string, got {name!r}", "name", name)
        return

    if not NAME_PATTERN.fullmatch(name):
        offending = invalid_name_chars(name)
        report.fail(
            "name",
            f"The package name {name!r} is invalid, it must only contain lowercase letters, "
            f"numbers, and hyphens, however it contains: {', '.join(offending)}",
            "name",
            offending,
        )
        return

    report.info("name", f"Package name is valid: {name}", "name")


def _check_version(ctx: _Context, report: ValidationReport) -> None:
    version = ctx.manifest.version
    name = ctx.manifest.name
    if not version:
        _missing(report, "version")
        return

    if not is_valid_semver(version):
        report.fail("version", f"The version of the package is not a valid semver: {version}", "version", version)
        return

    if ctx.registry is None:
        report.warn(
            "version",
            "The package index is unavailable, skipped comparing the version with the published one",
            "version",
        )
        return

    published = ctx.registry.latest(name)
    if published is not None and compare_versions(published, version) > 0:
        report.warn(
            "version",
            f"The version of {name}:{published} on the index is greater than the current {name}:{version}",
            "version",
            version,
        )
    elif published is None and version != FIRST_VERSION:
        report.warn(
            "version",
            f"{name}:{version} is not published on the index, but it is not {FIRST_VERSION}",
            "version",
            version,
        )
    else:
        report.info("version", f"Package version is valid: {version}", "version")


def _check_entrypoint(ctx: _Context, report: ValidationReport) -> None:
    entrypoint = ctx.manifest.entrypoint
    if not entrypoint:
        _missing(report, "entrypoint")
        return

    for root in (ctx.workdir, ctx.srcdir):
        candidate = root / str(entrypoint)
        if candidate.is_file():
            report.info("entrypoint", f"Entrypoint {entrypoint} found in {candidate}", "entrypoint")
            return

    report.fail(
        "entrypoint",
        f"The entrypoint file {entrypoint} does not exist in {ctx.workdir} or {ctx.srcdir}",
        "entrypoint",
        entrypoint,
    )


def _check_authors(ctx: _Context, report: ValidationReport) -> None:
    authors = ctx.manifest.authors
    if not authors:
        _missing(report, "authors")
        return

    if not isinstance(authors, list):
        report.fail("authors", "package.authors must be an array", "authors", authors)
        return

    for index, author in enumerate(authors):
        field_path = f"authors[{index}]"
        if not isinstance(author, str):
            report.fail("authors", "package.authors must be an array of strings", field_path, author)
            return
        if not is_valid_author(author):
            report.fail(
                "authors",
                f"package.authors has {author!r} that is invalid, it must be in the format of "
                'either "Name", "Name <email@example.com>", "Name <https://example.com>" '
                'or "Name <@github_handle>"',
                field_path,
                author,
            )
            return

    report.info("authors", f"Package authors are valid: {', '.join(authors)}", "authors")


def _check_license(ctx: _Context, report: ValidationReport) -> None:
    license_expr = ctx.manifest.license
    if not license_expr:
        _missing(report, "license")
        return

    if not isinstance(license_expr, str) or not is_valid_license(license_expr):
        report.fail(
            "license",
            f"The license {license_expr!r} is not a valid SPDX-2 expression",
            "license",
            license_expr,
        )
        return

    report.info("license", f"Package license is valid: {license_expr}", "license")

    license_file = ctx.workdir / "LICENSE"
    if not license_file.is_file():
        report.warn("license", f"The license file {license_file} does not exist", "license")


def _list_field(report: ValidationReport, ctx: _Context, name: str) -> Optional[list]:
    value = ctx.manifest.get(name)
    if value is None:
        return None
    if not isinstance(value, list):
        report.warn(name, f"package.{name} must be an array", name, value)
        return None
    return value


def _check_optionals(ctx: _Context, report: ValidationReport) -> None:
    description = ctx.manifest.get("description")
    if description:
        report.info("description", f"Package description is valid: {description}", "description")

    for url_field in ("homepage", "repository"):
        url = ctx.manifest.get(url_field)
        if url is None:
            continue
        if is_valid_url(url):
            report.info(url_field, f"Package {url_field} is valid: {url}", url_field)
        else:
            report.warn(url_field, f"The {url_field} {url!r} is not a valid URL", url_field, url)

    keywords = _list_field(report, ctx, "keywords")
    if keywords is not None:
        if ctx.registry is None:
            report.warn(
                "keywords",
                "The package index is unavailable, skipped checking keywords against it",
                "keywords",
            )
        else:
            known = ctx.registry.keywords()
            for keyword in keywords:
                if not isinstance(keyword, str) or keyword not in known:
                    report.warn(
                        "keywords",
                        f"The keyword {keyword!r} is not in the index already, are you sure you want to add it?",
                        "keywords",
                        keyword,
                    )

    for vocabulary_field, vocabulary in (("categories", CATEGORIES), ("disciplines", DISCIPLINES)):
        values = _list_field(report, ctx, vocabulary_field)
        for value in values or []:
            if not isinstance(value, str) or value not in vocabulary:
                report.warn(
                    vocabulary_field,
                    f"The {vocabulary_field} entry {value!r} is not valid",
                    vocabulary_field,
                    value,
                )

    compiler = ctx.manifest.get("compiler")
    if compiler is not None and not is_valid_semver(compiler):
        report.warn("compiler", f"The compiler version {compiler!r} is not a valid semver", "compiler", compiler)

    excludes = _list_field(report, ctx, "exclude")
    if excludes is not None:
        _check_excludes(ctx, report, excludes)


def _check_excludes(ctx: _Context, report: ValidationReport, excludes: list) -> None:
    all_paths: Optional[list[str]] = None

    for pattern in excludes:
        if not isinstance(pattern, str):
            report.warn("exclude", f"The exclude entry {pattern!r} is not a string", "exclude", pattern)
            continue

        if any(char in GLOB_CHARS for char in pattern):
            if all_paths is None:
                all_paths = [p.relative_to(ctx.workdir).as_posix() for p in ctx.workdir.rglob("*")]
            if not any(fnmatch.fnmatch(path, pattern) for path in all_paths):
                report.warn(
                    "exclude",
                    f"The exclude pattern {pattern!r} does not match any files",
                    "exclude",
                    pattern,
                )
        elif not (ctx.workdir / pattern).exists():
            report.warn("exclude", f"The excluded file {pattern!r} does not exist", "exclude", pattern)


def _check_template(ctx: _Context, report: ValidationReport) -> None:
    template = ctx.manifest.template
    if template is None:
        return

    report.info("template", "Package is a template")

    if not template.path:
        report.fail("template.path", "template.path is required", "template.path")
        return
    roots = (ctx.workdir, ctx.srcdir)
    if not any((root / template.path).exists() for root in roots):
        report.fail(
            "template.path",
            f"The template path {template.path!r} does not exist",
            "template.path",
            template.path,
        )
        return
    report.info("template.path", f"Template path is valid: {template.path}", "template.path")

    if not template.entrypoint:
        report.fail("template.entrypoint", "template.entrypoint is required", "template.entrypoint")
        return
    if not any((root / template.path / template.entrypoint).is_file() for root in roots):
        report.fail(
            "template.entrypoint",
            f"The template entrypoint {template.entrypoint!r} does not exist under {template.path}",
            "template.entrypoint",
            template.entrypoint,
        )
        return
    report.info(
        "template.entrypoint", f"Template entrypoint is valid: {template.entrypoint}", "template.entrypoint"
    )

    _check_thumbnail(ctx, report, template.thumbnail)


def _check_thumbnail(ctx: _Context, report: ValidationReport, thumbnail: Optional[str]) -> None:
    rule = "template.thumbnail"
    if not thumbnail:
        report.fail(rule, "template.thumbnail is required", rule)
        return

    path = ctx.workdir / thumbnail
    if not path.is_file():
        report.fail(rule, f"The thumbnail file {thumbnail!r} does not exist", rule, thumbnail)
        return

    info = inspect_thumbnail(path)
    if info.extension not in THUMBNAIL_EXTENSIONS:
        report.fail(rule, f"The thumbnail {thumbnail!r} must be a .png or .webp file", rule, thumbnail)
        return
    if not info.extension_matches_format:
        report.fail(
            rule,
            f"The thumbnail {thumbnail!r} is not a valid image, its content does not match its extension",
            rule,
            thumbnail,
        )
        return
    if not info.has_dimensions:
        report.fail(rule, f"The thumbnail {thumbnail!r} does not have valid dimensions", rule, thumbnail)
        return

    if not info.is_large_enough:
        report.warn(
            rule,
            f"The thumbnail {thumbnail!r} is too small, it must be at least "
            f"{MIN_THUMBNAIL_SIZE}px on the longest side",
            rule,
            f"{info.width}x{info.height}",
        )
    if not info.is_small_enough:
        report.warn(
            rule,
            f"The thumbnail {thumbnail!r} is too large, it must be at most {MAX_THUMBNAIL_BYTES} bytes",
            rule,
            info.size,
        )

    report.info(
        rule,
        f"Template thumbnail checked: {thumbnail} ({info.size} bytes, {info.width}x{info.height})",
        rule,
    )


CHECKS: tuple[Callable[[_Context, ValidationReport], None], ...] = (
    _check_package,
    _check_name,
    _check_version,
    _check_entrypoint,
    _check_authors,
    _check_license,
    _check_optionals,
    _check_template,
)


def validate_package(
    manifest: Manifest,
    workdir: Path,
    srcdir: Path,
    registry: Optional[RegistryLookup] = None,
) -> ValidationReport:
    """Run every check against a package, stopping at the first failure.

    Args:
        manifest: The loaded manifest
        workdir: Directory holding ``typst.toml``
        srcdir: Resolved source directory
        registry: Registry snapshot, or None when the index is unavailable

    Returns:
        The report; ``report.ok`` is False when a check failed
    """
    ctx = _Context(manifest=manifest, workdir=Path(workdir), srcdir=Path(srcdir), registry=registry)
    report = ValidationReport()

    for check in CHECKS:
        check(ctx, report)
        if not report.ok:
            logger.debug("Validation stopped at %s", check.__name__)
            break

    return report


def validate_package_strict(
    manifest: Manifest,
    workdir: Path,
    srcdir: Path,
    registry: Optional[RegistryLookup] = None,
) -> ValidationReport:
    """Validate a package and raise if any check failed.

    Raises:
        ManifestValidationError: If a check failed
    """
    report = validate_package(manifest, workdir, srcdir, registry)
    if not report.ok:
        raise ManifestValidationError(report)
    return report
