# SPDX-License-Identifier: MIT
"""Resolve a bump directive into the version a build should carry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .compare import compare_versions
from .semver import (
    BUMP_PARTS,
    FIRST_VERSION,
    SEMVER_PATTERN,
    InvalidVersionError,
    bump_version,
    is_valid_semver,
)

logger = logging.getLogger(__name__)

SKIP = "skip"
CUSTOM = "custom"
CANCEL = "cancel"


class VersionError(Exception):
    """Raised when a bump directive cannot be turned into a version."""

    def __init__(self, directive: str, current: str, message: str = ""):
        self.directive = directive
        self.current = current
        super().__init__(
            message or f"Cannot bump version {current!r} with {directive!r}: "
            "expected patch, minor, major, skip or a semantic version"
        )


@dataclass(frozen=True, slots=True)
class Resolution:
    """Target version plus the policy notes raised while computing it.

    Attributes:
        current: Version found in the manifest
        version: Version the build will carry
        published: Latest version on the index, None when unpublished
        warnings: Advisory findings, never fatal
    """

    current: str
    version: str
    published: Optional[str] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.version != self.current


@dataclass(frozen=True, slots=True)
class BumpChoice:
    """One entry of the interactive bump menu."""

    value: str
    label: str
    preview: Optional[str] = None


def resolve(current: str, directive: str) -> str:
    """Compute the next version from ``directive``.

    Raises:
        VersionError: If ``current`` cannot be incremented or ``directive`` is
            neither a keyword nor a semantic version

    Examples:
        >>> resolve("0.1.0", "patch")
        '0.1.1'
        >>> resolve("0.1.0", "skip")
        '0.1.0'
        >>> resolve("0.1.0", "2.0.0-rc.1")
        '2.0.0-rc.1'
    """
    if directive == SKIP:
        return current

    if directive in BUMP_PARTS:
        try:
            return bump_version(current, directive)  # type: ignore[arg-type]
        except InvalidVersionError as e:
            raise VersionError(directive, current, f"Failed to bump the version: {e}") from e

    if isinstance(directive, str) and SEMVER_PATTERN.fullmatch(directive):
        return directive

    raise VersionError(directive, current)


def resolve_target(current: str, directive: str, published: Optional[str] = None) -> Resolution:
    """Resolve ``directive`` and collect the publication policy warnings.

    Args:
        current: Version in the manifest
        directive: patch, minor, major, skip or an explicit version
        published: Latest version on the index (None if the package is new)
    """
    warnings: list[str] = []

    if published is None and is_valid_semver(current):
        if compare_versions(current, FIRST_VERSION) > 0:
            warnings.append(
                f"The package is unpublished but its version {current} "
                f"is already past {FIRST_VERSION}"
            )

    version = resolve(current, directive)

    if version == current:
        logger.info("The version of the package is not changed: %s", version)

    if published is not None and version == published:
        warnings.append(f"Version {version} is already published on the index")

    return Resolution(current=current, version=version, published=published, warnings=warnings)


def bump_choices(current: str) -> list[BumpChoice]:
    """Menu entries for the interactive bump prompt, in display order."""
    choices = [BumpChoice(part, part, resolve(current, part)) for part in BUMP_PARTS]
    choices.append(BumpChoice(SKIP, "as-is", current))
    choices.append(BumpChoice(CUSTOM, "custom"))
    choices.append(BumpChoice(CANCEL, "cancel"))
    return choices
