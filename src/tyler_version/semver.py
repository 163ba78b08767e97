# SPDX-License-Identifier: MIT
"""Semantic version parsing and incrementing for Typst packages.

Typst package versions are plain SemVer 2.0.0 strings (MAJOR.MINOR.PATCH with
optional pre-release and build metadata). This module is strict: no leading
``v``, no surrounding whitespace tolerance beyond a strip, no partial versions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Literal, Optional

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)"
    r"\.(?P<minor>0|[1-9]\d*)"
    r"\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<buildmetadata>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# The version every newly registered package is expected to start at
FIRST_VERSION = "0.1.0"

BumpPart = Literal["major", "minor", "patch"]
BUMP_PARTS: tuple[BumpPart, ...] = ("patch", "minor", "major")


class InvalidVersionError(Exception):
    """Raised when a version string does not follow semantic versioning."""

    def __init__(self, version: str, message: str = ""):
        self.version = version
        self.message = message or f"Invalid semantic version: {version}"
        super().__init__(self.message)


@dataclass(frozen=True, slots=True)
class Version:
    """A parsed semantic version.

    Attributes:
        major: Incremented for breaking changes
        minor: Incremented for backward compatible features
        patch: Incremented for fixes
        prerelease: Dot-separated pre-release identifiers (e.g. "rc.1")
        build: Build metadata, ignored for precedence
    """

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    @property
    def base_version(self) -> str:
        """The MAJOR.MINOR.PATCH triple without pre-release or build."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, part: BumpPart) -> "Version":
        """Return the next version for ``part``.

        Pre-release versions are released before moving on, the way npm's
        ``semver.inc`` does it:

        - ``1.2.3-rc.1`` patch -> ``1.2.3``
        - ``1.3.0-rc.1`` minor -> ``1.3.0``, but ``1.2.3-rc.1`` minor -> ``1.3.0``
        - ``2.0.0-rc.1`` major -> ``2.0.0``, but ``2.1.0-rc.1`` major -> ``3.0.0``

        Build metadata is always dropped.
        """
        released = replace(self, prerelease=None, build=None)

        if part == "patch":
            if self.is_prerelease:
                return released
            return replace(released, patch=self.patch + 1)

        if part == "minor":
            if self.is_prerelease and self.patch == 0:
                return released
            return replace(released, minor=self.minor + 1, patch=0)

        if part == "major":
            if self.is_prerelease and self.minor == 0 and self.patch == 0:
                return released
            return replace(released, major=self.major + 1, minor=0, patch=0)

        raise ValueError(f"Unknown version part: {part!r}")


def parse_version(version_string: str) -> Version:
    """Parse a semantic version string into a Version object.

    Raises:
        InvalidVersionError: If the string does not follow semantic versioning

    Examples:
        >>> parse_version("1.2.3")
        Version(major=1, minor=2, patch=3, prerelease=None, build=None)

        >>> parse_version("0.1.0-rc.1")
        Version(major=0, minor=1, patch=0, prerelease='rc.1', build=None)
    """
    if not isinstance(version_string, str):
        raise InvalidVersionError(
            str(version_string), f"Version must be a string, got {type(version_string).__name__}"
        )

    version_string = version_string.strip()
    if not version_string:
        raise InvalidVersionError(version_string, "Version string cannot be empty")

    match = SEMVER_PATTERN.match(version_string)
    if not match:
        raise InvalidVersionError(version_string)

    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=match.group("prerelease"),
        build=match.group("buildmetadata"),
    )


def is_valid_semver(version_string: object) -> bool:
    """Check if a value is a valid semantic version string.

    Examples:
        >>> is_valid_semver("0.1.0")
        True
        >>> is_valid_semver("0.1")
        False
        >>> is_valid_semver(1)
        False
    """
    if not isinstance(version_string, str):
        return False
    return SEMVER_PATTERN.match(version_string.strip()) is not None


def bump_version(version_string: str, part: BumpPart) -> str:
    """Increment ``version_string`` by ``part`` and return the new string.

    Raises:
        InvalidVersionError: If ``version_string`` is not semver

    Examples:
        >>> bump_version("0.1.0", "patch")
        '0.1.1'
        >>> bump_version("0.1.9", "minor")
        '0.2.0'
    """
    return str(parse_version(version_string).bump(part))
