# SPDX-License-Identifier: MIT
"""Version precedence following SemVer 2.0.0 section 11.

Numeric pre-release identifiers compare numerically and sort before
alphanumeric ones; a release has higher precedence than any of its
pre-releases. Build metadata is ignored.
"""

from __future__ import annotations

from typing import Union

from .semver import Version, parse_version


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


def _compare_prerelease(pre1: str | None, pre2: str | None) -> int:
    if pre1 == pre2:
        return 0
    if pre1 is None:
        return 1
    if pre2 is None:
        return -1

    parts1 = pre1.split(".")
    parts2 = pre2.split(".")

    for p1, p2 in zip(parts1, parts2):
        k1 = _identifier_key(p1)
        k2 = _identifier_key(p2)
        if k1 != k2:
            return -1 if k1 < k2 else 1

    # All shared identifiers equal: the longer set wins
    if len(parts1) != len(parts2):
        return -1 if len(parts1) < len(parts2) else 1

    return 0


def compare_versions(version1: Union[str, Version], version2: Union[str, Version]) -> int:
    """Compare two semantic versions.

    Returns:
        -1 if version1 < version2, 0 if equal in precedence, 1 otherwise

    Raises:
        InvalidVersionError: If either version string is invalid

    Examples:
        >>> compare_versions("0.1.0", "0.2.0")
        -1
        >>> compare_versions("1.0.0-rc.1", "1.0.0")
        -1
        >>> compare_versions("1.0.0+build.1", "1.0.0")
        0
    """
    v1 = parse_version(version1) if isinstance(version1, str) else version1
    v2 = parse_version(version2) if isinstance(version2, str) else version2

    for attr in ("major", "minor", "patch"):
        val1 = getattr(v1, attr)
        val2 = getattr(v2, attr)
        if val1 != val2:
            return -1 if val1 < val2 else 1

    return _compare_prerelease(v1.prerelease, v2.prerelease)


def version_key(version: Union[str, Version]) -> tuple:
    """Return a sort key consistent with :func:`compare_versions`.

    Examples:
        >>> sorted(["1.0.0", "0.2.0", "1.0.0-rc.1"], key=version_key)
        ['0.2.0', '1.0.0-rc.1', '1.0.0']
    """
    v = parse_version(version) if isinstance(version, str) else version

    if v.prerelease is None:
        prerelease_key: tuple = (1,)
    else:
        prerelease_key = (0, tuple(_identifier_key(p) for p in v.prerelease.split(".")))

    return (v.major, v.minor, v.patch, prerelease_key)
