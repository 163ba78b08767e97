# SPDX-License-Identifier: MIT
"""Semantic versions for Typst packages: parsing, precedence, bumping.

Example:
    >>> from tyler_version import resolve, compare_versions
    >>> resolve("0.1.0", "minor")
    '0.2.0'
    >>> compare_versions("0.2.0", "0.10.0")
    -1
"""

__version__ = "0.1.0"

from .semver import (
    BUMP_PARTS,
    FIRST_VERSION,
    SEMVER_PATTERN,
    BumpPart,
    InvalidVersionError,
    Version,
    bump_version,
    is_valid_semver,
    parse_version,
)
from .compare import (
    compare_versions,
    version_key,
)
from .resolver import (
    CANCEL,
    CUSTOM,
    SKIP,
    BumpChoice,
    Resolution,
    VersionError,
    bump_choices,
    resolve,
    resolve_target,
)

__all__ = [
    # Parsing
    "Version",
    "BumpPart",
    "BUMP_PARTS",
    "FIRST_VERSION",
    "SEMVER_PATTERN",
    "InvalidVersionError",
    "parse_version",
    "is_valid_semver",
    "bump_version",
    # Comparison
    "compare_versions",
    "version_key",
    # Resolution
    "SKIP",
    "CUSTOM",
    "CANCEL",
    "BumpChoice",
    "Resolution",
    "VersionError",
    "bump_choices",
    "resolve",
    "resolve_target",
]
