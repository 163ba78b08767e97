# SPDX-License-Identifier: MIT
"""Read-only view over one fetch of the package index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from tyler_version import is_valid_semver, version_key

from .models import IndexPackage


@dataclass(frozen=True)
class RegistrySnapshot:
    """Immutable, ordered list of published package versions.

    The index lists one entry per published version, so a package name can
    appear many times.
    """

    packages: tuple[IndexPackage, ...] = ()
    _keywords: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_keywords", frozenset(kw for pkg in self.packages for kw in pkg.keywords)
        )

    def __len__(self) -> int:
        return len(self.packages)

    def __iter__(self) -> Iterator[IndexPackage]:
        return iter(self.packages)

    def entries(self, name: str) -> list[IndexPackage]:
        return [pkg for pkg in self.packages if pkg.name == name]

    def versions(self, name: str) -> list[str]:
        """Published versions of ``name``, lowest precedence first.

        Entries whose version is not semver are left out.
        """
        found = {pkg.version for pkg in self.entries(name) if is_valid_semver(pkg.version)}
        return sorted(found, key=version_key)

    def latest(self, name: str) -> Optional[str]:
        """Highest published version of ``name``, None when unpublished."""
        versions = self.versions(name)
        return versions[-1] if versions else None

    def is_published(self, name: str, version: str) -> bool:
        return any(pkg.version == version for pkg in self.entries(name))

    def keywords(self) -> frozenset[str]:
        """Every keyword used by any published package."""
        return self._keywords
