# SPDX-License-Identifier: MIT
"""In-memory model of a ``typst.toml`` package manifest.

A :class:`Manifest` wraps the parsed TOML mapping so that unknown keys survive
a rewrite. It is never mutated: bumping the version or stripping the tool
configuration returns a new manifest.
"""

from __future__ import annotations

import copy
import os
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from .schema import DEFAULT_ENTRYPOINT, TOOL_SECTION, SchemaErrorDetail, schema_errors


class ManifestError(Exception):
    """Base exception for manifest-related errors."""

    pass


class ParseError(ManifestError):
    """Raised when a manifest file is missing or is not valid TOML."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path} is invalid: {reason}")


class SchemaError(ManifestError):
    """Raised when a manifest lacks a required table or has a malformed one.

    Attributes:
        errors: Structural errors reported by the schema
    """

    def __init__(self, path: Optional[Path], errors: list[SchemaErrorDetail]):
        self.path = path
        self.errors = errors
        where = f"{path}: " if path else ""
        message = f"{where}manifest structure is invalid"
        if errors:
            message += f": {errors[0]}"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class TemplateInfo:
    """The ``[template]`` table of a template package."""

    path: Optional[str] = None
    entrypoint: Optional[str] = None
    thumbnail: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TemplateInfo":
        return cls(
            path=data.get("path"),
            entrypoint=data.get("entrypoint"),
            thumbnail=data.get("thumbnail"),
        )


class Manifest:
    """A loaded package manifest.

    Field accessors return the raw values as found in the file; type checking
    is the validator's job, so ``authors`` may well be a string here.
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, Any]):
        self._data = data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Manifest":
        """Build a manifest from a parsed mapping.

        Raises:
            SchemaError: If the mapping does not have the required tables
        """
        errors = schema_errors(data)
        if errors:
            raise SchemaError(None, errors)
        return cls(copy.deepcopy(data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Manifest):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Manifest(name={self.name!r}, version={self.version!r})"

    @property
    def data(self) -> dict[str, Any]:
        """A deep copy of the underlying mapping."""
        return copy.deepcopy(self._data)

    @property
    def has_package_table(self) -> bool:
        return isinstance(self._data.get("package"), dict)

    @property
    def package(self) -> dict[str, Any]:
        package = self._data.get("package")
        return package if isinstance(package, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return a raw ``[package]`` field."""
        return self.package.get(key, default)

    @property
    def name(self) -> Any:
        return self.package.get("name")

    @property
    def version(self) -> Any:
        return self.package.get("version")

    @property
    def entrypoint(self) -> Any:
        return self.package.get("entrypoint")

    @property
    def entrypoint_or_default(self) -> str:
        entrypoint = self.entrypoint
        return entrypoint if isinstance(entrypoint, str) and entrypoint else DEFAULT_ENTRYPOINT

    @property
    def authors(self) -> Any:
        return self.package.get("authors")

    @property
    def license(self) -> Any:
        return self.package.get("license")

    @property
    def template(self) -> Optional[TemplateInfo]:
        template = self._data.get("template")
        if not isinstance(template, dict):
            return None
        return TemplateInfo.from_dict(template)

    @property
    def tool_config(self) -> dict[str, Any]:
        """The ``[tool.tyler]`` table, empty when absent."""
        return dict(self._data.get("tool", {}).get(TOOL_SECTION, {}))

    def with_version(self, version: str) -> "Manifest":
        """Return a copy whose ``package.version`` is ``version``."""
        data = self.data
        data["package"]["version"] = version
        return Manifest(data)

    def without_tool_config(self) -> "Manifest":
        """Return a copy without ``[tool.tyler]``; an emptied ``[tool]`` is dropped."""
        data = self.data
        tool = data.get("tool")
        if tool is not None:
            tool.pop(TOOL_SECTION, None)
            if not tool:
                del data["tool"]
        return Manifest(data)

    def published(self) -> "Manifest":
        """Return the copy that ships in a build: no ``[tool]`` table at all."""
        data = self.data
        data.pop("tool", None)
        return Manifest(data)

    def to_toml(self) -> str:
        return tomli_w.dumps(self._data)


def read_manifest(path: str | Path) -> Manifest:
    """Load and structurally check a manifest file.

    Raises:
        ParseError: If the file is missing, unreadable or not valid TOML
        SchemaError: If the ``[package]`` table is absent or a table is malformed
    """
    manifest_path = Path(path)
    if not manifest_path.is_file():
        raise ParseError(manifest_path, "file not found")

    try:
        with open(manifest_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ParseError(manifest_path, f"invalid TOML syntax: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(manifest_path, str(e)) from e

    errors = schema_errors(data)
    if errors:
        raise SchemaError(manifest_path, errors)

    return Manifest(data)


def write_manifest(manifest: Manifest, path: str | Path) -> None:
    """Atomically replace ``path`` with the serialized manifest.

    The content is written to a temporary file in the same directory and moved
    into place, so readers never observe a half-written manifest.
    """
    target = Path(path)
    content = manifest.to_toml()

    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
