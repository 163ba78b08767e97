# SPDX-License-Identifier: MIT
"""Manifest model, schema, and validation for Typst packages.

This package provides utilities for working with ``typst.toml``:
- Loading and atomically rewriting manifests
- JSON Schema for the table structure
- The ordered package validation battery

Example:
    >>> from tyler_manifest import read_manifest, validate_package
    >>>
    >>> manifest = read_manifest("path/to/typst.toml")
    >>> report = validate_package(manifest, workdir, workdir / "src")
    >>> report.ok
    True
"""

__version__ = "0.1.0"

from .schema import (
    CATEGORIES,
    DEFAULT_ENTRYPOINT,
    DISCIPLINES,
    MANIFEST_FILENAME,
    MANIFEST_SCHEMA,
    REGISTRY_NAMESPACE,
    TOOL_SECTION,
    SchemaErrorDetail,
    schema_errors,
)
from .model import (
    Manifest,
    ManifestError,
    ParseError,
    SchemaError,
    TemplateInfo,
    read_manifest,
    write_manifest,
)
from .thumbnail import (
    ThumbnailInfo,
    inspect_thumbnail,
)
from .validator import (
    Finding,
    ManifestValidationError,
    RegistryLookup,
    Severity,
    ValidationReport,
    invalid_name_chars,
    is_valid_author,
    is_valid_license,
    validate_package,
    validate_package_strict,
)

__all__ = [
    # Schema
    "MANIFEST_FILENAME",
    "MANIFEST_SCHEMA",
    "DEFAULT_ENTRYPOINT",
    "REGISTRY_NAMESPACE",
    "TOOL_SECTION",
    "CATEGORIES",
    "DISCIPLINES",
    "SchemaErrorDetail",
    "schema_errors",
    # Model
    "Manifest",
    "TemplateInfo",
    "ManifestError",
    "ParseError",
    "SchemaError",
    "read_manifest",
    "write_manifest",
    # Thumbnails
    "ThumbnailInfo",
    "inspect_thumbnail",
    # Validation
    "Finding",
    "Severity",
    "RegistryLookup",
    "ValidationReport",
    "ManifestValidationError",
    "invalid_name_chars",
    "is_valid_author",
    "is_valid_license",
    "validate_package",
    "validate_package_strict",
]
