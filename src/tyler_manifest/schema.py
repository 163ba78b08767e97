# SPDX-License-Identifier: MIT
"""Schema and controlled vocabularies for ``typst.toml`` manifests.

The JSON Schema only pins down the table structure that must hold before a
manifest can be loaded at all. Field-level rules (name grammar, authors,
licenses, vocabularies) are ordered checks in :mod:`tyler_manifest.validator`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema import ValidationError as JsonSchemaError

MANIFEST_FILENAME = "typst.toml"
DEFAULT_ENTRYPOINT = "lib.typ"

# Registry namespace that published packages are imported from
REGISTRY_NAMESPACE = "preview"

# Section of [tool] owned by this build tool, stripped from published copies
TOOL_SECTION = "tyler"

NAME_PATTERN = re.compile(r"[a-z0-9-]+")
NAME_CHAR_PATTERN = re.compile(r"[a-z0-9-]")

# "Name", "Name <email@example.com>", "Name <https://example.com>", "Name <@handle>"
AUTHOR_PATTERN = re.compile(r"[^<]*(?: <(?:[a-zA-Z0-9_\-.]*)?@[^<>]+>|<https?://[^<>]+>)?")

# Characters that make an exclude entry a glob rather than a literal path
GLOB_CHARS = frozenset("*?[]{}")

# User-defined SPDX license identifiers, optionally scoped to an external document
LICENSE_REF_PATTERN = re.compile(r"(?:DocumentRef-[A-Za-z0-9.\-]+:)?LicenseRef-[A-Za-z0-9.\-]+")

THUMBNAIL_EXTENSIONS = ("png", "webp")
THUMBNAIL_FORMATS = {"PNG": "image/png", "WEBP": "image/webp"}
MIN_THUMBNAIL_SIZE = 1080
MAX_THUMBNAIL_BYTES = 3 * 1024 * 1024

CATEGORIES = frozenset(
    {
        "model",
        "paper",
        "presentation",
        "utility",
        "thesis",
        "visualization",
        "components",
        "office",
        "text",
        "languages",
        "fun",
        "report",
        "scripting",
        "cv",
        "book",
        "layout",
        "flyer",
        "integration",
        "poster",
    }
)

DISCIPLINES = frozenset(
    {
        "agriculture",
        "anthropology",
        "archaeology",
        "architecture",
        "biology",
        "business",
        "chemistry",
        "communication",
        "computer-science",
        "design",
        "drawing",
        "economics",
        "education",
        "engineering",
        "fashion",
        "film",
        "geography",
        "geology",
        "history",
        "journalism",
        "law",
        "linguistics",
        "literature",
        "mathematics",
        "medicine",
        "music",
        "painting",
        "philosophy",
        "photography",
        "physics",
        "politics",
        "psychology",
        "sociology",
        "theater",
        "theology",
        "transportation",
    }
)

MANIFEST_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Typst package manifest",
    "description": "Table structure of typst.toml",
    "type": "object",
    "required": ["package"],
    "properties": {
        "package": {
            "type": "object",
            "description": "Package metadata; field rules are checked by the validator",
        },
        "template": {
            "type": "object",
            "description": "Present only for template packages",
            "properties": {
                "path": {"type": "string"},
                "entrypoint": {"type": "string"},
                "thumbnail": {"type": "string"},
            },
        },
        "tool": {
            "type": "object",
            "description": "Free-form tool configuration",
            "properties": {
                TOOL_SECTION: {
                    "type": "object",
                    "properties": {
                        "srcdir": {"type": "string"},
                        "outdir": {"type": "string"},
                        "ignore": {"type": "array", "items": {"type": "string"}},
                    },
                },
            },
        },
    },
    "additionalProperties": True,
}


@dataclass(frozen=True, slots=True)
class SchemaErrorDetail:
    """A single structural problem in a manifest.

    Attributes:
        field: Dotted path to the offending table or key (e.g. "tool.tyler.ignore[0]")
        message: Human-readable error message
    """

    field: str
    message: str

    def __str__(self) -> str:
        return f"[{self.field}] {self.message}"


def _path_from_error(error: JsonSchemaError) -> str:
    if not error.absolute_path:
        return "<root>"
    parts: list[str] = []
    for part in error.absolute_path:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        elif parts:
            parts.append(f".{part}")
        else:
            parts.append(str(part))
    return "".join(parts)


def _format_error(error: JsonSchemaError) -> str:
    if error.validator == "required":
        missing = [name for name in error.validator_value if name not in error.instance]
        return f"Missing required table: [{', '.join(missing)}]"

    if error.validator == "type":
        expected = "table" if error.validator_value == "object" else error.validator_value
        return f"Expected {expected}, got {type(error.instance).__name__}"

    return error.message


def schema_errors(data: Any) -> list[SchemaErrorDetail]:
    """Validate ``data`` against :data:`MANIFEST_SCHEMA`.

    Returns:
        The structural errors, empty when the manifest can be loaded
    """
    validator = Draft202012Validator(MANIFEST_SCHEMA)
    return [
        SchemaErrorDetail(field=_path_from_error(error), message=_format_error(error))
        for error in sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    ]
