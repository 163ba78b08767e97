# SPDX-License-Identifier: MIT
"""Build options resolved from the command line, ``[tool.tyler]`` and defaults.

Options are resolved once per invocation. Precedence (highest to lowest):

1. Command line flag
2. ``[tool.tyler]`` in ``typst.toml``
3. Built-in default
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, TypeVar

T = TypeVar("T")

DEFAULT_SRCDIR = "src"
DEFAULT_OUTDIR = "dist"


class BuildConfigError(Exception):
    """Raised when ``[tool.tyler]`` holds a value of the wrong type."""

    pass


def parse_list(value: str) -> list[str]:
    """Split a comma-separated command line value.

    Examples:
        >>> parse_list("*.pdf, tests/*")
        ['*.pdf', 'tests/*']
    """
    return [item.strip() for item in value.split(",") if item.strip()]


def _first_set(*values: Optional[T], default: T) -> T:
    for value in values:
        if value is not None:
            return value
    return default


def _resolve_path(workdir: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else (workdir / path)


@dataclass(frozen=True, slots=True)
class BuildOptions:
    """Fully resolved build layout.

    Attributes:
        workdir: Directory holding ``typst.toml``
        srcdir: Directory whose contents are copied into the build
        outdir: Directory the build is written to
        ignore: fnmatch patterns for source files left out of the build
    """

    workdir: Path
    srcdir: Path
    outdir: Path
    ignore: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def resolve(
        cls,
        workdir: str | Path,
        tool_config: Optional[dict[str, Any]] = None,
        *,
        srcdir: Optional[str] = None,
        outdir: Optional[str] = None,
        ignore: Optional[str | list[str]] = None,
    ) -> "BuildOptions":
        """Layer command line values over ``[tool.tyler]`` and the defaults.

        Args:
            workdir: Directory holding ``typst.toml``; relative paths resolve against it
            tool_config: The ``[tool.tyler]`` table, if any
            srcdir: ``--srcdir`` value
            outdir: ``--outdir`` value
            ignore: ``--ignore`` value, comma-separated or already split

        Raises:
            BuildConfigError: If a ``[tool.tyler]`` value has the wrong type
        """
        base = Path(workdir).resolve()
        config = tool_config or {}

        for key in ("srcdir", "outdir"):
            if key in config and not isinstance(config[key], str):
                raise BuildConfigError(f"[tool.tyler].{key} must be a string")
        config_ignore = config.get("ignore")
        if config_ignore is not None and (
            not isinstance(config_ignore, list) or not all(isinstance(i, str) for i in config_ignore)
        ):
            raise BuildConfigError("[tool.tyler].ignore must be an array of strings")

        cli_ignore = parse_list(ignore) if isinstance(ignore, str) else ignore

        return cls(
            workdir=base,
            srcdir=_resolve_path(base, _first_set(srcdir, config.get("srcdir"), default=DEFAULT_SRCDIR)),
            outdir=_resolve_path(base, _first_set(outdir, config.get("outdir"), default=DEFAULT_OUTDIR)),
            ignore=tuple(_first_set(cli_ignore, config_ignore, default=[])),
        )
