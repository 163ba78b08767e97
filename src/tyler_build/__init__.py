# SPDX-License-Identifier: MIT
"""Build tooling for Typst packages.

This package provides the build pipeline behind ``tyler build``:
- Layered build options (command line, ``[tool.tyler]``, defaults)
- Read-only build planning, including template import rewrites
- Assembly of the output directory
- Installation into the ``@local`` namespace

Example:
    >>> from tyler_build import BuildOptions, plan_build, assemble
    >>>
    >>> options = BuildOptions.resolve(workdir, manifest.tool_config)
    >>> plan = plan_build(manifest, workdir / "typst.toml", options, "0.2.0")
    >>> result = assemble(plan, dry_run=True)
"""

__version__ = "0.1.0"

from .config import (
    DEFAULT_OUTDIR,
    DEFAULT_SRCDIR,
    BuildConfigError,
    BuildOptions,
    parse_list,
)
from .rewriter import (
    registry_import,
    relative_import,
    rewrite_template_imports,
)
from .assembler import (
    META_FILES,
    BuildError,
    BuildPlan,
    BuildResult,
    assemble,
    clear_directory,
    matches_any_pattern,
    plan_build,
)
from .install import (
    install_locally,
    local_packages_dir,
)

__all__ = [
    # Options
    "DEFAULT_SRCDIR",
    "DEFAULT_OUTDIR",
    "BuildConfigError",
    "BuildOptions",
    "parse_list",
    # Template rewriting
    "registry_import",
    "relative_import",
    "rewrite_template_imports",
    # Assembly
    "META_FILES",
    "BuildError",
    "BuildPlan",
    "BuildResult",
    "assemble",
    "clear_directory",
    "matches_any_pattern",
    "plan_build",
    # Local install
    "install_locally",
    "local_packages_dir",
]
