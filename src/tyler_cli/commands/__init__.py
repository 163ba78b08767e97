# SPDX-License-Identifier: MIT
"""CLI command implementations."""

from . import build, check, env

__all__ = ["build", "check", "env"]
