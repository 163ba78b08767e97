# SPDX-License-Identifier: MIT
"""Command line interface for building and publishing Typst packages."""

__version__ = "0.1.0"
