# SPDX-License-Identifier: MIT
"""Choosing the version of a build."""

from __future__ import annotations

import logging
from typing import Optional

from tyler_publish import DecisionProvider, UserAbort
from tyler_version import CANCEL, CUSTOM, SKIP, VersionError, bump_choices, is_valid_semver, resolve

logger = logging.getLogger(__name__)


def interactive_bump(current: str, decisions: DecisionProvider) -> str:
    """Ask how to bump ``current`` and return the chosen version.

    Raises:
        UserAbort: If the user picks cancel
        VersionError: If a custom version is not semver
    """
    choices = bump_choices(current)
    options = [
        (choice.value, f"{choice.label:>8} {choice.preview}" if choice.preview else choice.label)
        for choice in choices
    ]
    selected = decisions.ask_choice(f"Current version: {current} ->", options, default=SKIP)

    if selected == CANCEL:
        raise UserAbort()

    if selected == CUSTOM:
        custom = decisions.ask_text("Enter the version to bump to").strip()
        if not is_valid_semver(custom):
            raise VersionError(custom, current, f"The version is not a valid semver: {custom}")
        logger.info("Bumping version to %s", custom)
        return resolve(current, custom)

    target = resolve(current, selected)
    logger.info("Bumping version by %s to %s", selected, target)
    return target


def choose_version(
    current: str,
    bump: Optional[str],
    no_bump: bool,
    decisions: DecisionProvider,
    interactive: bool,
) -> str:
    """Resolve the target version from the command line flags.

    ``--no-bump`` wins over ``--bump``. Without either, the user is asked when
    a terminal is attached and the version is kept otherwise.
    """
    if no_bump:
        return resolve(current, SKIP)
    if bump is not None:
        return resolve(current, bump)
    if interactive:
        return interactive_bump(current, decisions)
    logger.info("No bump directive given, keeping version %s", current)
    return current
