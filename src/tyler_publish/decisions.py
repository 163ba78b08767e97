# SPDX-License-Identifier: MIT
"""Interactive decisions as a pluggable capability.

Pipeline code asks a :class:`DecisionProvider` instead of prompting directly,
so it runs unattended with :class:`NonInteractiveDecisions` or a scripted
provider in tests.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence


class UserAbort(Exception):
    """Raised when the user declines or cancels; the command exits cleanly."""

    def __init__(self, message: str = "Cancelled by user"):
        super().__init__(message)


class DecisionProvider(Protocol):
    """Source of answers to questions the pipeline has to ask."""

    def ask_confirm(self, prompt: str, default: bool = False) -> bool: ...

    def ask_choice(self, prompt: str, options: Sequence[tuple[str, str]], default: Optional[str] = None) -> str:
        """Pick one of ``options``, given as ``(value, label)`` pairs; returns the value."""
        ...

    def ask_text(self, prompt: str, default: Optional[str] = None) -> str: ...


class NonInteractiveDecisions:
    """Answers every question without a terminal.

    Confirmations get ``assume_yes``. Choices and text fall back to their
    default; a question without a default cannot be answered and aborts.
    """

    def __init__(self, assume_yes: bool = True):
        self.assume_yes = assume_yes

    def ask_confirm(self, prompt: str, default: bool = False) -> bool:
        return self.assume_yes

    def ask_choice(self, prompt: str, options: Sequence[tuple[str, str]], default: Optional[str] = None) -> str:
        if default is None:
            raise UserAbort(f"Cannot answer {prompt!r} non-interactively")
        return default

    def ask_text(self, prompt: str, default: Optional[str] = None) -> str:
        if default is None:
            raise UserAbort(f"Cannot answer {prompt!r} non-interactively")
        return default
