# SPDX-License-Identifier: MIT
"""Terminal implementation of the decision provider."""

from __future__ import annotations

from typing import Optional, Sequence

import click

from tyler_publish import UserAbort


class ClickDecisions:
    """Ask questions on the terminal with click prompts.

    Interrupting a prompt (Ctrl+C or end of input) counts as declining.
    """

    def ask_confirm(self, prompt: str, default: bool = False) -> bool:
        try:
            return click.confirm(prompt, default=default)
        except click.Abort:
            raise UserAbort() from None

    def ask_choice(self, prompt: str, options: Sequence[tuple[str, str]], default: Optional[str] = None) -> str:
        click.echo(prompt)
        for value, label in options:
            click.echo(f"  {value:>8}  {label}")
        try:
            return click.prompt(
                "Choice",
                type=click.Choice([value for value, _ in options]),
                default=default,
                show_choices=False,
            )
        except click.Abort:
            raise UserAbort() from None

    def ask_text(self, prompt: str, default: Optional[str] = None) -> str:
        try:
            return click.prompt(prompt, default=default, show_default=default is not None)
        except click.Abort:
            raise UserAbort() from None
