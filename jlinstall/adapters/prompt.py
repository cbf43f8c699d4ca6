"""
Terminal prompts — the only place that reads from the user.
"""

from __future__ import annotations

import click


class Prompter:
    """Reads selections and confirmations through click."""

    def prompt(self, text: str, default: str = "") -> str:
        """Ask for free text; an empty answer returns ``default``."""
        return click.prompt(text, default=default, show_default=bool(default))

    def confirm(self, text: str, default: bool = True) -> bool:
        """Ask a yes/no question."""
        return click.confirm(text, default=default)

    def say(self, text: str = "", fg: str | None = None, bold: bool = False) -> None:
        click.secho(text, fg=fg, bold=bold)
