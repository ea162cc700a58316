"""Typer application entry point (``sopsreader`` console script)."""

from __future__ import annotations

import typer

from sopsreader.cli.commands.decrypt import decrypt
from sopsreader.cli.commands.recipients import recipients

app = typer.Typer(
    name="sopsreader",
    help="Decrypt SOPS documents encrypted for age recipients.",
    no_args_is_help=True,
    add_completion=False,
)

app.command("decrypt")(decrypt)
app.command("recipients")(recipients)


def main() -> None:
    """Run the CLI."""
    app()


__all__ = ["app", "main"]
