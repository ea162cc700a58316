"""Shared helpers for sopsreader CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

console = Console()
error_console = Console(stderr=True)

FILE_ARGUMENT = typer.Argument(
    ...,
    exists=True,
    dir_okay=False,
    readable=True,
    help="SOPS-encrypted file (.env, .ini, .json, .yaml).",
)

FILE_TYPE_OPTION = typer.Option(
    None,
    "--type",
    "-t",
    help="File type (env, ini, json, yaml). Inferred from the extension by default.",
)

VERBOSE_OPTION = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Enable debug logging on stderr.",
)


def exit_error(message: str, *, code: int = 1) -> NoReturn:
    """Print an error message and exit.

    Args:
        message: Text shown after the ``Error:`` label.
        code: Process exit code.

    Raises:
        typer.Exit: Always.
    """
    error_console.print(f"[red]Error:[/] {escape(message)}", highlight=False)
    raise typer.Exit(code=code)


__all__ = [
    "FILE_ARGUMENT",
    "FILE_TYPE_OPTION",
    "VERBOSE_OPTION",
    "console",
    "error_console",
    "exit_error",
]
