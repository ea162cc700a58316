"""List the age recipients of a SOPS document."""

from __future__ import annotations

from pathlib import Path

from rich.table import Table

from sopsreader.cli.common import FILE_ARGUMENT, FILE_TYPE_OPTION, VERBOSE_OPTION, console, exit_error
from sopsreader.exceptions import SopsReaderError
from sopsreader.formats import load_document
from sopsreader.logging import init_logging
from sopsreader.models import SopsDocument


def _create_table(document: SopsDocument) -> Table:
    """Build the recipients table.

    Args:
        document: Parsed SOPS document.

    Returns:
        Rich table with one row per recipient.
    """
    metadata = document.metadata
    table = Table(
        title="age Recipients",
        caption=f"sops {metadata.version}, last modified {metadata.lastmodified}",
        show_lines=False,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Recipient", style="cyan", no_wrap=True)
    for index, recipient in enumerate(document.recipients):
        table.add_row(str(index), recipient)
    return table


def recipients(
    file: Path = FILE_ARGUMENT,
    file_type: str | None = FILE_TYPE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show which age public keys can decrypt a SOPS document."""
    init_logging("dev" if verbose else "prod")
    try:
        document = load_document(file, file_type)
    except SopsReaderError as exc:
        exit_error(str(exc))
    except OSError as exc:
        exit_error(f"Cannot read {file}: {exc.strerror or exc}")

    if not document.metadata.age:
        console.print("[yellow]No age recipients.[/]")
        return
    console.print(_create_table(document))


__all__ = ["recipients"]
