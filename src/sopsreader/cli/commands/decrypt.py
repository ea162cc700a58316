"""Decrypt a SOPS document or a single value of it."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import typer
import yaml

from sopsreader.cli.common import FILE_ARGUMENT, FILE_TYPE_OPTION, VERBOSE_OPTION, exit_error
from sopsreader.config import resolve_identities
from sopsreader.decrypt import decrypt_with_key
from sopsreader.exceptions import RecipientNotFoundError, SopsReaderError
from sopsreader.formats import load_document
from sopsreader.logging import init_logging
from sopsreader.models import SopsDocument
from sopsreader.recipients import resolve_data_key

log = logging.getLogger(__name__)

OUTPUT_FORMATS = ("json", "yaml")

# ─────────────────────────────────────────────────────────────────────────────
# Rendering
# ─────────────────────────────────────────────────────────────────────────────


def _printable(node: Any) -> Any:
    """Replace bytes leaves by text so the tree can be serialized."""
    if isinstance(node, bytes):
        return node.decode("utf-8", errors="backslashreplace")
    if isinstance(node, dict):
        return {key: _printable(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_printable(value) for value in node]
    return node


def _render_tree(tree: dict[str, Any], output_format: str) -> None:
    printable = _printable(tree)
    if output_format == "yaml":
        sys.stdout.write(yaml.safe_dump(printable, sort_keys=False, allow_unicode=True))
    else:
        sys.stdout.write(json.dumps(printable, indent=2, ensure_ascii=False, default=str) + "\n")


def _render_scalar(value: Any) -> None:
    if isinstance(value, bytes):
        sys.stdout.buffer.write(value)
        sys.stdout.flush()
    elif isinstance(value, bool):
        sys.stdout.write("true\n" if value else "false\n")
    else:
        sys.stdout.write(f"{value}\n")


# ─────────────────────────────────────────────────────────────────────────────
# Key resolution
# ─────────────────────────────────────────────────────────────────────────────


def _unwrap_with_any(document: SopsDocument, identities: list[str]) -> bytes:
    """Return the data key for the first identity that is a recipient.

    Raises:
        RecipientNotFoundError: If none of the identities is a recipient.
    """
    *others, last = identities
    for identity in others:
        try:
            return resolve_data_key(document, identity)
        except RecipientNotFoundError as exc:
            log.debug("Identity for %s is not a recipient", exc.public_key)
    return resolve_data_key(document, last)


# ─────────────────────────────────────────────────────────────────────────────
# CLI command
# ─────────────────────────────────────────────────────────────────────────────


def decrypt(
    file: Path = FILE_ARGUMENT,
    file_type: str | None = FILE_TYPE_OPTION,
    path: str | None = typer.Option(
        None,
        "--path",
        "-p",
        help="Decrypt only the value at this path (e.g. 'db.password', 'hosts[0]').",
    ),
    identity_file: Path | None = typer.Option(
        None,
        "--identity-file",
        "-i",
        help="age identity file (default: SOPS_AGE_KEY, SOPS_AGE_KEY_FILE, ~/.config/sops/age/keys.txt).",
    ),
    output_format: str = typer.Option(
        "json",
        "--format",
        "-f",
        help="Output format for whole documents (json, yaml).",
    ),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Decrypt a SOPS document and print the plaintext.

    With --path, only the addressed value is decrypted and printed raw.
    Exit codes: 0 (success), 1 (error).
    """
    init_logging("dev" if verbose else "prod")
    if output_format not in OUTPUT_FORMATS:
        exit_error(f"Invalid format '{output_format}'. Choose from: {', '.join(OUTPUT_FORMATS)}.")

    try:
        document = load_document(file, file_type)
        identities = resolve_identities(key_file=identity_file)
        data_key = _unwrap_with_any(document, identities)
        if path is not None:
            _render_scalar(decrypt_with_key(document, data_key, path))
        else:
            _render_tree(decrypt_with_key(document, data_key), output_format)
    except SopsReaderError as exc:
        exit_error(str(exc))
    except OSError as exc:
        exit_error(f"Cannot read {file}: {exc.strerror or exc}")


__all__ = ["decrypt"]
