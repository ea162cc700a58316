"""YAML adapter: sops metadata is already nested under ``sops``."""

from __future__ import annotations

import yaml

from sopsreader.exceptions import DocumentParseError
from sopsreader.models import SopsDocument, validate_document


def parse_yaml(text: str) -> SopsDocument:
    """Parse a SOPS yaml document.

    Args:
        text: YAML source.

    Returns:
        The validated SopsDocument.

    Raises:
        DocumentParseError: If the text is not valid YAML.
        SchemaError: If the sops metadata is malformed.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DocumentParseError("yaml", str(exc)) from exc
    return validate_document(raw)


__all__ = ["parse_yaml"]
