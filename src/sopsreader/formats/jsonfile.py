"""JSON adapter: sops metadata is already nested under ``sops``."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from sopsreader.exceptions import DocumentParseError
from sopsreader.models import SopsDocument, validate_document


def parse_json(source: str | Mapping[str, Any]) -> SopsDocument:
    """Parse a SOPS json document from text or an already-decoded mapping.

    Args:
        source: JSON text, or the mapping ``json.loads`` would return.

    Returns:
        The validated SopsDocument.

    Raises:
        DocumentParseError: If the text is not valid JSON.
        SchemaError: If the sops metadata is malformed.
    """
    if isinstance(source, str):
        try:
            source = json.loads(source)
        except json.JSONDecodeError as exc:
            raise DocumentParseError("json", str(exc)) from exc
    return validate_document(source)


__all__ = ["parse_json"]
