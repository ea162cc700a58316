"""Dotenv adapter: sops metadata lives in ``sops_``-prefixed keys."""

from __future__ import annotations

import io

from dotenv import dotenv_values

from sopsreader.exceptions import MissingSopsSectionError
from sopsreader.formats.flattened import construct_document
from sopsreader.models import SopsDocument

#: Prefix marking a dotenv key as sops metadata.
SOPS_KEY_PREFIX = "sops_"


def parse_env(text: str) -> SopsDocument:
    """Parse a SOPS dotenv document.

    Keys without a value (no ``=``) are ignored, like the dotenv format does.

    Args:
        text: Dotenv source.

    Returns:
        The validated SopsDocument.

    Raises:
        MissingSopsSectionError: If no ``sops_`` key is present.
        SchemaError: If the rebuilt metadata is incomplete.
    """
    parsed = dotenv_values(stream=io.StringIO(text), interpolate=False)

    data: dict[str, str] = {}
    sops: dict[str, str] = {}
    for key, value in parsed.items():
        if value is None:
            continue
        if key.startswith(SOPS_KEY_PREFIX):
            sops[key[len(SOPS_KEY_PREFIX) :]] = value
        else:
            data[key] = value

    if not sops:
        raise MissingSopsSectionError("env")
    return construct_document(data, sops)


__all__ = ["SOPS_KEY_PREFIX", "parse_env"]
