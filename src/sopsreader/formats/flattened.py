"""Rebuild sops metadata from flat key/value formats.

The env and ini serializations cannot nest, so SOPS flattens the ``age``
recipient list into sibling keys::

    age__list_0__map_enc = -----BEGIN AGE ENCRYPTED FILE-----\\n...
    age__list_0__map_recipient = age1...

Entries are placed by the captured index, never by key iteration order.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from sopsreader.models import SopsDocument, validate_document

log = logging.getLogger(__name__)

#: Pattern for a flattened recipient key, after the ``sops`` prefix is removed.
AGE_LIST_KEY_PATTERN = re.compile(r"^age__list_(\d+)__(map_enc|map_recipient)$")

_FIELD_NAMES = {"map_enc": "enc", "map_recipient": "recipient"}


def rebuild_age_recipients(sops: Mapping[str, Any]) -> list[dict[str, Any]]:
    """Group flattened ``age__list_<n>__map_*`` keys into recipient entries.

    Literal ``\\n`` sequences in ``enc`` become real newlines. Indices are
    sorted numerically; gaps are closed.

    Args:
        sops: Sops keys with their prefix already stripped.

    Returns:
        Recipient mappings ordered by index. Missing fields are left out
        so schema validation can name them.

    Examples:
        >>> rebuild_age_recipients({
        ...     "age__list_1__map_recipient": "age1bbb",
        ...     "age__list_0__map_recipient": "age1aaa",
        ...     "age__list_0__map_enc": "line1\\\\nline2",
        ...     "age__list_1__map_enc": "x",
        ... })
        [{'recipient': 'age1aaa', 'enc': 'line1\\nline2'}, {'recipient': 'age1bbb', 'enc': 'x'}]
    """
    by_index: dict[int, dict[str, Any]] = {}
    for key, value in sops.items():
        match = AGE_LIST_KEY_PATTERN.match(key)
        if not match:
            continue
        entry = by_index.setdefault(int(match.group(1)), {})
        entry[_FIELD_NAMES[match.group(2)]] = value

    entries = []
    for index in sorted(by_index):
        entry = by_index[index]
        if isinstance(entry.get("enc"), str):
            entry["enc"] = entry["enc"].replace("\\n", "\n")
        entries.append(entry)
    return entries


def construct_document(base: Mapping[str, Any], sops: Mapping[str, Any]) -> SopsDocument:
    """Assemble and validate a document from flat data and sops keys.

    Args:
        base: Regular (non-sops) keys, in source order.
        sops: Sops keys with their prefix stripped.

    Returns:
        The validated SopsDocument.

    Raises:
        SchemaError: If the rebuilt metadata is incomplete.
    """
    age = rebuild_age_recipients(sops)
    log.debug("Rebuilt %d age recipient(s) from flattened keys", len(age))
    return validate_document(
        {
            **base,
            "sops": {
                "age": age,
                "lastmodified": sops.get("lastmodified"),
                "mac": sops.get("mac"),
                "unencrypted_suffix": sops.get("unencrypted_suffix"),
                "version": sops.get("version"),
            },
        }
    )


__all__ = [
    "AGE_LIST_KEY_PATTERN",
    "construct_document",
    "rebuild_age_recipients",
]
