"""Data models for sopsreader.

This module defines the canonical document shape every format adapter
produces and the decryption engine consumes:

- ScalarType: Enum of the ``type:`` values an ENC envelope may declare
- AgeRecipient: One wrapped copy of the data key and its age public key
- SopsMetadata: The ``sops`` sub-record of an encrypted document
- SopsDocument: Parsed document, data tree plus metadata
- EncryptedLeaf: Transient parse of one ``ENC[...]`` string

Validation happens once, in ``validate_document``, at the adapter boundary.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sopsreader.exceptions import SchemaError

#: Fields of the ``sops`` sub-record that must be present.
REQUIRED_SOPS_FIELDS = ("age", "lastmodified", "version")

#: Fields of the ``sops`` sub-record that may be absent.
OPTIONAL_SOPS_FIELDS = ("mac", "unencrypted_suffix")


class ScalarType(str, Enum):
    """Original type of an encrypted scalar.

    Attributes:
        STR: Text, returned unchanged.
        BYTES: Raw bytes.
        INT: Base-10 integer.
        FLOAT: Floating point number.
        BOOL: Boolean, ``true`` in any case is True.
    """

    STR = "str"
    BYTES = "bytes"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


@dataclass(frozen=True, slots=True)
class AgeRecipient:
    """Data key wrapped for one age recipient.

    Attributes:
        enc: Armored age ciphertext of the data key.
        recipient: age public key (``age1...``) able to unwrap ``enc``.
    """

    enc: str
    recipient: str

    def to_dict(self) -> dict[str, str]:
        """Return the mapping form used in yaml/json documents."""
        return {"enc": self.enc, "recipient": self.recipient}


@dataclass(frozen=True, slots=True)
class SopsMetadata:
    """The ``sops`` sub-record of an encrypted document.

    Attributes:
        age: Recipients in document order.
        lastmodified: Opaque ISO-8601 timestamp.
        version: SOPS version that wrote the document.
        mac: ENC-shaped ciphertext of the document digest (never verified).
        unencrypted_suffix: Key suffix marking intentionally plain fields.
        extra: Other sops fields (kms, pgp, ...) kept as found.
    """

    age: tuple[AgeRecipient, ...]
    lastmodified: str
    version: str
    mac: str | None = None
    unencrypted_suffix: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the mapping form, omitting unset optional fields."""
        result: dict[str, Any] = dict(self.extra)
        result["age"] = [entry.to_dict() for entry in self.age]
        result["lastmodified"] = self.lastmodified
        if self.mac is not None:
            result["mac"] = self.mac
        if self.unencrypted_suffix is not None:
            result["unencrypted_suffix"] = self.unencrypted_suffix
        result["version"] = self.version
        return result


@dataclass(frozen=True, slots=True)
class SopsDocument:
    """Parsed SOPS document.

    The ``data`` tree is treated as read-only: decryption always works on
    a private deep copy, so one document can be decrypted concurrently.

    Attributes:
        data: Top-level keys other than ``sops``, in source order.
        metadata: Validated ``sops`` sub-record.

    Examples:
        >>> doc = validate_document({
        ...     "token": "plain",
        ...     "sops": {"age": [], "lastmodified": "2024-01-01T00:00:00Z", "version": "3.8.1"},
        ... })
        >>> doc.data
        {'token': 'plain'}
        >>> doc.metadata.version
        '3.8.1'
    """

    data: dict[str, Any]
    metadata: SopsMetadata

    @property
    def recipients(self) -> tuple[str, ...]:
        """Return the recipient public keys in document order."""
        return tuple(entry.recipient for entry in self.metadata.age)

    def to_dict(self) -> dict[str, Any]:
        """Return the document as a single mapping with a ``sops`` key."""
        return {**self.data, "sops": self.metadata.to_dict()}


@dataclass(frozen=True, slots=True)
class EncryptedLeaf:
    """Fields captured from one ``ENC[...]`` string.

    Attributes:
        data: Base64 ciphertext.
        iv: Base64 initialization vector.
        tag: Base64 GCM authentication tag.
        type: Declared scalar type, kept raw so unknown values can be reported.
    """

    data: str
    iv: str
    tag: str
    type: str


def _require_str(sops: Mapping[str, Any], name: str, *, optional: bool = False) -> str | None:
    value = sops.get(name)
    if value is None:
        if optional:
            return None
        raise SchemaError(f"sops.{name}", "field is required")
    if not isinstance(value, str):
        raise SchemaError(f"sops.{name}", f"must be a string, got {type(value).__name__}")
    return value


def _parse_age(raw: Any) -> tuple[AgeRecipient, ...]:
    if raw is None:
        raise SchemaError("sops.age", "field is required")
    if not isinstance(raw, list | tuple):
        raise SchemaError("sops.age", f"must be a list, got {type(raw).__name__}")

    entries: list[AgeRecipient] = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise SchemaError(f"sops.age[{index}]", "must be a mapping")
        for name in ("enc", "recipient"):
            if not isinstance(item.get(name), str):
                raise SchemaError(f"sops.age[{index}].{name}", "field is required and must be a string")
        entries.append(AgeRecipient(enc=item["enc"], recipient=item["recipient"]))
    return tuple(entries)


def validate_document(raw: Any) -> SopsDocument:
    """Check a parsed mapping against the document schema.

    Unknown top-level keys are kept as data. The ``sops`` sub-record is
    checked field by field.

    Args:
        raw: Mapping produced by a format parser.

    Returns:
        The validated SopsDocument.

    Raises:
        SchemaError: If the root is not a mapping, ``sops`` is missing, or a
            required sops field is missing or mistyped.
    """
    if not isinstance(raw, Mapping):
        raise SchemaError("<root>", f"must be a mapping, got {type(raw).__name__}")

    sops = raw.get("sops")
    if sops is None:
        raise SchemaError("sops", "field is required")
    if not isinstance(sops, Mapping):
        raise SchemaError("sops", "must be a mapping")

    known = set(REQUIRED_SOPS_FIELDS) | set(OPTIONAL_SOPS_FIELDS)
    metadata = SopsMetadata(
        age=_parse_age(sops.get("age")),
        lastmodified=_require_str(sops, "lastmodified"),  # type: ignore[arg-type]
        version=_require_str(sops, "version"),  # type: ignore[arg-type]
        mac=_require_str(sops, "mac", optional=True),
        unencrypted_suffix=_require_str(sops, "unencrypted_suffix", optional=True),
        extra={key: value for key, value in sops.items() if key not in known},
    )
    data = {key: value for key, value in raw.items() if key != "sops"}
    return SopsDocument(data=data, metadata=metadata)


__all__ = [
    "OPTIONAL_SOPS_FIELDS",
    "REQUIRED_SOPS_FIELDS",
    "AgeRecipient",
    "EncryptedLeaf",
    "ScalarType",
    "SopsDocument",
    "SopsMetadata",
    "validate_document",
]
