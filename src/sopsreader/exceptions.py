"""Specialized exceptions raised by sopsreader.

Exception hierarchy::

    SopsReaderError (base for all sopsreader errors)
        SchemaError (invalid sops metadata, also ValueError)
            DocumentParseError (text is not valid for its format)
        MissingSopsSectionError (env/ini without sops keys)
        UnsupportedFormatError (unknown file type, also ValueError)
        IdentityNotFoundError (no age identity available)
        RecipientNotFoundError (identity not among recipients)
        KeyUnwrapError (age unwrap of the data key failed)
        ValueDecryptionError (base for per-value failures)
            InvalidEncFormatError (malformed ENC[...] envelope)
            DecryptionFailedError (AEAD authentication failure)
            TypeCoercionError (plaintext does not parse as declared type)
            UnknownScalarTypeError (unsupported type: field)
        PathNotStringError (single-path target is not a string)

Messages never contain plaintext values, data keys or identities.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class SopsReaderError(Exception):
    """Base exception for all sopsreader errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error context as key-value pairs.

    Examples:
        >>> raise SopsReaderError("Something went wrong", details={"file_type": "yaml"})
        Traceback (most recent call last):
        ...
        sopsreader.exceptions.SopsReaderError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize SopsReaderError.

        Args:
            message: Human-readable error message.
            details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SchemaError(SopsReaderError, ValueError):
    """The sops metadata does not match the expected shape.

    Attributes:
        field: Dotted name of the offending field (e.g. ``sops.version``).
        reason: Description of the violation.

    Examples:
        >>> raise SchemaError("sops.version", "field is required")
        Traceback (most recent call last):
        ...
        sopsreader.exceptions.SchemaError: Invalid sops document: 'sops.version' field is required
    """

    def __init__(self, field: str, reason: str) -> None:
        """Initialize SchemaError.

        Args:
            field: Dotted name of the offending field.
            reason: Description of the violation.
        """
        super().__init__(
            f"Invalid sops document: '{field}' {reason}",
            details={"field": field, "reason": reason},
        )
        self.field = field
        self.reason = reason


class DocumentParseError(SchemaError):
    """The raw text is not valid for its format.

    Attributes:
        file_type: The format being parsed.
    """

    def __init__(self, file_type: str, reason: str) -> None:
        """Initialize DocumentParseError.

        Args:
            file_type: The format being parsed.
            reason: Parser error description.
        """
        super().__init__("<root>", f"is not valid {file_type}: {reason}")
        self.details["file_type"] = file_type
        self.file_type = file_type


class MissingSopsSectionError(SopsReaderError):
    """A flat env/ini document carries no sops metadata at all.

    Attributes:
        file_type: The format being parsed (``env`` or ``ini``).
    """

    def __init__(self, file_type: str) -> None:
        """Initialize MissingSopsSectionError.

        Args:
            file_type: The format being parsed.
        """
        where = "sops section" if file_type == "ini" else "sops data"
        super().__init__(f"Missing {where} in .{file_type}", details={"file_type": file_type})
        self.file_type = file_type


class UnsupportedFormatError(SopsReaderError, ValueError):
    """No adapter can handle the requested file type or extension.

    Attributes:
        file_type: The unrecognized type or extension (may be empty).
        supported: Extensions that are understood.
    """

    def __init__(self, file_type: str, supported: Iterable[str]) -> None:
        """Initialize UnsupportedFormatError.

        Args:
            file_type: The unrecognized type or extension.
            supported: Extensions that are understood.
        """
        self.file_type = file_type
        self.supported = tuple(supported)
        super().__init__(
            f"Unable to pick SOPS parser for {file_type or 'missing extension'!r}. Use: {', '.join(self.supported)}",
            details={"file_type": file_type, "supported": self.supported},
        )


class IdentityNotFoundError(SopsReaderError):
    """No age identity could be located.

    Attributes:
        searched: Locations that were checked.
    """

    def __init__(self, searched: Iterable[str]) -> None:
        """Initialize IdentityNotFoundError.

        Args:
            searched: Locations that were checked.
        """
        self.searched = tuple(searched)
        super().__init__(
            f"No age identity found (searched: {', '.join(self.searched)})",
            details={"searched": self.searched},
        )


class RecipientNotFoundError(SopsReaderError):
    """The identity's public key matches no recipient of the document.

    Attributes:
        public_key: Public key derived from the caller identity.
    """

    def __init__(self, public_key: str) -> None:
        """Initialize RecipientNotFoundError.

        Args:
            public_key: Public key derived from the caller identity.
        """
        super().__init__(
            "no matching recipient found in age config",
            details={"public_key": public_key},
        )
        self.public_key = public_key


class KeyUnwrapError(SopsReaderError):
    """The age collaborator failed to recover the data key."""


class ValueDecryptionError(SopsReaderError):
    """Base for failures tied to a single ENC value.

    Attributes:
        path: Location of the value in the tree, when known.
    """

    def __init__(self, message: str, *, path: str | None = None, **details: Any) -> None:
        """Initialize ValueDecryptionError.

        Args:
            message: Human-readable error message.
            path: Location of the value in the tree, when known.
            **details: Additional context.
        """
        if path:
            message = f"{message} (at {path})"
        super().__init__(message, details={"path": path, **details})
        self.path = path


class InvalidEncFormatError(ValueDecryptionError):
    """An ENC[...] envelope has an empty iv or tag, or a field that is not base64."""

    def __init__(self, *, path: str | None = None) -> None:
        """Initialize InvalidEncFormatError."""
        super().__init__("Invalid ENC format", path=path)


class DecryptionFailedError(ValueDecryptionError):
    """AES-GCM authentication failed for a value."""

    def __init__(self, *, path: str | None = None) -> None:
        """Initialize DecryptionFailedError."""
        super().__init__("Value failed authenticated decryption", path=path)


class TypeCoercionError(ValueDecryptionError):
    """Decrypted plaintext cannot be parsed as its declared type.

    Attributes:
        declared_type: The ``type:`` field of the envelope.
    """

    def __init__(self, declared_type: str, *, path: str | None = None) -> None:
        """Initialize TypeCoercionError.

        Args:
            declared_type: The ``type:`` field of the envelope.
            path: Location of the value in the tree, when known.
        """
        super().__init__(
            f"Decrypted value is not a valid {declared_type}",
            path=path,
            declared_type=declared_type,
        )
        self.declared_type = declared_type


class UnknownScalarTypeError(ValueDecryptionError):
    """The envelope declares a type outside str/bytes/int/float/bool.

    Attributes:
        declared_type: The unsupported ``type:`` field.
    """

    def __init__(self, declared_type: str, *, path: str | None = None) -> None:
        """Initialize UnknownScalarTypeError.

        Args:
            declared_type: The unsupported ``type:`` field.
            path: Location of the value in the tree, when known.
        """
        super().__init__(f"Unknown type {declared_type}", path=path, declared_type=declared_type)
        self.declared_type = declared_type


class PathNotStringError(SopsReaderError):
    """A single-path lookup did not land on a string value.

    Attributes:
        path: The requested path expression.
    """

    def __init__(self, path: str) -> None:
        """Initialize PathNotStringError.

        Args:
            path: The requested path expression.
        """
        super().__init__(f"Unable to get sops value at {path}", details={"path": path})
        self.path = path


__all__ = [
    "DecryptionFailedError",
    "DocumentParseError",
    "IdentityNotFoundError",
    "InvalidEncFormatError",
    "KeyUnwrapError",
    "MissingSopsSectionError",
    "PathNotStringError",
    "RecipientNotFoundError",
    "SchemaError",
    "SopsReaderError",
    "TypeCoercionError",
    "UnknownScalarTypeError",
    "UnsupportedFormatError",
    "ValueDecryptionError",
]
