"""Tests for the sopsreader.exceptions module."""

from __future__ import annotations

import pytest

from sopsreader.exceptions import (
    DecryptionFailedError,
    DocumentParseError,
    IdentityNotFoundError,
    InvalidEncFormatError,
    KeyUnwrapError,
    MissingSopsSectionError,
    PathNotStringError,
    RecipientNotFoundError,
    SchemaError,
    SopsReaderError,
    TypeCoercionError,
    UnknownScalarTypeError,
    UnsupportedFormatError,
    ValueDecryptionError,
)


class TestHierarchy:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "exc_type",
        [
            SchemaError,
            DocumentParseError,
            MissingSopsSectionError,
            UnsupportedFormatError,
            IdentityNotFoundError,
            RecipientNotFoundError,
            KeyUnwrapError,
            ValueDecryptionError,
            PathNotStringError,
        ],
    )
    def test_is_sopsreader_error(self, exc_type: type[Exception]) -> None:
        """Every error is catchable as SopsReaderError."""
        assert issubclass(exc_type, SopsReaderError)

    @pytest.mark.parametrize(
        "exc_type",
        [InvalidEncFormatError, DecryptionFailedError, TypeCoercionError, UnknownScalarTypeError],
    )
    def test_value_errors_share_base(self, exc_type: type[Exception]) -> None:
        """Per-value failures inherit from ValueDecryptionError."""
        assert issubclass(exc_type, ValueDecryptionError)

    def test_schema_error_is_value_error(self) -> None:
        """SchemaError also inherits from ValueError."""
        assert issubclass(SchemaError, ValueError)

    def test_parse_error_is_schema_error(self) -> None:
        """DocumentParseError is a SchemaError."""
        assert issubclass(DocumentParseError, SchemaError)

    def test_unsupported_format_is_value_error(self) -> None:
        """UnsupportedFormatError also inherits from ValueError."""
        assert issubclass(UnsupportedFormatError, ValueError)


class TestSchemaError:
    """Tests for SchemaError."""

    def test_names_field(self) -> None:
        """Store and format the offending field."""
        exc = SchemaError("sops.version", "field is required")
        assert exc.field == "sops.version"
        assert exc.details == {"field": "sops.version", "reason": "field is required"}
        assert "sops.version" in str(exc)

    def test_parse_error_names_format(self) -> None:
        """DocumentParseError carries the file type."""
        exc = DocumentParseError("yaml", "bad indent")
        assert exc.file_type == "yaml"
        assert exc.field == "<root>"
        assert "yaml" in str(exc)


class TestFormatErrors:
    """Tests for format selection errors."""

    def test_missing_sops_section_message(self) -> None:
        """Message depends on the format."""
        assert str(MissingSopsSectionError("ini")) == "Missing sops section in .ini"
        assert str(MissingSopsSectionError("env")) == "Missing sops data in .env"

    def test_unsupported_format_lists_extensions(self) -> None:
        """Message lists every supported extension."""
        exc = UnsupportedFormatError(".toml", (".env", ".ini", ".json", ".yaml"))
        assert exc.file_type == ".toml"
        assert exc.supported == (".env", ".ini", ".json", ".yaml")
        assert ".env, .ini, .json, .yaml" in str(exc)

    def test_unsupported_format_without_extension(self) -> None:
        """An empty extension is reported explicitly."""
        assert "missing extension" in str(UnsupportedFormatError("", (".json",)))


class TestValueErrors:
    """Tests for per-value errors."""

    def test_path_in_message(self) -> None:
        """The tree path is appended when known."""
        exc = DecryptionFailedError(path="db.password")
        assert exc.path == "db.password"
        assert str(exc).endswith("(at db.password)")

    def test_no_path(self) -> None:
        """Without a path the message is bare."""
        assert str(InvalidEncFormatError()) == "Invalid ENC format"

    def test_coercion_error_names_type(self) -> None:
        """TypeCoercionError records the declared type."""
        exc = TypeCoercionError("int", path="port")
        assert exc.declared_type == "int"
        assert exc.details["declared_type"] == "int"

    def test_unknown_type_message(self) -> None:
        """UnknownScalarTypeError names the unsupported type."""
        assert "Unknown type decimal" in str(UnknownScalarTypeError("decimal"))


class TestLookupErrors:
    """Tests for recipient, identity and path errors."""

    def test_recipient_not_found(self) -> None:
        """The derived public key is kept for diagnostics."""
        exc = RecipientNotFoundError("age1abc")
        assert exc.public_key == "age1abc"
        assert str(exc) == "no matching recipient found in age config"

    def test_identity_not_found(self) -> None:
        """Searched locations are listed."""
        exc = IdentityNotFoundError(["SOPS_AGE_KEY", "/tmp/keys.txt"])
        assert exc.searched == ("SOPS_AGE_KEY", "/tmp/keys.txt")
        assert "/tmp/keys.txt" in str(exc)

    def test_path_not_string(self) -> None:
        """The requested path is kept."""
        exc = PathNotStringError("a.b")
        assert exc.path == "a.b"
        assert str(exc) == "Unable to get sops value at a.b"
