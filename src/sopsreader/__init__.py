"""Read-only decryption of SOPS documents encrypted for age recipients.

A SOPS document keeps its structure in clear text while most leaf values
are replaced by ``ENC[AES256_GCM,...]`` envelopes. The single data key is
wrapped once per age recipient under the ``sops`` metadata key.

Examples:
    Decrypt a whole document:

    >>> from sopsreader import load_document, decrypt_document
    >>> doc = load_document("secrets.enc.yaml")  # doctest: +SKIP
    >>> decrypt_document(doc, "AGE-SECRET-KEY-1...")  # doctest: +SKIP
    {'db': {'password': 'hunter2'}}

    Decrypt one value:

    >>> decrypt_path(doc, "AGE-SECRET-KEY-1...", "db.password")  # doctest: +SKIP
    'hunter2'
"""

from sopsreader.age import AgeBackend, PyrageBackend
from sopsreader.config import resolve_identities
from sopsreader.decrypt import (
    decrypt_document,
    decrypt_document_async,
    decrypt_path,
    decrypt_path_async,
    decrypt_value,
    decrypt_with_key,
)
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
from sopsreader.formats import detect_format, load_document, parse_text
from sopsreader.models import AgeRecipient, ScalarType, SopsDocument, SopsMetadata
from sopsreader.recipients import resolve_data_key

__version__ = "0.1.0"

__all__ = [
    "AgeBackend",
    "AgeRecipient",
    "DecryptionFailedError",
    "DocumentParseError",
    "IdentityNotFoundError",
    "InvalidEncFormatError",
    "KeyUnwrapError",
    "MissingSopsSectionError",
    "PathNotStringError",
    "PyrageBackend",
    "RecipientNotFoundError",
    "ScalarType",
    "SchemaError",
    "SopsDocument",
    "SopsMetadata",
    "SopsReaderError",
    "TypeCoercionError",
    "UnknownScalarTypeError",
    "UnsupportedFormatError",
    "ValueDecryptionError",
    "__version__",
    "decrypt_document",
    "decrypt_document_async",
    "decrypt_path",
    "decrypt_path_async",
    "decrypt_value",
    "decrypt_with_key",
    "detect_format",
    "load_document",
    "parse_text",
    "resolve_data_key",
    "resolve_identities",
]
