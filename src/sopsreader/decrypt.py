"""Decryption engine for SOPS documents.

Walks the data tree, recognizes ``ENC[AES256_GCM,...]`` leaves, decrypts
them with the data key and restores their original scalar type.

The walk never mutates the parsed document: it builds a new tree of the
same shape, so one ``SopsDocument`` can be decrypted concurrently.

Note:
    Every value is authenticated with the same caller-supplied AAD
    (empty by default). Upstream SOPS binds each value to its tree path,
    so documents written by the ``sops`` binary itself need path-derived
    AAD, which this engine does not compute. The document MAC is read but
    not verified.

Examples:
    >>> doc = load_document("secrets.yaml")  # doctest: +SKIP
    >>> decrypt_document(doc, identity)  # doctest: +SKIP
    {'db': {'password': 'hunter2', 'port': 5432}}
    >>> decrypt_path(doc, identity, "db.port")  # doctest: +SKIP
    5432
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import copy
import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sopsreader.aead import aead_decrypt
from sopsreader.exceptions import (
    DecryptionFailedError,
    InvalidEncFormatError,
    PathNotStringError,
    TypeCoercionError,
    UnknownScalarTypeError,
)
from sopsreader.logging import TRACE_LEVEL
from sopsreader.models import EncryptedLeaf, ScalarType
from sopsreader.recipients import resolve_data_key

if TYPE_CHECKING:
    from sopsreader.age import AgeBackend
    from sopsreader.models import SopsDocument

log = logging.getLogger(__name__)

Scalar = str | bytes | int | float | bool

#: Strings starting with this prefix are treated as encrypted leaves.
ENC_PREFIX = "ENC[AES256_GCM,data:"

#: Grammar of an encrypted leaf, anchored at the start of the string.
ENC_PATTERN = re.compile(r"^ENC\[AES256_GCM,data:([^,]*),iv:([^,]*),tag:([^,]*),type:([^\]]*)\]")

_PATH_TOKEN_PATTERN = re.compile(r"[^.\[\]]+|\[(\d+)\]")


# ============================================================================
# Single value
# ============================================================================


def parse_enc_value(value: str, *, path: str | None = None) -> EncryptedLeaf | None:
    """Split an ``ENC[...]`` string into its fields.

    Args:
        value: Candidate string.
        path: Location used in error messages.

    Returns:
        The parsed leaf, or None if ``value`` is not an encrypted leaf.

    Raises:
        InvalidEncFormatError: If iv or tag is empty. An empty data field is
            the ciphertext of an empty value.

    Examples:
        >>> parse_enc_value("ENC[AES256_GCM,data:Zm9v,iv:aXY=,tag:dGFn,type:str]")
        EncryptedLeaf(data='Zm9v', iv='aXY=', tag='dGFn', type='str')
        >>> parse_enc_value("plain") is None
        True
    """
    match = ENC_PATTERN.match(value)
    if not match:
        return None
    data, iv, tag, declared_type = match.groups()
    if not iv or not tag:
        raise InvalidEncFormatError(path=path)
    return EncryptedLeaf(data=data, iv=iv, tag=tag, type=declared_type)


def coerce_scalar(plaintext: bytes, declared_type: str, *, path: str | None = None) -> Scalar:
    """Convert decrypted bytes back to the type recorded in the envelope.

    Args:
        plaintext: Decrypted bytes.
        declared_type: The envelope ``type:`` field.
        path: Location used in error messages.

    Returns:
        ``bytes`` for bytes, otherwise the UTF-8 text parsed as the type.

    Raises:
        UnknownScalarTypeError: If ``declared_type`` is not supported.
        TypeCoercionError: If the plaintext does not parse.

    Examples:
        >>> coerce_scalar(b"42", "int")
        42
        >>> coerce_scalar(b"True", "bool")
        True
    """
    try:
        scalar_type = ScalarType(declared_type)
    except ValueError:
        raise UnknownScalarTypeError(declared_type, path=path) from None

    if scalar_type is ScalarType.BYTES:
        return plaintext

    try:
        text = plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TypeCoercionError(declared_type, path=path) from exc

    if scalar_type is ScalarType.STR:
        return text
    if scalar_type is ScalarType.BOOL:
        return text.lower() == "true"
    # int() and float() accept "1_000"; SOPS numbers never contain "_"
    if "_" in text:
        raise TypeCoercionError(declared_type, path=path)
    try:
        if scalar_type is ScalarType.INT:
            return int(text.strip(), 10)
        return float(text)
    except ValueError as exc:
        raise TypeCoercionError(declared_type, path=path) from exc


def _b64decode(value: str, *, path: str | None) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncFormatError(path=path) from exc


def decrypt_value(
    value: str,
    data_key: bytes,
    *,
    aad: str = "",
    path: str | None = None,
) -> Scalar:
    """Decrypt one string if it is an encrypted leaf.

    Args:
        value: Leaf string.
        data_key: 32-byte data key.
        aad: Additional authenticated data, empty by default.
        path: Location used in error messages.

    Returns:
        The coerced plaintext, or ``value`` unchanged if it is not an
        encrypted leaf.

    Raises:
        InvalidEncFormatError: If the envelope is malformed.
        DecryptionFailedError: If authentication fails.
        TypeCoercionError: If the plaintext does not match its type.
        UnknownScalarTypeError: If the type is not supported.
    """
    leaf = parse_enc_value(value, path=path)
    if leaf is None:
        return value

    if log.isEnabledFor(TRACE_LEVEL):
        log.log(TRACE_LEVEL, "Decrypting %s value at %s", leaf.type, path or "<value>")

    ciphertext = _b64decode(leaf.data, path=path)
    iv = _b64decode(leaf.iv, path=path)
    tag = _b64decode(leaf.tag, path=path)
    try:
        plaintext = aead_decrypt(data_key, iv, ciphertext, tag, aad.encode("utf-8"))
    except DecryptionFailedError as exc:
        raise DecryptionFailedError(path=path) from exc
    return coerce_scalar(plaintext, leaf.type, path=path)


# ============================================================================
# Tree walk
# ============================================================================


def _join(parent: str, key: Any) -> str:
    if isinstance(key, int) and not isinstance(key, bool):
        return f"{parent}[{key}]"
    return f"{parent}.{key}" if parent else str(key)


def decrypt_tree(node: Any, data_key: bytes, *, aad: str = "", path: str = "") -> Any:
    """Return a copy of ``node`` with every encrypted leaf decrypted.

    Mappings and sequences are rebuilt in their original order. Strings
    that are not encrypted leaves and non-string scalars are kept as-is.

    Raises:
        ValueDecryptionError: On the first leaf that fails; no partial
            tree is returned.
    """
    if isinstance(node, str):
        if node.startswith(ENC_PREFIX):
            return decrypt_value(node, data_key, aad=aad, path=path or None)
        return node
    if isinstance(node, Mapping):
        return {key: decrypt_tree(value, data_key, aad=aad, path=_join(path, key)) for key, value in node.items()}
    if isinstance(node, list | tuple):
        return [decrypt_tree(value, data_key, aad=aad, path=_join(path, index)) for index, value in enumerate(node)]
    return copy.deepcopy(node)


def _split_path(path: str) -> list[str | int]:
    tokens: list[str | int] = []
    for match in _PATH_TOKEN_PATTERN.finditer(path):
        index = match.group(1)
        tokens.append(int(index) if index is not None else match.group(0))
    return tokens


def get_path(tree: Any, path: str) -> Any:
    """Fetch the value at a ``a.b[0].c`` style path, or None if absent.

    Numeric segments index sequences; on mappings they match either the
    string or the integer key.

    Examples:
        >>> get_path({"a": {"b": [{"c": 1}]}}, "a.b[0].c")
        1
        >>> get_path({"a": {}}, "a.missing") is None
        True
    """
    current = tree
    for token in _split_path(path):
        if isinstance(current, Mapping):
            if token in current:
                current = current[token]
            elif isinstance(token, int) and str(token) in current:
                current = current[str(token)]
            elif isinstance(token, str) and token.isdigit() and int(token) in current:
                current = current[int(token)]
            else:
                return None
        elif isinstance(current, list | tuple):
            try:
                current = current[int(token)]
            except (ValueError, IndexError):
                return None
        else:
            return None
    return current


def decrypt_with_key(
    document: SopsDocument,
    data_key: bytes,
    path: str | None = None,
    *,
    aad: str = "",
) -> Any:
    """Decrypt a document, or one value of it, with an already-unwrapped key.

    Args:
        document: Parsed SOPS document.
        data_key: 32-byte data key.
        path: Optional path to a single value. Paths starting with ``sops``
            address the metadata (e.g. ``sops.mac``).
        aad: Additional authenticated data used for every value.

    Returns:
        The plaintext data tree, or the single coerced value.

    Raises:
        PathNotStringError: If ``path`` does not resolve to a string.
        ValueDecryptionError: If any value fails to decrypt.
    """
    if path is not None:
        tokens = _split_path(path)
        if not tokens:
            raise PathNotStringError(path)
        if tokens[0] == "sops":
            value = get_path(document.metadata.to_dict(), path[len("sops") :].lstrip("."))
        else:
            value = get_path(document.data, path)
        if not isinstance(value, str):
            raise PathNotStringError(path)
        return decrypt_value(value, data_key, aad=aad, path=path)

    plaintext = decrypt_tree(document.data, data_key, aad=aad)
    if document.metadata.mac:
        log.debug("Document MAC present but not verified")
    return plaintext


# ============================================================================
# Public operations
# ============================================================================


def decrypt_document(
    document: SopsDocument,
    identity: str,
    *,
    backend: AgeBackend | None = None,
    aad: str = "",
) -> dict[str, Any]:
    """Decrypt every encrypted leaf of a document.

    Args:
        document: Parsed SOPS document; left untouched.
        identity: age secret key of one of the recipients.
        backend: age implementation, ``PyrageBackend`` by default.
        aad: Additional authenticated data used for every value.

    Returns:
        A new plaintext tree without the ``sops`` metadata.

    Raises:
        RecipientNotFoundError: If the identity is not a recipient.
        KeyUnwrapError: If the data key cannot be unwrapped.
        ValueDecryptionError: If any value fails to decrypt.
    """
    data_key = resolve_data_key(document, identity, backend=backend)
    result = decrypt_with_key(document, data_key, aad=aad)
    log.info("Decrypted document with %d top-level key(s)", len(result))
    return result


def decrypt_path(
    document: SopsDocument,
    identity: str,
    path: str,
    *,
    backend: AgeBackend | None = None,
    aad: str = "",
) -> Scalar:
    """Decrypt the single value at ``path``.

    Raises:
        RecipientNotFoundError: If the identity is not a recipient.
        KeyUnwrapError: If the data key cannot be unwrapped.
        PathNotStringError: If ``path`` does not resolve to a string.
        ValueDecryptionError: If the value fails to decrypt.
    """
    data_key = resolve_data_key(document, identity, backend=backend)
    value = decrypt_with_key(document, data_key, path, aad=aad)
    log.info("Decrypted value at %s", path)
    return value  # type: ignore[no-any-return]


async def decrypt_document_async(
    document: SopsDocument,
    identity: str,
    *,
    backend: AgeBackend | None = None,
    aad: str = "",
) -> dict[str, Any]:
    """Run ``decrypt_document`` in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        lambda: decrypt_document(document, identity, backend=backend, aad=aad),
    )


async def decrypt_path_async(
    document: SopsDocument,
    identity: str,
    path: str,
    *,
    backend: AgeBackend | None = None,
    aad: str = "",
) -> Scalar:
    """Run ``decrypt_path`` in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        lambda: decrypt_path(document, identity, path, backend=backend, aad=aad),
    )


__all__ = [
    "ENC_PATTERN",
    "ENC_PREFIX",
    "Scalar",
    "coerce_scalar",
    "decrypt_document",
    "decrypt_document_async",
    "decrypt_path",
    "decrypt_path_async",
    "decrypt_tree",
    "decrypt_value",
    "decrypt_with_key",
    "get_path",
    "parse_enc_value",
]
