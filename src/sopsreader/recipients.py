"""Select the recipient entry for an identity and unwrap the data key."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sopsreader.aead import DATA_KEY_SIZE
from sopsreader.age import AgeBackend, PyrageBackend
from sopsreader.exceptions import KeyUnwrapError, RecipientNotFoundError

if TYPE_CHECKING:
    from sopsreader.models import AgeRecipient, SopsDocument

log = logging.getLogger(__name__)


def find_recipient(document: SopsDocument, public_key: str) -> AgeRecipient:
    """Return the first recipient whose public key equals ``public_key``.

    Comparison is exact: no case folding, no whitespace trimming.

    Raises:
        RecipientNotFoundError: If no entry matches.
    """
    for entry in document.metadata.age:
        if entry.recipient == public_key:
            return entry
    raise RecipientNotFoundError(public_key)


@contextmanager
def _backend_errors(action: str) -> Iterator[None]:
    """Turn any non-KeyUnwrapError raised by the age backend into KeyUnwrapError."""
    try:
        yield
    except KeyUnwrapError:
        raise
    except Exception as exc:
        raise KeyUnwrapError(f"age {action} failed ({type(exc).__name__})") from exc


def resolve_data_key(
    document: SopsDocument,
    identity: str,
    *,
    backend: AgeBackend | None = None,
) -> bytes:
    """Recover the 32-byte data key wrapped for ``identity``.

    Args:
        document: Parsed SOPS document.
        identity: age secret key (``AGE-SECRET-KEY-1...``).
        backend: age implementation, ``PyrageBackend`` by default.

    Returns:
        The raw data key.

    Raises:
        RecipientNotFoundError: If the identity is not a recipient.
        KeyUnwrapError: If the backend fails, or unwrapping yields a key of
            the wrong size.
    """
    backend = backend or PyrageBackend()
    with _backend_errors("public key derivation"):
        public_key = backend.derive_public_key(identity)
    entry = find_recipient(document, public_key)
    log.debug("Using age recipient %s", public_key)

    with _backend_errors("key unwrap"):
        key = backend.unwrap_key(entry.enc, identity)

    if len(key) != DATA_KEY_SIZE:
        raise KeyUnwrapError(f"data key must be {DATA_KEY_SIZE} bytes, got {len(key)}")
    return key


__all__ = ["find_recipient", "resolve_data_key"]
