"""age collaborator: public key derivation and data key unwrapping.

SOPS stores the data key wrapped for each recipient as an armored age
file. ``AgeBackend`` is the seam the recipient resolver talks to;
``PyrageBackend`` implements it with the ``pyrage`` bindings.

Examples:
    >>> backend = PyrageBackend()  # doctest: +SKIP
    >>> backend.derive_public_key("AGE-SECRET-KEY-1...")  # doctest: +SKIP
    'age1...'
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Protocol, runtime_checkable

import pyrage

from sopsreader.exceptions import KeyUnwrapError

log = logging.getLogger(__name__)

#: Armored age block, tolerant of CRLF line endings.
ARMOR_PATTERN = re.compile(
    r"-----BEGIN AGE ENCRYPTED FILE-----\r?\n([\s\S]+?)\r?\n-----END AGE ENCRYPTED FILE-----",
)


@runtime_checkable
class AgeBackend(Protocol):
    """Interface for the age operations the resolver needs."""

    def derive_public_key(self, identity: str) -> str:
        """Return the ``age1...`` recipient string for an identity."""
        ...

    def unwrap_key(self, armored: str, identity: str) -> bytes:
        """Decrypt an armored age file with an identity."""
        ...


def extract_armored_body(armored: str) -> bytes:
    """Return the binary age payload inside an armored block.

    Raises:
        KeyUnwrapError: If no armored block is found or the body is not base64.
    """
    match = ARMOR_PATTERN.search(armored)
    if not match or not match.group(1).strip():
        raise KeyUnwrapError("unable to extract age encryption key")
    try:
        return base64.b64decode("".join(match.group(1).split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise KeyUnwrapError("age armored body is not valid base64") from exc


class PyrageBackend:
    """age operations backed by ``pyrage`` (X25519 identities)."""

    @staticmethod
    def _identity(identity: str) -> pyrage.x25519.Identity:
        try:
            return pyrage.x25519.Identity.from_str(identity.strip())
        except (pyrage.IdentityError, ValueError) as exc:
            raise KeyUnwrapError("invalid age identity") from exc

    def derive_public_key(self, identity: str) -> str:
        """Return the ``age1...`` recipient string for an identity.

        Raises:
            KeyUnwrapError: If the identity is malformed.
        """
        return str(self._identity(identity).to_public())

    def unwrap_key(self, armored: str, identity: str) -> bytes:
        """Decrypt an armored age file with an identity.

        Raises:
            KeyUnwrapError: If the armor is malformed or the identity cannot
                decrypt the payload.
        """
        payload = extract_armored_body(armored)
        try:
            plaintext = pyrage.decrypt(payload, [self._identity(identity)])
        except pyrage.DecryptError as exc:
            raise KeyUnwrapError(f"age decryption failed: {exc}") from exc
        log.debug("Unwrapped %d-byte data key", len(plaintext))
        return bytes(plaintext)


__all__ = [
    "ARMOR_PATTERN",
    "AgeBackend",
    "PyrageBackend",
    "extract_armored_body",
]
