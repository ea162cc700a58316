"""AES-256-GCM decryption of a single SOPS value."""

from __future__ import annotations

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from sopsreader.exceptions import DecryptionFailedError

#: Data key length for AES-256.
DATA_KEY_SIZE = 32


def aead_decrypt(key: bytes, iv: bytes, ciphertext: bytes, tag: bytes, aad: bytes = b"") -> bytes:
    """Authenticate and decrypt one value.

    SOPS uses 32-byte nonces, so ``iv`` is passed through as-is.

    Args:
        key: 32-byte data key.
        iv: Nonce from the envelope.
        ciphertext: Encrypted bytes without the tag.
        tag: 16-byte GCM tag.
        aad: Additional authenticated data.

    Returns:
        Plaintext bytes.

    Raises:
        DecryptionFailedError: On tag mismatch or an unusable nonce.
    """
    try:
        return AESGCM(key).decrypt(iv, ciphertext + tag, aad)
    except (InvalidTag, ValueError) as exc:
        raise DecryptionFailedError() from exc


__all__ = ["DATA_KEY_SIZE", "aead_decrypt"]
