"""Locate the age identity used for decryption.

Lookup order follows the ``sops`` binary:

1. An explicit identity string passed by the caller
2. An identity file passed by the caller
3. ``SOPS_AGE_KEY`` environment variable (one or more identities)
4. The file named by ``SOPS_AGE_KEY_FILE``
5. ``$XDG_CONFIG_HOME/sops/age/keys.txt`` (``~/.config`` when unset)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from sopsreader.exceptions import IdentityNotFoundError

log = logging.getLogger(__name__)

#: Environment variable holding identities inline.
AGE_KEY_ENV = "SOPS_AGE_KEY"

#: Environment variable naming an identity file.
AGE_KEY_FILE_ENV = "SOPS_AGE_KEY_FILE"

#: Prefix of an age X25519 secret key.
IDENTITY_PREFIX = "AGE-SECRET-KEY-"


def parse_identities(text: str) -> list[str]:
    """Extract age secret keys from identity file content.

    Blank lines and ``#`` comments (as written by ``age-keygen``) are skipped.

    Examples:
        >>> parse_identities("# created: 2024\\n# public key: age1x\\nAGE-SECRET-KEY-1ABC\\n")
        ['AGE-SECRET-KEY-1ABC']
    """
    identities = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith(IDENTITY_PREFIX):
            identities.append(line)
    return identities


def default_key_file(env: Mapping[str, str] | None = None) -> Path:
    """Return the default identity file location."""
    env = os.environ if env is None else env
    config_home = env.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "sops" / "age" / "keys.txt"


def _read_identity_file(path: Path) -> list[str]:
    if not path.is_file():
        return []
    identities = parse_identities(path.read_text(encoding="utf-8"))
    if identities:
        log.debug("Using identities from %s", path)
    return identities


def resolve_identities(
    explicit: str | None = None,
    *,
    key_file: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> list[str]:
    """Return candidate identities, first match of the lookup order.

    Args:
        explicit: Identity string (or identity file content) from the caller.
        key_file: Identity file passed by the caller; checked before the
            environment.
        env: Environment mapping, ``os.environ`` by default.

    Returns:
        Non-empty list of ``AGE-SECRET-KEY-`` strings.

    Raises:
        IdentityNotFoundError: If no source yields an identity.
    """
    env = os.environ if env is None else env
    searched: list[str] = []

    if explicit:
        identities = parse_identities(explicit)
        if identities:
            return identities
        searched.append("explicit identity")

    if key_file:
        path = Path(key_file)
        searched.append(str(path))
        identities = _read_identity_file(path)
        if identities:
            return identities

    inline = env.get(AGE_KEY_ENV)
    if inline:
        identities = parse_identities(inline)
        if identities:
            log.debug("Using identities from %s", AGE_KEY_ENV)
            return identities
    searched.append(AGE_KEY_ENV)

    candidates: list[Path] = []
    if env.get(AGE_KEY_FILE_ENV):
        candidates.append(Path(env[AGE_KEY_FILE_ENV]))
    candidates.append(default_key_file(env))

    for path in candidates:
        searched.append(str(path))
        identities = _read_identity_file(path)
        if identities:
            return identities

    raise IdentityNotFoundError(searched)


__all__ = [
    "AGE_KEY_ENV",
    "AGE_KEY_FILE_ENV",
    "IDENTITY_PREFIX",
    "default_key_file",
    "parse_identities",
    "resolve_identities",
]
