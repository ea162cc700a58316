"""Shared pytest fixtures for the sopsreader test suite."""

from __future__ import annotations

# Disable Rich colors and force wide terminal BEFORE any imports
# Rich checks these at import time
import os

os.environ["NO_COLOR"] = "1"
os.environ["TERM"] = "dumb"
os.environ["FORCE_COLOR"] = "0"
os.environ["COLUMNS"] = "200"  # Prevent text wrapping in CLI output

from collections.abc import Callable
from typing import Any

import pyrage
import pytest
from sops_factory import LASTMODIFIED, SOPS_VERSION, STRANGER_RECIPIENT, armor, seal

# pylint: disable=redefined-outer-name


@pytest.fixture(scope="session")
def age_identity() -> pyrage.x25519.Identity:
    """Return an age identity generated for the test session."""
    return pyrage.x25519.Identity.generate()


@pytest.fixture(scope="session")
def identity(age_identity: pyrage.x25519.Identity) -> str:
    """Return the ``AGE-SECRET-KEY-1...`` string of the session identity."""
    return str(age_identity)


@pytest.fixture(scope="session")
def public_key(age_identity: pyrage.x25519.Identity) -> str:
    """Return the ``age1...`` recipient of the session identity."""
    return str(age_identity.to_public())


@pytest.fixture(scope="session")
def other_identity() -> str:
    """Return an identity that is never a recipient."""
    return str(pyrage.x25519.Identity.generate())


@pytest.fixture(scope="session")
def data_key() -> bytes:
    """Return the 32-byte data key shared by all fixture documents."""
    return os.urandom(32)


@pytest.fixture(scope="session")
def wrapped_key(age_identity: pyrage.x25519.Identity, data_key: bytes) -> str:
    """Return the data key wrapped for the session identity, armored."""
    return armor(pyrage.encrypt(data_key, [age_identity.to_public()]))


@pytest.fixture
def sops_metadata(public_key: str, wrapped_key: str) -> dict[str, Any]:
    """Return a ``sops`` sub-record listing the session identity second."""
    return {
        "age": [
            {"recipient": STRANGER_RECIPIENT, "enc": wrapped_key},
            {"recipient": public_key, "enc": wrapped_key},
        ],
        "lastmodified": LASTMODIFIED,
        "version": SOPS_VERSION,
    }


@pytest.fixture
def seal_value(data_key: bytes) -> Callable[..., str]:
    """Return a helper sealing values with the session data key."""

    def _seal(value: Any, declared_type: str = "str", aad: bytes = b"") -> str:
        return seal(data_key, value, declared_type, aad)

    return _seal


@pytest.fixture
def encrypted_tree(seal_value: Callable[..., str]) -> dict[str, Any]:
    """Return a nested data tree mixing encrypted and plain leaves."""
    return {
        "db": {
            "password": seal_value("hunter2"),
            "port": seal_value(5432, "int"),
            "host": "localhost",
        },
        "ratio": seal_value(3.14, "float"),
        "enabled": seal_value(True, "bool"),
        "hosts": [seal_value("a.example"), "b.example", {"token": seal_value("t0k3n")}],
        "raw": seal_value(b"\x00\x01binary", "bytes"),
        "empty": seal_value(""),
        "count": 3,
        "nothing": None,
    }


@pytest.fixture
def plaintext_tree() -> dict[str, Any]:
    """Return the expected decryption of ``encrypted_tree``."""
    return {
        "db": {"password": "hunter2", "port": 5432, "host": "localhost"},
        "ratio": 3.14,
        "enabled": True,
        "hosts": ["a.example", "b.example", {"token": "t0k3n"}],
        "raw": b"\x00\x01binary",
        "empty": "",
        "count": 3,
        "nothing": None,
    }


@pytest.fixture
def sops_document_dict(encrypted_tree: dict[str, Any], sops_metadata: dict[str, Any]) -> dict[str, Any]:
    """Return a full yaml/json-shaped document mapping."""
    return {**encrypted_tree, "sops": sops_metadata}
