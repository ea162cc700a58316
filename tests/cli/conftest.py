"""Fixtures for the command line tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

# pylint: disable=redefined-outer-name


@pytest.fixture(autouse=True)
def _isolated_identities(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the user's real age keys out of the lookup."""
    monkeypatch.delenv("SOPS_AGE_KEY", raising=False)
    monkeypatch.delenv("SOPS_AGE_KEY_FILE", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


@pytest.fixture
def secrets_file(tmp_path: Path, sops_document_dict: dict[str, Any]) -> Path:
    """Write the fixture document as yaml."""
    path = tmp_path / "secrets.yaml"
    path.write_text(yaml.safe_dump(sops_document_dict, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def printable_tree(plaintext_tree: dict[str, Any]) -> dict[str, Any]:
    """Return the plaintext tree as the CLI prints it."""
    return {**plaintext_tree, "raw": "\x00\x01binary"}
