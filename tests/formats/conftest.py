"""Fixtures for the format adapter tests."""

from __future__ import annotations

from typing import Any

import pytest
from sops_factory import LASTMODIFIED, SAMPLE_ARMOR, SOPS_VERSION


@pytest.fixture
def flat_sops() -> dict[str, Any]:
    """Return sops metadata with three recipients."""
    return {
        "age": [{"enc": f"{SAMPLE_ARMOR}#{index}", "recipient": f"age1recipient{index}"} for index in range(3)],
        "lastmodified": LASTMODIFIED,
        "version": SOPS_VERSION,
    }
