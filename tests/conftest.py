"""Shared fixtures for the ABHash test-suite."""
from __future__ import annotations

import pytest

from abhash.digest.secret import set_secret


@pytest.fixture(autouse=True)
def _reset_default_secret():
    """Every test starts and ends with an empty process-wide secret."""
    set_secret(None)
    yield
    set_secret(None)
