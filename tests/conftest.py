"""Shared pytest fixtures for the Turnstile test suite."""

from __future__ import annotations

import pytest

from tests.fakes import FakeClock


@pytest.fixture
def clock() -> FakeClock:
    """Provide a deterministic clock starting at zero."""

    return FakeClock()
