"""
Chaos testing configuration and shared fixtures.

Provides seeded randomness and a recording reporter for Jim scenarios.
"""

import random

import pytest

from mailhog_server.monkey.jim import Jim


@pytest.fixture(autouse=True)
def seed_random():
    """Seed random for reproducible chaos scenarios."""
    random.seed(42)
    yield
    random.seed()  # Reset after test


@pytest.fixture
def reports() -> list[str]:
    """Messages reported by Jim, formatted."""
    return []


@pytest.fixture
def make_jim(reports: list[str]):
    """Factory for a configured Jim reporting into `reports`."""

    def _make(**tunables) -> Jim:
        jim = Jim(**tunables)
        jim.configure(lambda message, *args: reports.append(message % args))
        return jim

    return _make
