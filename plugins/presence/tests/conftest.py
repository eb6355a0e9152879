"""
tests/conftest.py

Shared fixtures for presence plugin tests.
"""

import pytest

from plugins.presence.snapshot import ServerSnapshot
from tests.fixtures.fake_messenger import FakeMessenger


@pytest.fixture
def messenger():
    return FakeMessenger(user_id="bot")


@pytest.fixture
def gen():
    """Build a generation from {server: [players]}; None marks unreachable."""
    def _gen(servers):
        return {
            name: ServerSnapshot(name, list(players or []), reachable=players is not None)
            for name, players in servers.items()
        }
    return _gen
