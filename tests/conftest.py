"""
Global pytest configuration and fixtures for DodoBot tests

Provides:
- Mock NATS client / EventBus
- In-memory messaging adapter
- Test configuration
"""

import pytest

from common.config import BotConfig, DiscordConfig, EventerConfig, PresenceConfig
from core.event_bus import EventBus
from tests.fixtures.fake_messenger import FakeMessenger
from tests.fixtures.mock_nats import create_mock_nats


# ============================================================================
# Messaging
# ============================================================================

@pytest.fixture
def fake_messenger():
    """Connected in-memory messaging adapter"""
    return FakeMessenger(user_id="bot")


# ============================================================================
# Event Bus
# ============================================================================

@pytest.fixture
def mock_nats():
    """Connected mock NATS client"""
    return create_mock_nats()


@pytest.fixture
def event_bus(mock_nats):
    """EventBus wired to the mock NATS client"""
    bus = EventBus(servers=["nats://localhost:4222"])
    bus._nc = mock_nats
    return bus


# ============================================================================
# Test Configuration
# ============================================================================

@pytest.fixture
def test_config(tmp_path):
    """Valid bot configuration with the eventer enabled"""
    return BotConfig(
        discord=DiscordConfig(
            bot_token="token",
            channel_id_status="100",
            channel_id_join_leave="200",
            channel_id_events="300",
            cache_path=str(tmp_path / "cache.txt"),
        ),
        eventer=EventerConfig(enabled=True, tick_seconds=0.01),
        presence=PresenceConfig(),
    )
