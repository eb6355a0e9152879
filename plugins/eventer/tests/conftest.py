"""
tests/conftest.py

Shared fixtures for eventer plugin tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from common.models import EventStatus, ScheduledEvent
from tests.fixtures.fake_messenger import FakeMessenger


NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)

OFFSETS = [timedelta(hours=24), timedelta(hours=2), timedelta(minutes=15)]


class FakeClock:
    """Settable clock returning aware UTC datetimes."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def offsets():
    return list(OFFSETS)


@pytest.fixture
def messenger():
    return FakeMessenger(user_id="bot")


@pytest.fixture
def make_event():
    """Factory for scheduled events starting relative to NOW."""
    def _make(event_id="e1", name="Boss fight", starts_in=timedelta(days=2),
              status=EventStatus.SCHEDULED, guild_id="42", start_time=None):
        return ScheduledEvent(
            event_id=event_id,
            guild_id=guild_id,
            name=name,
            start_time=start_time if start_time is not None else NOW + starts_in,
            status=status,
        )
    return _make
