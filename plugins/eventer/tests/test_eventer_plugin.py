"""
tests/test_eventer_plugin.py

Tests for EventerPlugin wiring.
"""

from datetime import timedelta

import pytest
import pytz

from common.config import EventerConfig
from common.models import EventCreated, EventStatus, EventUpdated
from lib.connection.adapter import SCHEDULED_EVENT
from plugins.eventer.plugin import EventerPlugin


@pytest.fixture
def config(offsets):
    return EventerConfig(
        enabled=True,
        reminder_offsets=offsets,
        tick_seconds=0.01,
        timezone="Europe/Berlin",
        language="de",
    )


@pytest.fixture
def plugin(messenger, config, clock):
    return EventerPlugin(messenger, "300", config, clock=clock)


class TestPluginSetup:

    def test_metadata(self, plugin):
        assert plugin.NAMESPACE == "eventer"
        assert plugin.VERSION == "1.0.0"

    def test_timezone_from_config(self, plugin):
        assert plugin.display_tz.zone == "Europe/Berlin"

    def test_explicit_timezone(self, messenger, config, clock):
        plugin = EventerPlugin(messenger, "300", config, display_tz=pytz.utc, clock=clock)
        assert plugin.display_tz is pytz.utc

    def test_store_is_shared(self, plugin):
        """Sync and scheduler work on the same store instance."""
        assert plugin.sync.store is plugin.store
        assert plugin.scheduler.store is plugin.store


class TestPluginLifecycle:

    @pytest.mark.asyncio
    async def test_initialize_reconciles_existing_events(self, plugin, messenger, make_event,
                                                         offsets):
        messenger.scheduled_events = [
            make_event(event_id="a"),
            make_event(event_id="b", status=EventStatus.COMPLETED),
        ]

        await plugin.initialize()
        try:
            assert plugin.scheduler.running
            assert {r.event_id for r in plugin.store.snapshot()} == {"a"}
            assert plugin.store.pending_count == len(offsets) + 1
        finally:
            await plugin.shutdown()

        assert not plugin.scheduler.running

    @pytest.mark.asyncio
    async def test_list_failure_still_starts(self, plugin, messenger):
        messenger.fail_list = True

        await plugin.initialize()
        try:
            assert plugin.scheduler.running
            assert plugin.store.pending_count == 0
        finally:
            await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_notifications_reach_sync(self, plugin, messenger, make_event, offsets):
        """Adapter dispatches land in the plugin's store."""
        await plugin.initialize()
        try:
            await messenger._dispatch(SCHEDULED_EVENT, EventCreated(make_event()))
            assert plugin.store.pending_count == len(offsets) + 1
            assert len(messenger.sent) == 1

            moved = make_event(starts_in=timedelta(days=5))
            await messenger._dispatch(SCHEDULED_EVENT, EventUpdated(moved))
            assert all(r.start_time == moved.start_time for r in plugin.store.snapshot())
        finally:
            await plugin.shutdown()

    @pytest.mark.asyncio
    async def test_shutdown_unregisters(self, plugin, messenger, make_event):
        await plugin.initialize()
        await plugin.shutdown()

        await messenger._dispatch(SCHEDULED_EVENT, EventCreated(make_event()))

        assert plugin.store.pending_count == 0
        assert messenger.sent == []

    @pytest.mark.asyncio
    async def test_creation_during_startup_not_duplicated(self, plugin, messenger, make_event,
                                                          offsets):
        """An event created while existing events are listed is queued once."""
        event = make_event(event_id="e1")

        async def list_with_concurrent_create():
            await messenger._dispatch(SCHEDULED_EVENT, EventCreated(event))
            return [event]

        messenger.list_scheduled_events = list_with_concurrent_create

        await plugin.initialize()
        try:
            keys = [(r.event_id, r.remind_at) for r in plugin.store.snapshot()]
            assert len(keys) == len(set(keys)) == len(offsets) + 1
        finally:
            await plugin.shutdown()
