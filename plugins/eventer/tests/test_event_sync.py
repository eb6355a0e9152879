"""
tests/test_event_sync.py

Unit tests for EventLifecycleSync.

Tests cover:
- Creation: announcement plus reminder set
- Reschedule: purge and re-derive
- Status changes: log only, store untouched
- Malformed notifications
- Startup reconciliation
"""

from datetime import timedelta

import pytest

from common.models import EventCreated, EventStatus, EventUpdated
from plugins.eventer.duration import Language
from plugins.eventer.store import ReminderStore
from plugins.eventer.sync import EventLifecycleSync


@pytest.fixture
def store():
    return ReminderStore()


@pytest.fixture
def sync(store, offsets, messenger, clock):
    return EventLifecycleSync(
        store,
        offsets,
        messenger=messenger,
        channel="300",
        language=Language.GERMAN,
        clock=clock,
    )


# =============================================================================
# Creation
# =============================================================================

class TestCreated:
    """EventCreated notifications."""

    @pytest.mark.asyncio
    async def test_announces_once_and_queues(self, sync, store, messenger, make_event, offsets):
        """Creation posts one announcement and queues every reminder."""
        await sync.handle(EventCreated(make_event()))

        texts = messenger.sent_texts("300")
        assert len(texts) == 1
        assert "Neues Event wurde erstellt" in texts[0]
        assert store.pending_count == len(offsets) + 1

    @pytest.mark.asyncio
    async def test_announce_failure_still_queues(self, sync, store, messenger, make_event, offsets):
        """A failed announcement does not block reminder scheduling."""
        messenger.fail_send = True

        await sync.handle(EventCreated(make_event()))

        assert store.pending_count == len(offsets) + 1

    @pytest.mark.asyncio
    async def test_without_messenger(self, store, offsets, clock, make_event):
        sync = EventLifecycleSync(store, offsets, clock=clock)

        await sync.handle(EventCreated(make_event()))

        assert store.pending_count == len(offsets) + 1

    @pytest.mark.asyncio
    async def test_near_event_gets_partial_set(self, sync, store, make_event):
        await sync.handle(EventCreated(make_event(starts_in=timedelta(minutes=30))))

        reminders = store.snapshot()
        assert len(reminders) == 2
        assert reminders[-1].is_immediate

    @pytest.mark.asyncio
    @pytest.mark.parametrize("changes", [
        {"event_id": ""},
        {"name": ""},
    ])
    async def test_malformed_is_ignored(self, sync, store, messenger, make_event, changes):
        """Events missing identity are dropped without announcement."""
        await sync.handle(EventCreated(make_event(**changes)))

        assert store.pending_count == 0
        assert messenger.sent == []

    @pytest.mark.asyncio
    async def test_missing_start_time_is_ignored(self, sync, store, make_event):
        event = make_event()
        event.start_time = None

        await sync.handle(EventCreated(event))

        assert store.pending_count == 0

    @pytest.mark.asyncio
    async def test_naive_start_time_is_ignored(self, sync, store, make_event):
        event = make_event()
        event.start_time = event.start_time.replace(tzinfo=None)

        await sync.handle(EventCreated(event))

        assert store.pending_count == 0

    @pytest.mark.asyncio
    async def test_unknown_notification(self, sync, store):
        """Anything but Created/Updated is ignored."""
        await sync.handle({"type": "created"})
        assert store.pending_count == 0


# =============================================================================
# Updates
# =============================================================================

class TestUpdated:
    """EventUpdated notifications."""

    @pytest.mark.asyncio
    async def test_reschedule_replaces_reminders(self, sync, store, make_event, offsets):
        """A new start time leaves only the freshly derived set."""
        await sync.handle(EventCreated(make_event(starts_in=timedelta(days=2))))
        moved = make_event(starts_in=timedelta(days=4))

        await sync.handle(EventUpdated(moved))

        reminders = store.snapshot()
        assert len(reminders) == len(offsets) + 1
        assert all(r.start_time == moved.start_time for r in reminders)

    @pytest.mark.asyncio
    async def test_repeated_updates_do_not_accumulate(self, sync, store, make_event, offsets):
        await sync.handle(EventCreated(make_event()))

        for _ in range(5):
            await sync.handle(EventUpdated(make_event()))

        assert store.pending_count == len(offsets) + 1

    @pytest.mark.asyncio
    async def test_update_does_not_announce(self, sync, messenger, make_event):
        await sync.handle(EventUpdated(make_event()))
        assert messenger.sent == []

    @pytest.mark.asyncio
    async def test_reschedule_keeps_other_events(self, sync, store, make_event, offsets):
        await sync.handle(EventCreated(make_event(event_id="a")))
        await sync.handle(EventCreated(make_event(event_id="b")))

        await sync.handle(EventUpdated(make_event(event_id="a", starts_in=timedelta(days=3))))

        ids = [r.event_id for r in store.snapshot()]
        assert ids.count("a") == len(offsets) + 1
        assert ids.count("b") == len(offsets) + 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [
        EventStatus.ACTIVE,
        EventStatus.COMPLETED,
        EventStatus.CANCELLED,
    ])
    async def test_status_change_leaves_store_alone(self, sync, store, make_event, status):
        """Non-scheduled updates neither purge nor requeue."""
        await sync.handle(EventCreated(make_event()))
        before = store.snapshot()

        await sync.handle(EventUpdated(make_event(status=status, starts_in=timedelta(days=9))))

        assert store.snapshot() == before

    @pytest.mark.asyncio
    async def test_malformed_update_keeps_existing(self, sync, store, make_event, offsets):
        await sync.handle(EventCreated(make_event()))
        broken = make_event()
        broken.start_time = None

        await sync.handle(EventUpdated(broken))

        assert store.pending_count == len(offsets) + 1


# =============================================================================
# Reconciliation
# =============================================================================

class TestReconcile:
    """Startup reconciliation."""

    def test_queues_scheduled_events_only(self, sync, store, make_event, offsets):
        events = [
            make_event(event_id="a"),
            make_event(event_id="b", status=EventStatus.ACTIVE),
            make_event(event_id="c", starts_in=timedelta(minutes=20)),
        ]

        queued = sync.reconcile(events)

        assert queued == len(offsets) + 1 + 2
        assert {r.event_id for r in store.snapshot()} == {"a", "c"}

    def test_reconcile_does_not_announce(self, sync, messenger, make_event):
        sync.reconcile([make_event()])
        assert messenger.sent == []

    def test_skips_malformed(self, sync, store, make_event):
        broken = make_event(event_id="")
        assert sync.reconcile([broken]) == 0
        assert store.pending_count == 0

    def test_empty(self, sync):
        assert sync.reconcile([]) == 0

    def test_already_queued_event_is_replaced(self, sync, store, make_event, offsets):
        event = make_event()
        sync.queue_reminders(event)

        sync.reconcile([event])

        keys = [(r.event_id, r.remind_at) for r in store.snapshot()]
        assert len(keys) == len(set(keys)) == len(offsets) + 1
