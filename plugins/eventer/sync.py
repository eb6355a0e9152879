"""
plugins/eventer/sync.py

Keeps the reminder store in line with the lifecycle of scheduled events.

Notifications arrive through a single intake, handle(), as EventCreated
or EventUpdated. A startup pass, reconcile(), seeds the store from the
events that already exist.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Sequence

import pytz

from common.models import (
    EventCreated,
    EventStatus,
    EventUpdated,
    ScheduledEvent,
)
from lib.connection import MessagePayload, MessagingAdapter

from .duration import Language, format_duration
from .messages import format_local, render_announcement
from .reminder import Reminder, derive_reminders, utc_now
from .store import ReminderStore


class EventLifecycleSync:
    """
    Translates event lifecycle notifications into store mutations.

    - Created: announce once, then queue the reminder set.
    - Updated to a non-scheduled status: log only. Pending reminders
      are left to expire on their own, including after cancellation.
    - Updated while scheduled (reschedule): purge the event's reminders
      and derive them again from the new start time.

    Args:
        store: Shared reminder store.
        offsets: Reminder offsets before the event start.
        messenger: Adapter used for the creation announcement
            (None disables announcements).
        channel: Channel ID for announcements.
        display_tz: pytz timezone for log output.
        language: Language of the announcement.
        clock: Returns the current aware datetime.
    """

    def __init__(
        self,
        store: ReminderStore,
        offsets: Sequence[timedelta],
        messenger: Optional[MessagingAdapter] = None,
        channel: Optional[str] = None,
        display_tz=pytz.utc,
        language=Language.GERMAN,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.offsets = list(offsets)
        self.messenger = messenger
        self.channel = channel
        self.display_tz = display_tz
        self.language = Language.parse(language)
        self.clock = clock
        self.logger = logging.getLogger(f"{__name__}.EventLifecycleSync")

    async def handle(self, notification) -> None:
        """
        Intake for lifecycle notifications.

        Malformed or unknown notifications are dropped with a warning.
        """
        if isinstance(notification, EventCreated):
            await self._on_created(notification.event)
        elif isinstance(notification, EventUpdated):
            self._on_updated(notification.event)
        else:
            self.logger.warning(
                f"Ignoring unknown lifecycle notification: {type(notification).__name__}"
            )

    async def _on_created(self, event: ScheduledEvent) -> None:
        problem = event.validate()
        if problem:
            self.logger.warning(f"Ignoring created event '{event.name}': {problem}")
            return

        self.logger.info(
            f"New event '{event.name}' at {format_local(event.start_time, self.display_tz)} "
            f"has been created, scheduling reminders and posting notification"
        )

        if self.messenger and self.channel:
            try:
                await self.messenger.send(
                    self.channel,
                    MessagePayload(content=render_announcement(event, self.language))
                )
            except Exception as e:
                self.logger.error(f"Failed to announce event '{event.name}': {e}")

        self.queue_reminders(event)

    def _on_updated(self, event: ScheduledEvent) -> None:
        if event.status != EventStatus.SCHEDULED:
            self.logger.info(f"Event '{event.name}' status update: {event.status.label}")
            return

        problem = event.validate()
        if problem:
            self.logger.warning(f"Ignoring updated event '{event.name}': {problem}")
            return

        self.logger.info(f"Event '{event.name}' was updated. Rescheduling reminders.")
        self.store.purge_by_event(event.event_id)
        self.queue_reminders(event)

    def reconcile(self, events: Iterable[ScheduledEvent]) -> int:
        """
        Queue reminders for every currently scheduled event.

        Used once at startup. An event that was already queued by a creation
        notice arriving during startup is replaced, not duplicated.

        Returns:
            Number of reminders queued.
        """
        queued = 0
        for event in events:
            if event.status != EventStatus.SCHEDULED:
                continue
            problem = event.validate()
            if problem:
                self.logger.warning(f"Skipping event '{event.name}': {problem}")
                continue

            self.logger.info(
                f"Found pending event '{event.name}' at "
                f"{format_local(event.start_time, self.display_tz)}"
            )
            self.store.purge_by_event(event.event_id)
            queued += len(self.queue_reminders(event))

        self.logger.info(f"Sync complete. {self.store.pending_count} reminders in queue")
        return queued

    def queue_reminders(self, event: ScheduledEvent) -> List[Reminder]:
        """Derive the event's reminder set and enqueue it."""
        now = self.clock()
        reminders = derive_reminders(event, self.offsets, now)

        for reminder in reminders:
            self.store.enqueue(reminder)
            self.logger.info(
                f"   Scheduling reminder for event '{event.name}' at "
                f"{format_local(reminder.remind_at, self.display_tz)} "
                f"(in {format_duration(reminder.remind_at - now, Language.ENGLISH)})"
            )

        return reminders
