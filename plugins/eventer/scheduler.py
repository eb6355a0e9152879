"""
plugins/eventer/scheduler.py

Asyncio-based reminder scheduler.

Uses a single polling loop that drains due reminders from the shared
store on every tick rather than arming one task per reminder.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional

import pytz

from lib.connection import MessagePayload, MessagingAdapter

from .duration import Language
from .messages import render_reminder
from .reminder import Reminder, utc_now
from .store import ReminderStore


class ReminderScheduler:
    """
    Posts reminders when they become due.

    Delivery is at-most-once: a drained reminder is gone from the store
    before it is sent, and a failed send is logged but not retried.

    Args:
        store: Shared reminder store.
        messenger: Adapter used to post reminders.
        channel: Channel ID reminders are posted to.
        tick_interval: Seconds between checks (default: 1).
        display_tz: pytz timezone for rendered start times.
        language: Message language.
        clock: Returns the current aware datetime.
    """

    def __init__(
        self,
        store: ReminderStore,
        messenger: MessagingAdapter,
        channel: str,
        tick_interval: float = 1.0,
        display_tz=pytz.utc,
        language=Language.GERMAN,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.messenger = messenger
        self.channel = channel
        self.tick_interval = tick_interval
        self.display_tz = display_tz
        self.language = Language.parse(language)
        self.clock = clock
        self.running = False
        self._task: Optional[asyncio.Task] = None
        self._last_count: Optional[int] = None
        self.logger = logging.getLogger(f"{__name__}.scheduler")

    async def start(self) -> None:
        """
        Start the scheduler loop.

        Creates a background task that periodically drains due reminders.
        """
        if self.running:
            self.logger.warning("Scheduler already running")
            return

        self.running = True
        self._last_count = self.store.pending_count
        self._task = asyncio.create_task(self._check_loop())
        self.logger.info(
            f"Scheduler started (interval: {self.tick_interval}s, "
            f"tracking: {self._last_count} reminders)"
        )

    async def stop(self) -> None:
        """
        Stop the scheduler loop.

        Pending reminders stay in the store; they are rebuilt from the
        event source on the next start anyway.
        """
        if not self.running:
            return

        self.running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self.logger.info("Scheduler stopped")

    async def tick(self, now: Optional[datetime] = None) -> List[Reminder]:
        """
        Drain and post every due reminder.

        Args:
            now: Reference instant; defaults to the clock.

        Returns:
            The reminders that were drained.
        """
        now = now or self.clock()
        due = self.store.drain_due(now)

        for reminder in due:
            try:
                text = render_reminder(reminder, now, self.display_tz, self.language)
                await self.messenger.send(self.channel, MessagePayload(content=text))
            except Exception as e:
                self.logger.error(
                    f"Failed to post reminder for event '{reminder.event_name}': {e}"
                )

        count = self.store.pending_count
        if count != self._last_count:
            self.logger.info(f"Now {count} reminders in queue")
            self._last_count = count

        return due

    async def _check_loop(self) -> None:
        """
        Main loop that drains due reminders.

        Runs until stopped; errors in a tick are logged and the loop
        keeps going.
        """
        self.logger.debug("Check loop started")

        while self.running:
            try:
                await self.tick()
                await asyncio.sleep(self.tick_interval)

            except asyncio.CancelledError:
                self.logger.debug("Check loop cancelled")
                raise
            except Exception as e:
                self.logger.exception(f"Error in check loop: {e}")
                await asyncio.sleep(self.tick_interval)

        self.logger.debug("Check loop ended")
