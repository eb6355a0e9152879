"""
plugins/eventer/plugin.py

Scheduled event announcements and reminders.

Wires the reminder store, the lifecycle sync and the scheduler to a
messaging adapter:

    adapter 'scheduled_event' notifications -> EventLifecycleSync.handle
    startup                                  -> EventLifecycleSync.reconcile
    every tick                               -> ReminderScheduler.tick
"""

import logging
from datetime import datetime
from typing import Callable, Optional

import pytz

from common.config import EventerConfig
from lib.connection import MessagingAdapter
from lib.connection.adapter import SCHEDULED_EVENT

from .duration import Language, format_duration
from .reminder import utc_now
from .scheduler import ReminderScheduler
from .store import ReminderStore
from .sync import EventLifecycleSync


class EventerPlugin:
    """
    Event reminder plugin.

    Features:
        - Announcement when an event is created
        - Reminders at configured offsets before the start
        - "Starting now" reminder at the start
        - Reschedules replace the previous reminder set
        - Startup reconciliation from the events that already exist
    """

    NAMESPACE = "eventer"
    VERSION = "1.0.0"
    DESCRIPTION = "Announce scheduled events and post reminders"

    def __init__(
        self,
        messenger: MessagingAdapter,
        channel: str,
        config: Optional[EventerConfig] = None,
        display_tz=None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the eventer plugin.

        Args:
            messenger: Connected messaging adapter.
            channel: Channel ID for announcements and reminders.
            config: Eventer configuration.
            display_tz: pytz timezone for rendered times.
            clock: Returns the current aware datetime.
        """
        self.messenger = messenger
        self.channel = channel
        self.config = config or EventerConfig()
        self.display_tz = display_tz or pytz.timezone(self.config.timezone)
        self.language = Language.parse(self.config.language)
        self.logger = logging.getLogger(f"plugin.{self.NAMESPACE}")

        self.store = ReminderStore()
        self.sync = EventLifecycleSync(
            self.store,
            self.config.reminder_offsets,
            messenger=messenger,
            channel=channel,
            display_tz=self.display_tz,
            language=self.language,
            clock=clock,
        )
        self.scheduler = ReminderScheduler(
            self.store,
            messenger,
            channel,
            tick_interval=self.config.tick_seconds,
            display_tz=self.display_tz,
            language=self.language,
            clock=clock,
        )
        self._initialized = False

    async def initialize(self) -> None:
        """
        Initialize the plugin.

        - Registers the lifecycle intake with the adapter
        - Queues reminders for events that already exist
        - Starts the scheduler
        """
        self.logger.info(f"Initializing {self.NAMESPACE} plugin v{self.VERSION}")
        self.logger.info("Event monitoring enabled, setting reminders for every event at:")
        for offset in self.config.reminder_offsets:
            self.logger.info(f"   - {format_duration(offset, Language.ENGLISH)} before")

        self.messenger.on_event(SCHEDULED_EVENT, self.sync.handle)

        try:
            events = await self.messenger.list_scheduled_events()
        except Exception as e:
            self.logger.error(f"Failed to list existing events: {e}")
            events = []
        self.sync.reconcile(events)

        await self.scheduler.start()
        self._initialized = True

    async def shutdown(self) -> None:
        """
        Shutdown the plugin.

        - Stops the scheduler
        - Unregisters the lifecycle intake
        """
        await self.scheduler.stop()
        self.messenger.off_event(SCHEDULED_EVENT, self.sync.handle)
        self._initialized = False
        self.logger.info(f"{self.NAMESPACE} plugin unloaded")
