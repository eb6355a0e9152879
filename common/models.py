#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shared models for dodobot
=========================

Platform-neutral representations of the inbound notifications the bot
reacts to:

- ScheduledEvent: a guild scheduled event (id, name, start time, status)
- EventStatus: lifecycle status of a scheduled event
- EventCreated / EventUpdated: lifecycle notifications dispatched to the
  eventer plugin through a single intake function

Usage:
    from common.models import ScheduledEvent, EventStatus, EventCreated

    event = ScheduledEvent(
        event_id="1180",
        guild_id="42",
        name="Boss fight",
        start_time=datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc),
    )
    await sync.handle(EventCreated(event))
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

EVENT_URL_TEMPLATE = "https://discord.com/events/{guild_id}/{event_id}"


class EventStatus(Enum):
    """Scheduled event lifecycle status"""
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        """Human readable status used in log lines"""
        return {
            EventStatus.SCHEDULED: "Scheduled",
            EventStatus.ACTIVE: "Active (Started)",
            EventStatus.COMPLETED: "Completed",
            EventStatus.CANCELLED: "Cancelled",
        }[self]


@dataclass
class ScheduledEvent:
    """
    An externally scheduled activity.

    Attributes:
        event_id: Opaque event identifier
        guild_id: Identifier of the guild that owns the event
        name: Display name
        start_time: Scheduled start (timezone-aware)
        status: Lifecycle status
    """
    event_id: str
    guild_id: str
    name: str
    start_time: Optional[datetime]
    status: EventStatus = EventStatus.SCHEDULED

    @property
    def url(self) -> str:
        """Stable link to the event, derived from guild and event id"""
        return EVENT_URL_TEMPLATE.format(guild_id=self.guild_id, event_id=self.event_id)

    def validate(self) -> Optional[str]:
        """
        Check that the event carries everything needed to schedule reminders.

        Returns:
            None if the event is usable, otherwise a short reason
        """
        if not self.event_id:
            return "missing event id"
        if not self.name:
            return "missing event name"
        if self.start_time is None:
            return "missing start time"
        if self.start_time.tzinfo is None:
            return "start time has no timezone"
        return None


@dataclass
class EventCreated:
    """A scheduled event was created"""
    event: ScheduledEvent


@dataclass
class EventUpdated:
    """A scheduled event was edited or changed status"""
    event: ScheduledEvent


LifecycleNotification = Union[EventCreated, EventUpdated]
