"""
plugins/eventer/reminder.py

Reminder model and reminder-set derivation.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Sequence

from common.models import ScheduledEvent


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Reminder:
    """
    A single notification to post at a fixed instant.

    Attributes:
        event_id: Event the reminder belongs to.
        event_name: Event name at the time the reminder was derived.
        event_url: Link to the event.
        start_time: Event start, frozen when the reminder was derived.
        remind_at: When the reminder should fire.
        is_immediate: True only for the reminder at start_time
            ("starting now" wording).
    """

    event_id: str
    event_name: str
    event_url: str
    start_time: datetime
    remind_at: datetime
    is_immediate: bool = False


def derive_reminders(
    event: ScheduledEvent,
    offsets: Sequence[timedelta],
    now: datetime,
) -> List[Reminder]:
    """
    Compute the reminder set for an event.

    One reminder per offset whose fire time is still strictly in the
    future; past offsets are skipped rather than caught up. If the event
    itself has not started yet, one immediate reminder at the start time
    is added.

    Args:
        event: Event to derive reminders for.
        offsets: Durations before the start at which to remind.
        now: Reference instant (timezone-aware).

    Returns:
        Reminders in offset order, immediate reminder last.
    """
    reminders = []
    start = event.start_time

    for offset in offsets:
        remind_at = start - offset
        if remind_at > now:
            reminders.append(Reminder(
                event_id=event.event_id,
                event_name=event.name,
                event_url=event.url,
                start_time=start,
                remind_at=remind_at,
            ))

    if start > now:
        reminders.append(Reminder(
            event_id=event.event_id,
            event_name=event.name,
            event_url=event.url,
            start_time=start,
            remind_at=start,
            is_immediate=True,
        ))

    return reminders
