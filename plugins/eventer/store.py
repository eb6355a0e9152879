"""
plugins/eventer/store.py

Lock-protected collection of pending reminders.

Shared by the lifecycle sync (writes) and the scheduler (drains). Every
operation holds the lock for its whole duration and never across an
outbound call, so callers drain first and send afterwards.
"""

import logging
import threading
from datetime import datetime
from typing import List

from .reminder import Reminder


class ReminderStore:
    """
    Unordered collection of pending reminders.

    No ordering is kept: every drain scans the full list, which stays
    small (upcoming events x configured offsets).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pending: List[Reminder] = []
        self.logger = logging.getLogger(f"{__name__}.ReminderStore")

    def enqueue(self, reminder: Reminder) -> None:
        """
        Append a reminder.

        No de-duplication; callers purge an event before re-deriving it.
        """
        with self._lock:
            self._pending.append(reminder)

    def purge_by_event(self, event_id: str) -> int:
        """
        Remove every reminder of an event.

        Returns:
            Number of reminders removed.
        """
        with self._lock:
            remaining = [r for r in self._pending if r.event_id != event_id]
            removed = len(self._pending) - len(remaining)
            self._pending = remaining

        if removed:
            self.logger.debug(f"Purged {removed} reminders for event {event_id}")
        return removed

    def drain_due(self, now: datetime) -> List[Reminder]:
        """
        Remove and return every reminder with remind_at <= now.

        The stored list is replaced by the not-yet-due remainder in one
        step.
        """
        with self._lock:
            due = []
            remaining = []
            for reminder in self._pending:
                if reminder.remind_at <= now:
                    due.append(reminder)
                else:
                    remaining.append(reminder)
            self._pending = remaining
        return due

    def snapshot(self) -> List[Reminder]:
        """Copy of the pending reminders."""
        with self._lock:
            return list(self._pending)

    @property
    def pending_count(self) -> int:
        """Number of pending reminders."""
        with self._lock:
            return len(self._pending)
