"""
plugins/eventer/__init__.py

Scheduled event plugin for dodobot.

Provides:
- Announcement of newly created events
- Reminders at configurable offsets before an event starts
- A "starting now" reminder at T-0
- Rescheduling without stale or duplicate reminders
"""

from .duration import Language, format_duration
from .plugin import EventerPlugin
from .reminder import Reminder, derive_reminders
from .scheduler import ReminderScheduler
from .store import ReminderStore
from .sync import EventLifecycleSync

__all__ = [
    "EventerPlugin",
    "EventLifecycleSync",
    "Language",
    "Reminder",
    "ReminderScheduler",
    "ReminderStore",
    "derive_reminders",
    "format_duration",
]
