"""
plugins/eventer/messages.py

Text of the event announcement and reminder messages.

Timestamps are shown in the configured display timezone (a pytz zone);
remaining time uses format_duration in the message language.
"""

from datetime import datetime, timedelta
from typing import Dict

from common.models import ScheduledEvent

from .duration import Language, format_duration
from .reminder import Reminder

DATE_FORMAT = "%d.%m."
TIME_FORMAT = "%H:%M"
LOG_FORMAT = "%d.%m. %H:%M"

TEMPLATES: Dict[Language, Dict[str, str]] = {
    Language.GERMAN: {
        "announce": "**Neues Event wurde erstellt** \n\n@everyone\n\n{url}",
        "now": "**Reminder** \n\n@everyone\n\nEvent '{name}' startet JETZT!\n\n{url}",
        "upcoming": (
            "**Reminder** \n\n@everyone\n\nEvent '{name}' startet am {date} um {time}! "
            "(in {remaining})\n\n{url}"
        ),
    },
    Language.ENGLISH: {
        "announce": "**New event created** \n\n@everyone\n\n{url}",
        "now": "**Reminder** \n\n@everyone\n\nEvent '{name}' starts NOW!\n\n{url}",
        "upcoming": (
            "**Reminder** \n\n@everyone\n\nEvent '{name}' starts on {date} at {time}! "
            "(in {remaining})\n\n{url}"
        ),
    },
}


def _templates(language) -> Dict[str, str]:
    return TEMPLATES.get(Language.parse(language), TEMPLATES[Language.ENGLISH])


def format_local(moment: datetime, tz, fmt: str = LOG_FORMAT) -> str:
    """Format an aware datetime in the display timezone."""
    return moment.astimezone(tz).strftime(fmt)


def render_announcement(event: ScheduledEvent, language=Language.GERMAN) -> str:
    """Message posted once when an event is created."""
    return _templates(language)["announce"].format(url=event.url, name=event.name)


def render_reminder(
    reminder: Reminder,
    now: datetime,
    tz,
    language=Language.GERMAN,
) -> str:
    """
    Message posted when a reminder fires.

    Immediate reminders say the event starts now; the others include the
    local start date/time and the remaining duration.
    """
    templates = _templates(language)

    if reminder.is_immediate:
        return templates["now"].format(name=reminder.event_name, url=reminder.event_url)

    local_start = reminder.start_time.astimezone(tz)
    remaining = timedelta(seconds=round((reminder.start_time - now).total_seconds()))

    return templates["upcoming"].format(
        name=reminder.event_name,
        date=local_start.strftime(DATE_FORMAT),
        time=local_start.strftime(TIME_FORMAT),
        remaining=format_duration(remaining, language),
        url=reminder.event_url,
    )
