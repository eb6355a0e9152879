"""
plugins/eventer/duration.py

Human-readable remaining-time strings in English or German.

Output format:
    - delta >= 1 day:  "D days [H hours]"     / "D Tage [H Stunden]"
    - delta >= 1 hour: "H hours [M minutes]"  / "H Stunden [M Minuten]"
    - otherwise:       "M minutes"            / "M Minuten"

The secondary unit is omitted when it is zero. Negative spans yield "".
"""

from datetime import timedelta
from enum import Enum
from typing import Dict, Tuple


class Language(Enum):
    """Output language for rendered durations and messages."""
    ENGLISH = "en"
    GERMAN = "de"

    @classmethod
    def parse(cls, value) -> "Language":
        """
        Resolve a language selector, falling back to English.

        Accepts a Language, a code ("en", "de") or a name ("german").
        """
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for lang in cls:
            if text in (lang.value, lang.name.lower()):
                return lang
        return cls.ENGLISH


# unit -> (singular, plural)
UNITS: Dict[Language, Dict[str, Tuple[str, str]]] = {
    Language.ENGLISH: {
        "day": ("day", "days"),
        "hour": ("hour", "hours"),
        "minute": ("minute", "minutes"),
    },
    Language.GERMAN: {
        "day": ("Tag", "Tage"),
        "hour": ("Stunde", "Stunden"),
        "minute": ("Minute", "Minuten"),
    },
}


def _unit(count: int, unit: str, language: Language) -> str:
    singular, plural = UNITS[language][unit]
    return f"{count} {singular if count == 1 else plural}"


def format_duration(delta: timedelta, language=Language.ENGLISH) -> str:
    """
    Format a time span using its two coarsest non-zero units.

    Args:
        delta: Span to format.
        language: Language or selector; unknown values use English.

    Returns:
        Formatted string, or "" for negative spans.
    """
    if delta < timedelta(0):
        return ""

    language = Language.parse(language)
    if language not in UNITS:
        language = Language.ENGLISH

    total_minutes = int(delta.total_seconds()) // 60
    total_hours = total_minutes // 60
    days = total_hours // 24
    hours = total_hours % 24
    minutes = total_minutes % 60

    if days >= 1:
        if hours == 0:
            return _unit(days, "day", language)
        return f"{_unit(days, 'day', language)} {_unit(hours, 'hour', language)}"

    if total_hours >= 1:
        if minutes == 0:
            return _unit(total_hours, "hour", language)
        return f"{_unit(total_hours, 'hour', language)} {_unit(minutes, 'minute', language)}"

    return _unit(total_minutes, "minute", language)
