"""
Core infrastructure: NATS event bus and subject names.
"""

from .event_bus import Event, EventBus
from .subjects import EventTypes, Subjects

__all__ = ["Event", "EventBus", "EventTypes", "Subjects"]
