"""
plugins/presence/__init__.py

Player presence plugin for dodobot.

Provides:
- Join / leave / move detection between server snapshots
- Notices in the join/leave channel
- A single, idempotently edited status message
"""

from .consumer import PresenceConsumer, render_transition
from .differ import PresenceDiffer, Transition, TransitionKind, diff_snapshots
from .plugin import PresencePlugin
from .pointer import MessagePointer
from .publisher import StatusPublisher, render_status
from .snapshot import Generation, ServerSnapshot, parse_generation
from .source import NatsSnapshotSource

__all__ = [
    "Generation",
    "MessagePointer",
    "NatsSnapshotSource",
    "PresenceConsumer",
    "PresenceDiffer",
    "PresencePlugin",
    "ServerSnapshot",
    "StatusPublisher",
    "Transition",
    "TransitionKind",
    "diff_snapshots",
    "parse_generation",
    "render_status",
    "render_transition",
]
