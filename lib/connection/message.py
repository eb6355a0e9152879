"""
Platform-neutral message payloads.

The presence and reminder plugins build these objects; connection
implementations translate them into platform types.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class Embed:
    """One rich content block of a message."""
    title: str
    description: str
    color: int = 0


@dataclass
class MessagePayload:
    """Text content plus rich content blocks."""
    content: str = ""
    embeds: List[Embed] = field(default_factory=list)


@dataclass
class ChannelMessage:
    """
    A message read back from a channel.

    Attributes:
        id: Platform message ID (opaque string)
        author_id: ID of the user who posted it
        content: Text content
        pinned: Whether the message is pinned in its channel
    """
    id: str
    author_id: str
    content: str = ""
    pinned: bool = False
