"""
Messaging adapters for chat platforms.

This module provides the abstract outbound message capability and its
Discord implementation.
"""

from .adapter import MessagingAdapter
from .discord_client import DiscordConnection
from .errors import (
    AuthenticationError,
    ConnectionError,
    MessageNotFoundError,
    NotConnectedError,
    SendError,
)
from .message import ChannelMessage, Embed, MessagePayload

__all__ = [
    'MessagingAdapter',
    'DiscordConnection',
    'ChannelMessage',
    'Embed',
    'MessagePayload',
    'ConnectionError',
    'AuthenticationError',
    'NotConnectedError',
    'SendError',
    'MessageNotFoundError',
]
