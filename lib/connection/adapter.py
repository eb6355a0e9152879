"""
Abstract messaging adapter for chat platforms.

This module defines the MessagingAdapter abstract base class that the
Discord connection (and test doubles) inherit from. The reminder and
presence plugins depend only on this surface, never on a concrete
transport.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from .message import ChannelMessage, MessagePayload

# Normalized name of scheduled event lifecycle notifications
SCHEDULED_EVENT = "scheduled_event"


class MessagingAdapter(ABC):
    """
    Abstract interface for platform connections.

    Covers the outbound capability the bot needs (send, edit, fetch,
    pin) plus registration of callbacks for normalized inbound
    notifications such as scheduled event changes.

    Attributes:
        logger: Logger instance for connection events
        is_connected: Connection status flag

    Example:
        >>> conn = DiscordConnection(token)
        >>> await conn.connect()
        >>> message_id = await conn.send("1234", MessagePayload("Hello"))
        >>> await conn.pin("1234", message_id)
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize messaging adapter.

        Args:
            logger: Optional logger instance. If None, creates default logger
                    named after the class.
        """
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._is_connected = False
        self._handlers: Dict[str, List[Callable]] = {}

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to platform.

        Raises:
            AuthenticationError: If login fails
            ConnectionError: If the session cannot be opened
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """
        Close connection gracefully.

        This method should not raise exceptions - it should make best
        effort to clean up even if errors occur.
        """
        pass

    @property
    @abstractmethod
    def user_id(self) -> Optional[str]:
        """ID of the account this adapter is logged in as."""
        pass

    @abstractmethod
    async def send(self, channel: str, payload: MessagePayload) -> str:
        """
        Post a new message.

        Args:
            channel: Target channel ID
            payload: Content and embeds to post

        Returns:
            ID of the created message

        Raises:
            NotConnectedError: If not connected
            SendError: If the message fails to send
        """
        pass

    @abstractmethod
    async def edit(self, channel: str, message_id: str, payload: MessagePayload) -> None:
        """
        Replace content and embeds of an existing message.

        Raises:
            MessageNotFoundError: If the message no longer exists
            SendError: If the edit is rejected
        """
        pass

    @abstractmethod
    async def fetch_by_id(self, channel: str, message_id: str) -> Optional[ChannelMessage]:
        """
        Fetch a single message.

        Returns:
            The message, or None if it does not exist

        Raises:
            ConnectionError: On transport failures
        """
        pass

    @abstractmethod
    async def fetch_recent(self, channel: str, limit: int = 100) -> List[ChannelMessage]:
        """
        Fetch the most recent messages of a channel, newest first.
        """
        pass

    @abstractmethod
    async def pin(self, channel: str, message_id: str) -> None:
        """
        Pin a message in its channel.

        Raises:
            SendError: If pinning is rejected
        """
        pass

    @abstractmethod
    async def list_scheduled_events(self) -> List[Any]:
        """
        List scheduled events across all guilds the bot is in.

        Returns:
            List of ScheduledEvent objects
        """
        pass

    def on_event(self, event: str, callback: Callable) -> None:
        """
        Register callback for normalized event.

        Callbacks can be async or sync functions and receive the event
        payload as their only argument.

        Args:
            event: Normalized event name (e.g., 'scheduled_event')
            callback: Callback function(payload)
        """
        self._handlers.setdefault(event, []).append(callback)

    def off_event(self, event: str, callback: Callable) -> None:
        """
        Unregister callback for event.

        Args:
            event: Normalized event name
            callback: Previously registered callback function
        """
        handlers = self._handlers.get(event, [])
        if callback in handlers:
            handlers.remove(callback)

    async def _dispatch(self, event: str, payload: Any) -> None:
        """Invoke every callback registered for event, logging failures."""
        for callback in list(self._handlers.get(event, [])):
            try:
                if asyncio.iscoroutinefunction(callback):
                    await callback(payload)
                else:
                    callback(payload)
            except Exception as e:
                self.logger.error(
                    f"Error in {event} callback: {e}",
                    exc_info=True
                )

    @property
    def is_connected(self) -> bool:
        """
        Check if connection is active.

        Returns:
            True if connected, False otherwise
        """
        return self._is_connected
