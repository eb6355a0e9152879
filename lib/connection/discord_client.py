"""
Discord implementation of the messaging adapter.

Wraps a discord.py client: outbound calls go through the REST API,
scheduled event gateway notifications are normalized into
EventCreated / EventUpdated and dispatched to callbacks registered
under the 'scheduled_event' name.
"""

import asyncio
import logging
from typing import List, Optional

import discord

from common.models import EventCreated, EventStatus, EventUpdated, ScheduledEvent

from .adapter import SCHEDULED_EVENT, MessagingAdapter
from .errors import (
    AuthenticationError,
    ConnectionError,
    MessageNotFoundError,
    NotConnectedError,
    SendError,
)
from .message import ChannelMessage, MessagePayload

# discord.EventStatus values; "ended" and "canceled" alias 3 and 4
_STATUS_BY_VALUE = {
    1: EventStatus.SCHEDULED,
    2: EventStatus.ACTIVE,
    3: EventStatus.COMPLETED,
    4: EventStatus.CANCELLED,
}


def to_scheduled_event(event) -> ScheduledEvent:
    """
    Convert a discord.ScheduledEvent into the platform-neutral model.

    Unknown statuses map to COMPLETED so they never schedule reminders.
    """
    status = getattr(event, "status", None)
    value = getattr(status, "value", status)
    return ScheduledEvent(
        event_id=str(event.id) if getattr(event, "id", None) else "",
        guild_id=str(getattr(event, "guild_id", "") or ""),
        name=getattr(event, "name", "") or "",
        start_time=getattr(event, "start_time", None),
        status=_STATUS_BY_VALUE.get(value, EventStatus.COMPLETED),
    )


def to_discord_embeds(payload: MessagePayload) -> List[discord.Embed]:
    """Build discord.Embed objects from payload embeds"""
    return [
        discord.Embed(title=e.title, description=e.description, color=e.color)
        for e in payload.embeds
    ]


def to_channel_message(message) -> ChannelMessage:
    """Convert a discord.Message into a ChannelMessage"""
    author = getattr(message, "author", None)
    return ChannelMessage(
        id=str(message.id),
        author_id=str(author.id) if author is not None else "",
        content=message.content or "",
        pinned=bool(getattr(message, "pinned", False)),
    )


class _GatewayClient(discord.Client):
    """discord.Client that forwards scheduled event notifications"""

    def __init__(self, connection: "DiscordConnection", *, intents: discord.Intents):
        super().__init__(intents=intents)
        self.connection = connection

    async def on_ready(self):
        self.connection.logger.info(f"Logged in to Discord as {self.user} ({self.user.id})")

    async def on_scheduled_event_create(self, event):
        await self.connection._dispatch(SCHEDULED_EVENT, EventCreated(to_scheduled_event(event)))

    async def on_scheduled_event_update(self, before, after):
        await self.connection._dispatch(SCHEDULED_EVENT, EventUpdated(to_scheduled_event(after)))


class DiscordConnection(MessagingAdapter):
    """
    Discord messaging adapter.

    Args:
        token: Bot token
        ready_timeout: Seconds to wait for the gateway READY event
        logger: Optional logger
    """

    def __init__(
        self,
        token: str,
        ready_timeout: float = 60.0,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger or logging.getLogger(__name__))
        self.token = token
        self.ready_timeout = ready_timeout

        intents = discord.Intents.default()
        intents.guilds = True
        intents.guild_messages = True
        intents.guild_scheduled_events = True

        self._client = _GatewayClient(self, intents=intents)
        self._runner: Optional[asyncio.Task] = None

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def connect(self) -> None:
        if self._is_connected:
            self.logger.warning("Already connected to Discord")
            return

        try:
            await self._client.login(self.token)
        except discord.LoginFailure as e:
            raise AuthenticationError(f"Discord rejected the bot token: {e}") from e
        except discord.HTTPException as e:
            raise ConnectionError(f"Failed to log in to Discord: {e}") from e

        self._runner = asyncio.create_task(self._client.connect(reconnect=True))

        try:
            await asyncio.wait_for(self._client.wait_until_ready(), timeout=self.ready_timeout)
        except asyncio.TimeoutError as e:
            await self.disconnect()
            raise ConnectionError(
                f"Discord gateway not ready after {self.ready_timeout}s"
            ) from e

        self._is_connected = True

    async def disconnect(self) -> None:
        try:
            await self._client.close()
        except Exception as e:
            self.logger.error(f"Error closing Discord client: {e}")

        if self._runner:
            self._runner.cancel()
            try:
                await self._runner
            except (asyncio.CancelledError, Exception):
                pass
            self._runner = None

        self._is_connected = False
        self.logger.info("Disconnected from Discord")

    @property
    def user_id(self) -> Optional[str]:
        user = self._client.user
        return str(user.id) if user is not None else None

    # ========================================================================
    # Outbound
    # ========================================================================

    async def _channel(self, channel: str):
        if not self._is_connected:
            raise NotConnectedError("Discord connection is not ready")

        channel_id = int(channel)
        found = self._client.get_channel(channel_id)
        if found is not None:
            return found

        try:
            return await self._client.fetch_channel(channel_id)
        except discord.NotFound as e:
            raise MessageNotFoundError(f"Channel {channel} not found") from e
        except discord.HTTPException as e:
            raise ConnectionError(f"Failed to fetch channel {channel}: {e}") from e

    async def send(self, channel: str, payload: MessagePayload) -> str:
        target = await self._channel(channel)
        try:
            message = await target.send(
                content=payload.content or None,
                embeds=to_discord_embeds(payload),
            )
        except discord.HTTPException as e:
            raise SendError(f"Failed to send message to {channel}: {e}") from e
        return str(message.id)

    async def edit(self, channel: str, message_id: str, payload: MessagePayload) -> None:
        target = await self._channel(channel)
        try:
            await target.get_partial_message(int(message_id)).edit(
                content=payload.content,
                embeds=to_discord_embeds(payload),
            )
        except discord.NotFound as e:
            raise MessageNotFoundError(f"Message {message_id} not found") from e
        except discord.HTTPException as e:
            raise SendError(f"Failed to edit message {message_id}: {e}") from e

    async def fetch_by_id(self, channel: str, message_id: str) -> Optional[ChannelMessage]:
        target = await self._channel(channel)
        try:
            message = await target.fetch_message(int(message_id))
        except discord.NotFound:
            return None
        except discord.HTTPException as e:
            raise ConnectionError(f"Failed to fetch message {message_id}: {e}") from e
        return to_channel_message(message)

    async def fetch_recent(self, channel: str, limit: int = 100) -> List[ChannelMessage]:
        target = await self._channel(channel)
        try:
            return [to_channel_message(m) async for m in target.history(limit=limit)]
        except discord.HTTPException as e:
            raise ConnectionError(f"Failed to read history of {channel}: {e}") from e

    async def pin(self, channel: str, message_id: str) -> None:
        target = await self._channel(channel)
        try:
            await target.get_partial_message(int(message_id)).pin()
        except discord.HTTPException as e:
            raise SendError(f"Failed to pin message {message_id}: {e}") from e

    # ========================================================================
    # Scheduled events
    # ========================================================================

    async def list_scheduled_events(self) -> List[ScheduledEvent]:
        if not self._is_connected:
            raise NotConnectedError("Discord connection is not ready")

        events = []
        for guild in self._client.guilds:
            try:
                fetched = await guild.fetch_scheduled_events()
            except discord.HTTPException as e:
                self.logger.warning(f"Failed to list scheduled events of guild {guild.id}: {e}")
                continue
            events.extend(to_scheduled_event(e) for e in fetched)
        return events
