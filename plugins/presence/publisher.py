"""
plugins/presence/publisher.py

Single, idempotently updated status message per channel.

Every publish renders the full player list and either edits the known
status message or, when none can be found, creates one. The returned
message ID is meant to be persisted and passed back on the next call,
so repeated publishes edit the same message instead of posting new ones.
"""

import logging
from typing import Optional

from lib.connection import (
    ChannelMessage,
    Embed,
    MessagePayload,
    MessagingAdapter,
)

from .snapshot import Generation

COLOR_ONLINE = 0x57F287    # Discord green
COLOR_UNREACHABLE = 0xC1121F

NO_PLAYERS_TEXT = "No players online"
UNREACHABLE_TEXT = "Server unreachable"

# How many recent messages to scan when rediscovering the status message
HISTORY_SCAN_LIMIT = 100


def render_status(servers: Generation, title: str) -> MessagePayload:
    """
    Render the status message.

    One embed per server, sorted by server name: a bulleted player list,
    a "no players" marker, or a red "unreachable" marker.
    """
    payload = MessagePayload(content=f"# {title}")

    for server_name in sorted(servers):
        snapshot = servers[server_name]

        if not snapshot.reachable:
            description = UNREACHABLE_TEXT
            color = COLOR_UNREACHABLE
        elif snapshot.players:
            description = "\n".join(f"- {player}" for player in snapshot.players)
            color = COLOR_ONLINE
        else:
            description = NO_PLAYERS_TEXT
            color = COLOR_ONLINE

        payload.embeds.append(Embed(title=server_name, description=description, color=color))

    return payload


class StatusPublisher:
    """
    Keeps one status message up to date.

    Args:
        messenger: Messaging adapter.
        channel: Channel ID of the status message.
        title: Title marker; used in the content and to recognize the
            message when scanning the channel history.
        pin: Pin the message after publishing.
    """

    def __init__(
        self,
        messenger: MessagingAdapter,
        channel: str,
        title: str = "Online players",
        pin: bool = True,
    ):
        self.messenger = messenger
        self.channel = channel
        self.title = title
        self.pin = pin
        self.logger = logging.getLogger(f"{__name__}.StatusPublisher")

    def render(self, servers: Generation) -> MessagePayload:
        return render_status(servers, self.title)

    async def find_message(self, message_id: Optional[str]) -> Optional[ChannelMessage]:
        """
        Locate the current status message.

        A known ID is fetched directly. If that fails, or no ID is known,
        the recent channel history is scanned for a message by this bot
        containing the title marker; the first match wins.
        """
        if message_id:
            try:
                message = await self.messenger.fetch_by_id(self.channel, message_id)
                if message is not None:
                    return message
                self.logger.info(f"Status message {message_id} no longer exists, scanning channel")
            except Exception as e:
                self.logger.warning(f"Failed to fetch status message {message_id}: {e}")

        own_id = self.messenger.user_id
        recent = await self.messenger.fetch_recent(self.channel, HISTORY_SCAN_LIMIT)

        for message in recent:
            if own_id and message.author_id == own_id and self.title in message.content:
                return message

        return None

    async def publish(self, servers: Generation, message_id: Optional[str] = None) -> str:
        """
        Publish the status of all servers.

        Args:
            servers: Current generation.
            message_id: Previously returned message ID, if any.

        Returns:
            ID of the edited or created message.

        Raises:
            ConnectionError: If the message could not be looked up, edited
                or created. Pin failures are only logged.
        """
        payload = self.render(servers)
        existing = await self.find_message(message_id)

        if existing is not None:
            await self.messenger.edit(self.channel, existing.id, payload)
            result_id = existing.id
            pinned = existing.pinned
        else:
            result_id = await self.messenger.send(self.channel, payload)
            pinned = False
            self.logger.info(f"Created new status message {result_id}")

        if self.pin and not pinned:
            try:
                await self.messenger.pin(self.channel, result_id)
            except Exception as e:
                self.logger.error(f"Failed to pin status message {result_id}: {e}")

        return result_id
