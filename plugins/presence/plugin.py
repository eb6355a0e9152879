"""
plugins/presence/plugin.py

Player presence: join/leave/move notices and the pinned player list.

    NATS snapshot -> PresenceConsumer.submit -> differ -> notices
                                                      -> StatusPublisher
                                                      -> MessagePointer
"""

import logging
from typing import Optional

from common.config import DiscordConfig, PresenceConfig
from lib.connection import MessagingAdapter

from .consumer import PresenceConsumer
from .differ import PresenceDiffer
from .pointer import MessagePointer
from .publisher import StatusPublisher
from .source import NatsSnapshotSource


class PresencePlugin:
    """
    Presence plugin.

    Features:
        - Join, leave and move notices
        - One status message per channel, edited in place
        - Status message ID survives restarts
    """

    NAMESPACE = "presence"
    VERSION = "1.0.0"
    DESCRIPTION = "Post player presence changes and keep the player list current"

    def __init__(
        self,
        messenger: MessagingAdapter,
        event_bus,
        discord_config: DiscordConfig,
        config: Optional[PresenceConfig] = None,
    ):
        self.messenger = messenger
        self.event_bus = event_bus
        self.discord_config = discord_config
        self.config = config or PresenceConfig()
        self.logger = logging.getLogger(f"plugin.{self.NAMESPACE}")

        self.publisher = StatusPublisher(
            messenger,
            discord_config.channel_id_status,
            title=discord_config.status_title,
            pin=discord_config.pin_player_list,
        )
        self.consumer = PresenceConsumer(
            PresenceDiffer(),
            self.publisher,
            MessagePointer(discord_config.cache_path),
            messenger,
            discord_config.channel_id_join_leave or discord_config.channel_id_status,
            show_join_leave=discord_config.show_join_leave,
            queue_size=self.config.queue_size,
            event_bus=event_bus if self.config.emit_events else None,
        )
        self.source = NatsSnapshotSource(event_bus, self.consumer, self.config.subject)
        self._initialized = False

    async def initialize(self) -> None:
        """Start the consumer, then subscribe to snapshots."""
        self.logger.info(f"Initializing {self.NAMESPACE} plugin v{self.VERSION}")
        await self.consumer.start()
        await self.source.start()
        self._initialized = True

    async def shutdown(self) -> None:
        await self.source.stop()
        await self.consumer.stop()
        self._initialized = False
        self.logger.info(f"{self.NAMESPACE} plugin unloaded")
