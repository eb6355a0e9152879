#!/usr/bin/env python3
"""
DodoBot - Discord companion for ARK dedicated servers

Orchestration only:
- Event Bus (NATS) for presence snapshots
- Discord connection
- Presence plugin (join/leave notices, pinned player list)
- Eventer plugin (scheduled event announcements and reminders)
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional

from common.config import BotConfig, ConfigError, configure_logger, get_config, parse_log_level
from core.event_bus import EventBus
from lib.connection import DiscordConnection
from plugins.eventer import EventerPlugin
from plugins.presence import PresencePlugin

logger = logging.getLogger(__name__)


class DodoBot:
    """
    DodoBot Orchestrator

    Responsibilities:
    1. Connect the event bus and Discord
    2. Start the presence and eventer plugins
    3. Coordinate graceful shutdown
    """

    def __init__(self, config: BotConfig, event_bus=None, messenger=None):
        self.config = config
        self.event_bus = event_bus or EventBus(config.presence.nats_servers)
        self.messenger = messenger or DiscordConnection(config.discord.bot_token)
        self.presence: Optional[PresencePlugin] = None
        self.eventer: Optional[EventerPlugin] = None

    async def start(self):
        """Start all components in correct order"""
        try:
            logger.info("Starting Event Bus (NATS)...")
            await self.event_bus.connect()

            logger.info("Connecting to Discord...")
            await self.messenger.connect()

            self.presence = PresencePlugin(
                self.messenger,
                self.event_bus,
                self.config.discord,
                self.config.presence,
            )
            await self.presence.initialize()

            if self.config.eventer.enabled:
                self.eventer = EventerPlugin(
                    self.messenger,
                    self.config.discord.channel_id_events,
                    self.config.eventer,
                )
                await self.eventer.initialize()
            else:
                logger.info("Event monitoring disabled")

            logger.info("DodoBot started")

        except Exception as e:
            logger.error(f"Failed to start DodoBot: {e}", exc_info=True)
            await self.stop()
            raise

    async def stop(self):
        """Stop all components in reverse order"""
        logger.info("Shutting down DodoBot...")

        if self.eventer:
            await self.eventer.shutdown()
            self.eventer = None
        if self.presence:
            await self.presence.shutdown()
            self.presence = None
        await self.messenger.disconnect()
        await self.event_bus.disconnect()

        logger.info("DodoBot stopped")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="DodoBot Discord bot")
    parser.add_argument(
        "--config-file",
        default=None,
        help="JSON or YAML config file (default: read environment / .env)",
    )
    return parser.parse_args(argv)


async def run(bot: DodoBot):
    """Run the bot until SIGINT or SIGTERM"""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows
            pass

    await bot.start()
    try:
        await stop_event.wait()
        logger.info("Received shutdown signal")
    finally:
        await bot.stop()


def main(argv=None) -> int:
    """Entry point"""
    args = parse_args(argv)

    try:
        config = get_config(args.config_file)
    except ConfigError as e:
        configure_logger("", log_level=logging.ERROR)
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logger("", log_file=config.log_file, log_level=parse_log_level(config.log_level))

    try:
        asyncio.run(run(DodoBot(config)))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        logger.error(f"DodoBot exited with error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
