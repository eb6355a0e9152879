"""
plugins/presence/source.py

Presence snapshots from NATS.

An external poller queries the game servers and publishes one full
generation per poll:

    subject: dodobot.presence.snapshot
    data:    {"servers": [{"name": "Island", "players": ["a"], "reachable": true}]}

A mapping keyed by server name is accepted in place of the list.
"""

import logging
from typing import Optional

from core.event_bus import Event, EventBus
from core.subjects import Subjects

from .consumer import PresenceConsumer
from .snapshot import Generation, parse_generation


def decode_generation(event: Event) -> Generation:
    """
    Extract the generation carried by an event.

    Raises:
        ValueError: If the event carries no usable server list.
    """
    data = event.data
    if not isinstance(data, dict) or "servers" not in data:
        raise ValueError("Snapshot event has no 'servers' field")
    return parse_generation(data["servers"])


class NatsSnapshotSource:
    """
    Subscribes to presence snapshots and feeds them to the consumer.

    Args:
        event_bus: Connected EventBus.
        consumer: Presence consumer receiving decoded generations.
        subject: Subject snapshots are published on.
    """

    def __init__(
        self,
        event_bus: EventBus,
        consumer: PresenceConsumer,
        subject: str = Subjects.PRESENCE_SNAPSHOT,
    ):
        self.event_bus = event_bus
        self.consumer = consumer
        self.subject = subject
        self._subscription: Optional[int] = None
        self._hooks_registered = False
        self.logger = logging.getLogger(f"{__name__}.NatsSnapshotSource")

    async def start(self) -> None:
        self._subscription = await self.event_bus.subscribe(self.subject, self.handle)
        if not self._hooks_registered:
            self.event_bus.on_disconnect(self._on_bus_down)
            self.event_bus.on_connect(self._on_bus_up)
            self._hooks_registered = True
        self.logger.info(f"Listening for presence snapshots on {self.subject}")

    async def stop(self) -> None:
        if self._subscription is None:
            return
        await self.event_bus.unsubscribe(self.subject)
        self._subscription = None

    def _on_bus_down(self) -> None:
        if self._subscription is not None:
            self.logger.warning("Presence intake offline, status message is stale until NATS reconnects")

    def _on_bus_up(self) -> None:
        if self._subscription is not None:
            self.logger.info("Presence intake back online")

    async def handle(self, event: Event) -> None:
        """Decode one snapshot event and submit it. Bad payloads are dropped."""
        try:
            generation = decode_generation(event)
        except ValueError as e:
            self.logger.warning(f"Dropping presence snapshot from {event.source}: {e}")
            return

        await self.consumer.submit(generation)
