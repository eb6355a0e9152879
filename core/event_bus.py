"""
Event Bus for NATS-based messaging

Thin wrapper around nats-py used for presence snapshot intake and the
optional presence transition fan-out.
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import nats
from nats.aio.client import Client as NATS

logger = logging.getLogger(__name__)


@dataclass
class Event:
    """
    Event message for NATS communication

    Attributes:
        subject: NATS subject (routing key)
        event_type: Type of event (presence.snapshot, presence.join, ...)
        source: Component that created the event
        data: Event payload (dict)
        correlation_id: Unique ID for tracking related events
        timestamp: When event was created
    """
    subject: str
    event_type: str
    source: str
    data: Dict[str, Any]
    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=lambda: datetime.now().timestamp())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Event':
        """
        Create event from dictionary

        Unknown keys are ignored so producers may attach extra fields.

        Raises:
            ValueError: If a required field is missing
        """
        missing = [k for k in ('subject', 'event_type', 'source', 'data') if k not in data]
        if missing:
            raise ValueError(f"Event is missing fields: {', '.join(missing)}")

        known = {k: v for k, v in data.items()
                 if k in ('subject', 'event_type', 'source', 'data',
                          'correlation_id', 'timestamp')}
        return Event(**known)

    @staticmethod
    def from_json(json_str: str) -> 'Event':
        data = json.loads(json_str)
        if not isinstance(data, dict):
            raise ValueError("Event JSON must be an object")
        return Event.from_dict(data)


class EventBus:
    """
    Event Bus for NATS-based messaging

    Example:
        bus = EventBus(servers=["nats://localhost:4222"])
        await bus.connect()

        async def handler(event):
            print(f"Received: {event.data}")

        await bus.subscribe("dodobot.presence.snapshot", handler)
        await bus.disconnect()
    """

    def __init__(
        self,
        servers: List[str] = None,
        name: str = "dodobot",
        max_reconnect_attempts: int = 60,
        reconnect_wait: float = 2.0
    ):
        """
        Initialize EventBus

        Args:
            servers: List of NATS server URLs
            name: Client name for NATS
            max_reconnect_attempts: Max reconnection attempts
            reconnect_wait: Seconds between reconnection attempts
        """
        self.servers = servers or ["nats://localhost:4222"]
        self.name = name
        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_wait = reconnect_wait

        self._nc: Optional[NATS] = None
        self._subscriptions: Dict[str, Any] = {}  # subject -> subscription

        self._on_connect_callbacks: List[Callable] = []
        self._on_disconnect_callbacks: List[Callable] = []

    async def connect(self):
        """
        Connect to NATS server

        Raises:
            Exception: If connection fails
        """
        if self._nc and self._nc.is_connected:
            logger.warning("Already connected to NATS")
            return

        logger.info(f"Connecting to NATS: {self.servers}")

        try:
            self._nc = await nats.connect(
                servers=self.servers,
                name=self.name,
                max_reconnect_attempts=self.max_reconnect_attempts,
                reconnect_time_wait=self.reconnect_wait,
                error_cb=self._error_cb,
                disconnected_cb=self._disconnected_cb,
                reconnected_cb=self._reconnected_cb,
                closed_cb=self._closed_cb,
            )
        except Exception as e:
            logger.error(f"Failed to connect to NATS: {e}", exc_info=True)
            raise

        logger.info("Connected to NATS successfully")
        await self._run_callbacks(self._on_connect_callbacks)

    async def disconnect(self):
        """Drain subscriptions and close the connection"""
        if not self._nc:
            return

        logger.info("Disconnecting from NATS...")

        try:
            await self._nc.drain()
            await self._nc.close()
        except Exception as e:
            logger.error(f"Error during disconnect: {e}")
        finally:
            self._nc = None
            self._subscriptions.clear()

        logger.info("Disconnected from NATS")

    def is_connected(self) -> bool:
        """Check if connected to NATS"""
        return self._nc is not None and self._nc.is_connected

    # ========== Publishing ==========

    async def publish(self, event: Event):
        """
        Publish event to NATS (at-most-once delivery)

        Raises:
            RuntimeError: If not connected
        """
        if not self.is_connected():
            raise RuntimeError("Not connected to NATS")

        try:
            await self._nc.publish(event.subject, event.to_json().encode('utf-8'))
            logger.debug(f"Published to {event.subject}: {event.event_type}")
        except Exception as e:
            logger.error(f"Failed to publish to {event.subject}: {e}")
            raise

    # ========== Subscribing ==========

    async def subscribe(
        self,
        subject: str,
        callback: Callable,
        queue: str = None
    ) -> int:
        """
        Subscribe to subject with callback

        Messages that are not valid Event JSON are logged and dropped;
        exceptions raised by the callback are logged as well.

        Args:
            subject: Subject pattern to subscribe to
            callback: Function receiving the decoded Event
            queue: Optional queue group name

        Returns:
            Subscription ID
        """
        if not self.is_connected():
            raise RuntimeError("Not connected to NATS")

        async def wrapper(msg):
            try:
                event = Event.from_json(msg.data.decode('utf-8'))
            except (ValueError, UnicodeDecodeError) as e:
                logger.warning(f"Dropping malformed message on {msg.subject}: {e}")
                return

            try:
                if asyncio.iscoroutinefunction(callback):
                    await callback(event)
                else:
                    callback(event)
            except Exception as e:
                logger.error(
                    f"Error in subscription callback for {subject}: {e}",
                    exc_info=True
                )

        try:
            sub = await self._nc.subscribe(subject, queue=queue or "", cb=wrapper)
        except Exception as e:
            logger.error(f"Failed to subscribe to {subject}: {e}")
            raise

        self._subscriptions[subject] = sub
        logger.debug(f"Subscribed to {subject}")
        return sub._id

    async def unsubscribe(self, subject: str):
        """Unsubscribe from subject"""
        sub = self._subscriptions.pop(subject, None)
        if sub is None:
            return

        try:
            await sub.unsubscribe()
        except Exception as e:
            logger.warning(f"Error unsubscribing from {subject}: {e}")
        logger.debug(f"Unsubscribed from {subject}")

    # ========== Connection Callbacks ==========

    def on_connect(self, callback: Callable):
        """Register callback for connection events"""
        self._on_connect_callbacks.append(callback)

    def on_disconnect(self, callback: Callable):
        """Register callback for disconnection events"""
        self._on_disconnect_callbacks.append(callback)

    @staticmethod
    async def _run_callbacks(callbacks: List[Callable], *args):
        for callback in callbacks:
            if asyncio.iscoroutinefunction(callback):
                await callback(*args)
            else:
                callback(*args)

    # ========== NATS Event Handlers ==========

    async def _error_cb(self, e):
        logger.error(f"NATS error: {e}")

    async def _disconnected_cb(self):
        logger.warning("Disconnected from NATS")
        await self._run_callbacks(self._on_disconnect_callbacks)

    async def _reconnected_cb(self):
        logger.info("Reconnected to NATS")
        await self._run_callbacks(self._on_connect_callbacks)

    async def _closed_cb(self):
        logger.info("NATS connection closed")
