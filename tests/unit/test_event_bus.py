"""
Unit tests for EventBus (NATS wrapper)

Tests the NATS messaging wrapper without requiring an actual NATS
server (uses mocking).
"""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from core.event_bus import Event, EventBus


@pytest.mark.unit
@pytest.mark.core
class TestEvent:
    """Test Event serialization"""

    def test_event_creation(self):
        event = Event(
            subject="dodobot.presence.snapshot",
            event_type="presence.snapshot",
            source="poller",
            data={"servers": []}
        )

        assert event.subject == "dodobot.presence.snapshot"
        assert event.data == {"servers": []}
        assert event.correlation_id is not None
        assert event.timestamp > 0

    def test_json_round_trip(self):
        event = Event(subject="s", event_type="t", source="x", data={"k": [1, 2]})
        assert Event.from_json(event.to_json()) == event

    def test_from_json_ignores_unknown_fields(self):
        """Producers may add fields the bot does not know"""
        payload = json.dumps({
            "subject": "s", "event_type": "t", "source": "x",
            "data": {}, "priority": 2, "metadata": {},
        })

        event = Event.from_json(payload)

        assert event.subject == "s"

    @pytest.mark.parametrize("payload", [
        '{"subject": "s", "event_type": "t", "source": "x"}',
        '["not", "an", "object"]',
        'not json',
    ])
    def test_from_json_rejects_invalid(self, payload):
        with pytest.raises(ValueError):
            Event.from_json(payload)

    def test_correlation_id_propagation(self):
        event1 = Event(subject="s", event_type="t", source="x", data={})
        event2 = Event(subject="s", event_type="t", source="x", data={},
                       correlation_id=event1.correlation_id)

        assert event1.correlation_id == event2.correlation_id


@pytest.mark.unit
@pytest.mark.core
class TestEventBus:
    """Test EventBus core functionality"""

    @pytest.mark.asyncio
    @patch('core.event_bus.nats.connect')
    async def test_connect(self, mock_connect):
        """Test EventBus connection"""
        mock_nc = AsyncMock()
        mock_nc.is_connected = True
        mock_connect.return_value = mock_nc

        bus = EventBus(servers=["nats://localhost:4222"])
        await bus.connect()

        assert bus.is_connected()
        mock_connect.assert_called_once()
        assert mock_connect.call_args.kwargs["servers"] == ["nats://localhost:4222"]

    @pytest.mark.asyncio
    @patch('core.event_bus.nats.connect')
    async def test_connect_failure_raises(self, mock_connect):
        mock_connect.side_effect = OSError("refused")

        bus = EventBus()
        with pytest.raises(OSError):
            await bus.connect()

        assert not bus.is_connected()

    @pytest.mark.asyncio
    @patch('core.event_bus.nats.connect')
    async def test_connect_callbacks(self, mock_connect):
        mock_nc = AsyncMock()
        mock_nc.is_connected = True
        mock_connect.return_value = mock_nc
        called = []

        bus = EventBus()
        bus.on_connect(lambda: called.append("sync"))
        await bus.connect()

        assert called == ["sync"]

    @pytest.mark.asyncio
    @patch('core.event_bus.nats.connect')
    async def test_disconnect(self, mock_connect):
        """Test EventBus disconnection"""
        mock_nc = AsyncMock()
        mock_nc.is_connected = True
        mock_connect.return_value = mock_nc

        bus = EventBus(servers=["nats://localhost:4222"])
        await bus.connect()
        await bus.disconnect()

        assert not bus.is_connected()
        mock_nc.drain.assert_called_once()

    @pytest.mark.asyncio
    async def test_disconnect_when_not_connected(self):
        await EventBus().disconnect()

    @pytest.mark.asyncio
    @patch('core.event_bus.nats.connect')
    async def test_publish(self, mock_connect):
        """Test event publishing"""
        mock_nc = AsyncMock()
        mock_nc.is_connected = True
        mock_connect.return_value = mock_nc

        bus = EventBus()
        await bus.connect()

        event = Event(subject="dodobot.events.presence.join", event_type="presence.join",
                      source="presence", data={"player": "p1"})
        await bus.publish(event)

        subject, payload = mock_nc.publish.call_args[0]
        assert subject == "dodobot.events.presence.join"
        assert json.loads(payload.decode("utf-8"))["data"] == {"player": "p1"}

    @pytest.mark.asyncio
    async def test_publish_not_connected(self):
        event = Event(subject="s", event_type="t", source="x", data={})

        with pytest.raises(RuntimeError):
            await EventBus().publish(event)

    @pytest.mark.asyncio
    @patch('core.event_bus.nats.connect')
    async def test_subscribe(self, mock_connect):
        """Test event subscription"""
        mock_nc = AsyncMock()
        mock_nc.is_connected = True
        mock_sub = MagicMock()
        mock_sub._id = 1
        mock_nc.subscribe.return_value = mock_sub
        mock_connect.return_value = mock_nc

        bus = EventBus()
        await bus.connect()

        sub_id = await bus.subscribe("dodobot.presence.snapshot", AsyncMock())

        assert sub_id == 1
        mock_nc.subscribe.assert_called_once()

    @pytest.mark.asyncio
    async def test_subscribe_not_connected(self):
        with pytest.raises(RuntimeError):
            await EventBus().subscribe("s", AsyncMock())


@pytest.mark.unit
@pytest.mark.core
class TestEventBusWithMockNats:
    """Delivery through the mock NATS client"""

    @pytest.mark.asyncio
    async def test_delivery(self, event_bus, mock_nats):
        received = []
        await event_bus.subscribe("dodobot.events.>", received.append)

        await event_bus.publish(Event(subject="dodobot.events.presence.join",
                                      event_type="presence.join", source="t", data={}))
        await asyncio.wait_for(mock_nats.flush(), timeout=1.0)

        assert [e.event_type for e in received] == ["presence.join"]

    @pytest.mark.asyncio
    async def test_malformed_message_dropped(self, event_bus, mock_nats):
        received = []
        await event_bus.subscribe("s", received.append)

        await mock_nats.publish("s", b"\xff\xfe")
        await mock_nats.publish("s", b'{"subject": "s"}')
        await asyncio.wait_for(mock_nats.flush(), timeout=1.0)

        assert received == []

    @pytest.mark.asyncio
    async def test_callback_error_does_not_stop_delivery(self, event_bus, mock_nats):
        received = []

        async def handler(event):
            received.append(event)
            if len(received) == 1:
                raise RuntimeError("boom")

        await event_bus.subscribe("s", handler)

        for _ in range(2):
            await event_bus.publish(Event(subject="s", event_type="t", source="x", data={}))
        await asyncio.wait_for(mock_nats.flush(), timeout=1.0)

        assert len(received) == 2

    @pytest.mark.asyncio
    async def test_unsubscribe(self, event_bus, mock_nats):
        received = []
        await event_bus.subscribe("s", received.append)
        await event_bus.unsubscribe("s")

        await event_bus.publish(Event(subject="s", event_type="t", source="x", data={}))

        assert received == []
        assert "s" not in mock_nats.subscriptions
