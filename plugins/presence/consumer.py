"""
plugins/presence/consumer.py

Serialized processing of presence generations.

Producers submit full generations into a bounded queue; a single
consumer task diffs, notifies, publishes and persists them one at a
time, in submission order.
"""

import asyncio
import logging
from typing import List, Optional

from core.event_bus import Event
from core.subjects import EventTypes, Subjects
from lib.connection import MessagePayload, MessagingAdapter

from .differ import PresenceDiffer, Transition, TransitionKind
from .pointer import MessagePointer
from .publisher import StatusPublisher
from .snapshot import Generation, copy_generation


def render_transition(transition: Transition) -> str:
    """Plain text join / leave / move notice."""
    if transition.kind == TransitionKind.JOIN:
        return f"[{transition.server}] {transition.player} joined the server"
    if transition.kind == TransitionKind.LEAVE:
        return f"[{transition.server}] {transition.player} left the server"
    return f"[{transition.old_server} -> {transition.server}] {transition.player} moved servers"


class PresenceConsumer:
    """
    Consumes presence generations.

    Per generation: diff against the previous one, post join/leave/move
    notices, optionally fan transitions out on the event bus, publish the
    status message and persist its ID. A failed publish keeps the
    previous message ID.

    Args:
        differ: Presence differ holding the previous generation.
        publisher: Status message publisher.
        pointer: Persistent status message ID.
        messenger: Adapter used for join/leave notices.
        join_leave_channel: Channel ID for notices.
        show_join_leave: Post notices at all.
        queue_size: Capacity of the intake queue.
        event_bus: Optional EventBus to publish transitions on.
    """

    def __init__(
        self,
        differ: PresenceDiffer,
        publisher: StatusPublisher,
        pointer: MessagePointer,
        messenger: MessagingAdapter,
        join_leave_channel: str,
        show_join_leave: bool = True,
        queue_size: int = 100,
        event_bus=None,
    ):
        self.differ = differ
        self.publisher = publisher
        self.pointer = pointer
        self.messenger = messenger
        self.join_leave_channel = join_leave_channel
        self.show_join_leave = show_join_leave
        self.event_bus = event_bus

        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self.message_id: Optional[str] = None
        self.running = False
        self._task: Optional[asyncio.Task] = None
        self.logger = logging.getLogger(f"{__name__}.PresenceConsumer")

    async def start(self) -> None:
        """Load the persisted message ID and start the consumer task."""
        if self.running:
            self.logger.warning("Presence consumer already running")
            return

        self.message_id = await asyncio.to_thread(self.pointer.read)
        if self.message_id:
            self.logger.info(f"Using persisted status message {self.message_id}")

        self.running = True
        self._task = asyncio.create_task(self._consume_loop())
        self.logger.info("Presence consumer started")

    async def stop(self) -> None:
        """Stop the consumer task. Queued generations are discarded."""
        if not self.running:
            return

        self.running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self.logger.info("Presence consumer stopped")

    async def submit(self, generation: Generation) -> None:
        """
        Queue a generation for processing.

        Waits while the queue is full. The generation is copied so the
        producer may keep mutating its own structures.
        """
        await self.queue.put(copy_generation(generation))

    async def process(self, generation: Generation) -> List[Transition]:
        """
        Run one full cycle for a generation.

        Returns:
            The transitions detected against the previous generation.
        """
        transitions = self.differ.update(generation)

        for transition in transitions:
            if self.show_join_leave:
                await self._notify(transition)
            if self.event_bus is not None:
                await self._emit(transition)

        try:
            new_id = await self.publisher.publish(generation, self.message_id)
        except Exception as e:
            self.logger.error(f"Failed to publish status message: {e}")
            return transitions

        await asyncio.to_thread(self.pointer.write, new_id)
        self.message_id = new_id

        return transitions

    async def _notify(self, transition: Transition) -> None:
        text = render_transition(transition)
        try:
            await self.messenger.send(self.join_leave_channel, MessagePayload(content=text))
        except Exception as e:
            self.logger.error(f"Failed to post presence notice '{text}': {e}")

    async def _emit(self, transition: Transition) -> None:
        event = Event(
            subject=Subjects.presence_event_subject(transition.kind.value),
            event_type=EventTypes.presence(transition.kind.value),
            source="presence",
            data={
                "player": transition.player,
                "server": transition.server,
                "old_server": transition.old_server,
            },
        )
        try:
            await self.event_bus.publish(event)
        except Exception as e:
            self.logger.warning(f"Failed to emit {event.event_type} for {transition.player}: {e}")

    async def _consume_loop(self) -> None:
        self.logger.debug("Consume loop started")

        while self.running:
            generation = await self.queue.get()
            try:
                await self.process(generation)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.logger.exception(f"Error processing presence generation: {e}")
            finally:
                self.queue.task_done()

        self.logger.debug("Consume loop ended")
