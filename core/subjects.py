"""
NATS Subject Hierarchy for DodoBot

Subject Structure:
    dodobot.{category}.{specifics}...

Categories:
    - presence: Presence snapshots pushed by the game server poller
    - events: Events emitted by the bot (player transitions)

Examples:
    dodobot.presence.snapshot
    dodobot.events.presence.join
"""


class Subjects:
    """
    NATS subject constants

    Use these constants to keep producers and consumers consistent.
    """

    BASE = "dodobot"

    PRESENCE = f"{BASE}.presence"
    EVENTS = f"{BASE}.events"

    # Default subject for incoming presence snapshots
    PRESENCE_SNAPSHOT = f"{PRESENCE}.snapshot"

    @staticmethod
    def event_subject(event: str) -> str:
        """Build subject for an event emitted by the bot"""
        return f"{Subjects.EVENTS}.{event}"

    @staticmethod
    def presence_event_subject(kind: str) -> str:
        """Build subject for a presence transition (join, leave, move)"""
        return Subjects.event_subject(f"presence.{kind}")


class EventTypes:
    """Event type strings carried in Event.event_type"""

    PRESENCE_JOIN = "presence.join"
    PRESENCE_LEAVE = "presence.leave"
    PRESENCE_MOVE = "presence.move"

    @staticmethod
    def presence(kind: str) -> str:
        """Event type for a presence transition kind (join, leave, move)"""
        return {
            "join": EventTypes.PRESENCE_JOIN,
            "leave": EventTypes.PRESENCE_LEAVE,
            "move": EventTypes.PRESENCE_MOVE,
        }[kind]
