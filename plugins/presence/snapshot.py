"""
plugins/presence/snapshot.py

Server presence snapshots.

A generation is a dict of server name -> ServerSnapshot, always a full
picture of every monitored server, never a delta.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

Generation = Dict[str, "ServerSnapshot"]


@dataclass
class ServerSnapshot:
    """
    Players present on one server at one point in time.

    Attributes:
        name: Server name.
        players: Player names, in the order the server reported them.
        reachable: False when the server could not be queried.
    """
    name: str
    players: List[str] = field(default_factory=list)
    reachable: bool = True

    def copy(self) -> "ServerSnapshot":
        """Copy with its own player list."""
        return ServerSnapshot(name=self.name, players=list(self.players), reachable=self.reachable)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "players": list(self.players), "reachable": self.reachable}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: str = None) -> "ServerSnapshot":
        """
        Create a snapshot from a dictionary.

        Args:
            data: Dictionary with "players" and optionally "name" and
                "reachable" (defaults to True).
            name: Server name when it is the key of a mapping.

        Raises:
            ValueError: If data is not a mapping, the name is missing,
                players is not a list or reachable is not a boolean.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Server snapshot must be an object, got {type(data).__name__}")

        server_name = data.get("name") or name
        if not server_name:
            raise ValueError("Server snapshot without a name")

        players = data.get("players") or []
        if not isinstance(players, list):
            raise ValueError(f"Players of server {server_name!r} must be a list")

        return cls(
            name=str(server_name),
            players=[str(p) for p in players],
            reachable=_parse_reachable(data.get("reachable", True), server_name),
        )


def _parse_reachable(value: Any, server_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"Reachable flag of server {server_name!r} must be a boolean")


def parse_generation(data: Any) -> Generation:
    """
    Decode a generation from a list of server dicts or a name-keyed mapping.

    Raises:
        ValueError: If the payload has neither shape.
    """
    if isinstance(data, dict):
        servers = [ServerSnapshot.from_dict({} if v is None else v, name=k) for k, v in data.items()]
    elif isinstance(data, list):
        servers = [ServerSnapshot.from_dict(item) for item in data]
    else:
        raise ValueError(f"Unsupported snapshot payload: {type(data).__name__}")

    return {server.name: server for server in servers}


def copy_generation(generation: Generation) -> Generation:
    """Deep copy of a generation."""
    return {name: snapshot.copy() for name, snapshot in generation.items()}
