"""
plugins/presence/differ.py

Join / leave / move detection between two presence generations.

Both player -> server indices are built before any transition is
emitted, so a player who changed servers is reported as exactly one
move, never as a leave plus a join. Only index contents matter, not the
order servers or players were reported in.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .snapshot import Generation, copy_generation


class TransitionKind(Enum):
    """Kind of presence change"""
    JOIN = "join"
    LEAVE = "leave"
    MOVE = "move"


@dataclass(frozen=True)
class Transition:
    """
    One presence change.

    Attributes:
        kind: join, leave or move.
        player: Player name.
        server: Server joined, left, or moved to.
        old_server: Server moved from (moves only).
    """
    kind: TransitionKind
    player: str
    server: str
    old_server: Optional[str] = None


def build_index(generation: Optional[Generation]) -> Dict[str, str]:
    """Map every player to the server they are on."""
    index: Dict[str, str] = {}
    if not generation:
        return index

    for server, snapshot in generation.items():
        for player in snapshot.players:
            index[player] = server
    return index


def diff_snapshots(previous: Optional[Generation], current: Generation) -> List[Transition]:
    """
    Compute presence transitions between two generations.

    Args:
        previous: Last generation, or None on the first cycle.
        current: New generation.

    Returns:
        Transitions sorted by player name.
    """
    prev_index = build_index(previous)
    curr_index = build_index(current)

    transitions = []

    for player, server in curr_index.items():
        old_server = prev_index.get(player)
        if old_server is None:
            transitions.append(Transition(TransitionKind.JOIN, player, server))
        elif old_server != server:
            transitions.append(Transition(TransitionKind.MOVE, player, server, old_server))

    for player, old_server in prev_index.items():
        if player not in curr_index:
            transitions.append(Transition(TransitionKind.LEAVE, player, old_server))

    transitions.sort(key=lambda t: (t.player, t.kind.value))
    return transitions


class PresenceDiffer:
    """
    Stateful differ that remembers the previous generation.

    Attributes:
        previous: Copy of the last generation passed to update(),
            None before the first cycle.
    """

    def __init__(self, previous: Optional[Generation] = None):
        self.previous: Optional[Generation] = copy_generation(previous) if previous else None
        self.logger = logging.getLogger(f"{__name__}.PresenceDiffer")

    def update(self, current: Generation) -> List[Transition]:
        """
        Diff current against the retained generation, then retain a copy
        of current for the next cycle.
        """
        transitions = diff_snapshots(self.previous, current)
        self.previous = copy_generation(current)

        if transitions:
            self.logger.debug(f"{len(transitions)} presence transitions")
        return transitions
