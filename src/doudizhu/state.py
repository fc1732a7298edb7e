"""
Match data model: phases, roles, players and the immutable play records.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .deck import Card, cards_to_tokens
from .patterns import Pattern


class Phase(Enum):
    WAITING = "waiting"
    BIDDING = "bidding"
    PLAYING = "playing"
    FINISHED = "finished"


class Role(Enum):
    UNASSIGNED = "unassigned"
    LANDLORD = "landlord"
    FARMER = "farmer"


@dataclass(frozen=True)
class PlayRecord:
    """One accepted play. Appended to the history, never changed afterwards."""

    player_id: str
    cards: tuple[Card, ...]
    pattern: Pattern
    turn_index: int
    automatic: bool = False

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id,
            "cards": cards_to_tokens(self.cards),
            "pattern": self.pattern.to_dict(),
            "turn_index": self.turn_index,
            "automatic": self.automatic,
        }


@dataclass
class Player:
    """A seat. The hand is only mutated by the match session."""

    id: str
    seat: int
    hand: list[Card] = field(default_factory=list)
    role: Role = Role.UNASSIGNED
    ready: bool = False

    @property
    def remaining_hand_size(self) -> int:
        return len(self.hand)


@dataclass(frozen=True)
class PlayerView:
    """Read-only snapshot handed to outside callers."""

    id: str
    remaining_hand_size: int
    role: Role
    is_current_turn: bool
