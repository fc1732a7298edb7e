"""
Outbound notifications emitted by a match session.

A listener is any callable taking one event. Every event serializes to a
JSON-compatible dict via ``to_dict()`` (``{"event": <name>, ...fields}``),
which is all a transport layer needs to forward it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, List, Optional, Type, TypeVar, Union

from .deck import Card, cards_to_tokens
from .patterns import Pattern
from .scoring import Settlement
from .state import Phase, Role


@dataclass(frozen=True)
class PhaseChanged:
    name: ClassVar[str] = "phase_changed"
    phase: Phase

    def to_dict(self) -> dict:
        return {"event": self.name, "phase": self.phase.value}


@dataclass(frozen=True)
class CardsDealt:
    """Private to ``player_id``: their new hand after a (re)deal."""
    name: ClassVar[str] = "cards_dealt"
    player_id: str
    cards: tuple[Card, ...]
    deal_number: int

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "player_id": self.player_id,
            "cards": cards_to_tokens(self.cards),
            "deal_number": self.deal_number,
        }


@dataclass(frozen=True)
class TurnChanged:
    name: ClassVar[str] = "turn_changed"
    player_id: str
    timeout_ms: int
    can_pass: bool = False

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "player_id": self.player_id,
            "timeout_ms": self.timeout_ms,
            "can_pass": self.can_pass,
        }


@dataclass(frozen=True)
class BidPlaced:
    name: ClassVar[str] = "bid_placed"
    player_id: str
    accept: bool
    automatic: bool = False

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "player_id": self.player_id,
            "accept": self.accept,
            "automatic": self.automatic,
        }


@dataclass(frozen=True)
class LandlordAssigned:
    name: ClassVar[str] = "landlord_assigned"
    player_id: str
    bottom_cards: tuple[Card, ...]
    forced: bool = False

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "player_id": self.player_id,
            "bottom_cards": cards_to_tokens(self.bottom_cards),
            "forced": self.forced,
        }


@dataclass(frozen=True)
class CardsPlayed:
    name: ClassVar[str] = "cards_played"
    player_id: str
    cards: tuple[Card, ...]
    pattern: Pattern
    remaining: int
    automatic: bool = False

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "player_id": self.player_id,
            "cards": cards_to_tokens(self.cards),
            "pattern": self.pattern.to_dict(),
            "remaining": self.remaining,
            "automatic": self.automatic,
        }


@dataclass(frozen=True)
class PlayerPassed:
    name: ClassVar[str] = "player_passed"
    player_id: str
    automatic: bool = False

    def to_dict(self) -> dict:
        return {"event": self.name, "player_id": self.player_id, "automatic": self.automatic}


@dataclass(frozen=True)
class MatchFinished:
    name: ClassVar[str] = "match_finished"
    winner_id: str
    winner_role: Role
    settlement: Settlement

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "winner_id": self.winner_id,
            "winner_role": self.winner_role.value,
            "settlement": self.settlement.to_dict(),
        }


MatchEvent = Union[
    PhaseChanged,
    CardsDealt,
    TurnChanged,
    BidPlaced,
    LandlordAssigned,
    CardsPlayed,
    PlayerPassed,
    MatchFinished,
]
Listener = Callable[[MatchEvent], None]

E = TypeVar("E")


class EventLog:
    """Listener that keeps every event, in order. Handy for tests and replays."""

    def __init__(self) -> None:
        self.events: List[MatchEvent] = []

    def __call__(self, event: MatchEvent) -> None:
        self.events.append(event)

    def names(self) -> List[str]:
        return [e.name for e in self.events]

    def of_type(self, cls: Type[E]) -> List[E]:
        return [e for e in self.events if isinstance(e, cls)]

    def last(self, cls: Type[E]) -> Optional[E]:
        found = self.of_type(cls)
        return found[-1] if found else None

    def clear(self) -> None:
        self.events.clear()


__all__ = [
    "PhaseChanged",
    "CardsDealt",
    "TurnChanged",
    "BidPlaced",
    "LandlordAssigned",
    "CardsPlayed",
    "PlayerPassed",
    "MatchFinished",
    "MatchEvent",
    "Listener",
    "EventLog",
]
