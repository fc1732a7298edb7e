"""
Observation encoding for bots and learning code.

Cards are encoded by rank only: suits carry no rule significance, so a hand is
a 15-slot count vector (ranks 3..A, 2, Small Joker, Big Joker). Per-seat data
is always ordered relative to the observer: self, next seat, previous seat.

Layout of ``encode_observation`` (``OBSERVATION_SIZE`` = 84 floats):
  - 0..14   own hand counts
  - 15..59  cards already played by self / next / previous (3 × 15)
  - 60..74  counts of the play currently on the table (zeros when leading)
  - 75..77  remaining hand sizes, self / next / previous
  - 78..80  observer role one-hot (unassigned, landlord, farmer)
  - 81..83  landlord seat one-hot, relative to the observer
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional

import numpy as np

from .deck import BIG_JOKER, Card
from .deal import PLAYER_COUNT
from .hints import all_suggestions
from .patterns import Pattern
from .state import Role

if TYPE_CHECKING:  # pragma: no cover - import cycle guard for type checking only
    from .game import MatchSession


MIN_RANK: int = 3
RANK_SLOTS: int = BIG_JOKER - MIN_RANK + 1  # 15
_ROLES: List[Role] = [Role.UNASSIGNED, Role.LANDLORD, Role.FARMER]
OBSERVATION_SIZE: int = RANK_SLOTS * (1 + PLAYER_COUNT + 1) + PLAYER_COUNT + len(_ROLES) + PLAYER_COUNT


def rank_slot(rank: int) -> int:
    return rank - MIN_RANK


def rank_counts(cards: Iterable[Card]) -> np.ndarray:
    """Count of cards per rank, as an int8 vector of ``RANK_SLOTS`` entries."""
    counts = np.zeros(RANK_SLOTS, dtype=np.int8)
    for c in cards:
        counts[rank_slot(c.rank)] += 1
    return counts


def _relative_seats(session: "MatchSession", player_id: str) -> List[str]:
    seat = session.players[player_id].seat
    return [session.order[(seat + k) % PLAYER_COUNT] for k in range(PLAYER_COUNT)]


def encode_observation(session: "MatchSession", player_id: str) -> np.ndarray:
    """Flat float32 view of the match as seen by ``player_id``. Read-only."""
    seats = _relative_seats(session, player_id)
    player = session.players[player_id]

    played = {pid: np.zeros(RANK_SLOTS, dtype=np.int8) for pid in seats}
    for record in session.play_history:
        played[record.player_id] += rank_counts(record.cards)

    on_table = rank_counts(session.last_play.cards) if session.last_play is not None else np.zeros(RANK_SLOTS, dtype=np.int8)
    hand_sizes = [len(session.players[pid].hand) for pid in seats]

    role = np.zeros(len(_ROLES), dtype=np.float32)
    role[_ROLES.index(player.role)] = 1.0
    landlord = np.zeros(PLAYER_COUNT, dtype=np.float32)
    if session.landlord_id is not None:
        landlord[seats.index(session.landlord_id)] = 1.0

    obs = np.concatenate(
        [
            rank_counts(player.hand),
            *(played[pid] for pid in seats),
            on_table,
            np.array(hand_sizes),
            role,
            landlord,
        ]
    ).astype(np.float32)
    assert obs.shape[0] == OBSERVATION_SIZE
    return obs


def legal_play_mask(hand: Iterable[Card], last_pattern: Optional[Pattern]) -> np.ndarray:
    """Boolean vector over rank slots: True where the rank appears in at least one legal play."""
    mask = np.zeros(RANK_SLOTS, dtype=bool)
    for combo in all_suggestions(list(hand), last_pattern):
        for c in combo:
            mask[rank_slot(c.rank)] = True
    return mask


__all__ = [
    "RANK_SLOTS",
    "OBSERVATION_SIZE",
    "rank_slot",
    "rank_counts",
    "encode_observation",
    "legal_play_mask",
]
