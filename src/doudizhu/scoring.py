"""
Settlement: zero-sum score deltas at the end of a match.

multiplier = 2 (landlord stake) × 3^bombs × 8^rockets × 16 on spring / anti-spring.
The landlord wins or loses base × multiplier; each farmer pays or receives half.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .patterns import PatternType
from .state import PlayRecord, Role

LANDLORD_DOUBLING = 1
BOMB_FACTOR = 3
ROCKET_FACTOR = 8
SPRING_FACTOR = 16


@dataclass(frozen=True)
class Settlement:
    base_score: int
    multiplier: int
    bomb_count: int
    rocket_count: int
    spring: bool
    anti_spring: bool
    landlord_won: bool
    deltas: dict[str, int] = field(default_factory=dict)

    @property
    def total_score(self) -> int:
        """Stake won or lost by the landlord (always positive)."""
        return self.base_score * self.multiplier

    def to_dict(self) -> dict:
        return {
            "base_score": self.base_score,
            "multiplier": self.multiplier,
            "total_score": self.total_score,
            "bomb_count": self.bomb_count,
            "rocket_count": self.rocket_count,
            "spring": self.spring,
            "anti_spring": self.anti_spring,
            "landlord_won": self.landlord_won,
            "deltas": dict(self.deltas),
        }


def count_power_plays(play_history: Sequence[PlayRecord]) -> tuple[int, int]:
    """(bombs, rockets) played over the whole match."""
    bombs = sum(1 for r in play_history if r.pattern.type == PatternType.BOMB)
    rockets = sum(1 for r in play_history if r.pattern.type == PatternType.ROCKET)
    return bombs, rockets


def is_spring(play_history: Sequence[PlayRecord], landlord_id: str, landlord_won: bool) -> bool:
    """Landlord won and no farmer ever completed a play."""
    return landlord_won and all(r.player_id == landlord_id for r in play_history)


def is_anti_spring(play_history: Sequence[PlayRecord], landlord_id: str, landlord_won: bool) -> bool:
    """Farmers won and the landlord played exactly once."""
    if landlord_won:
        return False
    return sum(1 for r in play_history if r.player_id == landlord_id) == 1


def match_multiplier(bombs: int, rockets: int, spring_or_anti: bool) -> int:
    mult = (2 ** LANDLORD_DOUBLING) * (BOMB_FACTOR ** bombs) * (ROCKET_FACTOR ** rockets)
    if spring_or_anti:
        mult *= SPRING_FACTOR
    return mult


def settle(
    play_history: Sequence[PlayRecord],
    landlord_id: str,
    winner_role: Role,
    player_ids: Sequence[str],
    base_score: int = 1,
) -> Settlement:
    """
    Compute per-player deltas. The landlord's delta equals minus the sum of the
    farmers' deltas, so the total is always zero.
    """
    if landlord_id not in player_ids:
        raise ValueError(f"Landlord {landlord_id} is not one of {list(player_ids)}")
    if winner_role not in (Role.LANDLORD, Role.FARMER):
        raise ValueError(f"Winner role must be landlord or farmer, got {winner_role}")

    landlord_won = winner_role == Role.LANDLORD
    bombs, rockets = count_power_plays(play_history)
    spring = is_spring(play_history, landlord_id, landlord_won)
    anti_spring = is_anti_spring(play_history, landlord_id, landlord_won)
    multiplier = match_multiplier(bombs, rockets, spring or anti_spring)

    stake = base_score * multiplier
    farmer_share = stake // 2  # multiplier is even, so this is exact
    sign = 1 if landlord_won else -1
    deltas: dict[str, int] = {}
    for pid in player_ids:
        deltas[pid] = -sign * farmer_share
    deltas[landlord_id] = sign * farmer_share * (len(player_ids) - 1)

    return Settlement(
        base_score=base_score,
        multiplier=multiplier,
        bomb_count=bombs,
        rocket_count=rockets,
        spring=spring,
        anti_spring=anti_spring,
        landlord_won=landlord_won,
        deltas=deltas,
    )
