"""
Baseline bots and the policy interface used by the simulator.

A ``Policy`` decides two things: whether to accept the landlord bid, and what
to play on its turn (``None`` meaning pass). Both agents only ever return plays
taken from the hint engine, so their moves are always legal.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .deck import RANK_2, Card
from .hints import all_suggestions, find_bombs, find_rocket, group_by_rank, whole_hand_beats
from .patterns import Pattern


class Policy(Protocol):
    """Decision policy for one seat."""

    def choose_bid(self, hand: Sequence[Card]) -> bool:
        """True to accept becoming landlord."""

    def choose_play(
        self,
        hand: Sequence[Card],
        last_pattern: Optional[Pattern],
        can_pass: bool,
    ) -> Optional[List[Card]]:
        """
        Cards to play, or None to pass. Must not return None when ``can_pass``
        is false; callers validate the play anyway.
        """


@dataclass
class RandomAgent:
    """
    Picks uniformly among the legal suggestions (plus passing when allowed)
    and accepts the bid with probability ``bid_probability``.
    """

    seed: int | None = None
    bid_probability: float = 0.5

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def choose_bid(self, hand: Sequence[Card]) -> bool:
        return self._rng.random() < self.bid_probability

    def choose_play(
        self,
        hand: Sequence[Card],
        last_pattern: Optional[Pattern],
        can_pass: bool,
    ) -> Optional[List[Card]]:
        options: List[Optional[List[Card]]] = list(all_suggestions(hand, last_pattern))
        if can_pass:
            options.append(None)
        if not options:
            raise ValueError("No legal play available for RandomAgent")
        return self._rng.choice(options)


@dataclass
class HintAgent:
    """
    Greedy bot: finishes with the whole hand when it can, otherwise plays the
    first hint, otherwise passes. Bids on a rocket, a bomb, or at least two 2s.
    """

    min_twos_to_bid: int = 2

    def choose_bid(self, hand: Sequence[Card]) -> bool:
        groups = group_by_rank(hand)
        if find_rocket(groups) or find_bombs(groups):
            return True
        return len(groups.get(RANK_2, [])) >= self.min_twos_to_bid

    def choose_play(
        self,
        hand: Sequence[Card],
        last_pattern: Optional[Pattern],
        can_pass: bool,
    ) -> Optional[List[Card]]:
        whole = whole_hand_beats(hand, last_pattern)
        if whole is not None:
            return whole
        suggestions = all_suggestions(hand, last_pattern)
        if suggestions:
            return suggestions[0]
        if not can_pass:
            # Leading always has at least a single available
            raise ValueError("No legal play available for HintAgent")
        return None


def make_agent(kind: str, seed: int | None = None) -> Policy:
    if kind == "hint":
        return HintAgent()
    if kind == "random":
        return RandomAgent(seed=seed)
    raise ValueError(f"Unknown agent kind: {kind!r}")


__all__ = ["Policy", "RandomAgent", "HintAgent", "make_agent"]
