"""
Bidding for the landlord seat.
Each player, in turn order, accepts or declines once; the first acceptance wins.
If all three decline, nobody is landlord and the caller redeals.
"""
from __future__ import annotations

from typing import Sequence

from .errors import NotYourTurn


class BiddingRound:
    """
    One accept/decline round over a fixed order of player ids.
    ``record`` is the only mutator; it refuses bids out of turn.
    """

    def __init__(self, order: Sequence[str]):
        if not order:
            raise ValueError("Bidding needs at least one player")
        self.order = list(order)
        self.history: list[tuple[str, bool]] = []
        self.landlord: str | None = None

    @property
    def current(self) -> str | None:
        """Player expected to bid next, or None when the round is over."""
        if self.finished:
            return None
        return self.order[len(self.history)]

    @property
    def finished(self) -> bool:
        return self.landlord is not None or len(self.history) == len(self.order)

    @property
    def all_declined(self) -> bool:
        return self.landlord is None and len(self.history) == len(self.order)

    def record(self, player_id: str, accept: bool) -> None:
        expected = self.current
        if expected is None:
            raise NotYourTurn("Bidding round is already over")
        if player_id != expected:
            raise NotYourTurn(f"It is {expected}'s turn to bid, not {player_id}'s")
        self.history.append((player_id, bool(accept)))
        if accept:
            self.landlord = player_id

