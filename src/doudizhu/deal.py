"""
Distribution (deal) for 3 players: 17 cards each, 3 bottom cards for the landlord.
Seats are indices 0..2 in play order (each seat passes the turn to seat + 1).
"""
from __future__ import annotations

import random
from typing import NamedTuple

from .deck import Card, make_deck_54, sort_cards

PLAYER_COUNT = 3
HAND_SIZE = 17
BOTTOM_SIZE = 3
DECK_SIZE = PLAYER_COUNT * HAND_SIZE + BOTTOM_SIZE  # 54


class Deal(NamedTuple):
    """Result of a deal. Hands are sorted for display; bottom is kept in deal order."""
    hands: tuple[list[Card], list[Card], list[Card]]
    bottom: list[Card]


def deal_3p(deck: list[Card] | None = None, rng: random.Random | None = None) -> Deal:
    """
    Shuffle and deal one card at a time to seats 0, 1, 2; the last 3 cards form the bottom.
    """
    if deck is None:
        deck = make_deck_54()
    if rng is None:
        rng = random.Random()
    if len(deck) != DECK_SIZE:
        raise ValueError(f"Expected a {DECK_SIZE}-card deck, got {len(deck)}")
    deck = list(deck)
    rng.shuffle(deck)

    hands: list[list[Card]] = [[], [], []]
    for i in range(PLAYER_COUNT * HAND_SIZE):
        hands[i % PLAYER_COUNT].append(deck[i])
    bottom = deck[PLAYER_COUNT * HAND_SIZE:]

    return Deal(
        hands=(sort_cards(hands[0]), sort_cards(hands[1]), sort_cards(hands[2])),
        bottom=bottom,
    )


def next_seat(seat: int) -> int:
    """Turn order: 0 -> 1 -> 2 -> 0."""
    return (seat + 1) % PLAYER_COUNT


def seat_order(first: int) -> list[int]:
    """All seats in turn order starting from ``first``."""
    return [(first + i) % PLAYER_COUNT for i in range(PLAYER_COUNT)]


def first_to_bid(rng: random.Random) -> int:
    """The opening bidder of a match is drawn at random."""
    return rng.randrange(PLAYER_COUNT)
