"""
Dou Dizhu deck: 54 cards (4 suits × 13 ranks, Small Joker, Big Joker).
Strength depends on rank only: 3 < 4 < ... < A < 2 < Small Joker < Big Joker.
Suits only break ties for display.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Optional

from .errors import InvalidCardToken


class Suit(IntEnum):
    """Display precedence only (diamonds lowest, spades highest)."""
    DIAMONDS = 1
    CLUBS = 2
    HEARTS = 3
    SPADES = 4


# Rank values: 3..10 as-is, J=11, Q=12, K=13, A=14, 2=15, jokers 16/17
RANK_J = 11
RANK_Q = 12
RANK_K = 13
RANK_A = 14
RANK_2 = 15
SMALL_JOKER = 16
BIG_JOKER = 17

# Straights and sequences live in [3..A]
SEQUENCE_MIN = 3
SEQUENCE_MAX = RANK_A

RANK_LABELS = {
    3: "3", 4: "4", 5: "5", 6: "6", 7: "7", 8: "8", 9: "9", 10: "10",
    RANK_J: "J", RANK_Q: "Q", RANK_K: "K", RANK_A: "A", RANK_2: "2",
    SMALL_JOKER: "LJ", BIG_JOKER: "BJ",
}
LABEL_TO_RANK = {v: k for k, v in RANK_LABELS.items() if k < SMALL_JOKER}

SUIT_SYMBOLS = {
    Suit.SPADES: "♠",
    Suit.HEARTS: "♥",
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
}
SYMBOL_TO_SUIT = {v: k for k, v in SUIT_SYMBOLS.items()}
SYMBOL_TO_SUIT.update({"S": Suit.SPADES, "H": Suit.HEARTS, "C": Suit.CLUBS, "D": Suit.DIAMONDS})

# Joker spellings accepted from clients, including the legacy glyph tokens
JOKER_TOKENS = {
    "LJ": SMALL_JOKER,
    "BJ": BIG_JOKER,
    "小王": SMALL_JOKER,
    "大王": BIG_JOKER,
    "🃏小王": SMALL_JOKER,
    "🃏大王": BIG_JOKER,
}


@dataclass(frozen=True)
class Card:
    """
    A single card. Suited cards carry a Suit and a rank value in 3..15;
    the two jokers carry rank 16 or 17 and no suit.

    Equality is by identity (rank and suit); the ordering operators compare
    rank only, so two cards of the same rank are neither < nor > each other.
    """

    rank: int
    suit: Optional[Suit] = None

    def __post_init__(self) -> None:
        if self.rank in (SMALL_JOKER, BIG_JOKER):
            if self.suit is not None:
                raise ValueError("Jokers have no suit")
        elif 3 <= self.rank <= RANK_2:
            if self.suit is None:
                raise ValueError(f"Rank {self.rank} needs a suit")
        else:
            raise ValueError(f"Unknown rank value: {self.rank}")

    def is_joker(self) -> bool:
        return self.suit is None

    def __lt__(self, other: "Card") -> bool:
        return self.rank < other.rank

    def __le__(self, other: "Card") -> bool:
        return self.rank <= other.rank

    def __gt__(self, other: "Card") -> bool:
        return self.rank > other.rank

    def __ge__(self, other: "Card") -> bool:
        return self.rank >= other.rank

    def __str__(self) -> str:
        if self.suit is None:
            return RANK_LABELS[self.rank]
        return f"{SUIT_SYMBOLS[self.suit]}{RANK_LABELS[self.rank]}"

    def __repr__(self) -> str:
        return str(self)


SMALL_JOKER_CARD = Card(SMALL_JOKER)
BIG_JOKER_CARD = Card(BIG_JOKER)


def parse(token: str) -> Card:
    """
    Parse a card token such as ``"♠3"``, ``"H10"``, ``"♦A"``, ``"LJ"`` (little joker) or ``"BJ"`` (big joker).
    Raises InvalidCardToken for anything else; never guesses a default.
    """
    if not isinstance(token, str):
        raise InvalidCardToken(f"Card token must be a string, got {type(token).__name__}")
    raw = token.strip()
    if not raw:
        raise InvalidCardToken("Empty card token")
    joker = JOKER_TOKENS.get(raw.upper()) or JOKER_TOKENS.get(raw)
    if joker is not None:
        return Card(joker)
    suit = SYMBOL_TO_SUIT.get(raw[0].upper())
    if suit is None:
        raise InvalidCardToken(f"Unknown suit in card token {token!r}")
    rank = LABEL_TO_RANK.get(raw[1:].upper())
    if rank is None:
        raise InvalidCardToken(f"Unknown rank in card token {token!r}")
    return Card(rank, suit)


def parse_cards(tokens: Iterable[str | Card]) -> list[Card]:
    """Parse a list of tokens; Card instances pass through unchanged."""
    return [t if isinstance(t, Card) else parse(t) for t in tokens]


def rank_value(card: Card) -> int:
    return card.rank


def display_key(card: Card) -> tuple[int, int]:
    """Sort key: rank ascending, then suit precedence (jokers have none)."""
    return (card.rank, int(card.suit) if card.suit is not None else 0)


def compare_for_display(a: Card, b: Card) -> int:
    """Three-way comparison matching display_key: -1, 0 or 1."""
    ka, kb = display_key(a), display_key(b)
    return (ka > kb) - (ka < kb)


def sort_cards(cards: Iterable[Card]) -> list[Card]:
    return sorted(cards, key=display_key)


def cards_to_tokens(cards: Iterable[Card]) -> list[str]:
    return [str(c) for c in cards]


def make_deck_54() -> list[Card]:
    """Build the full 54-card deck in display order."""
    deck: list[Card] = []
    for rank in range(3, RANK_2 + 1):
        for s in Suit:
            deck.append(Card(rank, s))
    deck.append(SMALL_JOKER_CARD)
    deck.append(BIG_JOKER_CARD)
    return deck
