"""
Pattern classifier: turns a set of cards into a typed, comparable play.
Bomb and Rocket beat every other type; Rocket beats every Bomb.
Other types only compare against the same type, length and kicker kind.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

from .deck import BIG_JOKER, SEQUENCE_MAX, SEQUENCE_MIN, SMALL_JOKER, Card


class PatternType(Enum):
    SINGLE = "single"
    PAIR = "pair"
    TRIPLE = "triple"
    TRIPLE_WITH_SINGLE = "triple_with_single"
    TRIPLE_WITH_PAIR = "triple_with_pair"
    FOUR_WITH_TWO = "four_with_two"
    STRAIGHT = "straight"
    PAIR_SEQUENCE = "pair_sequence"
    AIRPLANE = "airplane"
    AIRPLANE_WITH_WINGS = "airplane_with_wings"
    BOMB = "bomb"
    ROCKET = "rocket"


POWER_TYPES = frozenset({PatternType.BOMB, PatternType.ROCKET})

MIN_STRAIGHT_LEN = 5
MIN_PAIR_SEQUENCE_PAIRS = 3
MIN_AIRPLANE_TRIPLES = 2

# Kicker kinds for FourWithTwo and AirplaneWithWings
KICKER_SINGLE = "single"
KICKER_PAIR = "pair"


@dataclass(frozen=True)
class Pattern:
    """
    A classified play. ``primary_value`` is the rank that decides strength
    (the core group, or the lowest rank of a sequence); ``length`` is the
    number of cards. ``kicker`` tells the two FourWithTwo / AirplaneWithWings
    variants apart.
    """

    type: PatternType
    primary_value: int
    length: int
    kicker: Optional[str] = None

    def is_power(self) -> bool:
        return self.type in POWER_TYPES

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "primary_value": self.primary_value,
            "length": self.length,
            "kicker": self.kicker,
        }


def _is_consecutive(values: Sequence[int]) -> bool:
    return all(b == a + 1 for a, b in zip(values, values[1:]))


def _in_sequence_range(values: Sequence[int]) -> bool:
    return values[0] >= SEQUENCE_MIN and values[-1] <= SEQUENCE_MAX


def _classify_airplane(counts: Counter, length: int) -> Pattern | None:
    triples = sorted(v for v, c in counts.items() if c >= 3)
    if len(triples) < MIN_AIRPLANE_TRIPLES:
        return None
    if any(counts[v] != 3 for v in triples):
        return None
    if not _is_consecutive(triples) or not _in_sequence_range(triples):
        return None
    planes = len(triples)
    wings = [c for v, c in counts.items() if v not in triples]
    if not wings:
        return Pattern(PatternType.AIRPLANE, triples[0], length)
    if len(wings) != planes:
        return None
    if all(c == 1 for c in wings):
        return Pattern(PatternType.AIRPLANE_WITH_WINGS, triples[0], length, KICKER_SINGLE)
    if all(c == 2 for c in wings):
        return Pattern(PatternType.AIRPLANE_WITH_WINGS, triples[0], length, KICKER_PAIR)
    return None


def classify(cards: Iterable[Card]) -> Pattern | None:
    """
    Classify a card set. Returns None when the set is not a legal play.
    The returned pattern's length always equals the number of cards.
    """
    cards = list(cards)
    n = len(cards)
    if n == 0:
        return None
    counts = Counter(c.rank for c in cards)
    sizes = sorted(counts.values(), reverse=True)
    values = sorted(counts)

    if n == 1:
        return Pattern(PatternType.SINGLE, cards[0].rank, 1)

    if n == 2:
        if sizes == [2]:
            return Pattern(PatternType.PAIR, values[0], 2)
        if values == [SMALL_JOKER, BIG_JOKER]:
            return Pattern(PatternType.ROCKET, BIG_JOKER, 2)
        return None

    if n == 3:
        if sizes == [3]:
            return Pattern(PatternType.TRIPLE, values[0], 3)
        return None

    if n == 4:
        if sizes == [4]:
            return Pattern(PatternType.BOMB, values[0], 4)
        if sizes == [3, 1]:
            core = next(v for v, c in counts.items() if c == 3)
            return Pattern(PatternType.TRIPLE_WITH_SINGLE, core, 4)
        return None

    if n == 5 and sizes == [3, 2]:
        core = next(v for v, c in counts.items() if c == 3)
        return Pattern(PatternType.TRIPLE_WITH_PAIR, core, 5)

    if sizes[0] == 4:
        core = next(v for v, c in counts.items() if c == 4)
        # 4 + 1 + 1 and 4 + 2 are both the "two singles" variant
        if n == 6 and sizes in ([4, 1, 1], [4, 2]):
            return Pattern(PatternType.FOUR_WITH_TWO, core, 6, KICKER_SINGLE)
        if n == 8 and sizes == [4, 2, 2]:
            return Pattern(PatternType.FOUR_WITH_TWO, core, 8, KICKER_PAIR)
        return None

    if n >= MIN_STRAIGHT_LEN and sizes[0] == 1:
        if _is_consecutive(values) and _in_sequence_range(values):
            return Pattern(PatternType.STRAIGHT, values[0], n)
        return None

    if n >= 2 * MIN_PAIR_SEQUENCE_PAIRS and n % 2 == 0 and set(sizes) == {2}:
        if _is_consecutive(values) and _in_sequence_range(values):
            return Pattern(PatternType.PAIR_SEQUENCE, values[0], n)
        return None

    if n >= 3 * MIN_AIRPLANE_TRIPLES:
        return _classify_airplane(counts, n)

    return None


def can_beat(candidate: Pattern, last: Pattern | None) -> bool:
    """
    True if ``candidate`` may be played on top of ``last``.
    Any pattern may lead (``last`` is None).
    """
    if last is None:
        return True
    if candidate.type == PatternType.ROCKET:
        return last.type != PatternType.ROCKET
    if last.type == PatternType.ROCKET:
        return False
    if candidate.type == PatternType.BOMB:
        if last.type == PatternType.BOMB:
            return candidate.primary_value > last.primary_value
        return True
    if last.type == PatternType.BOMB:
        return False
    return (
        candidate.type == last.type
        and candidate.length == last.length
        and candidate.kicker == last.kicker
        and candidate.primary_value > last.primary_value
    )


__all__ = [
    "PatternType",
    "Pattern",
    "POWER_TYPES",
    "KICKER_SINGLE",
    "KICKER_PAIR",
    "MIN_STRAIGHT_LEN",
    "MIN_PAIR_SEQUENCE_PAIRS",
    "MIN_AIRPLANE_TRIPLES",
    "classify",
    "can_beat",
]
