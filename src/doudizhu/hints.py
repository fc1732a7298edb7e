"""
Combination / hint engine: enumerate the plays a hand can make, either to lead
or to beat a given pattern, in the order they should be suggested.

Everything here is read-only over a hand snapshot. The only state is the
HintCursor, which the caller owns (one per player and turn) and resets
whenever the turn comes back to that player.

Kickers (the single or pair attached to a triple, a four or an airplane) are
picked with a greedy cost model: take cards from the smallest groups first and
avoid ranks that an existing straight, pair sequence, airplane or rocket in the
hand still needs.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from loguru import logger

from .deck import BIG_JOKER, SEQUENCE_MAX, SEQUENCE_MIN, SMALL_JOKER, Card, display_key, sort_cards
from .patterns import (
    KICKER_PAIR,
    KICKER_SINGLE,
    MIN_AIRPLANE_TRIPLES,
    MIN_PAIR_SEQUENCE_PAIRS,
    MIN_STRAIGHT_LEN,
    Pattern,
    PatternType,
    can_beat,
    classify,
)

CRITICAL_PENALTY = 100

# Tie-break inside the power bucket when primary values are equal
_POWER_ORDER = {PatternType.FOUR_WITH_TWO: 0, PatternType.BOMB: 1, PatternType.ROCKET: 2}


def group_by_rank(hand: Iterable[Card]) -> dict[int, list[Card]]:
    """Rank value -> cards of that rank in display order, ranks ascending."""
    groups: dict[int, list[Card]] = {}
    for c in sort_cards(hand):
        groups.setdefault(c.rank, []).append(c)
    return groups


def _runs(values: Sequence[int], min_len: int) -> list[list[int]]:
    """Maximal runs of consecutive values (input sorted) with at least min_len items."""
    runs: list[list[int]] = []
    start = 0
    for i in range(1, len(values) + 1):
        if i == len(values) or values[i] != values[i - 1] + 1:
            run = list(values[start:i])
            if len(run) >= min_len:
                runs.append(run)
            start = i
    return runs


def _windows(run: Sequence[int], size: int) -> list[list[int]]:
    return [list(run[s:s + size]) for s in range(len(run) - size + 1)]


def _sequence_ranks(groups: dict[int, list[Card]], min_count: int) -> list[int]:
    return [v for v, cs in groups.items() if SEQUENCE_MIN <= v <= SEQUENCE_MAX and len(cs) >= min_count]


@dataclass(frozen=True)
class StructureValues:
    """Ranks that currently take part in a multi-rank structure of the hand."""

    straight: frozenset[int]
    pair_sequence: frozenset[int]
    airplane: frozenset[int]
    rocket: frozenset[int]


def structure_values(groups: dict[int, list[Card]]) -> StructureValues:
    def _covered(min_count: int, min_len: int) -> frozenset[int]:
        ranks = _sequence_ranks(groups, min_count)
        return frozenset(v for run in _runs(ranks, min_len) for v in run)

    rocket = frozenset()
    if SMALL_JOKER in groups and BIG_JOKER in groups:
        rocket = frozenset({SMALL_JOKER, BIG_JOKER})
    return StructureValues(
        straight=_covered(1, MIN_STRAIGHT_LEN),
        pair_sequence=_covered(2, MIN_PAIR_SEQUENCE_PAIRS),
        airplane=_covered(3, MIN_AIRPLANE_TRIPLES),
        rocket=rocket,
    )


def kicker_cost(rank: int, used: int, groups: dict[int, list[Card]], structures: StructureValues) -> int:
    """
    Cost of taking ``used`` cards of ``rank`` as a kicker.
    Base cost is what is left of the group (so singles < pairs < triples),
    plus CRITICAL_PENALTY when the rank could no longer serve its structure.
    """
    remaining = len(groups[rank]) - used
    critical = (
        (rank in structures.straight and remaining < 1)
        or (rank in structures.pair_sequence and remaining < 2)
        or (rank in structures.airplane and remaining < 3)
        or rank in structures.rocket
    )
    return remaining + (CRITICAL_PENALTY if critical else 0)


def single_kickers(
    groups: dict[int, list[Card]],
    exclude: Iterable[int],
    structures: StructureValues,
    *,
    one_per_rank: bool = False,
) -> list[Card]:
    """Candidate kicker cards, cheapest first (cost, then rank, then display order)."""
    excluded = set(exclude)
    scored: list[tuple[int, int, tuple[int, int], Card]] = []
    for rank, cards in groups.items():
        if rank in excluded:
            continue
        cost = kicker_cost(rank, 1, groups, structures)
        for c in cards[:1] if one_per_rank else cards:
            scored.append((cost, rank, display_key(c), c))
    scored.sort(key=lambda t: t[:3])
    return [t[3] for t in scored]


def pair_kickers(
    groups: dict[int, list[Card]],
    exclude: Iterable[int],
    structures: StructureValues,
) -> list[list[Card]]:
    """Candidate kicker pairs (one per rank), cheapest first."""
    excluded = set(exclude)
    scored: list[tuple[int, int, list[Card]]] = []
    for rank, cards in groups.items():
        if rank in excluded or len(cards) < 2:
            continue
        scored.append((kicker_cost(rank, 2, groups, structures), rank, cards[:2]))
    scored.sort(key=lambda t: t[:2])
    return [t[2] for t in scored]


# ---- Enumerators. ``above`` filters on primary value, ``size`` on group/run length ----


def find_singles(groups: dict[int, list[Card]], above: int = 0) -> list[list[Card]]:
    # Bombs are never split for a single
    return [[cs[0]] for v, cs in groups.items() if v > above and len(cs) < 4]


def find_pairs(groups: dict[int, list[Card]], above: int = 0) -> list[list[Card]]:
    return [cs[:2] for v, cs in groups.items() if v > above and len(cs) in (2, 3)]


def find_triples(groups: dict[int, list[Card]], above: int = 0) -> list[list[Card]]:
    return [list(cs) for v, cs in groups.items() if v > above and len(cs) == 3]


def find_triples_with_single(
    groups: dict[int, list[Card]],
    structures: StructureValues,
    above: int = 0,
) -> list[list[Card]]:
    results: list[list[Card]] = []
    for triple in find_triples(groups, above):
        kicks = single_kickers(groups, [triple[0].rank], structures)
        if kicks:
            results.append(triple + kicks[:1])
    return results


def find_triples_with_pair(
    groups: dict[int, list[Card]],
    structures: StructureValues,
    above: int = 0,
) -> list[list[Card]]:
    results: list[list[Card]] = []
    for triple in find_triples(groups, above):
        kicks = pair_kickers(groups, [triple[0].rank], structures)
        if kicks:
            results.append(triple + kicks[0])
    return results


def find_straights(
    groups: dict[int, list[Card]],
    above: int = 0,
    length: Optional[int] = None,
) -> list[list[Card]]:
    """Every straight window; longest first within a run when ``length`` is None."""
    results: list[list[Card]] = []
    for run in _runs(_sequence_ranks(groups, 1), MIN_STRAIGHT_LEN):
        sizes = [length] if length is not None else range(len(run), MIN_STRAIGHT_LEN - 1, -1)
        for size in sizes:
            for seq in _windows(run, size):
                if seq[0] > above:
                    results.append([groups[v][0] for v in seq])
    return results


def find_pair_sequences(
    groups: dict[int, list[Card]],
    above: int = 0,
    pairs: Optional[int] = None,
) -> list[list[Card]]:
    results: list[list[Card]] = []
    for run in _runs(_sequence_ranks(groups, 2), MIN_PAIR_SEQUENCE_PAIRS):
        sizes = [pairs] if pairs is not None else range(len(run), MIN_PAIR_SEQUENCE_PAIRS - 1, -1)
        for size in sizes:
            for seq in _windows(run, size):
                if seq[0] > above:
                    results.append([c for v in seq for c in groups[v][:2]])
    return results


def find_airplanes(
    groups: dict[int, list[Card]],
    above: int = 0,
    planes: Optional[int] = None,
) -> list[list[Card]]:
    results: list[list[Card]] = []
    for run in _runs(_sequence_ranks(groups, 3), MIN_AIRPLANE_TRIPLES):
        sizes = [planes] if planes is not None else range(len(run), MIN_AIRPLANE_TRIPLES - 1, -1)
        for size in sizes:
            for seq in _windows(run, size):
                if seq[0] > above:
                    results.append([c for v in seq for c in groups[v][:3]])
    return results


def find_airplanes_with_wings(
    groups: dict[int, list[Card]],
    structures: StructureValues,
    kicker: str,
    above: int = 0,
    planes: Optional[int] = None,
) -> list[list[Card]]:
    results: list[list[Card]] = []
    for body in find_airplanes(groups, above, planes):
        body_ranks = {c.rank for c in body}
        count = len(body_ranks)
        if kicker == KICKER_SINGLE:
            wings = single_kickers(groups, body_ranks, structures, one_per_rank=True)
            if len(wings) >= count:
                results.append(body + wings[:count])
        else:
            pairs = pair_kickers(groups, body_ranks, structures)
            if len(pairs) >= count:
                results.append(body + [c for p in pairs[:count] for c in p])
    return results


def find_four_with_two(
    groups: dict[int, list[Card]],
    structures: StructureValues,
    above: int = 0,
    kicker: Optional[str] = None,
) -> list[list[Card]]:
    """Four of a kind with two single kickers (6 cards) and/or two pairs (8 cards)."""
    results: list[list[Card]] = []
    for v, four in groups.items():
        if v <= above or len(four) != 4:
            continue
        if kicker in (None, KICKER_SINGLE):
            kicks = single_kickers(groups, [v], structures)
            if len(kicks) >= 2:
                results.append(list(four) + kicks[:2])
        if kicker in (None, KICKER_PAIR):
            pairs = pair_kickers(groups, [v], structures)
            if len(pairs) >= 2:
                results.append(list(four) + pairs[0] + pairs[1])
    return results


def find_bombs(groups: dict[int, list[Card]], above: int = 0) -> list[list[Card]]:
    return [list(cs) for v, cs in groups.items() if v > above and len(cs) == 4]


def find_rocket(groups: dict[int, list[Card]]) -> list[list[Card]]:
    if SMALL_JOKER in groups and BIG_JOKER in groups:
        return [[groups[SMALL_JOKER][0], groups[BIG_JOKER][0]]]
    return []


def _dedupe(combos: Iterable[list[Card]]) -> list[list[Card]]:
    seen: set[frozenset[Card]] = set()
    unique: list[list[Card]] = []
    for combo in combos:
        key = frozenset(combo)
        if key not in seen:
            seen.add(key)
            unique.append(combo)
    return unique


def _power_key(combo: list[Card]) -> tuple[int, int]:
    pattern = classify(combo)
    assert pattern is not None
    return (pattern.primary_value, _POWER_ORDER[pattern.type])


def suggest_leading_plays(hand: Iterable[Card]) -> list[list[Card]]:
    """
    All plays available when leading. Non-power plays come first, ordered by
    lowest rank ascending then length descending; FourWithTwo, Bombs and the
    Rocket follow, ordered by primary value.
    """
    groups = group_by_rank(hand)
    if not groups:
        return []
    structures = structure_values(groups)

    non_power: list[list[Card]] = []
    non_power += find_straights(groups)
    non_power += find_pair_sequences(groups)
    non_power += find_airplanes(groups)
    non_power += find_airplanes_with_wings(groups, structures, KICKER_SINGLE)
    non_power += find_airplanes_with_wings(groups, structures, KICKER_PAIR)
    non_power += find_triples_with_single(groups, structures)
    non_power += find_triples_with_pair(groups, structures)
    non_power += find_triples(groups)
    non_power += find_pairs(groups)
    non_power += find_singles(groups)

    power: list[list[Card]] = []
    power += find_four_with_two(groups, structures)
    power += find_bombs(groups)
    power += find_rocket(groups)

    ordered = sorted(_dedupe(non_power), key=lambda combo: (min(c.rank for c in combo), -len(combo)))
    ordered += sorted(_dedupe(power), key=_power_key)
    return ordered


def _same_type_beating(groups: dict[int, list[Card]], last: Pattern) -> list[list[Card]]:
    structures = structure_values(groups)
    v = last.primary_value
    t = last.type
    if t == PatternType.SINGLE:
        return find_singles(groups, v)
    if t == PatternType.PAIR:
        return find_pairs(groups, v)
    if t == PatternType.TRIPLE:
        return find_triples(groups, v)
    if t == PatternType.TRIPLE_WITH_SINGLE:
        return find_triples_with_single(groups, structures, v)
    if t == PatternType.TRIPLE_WITH_PAIR:
        return find_triples_with_pair(groups, structures, v)
    if t == PatternType.STRAIGHT:
        return find_straights(groups, v, last.length)
    if t == PatternType.PAIR_SEQUENCE:
        return find_pair_sequences(groups, v, last.length // 2)
    if t == PatternType.AIRPLANE:
        return find_airplanes(groups, v, last.length // 3)
    if t == PatternType.AIRPLANE_WITH_WINGS:
        per_plane = 4 if last.kicker == KICKER_SINGLE else 5
        return find_airplanes_with_wings(groups, structures, last.kicker, v, last.length // per_plane)
    if t == PatternType.FOUR_WITH_TWO:
        return find_four_with_two(groups, structures, v, last.kicker)
    raise ValueError(f"No same-type search for {t}")


def suggest_beating(hand: Iterable[Card], last_pattern: Pattern) -> list[list[Card]]:
    """
    All plays that beat ``last_pattern``: same-type candidates by ascending
    primary value, then Bombs and the Rocket. Against a Bomb only higher Bombs
    and the Rocket qualify; nothing beats the Rocket.
    """
    groups = group_by_rank(hand)
    if not groups or last_pattern.type == PatternType.ROCKET:
        return []
    if last_pattern.type == PatternType.BOMB:
        return find_bombs(groups, last_pattern.primary_value) + find_rocket(groups)

    same_type = _dedupe(_same_type_beating(groups, last_pattern))
    # Stable: kicker cost order inside one primary value is kept
    same_type.sort(key=lambda combo: classify(combo).primary_value)
    result = same_type + find_bombs(groups) + find_rocket(groups)
    # Guard: every candidate must actually beat the last play
    return [combo for combo in result if can_beat(classify(combo), last_pattern)]


def all_suggestions(hand: Iterable[Card], last_pattern: Pattern | None) -> list[list[Card]]:
    if last_pattern is None:
        return suggest_leading_plays(hand)
    return suggest_beating(hand, last_pattern)


@dataclass
class HintCursor:
    """Rotation position over the suggestion list for one player's turn."""

    position: int = 0

    def reset(self) -> None:
        self.position = 0


def reset_hint_cursor(cursor: HintCursor) -> None:
    cursor.reset()


def get_hint(
    hand: Sequence[Card],
    last_pattern: Pattern | None,
    cursor: HintCursor,
) -> list[Card] | None:
    """
    Next suggestion in rotation, or None when nothing can be played.
    Each call advances ``cursor``; after the last suggestion it wraps around.
    """
    suggestions = all_suggestions(hand, last_pattern)
    if not suggestions:
        return None
    index = cursor.position % len(suggestions)
    cursor.position += 1
    logger.debug(f"Hint {index + 1}/{len(suggestions)}: {suggestions[index]}")
    return suggestions[index]


def try_whole_hand_as_single_play(hand: Sequence[Card]) -> list[Card] | None:
    """The whole hand, sorted, if it is itself one legal pattern."""
    pattern = classify(hand)
    if pattern is None or pattern.length != len(hand):
        return None
    return sort_cards(hand)


def whole_hand_beats(hand: Sequence[Card], last_pattern: Pattern | None) -> list[Card] | None:
    """Like try_whole_hand_as_single_play, but only if the hand also beats ``last_pattern``."""
    cards = try_whole_hand_as_single_play(hand)
    if cards is None:
        return None
    return cards if can_beat(classify(cards), last_pattern) else None


__all__ = [
    "CRITICAL_PENALTY",
    "HintCursor",
    "StructureValues",
    "all_suggestions",
    "get_hint",
    "group_by_rank",
    "kicker_cost",
    "reset_hint_cursor",
    "structure_values",
    "suggest_beating",
    "suggest_leading_plays",
    "try_whole_hand_as_single_play",
    "whole_hand_beats",
]
