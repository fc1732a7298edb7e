"""Hint engine: leading/beating enumeration, kicker choice and rotation."""
import random

from doudizhu.deck import make_deck_54, parse_cards
from doudizhu.hints import (
    CRITICAL_PENALTY,
    HintCursor,
    all_suggestions,
    get_hint,
    group_by_rank,
    kicker_cost,
    reset_hint_cursor,
    single_kickers,
    structure_values,
    suggest_beating,
    suggest_leading_plays,
    try_whole_hand_as_single_play,
    whole_hand_beats,
)
from doudizhu.patterns import POWER_TYPES, KICKER_SINGLE, Pattern, PatternType, classify


def cards(s):
    return parse_cards(s.split())


def tokens(combo):
    return [str(c) for c in combo]


def random_hand(seed, size=17):
    rng = random.Random(seed)
    return rng.sample(make_deck_54(), size)


def test_bomb_subset_and_four_plus_one():
    assert classify(cards("♠3 ♣3 ♥3 ♦3 ♣7")) is None
    assert classify(cards("♠3 ♣3 ♥3 ♦3")) == Pattern(PatternType.BOMB, 3, 4)


def test_straight_suggested_before_singles():
    hand = cards("♠3 ♥4 ♦5 ♣6 ♠7")
    suggestions = suggest_leading_plays(hand)
    first = classify(suggestions[0])
    assert first == Pattern(PatternType.STRAIGHT, 3, 5)
    single_positions = [i for i, s in enumerate(suggestions) if len(s) == 1]
    assert single_positions and min(single_positions) > 0


def test_beating_pair_same_type_then_bomb():
    hand = cards("♠5 ♥5 ♣5 ♦5 ♠9 ♥9 ♣K")
    result = suggest_beating(hand, Pattern(PatternType.PAIR, 8, 2))
    assert [tokens(c) for c in result] == [["♥9", "♠9"], ["♦5", "♣5", "♥5", "♠5"]]


def test_leading_orders_power_last():
    hand = cards("LJ BJ ♠4 ♥4 ♣4 ♦4 ♠9")
    suggestions = suggest_leading_plays(hand)
    kinds = [classify(s).type for s in suggestions]
    power_start = next(i for i, k in enumerate(kinds) if k in POWER_TYPES or k == PatternType.FOUR_WITH_TWO)
    assert all(k in POWER_TYPES or k == PatternType.FOUR_WITH_TWO for k in kinds[power_start:])
    assert kinds[-1] == PatternType.ROCKET


def test_leading_results_are_subsets_and_legal():
    for seed in range(20):
        hand = random_hand(seed)
        for combo in suggest_leading_plays(hand):
            assert set(combo) <= set(hand)
            assert len(set(combo)) == len(combo)
            assert classify(combo) is not None


def test_beating_results_respect_reference():
    refs = [
        Pattern(PatternType.SINGLE, 9, 1),
        Pattern(PatternType.PAIR, 6, 2),
        Pattern(PatternType.TRIPLE_WITH_SINGLE, 5, 4),
        Pattern(PatternType.STRAIGHT, 4, 5),
        Pattern(PatternType.PAIR_SEQUENCE, 3, 6),
    ]
    for seed in range(20):
        hand = random_hand(seed, size=20)
        for ref in refs:
            for combo in suggest_beating(hand, ref):
                p = classify(combo)
                assert set(combo) <= set(hand)
                if p.type in POWER_TYPES:
                    continue
                assert p.type == ref.type
                assert p.length == ref.length
                assert p.primary_value > ref.primary_value


def test_only_higher_bombs_beat_a_bomb():
    hand = cards("♠4 ♥4 ♣4 ♦4 ♠9 ♥9 ♣9 ♦9 LJ BJ")
    result = suggest_beating(hand, Pattern(PatternType.BOMB, 6, 4))
    assert [classify(c).type for c in result] == [PatternType.BOMB, PatternType.ROCKET]
    assert classify(result[0]).primary_value == 9
    assert suggest_beating(hand, Pattern(PatternType.ROCKET, 17, 2)) == []


def test_singles_do_not_split_bombs():
    hand = cards("♠4 ♥4 ♣4 ♦4 ♠9")
    singles = [c for c in suggest_leading_plays(hand) if len(c) == 1]
    assert [tokens(c) for c in singles] == [["♠9"]]


def test_kicker_avoids_straight_cards():
    # 3..7 straight plus a lone K: the triple of 9s should take K, not a straight card
    hand = cards("♠3 ♥4 ♦5 ♣6 ♠7 ♠9 ♥9 ♣9 ♠K")
    groups = group_by_rank(hand)
    structures = structure_values(groups)
    assert kicker_cost(3, 1, groups, structures) >= CRITICAL_PENALTY
    assert kicker_cost(13, 1, groups, structures) == 0
    assert tokens(single_kickers(groups, [9], structures)[:1]) == ["♠K"]
    triple_single = [c for c in suggest_leading_plays(hand) if classify(c).type == PatternType.TRIPLE_WITH_SINGLE]
    assert tokens(triple_single[0]) == ["♣9", "♥9", "♠9", "♠K"]


def test_kicker_prefers_singles_over_pair_breaking():
    hand = cards("♠9 ♥9 ♣9 ♠4 ♥4 ♠Q")
    beating = suggest_beating(hand, Pattern(PatternType.TRIPLE_WITH_SINGLE, 5, 4))
    assert tokens(beating[0]) == ["♣9", "♥9", "♠9", "♠Q"]


def test_pair_kicker_avoids_pair_sequence():
    # 33 44 55 is a pair sequence: the triple of 9s must take QQ
    hand = cards("♠3 ♥3 ♠4 ♥4 ♠5 ♥5 ♠9 ♥9 ♣9 ♠Q ♥Q")
    groups = group_by_rank(hand)
    structures = structure_values(groups)
    assert structures.pair_sequence == {3, 4, 5}
    assert kicker_cost(3, 2, groups, structures) >= CRITICAL_PENALTY
    assert kicker_cost(12, 2, groups, structures) == 0

    beating = suggest_beating(hand, Pattern(PatternType.TRIPLE_WITH_PAIR, 6, 5))
    assert {c.rank for c in beating[0]} == {9, 12}
    assert tokens(beating[0]) == ["♣9", "♥9", "♠9", "♥Q", "♠Q"]


def test_single_kicker_avoids_airplane_body():
    # 333 444 is an airplane; breaking the 7 bomb is cheaper than breaking it
    hand = cards("♠3 ♥3 ♣3 ♠4 ♥4 ♣4 ♠9 ♥9 ♣9 ♦7 ♣7 ♥7 ♠7")
    groups = group_by_rank(hand)
    structures = structure_values(groups)
    assert structures.airplane == {3, 4}
    assert kicker_cost(3, 1, groups, structures) >= CRITICAL_PENALTY
    assert kicker_cost(7, 1, groups, structures) == 3

    beating = suggest_beating(hand, Pattern(PatternType.TRIPLE_WITH_SINGLE, 8, 4))
    assert tokens(beating[0]) == ["♣9", "♥9", "♠9", "♦7"]


def test_single_kicker_keeps_rocket():
    # a lone joker would cost nothing, but it is half of a rocket
    hand = cards("♠8 ♥8 ♣8 ♠4 ♥4 LJ BJ")
    groups = group_by_rank(hand)
    structures = structure_values(groups)
    assert structures.rocket == {16, 17}
    assert kicker_cost(16, 1, groups, structures) >= CRITICAL_PENALTY
    assert kicker_cost(4, 1, groups, structures) == 1

    triple_single = [c for c in suggest_leading_plays(hand) if classify(c).type == PatternType.TRIPLE_WITH_SINGLE]
    assert tokens(triple_single[0]) == ["♣8", "♥8", "♠8", "♥4"]


def test_four_with_two_variants():
    hand = cards("♠6 ♥6 ♣6 ♦6 ♠3 ♥3 ♠K ♥K")
    result = suggest_beating(hand, Pattern(PatternType.FOUR_WITH_TWO, 5, 6, KICKER_SINGLE))
    same = [c for c in result if classify(c).type == PatternType.FOUR_WITH_TWO]
    assert same and all(classify(c).kicker == KICKER_SINGLE for c in same)


def test_rotation_cycles_distinct_then_wraps():
    hand = cards("♠3 ♥5 ♦7 ♣9 ♠J")
    total = len(all_suggestions(hand, None))
    cursor = HintCursor()
    seen = [tuple(get_hint(hand, None, cursor)) for _ in range(total)]
    assert len(set(seen)) == total
    assert tuple(get_hint(hand, None, cursor)) == seen[0]
    reset_hint_cursor(cursor)
    assert tuple(get_hint(hand, None, cursor)) == seen[0]


def test_get_hint_none_when_nothing_beats():
    hand = cards("♠3 ♥4")
    assert get_hint(hand, Pattern(PatternType.SINGLE, 15, 1), HintCursor()) is None


def test_whole_hand_shortcut():
    assert tokens(try_whole_hand_as_single_play(cards("♥8 ♠8 ♦8 ♠4"))) == ["♠4", "♦8", "♥8", "♠8"]
    assert try_whole_hand_as_single_play(cards("♠8 ♠4")) is None
    whole = try_whole_hand_as_single_play(cards("♠7 ♥3 ♦5 ♣6 ♠4"))
    assert tokens(whole) == ["♥3", "♠4", "♦5", "♣6", "♠7"]
    assert whole_hand_beats(cards("♠9 ♥9"), Pattern(PatternType.PAIR, 10, 2)) is None
    assert whole_hand_beats(cards("♠J ♥J"), Pattern(PatternType.PAIR, 10, 2)) is not None
