"""Card model: parsing, rank values and display ordering."""
import pytest

from doudizhu.deck import (
    BIG_JOKER,
    RANK_2,
    RANK_A,
    SMALL_JOKER,
    Card,
    Suit,
    compare_for_display,
    make_deck_54,
    parse,
    parse_cards,
    rank_value,
    sort_cards,
)
from doudizhu.errors import InvalidCardToken, RuleViolation


def test_deck_54_distinct():
    deck = make_deck_54()
    assert len(deck) == 54
    assert len(set(deck)) == 54
    assert sum(1 for c in deck if c.is_joker()) == 2


def test_parse_symbols_and_letters():
    assert parse("♠3") == Card(3, Suit.SPADES)
    assert parse("H10") == Card(10, Suit.HEARTS)
    assert parse("d2") == Card(RANK_2, Suit.DIAMONDS)
    assert parse("♣A") == Card(RANK_A, Suit.CLUBS)
    assert parse("SJ") == Card(11, Suit.SPADES)


def test_parse_jokers():
    assert parse("LJ") == Card(SMALL_JOKER)
    assert parse("BJ") == Card(BIG_JOKER)
    assert parse("小王") == Card(SMALL_JOKER)
    assert parse("🃏大王") == Card(BIG_JOKER)


@pytest.mark.parametrize("token", ["", "X3", "♠1", "♠11", "♥", "joker", "♠B"])
def test_parse_rejects_garbage(token):
    with pytest.raises(InvalidCardToken):
        parse(token)


def test_invalid_token_is_a_rule_violation():
    with pytest.raises(RuleViolation):
        parse_cards(["♠3", "nope"])


def test_rank_order():
    order = [parse(t) for t in ["♠3", "♠10", "♠J", "♠A", "♠2", "LJ", "BJ"]]
    values = [rank_value(c) for c in order]
    assert values == sorted(values)
    assert len(set(values)) == len(values)


def test_suit_never_affects_strength():
    a, b = parse("♦9"), parse("♠9")
    assert a != b
    assert not a < b and not b < a
    assert rank_value(a) == rank_value(b)


def test_compare_for_display_is_stable():
    assert compare_for_display(parse("♦9"), parse("♠9")) == -1
    assert compare_for_display(parse("♠8"), parse("♦9")) == -1
    assert compare_for_display(parse("♥Q"), parse("♥Q")) == 0
    shuffled = parse_cards(["BJ", "♠3", "♦3", "♥2", "LJ"])
    assert [str(c) for c in sort_cards(shuffled)] == ["♦3", "♠3", "♥2", "LJ", "BJ"]


def test_card_rejects_bad_values():
    with pytest.raises(ValueError):
        Card(2, Suit.SPADES)
    with pytest.raises(ValueError):
        Card(SMALL_JOKER, Suit.SPADES)
    with pytest.raises(ValueError):
        Card(5)
