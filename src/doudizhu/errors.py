"""
Rule violations raised back to the caller of an inbound action.
A rejection never advances the turn and never touches a hand.
"""
from __future__ import annotations


class RuleViolation(ValueError):
    """Base class for every rejected request."""


class InvalidCardToken(RuleViolation):
    """A card token could not be parsed."""


class InvalidPattern(RuleViolation):
    """The card set is not a legal play pattern."""


class PatternTooWeak(RuleViolation):
    """The card set is legal but does not beat the last play."""


class NotYourTurn(RuleViolation):
    """Action from a player who does not hold the turn."""


class IllegalPass(RuleViolation):
    """Pass attempted by the player who must lead."""


class CardsNotInHand(RuleViolation):
    """The play names a card the player does not hold (or the same card twice)."""


class WrongPhase(RuleViolation):
    """The action is not accepted in the current match phase."""


class UnknownPlayer(RuleViolation):
    """The player id is not seated in this match."""


__all__ = [
    "RuleViolation",
    "InvalidCardToken",
    "InvalidPattern",
    "PatternTooWeak",
    "NotYourTurn",
    "IllegalPass",
    "CardsNotInHand",
    "WrongPhase",
    "UnknownPlayer",
]
