"""Dou Dizhu rules engine (landlord vs two farmers)."""

__version__ = "0.1.0"

from .deck import Card, Suit, make_deck_54, parse, parse_cards, rank_value, compare_for_display, sort_cards
from .errors import (
    RuleViolation,
    InvalidCardToken,
    InvalidPattern,
    PatternTooWeak,
    NotYourTurn,
    IllegalPass,
    CardsNotInHand,
    WrongPhase,
    UnknownPlayer,
)
from .patterns import Pattern, PatternType, classify, can_beat
from .hints import (
    HintCursor,
    get_hint,
    suggest_leading_plays,
    suggest_beating,
    try_whole_hand_as_single_play,
)
from .deal import deal_3p, Deal
from .bidding import BiddingRound
from .scheduler import ManualScheduler, ThreadingScheduler
from .config import MatchConfig
from .state import Phase, Role, Player, PlayerView, PlayRecord
from .scoring import Settlement, settle
from .events import EventLog
from .game import MatchSession, run_match
from .agents import Policy, RandomAgent, HintAgent
