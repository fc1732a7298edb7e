"""
Match orchestration: ready → deal → bid → play → settle.

``MatchSession`` is the single mutating entry point for one match. It applies
one inbound action at a time (ready / bid / play / pass), rejects illegal ones
without touching state, and drives the per-turn timeout through an injected
scheduler. Every transition cancels the outgoing turn's timer before the next
one is scheduled, so at most one fallback fires per turn.
"""
from __future__ import annotations

import random
import threading
import uuid
from typing import Iterable, Sequence

from loguru import logger

from .bidding import BiddingRound
from .config import MatchConfig
from .deal import PLAYER_COUNT, deal_3p, first_to_bid, next_seat, seat_order
from .deck import Card, display_key, parse_cards, sort_cards
from .errors import (
    CardsNotInHand,
    IllegalPass,
    InvalidPattern,
    NotYourTurn,
    PatternTooWeak,
    UnknownPlayer,
    WrongPhase,
)
from .events import (
    BidPlaced,
    CardsDealt,
    CardsPlayed,
    LandlordAssigned,
    Listener,
    MatchEvent,
    MatchFinished,
    PhaseChanged,
    PlayerPassed,
    TurnChanged,
)
from .hints import HintCursor, all_suggestions, get_hint, whole_hand_beats
from .patterns import Pattern, can_beat, classify
from .scheduler import ScheduledTask, Scheduler, ThreadingScheduler
from .scoring import Settlement, settle
from .state import Phase, Player, PlayerView, PlayRecord, Role


class MatchSession:
    """Mutable state for one match between three seated players."""

    def __init__(
        self,
        player_ids: Sequence[str],
        config: MatchConfig | None = None,
        scheduler: Scheduler | None = None,
        listener: Listener | None = None,
        rng: random.Random | None = None,
        match_id: str | None = None,
    ):
        if len(player_ids) != PLAYER_COUNT:
            raise ValueError(f"A match needs exactly {PLAYER_COUNT} players, got {len(player_ids)}")
        if len(set(player_ids)) != len(player_ids):
            raise ValueError(f"Duplicate player ids: {list(player_ids)}")

        self.match_id = match_id or uuid.uuid4().hex[:8]
        self.config = config or MatchConfig()
        self.scheduler: Scheduler = scheduler or ThreadingScheduler()
        self.listener = listener
        self.rng = rng or random.Random()

        self.order: list[str] = list(player_ids)
        self.players: dict[str, Player] = {pid: Player(id=pid, seat=i) for i, pid in enumerate(player_ids)}

        self.phase = Phase.WAITING
        self.current_player_id: str | None = None
        self.landlord_id: str | None = None
        self.bottom_cards: list[Card] = []
        self.last_play: PlayRecord | None = None
        self.consecutive_pass_count = 0
        self.bidding_history: list[tuple[str, bool]] = []
        self.play_history: list[PlayRecord] = []
        self.winner_id: str | None = None
        self.winner_role: Role | None = None
        self.settlement: Settlement | None = None
        self.deal_number = 0
        self.redeal_count = 0

        self._bidding: BiddingRound | None = None
        self._first_bidder_seat: int | None = None
        self._timer: ScheduledTask | None = None
        self._turn_token = 0
        self._turn_index = 0
        self._hint_cursors: dict[str, HintCursor] = {pid: HintCursor() for pid in player_ids}
        self._closed = False
        self._lock = threading.RLock()

    # ---- Read-only views ----

    def hand(self, player_id: str) -> tuple[Card, ...]:
        return tuple(self._player(player_id).hand)

    def player_views(self) -> list[PlayerView]:
        return [
            PlayerView(
                id=p.id,
                remaining_hand_size=p.remaining_hand_size,
                role=p.role,
                is_current_turn=p.id == self.current_player_id,
            )
            for p in (self.players[pid] for pid in self.order)
        ]

    def cards_in_play(self) -> int:
        """Cards still held by players plus undistributed bottom cards."""
        held = sum(len(p.hand) for p in self.players.values())
        return held + (len(self.bottom_cards) if self.landlord_id is None else 0)

    def can_pass(self, player_id: str) -> bool:
        """Passing is legal only when someone else's play is on the table."""
        return self.last_play is not None and self.last_play.player_id != player_id

    def pattern_to_beat(self, player_id: str) -> Pattern | None:
        if self.last_play is None or self.last_play.player_id == player_id:
            return None
        return self.last_play.pattern

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ---- Inbound actions ----

    def ready(self, player_id: str) -> None:
        with self._lock:
            player = self._player(player_id)
            self._require_phase(Phase.WAITING)
            player.ready = True
            logger.debug(f"[{self.match_id}] {player_id} is ready")
            if all(p.ready for p in self.players.values()):
                self._start_deal()

    def bid(self, player_id: str, accept: bool) -> None:
        with self._lock:
            self._player(player_id)
            self._require_phase(Phase.BIDDING)
            self._require_turn(player_id)
            self._apply_bid(player_id, bool(accept), automatic=False)

    def play(self, player_id: str, cards: Iterable[str | Card]) -> PlayRecord:
        """
        Play ``cards`` (tokens or Card objects). Raises a RuleViolation and
        leaves the session unchanged if the play is not legal.
        """
        with self._lock:
            player = self._player(player_id)
            self._require_phase(Phase.PLAYING)
            self._require_turn(player_id)
            parsed = parse_cards(cards)
            if not parsed:
                raise InvalidPattern("A play needs at least one card")
            if len(set(parsed)) != len(parsed):
                raise CardsNotInHand(f"Duplicate cards in play: {parsed}")
            missing = [c for c in parsed if c not in player.hand]
            if missing:
                raise CardsNotInHand(f"{player_id} does not hold {missing}")
            pattern = classify(parsed)
            if pattern is None:
                raise InvalidPattern(f"{sort_cards(parsed)} is not a legal pattern")
            to_beat = self.pattern_to_beat(player_id)
            if not can_beat(pattern, to_beat):
                raise PatternTooWeak(f"{pattern.type.value} {pattern.primary_value} does not beat {to_beat}")
            return self._apply_play(player_id, parsed, pattern, automatic=False)

    def pass_turn(self, player_id: str) -> None:
        with self._lock:
            self._player(player_id)
            self._require_phase(Phase.PLAYING)
            self._require_turn(player_id)
            if not self.can_pass(player_id):
                raise IllegalPass(f"{player_id} must lead and cannot pass")
            self._apply_pass(player_id, automatic=False)

    def request_hint(self, player_id: str) -> list[Card] | None:
        """
        Next suggestion for ``player_id`` in rotation. Only the hint cursor moves;
        hands and turn state are untouched. None outside the playing phase.
        """
        with self._lock:
            player = self._player(player_id)
            if self.phase != Phase.PLAYING:
                return None
            return get_hint(player.hand, self.pattern_to_beat(player_id), self._hint_cursors[player_id])

    def reset_hint_cursor(self, player_id: str) -> None:
        with self._lock:
            self._player(player_id)
            self._hint_cursors[player_id].reset()

    def close(self) -> None:
        """Tear the session down: cancel any pending timer and refuse further actions."""
        with self._lock:
            self._cancel_timer()
            self._closed = True
            logger.debug(f"[{self.match_id}] session closed in phase {self.phase.value}")

    # ---- Transitions ----

    def _start_deal(self) -> None:
        self.deal_number += 1
        deal = deal_3p(rng=self.rng)
        for pid in self.order:
            self.players[pid].hand = list(deal.hands[self.players[pid].seat])
        self.bottom_cards = list(deal.bottom)

        if self._first_bidder_seat is None:
            self._first_bidder_seat = first_to_bid(self.rng)
        else:
            self._first_bidder_seat = next_seat(self._first_bidder_seat)
        self._bidding = BiddingRound([self.order[s] for s in seat_order(self._first_bidder_seat)])

        logger.info(f"[{self.match_id}] deal #{self.deal_number}, first bidder {self._bidding.current}")
        for pid in self.order:
            self._emit(CardsDealt(pid, tuple(self.players[pid].hand), self.deal_number))
        self._set_phase(Phase.BIDDING)
        self._begin_turn(self._bidding.current, self.config.bid_timeout_ms)

    def _apply_bid(self, player_id: str, accept: bool, automatic: bool) -> None:
        self._cancel_timer()
        self._bidding.record(player_id, accept)
        self.bidding_history.append((player_id, accept))
        logger.debug(f"[{self.match_id}] {player_id} {'accepts' if accept else 'declines'}")
        self._emit(BidPlaced(player_id, accept, automatic))

        if self._bidding.landlord is not None:
            self._assign_landlord(self._bidding.landlord, forced=False)
        elif self._bidding.all_declined:
            self._handle_full_decline()
        else:
            self._begin_turn(self._bidding.current, self.config.bid_timeout_ms)

    def _handle_full_decline(self) -> None:
        if self.redeal_count >= self.config.max_redeals:
            forced = self._bidding.order[0]
            logger.warning(
                f"[{self.match_id}] everyone declined after {self.redeal_count} redeals; "
                f"{forced} becomes landlord"
            )
            self._assign_landlord(forced, forced=True)
            return
        self.redeal_count += 1
        logger.warning(f"[{self.match_id}] everyone declined, redeal {self.redeal_count}/{self.config.max_redeals}")
        self._start_deal()

    def _assign_landlord(self, player_id: str, forced: bool) -> None:
        self.landlord_id = player_id
        for p in self.players.values():
            p.role = Role.LANDLORD if p.id == player_id else Role.FARMER
        landlord = self.players[player_id]
        landlord.hand = sort_cards(landlord.hand + self.bottom_cards)
        self.last_play = None
        self.consecutive_pass_count = 0
        self._bidding = None

        logger.info(f"[{self.match_id}] landlord is {player_id}, bottom {self.bottom_cards}")
        self._emit(LandlordAssigned(player_id, tuple(self.bottom_cards), forced))
        self._set_phase(Phase.PLAYING)
        self._begin_turn(player_id, self.config.turn_timeout_ms)

    def _apply_play(self, player_id: str, cards: list[Card], pattern: Pattern, automatic: bool) -> PlayRecord:
        self._cancel_timer()
        player = self.players[player_id]
        for c in cards:
            player.hand.remove(c)
        record = PlayRecord(
            player_id=player_id,
            cards=tuple(sort_cards(cards)),
            pattern=pattern,
            turn_index=self._turn_index,
            automatic=automatic,
        )
        self._turn_index += 1
        self.play_history.append(record)
        self.last_play = record
        self.consecutive_pass_count = 0

        logger.debug(f"[{self.match_id}] {player_id} plays {list(record.cards)} ({pattern.type.value})")
        self._emit(CardsPlayed(player_id, record.cards, pattern, len(player.hand), automatic))

        if not player.hand:
            self._finish(player_id)
        else:
            self._begin_turn(self._next_player(player_id), self.config.turn_timeout_ms)
        return record

    def _apply_pass(self, player_id: str, automatic: bool) -> None:
        self._cancel_timer()
        self.consecutive_pass_count += 1
        self._turn_index += 1
        logger.debug(f"[{self.match_id}] {player_id} passes")
        self._emit(PlayerPassed(player_id, automatic))

        if self.consecutive_pass_count >= PLAYER_COUNT - 1:
            # Round over: the last player to play leads again, unconstrained
            owner = self.last_play.player_id
            self.last_play = None
            self.consecutive_pass_count = 0
            self._begin_turn(owner, self.config.turn_timeout_ms)
        else:
            self._begin_turn(self._next_player(player_id), self.config.turn_timeout_ms)

    def _finish(self, winner_id: str) -> None:
        self._cancel_timer()
        self.winner_id = winner_id
        self.winner_role = self.players[winner_id].role
        self.current_player_id = None
        self.settlement = settle(
            self.play_history,
            self.landlord_id,
            self.winner_role,
            self.order,
            base_score=self.config.base_score,
        )
        logger.info(
            f"[{self.match_id}] {winner_id} ({self.winner_role.value}) wins, "
            f"x{self.settlement.multiplier}, deltas {self.settlement.deltas}"
        )
        self._set_phase(Phase.FINISHED)
        self._emit(MatchFinished(winner_id, self.winner_role, self.settlement))

    # ---- Turn timer ----

    def _begin_turn(self, player_id: str, timeout_ms: int) -> None:
        self._cancel_timer()
        self.current_player_id = player_id
        self._turn_token += 1
        if self.phase == Phase.PLAYING:
            self._hint_cursors[player_id].reset()
        token = self._turn_token
        self._timer = self.scheduler.schedule(timeout_ms, lambda: self._on_timeout(token))
        logger.debug(f"[{self.match_id}] turn -> {player_id}, timer {timeout_ms} ms")
        self._emit(TurnChanged(player_id, timeout_ms, self.phase == Phase.PLAYING and self.can_pass(player_id)))

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timeout(self, token: int) -> None:
        with self._lock:
            if self._closed or token != self._turn_token:
                return
            self._timer = None
            player_id = self.current_player_id
            if self.phase == Phase.BIDDING:
                logger.warning(f"[{self.match_id}] {player_id} timed out bidding, auto-decline")
                self._apply_bid(player_id, False, automatic=True)
            elif self.phase == Phase.PLAYING:
                self._fallback(player_id)

    def _fallback(self, player_id: str) -> None:
        """Timeout action: pass if allowed, otherwise play a suggestion, otherwise the lowest card."""
        if self.can_pass(player_id):
            logger.warning(f"[{self.match_id}] {player_id} timed out, auto-pass")
            self._apply_pass(player_id, automatic=True)
            return
        hand = self.players[player_id].hand
        to_beat = self.pattern_to_beat(player_id)
        cards = whole_hand_beats(hand, to_beat)
        if cards is None:
            suggestions = all_suggestions(hand, to_beat)
            cards = suggestions[0] if suggestions else None
        if cards is None:
            cards = [min(hand, key=display_key)]
        pattern = classify(cards)
        logger.warning(f"[{self.match_id}] {player_id} timed out, auto-play {cards}")
        self._apply_play(player_id, list(cards), pattern, automatic=True)

    # ---- Helpers ----

    def _player(self, player_id: str) -> Player:
        player = self.players.get(player_id)
        if player is None:
            raise UnknownPlayer(f"{player_id!r} is not seated in match {self.match_id}")
        return player

    def _require_phase(self, phase: Phase) -> None:
        if self._closed:
            raise WrongPhase(f"Match {self.match_id} is closed")
        if self.phase != phase:
            raise WrongPhase(f"Expected phase {phase.value}, match is {self.phase.value}")

    def _require_turn(self, player_id: str) -> None:
        if player_id != self.current_player_id:
            raise NotYourTurn(f"It is {self.current_player_id}'s turn, not {player_id}'s")

    def _next_player(self, player_id: str) -> str:
        return self.order[next_seat(self.players[player_id].seat)]

    def _set_phase(self, phase: Phase) -> None:
        if phase == self.phase:
            return
        logger.info(f"[{self.match_id}] phase {self.phase.value} -> {phase.value}")
        self.phase = phase
        self._emit(PhaseChanged(phase))

    def _emit(self, event: MatchEvent) -> None:
        if self.listener is not None:
            self.listener(event)


def run_match(
    session: MatchSession,
    choose_bid,
    choose_play,
    max_actions: int = 10_000,
) -> Settlement:
    """
    Drive a session to the end with synchronous callbacks:
    choose_bid(session, player_id) -> bool and
    choose_play(session, player_id) -> list[Card] | None (None = pass).
    """
    for pid in session.order:
        if session.phase == Phase.WAITING:
            session.ready(pid)
    for _ in range(max_actions):
        pid = session.current_player_id
        if session.phase == Phase.BIDDING:
            session.bid(pid, choose_bid(session, pid))
        elif session.phase == Phase.PLAYING:
            cards = choose_play(session, pid)
            if cards is None:
                session.pass_turn(pid)
            else:
                session.play(pid, cards)
        else:
            break
    if session.settlement is None:
        raise RuntimeError(f"Match {session.match_id} did not finish within {max_actions} actions")
    return session.settlement
