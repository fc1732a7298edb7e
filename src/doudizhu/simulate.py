"""
Tiny CLI to play complete bot matches.

Usage (from project root, after installing in editable mode):
    python -m doudizhu.simulate --matches 10 --agent hint
    python -m doudizhu.simulate --agent random --idle-seat 2 --log-level DEBUG

Timers run on a ManualScheduler: an idle seat never acts, so virtual time is
advanced to its deadline and the timeout fallback plays for it.
"""
from __future__ import annotations

import argparse
import random
import sys
from typing import Dict, List, Optional, Sequence

from loguru import logger

from .agents import Policy, make_agent
from .config import MatchConfig
from .game import MatchSession
from .scheduler import ManualScheduler
from .state import Phase

PLAYER_IDS = ["p0", "p1", "p2"]


def play_one_match(
    policies: Dict[str, Policy],
    config: MatchConfig,
    rng: random.Random,
    idle_seat: Optional[int] = None,
    match_id: Optional[str] = None,
    max_actions: int = 10_000,
) -> MatchSession:
    """Run one match to completion and return the finished session."""
    scheduler = ManualScheduler()
    session = MatchSession(PLAYER_IDS, config=config, scheduler=scheduler, rng=rng, match_id=match_id)
    idle_id = PLAYER_IDS[idle_seat] if idle_seat is not None else None

    for pid in PLAYER_IDS:
        session.ready(pid)

    for _ in range(max_actions):
        if session.phase == Phase.FINISHED:
            break
        pid = session.current_player_id
        if pid == idle_id:
            scheduler.run_next()
            continue
        policy = policies[pid]
        if session.phase == Phase.BIDDING:
            session.bid(pid, policy.choose_bid(session.hand(pid)))
        else:
            cards = policy.choose_play(session.hand(pid), session.pattern_to_beat(pid), session.can_pass(pid))
            if cards is None:
                session.pass_turn(pid)
            else:
                session.play(pid, cards)

    session.close()
    if session.phase != Phase.FINISHED:
        raise RuntimeError(f"Match {session.match_id} did not finish within {max_actions} actions")
    return session


def run_matches(
    num_matches: int,
    seed: int,
    agent_kind: str,
    idle_seat: Optional[int] = None,
    config: Optional[MatchConfig] = None,
) -> Dict[str, int]:
    """Play ``num_matches`` matches and return the cumulative score per seat."""
    config = config or MatchConfig.from_env()
    rng = random.Random(seed)
    policies = {pid: make_agent(agent_kind, seed=seed + i) for i, pid in enumerate(PLAYER_IDS)}
    totals = {pid: 0 for pid in PLAYER_IDS}

    for m in range(num_matches):
        session = play_one_match(policies, config, rng, idle_seat=idle_seat, match_id=f"m{m}")
        for pid, delta in session.settlement.deltas.items():
            totals[pid] += delta
        logger.info(
            f"match {m}: landlord={session.landlord_id} winner={session.winner_id} "
            f"multiplier={session.settlement.multiplier} redeals={session.redeal_count}"
        )
    return totals


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play bot matches of landlord vs farmers.")
    parser.add_argument("--matches", type=int, default=5, help="Number of matches to play.")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility.")
    parser.add_argument(
        "--agent",
        choices=["hint", "random"],
        default="hint",
        help="Bot used in every active seat.",
    )
    parser.add_argument(
        "--idle-seat",
        type=int,
        choices=range(len(PLAYER_IDS)),
        default=None,
        help="Seat that never acts and is played by the timeout fallback.",
    )
    parser.add_argument("--log-level", default="INFO", help="loguru level for stderr output.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>", level=args.log_level.upper())

    totals = run_matches(args.matches, args.seed, args.agent, idle_seat=args.idle_seat)

    lines: List[str] = [f"{pid}: {score:+d}" for pid, score in totals.items()]
    print(f"After {args.matches} matches ({args.agent} agents):")
    for line in lines:
        print(f"  {line}")
    print(f"  sum: {sum(totals.values())}")


if __name__ == "__main__":
    main()
