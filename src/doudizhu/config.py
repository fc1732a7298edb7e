"""Match configuration: scoring base and timeouts."""
from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass
class MatchConfig:
    """
    Tunables for one match.

    - base_score: stake before multipliers.
    - bid_timeout_ms: time a bidder has before an automatic decline.
    - turn_timeout_ms: time a player has to play or pass before the fallback acts.
    - max_redeals: redeals allowed after a round where everyone declined;
      the next full decline makes that round's first bidder landlord.
    """

    base_score: int = 1
    bid_timeout_ms: int = 15_000
    turn_timeout_ms: int = 30_000
    max_redeals: int = 3

    def __post_init__(self) -> None:
        if self.base_score <= 0:
            raise ValueError(f"base_score must be positive, got {self.base_score}")
        if self.bid_timeout_ms <= 0 or self.turn_timeout_ms <= 0:
            raise ValueError("Timeouts must be positive")
        if self.max_redeals < 0:
            raise ValueError(f"max_redeals must be >= 0, got {self.max_redeals}")

    @classmethod
    def from_env(cls, prefix: str = "DDZ_") -> "MatchConfig":
        """Build a config from ``<prefix>BASE_SCORE`` style variables, defaults otherwise."""
        defaults = cls()
        return cls(
            base_score=int(os.getenv(f"{prefix}BASE_SCORE", defaults.base_score)),
            bid_timeout_ms=int(os.getenv(f"{prefix}BID_TIMEOUT_MS", defaults.bid_timeout_ms)),
            turn_timeout_ms=int(os.getenv(f"{prefix}TURN_TIMEOUT_MS", defaults.turn_timeout_ms)),
            max_redeals=int(os.getenv(f"{prefix}MAX_REDEALS", defaults.max_redeals)),
        )
