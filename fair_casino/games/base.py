"""
FAIR CASINO — Base Game Engine

Abstract base for every provably fair game resolver.
"""

import logging
import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from config.settings import EngineConfig
from tools.fair_rng import SeedState


class IllegalActionError(ValueError):
    """Raised when a player decision is not allowed in the current round state."""


@dataclass
class Settlement:
    """Money movement for one resolved bet. `payout` is credited after `stake` was debited."""
    stake: float
    payout: float

    @property
    def net(self) -> float:
        return self.payout - self.stake

    @property
    def result(self) -> str:
        if self.payout > self.stake:
            return "win"
        if self.payout == self.stake:
            return "push"
        return "lose"

    def to_dict(self) -> dict:
        return {
            "stake": round(self.stake, 2),
            "payout": round(self.payout, 2),
            "net": round(self.net, 2),
            "result": self.result,
        }


@dataclass
class SimResult:
    """Simulation results for a game."""
    game_type: str
    rounds: int
    house_edge_theoretical: float
    house_edge_measured: float
    avg_multiplier: float
    max_multiplier_hit: float
    hit_rate: float  # % of rounds that returned > 0
    total_wagered: float
    total_returned: float
    rtp: float  # 1 - house_edge_measured
    confidence_95: tuple = (0.0, 0.0)
    distribution: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "game_type": self.game_type,
            "rounds": self.rounds,
            "house_edge_theoretical": round(self.house_edge_theoretical, 6),
            "house_edge_measured": round(self.house_edge_measured, 6),
            "rtp": round(self.rtp, 4),
            "avg_multiplier": round(self.avg_multiplier, 4),
            "max_multiplier_hit": round(self.max_multiplier_hit, 2),
            "hit_rate": round(self.hit_rate, 4),
            "total_wagered": round(self.total_wagered, 2),
            "total_returned": round(self.total_returned, 2),
            "confidence_95": [round(x, 6) for x in self.confidence_95],
            "distribution": self.distribution,
        }


def _bucket(mult: float) -> str:
    if mult == 0:
        return "0x"
    elif mult < 1:
        return "0-1x"
    elif mult < 2:
        return "1-2x"
    elif mult < 5:
        return "2-5x"
    elif mult < 10:
        return "5-10x"
    elif mult < 50:
        return "10-50x"
    return "50x+"


def simulation_seed(rng: random.Random) -> SeedState:
    """Reproducible SeedState for Monte Carlo runs (never used for real bets)."""
    return SeedState(
        client_seed=f"sim{rng.getrandbits(40):010x}",
        server_seed=f"{rng.getrandbits(256):064x}",
        nonce=rng.randrange(EngineConfig.NONCE_RANGE),
    )


class BaseGameEngine(ABC):
    """Abstract base for all provably fair game engines."""

    game_type: str = "base"
    display_name: str = "Base Game"

    def __init__(self):
        self.logger = logging.getLogger(f"fair_casino.{self.game_type}")

    @abstractmethod
    def generate_config(self, **kwargs):
        """Build a validated config model from parameters."""
        ...

    @abstractmethod
    def compute_house_edge(self, config) -> float:
        """Theoretical house edge for a config."""
        ...

    @abstractmethod
    def resolve(self, seed: SeedState, config, decisions=None):
        """Resolve a full round from its seed and the player's decisions."""
        ...

    @abstractmethod
    def payout(self, stake: float, outcome, config) -> float:
        """Gross amount credited back for a resolved outcome (0 on a loss)."""
        ...

    @abstractmethod
    def simulate_round(self, config, seed: SeedState, rng: random.Random) -> float:
        """Play one round with a simulated player. Returns multiplier (0 = loss)."""
        ...

    def settle(self, stake: float, outcome, config) -> Settlement:
        return Settlement(stake=stake, payout=self.payout(stake, outcome, config))

    def simulate(self, config, rounds: int = None, seed: int = None) -> SimResult:
        """Run a Monte Carlo simulation over reproducible seed triples."""
        rounds = rounds or EngineConfig.SIM_ROUNDS
        rng = random.Random(EngineConfig.SIM_SEED if seed is None else seed)

        total_returned = 0.0
        sum_sq = 0.0
        wins = 0
        max_mult = 0.0
        buckets = {}  # multiplier range → count

        for _ in range(rounds):
            mult = self.simulate_round(config, simulation_seed(rng), rng)
            total_returned += mult
            sum_sq += mult * mult
            if mult > 0:
                wins += 1
            if mult > max_mult:
                max_mult = mult
            bucket = _bucket(mult)
            buckets[bucket] = buckets.get(bucket, 0) + 1

        total_wagered = float(rounds)
        rtp = total_returned / total_wagered if total_wagered > 0 else 0
        he_measured = 1 - rtp
        avg_mult = total_returned / rounds
        hit_rate = wins / rounds

        # 95% confidence interval for house edge
        variance = max(sum_sq / rounds - avg_mult ** 2, 0.0)
        std_err = math.sqrt(variance / rounds)
        ci = (he_measured - 1.96 * std_err, he_measured + 1.96 * std_err)

        self.logger.info(f"Simulated {rounds} {self.game_type} rounds: rtp={rtp:.4f}")
        return SimResult(
            game_type=self.game_type,
            rounds=rounds,
            house_edge_theoretical=self.compute_house_edge(config),
            house_edge_measured=he_measured,
            avg_multiplier=avg_mult,
            max_multiplier_hit=max_mult,
            hit_rate=hit_rate,
            total_wagered=total_wagered,
            total_returned=total_returned,
            rtp=rtp,
            confidence_95=ci,
            distribution={k: round(v / rounds, 4) for k, v in sorted(buckets.items())},
        )

    def get_metadata(self) -> dict:
        """Return game type metadata for callers."""
        return {
            "game_type": self.game_type,
            "display_name": self.display_name,
        }
