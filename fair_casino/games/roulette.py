"""Roulette — Single-zero wheel (0-36) with fixed-odds bet table."""
import random
from dataclasses import dataclass

from config.game_schema import (
    RED_NUMBERS, RouletteBet, RouletteBetType, RouletteConfig, outside_numbers,
)
from fair_casino.games.base import BaseGameEngine, Settlement
from tools.fair_rng import SeedState, derive_int


def pocket_color(number: int) -> str:
    if number == 0:
        return "green"
    return "red" if number in RED_NUMBERS else "black"


def spin_wheel(seed: SeedState) -> int:
    return derive_int(seed.params(0), 0, 36)


def bet_payout(bet: RouletteBet, result: int) -> float:
    """Stake plus winnings for a covering bet, 0 otherwise."""
    if result in bet.numbers:
        return bet.amount * (bet.ratio + 1)
    return 0.0


@dataclass
class RouletteOutcome:
    result: int
    color: str
    winning_bets: list[int]     # indexes into config.bets

    def to_dict(self) -> dict:
        return {
            "result": self.result,
            "color": self.color,
            "winning_bets": list(self.winning_bets),
        }


class RouletteEngine(BaseGameEngine):
    game_type = "roulette"
    display_name = "Roulette"

    def generate_config(self, bets: list = None, **kw) -> RouletteConfig:
        if not bets:
            bets = [RouletteBet(bet_type=RouletteBetType.RED,
                                numbers=outside_numbers(RouletteBetType.RED), amount=1.0)]
        return RouletteConfig(bets=bets, **kw)

    def compute_house_edge(self, config: RouletteConfig) -> float:
        """Stake-weighted edge across the bets on the table."""
        stake = config.total_stake
        expected = sum(
            bet.amount * (bet.ratio + 1) * len(bet.numbers) / 37.0 for bet in config.bets
        )
        return 1.0 - expected / stake

    def resolve(self, seed: SeedState, config: RouletteConfig, decisions=None) -> RouletteOutcome:
        result = spin_wheel(seed)
        winners = [i for i, bet in enumerate(config.bets) if result in bet.numbers]
        self.logger.debug(f"Roulette spin {result}: {len(winners)}/{len(config.bets)} bets win")
        return RouletteOutcome(result=result, color=pocket_color(result), winning_bets=winners)

    def payout(self, stake: float, outcome: RouletteOutcome, config: RouletteConfig) -> float:
        """Total returned across all bets. `stake` is the table total and is not rescaled."""
        return sum(bet_payout(bet, outcome.result) for bet in config.bets)

    def settle(self, stake: float, outcome: RouletteOutcome, config: RouletteConfig) -> Settlement:
        """The amount wagered is the sum of the chips on the table, whatever `stake` says."""
        return Settlement(stake=config.total_stake, payout=self.payout(stake, outcome, config))

    def simulate_round(self, config: RouletteConfig, seed: SeedState, rng: random.Random) -> float:
        outcome = self.resolve(seed, config)
        return self.payout(config.total_stake, outcome, config) / config.total_stake
