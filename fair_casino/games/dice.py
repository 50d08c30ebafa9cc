"""Dice — Uniform roll on [0, 100) with over/under threshold."""
import random
from dataclasses import dataclass

from config.game_schema import DiceConfig, DiceDirection
from fair_casino.games.base import BaseGameEngine
from tools.fair_rng import SeedState, derive_float


@dataclass
class DiceQuote:
    win_chance: float
    multiplier: float


@dataclass
class DiceOutcome:
    roll: float
    target: float
    direction: str
    win: bool
    multiplier: float

    def to_dict(self) -> dict:
        return {
            "roll": self.roll,
            "target": self.target,
            "direction": self.direction,
            "win": self.win,
            "multiplier": self.multiplier,
        }


def dice_quote(config: DiceConfig) -> DiceQuote:
    """Win chance and multiplier shown to the player before the roll.

    A raw chance inside the even-money band pays the flat band multiplier;
    anything else is clamped to [min_chance, max_chance] and priced with the
    edge factor.
    """
    if config.direction == DiceDirection.OVER:
        chance = 100.0 - config.target
    else:
        chance = config.target

    low, high = config.even_money_band
    if low <= chance <= high:
        return DiceQuote(win_chance=chance, multiplier=round(config.even_money_multiplier, 2))

    chance = max(min(chance, config.max_chance), config.min_chance)
    multiplier = (100.0 / chance) * config.edge_factor
    return DiceQuote(win_chance=chance, multiplier=round(multiplier, 2))


def roll_dice(seed: SeedState, config: DiceConfig = None) -> float:
    decimals = config.decimals if config else 2
    return derive_float(seed.params(0), 0, 100, decimals)


def is_winning_roll(roll: float, config: DiceConfig) -> bool:
    if config.direction == DiceDirection.OVER:
        return roll > config.target
    return roll < config.target


class DiceEngine(BaseGameEngine):
    game_type = "dice"
    display_name = "Dice"

    def generate_config(self, target: float = 50.0, direction: str = "over", **kw) -> DiceConfig:
        return DiceConfig(target=target, direction=direction, **kw)

    def compute_house_edge(self, config: DiceConfig) -> float:
        quote = dice_quote(config)
        if config.direction == DiceDirection.OVER:
            true_chance = (100.0 - config.target) / 100.0
        else:
            true_chance = config.target / 100.0
        return 1.0 - true_chance * quote.multiplier

    def resolve(self, seed: SeedState, config: DiceConfig, decisions=None) -> DiceOutcome:
        roll = roll_dice(seed, config)
        quote = dice_quote(config)
        win = is_winning_roll(roll, config)
        self.logger.debug(f"Dice roll {roll} {config.direction.value} {config.target}: "
                          f"{'win' if win else 'lose'}")
        return DiceOutcome(
            roll=roll,
            target=config.target,
            direction=config.direction.value,
            win=win,
            multiplier=quote.multiplier,
        )

    def payout(self, stake: float, outcome: DiceOutcome, config: DiceConfig = None) -> float:
        return stake * outcome.multiplier if outcome.win else 0.0

    def simulate_round(self, config: DiceConfig, seed: SeedState, rng: random.Random) -> float:
        outcome = self.resolve(seed, config)
        return outcome.multiplier if outcome.win else 0.0
