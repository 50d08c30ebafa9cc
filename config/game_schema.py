"""
FAIR CASINO — Game Configuration Schema

Typed, validated configuration for every game the engine resolves.
Callers build one of these per bet; resolvers and payout functions read
their constants from it instead of hardcoded values.

Usage:
    from config.game_schema import DiceConfig, MinesConfig, DEFAULT_CASES
    config = DiceConfig(target=50, direction="over")
    json_str = config.model_dump_json(indent=2)
"""

from __future__ import annotations
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from config.settings import EngineConfig


# ═══════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════

class GameType(str, Enum):
    MINES     = "mines"
    DICE      = "dice"
    TOWER     = "tower"
    BLACKJACK = "blackjack"
    HILO      = "hilo"
    ROULETTE  = "roulette"
    CASES     = "cases"


class DiceDirection(str, Enum):
    OVER  = "over"
    UNDER = "under"


class RouletteBetType(str, Enum):
    STRAIGHT    = "straight"
    SPLIT       = "split"
    STREET      = "street"
    CORNER      = "corner"
    FIVE_NUMBER = "fiveNumber"
    SIX_LINE    = "sixLine"
    DOZEN       = "dozen"
    COLUMN      = "column"
    RED         = "red"
    BLACK       = "black"
    ODD         = "odd"
    EVEN        = "even"
    HIGH        = "high"
    LOW         = "low"


class Rarity(str, Enum):
    COMMON    = "Common"
    UNCOMMON  = "Uncommon"
    RARE      = "Rare"
    EPIC      = "Epic"
    LEGENDARY = "Legendary"


# ═══════════════════════════════════════════════════════════════
# Dice
# ═══════════════════════════════════════════════════════════════

class DiceConfig(BaseModel):
    """Over/under roll against a target on [0, 100)."""
    target: float = Field(50.0, gt=0, lt=100)
    direction: DiceDirection = DiceDirection.OVER
    edge_factor: float = Field(default_factory=lambda: EngineConfig.HOUSE_EDGE_FACTOR, gt=0, le=1)
    min_chance: float = 1.0
    max_chance: float = 40.0
    # Win chances inside this band pay a flat even-money multiplier
    even_money_band: tuple[float, float] = (49.0, 51.0)
    even_money_multiplier: float = 1.90
    decimals: int = Field(2, ge=0, le=6)


# ═══════════════════════════════════════════════════════════════
# Mines / Tower
# ═══════════════════════════════════════════════════════════════

class MinesConfig(BaseModel):
    grid_size: int = Field(25, ge=2, le=100)
    mine_count: int = Field(5, ge=1)
    edge_factor: float = Field(default_factory=lambda: EngineConfig.HOUSE_EDGE_FACTOR, gt=0, le=1)
    max_multiplier: float = Field(20.0, gt=1)

    @model_validator(mode="after")
    def _mines_fit_grid(self) -> MinesConfig:
        if self.mine_count >= self.grid_size:
            raise ValueError(
                f"mine_count ({self.mine_count}) must leave at least one safe tile "
                f"on a {self.grid_size}-tile grid")
        return self

    @property
    def safe_tiles(self) -> int:
        return self.grid_size - self.mine_count


class TowerConfig(BaseModel):
    rows: int = 5
    tiles_per_row: int = 5
    mines_per_row: int = Field(1, ge=1, le=3)
    base_multipliers: list[float] = Field(default_factory=lambda: [1.2, 1.4, 1.6, 1.8, 2.0])
    # Scales the base table by mines per row
    mine_factors: dict[int, float] = Field(default_factory=lambda: {1: 1.0, 2: 1.5, 3: 3.0})

    @model_validator(mode="after")
    def _table_matches_rows(self) -> TowerConfig:
        if len(self.base_multipliers) != self.rows:
            raise ValueError(
                f"base_multipliers has {len(self.base_multipliers)} entries for {self.rows} rows")
        if self.mines_per_row >= self.tiles_per_row:
            raise ValueError("mines_per_row must leave a safe tile in every row")
        return self


# ═══════════════════════════════════════════════════════════════
# Roulette
# ═══════════════════════════════════════════════════════════════

RED_NUMBERS = [1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36]
BLACK_NUMBERS = [n for n in range(1, 37) if n not in RED_NUMBERS]

PAYOUT_RATIOS: dict[RouletteBetType, int] = {
    RouletteBetType.STRAIGHT:    35,
    RouletteBetType.SPLIT:       17,
    RouletteBetType.STREET:      11,
    RouletteBetType.CORNER:       8,
    RouletteBetType.FIVE_NUMBER:  6,
    RouletteBetType.SIX_LINE:     5,
    RouletteBetType.DOZEN:        2,
    RouletteBetType.COLUMN:       2,
    RouletteBetType.RED:          1,
    RouletteBetType.BLACK:        1,
    RouletteBetType.ODD:          1,
    RouletteBetType.EVEN:         1,
    RouletteBetType.HIGH:         1,
    RouletteBetType.LOW:          1,
}

NUMBERS_PER_BET: dict[RouletteBetType, int] = {
    RouletteBetType.STRAIGHT:    1,
    RouletteBetType.SPLIT:       2,
    RouletteBetType.STREET:      3,
    RouletteBetType.CORNER:      4,
    RouletteBetType.FIVE_NUMBER: 5,
    RouletteBetType.SIX_LINE:    6,
    RouletteBetType.DOZEN:       12,
    RouletteBetType.COLUMN:      12,
    RouletteBetType.RED:         18,
    RouletteBetType.BLACK:       18,
    RouletteBetType.ODD:         18,
    RouletteBetType.EVEN:        18,
    RouletteBetType.HIGH:        18,
    RouletteBetType.LOW:         18,
}


class RouletteBet(BaseModel):
    """One chip on the table: a bet type, the numbers it covers, and its stake."""
    bet_type: RouletteBetType
    numbers: list[int]
    amount: float = Field(gt=0)

    @field_validator("numbers")
    @classmethod
    def _numbers_on_wheel(cls, v):
        if any(n < 0 or n > 36 for n in v):
            raise ValueError(f"roulette numbers must be within 0-36: {v}")
        if len(set(v)) != len(v):
            raise ValueError(f"duplicate numbers in bet: {v}")
        return v

    @model_validator(mode="after")
    def _count_matches_type(self) -> RouletteBet:
        expected = NUMBERS_PER_BET[self.bet_type]
        if len(self.numbers) != expected:
            raise ValueError(
                f"{self.bet_type.value} bet covers {expected} numbers, got {len(self.numbers)}")
        return self

    @property
    def ratio(self) -> int:
        return PAYOUT_RATIOS[self.bet_type]


def outside_numbers(bet_type: RouletteBetType, index: int = 0) -> list[int]:
    """Numbers covered by an outside bet. `index` picks the dozen/column (0-2)."""
    bet_type = RouletteBetType(bet_type)
    if bet_type == RouletteBetType.RED:
        return list(RED_NUMBERS)
    if bet_type == RouletteBetType.BLACK:
        return list(BLACK_NUMBERS)
    if bet_type == RouletteBetType.ODD:
        return [n for n in range(1, 37) if n % 2 == 1]
    if bet_type == RouletteBetType.EVEN:
        return [n for n in range(1, 37) if n % 2 == 0]
    if bet_type == RouletteBetType.LOW:
        return list(range(1, 19))
    if bet_type == RouletteBetType.HIGH:
        return list(range(19, 37))
    if not 0 <= index <= 2:
        raise ValueError(f"dozen/column index must be 0-2, got {index}")
    if bet_type == RouletteBetType.DOZEN:
        return list(range(index * 12 + 1, index * 12 + 13))
    if bet_type == RouletteBetType.COLUMN:
        return list(range(index + 1, 37, 3))
    raise ValueError(f"{bet_type.value} is an inside bet; pass its numbers explicitly")


class RouletteConfig(BaseModel):
    bets: list[RouletteBet] = Field(min_length=1)

    @property
    def total_stake(self) -> float:
        return sum(b.amount for b in self.bets)


# ═══════════════════════════════════════════════════════════════
# Cases
# ═══════════════════════════════════════════════════════════════

class CaseReward(BaseModel):
    name: str
    value: float = Field(ge=0)
    probability: float = Field(gt=0, le=100)   # percent
    rarity: Rarity = Rarity.COMMON
    image: str = ""


class CaseDefinition(BaseModel):
    id: str
    name: str
    price: float = Field(gt=0)
    description: str = ""
    rewards: list[CaseReward] = Field(min_length=1)
    high_tier: bool = False

    @field_validator("rewards")
    @classmethod
    def _probabilities_fit(cls, v):
        total = sum(r.probability for r in v)
        if total > 100.0 + 1e-9:
            raise ValueError(f"reward probabilities sum to {total}%, above 100%")
        return v

    @property
    def expected_value(self) -> float:
        return sum(r.value * r.probability / 100.0 for r in self.rewards)


def _reward(name: str, value: float, probability: float, rarity: Rarity) -> CaseReward:
    return CaseReward(name=name, value=value, probability=probability, rarity=rarity)


DEFAULT_CASES: list[CaseDefinition] = [
    CaseDefinition(
        id="starter-cache", name="Starter Cache", price=5000,
        description="Entry-Level Ships – Ideal for new pilots.",
        rewards=[
            _reward("Chevron", 1500, 40, Rarity.COMMON),
            _reward("Fargo", 2500, 30, Rarity.COMMON),
            _reward("Yuma", 12500, 20, Rarity.UNCOMMON),
            _reward("Ozark", 32500, 10, Rarity.RARE),
        ],
    ),
    CaseDefinition(
        id="prospect-box", name="Prospect Box", price=10000,
        description="Mining-Focused Ships – For aspiring miners.",
        rewards=[
            _reward("Honey Badger", 1500, 40, Rarity.COMMON),
            _reward("Ozark", 32500, 25, Rarity.RARE),
            _reward("Eos", 65000, 15, Rarity.EPIC),
            _reward("Koronis", 5000, 20, Rarity.UNCOMMON),
        ],
    ),
    CaseDefinition(
        id="mercenary-crate", name="Mercenary Crate", price=25000,
        description="Combat-Ready Ships – For those seeking battle.",
        rewards=[
            _reward("Edict", 62500, 15, Rarity.EPIC),
            _reward("Infinity", 38000, 20, Rarity.RARE),
            _reward("Radix", 21500, 25, Rarity.UNCOMMON),
            _reward("Claymore", 6500, 40, Rarity.COMMON),
        ],
    ),
    CaseDefinition(
        id="tactical-supply", name="Tactical Supply Case", price=50000, high_tier=True,
        description="Advanced Combat Ships – For seasoned fighters.",
        rewards=[
            _reward("Polaris", 7500, 50, Rarity.COMMON),
            _reward("Liberty", 40000, 30, Rarity.RARE),
            _reward("Judicator Frigate", 200000, 12.5, Rarity.EPIC),
            _reward("Bulwark", 550000, 7.5, Rarity.LEGENDARY),
        ],
    ),
    CaseDefinition(
        id="marauders-vault", name="Marauder's Vault", price=100000, high_tier=True,
        description="Elite Combat Ships – For the elite warriors.",
        rewards=[
            _reward("Infinity", 38000, 40, Rarity.UNCOMMON),
            _reward("Edict", 65000, 30, Rarity.RARE),
            _reward("Judicator Frigate", 220000, 15, Rarity.EPIC),
            _reward("Hybrid Polaris", 320000, 10, Rarity.EPIC),
            _reward("Justice", 675000, 5, Rarity.LEGENDARY),
        ],
    ),
]


def get_case(case_id: str) -> CaseDefinition:
    for case in DEFAULT_CASES:
        if case.id == case_id:
            return case
    raise ValueError(f"Unknown case: {case_id}. Available: {[c.id for c in DEFAULT_CASES]}")


# ═══════════════════════════════════════════════════════════════
# Card games
# ═══════════════════════════════════════════════════════════════

class BlackjackConfig(BaseModel):
    max_hands: int = Field(4, ge=1, le=8)
    dealer_stands_on: int = 17
    blackjack_payout: float = 1.5              # 3:2
    double_totals: list[int] = Field(default_factory=lambda: [9, 10, 11])


class HiLoConfig(BaseModel):
    edge_factor: float = Field(default_factory=lambda: EngineConfig.HOUSE_EDGE_FACTOR, gt=0, le=1)
    # "same" pays a flat multiplier with no edge factor applied
    same_multiplier: float = 12.0
    max_rank: int = 13


GAME_CONFIGS: dict[GameType, type[BaseModel]] = {
    GameType.MINES: MinesConfig,
    GameType.DICE: DiceConfig,
    GameType.TOWER: TowerConfig,
    GameType.BLACKJACK: BlackjackConfig,
    GameType.HILO: HiLoConfig,
    GameType.ROULETTE: RouletteConfig,
}


def default_config(game_type: str, **overrides) -> Optional[BaseModel]:
    """Build the default config for a game type, applying field overrides."""
    game_type = GameType(game_type)
    if game_type == GameType.CASES:
        return get_case(overrides.get("case_id", DEFAULT_CASES[0].id))
    if game_type == GameType.ROULETTE and "bets" not in overrides:
        overrides["bets"] = [RouletteBet(bet_type=RouletteBetType.RED,
                                         numbers=outside_numbers(RouletteBetType.RED),
                                         amount=1.0)]
    return GAME_CONFIGS[game_type](**overrides)
