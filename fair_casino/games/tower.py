"""Tower — Climb five rows of five tiles, each row hiding its own mines."""
import random
from dataclasses import dataclass, field

from config.game_schema import TowerConfig
from fair_casino.games.base import BaseGameEngine, IllegalActionError
from fair_casino.games.placement import place_unique
from tools.fair_rng import SeedState


def tower_multipliers(config: TowerConfig) -> list[float]:
    """Per-row multiplier table for the configured mines per row."""
    factor = config.mine_factors.get(config.mines_per_row, 1.0)
    return [round(m * factor, 2) for m in config.base_multipliers]


def place_tower_mines(seed: SeedState, config: TowerConfig) -> list[list[int]]:
    """Independent mine set per row; row `r` draws from placement lane `r`."""
    params = seed.params()
    return [
        place_unique(params, config.tiles_per_row, config.mines_per_row, lane=row)
        for row in range(config.rows)
    ]


@dataclass
class TowerOutcome:
    mines: list[list[int]]
    picks: list[int]
    status: str
    multiplier: float

    @property
    def rows_cleared(self) -> int:
        return len(self.picks) if self.status != "lost" else len(self.picks) - 1

    def to_dict(self) -> dict:
        return {
            "mines": [sorted(r) for r in self.mines],
            "picks": list(self.picks),
            "rows_cleared": self.rows_cleared,
            "status": self.status,
            "multiplier": self.multiplier,
        }


@dataclass
class TowerRound:
    seed: SeedState
    config: TowerConfig
    mines: list[list[int]] = field(default_factory=list)
    picks: list[int] = field(default_factory=list)
    status: str = "active"
    multiplier: float = 1.0

    def __post_init__(self):
        if not self.mines:
            self.mines = place_tower_mines(self.seed, self.config)
        self._table = tower_multipliers(self.config)

    @property
    def current_row(self) -> int:
        return len(self.picks)

    def pick(self, tile: int) -> bool:
        """Pick a tile on the current row. Returns True if it was safe."""
        if self.status != "active":
            raise IllegalActionError(f"Round is {self.status}")
        if not 0 <= tile < self.config.tiles_per_row:
            raise IllegalActionError(f"Tile {tile} is outside the row")

        row = self.current_row
        self.picks.append(tile)
        if tile in self.mines[row]:
            self.status = "lost"
            self.multiplier = 0.0
            return False

        self.multiplier = self._table[row]
        if row == self.config.rows - 1:
            self.status = "won"
        return True

    def cash_out(self) -> float:
        if self.status != "active":
            raise IllegalActionError(f"Round is {self.status}")
        self.status = "won"
        return self.multiplier

    def outcome(self) -> TowerOutcome:
        return TowerOutcome(mines=[list(r) for r in self.mines], picks=list(self.picks),
                            status=self.status, multiplier=self.multiplier)


class TowerEngine(BaseGameEngine):
    game_type = "tower"
    display_name = "Tower"

    def generate_config(self, mines_per_row: int = 1, **kw) -> TowerConfig:
        return TowerConfig(mines_per_row=mines_per_row, **kw)

    def compute_house_edge(self, config: TowerConfig) -> float:
        """Edge of climbing to the top, the best-paying line for every table."""
        p_row = (config.tiles_per_row - config.mines_per_row) / config.tiles_per_row
        top = tower_multipliers(config)[-1]
        return 1.0 - top * p_row ** config.rows

    def new_round(self, seed: SeedState, config: TowerConfig) -> TowerRound:
        return TowerRound(seed=seed, config=config)

    def resolve(self, seed: SeedState, config: TowerConfig, decisions=None) -> TowerOutcome:
        """Replay one tile pick per row, then cash out if still climbing."""
        rnd = self.new_round(seed, config)
        for tile in decisions or []:
            if rnd.status != "active":
                break
            rnd.pick(tile)
        if rnd.status == "active":
            rnd.cash_out()
        return rnd.outcome()

    def payout(self, stake: float, outcome: TowerOutcome, config: TowerConfig = None) -> float:
        if outcome.status != "won":
            return 0.0
        return stake * outcome.multiplier

    def simulate_round(self, config: TowerConfig, seed: SeedState, rng: random.Random) -> float:
        target_rows = rng.randint(1, config.rows)
        picks = [rng.randrange(config.tiles_per_row) for _ in range(target_rows)]
        outcome = self.resolve(seed, config, picks)
        return self.payout(1.0, outcome)
