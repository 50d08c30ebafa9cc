"""Mines — Combinatorial probability (n choose k) on a 5×5 grid."""
import random
from dataclasses import dataclass, field

from config.game_schema import MinesConfig
from fair_casino.games.base import BaseGameEngine, IllegalActionError
from fair_casino.games.placement import place_unique
from tools.fair_rng import SeedState


def mines_multiplier(config: MinesConfig, revealed: int) -> float:
    """Edge-adjusted, capped multiplier after `revealed` safe tiles."""
    if revealed <= 0:
        return 1.0
    gs = config.grid_size
    mc = config.mine_count
    multi = 1.0
    for i in range(revealed):
        multi *= (gs - i) / (gs - mc - i)
    multi *= config.edge_factor
    multi = min(multi, config.max_multiplier)
    return round(multi, 2)


def place_mines(seed: SeedState, config: MinesConfig) -> list[int]:
    return place_unique(seed.params(), config.grid_size, config.mine_count, lane=0)


@dataclass
class MinesOutcome:
    mines: list[int]
    revealed: list[int]
    status: str              # active / won / lost
    multiplier: float

    def to_dict(self) -> dict:
        return {
            "mines": sorted(self.mines),
            "revealed": list(self.revealed),
            "status": self.status,
            "multiplier": self.multiplier,
        }


@dataclass
class MinesRound:
    """One Mines round. The caller reveals tiles and cashes out between decisions."""
    seed: SeedState
    config: MinesConfig
    mines: list[int] = field(default_factory=list)
    revealed: list[int] = field(default_factory=list)
    status: str = "active"
    multiplier: float = 1.0

    def __post_init__(self):
        if not self.mines:
            self.mines = place_mines(self.seed, self.config)

    def reveal(self, index: int) -> bool:
        """Reveal a tile. Returns True if it was safe."""
        if self.status != "active":
            raise IllegalActionError(f"Round is {self.status}")
        if not 0 <= index < self.config.grid_size:
            raise IllegalActionError(f"Tile {index} is off the grid")
        if index in self.revealed:
            raise IllegalActionError(f"Tile {index} already revealed")

        self.revealed.append(index)
        if index in self.mines:
            self.status = "lost"
            self.multiplier = 0.0
            return False

        self.multiplier = mines_multiplier(self.config, len(self.revealed))
        if len(self.revealed) == self.config.safe_tiles:
            self.status = "won"
        return True

    def cash_out(self) -> float:
        if self.status != "active":
            raise IllegalActionError(f"Round is {self.status}")
        self.status = "won"
        return self.multiplier

    def outcome(self) -> MinesOutcome:
        return MinesOutcome(mines=list(self.mines), revealed=list(self.revealed),
                            status=self.status, multiplier=self.multiplier)


class MinesEngine(BaseGameEngine):
    game_type = "mines"
    display_name = "Mines"

    def generate_config(self, grid_size: int = 25, mine_count: int = 5, **kw) -> MinesConfig:
        return MinesConfig(grid_size=grid_size, mine_count=mine_count, **kw)

    def compute_house_edge(self, config: MinesConfig) -> float:
        # Below the cap every cash-out point returns edge_factor of the stake
        return round(1.0 - config.edge_factor, 6)

    def new_round(self, seed: SeedState, config: MinesConfig) -> MinesRound:
        return MinesRound(seed=seed, config=config)

    def resolve(self, seed: SeedState, config: MinesConfig, decisions=None) -> MinesOutcome:
        """Replay tile picks in order, then cash out if the round is still live."""
        rnd = self.new_round(seed, config)
        for index in decisions or []:
            if rnd.status != "active":
                break
            rnd.reveal(index)
        if rnd.status == "active":
            rnd.cash_out()
        self.logger.debug(f"Mines resolved: {rnd.status} at {rnd.multiplier}x")
        return rnd.outcome()

    def payout(self, stake: float, outcome: MinesOutcome, config: MinesConfig = None) -> float:
        if outcome.status != "won":
            return 0.0
        return stake * outcome.multiplier

    def simulate_round(self, config: MinesConfig, seed: SeedState, rng: random.Random) -> float:
        # Player picks a random number of tiles to reveal (1-5)
        target_reveals = min(rng.randint(1, 5), config.safe_tiles)
        picks = rng.sample(range(config.grid_size), config.grid_size)
        rnd = self.new_round(seed, config)
        for index in picks:
            if rnd.status != "active" or len(rnd.revealed) >= target_reveals:
                break
            rnd.reveal(index)
        if rnd.status == "active":
            rnd.cash_out()
        return rnd.multiplier if rnd.status == "won" else 0.0
