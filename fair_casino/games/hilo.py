"""Hi-Lo — Card probability (higher/lower/same) with compounding multiplier."""
import random
from dataclasses import dataclass, field

from config.game_schema import HiLoConfig
from fair_casino.games.base import BaseGameEngine, IllegalActionError
from fair_casino.games.cards import Card, draw, shuffle_deck
from tools.fair_rng import SeedState

GUESSES = ("higher", "lower", "same")


def guess_probability(rank: int, guess: str, max_rank: int = 13) -> float:
    """Rank-only odds used for pricing (suits and cards already dealt are ignored)."""
    if guess == "higher":
        return (max_rank - rank) / (max_rank - 1)
    if guess == "lower":
        return (rank - 1) / (max_rank - 1)
    if guess == "same":
        return 1 / (max_rank - 1)
    raise IllegalActionError(f"Unknown guess: {guess}. Expected one of {GUESSES}")


def is_correct(current: Card, nxt: Card, guess: str) -> bool:
    if guess == "higher":
        return nxt.rank > current.rank
    if guess == "lower":
        return nxt.rank < current.rank
    return nxt.rank == current.rank


def next_multiplier(multiplier: float, rank: int, guess: str, config: HiLoConfig) -> float:
    """Compound a correct guess into the running multiplier.

    "same" pays a flat multiplier without the edge factor; higher and lower
    pay the inverse rank probability scaled by the edge factor.
    """
    if guess == "same":
        return round(multiplier * config.same_multiplier, 2)
    probability = guess_probability(rank, guess, config.max_rank)
    return round(multiplier * (1 / probability) * config.edge_factor, 2)


@dataclass
class HiLoOutcome:
    cards: list[Card]
    guesses: list[str]
    status: str
    multiplier: float

    def to_dict(self) -> dict:
        return {
            "cards": [str(c) for c in self.cards],
            "guesses": list(self.guesses),
            "status": self.status,
            "multiplier": self.multiplier,
        }


@dataclass
class HiLoRound:
    seed: SeedState
    config: HiLoConfig
    deck: list[Card] = field(default_factory=list)
    cards: list[Card] = field(default_factory=list)
    guesses: list[str] = field(default_factory=list)
    status: str = "active"
    multiplier: float = 1.0

    def __post_init__(self):
        if not self.deck:
            self.deck = shuffle_deck(self.seed)
        self.cards.append(draw(self.deck))

    @property
    def current(self) -> Card:
        return self.cards[-1]

    @property
    def correct_guesses(self) -> int:
        return len(self.guesses) if self.status != "lost" else len(self.guesses) - 1

    def guess(self, guess: str) -> bool:
        """Reveal the next card against a guess. Returns True if the guess was right."""
        if self.status != "active":
            raise IllegalActionError(f"Round is {self.status}")
        if guess not in GUESSES:
            raise IllegalActionError(f"Unknown guess: {guess}. Expected one of {GUESSES}")

        current = self.current
        nxt = draw(self.deck)
        self.cards.append(nxt)
        self.guesses.append(guess)

        if not is_correct(current, nxt, guess):
            self.status = "lost"
            self.multiplier = 0.0
            return False

        self.multiplier = next_multiplier(self.multiplier, current.rank, guess, self.config)
        if not self.deck:
            self.status = "won"
        return True

    def cash_out(self) -> float:
        if self.status != "active":
            raise IllegalActionError(f"Round is {self.status}")
        if self.correct_guesses < 1:
            raise IllegalActionError("Cash out needs at least one correct guess")
        self.status = "won"
        return self.multiplier

    def outcome(self) -> HiLoOutcome:
        return HiLoOutcome(cards=list(self.cards), guesses=list(self.guesses),
                           status=self.status, multiplier=self.multiplier)


class HiLoEngine(BaseGameEngine):
    game_type = "hilo"
    display_name = "Hi-Lo"

    def generate_config(self, **kw) -> HiLoConfig:
        return HiLoConfig(**kw)

    def compute_house_edge(self, config: HiLoConfig) -> float:
        """Edge of a single higher/lower guess against a fresh 51-card remainder."""
        total_ev = 0.0
        ranks = config.max_rank
        for current in range(1, ranks + 1):
            guess = "higher" if current <= ranks // 2 else "lower"
            winners = (ranks - current) if guess == "higher" else (current - 1)
            win_prob = 4 * winners / (4 * ranks - 1)
            mult = config.edge_factor / guess_probability(current, guess, ranks)
            total_ev += (1.0 / ranks) * win_prob * mult
        return max(0, 1.0 - total_ev)

    def new_round(self, seed: SeedState, config: HiLoConfig) -> HiLoRound:
        return HiLoRound(seed=seed, config=config)

    def resolve(self, seed: SeedState, config: HiLoConfig, decisions=None) -> HiLoOutcome:
        """Replay guesses in order, then cash out if the round is live and eligible."""
        rnd = self.new_round(seed, config)
        for guess in decisions or []:
            if rnd.status != "active":
                break
            rnd.guess(guess)
        if rnd.status == "active" and rnd.correct_guesses >= 1:
            rnd.cash_out()
        return rnd.outcome()

    def payout(self, stake: float, outcome: HiLoOutcome, config: HiLoConfig = None) -> float:
        if outcome.status != "won":
            return 0.0
        return stake * outcome.multiplier

    def simulate_round(self, config: HiLoConfig, seed: SeedState, rng: random.Random) -> float:
        rnd = self.new_round(seed, config)
        target = rng.randint(1, 3)
        while rnd.status == "active" and rnd.correct_guesses < target:
            rnd.guess("higher" if rnd.current.rank <= config.max_rank // 2 else "lower")
        if rnd.status == "active":
            rnd.cash_out()
        return rnd.multiplier if rnd.status == "won" else 0.0
