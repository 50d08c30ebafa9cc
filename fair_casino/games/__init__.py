"""
FAIR CASINO — Provably Fair Game Engines

Outcome resolvers for every game on the platform. Each game type exposes:
resolve(), payout(), compute_house_edge(), simulate(), and generate_config().

Usage:
    from fair_casino.games import get_game_engine
    from tools.fair_rng import new_round_seed
    engine = get_game_engine("dice")
    config = engine.generate_config(target=50, direction="over")
    outcome = engine.resolve(new_round_seed(), config)
    credited = engine.payout(10.0, outcome, config)
"""

from fair_casino.games.blackjack import BlackjackEngine
from fair_casino.games.cases import CasesEngine
from fair_casino.games.dice import DiceEngine
from fair_casino.games.hilo import HiLoEngine
from fair_casino.games.mines import MinesEngine
from fair_casino.games.roulette import RouletteEngine
from fair_casino.games.tower import TowerEngine

GAME_ENGINES = {
    "mines": MinesEngine,
    "dice": DiceEngine,
    "tower": TowerEngine,
    "blackjack": BlackjackEngine,
    "hilo": HiLoEngine,
    "roulette": RouletteEngine,
    "cases": CasesEngine,
}

GAME_TYPES = list(GAME_ENGINES.keys())


def get_game_engine(game_type: str):
    """Get the resolver engine for a game type."""
    cls = GAME_ENGINES.get(game_type.lower())
    if cls is None:
        raise ValueError(f"Unknown game type: {game_type}. Available: {GAME_TYPES}")
    return cls()
