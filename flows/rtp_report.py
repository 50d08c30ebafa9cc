"""
FAIR CASINO — RTP Report

Runs the Monte Carlo simulation for one or more games with their default
configs and prints theoretical vs measured house edge.

Usage:
    from flows.rtp_report import run_rtp_report
    results = run_rtp_report(["dice", "mines"], rounds=50_000)
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.settings import EngineConfig
from fair_casino.games import get_game_engine

logger = logging.getLogger("fair_casino.report")
console = Console()


def run_rtp_report(game_types: list, rounds: int = None, seed: int = None,
                   output_path: Optional[str] = None) -> list:
    """Simulate each game and render a summary table.

    Args:
        game_types: Registry names to simulate
        rounds: Rounds per game (defaults to FAIR_SIM_ROUNDS)
        seed: Simulation RNG seed (defaults to FAIR_SIM_SEED)
        output_path: Optional JSON file for the raw results

    Returns:
        List of SimResult dicts, one per game
    """
    rounds = rounds or EngineConfig.SIM_ROUNDS
    seed = EngineConfig.SIM_SEED if seed is None else seed

    console.print(Panel(
        f"[bold]🎲 RTP Report[/bold]\n\n"
        f"Games: {', '.join(game_types)}\n"
        f"Rounds per game: {rounds:,}\n"
        f"Simulation seed: {seed}",
        title="Monte Carlo", border_style="cyan",
    ))

    table = Table(title="House edge by game")
    table.add_column("Game", style="bold")
    table.add_column("Edge (theory)", justify="right")
    table.add_column("Edge (measured)", justify="right")
    table.add_column("95% CI", justify="right")
    table.add_column("RTP", justify="right")
    table.add_column("Hit rate", justify="right")
    table.add_column("Max win", justify="right")

    results = []
    for game_type in game_types:
        engine = get_game_engine(game_type)
        config = engine.generate_config()
        sim = engine.simulate(config, rounds=rounds, seed=seed)
        low, high = sim.confidence_95
        table.add_row(
            engine.display_name,
            f"{sim.house_edge_theoretical*100:.2f}%",
            f"{sim.house_edge_measured*100:.2f}%",
            f"{low*100:.2f}% .. {high*100:.2f}%",
            f"{sim.rtp*100:.2f}%",
            f"{sim.hit_rate*100:.1f}%",
            f"{sim.max_multiplier_hit:.2f}x",
        )
        results.append(sim.to_dict())

    console.print(table)

    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({
            "generated_at": datetime.now().isoformat(),
            "rounds": rounds,
            "seed": seed,
            "results": results,
        }, indent=2))
        console.print(f"[green]✅ Report saved: {path}[/green]")
        logger.info(f"RTP report written to {path}")

    return results
