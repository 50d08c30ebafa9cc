#!/usr/bin/env python3
"""
FAIR CASINO — Game Resolver Tests

Run: python tests_games.py -v

Test categories:
  TestPlacement  — Unique placement lanes and deterministic fallback
  TestMines      — Multiplier table, placement invariant, reveal/cash-out
  TestDice       — Quote bands, clamping, end-to-end payout
  TestTower      — Per-row tables, climbing, validation
  TestRoulette   — Bet validation, coverage, payouts
  TestCases      — Cumulative walk, fallback, case battles
"""

import random
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError

from config.game_schema import (
    CaseDefinition, CaseReward, DiceConfig, MinesConfig, RouletteBet,
    RouletteBetType, RouletteConfig, TowerConfig, get_case, outside_numbers,
)
from fair_casino.games.base import IllegalActionError, Settlement, simulation_seed
from fair_casino.games.cases import CasesEngine, open_case, select_reward
from fair_casino.games.dice import DiceEngine, DiceOutcome, dice_quote, roll_dice
from fair_casino.games.mines import MinesEngine, MinesRound, mines_multiplier, place_mines
from fair_casino.games.placement import place_unique
from fair_casino.games.roulette import (
    RouletteEngine, RouletteOutcome, bet_payout, pocket_color, spin_wheel,
)
from fair_casino.games.tower import TowerEngine, TowerRound, place_tower_mines, tower_multipliers
from tools.fair_rng import SeedState

SEED = SeedState(client_seed="games", server_seed="resolver-server-seed", nonce=99)


def _seeds(n: int):
    rng = random.Random(2024)
    return [simulation_seed(rng) for _ in range(n)]


# ============================================================
# Placement
# ============================================================

class TestPlacement(unittest.TestCase):

    def test_unique_and_in_range(self):
        cells = place_unique(SEED.params(), 25, 10)
        self.assertEqual(len(cells), 10)
        self.assertEqual(len(set(cells)), 10)
        self.assertTrue(all(0 <= c < 25 for c in cells))

    def test_fill_whole_grid(self):
        self.assertEqual(sorted(place_unique(SEED.params(), 6, 6)), list(range(6)))

    def test_reproducible(self):
        self.assertEqual(place_unique(SEED.params(), 25, 5), place_unique(SEED.params(), 25, 5))

    def test_lanes_are_independent(self):
        a = [place_unique(SEED.params(), 25, 5, lane=0) for _ in range(2)]
        self.assertEqual(a[0], a[1])
        self.assertNotEqual(place_unique(SEED.params(), 1000, 5, lane=0),
                            place_unique(SEED.params(), 1000, 5, lane=1))

    def test_exhausted_lane_warns_and_completes(self):
        with self.assertLogs("fair_casino.placement", level="WARNING"):
            cells = place_unique(SEED.params(), 5, 3, stride=1)
        self.assertEqual(len(set(cells)), 3)
        with self.assertLogs("fair_casino.placement", level="WARNING"):
            again = place_unique(SEED.params(), 5, 3, stride=1)
        self.assertEqual(cells, again)

    def test_count_out_of_bounds(self):
        with self.assertRaises(ValueError):
            place_unique(SEED.params(), 5, 6)
        with self.assertRaises(ValueError):
            place_unique(SEED.params(), 5, -1)


# ============================================================
# Mines
# ============================================================

class TestMines(unittest.TestCase):

    def setUp(self):
        self.config = MinesConfig(grid_size=25, mine_count=5, edge_factor=0.95)
        self.engine = MinesEngine()

    def test_multiplier_three_reveals(self):
        # (25/20)(24/19)(23/18) * 0.95 = 1.9167
        self.assertEqual(mines_multiplier(self.config, 3), 1.92)

    def test_multiplier_monotonic_and_capped(self):
        previous = 1.0
        for revealed in range(1, self.config.safe_tiles + 1):
            m = mines_multiplier(self.config, revealed)
            self.assertGreaterEqual(m, previous)
            self.assertLessEqual(m, 20.0)
            previous = m
        self.assertEqual(mines_multiplier(self.config, self.config.safe_tiles), 20.0)

    def test_cap_on_first_reveal(self):
        config = MinesConfig(mine_count=24, edge_factor=0.95)
        self.assertEqual(mines_multiplier(config, 1), 20.0)

    def test_placement_invariant(self):
        for seed in _seeds(100):
            mines = place_mines(seed, self.config)
            self.assertEqual(len(mines), 5)
            self.assertEqual(len(set(mines)), 5)
            self.assertTrue(all(0 <= m < 25 for m in mines))

    def test_end_to_end_payout(self):
        rnd = MinesRound(seed=SEED, config=self.config, mines=[0, 1, 2, 3, 4])
        for tile in (5, 6, 7):
            self.assertTrue(rnd.reveal(tile))
        self.assertEqual(rnd.cash_out(), 1.92)
        self.assertAlmostEqual(self.engine.payout(1000, rnd.outcome()), 1920.0)

    def test_hit_mine_loses(self):
        rnd = MinesRound(seed=SEED, config=self.config, mines=[0, 1, 2, 3, 4])
        rnd.reveal(10)
        self.assertFalse(rnd.reveal(3))
        self.assertEqual(rnd.status, "lost")
        self.assertEqual(self.engine.payout(1000, rnd.outcome()), 0.0)
        with self.assertRaises(IllegalActionError):
            rnd.cash_out()

    def test_illegal_reveals(self):
        rnd = MinesRound(seed=SEED, config=self.config, mines=[0, 1, 2, 3, 4])
        rnd.reveal(10)
        with self.assertRaises(IllegalActionError):
            rnd.reveal(10)
        with self.assertRaises(IllegalActionError):
            rnd.reveal(25)

    def test_clearing_board_wins(self):
        config = MinesConfig(grid_size=4, mine_count=2, edge_factor=0.95)
        rnd = MinesRound(seed=SEED, config=config, mines=[0, 1])
        rnd.reveal(2)
        rnd.reveal(3)
        self.assertEqual(rnd.status, "won")

    def test_resolve_replays_picks(self):
        mines = place_mines(SEED, self.config)
        safe = [i for i in range(25) if i not in mines][:2]
        outcome = self.engine.resolve(SEED, self.config, safe)
        self.assertEqual(outcome.status, "won")
        self.assertEqual(outcome.multiplier, mines_multiplier(self.config, 2))
        lost = self.engine.resolve(SEED, self.config, [mines[0], safe[0]])
        self.assertEqual(lost.status, "lost")
        self.assertEqual(lost.revealed, [mines[0]])

    def test_config_rejects_full_board(self):
        with self.assertRaises(ValidationError):
            MinesConfig(grid_size=25, mine_count=25)


# ============================================================
# Dice
# ============================================================

class TestDice(unittest.TestCase):

    def setUp(self):
        self.engine = DiceEngine()

    def test_even_money_band(self):
        self.assertEqual(dice_quote(DiceConfig(target=50, direction="over")).multiplier, 1.90)
        self.assertEqual(dice_quote(DiceConfig(target=49.5, direction="under")).multiplier, 1.90)

    def test_ten_percent_chance(self):
        self.assertEqual(dice_quote(DiceConfig(target=90, direction="over", edge_factor=0.95)).multiplier, 9.5)
        self.assertEqual(dice_quote(DiceConfig(target=10, direction="under", edge_factor=0.95)).multiplier, 9.5)

    def test_chance_clamped(self):
        quote = dice_quote(DiceConfig(target=99.5, direction="over", edge_factor=0.95))
        self.assertEqual(quote.win_chance, 1.0)
        self.assertEqual(quote.multiplier, 95.0)
        self.assertEqual(dice_quote(DiceConfig(target=80, direction="under")).win_chance, 40.0)

    def test_roll_range(self):
        for seed in _seeds(200):
            roll = roll_dice(seed)
            self.assertTrue(0 <= roll <= 100)
            self.assertEqual(round(roll, 2), roll)

    def test_end_to_end_payout(self):
        win = DiceOutcome(roll=73.21, target=50, direction="over", win=True, multiplier=1.9)
        lose = DiceOutcome(roll=12.5, target=50, direction="over", win=False, multiplier=1.9)
        self.assertAlmostEqual(self.engine.payout(500, win), 950.0)
        self.assertEqual(self.engine.payout(500, lose), 0.0)

    def test_resolve_consistent(self):
        config = DiceConfig(target=50, direction="over")
        outcome = self.engine.resolve(SEED, config)
        self.assertEqual(outcome.roll, roll_dice(SEED, config))
        self.assertEqual(outcome.win, outcome.roll > 50)

    def test_target_validation(self):
        with self.assertRaises(ValidationError):
            DiceConfig(target=100)
        with self.assertRaises(ValidationError):
            DiceConfig(target=50, direction="sideways")


# ============================================================
# Tower
# ============================================================

class TestTower(unittest.TestCase):

    def setUp(self):
        self.engine = TowerEngine()

    def test_multiplier_tables(self):
        for mines, expected in [(1, [1.2, 1.4, 1.6, 1.8, 2.0]),
                                (2, [1.8, 2.1, 2.4, 2.7, 3.0]),
                                (3, [3.6, 4.2, 4.8, 5.4, 6.0])]:
            table = tower_multipliers(TowerConfig(mines_per_row=mines))
            for got, want in zip(table, expected):
                self.assertAlmostEqual(got, want)

    def test_rows_placed_independently(self):
        config = TowerConfig(mines_per_row=2)
        rows = place_tower_mines(SEED, config)
        self.assertEqual(len(rows), 5)
        for row in rows:
            self.assertEqual(len(set(row)), 2)
            self.assertTrue(all(0 <= t < 5 for t in row))
        self.assertEqual(rows, place_tower_mines(SEED, config))

    def test_climb_to_top(self):
        rnd = TowerRound(seed=SEED, config=TowerConfig(), mines=[[0]] * 5)
        for _ in range(5):
            self.assertTrue(rnd.pick(1))
        self.assertEqual(rnd.status, "won")
        self.assertEqual(rnd.multiplier, 2.0)
        self.assertEqual(rnd.outcome().rows_cleared, 5)

    def test_cash_out_mid_climb(self):
        rnd = TowerRound(seed=SEED, config=TowerConfig(), mines=[[0]] * 5)
        rnd.pick(2)
        rnd.pick(3)
        self.assertEqual(rnd.cash_out(), 1.4)
        self.assertAlmostEqual(self.engine.payout(100, rnd.outcome()), 140.0)

    def test_mine_ends_climb(self):
        rnd = TowerRound(seed=SEED, config=TowerConfig(), mines=[[0]] * 5)
        rnd.pick(1)
        self.assertFalse(rnd.pick(0))
        self.assertEqual(rnd.status, "lost")
        self.assertEqual(rnd.outcome().rows_cleared, 1)
        with self.assertRaises(IllegalActionError):
            rnd.pick(1)

    def test_tile_outside_row(self):
        rnd = TowerRound(seed=SEED, config=TowerConfig(), mines=[[0]] * 5)
        with self.assertRaises(IllegalActionError):
            rnd.pick(5)

    def test_config_validation(self):
        with self.assertRaises(ValidationError):
            TowerConfig(mines_per_row=4)
        with self.assertRaises(ValidationError):
            TowerConfig(rows=4)


# ============================================================
# Roulette
# ============================================================

class TestRoulette(unittest.TestCase):

    def setUp(self):
        self.engine = RouletteEngine()

    def test_straight_up_pays_thirty_six(self):
        bet = RouletteBet(bet_type="straight", numbers=[17], amount=100)
        self.assertEqual(bet_payout(bet, 17), 3600)
        self.assertEqual(bet_payout(bet, 16), 0)

    def test_table_payout_sums_winning_bets(self):
        config = RouletteConfig(bets=[
            RouletteBet(bet_type="straight", numbers=[17], amount=10),
            RouletteBet(bet_type="black", numbers=outside_numbers("black"), amount=20),
            RouletteBet(bet_type="dozen", numbers=outside_numbers("dozen", 2), amount=5),
        ])
        outcome = RouletteOutcome(result=17, color=pocket_color(17), winning_bets=[0, 1])
        self.assertEqual(outcome.color, "black")
        self.assertEqual(self.engine.payout(config.total_stake, outcome, config), 360 + 40)

    def test_zero_loses_outside_bets(self):
        config = RouletteConfig(bets=[RouletteBet(bet_type="red", numbers=outside_numbers("red"), amount=10)])
        outcome = RouletteOutcome(result=0, color=pocket_color(0), winning_bets=[])
        self.assertEqual(outcome.color, "green")
        self.assertEqual(self.engine.payout(10, outcome, config), 0)

    def test_spin_in_range(self):
        for seed in _seeds(200):
            self.assertTrue(0 <= spin_wheel(seed) <= 36)

    def test_resolve_marks_winners(self):
        config = self.engine.generate_config()
        outcome = self.engine.resolve(SEED, config)
        self.assertEqual(outcome.result, spin_wheel(SEED))
        self.assertEqual(bool(outcome.winning_bets), outcome.result in config.bets[0].numbers)

    def test_single_zero_edge(self):
        self.assertAlmostEqual(self.engine.compute_house_edge(self.engine.generate_config()), 1 / 37)

    def test_outside_numbers(self):
        self.assertEqual(outside_numbers("dozen", 1), list(range(13, 25)))
        self.assertEqual(outside_numbers("column", 0)[:3], [1, 4, 7])
        self.assertEqual(len(outside_numbers(RouletteBetType.ODD)), 18)
        with self.assertRaises(ValueError):
            outside_numbers("straight")

    def test_bet_validation(self):
        with self.assertRaises(ValidationError):
            RouletteBet(bet_type="straight", numbers=[1, 2], amount=1)
        with self.assertRaises(ValidationError):
            RouletteBet(bet_type="straight", numbers=[37], amount=1)
        with self.assertRaises(ValidationError):
            RouletteBet(bet_type="split", numbers=[4, 4], amount=1)
        with self.assertRaises(ValidationError):
            RouletteBet(bet_type="straight", numbers=[4], amount=0)
        with self.assertRaises(ValidationError):
            RouletteConfig(bets=[])


# ============================================================
# Cases
# ============================================================

class TestCases(unittest.TestCase):

    def setUp(self):
        self.engine = CasesEngine()
        self.case = get_case("starter-cache")

    def test_cumulative_walk(self):
        self.assertEqual(select_reward(self.case, 1).name, "Chevron")
        self.assertEqual(select_reward(self.case, 40).name, "Chevron")
        self.assertEqual(select_reward(self.case, 41).name, "Fargo")
        self.assertEqual(select_reward(self.case, 90).name, "Yuma")
        self.assertEqual(select_reward(self.case, 100).name, "Ozark")

    def test_last_reward_is_fallback(self):
        case = CaseDefinition(id="thin", name="Thin", price=10, rewards=[
            CaseReward(name="a", value=1, probability=20),
            CaseReward(name="b", value=50, probability=30),
        ])
        self.assertEqual(select_reward(case, 80).name, "b")

    def test_probabilities_above_hundred_rejected(self):
        with self.assertRaises(ValidationError):
            CaseDefinition(id="bad", name="Bad", price=10, rewards=[
                CaseReward(name="a", value=1, probability=60),
                CaseReward(name="b", value=1, probability=50),
            ])

    def test_unknown_case(self):
        with self.assertRaises(ValueError):
            get_case("nope")

    def test_open_and_payout(self):
        outcome = self.engine.resolve(SEED, self.case)
        self.assertTrue(1 <= outcome.roll <= 100)
        self.assertEqual(outcome.reward, select_reward(self.case, outcome.roll))
        self.assertEqual(self.engine.payout(self.case.price, outcome), outcome.reward.value)

    def test_battle(self):
        players = ["ana", "ben", "cy"]
        battle = self.engine.resolve_battle(SEED, self.case, players)
        for i, player in enumerate(players):
            roll, reward = open_case(SEED, self.case, cursor=i)
            self.assertEqual(battle.reward_for(player), reward)
        best = max(battle.openings, key=lambda o: o.reward.value).reward.value
        self.assertEqual(battle.reward_for(battle.winner).value, best)
        self.assertEqual(battle.to_dict()["winner"], battle.winner)

    def test_battle_needs_distinct_players(self):
        with self.assertRaises(ValueError):
            self.engine.resolve_battle(SEED, self.case, ["solo"])
        with self.assertRaises(ValueError):
            self.engine.resolve_battle(SEED, self.case, ["ana", "ana"])

    def test_house_edge_from_expected_value(self):
        # 0.4*1500 + 0.3*2500 + 0.2*12500 + 0.1*32500
        self.assertAlmostEqual(self.case.expected_value, 7100.0)
        self.assertAlmostEqual(self.engine.compute_house_edge(self.case), 1 - 7100 / 5000)


# ============================================================
# Settlement
# ============================================================

class TestSettlement(unittest.TestCase):

    def test_results(self):
        self.assertEqual(Settlement(stake=10, payout=19).result, "win")
        self.assertEqual(Settlement(stake=10, payout=10).result, "push")
        self.assertEqual(Settlement(stake=10, payout=0).result, "lose")
        self.assertEqual(Settlement(stake=10, payout=19).net, 9)


if __name__ == "__main__":
    unittest.main()
