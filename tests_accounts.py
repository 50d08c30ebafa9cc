#!/usr/bin/env python3
"""
FAIR CASINO — Account Seam Tests

Run: python tests_accounts.py -v

In-memory repository, stake debits, payout credits, and full round settlement.
"""

import sys
from datetime import datetime
import unittest
from pathlib import Path
from unittest.mock import MagicMock

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from fair_casino.accounts import (
    InMemoryAccountRepository, InsufficientFundsError, credit_payout, debit_stake,
    settle_round,
)
from fair_casino.games import get_game_engine
from config.game_schema import RouletteBet, RouletteConfig, get_case
from fair_casino.games.base import Settlement
from fair_casino.games.roulette import spin_wheel
from tools.fair_rng import SeedState

SEED = SeedState(client_seed="wallet", server_seed="account-server-seed", nonce=5)


class TestInMemoryRepository(unittest.TestCase):

    def test_unknown_account_starts_empty(self):
        self.assertEqual(InMemoryAccountRepository().get_balance("ghost"), 0.0)

    def test_apply_delta_logs_transactions(self):
        repo = InMemoryAccountRepository({"u1": 100.0})
        self.assertEqual(repo.apply_delta("u1", -30, "stake"), 70.0)
        self.assertEqual(repo.apply_delta("u1", 45.5, "payout"), 115.5)
        history = repo.history("u1")
        self.assertEqual([t.delta for t in history], [-30, 45.5])
        self.assertEqual(history[-1].balance_after, 115.5)
        self.assertIsNone(datetime.fromisoformat(history[0].timestamp).tzinfo)

    def test_overdraw_rejected(self):
        repo = InMemoryAccountRepository({"u1": 10.0})
        with self.assertRaises(InsufficientFundsError):
            repo.apply_delta("u1", -10.01)
        self.assertEqual(repo.get_balance("u1"), 10.0)
        self.assertEqual(repo.transactions, [])


class TestStakeHelpers(unittest.TestCase):

    def setUp(self):
        self.repo = InMemoryAccountRepository({"u1": 50.0})

    def test_debit_and_credit(self):
        self.assertEqual(debit_stake(self.repo, "u1", 20), 30.0)
        self.assertEqual(credit_payout(self.repo, "u1", 38), 68.0)

    def test_zero_payout_writes_nothing(self):
        self.assertEqual(credit_payout(self.repo, "u1", 0), 50.0)
        self.assertEqual(self.repo.transactions, [])

    def test_invalid_amounts(self):
        with self.assertRaises(ValueError):
            debit_stake(self.repo, "u1", 0)
        with self.assertRaises(ValueError):
            credit_payout(self.repo, "u1", -1)
        with self.assertRaises(InsufficientFundsError):
            debit_stake(self.repo, "u1", 51)


class TestSettleRound(unittest.TestCase):

    def test_dice_round_balance(self):
        repo = InMemoryAccountRepository({"u1": 1000.0})
        engine = get_game_engine("dice")
        config = engine.generate_config(target=50, direction="over")
        record = settle_round(repo, "u1", engine, SEED, config, stake=10.0)
        self.assertEqual(record.stake, 10.0)
        self.assertIn(round(record.payout, 2), (0.0, 19.0))
        self.assertAlmostEqual(repo.get_balance("u1"), 1000.0 - 10.0 + record.payout)
        self.assertAlmostEqual(record.balance_after, repo.get_balance("u1"))
        self.assertEqual(record.audit["server_seed_hash"], SEED.server_seed_hash)
        self.assertEqual(record.to_dict()["game_type"], "dice")

    def test_engine_stake_is_debited(self):
        # Doubled blackjack hands stake more than the base bet
        engine = MagicMock()
        engine.game_type = "blackjack"
        engine.resolve.return_value.to_dict.return_value = {"result": "win"}
        engine.settle.return_value = Settlement(stake=20.0, payout=40.0)
        repo = InMemoryAccountRepository({"u1": 100.0})
        record = settle_round(repo, "u1", engine, SEED, None, stake=10.0, decisions=["double"])
        engine.resolve.assert_called_once_with(SEED, None, ["double"])
        self.assertEqual(record.stake, 20.0)
        self.assertEqual(repo.get_balance("u1"), 120.0)
        self.assertEqual([t.delta for t in repo.transactions], [-20.0, 40.0])

    def test_insufficient_funds_leaves_balance(self):
        repo = InMemoryAccountRepository({"u1": 5.0})
        engine = get_game_engine("dice")
        with self.assertRaises(InsufficientFundsError):
            settle_round(repo, "u1", engine, SEED, engine.generate_config(), stake=10.0)
        self.assertEqual(repo.get_balance("u1"), 5.0)

    def test_roulette_debits_chips_on_table(self):
        engine = get_game_engine("roulette")
        winning = spin_wheel(SEED)
        config = RouletteConfig(bets=[RouletteBet(bet_type="straight", numbers=[winning], amount=100)])
        repo = InMemoryAccountRepository({"u1": 100.0})
        record = settle_round(repo, "u1", engine, SEED, config, stake=1.0)
        self.assertEqual(record.stake, 100.0)
        self.assertEqual(record.payout, 3600.0)
        self.assertEqual(repo.get_balance("u1"), 3600.0)

    def test_roulette_table_total_must_be_covered(self):
        engine = get_game_engine("roulette")
        config = RouletteConfig(bets=[RouletteBet(bet_type="straight", numbers=[spin_wheel(SEED)], amount=100)])
        repo = InMemoryAccountRepository({"u1": 1.0})
        with self.assertRaises(InsufficientFundsError):
            settle_round(repo, "u1", engine, SEED, config, stake=1.0)
        self.assertEqual(repo.get_balance("u1"), 1.0)

    def test_case_debits_its_price(self):
        engine = get_game_engine("cases")
        case = get_case("marauders-vault")
        repo = InMemoryAccountRepository({"u1": 100000.0})
        record = settle_round(repo, "u1", engine, SEED, case, stake=1.0)
        self.assertEqual(record.stake, 100000.0)
        self.assertAlmostEqual(repo.get_balance("u1"), record.payout)
        with self.assertRaises(InsufficientFundsError):
            settle_round(InMemoryAccountRepository({"u2": 1.0}), "u2", engine, SEED, case, stake=1.0)

    def test_non_positive_stake(self):
        repo = InMemoryAccountRepository({"u1": 5.0})
        engine = get_game_engine("dice")
        with self.assertRaises(ValueError):
            settle_round(repo, "u1", engine, SEED, engine.generate_config(), stake=0)


if __name__ == "__main__":
    unittest.main()
