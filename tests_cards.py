#!/usr/bin/env python3
"""
FAIR CASINO — Card Game Tests

Run: python tests_cards.py -v

Covers the shared deck and Fisher-Yates shuffle, Blackjack scoring and
play (naturals, hit, double, split, dealer rules), and Hi-Lo guessing.
Scripted rounds inject a stacked deck; the last card in the list is dealt first.
"""

import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.game_schema import BlackjackConfig, HiLoConfig
from fair_casino.games.base import IllegalActionError
from fair_casino.games.blackjack import (
    BlackjackEngine, BlackjackRound, hand_score, is_blackjack,
)
from fair_casino.games.cards import card, draw, make_deck, shuffle_deck
from fair_casino.games.hilo import HiLoEngine, HiLoRound, guess_probability, next_multiplier
from tools.fair_rng import SeedState

SEED = SeedState(client_seed="cards", server_seed="deck-server-seed", nonce=1234)


def stacked(*faces):
    """Deck that deals `faces` in the order given."""
    return [card(f) for f in reversed(faces)]


# ============================================================
# Deck / shuffle
# ============================================================

class TestDeck(unittest.TestCase):

    def test_make_deck(self):
        deck = make_deck()
        self.assertEqual(len(deck), 52)
        self.assertEqual(len(set(deck)), 52)

    def test_shuffle_is_permutation(self):
        shuffled = shuffle_deck(SEED)
        self.assertEqual(len(shuffled), 52)
        self.assertEqual(set(shuffled), set(make_deck()))

    def test_shuffle_deterministic(self):
        self.assertEqual(shuffle_deck(SEED), shuffle_deck(SEED))

    def test_shuffle_depends_on_seed(self):
        other = SeedState(client_seed="cards", server_seed="deck-server-seed", nonce=1235)
        self.assertNotEqual(shuffle_deck(SEED), shuffle_deck(other))

    def test_shuffle_leaves_input_alone(self):
        deck = make_deck()
        shuffle_deck(SEED, deck)
        self.assertEqual(deck, make_deck())

    def test_draw_from_top(self):
        deck = stacked("A", "2")
        self.assertEqual(draw(deck).face, "A")
        self.assertEqual(draw(deck).face, "2")
        with self.assertRaises(IndexError):
            draw(deck)

    def test_card_lookup(self):
        self.assertEqual(card("K").rank, 13)
        self.assertEqual(card("K").value, 10)
        self.assertEqual(str(card("10", "hearts")), "10♥")
        with self.assertRaises(ValueError):
            card("Z")


# ============================================================
# Blackjack
# ============================================================

class TestBlackjackScoring(unittest.TestCase):

    def test_ace_king_is_blackjack(self):
        hand = [card("A"), card("K")]
        self.assertEqual(hand_score(hand), 21)
        self.assertTrue(is_blackjack(hand))

    def test_soft_aces_drop_to_one(self):
        hand = [card("A"), card("A"), card("9")]
        self.assertEqual(hand_score(hand), 21)
        self.assertFalse(is_blackjack(hand))

    def test_bust(self):
        self.assertEqual(hand_score([card("K"), card("Q"), card("2")]), 22)


class TestBlackjackPlay(unittest.TestCase):

    def setUp(self):
        self.config = BlackjackConfig()
        self.engine = BlackjackEngine()

    def _round(self, *faces, config=None):
        return BlackjackRound(seed=SEED, config=config or self.config, deck=stacked(*faces))

    def test_player_natural_pays_three_to_two(self):
        rnd = self._round("A", "9", "K", "7")
        self.assertEqual(rnd.status, "finished")
        outcome = rnd.outcome()
        self.assertEqual(outcome.hands[0].result, "blackjack")
        self.assertEqual(outcome.result, "win")
        self.assertAlmostEqual(self.engine.payout(10, outcome, self.config), 25.0)

    def test_both_naturals_push(self):
        rnd = self._round("A", "A", "K", "K")
        self.assertEqual(rnd.outcome().result, "push")
        self.assertAlmostEqual(self.engine.payout(10, rnd.outcome(), self.config), 10.0)

    def test_dealer_natural_loses(self):
        rnd = self._round("9", "A", "7", "K")
        self.assertEqual(rnd.status, "finished")
        self.assertEqual(rnd.outcome().result, "lose")

    def test_finished_round_rejects_actions(self):
        rnd = self._round("9", "A", "7", "K")
        with self.assertRaises(IllegalActionError):
            rnd.hit()

    def test_bust_skips_dealer_draw(self):
        rnd = self._round("10", "9", "6", "8", "K")
        rnd.hit()
        self.assertEqual(rnd.status, "finished")
        self.assertEqual(len(rnd.dealer), 2)
        self.assertEqual(rnd.outcome().result, "lose")

    def test_dealer_hits_below_seventeen(self):
        rnd = self._round("10", "6", "9", "10", "5")
        rnd.stand()
        self.assertEqual(rnd.outcome().dealer_score, 21)
        self.assertEqual(rnd.outcome().result, "lose")

    def test_dealer_stands_on_seventeen(self):
        rnd = self._round("10", "10", "9", "7", "2")
        rnd.stand()
        self.assertEqual(len(rnd.dealer), 2)
        self.assertEqual(rnd.outcome().result, "win")

    def test_double_down(self):
        rnd = self._round("5", "10", "6", "7", "10")
        self.assertEqual(rnd.double(), 1)
        outcome = rnd.outcome()
        self.assertEqual(outcome.hands[0].score, 21)
        self.assertEqual(outcome.total_units, 2)
        self.assertAlmostEqual(self.engine.payout(10, outcome, self.config), 40.0)
        settlement = self.engine.settle(10, outcome, self.config)
        self.assertAlmostEqual(settlement.stake, 20.0)
        self.assertAlmostEqual(settlement.net, 20.0)

    def test_double_needs_nine_to_eleven(self):
        rnd = self._round("10", "9", "2", "7")
        self.assertFalse(rnd.can_double())
        with self.assertRaises(IllegalActionError):
            rnd.double()

    def test_split_plays_hands_in_order(self):
        rnd = self._round("8", "10", "8", "7", "3", "K", "5")
        self.assertEqual(rnd.split(), 1)
        self.assertEqual(len(rnd.hands), 2)
        self.assertEqual(rnd.current, 0)
        rnd.hit()                    # 8,3,5 = 16
        rnd.stand()
        self.assertEqual(rnd.current, 1)
        rnd.stand()                  # 8,K = 18
        outcome = rnd.outcome()
        self.assertEqual([h.result for h in outcome.hands], ["lose", "win"])
        self.assertEqual(outcome.result, "mixed")
        settlement = self.engine.settle(10, outcome, self.config)
        self.assertAlmostEqual(settlement.stake, 20.0)
        self.assertAlmostEqual(settlement.payout, 20.0)

    def test_split_twenty_one_is_not_natural(self):
        rnd = self._round("A", "10", "A", "7", "K", "9")
        rnd.split()
        hand = rnd.hands[0]
        self.assertEqual(hand.score, 21)
        self.assertTrue(hand.from_split)
        self.assertFalse(hand.is_natural)
        self.assertTrue(hand.finished)

    def test_split_limited_by_max_hands(self):
        rnd = self._round("8", "10", "8", "7", config=BlackjackConfig(max_hands=1))
        self.assertFalse(rnd.can_split())
        with self.assertRaises(IllegalActionError):
            rnd.split()

    def test_split_needs_pair(self):
        rnd = self._round("8", "10", "9", "7")
        with self.assertRaises(IllegalActionError):
            rnd.split()

    def test_unknown_action(self):
        rnd = self._round("10", "10", "9", "7")
        with self.assertRaises(IllegalActionError):
            rnd.act("surrender")

    def test_resolve_is_deterministic(self):
        a = self.engine.resolve(SEED, self.config, ["hit"])
        b = self.engine.resolve(SEED, self.config, ["hit"])
        self.assertEqual(a.to_dict(), b.to_dict())
        self.assertIn(a.result, ("win", "lose", "push", "mixed"))


# ============================================================
# Hi-Lo
# ============================================================

class TestHiLo(unittest.TestCase):

    def setUp(self):
        self.config = HiLoConfig(edge_factor=0.95)
        self.engine = HiLoEngine()

    def _round(self, *faces):
        return HiLoRound(seed=SEED, config=self.config, deck=stacked(*faces))

    def test_guess_probabilities(self):
        self.assertAlmostEqual(guess_probability(7, "higher"), 0.5)
        self.assertAlmostEqual(guess_probability(7, "lower"), 0.5)
        self.assertAlmostEqual(guess_probability(1, "lower"), 0.0)
        self.assertAlmostEqual(guess_probability(5, "same"), 1 / 12)

    def test_same_skips_edge(self):
        self.assertEqual(next_multiplier(1.0, 7, "same", self.config), 12.0)

    def test_compounding_and_deck_exhaustion(self):
        rnd = self._round("7", "10", "2")
        self.assertTrue(rnd.guess("higher"))
        self.assertEqual(rnd.multiplier, 1.9)
        self.assertTrue(rnd.guess("lower"))
        self.assertEqual(rnd.multiplier, 2.41)
        self.assertEqual(rnd.status, "won")
        self.assertAlmostEqual(self.engine.payout(100, rnd.outcome()), 241.0)

    def test_wrong_guess_loses(self):
        rnd = self._round("7", "3", "9")
        self.assertFalse(rnd.guess("higher"))
        self.assertEqual(rnd.status, "lost")
        self.assertEqual(rnd.multiplier, 0.0)
        self.assertEqual(rnd.correct_guesses, 0)
        self.assertEqual(self.engine.payout(100, rnd.outcome()), 0.0)

    def test_cash_out_needs_a_correct_guess(self):
        rnd = self._round("7", "10", "2")
        with self.assertRaises(IllegalActionError):
            rnd.cash_out()
        rnd.guess("higher")
        self.assertEqual(rnd.cash_out(), 1.9)

    def test_bad_guess_name(self):
        with self.assertRaises(IllegalActionError):
            self._round("7", "10").guess("sideways")

    def test_resolve_cashes_out(self):
        outcome = self.engine.resolve(SEED, self.config, [])
        self.assertEqual(outcome.status, "active")
        self.assertEqual(self.engine.payout(10, outcome), 0.0)
        replay = self.engine.resolve(SEED, self.config, ["higher"])
        self.assertIn(replay.status, ("won", "lost"))
        self.assertEqual(replay.to_dict(), self.engine.resolve(SEED, self.config, ["higher"]).to_dict())


if __name__ == "__main__":
    unittest.main()
