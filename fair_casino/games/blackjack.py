"""Blackjack — Single deck, dealer stands on all 17s, split and double-down.

Hands are an ordered list of hand records. The current-hand index only moves
forward; a split inserts the new hand right after the one being split.
Stakes are counted in units of the base bet so the round itself never
handles money.
"""
import random
from dataclasses import dataclass, field
from typing import Optional

from config.game_schema import BlackjackConfig
from fair_casino.games.base import BaseGameEngine, IllegalActionError, Settlement
from fair_casino.games.cards import Card, draw, shuffle_deck
from tools.fair_rng import SeedState

ACTIONS = ("hit", "stand", "double", "split")


def hand_score(cards: list[Card]) -> int:
    score = 0
    aces = 0
    for c in cards:
        if c.face == "A":
            aces += 1
            score += 11
        else:
            score += c.value
    while score > 21 and aces > 0:
        score -= 10
        aces -= 1
    return score


def is_blackjack(cards: list[Card]) -> bool:
    return len(cards) == 2 and hand_score(cards) == 21


@dataclass
class Hand:
    cards: list[Card]
    units: int = 1               # stake in base-bet units (2 once doubled)
    doubled: bool = False
    from_split: bool = False
    finished: bool = False
    result: Optional[str] = None  # blackjack / win / push / lose

    @property
    def score(self) -> int:
        return hand_score(self.cards)

    @property
    def is_bust(self) -> bool:
        return self.score > 21

    @property
    def is_natural(self) -> bool:
        return not self.from_split and is_blackjack(self.cards)

    def to_dict(self) -> dict:
        return {
            "cards": [str(c) for c in self.cards],
            "score": self.score,
            "units": self.units,
            "doubled": self.doubled,
            "result": self.result,
        }


def hand_return(hand: Hand, config: BlackjackConfig) -> float:
    """Amount returned per base-bet unit for a settled hand."""
    if hand.result == "blackjack":
        return hand.units * (1 + config.blackjack_payout)
    if hand.result == "win":
        return hand.units * 2.0
    if hand.result == "push":
        return float(hand.units)
    return 0.0


def aggregate_result(hands: list[Hand]) -> str:
    results = {"win" if h.result == "blackjack" else h.result for h in hands}
    if len(results) == 1:
        return results.pop()
    return "mixed"


@dataclass
class BlackjackOutcome:
    hands: list[Hand]
    dealer: list[Card]
    result: str

    @property
    def total_units(self) -> int:
        return sum(h.units for h in self.hands)

    @property
    def dealer_score(self) -> int:
        return hand_score(self.dealer)

    def to_dict(self) -> dict:
        return {
            "hands": [h.to_dict() for h in self.hands],
            "dealer": [str(c) for c in self.dealer],
            "dealer_score": self.dealer_score,
            "result": self.result,
        }


@dataclass
class BlackjackRound:
    seed: SeedState
    config: BlackjackConfig
    deck: list[Card] = field(default_factory=list)
    hands: list[Hand] = field(default_factory=list)
    dealer: list[Card] = field(default_factory=list)
    current: int = 0
    status: str = "playing"      # playing / finished

    def __post_init__(self):
        if not self.deck:
            self.deck = shuffle_deck(self.seed)
        p1 = draw(self.deck)
        d1 = draw(self.deck)
        p2 = draw(self.deck)
        d2 = draw(self.deck)
        self.hands = [Hand(cards=[p1, p2])]
        self.dealer = [d1, d2]
        self._check_naturals()

    # ── State ─────────────────────────────────────────────────

    @property
    def hand(self) -> Hand:
        return self.hands[self.current]

    def _check_naturals(self):
        player_bj = is_blackjack(self.hand.cards)
        dealer_bj = is_blackjack(self.dealer)
        if not (player_bj or dealer_bj):
            return
        if player_bj and dealer_bj:
            self.hand.result = "push"
        elif player_bj:
            self.hand.result = "blackjack"
        else:
            self.hand.result = "lose"
        self.hand.finished = True
        self.status = "finished"

    def _require_playing(self):
        if self.status != "playing":
            raise IllegalActionError("Round is finished")

    def _finish_hand(self):
        self.hand.finished = True
        if self.hand.is_bust:
            self.hand.result = "lose"
        self._advance()

    def _advance(self):
        while self.current < len(self.hands) and self.hands[self.current].finished:
            if self.current == len(self.hands) - 1:
                self._play_dealer()
                return
            self.current += 1
        # A split hand dealt to 21 needs no decision
        if self.hand.score == 21:
            self._finish_hand()

    def _play_dealer(self):
        live = [h for h in self.hands if not h.is_bust]
        if live:
            while hand_score(self.dealer) < self.config.dealer_stands_on:
                self.dealer.append(draw(self.deck))
        dealer_score = hand_score(self.dealer)
        for h in live:
            if dealer_score > 21 or h.score > dealer_score:
                h.result = "win"
            elif h.score < dealer_score:
                h.result = "lose"
            else:
                h.result = "push"
        self.status = "finished"

    # ── Legality ──────────────────────────────────────────────

    def can_double(self) -> bool:
        h = self.hand
        return (self.status == "playing" and len(h.cards) == 2 and not h.doubled
                and h.score in self.config.double_totals)

    def can_split(self) -> bool:
        h = self.hand
        return (self.status == "playing" and len(h.cards) == 2
                and h.cards[0].face == h.cards[1].face
                and len(self.hands) < self.config.max_hands)

    # ── Player actions ────────────────────────────────────────

    def hit(self) -> Card:
        self._require_playing()
        c = draw(self.deck)
        self.hand.cards.append(c)
        if self.hand.score >= 21:
            self._finish_hand()
        return c

    def stand(self):
        self._require_playing()
        self._finish_hand()

    def double(self) -> int:
        """Double the current hand's stake, take one card and stand. Returns extra units staked."""
        if not self.can_double():
            raise IllegalActionError("Double is only allowed on two cards totalling "
                                     f"{self.config.double_totals}")
        extra = self.hand.units
        self.hand.units *= 2
        self.hand.doubled = True
        self.hand.cards.append(draw(self.deck))
        self._finish_hand()
        return extra

    def split(self) -> int:
        """Split a pair into two hands, one new card each. Returns extra units staked."""
        if not self.can_split():
            raise IllegalActionError("Split needs two cards of the same face "
                                     f"and fewer than {self.config.max_hands} hands")
        h = self.hand
        new_hand = Hand(cards=[h.cards.pop()], from_split=True)
        h.from_split = True
        self.hands.insert(self.current + 1, new_hand)
        h.cards.append(draw(self.deck))
        new_hand.cards.append(draw(self.deck))
        if h.score == 21:
            self._finish_hand()
        return new_hand.units

    def act(self, action: str):
        if action not in ACTIONS:
            raise IllegalActionError(f"Unknown action: {action}. Expected one of {ACTIONS}")
        return getattr(self, action)()

    def outcome(self) -> BlackjackOutcome:
        result = aggregate_result(self.hands) if self.status == "finished" else "playing"
        return BlackjackOutcome(hands=list(self.hands), dealer=list(self.dealer), result=result)


class BlackjackEngine(BaseGameEngine):
    game_type = "blackjack"
    display_name = "Blackjack"

    def generate_config(self, **kw) -> BlackjackConfig:
        return BlackjackConfig(**kw)

    def compute_house_edge(self, config: BlackjackConfig) -> float:
        """Approximate edge of the simplified strategy in simulate_round.

        Blackjack has no closed form here; use simulate() for a measured figure.
        """
        return 0.055

    def new_round(self, seed: SeedState, config: BlackjackConfig) -> BlackjackRound:
        return BlackjackRound(seed=seed, config=config)

    def resolve(self, seed: SeedState, config: BlackjackConfig, decisions=None) -> BlackjackOutcome:
        """Replay actions in order; any hands still open afterwards stand."""
        rnd = self.new_round(seed, config)
        for action in decisions or []:
            if rnd.status != "playing":
                break
            rnd.act(action)
        while rnd.status == "playing":
            rnd.stand()
        outcome = rnd.outcome()
        self.logger.debug(f"Blackjack resolved: {outcome.result} "
                          f"({len(outcome.hands)} hands, dealer {outcome.dealer_score})")
        return outcome

    def payout(self, stake: float, outcome: BlackjackOutcome,
               config: BlackjackConfig = None) -> float:
        """Total returned for all hands; `stake` is the base bet per hand."""
        config = config or BlackjackConfig()
        return sum(stake * hand_return(h, config) for h in outcome.hands)

    def settle(self, stake: float, outcome: BlackjackOutcome, config=None) -> Settlement:
        return Settlement(stake=stake * outcome.total_units,
                          payout=self.payout(stake, outcome, config))

    def simulate_round(self, config: BlackjackConfig, seed: SeedState, rng: random.Random) -> float:
        rnd = self.new_round(seed, config)
        while rnd.status == "playing":
            if rnd.can_split() and rnd.hand.cards[0].face in ("A", "8"):
                rnd.split()
            elif rnd.can_double() and rnd.hand.score == 11:
                rnd.double()
            elif rnd.hand.score < 17:
                rnd.hit()
            else:
                rnd.stand()
        outcome = rnd.outcome()
        return self.payout(1.0, outcome, config) / outcome.total_units
