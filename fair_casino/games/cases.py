"""Cases — Weighted reward table opened with a cumulative-probability walk."""
import random
from dataclasses import dataclass, field

from config.game_schema import CaseDefinition, CaseReward, get_case
from fair_casino.games.base import BaseGameEngine, Settlement
from tools.fair_rng import SeedState, derive_int


def select_reward(case: CaseDefinition, roll: int) -> CaseReward:
    """First reward whose cumulative probability reaches `roll`; last reward as fallback."""
    cumulative = 0.0
    for reward in case.rewards:
        cumulative += reward.probability
        if roll <= cumulative:
            return reward
    return case.rewards[-1]


def open_case(seed: SeedState, case: CaseDefinition, cursor: int = 0) -> tuple[int, CaseReward]:
    roll = derive_int(seed.params(cursor), 1, 100)
    return roll, select_reward(case, roll)


@dataclass
class CaseOutcome:
    case_id: str
    roll: int
    reward: CaseReward

    def to_dict(self) -> dict:
        return {
            "case_id": self.case_id,
            "roll": self.roll,
            "reward": self.reward.model_dump(mode="json"),
        }


@dataclass
class BattleOutcome:
    """Every participant opens the same case; the most valuable reward wins."""
    case_id: str
    openings: list[CaseOutcome] = field(default_factory=list)
    participants: list[str] = field(default_factory=list)

    @property
    def winner(self) -> str:
        best = 0
        for i, opening in enumerate(self.openings):
            if opening.reward.value > self.openings[best].reward.value:
                best = i
        return self.participants[best]

    def reward_for(self, participant: str) -> CaseReward:
        return self.openings[self.participants.index(participant)].reward

    def to_dict(self) -> dict:
        return {
            "case_id": self.case_id,
            "winner": self.winner,
            "rewards": [
                {"player": p, **o.to_dict()} for p, o in zip(self.participants, self.openings)
            ],
        }


class CasesEngine(BaseGameEngine):
    game_type = "cases"
    display_name = "Cases"

    def generate_config(self, case_id: str = "starter-cache", **kw) -> CaseDefinition:
        return get_case(case_id)

    def compute_house_edge(self, config: CaseDefinition) -> float:
        return 1.0 - config.expected_value / config.price

    def resolve(self, seed: SeedState, config: CaseDefinition, decisions=None) -> CaseOutcome:
        roll, reward = open_case(seed, config)
        self.logger.debug(f"Case {config.id} roll {roll}: {reward.name} ({reward.value})")
        return CaseOutcome(case_id=config.id, roll=roll, reward=reward)

    def resolve_battle(self, seed: SeedState, config: CaseDefinition,
                       participants: list[str]) -> BattleOutcome:
        """Participant `i` opens with cursor `i` from the shared battle seed."""
        if len(participants) < 2:
            raise ValueError("A case battle needs at least two participants")
        if len(set(participants)) != len(participants):
            raise ValueError(f"Duplicate battle participants: {participants}")
        battle = BattleOutcome(case_id=config.id, participants=list(participants))
        for i in range(len(participants)):
            roll, reward = open_case(seed, config, cursor=i)
            battle.openings.append(CaseOutcome(case_id=config.id, roll=roll, reward=reward))
        self.logger.debug(f"Battle on {config.id}: winner {battle.winner}")
        return battle

    def payout(self, stake: float, outcome: CaseOutcome, config: CaseDefinition = None) -> float:
        """The reward's value, independent of the price paid."""
        return outcome.reward.value

    def settle(self, stake: float, outcome: CaseOutcome, config: CaseDefinition) -> Settlement:
        """A case always costs its price."""
        return Settlement(stake=config.price, payout=self.payout(config.price, outcome, config))

    def simulate_round(self, config: CaseDefinition, seed: SeedState, rng: random.Random) -> float:
        outcome = self.resolve(seed, config)
        return self.payout(config.price, outcome) / config.price
