"""
FAIR CASINO — Account Seam

The game engines never hold balances. Callers inject an AccountRepository,
debit the stake before a round, and credit the gross payout afterwards.

Usage:
    from fair_casino.accounts import InMemoryAccountRepository, settle_round
    repo = InMemoryAccountRepository({"u1": 1000.0})
    record = settle_round(repo, "u1", engine, seed, config, stake=10.0)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from tools.fair_rng import SeedState, audit_record

logger = logging.getLogger("fair_casino.accounts")


class InsufficientFundsError(ValueError):
    """Raised when a debit would take an account below zero."""


class AccountRepository(Protocol):
    """Storage for player balances. Deltas are signed: negative debits, positive credits."""

    def get_balance(self, account_id: str) -> float:
        ...

    def apply_delta(self, account_id: str, delta: float, reason: str = "") -> float:
        ...


# ═══════════════════════════════════════════════════════════════
# Data Structures
# ═══════════════════════════════════════════════════════════════

@dataclass
class Transaction:
    id: str
    account_id: str
    delta: float
    balance_after: float
    reason: str = ""
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()


@dataclass
class RoundRecord:
    """What happened to an account during one settled round."""
    account_id: str
    game_type: str
    stake: float
    payout: float
    balance_after: float
    audit: dict = field(default_factory=dict)

    @property
    def net(self) -> float:
        return self.payout - self.stake

    def to_dict(self) -> dict:
        return {
            "account_id": self.account_id,
            "game_type": self.game_type,
            "stake": round(self.stake, 2),
            "payout": round(self.payout, 2),
            "net": round(self.net, 2),
            "balance_after": round(self.balance_after, 2),
            "audit": self.audit,
        }


# ═══════════════════════════════════════════════════════════════
# In-memory repository
# ═══════════════════════════════════════════════════════════════

class InMemoryAccountRepository:
    """Dict-backed AccountRepository with a transaction log. Unknown accounts start at 0."""

    def __init__(self, balances: dict = None):
        self._balances: dict[str, float] = dict(balances or {})
        self.transactions: list[Transaction] = []

    def get_balance(self, account_id: str) -> float:
        return self._balances.get(account_id, 0.0)

    def apply_delta(self, account_id: str, delta: float, reason: str = "") -> float:
        balance = self.get_balance(account_id)
        new_balance = round(balance + delta, 2)
        if new_balance < 0:
            raise InsufficientFundsError(
                f"Insufficient balance: {balance:.2f} < {-delta:.2f}")
        self._balances[account_id] = new_balance
        self.transactions.append(Transaction(
            id=str(uuid.uuid4())[:10],
            account_id=account_id,
            delta=delta,
            balance_after=new_balance,
            reason=reason,
        ))
        return new_balance

    def history(self, account_id: str) -> list[Transaction]:
        return [t for t in self.transactions if t.account_id == account_id]


# ═══════════════════════════════════════════════════════════════
# Stake / payout helpers
# ═══════════════════════════════════════════════════════════════

def debit_stake(repo: AccountRepository, account_id: str, amount: float,
                reason: str = "stake") -> float:
    if amount <= 0:
        raise ValueError("Bet must be positive")
    balance = repo.get_balance(account_id)
    if amount > balance:
        raise InsufficientFundsError(f"Insufficient balance: {balance:.2f} < {amount:.2f}")
    return repo.apply_delta(account_id, -amount, reason)


def credit_payout(repo: AccountRepository, account_id: str, amount: float,
                  reason: str = "payout") -> float:
    if amount < 0:
        raise ValueError("Payout cannot be negative")
    if amount == 0:
        return repo.get_balance(account_id)
    return repo.apply_delta(account_id, amount, reason)


def settle_round(repo: AccountRepository, account_id: str, engine, seed: SeedState,
                 config, stake: float, decisions=None) -> RoundRecord:
    """Debit the stake, resolve the round, credit the payout.

    Blackjack rounds may stake extra units on double or split, so the amount
    debited is the engine's settled stake rather than the base bet.
    """
    if stake <= 0:
        raise ValueError("Bet must be positive")
    outcome = engine.resolve(seed, config, decisions)
    settlement = engine.settle(stake, outcome, config)

    debit_stake(repo, account_id, settlement.stake, reason=f"{engine.game_type} stake")
    balance = credit_payout(repo, account_id, settlement.payout,
                            reason=f"{engine.game_type} payout")

    logger.info(f"{account_id} {engine.game_type}: staked {settlement.stake:.2f}, "
                f"paid {settlement.payout:.2f}, balance {balance:.2f}")
    return RoundRecord(
        account_id=account_id,
        game_type=engine.game_type,
        stake=settlement.stake,
        payout=settlement.payout,
        balance_after=balance,
        audit=audit_record(seed, engine.game_type, outcome.to_dict()),
    )
