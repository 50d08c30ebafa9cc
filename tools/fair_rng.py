"""
FAIR CASINO — Provably Fair RNG

Client-seed + server-seed + nonce system for verifiable random outcomes.

Architecture:
    Each betting round gets a fresh SeedState (client_seed, server_seed, nonce).
    Every draw inside the round is addressed by a cursor:
        digest  = HMAC-SHA256(key=server_seed, msg=f"{client_seed}:{nonce}:{cursor}")
        decimal = int(digest[:8], 16)
        value   = floor(decimal / 0xFFFFFFFF * (max - min) + min)
    After the round the seeds are shown to the player, who can recompute
    every draw with any HMAC-SHA256 tool.

Usage:
    from tools.fair_rng import new_round_seed, derive_int, verify

    seed = new_round_seed()
    roll = derive_int(seed.params(), 0, 36)
    assert verify(seed.params(), 0, 36, roll)
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import math
import secrets
import string
import time
from dataclasses import dataclass, replace
from typing import Optional

from config.settings import EngineConfig

logger = logging.getLogger("fair_casino.rng")

MAX_U32 = 0xFFFFFFFF
_TOKEN_ALPHABET = string.ascii_lowercase + string.digits


class InvalidRangeError(ValueError):
    """Raised when a derivation is asked for an empty range (max < min)."""


# ═══════════════════════════════════════════════════════════════
# Data Structures
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DerivationParams:
    """Everything needed to reproduce one draw."""
    client_seed: str
    server_seed: str
    nonce: int
    cursor: int = 0

    def with_cursor(self, cursor: int) -> DerivationParams:
        return replace(self, cursor=cursor)

    @property
    def message(self) -> str:
        return f"{self.client_seed}:{self.nonce}:{self.cursor}"


@dataclass(frozen=True)
class SeedState:
    """Seed triple for one betting round. Never mutated; a new round gets a new one."""
    client_seed: str
    server_seed: str
    nonce: int

    @property
    def server_seed_hash(self) -> str:
        """SHA-256 of the server seed (the value a caller may publish up front)."""
        return hashlib.sha256(self.server_seed.encode()).hexdigest()

    def params(self, cursor: int = 0) -> DerivationParams:
        return DerivationParams(
            client_seed=self.client_seed,
            server_seed=self.server_seed,
            nonce=self.nonce,
            cursor=cursor,
        )

    def to_dict(self) -> dict:
        return {
            "client_seed": self.client_seed,
            "server_seed": self.server_seed,
            "server_seed_hash": self.server_seed_hash,
            "nonce": self.nonce,
        }


# ═══════════════════════════════════════════════════════════════
# Seed / Commitment Manager
# ═══════════════════════════════════════════════════════════════

def _random_token(length: int) -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def generate_server_seed() -> str:
    """SHA-256 of the current millisecond timestamp plus a random token."""
    timestamp = str(int(time.time() * 1000))
    token = _random_token(EngineConfig.CLIENT_SEED_LENGTH)
    return hashlib.sha256(f"{timestamp}-{token}".encode()).hexdigest()


def new_round_seed(client_seed: Optional[str] = None) -> SeedState:
    """Issue a fresh seed triple for a new betting round."""
    if client_seed is None:
        client_seed = _random_token(EngineConfig.CLIENT_SEED_LENGTH)
    seed = SeedState(
        client_seed=client_seed,
        server_seed=generate_server_seed(),
        nonce=secrets.randbelow(EngineConfig.NONCE_RANGE),
    )
    logger.debug(f"New round seed: client={seed.client_seed} nonce={seed.nonce} "
                 f"commit={seed.server_seed_hash[:16]}")
    return seed


def verify_server_seed(server_seed: str, expected_hash: str) -> bool:
    """Check a revealed server seed against the hash shared before play."""
    return hashlib.sha256(server_seed.encode()).hexdigest() == expected_hash


# ═══════════════════════════════════════════════════════════════
# Deterministic Randomness Function
# ═══════════════════════════════════════════════════════════════

def round_hash(params: DerivationParams) -> str:
    """HMAC-SHA256(server_seed, client_seed:nonce:cursor) as hex."""
    return hmac.new(
        params.server_seed.encode(),
        params.message.encode(),
        hashlib.sha256,
    ).hexdigest()


def derive_int(params: DerivationParams, min_value: int, max_value: int) -> int:
    """Derive an integer in [min_value, max_value] from the params.

    The top of the range is only produced when the 32-bit sample is exactly
    0xFFFFFFFF, matching the scaling players verify against.
    """
    if max_value < min_value:
        raise InvalidRangeError(f"Empty range: max {max_value} < min {min_value}")
    if max_value == min_value:
        return min_value
    decimal = int(round_hash(params)[:8], 16)
    return math.floor(decimal / MAX_U32 * (max_value - min_value) + min_value)


def derive_float(params: DerivationParams, min_value: float, max_value: float,
                 decimals: int = 2) -> float:
    """Derive a float in [min_value, max_value] at the given decimal precision."""
    scale = 10 ** decimals
    return derive_int(params, round(min_value * scale), round(max_value * scale)) / scale


def derive_many(params: DerivationParams, min_value: int, max_value: int,
                count: int) -> list[int]:
    """Derive `count` integers with cursors 0..count-1. Values may repeat."""
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    return [derive_int(params.with_cursor(i), min_value, max_value) for i in range(count)]


def verify(params: DerivationParams, min_value: int, max_value: int, claimed: int) -> bool:
    """Recompute a draw and compare it with the claimed result."""
    return derive_int(params, min_value, max_value) == claimed


# ═══════════════════════════════════════════════════════════════
# Audit
# ═══════════════════════════════════════════════════════════════

def audit_record(seed: SeedState, game_type: str, outcome: dict,
                 cursors_used: int = 1) -> dict:
    """JSON-ready record a player can use to verify a finished round."""
    first = seed.params(0)
    return {
        "game_type": game_type,
        "client_seed": seed.client_seed,
        "server_seed": seed.server_seed,
        "server_seed_hash": seed.server_seed_hash,
        "nonce": seed.nonce,
        "cursors_used": cursors_used,
        "first_hash": round_hash(first),
        "outcome": outcome,
        "verification_steps": [
            "1. Check: SHA-256(server_seed) == server_seed_hash",
            "2. For each cursor: digest = HMAC-SHA256(server_seed, client_seed + ':' + nonce + ':' + cursor)",
            "3. decimal = int(first 8 hex chars of digest, 16)",
            "4. value = floor(decimal / 0xFFFFFFFF * (max - min) + min)",
            "5. Apply the game-specific mapping to get the outcome",
        ],
    }
