#!/usr/bin/env python3
"""
FAIR CASINO — Command Line Tool

Usage:
    fair-casino seed --client-seed mytoken
    fair-casino roll --client-seed abc --server-seed 9f2c... --nonce 42 --min 0 --max 36
    fair-casino verify --client-seed abc --server-seed 9f2c... --nonce 42 --min 0 --max 36 --claimed 17
    fair-casino dice --target 50 --direction over --stake 500
    fair-casino simulate mines --rounds 50000
    fair-casino simulate all
"""

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import EngineConfig
from fair_casino.games import GAME_TYPES, get_game_engine
from tools.fair_rng import (
    DerivationParams, audit_record, derive_float, derive_int, new_round_seed,
    round_hash, verify,
)


def _add_seed_args(p: argparse.ArgumentParser):
    p.add_argument("--client-seed", required=True)
    p.add_argument("--server-seed", required=True)
    p.add_argument("--nonce", type=int, required=True)
    p.add_argument("--cursor", type=int, default=0)
    p.add_argument("--min", type=float, default=0, dest="min_value")
    p.add_argument("--max", type=float, default=100, dest="max_value")


def _params(args) -> DerivationParams:
    return DerivationParams(
        client_seed=args.client_seed,
        server_seed=args.server_seed,
        nonce=args.nonce,
        cursor=args.cursor,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fair-casino",
                                     description="Provably fair casino engine tools")
    parser.add_argument("--log-level", default=None, help="Override FAIR_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("seed", help="Issue a fresh round seed")
    p.add_argument("--client-seed", default=None)

    p = sub.add_parser("roll", help="Derive a value from a seed triple")
    _add_seed_args(p)
    p.add_argument("--float", action="store_true", dest="as_float")
    p.add_argument("--decimals", type=int, default=2)

    p = sub.add_parser("verify", help="Recompute a draw and compare with a claimed value")
    _add_seed_args(p)
    p.add_argument("--claimed", type=int, required=True)

    p = sub.add_parser("dice", help="Play one dice round with a fresh seed")
    p.add_argument("--target", type=float, default=50.0)
    p.add_argument("--direction", choices=["over", "under"], default="over")
    p.add_argument("--stake", type=float, default=1.0)
    p.add_argument("--client-seed", default=None)

    p = sub.add_parser("simulate", help="Monte Carlo RTP report")
    p.add_argument("game_type", choices=GAME_TYPES + ["all"])
    p.add_argument("--rounds", type=int, default=EngineConfig.SIM_ROUNDS)
    p.add_argument("--seed", type=int, default=EngineConfig.SIM_SEED)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    EngineConfig.configure_logging(args.log_level)

    if args.command == "seed":
        seed = new_round_seed(args.client_seed)
        print(json.dumps(seed.to_dict(), indent=2))
        return 0

    if args.command == "roll":
        params = _params(args)
        if args.as_float:
            value = derive_float(params, args.min_value, args.max_value, args.decimals)
        else:
            value = derive_int(params, int(args.min_value), int(args.max_value))
        print(json.dumps({"hash": round_hash(params), "value": value}, indent=2))
        return 0

    if args.command == "verify":
        ok = verify(_params(args), int(args.min_value), int(args.max_value), args.claimed)
        print("✅ verified" if ok else "❌ mismatch")
        return 0 if ok else 1

    if args.command == "dice":
        engine = get_game_engine("dice")
        config = engine.generate_config(target=args.target, direction=args.direction)
        seed = new_round_seed(args.client_seed)
        outcome = engine.resolve(seed, config)
        settlement = engine.settle(args.stake, outcome, config)
        record = audit_record(seed, "dice", outcome.to_dict())
        record["settlement"] = settlement.to_dict()
        print(json.dumps(record, indent=2))
        return 0

    if args.command == "simulate":
        from flows.rtp_report import run_rtp_report
        game_types = GAME_TYPES if args.game_type == "all" else [args.game_type]
        run_rtp_report(game_types, rounds=args.rounds, seed=args.seed)
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
