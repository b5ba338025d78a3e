#!/usr/bin/env python3

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stableswap import PoolConfig, StableSwapError, load_pool_config
from stableswap.core.liquidity import virtual_price
from stableswap.integration.ledger import InMemoryLedger, Ledger


def _report(ledger: Ledger) -> None:
    pool = ledger.read_pool()
    print(f"[stableswap-demo] reserves=({pool.reserve_a}, {pool.reserve_b}) supply={pool.pool_supply}")
    print(f"[stableswap-demo] virtual_price={virtual_price(pool, now=0)}")


def main() -> int:
    ap = argparse.ArgumentParser(description="Replay a seed/deposit/withdraw/swap sequence on an in-memory pool.")
    ap.add_argument("--config", type=Path, default=None, help="pool config YAML (default: amp 100, no fees)")
    ap.add_argument("--seed", type=int, default=50_000_000_000)
    ap.add_argument("--deposit", type=int, default=1_000_000_000)
    ap.add_argument("--withdraw", type=int, default=100_000)
    ap.add_argument("--swap", type=int, default=0, help="also swap this much A for B")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    config = load_pool_config(args.config) if args.config else PoolConfig(amp=100)
    ledger = InMemoryLedger()
    holder = "demo"
    ledger.fund(holder, "A", args.seed + args.deposit + args.swap)
    ledger.fund(holder, "B", args.seed + args.deposit)

    try:
        ledger.initialize_pool(holder, args.seed, args.seed, config)
        ledger.deposit(holder, args.deposit, args.deposit, 0, now=0)
        ledger.withdraw(holder, args.withdraw, 0, 0)
        if args.swap:
            ledger.swap(holder, "A", args.swap, 0, now=0)
    except StableSwapError as exc:
        print(f"[stableswap-demo] FAIL: {exc}")
        return 1

    for event in ledger.events:
        print(f"[stableswap-demo] event {json.dumps(event.to_dict())}")

    _report(ledger)
    print(f"[stableswap-demo] consistent={ledger.check_consistency()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
