#!/usr/bin/env python3
"""Offline pool demo: create a pool, add liquidity, trade both ways, withdraw.

Usage:
    python tools/pool_offline_demo.py [--config amm.yaml] [--verbose]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gamma_amm.core.errors import PoolError
from gamma_amm.core.fees import ReferralInfo
from gamma_amm.integration import BlockContext, InMemoryTransferLedger, PoolEngine, PoolStore, TransferError
from gamma_amm.state.assets import AssetExtension, AssetInfo, AssetKind, TransferFeeConfig
from gamma_amm.state.config import AmmConfig, load_amm_config


ASSET0 = "0x" + "11" * 32
ASSET1 = "0x" + "22" * 32


def _build_engine(config: AmmConfig) -> PoolEngine:
    transfers = InMemoryTransferLedger()
    transfers.register_asset(AssetInfo(asset_id=ASSET0, decimals=6))
    transfers.register_asset(
        AssetInfo(
            asset_id=ASSET1,
            kind=AssetKind.EXTENDED,
            extensions=frozenset({AssetExtension.TRANSFER_FEE, AssetExtension.TOKEN_METADATA}),
            transfer_fee=TransferFeeConfig(fee_bps=25, max_fee=50_000),
        )
    )
    transfers.register_asset(AssetInfo(asset_id=config.native_asset))
    for owner in ("creator", "lp", "trader"):
        transfers.mint(owner, ASSET0, 50_000_000)
        transfers.mint(owner, ASSET1, 50_000_000)
        transfers.mint(owner, config.native_asset, 1_000_000)
    engine = PoolEngine(PoolStore(), transfers)
    engine.register_config(config)
    return engine


def _report(engine: PoolEngine, pool_id: str, label: str) -> None:
    ledger = engine.store.get_pool(pool_id)
    print(
        f"[offline-demo] {label}: reserve0={ledger.reserve0} reserve1={ledger.reserve1} "
        f"supply={ledger.share_supply} fee_rate={ledger.latest_dynamic_fee_rate}"
    )


def run(config: AmmConfig) -> int:
    engine = _build_engine(config)
    t = 1_700_000_000

    ledger = engine.create_pool(BlockContext(t, 1), config.config_id, "creator", ASSET0, ASSET1, 10_000_000, 20_000_000)
    pool_id = ledger.pool_id
    print(f"[offline-demo] pool_id={pool_id}")
    _report(engine, pool_id, "after create")

    engine.deposit(BlockContext(t + 1, 1), pool_id, "lp", 500_000, 1_000_000, 1_100_000)
    _report(engine, pool_id, "after deposit")

    referral = None
    if config.referral_project is not None:
        referral = ReferralInfo(referrer="referrer", asset=ASSET0, share_bps=config.max_referral_share_bps)
    out = engine.swap_base_input(BlockContext(t + 2, 1), pool_id, "trader", ASSET0, ASSET1, 250_000, 1, referral=referral)
    print(
        f"[offline-demo] swap in : paid={out.input_transfer_amount} received={out.output_transfer_amount} "
        f"dynamic_fee={out.result.dynamic_fee} referral={out.referral_amount}"
    )
    out = engine.swap_base_output(BlockContext(t + 3, 1), pool_id, "trader", ASSET1, ASSET0, 1_000_000, 100_000)
    print(f"[offline-demo] swap out: paid={out.input_transfer_amount} received={out.output_transfer_amount}")
    _report(engine, pool_id, "after swaps")

    engine.withdraw(BlockContext(t + 4, 2), pool_id, "lp", 500_000, 1, 1)
    _report(engine, pool_id, "after withdraw")
    print(f"[offline-demo] events={len(engine.events)} transfers={len(engine.transfers.history)}")
    print("[offline-demo] OK")
    return 0


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Run an offline liquidity pool scenario.")
    ap.add_argument("--config", type=Path, default=None, help="AMM config YAML (defaults are used when omitted)")
    ap.add_argument("--verbose", action="store_true", help="enable debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = load_amm_config(args.config) if args.config is not None else AmmConfig()
    try:
        return run(config)
    except (PoolError, TransferError) as exc:
        print(f"[offline-demo] FAIL: {type(exc).__name__}: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
