from __future__ import annotations

from gamma_amm.core.dynamic_fee import dynamic_fee_rate, observed_volatility_bps
from gamma_amm.core.oracle import Observation, PriceSnapshot
from gamma_amm.state.config import AmmConfig
from gamma_amm.state.pools import PoolLedger


BASE = 2 << 32


def _ledger(**overrides) -> PoolLedger:
    kwargs = dict(
        pool_id="0xpool",
        config_id="default",
        creator="alice",
        asset0="0x11",
        asset1="0x22",
        reserve0=1_000_000,
        reserve1=2_000_000,
        share_supply=1_000_000,
        open_time=0,
        max_trade_fee_rate=100_000,
        volatility_factor=10_000,
    )
    kwargs.update(overrides)
    return PoolLedger(**kwargs)


def _snapshot(now: int, *prices: int) -> PriceSnapshot:
    start = now - len(prices)
    return PriceSnapshot(
        observations=tuple(Observation(start + i, p, 1) for i, p in enumerate(prices))
    )


def test_calm_pool_charges_base_rate() -> None:
    fee = dynamic_fee_rate(AmmConfig(), _ledger(), PriceSnapshot(), 1_000)
    assert (fee.rate, fee.tier, fee.volatility_bps) == (2_500, 0, 0)


def test_observed_volatility_needs_two_points() -> None:
    assert observed_volatility_bps(_snapshot(1_000, BASE), 1_000, 3_600) == 0
    assert observed_volatility_bps(_snapshot(1_000, BASE, BASE + BASE // 4), 1_000, 3_600) == 2_500


def test_tiers_multiply_base_rate() -> None:
    config = AmmConfig()
    tier1 = dynamic_fee_rate(config, _ledger(), _snapshot(1_000, BASE, BASE + BASE // 2), 1_000)
    assert (tier1.rate, tier1.tier) == (5_000, 1)
    tier2 = dynamic_fee_rate(config, _ledger(), _snapshot(1_000, BASE, BASE + (BASE * 7) // 10), 1_000)
    assert (tier2.rate, tier2.tier) == (7_500, 2)


def test_extreme_tier_charges_pool_maximum() -> None:
    ledger = _ledger(volatility_factor=20_000)
    fee = dynamic_fee_rate(AmmConfig(), ledger, _snapshot(1_000, BASE, BASE + BASE // 2), 1_000)
    assert fee.tier == 3
    assert fee.rate == 100_000


def test_rate_is_capped_at_pool_maximum() -> None:
    ledger = _ledger(max_trade_fee_rate=4_000)
    fee = dynamic_fee_rate(AmmConfig(), ledger, _snapshot(1_000, BASE, BASE + BASE // 2), 1_000)
    assert fee.rate == 4_000


def test_stale_snapshot_is_ignored() -> None:
    snapshot = _snapshot(1_000, BASE, BASE * 2)
    fee = dynamic_fee_rate(AmmConfig(oracle_max_staleness_seconds=60), _ledger(), snapshot, 5_000)
    assert fee.tier == 0


def test_privileged_caller_priced_at_tier_zero() -> None:
    snapshot = _snapshot(1_000, BASE, BASE * 2)
    fee = dynamic_fee_rate(AmmConfig(), _ledger(), snapshot, 1_000, privileged=True)
    assert (fee.rate, fee.tier) == (2_500, 0)
