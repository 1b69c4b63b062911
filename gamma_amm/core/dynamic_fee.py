"""Dynamic trade-fee rate.

The rate is a pure function of (config, pool volatility settings, oracle
snapshot, time, privileged flag):

1. Observed volatility: price range of token 0 over the config window,
   `(max - min) * 10_000 // min`. Zero without two fresh observations.
2. Scaled by the pool's `volatility_factor` (bps, 10000 = 1x).
3. Mapped to a tier with the config thresholds; tiers 0-2 multiply the base
   rate, tier 3 charges the pool maximum.
4. Privileged (registered segmenter) invocations are priced at tier 0.
5. Capped at the pool's `max_trade_fee_rate`.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..state.config import AmmConfig, BPS_DENOM
from ..state.pools import PoolLedger
from ..state.volatility import MAX_TIER, tier_fee_mult_bps
from .oracle import PriceSnapshot, is_fresh


@dataclass(frozen=True)
class DynamicFee:
    rate: int
    tier: int
    volatility_bps: int


def observed_volatility_bps(snapshot: PriceSnapshot, now: int, window_seconds: int) -> int:
    """Token-0 price range over `[now - window, now]` in basis points of the minimum."""
    start = now - window_seconds if now > window_seconds else 0
    prices = [o.price0_x32 for o in snapshot.window(start, now) if o.price0_x32 > 0]
    if len(prices) < 2:
        return 0
    lo = min(prices)
    hi = max(prices)
    return ((hi - lo) * BPS_DENOM) // lo


def dynamic_fee_rate(
    config: AmmConfig,
    ledger: PoolLedger,
    snapshot: PriceSnapshot,
    now: int,
    *,
    privileged: bool = False,
) -> DynamicFee:
    """Compute the fee rate (per-million) for a swap executed at `now`."""
    max_rate = ledger.max_trade_fee_rate
    base_rate = min(config.trade_fee_rate, max_rate)

    if privileged:
        return DynamicFee(rate=base_rate, tier=0, volatility_bps=0)

    volatility = 0
    if is_fresh(snapshot, now, config.oracle_max_staleness_seconds):
        observed = observed_volatility_bps(snapshot, now, config.volatility_window_seconds)
        volatility = (observed * ledger.volatility_factor) // BPS_DENOM

    tier = config.volatility.tier_for(volatility)
    if tier == MAX_TIER:
        return DynamicFee(rate=max_rate, tier=tier, volatility_bps=volatility)

    rate = (config.trade_fee_rate * tier_fee_mult_bps(tier)) // BPS_DENOM
    return DynamicFee(rate=min(rate, max_rate), tier=tier, volatility_bps=volatility)
