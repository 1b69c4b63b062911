"""Volatility tiers for dynamic fee adjustment.

Maps a bounded volatility observation to a fee tier (0-3):

  0 = calm     → 1x base fee
  1 = elevated → 2x base fee
  2 = high     → 3x base fee
  3 = extreme  → pool maximum fee rate

Thresholds are ordered basis-point cut-offs on the scaled volatility signal.
"""

from __future__ import annotations

from dataclasses import dataclass


BPS_DENOM = 10_000

# Fee multiplier lookup: tier → bps-of-base (10000 = 1x). Tier 3 uses the pool cap.
_FEE_MULT_BPS = {0: 10_000, 1: 20_000, 2: 30_000}

MAX_TIER = 3


@dataclass(frozen=True)
class VolatilityTiers:
    """Ordered volatility thresholds in basis points."""

    t1_bps: int = 3000
    t2_bps: int = 6000
    t3_bps: int = 8000

    def __post_init__(self) -> None:
        for name, val in (
            ("t1_bps", self.t1_bps),
            ("t2_bps", self.t2_bps),
            ("t3_bps", self.t3_bps),
        ):
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"{name} must be an int")
            if not (0 <= val <= BPS_DENOM):
                raise ValueError(f"{name} must be in [0, {BPS_DENOM}]: {val}")
        if not (self.t1_bps <= self.t2_bps <= self.t3_bps):
            raise ValueError(
                f"thresholds must be ordered: t1={self.t1_bps} <= t2={self.t2_bps} <= t3={self.t3_bps}"
            )

    def tier_for(self, volatility_bps: int) -> int:
        """Tier selected by a scaled volatility observation."""
        if volatility_bps >= self.t3_bps:
            return 3
        if volatility_bps >= self.t2_bps:
            return 2
        if volatility_bps >= self.t1_bps:
            return 1
        return 0


def tier_fee_mult_bps(tier: int) -> int:
    """Fee multiplier for tiers 0-2. Tier 3 has no multiplier (capped rate)."""
    if tier not in _FEE_MULT_BPS:
        raise ValueError(f"tier must be in [0, 2]: {tier}")
    return _FEE_MULT_BPS[tier]
