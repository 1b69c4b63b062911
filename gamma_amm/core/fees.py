"""
Fee splitting (deterministic, integer-only).

A swap's dynamic fee is decomposed into:
- protocol fee and fund fee (removed from reserves into accumulators),
- the LP fee (the residual, left in reserves).

Two adjustments operate on that split:
- the referral rebate, which redirects part of protocol + fund fee to the
  referrer of the trade, and
- partner attribution, which books each partner's pro-rata share of the
  protocol fee into metrics counters without moving any funds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from ..state.amounts import AssetId, ParticipantId
from ..state.config import AmmConfig, BPS_DENOM
from ..state.pools import PartnerRecord
from .curve import TradeDirection
from .errors import ArithmeticUnderflow
from .math import checked_add, checked_mul

logger = logging.getLogger(__name__)


# Partner TVL shares keep five decimal digits.
PARTNER_FEE_SHARE_SCALE = 100_000


@dataclass(frozen=True)
class FeeSplit:
    protocol_fee: int
    fund_fee: int
    lp_fee: int

    def __post_init__(self) -> None:
        for name, v in (
            ("protocol_fee", self.protocol_fee),
            ("fund_fee", self.fund_fee),
            ("lp_fee", self.lp_fee),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")

    @property
    def total(self) -> int:
        return self.protocol_fee + self.fund_fee + self.lp_fee


def split_dynamic_fee(dynamic_fee: int, protocol_fee: int, fund_fee: int) -> FeeSplit:
    """Residual LP fee after protocol and fund portions."""
    if protocol_fee + fund_fee > dynamic_fee:
        raise ArithmeticUnderflow(
            f"protocol_fee + fund_fee ({protocol_fee} + {fund_fee}) exceeds dynamic_fee ({dynamic_fee})"
        )
    return FeeSplit(protocol_fee=protocol_fee, fund_fee=fund_fee, lp_fee=dynamic_fee - protocol_fee - fund_fee)


@dataclass(frozen=True)
class ReferralInfo:
    """Referral relationship supplied with a trade."""

    referrer: ParticipantId
    asset: AssetId
    share_bps: int
    project: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.share_bps, int) or isinstance(self.share_bps, bool):
            raise TypeError("share_bps must be an int")
        if not (0 <= self.share_bps <= BPS_DENOM):
            raise ValueError(f"share_bps must be in [0, {BPS_DENOM}]: {self.share_bps}")


@dataclass(frozen=True)
class ReferralRebate:
    referrer: ParticipantId
    amount: int
    protocol_fee_after: int
    fund_fee_after: int


def resolve_referral(
    config: AmmConfig,
    input_asset: AssetId,
    referral: Optional[ReferralInfo],
) -> Optional[ReferralInfo]:
    """
    Accept a referral only if referrals are enabled for the config, the
    referral project matches and the referral account holds the input asset.
    The share is clamped to the policy bound.
    """
    if referral is None or config.referral_project is None:
        return None
    if referral.project is not None and referral.project != config.referral_project:
        return None
    if referral.asset != input_asset:
        return None
    if referral.share_bps > config.max_referral_share_bps:
        return replace(referral, share_bps=config.max_referral_share_bps)
    return referral


def referral_amount(fee: int, share_bps: int) -> Tuple[int, int]:
    """(referral part, remaining fee) with floor rounding on the referral part."""
    part = (fee * share_bps) // BPS_DENOM
    return part, fee - part


def apply_referral_rebate(
    split: FeeSplit,
    referral: Optional[ReferralInfo],
    transfer_fee_of: Callable[[int], int],
) -> Optional[ReferralRebate]:
    """
    Carve the referral rebate out of protocol + fund fee.

    Skipped entirely when the rebate rounds to zero or when the asset's
    transfer fee would consume all of it.
    """
    if referral is None:
        return None
    from_protocol, protocol_after = referral_amount(split.protocol_fee, referral.share_bps)
    from_fund, fund_after = referral_amount(split.fund_fee, referral.share_bps)
    amount = checked_add(from_protocol, from_fund)
    if amount == 0:
        return None
    overhead = transfer_fee_of(amount)
    if overhead >= amount:
        logger.debug("referral rebate %d skipped: transfer fee %d consumes it", amount, overhead)
        return None
    return ReferralRebate(
        referrer=referral.referrer,
        amount=amount,
        protocol_fee_after=protocol_after,
        fund_fee_after=fund_after,
    )


def partner_fee(linked_shares: int, share_supply: int, protocol_fee: int) -> int:
    """
    Partner's pro-rata share of `protocol_fee`:

        tvl_share = linked_shares * 100_000 // share_supply
        partner_fee = protocol_fee * tvl_share // 100_000

    A pool with zero share supply attributes nothing.
    """
    if share_supply == 0:
        return 0
    tvl_share = checked_mul(linked_shares, PARTNER_FEE_SHARE_SCALE) // share_supply
    return checked_mul(protocol_fee, tvl_share) // PARTNER_FEE_SHARE_SCALE


def attribute_partner_fees(
    partners: Tuple[PartnerRecord, ...],
    share_supply: int,
    protocol_fee: int,
    direction: TradeDirection,
) -> Tuple[PartnerRecord, ...]:
    """Add each partner's protocol-fee share to the counter of the input asset."""
    updated = []
    for partner in partners:
        fee = partner_fee(partner.linked_shares, share_supply, protocol_fee)
        if direction is TradeDirection.ZERO_FOR_ONE:
            partner = replace(partner, cumulative_fee_share0=checked_add(partner.cumulative_fee_share0, fee))
        else:
            partner = replace(partner, cumulative_fee_share1=checked_add(partner.cumulative_fee_share1, fee))
        updated.append(partner)
    return tuple(updated)
