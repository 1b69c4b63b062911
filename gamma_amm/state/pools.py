"""
Pool ledger: the shared record every pool operation reads and replaces.

The ledger is immutable; operations return an updated copy built with
`dataclasses.replace` and the shell commits it as a whole.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, replace
from enum import IntFlag
from typing import Optional, Tuple

from .amounts import AssetId, PoolId, ParticipantId, U64_MAX, U128_MAX, require_width


# Shares withheld from the creator at pool creation; never withdrawable.
LOCK_LP_AMOUNT = 100

# Fixed capacity of the partner array embedded in each ledger.
MAX_PARTNERS = 4

PartnerId = int


class PoolStatus(IntFlag):
    """Enabled-operation bitmask. A set bit means the operation is allowed."""

    NONE = 0
    DEPOSIT = 1
    WITHDRAW = 2
    SWAP = 4
    ALL = DEPOSIT | WITHDRAW | SWAP


def compute_pool_id(config_id: str, asset0: AssetId, asset1: AssetId) -> PoolId:
    """
    Deterministically compute a pool_id for (config, asset pair).

    The pair must already be in canonical order so one unordered pair maps to
    exactly one ledger per config.
    """
    if asset0 >= asset1:
        raise ValueError(f"Assets must be in canonical order: {asset0} < {asset1}")
    if not isinstance(config_id, str) or not config_id:
        raise ValueError("config_id must be a non-empty string")
    data = b"GammaPool" + config_id.encode("utf-8") + asset0.encode("utf-8") + asset1.encode("utf-8")
    return "0x" + hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class PartnerRecord:
    """Metrics-only partner accounting; never moves funds."""

    partner_id: PartnerId
    linked_shares: int = 0
    cumulative_fee_share0: int = 0
    cumulative_fee_share1: int = 0

    def __post_init__(self) -> None:
        require_width(
            (
                ("partner_id", self.partner_id),
                ("linked_shares", self.linked_shares),
                ("cumulative_fee_share0", self.cumulative_fee_share0),
                ("cumulative_fee_share1", self.cumulative_fee_share1),
            ),
            U64_MAX,
        )


@dataclass(frozen=True)
class PoolLedger:
    """
    State of one liquidity pool.

    Attributes:
        pool_id: pool identifier (see `compute_pool_id`)
        config_id: identifier of the AmmConfig the pool belongs to
        creator: participant that bootstrapped the pool
        asset0 / asset1: asset identifiers in canonical order
        reserve0 / reserve1: trading reserves (protocol/fund fees excluded)
        share_supply: total outstanding shares, including the locked amount
        protocol_fees0/1, fund_fees0/1: fee accumulators awaiting collection
        cumulative_trade_fees0/1, cumulative_volume0/1: monotone u128 counters
        partners: fixed-capacity partner array
        status: enabled-operation bitmask
        open_time: earliest timestamp at which swaps are accepted
        max_trade_fee_rate: upper bound of the dynamic fee rate (per-million)
        volatility_factor: scale applied to observed volatility (bps, 10000 = 1x)
        latest_dynamic_fee_rate: fee rate applied by the last swap
        recent_epoch: generation marker advanced by mutating operations
    """

    pool_id: PoolId
    config_id: str
    creator: ParticipantId
    asset0: AssetId
    asset1: AssetId
    reserve0: int
    reserve1: int
    share_supply: int
    open_time: int
    max_trade_fee_rate: int
    volatility_factor: int
    asset0_decimals: int = 9
    asset1_decimals: int = 9
    protocol_fees0: int = 0
    protocol_fees1: int = 0
    fund_fees0: int = 0
    fund_fees1: int = 0
    cumulative_trade_fees0: int = 0
    cumulative_trade_fees1: int = 0
    cumulative_volume0: int = 0
    cumulative_volume1: int = 0
    partners: Tuple[PartnerRecord, ...] = ()
    status: PoolStatus = PoolStatus.ALL
    latest_dynamic_fee_rate: int = 0
    recent_epoch: int = 0
    created_at: int = 0

    def __post_init__(self) -> None:
        if self.asset0 >= self.asset1:
            raise ValueError(f"Assets must be in canonical order: {self.asset0} < {self.asset1}")
        require_width(
            (
                ("reserve0", self.reserve0),
                ("reserve1", self.reserve1),
                ("share_supply", self.share_supply),
                ("protocol_fees0", self.protocol_fees0),
                ("protocol_fees1", self.protocol_fees1),
                ("fund_fees0", self.fund_fees0),
                ("fund_fees1", self.fund_fees1),
                ("open_time", self.open_time),
                ("max_trade_fee_rate", self.max_trade_fee_rate),
                ("volatility_factor", self.volatility_factor),
                ("latest_dynamic_fee_rate", self.latest_dynamic_fee_rate),
                ("recent_epoch", self.recent_epoch),
                ("created_at", self.created_at),
            ),
            U64_MAX,
        )
        require_width(
            (
                ("cumulative_trade_fees0", self.cumulative_trade_fees0),
                ("cumulative_trade_fees1", self.cumulative_trade_fees1),
                ("cumulative_volume0", self.cumulative_volume0),
                ("cumulative_volume1", self.cumulative_volume1),
            ),
            U128_MAX,
        )
        object.__setattr__(self, "partners", tuple(self.partners))
        if len(self.partners) > MAX_PARTNERS:
            raise ValueError(f"at most {MAX_PARTNERS} partners per pool: {len(self.partners)}")
        ids = [p.partner_id for p in self.partners]
        if len(set(ids)) != len(ids):
            raise ValueError("partner ids must be unique")
        object.__setattr__(self, "status", PoolStatus(self.status))

    def is_enabled(self, flag: PoolStatus) -> bool:
        return bool(self.status & flag)

    def with_status(self, status: PoolStatus) -> "PoolLedger":
        return replace(self, status=PoolStatus(status))

    def token_price_x32(self) -> Tuple[int, int]:
        """
        Spot prices in X32 fixed point:
            price0 = reserve1 * 2**32 / reserve0
            price1 = reserve0 * 2**32 / reserve1
        """
        if self.reserve0 == 0 or self.reserve1 == 0:
            return 0, 0
        return (self.reserve1 << 32) // self.reserve0, (self.reserve0 << 32) // self.reserve1

    def constant_product(self) -> int:
        return self.reserve0 * self.reserve1

    def find_partner(self, partner_id: Optional[PartnerId]) -> Optional[int]:
        """Index of the partner record for `partner_id`, or None."""
        if partner_id is None:
            return None
        for index, partner in enumerate(self.partners):
            if partner.partner_id == partner_id:
                return index
        return None

    def __repr__(self) -> str:
        return (
            f"PoolLedger(pool_id={self.pool_id[:16]}..., "
            f"reserves=({self.reserve0}, {self.reserve1}), "
            f"share_supply={self.share_supply}, status={self.status!r})"
        )
