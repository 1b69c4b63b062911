"""
Event records consumed by external indexers.

Events are append-only facts; the shell appends them to the event log after
the operation that produced them has been committed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from ..state.amounts import AssetId, PoolId


class LpChangeKind(IntEnum):
    DEPOSIT = 0
    WITHDRAW = 1


@dataclass(frozen=True)
class LpChangeEvent:
    pool_id: PoolId
    share_supply_before: int
    reserve0_before: int
    reserve1_before: int
    asset0_amount: int
    asset1_amount: int
    transfer_fee0: int
    transfer_fee1: int
    change_kind: LpChangeKind


@dataclass(frozen=True)
class SwapEvent:
    pool_id: PoolId
    reserve_in_before: int
    reserve_out_before: int
    input_amount: int
    output_amount: int
    input_asset: AssetId
    output_asset: AssetId
    input_transfer_fee: int
    output_transfer_fee: int
    base_input: bool
    dynamic_fee: int
