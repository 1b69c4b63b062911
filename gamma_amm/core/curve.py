"""
Price curve: constant-product evaluation with a dynamic fee rate.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per swap (plus O(n) over the oracle window for the fee rate)
- Invariant: (new_source - dynamic_fee) * new_destination >= reserve_in * reserve_out

The integer kernel (`gamma_amm.kernels.python.cp_swap_v1`) does the math; this
module resolves the fee rate, maps kernel failures onto pool errors and
re-checks the invariant on every result it returns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, unique
from typing import Tuple

from ..kernels.python import cp_swap_v1 as kernel
from ..state.amounts import AssetId
from ..state.config import AmmConfig
from ..state.pools import PoolLedger
from .dynamic_fee import DynamicFee, dynamic_fee_rate
from .errors import InvalidAssetForPool, InvariantViolation, ZeroTradeAmount
from .oracle import PriceSnapshot

logger = logging.getLogger(__name__)


@unique
class TradeDirection(Enum):
    ZERO_FOR_ONE = "zero_for_one"
    ONE_FOR_ZERO = "one_for_zero"


@dataclass(frozen=True)
class SwapResult:
    new_swap_source_amount: int
    new_swap_destination_amount: int
    source_amount_swapped: int
    destination_amount_swapped: int
    dynamic_fee: int
    protocol_fee: int
    fund_fee: int
    dynamic_fee_rate: int
    fee_tier: int = 0

    @property
    def constant_after(self) -> int:
        return (self.new_swap_source_amount - self.dynamic_fee) * self.new_swap_destination_amount


def resolve_direction(ledger: PoolLedger, input_asset: AssetId, output_asset: AssetId) -> TradeDirection:
    """Trade direction from the (input, output) pair; anything else is not this pool."""
    if input_asset == ledger.asset0 and output_asset == ledger.asset1:
        return TradeDirection.ZERO_FOR_ONE
    if input_asset == ledger.asset1 and output_asset == ledger.asset0:
        return TradeDirection.ONE_FOR_ZERO
    raise InvalidAssetForPool(f"assets ({input_asset}, {output_asset}) do not match pool {ledger.pool_id}")


def directional_reserves(ledger: PoolLedger, direction: TradeDirection) -> Tuple[int, int]:
    """(reserve_in, reserve_out) for a direction."""
    if direction is TradeDirection.ZERO_FOR_ONE:
        return ledger.reserve0, ledger.reserve1
    return ledger.reserve1, ledger.reserve0


def _finish(
    res: kernel.SwapKernelResult,
    fee: DynamicFee,
    reserve_in: int,
    reserve_out: int,
) -> SwapResult:
    result = SwapResult(
        new_swap_source_amount=res.new_swap_source_amount,
        new_swap_destination_amount=res.new_swap_destination_amount,
        source_amount_swapped=res.source_amount_swapped,
        destination_amount_swapped=res.destination_amount_swapped,
        dynamic_fee=res.trade_fee,
        protocol_fee=res.protocol_fee,
        fund_fee=res.fund_fee,
        dynamic_fee_rate=fee.rate,
        fee_tier=fee.tier,
    )
    constant_before = reserve_in * reserve_out
    constant_after = result.constant_after
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "source_amount_swapped=%d destination_amount_swapped=%d dynamic_fee=%d rate=%d tier=%d "
            "constant_before=%d constant_after=%d",
            result.source_amount_swapped,
            result.destination_amount_swapped,
            result.dynamic_fee,
            fee.rate,
            fee.tier,
            constant_before,
            constant_after,
        )
    if constant_after < constant_before:
        raise InvariantViolation(constant_before, constant_after)
    return result


def swap_base_input(
    source_amount: int,
    reserve_in: int,
    reserve_out: int,
    config: AmmConfig,
    ledger: PoolLedger,
    snapshot: PriceSnapshot,
    now: int,
    privileged: bool = False,
) -> SwapResult:
    """Trade a fixed input amount; see `cp_swap_v1.swap_base_input` for the math."""
    fee = dynamic_fee_rate(config, ledger, snapshot, now, privileged=privileged)
    try:
        res = kernel.swap_base_input(
            source_amount=source_amount,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            trade_fee_rate=fee.rate,
            protocol_fee_rate=config.protocol_fee_rate,
            fund_fee_rate=config.fund_fee_rate,
        )
    except ValueError as exc:
        raise ZeroTradeAmount(str(exc)) from exc
    return _finish(res, fee, reserve_in, reserve_out)


def swap_base_output(
    destination_amount: int,
    reserve_in: int,
    reserve_out: int,
    config: AmmConfig,
    ledger: PoolLedger,
    snapshot: PriceSnapshot,
    now: int,
    privileged: bool = False,
) -> SwapResult:
    """Trade for a fixed output amount; the input is solved exactly from the invariant."""
    fee = dynamic_fee_rate(config, ledger, snapshot, now, privileged=privileged)
    try:
        res = kernel.swap_base_output(
            destination_amount=destination_amount,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
            trade_fee_rate=fee.rate,
            protocol_fee_rate=config.protocol_fee_rate,
            fund_fee_rate=config.fund_fee_rate,
        )
    except ValueError as exc:
        raise ZeroTradeAmount(str(exc)) from exc
    return _finish(res, fee, reserve_in, reserve_out)
