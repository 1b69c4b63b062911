"""
Swap orchestration.

Both swap modes run the same pipeline over an immutable `SwapContext`:

 1. swaps enabled and the pool is open
 2. trade direction from the asset pair
 3. pre-trade reserves and X32 prices
 4. curve evaluation (transfer fees folded into the requested amount)
 5. slippage bound
 6. referral rebate carve-out
 7. partner fee attribution (metrics only)
 8. reserves, fee accumulators and monotone counters
 9. post-trade invariant check
10. latest dynamic fee rate
11. planned transfers: payer -> pool, pool -> payer, payer -> referrer
12. oracle update with the pre-trade prices (carried out by the shell)
13. recent epoch

Nothing is mutated here; the shell executes `SwapOutcome.transfers` and commits
`SwapOutcome.ledger` only once every transfer succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..state.amounts import AssetId, ParticipantId
from ..state.config import AmmConfig
from ..state.pools import PoolLedger, PoolStatus
from . import curve
from .curve import SwapResult, TradeDirection
from .errors import InvariantViolation, OperationDisabled, SlippageExceeded, ZeroTradeAmount
from .events import SwapEvent
from .fees import (
    ReferralInfo,
    apply_referral_rebate,
    attribute_partner_fees,
    resolve_referral,
    split_dynamic_fee,
)
from .math import add_u128, checked_add, checked_sub, require_u64, to_u64
from .oracle import PriceSnapshot
from .transfers import PlannedTransfer, TransferQuotes, vault_account

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapContext:
    config: AmmConfig
    ledger: PoolLedger
    input_asset: AssetId
    output_asset: AssetId
    payer: ParticipantId
    snapshot: PriceSnapshot
    now: int
    epoch: int
    quotes: TransferQuotes
    referral: Optional[ReferralInfo] = None
    privileged: bool = False


@dataclass(frozen=True)
class OracleUpdate:
    timestamp: int
    price0_x32: int
    price1_x32: int


@dataclass(frozen=True)
class SwapOutcome:
    ledger: PoolLedger
    event: SwapEvent
    transfers: Tuple[PlannedTransfer, ...]
    oracle_update: OracleUpdate
    result: SwapResult
    referral_amount: int
    input_transfer_amount: int
    output_transfer_amount: int


@dataclass(frozen=True)
class _Legs:
    """Settlement amounts of one evaluated trade, before the referral carve-out."""

    result: SwapResult
    input_transfer_amount: int
    input_transfer_fee: int
    output_transfer_amount: int
    output_transfer_fee: int


def _open_for_swaps(ctx: SwapContext) -> None:
    ledger = ctx.ledger
    if not ledger.is_enabled(PoolStatus.SWAP):
        raise OperationDisabled(f"swaps are disabled for pool {ledger.pool_id}")
    if ctx.now < ledger.open_time:
        raise OperationDisabled(f"pool {ledger.pool_id} opens at {ledger.open_time} (now {ctx.now})")


def _apply_to_ledger(
    ledger: PoolLedger,
    direction: TradeDirection,
    *,
    source: int,
    protocol_fee: int,
    fund_fee: int,
    dynamic_fee: int,
    volume_in: int,
    volume_out: int,
) -> PoolLedger:
    """Book one trade's amounts on the input/output side of the ledger."""
    if direction is TradeDirection.ZERO_FOR_ONE:
        return replace(
            ledger,
            protocol_fees0=checked_add(ledger.protocol_fees0, protocol_fee),
            fund_fees0=checked_add(ledger.fund_fees0, fund_fee),
            cumulative_trade_fees0=add_u128(ledger.cumulative_trade_fees0, dynamic_fee),
            cumulative_volume0=add_u128(ledger.cumulative_volume0, volume_in),
            cumulative_volume1=add_u128(ledger.cumulative_volume1, volume_out),
            reserve0=checked_sub(checked_sub(checked_add(ledger.reserve0, source), fund_fee), protocol_fee),
            reserve1=checked_sub(ledger.reserve1, volume_out),
        )
    return replace(
        ledger,
        protocol_fees1=checked_add(ledger.protocol_fees1, protocol_fee),
        fund_fees1=checked_add(ledger.fund_fees1, fund_fee),
        cumulative_trade_fees1=add_u128(ledger.cumulative_trade_fees1, dynamic_fee),
        cumulative_volume1=add_u128(ledger.cumulative_volume1, volume_in),
        cumulative_volume0=add_u128(ledger.cumulative_volume0, volume_out),
        reserve1=checked_sub(checked_sub(checked_add(ledger.reserve1, source), fund_fee), protocol_fee),
        reserve0=checked_sub(ledger.reserve0, volume_out),
    )


def _settle(ctx: SwapContext, direction: TradeDirection, legs: _Legs, base_input: bool) -> SwapOutcome:
    """Steps 6-13: shared by both swap modes."""
    ledger = ctx.ledger
    result = legs.result
    reserve_in, reserve_out = curve.directional_reserves(ledger, direction)
    constant_before = reserve_in * reserve_out
    price0_x32, price1_x32 = ledger.token_price_x32()

    protocol_fee = to_u64("protocol_fee", result.protocol_fee)
    fund_fee = to_u64("fund_fee", result.fund_fee)
    dynamic_fee = to_u64("dynamic_fee", result.dynamic_fee)
    source_amount = to_u64("source_amount_swapped", result.source_amount_swapped)
    input_transfer_amount = legs.input_transfer_amount

    referral = resolve_referral(ctx.config, ctx.input_asset, ctx.referral)
    rebate = apply_referral_rebate(
        split_dynamic_fee(dynamic_fee, protocol_fee, fund_fee),
        referral,
        lambda amount: ctx.quotes.transfer_fee(ctx.input_asset, amount),
    )
    referral_amount = 0
    if rebate is not None:
        referral_amount = rebate.amount
        protocol_fee = rebate.protocol_fee_after
        fund_fee = rebate.fund_fee_after
        input_transfer_amount = checked_sub(input_transfer_amount, referral_amount)
        source_amount = checked_sub(source_amount, referral_amount)

    next_ledger = replace(
        ledger,
        partners=attribute_partner_fees(ledger.partners, ledger.share_supply, protocol_fee, direction),
    )
    next_ledger = _apply_to_ledger(
        next_ledger,
        direction,
        source=source_amount,
        protocol_fee=protocol_fee,
        fund_fee=fund_fee,
        dynamic_fee=dynamic_fee,
        volume_in=input_transfer_amount,
        volume_out=legs.output_transfer_amount,
    )

    new_in, new_out = curve.directional_reserves(next_ledger, direction)
    if new_in * new_out < constant_before:
        raise InvariantViolation(constant_before, new_in * new_out)

    next_ledger = replace(
        next_ledger,
        latest_dynamic_fee_rate=result.dynamic_fee_rate,
        recent_epoch=ctx.epoch,
    )

    event = SwapEvent(
        pool_id=ledger.pool_id,
        reserve_in_before=reserve_in,
        reserve_out_before=reserve_out,
        input_amount=to_u64("input_amount", result.source_amount_swapped),
        output_amount=to_u64("output_amount", result.destination_amount_swapped),
        input_asset=ctx.input_asset,
        output_asset=ctx.output_asset,
        input_transfer_fee=legs.input_transfer_fee,
        output_transfer_fee=legs.output_transfer_fee,
        base_input=base_input,
        dynamic_fee=dynamic_fee,
    )

    input_decimals, output_decimals = ledger.asset0_decimals, ledger.asset1_decimals
    if direction is TradeDirection.ONE_FOR_ZERO:
        input_decimals, output_decimals = output_decimals, input_decimals
    vault = vault_account(ledger.pool_id)
    transfers = [
        PlannedTransfer(ctx.payer, ctx.payer, vault, ctx.input_asset, input_transfer_amount, input_decimals),
        PlannedTransfer(vault, vault, ctx.payer, ctx.output_asset, legs.output_transfer_amount, output_decimals),
    ]
    if rebate is not None:
        transfers.append(
            PlannedTransfer(ctx.payer, ctx.payer, rebate.referrer, ctx.input_asset, referral_amount, input_decimals)
        )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "swap pool=%s base_input=%s in=%d out=%d dynamic_fee=%d protocol_fee=%d fund_fee=%d referral=%d",
            ledger.pool_id,
            base_input,
            input_transfer_amount,
            legs.output_transfer_amount,
            dynamic_fee,
            protocol_fee,
            fund_fee,
            referral_amount,
        )

    return SwapOutcome(
        ledger=next_ledger,
        event=event,
        transfers=tuple(transfers),
        oracle_update=OracleUpdate(timestamp=ctx.now, price0_x32=price0_x32, price1_x32=price1_x32),
        result=result,
        referral_amount=referral_amount,
        input_transfer_amount=input_transfer_amount,
        output_transfer_amount=legs.output_transfer_amount,
    )


def swap_base_input(ctx: SwapContext, amount_in: int, minimum_amount_out: int) -> SwapOutcome:
    """
    Sell exactly `amount_in` (gross, as sent by the payer).

    The pool receives `amount_in - transfer_fee(amount_in)`; the payer must
    receive at least `minimum_amount_out` after the output asset's transfer fee.

    Raises:
        OperationDisabled: swaps disabled or pool not open yet
        InvalidAssetForPool: asset pair does not match the pool
        ZeroTradeAmount: degenerate trade
        SlippageExceeded: net output below `minimum_amount_out`
        InvariantViolation: post-trade constant product decreased
    """
    require_u64("amount_in", amount_in)
    require_u64("minimum_amount_out", minimum_amount_out)
    _open_for_swaps(ctx)
    direction = curve.resolve_direction(ctx.ledger, ctx.input_asset, ctx.output_asset)
    reserve_in, reserve_out = curve.directional_reserves(ctx.ledger, direction)

    input_transfer_fee = ctx.quotes.transfer_fee(ctx.input_asset, amount_in)
    actual_amount_in = amount_in - input_transfer_fee
    if actual_amount_in <= 0:
        raise ZeroTradeAmount("input amount is consumed by the transfer fee")

    result = curve.swap_base_input(
        actual_amount_in,
        reserve_in,
        reserve_out,
        ctx.config,
        ctx.ledger,
        ctx.snapshot,
        ctx.now,
        privileged=ctx.privileged,
    )

    amount_out = to_u64("destination_amount_swapped", result.destination_amount_swapped)
    output_transfer_fee = ctx.quotes.transfer_fee(ctx.output_asset, amount_out)
    amount_received = amount_out - output_transfer_fee
    if amount_received <= 0:
        raise ZeroTradeAmount("output amount is consumed by the transfer fee")
    if amount_received < minimum_amount_out:
        raise SlippageExceeded(f"amount out {amount_received} < minimum_amount_out {minimum_amount_out}")

    legs = _Legs(
        result=result,
        input_transfer_amount=amount_in,
        input_transfer_fee=input_transfer_fee,
        output_transfer_amount=amount_out,
        output_transfer_fee=output_transfer_fee,
    )
    return _settle(ctx, direction, legs, base_input=True)


def swap_base_output(ctx: SwapContext, max_amount_in: int, amount_out_less_fee: int) -> SwapOutcome:
    """
    Buy exactly `amount_out_less_fee` (net, as received by the payer).

    The output asset's transfer fee is added on top of the requested amount
    before the curve solves for the input; the payer then sends the required
    input plus the input asset's transfer overhead, bounded by `max_amount_in`.

    Raises:
        OperationDisabled: swaps disabled or pool not open yet
        InvalidAssetForPool: asset pair does not match the pool
        ZeroTradeAmount: degenerate trade
        SlippageExceeded: required gross input above `max_amount_in`
        InvariantViolation: post-trade constant product decreased
    """
    require_u64("max_amount_in", max_amount_in)
    require_u64("amount_out_less_fee", amount_out_less_fee)
    if amount_out_less_fee == 0:
        raise ZeroTradeAmount("amount_out_less_fee must be positive")
    _open_for_swaps(ctx)
    direction = curve.resolve_direction(ctx.ledger, ctx.input_asset, ctx.output_asset)
    reserve_in, reserve_out = curve.directional_reserves(ctx.ledger, direction)

    output_transfer_fee = ctx.quotes.transfer_overhead(ctx.output_asset, amount_out_less_fee)
    actual_amount_out = checked_add(amount_out_less_fee, output_transfer_fee)

    result = curve.swap_base_output(
        actual_amount_out,
        reserve_in,
        reserve_out,
        ctx.config,
        ctx.ledger,
        ctx.snapshot,
        ctx.now,
        privileged=ctx.privileged,
    )

    source_amount_swapped = to_u64("source_amount_swapped", result.source_amount_swapped)
    if source_amount_swapped <= 0:
        raise ZeroTradeAmount("source amount is zero")
    input_transfer_fee = ctx.quotes.transfer_overhead(ctx.input_asset, source_amount_swapped)
    input_transfer_amount = checked_add(source_amount_swapped, input_transfer_fee)
    if input_transfer_amount > max_amount_in:
        raise SlippageExceeded(f"amount in {input_transfer_amount} > max_amount_in {max_amount_in}")

    legs = _Legs(
        result=result,
        input_transfer_amount=input_transfer_amount,
        input_transfer_fee=input_transfer_fee,
        output_transfer_amount=actual_amount_out,
        output_transfer_fee=output_transfer_fee,
    )
    return _settle(ctx, direction, legs, base_input=False)
