"""
Constant-product swap kernel with per-million fee rates (v1 semantics).

- The trade fee is charged on the *gross* source amount using ceil rounding.
- Pricing uses `source_less_fee = source - trade_fee`.
- Protocol and fund fees are carved out of the trade fee with floor rounding;
  the remainder of the trade fee stays in the pool.
- Output-fixed swaps solve the required input exactly from the invariant
  (ceil), then gross it up for the fee rate (ceil).

All rates are expressed over `FEE_RATE_DENOMINATOR` (1e6).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, unique


FEE_RATE_DENOMINATOR = 1_000_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _ceil_div_nonneg(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    if numerator < 0:
        raise ValueError("numerator must be non-negative")
    return (numerator + denominator - 1) // denominator


def _require_rate(name: str, rate: int) -> None:
    _require_int(name, rate)
    if not (0 <= rate < FEE_RATE_DENOMINATOR):
        raise ValueError(f"{name} must be in [0, {FEE_RATE_DENOMINATOR})")


@unique
class RoundDirection(Enum):
    FLOOR = "floor"
    CEILING = "ceiling"


@dataclass(frozen=True)
class SwapKernelResult:
    new_swap_source_amount: int
    new_swap_destination_amount: int
    source_amount_swapped: int
    destination_amount_swapped: int
    trade_fee: int
    protocol_fee: int
    fund_fee: int


@dataclass(frozen=True)
class TradingTokenResult:
    token_0_amount: int
    token_1_amount: int


def trading_fee(*, amount: int, trade_fee_rate: int) -> int:
    """`ceil(amount * trade_fee_rate / 1e6)`."""
    _require_int("amount", amount)
    _require_rate("trade_fee_rate", trade_fee_rate)
    if amount < 0:
        raise ValueError("amount must be non-negative")
    return _ceil_div_nonneg(amount * trade_fee_rate, FEE_RATE_DENOMINATOR)


def protocol_fee(*, trade_fee: int, protocol_fee_rate: int) -> int:
    """`floor(trade_fee * protocol_fee_rate / 1e6)`."""
    _require_int("trade_fee", trade_fee)
    _require_rate("protocol_fee_rate", protocol_fee_rate)
    if trade_fee < 0:
        raise ValueError("trade_fee must be non-negative")
    return (trade_fee * protocol_fee_rate) // FEE_RATE_DENOMINATOR


def fund_fee(*, trade_fee: int, fund_fee_rate: int) -> int:
    """`floor(trade_fee * fund_fee_rate / 1e6)`."""
    _require_int("trade_fee", trade_fee)
    _require_rate("fund_fee_rate", fund_fee_rate)
    if trade_fee < 0:
        raise ValueError("trade_fee must be non-negative")
    return (trade_fee * fund_fee_rate) // FEE_RATE_DENOMINATOR


def pre_fee_amount(*, post_fee_amount: int, trade_fee_rate: int) -> int:
    """
    Smallest gross amount whose post-fee remainder is at least `post_fee_amount`.

        pre = ceil(post * 1e6 / (1e6 - rate))
    """
    _require_int("post_fee_amount", post_fee_amount)
    _require_rate("trade_fee_rate", trade_fee_rate)
    if post_fee_amount < 0:
        raise ValueError("post_fee_amount must be non-negative")
    if trade_fee_rate == 0:
        return post_fee_amount
    return _ceil_div_nonneg(post_fee_amount * FEE_RATE_DENOMINATOR, FEE_RATE_DENOMINATOR - trade_fee_rate)


def _check_swap_inputs(reserve_in: int, reserve_out: int, protocol_fee_rate: int, fund_fee_rate: int) -> None:
    _require_int("reserve_in", reserve_in)
    _require_int("reserve_out", reserve_out)
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError("cannot swap against an empty reserve")
    _require_rate("protocol_fee_rate", protocol_fee_rate)
    _require_rate("fund_fee_rate", fund_fee_rate)
    if protocol_fee_rate + fund_fee_rate > FEE_RATE_DENOMINATOR:
        raise ValueError("protocol_fee_rate + fund_fee_rate exceeds the fee denominator")


def swap_base_input(
    *,
    source_amount: int,
    reserve_in: int,
    reserve_out: int,
    trade_fee_rate: int,
    protocol_fee_rate: int,
    fund_fee_rate: int,
) -> SwapKernelResult:
    """
    Input-fixed swap quote + post-state.

        trade_fee = ceil(source * rate / 1e6)
        source_less_fee = source - trade_fee
        out = floor(source_less_fee * reserve_out / (reserve_in + source_less_fee))

    Raises ValueError on invalid inputs or if the swap would produce a zero output.
    """
    _require_int("source_amount", source_amount)
    _check_swap_inputs(reserve_in, reserve_out, protocol_fee_rate, fund_fee_rate)
    if source_amount <= 0:
        raise ValueError("source_amount must be positive")

    fee = trading_fee(amount=source_amount, trade_fee_rate=trade_fee_rate)
    source_less_fee = source_amount - fee
    if source_less_fee <= 0:
        raise ValueError("source amount is consumed by the trade fee")

    destination = (source_less_fee * reserve_out) // (reserve_in + source_less_fee)
    if destination <= 0:
        raise ValueError("destination amount is zero (trade too small)")
    if destination >= reserve_out:
        raise ValueError("destination amount drains reserve_out")

    return SwapKernelResult(
        new_swap_source_amount=reserve_in + source_amount,
        new_swap_destination_amount=reserve_out - destination,
        source_amount_swapped=source_amount,
        destination_amount_swapped=destination,
        trade_fee=fee,
        protocol_fee=protocol_fee(trade_fee=fee, protocol_fee_rate=protocol_fee_rate),
        fund_fee=fund_fee(trade_fee=fee, fund_fee_rate=fund_fee_rate),
    )


def swap_base_output(
    *,
    destination_amount: int,
    reserve_in: int,
    reserve_out: int,
    trade_fee_rate: int,
    protocol_fee_rate: int,
    fund_fee_rate: int,
) -> SwapKernelResult:
    """
    Output-fixed swap quote + post-state.

        source_less_fee = ceil(reserve_in * out / (reserve_out - out))
        source = ceil(source_less_fee * 1e6 / (1e6 - rate))
        trade_fee = source - source_less_fee
    """
    _require_int("destination_amount", destination_amount)
    _check_swap_inputs(reserve_in, reserve_out, protocol_fee_rate, fund_fee_rate)
    if destination_amount <= 0:
        raise ValueError("destination_amount must be positive")
    if destination_amount >= reserve_out:
        raise ValueError("cannot drain full reserve_out")

    source_less_fee = _ceil_div_nonneg(reserve_in * destination_amount, reserve_out - destination_amount)
    if source_less_fee <= 0:
        raise ValueError("source amount is zero")

    source = pre_fee_amount(post_fee_amount=source_less_fee, trade_fee_rate=trade_fee_rate)
    fee = source - source_less_fee

    return SwapKernelResult(
        new_swap_source_amount=reserve_in + source,
        new_swap_destination_amount=reserve_out - destination_amount,
        source_amount_swapped=source,
        destination_amount_swapped=destination_amount,
        trade_fee=fee,
        protocol_fee=protocol_fee(trade_fee=fee, protocol_fee_rate=protocol_fee_rate),
        fund_fee=fund_fee(trade_fee=fee, fund_fee_rate=fund_fee_rate),
    )


def lp_tokens_to_trading_tokens(
    *,
    lp_token_amount: int,
    lp_token_supply: int,
    swap_token_0_amount: int,
    swap_token_1_amount: int,
    round_direction: RoundDirection,
) -> TradingTokenResult:
    """
    Convert a share amount into the proportional amounts of both reserves.

    CEILING is used when the pool receives tokens (deposit) and FLOOR when it
    pays them out (withdraw), so rounding always favours existing holders.
    """
    for name, v in (
        ("lp_token_amount", lp_token_amount),
        ("lp_token_supply", lp_token_supply),
        ("swap_token_0_amount", swap_token_0_amount),
        ("swap_token_1_amount", swap_token_1_amount),
    ):
        _require_int(name, v)
    if lp_token_amount < 0:
        raise ValueError("lp_token_amount must be non-negative")
    if swap_token_0_amount < 0 or swap_token_1_amount < 0:
        raise ValueError("reserves must be non-negative")
    if lp_token_supply <= 0:
        raise ValueError("lp_token_supply must be positive")

    if round_direction is RoundDirection.CEILING:
        token_0 = _ceil_div_nonneg(lp_token_amount * swap_token_0_amount, lp_token_supply)
        token_1 = _ceil_div_nonneg(lp_token_amount * swap_token_1_amount, lp_token_supply)
    else:
        token_0 = (lp_token_amount * swap_token_0_amount) // lp_token_supply
        token_1 = (lp_token_amount * swap_token_1_amount) // lp_token_supply
    return TradingTokenResult(token_0_amount=token_0, token_1_amount=token_1)


def integer_sqrt_product(amount0: int, amount1: int) -> int:
    """`floor(sqrt(amount0 * amount1))` computed exactly with `math.isqrt`."""
    _require_int("amount0", amount0)
    _require_int("amount1", amount1)
    if amount0 < 0 or amount1 < 0:
        raise ValueError("amounts must be non-negative")
    return math.isqrt(amount0 * amount1)
