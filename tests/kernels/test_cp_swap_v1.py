from __future__ import annotations

import pytest

from gamma_amm.kernels.python.cp_swap_v1 import (
    RoundDirection,
    fund_fee,
    integer_sqrt_product,
    lp_tokens_to_trading_tokens,
    pre_fee_amount,
    protocol_fee,
    swap_base_input,
    swap_base_output,
    trading_fee,
)


def test_trading_fee_rounds_up() -> None:
    assert trading_fee(amount=1000, trade_fee_rate=2500) == 3
    assert trading_fee(amount=400, trade_fee_rate=2500) == 1
    assert trading_fee(amount=0, trade_fee_rate=2500) == 0


def test_protocol_and_fund_fee_round_down() -> None:
    assert protocol_fee(trade_fee=3, protocol_fee_rate=120_000) == 0
    assert protocol_fee(trade_fee=100, protocol_fee_rate=120_000) == 12
    assert fund_fee(trade_fee=100, fund_fee_rate=40_000) == 4
    assert fund_fee(trade_fee=24, fund_fee_rate=40_000) == 0


def test_pre_fee_amount_is_minimal() -> None:
    post = 251
    pre = pre_fee_amount(post_fee_amount=post, trade_fee_rate=2500)
    assert pre == 252
    assert pre - trading_fee(amount=pre, trade_fee_rate=2500) >= post - 1
    assert pre_fee_amount(post_fee_amount=post, trade_fee_rate=0) == post


def test_swap_base_input_example() -> None:
    res = swap_base_input(
        source_amount=1000,
        reserve_in=1_000_000,
        reserve_out=2_000_000,
        trade_fee_rate=2500,
        protocol_fee_rate=120_000,
        fund_fee_rate=40_000,
    )
    assert res.trade_fee == 3
    assert res.destination_amount_swapped == 1992
    assert res.new_swap_source_amount == 1_001_000
    assert res.new_swap_destination_amount == 2_000_000 - 1992
    assert (res.new_swap_source_amount - res.trade_fee) * res.new_swap_destination_amount >= 1_000_000 * 2_000_000


def test_swap_base_output_example_solves_input_from_invariant() -> None:
    res = swap_base_output(
        destination_amount=500,
        reserve_in=1_000_000,
        reserve_out=2_000_000,
        trade_fee_rate=2500,
        protocol_fee_rate=120_000,
        fund_fee_rate=40_000,
    )
    # ceil(1_000_000 * 500 / 1_999_500) = 251, grossed up for the fee rate
    assert res.source_amount_swapped == 252
    assert res.trade_fee == 1
    assert res.destination_amount_swapped == 500
    assert (res.new_swap_source_amount - res.trade_fee) * res.new_swap_destination_amount >= 1_000_000 * 2_000_000


def test_swap_base_output_without_fee() -> None:
    res = swap_base_output(
        destination_amount=500,
        reserve_in=1_000_000,
        reserve_out=2_000_000,
        trade_fee_rate=0,
        protocol_fee_rate=0,
        fund_fee_rate=0,
    )
    assert res.source_amount_swapped == 251
    assert res.trade_fee == 0


def test_swap_rejects_degenerate_inputs() -> None:
    kwargs = dict(reserve_in=1_000, reserve_out=1_000, trade_fee_rate=2500, protocol_fee_rate=0, fund_fee_rate=0)
    with pytest.raises(ValueError, match="positive"):
        swap_base_input(source_amount=0, **kwargs)
    with pytest.raises(ValueError, match="drain"):
        swap_base_output(destination_amount=1_000, **kwargs)
    with pytest.raises(ValueError, match="empty reserve"):
        swap_base_input(source_amount=10, reserve_in=0, reserve_out=1_000, trade_fee_rate=0, protocol_fee_rate=0, fund_fee_rate=0)
    with pytest.raises(ValueError, match="zero"):
        swap_base_input(source_amount=1, reserve_in=1_000_000, reserve_out=10, trade_fee_rate=0, protocol_fee_rate=0, fund_fee_rate=0)


def test_swap_rejects_full_fee_rate() -> None:
    with pytest.raises(ValueError, match="trade_fee_rate"):
        swap_base_input(
            source_amount=10,
            reserve_in=1_000,
            reserve_out=1_000,
            trade_fee_rate=1_000_000,
            protocol_fee_rate=0,
            fund_fee_rate=0,
        )


def test_lp_tokens_to_trading_tokens_rounding_directions() -> None:
    kwargs = dict(lp_token_amount=1, lp_token_supply=3, swap_token_0_amount=10, swap_token_1_amount=20)
    up = lp_tokens_to_trading_tokens(round_direction=RoundDirection.CEILING, **kwargs)
    down = lp_tokens_to_trading_tokens(round_direction=RoundDirection.FLOOR, **kwargs)
    assert (up.token_0_amount, up.token_1_amount) == (4, 7)
    assert (down.token_0_amount, down.token_1_amount) == (3, 6)


def test_lp_tokens_to_trading_tokens_rejects_zero_supply() -> None:
    with pytest.raises(ValueError, match="lp_token_supply"):
        lp_tokens_to_trading_tokens(
            lp_token_amount=1,
            lp_token_supply=0,
            swap_token_0_amount=10,
            swap_token_1_amount=10,
            round_direction=RoundDirection.FLOOR,
        )


def test_integer_sqrt_product_is_exact_for_large_values() -> None:
    # Pick values where float sqrt would be wrong due to precision loss.
    n = (1 << 70) + 12345
    assert integer_sqrt_product(n, n) == n
    assert integer_sqrt_product(1_000_000, 2_000_000) == 1_414_213


def test_rejects_bool_amounts() -> None:
    with pytest.raises(TypeError):
        trading_fee(amount=True, trade_fee_rate=2500)  # type: ignore[arg-type]
