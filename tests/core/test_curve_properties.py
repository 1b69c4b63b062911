"""Property tests: curve invariant and rounding direction of share math."""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import assume, given, settings

from gamma_amm.core import curve
from gamma_amm.core.errors import ZeroTradeAmount
from gamma_amm.core.oracle import PriceSnapshot
from gamma_amm.kernels.python.cp_swap_v1 import RoundDirection, lp_tokens_to_trading_tokens
from gamma_amm.state.config import AmmConfig
from gamma_amm.state.pools import PoolLedger


reserves = st.integers(min_value=1_000, max_value=10**15)
rates = st.integers(min_value=0, max_value=500_000)


def _ledger(reserve0: int, reserve1: int) -> PoolLedger:
    return PoolLedger(
        pool_id="0xpool",
        config_id="default",
        creator="alice",
        asset0="0x11",
        asset1="0x22",
        reserve0=reserve0,
        reserve1=reserve1,
        share_supply=1_000_000,
        open_time=0,
        max_trade_fee_rate=999_999,
        volatility_factor=10_000,
    )


@settings(max_examples=300, deadline=None)
@given(reserve_in=reserves, reserve_out=reserves, amount=st.integers(min_value=1, max_value=10**15), rate=rates)
def test_swap_base_input_never_decreases_constant(reserve_in: int, reserve_out: int, amount: int, rate: int) -> None:
    config = AmmConfig(trade_fee_rate=rate)
    ledger = _ledger(reserve_in, reserve_out)
    try:
        res = curve.swap_base_input(amount, reserve_in, reserve_out, config, ledger, PriceSnapshot(), 1_000)
    except ZeroTradeAmount:
        return
    assert res.constant_after >= reserve_in * reserve_out
    assert res.protocol_fee + res.fund_fee <= res.dynamic_fee
    assert 0 < res.destination_amount_swapped < reserve_out


@settings(max_examples=300, deadline=None)
@given(reserve_in=reserves, reserve_out=reserves, amount=st.integers(min_value=1, max_value=10**15), rate=rates)
def test_swap_base_output_never_decreases_constant(reserve_in: int, reserve_out: int, amount: int, rate: int) -> None:
    assume(amount < reserve_out)
    config = AmmConfig(trade_fee_rate=rate)
    ledger = _ledger(reserve_in, reserve_out)
    res = curve.swap_base_output(amount, reserve_in, reserve_out, config, ledger, PriceSnapshot(), 1_000)
    assert res.destination_amount_swapped == amount
    assert res.constant_after >= reserve_in * reserve_out


@settings(max_examples=300, deadline=None)
@given(
    shares=st.integers(min_value=1, max_value=10**12),
    supply=st.integers(min_value=1, max_value=10**12),
    reserve0=reserves,
    reserve1=reserves,
)
def test_deposit_never_underpays_and_withdraw_never_overpays(
    shares: int, supply: int, reserve0: int, reserve1: int
) -> None:
    assume(shares <= supply)
    up = lp_tokens_to_trading_tokens(
        lp_token_amount=shares,
        lp_token_supply=supply,
        swap_token_0_amount=reserve0,
        swap_token_1_amount=reserve1,
        round_direction=RoundDirection.CEILING,
    )
    down = lp_tokens_to_trading_tokens(
        lp_token_amount=shares,
        lp_token_supply=supply,
        swap_token_0_amount=reserve0,
        swap_token_1_amount=reserve1,
        round_direction=RoundDirection.FLOOR,
    )
    assert up.token_0_amount * supply >= shares * reserve0
    assert up.token_1_amount * supply >= shares * reserve1
    assert down.token_0_amount * supply <= shares * reserve0
    assert down.token_1_amount * supply <= shares * reserve1
    assert up.token_0_amount - down.token_0_amount in (0, 1)
