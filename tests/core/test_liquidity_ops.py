from __future__ import annotations

from typing import Dict

import pytest

from gamma_amm.core.errors import (
    ArithmeticUnderflow,
    InvalidActivationTime,
    InvalidAssetForPool,
    OperationDisabled,
    SlippageExceeded,
    UnsupportedAssetKind,
    ZeroTradeAmount,
)
from gamma_amm.core.events import LpChangeKind
from gamma_amm.core.liquidity import deposit, initialize_pool, withdraw
from gamma_amm.core.transfers import vault_account
from gamma_amm.kernels.python.transfer_fee_v1 import calculate_fee, calculate_inverse_fee
from gamma_amm.state.assets import AssetExtension, AssetInfo, AssetKind, TransferFeeConfig
from gamma_amm.state.config import AmmConfig
from gamma_amm.state.participants import ParticipantLiquidity
from gamma_amm.state.pools import LOCK_LP_AMOUNT, PartnerRecord, PoolLedger, PoolStatus, compute_pool_id


ASSET0 = "0x" + "11" * 32
ASSET1 = "0x" + "22" * 32


class _Quotes:
    def __init__(self, fees: Dict[str, TransferFeeConfig] | None = None) -> None:
        self._fees = fees or {}

    def transfer_fee(self, asset: str, gross_amount: int) -> int:
        fee = self._fees.get(asset, TransferFeeConfig())
        return calculate_fee(amount=gross_amount, fee_bps=fee.fee_bps, max_fee=fee.max_fee)

    def transfer_overhead(self, asset: str, net_amount: int) -> int:
        fee = self._fees.get(asset, TransferFeeConfig())
        return calculate_inverse_fee(post_fee_amount=net_amount, fee_bps=fee.fee_bps, max_fee=fee.max_fee)


def _ledger(**overrides) -> PoolLedger:
    kwargs = dict(
        pool_id=compute_pool_id("default", ASSET0, ASSET1),
        config_id="default",
        creator="alice",
        asset0=ASSET0,
        asset1=ASSET1,
        reserve0=1_000_000,
        reserve1=2_000_000,
        share_supply=1_000_000,
        open_time=0,
        max_trade_fee_rate=100_000,
        volatility_factor=10_000,
    )
    kwargs.update(overrides)
    return PoolLedger(**kwargs)


def _init(config: AmmConfig = AmmConfig(), **overrides):
    kwargs = dict(
        config=config,
        creator="alice",
        asset0=AssetInfo(asset_id=ASSET0),
        asset1=AssetInfo(asset_id=ASSET1),
        init_amount0=1_000_000,
        init_amount1=2_000_000,
        open_time=0,
        max_trade_fee_rate=100_000,
        volatility_factor=10_000,
        now=1_000,
        quotes=_Quotes(),
    )
    kwargs.update(overrides)
    return initialize_pool(**kwargs)


# ---------------------------------------------------------------------------
# initialize_pool
# ---------------------------------------------------------------------------

def test_initialize_pool_mints_isqrt_minus_lock() -> None:
    res = _init()
    assert res.ledger.share_supply == 1_414_213
    assert res.shares_minted == 1_414_213 - LOCK_LP_AMOUNT
    assert res.participant.shares_owned == res.shares_minted
    assert res.participant.first_deposit_at == 1_000
    assert (res.ledger.reserve0, res.ledger.reserve1) == (1_000_000, 2_000_000)
    assert res.ledger.open_time == 1_001
    assert res.ledger.status == PoolStatus.ALL
    assert res.observation_state.observations == ()
    assert [(t.asset, t.amount, t.destination) for t in res.transfers] == [
        (ASSET0, 1_000_000, vault_account(res.ledger.pool_id)),
        (ASSET1, 2_000_000, vault_account(res.ledger.pool_id)),
    ]


def test_initialize_pool_charges_creation_fee() -> None:
    config = AmmConfig(create_pool_fee=50, create_pool_fee_receiver="treasury")
    res = _init(config)
    assert len(res.transfers) == 3
    fee = res.transfers[2]
    assert (fee.source, fee.destination, fee.asset, fee.amount) == ("alice", "treasury", config.native_asset, 50)


def test_initialize_pool_copies_config_partners() -> None:
    res = _init(AmmConfig(partner_ids=(7, 9)))
    assert [p.partner_id for p in res.ledger.partners] == [7, 9]


def test_initialize_pool_receives_amount_net_of_transfer_fee() -> None:
    fee = TransferFeeConfig(fee_bps=100, max_fee=1_000_000)
    asset0 = AssetInfo(
        asset_id=ASSET0,
        kind=AssetKind.EXTENDED,
        extensions=frozenset({AssetExtension.TRANSFER_FEE}),
        transfer_fee=fee,
    )
    res = _init(asset0=asset0, quotes=_Quotes({ASSET0: fee}))
    assert res.ledger.reserve0 == 990_000
    assert res.transfers[0].amount == 1_000_000


def test_initialize_pool_rejects_non_canonical_order() -> None:
    with pytest.raises(InvalidAssetForPool, match="canonical order"):
        _init(asset0=AssetInfo(asset_id=ASSET1), asset1=AssetInfo(asset_id=ASSET0))


def test_initialize_pool_rejects_unsupported_asset() -> None:
    hook = AssetInfo(asset_id=ASSET1, kind=AssetKind.EXTENDED, extensions=frozenset({AssetExtension.TRANSFER_HOOK}))
    with pytest.raises(UnsupportedAssetKind):
        _init(asset1=hook)


def test_initialize_pool_respects_disable_flag() -> None:
    with pytest.raises(OperationDisabled):
        _init(AmmConfig(disable_create_pool=True))


def test_initialize_pool_rejects_far_open_time() -> None:
    config = AmmConfig(max_open_time=100)
    with pytest.raises(InvalidActivationTime):
        _init(config, open_time=1_101)
    assert _init(config, open_time=1_100).ledger.open_time == 1_100


def test_initialize_pool_rejects_max_rate_below_base_rate() -> None:
    with pytest.raises(ValueError, match="max_trade_fee_rate"):
        _init(max_trade_fee_rate=1_000)


def test_initialize_pool_requires_more_than_locked_shares() -> None:
    with pytest.raises(ArithmeticUnderflow):
        _init(init_amount0=10, init_amount1=10)


# ---------------------------------------------------------------------------
# deposit
# ---------------------------------------------------------------------------

def test_deposit_example_requires_ceiling_amounts() -> None:
    ledger = _ledger()
    res = deposit(ledger, None, "bob", 1_000, 1_000, 2_000, 5_000, 3, _Quotes())
    assert (res.asset0_amount, res.asset1_amount) == (1_000, 2_000)
    assert res.ledger.share_supply == 1_001_000
    assert (res.ledger.reserve0, res.ledger.reserve1) == (1_001_000, 2_002_000)
    assert res.ledger.recent_epoch == 3
    assert res.participant.shares_owned == 1_000
    assert res.participant.first_deposit_at == 5_000
    assert res.event.change_kind is LpChangeKind.DEPOSIT
    assert res.event.share_supply_before == 1_000_000
    assert [t.asset for t in res.transfers] == [ASSET0, ASSET1]


def test_deposit_above_maximum_is_rejected() -> None:
    with pytest.raises(SlippageExceeded):
        deposit(_ledger(), None, "bob", 1_000, 999, 2_000, 5_000, 3, _Quotes())


def test_deposit_rounds_up() -> None:
    ledger = _ledger(reserve0=1_000_001, reserve1=2_000_003)
    res = deposit(ledger, None, "bob", 1, 10, 10, 5_000, 0, _Quotes())
    assert (res.asset0_amount, res.asset1_amount) == (2, 3)


def test_deposit_adds_transfer_overhead() -> None:
    fee = TransferFeeConfig(fee_bps=100, max_fee=1_000_000)
    res = deposit(_ledger(), None, "bob", 1_000, 1_011, 2_000, 5_000, 0, _Quotes({ASSET0: fee}))
    assert res.transfers[0].amount == 1_011
    assert res.event.transfer_fee0 == 11
    with pytest.raises(SlippageExceeded):
        deposit(_ledger(), None, "bob", 1_000, 1_010, 2_000, 5_000, 0, _Quotes({ASSET0: fee}))


def test_deposit_rejects_zero_and_disabled() -> None:
    with pytest.raises(ZeroTradeAmount):
        deposit(_ledger(), None, "bob", 0, 10, 10, 5_000, 0, _Quotes())
    with pytest.raises(OperationDisabled):
        deposit(_ledger(status=PoolStatus.SWAP), None, "bob", 1, 10, 10, 5_000, 0, _Quotes())


def test_deposit_tracks_partner_linked_shares() -> None:
    ledger = _ledger(partners=(PartnerRecord(partner_id=1),))
    res = deposit(ledger, None, "bob", 1_000, 1_000, 2_000, 5_000, 0, _Quotes(), partner=1)
    assert res.participant.partner == 1
    assert res.ledger.partners[0].linked_shares == 1_000


def test_deposit_rejects_unknown_partner() -> None:
    with pytest.raises(ValueError, match="unknown partner"):
        deposit(_ledger(), None, "bob", 1_000, 1_000, 2_000, 5_000, 0, _Quotes(), partner=3)


def test_existing_record_keeps_first_deposit_time() -> None:
    ledger = _ledger()
    first = deposit(ledger, None, "bob", 1_000, 1_000, 2_000, 5_000, 0, _Quotes())
    second = deposit(first.ledger, first.participant, "bob", 1_000, 1_000, 2_000, 9_000, 0, _Quotes())
    assert second.participant.first_deposit_at == 5_000
    assert second.participant.shares_owned == 2_000
    assert second.participant.deposited0 == 2_000


# ---------------------------------------------------------------------------
# withdraw
# ---------------------------------------------------------------------------

def _holder(shares: int, partner=None) -> ParticipantLiquidity:
    return ParticipantLiquidity(
        participant="bob",
        pool_id=compute_pool_id("default", ASSET0, ASSET1),
        shares_owned=shares,
        partner=partner,
        first_deposit_at=1,
    )


def test_withdraw_rounds_down() -> None:
    ledger = _ledger(reserve0=1_000_001, reserve1=2_000_003)
    res = withdraw(ledger, _holder(10), 1, 0, 0, 4, _Quotes())
    assert (res.asset0_amount, res.asset1_amount) == (1, 2)
    assert res.ledger.share_supply == 999_999
    assert res.participant.shares_owned == 9
    assert res.participant.withdrawn1 == 2
    assert res.event.change_kind is LpChangeKind.WITHDRAW
    assert all(t.source == vault_account(ledger.pool_id) for t in res.transfers)


def test_withdraw_more_than_owned_underflows() -> None:
    with pytest.raises(ArithmeticUnderflow):
        withdraw(_ledger(), _holder(10), 11, 0, 0, 0, _Quotes())


def test_withdraw_minimum_applies_to_received_amount() -> None:
    fee = TransferFeeConfig(fee_bps=100, max_fee=1_000_000)
    res = withdraw(_ledger(), _holder(1_000), 1_000, 990, 2_000, 0, _Quotes({ASSET0: fee}))
    assert res.event.transfer_fee0 == 10
    with pytest.raises(SlippageExceeded):
        withdraw(_ledger(), _holder(1_000), 1_000, 991, 2_000, 0, _Quotes({ASSET0: fee}))


def test_withdraw_rejects_zero_amounts_and_disabled() -> None:
    with pytest.raises(ZeroTradeAmount):
        withdraw(_ledger(reserve0=10), _holder(10), 1, 0, 0, 0, _Quotes())
    with pytest.raises(OperationDisabled):
        withdraw(_ledger(status=PoolStatus.DEPOSIT), _holder(10), 1, 0, 0, 0, _Quotes())


def test_withdraw_reduces_partner_linked_shares() -> None:
    ledger = _ledger(partners=(PartnerRecord(partner_id=1, linked_shares=1_000),))
    res = withdraw(ledger, _holder(1_000, partner=1), 400, 0, 0, 0, _Quotes())
    assert res.ledger.partners[0].linked_shares == 600
