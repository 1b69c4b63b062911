"""
Liquidity management operations: initialize pool, deposit, withdraw.

Share math is directional so rounding always favours the pool:
- deposit:  required asset amounts round UP (ceiling)
- withdraw: returned asset amounts round DOWN (floor)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..kernels.python.cp_swap_v1 import (
    FEE_RATE_DENOMINATOR,
    RoundDirection,
    integer_sqrt_product,
    lp_tokens_to_trading_tokens,
)
from ..state.amounts import ParticipantId
from ..state.assets import AssetInfo, is_supported_asset
from ..state.config import NATIVE_DECIMALS, AmmConfig
from ..state.participants import ParticipantLiquidity
from ..state.pools import LOCK_LP_AMOUNT, PartnerId, PartnerRecord, PoolLedger, PoolStatus, compute_pool_id
from .errors import (
    InvalidActivationTime,
    InvalidAssetForPool,
    OperationDisabled,
    SlippageExceeded,
    UnsupportedAssetKind,
    ZeroTradeAmount,
)
from .events import LpChangeEvent, LpChangeKind
from .math import add_u128, checked_add, checked_sub, require_u64, to_u64
from .oracle import ObservationState, init_observation_state
from .transfers import PlannedTransfer, TransferQuotes, vault_account

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitializeResult:
    ledger: PoolLedger
    participant: ParticipantLiquidity
    observation_state: ObservationState
    transfers: Tuple[PlannedTransfer, ...]
    shares_minted: int


@dataclass(frozen=True)
class LiquidityResult:
    ledger: PoolLedger
    participant: ParticipantLiquidity
    event: LpChangeEvent
    transfers: Tuple[PlannedTransfer, ...]
    asset0_amount: int
    asset1_amount: int


def initialize_pool(
    config: AmmConfig,
    creator: ParticipantId,
    asset0: AssetInfo,
    asset1: AssetInfo,
    init_amount0: int,
    init_amount1: int,
    open_time: int,
    max_trade_fee_rate: int,
    volatility_factor: int,
    now: int,
    quotes: TransferQuotes,
) -> InitializeResult:
    """
    Bootstrap a new pool from the creator's initial deposit.

    Initial share supply:
        supply = floor(sqrt(received0 * received1))
    of which LOCK_LP_AMOUNT is withheld forever so the pool can never be
    drained to zero reserves.

    Args:
        config: AMM config the pool belongs to
        creator: participant funding the pool
        asset0: first asset (must sort strictly before asset1)
        asset1: second asset
        init_amount0 / init_amount1: gross amounts sent by the creator
        open_time: requested activation time (clamped to at least now + 1)
        max_trade_fee_rate: cap of the dynamic fee rate (per-million)
        volatility_factor: scale applied to observed volatility (bps)
        now: current timestamp
        quotes: transfer-fee quotes of the transfer collaborator

    Returns:
        InitializeResult with the new ledger, the creator's record, an empty
        observation history and the transfers to execute.

    Raises:
        InvalidAssetForPool: non-canonical asset order
        UnsupportedAssetKind: an asset kind/extension is not allowed
        OperationDisabled: pool creation is disabled in the config
        InvalidActivationTime: open_time beyond the configured window
        ZeroTradeAmount: an initial reserve would be zero
        ArithmeticUnderflow: initial supply does not cover the locked shares
    """
    for name, v in (
        ("init_amount0", init_amount0),
        ("init_amount1", init_amount1),
        ("open_time", open_time),
        ("max_trade_fee_rate", max_trade_fee_rate),
        ("volatility_factor", volatility_factor),
        ("now", now),
    ):
        require_u64(name, v)

    if asset0.asset_id >= asset1.asset_id:
        raise InvalidAssetForPool(f"Assets must be in canonical order: {asset0.asset_id} < {asset1.asset_id}")
    if not (is_supported_asset(asset0) and is_supported_asset(asset1)):
        raise UnsupportedAssetKind("pool assets must be standard assets or use supported extensions only")
    if config.disable_create_pool:
        raise OperationDisabled("pool creation is disabled for this config")

    if open_time <= now:
        open_time = now + 1
    if open_time > now + config.max_open_time:
        raise InvalidActivationTime(f"open_time {open_time} exceeds now + max_open_time ({now + config.max_open_time})")
    if not (config.trade_fee_rate <= max_trade_fee_rate < FEE_RATE_DENOMINATOR):
        raise ValueError(
            f"max_trade_fee_rate must be in [{config.trade_fee_rate}, {FEE_RATE_DENOMINATOR}): {max_trade_fee_rate}"
        )

    received0 = init_amount0 - quotes.transfer_fee(asset0.asset_id, init_amount0)
    received1 = init_amount1 - quotes.transfer_fee(asset1.asset_id, init_amount1)
    if received0 <= 0 or received1 <= 0:
        raise ZeroTradeAmount(f"initial reserves must be positive: ({received0}, {received1})")

    liquidity = to_u64("liquidity", integer_sqrt_product(received0, received1))
    owned = checked_sub(liquidity, LOCK_LP_AMOUNT)

    pool_id = compute_pool_id(config.config_id, asset0.asset_id, asset1.asset_id)
    vault = vault_account(pool_id)

    ledger = PoolLedger(
        pool_id=pool_id,
        config_id=config.config_id,
        creator=creator,
        asset0=asset0.asset_id,
        asset1=asset1.asset_id,
        asset0_decimals=asset0.decimals,
        asset1_decimals=asset1.decimals,
        reserve0=received0,
        reserve1=received1,
        share_supply=liquidity,
        open_time=open_time,
        max_trade_fee_rate=max_trade_fee_rate,
        volatility_factor=volatility_factor,
        partners=tuple(PartnerRecord(partner_id=pid) for pid in config.partner_ids),
        status=PoolStatus.ALL,
        created_at=now,
    )
    participant = replace(
        ParticipantLiquidity.open(creator, pool_id, now),
        deposited0=init_amount0,
        deposited1=init_amount1,
        shares_owned=owned,
    )

    transfers = [
        PlannedTransfer(creator, creator, vault, asset0.asset_id, init_amount0, asset0.decimals),
        PlannedTransfer(creator, creator, vault, asset1.asset_id, init_amount1, asset1.decimals),
    ]
    if config.create_pool_fee:
        transfers.append(
            PlannedTransfer(
                creator,
                creator,
                config.create_pool_fee_receiver,
                config.native_asset,
                config.create_pool_fee,
                NATIVE_DECIMALS,
            )
        )

    logger.info(
        "pool %s created: reserves=(%d, %d) supply=%d open_time=%d",
        pool_id,
        received0,
        received1,
        liquidity,
        open_time,
    )
    return InitializeResult(
        ledger=ledger,
        participant=participant,
        observation_state=init_observation_state(pool_id),
        transfers=tuple(transfers),
        shares_minted=owned,
    )


def _track_partner(ledger: PoolLedger, partner_id: Optional[PartnerId], delta: int) -> Tuple[PartnerRecord, ...]:
    index = ledger.find_partner(partner_id)
    if index is None:
        return ledger.partners
    partners = list(ledger.partners)
    partner = partners[index]
    if delta >= 0:
        linked = checked_add(partner.linked_shares, delta)
    else:
        linked = checked_sub(partner.linked_shares, -delta)
    partners[index] = replace(partner, linked_shares=linked)
    return tuple(partners)


def deposit(
    ledger: PoolLedger,
    participant: Optional[ParticipantLiquidity],
    owner: ParticipantId,
    lp_token_amount: int,
    maximum_token_0_amount: int,
    maximum_token_1_amount: int,
    now: int,
    epoch: int,
    quotes: TransferQuotes,
    partner: Optional[PartnerId] = None,
) -> LiquidityResult:
    """
    Deposit both assets in exchange for exactly `lp_token_amount` shares.

    Required amounts (ceiling):
        amount_i = ceil(lp_token_amount * reserve_i / share_supply)

    The owner sends `amount_i + transfer_overhead(amount_i)` so the pool
    receives `amount_i` net. Fails with SlippageExceeded, without producing any
    state, if either gross amount exceeds its maximum.

    `partner` is only used when the participant record is created by this
    deposit; affiliation is fixed for the lifetime of the record.
    """
    require_u64("lp_token_amount", lp_token_amount)
    require_u64("maximum_token_0_amount", maximum_token_0_amount)
    require_u64("maximum_token_1_amount", maximum_token_1_amount)
    if lp_token_amount == 0:
        raise ZeroTradeAmount("lp_token_amount must be positive")
    if not ledger.is_enabled(PoolStatus.DEPOSIT):
        raise OperationDisabled(f"deposits are disabled for pool {ledger.pool_id}")

    if participant is None:
        if partner is not None and ledger.find_partner(partner) is None:
            raise ValueError(f"unknown partner {partner} for pool {ledger.pool_id}")
        participant = ParticipantLiquidity.open(owner, ledger.pool_id, now, partner=partner)
    elif participant.pool_id != ledger.pool_id or participant.participant != owner:
        raise InvalidAssetForPool("participant record does not belong to this pool/owner")

    results = lp_tokens_to_trading_tokens(
        lp_token_amount=lp_token_amount,
        lp_token_supply=ledger.share_supply,
        swap_token_0_amount=ledger.reserve0,
        swap_token_1_amount=ledger.reserve1,
        round_direction=RoundDirection.CEILING,
    )
    if results.token_0_amount == 0 or results.token_1_amount == 0:
        raise ZeroTradeAmount("deposit amounts round to zero")

    token_0_amount = to_u64("token_0_amount", results.token_0_amount)
    token_1_amount = to_u64("token_1_amount", results.token_1_amount)
    transfer_fee0 = quotes.transfer_overhead(ledger.asset0, token_0_amount)
    transfer_fee1 = quotes.transfer_overhead(ledger.asset1, token_1_amount)
    transfer_amount0 = checked_add(token_0_amount, transfer_fee0)
    transfer_amount1 = checked_add(token_1_amount, transfer_fee1)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "deposit pool=%s shares=%d token_0_amount=%d token_1_amount=%d transfer_fee0=%d transfer_fee1=%d",
            ledger.pool_id,
            lp_token_amount,
            token_0_amount,
            token_1_amount,
            transfer_fee0,
            transfer_fee1,
        )

    if transfer_amount0 > maximum_token_0_amount or transfer_amount1 > maximum_token_1_amount:
        raise SlippageExceeded(
            f"deposit requires ({transfer_amount0}, {transfer_amount1}) "
            f"> maximum ({maximum_token_0_amount}, {maximum_token_1_amount})"
        )

    event = LpChangeEvent(
        pool_id=ledger.pool_id,
        share_supply_before=ledger.share_supply,
        reserve0_before=ledger.reserve0,
        reserve1_before=ledger.reserve1,
        asset0_amount=token_0_amount,
        asset1_amount=token_1_amount,
        transfer_fee0=transfer_fee0,
        transfer_fee1=transfer_fee1,
        change_kind=LpChangeKind.DEPOSIT,
    )

    next_ledger = replace(
        ledger,
        reserve0=checked_add(ledger.reserve0, token_0_amount),
        reserve1=checked_add(ledger.reserve1, token_1_amount),
        share_supply=checked_add(ledger.share_supply, lp_token_amount),
        partners=_track_partner(ledger, participant.partner, lp_token_amount),
        recent_epoch=epoch,
    )
    next_participant = replace(
        participant,
        deposited0=add_u128(participant.deposited0, token_0_amount),
        deposited1=add_u128(participant.deposited1, token_1_amount),
        shares_owned=add_u128(participant.shares_owned, lp_token_amount),
    )

    vault = vault_account(ledger.pool_id)
    transfers = (
        PlannedTransfer(owner, owner, vault, ledger.asset0, transfer_amount0, ledger.asset0_decimals),
        PlannedTransfer(owner, owner, vault, ledger.asset1, transfer_amount1, ledger.asset1_decimals),
    )
    return LiquidityResult(
        ledger=next_ledger,
        participant=next_participant,
        event=event,
        transfers=transfers,
        asset0_amount=token_0_amount,
        asset1_amount=token_1_amount,
    )


def withdraw(
    ledger: PoolLedger,
    participant: ParticipantLiquidity,
    lp_token_amount: int,
    minimum_token_0_amount: int,
    minimum_token_1_amount: int,
    epoch: int,
    quotes: TransferQuotes,
) -> LiquidityResult:
    """
    Burn `lp_token_amount` shares for the proportional reserves (floor).

    The owner receives `amount_i - transfer_fee(amount_i)`; that net amount
    must meet `minimum_token_i_amount`. Withdrawing more shares than owned
    raises ArithmeticUnderflow.
    """
    require_u64("lp_token_amount", lp_token_amount)
    require_u64("minimum_token_0_amount", minimum_token_0_amount)
    require_u64("minimum_token_1_amount", minimum_token_1_amount)
    if lp_token_amount == 0:
        raise ZeroTradeAmount("lp_token_amount must be positive")
    if not ledger.is_enabled(PoolStatus.WITHDRAW):
        raise OperationDisabled(f"withdrawals are disabled for pool {ledger.pool_id}")
    if participant.pool_id != ledger.pool_id:
        raise InvalidAssetForPool("participant record does not belong to this pool")

    shares_owned = checked_sub(participant.shares_owned, lp_token_amount)
    share_supply = checked_sub(ledger.share_supply, lp_token_amount)

    results = lp_tokens_to_trading_tokens(
        lp_token_amount=lp_token_amount,
        lp_token_supply=ledger.share_supply,
        swap_token_0_amount=ledger.reserve0,
        swap_token_1_amount=ledger.reserve1,
        round_direction=RoundDirection.FLOOR,
    )
    token_0_amount = results.token_0_amount
    token_1_amount = results.token_1_amount
    if token_0_amount == 0 or token_1_amount == 0:
        raise ZeroTradeAmount("withdraw amounts round to zero")

    transfer_fee0 = quotes.transfer_fee(ledger.asset0, token_0_amount)
    transfer_fee1 = quotes.transfer_fee(ledger.asset1, token_1_amount)
    received0 = checked_sub(token_0_amount, transfer_fee0)
    received1 = checked_sub(token_1_amount, transfer_fee1)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "withdraw pool=%s shares=%d token_0_amount=%d token_1_amount=%d transfer_fee0=%d transfer_fee1=%d",
            ledger.pool_id,
            lp_token_amount,
            token_0_amount,
            token_1_amount,
            transfer_fee0,
            transfer_fee1,
        )

    if received0 < minimum_token_0_amount or received1 < minimum_token_1_amount:
        raise SlippageExceeded(
            f"withdraw returns ({received0}, {received1}) "
            f"< minimum ({minimum_token_0_amount}, {minimum_token_1_amount})"
        )

    event = LpChangeEvent(
        pool_id=ledger.pool_id,
        share_supply_before=ledger.share_supply,
        reserve0_before=ledger.reserve0,
        reserve1_before=ledger.reserve1,
        asset0_amount=token_0_amount,
        asset1_amount=token_1_amount,
        transfer_fee0=transfer_fee0,
        transfer_fee1=transfer_fee1,
        change_kind=LpChangeKind.WITHDRAW,
    )

    next_ledger = replace(
        ledger,
        reserve0=checked_sub(ledger.reserve0, token_0_amount),
        reserve1=checked_sub(ledger.reserve1, token_1_amount),
        share_supply=share_supply,
        partners=_track_partner(ledger, participant.partner, -lp_token_amount),
        recent_epoch=epoch,
    )
    next_participant = replace(
        participant,
        withdrawn0=add_u128(participant.withdrawn0, token_0_amount),
        withdrawn1=add_u128(participant.withdrawn1, token_1_amount),
        shares_owned=shares_owned,
    )

    vault = vault_account(ledger.pool_id)
    owner = participant.participant
    transfers = (
        PlannedTransfer(vault, vault, owner, ledger.asset0, token_0_amount, ledger.asset0_decimals),
        PlannedTransfer(vault, vault, owner, ledger.asset1, token_1_amount, ledger.asset1_decimals),
    )
    return LiquidityResult(
        ledger=next_ledger,
        participant=next_participant,
        event=event,
        transfers=transfers,
        asset0_amount=token_0_amount,
        asset1_amount=token_1_amount,
    )
