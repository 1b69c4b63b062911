"""
Pool engine: imperative shell around the functional core.

Every operation follows the same shape:
- load the records it needs from the `PoolStore`,
- call the pure core operation (which validates and computes next records),
- execute the planned transfers, in order, inside the transfer collaborator's
  atomic block, then push the oracle update,
- commit the next records and append the event.

A failure at any step raises to the caller; transfers already executed are
undone by the collaborator and nothing is written to the store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..core import liquidity as liquidity_ops
from ..core import rewards as reward_ops
from ..core import swap as swap_ops
from ..core.fees import ReferralInfo
from ..core.transfers import PlannedTransfer
from ..state.amounts import AssetId, ParticipantId, PoolId
from ..state.config import AmmConfig, BPS_DENOM
from ..state.pools import PartnerId, PoolLedger, compute_pool_id
from ..state.rewards import ParticipantReward, RewardSchedule
from .event_log import EventLog
from .oracle import InMemoryOracle
from .store import PoolStore
from .transfers import TransferCollaborator

logger = logging.getLogger(__name__)


# Cap of the dynamic fee rate when the pool creator does not choose one (10%).
DEFAULT_MAX_TRADE_FEE_RATE = 100_000


@dataclass(frozen=True)
class BlockContext:
    """Host-provided clock for one operation."""

    timestamp: int
    epoch: int = 0


class PoolEngine:
    def __init__(
        self,
        store: PoolStore,
        transfers: TransferCollaborator,
        oracle: Optional[InMemoryOracle] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self.store = store
        self.transfers = transfers
        self.oracle = oracle if oracle is not None else InMemoryOracle()
        self.events = events if events is not None else EventLog()

    def register_config(self, config: AmmConfig) -> None:
        self.store.put_config(config)

    def _execute(self, planned: Iterable[PlannedTransfer]) -> None:
        for t in planned:
            self.transfers.transfer(t.payer, t.source, t.destination, t.asset, t.amount, t.decimals)

    # ------------------------------------------------------------------
    # Liquidity

    def create_pool(
        self,
        block: BlockContext,
        config_id: str,
        creator: ParticipantId,
        asset0: AssetId,
        asset1: AssetId,
        init_amount0: int,
        init_amount1: int,
        *,
        open_time: int = 0,
        max_trade_fee_rate: Optional[int] = None,
        volatility_factor: int = BPS_DENOM,
    ) -> PoolLedger:
        config = self.store.get_config(config_id)
        if asset0 < asset1 and self.store.has_pool(compute_pool_id(config_id, asset0, asset1)):
            raise ValueError(f"pool already exists for ({asset0}, {asset1}) under config {config_id}")
        if max_trade_fee_rate is None:
            max_trade_fee_rate = max(config.trade_fee_rate, DEFAULT_MAX_TRADE_FEE_RATE)

        res = liquidity_ops.initialize_pool(
            config,
            creator,
            self.transfers.asset_info(asset0),
            self.transfers.asset_info(asset1),
            init_amount0,
            init_amount1,
            open_time,
            max_trade_fee_rate,
            volatility_factor,
            block.timestamp,
            self.transfers,
        )
        with self.transfers.atomic():
            self._execute(res.transfers)
            self.oracle.register(res.observation_state)

        self.store.put_pool(res.ledger)
        self.store.put_liquidity(res.participant)
        return res.ledger

    def deposit(
        self,
        block: BlockContext,
        pool_id: PoolId,
        owner: ParticipantId,
        lp_token_amount: int,
        maximum_token_0_amount: int,
        maximum_token_1_amount: int,
        *,
        partner: Optional[PartnerId] = None,
    ) -> liquidity_ops.LiquidityResult:
        ledger = self.store.get_pool(pool_id)
        res = liquidity_ops.deposit(
            ledger,
            self.store.find_liquidity(pool_id, owner),
            owner,
            lp_token_amount,
            maximum_token_0_amount,
            maximum_token_1_amount,
            block.timestamp,
            block.epoch,
            self.transfers,
            partner=partner,
        )
        with self.transfers.atomic():
            self._execute(res.transfers)

        self._commit_liquidity(res)
        return res

    def withdraw(
        self,
        block: BlockContext,
        pool_id: PoolId,
        owner: ParticipantId,
        lp_token_amount: int,
        minimum_token_0_amount: int,
        minimum_token_1_amount: int,
    ) -> liquidity_ops.LiquidityResult:
        ledger = self.store.get_pool(pool_id)
        res = liquidity_ops.withdraw(
            ledger,
            self.store.get_liquidity(pool_id, owner),
            lp_token_amount,
            minimum_token_0_amount,
            minimum_token_1_amount,
            block.epoch,
            self.transfers,
        )
        with self.transfers.atomic():
            self._execute(res.transfers)

        self._commit_liquidity(res)
        return res

    def _commit_liquidity(self, res: liquidity_ops.LiquidityResult) -> None:
        self.store.put_pool(res.ledger)
        self.store.put_liquidity(res.participant)
        self.events.append(res.event)
        logger.debug("committed %s on pool %s", res.event.change_kind.name, res.ledger.pool_id)

    # ------------------------------------------------------------------
    # Swaps

    def _swap_context(
        self,
        block: BlockContext,
        pool_id: PoolId,
        payer: ParticipantId,
        input_asset: AssetId,
        output_asset: AssetId,
        referral: Optional[ReferralInfo],
        segmenter: Optional[ParticipantId],
    ) -> swap_ops.SwapContext:
        ledger = self.store.get_pool(pool_id)
        config = self.store.get_config(ledger.config_id)
        return swap_ops.SwapContext(
            config=config,
            ledger=ledger,
            input_asset=input_asset,
            output_asset=output_asset,
            payer=payer,
            snapshot=self.oracle.read_snapshot(pool_id),
            now=block.timestamp,
            epoch=block.epoch,
            quotes=self.transfers,
            referral=referral,
            privileged=config.is_segmenter(segmenter),
        )

    def _commit_swap(self, outcome: swap_ops.SwapOutcome) -> swap_ops.SwapOutcome:
        update = outcome.oracle_update
        with self.transfers.atomic():
            self._execute(outcome.transfers)
            self.oracle.update(outcome.ledger.pool_id, update.timestamp, update.price0_x32, update.price1_x32)

        self.store.put_pool(outcome.ledger)
        self.events.append(outcome.event)
        return outcome

    def swap_base_input(
        self,
        block: BlockContext,
        pool_id: PoolId,
        payer: ParticipantId,
        input_asset: AssetId,
        output_asset: AssetId,
        amount_in: int,
        minimum_amount_out: int,
        *,
        referral: Optional[ReferralInfo] = None,
        segmenter: Optional[ParticipantId] = None,
    ) -> swap_ops.SwapOutcome:
        ctx = self._swap_context(block, pool_id, payer, input_asset, output_asset, referral, segmenter)
        return self._commit_swap(swap_ops.swap_base_input(ctx, amount_in, minimum_amount_out))

    def swap_base_output(
        self,
        block: BlockContext,
        pool_id: PoolId,
        payer: ParticipantId,
        input_asset: AssetId,
        output_asset: AssetId,
        max_amount_in: int,
        amount_out_less_fee: int,
        *,
        referral: Optional[ReferralInfo] = None,
        segmenter: Optional[ParticipantId] = None,
    ) -> swap_ops.SwapOutcome:
        ctx = self._swap_context(block, pool_id, payer, input_asset, output_asset, referral, segmenter)
        return self._commit_swap(swap_ops.swap_base_output(ctx, max_amount_in, amount_out_less_fee))

    # ------------------------------------------------------------------
    # Rewards

    def add_reward_schedule(self, schedule: RewardSchedule) -> None:
        self.store.get_pool(schedule.pool_id)
        self.store.put_schedule(schedule)

    def calculate_rewards(
        self,
        block: BlockContext,
        caller: ParticipantId,
        schedule_id: str,
        participant: ParticipantId,
    ) -> ParticipantReward:
        schedule = self.store.get_schedule(schedule_id)
        ledger = self.store.get_pool(schedule.pool_id)
        liquidity = self.store.get_liquidity(ledger.pool_id, participant)
        record = reward_ops.calculate_rewards(
            caller,
            self.store.get_config(ledger.config_id),
            ledger,
            schedule,
            liquidity,
            self.store.find_reward(schedule_id, participant),
            block.timestamp,
        )
        self.store.put_reward(record)
        return record
