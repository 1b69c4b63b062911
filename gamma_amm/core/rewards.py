"""
Time-weighted reward accrual for liquidity providers.

A schedule releases `total_amount` linearly over `[start_at, end_at]`. A
participant holding `shares_owned` of `share_supply` accrues, for every second
of that window since the last calculation:

    increment = total_amount * shares_owned * elapsed // (duration * share_supply)

The whole product is floored once, so splitting a window into several
calculations never earns more than calculating it at once.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..state.amounts import ParticipantId
from ..state.config import AmmConfig
from ..state.participants import ParticipantLiquidity
from ..state.pools import PoolLedger
from ..state.rewards import ParticipantReward, RewardSchedule
from .errors import InvalidAssetForPool, Unauthorized
from .math import checked_add, require_u64

logger = logging.getLogger(__name__)


def reward_increment(
    schedule: RewardSchedule,
    shares_owned: int,
    share_supply: int,
    last_calculated_at: int,
    now: int,
) -> int:
    """Reward earned in `[last_calculated_at, now]` clipped to the schedule window."""
    if share_supply == 0:
        return 0
    window_start = min(max(last_calculated_at, schedule.start_at), schedule.end_at)
    window_end = min(max(now, schedule.start_at), schedule.end_at)
    elapsed = window_end - window_start
    if elapsed <= 0:
        return 0
    return (schedule.total_amount * shares_owned * elapsed) // (schedule.duration * share_supply)


def calculate_rewards(
    caller: ParticipantId,
    config: AmmConfig,
    ledger: PoolLedger,
    schedule: RewardSchedule,
    liquidity: ParticipantLiquidity,
    record: Optional[ParticipantReward],
    now: int,
    *,
    enforce_operator: bool = True,
) -> ParticipantReward:
    """
    Bring a participant's accrued reward up to `now`.

    Args:
        caller: invoker; must be the config's reward operator
        config: AMM config of the pool
        ledger: pool the schedule rewards
        schedule: reward schedule
        liquidity: the participant's liquidity record in the pool
        record: existing reward record, or None to create one
        now: current timestamp
        enforce_operator: disable the operator check (test harnesses only)

    Returns:
        The updated record; the input record unchanged if it is already
        calculated at or beyond `now`.

    Raises:
        Unauthorized: caller is not the reward operator
        InvalidAssetForPool: schedule or liquidity record belong to another pool
        ArithmeticOverflow: accrued balance exceeds u64
    """
    require_u64("now", now)
    if enforce_operator and (config.reward_operator is None or caller != config.reward_operator):
        raise Unauthorized(f"{caller} is not the reward operator")
    if schedule.pool_id != ledger.pool_id or liquidity.pool_id != ledger.pool_id:
        raise InvalidAssetForPool(f"reward schedule/liquidity record do not belong to pool {ledger.pool_id}")

    if record is None:
        record = ParticipantReward(
            schedule_id=schedule.schedule_id,
            pool_id=ledger.pool_id,
            participant=liquidity.participant,
        )
    if record.last_calculated_at >= now:
        return record

    last = record.last_calculated_at
    if last == 0:
        last = liquidity.first_deposit_at

    increment = reward_increment(schedule, liquidity.shares_owned, ledger.share_supply, last, now)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "rewards schedule=%s participant=%s last=%d now=%d shares=%d supply=%d increment=%d",
            schedule.schedule_id,
            liquidity.participant,
            last,
            now,
            liquidity.shares_owned,
            ledger.share_supply,
            increment,
        )

    return replace(
        record,
        schedule_id=schedule.schedule_id,
        pool_id=ledger.pool_id,
        participant=liquidity.participant,
        last_calculated_at=now,
        accrued=checked_add(record.accrued, increment),
    )
