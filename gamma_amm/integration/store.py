"""
In-memory record store for the pool engine.

`get_*` raise KeyError for unknown records; `find_*` return None. Records are
immutable, so the store only ever replaces whole values.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from ..state.amounts import ParticipantId, PoolId
from ..state.config import AmmConfig
from ..state.participants import ParticipantLiquidity
from ..state.pools import PoolLedger
from ..state.rewards import ParticipantReward, RewardSchedule


class PoolStore:
    def __init__(self) -> None:
        self._configs: Dict[str, AmmConfig] = {}
        self._pools: Dict[PoolId, PoolLedger] = {}
        self._liquidity: Dict[Tuple[PoolId, ParticipantId], ParticipantLiquidity] = {}
        self._schedules: Dict[str, RewardSchedule] = {}
        self._rewards: Dict[Tuple[str, ParticipantId], ParticipantReward] = {}

    # configs
    def put_config(self, config: AmmConfig) -> None:
        self._configs[config.config_id] = config

    def get_config(self, config_id: str) -> AmmConfig:
        return self._configs[config_id]

    # pools
    def has_pool(self, pool_id: PoolId) -> bool:
        return pool_id in self._pools

    def get_pool(self, pool_id: PoolId) -> PoolLedger:
        return self._pools[pool_id]

    def put_pool(self, ledger: PoolLedger) -> None:
        self._pools[ledger.pool_id] = ledger

    def pools(self) -> Iterator[PoolLedger]:
        for pool_id in sorted(self._pools):
            yield self._pools[pool_id]

    # participant liquidity
    def find_liquidity(self, pool_id: PoolId, participant: ParticipantId) -> Optional[ParticipantLiquidity]:
        return self._liquidity.get((pool_id, participant))

    def get_liquidity(self, pool_id: PoolId, participant: ParticipantId) -> ParticipantLiquidity:
        return self._liquidity[(pool_id, participant)]

    def put_liquidity(self, record: ParticipantLiquidity) -> None:
        self._liquidity[(record.pool_id, record.participant)] = record

    # rewards
    def get_schedule(self, schedule_id: str) -> RewardSchedule:
        return self._schedules[schedule_id]

    def put_schedule(self, schedule: RewardSchedule) -> None:
        self._schedules[schedule.schedule_id] = schedule

    def find_reward(self, schedule_id: str, participant: ParticipantId) -> Optional[ParticipantReward]:
        return self._rewards.get((schedule_id, participant))

    def put_reward(self, record: ParticipantReward) -> None:
        self._rewards[(record.schedule_id, record.participant)] = record
