"""
Reward schedule and per-participant reward records.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from .amounts import AssetId, ParticipantId, PoolId, U64_MAX, require_width


def compute_schedule_id(pool_id: PoolId, start_at: int, reward_asset: AssetId) -> str:
    """Deterministic schedule id: H("GammaReward" || pool_id || start_at || reward_asset)."""
    data = (
        b"GammaReward"
        + pool_id.encode("utf-8")
        + int(start_at).to_bytes(8, "little")
        + reward_asset.encode("utf-8")
    )
    return "0x" + hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class RewardSchedule:
    """`total_amount` of `reward_asset` released linearly over `[start_at, end_at)`."""

    schedule_id: str
    pool_id: PoolId
    reward_asset: AssetId
    start_at: int
    end_at: int
    total_amount: int

    def __post_init__(self) -> None:
        require_width(
            (
                ("start_at", self.start_at),
                ("end_at", self.end_at),
                ("total_amount", self.total_amount),
            ),
            U64_MAX,
        )
        if self.end_at <= self.start_at:
            raise ValueError(f"end_at must be after start_at: {self.start_at} >= {self.end_at}")

    @classmethod
    def create(
        cls,
        pool_id: PoolId,
        reward_asset: AssetId,
        start_at: int,
        end_at: int,
        total_amount: int,
    ) -> "RewardSchedule":
        return cls(
            schedule_id=compute_schedule_id(pool_id, start_at, reward_asset),
            pool_id=pool_id,
            reward_asset=reward_asset,
            start_at=start_at,
            end_at=end_at,
            total_amount=total_amount,
        )

    @property
    def duration(self) -> int:
        return self.end_at - self.start_at


@dataclass(frozen=True)
class ParticipantReward:
    """Accrued claimable reward. `last_calculated_at == 0` means never calculated."""

    schedule_id: str
    pool_id: PoolId
    participant: ParticipantId
    last_calculated_at: int = 0
    accrued: int = 0

    def __post_init__(self) -> None:
        require_width(
            (
                ("last_calculated_at", self.last_calculated_at),
                ("accrued", self.accrued),
            ),
            U64_MAX,
        )
