"""
Per-participant liquidity records.

One record per (pool, participant). Created on the first deposit (or at pool
creation for the creator), mutated only by deposit/withdraw, never deleted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .amounts import ParticipantId, PoolId, U64_MAX, U128_MAX, require_width
from .pools import PartnerId


@dataclass(frozen=True)
class ParticipantLiquidity:
    participant: ParticipantId
    pool_id: PoolId
    deposited0: int = 0
    deposited1: int = 0
    withdrawn0: int = 0
    withdrawn1: int = 0
    shares_owned: int = 0
    partner: Optional[PartnerId] = None
    first_deposit_at: int = 0

    def __post_init__(self) -> None:
        require_width(
            (
                ("deposited0", self.deposited0),
                ("deposited1", self.deposited1),
                ("withdrawn0", self.withdrawn0),
                ("withdrawn1", self.withdrawn1),
                ("shares_owned", self.shares_owned),
            ),
            U128_MAX,
        )
        require_width((("first_deposit_at", self.first_deposit_at),), U64_MAX)
        if self.partner is not None:
            require_width((("partner", self.partner),), U64_MAX)

    @classmethod
    def open(
        cls,
        participant: ParticipantId,
        pool_id: PoolId,
        now: int,
        partner: Optional[PartnerId] = None,
    ) -> "ParticipantLiquidity":
        """Fresh zero-balance record anchored at `now`."""
        return cls(participant=participant, pool_id=pool_id, partner=partner, first_deposit_at=now)
