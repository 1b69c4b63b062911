"""
Price oracle collaborator.

Holds one bounded observation history per pool. Swaps read a snapshot before
pricing and push the pre-trade prices after their transfers succeeded.
"""

from __future__ import annotations

from typing import Dict, Protocol

from ..core.oracle import ObservationState, PriceSnapshot, record_observation, snapshot_of


class OracleCollaborator(Protocol):
    def read_snapshot(self, pool_id: str) -> PriceSnapshot:
        ...

    def update(self, pool_id: str, timestamp: int, price0_x32: int, price1_x32: int) -> None:
        ...


class InMemoryOracle:
    def __init__(self) -> None:
        self._states: Dict[str, ObservationState] = {}

    def register(self, state: ObservationState) -> None:
        if state.pool_id in self._states:
            raise ValueError(f"observation state already registered for pool {state.pool_id}")
        self._states[state.pool_id] = state

    def state(self, pool_id: str) -> ObservationState:
        return self._states[pool_id]

    def read_snapshot(self, pool_id: str) -> PriceSnapshot:
        return snapshot_of(self._states[pool_id])

    def update(self, pool_id: str, timestamp: int, price0_x32: int, price1_x32: int) -> None:
        self._states[pool_id] = record_observation(self._states[pool_id], timestamp, price0_x32, price1_x32)
