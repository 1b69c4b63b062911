"""
Price observation kernel.

This module is intentionally small and pure:
- The functional core records observations and computes freshness deterministically.
- The imperative shell (`gamma_amm.integration.oracle`) owns the state and
  exposes the update/read contract used by swaps.

Only the read/update contract matters to the pool engine; the sampling policy
here (one observation per second, bounded ring) is the simplest one that
satisfies it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple


OBSERVATION_CAPACITY = 100


@dataclass(frozen=True)
class Observation:
    timestamp: int
    price0_x32: int
    price1_x32: int

    def __post_init__(self) -> None:
        if self.timestamp < 0:
            raise ValueError(f"timestamp must be non-negative: {self.timestamp}")
        if self.price0_x32 < 0 or self.price1_x32 < 0:
            raise ValueError("prices must be non-negative")


@dataclass(frozen=True)
class PriceSnapshot:
    """Read-only view of the recorded observations, oldest first."""

    observations: Tuple[Observation, ...] = ()

    @property
    def latest(self) -> Optional[Observation]:
        return self.observations[-1] if self.observations else None

    @property
    def latest_timestamp(self) -> int:
        return self.observations[-1].timestamp if self.observations else 0

    def window(self, start: int, end: int) -> Tuple[Observation, ...]:
        """Observations with `start <= timestamp <= end`."""
        return tuple(o for o in self.observations if start <= o.timestamp <= end)


@dataclass(frozen=True)
class ObservationState:
    """Bounded observation history for one pool."""

    pool_id: str
    observations: Tuple[Observation, ...] = ()
    capacity: int = OBSERVATION_CAPACITY

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError(f"capacity must be positive: {self.capacity}")
        if len(self.observations) > self.capacity:
            raise ValueError("observation history exceeds capacity")


def init_observation_state(pool_id: str, capacity: int = OBSERVATION_CAPACITY) -> ObservationState:
    """Empty observation history for a freshly created pool."""
    return ObservationState(pool_id=pool_id, capacity=capacity)


def record_observation(state: ObservationState, timestamp: int, price0_x32: int, price1_x32: int) -> ObservationState:
    """
    Append one observation.

    A second update within the same timestamp is ignored; timestamps going
    backwards are rejected.
    """
    latest = state.observations[-1] if state.observations else None
    if latest is not None:
        if timestamp < latest.timestamp:
            raise ValueError(f"observation timestamp went backwards: {timestamp} < {latest.timestamp}")
        if timestamp == latest.timestamp:
            return state
    history = state.observations + (Observation(timestamp, price0_x32, price1_x32),)
    if len(history) > state.capacity:
        history = history[-state.capacity :]
    return replace(state, observations=history)


def snapshot_of(state: ObservationState) -> PriceSnapshot:
    return PriceSnapshot(observations=state.observations)


def is_fresh(snapshot: PriceSnapshot, current_timestamp: int, max_staleness_seconds: int) -> bool:
    """Return True if the latest observation is within the max staleness window."""
    if current_timestamp < 0:
        raise ValueError(f"current_timestamp must be non-negative: {current_timestamp}")
    latest = snapshot.latest
    if latest is None or latest.timestamp > current_timestamp:
        return False
    return (current_timestamp - latest.timestamp) <= max_staleness_seconds
