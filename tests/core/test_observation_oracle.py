from __future__ import annotations

import pytest

from gamma_amm.core.oracle import (
    Observation,
    PriceSnapshot,
    init_observation_state,
    is_fresh,
    record_observation,
    snapshot_of,
)


def test_record_ignores_repeat_within_same_second() -> None:
    state = record_observation(init_observation_state("0xpool"), 10, 5, 6)
    again = record_observation(state, 10, 7, 8)
    assert again is state
    assert snapshot_of(again).latest == Observation(10, 5, 6)


def test_record_rejects_time_going_backwards() -> None:
    state = record_observation(init_observation_state("0xpool"), 10, 5, 6)
    with pytest.raises(ValueError, match="backwards"):
        record_observation(state, 9, 5, 6)


def test_history_is_bounded() -> None:
    state = init_observation_state("0xpool", capacity=3)
    for ts in range(1, 6):
        state = record_observation(state, ts, ts, ts)
    assert [o.timestamp for o in state.observations] == [3, 4, 5]


def test_is_fresh() -> None:
    snapshot = PriceSnapshot(observations=(Observation(100, 1, 1),))
    assert is_fresh(snapshot, 160, 60)
    assert not is_fresh(snapshot, 161, 60)
    assert not is_fresh(PriceSnapshot(), 100, 60)
    assert snapshot.window(0, 99) == ()
