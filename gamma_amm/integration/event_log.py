"""
Append-only event log.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple, Type, TypeVar, Union

from ..core.events import LpChangeEvent, SwapEvent

Event = Union[LpChangeEvent, SwapEvent]

E = TypeVar("E", LpChangeEvent, SwapEvent)


class EventLog:
    def __init__(self) -> None:
        self._events: List[Event] = []

    def append(self, event: Event) -> None:
        if not isinstance(event, (LpChangeEvent, SwapEvent)):
            raise TypeError(f"unsupported event type: {type(event).__name__}")
        self._events.append(event)

    def of_type(self, cls: Type[E]) -> Tuple[E, ...]:
        return tuple(e for e in self._events if isinstance(e, cls))

    def __iter__(self) -> Iterator[Event]:
        return iter(tuple(self._events))

    def __len__(self) -> int:
        return len(self._events)
