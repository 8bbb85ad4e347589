"""
Gameplay events and the bus that delivers them.
NO UI DEPENDENCIES.

Subscribers are plain callables keyed by event class. Delivery is
synchronous and in subscription order, so one publish finishes before
the next external command is processed.
"""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, FrozenSet, List, Type

from .grid import Position


class GamePhase(Enum):
    """Whether production is currently counting."""
    STOPPED = auto()
    RUNNING = auto()


@dataclass
class GameEvent:
    """An event that occurred during gameplay (for UI to react to)."""
    pass


@dataclass
class GridChangedEvent(GameEvent):
    """A placement, merge, swap, spawn or removal changed the board."""
    pass


@dataclass
class ActivePathChangedEvent(GameEvent):
    """The resolver published a new active path."""
    active_path: FrozenSet[Position]


@dataclass
class ThresholdReachedEvent(GameEvent):
    """A character gear filled up and should spawn a character."""
    gear_id: int
    subtype: int


@dataclass
class GearRotatedEvent(GameEvent):
    """A gear received one rotation tick."""
    gear_id: int
    clockwise: bool


@dataclass
class PhaseChangedEvent(GameEvent):
    """Game phase changed."""
    old_phase: GamePhase
    new_phase: GamePhase


Subscriber = Callable[[GameEvent], None]


class EventBus:
    """Observer list per event class."""

    def __init__(self):
        self._subscribers: Dict[Type[GameEvent], List[Subscriber]] = {}

    def subscribe(self, event_type: Type[GameEvent], callback: Subscriber) -> None:
        self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: Type[GameEvent], callback: Subscriber) -> None:
        """Remove a callback. Unknown callbacks are ignored."""
        callbacks = self._subscribers.get(event_type)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)

    def subscribe_all(self, callback: Subscriber) -> None:
        """Receive every event regardless of class."""
        self.subscribe(GameEvent, callback)

    def publish(self, event: GameEvent) -> None:
        """
        Deliver an event. Catch-all subscribers hear it first, so a log of
        everything stays in causal order when handlers publish follow-ups.
        """
        # Copy so callbacks may (un)subscribe while being notified
        if type(event) is not GameEvent:
            for callback in list(self._subscribers.get(GameEvent, ())):
                callback(event)
        for callback in list(self._subscribers.get(type(event), ())):
            callback(event)

    def subscriber_count(self, event_type: Type[GameEvent]) -> int:
        return len(self._subscribers.get(event_type, ()))
