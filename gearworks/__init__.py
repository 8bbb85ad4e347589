"""
Gearworks - a grid of meshed gears that routes motor power to characters.
"""
from .config import Settings, get_settings
from .events import (
    ActivePathChangedEvent, EventBus, GameEvent, GamePhase, GearRotatedEvent,
    GridChangedEvent, PhaseChangedEvent, ThresholdReachedEvent,
)
from .game import Game
from .gears import Gear, GearRegistry, GearType
from .grid import Direction, Grid
from .links import LinkResolver
from .placement import PlacementHandler, PlacementOutcome
from .production import ProductionAccumulator
from .rotation import GearRotator

__all__ = [
    "ActivePathChangedEvent",
    "Direction",
    "EventBus",
    "Game",
    "GameEvent",
    "GamePhase",
    "Gear",
    "GearRegistry",
    "GearRotatedEvent",
    "GearRotator",
    "GearType",
    "Grid",
    "GridChangedEvent",
    "LinkResolver",
    "PhaseChangedEvent",
    "PlacementHandler",
    "PlacementOutcome",
    "ProductionAccumulator",
    "Settings",
    "ThresholdReachedEvent",
    "get_settings",
]
