"""
Drop handling: place, merge or swap a dragged gear.
NO UI DEPENDENCIES.

A drop is one transaction decided in this order:

1. target outside the grid        -> rejected
2. target empty                   -> gear moves there
3. equal Number/Multiplier there  -> both merge into subtype + 1, or
                                     rejected when already at the cap
4. any other gear there           -> the two gears swap cells
5. the gear itself there          -> cancelled drag

Successful drops publish one GridChangedEvent. Rejected drops change
nothing and publish nothing; the caller snaps the gear back to where it
came from.
"""
import logging
from enum import Enum, auto
from typing import Optional

from .events import EventBus, GridChangedEvent
from .gears import Gear, GearRegistry, can_merge, max_subtype
from .grid import Grid, Position

logger = logging.getLogger(__name__)


class PlacementOutcome(Enum):
    """Result of a drop."""
    PLACED = auto()
    MERGED = auto()
    SWAPPED = auto()
    OUT_OF_BOUNDS = auto()
    MERGE_AT_CAP = auto()
    SELF_DROP = auto()
    NOT_ON_BOARD = auto()    # dragged gear is not a live board gear

    @property
    def succeeded(self) -> bool:
        return self in (PlacementOutcome.PLACED, PlacementOutcome.MERGED, PlacementOutcome.SWAPPED)


class PlacementHandler:
    """Applies drop transactions to the grid and registry."""

    def __init__(self, grid: Grid, registry: GearRegistry, bus: Optional[EventBus] = None):
        self.grid = grid
        self.registry = registry
        self.bus = bus

    def try_place(self, gear: Gear, target: Position) -> bool:
        """Drop a gear on a cell. Returns True if the board changed."""
        return self.place(gear, target).succeeded

    def place(self, gear: Gear, target: Position) -> PlacementOutcome:
        outcome = self._decide_and_apply(gear, target)
        logger.debug(f"Drop of {gear!r} on {target}: {outcome.name}")

        if outcome.succeeded and self.bus is not None:
            self.bus.publish(GridChangedEvent())
        return outcome

    def _decide_and_apply(self, gear: Gear, target: Position) -> PlacementOutcome:
        if not self.grid.is_inside(target):
            return PlacementOutcome.OUT_OF_BOUNDS

        origin = gear.position
        if origin is None or self.grid.get(origin) is not gear:
            return PlacementOutcome.NOT_ON_BOARD

        existing = self.grid.get(target)

        if existing is None:
            self.grid.remove(origin)
            self.grid.place(gear, target)
            return PlacementOutcome.PLACED

        if existing is gear:
            return PlacementOutcome.SELF_DROP

        if (existing.gear_type == gear.gear_type
                and existing.subtype == gear.subtype
                and can_merge(existing.gear_type)):
            next_subtype = existing.subtype + 1
            if next_subtype > max_subtype(existing.gear_type):
                return PlacementOutcome.MERGE_AT_CAP

            self.grid.remove(origin)
            self.grid.remove(target)
            self.registry.destroy(gear)
            self.registry.destroy(existing)

            upgraded = self.registry.create(existing.gear_type, next_subtype)
            self.grid.place(upgraded, target)
            return PlacementOutcome.MERGED

        self.grid.remove(origin)
        self.grid.remove(target)
        self.grid.place(gear, target)
        self.grid.place(existing, origin)
        return PlacementOutcome.SWAPPED
