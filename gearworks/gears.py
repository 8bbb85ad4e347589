"""
Gear types, parameter tables and the gear registry.
NO UI DEPENDENCIES.
"""
import itertools
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, Optional, Tuple, TYPE_CHECKING

from .constants import (
    CHARACTER_BASE_FILLS, CHARACTER_NAMES, FALLBACK_RADIUS,
    MULTIPLIER_FACTORS, NUMBER_BONUSES,
)
from .grid import Position

if TYPE_CHECKING:
    from .production import ProductionAccumulator


class GearType(Enum):
    """Every kind of gear that can sit on the grid."""
    MOTOR = auto()        # Power source, no numeric parameter
    CHARACTER = auto()    # Consumer, spawns characters
    NUMBER = auto()       # Additive bonus
    MULTIPLIER = auto()   # Multiplicative factor


# Number of subtypes per gear type (subtype indexes run 0..count-1)
SUBTYPE_COUNTS: Dict[GearType, int] = {
    GearType.MOTOR: 1,
    GearType.CHARACTER: len(CHARACTER_BASE_FILLS),
    GearType.NUMBER: len(NUMBER_BONUSES),
    GearType.MULTIPLIER: len(MULTIPLIER_FACTORS),
}

# Only modifier gears upgrade when two equal ones are dropped together
MERGEABLE_TYPES = frozenset({GearType.NUMBER, GearType.MULTIPLIER})


def max_subtype(gear_type: GearType) -> int:
    """Highest valid subtype index for a gear type."""
    return SUBTYPE_COUNTS[gear_type] - 1


def can_merge(gear_type: GearType) -> bool:
    return gear_type in MERGEABLE_TYPES


@dataclass(eq=False)
class Gear:
    """
    A gear on the board.

    Identity is the object itself (eq=False), so two gears of the same
    type and subtype are still different gears.
    """
    gear_id: int
    gear_type: GearType
    subtype: int = 0
    position: Optional[Position] = None
    active: bool = False
    radius: Optional[float] = None
    footprint: Optional[Tuple[float, float]] = None
    rotation_count: int = 0
    last_clockwise: Optional[bool] = None
    production: Optional['ProductionAccumulator'] = None

    def set_active(self, value: bool) -> None:
        self.active = value

    def physical_radius(self) -> float:
        """
        Radius used for meshing.
        Explicit radius first, then half the larger footprint side.
        """
        if self.radius is not None:
            return self.radius
        if self.footprint is not None:
            return max(self.footprint) * 0.5
        return FALLBACK_RADIUS

    def rotate_once(self, clockwise: bool) -> None:
        """Record one rotation tick."""
        self.rotation_count += 1
        self.last_clockwise = clockwise

    # =========================================================================
    # PARAMETERS
    # =========================================================================

    @property
    def bonus(self) -> float:
        """Additive bonus contributed by a Number gear, 0 for other types."""
        if self.gear_type == GearType.NUMBER:
            return NUMBER_BONUSES[self.subtype]
        return 0.0

    @property
    def factor(self) -> float:
        """Multiplicative factor contributed by a Multiplier gear, 1 otherwise."""
        if self.gear_type == GearType.MULTIPLIER:
            return MULTIPLIER_FACTORS[self.subtype]
        return 1.0

    @property
    def base_fill(self) -> float:
        """Base fill per rotation for a Character gear, 0 otherwise."""
        if self.gear_type == GearType.CHARACTER:
            return CHARACTER_BASE_FILLS[self.subtype]
        return 0.0

    @property
    def label(self) -> str:
        if self.gear_type == GearType.CHARACTER:
            return CHARACTER_NAMES[self.subtype]
        return f"{self.gear_type.name.title()}{self.subtype}"

    def __repr__(self) -> str:
        state = "on" if self.active else "off"
        return f"Gear#{self.gear_id}({self.label} at {self.position}, {state})"


class GearRegistry:
    """
    Owns every live gear.

    Gears are created here on placement requests and destroyed when
    removed from the board or consumed by a merge.
    """

    def __init__(self, default_radius: Optional[float] = None):
        self.default_radius = default_radius
        self._gears: Dict[int, Gear] = {}
        self._ids = itertools.count(1)

    def create(
        self,
        gear_type: GearType,
        subtype: int = 0,
        radius: Optional[float] = None,
        footprint: Optional[Tuple[float, float]] = None,
    ) -> Gear:
        """Build a new gear. Raises ValueError for a subtype with no table entry."""
        if not 0 <= subtype <= max_subtype(gear_type):
            raise ValueError(
                f"{gear_type.name} has no subtype {subtype} "
                f"(valid: 0..{max_subtype(gear_type)})"
            )

        if radius is None and footprint is None:
            radius = self.default_radius

        gear = Gear(
            gear_id=next(self._ids),
            gear_type=gear_type,
            subtype=subtype,
            radius=radius,
            footprint=footprint,
        )
        self._gears[gear.gear_id] = gear
        return gear

    def destroy(self, gear: Gear) -> None:
        """Forget a gear. Unknown gears are ignored."""
        if gear.production is not None:
            gear.production.detach()
        self._gears.pop(gear.gear_id, None)
        gear.position = None
        gear.active = False

    def get(self, gear_id: int) -> Optional[Gear]:
        return self._gears.get(gear_id)

    def __contains__(self, gear: Gear) -> bool:
        return self._gears.get(gear.gear_id) is gear

    def __iter__(self) -> Iterator[Gear]:
        return iter(list(self._gears.values()))

    def __len__(self) -> int:
        return len(self._gears)
