"""
Character production: turning rotations into spawned characters.
NO UI DEPENDENCIES.
"""
import logging
from typing import Callable, Iterable, Optional

from .constants import FILL_THRESHOLD
from .events import ActivePathChangedEvent, EventBus, GameEvent, ThresholdReachedEvent
from .gears import Gear, GearType
from .grid import Grid, Position

logger = logging.getLogger(__name__)


class ProductionAccumulator:
    """
    Fill counter for one character gear.

    Every published active path recomputes the fill per rotation:

        (base + sum of Number bonuses) * product of Multiplier factors

    over the other gears on the path, clamped at zero. Motors on the path
    neither gate nor scale the result.

    Each rotation of an active character adds that fill; reaching the
    threshold spawns a character and empties the counter (overflow is lost).
    """

    def __init__(
        self,
        gear: Gear,
        grid: Optional[Grid],
        bus: Optional[EventBus] = None,
        is_running: Callable[[], bool] = lambda: True,
        threshold: float = FILL_THRESHOLD,
    ):
        self.gear = gear
        self.grid = grid
        self.bus = bus
        self.is_running = is_running
        self.threshold = threshold
        self.fill_per_rotation: float = 0.0
        self.accumulated: float = 0.0
        self.spawned: int = 0

    # =========================================================================
    # WIRING
    # =========================================================================

    def attach(self) -> None:
        """Start listening for path changes."""
        self.gear.production = self
        if self.bus is not None:
            self.bus.subscribe(ActivePathChangedEvent, self._on_path_changed)

    def detach(self) -> None:
        if self.bus is not None:
            self.bus.unsubscribe(ActivePathChangedEvent, self._on_path_changed)
        if self.gear.production is self:
            self.gear.production = None

    def _on_path_changed(self, event: GameEvent) -> None:
        self.recalculate(event.active_path)

    # =========================================================================
    # RULES
    # =========================================================================

    def recalculate(self, active_path: Iterable[Position]) -> float:
        """Recompute fill per rotation from the gears on a path."""
        if self.grid is None:
            logger.warning(f"No grid for character gear {self.gear.gear_id}; fill set to 0")
            self.fill_per_rotation = 0.0
            return self.fill_per_rotation

        additive_bonus = 0.0
        total_multiplier = 1.0

        for pos in active_path:
            other = self.grid.get(pos)
            if other is None or other is self.gear:
                continue

            if other.gear_type == GearType.NUMBER:
                additive_bonus += other.bonus
            elif other.gear_type == GearType.MULTIPLIER:
                total_multiplier *= other.factor

        fill = (self.gear.base_fill + additive_bonus) * total_multiplier
        self.fill_per_rotation = max(0.0, fill)

        logger.debug(
            f"Character gear {self.gear.gear_id}: fill per rotation "
            f"{self.fill_per_rotation:.4f}"
        )
        return self.fill_per_rotation

    def advance(self) -> bool:
        """
        Apply one rotation.
        Returns True if the threshold was reached and a spawn fired.
        """
        if not self.is_running():
            return False
        if not self.gear.active:
            return False
        if self.fill_per_rotation <= 0:
            return False

        self.accumulated += self.fill_per_rotation

        if self.accumulated >= self.threshold:
            self.accumulated = 0.0
            self.spawned += 1
            logger.info(f"Character gear {self.gear.gear_id} spawned a {self.gear.label}")
            if self.bus is not None:
                self.bus.publish(
                    ThresholdReachedEvent(gear_id=self.gear.gear_id, subtype=self.gear.subtype)
                )
            return True
        return False

    @property
    def fill_ratio(self) -> float:
        """Return fill level as 0.0 to 1.0."""
        return self.accumulated / self.threshold if self.threshold > 0 else 0.0
