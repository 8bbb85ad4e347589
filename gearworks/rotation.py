"""
Rotation propagation through physically meshed gears.
NO UI DEPENDENCIES.
"""
import logging
import math
from typing import Iterator, List, Optional, Set, Tuple

from .constants import MESH_TOLERANCE
from .events import EventBus, GearRotatedEvent
from .gears import Gear, GearType
from .grid import Grid, Position

logger = logging.getLogger(__name__)


class GearRotator:
    """
    Turns the cluster of meshed gears around a trigger cell.

    The walk is depth first over grid neighbours, but only crosses to a
    neighbour whose teeth actually touch the current gear. Each step
    flips the spin direction, as in a real gear train.
    """

    def __init__(self, grid: Optional[Grid], bus: Optional[EventBus] = None,
                 mesh_tolerance: float = MESH_TOLERANCE):
        self.grid = grid
        self.bus = bus
        self.mesh_tolerance = mesh_tolerance

    def are_meshed(self, a: Gear, b: Gear) -> bool:
        """True when centre distance is within tolerance of the summed radii."""
        if a.position is None or b.position is None:
            return False

        ax, ay = self.grid.grid_to_world(a.position)
        bx, by = self.grid.grid_to_world(b.position)
        distance = math.hypot(ax - bx, ay - by)
        expected = a.physical_radius() + b.physical_radius()
        return abs(distance - expected) <= self.mesh_tolerance

    def propagate(self, start: Position) -> List[Position]:
        """
        Rotate every gear meshed (transitively) with the gear at start.
        The first gear turns clockwise.

        Returns the visited positions in visiting order.
        """
        if self.grid is None:
            logger.warning("GearRotator has no grid; skipping propagate")
            return []
        if not self.grid.is_inside(start):
            return []

        visited: Set[Position] = set()
        order: List[Position] = []

        # Each frame is (gear, clockwise, remaining neighbours), which keeps
        # the exact visiting order of the recursive walk without its depth limit
        stack: List[Tuple[Gear, bool, Iterator[Position]]] = []
        frame = self._enter(start, True, visited, order)
        if frame is not None:
            stack.append(frame)

        while stack:
            gear, clockwise, pending = stack[-1]
            for n_pos in pending:
                if n_pos in visited:
                    continue
                neighbor = self.grid.get(n_pos)
                if neighbor is None:
                    continue
                if self.are_meshed(gear, neighbor):
                    frame = self._enter(n_pos, not clockwise, visited, order)
                    if frame is not None:
                        stack.append(frame)
                    break
            else:
                stack.pop()

        logger.debug(f"Rotation from {start} turned {len(order)} gear(s)")
        return order

    def _enter(
        self,
        pos: Position,
        clockwise: bool,
        visited: Set[Position],
        order: List[Position],
    ) -> Optional[Tuple[Gear, bool, Iterator[Position]]]:
        """Visit one cell: tick its gear and feed an active character."""
        if pos in visited:
            return None
        gear = self.grid.get(pos)
        if gear is None:
            return None

        visited.add(pos)
        order.append(pos)

        gear.rotate_once(clockwise)
        if self.bus is not None:
            self.bus.publish(GearRotatedEvent(gear_id=gear.gear_id, clockwise=clockwise))

        # Only active characters fill; activation is decided by the resolver
        if gear.gear_type == GearType.CHARACTER and gear.active and gear.production is not None:
            gear.production.advance()

        return gear, clockwise, iter(list(self.grid.neighbors(pos)))
