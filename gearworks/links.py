"""
Power routing: which gears form a live motor-to-character chain.
NO UI DEPENDENCIES.

The active path is rebuilt from scratch on every board change:

1. flood from every motor through any occupied cell
2. flood from every character through any occupied cell except motors
3. keep the cells reached by both floods
4. add each motor that borders a cell reached by the character flood

Step 2 refuses to walk into motors so a chain can never borrow power
through a second motor. Step 4 still switches on a motor that sits right
next to a chain leading to a character.
"""
import logging
from collections import deque
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .events import ActivePathChangedEvent, EventBus
from .gears import Gear, GearType
from .grid import Grid, Position

logger = logging.getLogger(__name__)


def flood(grid: Grid, starts: Iterable[Position], avoid_motors: bool) -> Set[Position]:
    """
    Breadth-first search over occupied 4-neighbours from all starts at once.

    With avoid_motors the search never steps into a motor cell; the
    starts themselves are always included.
    """
    visited: Set[Position] = set()
    queue = deque()

    for start in starts:
        visited.add(start)
        queue.append(start)

    while queue:
        current = queue.popleft()
        for nxt in grid.neighbors(current):
            if nxt in visited:
                continue

            gear = grid.get(nxt)
            if gear is None:
                continue

            if avoid_motors and gear.gear_type == GearType.MOTOR:
                continue

            visited.add(nxt)
            queue.append(nxt)

    return visited


class LinkResolver:
    """
    Recomputes the active path and pushes it to gears and subscribers.

    The only state kept between runs is the last published path.
    """

    def __init__(self, grid: Optional[Grid], bus: Optional[EventBus] = None):
        self.grid = grid
        self.bus = bus
        self.active_path: FrozenSet[Position] = frozenset()

    def collect_endpoints(self) -> Tuple[List[Position], List[Position]]:
        """Return (motor positions, character positions) in scan order."""
        motors: List[Position] = []
        characters: List[Position] = []
        if self.grid is None:
            return motors, characters

        for pos, gear in self.grid.iter_occupied():
            if gear.gear_type == GearType.MOTOR:
                motors.append(pos)
            elif gear.gear_type == GearType.CHARACTER:
                characters.append(pos)
        return motors, characters

    def compute(self) -> FrozenSet[Position]:
        """Compute the active path without touching gears or publishing."""
        if self.grid is None:
            return frozenset()

        motors, characters = self.collect_endpoints()
        if not motors or not characters:
            return frozenset()

        motor_connected = flood(self.grid, motors, avoid_motors=False)
        char_connected = flood(self.grid, characters, avoid_motors=True)

        final_active = motor_connected & char_connected

        for motor_pos in motors:
            if any(n in char_connected for n in self.grid.neighbors(motor_pos)):
                final_active.add(motor_pos)

        logger.debug(f"motorConnected: {sorted(motor_connected)}")
        logger.debug(f"charConnectedAvoidingMotors: {sorted(char_connected)}")
        logger.debug(f"finalActive: {sorted(final_active)}")

        return frozenset(final_active)

    def resolve(self) -> FrozenSet[Position]:
        """
        Recompute the active path, write every gear's active flag and
        publish exactly one ActivePathChangedEvent.
        """
        if self.grid is None:
            logger.warning("LinkResolver has no grid; skipping resolve")
            return self.active_path

        path = self.compute()
        self._apply(path)
        self.active_path = path

        if self.bus is not None:
            self.bus.publish(ActivePathChangedEvent(active_path=path))
        return path

    def _apply(self, path: FrozenSet[Position]) -> None:
        for pos, gear in self.grid.iter_occupied():
            gear.set_active(pos in path)

    # =========================================================================
    # CHAIN QUERIES
    # =========================================================================

    def chain_to_character(self, character: Gear) -> List[Gear]:
        """
        Gears on a shortest 4-neighbour route from the first motor to a character.

        The route may pass through any occupied cell. Returns [] when there
        is no motor or no route.
        """
        if self.grid is None or character.position is None:
            return []

        motors, _ = self.collect_endpoints()
        if not motors:
            return []

        start = motors[0]
        target = character.position
        prev: Dict[Position, Optional[Position]] = {start: None}
        queue = deque([start])
        found = False

        while queue:
            current = queue.popleft()
            if current == target:
                found = True
                break

            for nxt in self.grid.neighbors(current):
                if nxt in prev or self.grid.get(nxt) is None:
                    continue
                prev[nxt] = current
                queue.append(nxt)

        if not found:
            return []

        chain: List[Gear] = []
        node: Optional[Position] = target
        while node is not None:
            chain.append(self.grid.get(node))
            node = prev[node]
        chain.reverse()
        return chain
