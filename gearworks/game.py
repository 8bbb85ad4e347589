"""
Main Game class - owns the board and wires every gear system together.
NO UI DEPENDENCIES.

This is the single simulation context. Presentation and input layers get
a Game and call its commands; nothing is reached through globals.
"""
import logging
import random
from typing import Dict, FrozenSet, List, Optional, Tuple

from .config import Settings, get_settings
from .events import (
    EventBus, GameEvent, GamePhase, GearRotatedEvent, GridChangedEvent, PhaseChangedEvent,
    ThresholdReachedEvent,
)
from .gears import Gear, GearRegistry, GearType
from .grid import Direction, Grid, Position
from .layout import parse_layout
from .links import LinkResolver
from .placement import PlacementHandler, PlacementOutcome
from .production import ProductionAccumulator
from .rotation import GearRotator

logger = logging.getLogger(__name__)


class Game:
    """
    The gear board and everything that reacts to it.

    Usage:
        game = Game()
        motor = game.spawn_gear(GearType.MOTOR, 0, (0, 0))
        character = game.spawn_gear(GearType.CHARACTER, 0, (1, 0))
        game.start()
        game.run_motor_revolution()
        events = game.drain_events()

    Every successful board change runs the resolver exactly once, which
    publishes one ActivePathChangedEvent that the character accumulators
    pick up.
    """

    def __init__(self, settings: Optional[Settings] = None, rng: Optional[random.Random] = None):
        self.settings = settings if settings is not None else get_settings()
        self.rng = rng if rng is not None else random.Random(self.settings.random_seed)

        self.grid = Grid(
            self.settings.grid_width,
            self.settings.grid_height,
            self.settings.cell_size,
        )
        self.registry = GearRegistry(default_radius=self.settings.cell_size / 2)
        self.bus = EventBus()

        self.resolver = LinkResolver(self.grid, self.bus)
        self.rotator = GearRotator(self.grid, self.bus, self.settings.mesh_tolerance)
        self.placement = PlacementHandler(self.grid, self.registry, self.bus)

        self.phase = GamePhase.STOPPED

        # Event queue for UI notifications. Per-tick rotations are left to
        # bus subscribers so an undrained queue only grows with board changes
        self._events: List[GameEvent] = []
        self.bus.subscribe_all(self._record_event)
        self.bus.subscribe(GridChangedEvent, self._on_grid_changed)

        # Stats
        self.total_spawned: Dict[int, int] = {}
        self.bus.subscribe(ThresholdReachedEvent, self._on_threshold_reached)

        if self.settings.spawn_motor_on_start:
            self.place_motor_at_random()

    # =========================================================================
    # BUILDING COMMANDS
    # =========================================================================

    def spawn_gear(
        self,
        gear_type: GearType,
        subtype: int,
        pos: Position,
        radius: Optional[float] = None,
        footprint: Optional[Tuple[float, float]] = None,
    ) -> Optional[Gear]:
        """
        Put a brand new gear on an empty cell.
        Returns None when the cell is occupied or outside the board.
        """
        gear = self._add_gear(gear_type, subtype, pos, radius, footprint)
        if gear is not None:
            self.bus.publish(GridChangedEvent())
        return gear

    def place(self, gear: Gear, target: Position) -> PlacementOutcome:
        """Drop a gear that is already on the board onto another cell."""
        return self.placement.place(gear, target)

    def try_place(self, gear: Gear, target: Position) -> bool:
        return self.placement.try_place(gear, target)

    def remove_gear(self, pos: Position) -> bool:
        """Remove and destroy the gear at a position."""
        gear = self.grid.get(pos)
        if gear is None:
            return False

        self.grid.remove(pos)
        self.registry.destroy(gear)
        self.bus.publish(GridChangedEvent())
        return True

    def get_gear(self, pos: Position) -> Optional[Gear]:
        """Get gear at position for inspection."""
        return self.grid.get(pos)

    def place_motor_at_random(self) -> Optional[Gear]:
        """Put a motor on a random empty cell. None if the board is full."""
        empty = list(self.grid.empty_positions())
        if not empty:
            return None

        pos = self.rng.choice(empty)
        logger.info(f"Placing starting motor at {pos}")
        return self.spawn_gear(GearType.MOTOR, 0, pos)

    def load_layout(self, text: str) -> List[Gear]:
        """
        Place every gear of a text layout, then resolve once.
        Entries that fall outside the board or on occupied cells are skipped.
        """
        layout = parse_layout(text)
        placed: List[Gear] = []
        for entry in layout.entries:
            gear = self._add_gear(entry.gear_type, entry.subtype, entry.position)
            if gear is None:
                logger.warning(f"Layout entry at {entry.position} skipped")
                continue
            placed.append(gear)

        self.bus.publish(GridChangedEvent())
        return placed

    def _add_gear(
        self,
        gear_type: GearType,
        subtype: int,
        pos: Position,
        radius: Optional[float] = None,
        footprint: Optional[Tuple[float, float]] = None,
    ) -> Optional[Gear]:
        if not self.grid.is_empty(pos):
            return None

        gear = self.registry.create(gear_type, subtype, radius=radius, footprint=footprint)
        self.grid.place(gear, pos)

        if gear_type == GearType.CHARACTER:
            ProductionAccumulator(
                gear, self.grid, self.bus, is_running=lambda: self.is_running
            ).attach()
        return gear

    def _record_event(self, event: GameEvent) -> None:
        if not isinstance(event, GearRotatedEvent):
            self._events.append(event)

    def _on_grid_changed(self, event: GameEvent) -> None:
        self.resolver.resolve()

    def _on_threshold_reached(self, event: GameEvent) -> None:
        self.total_spawned[event.subtype] = self.total_spawned.get(event.subtype, 0) + 1

    # =========================================================================
    # GAME FLOW COMMANDS
    # =========================================================================

    @property
    def is_running(self) -> bool:
        return self.phase == GamePhase.RUNNING

    def start(self) -> None:
        """Begin counting production."""
        self._set_phase(GamePhase.RUNNING)

    def stop(self) -> None:
        self._set_phase(GamePhase.STOPPED)

    def _set_phase(self, new_phase: GamePhase) -> None:
        if self.phase == new_phase:
            return
        old_phase = self.phase
        self.phase = new_phase
        logger.info(f"Game phase {old_phase.name} -> {new_phase.name}")
        self.bus.publish(PhaseChangedEvent(old_phase, new_phase))

    # =========================================================================
    # ROTATION
    # =========================================================================

    def propagate(self, start: Position) -> List[Position]:
        """A motor pickup touched the gear at start: turn its meshed cluster."""
        return self.rotator.propagate(start)

    def run_motor_revolution(self) -> int:
        """
        One full turn of every motor.

        Each motor's pickup point sweeps past its four neighbours and
        triggers a propagation from every occupied one. Returns the number
        of propagations triggered.
        """
        motors = [pos for pos, gear in self.grid.iter_occupied()
                  if gear.gear_type == GearType.MOTOR]

        triggered = 0
        for motor_pos in motors:
            for direction in Direction:
                neighbor = direction.step(motor_pos)
                if self.grid.get(neighbor) is None:
                    continue
                self.rotator.propagate(neighbor)
                triggered += 1
        return triggered

    # =========================================================================
    # STATE QUERIES (for UI to read)
    # =========================================================================

    @property
    def active_path(self) -> FrozenSet[Position]:
        return self.resolver.active_path

    def characters(self) -> List[Gear]:
        return [gear for gear in self.grid.iter_gears()
                if gear.gear_type == GearType.CHARACTER]

    def get_fill(self, pos: Position) -> Tuple[float, float]:
        """Get (accumulated, fill per rotation) for a character, (0, 0) otherwise."""
        gear = self.grid.get(pos)
        if gear is None or gear.production is None:
            return (0.0, 0.0)
        return (gear.production.accumulated, gear.production.fill_per_rotation)

    def drain_events(self) -> List[GameEvent]:
        """Return and clear the events logged since the last drain (rotation ticks excluded)."""
        events = list(self._events)
        self._events.clear()
        return events
