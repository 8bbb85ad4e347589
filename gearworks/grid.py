"""
Gear grid storage.
NO UI DEPENDENCIES.
"""
import math
from dataclasses import dataclass
from typing import Optional, Dict, Tuple, Iterator, TYPE_CHECKING
from enum import Enum, auto

from .constants import CELL_SIZE

if TYPE_CHECKING:
    from .gears import Gear

Position = Tuple[int, int]
Point = Tuple[float, float]


class Direction(Enum):
    """Cardinal directions."""
    UP = auto()
    DOWN = auto()
    LEFT = auto()
    RIGHT = auto()

    def delta(self) -> Tuple[int, int]:
        """Return (dx, dy) for this direction."""
        deltas = {
            Direction.UP: (0, 1),
            Direction.DOWN: (0, -1),
            Direction.LEFT: (-1, 0),
            Direction.RIGHT: (1, 0),
        }
        return deltas[self]

    def step(self, pos: Position) -> Position:
        """Return the position one cell away in this direction."""
        dx, dy = self.delta()
        return (pos[0] + dx, pos[1] + dy)


@dataclass
class Cell:
    """A single slot in the gear grid."""
    x: int
    y: int
    gear: Optional['Gear'] = None

    def is_empty(self) -> bool:
        return self.gear is None


class Grid:
    """
    The board that gears are dropped onto.

    Coordinate system:
    - (0, 0) is bottom-left
    - x increases to the right
    - y increases upward
    - the world origin sits at the centre of the board

    Every coordinate-taking method fails soft: positions outside the board
    read as empty/None and writes to them are ignored.
    """

    def __init__(self, width: int, height: int, cell_size: float = CELL_SIZE,
                 origin: Point = (0.0, 0.0)):
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self.origin = origin
        self._cells: Dict[Position, Cell] = {}

        # Column-major so iteration matches the resolver's scan order
        for x in range(width):
            for y in range(height):
                self._cells[(x, y)] = Cell(x, y)

    # =========================================================================
    # CORE STORAGE
    # =========================================================================

    def is_inside(self, pos: Position) -> bool:
        """Check if a position is within grid bounds."""
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def is_empty(self, pos: Position) -> bool:
        """True only for an in-bounds cell holding no gear."""
        cell = self._cells.get(pos)
        return cell is not None and cell.is_empty()

    def get_cell(self, pos: Position) -> Optional[Cell]:
        """Get cell at position, or None if out of bounds."""
        return self._cells.get(pos)

    def get(self, pos: Position) -> Optional['Gear']:
        """Get gear at position, or None if empty or out of bounds."""
        cell = self._cells.get(pos)
        if cell is None:
            return None
        return cell.gear

    def place(self, gear: 'Gear', pos: Position) -> None:
        """
        Put a gear in a cell and stamp its position.

        Overwrites whatever the cell held. The caller clears the gear's
        previous cell first.
        """
        cell = self._cells.get(pos)
        if cell is None:
            return
        cell.gear = gear
        gear.position = pos

    def remove(self, pos: Position) -> None:
        """Clear a cell. No-op when already empty or out of bounds."""
        cell = self._cells.get(pos)
        if cell is None:
            return
        cell.gear = None

    # =========================================================================
    # NEIGHBOURS & ITERATION
    # =========================================================================

    def neighbors(self, pos: Position) -> Iterator[Position]:
        """Yield the in-bounds 4-neighbours of a position."""
        for direction in Direction:
            nxt = direction.step(pos)
            if self.is_inside(nxt):
                yield nxt

    def iter_occupied(self) -> Iterator[Tuple[Position, 'Gear']]:
        """Iterate (position, gear) over occupied cells, column by column."""
        for pos, cell in self._cells.items():
            if cell.gear is not None:
                yield pos, cell.gear

    def iter_gears(self) -> Iterator['Gear']:
        """Iterate over all gears in the grid."""
        for _, gear in self.iter_occupied():
            yield gear

    def empty_positions(self) -> Iterator[Position]:
        for pos, cell in self._cells.items():
            if cell.is_empty():
                yield pos

    # =========================================================================
    # WORLD CONVERSION
    # =========================================================================

    def grid_to_world(self, pos: Position) -> Point:
        """Return the world-space centre of a cell."""
        ox, oy = self.origin
        return (
            ox + (pos[0] - self.width / 2 + 0.5) * self.cell_size,
            oy + (pos[1] - self.height / 2 + 0.5) * self.cell_size,
        )

    def world_to_grid(self, point: Point) -> Position:
        """Return the cell containing a world-space point (may be outside the grid)."""
        lx = point[0] - self.origin[0]
        ly = point[1] - self.origin[1]
        return (
            math.floor(lx / self.cell_size + self.width / 2),
            math.floor(ly / self.cell_size + self.height / 2),
        )

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height})"
