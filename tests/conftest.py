"""
Shared fixtures for gameplay tests.
"""
import pytest

from gearworks.config import Settings
from gearworks.events import EventBus
from gearworks.game import Game
from gearworks.gears import GearRegistry, GearType
from gearworks.grid import Grid


def make_settings(**overrides) -> Settings:
    """Unit cells on a 6x6 board: default gears have radius 0.5 and mesh with grid neighbours."""
    values = dict(grid_width=6, grid_height=6, cell_size=1.0, mesh_tolerance=0.06)
    values.update(overrides)
    return Settings(**values)


class Board:
    """A bare grid + registry for testing systems without a Game."""

    def __init__(self, width: int = 6, height: int = 6, cell_size: float = 1.0):
        self.grid = Grid(width, height, cell_size)
        self.registry = GearRegistry(default_radius=cell_size / 2)
        self.bus = EventBus()

    def put(self, gear_type: GearType, pos, subtype: int = 0, **kwargs):
        gear = self.registry.create(gear_type, subtype, **kwargs)
        self.grid.place(gear, pos)
        return gear


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def game(settings) -> Game:
    return Game(settings=settings)


@pytest.fixture
def board() -> Board:
    return Board()
