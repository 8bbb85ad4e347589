"""
Tests for drop transactions: move, merge, swap and rejections.
"""
import pytest
from gearworks.events import ActivePathChangedEvent, GridChangedEvent
from gearworks.gears import GearType
from gearworks.placement import PlacementOutcome

M, C, N, X = GearType.MOTOR, GearType.CHARACTER, GearType.NUMBER, GearType.MULTIPLIER


def board_snapshot(game):
    return {pos: gear for pos, gear in game.grid.iter_occupied()}


def path_events(events):
    return [e for e in events if isinstance(e, ActivePathChangedEvent)]


class TestMove:
    """Dropping on an empty cell."""

    def test_move_to_empty(self, game):
        """The gear moves and its old cell is cleared."""
        gear = game.spawn_gear(N, 0, (0, 0))
        game.drain_events()

        assert game.place(gear, (3, 3)) == PlacementOutcome.PLACED

        assert gear.position == (3, 3)
        assert game.get_gear((3, 3)) is gear
        assert game.get_gear((0, 0)) is None
        assert len(path_events(game.drain_events())) == 1

    def test_move_connects_chain(self, game):
        """Moving a gear into a gap powers the character."""
        game.spawn_gear(M, 0, (0, 0))
        character = game.spawn_gear(C, 0, (2, 0))
        link = game.spawn_gear(N, 0, (5, 5))
        assert not character.active

        assert game.try_place(link, (1, 0))

        assert character.active
        assert game.active_path == {(0, 0), (1, 0), (2, 0)}


class TestMerge:
    """Dropping on an equal Number or Multiplier gear."""

    def test_merge_numbers(self, game):
        """Two equal numbers become one of the next subtype at the target."""
        dragged = game.spawn_gear(N, 0, (0, 0))
        target = game.spawn_gear(N, 0, (1, 0))
        game.drain_events()

        assert game.place(dragged, (1, 0)) == PlacementOutcome.MERGED

        merged = game.get_gear((1, 0))
        assert merged is not dragged and merged is not target
        assert merged.gear_type == N
        assert merged.subtype == 1
        assert game.get_gear((0, 0)) is None
        assert dragged not in game.registry
        assert target not in game.registry
        assert merged in game.registry
        assert len(game.registry) == 1
        assert len(path_events(game.drain_events())) == 1

    def test_merge_multipliers(self, game):
        """Multipliers merge the same way."""
        dragged = game.spawn_gear(X, 1, (4, 4))
        game.spawn_gear(X, 1, (4, 5))

        assert game.try_place(dragged, (4, 5))
        assert game.get_gear((4, 5)).subtype == 2

    def test_merge_updates_fill(self, game):
        """An upgraded gear on the path changes the character's fill."""
        game.spawn_gear(M, 0, (0, 0))
        character = game.spawn_gear(C, 0, (1, 0))
        game.spawn_gear(N, 0, (1, 1))
        spare = game.spawn_gear(N, 0, (5, 5))
        assert character.production.fill_per_rotation == pytest.approx(0.26)

        assert game.try_place(spare, (1, 1))

        assert character.production.fill_per_rotation == pytest.approx(0.31)

    @pytest.mark.parametrize("gear_type,cap", [(N, 3), (X, 2)])
    def test_merge_at_cap_rejected(self, game, gear_type, cap):
        """Merging two max-subtype gears fails and changes nothing."""
        dragged = game.spawn_gear(gear_type, cap, (0, 0))
        target = game.spawn_gear(gear_type, cap, (1, 0))
        before = board_snapshot(game)
        game.drain_events()

        assert game.place(dragged, (1, 0)) == PlacementOutcome.MERGE_AT_CAP

        assert board_snapshot(game) == before
        assert dragged.position == (0, 0)
        assert target.position == (1, 0)
        assert game.drain_events() == []

    def test_different_subtypes_swap(self, game):
        """Same type with different subtypes swaps instead of merging."""
        dragged = game.spawn_gear(N, 0, (0, 0))
        target = game.spawn_gear(N, 1, (1, 0))

        assert game.place(dragged, (1, 0)) == PlacementOutcome.SWAPPED
        assert dragged.position == (1, 0)
        assert target.position == (0, 0)
        assert dragged.subtype == 0


class TestSwap:
    """Dropping on a gear that cannot merge."""

    def test_swap_different_types(self, game):
        """The two gears trade cells."""
        motor = game.spawn_gear(M, 0, (0, 0))
        number = game.spawn_gear(N, 2, (3, 3))
        game.drain_events()

        assert game.place(motor, (3, 3)) == PlacementOutcome.SWAPPED

        assert game.get_gear((3, 3)) is motor
        assert game.get_gear((0, 0)) is number
        assert motor.position == (3, 3)
        assert number.position == (0, 0)
        assert len(path_events(game.drain_events())) == 1

    @pytest.mark.parametrize("gear_type", [M, C])
    def test_motor_and_character_never_merge(self, game, gear_type):
        """Equal motors or characters swap."""
        dragged = game.spawn_gear(gear_type, 0, (0, 0))
        target = game.spawn_gear(gear_type, 0, (2, 2))

        assert game.place(dragged, (2, 2)) == PlacementOutcome.SWAPPED
        assert game.get_gear((2, 2)) is dragged
        assert game.get_gear((0, 0)) is target
        assert len(game.registry) == 2


class TestRejections:
    """Drops that must leave the board untouched."""

    def test_out_of_bounds(self, game):
        """Dropping off the board fails."""
        gear = game.spawn_gear(N, 0, (0, 0))
        game.drain_events()

        assert not game.try_place(gear, (-1, 0))
        assert game.place(gear, (6, 0)) == PlacementOutcome.OUT_OF_BOUNDS

        assert gear.position == (0, 0)
        assert game.get_gear((0, 0)) is gear
        assert game.drain_events() == []

    def test_self_drop(self, game):
        """Dropping a gear on itself is a cancelled drag."""
        game.spawn_gear(M, 0, (0, 0))
        gear = game.spawn_gear(C, 0, (1, 0))
        before = board_snapshot(game)
        path_before = game.active_path
        game.drain_events()

        assert game.place(gear, (1, 0)) == PlacementOutcome.SELF_DROP
        assert not game.try_place(gear, (1, 0))

        assert board_snapshot(game) == before
        assert game.active_path == path_before
        assert game.drain_events() == []

    def test_destroyed_gear(self, game):
        """A gear consumed by a merge can no longer be dropped."""
        dragged = game.spawn_gear(N, 0, (0, 0))
        game.spawn_gear(N, 0, (1, 0))
        game.try_place(dragged, (1, 0))
        game.drain_events()

        assert game.place(dragged, (3, 3)) == PlacementOutcome.NOT_ON_BOARD
        assert game.get_gear((3, 3)) is None
        assert game.drain_events() == []

    def test_outcome_success_flags(self):
        assert PlacementOutcome.PLACED.succeeded
        assert PlacementOutcome.MERGED.succeeded
        assert PlacementOutcome.SWAPPED.succeeded
        assert not PlacementOutcome.OUT_OF_BOUNDS.succeeded
        assert not PlacementOutcome.MERGE_AT_CAP.succeeded
        assert not PlacementOutcome.SELF_DROP.succeeded
        assert not PlacementOutcome.NOT_ON_BOARD.succeeded


class TestBoardInvariant:
    """The grid and gear positions stay consistent through any sequence."""

    def test_invariant_after_mixed_transactions(self, game):
        m = game.spawn_gear(M, 0, (0, 0))
        c = game.spawn_gear(C, 1, (1, 0))
        n1 = game.spawn_gear(N, 0, (2, 0))
        n2 = game.spawn_gear(N, 0, (3, 0))
        x = game.spawn_gear(X, 0, (4, 0))

        game.try_place(n1, (3, 0))        # merge
        game.try_place(m, (4, 0))         # swap
        game.try_place(c, (5, 5))         # move
        game.try_place(x, (-2, 9))        # rejected
        game.try_place(c, (5, 5))         # self drop

        positions = [gear.position for gear in game.grid.iter_gears()]
        assert len(positions) == len(set(positions))
        for gear in game.grid.iter_gears():
            assert game.grid.get(gear.position) is gear
        assert len(game.registry) == 4
        assert n2 not in game.registry
