"""
Text board layouts - predefined boards for demos and tests.
NO UI DEPENDENCIES.

One line per grid row, tokens separated by whitespace. The first line is
the top row (highest y), matching how the board looks on screen.

    .   empty cell
    M   motor
    C0  character of subtype 0 (C1, ...)
    N0  number gear of subtype 0 (N1, N2, N3)
    X0  multiplier gear of subtype 0 (X1, X2)
"""
import re
from dataclasses import dataclass, field
from typing import List, TYPE_CHECKING

from .gears import GearType, max_subtype
from .grid import Position

if TYPE_CHECKING:
    from .grid import Grid

TOKEN_TYPES = {
    'M': GearType.MOTOR,
    'C': GearType.CHARACTER,
    'N': GearType.NUMBER,
    'X': GearType.MULTIPLIER,
}
TYPE_TOKENS = {gear_type: letter for letter, gear_type in TOKEN_TYPES.items()}

_TOKEN_RE = re.compile(r'^([MCNX])(\d*)$')


@dataclass
class LayoutEntry:
    """One gear to place."""
    position: Position
    gear_type: GearType
    subtype: int = 0


@dataclass
class Layout:
    """A parsed board."""
    width: int
    height: int
    entries: List[LayoutEntry] = field(default_factory=list)


def parse_layout(text: str) -> Layout:
    """
    Parse a text board.
    Raises ValueError on ragged rows, unknown tokens or subtypes
    without a parameter table entry.
    """
    rows = [line.split() for line in text.strip().splitlines() if line.strip()]
    height = len(rows)
    width = len(rows[0]) if rows else 0

    entries: List[LayoutEntry] = []
    for row_index, tokens in enumerate(rows):
        if len(tokens) != width:
            raise ValueError(
                f"Row {row_index} has {len(tokens)} cells, expected {width}"
            )
        y = height - 1 - row_index
        for x, token in enumerate(tokens):
            if token == '.':
                continue
            match = _TOKEN_RE.match(token)
            if match is None:
                raise ValueError(f"Unknown layout token {token!r} at ({x}, {y})")
            letter, digits = match.groups()
            gear_type = TOKEN_TYPES[letter]
            subtype = int(digits) if digits else 0
            if subtype > max_subtype(gear_type):
                raise ValueError(
                    f"{gear_type.name} has no subtype {subtype} at ({x}, {y}) "
                    f"(valid: 0..{max_subtype(gear_type)})"
                )
            entries.append(LayoutEntry(position=(x, y), gear_type=gear_type, subtype=subtype))

    return Layout(width=width, height=height, entries=entries)


def render_board(grid: 'Grid', mark_active: bool = True) -> str:
    """
    Render a grid back into layout text.
    Active gears get a trailing '*' when mark_active is set.
    """
    lines = []
    for y in range(grid.height - 1, -1, -1):
        tokens = []
        for x in range(grid.width):
            gear = grid.get((x, y))
            if gear is None:
                tokens.append('.')
                continue
            token = TYPE_TOKENS[gear.gear_type]
            if gear.gear_type != GearType.MOTOR:
                token += str(gear.subtype)
            if mark_active and gear.active:
                token += '*'
            tokens.append(token)
        lines.append(' '.join(f"{t:<3}" for t in tokens).rstrip())
    return '\n'.join(lines)


# Motor on the left feeding a Round character through a bonus chain;
# a second, unpowered island sits on the right.
DEMO_LAYOUT = """
.  .  .  .  .  .
M  N0 X0 C0 .  .
.  .  .  .  .  .
.  .  .  .  N1 .
.  .  .  .  C1 .
.  .  .  .  .  .
"""
