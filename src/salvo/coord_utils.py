"""Grid coordinates, cardinal directions and their console spelling.

Coordinates are written column-letter first followed by a zero-based row
number, e.g. ``A0`` is the top-left cell and ``C7`` is column 2, row 7.
"""

from __future__ import annotations

import enum
import re
from typing import NamedTuple

# Column letter followed by one or two row digits, e.g. "A3", "z25"
COORD_RE = re.compile(r"^[A-Za-z]\d{1,2}$")


class Coordinate(NamedTuple):
    """A cell position: *x* is the column, *y* the row, both 0-indexed."""

    x: int
    y: int

    def step(self, direction: Direction, distance: int = 1) -> Coordinate:
        """Return the coordinate *distance* cells away along *direction*."""
        return Coordinate(self.x + direction.dx * distance, self.y + direction.dy * distance)


class Direction(enum.Enum):
    """The four cardinal directions as unit deltas on the grid."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> Direction:
        return Direction((-self.dx, -self.dy))

    @classmethod
    def from_delta(cls, dx: int, dy: int) -> Direction:
        """Map an axis-aligned delta to its direction.

        Only the sign matters, so ``(0, 3)`` is DOWN. Diagonal and zero deltas
        have no direction and raise ValueError.
        """
        if dx == 0 and dy < 0:
            return cls.UP
        if dx == 0 and dy > 0:
            return cls.DOWN
        if dx < 0 and dy == 0:
            return cls.LEFT
        if dx > 0 and dy == 0:
            return cls.RIGHT
        raise ValueError(f"No direction for delta ({dx}, {dy})")

    @classmethod
    def from_letter(cls, letter: str) -> Direction:
        """'U' / 'D' / 'L' / 'R' (any case) → direction."""
        letters = {"U": cls.UP, "D": cls.DOWN, "L": cls.LEFT, "R": cls.RIGHT}
        try:
            return letters[letter.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown direction letter: {letter!r}") from None


def parse_coordinate(text: str) -> Coordinate:
    """Translate a console coordinate like 'B7' into a Coordinate(1, 7)."""
    raw = text.strip()
    if not COORD_RE.match(raw):
        raise ValueError(f"Invalid coordinate: {text!r}")
    x = ord(raw[0].upper()) - ord("A")
    y = int(raw[1:])
    return Coordinate(x, y)


def format_coord(coord: Coordinate) -> str:
    """Coordinate(1, 7) → 'B7'."""
    return f"{chr(ord('A') + coord.x)}{coord.y}"
