"""
battleship.py

Core data structures for a single player's side of the game:
 - ShotResult: outcome of one shot (and how it is drawn on the grids)
 - Ship: a hit counter for one placed ship
 - Board: ship placement with the one-cell buffer rule, shot resolution and
   the two result grids (shots fired by the owner, shots received)

Each player owns exactly one Board. Shots the owner fires are resolved on the
*opponent's* board and the outcome is written back into the owner's fired
grid, keyed by the targeted coordinate.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from . import config as _cfg
from .coord_utils import Coordinate, Direction

logger = logging.getLogger(__name__)

# Ship-grid cell value for open water
EMPTY = -1
# Result-grid cell value for "no shot yet"
NO_RESULT = 0


class ShotResult(int, enum.Enum):
    """Outcome of a shot. The integer value is what the result grids store."""

    MISS = 1
    HIT = 2
    SINK = 3

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def message(self) -> str:
        return _MESSAGES[self]

    @property
    def is_hit(self) -> bool:
        """True for HIT and SINK."""
        return self is not ShotResult.MISS


_SYMBOLS = {ShotResult.MISS: "o", ShotResult.HIT: "x", ShotResult.SINK: "X"}
_MESSAGES = {ShotResult.MISS: "Missed!", ShotResult.HIT: "Hit!", ShotResult.SINK: "Sunk!"}


@dataclass(slots=True)
class Ship:
    """A placed ship. Every board cell it covers refers to it by index."""

    length: int
    hits: int = 0

    @property
    def sunk(self) -> bool:
        return self.hits == self.length

    def shoot(self) -> bool:
        """Register one hit and return True if it sank the ship."""
        if self.sunk:
            raise ValueError("Ship is already sunk")
        self.hits += 1
        return self.sunk


def _result_or_none(value: Any) -> ShotResult | None:
    value = int(value)
    return ShotResult(value) if value != NO_RESULT else None


class Board:
    """
    A single player's square board.

    We store three parallel size×size numpy grids, all indexed ``[y, x]``:
      - ship_grid: index into ``self.ships`` for occupied cells, EMPTY otherwise
      - shot_grid: results of shots the owner has *fired*, keyed by target
      - received_grid: results of shots *received* on the owner's own cells

    ``ship_count`` is the number of ship tiles not yet hit; the owner is
    defeated once it reaches zero.
    """

    def __init__(self, size: int = _cfg.MIN_BOARD_SIZE):
        """Initialise an empty *size*×*size* board with no ships placed."""
        if size < 1:
            raise ValueError(f"Board size must be positive, got {size}")
        self.size = size
        self.ships: list[Ship] = []
        self.ship_grid = np.full((size, size), EMPTY, dtype=np.int16)
        self.shot_grid = np.zeros((size, size), dtype=np.int8)
        self.received_grid = np.zeros((size, size), dtype=np.int8)
        self.ship_count = 0

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def is_outside(self, x: int, y: int) -> bool:
        """Return True if (*x*, *y*) is off the board."""
        return x < 0 or y < 0 or x >= self.size or y >= self.size

    def is_ship_at(self, coord: Coordinate) -> bool:
        """Return True if a ship covers *coord*. *coord* must be on the board."""
        return int(self.ship_grid[coord.y, coord.x]) != EMPTY

    def ship_at(self, coord: Coordinate) -> Ship | None:
        idx = int(self.ship_grid[coord.y, coord.x])
        return self.ships[idx] if idx != EMPTY else None

    def get_ship_count(self) -> int:
        return self.ship_count

    def all_ships_sunk(self) -> bool:
        """Return True once every ship tile on this board has been hit."""
        return self.ship_count == 0

    # ------------------------------------------------------------------ #
    # Result grids
    # ------------------------------------------------------------------ #
    def get_result_at(self, coord: Coordinate) -> ShotResult | None:
        """Result of the shot this owner fired at *coord*, or None if untried."""
        return _result_or_none(self.shot_grid[coord.y, coord.x])

    def set_result_at(self, coord: Coordinate, result: ShotResult) -> None:
        self.shot_grid[coord.y, coord.x] = int(result)

    def get_received_at(self, coord: Coordinate) -> ShotResult | None:
        """Result of the shot received at *coord*, or None if never shot."""
        return _result_or_none(self.received_grid[coord.y, coord.x])

    def set_received_at(self, coord: Coordinate, result: ShotResult) -> None:
        self.received_grid[coord.y, coord.x] = int(result)

    # ------------------------------------------------------------------ #
    # Placement
    # ------------------------------------------------------------------ #
    def place_ship(self, coord: Coordinate, direction: Direction, length: int) -> bool:
        """Try to place a *length* ship from *coord* extending along *direction*.

        Fails without touching the board if either end is off the board or if
        any ship lies inside the placement's bounding box grown by one cell,
        so ships never touch, not even diagonally.
        """
        if length < 1:
            raise ValueError(f"Ship length must be positive, got {length}")
        end = coord.step(direction, length - 1)
        if self.is_outside(*coord) or self.is_outside(*end):
            return False

        left, right = sorted((coord.x, end.x))
        top, bottom = sorted((coord.y, end.y))

        # Bounding box plus buffer, clamped to the grid
        buffer_zone = self.ship_grid[max(0, top - 1) : bottom + 2, max(0, left - 1) : right + 2]
        if (buffer_zone != EMPTY).any():
            return False

        self.ships.append(Ship(length))
        self.ship_grid[top : bottom + 1, left : right + 1] = len(self.ships) - 1
        self.ship_count += length
        logger.debug("place_ship() – length=%d from %s to %s, ship_count=%d", length, coord, end, self.ship_count)
        return True

    # ------------------------------------------------------------------ #
    # Shot resolution
    # ------------------------------------------------------------------ #
    def fire_shot_at(self, coord: Coordinate) -> ShotResult:
        """Resolve a shot received at *coord* and record it in the received grid.

        A coordinate that was already shot keeps its recorded result and the
        board is left untouched.
        """
        previous = self.get_received_at(coord)
        if previous is not None:
            logger.debug("fire_shot_at() – %s already resolved as %s", coord, previous.name)
            return previous

        ship = self.ship_at(coord)
        if ship is None:
            result = ShotResult.MISS
        else:
            self.ship_count -= 1
            result = ShotResult.SINK if ship.shoot() else ShotResult.HIT

        self.set_received_at(coord, result)
        logger.debug("fire_shot_at() – %s -> %s, ship_count=%d", coord, result.name, self.ship_count)
        return result

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #
    def ship_grid_rows(self) -> list[str]:
        """Own fleet view: '#' intact ship cell, damage symbol if hit, '.' water."""
        rows: list[str] = []
        for y in range(self.size):
            cells = []
            for x in range(self.size):
                coord = Coordinate(x, y)
                if self.is_ship_at(coord):
                    received = self.get_received_at(coord)
                    cells.append(received.symbol if received is not None else "#")
                else:
                    cells.append(".")
            rows.append(" ".join(cells))
        return rows

    def shot_grid_rows(self) -> list[str]:
        """Targeting view: '.' untried, otherwise the result symbol."""
        rows: list[str] = []
        for y in range(self.size):
            cells = []
            for x in range(self.size):
                result = self.get_result_at(Coordinate(x, y))
                cells.append(result.symbol if result is not None else ".")
            rows.append(" ".join(cells))
        return rows

    def render_ship_grid(self) -> str:
        return self._render("Ship grid", self.ship_grid_rows())

    def render_shot_grid(self) -> str:
        return self._render("Shot grid", self.shot_grid_rows())

    def _render(self, title: str, rows: list[str]) -> str:
        header = "   " + " ".join(chr(ord("A") + i) for i in range(self.size))
        lines = [title, header]
        lines.extend(f"{y:2d} {row}" for y, row in enumerate(rows))
        return "\n".join(lines) + "\n"

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #
    def to_dict(self) -> dict[str, Any]:
        return {
            "size": self.size,
            "ship_count": self.ship_count,
            "ships": [{"length": s.length, "hits": s.hits} for s in self.ships],
            "ship_grid": self.ship_grid.tolist(),
            "shot_grid": self.shot_grid.tolist(),
            "received_grid": self.received_grid.tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Board:
        """Rebuild a board saved with to_dict(). Raises ValueError on bad data."""
        try:
            size = int(data["size"])
            if not 1 <= size <= _cfg.MAX_BOARD_SIZE:
                raise ValueError(f"Board size {size} out of range")
            board = cls(size)
            board.ships = [Ship(int(s["length"]), int(s["hits"])) for s in data["ships"]]
            board.ship_grid = np.asarray(data["ship_grid"], dtype=np.int16)
            board.shot_grid = np.asarray(data["shot_grid"], dtype=np.int8)
            board.received_grid = np.asarray(data["received_grid"], dtype=np.int8)
            board.ship_count = int(data["ship_count"])
        except (KeyError, TypeError, OverflowError) as exc:
            raise ValueError(f"Malformed board data: {exc!r}") from exc

        shape = (board.size, board.size)
        for name in ("ship_grid", "shot_grid", "received_grid"):
            if getattr(board, name).shape != shape:
                raise ValueError(f"{name} has shape {getattr(board, name).shape}, expected {shape}")
        if board.ship_grid.min() < EMPTY or board.ship_grid.max() >= len(board.ships):
            raise ValueError("ship_grid references an unknown ship")
        for grid in (board.shot_grid, board.received_grid):
            if grid.min() < NO_RESULT or grid.max() > ShotResult.SINK:
                raise ValueError("Result grid holds an unknown shot result")
        if any(s.length < 1 or not 0 <= s.hits <= s.length for s in board.ships):
            raise ValueError("Ship length or hit counter out of range")

        # Every ship covers exactly its length in cells, and the tile count matches the damage
        cells = np.bincount(board.ship_grid[board.ship_grid != EMPTY], minlength=len(board.ships))
        if cells.tolist() != [s.length for s in board.ships]:
            raise ValueError("ship_grid does not match the ship lengths")
        remaining = sum(s.length - s.hits for s in board.ships)
        if board.ship_count != remaining:
            raise ValueError(f"ship_count is {board.ship_count}, but {remaining} ship tiles are intact")
        return board
