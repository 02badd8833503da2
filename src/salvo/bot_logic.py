from __future__ import annotations

import enum
import logging
import random
from typing import Any, Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from . import config as _cfg
from .battleship import NO_RESULT, Board, ShotResult
from .coord_utils import Coordinate, Direction

logger = logging.getLogger(__name__)

# Density-map base classes
DEAD = 0  # already hit, never a target again
BLOCKED = 1  # a miss, or touching a hit (ships keep a one-cell buffer)
OPEN = 2  # may still hide an undiscovered ship


class TargetingError(RuntimeError):
    """Raised when the targeting memory contradicts the shots on the board."""


class BotMode(enum.Enum):
    """Which search the CPU runs next turn."""

    HUNT = "hunt"  # no wounded ship: density-map search
    PROBE = "probe"  # one hit, orientation unknown: try the four neighbours
    SWEEP = "sweep"  # orientation known: extend along it, reversing once blocked


class BotLogic:
    """
    Hunt / target state machine for the CPU player.
    -----------------------------------------------
    1. Hunt: score every open cell by how many ship windows (length 4..2,
       horizontal and vertical) fit over it, and fire at a random cell
       among the best scores.
    2. Probe: after the first hit on a ship, fire at its orthogonal
       neighbours starting from a random direction.
    3. Sweep: once two hits give the orientation, keep extending; when the
       far end is blocked, reverse and walk back past the known hits.
    A SINK drops back to hunting.

    All state that must survive between turns (and save/load) is the pair
    ``last_hit_position`` / ``last_hit_direction``.
    """

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        max_ship_length: int = _cfg.MAX_SHIP_LENGTH,
    ) -> None:
        self.rng = rng if rng is not None else random.Random(_cfg.seed())
        self.max_ship_length = max_ship_length
        self.last_hit_position: Optional[Coordinate] = None
        self.last_hit_direction: Optional[Direction] = None

    @property
    def mode(self) -> BotMode:
        if self.last_hit_position is None:
            return BotMode.HUNT
        if self.last_hit_direction is None:
            return BotMode.PROBE
        return BotMode.SWEEP

    # ------------------------------------------------------------------ #
    # Shot selection
    # ------------------------------------------------------------------ #
    def choose_shot(self, board: Board) -> Coordinate:
        """Pick the next target using the shots recorded on *board*'s fired grid."""
        mode = self.mode
        if mode is BotMode.HUNT:
            shot = self._hunt(board)
        elif mode is BotMode.PROBE:
            shot = self._probe(board)
        else:
            shot = self._sweep(board)
        logger.debug("choose_shot() – mode=%s shot=%s", mode.value, shot)
        return shot

    def base_classes(self, board: Board) -> np.ndarray:
        """Per-cell DEAD / BLOCKED / OPEN classification, indexed [y, x]."""
        results = board.shot_grid
        hits = results >= int(ShotResult.HIT)
        n = board.size

        # Any of the 8 neighbours hit?
        padded = np.pad(hits, 1)
        near_hit = np.zeros_like(hits)
        for dy in range(3):
            for dx in range(3):
                if (dy, dx) != (1, 1):
                    near_hit |= padded[dy : dy + n, dx : dx + n]

        classes = np.full((n, n), OPEN, dtype=np.int32)
        classes[near_hit | (results == int(ShotResult.MISS))] = BLOCKED
        classes[hits] = DEAD
        return classes

    def density_map(self, board: Board) -> np.ndarray:
        """Base classes plus one point per fitting ship window covering the cell.

        Length-1 ships are skipped: every OPEN cell fits one, so they add
        nothing to tell cells apart.
        """
        density = self.base_classes(board)
        open_cells = density > BLOCKED
        n = board.size
        for length in range(min(self.max_ship_length, n), 1, -1):
            for grid, vertical in ((open_cells, False), (open_cells.T, True)):
                # fits[r, s]: the window starting at s along row r is all open
                fits = sliding_window_view(grid, length, axis=1).all(axis=-1)
                cover = np.zeros((n, n), dtype=density.dtype)
                for offset in range(length):
                    cover[:, offset : offset + fits.shape[1]] += fits
                density += cover.T if vertical else cover
        return density

    def _hunt(self, board: Board) -> Coordinate:
        density = self.density_map(board)
        peak = max(OPEN, int(density.max()))
        # Column-major scan (x outer, y inner) fixes the order ties are drawn from
        candidates = [Coordinate(int(x), int(y)) for x, y in np.argwhere(density.T == peak)]
        if not candidates:
            candidates = [Coordinate(int(x), int(y)) for x, y in np.argwhere(board.shot_grid.T == NO_RESULT)]
            logger.debug("_hunt() – no open cells left, falling back to %d untried cells", len(candidates))
        if not candidates:
            raise TargetingError("No untried cell left to fire at")
        logger.debug("_hunt() – peak density=%d over %d cells", peak, len(candidates))
        return candidates[self.rng.randrange(len(candidates))]

    def _probe(self, board: Board) -> Coordinate:
        assert self.last_hit_position is not None  # for type-checkers
        directions = list(Direction)
        start = self.rng.randrange(len(directions))
        for k in range(len(directions)):
            direction = directions[(start + k) % len(directions)]
            candidate = self.last_hit_position.step(direction)
            if not board.is_outside(*candidate) and board.get_result_at(candidate) is None:
                return candidate
        raise TargetingError(f"Hit at {self.last_hit_position} has no untried neighbour")

    def _sweep(self, board: Board) -> Coordinate:
        assert self.last_hit_position is not None and self.last_hit_direction is not None
        position = self.last_hit_position
        candidate = position.step(self.last_hit_direction)
        if not board.is_outside(*candidate) and board.get_result_at(candidate) is None:
            return candidate

        # Far end blocked: turn around and walk back over the hits already made
        direction = self.last_hit_direction.opposite
        candidate = position.step(direction)
        while not board.is_outside(*candidate) and board.get_result_at(candidate) is ShotResult.HIT:
            position = candidate
            candidate = candidate.step(direction)
        if board.is_outside(*candidate) or board.get_result_at(candidate) is not None:
            raise TargetingError(f"Ship through {self.last_hit_position} is closed at both ends but not sunk")
        self.last_hit_position = position
        self.last_hit_direction = direction
        logger.debug("_sweep() – reversed to %s, resuming from %s", direction.name, position)
        return candidate

    # ------------------------------------------------------------------ #
    # Result handling
    # ------------------------------------------------------------------ #
    def register_result(self, coord: Coordinate, result: ShotResult) -> None:
        """Update the hunt/target memory after firing at *coord*."""
        if result is ShotResult.HIT:
            if self.last_hit_position is not None:
                self.last_hit_direction = Direction.from_delta(
                    coord.x - self.last_hit_position.x, coord.y - self.last_hit_position.y
                )
            self.last_hit_position = coord
        elif result is ShotResult.SINK:
            self.reset()
        logger.debug(
            "register_result() – %s %s -> position=%s direction=%s",
            coord,
            result.name,
            self.last_hit_position,
            self.last_hit_direction.name if self.last_hit_direction else None,
        )

    def reset(self) -> None:
        """Forget the current target and go back to hunting."""
        self.last_hit_position = None
        self.last_hit_direction = None

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #
    def to_dict(self) -> dict[str, Any]:
        pos = self.last_hit_position
        return {
            "last_hit_position": [pos.x, pos.y] if pos is not None else None,
            "last_hit_direction": self.last_hit_direction.name if self.last_hit_direction else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, rng: Optional[random.Random] = None) -> BotLogic:
        bot = cls(rng=rng)
        try:
            pos = data.get("last_hit_position")
            direction = data.get("last_hit_direction")
            bot.last_hit_position = Coordinate(int(pos[0]), int(pos[1])) if pos is not None else None
            bot.last_hit_direction = Direction[direction] if direction is not None else None
        except (AttributeError, IndexError, KeyError, OverflowError, TypeError) as exc:
            raise ValueError(f"Malformed CPU memory: {exc!r}") from exc
        if bot.last_hit_direction is not None and bot.last_hit_position is None:
            raise ValueError("CPU memory has a direction but no hit position")
        return bot
