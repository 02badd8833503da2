"""Two-player game session: setup validation, the turn loop and its snapshot.

Turn protocol
-------------
1. The attacker picks a shot (``get_shot``); a QuitCommand ends the loop
   without resolving anything.
2. The defender resolves it on its own board (``check_fired_shot``).
3. The attacker records the outcome on its fired grid (``record_shot``).
4. Unless the defender is now defeated, attacker and defender swap seats.
5. The turn counter goes up by one.

Observers subscribe to the emitted events (see ``events.py``); the session
itself never writes to the console.
"""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from . import config as _cfg
from .commands import QuitCommand
from .events import Category, Event
from .io_utils import Console
from .players import Player

logger = logging.getLogger(__name__)

STATE_FORMAT = 1


class SetupError(ValueError):
    """Raised when the requested board or fleet is outside the game limits."""


@dataclass(frozen=True)
class GameSettings:
    """Validated board size and fleet for a new game."""

    board_size: int
    ship_lengths: tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "ship_lengths", tuple(self.ship_lengths))
        if not _cfg.MIN_BOARD_SIZE <= self.board_size <= _cfg.MAX_BOARD_SIZE:
            raise SetupError(
                f"Board size must be from {_cfg.MIN_BOARD_SIZE} to {_cfg.MAX_BOARD_SIZE}, got {self.board_size}"
            )
        high = _cfg.max_ships(self.board_size)
        if not _cfg.MIN_SHIPS <= len(self.ship_lengths) <= high:
            raise SetupError(f"Number of ships must be from {_cfg.MIN_SHIPS} to {high}, got {len(self.ship_lengths)}")
        for length in self.ship_lengths:
            if not 1 <= length <= _cfg.MAX_SHIP_LENGTH:
                raise SetupError(f"Ship length must be from 1 to {_cfg.MAX_SHIP_LENGTH}, got {length}")


@dataclass
class GameState:
    """Snapshot of a game in progress, used only for save / load."""

    attacker: Player
    defender: Player
    turn: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": STATE_FORMAT,
            "turn": self.turn,
            "attacker": self.attacker.to_dict(),
            "defender": self.defender.to_dict(),
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
    ) -> GameState:
        """Rebuild a snapshot. Raises ValueError if *data* is not a valid state."""
        if not isinstance(data, dict):
            raise ValueError(f"Game state must be an object, got {type(data).__name__}")
        if data.get("format") != STATE_FORMAT:
            raise ValueError(f"Unsupported game state format: {data.get('format')!r}")
        try:
            turn = int(data["turn"])
            attacker = Player.from_dict(data["attacker"], console=console, rng=rng)
            defender = Player.from_dict(data["defender"], console=console, rng=rng)
        except (KeyError, TypeError, OverflowError) as exc:
            raise ValueError(f"Malformed game state: {exc!r}") from exc
        if attacker.board.size != defender.board.size:
            raise ValueError("Players have boards of different sizes")
        return cls(attacker=attacker, defender=defender, turn=turn)


class TurnOutcome(enum.Enum):
    CONTINUE = "continue"
    VICTORY = "victory"
    QUIT = "quit"


class GameSession:
    """Runs the alternating turns between two players."""

    def __init__(self, attacker: Player, defender: Player, *, turn: int = 0) -> None:
        self.attacker = attacker
        self.defender = defender
        self.turn = turn
        self._subs: List[Callable[[Event], None]] = []

    @classmethod
    def from_state(cls, state: GameState) -> GameSession:
        return cls(state.attacker, state.defender, turn=state.turn)

    def snapshot(self) -> GameState:
        return GameState(attacker=self.attacker, defender=self.defender, turn=self.turn)

    # -------------------- events --------------------
    def subscribe(self, callback: Callable[[Event], None]) -> None:
        self._subs.append(callback)

    def _emit(self, event: Event) -> None:
        for cb in self._subs:
            cb(event)

    # -------------------- state --------------------
    @property
    def finished(self) -> bool:
        return self.defender.is_defeated()

    @property
    def winner(self) -> Player | None:
        # The attacker keeps its seat after the winning shot
        return self.attacker if self.finished else None

    @property
    def loser(self) -> Player | None:
        return self.defender if self.finished else None

    # -------------------- turn loop --------------------
    def play_turn(self) -> TurnOutcome:
        """Play one attacker move and return how the game stands afterwards."""
        if self.finished:
            return TurnOutcome.VICTORY

        self._emit(Event(Category.TURN, "start", {"turn": self.turn, "attacker": self.attacker.name}))
        cmd = self.attacker.get_shot()
        if isinstance(cmd, QuitCommand):
            logger.info("%s left the game at turn %d", self.attacker.name, self.turn + 1)
            self._emit(Event(Category.SYSTEM, "quit", {"turn": self.turn, "player": self.attacker.name}))
            return TurnOutcome.QUIT

        result = self.defender.check_fired_shot(cmd.coord)
        self.attacker.record_shot(cmd.coord, result)
        self._emit(
            Event(
                Category.TURN,
                "shot",
                {"turn": self.turn, "attacker": self.attacker.name, "coord": cmd.coord, "result": result},
            )
        )

        if not self.defender.is_defeated():
            self.attacker, self.defender = self.defender, self.attacker
        self.turn += 1

        if self.finished:
            logger.info("%s won in %d turns", self.attacker.name, self.turn)
            self._emit(Event(Category.TURN, "end", {"turns": self.turn, "winner": self.attacker.name}))
            return TurnOutcome.VICTORY
        return TurnOutcome.CONTINUE

    def run(self) -> TurnOutcome:
        """Play turns until somebody wins or the attacker quits."""
        while True:
            outcome = self.play_turn()
            if outcome is not TurnOutcome.CONTINUE:
                return outcome
