"""Human and CPU players.

A player owns one Board and talks to the person at the keyboard through a
Console. The session only ever uses the abstract interface:

    place_ships(lengths)        put the fleet on the board
    get_shot()                  FireCommand(coord) or QuitCommand()
    check_fired_shot(coord)     defender side: resolve an incoming shot
    record_shot(coord, result)  attacker side: remember the outcome
    is_defeated()               no ship tiles left
"""

from __future__ import annotations

import abc
import logging
import random
from typing import Any, Optional, Sequence

from .battleship import Board, ShotResult
from .bot_logic import BotLogic
from .commands import Command, CommandParseError, FireCommand, QuitCommand, parse_command
from .coord_utils import Coordinate, Direction, format_coord
from .io_utils import INVALID_INPUT, Console
from .placement_wizard import run as place_ships_manually

logger = logging.getLogger(__name__)


class PlacementError(RuntimeError):
    """Raised when the requested fleet cannot be fitted on the board."""


class Player(abc.ABC):
    """Shared shot bookkeeping and display for both player variants."""

    kind: str = ""

    def __init__(self, name: str, board_size: int, *, console: Optional[Console] = None) -> None:
        self.name = name
        self.board = Board(board_size)
        self.console = console if console is not None else Console()

    # ------------------------------------------------------------------ #
    # Variant-specific behaviour
    # ------------------------------------------------------------------ #
    @abc.abstractmethod
    def place_ships(self, lengths: Sequence[int]) -> None:
        """Place one ship per entry of *lengths*."""

    @abc.abstractmethod
    def get_shot(self) -> Command:
        """Return the next shot, or QuitCommand if the player leaves the game."""

    # ------------------------------------------------------------------ #
    # Shared behaviour
    # ------------------------------------------------------------------ #
    def check_fired_shot(self, coord: Coordinate) -> ShotResult:
        """Resolve a shot fired at this player, reusing the result of a repeat."""
        result = self.board.get_received_at(coord)
        if result is None:
            result = self.board.fire_shot_at(coord)
        else:
            logger.debug("check_fired_shot() – %s repeated %s, keeping %s", self.name, coord, result.name)
        self.console.say(result.message)
        return result

    def record_shot(self, coord: Coordinate, result: ShotResult) -> None:
        """Store the outcome of a shot this player fired and show the shot grid."""
        self.board.set_result_at(coord, result)
        self.console.say()
        self.console.say(self.board.render_shot_grid())

    def is_defeated(self) -> bool:
        return self.board.all_ships_sunk()

    def display_grid(self) -> None:
        """Show the own fleet with received damage next to the shot grid."""
        self.console.say_grids(
            self.board.ship_grid_rows(),
            self.board.shot_grid_rows(),
            header_left="Ship grid",
            header_right="Shot grid",
        )

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #
    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "name": self.name, "board": self.board.to_dict()}

    @staticmethod
    def from_dict(
        data: dict[str, Any],
        *,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
    ) -> Player:
        """Rebuild a HumanPlayer or CPUPlayer from its to_dict() form."""
        try:
            kind = data["kind"]
            name = str(data["name"])
            board = Board.from_dict(data["board"])
            player: Player
            if kind == HumanPlayer.kind:
                player = HumanPlayer(name, board.size, console=console)
            elif kind == CPUPlayer.kind:
                bot = BotLogic.from_dict(data.get("bot") or {}, rng=rng)
                player = CPUPlayer(name, board.size, console=console, bot=bot)
            else:
                raise ValueError(f"Unknown player kind: {kind!r}")
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed player data: {exc!r}") from exc
        player.board = board
        return player


class HumanPlayer(Player):
    """A player at the keyboard."""

    kind = "human"

    def place_ships(self, lengths: Sequence[int]) -> None:
        place_ships_manually(self.board, lengths, self.console, self.name)

    def get_shot(self) -> Command:
        self.console.say(f"\nIt's {self.name}'s turn.")
        self.console.say(self.board.render_shot_grid())

        while True:
            try:
                line = self.console.ask('\nInput a coordinate, or "exit" to quit (and save the game if you wish): ')
            except EOFError:
                logger.info("Input closed during %s's turn, treating as exit", self.name)
                return QuitCommand()
            try:
                cmd = parse_command(line)
            except CommandParseError:
                self.console.say(INVALID_INPUT)
                continue
            if isinstance(cmd, QuitCommand):
                return cmd
            if self.board.is_outside(*cmd.coord):
                self.console.say("Input coordinates are out of bounds.\n")
                continue
            if self.board.get_result_at(cmd.coord) is not None:
                self.console.say("The specified coordinate has already been targeted.\n")
                continue
            self.console.say(f"Shooting in {format_coord(cmd.coord)}")
            return cmd

    def record_shot(self, coord: Coordinate, result: ShotResult) -> None:
        super().record_shot(coord, result)
        # Let the player read the result before the other side moves
        self.console.pause()


class CPUPlayer(Player):
    """An automated player driven by BotLogic."""

    kind = "cpu"

    def __init__(
        self,
        name: str,
        board_size: int,
        *,
        console: Optional[Console] = None,
        rng: Optional[random.Random] = None,
        bot: Optional[BotLogic] = None,
    ) -> None:
        super().__init__(name, board_size, console=console)
        self.bot = bot if bot is not None else BotLogic(rng=rng)

    @property
    def rng(self) -> random.Random:
        return self.bot.rng

    def place_ships(self, lengths: Sequence[int]) -> None:
        """Drop every ship at a random spot, giving up after size² tries per ship."""
        self.console.say(f"\n{self.name} is positioning its ships.")
        size = self.board.size
        directions = list(Direction)
        max_attempts = size * size

        for length in lengths:
            for attempt in range(1, max_attempts + 1):
                coord = Coordinate(self.rng.randrange(size), self.rng.randrange(size))
                direction = self.rng.choice(directions)
                if self.board.place_ship(coord, direction, length):
                    logger.debug("place_ships() – %s placed length %d after %d attempts", self.name, length, attempt)
                    break
            else:
                raise PlacementError(
                    f"Couldn't place all ships: no room for a {length} tiles ship after {max_attempts} attempts"
                )

    def get_shot(self) -> Command:
        self.console.say(f"\nIt's {self.name}'s turn.")
        self.console.say("Thinking...")
        coord = self.bot.choose_shot(self.board)
        self.console.say(f"Shooting in {format_coord(coord)}")
        return FireCommand(coord=coord)

    def record_shot(self, coord: Coordinate, result: ShotResult) -> None:
        super().record_shot(coord, result)
        self.bot.register_result(coord, result)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["bot"] = self.bot.to_dict()
        return data
