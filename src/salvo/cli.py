"""Console front-end: game setup, the turn loop, save on exit and the final report."""

from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import Optional

from . import config as _cfg
from . import encryption as _encryption
from .events import Category, Event
from .io_utils import INVALID_INPUT, Console
from .players import CPUPlayer, HumanPlayer, PlacementError, Player
from .savefile import SaveFileError, SaveIOError, SaveNotFoundError, load_game, save_game
from .session import GameSession, GameSettings, TurnOutcome

logger = logging.getLogger(__name__)


def describe_save_error(exc: SaveFileError) -> str:
    """Player-facing wording for each save failure category."""
    if isinstance(exc, SaveNotFoundError):
        return "File not found."
    if isinstance(exc, SaveIOError):
        return "An I/O error has occurred."
    return "The specified save file is corrupted."


# ---------------------------- setup -----------------------------


def ask_settings(console: Console) -> GameSettings:
    """Prompt for board size, fleet size and every ship length."""
    size = console.ask_int(
        f"\nInput the board size (from {_cfg.MIN_BOARD_SIZE} to {_cfg.MAX_BOARD_SIZE}): ",
        _cfg.MIN_BOARD_SIZE,
        _cfg.MAX_BOARD_SIZE,
    )
    high = _cfg.max_ships(size)
    count = console.ask_int(
        f"\nInput the number of ships to be positioned (from {_cfg.MIN_SHIPS} to {high}): ",
        _cfg.MIN_SHIPS,
        high,
    )
    console.say()
    lengths = [
        console.ask_int(f"Input the length of ship n. {i + 1} (from 1 to {_cfg.MAX_SHIP_LENGTH}): ", 1, _cfg.MAX_SHIP_LENGTH)
        for i in range(count)
    ]
    return GameSettings(board_size=size, ship_lengths=lengths)


def ask_player(console: Console, seat: int, board_size: int, rng: random.Random) -> Player:
    """Ask whether seat 1 or 2 is a human or the CPU and build that player."""
    if seat == 1:
        console.say("\nInput the type of the first player (Who will attack first)")
    else:
        console.say("\nInput the type of the second player.")
    while True:
        answer = console.ask('"H" for a human player, "C" for a CPU player: ').strip().upper()
        if answer == "H":
            name = console.ask("\nInput the player's name: ").strip() or f"Player {seat}"
            return HumanPlayer(name, board_size, console=console)
        if answer == "C":
            return CPUPlayer(_cpu_name(seat), board_size, console=console, rng=rng)
        console.say(INVALID_INPUT)


def _cpu_name(seat: int) -> str:
    return _cfg.CPU_NAME_FIRST if seat == 1 else _cfg.CPU_NAME_SECOND


def new_game(console: Console, rng: random.Random, *, cpu_only: bool = False) -> GameSession:
    """Collect settings and players, then let both place their fleets."""
    settings = ask_settings(console)
    if cpu_only:
        attacker: Player = CPUPlayer(_cpu_name(1), settings.board_size, console=console, rng=rng)
        defender: Player = CPUPlayer(_cpu_name(2), settings.board_size, console=console, rng=rng)
    else:
        attacker = ask_player(console, 1, settings.board_size, rng)
        defender = ask_player(console, 2, settings.board_size, rng)

    attacker.place_ships(settings.ship_lengths)
    defender.place_ships(settings.ship_lengths)
    logger.info("New %dx%d game, fleet %s", settings.board_size, settings.board_size, settings.ship_lengths)
    return GameSession(attacker, defender)


def setup(
    console: Console,
    rng: random.Random,
    *,
    save_dir: Optional[Path] = None,
    cpu_only: bool = False,
) -> GameSession:
    """Offer to resume a saved game, otherwise start a new one."""
    while True:
        if console.ask_yes_no("\nDo you want to load a saved game (Y/N)? "):
            name = console.ask("Input game name to load: ").strip()
            try:
                state = load_game(name, save_dir=save_dir, console=console, rng=rng)
            except SaveFileError as exc:
                logger.warning("Loading %r failed: %s", name, exc)
                console.say(describe_save_error(exc))
                console.say(f'\nGame "{name}" cannot be loaded. Please try again.')
                continue
            console.say(f'\nGame "{name}" loaded.')
            return GameSession.from_state(state)
        console.say("\nStarting a new game.")
        return new_game(console, rng, cpu_only=cpu_only)


# ---------------------------- play -----------------------------


def offer_save(session: GameSession, console: Console, *, save_dir: Optional[Path] = None) -> Optional[Path]:
    """Ask to save after a quit; retry on failure until saved or declined."""
    while True:
        if not console.ask_yes_no("\nDo you want to save the game before quitting (Y/N)? "):
            return None
        name = console.ask("Input game name to save: ").strip()
        try:
            path = save_game(session.snapshot(), name, save_dir=save_dir)
        except SaveFileError as exc:
            console.say(describe_save_error(exc))
            console.say(f'Game "{name}" cannot be saved. Please try again.')
            continue
        console.say(f'Game "{name}" saved.')
        return path


def report_winner(session: GameSession, console: Console) -> None:
    winner, loser = session.winner, session.loser
    assert winner is not None and loser is not None
    console.say("\n=======================================")
    console.say(f"Game completed in {session.turn} turns.")
    console.say(f"The winner is {winner.name}!")
    console.say()
    console.say("Final situation")
    console.say()
    console.say(f"{winner.name} (Winner)")
    console.say()
    winner.display_grid()
    console.say()
    console.say(f"{loser.name} (Loser)")
    console.say()
    loser.display_grid()


def play(session: GameSession, console: Console, *, save_dir: Optional[Path] = None) -> TurnOutcome:
    """Run the game to the end (or a quit) and handle what follows."""

    def on_event(event: Event) -> None:
        if event.category is Category.TURN and event.type == "start":
            console.say(f"\nStarting turn {event.payload['turn'] + 1}.")
        else:
            logger.debug("event %s/%s %r", event.category.name, event.type, event.payload)

    session.subscribe(on_event)
    outcome = session.run()
    if outcome is TurnOutcome.QUIT:
        offer_save(session, console, save_dir=save_dir)
    else:
        report_winner(session, console)
    return outcome


# ---------------------------- entry point -----------------------------


def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="salvo", description="Console Battleship against a friend or the CPU")
    parser.add_argument("--load", metavar="NAME", help="Resume the saved game NAME without the load prompt")
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for the CPU players' random source (default: SALVO_SEED)"
    )
    parser.add_argument("--save-dir", type=Path, default=None, help="Directory for save files")
    parser.add_argument("--debug", action="store_true", default=_cfg.DEBUG, help="Enable debug logging")
    parser.add_argument("--cpu-vs-cpu", action="store_true", help="Both seats are CPU players")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None, *, console: Optional[Console] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        seed = args.seed if args.seed is not None else _cfg.seed()
        key = _cfg.save_key()
        if key is not None:
            _encryption.enable_encryption(key)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    console = console if console is not None else Console()
    rng = random.Random(seed)

    console.say("BATTLESHIPS!!!")
    try:
        if args.load:
            try:
                session = GameSession.from_state(load_game(args.load, save_dir=args.save_dir, console=console, rng=rng))
            except SaveFileError as exc:
                logger.error("Cannot load %r: %s", args.load, exc)
                console.say(describe_save_error(exc))
                return 1
            console.say(f'\nGame "{args.load}" loaded.')
        else:
            session = setup(console, rng, save_dir=args.save_dir, cpu_only=args.cpu_vs_cpu)

        if not args.cpu_vs_cpu:
            console.pause("\nPreparations completed. Press enter to start the game. ")
        play(session, console, save_dir=args.save_dir)
    except PlacementError as exc:
        logger.error("Game setup aborted: %s", exc)
        console.say(f"\n{exc}")
        return 1
    except EOFError:
        logger.info("Input closed, leaving")
        console.say("\nInput closed.")

    console.say("\nBye!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
