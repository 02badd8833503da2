# placement_wizard.py
"""
Interactive manual-placement helper for human players.
Console-based usage:
    run(board, lengths, console, name)
Returns once every ship in *lengths* is on the board; EOFError propagates if
the input closes mid-way.
"""

from typing import Sequence

from .battleship import Board
from .commands import CommandParseError, parse_placement
from .io_utils import INVALID_INPUT, Console


def run(board: Board, lengths: Sequence[int], console: Console, name: str) -> None:
    console.say(f"\n{name}, please position your ships.\n")

    for length in lengths:
        # Show the fleet so far to help pick the next spot
        console.say(board.render_ship_grid())
        while True:
            if length == 1:
                console.say(f"{name}, input the coordinate to place a 1 tile ship at.")
                hint = '\nAccepted inputs look like "A3" or "D5": '
            else:
                console.say(
                    f"{name}, input the coordinate to place a {length} tiles ship at,\n"
                    "as well as the direction to place it in (R=right, L=left, U=up, D=down)."
                )
                hint = '\nAccepted inputs look like "A3 R" or "D5 D": '

            while True:
                try:
                    cmd = parse_placement(console.ask(hint), length)
                    break
                except CommandParseError:
                    console.say(INVALID_INPUT)
            console.say()

            if board.place_ship(cmd.coord, cmd.direction, length):
                break
            console.say("The specified ship could not be placed. Please try again.\n")
