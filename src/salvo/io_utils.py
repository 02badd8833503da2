# io_utils.py
"""
Console helpers shared by the players, the placement wizard and the CLI
–––––––––––––––––––––––––––––––––––––––––––––––––––––––––––––––––––––––
• Console.say()        – print a line for the player
• Console.ask()        – prompt and read one line (EOFError when input closes)
• Console.ask_yes_no() – Y/N prompt, repeated until answered
• Console.ask_int()    – bounded integer prompt, repeated until valid
• Console.pause()      – "Press enter" style wait
• Console.say_grids()  – two boards next to each other (final report)

Everything player-facing goes through a Console so tests can drive a whole
game with StringIO objects instead of a terminal.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

logger = logging.getLogger(__name__)

INVALID_INPUT = "Invalid input. Please try again."
INVALID_NUMBER = "Invalid input. Please input a numeric value."


class Console:
    """Line-oriented text I/O bound to a reader and a writer."""

    def __init__(self, reader: TextIO | None = None, writer: TextIO | None = None) -> None:
        self.reader = reader if reader is not None else sys.stdin
        self.writer = writer if writer is not None else sys.stdout

    def say(self, msg: str = "") -> None:
        print(msg, file=self.writer, flush=True)

    def ask(self, prompt: str) -> str:
        """Show *prompt* and return the next input line without its newline."""
        self.writer.write(prompt)
        self.writer.flush()
        line = self.reader.readline()
        if not line:
            logger.debug("ask() – input closed at prompt %r", prompt)
            raise EOFError("Input closed")
        return line.rstrip("\r\n")

    def ask_yes_no(self, prompt: str) -> bool:
        while True:
            answer = self.ask(prompt).strip().upper()
            if answer == "Y":
                return True
            if answer == "N":
                return False
            self.say(INVALID_INPUT)

    def ask_int(self, prompt: str, low: int, high: int) -> int:
        """Prompt until an integer within [*low*, *high*] is entered."""
        while True:
            raw = self.ask(prompt).strip()
            try:
                value = int(raw)
            except ValueError:
                self.say(INVALID_NUMBER)
                continue
            if low <= value <= high:
                return value
            self.say(INVALID_INPUT)

    def pause(self, prompt: str = "Press enter to continue. ") -> None:
        self.ask(prompt)

    def say_grids(
        self,
        left_rows: list[str],
        right_rows: list[str],
        *,
        header_left: str,
        header_right: str,
    ) -> None:
        """Print two equally sized grids side-by-side with centred headers."""
        if not left_rows or not right_rows:
            return

        columns = len(left_rows[0].split())
        letters = "   " + " ".join(chr(ord("A") + i) for i in range(columns))
        width = len(letters)

        self.say(f"{header_left.center(width)}   {header_right.center(width)}")
        self.say(f"{letters}   {letters}")
        for y, (left, right) in enumerate(zip(left_rows, right_rows)):
            self.say(f"{y:2d} {left.ljust(width - 3)}   {y:2d} {right}")
        self.say()
