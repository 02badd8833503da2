import re
from dataclasses import dataclass
from typing import Union

from .coord_utils import Coordinate, Direction, parse_coordinate


class CommandParseError(Exception):
    """Raised when a line cannot be parsed as a valid command."""


@dataclass(frozen=True)
class FireCommand:
    coord: Coordinate


@dataclass(frozen=True)
class QuitCommand:
    pass


@dataclass(frozen=True)
class PlaceCommand:
    coord: Coordinate
    direction: Direction


Command = Union[FireCommand, QuitCommand]

# "A3 R", "d5 u"
_PLACEMENT_RE = re.compile(r"^([A-Za-z]\d{1,2})\s+([LRUDlrud])$")


def parse_command(line: str) -> Command:
    """Parse a shot prompt answer: a coordinate like 'C7' or 'exit'."""
    if line is None:
        raise CommandParseError("No command to parse")
    raw = line.strip()
    if not raw:
        raise CommandParseError("Empty command")
    if raw.upper() == "EXIT":
        return QuitCommand()
    try:
        return FireCommand(coord=parse_coordinate(raw))
    except ValueError:
        raise CommandParseError(f"Invalid coordinate: {raw}") from None


def parse_placement(line: str, length: int) -> PlaceCommand:
    """Parse a placement answer.

    One-tile ships only need a coordinate ('A3'); longer ships also need a
    direction letter ('A3 R'). Single tiles are placed facing UP.
    """
    raw = (line or "").strip()
    if length == 1:
        try:
            return PlaceCommand(coord=parse_coordinate(raw), direction=Direction.UP)
        except ValueError:
            raise CommandParseError(f"Invalid coordinate: {raw}") from None
    match = _PLACEMENT_RE.match(raw)
    if not match:
        raise CommandParseError(f"Invalid placement: {raw}")
    coord_str, dir_str = match.groups()
    return PlaceCommand(coord=parse_coordinate(coord_str), direction=Direction.from_letter(dir_str))
