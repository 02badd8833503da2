"""Lightweight event model used by GameSession to decouple the turn loop from its observers.

The session emits typed events that the CLI (or a test) can subscribe to for
logging and statistics without parsing the console text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict


class Category(Enum):
    """High-level event categories."""

    TURN = auto()  # per-turn lifecycle (start, shot, end)
    SYSTEM = auto()  # quit, save, load


@dataclass(slots=True)
class Event:
    """Event emitted by GameSession."""

    category: Category
    type: str  # finer-grained identifier, e.g. "start", "shot", "end"
    payload: Dict[str, Any]
