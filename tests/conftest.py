import io
import logging
import random

import pytest

from salvo import encryption
from salvo.battleship import Board
from salvo.io_utils import Console

# Suppress INFO & DEBUG logs from the game modules during tests
logging.basicConfig(level=logging.WARNING)


def make_console(*lines: str) -> Console:
    """Console that answers prompts with *lines* in order and records all output."""
    text = "".join(f"{line}\n" for line in lines)
    return Console(reader=io.StringIO(text), writer=io.StringIO())


@pytest.fixture
def rng() -> random.Random:
    """Deterministic random source for placement and tie-breaking."""
    return random.Random(1234)


@pytest.fixture
def board() -> Board:
    return Board(10)


@pytest.fixture
def console_factory() -> callable:
    """Factory for scripted consoles: console_factory("A3", "exit")."""
    return make_console


@pytest.fixture(autouse=True)
def _no_save_key():
    """Every test starts and ends with plain (unsealed) save files."""
    encryption.disable_encryption()
    yield
    encryption.disable_encryption()
