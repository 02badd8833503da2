"""Central configuration for runtime-tunable parameters.

Game limits are fixed; everything touching the local machine (where saves
go, whether they are sealed, how chatty the logs are, the RNG seed) can be
overridden via environment variables so the test-suite and CI runs can point
the game somewhere harmless without patching code.
"""

from __future__ import annotations

import os
from pathlib import Path


# ===========================================================================
# Board & Fleet Limits
# ===========================================================================
# Side length of the (square) board accepted at setup.
MIN_BOARD_SIZE: int = 10
MAX_BOARD_SIZE: int = 26

# Smallest fleet accepted at setup. The upper bound depends on the board
# size, see max_ships().
MIN_SHIPS: int = 4

# Longest ship a player may request. The CPU density map also scans windows
# from this length downwards.
MAX_SHIP_LENGTH: int = 4


def max_ships(board_size: int) -> int:
    """Largest fleet allowed on a *board_size* board (6 per full block of 6)."""
    return 6 * (board_size // 6)


# ===========================================================================
# Players
# ===========================================================================
# Display names used for CPU players, by seat.
CPU_NAME_FIRST: str = "EDI"
CPU_NAME_SECOND: str = "HAL 9000"


# ===========================================================================
# Save Files
# ===========================================================================
# SALVO_SAVE_DIR: Directory where saved games are written to / read from.
#   Defaults to the current working directory.
#   Example: export SALVO_SAVE_DIR=~/.local/share/salvo
SAVE_DIR: Path = Path(os.getenv("SALVO_SAVE_DIR", ".")).expanduser()

# SALVO_SAVE_EXT: Extension appended to the game name given at the prompt.
#   Defaults to ".sav".
SAVE_EXT: str = os.getenv("SALVO_SAVE_EXT", ".sav")

# SALVO_SAVE_KEY: AES key as a hex string (16/24/32 bytes). When set, save
#   payloads are sealed with AES-GCM instead of stored as plain JSON.
#   Defaults to unset (plain, CRC-checked saves).
#   Example: export SALVO_SAVE_KEY=00112233445566778899AABBCCDDEEFF
SAVE_KEY_HEX: str | None = os.getenv("SALVO_SAVE_KEY") or None


def save_key() -> bytes | None:
    """Decoded SALVO_SAVE_KEY, or None when unset. Raises ValueError if not hex."""
    if SAVE_KEY_HEX is None:
        return None
    try:
        return bytes.fromhex(SAVE_KEY_HEX)
    except ValueError:
        raise ValueError(f"SALVO_SAVE_KEY is not a hex string: {SAVE_KEY_HEX!r}") from None


# ===========================================================================
# Randomness
# ===========================================================================
# SALVO_SEED: Integer seed for the CPU players' random source. Makes ship
#   placement and density-map tie-breaking reproducible.
#   Defaults to unset (seeded from the OS).
#   Example: export SALVO_SEED=1234
SEED_TEXT: str | None = os.getenv("SALVO_SEED") or None


def seed() -> int | None:
    """SALVO_SEED as an integer, or None when unset. Raises ValueError if not an integer."""
    if SEED_TEXT is None:
        return None
    try:
        return int(SEED_TEXT)
    except ValueError:
        raise ValueError(f"SALVO_SEED is not an integer: {SEED_TEXT!r}") from None


# ===========================================================================
# Debugging and Logging
# ===========================================================================
# SALVO_DEBUG: If "1", enables detailed debug logging across modules
#   (density maps, targeting decisions, board mutations).
#   Defaults to "0" (warnings only).
#   Example: export SALVO_DEBUG=1
DEBUG: bool = os.getenv("SALVO_DEBUG", "0") == "1"
