"""Save-file framing and disk I/O.

Frame layout (16-byte header + payload):
0-1  : 0x5A1F      magic bytes
2    : version (1)
3    : flags (bit 0 = payload sealed with AES-GCM)
4-7  : reserved u32 (0)
8-11 : len u32 (payload length)
12-15: CRC-32 over header[0:12]+payload
16-  : UTF-8 JSON game state, or nonce + AES-GCM ciphertext of it when sealed

Every failure surfaces as one of three categories the CLI can report:
SaveNotFoundError, SaveIOError or CorruptSaveError.
"""

from __future__ import annotations

import json
import logging
import random
import struct
import zlib
from pathlib import Path
from typing import Final, Optional

from cryptography.exceptions import InvalidTag

from . import config as _cfg
from . import encryption as _encryption
from .io_utils import Console
from .session import GameState

logger = logging.getLogger(__name__)

MAGIC: Final[int] = 0x5A1F
VERSION: Final[int] = 1
FLAG_SEALED: Final[int] = 0x01

HEADER_STRUCT = struct.Struct(">HBBIII")
HEADER_LEN: Final[int] = HEADER_STRUCT.size


class SaveFileError(Exception):
    """Base for everything that can go wrong saving or loading a game."""


class SaveNotFoundError(SaveFileError):
    """Raised when the named save does not exist."""


class SaveIOError(SaveFileError):
    """Raised when the save cannot be written or read from disk."""


class CorruptSaveError(SaveFileError):
    """Raised when a file is not a save, or its content is damaged."""


class CrcError(CorruptSaveError):
    """Raised when the CRC-32 check fails while decoding a save."""


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _crc(header_prefix: bytes, payload: bytes) -> int:
    return zlib.crc32(header_prefix + payload) & 0xFFFFFFFF


def encode_state(state: GameState) -> bytes:
    """Serialize *state* into a framed save blob (sealed when a key is enabled)."""
    payload = json.dumps(state.to_dict(), separators=(",", ":")).encode()
    flags = 0
    if _encryption.encryption_enabled():
        payload = _encryption.seal(payload)
        flags |= FLAG_SEALED
    prefix = HEADER_STRUCT.pack(MAGIC, VERSION, flags, 0, len(payload), 0)[:12]
    header = prefix + struct.pack(">I", _crc(prefix, payload))
    return header + payload


def decode_state(
    blob: bytes,
    *,
    console: Optional[Console] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """Parse a framed save blob back into a GameState. Raises CorruptSaveError."""
    if len(blob) < HEADER_LEN:
        raise CorruptSaveError("Incomplete header")
    magic, version, flags, _reserved, length, crc = HEADER_STRUCT.unpack(blob[:HEADER_LEN])
    if magic != MAGIC:
        raise CorruptSaveError("Not a save file (bad magic)")
    if version != VERSION:
        raise CorruptSaveError(f"Unsupported save version {version}")
    payload = blob[HEADER_LEN:]
    if len(payload) != length:
        raise CorruptSaveError(f"Payload length {len(payload)} does not match header ({length})")
    if _crc(blob[:12], payload) != crc:
        raise CrcError("CRC-32 mismatch")

    if flags & FLAG_SEALED:
        if not _encryption.encryption_enabled():
            raise CorruptSaveError("Save is sealed but no save key is configured")
        if len(payload) < _encryption.NONCE_LEN + _encryption.TAG_LEN:
            raise CorruptSaveError(f"Sealed payload too short ({len(payload)} bytes)")
        try:
            payload = _encryption.open_sealed(payload)
        except (InvalidTag, ValueError):
            raise CorruptSaveError("Sealed save failed authentication (wrong key?)") from None

    # JSONDecodeError and UnicodeDecodeError are ValueErrors too
    try:
        data = json.loads(payload.decode())
        return GameState.from_dict(data, console=console, rng=rng)
    except (ValueError, TypeError, KeyError, AttributeError, OverflowError) as exc:
        raise CorruptSaveError(f"Save content is corrupted: {exc}") from exc


# ---------------------------------------------------------------------------
# Disk I/O
# ---------------------------------------------------------------------------


def save_path(name: str, save_dir: Optional[Path] = None) -> Path:
    """'mygame' → <save_dir>/mygame.sav"""
    return Path(save_dir if save_dir is not None else _cfg.SAVE_DIR) / f"{name}{_cfg.SAVE_EXT}"


def save_game(state: GameState, name: str, *, save_dir: Optional[Path] = None) -> Path:
    """Write *state* under *name* and return the file path. Raises SaveIOError."""
    if not name.strip():
        raise SaveIOError("Game name is empty")
    path = save_path(name, save_dir)
    blob = encode_state(state)
    try:
        path.write_bytes(blob)
    except OSError as exc:
        logger.warning("save_game() – cannot write %s: %s", path, exc)
        raise SaveIOError(f"Cannot create or write {path}: {exc.strerror or exc}") from exc
    logger.info("Saved game to %s (%d bytes, turn %d)", path, len(blob), state.turn)
    return path


def load_game(
    name: str,
    *,
    save_dir: Optional[Path] = None,
    console: Optional[Console] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """Read the save called *name*. Raises a SaveFileError subclass on failure."""
    path = save_path(name, save_dir)
    try:
        blob = path.read_bytes()
    except FileNotFoundError as exc:
        raise SaveNotFoundError(f"File not found: {path}") from exc
    except OSError as exc:
        logger.warning("load_game() – cannot read %s: %s", path, exc)
        raise SaveIOError(f"An I/O error has occurred reading {path}: {exc.strerror or exc}") from exc
    state = decode_state(blob, console=console, rng=rng)
    logger.info("Loaded game from %s (turn %d)", path, state.turn)
    return state
