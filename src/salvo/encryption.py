# encryption abstraction module for sealed save files

import os

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_LEN = 12
TAG_LEN = 16

# Reject excessively large payloads (a save is a few KiB at most)
MAX_PAYLOAD = 10 * 1024 * 1024

_secret_key: bytes | None = None


def enable_encryption(key: bytes) -> None:
    """Set the AES key used to seal and open save payloads."""
    global _secret_key
    if len(key) not in (16, 24, 32):
        raise ValueError("AES key must be 16/24/32 bytes")
    _secret_key = key


def disable_encryption() -> None:
    """Go back to plain (CRC-only) save payloads."""
    global _secret_key
    _secret_key = None


def encryption_enabled() -> bool:
    return _secret_key is not None


def seal(payload: bytes, associated_data: bytes | None = None) -> bytes:
    """AEAD seal: nonce + ciphertext+tag"""
    if _secret_key is None:
        raise ValueError("Encryption key not set")
    if len(payload) > MAX_PAYLOAD:
        raise ValueError(f"Payload too large: {len(payload)} bytes")
    nonce = os.urandom(NONCE_LEN)
    return nonce + AESGCM(_secret_key).encrypt(nonce, payload, associated_data)


def open_sealed(blob: bytes, associated_data: bytes | None = None) -> bytes:
    """AEAD open: returns the plaintext, raises InvalidTag if tampered or wrong key"""
    if _secret_key is None:
        raise ValueError("Encryption key not set")
    nonce, ciphertext = blob[:NONCE_LEN], blob[NONCE_LEN:]
    return AESGCM(_secret_key).decrypt(nonce, ciphertext, associated_data)
