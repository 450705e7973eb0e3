"""Secure memory handling utilities.

Provides functions for handling password and key material in memory:
- Secure zeroization of byte arrays
- Context managers that scrub a buffer on every exit path
- Memory-safe comparison

Python may still keep copies of immutable ``bytes`` objects around, so
secrets should travel as ``bytearray`` wherever possible.
"""

import ctypes
import hmac
import secrets
from contextlib import contextmanager
from typing import Generator


def secure_zero(data: bytearray) -> None:
    """Securely zero out a bytearray.

    Uses ctypes.memset to overwrite memory, which is less likely
    to be optimized away than a Python-level loop.

    Args:
        data: The bytearray to zero. Must be a mutable bytearray, not bytes.
    """
    if not isinstance(data, bytearray):
        raise TypeError("secure_zero requires a bytearray, not bytes")

    if len(data) == 0:
        return

    buffer_type = ctypes.c_char * len(data)
    buffer = buffer_type.from_buffer(data)
    ctypes.memset(ctypes.addressof(buffer), 0, len(data))


@contextmanager
def consume_secret(secret: bytes | bytearray) -> Generator[bytearray, None, None]:
    """Take ownership of a secret buffer and zero it when the block exits.

    A ``bytearray`` is yielded as-is and zeroed in place, so the caller's
    reference observes the wipe (a destructive read). Immutable ``bytes``
    cannot be wiped; they are copied and only the copy is zeroed.

    Example:
        with consume_secret(password) as pwd:
            key = derive(salt, pwd, iterations)
        # password is all zeros here, even if derive() raised
    """
    if isinstance(secret, bytearray):
        owned = secret
    elif isinstance(secret, (bytes, memoryview)):
        owned = bytearray(secret)
    else:
        raise TypeError("secret must be bytes or bytearray")

    try:
        yield owned
    finally:
        secure_zero(owned)


@contextmanager
def wiped(*buffers: bytearray) -> Generator[tuple[bytearray, ...], None, None]:
    """Zero every given bytearray when the block exits.

    Example:
        with wiped(key, iv):
            cipher = build(key, iv)
        # key and iv are zeroed here
    """
    try:
        yield buffers
    finally:
        for buffer in buffers:
            secure_zero(buffer)


def constant_time_compare(a: bytes | bytearray, b: bytes | bytearray) -> bool:
    """Constant-time comparison of two byte sequences.

    Wrapper around hmac.compare_digest for clarity.
    """
    return hmac.compare_digest(a, b)


def secure_random_bytes(n: int) -> bytes:
    """Generate cryptographically secure random bytes."""
    return secrets.token_bytes(n)
