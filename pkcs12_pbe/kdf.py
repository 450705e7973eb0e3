"""PKCS#12 key derivation (RFC 7292, Appendix B.2).

The same iterated-hash construction produces key, IV and MAC-key material;
only the diversifier ID byte changes:

- ID 1: key material for encryption/decryption
- ID 2: initialization vector
- ID 3: integrity (MAC) key

The password is expected in PKCS#12 form: a UTF-16BE string followed by two
zero bytes (see ``bmp_password``).
"""

import hashlib
from enum import IntEnum

from pkcs12_pbe.errors import KeyDerivationError
from pkcs12_pbe.secure_memory import secure_zero


class KDFPurpose(IntEnum):
    """Diversifier ID bytes."""

    KEY = 1
    IV = 2
    MAC = 3


# Digest name -> (output size u, block size v), in bytes
SUPPORTED_DIGESTS = {
    "sha1": (20, 64),
    "sha256": (32, 64),
}


def bmp_password(password: str) -> bytearray:
    """Encode a password as a NUL-terminated BMPString.

    An empty password still carries the two-byte terminator.
    """
    for char in password:
        if ord(char) > 0xFFFF:
            raise KeyDerivationError(
                "password contains a character outside the Basic Multilingual Plane"
            )
    encoded = bytearray(password.encode("utf-16-be"))
    encoded += b"\x00\x00"
    return encoded


def _stretch(data: bytes | bytearray, block_size: int) -> bytearray:
    """Repeat data to the next multiple of block_size (empty stays empty)."""
    if not data:
        return bytearray()
    size = block_size * ((len(data) + block_size - 1) // block_size)
    repeats = size // len(data) + 1
    return bytearray((bytes(data) * repeats)[:size])


def pkcs12_kdf(
    salt: bytes,
    password: bytes | bytearray,
    iterations: int,
    purpose: KDFPurpose,
    length: int,
    hash_name: str = "sha1",
) -> bytearray:
    """Derive ``length`` bytes of key material.

    Args:
        salt: PBE salt
        password: BMPString-encoded password
        iterations: Hash iteration count (r), at least 1
        purpose: Diversifier ID (key, IV or MAC)
        length: Number of bytes to produce
        hash_name: Digest driving the derivation

    Returns:
        Derived bytes as a bytearray the caller is expected to wipe

    Raises:
        KeyDerivationError: If the digest or any argument is invalid
    """
    if hash_name not in SUPPORTED_DIGESTS:
        raise KeyDerivationError(f"unsupported digest for PKCS#12 KDF: {hash_name}")
    if iterations < 1:
        raise KeyDerivationError(f"iteration count must be positive, got {iterations}")
    if length < 1:
        raise KeyDerivationError(f"output length must be positive, got {length}")

    u, v = SUPPORTED_DIGESTS[hash_name]
    diversifier = bytes([int(purpose)]) * v

    stretched_password = _stretch(password, v)
    i_value = _stretch(salt, v) + stretched_password
    secure_zero(stretched_password)

    result = bytearray()
    try:
        while True:
            digest = hashlib.new(hash_name, diversifier + bytes(i_value)).digest()
            for _ in range(1, iterations):
                digest = hashlib.new(hash_name, digest).digest()
            result += digest
            if len(result) >= length:
                break

            # I_j = (I_j + B + 1) mod 2^(8v) for every v-byte block of I
            b_value = int.from_bytes((digest * (v // u + 1))[:v], "big")
            mask = (1 << (8 * v)) - 1
            for j in range(0, len(i_value), v):
                block = int.from_bytes(i_value[j:j + v], "big")
                i_value[j:j + v] = ((block + b_value + 1) & mask).to_bytes(v, "big")
    finally:
        secure_zero(i_value)

    derived = bytearray(result[:length])
    secure_zero(result)
    return derived
