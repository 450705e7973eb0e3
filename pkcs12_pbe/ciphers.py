"""
Block ciphers and CBC mode for PKCS#12 PBE.

Triple DES comes from ``cryptography`` (decrepit algorithms), RC2 from
PyCryptodome, which is the only maintained implementation that accepts a
reduced effective key length. Both are exposed through the same small
interface so the PBE layer does not care which library sits underneath.
"""

from enum import Enum
from typing import Callable, Protocol

from Crypto.Cipher import ARC2
from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from pkcs12_pbe.errors import CipherConstructionError, CiphertextLengthError
from pkcs12_pbe.secure_memory import secure_zero


class CBCDirection(str, Enum):
    """Direction of a CBC engine."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class CBCMode:
    """A block cipher running in CBC mode in one direction.

    Chaining state carries over between ``crypt_blocks`` calls, so a long
    buffer may be processed in several block-aligned pieces.
    """

    def __init__(
        self,
        transform: Callable[[bytes], bytes],
        block_size: int,
        direction: CBCDirection,
    ):
        self._transform = transform
        self._block_size = block_size
        self.direction = direction

    @property
    def block_size(self) -> int:
        return self._block_size

    def crypt_blocks(self, data: bytes | bytearray) -> bytes:
        """Encrypt or decrypt whole blocks.

        Raises:
            CiphertextLengthError: If data is empty or not block-aligned
        """
        check_block_aligned(data, self._block_size)
        return self._transform(data)


def check_block_aligned(data: bytes | bytearray, block_size: int) -> None:
    """Reject empty buffers and buffers that are not whole blocks."""
    if len(data) == 0:
        raise CiphertextLengthError("pkcs12: input is empty")
    if len(data) % block_size != 0:
        raise CiphertextLengthError(
            f"pkcs12: input length {len(data)} is not a multiple of the block size {block_size}"
        )


class BlockCipher(Protocol):
    """What the PBE layer needs from a block cipher."""

    block_size: int

    def cbc(self, iv: bytes | bytearray, direction: CBCDirection) -> CBCMode:
        ...

    def close(self) -> None:
        ...


class TripleDESBlockCipher:
    """Three-key triple DES (DES-EDE3).

    Example:
        cipher = TripleDESBlockCipher(key_24_bytes)
        cbc = cipher.cbc(iv, CBCDirection.ENCRYPT)
        ciphertext = cbc.crypt_blocks(padded)
        cipher.close()
    """

    KEY_SIZE = 24
    block_size = 8

    def __init__(self, key: bytes | bytearray):
        """
        Initialize cipher with key.

        Args:
            key: 24-byte triple DES key (K1 || K2 || K3)

        Raises:
            CipherConstructionError: If key is invalid size
        """
        if len(key) != self.KEY_SIZE:
            raise CipherConstructionError(
                f"pkcs12: triple DES key must be {self.KEY_SIZE} bytes, got {len(key)}"
            )
        try:
            self._algorithm = TripleDES(bytes(key))
        except ValueError as e:
            raise CipherConstructionError(f"pkcs12: invalid triple DES key: {e}") from e

    def cbc(self, iv: bytes | bytearray, direction: CBCDirection) -> CBCMode:
        if self._algorithm is None:
            raise CipherConstructionError("pkcs12: cipher has been closed")
        try:
            cipher = Cipher(self._algorithm, modes.CBC(bytes(iv)))
        except ValueError as e:
            raise CipherConstructionError(f"pkcs12: invalid triple DES IV: {e}") from e

        if direction == CBCDirection.ENCRYPT:
            context = cipher.encryptor()
        else:
            context = cipher.decryptor()
        return CBCMode(context.update, self.block_size, direction)

    def close(self):
        """Explicitly drop key material."""
        self._algorithm = None


class RC2BlockCipher:
    """RC2 with a configurable effective key length (RFC 2268).

    PKCS#12's pbewithSHAAnd40BitRC2-CBC uses a 5-byte key with 40
    effective bits.
    """

    MIN_KEY_SIZE = 5
    MAX_KEY_SIZE = 128
    MIN_EFFECTIVE_BITS = 40
    MAX_EFFECTIVE_BITS = 1024
    block_size = 8

    def __init__(self, key: bytes | bytearray, effective_key_bits: int):
        """
        Initialize cipher with key.

        Args:
            key: RC2 key, 5 to 128 bytes
            effective_key_bits: Effective key length in bits, 40 to 1024

        Raises:
            CipherConstructionError: If key or effective length is invalid
        """
        if not self.MIN_KEY_SIZE <= len(key) <= self.MAX_KEY_SIZE:
            raise CipherConstructionError(
                f"pkcs12: RC2 key must be {self.MIN_KEY_SIZE}-{self.MAX_KEY_SIZE} bytes, "
                f"got {len(key)}"
            )
        if not self.MIN_EFFECTIVE_BITS <= effective_key_bits <= self.MAX_EFFECTIVE_BITS:
            raise CipherConstructionError(
                f"pkcs12: RC2 effective key length must be "
                f"{self.MIN_EFFECTIVE_BITS}-{self.MAX_EFFECTIVE_BITS} bits, got {effective_key_bits}"
            )
        self._key = bytearray(key)
        self.effective_key_bits = effective_key_bits

    def cbc(self, iv: bytes | bytearray, direction: CBCDirection) -> CBCMode:
        if self._key is None:
            raise CipherConstructionError("pkcs12: cipher has been closed")
        try:
            cipher = ARC2.new(
                bytes(self._key),
                ARC2.MODE_CBC,
                iv=bytes(iv),
                effective_keylen=self.effective_key_bits,
            )
        except ValueError as e:
            raise CipherConstructionError(f"pkcs12: invalid RC2 parameters: {e}") from e

        if direction == CBCDirection.ENCRYPT:
            transform = cipher.encrypt
        else:
            transform = cipher.decrypt
        return CBCMode(transform, self.block_size, direction)

    def close(self):
        """Zero and drop key material."""
        if self._key is not None:
            secure_zero(self._key)
            self._key = None
