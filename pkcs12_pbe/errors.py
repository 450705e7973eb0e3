"""
Exception classes for PKCS#12 password-based encryption.
"""


class PBEError(Exception):
    """Base exception for PBE operations."""
    pass


class NotSupportedError(PBEError):
    """The algorithm identifier or scheme name is not registered."""

    def __init__(self, algorithm: str):
        super().__init__(f"pkcs12: algorithm {algorithm} is not supported")
        self.algorithm = algorithm


class ParameterDecodeError(PBEError):
    """The PBE parameters (salt, iteration count) could not be decoded."""
    pass


class KeyDerivationError(PBEError):
    """Key or IV derivation failed or produced the wrong length."""
    pass


class CipherConstructionError(PBEError):
    """The block cipher rejected the derived key material."""
    pass


class CiphertextLengthError(PBEError, ValueError):
    """Ciphertext is empty or not a whole number of cipher blocks."""
    pass


class DecryptionError(PBEError):
    """Decryption failed.

    Raised with the same message for every padding failure so callers
    cannot tell which check rejected the plaintext.
    """

    MESSAGE = "pkcs12: decryption error, incorrect padding"

    def __init__(self):
        super().__init__(self.MESSAGE)
