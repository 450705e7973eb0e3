"""PKCS#12 Password-Based Encryption Engine.

Implements RFC 2898 §6.1.2 style PBE with the PKCS#12 (RFC 7292,
Appendix B) key derivation for the two legacy schemes PKCS#12 files use:

- pbeWithSHAAnd3-KeyTripleDES-CBC
- pbewithSHAAnd40BitRC2-CBC

Pipeline for one call:
    resolve scheme -> derive key and IV -> wipe password
    -> build block cipher -> wipe key and IV -> CBC -> pad / unpad

Security Properties:
- Password buffers handed in as bytearray are zeroed on every exit path
- Key, IV and padded plaintext buffers are zeroed after use
- Every padding failure raises the same DecryptionError

These schemes are unauthenticated and use weak ciphers. They exist to read
and write PKCS#12 files, not to protect new data.
"""

from pkcs12_pbe.algorithms import PBEScheme, SchemeDescriptor, get_scheme, resolve
from pkcs12_pbe.ciphers import CBCDirection, CBCMode, check_block_aligned
from pkcs12_pbe.config import Settings, get_settings
from pkcs12_pbe.errors import DecryptionError, NotSupportedError
from pkcs12_pbe.logging import get_logger, log_operation
from pkcs12_pbe.params import (
    AlgorithmIdentifier,
    Decryptable,
    EncryptedEnvelope,
    PBEParameters,
)
from pkcs12_pbe.secure_memory import (
    constant_time_compare,
    consume_secret,
    secure_random_bytes,
    secure_zero,
    wiped,
)

logger = get_logger(__name__)


class PBEEngine:
    """Password-based encryption engine for PKCS#12.

    Usage:
        engine = PBEEngine()

        ciphertext = engine.encrypt(
            PBEScheme.SHA1_3DES_CBC,
            message=b"secret",
            salt=salt,
            password=bmp_password("changeit"),
            iterations=2048,
        )

        plaintext = engine.decrypt(shrouded_key_bag, bmp_password("changeit"))

    Passwords are consumed: a bytearray password is all zeros once the call
    returns or raises.
    """

    def __init__(self, settings: Settings | None = None):
        """Initialize the engine.

        Args:
            settings: Settings to use instead of the environment-derived ones
        """
        self._settings = settings

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    def encrypter_for(
        self,
        scheme: PBEScheme | str,
        password: bytes | bytearray,
        salt: bytes,
        iterations: int,
    ) -> CBCMode:
        """Build a CBC encrypter for a scheme.

        Raises:
            NotSupportedError: If the scheme is unknown
            KeyDerivationError: If key or IV derivation fails
            CipherConstructionError: If the cipher rejects the derived key
        """
        with consume_secret(password) as pwd:
            descriptor = self._scheme(scheme)
            return self._build_mode(descriptor, pwd, salt, iterations, CBCDirection.ENCRYPT)

    def decrypter_for(
        self,
        algorithm: AlgorithmIdentifier,
        password: bytes | bytearray,
    ) -> CBCMode:
        """Build a CBC decrypter from an algorithm identifier.

        Raises:
            NotSupportedError: If the OID is not registered
            ParameterDecodeError: If the PBE parameters are malformed
            KeyDerivationError: If key or IV derivation fails
            CipherConstructionError: If the cipher rejects the derived key
        """
        with consume_secret(password) as pwd:
            descriptor = self._resolve(algorithm)
            params = algorithm.pbe_parameters(max_iterations=self.settings.max_iterations)
            return self._build_mode(
                descriptor, pwd, params.salt, params.iterations, CBCDirection.DECRYPT
            )

    @log_operation("pbe_encrypt")
    def encrypt(
        self,
        scheme: PBEScheme | str,
        message: bytes,
        salt: bytes,
        password: bytes | bytearray,
        iterations: int,
    ) -> bytes:
        """Pad and encrypt a message.

        At least one byte of padding is always added, so a block-aligned
        message grows by a full block.

        Args:
            scheme: PBE scheme to use
            message: Data to encrypt (may be empty)
            salt: PBE salt
            password: BMPString-encoded password, consumed by the call
            iterations: KDF iteration count

        Returns:
            Ciphertext, a whole number of cipher blocks
        """
        cbc = self.encrypter_for(scheme, password, salt, iterations)

        block_size = cbc.block_size
        pad_count = block_size - (len(message) % block_size)
        padded = bytearray(message)
        padded += bytes((pad_count,)) * pad_count

        with wiped(padded):
            encrypted = cbc.crypt_blocks(padded)

        logger.debug(
            "Encrypted payload",
            scheme=str(PBEScheme(scheme).value),
            iterations=iterations,
            ciphertext_length=len(encrypted),
        )
        return encrypted

    @log_operation("pbe_decrypt")
    def decrypt(self, info: Decryptable, password: bytes | bytearray) -> bytes:
        """Decrypt and unpad the ciphertext carried by ``info``.

        Args:
            info: Object exposing get_algorithm() and get_data()
            password: BMPString-encoded password, consumed by the call

        Returns:
            The plaintext with padding removed

        Raises:
            NotSupportedError: If the algorithm is not registered
            CiphertextLengthError: If the ciphertext is empty or not block-aligned
            DecryptionError: If the padding is invalid (wrong password or corrupt data)
        """
        with consume_secret(password) as pwd:
            if not isinstance(info, Decryptable):
                raise TypeError("info must provide get_algorithm() and get_data()")

            algorithm = info.get_algorithm()
            descriptor = self._resolve(algorithm)
            encrypted = info.get_data()

            # Nothing is derived or decrypted for a malformed buffer
            check_block_aligned(encrypted, descriptor.block_size)

            cbc = self.decrypter_for(algorithm, pwd)

        decrypted = bytearray(cbc.crypt_blocks(encrypted))
        return _strip_padding(decrypted, cbc.block_size)

    def encrypt_envelope(
        self,
        message: bytes,
        password: bytes | bytearray,
        scheme: PBEScheme | str | None = None,
        iterations: int | None = None,
        salt: bytes | None = None,
    ) -> EncryptedEnvelope:
        """Encrypt with configured defaults and keep the parameters alongside.

        A fresh random salt is generated unless one is given. The returned
        envelope can be passed straight back to decrypt().
        """
        settings = self.settings
        with consume_secret(password) as pwd:
            descriptor = self._scheme(scheme or settings.default_scheme)
            if iterations is None:
                iterations = settings.default_iterations
            if salt is None:
                salt = secure_random_bytes(settings.salt_length)

            data = self.encrypt(descriptor.scheme, message, salt, pwd, iterations)

        params = PBEParameters(salt=bytes(salt), iterations=iterations)
        return EncryptedEnvelope(
            algorithm=AlgorithmIdentifier(descriptor.oid, params.encode()),
            data=data,
        )

    def _scheme(self, scheme: PBEScheme | str) -> SchemeDescriptor:
        try:
            return get_scheme(scheme)
        except NotSupportedError:
            logger.warning("Unsupported PBE scheme requested", scheme=str(scheme))
            raise

    def _resolve(self, algorithm: AlgorithmIdentifier) -> SchemeDescriptor:
        try:
            return resolve(algorithm.algorithm)
        except NotSupportedError:
            logger.warning("Unsupported PBE algorithm", algorithm=str(algorithm.algorithm))
            raise

    def _build_mode(
        self,
        descriptor: SchemeDescriptor,
        password: bytearray,
        salt: bytes,
        iterations: int,
        direction: CBCDirection,
    ) -> CBCMode:
        with consume_secret(password) as pwd:
            key = descriptor.derive_key(salt, pwd, iterations)
            try:
                iv = descriptor.derive_iv(salt, pwd, iterations)
            except Exception:
                secure_zero(key)
                raise

        with wiped(key, iv):
            cipher = descriptor.new_cipher(key)
            try:
                return cipher.cbc(iv, direction)
            finally:
                cipher.close()


def _strip_padding(decrypted: bytearray, block_size: int) -> bytes:
    """Validate and remove PKCS#5 padding.

    Every failure raises the same DecryptionError from this one place.
    """
    pad_count = decrypted[-1]
    valid = 1 <= pad_count <= block_size
    if valid:
        valid = constant_time_compare(decrypted[-pad_count:], bytes((pad_count,)) * pad_count)

    if not valid:
        secure_zero(decrypted)
        raise DecryptionError()

    plaintext = bytes(decrypted[:-pad_count])
    secure_zero(decrypted)
    return plaintext


pbe_engine = PBEEngine()
