"""PBE algorithm registry.

Maps the PKCS#12 PBE object identifiers to their scheme descriptors. The
table is built once at import time and exposed read-only, so lookups need
no locking.

Registered schemes (RFC 7292, Appendix C):
- 1.2.840.113549.1.12.1.3  pbeWithSHAAnd3-KeyTripleDES-CBC
- 1.2.840.113549.1.12.1.6  pbewithSHAAnd40BitRC2-CBC
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from pkcs12_pbe.ciphers import BlockCipher, RC2BlockCipher, TripleDESBlockCipher
from pkcs12_pbe.errors import KeyDerivationError, NotSupportedError
from pkcs12_pbe.kdf import KDFPurpose, pkcs12_kdf
from pkcs12_pbe.secure_memory import secure_zero


class PBEScheme(str, Enum):
    """Supported PBE schemes."""

    SHA1_3DES_CBC = "pbeWithSHAAnd3-KeyTripleDES-CBC"
    SHA1_RC2_40_CBC = "pbewithSHAAnd40BitRC2-CBC"


OID_PBE_SHA1_3DES_CBC = "1.2.840.113549.1.12.1.3"
OID_PBE_SHA1_RC2_40_CBC = "1.2.840.113549.1.12.1.6"


@dataclass(frozen=True)
class SchemeDescriptor:
    """Everything needed to run one PBE scheme."""

    scheme: PBEScheme
    oid: str
    key_size: int
    iv_size: int
    block_size: int
    new_cipher: Callable[[bytes | bytearray], BlockCipher]
    digest: str = "sha1"

    def derive_key(self, salt: bytes, password: bytes | bytearray, iterations: int) -> bytearray:
        """Derive the cipher key (diversifier ID 1)."""
        return self._derive(salt, password, iterations, KDFPurpose.KEY, self.key_size)

    def derive_iv(self, salt: bytes, password: bytes | bytearray, iterations: int) -> bytearray:
        """Derive the CBC initialization vector (diversifier ID 2)."""
        return self._derive(salt, password, iterations, KDFPurpose.IV, self.iv_size)

    def _derive(
        self,
        salt: bytes,
        password: bytes | bytearray,
        iterations: int,
        purpose: KDFPurpose,
        size: int,
    ) -> bytearray:
        derived = pkcs12_kdf(salt, password, iterations, purpose, size, hash_name=self.digest)
        if len(derived) != size:
            secure_zero(derived)
            raise KeyDerivationError(
                f"pkcs12: derived {purpose.name.lower()} is {len(derived)} bytes, "
                f"{self.scheme.value} needs {size}"
            )
        return derived


def _new_rc2_40(key: bytes | bytearray) -> BlockCipher:
    return RC2BlockCipher(key, effective_key_bits=len(key) * 8)


_SCHEMES: Mapping[PBEScheme, SchemeDescriptor] = MappingProxyType({
    PBEScheme.SHA1_3DES_CBC: SchemeDescriptor(
        scheme=PBEScheme.SHA1_3DES_CBC,
        oid=OID_PBE_SHA1_3DES_CBC,
        key_size=24,
        iv_size=8,
        block_size=8,
        new_cipher=TripleDESBlockCipher,
    ),
    PBEScheme.SHA1_RC2_40_CBC: SchemeDescriptor(
        scheme=PBEScheme.SHA1_RC2_40_CBC,
        oid=OID_PBE_SHA1_RC2_40_CBC,
        key_size=5,
        iv_size=8,
        block_size=8,
        new_cipher=_new_rc2_40,
    ),
})

_SCHEMES_BY_OID: Mapping[str, SchemeDescriptor] = MappingProxyType(
    {descriptor.oid: descriptor for descriptor in _SCHEMES.values()}
)


def resolve(oid: str) -> SchemeDescriptor:
    """Look up the scheme registered for an object identifier.

    Only exact dotted-string matches count.

    Raises:
        NotSupportedError: If the OID is not registered
    """
    descriptor = _SCHEMES_BY_OID.get(oid) if isinstance(oid, str) else None
    if descriptor is None:
        raise NotSupportedError(str(oid))
    return descriptor


def get_scheme(scheme: PBEScheme | str) -> SchemeDescriptor:
    """Look up a scheme by name.

    Raises:
        NotSupportedError: If the name is not a registered scheme
    """
    try:
        key = PBEScheme(scheme)
    except ValueError:
        raise NotSupportedError(str(scheme)) from None
    return _SCHEMES[key]


def supported_oids() -> list[str]:
    """Registered object identifiers."""
    return list(_SCHEMES_BY_OID)
