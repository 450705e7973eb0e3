"""
pkcs12-pbe - password-based encryption for PKCS#12 containers.

Decrypts and encrypts PKCS#12 bag payloads protected with the two legacy
SHA1-based PBE schemes (3-key triple DES and 40-bit RC2, both CBC), using
the RFC 7292 Appendix B key derivation.

Parsing the outer PKCS#12 structure is left to asn1crypto or cryptography;
this package handles the algorithm identifiers and ciphertext inside it.
"""

from pkcs12_pbe.algorithms import (
    OID_PBE_SHA1_3DES_CBC,
    OID_PBE_SHA1_RC2_40_CBC,
    PBEScheme,
    SchemeDescriptor,
    get_scheme,
    resolve,
    supported_oids,
)
from pkcs12_pbe.ciphers import (
    CBCDirection,
    CBCMode,
    RC2BlockCipher,
    TripleDESBlockCipher,
)
from pkcs12_pbe.config import Settings, get_settings
from pkcs12_pbe.errors import (
    CipherConstructionError,
    CiphertextLengthError,
    DecryptionError,
    KeyDerivationError,
    NotSupportedError,
    ParameterDecodeError,
    PBEError,
)
from pkcs12_pbe.kdf import KDFPurpose, bmp_password, pkcs12_kdf
from pkcs12_pbe.logging import get_logger, setup_logging
from pkcs12_pbe.params import (
    AlgorithmIdentifier,
    Decryptable,
    EncryptedEnvelope,
    PBEParameters,
)
from pkcs12_pbe.pbe import PBEEngine, pbe_engine

__version__ = "0.1.0"

__all__ = [
    # Engine
    "PBEEngine",
    "pbe_engine",
    # Registry
    "PBEScheme",
    "SchemeDescriptor",
    "OID_PBE_SHA1_3DES_CBC",
    "OID_PBE_SHA1_RC2_40_CBC",
    "resolve",
    "get_scheme",
    "supported_oids",
    # Parameters
    "AlgorithmIdentifier",
    "PBEParameters",
    "Decryptable",
    "EncryptedEnvelope",
    # Key derivation
    "KDFPurpose",
    "pkcs12_kdf",
    "bmp_password",
    # Ciphers
    "CBCDirection",
    "CBCMode",
    "TripleDESBlockCipher",
    "RC2BlockCipher",
    # Errors
    "PBEError",
    "NotSupportedError",
    "ParameterDecodeError",
    "KeyDerivationError",
    "CipherConstructionError",
    "CiphertextLengthError",
    "DecryptionError",
    # Configuration
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
]
