"""
PBE parameters and the structures that carry them.

``PBEParameter ::= SEQUENCE { salt OCTET STRING, iterationCount INTEGER }``
is decoded and encoded with asn1crypto. ``AlgorithmIdentifier`` and
``EncryptedEnvelope`` bridge from the asn1crypto PKCS#8/CMS structures that
hold PKCS#12 shrouded key bags and encrypted SafeContents.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from asn1crypto import algos, cms, keys

from pkcs12_pbe.errors import ParameterDecodeError


@dataclass(frozen=True)
class PBEParameters:
    """Decoded PBE parameters."""

    salt: bytes
    iterations: int

    @classmethod
    def decode(cls, raw: bytes, max_iterations: int | None = None) -> "PBEParameters":
        """Decode DER-encoded PBE parameters.

        Args:
            raw: DER bytes of the PBEParameter sequence
            max_iterations: Optional ceiling for the iteration count

        Raises:
            ParameterDecodeError: On malformed DER or an unusable iteration count
        """
        if not raw:
            raise ParameterDecodeError("pkcs12: PBE parameters are missing")
        try:
            parsed = algos.Pbes1Params.load(bytes(raw), strict=True)
            salt = parsed["salt"].native
            iterations = parsed["iterations"].native
        except (ValueError, TypeError) as e:
            raise ParameterDecodeError(f"pkcs12: malformed PBE parameters: {e}") from e

        if salt is None or iterations is None:
            raise ParameterDecodeError("pkcs12: PBE parameters are incomplete")
        if iterations < 1:
            raise ParameterDecodeError(f"pkcs12: iteration count must be positive, got {iterations}")
        if max_iterations is not None and iterations > max_iterations:
            raise ParameterDecodeError(
                f"pkcs12: iteration count {iterations} exceeds the limit of {max_iterations}"
            )
        return cls(salt=salt, iterations=iterations)

    def encode(self) -> bytes:
        """DER-encode the parameters."""
        return algos.Pbes1Params({
            "salt": self.salt,
            "iterations": self.iterations,
        }).dump()


@dataclass(frozen=True)
class AlgorithmIdentifier:
    """An algorithm OID plus its raw DER-encoded parameters."""

    algorithm: str
    parameters: bytes = b""

    def __post_init__(self):
        if isinstance(self.algorithm, (tuple, list)):
            object.__setattr__(self, "algorithm", ".".join(str(arc) for arc in self.algorithm))
        object.__setattr__(self, "parameters", bytes(self.parameters))

    @classmethod
    def from_asn1(cls, algorithm: algos.EncryptionAlgorithm) -> "AlgorithmIdentifier":
        """Build from an asn1crypto EncryptionAlgorithm."""
        return cls(
            algorithm=algorithm["algorithm"].dotted,
            parameters=algorithm["parameters"].dump(),
        )

    def to_asn1(self) -> algos.EncryptionAlgorithm:
        """Convert to an asn1crypto EncryptionAlgorithm."""
        return algos.EncryptionAlgorithm({
            "algorithm": self.algorithm,
            "parameters": algos.Pbes1Params.load(self.parameters),
        })

    def pbe_parameters(self, max_iterations: int | None = None) -> PBEParameters:
        """Decode the parameters as PBE parameters."""
        return PBEParameters.decode(self.parameters, max_iterations=max_iterations)


@runtime_checkable
class Decryptable(Protocol):
    """Anything carrying an encryption algorithm and ciphertext."""

    def get_algorithm(self) -> AlgorithmIdentifier:
        ...

    def get_data(self) -> bytes:
        ...


@dataclass(frozen=True)
class EncryptedEnvelope:
    """Ciphertext together with the algorithm that produced it."""

    algorithm: AlgorithmIdentifier
    data: bytes

    def get_algorithm(self) -> AlgorithmIdentifier:
        return self.algorithm

    def get_data(self) -> bytes:
        return self.data

    @classmethod
    def from_encrypted_private_key_info(
        cls, info: keys.EncryptedPrivateKeyInfo
    ) -> "EncryptedEnvelope":
        """Wrap a PKCS#8 EncryptedPrivateKeyInfo (a PKCS#12 shrouded key bag)."""
        return cls(
            algorithm=AlgorithmIdentifier.from_asn1(info["encryption_algorithm"]),
            data=info["encrypted_data"].native,
        )

    @classmethod
    def from_encrypted_content_info(
        cls, info: cms.EncryptedContentInfo
    ) -> "EncryptedEnvelope":
        """Wrap a CMS EncryptedContentInfo (an encrypted PKCS#12 SafeContents)."""
        content = info["encrypted_content"].native
        if content is None:
            raise ParameterDecodeError("pkcs12: encrypted content is missing")
        return cls(
            algorithm=AlgorithmIdentifier.from_asn1(info["content_encryption_algorithm"]),
            data=content,
        )

    def to_encrypted_private_key_info(self) -> keys.EncryptedPrivateKeyInfo:
        """Convert to a PKCS#8 EncryptedPrivateKeyInfo."""
        return keys.EncryptedPrivateKeyInfo({
            "encryption_algorithm": self.algorithm.to_asn1(),
            "encrypted_data": self.data,
        })
