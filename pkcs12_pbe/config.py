"""Library configuration."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pkcs12_pbe.algorithms import PBEScheme


class Settings(BaseSettings):
    """Settings loaded from PKCS12_PBE_* environment variables."""

    # Scheme used by encrypt_envelope when the caller does not pick one
    default_scheme: str = PBEScheme.SHA1_3DES_CBC.value

    # openssl and most PKCS#12 writers default to 2048 rounds
    default_iterations: int = 2048
    salt_length: int = 8

    # Ceiling for iteration counts read from untrusted parameters
    max_iterations: int = 10_000_000

    log_level: str = "WARNING"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="PKCS12_PBE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("default_scheme")
    @classmethod
    def _known_scheme(cls, value: str) -> str:
        known = [scheme.value for scheme in PBEScheme]
        if value not in known:
            raise ValueError(f"default_scheme must be one of {', '.join(known)}, got {value!r}")
        return value

    @field_validator("default_iterations", "salt_length", "max_iterations")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("log_level")
    @classmethod
    def _log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
