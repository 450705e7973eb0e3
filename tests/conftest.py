"""Test configuration and fixtures."""

import os
import pytest

# Keep the developer's environment out of the test settings
for _name in list(os.environ):
    if _name.startswith("PKCS12_PBE_"):
        del os.environ[_name]

from pkcs12_pbe.config import Settings, get_settings
from pkcs12_pbe.kdf import bmp_password
from pkcs12_pbe.pbe import PBEEngine


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Drop cached settings so monkeypatched environment variables apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    """Settings with small iteration counts for fast tests."""
    return Settings(default_iterations=16, salt_length=8)


@pytest.fixture
def engine(settings):
    """Create a PBE engine with test settings."""
    return PBEEngine(settings)


@pytest.fixture
def password():
    """Factory for fresh BMPString passwords (each call consumes one)."""
    def make(text: str = "sesame") -> bytearray:
        return bmp_password(text)
    return make


@pytest.fixture
def salt():
    """A fixed 8-byte salt."""
    return bytes.fromhex("ffeeddccbbaa9988")
