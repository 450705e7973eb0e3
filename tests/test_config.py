"""Tests for library configuration."""

import pytest
from pydantic import ValidationError

from pkcs12_pbe.algorithms import PBEScheme
from pkcs12_pbe.config import Settings, get_settings


class TestDefaults:
    def test_defaults(self):
        settings = Settings()

        assert settings.default_scheme == PBEScheme.SHA1_3DES_CBC.value
        assert settings.default_iterations == 2048
        assert settings.salt_length == 8
        assert settings.max_iterations == 10_000_000
        assert settings.log_level == "WARNING"
        assert settings.log_json is False

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestEnvironment:
    """Settings come from PKCS12_PBE_* variables."""

    def test_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("PKCS12_PBE_DEFAULT_SCHEME", PBEScheme.SHA1_RC2_40_CBC.value)
        monkeypatch.setenv("PKCS12_PBE_DEFAULT_ITERATIONS", "4096")
        monkeypatch.setenv("PKCS12_PBE_SALT_LENGTH", "20")
        monkeypatch.setenv("PKCS12_PBE_LOG_JSON", "true")

        settings = Settings()

        assert settings.default_scheme == PBEScheme.SHA1_RC2_40_CBC.value
        assert settings.default_iterations == 4096
        assert settings.salt_length == 20
        assert settings.log_json is True

    def test_unprefixed_variables_ignored(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_ITERATIONS", "7")
        assert Settings().default_iterations == 2048

    def test_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("pkcs12_pbe_max_iterations", "100")
        assert Settings().max_iterations == 100

    def test_cache_cleared_between_tests(self, monkeypatch):
        monkeypatch.setenv("PKCS12_PBE_SALT_LENGTH", "16")
        assert get_settings().salt_length == 16


class TestValidation:
    def test_unknown_scheme(self):
        with pytest.raises(ValidationError, match="default_scheme must be one of"):
            Settings(default_scheme="pbeWithMD5AndDES-CBC")

    @pytest.mark.parametrize("field", ["default_iterations", "salt_length", "max_iterations"])
    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_rejected(self, field, value):
        with pytest.raises(ValidationError, match="must be a positive integer"):
            Settings(**{field: value})

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError, match="unknown log level"):
            Settings(log_level="verbose")
