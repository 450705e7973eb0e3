"""Tests for secure memory handling utilities."""

import pytest

from pkcs12_pbe.secure_memory import (
    constant_time_compare,
    consume_secret,
    secure_random_bytes,
    secure_zero,
    wiped,
)


class TestSecureZero:
    """Tests for secure_zero function."""

    def test_zeros_bytearray(self):
        """Should zero out a bytearray."""
        data = bytearray(b"secret key material")
        original_len = len(data)

        secure_zero(data)

        assert len(data) == original_len
        assert all(b == 0 for b in data)

    def test_handles_empty_bytearray(self):
        """Should handle empty bytearray without error."""
        data = bytearray()
        secure_zero(data)
        assert len(data) == 0

    def test_rejects_bytes_type(self):
        """Should reject immutable bytes type."""
        with pytest.raises(TypeError, match="requires a bytearray"):
            secure_zero(b"immutable bytes")

    def test_rejects_string(self):
        """Should reject string type."""
        with pytest.raises(TypeError, match="requires a bytearray"):
            secure_zero("string data")

    def test_zeros_all_byte_values(self):
        """Should correctly zero all possible byte values."""
        data = bytearray(range(256))
        secure_zero(data)
        assert all(b == 0 for b in data)


class TestConsumeSecret:
    """Tests for the consume_secret context manager."""

    def test_yields_same_bytearray(self):
        """A bytearray is handed through without copying."""
        secret = bytearray(b"password")
        with consume_secret(secret) as owned:
            assert owned is secret
            assert owned == b"password"

    def test_zeros_bytearray_on_exit(self):
        secret = bytearray(b"password")
        with consume_secret(secret):
            pass
        assert secret == bytearray(8)

    def test_zeros_bytearray_on_exception(self):
        """Should zero the secret even when the block raises."""
        secret = bytearray(b"password")
        with pytest.raises(RuntimeError):
            with consume_secret(secret):
                raise RuntimeError("boom")
        assert secret == bytearray(8)

    def test_copies_bytes(self):
        """Immutable bytes are copied and the copy is wiped."""
        secret = b"password"
        with consume_secret(secret) as owned:
            assert isinstance(owned, bytearray)
            assert owned == secret
        assert owned == bytearray(8)
        assert secret == b"password"

    def test_accepts_memoryview(self):
        with consume_secret(memoryview(b"abc")) as owned:
            assert owned == b"abc"

    def test_rejects_string(self):
        with pytest.raises(TypeError):
            with consume_secret("password"):
                pass

    def test_nested_consumption(self):
        """An inner consumer of the same buffer leaves it zeroed for the outer one."""
        secret = bytearray(b"password")
        with consume_secret(secret) as outer:
            with consume_secret(outer) as inner:
                assert inner is secret
            assert outer == bytearray(8)


class TestWiped:
    """Tests for the wiped context manager."""

    def test_zeros_all_buffers(self):
        key = bytearray(b"k" * 24)
        iv = bytearray(b"i" * 8)

        with wiped(key, iv) as buffers:
            assert buffers == (key, iv)
            assert key == b"k" * 24

        assert key == bytearray(24)
        assert iv == bytearray(8)

    def test_zeros_on_exception(self):
        key = bytearray(b"key material")
        with pytest.raises(ValueError):
            with wiped(key):
                raise ValueError("boom")
        assert all(b == 0 for b in key)

    def test_rejects_bytes(self):
        with pytest.raises(TypeError, match="requires a bytearray"):
            with wiped(b"immutable"):
                pass


class TestConstantTimeCompare:
    """Tests for constant_time_compare function."""

    def test_equal_values(self):
        """Should return True for equal values."""
        assert constant_time_compare(b"hello", b"hello") is True

    def test_unequal_values(self):
        """Should return False for unequal values."""
        assert constant_time_compare(b"hello", b"world") is False

    def test_different_lengths(self):
        """Should return False for different lengths."""
        assert constant_time_compare(b"short", b"longer string") is False

    def test_bytearray_against_bytes(self):
        """Padding checks compare a bytearray slice with bytes."""
        assert constant_time_compare(bytearray(b"\x04\x04\x04\x04"), b"\x04" * 4) is True


class TestSecureRandomBytes:
    """Tests for secure_random_bytes function."""

    def test_correct_length(self):
        """Should return requested number of bytes."""
        for length in [8, 16, 20]:
            assert len(secure_random_bytes(length)) == length

    def test_returns_bytes(self):
        assert isinstance(secure_random_bytes(8), bytes)

    def test_randomness(self):
        """Should return different values each time."""
        values = [secure_random_bytes(16) for _ in range(10)]
        assert len(set(values)) == 10
